from __future__ import annotations

from io import BytesIO

from fastapi.testclient import TestClient
from openpyxl import load_workbook
from sqlalchemy import text
from sqlalchemy.orm import Session

from attendance_reports.core.auth import ensure_user_principal


def _headers(email: str) -> dict[str, str]:
    return {"X-USER-EMAIL": email}


def _region_admin(db: Session) -> dict[str, str]:
    ensure_user_principal(
        db,
        email="region.admin@test.local",
        display_name="Region Admin",
        roles=["Region Admin"],
        state_id=1,
        region_id=5,
    )
    return _headers("region.admin@test.local")


def _district_admin(db: Session) -> dict[str, str]:
    ensure_user_principal(
        db,
        email="district.admin@test.local",
        display_name="District Admin",
        roles=["District Admin"],
        state_id=1,
        region_id=5,
        old_group_id=10,
        group_id=100,
        district_id=1001,
    )
    return _headers("district.admin@test.local")


def _state_admin(db: Session, state_id: int) -> dict[str, str]:
    email = f"state{state_id}.admin@test.local"
    ensure_user_principal(db, email=email, display_name="State Admin", roles=["State Admin"], state_id=state_id)
    return _headers(email)


def test_me_for_development_principal(client: TestClient, org_data: Session) -> None:
    response = client.get("/api/v1/me")

    assert response.status_code == 200
    payload = response.json()
    assert payload["email"] == "dev.user@local.test"
    assert payload["highest_role"] == "Viewer"
    assert all(payload["visibility"].values())


def test_me_reports_fixed_levels(client: TestClient, org_data: Session) -> None:
    response = client.get("/api/v1/me", headers=_region_admin(org_data))

    assert response.status_code == 200
    payload = response.json()
    assert payload["roles"] == ["Region Admin"]
    assert payload["assignment"]["region_id"] == 5
    assert payload["visibility"]["show_state"] is False
    assert payload["visibility"]["show_region"] is False
    assert payload["visibility"]["show_old_group"] is True


def test_unknown_user_is_rejected(client: TestClient, org_data: Session) -> None:
    response = client.get("/api/v1/me", headers=_headers("stranger@test.local"))

    assert response.status_code == 401


def test_region_report_preview_rolls_up_january(client: TestClient, org_data: Session) -> None:
    response = client.get("/api/v1/reports/region", params={"region_id": 5, "year": 2025, "month": "January"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["sheet_name"] == "Region Report"
    assert payload["rows"][0][0] == "Deeper Life Bible Church, Region Five (Region)"
    assert payload["rows"][1][0] == "January 2025"
    assert payload["rows"][7] == ["Old Group Ten", "January", 8, 6, 14, 1, 3, 4, 18, 3, 4, 7, 25]
    assert payload["rows"][8][0] == "SubTotal"
    assert len(payload["merges"]) == 9


def test_state_report_over_month_range(client: TestClient, org_data: Session) -> None:
    response = client.get(
        "/api/v1/reports/state",
        params={"state_id": 1, "year": 2025, "from_month": 2, "to_month": 1},
    )

    assert response.status_code == 200
    rows = response.json()["rows"]
    assert rows[1][0] == "January - February 2025"
    labels = [row[0] for row in rows[7:]]
    assert labels == ["Region Five", "Region Six", "SubTotal", "", "Region Five", "Region Six", "SubTotal", ""]
    assert rows[13][12] == 18


def test_missing_scope_is_a_validation_error(client: TestClient, org_data: Session) -> None:
    response = client.get("/api/v1/reports/region", params={"year": 2025})

    assert response.status_code == 422
    assert response.json()["detail"] == "Select a region before generating the report."


def test_group_report_without_records_aborts(client: TestClient, org_data: Session) -> None:
    response = client.get("/api/v1/reports/group", params={"group_id": 100, "year": 2030})

    assert response.status_code == 404
    assert "No attendance records" in response.json()["detail"]


def test_old_group_report_without_records_emits_zero_sheet(client: TestClient, org_data: Session) -> None:
    response = client.get(
        "/api/v1/reports/old-group",
        params={"old_group_id": 10, "year": 2030, "month": "January"},
    )

    assert response.status_code == 200
    rows = response.json()["rows"]
    assert rows[7][0] == "Group A"
    assert rows[7][2:] == [0] * 11


def test_region_admin_scope_is_fixed(client: TestClient, org_data: Session) -> None:
    headers = _region_admin(org_data)

    own = client.get("/api/v1/reports/region", params={"year": 2025, "month": "January"}, headers=headers)
    other = client.get("/api/v1/reports/region", params={"region_id": 6, "year": 2025}, headers=headers)

    assert own.status_code == 200
    assert own.json()["rows"][0][0].endswith("Region Five (Region)")
    assert other.status_code == 403


def test_district_admin_gets_own_district_weeks(client: TestClient, org_data: Session) -> None:
    response = client.get(
        "/api/v1/reports/district",
        params={"year": 2025, "month": "January"},
        headers=_district_admin(org_data),
    )

    assert response.status_code == 200
    rows = response.json()["rows"]
    assert rows[0][0] == "Deeper Life Bible Church, District Beta (District)"
    assert [row[0] for row in rows[7:12]] == [f"District Beta (Week {week})" for week in range(1, 6)]
    assert rows[8][2:4] == [3, 2]
    assert rows[12][0] == "SubTotal"
    assert rows[12][12] == 8


def test_unknown_report_kind(client: TestClient, org_data: Session) -> None:
    response = client.get("/api/v1/reports/payroll", params={"year": 2025})

    assert response.status_code == 404


def test_invalid_month_name(client: TestClient, org_data: Session) -> None:
    response = client.get("/api/v1/reports/state", params={"state_id": 1, "year": 2025, "month": "Smarch"})

    assert response.status_code == 422


def test_upstream_failure_is_reported_as_unavailable(client: TestClient, org_data: Session) -> None:
    org_data.execute(text("DROP TABLE attendance_records"))
    org_data.commit()

    response = client.get("/api/v1/reports/region", params={"region_id": 5, "year": 2025})

    assert response.status_code == 503
    assert response.json()["detail"] == "Could not load attendance records; please retry."


def test_attendance_summary(client: TestClient, org_data: Session) -> None:
    response = client.get("/api/v1/reports/summary", params={"region_id": 5, "year": 2025})

    assert response.status_code == 200
    stats = response.json()["stats"]
    assert stats["total_attendance"] == 43
    assert stats["record_count"] == 3
    assert stats["average_attendance"] == 14

    january = client.get(
        "/api/v1/reports/summary",
        params={"region_id": 5, "year": 2025, "from_month": 1, "to_month": 1},
    )
    assert january.json()["stats"]["total_attendance"] == 25


def test_state_export_downloads_workbook(client: TestClient, org_data: Session) -> None:
    response = client.get("/api/v1/exports/state", params={"state_id": 1, "year": 2025, "month": "January"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert 'filename="State Report Sheet File_' in response.headers["content-disposition"]

    sheet = load_workbook(BytesIO(response.content)).active
    assert sheet["A1"].value == "Deeper Life Bible Church, AKWA IBOM (State)"
    assert sheet["A8"].value == "Region Five"
    assert sheet["M8"].value == 25


def test_youth_export(client: TestClient, org_data: Session) -> None:
    response = client.get("/api/v1/exports/youth", params={"region_id": 5, "year": 2025, "month": "January"})

    assert response.status_code == 200
    assert 'filename="Youth Monthly Report_' in response.headers["content-disposition"]

    sheet = load_workbook(BytesIO(response.content)).active
    assert sheet["A1"].value == "DEEPER LIFE STUDENTS OUTREACH (DLSO) MONTHLY REPORT"
    assert sheet["A2"].value == "REGION: Region Five"
    assert sheet["A5"].value == "Group A"
    assert (sheet["B5"].value, sheet["C5"].value) == (9, 11)
    assert (sheet["D5"].value, sheet["E5"].value) == (5, 3)
    assert (sheet["F5"].value, sheet["G5"].value) == (12, 15)
    assert sheet["A6"].value == "Group B"


def test_youth_report_requires_single_month(client: TestClient, org_data: Session) -> None:
    response = client.get("/api/v1/reports/youth", params={"region_id": 5, "year": 2025, "from_month": 1, "to_month": 2})

    assert response.status_code == 422


def test_scope_options_by_state_value(client: TestClient, org_data: Session) -> None:
    by_name = client.get("/api/v1/scopes/regions", params={"state": "AKWA IBOM"})
    by_id = client.get("/api/v1/scopes/regions", params={"state": "1"})
    no_state = client.get("/api/v1/scopes/regions")

    assert [item["label"] for item in by_name.json()] == ["Region Five", "Region Six"]
    assert by_id.json() == by_name.json()
    assert [item["label"] for item in no_state.json()] == ["Port Region", "Region Five", "Region Six"]
    assert by_name.json()[0] == {"label": "Region Five", "value": "5"}


def test_scope_options_require_parent_below_state(client: TestClient, org_data: Session) -> None:
    assert client.get("/api/v1/scopes/old-groups").json() == []
    assert client.get("/api/v1/scopes/old-groups", params={"region": "Region Five"}).json() == [
        {"label": "Old Group Ten", "value": "10"}
    ]
    assert [item["label"] for item in client.get("/api/v1/scopes/districts", params={"group": "100"}).json()] == [
        "District Alpha",
        "District Beta",
    ]


def test_scope_options_respect_fixed_levels(client: TestClient, org_data: Session) -> None:
    response = client.get("/api/v1/scopes/regions", headers=_region_admin(org_data))

    assert [item["label"] for item in response.json()] == ["Region Five"]


def test_state_admin_cannot_report_outside_own_state(client: TestClient, org_data: Session) -> None:
    outsider = _state_admin(org_data, 2)
    params = {"year": 2025, "month": "January"}

    assert client.get("/api/v1/reports/region", params={**params, "region_id": 5}, headers=outsider).status_code == 403
    assert client.get("/api/v1/reports/group", params={**params, "group_id": 100}, headers=outsider).status_code == 403
    assert (
        client.get("/api/v1/exports/district", params={**params, "group_id": 100}, headers=outsider).status_code
        == 403
    )
    assert client.get("/api/v1/reports/youth", params={**params, "region_id": 5}, headers=outsider).status_code == 403

    own = client.get("/api/v1/reports/region", params={**params, "region_id": 5}, headers=_state_admin(org_data, 1))
    assert own.status_code == 200
    assert own.json()["rows"][7][12] == 25


def test_district_admin_group_report_covers_own_district(client: TestClient, org_data: Session) -> None:
    response = client.get(
        "/api/v1/reports/group",
        params={"group_id": 100, "year": 2025, "month": "January"},
        headers=_district_admin(org_data),
    )

    assert response.status_code == 200
    rows = response.json()["rows"]
    assert rows[7] == ["District Beta", "January", 3, 2, 5, 0, 1, 1, 6, 1, 1, 2, 8]
    assert rows[8][0] == "SubTotal"
    assert rows[8][12] == 8


def test_scope_options_keep_fixed_parent(client: TestClient, org_data: Session) -> None:
    headers = _state_admin(org_data, 1)

    other_state = client.get("/api/v1/scopes/regions", params={"state": "2"}, headers=headers)
    no_state = client.get("/api/v1/scopes/regions", headers=headers)
    by_name = client.get("/api/v1/scopes/regions", params={"state": "AKWA IBOM"}, headers=headers)

    assert other_state.status_code == 403
    assert [item["label"] for item in no_state.json()] == ["Region Five", "Region Six"]
    assert by_name.json() == no_state.json()


def test_scope_options_hide_units_outside_assignment(client: TestClient, org_data: Session) -> None:
    headers = _state_admin(org_data, 2)

    assert client.get("/api/v1/scopes/groups", params={"old_group": "10"}, headers=headers).json() == []
    assert client.get("/api/v1/scopes/districts", params={"group": "Group A"}, headers=headers).json() == []
    assert client.get("/api/v1/scopes/regions", headers=headers).json() == [{"label": "Port Region", "value": "7"}]
