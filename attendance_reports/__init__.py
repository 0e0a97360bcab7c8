"""Attendance aggregation and report-sheet service."""
