"""Course completion certificates."""
