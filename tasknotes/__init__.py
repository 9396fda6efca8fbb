"""Local data layer for the TaskNotes notes and checklist manager."""

__version__ = "1.0.0"
