"""carelink - student-care record keeping and caregiver message analysis."""

__version__ = "0.1.0"
