"""intakebrain: conversational hiring intake with structured requirements extraction."""

__version__ = "1.0.0"
