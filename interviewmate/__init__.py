"""InterviewMate - live interview capture with AI answer suggestions."""

__version__ = "0.1.0"
