"""EstiMate Pro - survey-driven bathroom renovation estimates and quotes."""

__version__ = "1.0.0"
