"""FastAPI web API for EstiMate Pro."""
