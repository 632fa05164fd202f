"""Unit tests for EstiMate Pro web route modules.

Each route module has a corresponding test file.

Structure:
    tests/unit/web/
    ├── test_routes_auth.py          # Signup, login, password reset
    ├── test_routes_leads.py         # Lead list/detail/status
    ├── test_routes_quotes.py        # Quote seeding, recompute, PDF
    ├── test_routes_surveys.py       # Public survey
    └── ... (one per route module)

Testing pattern:
    - Use FastAPI's TestClient for route testing
    - Patch get_session and repository calls in the route module
    - Override require_builder/require_admin for the acting account
    - Test request/response validation and error handling
"""
