from pathlib import Path
import os
import tempfile
import pytest

# Point the app at a throwaway SQLite file before `typerank` is imported.
_DB_DIR = Path(tempfile.mkdtemp(prefix="typerank-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR / 'test.db'}"
os.environ["JWT_SECRET"] = "test-secret-that-is-long-enough-for-hs256"
os.environ["ADMIN_EMAILS"] = "admin@example.com"

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-pass"


@pytest.fixture(autouse=True)
def clean_state():
    """Start every test with empty tables and a fresh auth rate limiter."""
    from typerank import main
    from typerank.database import clear_all_tables

    clear_all_tables()
    main._auth_rate_limiter.reset()
    yield


@pytest.fixture
def admin_headers():
    from fastapi.testclient import TestClient
    from typerank.main import app

    client = TestClient(app)
    client.post('/auth/signup', json={'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD})
    r = client.post('/auth/signin', json={'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD})
    assert r.status_code == 200
    return {'Authorization': f"Bearer {r.json()['access_token']}"}
