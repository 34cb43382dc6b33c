"""
Pytest Configuration and Fixtures
Shared fixtures for all test modules.
"""
import sys
import pytest
from pathlib import Path

import bcrypt

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

ADMIN_PASSWORD = "recruit-more-members"
JWT_SECRET = "test-signing-secret-with-enough-length"


@pytest.fixture(scope="session", autouse=True)
def isolated_logging(tmp_path_factory):
    """Send tracker logs to a temporary directory for the whole session."""
    from hstl_tracker.core.logging import configure_logging
    configure_logging(log_dir=str(tmp_path_factory.mktemp("logs")), console=False)


@pytest.fixture(scope="session")
def config():
    """Load and return the tracker configuration."""
    from hstl_tracker.config import config
    return config


@pytest.fixture(scope="session")
def password_hash():
    """bcrypt hash of ADMIN_PASSWORD, cheap cost factor for tests."""
    return bcrypt.hashpw(ADMIN_PASSWORD.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode("utf-8")


@pytest.fixture
def auth_config(password_hash):
    from hstl_tracker.config import AuthConfig
    return AuthConfig(
        token_ttl_seconds=3600,
        admin_password_hash=password_hash,
        jwt_secret=JWT_SECRET,
    )


@pytest.fixture
def issuer(auth_config):
    from hstl_tracker.security.session_issuer import SessionIssuer
    return SessionIssuer(auth_config)


@pytest.fixture
def guard(auth_config):
    from hstl_tracker.security.access_guard import AccessGuard
    return AccessGuard(auth_config)


@pytest.fixture
def store(tmp_path):
    """An uninitialized store backed by a temporary database."""
    from hstl_tracker.store.recruitment_store import RecruitmentStore
    return RecruitmentStore(db_path=tmp_path / "tracker.db", collection="recruitments")


@pytest.fixture
def app(store, issuer, guard):
    """Tracker app wired to the temporary store and test credentials."""
    from hstl_tracker.app import create_app
    from hstl_tracker.security.access_guard import get_access_guard
    from hstl_tracker.security.session_issuer import get_session_issuer

    application = create_app(store=store, setup_logging=False)
    application.dependency_overrides[get_session_issuer] = lambda: issuer
    application.dependency_overrides[get_access_guard] = lambda: guard
    return application


@pytest.fixture
def client(app):
    """TestClient with the app lifespan (store initialization) running."""
    from fastapi.testclient import TestClient
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def token(issuer):
    return issuer.issue_token()


@pytest.fixture
def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}
