import pytest

from app import create_app


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "RATELIMIT_ENABLED": False,
        "OPENAI_API_KEY": "test-key",
    })
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def design_request():
    return {
        "formData": {"companySize": 40, "budget": 20000, "officeUsers": 30, "remoteUsers": 5},
        "departments": [{"name": "Sales", "users": 2, "servers": 1, "printers": 1}],
        "networkType": "both",
        "redundancy": False,
        "securityLevel": 2,
    }
