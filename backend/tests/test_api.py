"""
Tests for app-level routes, auth and error rendering
"""
from datetime import timedelta

import pytest

from insightdesk.api.deps import create_access_token
from insightdesk.core.errors import ExternalServiceError, StorageError, ValidationError
from insightdesk.database import Base, engine
from insightdesk.services import data_sources


class TestAppRoutes:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json() == "InsightDesk Analytics API"

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert "timestamp" in body


class TestAuth:
    """Bearer token handling on user-scoped routes"""

    def test_missing_token(self, client):
        assert client.get("/reports").status_code == 401

    def test_garbage_token(self, client):
        response = client.get("/reports", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_expired_token(self, client):
        token = create_access_token("user-123", expires_in=timedelta(seconds=-10))
        response = client.get("/reports", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_valid_token(self, client, auth_headers):
        response = client.get("/reports", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == []

    def test_users_see_only_their_rows(self, client, auth_headers, other_auth_headers):
        client.post("/reports", json={"type": "revenue_summary"}, headers=auth_headers)
        assert client.get("/reports", headers=other_auth_headers).json() == []


class TestErrorPayloads:
    """Error taxonomy maps to status codes and a uniform body"""

    def test_status_codes(self):
        assert ValidationError("x").status_code == 400
        assert StorageError("x").status_code == 500
        assert ExternalServiceError("x").status_code == 502

    def test_payload(self):
        assert StorageError("Failed to load reports").to_payload() == {
            "error": "storage_error",
            "message": "Failed to load reports",
        }

    def test_rendered_by_app(self, client, auth_headers):
        response = client.get("/reports", params={"status": "archived"}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json() == {
            "error": "validation_error",
            "message": "Status must be one of all, active, inactive",
        }

    def test_request_validation_outside_analyst_keeps_default_shape(self, client, auth_headers):
        response = client.post("/reports", json={}, headers=auth_headers)
        assert response.status_code == 422
        assert "detail" in response.json()


class TestStorageErrors:
    """Database failures surface as StorageError with a user-safe message"""

    def test_missing_tables(self, db_session):
        Base.metadata.drop_all(bind=engine)
        with pytest.raises(StorageError) as exc_info:
            data_sources.list_connected(db_session, "user-123")
        assert exc_info.value.message == "Failed to load data sources"
