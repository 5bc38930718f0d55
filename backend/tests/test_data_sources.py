"""
Tests for the data source registry: catalog, connect/disconnect toggling and
the refresh -> syncing -> connected lifecycle.
"""
import uuid

import pytest

from insightdesk.core.errors import ValidationError
from insightdesk.models.data_source import DataSource, DataSourceStatus
from insightdesk.services import data_sources
from insightdesk.services import scheduler as jobs
from insightdesk.services.scheduler import scheduler

from conftest import OTHER_USER_ID, USER_ID


class TestCatalog:
    """Static catalog of available integrations"""

    def test_twelve_integrations(self):
        assert len(data_sources.list_available()) == 12

    def test_search_matches_name_or_type(self):
        assert [s["type"] for s in data_sources.list_available(search="google")] == [
            "google_analytics"
        ]
        assert [s["type"] for s in data_sources.list_available(search="_ads")] == [
            "facebook_ads"
        ]

    def test_category_filter(self):
        social = data_sources.list_available(category="Social Media")
        assert {s["type"] for s in social} == {"instagram", "linkedin", "twitter"}
        assert len(data_sources.list_available(category="all")) == 12


class TestToggleConnection:
    """Connect, disconnect and reconnect keep one row per (user, type)"""

    def test_first_toggle_creates_connected_row(self, db_session):
        source = data_sources.toggle_connection(db_session, USER_ID, "stripe")
        assert source.status == DataSourceStatus.CONNECTED
        assert source.name == "Stripe"
        assert source.lastSync is not None
        assert source.config == {}

    def test_toggle_cycle_reuses_row(self, db_session):
        first = data_sources.toggle_connection(db_session, USER_ID, "stripe")
        second = data_sources.toggle_connection(db_session, USER_ID, "stripe")
        assert second.id == first.id
        assert second.status == DataSourceStatus.DISCONNECTED
        assert second.lastSync is None

        third = data_sources.toggle_connection(db_session, USER_ID, "stripe")
        assert third.id == first.id
        assert third.status == DataSourceStatus.CONNECTED
        assert third.lastSync is not None

        rows = db_session.query(DataSource).filter(DataSource.userId == USER_ID).all()
        assert len(rows) == 1

    def test_error_status_reconnects(self, db_session):
        source = data_sources.toggle_connection(db_session, USER_ID, "shopify")
        source.status = DataSourceStatus.ERROR
        db_session.commit()
        again = data_sources.toggle_connection(db_session, USER_ID, "shopify")
        assert again.status == DataSourceStatus.CONNECTED

    def test_unknown_type(self, db_session):
        with pytest.raises(ValidationError):
            data_sources.toggle_connection(db_session, USER_ID, "myspace")

    def test_users_are_isolated(self, db_session):
        data_sources.toggle_connection(db_session, USER_ID, "stripe")
        assert data_sources.list_connected(db_session, OTHER_USER_ID) == []
        assert len(data_sources.list_connected(db_session, USER_ID)) == 1


class TestRefresh:
    """Refresh marks the source syncing and schedules completion"""

    def test_refresh_then_complete(self, db_session):
        source = data_sources.toggle_connection(db_session, USER_ID, "stripe")
        refreshed = data_sources.refresh(db_session, source.id, user_id=USER_ID, delay_seconds=60)
        assert refreshed.status == DataSourceStatus.SYNCING
        assert scheduler.get_job(jobs.sync_job_id(source.id)) is not None

        done = data_sources.complete_sync(db_session, source.id)
        assert done.status == DataSourceStatus.CONNECTED
        assert done.lastSync is not None

    def test_pending_job_completes_sync(self, db_session):
        source = data_sources.toggle_connection(db_session, USER_ID, "stripe")
        data_sources.refresh(db_session, source.id, delay_seconds=60)

        job = scheduler.get_job(jobs.sync_job_id(source.id))
        job.func(*job.args)

        db_session.expire_all()
        assert data_sources.get_one(db_session, source.id).status == DataSourceStatus.CONNECTED

    def test_second_refresh_keeps_single_job(self, db_session):
        source = data_sources.toggle_connection(db_session, USER_ID, "stripe")
        data_sources.refresh(db_session, source.id, delay_seconds=60)
        data_sources.refresh(db_session, source.id, delay_seconds=60)
        ids = [j.id for j in scheduler.get_jobs()]
        assert ids.count(jobs.sync_job_id(source.id)) == 1

    def test_toggle_while_syncing_reconnects_then_disconnect_cancels(self, db_session):
        source = data_sources.toggle_connection(db_session, USER_ID, "stripe")
        data_sources.refresh(db_session, source.id, delay_seconds=60)

        reconnected = data_sources.toggle_connection(db_session, USER_ID, "stripe")
        assert reconnected.status == DataSourceStatus.CONNECTED
        assert reconnected.lastSync is not None

        disconnected = data_sources.toggle_connection(db_session, USER_ID, "stripe")
        assert disconnected.status == DataSourceStatus.DISCONNECTED
        assert scheduler.get_job(jobs.sync_job_id(source.id)) is None

    def test_completion_leaves_non_syncing_source_alone(self, db_session):
        source = data_sources.toggle_connection(db_session, USER_ID, "stripe")
        data_sources.toggle_connection(db_session, USER_ID, "stripe")
        result = data_sources.complete_sync(db_session, source.id)
        assert result.status == DataSourceStatus.DISCONNECTED

    def test_refresh_unknown_source(self, db_session):
        assert data_sources.refresh(db_session, uuid.uuid4(), delay_seconds=60) is None


class TestStats:
    def test_counts_by_status(self, db_session):
        stripe = data_sources.toggle_connection(db_session, USER_ID, "stripe")
        data_sources.toggle_connection(db_session, USER_ID, "shopify")
        data_sources.toggle_connection(db_session, USER_ID, "hubspot")
        data_sources.toggle_connection(db_session, USER_ID, "hubspot")
        data_sources.refresh(db_session, stripe.id, delay_seconds=60)

        assert data_sources.get_stats(db_session, USER_ID) == {
            "total": 3,
            "connected": 1,
            "syncing": 1,
            "error": 0,
        }

    def test_status_filter(self, db_session):
        data_sources.toggle_connection(db_session, USER_ID, "stripe")
        data_sources.toggle_connection(db_session, USER_ID, "hubspot")
        data_sources.toggle_connection(db_session, USER_ID, "hubspot")
        connected = data_sources.list_connected(db_session, USER_ID, status="connected")
        assert [s.type for s in connected] == ["stripe"]
        with pytest.raises(ValidationError):
            data_sources.list_connected(db_session, USER_ID, status="broken")


class TestDataSourceEndpoints:
    """HTTP surface of the registry"""

    def test_requires_auth(self, client):
        assert client.get("/data-sources").status_code == 401

    def test_available_is_public(self, client):
        response = client.get("/data-sources/available", params={"category": "Payments"})
        assert response.status_code == 200
        assert {s["type"] for s in response.json()} == {"stripe", "paypal"}

    def test_toggle_and_list(self, client, auth_headers):
        response = client.post("/data-sources/stripe/toggle", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "connected"

        listed = client.get("/data-sources", headers=auth_headers).json()
        assert [s["type"] for s in listed] == ["stripe"]

    def test_unknown_type_is_400(self, client, auth_headers):
        response = client.post("/data-sources/myspace/toggle", headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_refresh(self, client, auth_headers):
        source = client.post("/data-sources/stripe/toggle", headers=auth_headers).json()
        response = client.post(f"/data-sources/{source['id']}/refresh", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "syncing"
        assert scheduler.get_job(jobs.sync_job_id(source["id"])) is not None

    def test_refresh_other_users_source_is_404(self, client, auth_headers, other_auth_headers):
        source = client.post("/data-sources/stripe/toggle", headers=auth_headers).json()
        response = client.post(
            f"/data-sources/{source['id']}/refresh", headers=other_auth_headers
        )
        assert response.status_code == 404

    def test_stats(self, client, auth_headers):
        client.post("/data-sources/stripe/toggle", headers=auth_headers)
        response = client.get("/data-sources/stats", headers=auth_headers)
        assert response.json() == {"total": 1, "connected": 1, "syncing": 0, "error": 0}
