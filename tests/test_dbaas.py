"""
Tests for managed database checks
"""

import pytest
from unittest.mock import Mock, patch

import requests

from ionos_watchdog.exceptions import APIError
from ionos_watchdog.ionos import DATABASE_ENGINES, IonosClient
from ionos_watchdog.ionos.dbaas import IN_MEMORY_DB, MARIADB, MONGODB, POSTGRESQL


DBAAS = "https://api.ionos.com/databases"


def _response(status_code=200, items=None):
    response = Mock(status_code=status_code)
    response.json.return_value = {"items": items or []}
    return response


def _cluster(cluster_id, name, state="AVAILABLE", **properties):
    properties.setdefault("displayName", name)
    properties.setdefault("location", "de/fra")
    return {"id": cluster_id, "properties": properties, "metadata": {"state": state}}


class TestDatabaseEngine:
    """Tests for engine descriptions."""

    def test_urls(self):
        assert POSTGRESQL.url(DBAAS) == f"{DBAAS}/postgresql/clusters"
        assert MONGODB.url(DBAAS) == f"{DBAAS}/mongodb/clusters"
        assert MARIADB.url(DBAAS) == f"{DBAAS}/mariadb/clusters"
        assert IN_MEMORY_DB.url(DBAAS) == f"{DBAAS}/in-memory-db/instances"

    def test_all_engines_registered(self):
        assert {e.key for e in DATABASE_ENGINES} == {
            "postgresql", "mongodb", "mariadb", "in_memory_db",
        }

    def test_parse_postgres(self):
        item = _cluster("pg1", "orders", postgresVersion="15", instances=2)

        db = POSTGRESQL.parse(item)

        assert db.display_name == "orders"
        assert db.version == "15"
        assert db.size == 2
        assert db.state == "AVAILABLE"
        assert db.healthy is True

    def test_parse_in_memory_uses_replicas(self):
        item = _cluster("r1", "cache", state="ACTIVE", version="7.2", replicas=3)

        db = IN_MEMORY_DB.parse(item)

        assert db.version == "7.2"
        assert db.size == 3
        assert db.healthy is True

    def test_parse_mongodb_edition(self):
        item = _cluster("m1", "events", mongoDBVersion="6.0", instances=3, edition="business")

        data = MONGODB.parse(item).to_dict()

        assert data["edition"] == "business"
        assert data["version"] == "6.0"


class TestListDatabases:
    """Tests for listing one engine."""

    @patch("ionos_watchdog.ionos.client.requests.get")
    def test_not_provisioned_is_empty(self, mock_get):
        mock_get.return_value = _response(404)

        assert IonosClient(token="tok").list_databases(POSTGRESQL) == []

    @patch("ionos_watchdog.ionos.client.requests.get")
    def test_server_error_raises(self, mock_get):
        mock_get.return_value = _response(500)

        with pytest.raises(APIError, match="API returned status 500"):
            IonosClient(token="tok").list_databases(MARIADB)

    @patch("ionos_watchdog.ionos.client.requests.get")
    def test_uses_credentials(self, mock_get):
        mock_get.return_value = _response(items=[_cluster("pg1", "orders")])

        clusters = IonosClient(username="u", password="p").list_databases(POSTGRESQL)

        assert len(clusters) == 1
        assert mock_get.call_args.args[0] == f"{DBAAS}/postgresql/clusters"
        assert mock_get.call_args.kwargs["auth"] == ("u", "p")


class TestCheckDBaaS:
    """Tests for the combined managed database walk."""

    @patch("ionos_watchdog.ionos.client.requests.get")
    def test_mixed_engines(self, mock_get):
        responses = {
            f"{DBAAS}/postgresql/clusters": _response(items=[
                _cluster("pg1", "orders"),
                _cluster("pg2", "reports", state="BUSY"),
            ]),
            f"{DBAAS}/mongodb/clusters": _response(404),
            f"{DBAAS}/mariadb/clusters": _response(503),
            f"{DBAAS}/in-memory-db/instances": _response(items=[
                _cluster("r1", "cache", state="FAILED"),
            ]),
        }
        mock_get.side_effect = lambda url, **kwargs: responses[url]

        status = IonosClient(token="tok").check_dbaas()

        assert len(status.clusters["postgresql"]) == 2
        assert status.clusters["mongodb"] == []
        assert "mariadb" not in status.clusters
        assert status.total == 3

        assert len(status.issues) == 3
        assert "PostgreSQL cluster reports state: BUSY" in status.issues
        assert "In-Memory DB instance cache state: FAILED" in status.issues
        assert "Failed to get MariaDB clusters: API returned status 503" in status.issues

    @patch("ionos_watchdog.ionos.client.requests.get")
    def test_transport_failure_is_isolated(self, mock_get):
        def fake_get(url, **kwargs):
            if "mongodb" in url:
                raise requests.exceptions.ConnectionError("reset by peer")
            return _response(items=[_cluster("x", "db")])

        mock_get.side_effect = fake_get

        status = IonosClient(token="tok").check_dbaas()

        assert len(status.issues) == 1
        assert status.issues[0].startswith("Failed to get MongoDB clusters:")
        assert status.total == 3

    @patch("ionos_watchdog.ionos.client.requests.get")
    def test_nothing_provisioned(self, mock_get):
        mock_get.return_value = _response(404)

        status = IonosClient(token="tok").check_dbaas()

        assert status.total == 0
        assert status.issues == []

    @patch("ionos_watchdog.ionos.client.requests.get")
    def test_non_object_body_affects_one_engine(self, mock_get):
        def fake_get(url, **kwargs):
            if "postgresql" in url:
                response = Mock(status_code=200)
                response.json.return_value = [{"id": "x"}]
                return response
            return _response(items=[_cluster("x", "db")])

        mock_get.side_effect = fake_get

        status = IonosClient(token="tok").check_dbaas()

        assert status.issues == [
            "Failed to get PostgreSQL clusters: invalid JSON response: expected an object",
        ]
        assert "postgresql" not in status.clusters
        assert status.total == 3
