"""
Tests for the IONOS Cloud API client
"""

import pytest
from unittest.mock import Mock, patch

import requests

from ionos_watchdog.config import IonosSettings
from ionos_watchdog.exceptions import APIError, ConfigurationError
from ionos_watchdog.ionos import IonosClient


BASE = "https://api.ionos.com/cloudapi/v6"


def _response(status_code=200, payload=None):
    response = Mock(status_code=status_code)
    response.json.return_value = payload if payload is not None else {"items": []}
    return response


def _item(item_id, state="AVAILABLE", **properties):
    return {"id": item_id, "properties": properties, "metadata": {"state": state}}


def _router(routes):
    """Build a requests.get side effect that answers by URL."""
    def fake_get(url, **kwargs):
        if url in routes:
            result = routes[url]
            if isinstance(result, Exception):
                raise result
            return result
        return _response(404)
    return fake_get


class TestFromConfig:
    """Tests for building a client from settings."""

    def test_missing_credentials_raises(self):
        with pytest.raises(ConfigurationError, match="IONOS credentials not found"):
            IonosClient.from_config(IonosSettings())

    def test_username_without_password_raises(self):
        with pytest.raises(ConfigurationError):
            IonosClient.from_config(IonosSettings(username="user"))

    def test_token_takes_precedence(self):
        client = IonosClient.from_config(
            IonosSettings(token="tok", username="user", password="pw")
        )

        assert client._auth_kwargs() == {"headers": {"Authorization": "Bearer tok"}}

    def test_basic_auth(self):
        client = IonosClient.from_config(IonosSettings(username="user", password="pw"))

        assert client._auth_kwargs() == {"auth": ("user", "pw")}

    def test_default_urls(self):
        client = IonosClient.from_config(IonosSettings(token="tok"))

        assert client.base_url == BASE
        assert client.dbaas_url == "https://api.ionos.com/databases"

    def test_custom_api_url(self):
        client = IonosClient.from_config(
            IonosSettings(token="tok", api_url="https://api.example.com/")
        )

        assert client.base_url == "https://api.example.com/cloudapi/v6"
        assert client.dbaas_url == "https://api.example.com/databases"


class TestConnectivityAndAuth:
    """Tests for the binary API checks."""

    @patch("ionos_watchdog.ionos.client.requests.get")
    def test_reachable_on_any_status(self, mock_get):
        mock_get.return_value = _response(401)

        result = IonosClient(token="tok").check_connectivity()

        assert result.ok is True
        assert result.message == "IONOS API is reachable"
        # No credentials on the connectivity probe
        assert "headers" not in mock_get.call_args.kwargs

    @patch("ionos_watchdog.ionos.client.requests.get")
    def test_unreachable(self, mock_get):
        mock_get.side_effect = requests.exceptions.ConnectionError("no route to host")

        result = IonosClient(token="tok").check_connectivity()

        assert result.ok is False
        assert result.message.startswith("API unreachable:")

    @pytest.mark.parametrize("status_code,ok,message", [
        (200, True, "Authentication successful"),
        (204, True, "Authentication successful"),
        (401, False, "Authentication failed: invalid credentials"),
        (403, False, "Authentication failed: insufficient permissions"),
        (500, False, "Unexpected status code: 500"),
    ])
    @patch("ionos_watchdog.ionos.client.requests.get")
    def test_authentication(self, mock_get, status_code, ok, message):
        mock_get.return_value = _response(status_code)

        result = IonosClient(token="tok").check_authentication()

        assert result.ok is ok
        assert result.message == message
        url = mock_get.call_args.args[0]
        assert url == f"{BASE}/datacenters?depth=0&limit=1"
        assert mock_get.call_args.kwargs["headers"] == {"Authorization": "Bearer tok"}

    @patch("ionos_watchdog.ionos.client.requests.get")
    def test_authentication_transport_failure(self, mock_get):
        mock_get.side_effect = requests.exceptions.Timeout("timed out")

        result = IonosClient(token="tok").check_authentication()

        assert result.ok is False
        assert result.message.startswith("Request failed:")


class TestDatacenters:
    """Tests for the datacenter walk."""

    @patch("ionos_watchdog.ionos.client.requests.get")
    def test_healthy_datacenter(self, mock_get):
        mock_get.side_effect = _router({
            f"{BASE}/datacenters?depth=1": _response(payload={"items": [
                _item("dc1", name="prod", location="de/fra"),
            ]}),
            f"{BASE}/datacenters/dc1/servers?depth=1": _response(payload={"items": [
                _item("s1", name="web-1", cores=2, ram=4096, vmState="RUNNING"),
            ]}),
            f"{BASE}/datacenters/dc1/volumes?depth=1": _response(payload={"items": [
                _item("v1", name="disk-1", size=100, type="SSD"),
            ]}),
        })

        statuses = IonosClient(token="tok").check_datacenters()

        assert len(statuses) == 1
        status = statuses[0]
        assert status.datacenter.name == "prod"
        assert status.datacenter.location == "de/fra"
        assert status.servers[0].vm_state == "RUNNING"
        assert status.volumes[0].size == 100.0
        assert status.issues == []

    @patch("ionos_watchdog.ionos.client.requests.get")
    def test_busy_server_and_volume(self, mock_get):
        mock_get.side_effect = _router({
            f"{BASE}/datacenters?depth=1": _response(payload={"items": [
                _item("dc1", name="prod"),
            ]}),
            f"{BASE}/datacenters/dc1/servers?depth=1": _response(payload={"items": [
                _item("s1", state="BUSY", name="web-1"),
                _item("s2", state="AVAILABLE", name="web-2"),
            ]}),
            f"{BASE}/datacenters/dc1/volumes?depth=1": _response(payload={"items": [
                _item("v1", state="BUSY", name="disk-1"),
            ]}),
        })

        status = IonosClient(token="tok").check_datacenters()[0]

        assert len(status.issues) == 2
        assert "Server web-1 state: BUSY" in status.issues
        assert "Volume disk-1 state: BUSY" in status.issues

    @patch("ionos_watchdog.ionos.client.requests.get")
    def test_server_fetch_failure_is_recorded(self, mock_get):
        mock_get.side_effect = _router({
            f"{BASE}/datacenters?depth=1": _response(payload={"items": [
                _item("dc1", name="prod"),
            ]}),
            f"{BASE}/datacenters/dc1/servers?depth=1": _response(500),
            f"{BASE}/datacenters/dc1/volumes?depth=1": _response(),
        })

        status = IonosClient(token="tok").check_datacenters()[0]

        assert status.issues == ["Failed to get servers: API returned status 500"]

    @patch("ionos_watchdog.ionos.client.requests.get")
    def test_listing_failure_raises(self, mock_get):
        mock_get.return_value = _response(401)

        with pytest.raises(APIError, match="API returned status 401") as exc_info:
            IonosClient(token="tok").check_datacenters()

        assert exc_info.value.status_code == 401

    @patch("ionos_watchdog.ionos.client.requests.get")
    def test_no_datacenters(self, mock_get):
        mock_get.return_value = _response(payload={"items": []})

        assert IonosClient(token="tok").check_datacenters() == []


class TestK8sClusters:
    """Tests for the managed Kubernetes walk."""

    @patch("ionos_watchdog.ionos.client.requests.get")
    def test_cluster_and_node_pool_states(self, mock_get):
        mock_get.side_effect = _router({
            f"{BASE}/k8s?depth=1": _response(payload={"items": [
                _item("c1", state="ACTIVE", name="prod-k8s", k8sVersion="1.29.4"),
                _item("c2", state="DEPLOYING", name="staging-k8s", k8sVersion="1.30.0"),
            ]}),
            f"{BASE}/k8s/c1/nodepools?depth=1": _response(payload={"items": [
                _item("np1", state="ACTIVE", name="pool-a", nodeCount=3),
                _item("np2", state="UPDATING", name="pool-b", nodeCount=2),
            ]}),
            f"{BASE}/k8s/c2/nodepools?depth=1": requests.exceptions.ConnectionError("reset"),
        })

        statuses = IonosClient(token="tok").check_k8s_clusters()

        by_name = {s.cluster.name: s for s in statuses}
        assert by_name["prod-k8s"].cluster.k8s_version == "1.29.4"
        assert by_name["prod-k8s"].issues == ["Node pool pool-b state: UPDATING"]
        assert by_name["prod-k8s"].node_pools[0].node_count == 3

        staging = by_name["staging-k8s"].issues
        assert "Cluster state: DEPLOYING" in staging
        assert any(i.startswith("Failed to get node pools:") for i in staging)

    @patch("ionos_watchdog.ionos.client.requests.get")
    def test_invalid_json_raises(self, mock_get):
        response = _response()
        response.json.side_effect = ValueError("Expecting value")
        mock_get.return_value = response

        with pytest.raises(APIError, match="invalid JSON response"):
            IonosClient(token="tok").check_k8s_clusters()


class TestMalformedResponses:
    """Tests for 200 responses whose body has the wrong shape."""

    @patch("ionos_watchdog.ionos.client.requests.get")
    def test_non_object_server_list_stays_on_datacenter(self, mock_get):
        mock_get.side_effect = _router({
            f"{BASE}/datacenters?depth=1": _response(payload={"items": [
                _item("dc1", name="prod"),
            ]}),
            f"{BASE}/datacenters/dc1/servers?depth=1": _response(payload=["bogus"]),
            f"{BASE}/datacenters/dc1/volumes?depth=1": _response(payload={"items": [
                _item("v1", name="disk-1"),
            ]}),
        })

        status = IonosClient(token="tok").check_datacenters()[0]

        assert status.issues == [
            "Failed to get servers: invalid JSON response: expected an object",
        ]
        assert len(status.volumes) == 1

    @patch("ionos_watchdog.ionos.client.requests.get")
    def test_items_not_a_list(self, mock_get):
        mock_get.return_value = _response(payload={"items": "nope"})

        with pytest.raises(APIError, match="expected a list of objects"):
            IonosClient(token="tok").list_datacenters()

    @patch("ionos_watchdog.ionos.client.requests.get")
    def test_items_with_non_object_entries(self, mock_get):
        mock_get.return_value = _response(payload={"items": ["bogus"]})

        with pytest.raises(APIError, match="expected a list of objects"):
            IonosClient(token="tok").list_k8s_clusters()

    @patch("ionos_watchdog.ionos.client.requests.get")
    def test_null_body_is_empty(self, mock_get):
        response = _response()
        response.json.return_value = None
        mock_get.return_value = response

        assert IonosClient(token="tok").list_datacenters() == []
