"""
IONOS Cloud API Client

Read-only client for the Cloud API v6: connectivity and authentication
checks, plus datacenter and managed Kubernetes resource walks.
"""

import logging
from typing import Any, Dict, List

import requests

from ..config import DEFAULT_API_URL, DEFAULT_DBAAS_URL, REQUEST_TIMEOUT, IonosSettings
from ..exceptions import APIError, ConfigurationError
from ..utils.concurrency import map_concurrently
from .dbaas import DBaaSMixin
from .models import (
    CheckResult, ClusterStatus, Datacenter, DatacenterStatus,
    K8sCluster, NodePool, Server, Volume, collection_items,
)

logger = logging.getLogger(__name__)

# Server states that count as an issue
BAD_SERVER_STATES = ("BUSY", "ERROR")


class IonosClient(DBaaSMixin):
    """
    IONOS Cloud API client.

    Uses bearer-token auth when a token is configured, HTTP Basic otherwise.

    Example:
        client = IonosClient.from_config(cfg.ionos)
        if client.check_authentication().ok:
            for status in client.check_datacenters():
                print(status.datacenter.name, status.issues)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        token: str = "",
        username: str = "",
        password: str = "",
        dbaas_url: str = DEFAULT_DBAAS_URL,
        timeout: int = REQUEST_TIMEOUT,
    ):
        """
        Initialize the client.

        Args:
            base_url: Cloud API base URL
            token: API token
            username: Basic auth username (ignored when token is set)
            password: Basic auth password (ignored when token is set)
            dbaas_url: Base URL of the managed database APIs
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.username = username
        self.password = password
        self.dbaas_url = dbaas_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_config(cls, settings: IonosSettings) -> "IonosClient":
        """
        Build a client from resolved settings.

        Raises:
            ConfigurationError: if neither a token nor username/password is set
        """
        if not settings.has_credentials:
            raise ConfigurationError(
                "IONOS credentials not found: set IONOS_TOKEN or IONOS_USERNAME/IONOS_PASSWORD"
            )

        kwargs: Dict[str, Any] = {}
        if settings.api_url:
            host = settings.api_url.rstrip("/")
            kwargs["base_url"] = f"{host}/cloudapi/v6"
            kwargs["dbaas_url"] = f"{host}/databases"

        if settings.token:
            return cls(token=settings.token, **kwargs)

        return cls(username=settings.username, password=settings.password, **kwargs)

    # =========================================================================
    # HTTP helpers
    # =========================================================================

    def _auth_kwargs(self) -> Dict[str, Any]:
        """requests keyword arguments carrying the configured credentials."""
        if self.token:
            return {"headers": {"Authorization": f"Bearer {self.token}"}}
        return {"auth": (self.username, self.password)}

    def _get(self, url: str) -> requests.Response:
        return requests.get(url, timeout=self.timeout, **self._auth_kwargs())

    def _get_items(self, path: str) -> List[Dict[str, Any]]:
        """
        GET a collection and return its items.

        Raises:
            APIError: on a non-200 status or an undecodable body
            requests.exceptions.RequestException: on transport failure
        """
        response = self._get(f"{self.base_url}{path}")

        if response.status_code != 200:
            raise APIError(
                f"API returned status {response.status_code}",
                status_code=response.status_code,
            )

        return collection_items(response)

    # =========================================================================
    # Checks
    # =========================================================================

    def check_connectivity(self) -> CheckResult:
        """Unauthenticated request to the API root; any HTTP response counts as reachable."""
        try:
            requests.get(self.base_url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.warning(f"IONOS API unreachable: {e}")
            return CheckResult(ok=False, message=f"API unreachable: {e}")

        return CheckResult(ok=True, message="IONOS API is reachable")

    def check_authentication(self) -> CheckResult:
        """Authenticated request to a lightweight listing endpoint."""
        try:
            response = self._get(f"{self.base_url}/datacenters?depth=0&limit=1")
        except requests.exceptions.RequestException as e:
            return CheckResult(ok=False, message=f"Request failed: {e}")

        status_code = response.status_code

        if status_code == 401:
            return CheckResult(ok=False, message="Authentication failed: invalid credentials")

        if status_code == 403:
            return CheckResult(ok=False, message="Authentication failed: insufficient permissions")

        if 200 <= status_code < 300:
            return CheckResult(ok=True, message="Authentication successful")

        return CheckResult(ok=False, message=f"Unexpected status code: {status_code}")

    # =========================================================================
    # Datacenters
    # =========================================================================

    def list_datacenters(self) -> List[Datacenter]:
        return [Datacenter.from_api(i) for i in self._get_items("/datacenters?depth=1")]

    def get_servers(self, datacenter_id: str) -> List[Server]:
        items = self._get_items(f"/datacenters/{datacenter_id}/servers?depth=1")
        return [Server.from_api(i) for i in items]

    def get_volumes(self, datacenter_id: str) -> List[Volume]:
        items = self._get_items(f"/datacenters/{datacenter_id}/volumes?depth=1")
        return [Volume.from_api(i) for i in items]

    def _check_datacenter(self, datacenter: Datacenter) -> DatacenterStatus:
        status = DatacenterStatus(datacenter=datacenter)

        try:
            status.servers = self.get_servers(datacenter.id)
        except (APIError, requests.exceptions.RequestException) as e:
            status.issues.append(f"Failed to get servers: {e}")
        else:
            for server in status.servers:
                if server.state in BAD_SERVER_STATES:
                    status.issues.append(f"Server {server.name} state: {server.state}")

        try:
            status.volumes = self.get_volumes(datacenter.id)
        except (APIError, requests.exceptions.RequestException) as e:
            status.issues.append(f"Failed to get volumes: {e}")
        else:
            for volume in status.volumes:
                if volume.state != "AVAILABLE":
                    status.issues.append(f"Volume {volume.name} state: {volume.state}")

        return status

    def check_datacenters(self) -> List[DatacenterStatus]:
        """
        Walk every datacenter and collect server/volume issues.

        Child fetch failures are recorded on the datacenter; only a failed
        datacenter listing raises.
        """
        datacenters = self.list_datacenters()
        logger.debug(f"Checking {len(datacenters)} datacenters")
        return map_concurrently(self._check_datacenter, datacenters)

    # =========================================================================
    # Managed Kubernetes
    # =========================================================================

    def list_k8s_clusters(self) -> List[K8sCluster]:
        return [K8sCluster.from_api(i) for i in self._get_items("/k8s?depth=1")]

    def get_node_pools(self, cluster_id: str) -> List[NodePool]:
        items = self._get_items(f"/k8s/{cluster_id}/nodepools?depth=1")
        return [NodePool.from_api(i) for i in items]

    def _check_cluster(self, cluster: K8sCluster) -> ClusterStatus:
        status = ClusterStatus(cluster=cluster)

        if cluster.state != "ACTIVE":
            status.issues.append(f"Cluster state: {cluster.state}")

        try:
            status.node_pools = self.get_node_pools(cluster.id)
        except (APIError, requests.exceptions.RequestException) as e:
            status.issues.append(f"Failed to get node pools: {e}")
        else:
            for pool in status.node_pools:
                if pool.state != "ACTIVE":
                    status.issues.append(f"Node pool {pool.name} state: {pool.state}")

        return status

    def check_k8s_clusters(self) -> List[ClusterStatus]:
        """Walk managed Kubernetes clusters and their node pools."""
        clusters = self.list_k8s_clusters()
        logger.debug(f"Checking {len(clusters)} managed Kubernetes clusters")
        return map_concurrently(self._check_cluster, clusters)
