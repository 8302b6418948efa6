"""
IONOS Managed Databases (DBaaS)

The four database products share one walk: list the engine's clusters or
instances and flag entities that are neither AVAILABLE nor ACTIVE. Engines
differ only in their URL, collection name and property names, which are
described by DatabaseEngine.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import requests

from ..exceptions import APIError
from ..utils.concurrency import map_concurrently
from .models import DatabaseCluster, DBaaSStatus, collection_items

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DatabaseEngine:
    """
    Static description of one managed database product.

    Attributes:
        key: Identifier used in reports (postgresql, mariadb, ...)
        label: Display name
        path: URL path below the DBaaS base URL
        collection: Listing endpoint (clusters or instances)
        kind: Singular entity noun used in messages
        version_field: Property holding the engine version
        size_field: Property holding the instance or replica count
    """
    key: str
    label: str
    path: str
    collection: str
    kind: str
    version_field: str
    size_field: str

    def url(self, base_url: str) -> str:
        return f"{base_url}/{self.path}/{self.collection}"

    def parse(self, item: Dict[str, Any]) -> DatabaseCluster:
        props = item.get("properties") or {}
        return DatabaseCluster(
            id=item.get("id", ""),
            display_name=props.get("displayName", ""),
            version=props.get(self.version_field, ""),
            location=props.get("location", ""),
            size=props.get(self.size_field) or 0,
            state=(item.get("metadata") or {}).get("state", ""),
            edition=props.get("edition", ""),
        )


POSTGRESQL = DatabaseEngine(
    key="postgresql",
    label="PostgreSQL",
    path="postgresql",
    collection="clusters",
    kind="cluster",
    version_field="postgresVersion",
    size_field="instances",
)

MARIADB = DatabaseEngine(
    key="mariadb",
    label="MariaDB",
    path="mariadb",
    collection="clusters",
    kind="cluster",
    version_field="mariadbVersion",
    size_field="instances",
)

MONGODB = DatabaseEngine(
    key="mongodb",
    label="MongoDB",
    path="mongodb",
    collection="clusters",
    kind="cluster",
    version_field="mongoDBVersion",
    size_field="instances",
)

IN_MEMORY_DB = DatabaseEngine(
    key="in_memory_db",
    label="In-Memory DB",
    path="in-memory-db",
    collection="instances",
    kind="instance",
    version_field="version",
    size_field="replicas",
)

DATABASE_ENGINES = (POSTGRESQL, MONGODB, MARIADB, IN_MEMORY_DB)


class DBaaSMixin:
    """
    Managed database checks for IonosClient.

    Expects the host class to provide `dbaas_url` and `_get(url)`.
    """

    dbaas_url: str

    def list_databases(self, engine: DatabaseEngine) -> List[DatabaseCluster]:
        """
        List one engine's clusters or instances.

        A 404 means the product is not provisioned and yields an empty list.

        Raises:
            APIError: on any other non-200 status or an undecodable body
        """
        response = self._get(engine.url(self.dbaas_url))

        if response.status_code == 404:
            logger.debug(f"{engine.label} not provisioned (404)")
            return []

        if response.status_code != 200:
            raise APIError(
                f"API returned status {response.status_code}",
                status_code=response.status_code,
            )

        return [engine.parse(i) for i in collection_items(response)]

    def _check_engine(
        self, engine: DatabaseEngine
    ) -> Tuple[Optional[List[DatabaseCluster]], List[str]]:
        try:
            clusters = self.list_databases(engine)
        except (APIError, requests.exceptions.RequestException) as e:
            logger.warning(f"Failed to list {engine.label} {engine.kind}s: {e}")
            return None, [f"Failed to get {engine.label} {engine.kind}s: {e}"]

        issues = [
            f"{engine.label} {engine.kind} {c.display_name} state: {c.state}"
            for c in clusters
            if not c.healthy
        ]
        return clusters, issues

    def check_dbaas(self, engines=DATABASE_ENGINES) -> DBaaSStatus:
        """
        Query every database engine concurrently.

        A failing engine contributes one issue and never affects the others.
        """
        status = DBaaSStatus()

        for engine, (clusters, issues) in zip(
            engines, map_concurrently(self._check_engine, list(engines))
        ):
            if clusters is not None:
                status.clusters[engine.key] = clusters
            status.issues.extend(issues)

        return status
