"""
IONOS Cloud Module

Read-only probes against the IONOS Cloud API and managed database APIs.
"""

from .client import IonosClient
from .dbaas import DATABASE_ENGINES, DatabaseEngine
from .models import (
    CheckResult,
    ClusterStatus,
    DatabaseCluster,
    Datacenter,
    DatacenterStatus,
    DBaaSStatus,
    K8sCluster,
    NodePool,
    Server,
    Volume,
)

__all__ = [
    "IonosClient",
    "DATABASE_ENGINES",
    "DatabaseEngine",
    "CheckResult",
    "ClusterStatus",
    "DatabaseCluster",
    "Datacenter",
    "DatacenterStatus",
    "DBaaSStatus",
    "K8sCluster",
    "NodePool",
    "Server",
    "Volume",
]
