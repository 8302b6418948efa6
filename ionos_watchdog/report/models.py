"""
Report Data Model
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from ..feed.models import StatusResult
from ..ionos.models import CheckResult, ClusterStatus, DatacenterStatus, DBaaSStatus
from ..k8s.models import HealthResult
from ..models import Status


@dataclass(frozen=True)
class Report:
    """
    Result of one aggregation cycle.

    Sections are None when their prober did not run or failed before
    producing them.

    Attributes:
        status: Severity derived from the number of issues
        status_page: Status feed classification
        api_check: IONOS API connectivity
        auth_check: IONOS API authentication
        datacenters: Datacenter walk
        clusters: Managed Kubernetes walk
        dbaas: Managed database walk
        health: Kubernetes cluster health
        issues: Flat issue list (order not significant)
        duration_ms: Wall time of the cycle
    """
    status: Status = Status.OK
    status_page: Optional[StatusResult] = None
    api_check: Optional[CheckResult] = None
    auth_check: Optional[CheckResult] = None
    datacenters: Optional[Tuple[DatacenterStatus, ...]] = None
    clusters: Optional[Tuple[ClusterStatus, ...]] = None
    dbaas: Optional[DBaaSStatus] = None
    health: Optional[HealthResult] = None
    issues: Tuple[str, ...] = field(default_factory=tuple)
    duration_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization, omitting absent sections."""
        data: Dict[str, Any] = {"status": self.status.value}

        if self.status_page is not None:
            data["status_page"] = self.status_page.to_dict()
        if self.api_check is not None:
            data["api_check"] = self.api_check.to_dict()
        if self.auth_check is not None:
            data["auth_check"] = self.auth_check.to_dict()
        if self.datacenters is not None:
            data["datacenters"] = [d.to_dict() for d in self.datacenters]
        if self.clusters is not None:
            data["clusters"] = [c.to_dict() for c in self.clusters]
        if self.dbaas is not None:
            data["dbaas"] = self.dbaas.to_dict()
        if self.health is not None:
            data["health"] = self.health.to_dict()

        data["issues"] = list(self.issues)
        return data
