"""
Kubernetes Health Data Models

Per-category results of a cluster health check. Problem lists hold
"namespace/name" identifiers (plain node names for nodes).

Note: healthy counters and problem lists are not guaranteed to sum to
the total. Pods in phases other than Pending/Failed count as running,
and PVCs that are neither Bound nor Pending appear in neither bucket.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List


@dataclass
class NodeResult:
    """
    Attributes:
        total: Number of nodes
        ready: Nodes with Ready=True
        not_ready: Names of nodes without Ready=True
        conditions: "<node> MemoryPressure|DiskPressure|PIDPressure" entries
    """
    total: int = 0
    ready: int = 0
    not_ready: List[str] = field(default_factory=list)
    conditions: List[str] = field(default_factory=list)

    @property
    def issue_count(self) -> int:
        return len(self.not_ready) + len(self.conditions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "ready": self.ready,
            "not_ready": list(self.not_ready),
            "conditions": list(self.conditions),
        }


@dataclass
class PodResult:
    total: int = 0
    running: int = 0
    crash_loop_back_off: List[str] = field(default_factory=list)
    image_pull_back_off: List[str] = field(default_factory=list)
    pending: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def issue_count(self) -> int:
        return (
            len(self.crash_loop_back_off)
            + len(self.image_pull_back_off)
            + len(self.pending)
            + len(self.failed)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "running": self.running,
            "crash_loop_back_off": list(self.crash_loop_back_off),
            "image_pull_back_off": list(self.image_pull_back_off),
            "pending": list(self.pending),
            "failed": list(self.failed),
        }


@dataclass
class DeploymentResult:
    total: int = 0
    available: int = 0
    unavailable: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "available": self.available,
            "unavailable": list(self.unavailable),
        }


@dataclass
class PVCResult:
    total: int = 0
    bound: int = 0
    pending: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"total": self.total, "bound": self.bound, "pending": list(self.pending)}


@dataclass
class ServiceResult:
    """LoadBalancer services only."""
    total: int = 0
    ready: int = 0
    no_ip: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"total": self.total, "ready": self.ready, "no_ip": list(self.no_ip)}


@dataclass
class EventResult:
    """Warning events seen in the last hour, as "<namespace>/<object>: <message>"."""
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"warnings": list(self.warnings)}


@dataclass
class CertInfo:
    """
    TLS certificate referenced by an Ingress.

    Attributes:
        host: First host of the TLS block (may be empty)
        namespace: Ingress namespace
        secret: TLS secret name
        expires_in: Whole days until expiry, truncated toward zero
        expiry: Certificate notAfter
    """
    host: str
    namespace: str
    secret: str
    expires_in: int
    expiry: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "namespace": self.namespace,
            "secret": self.secret,
            "expires_in": self.expires_in,
            "expiry": self.expiry.isoformat(),
        }


@dataclass
class CertResult:
    total: int = 0
    valid: int = 0
    expiring: List[CertInfo] = field(default_factory=list)
    expired: List[CertInfo] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "valid": self.valid,
            "expiring": [c.to_dict() for c in self.expiring],
            "expired": [c.to_dict() for c in self.expired],
        }


@dataclass
class HealthResult:
    """Aggregated cluster health."""
    nodes: NodeResult = field(default_factory=NodeResult)
    pods: PodResult = field(default_factory=PodResult)
    deployments: DeploymentResult = field(default_factory=DeploymentResult)
    pvcs: PVCResult = field(default_factory=PVCResult)
    services: ServiceResult = field(default_factory=ServiceResult)
    events: EventResult = field(default_factory=EventResult)
    certs: CertResult = field(default_factory=CertResult)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "nodes": self.nodes.to_dict(),
            "pods": self.pods.to_dict(),
            "deployments": self.deployments.to_dict(),
            "pvcs": self.pvcs.to_dict(),
            "services": self.services.to_dict(),
            "events": self.events.to_dict(),
            "certs": self.certs.to_dict(),
        }
