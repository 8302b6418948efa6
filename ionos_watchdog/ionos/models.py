"""
IONOS Cloud Data Models

Resources returned by the Cloud API and the per-entity status objects
built while walking them. API items have the shape
{"id": ..., "properties": {...}, "metadata": {"state": ...}}.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..exceptions import APIError


def _properties(item: Dict[str, Any]) -> Dict[str, Any]:
    return item.get("properties") or {}


def _state(item: Dict[str, Any]) -> str:
    return (item.get("metadata") or {}).get("state", "")


def collection_items(response) -> List[Dict[str, Any]]:
    """
    Decode a collection response body into its list of items.

    Raises:
        APIError: if the body is not JSON or not shaped like {"items": [{...}, ...]}
    """
    try:
        data = response.json()
    except ValueError as e:
        raise APIError(f"invalid JSON response: {e}") from e

    if data is None:
        return []
    if not isinstance(data, dict):
        raise APIError("invalid JSON response: expected an object")

    items = data.get("items") or []
    if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
        raise APIError("invalid JSON response: expected a list of objects in 'items'")

    return items


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a single binary check (connectivity, authentication)."""
    ok: bool
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"ok": self.ok, "message": self.message}


@dataclass
class Datacenter:
    id: str
    name: str
    location: str = ""

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "Datacenter":
        props = _properties(item)
        return cls(
            id=item.get("id", ""),
            name=props.get("name", ""),
            location=props.get("location", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "location": self.location}


@dataclass
class Server:
    id: str
    name: str
    cores: int = 0
    ram: int = 0
    vm_state: str = ""
    state: str = ""

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "Server":
        props = _properties(item)
        return cls(
            id=item.get("id", ""),
            name=props.get("name", ""),
            cores=props.get("cores") or 0,
            ram=props.get("ram") or 0,
            vm_state=props.get("vmState", ""),
            state=_state(item),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "cores": self.cores,
            "ram": self.ram,
            "vm_state": self.vm_state,
            "state": self.state,
        }


@dataclass
class Volume:
    id: str
    name: str
    size: float = 0.0
    type: str = ""
    state: str = ""

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "Volume":
        props = _properties(item)
        return cls(
            id=item.get("id", ""),
            name=props.get("name", ""),
            size=float(props.get("size") or 0),
            type=props.get("type", ""),
            state=_state(item),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "size": self.size,
            "type": self.type,
            "state": self.state,
        }


@dataclass
class K8sCluster:
    """Managed Kubernetes cluster."""
    id: str
    name: str
    k8s_version: str = ""
    state: str = ""

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "K8sCluster":
        props = _properties(item)
        return cls(
            id=item.get("id", ""),
            name=props.get("name", ""),
            k8s_version=props.get("k8sVersion", ""),
            state=_state(item),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "k8s_version": self.k8s_version,
            "state": self.state,
        }


@dataclass
class NodePool:
    id: str
    name: str
    node_count: int = 0
    k8s_version: str = ""
    availability_zone: str = ""
    state: str = ""

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "NodePool":
        props = _properties(item)
        return cls(
            id=item.get("id", ""),
            name=props.get("name", ""),
            node_count=props.get("nodeCount") or 0,
            k8s_version=props.get("k8sVersion", ""),
            availability_zone=props.get("availabilityZone", ""),
            state=_state(item),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "node_count": self.node_count,
            "k8s_version": self.k8s_version,
            "availability_zone": self.availability_zone,
            "state": self.state,
        }


@dataclass
class DatabaseCluster:
    """
    Managed database cluster or instance, normalised across engines.

    Attributes:
        display_name: User facing name
        version: Engine version (postgresVersion, mariadbVersion, ...)
        location: Region, e.g. de/fra
        size: Instance count, or replica count for in-memory instances
        state: Lifecycle state (AVAILABLE, BUSY, ...)
        edition: MongoDB edition, empty for other engines
    """
    id: str
    display_name: str
    version: str = ""
    location: str = ""
    size: int = 0
    state: str = ""
    edition: str = ""

    @property
    def healthy(self) -> bool:
        return self.state in ("AVAILABLE", "ACTIVE")

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "display_name": self.display_name,
            "version": self.version,
            "location": self.location,
            "size": self.size,
            "state": self.state,
        }
        if self.edition:
            data["edition"] = self.edition
        return data


@dataclass
class DatacenterStatus:
    """A datacenter with its servers, volumes and issues."""
    datacenter: Datacenter
    servers: List[Server] = field(default_factory=list)
    volumes: List[Volume] = field(default_factory=list)
    issues: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "datacenter": self.datacenter.to_dict(),
            "servers": [s.to_dict() for s in self.servers],
            "volumes": [v.to_dict() for v in self.volumes],
            "issues": list(self.issues),
        }


@dataclass
class ClusterStatus:
    """A managed Kubernetes cluster with its node pools and issues."""
    cluster: K8sCluster
    node_pools: List[NodePool] = field(default_factory=list)
    issues: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cluster": self.cluster.to_dict(),
            "node_pools": [np.to_dict() for np in self.node_pools],
            "issues": list(self.issues),
        }


@dataclass
class DBaaSStatus:
    """
    Managed database inventory.

    Attributes:
        clusters: Engine key -> clusters/instances of that engine
        issues: Unhealthy entities and per-engine listing failures
    """
    clusters: Dict[str, List[DatabaseCluster]] = field(default_factory=dict)
    issues: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(len(items) for items in self.clusters.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "clusters": {
                key: [c.to_dict() for c in items]
                for key, items in self.clusters.items()
            },
            "issues": list(self.issues),
        }
