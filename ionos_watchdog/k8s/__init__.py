"""
Kubernetes Health Module

Classifies nodes, workloads, storage, load balancers, events and
Ingress certificates of a Kubernetes cluster.
"""

from .checker import KubernetesHealthChecker, classify_expiry
from .models import (
    CertInfo,
    CertResult,
    DeploymentResult,
    EventResult,
    HealthResult,
    NodeResult,
    PodResult,
    PVCResult,
    ServiceResult,
)

__all__ = [
    "KubernetesHealthChecker",
    "classify_expiry",
    "CertInfo",
    "CertResult",
    "DeploymentResult",
    "EventResult",
    "HealthResult",
    "NodeResult",
    "PodResult",
    "PVCResult",
    "ServiceResult",
]
