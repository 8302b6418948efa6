"""
Kubernetes Health Checker

Walks nodes, pods, deployments, PVCs, LoadBalancer services, warning
events and Ingress TLS certificates, and classifies each object into
healthy or problem buckets.

Any failed list call aborts the whole check with HealthCheckError.
Secret lookups in the certificate check are the only failures that
are skipped silently.
"""

import base64
import binascii
import logging
import os
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Set, Tuple

import urllib3
from cryptography import x509
from kubernetes import client, config
from kubernetes.client.rest import ApiException

from ..config import DEFAULT_KUBECONFIG, REQUEST_TIMEOUT
from ..exceptions import ConfigurationError, HealthCheckError
from ..utils.time import ensure_aware, utcnow
from .models import (
    CertInfo, CertResult, DeploymentResult, EventResult, HealthResult,
    NodeResult, PodResult, PVCResult, ServiceResult,
)

logger = logging.getLogger(__name__)

PRESSURE_CONDITIONS = ("MemoryPressure", "DiskPressure", "PIDPressure")
IMAGE_PULL_REASONS = ("ImagePullBackOff", "ErrImagePull")

# Warning events older than this are ignored
EVENT_WINDOW = timedelta(hours=1)

# Certificates expiring in fewer days are reported as expiring soon
CERT_EXPIRY_WARNING_DAYS = 30

TLS_CERT_KEY = "tls.crt"


def classify_expiry(days_until_expiry: int) -> str:
    """Return "expired", "expiring" or "valid" for a days-until-expiry value."""
    if days_until_expiry < 0:
        return "expired"
    if days_until_expiry < CERT_EXPIRY_WARNING_DAYS:
        return "expiring"
    return "valid"


def days_until(expiry: datetime, now: datetime) -> int:
    """Whole days from now until expiry, truncated toward zero."""
    return int((expiry - now).total_seconds() / 86400)


def decode_certificate_expiry(secret: Any) -> Optional[datetime]:
    """
    Extract the leaf certificate expiry from a kubernetes.io/tls secret.

    Returns None when the secret has no certificate or it cannot be parsed.
    """
    data = getattr(secret, "data", None) or {}
    encoded = data.get(TLS_CERT_KEY)
    if not encoded:
        return None

    try:
        pem = base64.b64decode(encoded)
        cert = x509.load_pem_x509_certificate(pem)
    except (binascii.Error, ValueError) as e:
        logger.debug(f"Skipping unparseable certificate: {e}")
        return None

    return cert.not_valid_after_utc


def _load_kube_config(kubeconfig_path: Optional[str]) -> None:
    """Load an explicit kubeconfig, the default one, or in-cluster config."""
    try:
        if kubeconfig_path:
            config.load_kube_config(config_file=kubeconfig_path)
        elif os.path.exists(DEFAULT_KUBECONFIG):
            config.load_kube_config(config_file=DEFAULT_KUBECONFIG)
        else:
            config.load_incluster_config()
    except (config.ConfigException, OSError) as e:
        raise ConfigurationError(f"failed to load kubeconfig: {e}") from e


class KubernetesHealthChecker:
    """
    Cluster health checker backed by the Kubernetes API.

    Example:
        checker = KubernetesHealthChecker(kubeconfig_path="~/.kube/config")
        health = checker.check_health(namespace="")

        print(f"{health.nodes.ready}/{health.nodes.total} nodes ready")
    """

    def __init__(
        self,
        kubeconfig_path: Optional[str] = None,
        core_v1=None,
        apps_v1=None,
        networking_v1=None,
        timeout: int = REQUEST_TIMEOUT,
    ):
        """
        Initialize the checker.

        Args:
            kubeconfig_path: Path to kubeconfig (default: ~/.kube/config, then in-cluster)
            core_v1: CoreV1Api instance (created if None)
            apps_v1: AppsV1Api instance (created if None)
            networking_v1: NetworkingV1Api instance (created if None)
            timeout: Per-call request timeout in seconds

        Raises:
            ConfigurationError: if no Kubernetes configuration can be loaded
        """
        if core_v1 is None or apps_v1 is None or networking_v1 is None:
            _load_kube_config(kubeconfig_path)

        self.core_v1 = core_v1 or client.CoreV1Api()
        self.apps_v1 = apps_v1 or client.AppsV1Api()
        self.networking_v1 = networking_v1 or client.NetworkingV1Api()
        self.timeout = timeout

    def _list(self, namespace: str, namespaced, all_namespaces, **kwargs):
        """Call the namespaced or cluster-wide variant of a list API."""
        kwargs["_request_timeout"] = self.timeout
        if namespace:
            return namespaced(namespace, **kwargs)
        return all_namespaces(**kwargs)

    def check_health(self, namespace: str = "", now: Optional[datetime] = None) -> HealthResult:
        """
        Run every category check.

        Args:
            namespace: Namespace to check ("" = all namespaces; nodes are cluster-wide)
            now: Reference time for event and certificate windows

        Raises:
            HealthCheckError: if any list call fails (API error or transport failure)
        """
        now = now or utcnow()
        checks = (
            ("nodes", lambda: self.check_nodes()),
            ("pods", lambda: self.check_pods(namespace)),
            ("deployments", lambda: self.check_deployments(namespace)),
            ("pvcs", lambda: self.check_pvcs(namespace)),
            ("services", lambda: self.check_services(namespace)),
            ("events", lambda: self.check_events(namespace, now)),
            ("certificates", lambda: self.check_certificates(namespace, now)),
        )

        results: Dict[str, Any] = {}
        for name, check in checks:
            try:
                results[name] = check()
            except ApiException as e:
                raise HealthCheckError(f"failed to check {name}: {e.status} {e.reason}") from e
            except (urllib3.exceptions.HTTPError, OSError) as e:
                raise HealthCheckError(f"failed to check {name}: {e}") from e

        return HealthResult(
            nodes=results["nodes"],
            pods=results["pods"],
            deployments=results["deployments"],
            pvcs=results["pvcs"],
            services=results["services"],
            events=results["events"],
            certs=results["certificates"],
        )

    def check_nodes(self) -> NodeResult:
        nodes = self.core_v1.list_node(_request_timeout=self.timeout).items
        result = NodeResult(total=len(nodes))

        for node in nodes:
            name = node.metadata.name
            ready = False

            for condition in node.status.conditions or []:
                if condition.status != "True":
                    continue
                if condition.type == "Ready":
                    ready = True
                elif condition.type in PRESSURE_CONDITIONS:
                    result.conditions.append(f"{name} {condition.type}")

            if ready:
                result.ready += 1
            else:
                result.not_ready.append(name)

        return result

    def check_pods(self, namespace: str = "") -> PodResult:
        """
        Classify pods by phase and waiting reason.

        Pods in phases other than Pending/Failed, and Running pods without a
        crash-looping or image-pull waiting container, count as running.
        """
        pods = self._list(
            namespace,
            self.core_v1.list_namespaced_pod,
            self.core_v1.list_pod_for_all_namespaces,
        ).items
        result = PodResult(total=len(pods))

        for pod in pods:
            pod_name = f"{pod.metadata.namespace}/{pod.metadata.name}"
            phase = pod.status.phase

            if phase == "Pending":
                result.pending.append(pod_name)
            elif phase == "Failed":
                result.failed.append(pod_name)
            elif phase == "Running":
                has_issue = False
                for cs in pod.status.container_statuses or []:
                    waiting = cs.state.waiting if cs.state else None
                    if waiting is None:
                        continue
                    if waiting.reason == "CrashLoopBackOff":
                        result.crash_loop_back_off.append(pod_name)
                        has_issue = True
                    elif waiting.reason in IMAGE_PULL_REASONS:
                        result.image_pull_back_off.append(pod_name)
                        has_issue = True
                if not has_issue:
                    result.running += 1
            else:
                result.running += 1

        return result

    def check_deployments(self, namespace: str = "") -> DeploymentResult:
        deployments = self._list(
            namespace,
            self.apps_v1.list_namespaced_deployment,
            self.apps_v1.list_deployment_for_all_namespaces,
        ).items
        result = DeploymentResult(total=len(deployments))

        for deploy in deployments:
            desired = (deploy.spec.replicas if deploy.spec else None) or 0
            available = (deploy.status.available_replicas if deploy.status else None) or 0

            if available >= desired:
                result.available += 1
            else:
                result.unavailable.append(f"{deploy.metadata.namespace}/{deploy.metadata.name}")

        return result

    def check_pvcs(self, namespace: str = "") -> PVCResult:
        pvcs = self._list(
            namespace,
            self.core_v1.list_namespaced_persistent_volume_claim,
            self.core_v1.list_persistent_volume_claim_for_all_namespaces,
        ).items
        result = PVCResult(total=len(pvcs))

        for pvc in pvcs:
            phase = pvc.status.phase if pvc.status else None
            if phase == "Bound":
                result.bound += 1
            elif phase == "Pending":
                result.pending.append(f"{pvc.metadata.namespace}/{pvc.metadata.name}")

        return result

    def check_services(self, namespace: str = "") -> ServiceResult:
        services = self._list(
            namespace,
            self.core_v1.list_namespaced_service,
            self.core_v1.list_service_for_all_namespaces,
        ).items
        result = ServiceResult()

        for svc in services:
            if svc.spec.type != "LoadBalancer":
                continue

            result.total += 1
            load_balancer = svc.status.load_balancer if svc.status else None
            if load_balancer and load_balancer.ingress:
                result.ready += 1
            else:
                result.no_ip.append(f"{svc.metadata.namespace}/{svc.metadata.name}")

        return result

    def check_events(self, namespace: str = "", now: Optional[datetime] = None) -> EventResult:
        events = self._list(
            namespace,
            self.core_v1.list_namespaced_event,
            self.core_v1.list_event_for_all_namespaces,
            field_selector="type=Warning",
        ).items
        cutoff = (now or utcnow()) - EVENT_WINDOW
        result = EventResult()

        for event in events:
            if event.type and event.type != "Warning":
                continue

            seen = event.last_timestamp or event.first_timestamp or event.event_time
            if seen is None or ensure_aware(seen) <= cutoff:
                continue

            obj = event.involved_object
            result.warnings.append(f"{obj.namespace}/{obj.name}: {event.message}")

        return result

    def _read_secret(self, namespace: str, name: str):
        try:
            return self.core_v1.read_namespaced_secret(
                name, namespace, _request_timeout=self.timeout
            )
        except ApiException as e:
            logger.debug(f"Skipping TLS secret {namespace}/{name}: {e.status} {e.reason}")
            return None

    def check_certificates(self, namespace: str = "", now: Optional[datetime] = None) -> CertResult:
        """
        Check TLS certificates referenced by Ingress resources.

        Each (namespace, secret) pair is resolved once. Missing or
        unparseable secrets are skipped and not counted.
        """
        ingresses = self._list(
            namespace,
            self.networking_v1.list_namespaced_ingress,
            self.networking_v1.list_ingress_for_all_namespaces,
        ).items
        now = now or utcnow()
        result = CertResult()
        seen: Set[Tuple[str, str]] = set()

        for ing in ingresses:
            ing_namespace = ing.metadata.namespace
            for tls in (ing.spec.tls if ing.spec else None) or []:
                if not tls.secret_name:
                    continue

                key = (ing_namespace, tls.secret_name)
                if key in seen:
                    continue
                seen.add(key)

                secret = self._read_secret(ing_namespace, tls.secret_name)
                if secret is None:
                    continue

                expiry = decode_certificate_expiry(secret)
                if expiry is None:
                    continue

                result.total += 1
                info = CertInfo(
                    host=tls.hosts[0] if tls.hosts else "",
                    namespace=ing_namespace,
                    secret=tls.secret_name,
                    expires_in=days_until(expiry, now),
                    expiry=expiry,
                )

                classification = classify_expiry(info.expires_in)
                if classification == "expired":
                    result.expired.append(info)
                elif classification == "expiring":
                    result.expiring.append(info)
                else:
                    result.valid += 1

        return result
