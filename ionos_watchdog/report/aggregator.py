"""
Check Aggregator

Runs the three probers (status feed, IONOS Cloud, Kubernetes) concurrently,
waits for all of them, and merges their results into one Report.

Design:
- Parallel execution via asyncio.gather over a thread pool (the probers
  block on HTTP / Kubernetes API calls)
- Each prober returns its own issue list; lists are concatenated after
  the join, so no state is shared between threads
- Graceful degradation: a failing prober contributes one issue and never
  stops the others
"""

import asyncio
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests

from ..config import WatchdogConfig
from ..exceptions import APIError, ConfigurationError, FeedError, HealthCheckError
from ..feed import StatusFeedClient
from ..ionos import IonosClient
from ..k8s import HealthResult, KubernetesHealthChecker
from ..models import Status
from .models import Report

logger = logging.getLogger(__name__)


@dataclass
class ProbeOutcome:
    """Report sections and issues produced by one prober."""
    sections: Dict[str, Any] = field(default_factory=dict)
    issues: List[str] = field(default_factory=list)


ProbeFunc = Callable[[], ProbeOutcome]


def health_issues(health: HealthResult) -> List[str]:
    """
    Summarise cluster health as one issue per affected category.

    Individual objects stay in the HealthResult; only counts are reported here.
    """
    counts = [
        (health.nodes.issue_count, "node issues"),
        (health.pods.issue_count, "pod issues"),
        (len(health.deployments.unavailable), "deployment issues"),
        (len(health.pvcs.pending), "PVC issues"),
        (len(health.services.no_ip), "LoadBalancer issues"),
        (len(health.certs.expired), "expired certificates"),
        (len(health.certs.expiring), "certificates expiring soon"),
    ]
    return [f"{count} {label}" for count, label in counts if count > 0]


class CheckRunner:
    """
    Aggregation engine for one report cycle.

    Example:
        runner = CheckRunner.from_config(resolve_config(), namespace="")
        report = runner.run()

        raise SystemExit(report.status.exit_code)
    """

    def __init__(
        self,
        feed_client: Optional[StatusFeedClient] = None,
        ionos_client: Optional[IonosClient] = None,
        k8s_checker: Optional[KubernetesHealthChecker] = None,
        namespace: str = "",
    ):
        """
        Initialize the runner.

        Args:
            feed_client: Status feed client (skipped if None)
            ionos_client: IONOS Cloud client (skipped if None)
            k8s_checker: Kubernetes health checker (skipped if None)
            namespace: Kubernetes namespace to check ("" = all)
        """
        self.feed_client = feed_client
        self.ionos_client = ionos_client
        self.k8s_checker = k8s_checker
        self.namespace = namespace

    @classmethod
    def from_config(cls, cfg: WatchdogConfig, namespace: str = "") -> "CheckRunner":
        """
        Build all collaborators before any probing starts.

        Raises:
            ConfigurationError: if IONOS credentials cannot be resolved
        """
        ionos_client = IonosClient.from_config(cfg.ionos)

        try:
            k8s_checker = KubernetesHealthChecker(kubeconfig_path=cfg.kubeconfig or None)
        except ConfigurationError as e:
            logger.warning(f"Skipping Kubernetes health check: {e}")
            k8s_checker = None

        return cls(
            feed_client=StatusFeedClient(),
            ionos_client=ionos_client,
            k8s_checker=k8s_checker,
            namespace=namespace,
        )

    # =========================================================================
    # Probers
    # =========================================================================

    def check_status_page(self) -> ProbeOutcome:
        outcome = ProbeOutcome()

        try:
            result = self.feed_client.check_status()
        except FeedError as e:
            logger.warning(f"Status page check failed: {e}")
            outcome.issues.append(f"Status page: {e}")
            return outcome

        outcome.sections["status_page"] = result

        if result.status != Status.OK:
            if result.active_incidents:
                for incident in result.active_incidents:
                    outcome.issues.append(f"Status page: {incident.title}")
            else:
                outcome.issues.append(f"Status page: {result.status.value}")

        return outcome

    def check_ionos(self) -> ProbeOutcome:
        outcome = ProbeOutcome()
        client = self.ionos_client

        connectivity = client.check_connectivity()
        outcome.sections["api_check"] = connectivity
        if not connectivity.ok:
            outcome.issues.append("IONOS API unreachable")

        auth = client.check_authentication()
        outcome.sections["auth_check"] = auth
        if not auth.ok:
            outcome.issues.append("IONOS authentication failed")

        try:
            datacenters = client.check_datacenters()
        except (APIError, requests.exceptions.RequestException) as e:
            logger.warning(f"Datacenter check failed: {e}")
            outcome.issues.append(f"Datacenters: {e}")
        else:
            outcome.sections["datacenters"] = tuple(datacenters)
            for status in datacenters:
                for issue in status.issues:
                    outcome.issues.append(f"DC {status.datacenter.name}: {issue}")

        try:
            clusters = client.check_k8s_clusters()
        except (APIError, requests.exceptions.RequestException) as e:
            logger.warning(f"Managed Kubernetes check failed: {e}")
            outcome.issues.append(f"K8s clusters: {e}")
        else:
            outcome.sections["clusters"] = tuple(clusters)
            for status in clusters:
                for issue in status.issues:
                    outcome.issues.append(f"Cluster {status.cluster.name}: {issue}")

        # DBaaS issues already name the engine and entity
        dbaas = client.check_dbaas()
        outcome.sections["dbaas"] = dbaas
        outcome.issues.extend(dbaas.issues)

        return outcome

    def check_kubernetes(self) -> ProbeOutcome:
        outcome = ProbeOutcome()

        try:
            health = self.k8s_checker.check_health(self.namespace)
        except HealthCheckError as e:
            logger.warning(f"Kubernetes health check failed: {e}")
            outcome.issues.append(f"K8s health: {e}")
            return outcome

        outcome.sections["health"] = health
        outcome.issues.extend(health_issues(health))
        return outcome

    # =========================================================================
    # Aggregation
    # =========================================================================

    def _probes(self) -> List[Tuple[str, ProbeFunc]]:
        """(label, callable) for every configured prober."""
        probes: List[Tuple[str, ProbeFunc]] = []
        if self.feed_client is not None:
            probes.append(("Status page", self.check_status_page))
        if self.ionos_client is not None:
            probes.append(("IONOS", self.check_ionos))
        if self.k8s_checker is not None:
            probes.append(("K8s health", self.check_kubernetes))
        return probes

    async def collect(self) -> Report:
        """
        Run all probers in parallel and build the report once all have finished.

        Returns:
            Report with status derived from the total issue count
        """
        start_time = time.time()
        probes = self._probes()
        loop = asyncio.get_running_loop()

        with ThreadPoolExecutor(max_workers=max(len(probes), 1)) as executor:
            results = await asyncio.gather(
                *(loop.run_in_executor(executor, probe) for _, probe in probes),
                return_exceptions=True,
            )

        sections: Dict[str, Any] = {}
        issues: List[str] = []

        for (label, _), result in zip(probes, results):
            if isinstance(result, Exception):
                logger.error(f"{label} check crashed: {result}")
                issues.append(f"{label}: {result}")
                continue
            sections.update(result.sections)
            issues.extend(result.issues)

        status = Status.from_issue_count(len(issues))
        duration_ms = (time.time() - start_time) * 1000

        logger.info(
            f"Check cycle finished in {duration_ms:.0f}ms: "
            f"{status.value} ({len(issues)} issues)"
        )

        return Report(
            status=status,
            issues=tuple(issues),
            duration_ms=duration_ms,
            **sections,
        )

    def run(self) -> Report:
        """Synchronous entry point for one cycle."""
        return asyncio.run(self.collect())


def run_checks(cfg: WatchdogConfig, namespace: str = "") -> Report:
    """
    Build collaborators from configuration and run one cycle.

    Raises:
        ConfigurationError: before any probing if credentials are missing
    """
    return CheckRunner.from_config(cfg, namespace=namespace).run()
