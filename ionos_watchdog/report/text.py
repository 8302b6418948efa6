"""
Text Report Renderer

Plain-text rendering of a Report. Verbose mode adds per-item detail
for servers, volumes, node pools and databases.
"""

import json
from typing import List

from ..ionos.dbaas import DATABASE_ENGINES
from ..models import Status
from .models import Report

LABEL_WIDTH = 14


def _header(lines: List[str], title: str, leading_blank: bool = True) -> None:
    if leading_blank:
        lines.append("")
    lines.append(title)
    lines.append("-" * len(title))


def _row(label: str, value: str) -> str:
    return f"  {label:<{LABEL_WIDTH}} {value}"


def _render_cloud(report: Report, lines: List[str]) -> None:
    _header(lines, "IONOS Cloud", leading_blank=False)

    if report.status_page is not None:
        lines.append(_row("Status Page", report.status_page.status.value))
        if report.status_page.status != Status.OK:
            for incident in report.status_page.active_incidents:
                lines.append(f"    - {incident.title}")

    if report.api_check is not None:
        lines.append(_row("API", "OK" if report.api_check.ok else "FAILED"))
    else:
        lines.append(_row("API", "SKIPPED"))

    if report.auth_check is not None:
        lines.append(_row("Authentication", "OK" if report.auth_check.ok else "FAILED"))


def _render_datacenters(report: Report, lines: List[str], verbose: bool) -> None:
    if not report.datacenters:
        return

    _header(lines, "Datacenters")

    for status in report.datacenters:
        dc = status.datacenter
        lines.append(f"  {dc.name} ({dc.location})")
        lines.append(f"    Servers: {len(status.servers)}")
        if verbose:
            for server in status.servers:
                lines.append(f"      - {server.name} ({server.vm_state or server.state})")
        lines.append(f"    Volumes: {len(status.volumes)}")
        if verbose:
            for volume in status.volumes:
                lines.append(f"      - {volume.name} ({volume.size:.0f}GB {volume.type})")
        lines.append(f"    State: {'ISSUES' if status.issues else 'OK'}")


def _render_clusters(report: Report, lines: List[str], verbose: bool) -> None:
    if not report.clusters:
        return

    _header(lines, "Kubernetes Clusters")

    for status in report.clusters:
        cluster = status.cluster
        lines.append(f"  {cluster.name} (v{cluster.k8s_version})")
        lines.append(f"    Node Pools: {len(status.node_pools)}")
        if verbose:
            for pool in status.node_pools:
                lines.append(f"      - {pool.name} ({pool.node_count} nodes, {pool.state})")
        lines.append(f"    State: {'ISSUES' if status.issues else 'ACTIVE'}")


def _render_dbaas(report: Report, lines: List[str], verbose: bool) -> None:
    dbaas = report.dbaas
    if dbaas is None or dbaas.total == 0:
        return

    _header(lines, "Managed Databases")

    unhealthy = 0
    for engine in DATABASE_ENGINES:
        items = dbaas.clusters.get(engine.key) or []
        if not items:
            continue

        lines.append(f"  {engine.label}: {len(items)} {engine.kind}(s)")
        size_label = "replicas" if engine.size_field == "replicas" else "instances"
        for item in items:
            if not item.healthy:
                unhealthy += 1
            if verbose:
                lines.append(
                    f"    - {item.display_name} (v{item.version}, {item.location}, "
                    f"{item.size} {size_label}, {item.state})"
                )

    lines.append(f"  State: {'ISSUES' if unhealthy else 'OK'}")


def _render_health(report: Report, lines: List[str]) -> None:
    health = report.health
    if health is None:
        return

    _header(lines, "Health")

    lines.append(_row("Nodes", f"{health.nodes.ready}/{health.nodes.total} Ready"))
    lines.append(_row("Pods", f"{health.pods.running}/{health.pods.total} Running"))
    lines.append(_row(
        "Deployments",
        f"{health.deployments.available}/{health.deployments.total} Available",
    ))

    if health.pvcs.total > 0:
        lines.append(_row("PVCs", f"{health.pvcs.bound}/{health.pvcs.total} Bound"))

    if health.services.total > 0:
        lines.append(_row(
            "LoadBalancers",
            f"{health.services.ready}/{health.services.total} Ready",
        ))

    if health.certs.total > 0:
        lines.append(_row("Certificates", f"{health.certs.valid}/{health.certs.total} Valid"))


def _render_detail(lines: List[str], title: str, items: List[str]) -> None:
    if not items:
        return
    lines.append("")
    lines.append(f"  {title}:")
    for item in items:
        lines.append(f"    {item}")


def _render_issues(report: Report, lines: List[str]) -> None:
    if not report.issues:
        return

    _header(lines, "Issues")
    for issue in report.issues:
        lines.append(f"  - {issue}")

    health = report.health
    if health is None:
        return

    _render_detail(lines, "Nodes NotReady", health.nodes.not_ready)
    _render_detail(lines, "Node Conditions", health.nodes.conditions)
    _render_detail(lines, "Pods CrashLoopBackOff", health.pods.crash_loop_back_off)
    _render_detail(lines, "Pods ImagePullBackOff", health.pods.image_pull_back_off)
    _render_detail(lines, "Pods Pending", health.pods.pending)
    _render_detail(lines, "Pods Failed", health.pods.failed)
    _render_detail(lines, "PVCs Pending", health.pvcs.pending)
    _render_detail(lines, "Deployments Unavailable", health.deployments.unavailable)
    _render_detail(lines, "LoadBalancers NoIP", health.services.no_ip)
    _render_detail(
        lines,
        "Certificates Expired",
        [f"{c.host} ({c.secret})" for c in health.certs.expired],
    )
    _render_detail(
        lines,
        "Certificates Expiring",
        [f"{c.host} ({c.expires_in} days)" for c in health.certs.expiring],
    )


def render_text(report: Report, verbose: bool = False) -> str:
    """
    Render a report as text.

    Sections without data are left out. The last line is "Status: <STATUS>".
    """
    lines: List[str] = [""]
    _render_cloud(report, lines)
    _render_datacenters(report, lines, verbose)
    _render_clusters(report, lines, verbose)
    _render_dbaas(report, lines, verbose)
    _render_health(report, lines)
    _render_issues(report, lines)
    lines.append("")
    lines.append(f"Status: {report.status.value}")
    return "\n".join(lines)


def render_json(report: Report) -> str:
    """Render a report as indented JSON."""
    return json.dumps(report.to_dict(), indent=2)
