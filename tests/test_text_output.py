"""
Tests for text and JSON rendering
"""

import json
from datetime import datetime, timezone

from ionos_watchdog.feed import FeedEntry, StatusResult
from ionos_watchdog.ionos import (
    CheckResult, ClusterStatus, DatabaseCluster, Datacenter, DatacenterStatus,
    DBaaSStatus, K8sCluster, NodePool, Server, Volume,
)
from ionos_watchdog.k8s import CertInfo, HealthResult
from ionos_watchdog.models import Status
from ionos_watchdog.report import Report, render_json, render_text


def _full_report(**overrides):
    health = HealthResult()
    health.nodes.total = 3
    health.nodes.ready = 2
    health.nodes.not_ready = ["node-3"]
    health.pods.total = 10
    health.pods.running = 9
    health.pods.crash_loop_back_off = ["shop/api-7d9f"]
    health.deployments.total = 4
    health.deployments.available = 4
    health.certs.total = 1
    health.certs.expiring = [CertInfo(
        "shop.example.com", "shop", "shop-tls", 12,
        datetime(2026, 3, 22, tzinfo=timezone.utc),
    )]

    values = dict(
        status=Status.WARNING,
        status_page=StatusResult(Status.OK, message="No active incidents"),
        api_check=CheckResult(True, "IONOS API is reachable"),
        auth_check=CheckResult(True, "Authentication successful"),
        datacenters=(DatacenterStatus(
            datacenter=Datacenter("dc1", "prod", "de/fra"),
            servers=[Server("s1", "web-1", vm_state="RUNNING", state="AVAILABLE")],
            volumes=[Volume("v1", "disk-1", size=100.0, type="SSD", state="AVAILABLE")],
        ),),
        clusters=(ClusterStatus(
            cluster=K8sCluster("c1", "prod-k8s", "1.29.4", "ACTIVE"),
            node_pools=[NodePool("np1", "pool-a", node_count=3, state="ACTIVE")],
        ),),
        dbaas=DBaaSStatus(clusters={
            "postgresql": [DatabaseCluster(
                "pg1", "orders", version="15", location="de/fra", size=2, state="AVAILABLE",
            )],
        }),
        health=health,
        issues=("2 node issues", "1 pod issues"),
    )
    values.update(overrides)
    return Report(**values)


class TestRenderText:
    """Tests for the text renderer."""

    def test_sections(self):
        text = render_text(_full_report())

        assert "IONOS Cloud" in text
        assert "Status Page    OK" in text
        assert "API            OK" in text
        assert "Authentication OK" in text
        assert "prod (de/fra)" in text
        assert "Servers: 1" in text
        assert "prod-k8s (v1.29.4)" in text
        assert "Managed Databases" in text
        assert "PostgreSQL: 1 cluster(s)" in text
        assert "Nodes          2/3 Ready" in text
        assert "Pods           9/10 Running" in text
        assert "Certificates   0/1 Valid" in text

    def test_last_line_is_status(self):
        text = render_text(_full_report())

        assert text.splitlines()[-1] == "Status: WARNING"

    def test_issue_details(self):
        text = render_text(_full_report())

        assert "  - 2 node issues" in text
        assert "Nodes NotReady:" in text
        assert "    node-3" in text
        assert "Pods CrashLoopBackOff:" in text
        assert "shop.example.com (12 days)" in text

    def test_verbose_lists_items(self):
        text = render_text(_full_report(), verbose=True)

        assert "- web-1 (RUNNING)" in text
        assert "- disk-1 (100GB SSD)" in text
        assert "- pool-a (3 nodes, ACTIVE)" in text
        assert "- orders (v15, de/fra, 2 instances, AVAILABLE)" in text

    def test_not_verbose_hides_items(self):
        text = render_text(_full_report())

        assert "web-1" not in text
        assert "pool-a" not in text

    def test_api_skipped_without_check(self):
        text = render_text(Report())

        assert "API            SKIPPED" in text
        assert "Issues" not in text
        assert "Health" not in text
        assert text.splitlines()[-1] == "Status: OK"

    def test_status_page_incidents_listed(self):
        incident = FeedEntry("Network degradation", "2026-03-10T10:00:00Z")
        report = Report(
            status=Status.WARNING,
            status_page=StatusResult(Status.WARNING, [incident], "1 active incident"),
            issues=("Status page: Network degradation",),
        )

        text = render_text(report)

        assert "Status Page    WARNING" in text
        assert "    - Network degradation" in text

    def test_failed_checks(self):
        report = Report(
            status=Status.WARNING,
            api_check=CheckResult(False, "API unreachable: timeout"),
            auth_check=CheckResult(False, "Request failed: timeout"),
            issues=("IONOS API unreachable", "IONOS authentication failed"),
        )

        text = render_text(report)

        assert "API            FAILED" in text
        assert "Authentication FAILED" in text

    def test_datacenter_with_issues(self):
        report = _full_report(datacenters=(DatacenterStatus(
            datacenter=Datacenter("dc1", "prod", "de/fra"),
            issues=["Server web-1 state: BUSY"],
        ),))

        assert "State: ISSUES" in render_text(report)


class TestRenderJson:
    """Tests for JSON output."""

    def test_full_report(self):
        data = json.loads(render_json(_full_report()))

        assert data["status"] == "WARNING"
        assert data["api_check"] == {"ok": True, "message": "IONOS API is reachable"}
        assert data["datacenters"][0]["datacenter"]["name"] == "prod"
        assert data["dbaas"]["clusters"]["postgresql"][0]["display_name"] == "orders"
        assert data["health"]["certs"]["expiring"][0]["expires_in"] == 12
        assert data["issues"] == ["2 node issues", "1 pod issues"]

    def test_absent_sections_omitted(self):
        data = json.loads(render_json(Report()))

        assert data == {"status": "OK", "issues": []}

    def test_indented(self):
        assert render_json(Report()).startswith("{\n  ")
