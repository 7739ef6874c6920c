"""Unit tests for the scan command.

The cluster connection is replaced by the in-memory fetcher from
conftest, so these tests exercise the full scan, reconcile and delete
flow without a cluster.
"""

import json
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from cmsweep.cli.commands.scan import EXIT_CANCELLED
from cmsweep.cli.main import app
from cmsweep.models.refs import ResourceRef
from cmsweep.models.scan_result import ScanReport
from conftest import WORKLOAD_METHODS, FakeFetcher, make_deployment, volume_spec
from kubernetes.client.exceptions import ApiException
from typer.testing import CliRunner

runner = CliRunner()

SCAN = "cmsweep.cli.commands.scan"


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Point the default config location at an empty directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))


@pytest.fixture
def use_fetcher(demo_fetcher: FakeFetcher) -> Iterator[FakeFetcher]:
    """Route the scan command to the demo fetcher."""
    with patch(f"{SCAN}.create_fetcher", return_value=(demo_fetcher, "test-ctx")):
        yield demo_fetcher


class TestScanReport:
    """Tests for scanning without deletion."""

    def test_scan_help(self) -> None:
        result = runner.invoke(app, ["scan", "--help"])
        assert result.exit_code == 0
        assert "--delete" in result.output

    def test_demo_namespace(self, use_fetcher: FakeFetcher) -> None:
        result = runner.invoke(app, ["scan", "-n", "demo"])

        assert result.exit_code == 0
        assert "Using context: test-ctx" in result.output
        assert "ConfigMaps In Use" in result.output
        assert "Unused ConfigMaps" in result.output
        assert "old-config" in result.output
        assert "(protected)" in result.output
        assert use_fetcher.deleted == []

    def test_all_namespaces(self, use_fetcher: FakeFetcher) -> None:
        use_fetcher.add_config_maps("other", "leftover")

        result = runner.invoke(app, ["scan"])

        assert result.exit_code == 0
        assert "leftover" in result.output
        assert ("list_namespaces", "") in use_fetcher.calls

    def test_missing_namespace(self, use_fetcher: FakeFetcher) -> None:
        result = runner.invoke(app, ["scan", "-n", "nope"])

        assert result.exit_code == 1
        assert "Namespace nope does not exist" in result.output

    def test_namespace_listing_error(self, use_fetcher: FakeFetcher) -> None:
        use_fetcher.fail("list_namespaces", "")

        result = runner.invoke(app, ["scan"])

        assert result.exit_code == 1
        assert "Cannot list namespaces: 403 Forbidden" in result.output

    def test_partial_failure_is_warned(self, use_fetcher: FakeFetcher) -> None:
        use_fetcher.fail("list_cron_jobs", "demo")

        result = runner.invoke(app, ["scan", "-n", "demo"])

        assert result.exit_code == 0
        assert "demo: failed to list cronjobs: 403 Forbidden" in result.output

    def test_inventory_failure_is_warned(self, use_fetcher: FakeFetcher) -> None:
        use_fetcher.fail("list_config_maps", "demo")

        result = runner.invoke(app, ["scan", "-n", "demo"])

        assert result.exit_code == 0
        assert "ConfigMaps could not be listed in: demo" in result.output
        assert "No unused ConfigMaps found." in result.output

    def test_cancelled_scan_exits_130(self, use_fetcher: FakeFetcher) -> None:
        with patch(f"{SCAN}.run_scan", return_value=ScanReport(cancelled=True)):
            result = runner.invoke(app, ["scan", "-n", "demo"])

        assert result.exit_code == EXIT_CANCELLED
        assert "results are incomplete" in result.output

    def test_interrupted_scan_exits_130(self, use_fetcher: FakeFetcher) -> None:
        with patch(f"{SCAN}.run_scan", side_effect=KeyboardInterrupt):
            result = runner.invoke(app, ["scan", "-n", "demo"])

        assert result.exit_code == EXIT_CANCELLED

    def test_workers_from_option(self, use_fetcher: FakeFetcher) -> None:
        with patch(f"{SCAN}.run_scan", return_value=ScanReport()) as run:
            runner.invoke(app, ["scan", "-n", "demo", "-w", "3"])

        assert run.call_args.args[2] == 3

    def test_workers_from_config(self, use_fetcher: FakeFetcher, tmp_path: Path) -> None:
        config = tmp_path / "config.toml"
        config.write_text("workers = 9\n")

        with patch(f"{SCAN}.run_scan", return_value=ScanReport()) as run:
            runner.invoke(app, ["scan", "-n", "demo", "-c", str(config)])

        assert run.call_args.args[2] == 9

    def test_invalid_config_exits(self, use_fetcher: FakeFetcher, tmp_path: Path) -> None:
        config = tmp_path / "config.toml"
        config.write_text("workers = 0\n")

        result = runner.invoke(app, ["scan", "-n", "demo", "-c", str(config)])

        assert result.exit_code == 1
        assert "Invalid config content" in result.output

    def test_workers_out_of_range(self) -> None:
        result = runner.invoke(app, ["scan", "-w", "0"])
        assert result.exit_code == 2


class TestScanDelete:
    """Tests for the deletion flow."""

    def test_confirmed_deletion(self, use_fetcher: FakeFetcher) -> None:
        result = runner.invoke(app, ["scan", "-n", "demo", "--delete"], input="yes\n")

        assert result.exit_code == 0
        assert use_fetcher.deleted == [ResourceRef("demo", "old-config")]
        assert "kube-root-ca.crt" in use_fetcher.config_maps["demo"]
        assert "Successfully deleted 1 unused ConfigMap(s)." in result.output
        assert "Skipped 1 ConfigMap(s)" in result.output

    def test_declined_deletion(self, use_fetcher: FakeFetcher) -> None:
        result = runner.invoke(app, ["scan", "-n", "demo", "--delete"], input="no\n")

        assert result.exit_code == 0
        assert use_fetcher.deleted == []
        assert "Deletion cancelled" in result.output

    def test_only_exact_yes_confirms(self, use_fetcher: FakeFetcher) -> None:
        result = runner.invoke(app, ["scan", "-n", "demo", "--delete"], input="y\n")

        assert use_fetcher.deleted == []
        assert "Deletion cancelled" in result.output

    def test_yes_flag_skips_prompt(self, use_fetcher: FakeFetcher) -> None:
        result = runner.invoke(app, ["scan", "-n", "demo", "--delete", "--yes"])

        assert result.exit_code == 0
        assert "Are you sure" not in result.output
        assert use_fetcher.deleted == [ResourceRef("demo", "old-config")]

    def test_dry_run(self, use_fetcher: FakeFetcher) -> None:
        result = runner.invoke(app, ["scan", "-n", "demo", "--delete", "--dry-run"])

        assert result.exit_code == 0
        assert use_fetcher.deleted == []
        assert "Dry-run: 1 ConfigMap(s) would be deleted." in result.output

    def test_dry_run_alone_implies_delete(self, use_fetcher: FakeFetcher) -> None:
        result = runner.invoke(app, ["scan", "-n", "demo", "--dry-run"])

        assert result.exit_code == 0
        assert "Are you sure" not in result.output
        assert use_fetcher.deleted == []
        assert "Dry-run: 1 ConfigMap(s) would be deleted." in result.output

    def test_interrupted_deletion_reports_partial_results(self, use_fetcher: FakeFetcher) -> None:
        use_fetcher.add_config_maps("demo", "a-old", "b-old")
        use_fetcher.delete_failures[ResourceRef("demo", "b-old")] = KeyboardInterrupt()

        result = runner.invoke(app, ["scan", "-n", "demo", "--delete", "--yes"])

        assert result.exit_code == EXIT_CANCELLED
        assert use_fetcher.deleted == [ResourceRef("demo", "a-old")]
        assert "Deletion Results" in result.output
        assert "cancelled" in result.output
        assert "Deletion interrupted" in result.output

    def test_interrupted_deletion_still_exports(
        self, use_fetcher: FakeFetcher, tmp_path: Path
    ) -> None:
        use_fetcher.delete_failures[ResourceRef("demo", "old-config")] = KeyboardInterrupt()
        export = tmp_path / "report.json"

        result = runner.invoke(
            app, ["scan", "-n", "demo", "--delete", "--yes", "--export", str(export)]
        )

        assert result.exit_code == EXIT_CANCELLED
        outcomes = json.loads(export.read_text())["deletion"]["outcomes"]
        assert {o["name"]: o["reason"] for o in outcomes}["old-config"] == "cancelled"

    def test_incomplete_namespace_is_not_deleted(self, use_fetcher: FakeFetcher) -> None:
        use_fetcher.fail("list_pods", "demo")

        result = runner.invoke(app, ["scan", "-n", "demo", "--delete", "--yes"])

        assert result.exit_code == 0
        assert use_fetcher.deleted == []
        assert "incomplete-scan" in result.output

    def test_incomplete_namespace_is_not_counted_in_prompt(self, fetcher: FakeFetcher) -> None:
        fetcher.add_config_maps("a", "orphan").add_config_maps("b", "orphan")
        fetcher.fail("list_jobs", "b")

        with patch(f"{SCAN}.create_fetcher", return_value=(fetcher, "test-ctx")):
            result = runner.invoke(app, ["scan", "--delete"], input="yes\n")

        assert "about to delete 1 unused ConfigMap(s)" in result.output
        assert fetcher.deleted == [ResourceRef("a", "orphan")]

    def test_inventory_listed_before_workloads(self, use_fetcher: FakeFetcher) -> None:
        runner.invoke(app, ["scan", "-n", "demo"])

        methods = [method for method, _ in use_fetcher.calls]
        first_workload = min(methods.index(m) for m in WORKLOAD_METHODS)
        assert methods.index("list_config_maps") < first_workload

    def test_failed_deletion_exits_1(self, use_fetcher: FakeFetcher) -> None:
        use_fetcher.delete_failures[ResourceRef("demo", "old-config")] = ApiException(
            status=403, reason="Forbidden"
        )

        result = runner.invoke(app, ["scan", "-n", "demo", "--delete", "--yes"])

        assert result.exit_code == 1
        assert "Failed to delete 1 ConfigMap(s)" in result.output

    def test_nothing_to_delete(self, fetcher: FakeFetcher) -> None:
        fetcher.add_config_maps("demo", "app-config")
        fetcher.add("demo", "list_deployments", make_deployment(volume_spec("app-config")))

        with patch(f"{SCAN}.create_fetcher", return_value=(fetcher, "test-ctx")):
            result = runner.invoke(app, ["scan", "-n", "demo", "--delete"])

        assert result.exit_code == 0
        assert "Nothing to delete." in result.output

    def test_only_protected_unused_does_not_prompt(self, fetcher: FakeFetcher) -> None:
        fetcher.add_config_maps("demo", "kube-root-ca.crt")

        with patch(f"{SCAN}.create_fetcher", return_value=(fetcher, "test-ctx")):
            result = runner.invoke(app, ["scan", "-n", "demo", "--delete"])

        assert result.exit_code == 0
        assert "Are you sure" not in result.output
        assert fetcher.deleted == []


class TestScanJson:
    """Tests for JSON output and export."""

    def test_json_output(self, use_fetcher: FakeFetcher) -> None:
        result = runner.invoke(app, ["scan", "-n", "demo", "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["in_use"] == [
            {"namespace": "demo", "name": "app-config", "protected": False},
            {"namespace": "demo", "name": "logging-config", "protected": False},
        ]
        assert data["unused"] == [
            {"namespace": "demo", "name": "kube-root-ca.crt", "protected": True},
            {"namespace": "demo", "name": "old-config", "protected": False},
        ]
        assert data["warnings"] == []
        assert "deletion" not in data

    def test_json_delete_requires_yes(self, use_fetcher: FakeFetcher) -> None:
        result = runner.invoke(app, ["scan", "-n", "demo", "-f", "json", "--delete"])

        assert result.exit_code == 1
        assert use_fetcher.deleted == []

    def test_json_delete_with_yes(self, use_fetcher: FakeFetcher) -> None:
        result = runner.invoke(app, ["scan", "-n", "demo", "-f", "json", "--delete", "--yes"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["deletion"]["counts"]["deleted"] == 1
        assert data["deletion"]["counts"]["skipped"] == 1

    def test_export(self, use_fetcher: FakeFetcher, tmp_path: Path) -> None:
        export = tmp_path / "out" / "report.json"

        result = runner.invoke(app, ["scan", "-n", "demo", "--export", str(export)])

        assert result.exit_code == 0
        data = json.loads(export.read_text())
        assert [r["name"] for r in data["unused"]] == ["kube-root-ca.crt", "old-config"]

    def test_export_to_directory_fails(self, use_fetcher: FakeFetcher, tmp_path: Path) -> None:
        result = runner.invoke(app, ["scan", "-n", "demo", "--export", str(tmp_path)])
        assert result.exit_code == 1
