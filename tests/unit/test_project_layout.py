"""
Unit tests for the package layout and the test runner.
"""

import importlib.util
import os
import sys

import run_tests
from es_types import ExportRequest

project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


class TestPackageLayout:
    """The local types package must not shadow installed distributions."""

    def test_types_package_is_local(self):
        assert ExportRequest.__module__ == "es_types.export"

    def test_no_local_mcp_types_package(self):
        assert not os.path.exists(os.path.join(project_root, "mcp_types"))

        spec = importlib.util.find_spec("mcp_types")
        if spec is not None and spec.origin:
            assert not os.path.abspath(spec.origin).startswith(project_root + os.sep)


class TestRunTests:
    """Test cases for run_tests.build_command."""

    def test_all_skips_manual_and_scopes_coverage(self):
        cmd = run_tests.build_command("all", [])

        assert cmd[:3] == [sys.executable, "-m", "pytest"]
        assert cmd[cmd.index("-m", 3) + 1] == "not manual"
        assert "--cov=utils" in cmd
        assert "--cov=tools" in cmd
        assert "--cov=." not in cmd

    def test_no_cov_is_not_forwarded(self):
        cmd = run_tests.build_command("unit", ["--no-cov", "-q"])

        assert "--no-cov" not in cmd
        assert not any(arg.startswith("--cov") for arg in cmd)
        assert cmd[-1] == "-q"

    def test_export_suite_filters_by_keyword(self):
        cmd = run_tests.build_command("export", ["--no-cov"])

        assert cmd[cmd.index("-k") + 1] == "export or scroll or csv or field"

    def test_manual_requires_elastic_node(self, monkeypatch):
        monkeypatch.delenv("ELASTIC_NODE", raising=False)
        monkeypatch.setattr(run_tests.subprocess, "call", lambda *a, **k: 0)

        assert run_tests.main(["manual"]) == 1

    def test_runner_never_installs(self, monkeypatch):
        calls = []
        monkeypatch.setattr(run_tests.subprocess, "call", lambda cmd, **kwargs: calls.append(cmd) or 0)

        assert run_tests.main(["unit", "--no-cov"]) == 0
        assert len(calls) == 1
        assert "pip" not in calls[0]
