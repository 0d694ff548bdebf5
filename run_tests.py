#!/usr/bin/env python3

"""
Test runner for the Elasticsearch MCP server.

Usage:
    python run_tests.py [suite] [pytest options]

Suites:
    unit        - validators, CSV sink, scroll reader, export flow
    integration - tool functions in server.py against a mock client
    e2e         - in-memory FastMCP client against the server
    export      - everything that touches the CSV export path
    manual      - live round trip (needs ELASTIC_NODE)
    all         - every suite except manual (default)

Install the test extra first: pip install -e ".[test]"
"""

import os
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
TESTS = ROOT / "tests"

COVERAGE_TARGETS = ["config", "es_types", "tools", "utils", "server"]

# suite -> (test paths, marker expression, -k expression)
SUITES = {
    "unit": ([TESTS / "unit"], None, None),
    "integration": ([TESTS / "integration"], None, None),
    "e2e": ([TESTS / "e2e"], "not manual", None),
    "export": (
        [
            TESTS / "unit" / "flows",
            TESTS / "unit" / "primitives" / "test_scroll.py",
            TESTS / "unit" / "primitives" / "test_fields.py",
            TESTS / "unit" / "utils" / "test_csv_sink.py",
            TESTS / "integration",
            TESTS / "e2e",
        ],
        "not manual",
        "export or scroll or csv or field",
    ),
    "manual": ([TESTS / "e2e"], "manual", None),
    "all": ([TESTS], "not manual", None),
}


def build_command(suite, extra_args):
    paths, marker, keyword = SUITES[suite]
    cmd = [sys.executable, "-m", "pytest", *(str(path) for path in paths)]

    if marker:
        cmd.extend(["-m", marker])
    if keyword:
        cmd.extend(["-k", keyword])

    if "--no-cov" in extra_args:
        extra_args = [arg for arg in extra_args if arg != "--no-cov"]
    else:
        cmd.extend(f"--cov={target}" for target in COVERAGE_TARGETS)
        cmd.append("--cov-report=term-missing")

    cmd.extend(extra_args)
    return cmd


def main(argv):
    suite = "all"
    if argv and argv[0] in SUITES:
        suite, argv = argv[0], argv[1:]

    if suite == "manual" and not os.getenv("ELASTIC_NODE"):
        print("❌ Manual tests need ELASTIC_NODE, e.g. export ELASTIC_NODE=http://localhost:9200")
        return 1

    cmd = build_command(suite, argv)
    print(f"🧪 {suite} tests: {' '.join(cmd)}")

    # pytest output streams straight through; its exit code is ours
    return subprocess.call(cmd, cwd=ROOT)


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
