"""
Tests for the test runner command line
"""

import argparse
import sys

from pulseboard.run_tests import TESTS_DIR, build_command


def make_args(**overrides):
    defaults = dict(
        unit=False,
        integration=False,
        coverage=False,
        verbose=False,
        quiet=False,
        file=None,
        keyword=None,
    )
    defaults.update(overrides)
    return argparse.Namespace(**defaults)


def test_default_runs_whole_suite():
    cmd = build_command(make_args())

    assert cmd[:4] == [sys.executable, "-m", "pytest", TESTS_DIR]
    assert "-v" in cmd
    assert "--tb=short" in cmd


def test_unit_selects_marker():
    cmd = build_command(make_args(unit=True))

    assert cmd[4:6] == ["-m", "unit"]


def test_integration_selects_marker():
    cmd = build_command(make_args(integration=True))

    assert cmd[4:6] == ["-m", "integration"]
    assert "unit" not in cmd


def test_coverage_and_keyword():
    cmd = build_command(make_args(coverage=True, keyword="newsletter", quiet=True))

    assert "--cov=pulseboard" in cmd
    assert cmd[cmd.index("-k") + 1] == "newsletter"
    assert "--tb=no" in cmd
