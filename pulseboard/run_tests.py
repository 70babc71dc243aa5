#!/usr/bin/env python3
"""
Pulseboard Test Runner

Usage:
    python -m pulseboard.run_tests                 # Run the whole suite
    python -m pulseboard.run_tests --unit          # Skip the HTTP API tests
    python -m pulseboard.run_tests --integration   # HTTP API tests only
    python -m pulseboard.run_tests --coverage      # Coverage report for the package
    python -m pulseboard.run_tests -k newsletter   # Tests matching an expression
"""

import argparse
import os
import subprocess
import sys

TESTS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "tests")


def build_command(args) -> list:
    """Translate runner flags into a pytest command line"""
    cmd = [sys.executable, "-m", "pytest", args.file or TESTS_DIR]

    if args.unit:
        cmd.extend(["-m", "unit"])
    elif args.integration:
        cmd.extend(["-m", "integration"])

    if args.keyword:
        cmd.extend(["-k", args.keyword])

    if args.coverage:
        cmd.extend(["--cov=pulseboard", "--cov-report=term-missing"])

    cmd.append("-vv" if args.verbose else "-v")
    cmd.append("--tb=no" if args.quiet else "--tb=short")
    return cmd


def main():
    parser = argparse.ArgumentParser(description="Pulseboard Test Runner")

    parser.add_argument("--unit", action="store_true", help="Run unit tests only")
    parser.add_argument("--integration", action="store_true", help="Run HTTP API tests only")
    parser.add_argument("--coverage", action="store_true", help="Generate coverage report")
    parser.add_argument("--verbose", action="store_true", help="Extra verbose output")
    parser.add_argument("--quiet", action="store_true", help="Minimal output")
    parser.add_argument("--file", type=str, help="Run a specific test file")
    parser.add_argument("-k", "--keyword", type=str, help="Only run tests matching this expression")

    args = parser.parse_args()
    cmd = build_command(args)

    print(f"Running: {' '.join(cmd)}")
    print("=" * 60)
    sys.exit(subprocess.run(cmd).returncode)


if __name__ == "__main__":
    main()
