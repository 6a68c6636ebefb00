#!/usr/bin/env python
"""Test runner for Steer Ops Gateway."""

import sys
import subprocess
import argparse


def build_command(args) -> list:
    cmd = ["pytest", "tests"]

    if args.unit and not args.integration:
        cmd.extend(["-m", "not integration"])
    elif args.integration and not args.unit:
        cmd.extend(["-m", "integration"])

    if args.keyword:
        cmd.extend(["-k", args.keyword])
    if args.verbose:
        cmd.append("-vv")
    if args.fail_fast:
        cmd.append("-x")

    if args.coverage:
        cmd.extend([
            "--cov=steer_ops_gateway",
            "--cov-report=term-missing",
        ])
        if args.html:
            cmd.append("--cov-report=html")

    return cmd


def main():
    """Run tests with various options."""
    parser = argparse.ArgumentParser(description="Run Steer Ops Gateway tests")
    parser.add_argument("--unit", action="store_true", help="Run unit tests only")
    parser.add_argument("--integration", action="store_true", help="Run integration tests only")
    parser.add_argument("--coverage", action="store_true", help="Report coverage for steer_ops_gateway")
    parser.add_argument("--html", action="store_true", help="Also write an HTML coverage report")
    parser.add_argument("--keyword", "-k", help="Only run tests matching this expression")
    parser.add_argument("--fail-fast", "-x", action="store_true", help="Stop on first failure")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    cmd = build_command(parser.parse_args())
    print(f"Running: {' '.join(cmd)}")
    return subprocess.run(cmd, cwd=".").returncode


if __name__ == "__main__":
    sys.exit(main())
