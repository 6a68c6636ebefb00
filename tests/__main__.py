#!/usr/bin/env python3
"""
Run the steer-ops-gateway test suite with ``python -m tests``.

Arguments after the module name are passed straight to pytest; with none,
the whole suite runs with short tracebacks.
"""

import sys
from pathlib import Path

# Make the package importable without installing it
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


def main():
    import pytest

    tests_dir = Path(__file__).parent
    args = sys.argv[1:] or [str(tests_dir), "-q", "--tb=short"]
    return pytest.main(args)


if __name__ == "__main__":
    sys.exit(main())
