"""
Worker process entry point: python -m changeguard.workers

Reads one request envelope from stdin and writes one response envelope to
stdout. Logs go to stderr.
"""

import sys

from changeguard.logging_setup import setup_logging
from changeguard.workers.dispatch import run_worker


def main() -> int:
    setup_logging("changeguard", stream=sys.stderr)
    return run_worker(sys.stdin, sys.stdout)


if __name__ == "__main__":
    sys.exit(main())
