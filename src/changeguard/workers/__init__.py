"""
Developer and Tester workers.

Run in their own process via `python -m changeguard.workers`; see
workers.dispatch for the envelope handling.
"""

from changeguard.workers.developer import Developer
from changeguard.workers.dispatch import handle_request, run_worker
from changeguard.workers.tester import Tester

__all__ = [
    "Developer",
    "Tester",
    "handle_request",
    "run_worker",
]
