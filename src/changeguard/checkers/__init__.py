"""
Checkers used by the Tester worker.

Each checker verifies one TestCase type and may raise CheckerException;
the Tester turns any exception into a failing result.
"""

from changeguard.checkers.api import ApiChecker
from changeguard.checkers.database import DatabaseChecker
from changeguard.checkers.generic import GenericChecker
from changeguard.checkers.layout import LayoutChecker

__all__ = [
    "ApiChecker",
    "DatabaseChecker",
    "GenericChecker",
    "LayoutChecker",
]
