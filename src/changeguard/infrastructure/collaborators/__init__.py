"""
External collaborators consumed at the worker boundary.
"""

from changeguard.infrastructure.collaborators.http import (
    HttpEndpointProber,
    HttpLayoutInspector,
)
from changeguard.infrastructure.collaborators.prisma import (
    PrismaSchemaLinter,
    PrismaSchemaSync,
)

__all__ = [
    "HttpEndpointProber",
    "HttpLayoutInspector",
    "PrismaSchemaLinter",
    "PrismaSchemaSync",
]
