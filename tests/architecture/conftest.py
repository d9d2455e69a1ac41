"""Shared fixtures for architecture tests."""

import os

import pytest
from pytestarch import (
    EvaluableArchitecture,
    LayeredArchitecture,
    get_evaluable_architecture,
)


@pytest.fixture(scope="session")
def evaluable() -> EvaluableArchitecture:
    """Build evaluable architecture from src/changeguard."""
    src_dir = os.path.abspath(
        os.path.join(os.path.dirname(__file__), "..", "..", "src")
    )
    project_path = os.path.join(src_dir, "changeguard")
    return get_evaluable_architecture(src_dir, project_path)


@pytest.fixture(scope="session")
def layers() -> LayeredArchitecture:
    """Define the DDD layers plus the worker side of the process boundary.

    PyTestArch resolves module names relative to the source root,
    so modules appear as 'src.changeguard.domain', etc.
    """
    return (
        LayeredArchitecture()
        .layer("domain")
        .containing_modules(["src.changeguard.domain"])
        .layer("application")
        .containing_modules(["src.changeguard.application"])
        .layer("infrastructure")
        .containing_modules(["src.changeguard.infrastructure"])
        .layer("workers")
        .containing_modules(["src.changeguard.workers", "src.changeguard.checkers"])
    )
