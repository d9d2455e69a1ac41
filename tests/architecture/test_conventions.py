"""
Convention Enforcement Tests.

Checks the layer rules cannot express: frozen records, tuple-valued
fields, wire-valued enums, workers that read no environment, and adapters
that satisfy their ports.
"""

import ast
import importlib
import inspect
from enum import Enum
from pathlib import Path

import pytest

SRC_ROOT = Path(__file__).parent.parent.parent / "src" / "changeguard"
DOMAIN = SRC_ROOT / "domain"

# ChangeRequest is mutated by the orchestrator between states
MUTABLE_DATACLASS_ALLOWLIST = {"ChangeRequest"}


def _parse(path: Path) -> tuple[str, ast.Module]:
    source = path.read_text()
    return source, ast.parse(source)


def _dataclasses(tree: ast.Module) -> list[tuple[ast.ClassDef, bool]]:
    """(class node, is_frozen) for every @dataclass in a module."""
    found = []
    for node in ast.walk(tree):
        if not isinstance(node, ast.ClassDef):
            continue
        for decorator in node.decorator_list:
            if isinstance(decorator, ast.Name) and decorator.id == "dataclass":
                found.append((node, False))
            elif (
                isinstance(decorator, ast.Call)
                and isinstance(decorator.func, ast.Name)
                and decorator.func.id == "dataclass"
            ):
                frozen = any(
                    kw.arg == "frozen"
                    and isinstance(kw.value, ast.Constant)
                    and kw.value.value is True
                    for kw in decorator.keywords
                )
                found.append((node, frozen))
    return found


class TestRecordConventions:
    """Domain records are immutable once built."""

    @pytest.mark.parametrize("module", ["models.py", "pipeline_event.py", "protocol.py"])
    def test_records_are_frozen(self, module):
        _, tree = _parse(DOMAIN / module)

        violations = [
            node.name
            for node, frozen in _dataclasses(tree)
            if not frozen and node.name not in MUTABLE_DATACLASS_ALLOWLIST
        ]

        assert not violations, f"Dataclasses in {module} must be frozen: {violations}"

    def test_frozen_records_use_tuples(self):
        """A list field would let a frozen record change under its readers."""
        source, tree = _parse(DOMAIN / "models.py")

        violations = [
            f"{node.name}.{getattr(item.target, 'id', '?')}"
            for node, frozen in _dataclasses(tree)
            if frozen
            for item in node.body
            if isinstance(item, ast.AnnAssign)
            and "list[" in (ast.get_source_segment(source, item.annotation) or "")
        ]

        assert not violations, f"Use tuple[] instead of list[]: {violations}"

    def test_enums_carry_their_wire_value(self):
        """Every model enum is a str enum so it serializes as its wire value."""
        from changeguard.domain import models

        violations = [
            name
            for name, obj in inspect.getmembers(models, inspect.isclass)
            if issubclass(obj, Enum)
            and obj.__module__ == models.__name__
            and not issubclass(obj, str)
        ]

        assert not violations, f"Enums must subclass str: {violations}"

    def test_test_named_classes_opt_out_of_collection(self):
        """Source classes named Test* set __test__ = False for pytest."""
        violations = []
        for py_file in SRC_ROOT.rglob("*.py"):
            _, tree = _parse(py_file)
            for node in ast.walk(tree):
                if not isinstance(node, ast.ClassDef) or not node.name.startswith("Test"):
                    continue
                opted_out = any(
                    isinstance(item, ast.Assign)
                    and any(getattr(t, "id", None) == "__test__" for t in item.targets)
                    for item in node.body
                )
                if not opted_out:
                    violations.append(f"{py_file.name}:{node.name}")

        assert not violations, f"Missing __test__ = False: {violations}"


class TestWorkerIsolation:
    """Workers get everything they need from the request envelope."""

    @pytest.mark.parametrize(
        "package", ["workers", "checkers", "infrastructure/collaborators"]
    )
    def test_no_environment_reads(self, package):
        violations = []
        for py_file in (SRC_ROOT / package).rglob("*.py"):
            _, tree = _parse(py_file)
            for node in ast.walk(tree):
                if isinstance(node, ast.Attribute) and node.attr in ("environ", "getenv"):
                    violations.append(f"{py_file.name}:{node.lineno}")

        assert not violations, f"Environment read in {package}: {violations}"


class TestExceptionHandling:
    """No bare except and no handler that only passes."""

    def test_no_silent_handlers(self):
        violations = []
        for py_file in SRC_ROOT.rglob("*.py"):
            _, tree = _parse(py_file)
            for node in ast.walk(tree):
                if not isinstance(node, ast.ExceptHandler):
                    continue
                silent = len(node.body) == 1 and (
                    isinstance(node.body[0], ast.Pass)
                    or (
                        isinstance(node.body[0], ast.Expr)
                        and isinstance(node.body[0].value, ast.Constant)
                        and node.body[0].value.value is ...
                    )
                )
                if node.type is None or silent:
                    violations.append(f"{py_file.relative_to(SRC_ROOT)}:{node.lineno}")

        assert not violations, f"Bare or silent except: {violations}"


class TestInterfaceConventions:
    """Ports are abstract and every adapter implements its port."""

    def test_ports_are_named_and_abstract(self):
        from changeguard.domain import interfaces

        violations = []
        for name, cls in inspect.getmembers(interfaces, inspect.isclass):
            if not inspect.isabstract(cls) or name.startswith("_"):
                continue
            if not name.endswith("Interface"):
                violations.append(name)
            violations.extend(
                f"{name}.{method_name}"
                for method_name, method in inspect.getmembers(cls, inspect.isfunction)
                if not method_name.startswith("_")
                and not getattr(method, "__isabstractmethod__", False)
            )

        assert not violations, f"Port naming or abstract-method violations: {violations}"

    @pytest.mark.parametrize(
        ("port", "implementation"),
        [
            ("ArtifactStoreInterface", "infrastructure.persistence.filesystem.FilesystemArtifactStore"),
            ("ArtifactStoreInterface", "infrastructure.persistence.memory.InMemoryArtifactStore"),
            ("PipelineEventStoreInterface", "infrastructure.persistence.events.FilesystemPipelineEventStore"),
            ("PipelineEventStoreInterface", "infrastructure.persistence.events.InMemoryPipelineEventStore"),
            ("WorkerRunnerInterface", "infrastructure.workers.subprocess_runner.SubprocessWorkerRunner"),
            ("WorkerRunnerInterface", "infrastructure.workers.mock.MockWorkerRunner"),
            ("CheckerInterface", "checkers.api.ApiChecker"),
            ("CheckerInterface", "checkers.database.DatabaseChecker"),
            ("CheckerInterface", "checkers.generic.GenericChecker"),
            ("CheckerInterface", "checkers.layout.LayoutChecker"),
        ],
    )
    def test_adapter_implements_port(self, port, implementation):
        from changeguard.domain import interfaces

        module_name, class_name = f"changeguard.{implementation}".rsplit(".", 1)
        adapter = getattr(importlib.import_module(module_name), class_name)

        assert issubclass(adapter, getattr(interfaces, port))
        assert not inspect.isabstract(adapter), (
            f"{class_name} leaves abstract methods: {adapter.__abstractmethods__}"
        )
