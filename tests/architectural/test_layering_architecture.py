"""Architectural tests for module layering and the browser mirror.

The rule engine (evaluator, resolver, calculator, validators, client
payload) must stay free of web and database frameworks so the same rules run
in tests, in routes and, via the payload, in the browser. Checks are static:
modules are parsed, never imported.
"""

from __future__ import annotations

import ast
import re
from pathlib import Path
from typing import Iterable, Set

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
PACKAGE_DIR = PROJECT_ROOT / "survey_flow"
STATIC_JS = PACKAGE_DIR / "static" / "conditional_flow.js"

PURE_LOGIC_MODULES = (
    "condition_evaluator",
    "visibility_rules",
    "completion",
    "matrix",
    "validation",
    "question_config",
    "client_payload",
    "visibility_delta",
    "events",
)
FRAMEWORK_ROOTS = {"fastapi", "starlette", "sqlalchemy"}


def _parse(path: Path) -> ast.Module:
    try:
        return ast.parse(path.read_text(encoding="utf-8"))
    except SyntaxError as exc:
        pytest.fail(f"Failed to parse {path}: {exc}")


def _imported_roots(tree: ast.AST) -> Set[str]:
    roots: Set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            roots.update(alias.name.split(".")[0] for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module and node.level == 0:
            roots.add(node.module.split(".")[0])
    return roots


def _imported_modules(tree: ast.AST) -> Iterable[str]:
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            yield from (alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module:
            yield node.module


def _package_modules() -> list[Path]:
    return sorted(p for p in PACKAGE_DIR.rglob("*.py") if "__pycache__" not in p.parts)


@pytest.mark.parametrize("name", PURE_LOGIC_MODULES)
def test_rule_engine_modules_do_not_import_frameworks(name: str):
    path = PACKAGE_DIR / "logic" / f"{name}.py"
    assert path.exists(), f"Missing module {path}"
    leaked = _imported_roots(_parse(path)) & FRAMEWORK_ROOTS
    assert not leaked, f"{path.name} imports {sorted(leaked)}"


def test_logic_and_models_never_import_routes_or_http():
    for path in _package_modules():
        rel = path.relative_to(PACKAGE_DIR)
        if rel.parts[0] not in {"logic", "models"}:
            continue
        for module in _imported_modules(_parse(path)):
            assert not module.startswith(("survey_flow.routes", "survey_flow.http", "survey_flow.main")), (
                f"{rel} must not depend on {module}"
            )


def test_every_module_has_a_docstring():
    missing = [
        str(p.relative_to(PROJECT_ROOT))
        for p in _package_modules()
        if p.name != "__init__.py" and ast.get_docstring(_parse(p)) is None
    ]
    assert not missing, f"Modules without a docstring: {missing}"


def test_modules_that_log_use_module_loggers():
    for path in _package_modules():
        tree = _parse(path)
        uses_logger = any(
            isinstance(n, ast.Attribute) and isinstance(n.value, ast.Name) and n.value.id == "logger"
            for n in ast.walk(tree)
        )
        if not uses_logger:
            continue
        source = path.read_text(encoding="utf-8")
        assert "logger = logging.getLogger(__name__)" in source, f"{path.name} logs without a module logger"


def test_static_mirror_exports_and_operators_match_python():
    source = STATIC_JS.read_text(encoding="utf-8")
    for name in (
        "COMPARATORS",
        "compare",
        "evaluateCondition",
        "shouldShow",
        "isChildVisible",
        "resolveVisible",
        "visibilityMap",
        "completion",
        "ConditionalFlow",
    ):
        assert re.search(rf"^\s*{name}: {name},$", source, re.MULTILINE), f"conditional_flow.js must export {name}"

    block = re.search(r"const COMPARATORS = \{(.*?)\n\s*\};", source, re.DOTALL)
    assert block, "COMPARATORS table not found in conditional_flow.js"
    js_ops = set(re.findall(r"^\s*([a-z_]+):", block.group(1), re.MULTILINE))

    tree = _parse(PACKAGE_DIR / "models" / "conditions.py")
    py_ops = {
        stmt.value.value
        for node in ast.walk(tree)
        if isinstance(node, ast.ClassDef) and node.name == "Operator"
        for stmt in node.body
        if isinstance(stmt, ast.Assign) and isinstance(stmt.value, ast.Constant)
    }
    assert js_ops == py_ops


def _exported_names(tree: ast.Module) -> Set[str]:
    for node in tree.body:
        if (
            isinstance(node, ast.Assign)
            and any(isinstance(t, ast.Name) and t.id == "__all__" for t in node.targets)
            and isinstance(node.value, (ast.List, ast.Tuple))
        ):
            return {elt.value for elt in node.value.elts if isinstance(elt, ast.Constant)}
    return set()


def _loaded_names(tree: ast.AST) -> Set[str]:
    names: Set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Name) and isinstance(node.ctx, ast.Load):
            names.add(node.id)
        elif isinstance(node, ast.Attribute) and isinstance(node.ctx, ast.Load):
            names.add(node.attr)
    return names


def test_exported_helpers_are_used():
    sources = _package_modules() + sorted((PROJECT_ROOT / "tests").rglob("*.py"))
    used: Set[str] = set()
    for path in sources:
        used |= _loaded_names(_parse(path))
    for path in _package_modules():
        rel = path.relative_to(PACKAGE_DIR)
        if rel.parts[0] not in {"logic", "db"} or path.name == "__init__.py":
            continue
        unused = _exported_names(_parse(path)) - used
        assert not unused, f"{rel} exports names nothing uses: {sorted(unused)}"
