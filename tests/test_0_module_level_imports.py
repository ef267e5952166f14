"""Guard: repl_fold modules import each other at module level only.

A function-level `import repl_fold.x.y` rebinds `repl_fold` as a local name
for the whole enclosing function, so any `repl_fold.` reference above the
import raises UnboundLocalError. `from repl_fold... import` inside a function
hides the dependency from readers of the module header.

This file is named with `test_0_` so it runs first.
"""

import ast
from pathlib import Path

_SRC_ROOT = Path(__file__).resolve().parent.parent / "src" / "repl_fold"


def _imported_modules(node: ast.AST) -> list[str]:
    if isinstance(node, ast.Import):
        return [alias.name for alias in node.names]
    if isinstance(node, ast.ImportFrom) and node.module is not None:
        return [node.module]
    return []


def _find_function_level_imports() -> list[str]:
    violations = []
    for path in sorted(_SRC_ROOT.rglob("*.py")):
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        rel = path.relative_to(_SRC_ROOT)
        for node in ast.walk(tree):
            if not isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                continue
            for child in ast.walk(node):
                for module in _imported_modules(child):
                    if module == "repl_fold" or module.startswith("repl_fold."):
                        violations.append(f"{rel}:{child.lineno} function-level import of {module}")
    return violations


def test_source_tree_found():
    assert (_SRC_ROOT / "core" / "boundaries.py").is_file()


def test_no_function_level_repl_fold_imports():
    violations = _find_function_level_imports()
    assert violations == [], (
        "Move these imports to module level:\n"
        + "\n".join(f"  {v}" for v in violations)
    )
