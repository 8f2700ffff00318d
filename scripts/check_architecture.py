"""Architecture boundary checker (no external deps).

Rules:
- core/ must not import app, services, storage, infra, ui
- storage/ must not import app, services, ui
- services/ must not import ui
- app/ must not import ui
- infra/ must not import services, storage, ui

Usage:
  python scripts/check_architecture.py
"""

from __future__ import annotations

import ast
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]

RULES = {
    'core': {'app', 'services', 'storage', 'infra', 'ui'},
    'storage': {'app', 'services', 'ui'},
    'services': {'ui'},
    'app': {'ui'},
    'infra': {'services', 'storage', 'ui'},
}


def iter_py_files(root: Path = ROOT) -> list[Path]:
    skip_dirs = {'.pytest_cache', '__pycache__', 'build', 'dist', '.git', '.venv'}
    files: list[Path] = []
    for p in root.rglob('*.py'):
        if any(part in skip_dirs for part in p.parts):
            continue
        files.append(p)
    return files


def layer_of(path: Path, root: Path = ROOT) -> str | None:
    rel = path.relative_to(root)
    if not rel.parts:
        return None
    top = rel.parts[0]
    return top if top in RULES else None


def imported_names(node: ast.AST) -> list[str]:
    if isinstance(node, ast.Import):
        return [alias.name.split('.')[0] for alias in node.names]
    if isinstance(node, ast.ImportFrom) and node.module and not node.level:
        return [node.module.split('.')[0]]
    return []


def find_violations(root: Path = ROOT) -> list[str]:
    violations: list[str] = []
    for fpath in iter_py_files(root):
        layer = layer_of(fpath, root)
        if layer is None:
            continue
        tree = ast.parse(fpath.read_text(encoding='utf-8'), filename=str(fpath))
        forbidden = RULES[layer]
        for node in ast.walk(tree):
            for name in imported_names(node):
                if name in forbidden:
                    lineno = getattr(node, 'lineno', '?')
                    violations.append(f"{layer}: {fpath.relative_to(root)}:{lineno} imports '{name}'")
    return violations


def main() -> int:
    violations = find_violations()
    if violations:
        print('Architecture boundary violations found:')
        for v in violations:
            print('  -', v)
        return 2

    print('OK: no architecture boundary violations found.')
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
