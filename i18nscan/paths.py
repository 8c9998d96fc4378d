"""Glob resolution and ignore matching relative to a project root."""

from __future__ import annotations

import glob
import os
import re
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, List, Sequence

_BRACES = re.compile(r"\{([^{}]*,[^{}]*)\}")


def expand_braces(pattern: str) -> List[str]:
    """Expand ``{a,b}`` alternatives: ``src/*.{ts,tsx}`` -> ``src/*.ts``, ``src/*.tsx``."""
    match = _BRACES.search(pattern)
    if match is None:
        return [pattern]
    head, tail = pattern[: match.start()], pattern[match.end() :]
    expanded: List[str] = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(f"{head}{option}{tail}"))
    return expanded


def fill_pattern(pattern: str, **tokens: str) -> str:
    """Substitute ``{locale}``/``{ns}``/``{namespace}`` style placeholders."""
    for name, value in tokens.items():
        pattern = pattern.replace(f"{{{name}}}", value)
    return pattern


def resolve_glob(root: Path, pattern: str) -> List[Path]:
    """Return files matching ``pattern`` (brace and ``**`` aware), sorted and unique."""
    found = set()
    for expanded in expand_braces(pattern):
        target = expanded if os.path.isabs(expanded) else os.path.join(str(root), expanded)
        for match in glob.glob(target, recursive=True):
            path = Path(match)
            if path.is_file():
                found.add(path.resolve())
    return sorted(found)


def relative_posix(path: Path, root: Path) -> str:
    try:
        return path.resolve().relative_to(root.resolve()).as_posix()
    except ValueError:
        return path.as_posix()


def matches_any(rel_path: str, patterns: Sequence[str]) -> bool:
    """Gitignore-flavoured match of a root-relative posix path against globs."""
    return any(_matches(rel_path, expanded) for pattern in patterns for expanded in expand_braces(pattern))


def _matches(rel_path: str, pattern: str) -> bool:
    if pattern.startswith("./"):
        pattern = pattern[2:]
    if fnmatchcase(rel_path, pattern):
        return True
    if pattern.startswith("**/") and fnmatchcase(rel_path, pattern[3:]):
        return True
    if pattern.endswith("/**") and (rel_path + "/").startswith(pattern[:-2]):
        return True
    return False


def filter_ignored(paths: Iterable[Path], root: Path, patterns: Sequence[str]) -> List[Path]:
    return [path for path in paths if not matches_any(relative_posix(path, root), patterns)]


__all__ = [
    "expand_braces",
    "fill_pattern",
    "filter_ignored",
    "matches_any",
    "relative_posix",
    "resolve_glob",
]
