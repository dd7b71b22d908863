"""Import extraction and file-level resolution.

Import statements are found with regexes, not a parser, so the resulting
graph is approximate: dynamic imports built from expressions and aliased
module paths are not seen.
"""

import posixpath
import re
from pathlib import PurePosixPath
from typing import Iterable, Optional

JS_EXTENSIONS = (".js", ".ts", ".jsx", ".tsx", ".json")
_JS_SUFFIXES = frozenset({".js", ".ts", ".jsx", ".tsx", ".mjs", ".cjs"})

_JS_IMPORT_RES = (
    re.compile(r"import\s[^'\"`;]*?from\s+['\"`]([^'\"`]+)['\"`]"),
    re.compile(r"import\s+['\"`]([^'\"`]+)['\"`]"),
    re.compile(r"require\(\s*['\"`]([^'\"`]+)['\"`]\s*\)"),
    re.compile(r"import\(\s*['\"`]([^'\"`]+)['\"`]\s*\)"),
)

_PY_FROM_RE = re.compile(r"^\s*from\s+(\.*[\w.]*)\s+import\s", re.MULTILINE)
_PY_FROM_DOTS_RE = re.compile(r"^\s*from\s+(\.+)\s+import\s+\(?([\w \t,]+)", re.MULTILINE)
_PY_IMPORT_RE = re.compile(r"^\s*import\s+([\w.]+(?:\s*,\s*[\w.]+)*)", re.MULTILINE)


def extract_imports(path: str, content: str) -> list[str]:
    """Return raw import specifiers found in *content*, in source order."""
    suffix = PurePosixPath(path).suffix
    found: list[str] = []
    if suffix == ".py":
        for m in _PY_FROM_RE.finditer(content):
            found.append(m.group(1))
        # from . import b names sibling modules, not just the package
        for m in _PY_FROM_DOTS_RE.finditer(content):
            for part in m.group(2).split(","):
                words = part.split()
                if words:
                    found.append(m.group(1) + words[0])
        for m in _PY_IMPORT_RE.finditer(content):
            found.extend(part.strip() for part in m.group(1).split(","))
    elif suffix in _JS_SUFFIXES:
        for regex in _JS_IMPORT_RES:
            found.extend(m.group(1) for m in regex.finditer(content))
    seen = set()
    return [imp for imp in found if imp and not (imp in seen or seen.add(imp))]


def build_path_index(all_paths: Iterable[str]) -> dict[str, str]:
    """Map dotted Python module paths to file paths.

    Each file is indexed with and without a leading ``src.`` segment.
    """
    index: dict[str, str] = {}
    for path in all_paths:
        if not path.endswith(".py"):
            continue
        dotted = path[: -len(".py")].replace("/", ".")
        if dotted.endswith(".__init__"):
            dotted = dotted[: -len(".__init__")]
        index[dotted] = path
        if dotted.startswith("src."):
            index[dotted[4:]] = path
    return index


def resolve_import(
    imp: str,
    source_path: str,
    all_paths: set,
    path_index: dict[str, str],
) -> Optional[str]:
    """Resolve an import specifier to a file in *all_paths*, or None.

    Handles:
      - JS/TS relative specifiers: ./util, ../lib/index
      - Python relative imports: .base, ..models
      - Python absolute imports present in the tree: pkg.models
    Anything else (packages, stdlib) resolves to None.
    """
    if source_path.endswith(".py"):
        if imp.startswith("."):
            return _resolve_python_relative(imp, source_path, all_paths)
        return path_index.get(imp)

    if imp.startswith("."):
        return _resolve_js_relative(imp, source_path, all_paths)
    return None


def _resolve_js_relative(imp: str, source_path: str, all_paths: set) -> Optional[str]:
    base = posixpath.normpath(posixpath.join(posixpath.dirname(source_path), imp))
    if base.startswith("../"):
        return None
    candidates = [base]
    candidates.extend(base + ext for ext in JS_EXTENSIONS)
    candidates.extend(posixpath.join(base, "index" + ext) for ext in JS_EXTENSIONS)
    for candidate in candidates:
        if candidate in all_paths:
            return candidate
    return None


def _resolve_python_relative(imp: str, source_path: str, all_paths: set) -> Optional[str]:
    """Resolve a Python relative import like ..models or .base."""
    dot_count = len(imp) - len(imp.lstrip("."))
    module_part = imp[dot_count:]

    source_dir = PurePosixPath(source_path).parent
    for _ in range(dot_count - 1):  # a single dot means the current package
        source_dir = source_dir.parent

    if module_part:
        module_as_path = source_dir / module_part.replace(".", "/")
        candidates = [f"{module_as_path}.py", f"{module_as_path}/__init__.py"]
    else:
        candidates = [f"{source_dir}/__init__.py"]

    for candidate in candidates:
        candidate = candidate[2:] if candidate.startswith("./") else candidate
        if candidate in all_paths:
            return candidate
    return None
