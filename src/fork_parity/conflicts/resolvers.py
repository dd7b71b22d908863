"""Per-block conflict resolvers.

Resolver selection is an exhaustive match over ``ResolverKind``; each
resolver returns a ``Resolution`` suggestion and never edits files.
"""

from __future__ import annotations

import json
import re
from typing import Any, Optional

from ..config import ConflictThresholds
from ..exceptions import ManifestParseError
from ..logging_config import get_logger
from .models import BlockKind, ConflictBlock, ConflictType, Outcome, Resolution, ResolverKind

logger = get_logger(__name__)

_SIGNATURE_RES = (
    re.compile(r"function\s+(\w+)\s*\(([^)]*)\)"),
    re.compile(r"def\s+(\w+)\s*\(([^)]*)\)"),
)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_DEPENDENCY_SECTIONS = (
    "dependencies",
    "devDependencies",
    "peerDependencies",
    "optionalDependencies",
)


def select_resolver(block: ConflictBlock, conflict_type: ConflictType) -> ResolverKind:
    if block.kind is BlockKind.IMPORT:
        return ResolverKind.MERGE_IMPORTS
    if block.kind is BlockKind.DEPENDENCY:
        return ResolverKind.MERGE_DEPENDENCIES
    if block.kind is BlockKind.CODE:
        return ResolverKind.ANALYZE_FUNCTION
    if block.kind is BlockKind.UNKNOWN:
        if conflict_type is ConflictType.CONFIG:
            return ResolverKind.MERGE_CONFIG
        return ResolverKind.MANUAL
    raise ValueError(f"Unhandled block kind: {block.kind}")


class ConflictResolver:
    """Produce resolution suggestions for classified conflict blocks."""

    def __init__(self, thresholds: Optional[ConflictThresholds] = None) -> None:
        self.thresholds = thresholds or ConflictThresholds()

    def resolve(
        self, block: ConflictBlock, index: int, conflict_type: ConflictType
    ) -> Resolution:
        kind = select_resolver(block, conflict_type)
        if kind is ResolverKind.MERGE_IMPORTS:
            return self.merge_imports(block, index)
        if kind is ResolverKind.MERGE_DEPENDENCIES:
            return self.merge_dependencies(block, index)
        if kind is ResolverKind.MERGE_CONFIG:
            return self.merge_config(block, index)
        if kind is ResolverKind.ANALYZE_FUNCTION:
            return self.analyze_function(block, index)
        if kind is ResolverKind.MANUAL:
            return self.manual(block, index)
        raise ValueError(f"Resolver {kind} is not applicable to a single block")

    # ── imports ───────────────────────────────────────────────────

    @staticmethod
    def _is_import_line(line: str) -> bool:
        stripped = line.strip()
        return (
            stripped.startswith("import ")
            or (stripped.startswith("from ") and " import " in stripped)
            or "require(" in stripped
        )

    def merge_imports(self, block: ConflictBlock, index: int) -> Resolution:
        merged: list[str] = []
        other: list[str] = []
        seen = set()
        for line in block.head + block.incoming:
            if not self._is_import_line(line):
                if line.strip():
                    other.append(line)
                continue
            key = line.strip()
            if key in seen:
                continue
            seen.add(key)
            merged.append(line)
        if other:
            # Code lines beside the imports are not merged.
            return Resolution(
                file=block.file,
                block_index=index,
                resolver=ResolverKind.MERGE_IMPORTS,
                outcome=Outcome.MANUAL,
                confidence=self.thresholds.mixed_import_confidence,
                description="Merged import statements; non-import lines need manual review",
                requires_manual_review=True,
                resolution=merged,
                details={"unmerged_lines": [line.strip() for line in other]},
            )
        return Resolution(
            file=block.file,
            block_index=index,
            resolver=ResolverKind.MERGE_IMPORTS,
            outcome=Outcome.AUTOMATIC,
            confidence=self.thresholds.import_confidence,
            description="Merged import statements from both sides",
            resolution=merged,
        )

    # ── dependency manifests ──────────────────────────────────────

    def merge_dependencies(self, block: ConflictBlock, index: int) -> Resolution:
        try:
            head = parse_manifest_fragment("\n".join(block.head), f"{block.file} (head)")
            incoming = parse_manifest_fragment(
                "\n".join(block.incoming), f"{block.file} (incoming)"
            )
        except ManifestParseError as e:
            logger.debug("Dependency merge fell back to manual: %s", e)
            return Resolution(
                file=block.file,
                block_index=index,
                resolver=ResolverKind.MERGE_DEPENDENCIES,
                outcome=Outcome.MANUAL,
                confidence=self.thresholds.dependency_parse_failure_confidence,
                description="Failed to parse dependency files - manual review required",
                requires_manual_review=True,
                details={"error": e.reason},
            )

        unresolved: list[str] = []
        merged = _merge_versions(head, incoming, unresolved, prefix="")
        if unresolved:
            return Resolution(
                file=block.file,
                block_index=index,
                resolver=ResolverKind.MERGE_DEPENDENCIES,
                outcome=Outcome.MANUAL,
                confidence=self.thresholds.dependency_partial_confidence,
                description="Merged dependencies; some versions could not be compared",
                resolution=merged,
                requires_manual_review=True,
                details={"unresolved": unresolved},
            )
        return Resolution(
            file=block.file,
            block_index=index,
            resolver=ResolverKind.MERGE_DEPENDENCIES,
            outcome=Outcome.AUTOMATIC,
            confidence=self.thresholds.dependency_confidence,
            description="Merged dependencies keeping the higher version of each package",
            resolution=merged,
        )

    # ── config / code / fallback ──────────────────────────────────

    def merge_config(self, block: ConflictBlock, index: int) -> Resolution:
        return Resolution(
            file=block.file,
            block_index=index,
            resolver=ResolverKind.MERGE_CONFIG,
            outcome=Outcome.MANUAL,
            confidence=self.thresholds.config_confidence,
            description="Review configuration changes manually",
            requires_manual_review=True,
        )

    def analyze_function(self, block: ConflictBlock, index: int) -> Resolution:
        head_sigs = extract_signatures("\n".join(block.head))
        incoming_sigs = extract_signatures("\n".join(block.incoming))
        shared = [name for name in head_sigs if name in incoming_sigs]
        if shared:
            return Resolution(
                file=block.file,
                block_index=index,
                resolver=ResolverKind.ANALYZE_FUNCTION,
                outcome=Outcome.SIGNATURE_CHANGE,
                confidence=self.thresholds.signature_confidence,
                description="Function signature changed - review parameters and return type",
                requires_manual_review=True,
                details={
                    "functions": shared,
                    "head": {n: head_sigs[n] for n in shared},
                    "incoming": {n: incoming_sigs[n] for n in shared},
                },
            )
        return Resolution(
            file=block.file,
            block_index=index,
            resolver=ResolverKind.ANALYZE_FUNCTION,
            outcome=Outcome.MANUAL,
            confidence=self.thresholds.function_manual_confidence,
            description="Code conflict - manual review required",
            requires_manual_review=True,
        )

    def manual(self, block: ConflictBlock, index: int) -> Resolution:
        return Resolution(
            file=block.file,
            block_index=index,
            resolver=ResolverKind.MANUAL,
            outcome=Outcome.MANUAL,
            confidence=self.thresholds.manual_confidence,
            description="Manual review required",
            requires_manual_review=True,
        )


def extract_signatures(text: str) -> dict[str, str]:
    """Map function name -> parameter list for JS and Python definitions."""
    signatures: dict[str, str] = {}
    for regex in _SIGNATURE_RES:
        for m in regex.finditer(text):
            signatures.setdefault(m.group(1), m.group(2).strip())
    return signatures


def parse_manifest_fragment(text: str, source: str) -> dict[str, Any]:
    """Parse one side of a manifest conflict as a JSON object.

    A bare list of ``"key": value`` members (the usual shape of a conflict
    region) is wrapped in braces first.

    Raises:
        ManifestParseError: If neither form parses to an object.
    """
    stripped = text.strip()
    if not stripped:
        return {}
    candidates = [stripped, "{" + stripped.rstrip(",") + "}"]
    last_error = "not a JSON object"
    for candidate in candidates:
        try:
            data = json.loads(_TRAILING_COMMA_RE.sub(r"\1", candidate))
        except json.JSONDecodeError as e:
            last_error = str(e)
            continue
        if isinstance(data, dict):
            return data
    raise ManifestParseError(source, last_error)


def version_key(version: Any) -> Optional[tuple[int, ...]]:
    """Numeric sort key for a version spec, or None if it has no numbers.

    Non-digit, non-dot characters are dropped first, so ``^4.17.1`` -> (4, 17, 1).
    """
    if not isinstance(version, str):
        return None
    cleaned = re.sub(r"[^\d.]", "", version)
    parts = [p for p in cleaned.split(".") if p]
    if not parts:
        return None
    return tuple(int(p) for p in parts)


def compare_versions(a: Any, b: Any) -> Optional[int]:
    """Return 1 if a > b, -1 if a < b, 0 if equal, None if not comparable."""
    ka, kb = version_key(a), version_key(b)
    if ka is None or kb is None:
        return None
    length = max(len(ka), len(kb))
    ka += (0,) * (length - len(ka))
    kb += (0,) * (length - len(kb))
    return (ka > kb) - (ka < kb)


def _merge_versions(
    head: dict[str, Any], incoming: dict[str, Any], unresolved: list[str], prefix: str
) -> dict[str, Any]:
    merged = dict(head)
    for name, theirs in incoming.items():
        label = f"{prefix}{name}"
        if name not in merged:
            merged[name] = theirs
            continue
        ours = merged[name]
        if ours == theirs:
            continue
        if isinstance(ours, dict) and isinstance(theirs, dict):
            if name in _DEPENDENCY_SECTIONS or not prefix:
                merged[name] = _merge_versions(ours, theirs, unresolved, prefix=f"{label}.")
            else:
                unresolved.append(label)
            continue
        order = compare_versions(ours, theirs)
        if order is None:
            unresolved.append(label)
        elif order < 0:
            merged[name] = theirs
    return merged
