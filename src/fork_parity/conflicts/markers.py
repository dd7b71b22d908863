"""Merge-marker extraction and conflict classification."""

from pathlib import PurePosixPath

from ..impact.patterns import is_package_file
from .models import BlockKind, ConflictBlock, ConflictType

HEAD_MARKER = "<<<<<<<"
BASE_MARKER = "|||||||"
SPLIT_MARKER = "======="
INCOMING_MARKER = ">>>>>>>"

_CODE_EXTENSIONS = frozenset({".js", ".ts", ".jsx", ".tsx", ".mjs", ".cjs", ".py"})
_STYLE_EXTENSIONS = frozenset({".css", ".scss", ".less"})
_DOC_EXTENSIONS = frozenset({".md", ".txt", ".rst"})


def extract_blocks(path: str, content: str) -> list[ConflictBlock]:
    """Return every complete conflict region in *content*.

    diff3-style base sections (``|||||||``) are skipped. A region missing its
    closing marker is dropped.
    """
    blocks: list[ConflictBlock] = []
    current = None
    section = None

    for lineno, line in enumerate(content.splitlines(), start=1):
        if line.startswith(HEAD_MARKER):
            current = ConflictBlock(file=path, start_line=lineno)
            section = "head"
        elif current is None:
            continue
        elif line.startswith(BASE_MARKER):
            section = "base"
        elif line.startswith(SPLIT_MARKER):
            section = "incoming"
        elif line.startswith(INCOMING_MARKER):
            current.kind = classify_block(current, path)
            blocks.append(current)
            current = None
            section = None
        elif section == "head":
            current.head.append(line)
        elif section == "incoming":
            current.incoming.append(line)

    return blocks


def classify_block(block: ConflictBlock, path: str = "") -> BlockKind:
    text = block.text
    if "import " in text or "require(" in text:
        return BlockKind.IMPORT
    if "function " in text or "const " in text or "let " in text:
        return BlockKind.CODE
    if "dependencies" in text or "package.json" in text or (path and is_package_file(path)):
        return BlockKind.DEPENDENCY
    return BlockKind.UNKNOWN


def conflict_type_for_path(path: str) -> ConflictType:
    lowered = path.lower()
    suffix = PurePosixPath(lowered).suffix
    if is_package_file(path):
        return ConflictType.DEPENDENCY
    if "config" in lowered or ".env" in lowered:
        return ConflictType.CONFIG
    if suffix in _CODE_EXTENSIONS:
        return ConflictType.CODE
    if suffix in _STYLE_EXTENSIONS:
        return ConflictType.STYLE
    if suffix in _DOC_EXTENSIONS:
        return ConflictType.DOCUMENTATION
    return ConflictType.OTHER


def resolution_complexity(blocks: list[ConflictBlock]) -> str:
    if not blocks:
        return "none"
    if len(blocks) == 1 and len(blocks[0].head) <= 3:
        return "simple"
    if len(blocks) <= 3 and all(len(b.head) <= 10 for b in blocks):
        return "moderate"
    return "complex"


FILE_SUGGESTIONS = {
    ConflictType.DEPENDENCY: [
        "Merge dependency manifests and regenerate lock files",
        "Keep the higher compatible version of each package",
    ],
    ConflictType.CONFIG: [
        "Review configuration changes manually",
        "Prioritize security settings when merging values",
    ],
    ConflictType.CODE: [
        "Use three-way merge tool to resolve conflicts",
        "Review both implementations for best approach",
    ],
    ConflictType.STYLE: [
        "Keep both rule sets and check for overridden selectors",
    ],
    ConflictType.DOCUMENTATION: [
        "Combine both versions of the text",
    ],
}

DEFAULT_FILE_SUGGESTIONS = [
    "Manual review required",
    "Consider keeping both versions if applicable",
]
