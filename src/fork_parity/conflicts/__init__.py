"""Merge-conflict detection and resolution suggestions."""

from .analyzer import ConflictAnalyzer, format_duration
from .markers import classify_block, conflict_type_for_path, extract_blocks
from .models import (
    Approach,
    BlockKind,
    ChangeCost,
    ConflictAnalysis,
    ConflictBlock,
    ConflictType,
    FileConflict,
    Outcome,
    Resolution,
    ResolverKind,
)
from .resolvers import ConflictResolver, compare_versions, select_resolver
from .similarity import (
    FileSimilarity,
    SimilarChange,
    SimilarityAnalysis,
    analyze_similarity,
    file_similarity,
    find_similar_changes,
)

__all__ = [
    "ConflictAnalyzer",
    "ConflictResolver",
    "format_duration",
    "classify_block",
    "conflict_type_for_path",
    "extract_blocks",
    "compare_versions",
    "select_resolver",
    "analyze_similarity",
    "file_similarity",
    "find_similar_changes",
    "Approach",
    "BlockKind",
    "ChangeCost",
    "ConflictAnalysis",
    "ConflictBlock",
    "ConflictType",
    "FileConflict",
    "FileSimilarity",
    "Outcome",
    "Resolution",
    "ResolverKind",
    "SimilarChange",
    "SimilarityAnalysis",
]
