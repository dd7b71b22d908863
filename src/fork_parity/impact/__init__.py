"""Impact analysis: dependency propagation and pattern scans."""

from .analyzer import ANALYSIS_KINDS, ImpactAnalyzer
from .graph import DependencyGraph, bounded_bfs, build_dependency_graph
from .models import (
    AnalysisResults,
    BreakingChangeReport,
    Complexity,
    CriticalPath,
    DependencyImpact,
    Finding,
    PerformanceReport,
    PerformanceVerdict,
    SecurityReport,
)
from .patterns import DEFAULT_IMPACT_CATALOG, ImpactCatalog, ScanCategory

__all__ = [
    "ANALYSIS_KINDS",
    "ImpactAnalyzer",
    "ImpactCatalog",
    "ScanCategory",
    "DEFAULT_IMPACT_CATALOG",
    "DependencyGraph",
    "bounded_bfs",
    "build_dependency_graph",
    "AnalysisResults",
    "BreakingChangeReport",
    "Complexity",
    "CriticalPath",
    "DependencyImpact",
    "Finding",
    "PerformanceReport",
    "PerformanceVerdict",
    "SecurityReport",
]
