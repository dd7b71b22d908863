"""
Fork Parity - keep a long-lived fork in step with its upstream

Pulls the upstream commits a fork is missing, triages each one by category,
priority, conflict risk and effort, and helps plan their integration:
dependency impact, breaking-change, security and performance scans, conflict
resolution suggestions and phased migration plans.
"""

__version__ = "0.1.0"

from .config import ParityConfig, load_config
from .conflicts import ConflictAnalyzer
from .exceptions import ForkParityError
from .impact import ImpactAnalyzer
from .models import Category, Commit, CommitState, Effort, Priority, TriageResult
from .planning import MigrationPlanner
from .tracker import ParityTracker
from .triage import TriageEngine

__all__ = [
    "ParityTracker",  # Main entry point
    "TriageEngine",
    "ImpactAnalyzer",
    "ConflictAnalyzer",
    "MigrationPlanner",
    "ParityConfig",
    "load_config",
    "ForkParityError",
    "Commit",
    "TriageResult",
    "Category",
    "Priority",
    "Effort",
    "CommitState",
]
