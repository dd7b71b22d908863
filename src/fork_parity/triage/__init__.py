"""Commit triage: rule tables and the classifier."""

from .engine import TriageEngine
from .models import IntegrationPlan, IntegrationSummary, TriagedCommit
from .patterns import DEFAULT_CATALOG, CategoryRule, EffortBucket, TriageCatalog

__all__ = [
    "TriageEngine",
    "TriageCatalog",
    "CategoryRule",
    "EffortBucket",
    "DEFAULT_CATALOG",
    "TriagedCommit",
    "IntegrationPlan",
    "IntegrationSummary",
]
