"""Migration planning for individual upstream commits."""

from .models import MigrationPlan, Phase, PlanRisk, RollbackPlan
from .planner import MigrationPlanner, learn_adaptation_pattern

__all__ = [
    "MigrationPlanner",
    "learn_adaptation_pattern",
    "MigrationPlan",
    "Phase",
    "PlanRisk",
    "RollbackPlan",
]
