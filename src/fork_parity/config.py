"""Configuration loading and management for Fork Parity.

Configuration sources are merged in priority order:
    1. Defaults (defined in ParityConfig and the nested threshold dataclasses)
    2. Global config (~/.fork-parity.toml)
    3. Project config (./fork-parity.toml)
    4. Explicit config file
    5. Environment variables (FORK_PARITY_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(git_timeout_seconds=30)
    >>> config.git_timeout_seconds
    30
    >>> config.triage.escalation_risk_threshold
    0.7
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError


@dataclass(frozen=True)
class TriageThresholds:
    """Tuning constants of the triage engine.

    Attributes:
        Category confidence:
            max_keyword_confidence: Cap on keyword-derived confidence
            keyword_bonus: Confidence added per extra matching keyword
            default_confidence: Confidence of the fallback chore classification

        Conflict risk:
            base_risk: Starting risk for every commit
            core_risk: Added when the core area is touched
            api_risk: Added when the api area is touched
            database_risk: Added when the database area is touched
            per_file_risk: Added per changed file
            max_file_risk: Cap on the per-file contribution
            contested_file_risk: Added when a commonly-contested file is touched

        Priority:
            escalation_risk_threshold: Risk above which priority escalates once
            reasoning_risk_threshold: Risk above which reasoning mentions it

        Integration plan:
            immediate_high_slots: High items pulled into the immediate bucket
            next_sprint_medium_slots: Medium items pulled into the next sprint
    """

    max_keyword_confidence: float = 0.9
    keyword_bonus: float = 0.1
    default_confidence: float = 0.3

    base_risk: float = 0.1
    core_risk: float = 0.3
    api_risk: float = 0.2
    database_risk: float = 0.25
    per_file_risk: float = 0.02
    max_file_risk: float = 0.3
    contested_file_risk: float = 0.15

    escalation_risk_threshold: float = 0.7
    reasoning_risk_threshold: float = 0.5

    immediate_high_slots: int = 3
    next_sprint_medium_slots: int = 5

    def __post_init__(self) -> None:
        unit_fields = [
            "max_keyword_confidence",
            "keyword_bonus",
            "default_confidence",
            "base_risk",
            "core_risk",
            "api_risk",
            "database_risk",
            "per_file_risk",
            "max_file_risk",
            "contested_file_risk",
            "escalation_risk_threshold",
            "reasoning_risk_threshold",
        ]
        for field_name in unit_fields:
            value = getattr(self, field_name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{field_name} must be between 0.0 and 1.0")
        if self.immediate_high_slots < 0 or self.next_sprint_medium_slots < 0:
            raise ValueError("integration plan slots must be non-negative")


@dataclass(frozen=True)
class ImpactThresholds:
    """Bounds and tiers for dependency traversal and the pattern scans."""

    max_depth: int = 5
    critical_dependents: int = 5
    max_critical_paths: int = 10
    max_source_files: int = 1000
    max_evidence: int = 5
    secret_preview_chars: int = 50

    # (radius, affected, critical paths) tiers
    very_high_radius: int = 4
    very_high_affected: int = 50
    very_high_critical: int = 5
    high_radius: int = 3
    high_affected: int = 20
    high_critical: int = 2
    medium_radius: int = 2
    medium_affected: int = 5

    # changed-line thresholds for the complexity-increase score
    complexity_lines: tuple[int, int, int] = (50, 200, 500)

    finding_count_escalation: int = 3

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        if self.max_source_files < 1:
            raise ValueError("max_source_files must be at least 1")
        if self.critical_dependents < 0:
            raise ValueError("critical_dependents must be non-negative")
        if list(self.complexity_lines) != sorted(self.complexity_lines):
            raise ValueError("complexity_lines must be ascending")


@dataclass(frozen=True)
class ConflictThresholds:
    """Confidence values and minute costs used by the conflict analyzer."""

    automatic_threshold: float = 0.7
    automated_rate: float = 0.8
    semi_automated_rate: float = 0.5

    import_confidence: float = 0.9
    mixed_import_confidence: float = 0.5
    dependency_confidence: float = 0.8
    dependency_partial_confidence: float = 0.5
    dependency_parse_failure_confidence: float = 0.3
    config_confidence: float = 0.5
    signature_confidence: float = 0.7
    function_manual_confidence: float = 0.4
    manual_confidence: float = 0.3
    pattern_success_confidence: float = 0.8
    pattern_failure_confidence: float = 0.6

    merge_conflict_minutes: int = 15
    signature_change_minutes: int = 30
    api_change_minutes: int = 60

    def __post_init__(self) -> None:
        for name, value in self.__dict__.items():
            if name.endswith("_minutes"):
                if value < 0:
                    raise ValueError(f"{name} must be non-negative")
            elif not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be between 0.0 and 1.0")


@dataclass(frozen=True)
class PlanningThresholds:
    """Effort and risk cut-offs for migration plans."""

    small_hours: float = 8
    medium_hours: float = 16
    large_hours: float = 32
    high_risk_score: int = 5
    medium_risk_score: int = 3

    def __post_init__(self) -> None:
        if not self.small_hours <= self.medium_hours <= self.large_hours:
            raise ValueError("effort hour thresholds must be ascending")
        if self.medium_risk_score > self.high_risk_score:
            raise ValueError("medium_risk_score must not exceed high_risk_score")


_SECTIONS = {
    "triage": TriageThresholds,
    "impact": ImpactThresholds,
    "conflicts": ConflictThresholds,
    "planning": PlanningThresholds,
}


@dataclass(frozen=True)
class ParityConfig:
    """Runtime configuration for the tracker and its analyzers.

    Attributes:
        db_dir: Directory (relative to the project root) holding parity.db
        upstream_remote: Name of the git remote that tracks upstream
        git_timeout_seconds: Timeout applied to every git subprocess
        max_file_size_mb: Files larger than this are skipped by the scans
        notification_config: Path of the JSON notification channel config
        dashboard_limit: Maximum actionable items on the dashboard
    """

    db_dir: str = ".fork-parity"
    upstream_remote: str = "upstream"
    git_timeout_seconds: int = 120
    max_file_size_mb: float = 2.0
    notification_config: str = "fork-parity-notifications.json"
    dashboard_limit: int = 20

    triage: TriageThresholds = field(default_factory=TriageThresholds)
    impact: ImpactThresholds = field(default_factory=ImpactThresholds)
    conflicts: ConflictThresholds = field(default_factory=ConflictThresholds)
    planning: PlanningThresholds = field(default_factory=PlanningThresholds)

    def __post_init__(self) -> None:
        if self.git_timeout_seconds < 1:
            raise ValueError("git_timeout_seconds must be at least 1")
        if self.max_file_size_mb <= 0:
            raise ValueError("max_file_size_mb must be positive")
        if self.dashboard_limit < 1:
            raise ValueError("dashboard_limit must be at least 1")
        if not self.upstream_remote:
            raise ValueError("upstream_remote must not be empty")

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return int(self.max_file_size_mb * 1024 * 1024)


def load_config(config_file: Optional[Path] = None, **overrides) -> ParityConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated ParityConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing
        InvalidConfigError: If a value fails validation
    """
    merged: dict = {}

    global_config = Path.home() / ".fork-parity.toml"
    if global_config.exists():
        _merge(merged, _read_config(global_config, "global"))

    project_config = Path.cwd() / "fork-parity.toml"
    if project_config.exists():
        _merge(merged, _read_config(project_config, "project"))

    if config_file is not None:
        if not Path(config_file).exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        _merge(merged, _read_config(Path(config_file), "explicit"))

    _merge(merged, _load_env_vars())
    _merge(merged, {k: v for k, v in overrides.items() if v is not None})

    for section, cls in _SECTIONS.items():
        value = merged.pop(section, None)
        if value is None or isinstance(value, cls):
            if value is not None:
                merged[section] = value
            continue
        if not isinstance(value, dict):
            raise InvalidConfigError(section, value, "expected a table")
        if "complexity_lines" in value:
            value["complexity_lines"] = tuple(value["complexity_lines"])
        try:
            merged[section] = cls(**value)
        except TypeError as e:
            raise ConfigurationError(f"Invalid [{section}] config: {e}")
        except ValueError as e:
            raise InvalidConfigError(section, value, str(e))

    try:
        return ParityConfig(**merged)
    except TypeError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")
    except ValueError as e:
        raise InvalidConfigError("config", merged, str(e))


def _merge(target: dict, source: dict) -> None:
    """Merge *source* into *target*, combining nested section tables."""
    for key, value in source.items():
        if key in _SECTIONS and isinstance(value, dict) and isinstance(target.get(key), dict):
            target[key] = {**target[key], **value}
        elif key in _SECTIONS and isinstance(value, dict):
            target[key] = dict(value)
        else:
            target[key] = value


def _read_config(path: Path, label: str) -> dict:
    try:
        return _load_toml_file(path)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Invalid {label} config '{path}': {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from FORK_PARITY_* environment variables.

    Top-level fields map directly (FORK_PARITY_GIT_TIMEOUT_SECONDS). Nested
    thresholds use the section name as an infix
    (FORK_PARITY_TRIAGE_ESCALATION_RISK_THRESHOLD).
    """
    result: dict[str, Any] = {}

    type_hints = get_type_hints(ParityConfig)
    for field_name in ParityConfig.__dataclass_fields__:
        if field_name in _SECTIONS:
            continue
        env_key = f"FORK_PARITY_{field_name.upper()}"
        parsed = _env_field(env_key, type_hints.get(field_name))
        if parsed is not None:
            result[field_name] = parsed

    for section, cls in _SECTIONS.items():
        section_hints = get_type_hints(cls)
        values = {}
        for field_name in cls.__dataclass_fields__:
            env_key = f"FORK_PARITY_{section.upper()}_{field_name.upper()}"
            parsed = _env_field(env_key, section_hints.get(field_name))
            if parsed is not None:
                values[field_name] = parsed
        if values:
            result[section] = values

    return result


def _env_field(env_key: str, type_hint: Any) -> Any:
    env_value = os.environ.get(env_key)
    if env_value is None or type_hint is None:
        return None
    try:
        return _parse_env_value(env_value, type_hint)
    except ValueError as e:
        raise ConfigurationError(f"Invalid {env_key}: {e}")


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Returns None for types that cannot be expressed as a single value.

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict."""
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
