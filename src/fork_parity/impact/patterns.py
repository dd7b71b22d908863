"""Regex catalogs for the breaking-change, security and performance scans.

Each ``ScanCategory`` carries a fixed severity (or impact tier) and its
compiled patterns. The tables are immutable module data handed to
``ImpactAnalyzer`` at construction.
"""

import re
from dataclasses import dataclass

from ..models import Severity

_I = re.IGNORECASE


@dataclass(frozen=True)
class ScanCategory:
    name: str
    severity: Severity
    patterns: tuple
    description: str = ""


def _category(name, severity, patterns, flags=0, description=""):
    return ScanCategory(
        name=name,
        severity=severity,
        patterns=tuple(re.compile(p, flags) for p in patterns),
        description=description,
    )


# ── breaking changes ──────────────────────────────────────────────

BREAKING_CATEGORIES = (
    _category(
        "api",
        Severity.HIGH,
        [
            r"export\s+(function|class|interface|type)\s+(\w+)",
            r"export\s+\{[^}]+\}",
            r"export\s+default",
            r"public\s+(function|class|method)\s+(\w+)",
            r"interface\s+(\w+)",
            r"type\s+(\w+)\s*=",
            r"__all__\s*=",
        ],
        description="Public API surface changed",
    ),
    _category(
        "database",
        Severity.CRITICAL,
        [
            r"CREATE\s+TABLE",
            r"ALTER\s+TABLE",
            r"DROP\s+TABLE",
            r"ADD\s+COLUMN",
            r"DROP\s+COLUMN",
            r"CREATE\s+INDEX",
            r"migration",
        ],
        _I,
        description="Database schema changed",
    ),
    _category(
        "config",
        Severity.MEDIUM,
        [r"config\.", r"process\.env\.", r"\.env", r"settings\.", r"configuration"],
        _I,
        description="Configuration access changed",
    ),
    _category(
        "dependencies",
        Severity.MEDIUM,
        [
            r'"dependencies":',
            r'"devDependencies":',
            r"require\(",
            r"import.*from",
            r"package\.json",
        ],
        _I,
        description="Dependency declarations changed",
    ),
)

BREAKING_KEYWORDS = ("breaking", "breaking change", "breaking:", "major:", "incompatible")

VERSION_FILE_MARKERS = ("package.json", "version", "changelog", "pyproject.toml", "setup.py")

# ── security ──────────────────────────────────────────────────────

SECURITY_CATEGORIES = (
    _category(
        "injection",
        Severity.CRITICAL,
        [
            r"eval\(",
            r"innerHTML\s*=",
            r"document\.write",
            r"\.exec\(",
            r"child_process",
            r"shell_exec",
            r"system\(",
        ],
        _I,
        description="Review for code injection vulnerabilities. Use parameterized queries.",
    ),
    _category(
        "authentication",
        Severity.HIGH,
        [r"password", r"auth", r"token", r"session", r"login", r"jwt", r"oauth", r"credential"],
        _I,
        description="Verify authentication flows and session handling remain secure.",
    ),
    _category(
        "cryptography",
        Severity.HIGH,
        [
            r"crypto",
            r"encrypt",
            r"decrypt",
            r"hash",
            r"salt",
            r"cipher",
            r"key",
            r"certificate",
        ],
        _I,
        description="Review cryptographic usage for weak algorithms and key handling.",
    ),
    _category(
        "data_exposure",
        Severity.MEDIUM,
        [
            r"console\.log",
            r"console\.error",
            r"console\.warn",
            r"console\.info",
            r"console\.debug",
            r"alert\(",
            r"confirm\(",
        ],
        _I,
        description="Remove debug output that may expose sensitive data.",
    ),
)

SECRET_PATTERNS = tuple(
    re.compile(p, _I)
    for p in (
        r"(?:password|pwd|pass)\s*[:=]\s*['\"`][^'\"`\s]{8,}['\"`]",
        r"(?:api[_-]?key|apikey)\s*[:=]\s*['\"`][^'\"`\s]{16,}['\"`]",
        r"(?:secret|token)\s*[:=]\s*['\"`][^'\"`\s]{16,}['\"`]",
        r"(?:private[_-]?key)\s*[:=]\s*['\"`][^'\"`\s]{32,}['\"`]",
    )
)

SECRET_RECOMMENDATION = "Move secrets to environment variables or secure vault"

SECURITY_KEYWORDS = ("security", "vulnerability", "cve", "exploit", "auth", "permission")

# area name -> path substrings
SECURITY_AREAS = (
    ("authentication", ("auth", "login", "session", "password")),
    ("database", ("db", "database", "sql", "query")),
    ("api", ("api", "endpoint", "route")),
    ("configuration", ("config", ".env", "settings")),
)

# ── performance ───────────────────────────────────────────────────

PERFORMANCE_CATEGORIES = (
    _category(
        "loops",
        Severity.MEDIUM,
        [r"for\s*\(", r"while\s*\(", r"forEach", r"map\(", r"filter\(", r"reduce\("],
        _I,
        description="Review loop complexity and consider early exits or batching.",
    ),
    _category(
        "database",
        Severity.HIGH,
        [
            r"SELECT\s+\*",
            r"JOIN",
            r"GROUP\s+BY",
            r"ORDER\s+BY",
            r"LIMIT",
            r"query",
            r"findAll",
            r"aggregate",
        ],
        _I,
        description="Check query plans and add indexes for new query patterns.",
    ),
    _category(
        "memory",
        Severity.MEDIUM,
        [
            r"new\s+Array",
            r"new\s+Object",
            r"JSON\.parse",
            r"JSON\.stringify",
            r"Buffer",
            r"malloc",
            r"alloc",
        ],
        _I,
        description="Profile memory usage for large allocations and serialization.",
    ),
    _category(
        "async",
        Severity.MEDIUM,
        [
            r"async\s+function",
            r"await",
            r"Promise",
            r"setTimeout",
            r"setInterval",
            r"callback",
        ],
        _I,
        description="Verify async flows for unbounded concurrency and missing awaits.",
    ),
)

# hotspot type, impact, path substrings, recommendation
PERFORMANCE_PATHS = (
    ("io", Severity.HIGH, ("database", "query", "orm", "sql"), "Benchmark database access paths."),
    ("memory", Severity.MEDIUM, ("cache", "memory", "buffer"), "Check cache sizing and eviction."),
    ("cpu", Severity.MEDIUM, ("algorithm", "sort", "search", "compute"), "Benchmark CPU-bound code."),
)

# module name, lower-cased path substrings
MODULE_AREAS = (
    ("core", ("core",)),
    ("api", ("api", "endpoint", "route")),
    ("ui", ("ui", "component", "view")),
    ("auth", ("auth", "login", "permission")),
    ("database", ("database", "db", "model")),
    ("config", ("config", "setting", ".env")),
    ("test", ("test", "spec")),
)

# ── dependency manifests ──────────────────────────────────────────

PACKAGE_FILES = frozenset(
    {
        "package.json",
        "package-lock.json",
        "yarn.lock",
        "pyproject.toml",
        "setup.py",
        "setup.cfg",
        "Pipfile",
        "Cargo.toml",
        "go.mod",
        "pom.xml",
        "composer.json",
    }
)


def is_package_file(path: str) -> bool:
    name = path.rsplit("/", 1)[-1]
    return name in PACKAGE_FILES or (name.startswith("requirements") and name.endswith(".txt"))


@dataclass(frozen=True)
class ImpactCatalog:
    """Bundle of the scan tables consumed by ``ImpactAnalyzer``."""

    breaking: tuple = BREAKING_CATEGORIES
    breaking_keywords: tuple = BREAKING_KEYWORDS
    version_markers: tuple = VERSION_FILE_MARKERS
    security: tuple = SECURITY_CATEGORIES
    secrets: tuple = SECRET_PATTERNS
    security_keywords: tuple = SECURITY_KEYWORDS
    security_areas: tuple = SECURITY_AREAS
    performance: tuple = PERFORMANCE_CATEGORIES
    performance_paths: tuple = PERFORMANCE_PATHS
    module_areas: tuple = MODULE_AREAS


DEFAULT_IMPACT_CATALOG = ImpactCatalog()
