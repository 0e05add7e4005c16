"""Data models for header rules, findings and scan results."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Mapping, Optional


class Severity(Enum):
    INFO = "info"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = (Severity.INFO, Severity.LOW, Severity.MEDIUM, Severity.HIGH)


class Category(Enum):
    ESSENTIAL = "essential"
    ADVANCED = "advanced"
    CORS = "cors"
    COOKIE = "cookie"
    DISCLOSURE = "disclosure"


SCORED_CATEGORIES = (Category.ESSENTIAL, Category.ADVANCED, Category.CORS)


class Status(Enum):
    MISSING = "missing"
    PRESENT = "present"
    MISCONFIGURED = "misconfigured"
    DANGEROUS = "dangerous"


@dataclass(frozen=True)
class ConfigIssue:
    """Problem reported by a configuration validator."""
    issue: str
    recommendation: str
    severity: Optional[Severity] = None


# (value, normalized headers) -> issue or None
Validator = Callable[[str, Mapping[str, Any]], Optional[ConfigIssue]]


@dataclass(frozen=True)
class HeaderRule:
    """A recognised response header and how it is scored."""
    key: str
    name: str
    description: str
    recommendation: str
    severity: Severity
    category: Category
    weight: float = 0
    validator: Optional[Validator] = None
    example: Optional[str] = None

    @property
    def scored(self) -> bool:
        return self.category in SCORED_CATEGORIES


@dataclass(frozen=True)
class CookieIssue:
    kind: str
    description: str
    recommendation: str
    severity: Severity

    def to_dict(self) -> dict:
        return {
            "type": self.kind,
            "description": self.description,
            "recommendation": self.recommendation,
            "severity": self.severity.value,
        }


@dataclass(frozen=True)
class Finding:
    """One observation about a header or cookie."""
    header: str
    status: Status
    severity: Severity
    category: Category
    weight: float = 0
    points_earned: float = 0
    value: Optional[str] = None
    description: Optional[str] = None
    issue: Optional[str] = None
    recommendation: Optional[str] = None
    cookie: Optional[str] = None
    issues: tuple[CookieIssue, ...] = ()

    def to_dict(self) -> dict:
        data = {
            "header": self.header,
            "status": self.status.value,
            "severity": self.severity.value,
            "category": self.category.value,
            "weight": self.weight,
            "points_earned": self.points_earned,
            "value": self.value,
            "description": self.description,
            "issue": self.issue,
            "recommendation": self.recommendation,
        }
        if self.cookie is not None:
            data["cookie"] = self.cookie
            data["issues"] = [i.to_dict() for i in self.issues]
        return data


@dataclass(frozen=True)
class CategoryScore:
    earned: float
    total: float
    weighted: float

    def to_dict(self) -> dict:
        return {"earned": self.earned, "total": self.total, "weighted": self.weighted}


@dataclass(frozen=True)
class ScoreBreakdown:
    essential: CategoryScore
    advanced: CategoryScore
    cors: CategoryScore
    disclosure_penalty: float = 0
    cookie_penalty: float = 0
    raw_score: float = 0

    def category(self, category: Category) -> CategoryScore:
        return getattr(self, category.value)

    def to_dict(self) -> dict:
        return {
            "essential": self.essential.to_dict(),
            "advanced": self.advanced.to_dict(),
            "cors": self.cors.to_dict(),
            "penalties": {
                "disclosure": self.disclosure_penalty,
                "cookies": self.cookie_penalty,
            },
            "raw_score": self.raw_score,
        }


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ScanResult:
    """Aggregated, immutable result of evaluating one response."""
    target: str
    status_code: Optional[int] = None
    headers: Mapping[str, Any] = field(default_factory=dict)
    findings: tuple[Finding, ...] = ()
    score: int = 0
    grade: str = "F"
    breakdown: Optional[ScoreBreakdown] = None
    timestamp: str = field(default_factory=utc_timestamp)
    error: Optional[str] = None

    @classmethod
    def from_error(cls, target: str, message: str) -> "ScanResult":
        """Degenerate result for a target that could not be fetched."""
        return cls(target=target, score=0, grade="F", error=message)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def high_count(self) -> int:
        return sum(1 for f in self.findings if f.severity == Severity.HIGH)

    @property
    def medium_count(self) -> int:
        return sum(1 for f in self.findings if f.severity == Severity.MEDIUM)

    @property
    def low_count(self) -> int:
        return sum(1 for f in self.findings if f.severity == Severity.LOW)

    @property
    def info_count(self) -> int:
        return sum(1 for f in self.findings if f.severity == Severity.INFO)

    def count_by_status(self, status: Status) -> int:
        return sum(1 for f in self.findings if f.status == status)

    def to_dict(self) -> dict:
        headers = {k: list(v) if isinstance(v, tuple) else v for k, v in self.headers.items()}
        return {
            "url": self.target,
            "status": "error" if self.error else "ok",
            "status_code": self.status_code,
            "timestamp": self.timestamp,
            "headers": headers,
            "findings": [f.to_dict() for f in self.findings],
            "score": self.score,
            "grade": self.grade,
            "score_breakdown": self.breakdown.to_dict() if self.breakdown else None,
            "error": self.error,
        }


@dataclass(frozen=True)
class AnalyzerResult:
    """Findings from a cross-cutting analyzer and the capped penalty they carry."""
    findings: tuple[Finding, ...] = ()
    penalty: float = 0
