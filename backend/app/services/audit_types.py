"""
Core audit records shared by the crawler, detector, scorer and pipeline.

All records are frozen: a page's signals and issues never change after
they are produced, and an AuditResult is immutable once built.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from uuid import UUID


class IssueSeverity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    NOTICE = "notice"


SEVERITY_RANK = {
    IssueSeverity.CRITICAL: 0,
    IssueSeverity.WARNING: 1,
    IssueSeverity.NOTICE: 2,
}


class IssueType(str, Enum):
    MISSING_TITLE = "missing_title"
    SHORT_TITLE = "short_title"
    LONG_TITLE = "long_title"
    MISSING_META_DESCRIPTION = "missing_meta_description"
    SHORT_META_DESCRIPTION = "short_meta_description"
    MISSING_H1 = "missing_h1"
    MULTIPLE_H1 = "multiple_h1"
    IMAGES_MISSING_ALT = "images_missing_alt"
    LOW_WORD_COUNT = "low_word_count"
    MISSING_SCHEMA = "missing_schema"
    NOT_MOBILE_FRIENDLY = "not_mobile_friendly"
    SLOW_LOAD_TIME = "slow_load_time"


class EffortLevel(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class ImpactLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class RenderedPage:
    """What the render capability hands back for one URL."""
    url: str
    final_url: str
    status_code: int
    html: str
    load_time_ms: int
    headers: dict = field(default_factory=dict)
    # document.body.innerText when the renderer can evaluate scripts
    visible_text: str | None = None


@dataclass(frozen=True)
class Heading:
    level: int
    text: str


@dataclass(frozen=True)
class ImageInfo:
    src: str
    alt: str = ""
    alt_present: bool = False


@dataclass(frozen=True)
class PageSignals:
    url: str
    final_url: str
    status_code: int
    title: str = ""
    title_length: int = 0
    meta_description: str | None = None
    meta_description_length: int = 0
    headings: tuple[Heading, ...] = ()
    word_count: int = 0
    load_time_ms: int = 0
    mobile_friendly: bool = False
    has_schema: bool = False
    internal_links: tuple[str, ...] = ()
    external_links: tuple[str, ...] = ()
    images: tuple[ImageInfo, ...] = ()

    @property
    def h1(self) -> list[str]:
        return [h.text for h in self.headings if h.level == 1]

    @property
    def h2(self) -> list[str]:
        return [h.text for h in self.headings if h.level == 2]

    @property
    def h3(self) -> list[str]:
        return [h.text for h in self.headings if h.level == 3]

    @property
    def images_without_alt(self) -> int:
        return sum(1 for img in self.images if not img.alt_present)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Issue:
    """A finding on a single page, before site-wide aggregation."""
    type: str
    severity: IssueSeverity
    title: str
    description: str
    affected_pages: tuple[str, ...] = ()


@dataclass(frozen=True)
class CrawledPage:
    signals: PageSignals
    issues: tuple[Issue, ...] = ()

    @property
    def url(self) -> str:
        return self.signals.url


@dataclass(frozen=True)
class Recommendation:
    title: str
    description: str
    effort_level: EffortLevel
    impact_level: ImpactLevel
    fix_guide: str
    external_resources: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class AggregatedIssue:
    """Site-wide issue group keyed by (type, severity)."""
    type: str
    severity: IssueSeverity
    title: str
    description: str
    affected_pages: tuple[str, ...]
    affected_count: int
    recommendation: Recommendation | None = None

    @property
    def key(self) -> tuple[str, IssueSeverity]:
        return (self.type, self.severity)


@dataclass(frozen=True)
class PageDetail:
    """Per-page summary row stored alongside the audit."""
    url: str
    status_code: int
    title: str
    meta_description: str | None
    h1_tags: tuple[str, ...]
    word_count: int
    load_time_seconds: float
    mobile_friendly: bool
    has_schema: bool
    internal_links_count: int
    external_links_count: int
    images_count: int
    images_without_alt: int

    @classmethod
    def from_signals(cls, signals: PageSignals) -> "PageDetail":
        return cls(
            url=signals.url,
            status_code=signals.status_code,
            title=signals.title,
            meta_description=signals.meta_description,
            h1_tags=tuple(signals.h1),
            word_count=signals.word_count,
            load_time_seconds=round(signals.load_time_ms / 1000, 2),
            mobile_friendly=signals.mobile_friendly,
            has_schema=signals.has_schema,
            internal_links_count=len(signals.internal_links),
            external_links_count=len(signals.external_links),
            images_count=len(signals.images),
            images_without_alt=signals.images_without_alt,
        )


@dataclass(frozen=True)
class ScoreComponent:
    weight: float
    score: float
    contribution: float


@dataclass(frozen=True)
class HealthScoreBreakdown:
    overall_score: int
    critical_score: int
    warning_score: int
    notice_score: int
    performance_score: float
    breakdown: dict[str, ScoreComponent]
    grade: str
    interpretation: str
    action_required: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class AuditResult:
    job_id: UUID
    health_score: int
    health: HealthScoreBreakdown
    total_pages_crawled: int
    critical_count: int
    warning_count: int
    notice_count: int
    issues: tuple[AggregatedIssue, ...] = ()
    pages: tuple[PageDetail, ...] = ()

    def issues_by_severity(self, severity: IssueSeverity) -> list[AggregatedIssue]:
        return [i for i in self.issues if i.severity == severity]
