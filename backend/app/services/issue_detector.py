"""
SEOPulse Issue Detector

Applies the on-page rule set to one page's signals:
1. Title (missing / short / long)
2. Meta description (missing / short)
3. H1 headings (missing / multiple)
4. Image alt attributes
5. Content length
6. Structured data
7. Mobile viewport
8. Load time

Rules are independent and all evaluated, so one page can yield several issues.
"""

import logging

from app.services.audit_types import Issue, IssueSeverity, IssueType, PageSignals

logger = logging.getLogger(__name__)


class IssueDetector:
    """Stateless per-page issue rules."""

    MIN_TITLE_LENGTH = 30
    MAX_TITLE_LENGTH = 60
    MIN_META_DESCRIPTION_LENGTH = 120
    MIN_WORD_COUNT = 300
    MAX_LOAD_TIME_MS = 3000

    def detect(self, signals: PageSignals) -> list[Issue]:
        issues: list[Issue] = []
        url = signals.url

        def add(issue_type: IssueType, severity: IssueSeverity, title: str, description: str):
            issues.append(Issue(
                type=issue_type.value,
                severity=severity,
                title=title,
                description=description,
                affected_pages=(url,),
            ))

        # Check 1: Missing title
        title_length = len(signals.title) if signals.title else 0
        if title_length == 0:
            add(IssueType.MISSING_TITLE, IssueSeverity.CRITICAL,
                "Missing Page Title", "Page is missing a title tag")

        # Check 2-3: Title length
        if 0 < title_length < self.MIN_TITLE_LENGTH:
            add(IssueType.SHORT_TITLE, IssueSeverity.WARNING,
                "Title Tag Too Short",
                f"Title is only {title_length} characters. Recommended: 50-60 characters")
        elif title_length > self.MAX_TITLE_LENGTH:
            add(IssueType.LONG_TITLE, IssueSeverity.WARNING,
                "Title Tag Too Long",
                f"Title is {title_length} characters. Recommended: 50-60 characters")

        # Check 4: Missing meta description (absent and empty are treated alike)
        meta = signals.meta_description
        if not meta:
            add(IssueType.MISSING_META_DESCRIPTION, IssueSeverity.CRITICAL,
                "Missing Meta Description", "Page is missing a meta description")

        # Check 5: Short meta description, only when a value exists
        if meta and len(meta) < self.MIN_META_DESCRIPTION_LENGTH:
            add(IssueType.SHORT_META_DESCRIPTION, IssueSeverity.WARNING,
                "Meta Description Too Short",
                f"Meta description is {len(meta)} characters. Recommended: 150-160 characters")

        # Check 6-7: H1 count
        h1_count = len(signals.h1)
        if h1_count == 0:
            add(IssueType.MISSING_H1, IssueSeverity.CRITICAL,
                "Missing H1 Tag", "Page is missing an H1 heading tag")
        if h1_count > 1:
            add(IssueType.MULTIPLE_H1, IssueSeverity.WARNING,
                "Multiple H1 Tags",
                f"Page has {h1_count} H1 tags. Best practice is to have only one H1 per page")

        # Check 8: Images without alt attribute
        missing_alt = signals.images_without_alt
        if missing_alt > 0:
            add(IssueType.IMAGES_MISSING_ALT, IssueSeverity.WARNING,
                "Images Missing Alt Text", f"{missing_alt} images are missing alt text")

        # Check 9: Thin content
        if signals.word_count < self.MIN_WORD_COUNT:
            add(IssueType.LOW_WORD_COUNT, IssueSeverity.NOTICE,
                "Low Word Count",
                f"Page has only {signals.word_count} words. Recommended: at least 300 words for better SEO")

        # Check 10: Structured data
        if not signals.has_schema:
            add(IssueType.MISSING_SCHEMA, IssueSeverity.NOTICE,
                "Missing Schema Markup", "Page does not have structured data (Schema.org) markup")

        # Check 11: Mobile viewport
        if not signals.mobile_friendly:
            add(IssueType.NOT_MOBILE_FRIENDLY, IssueSeverity.CRITICAL,
                "Not Mobile Friendly", "Page is not optimized for mobile devices")

        # Check 12: Load time
        if signals.load_time_ms > self.MAX_LOAD_TIME_MS:
            add(IssueType.SLOW_LOAD_TIME, IssueSeverity.WARNING,
                "Slow Page Load Time",
                f"Page load time is {signals.load_time_ms / 1000:.2f}s. Recommended: under 3 seconds")

        logger.debug(f"{url}: {len(issues)} issues detected")
        return issues
