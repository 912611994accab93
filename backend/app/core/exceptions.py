"""
Domain exceptions for SEOPulse.
"""


class SEOPulseError(Exception):
    """Base class for all SEOPulse errors."""


class PageRenderError(SEOPulseError):
    """A single page could not be rendered (timeout, DNS, TLS, non-HTML)."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to render {url}: {reason}")


class AuditJobNotFound(SEOPulseError):
    """Audit job does not exist in the store."""

    def __init__(self, job_id):
        self.job_id = job_id
        super().__init__(f"Audit job {job_id} not found")


class InvalidStatusTransition(SEOPulseError):
    """Audit job status change that the lifecycle does not allow."""

    def __init__(self, job_id, current, requested):
        self.job_id = job_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Audit job {job_id} cannot move from {current.value} to {requested.value}"
        )


class InvalidAuditRequest(SEOPulseError):
    """Audit submission failed validation."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class AuditIssueNotFound(SEOPulseError):
    """Audit issue does not exist in the store."""

    def __init__(self, issue_id):
        self.issue_id = issue_id
        super().__init__(f"Audit issue {issue_id} not found")
