"""
External service integrations for SEOPulse.

- pagespeed: Google PageSpeed Insights for the performance score
"""

from app.integrations.pagespeed import PageSpeedClient

__all__ = [
    "PageSpeedClient",
]
