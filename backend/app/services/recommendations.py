"""
SEO Recommendations with Code Examples

Static fix guidance for every issue type the detector emits. The catalog is
built once per process and injected into the audit pipeline.
"""

from functools import lru_cache
from types import MappingProxyType
from typing import Iterable, Mapping

from app.services.audit_types import EffortLevel, ImpactLevel, IssueType, Recommendation


FALLBACK_RECOMMENDATION = Recommendation(
    title="Fix This Issue",
    description="This issue should be addressed to improve your SEO.",
    effort_level=EffortLevel.MEDIUM,
    impact_level=ImpactLevel.MEDIUM,
    fix_guide="Please consult SEO best practices for guidance on fixing this issue.",
    external_resources=("https://moz.com/learn/seo",),
)


class RecommendationCatalog:
    """Read-only issue type -> Recommendation table with a generic fallback."""

    def __init__(
        self,
        entries: Mapping[str, Recommendation],
        fallback: Recommendation = FALLBACK_RECOMMENDATION,
    ):
        self._entries = MappingProxyType(dict(entries))
        self._fallback = fallback

    def lookup(self, issue_type: str) -> Recommendation:
        """Return the recommendation for an issue type; unknown types get the fallback."""
        return self._entries.get(_type_key(issue_type), self._fallback)

    @property
    def fallback(self) -> Recommendation:
        return self._fallback

    def issue_types(self) -> Iterable[str]:
        return self._entries.keys()

    def __contains__(self, issue_type) -> bool:
        return _type_key(issue_type) in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def _type_key(issue_type) -> str:
    return issue_type.value if isinstance(issue_type, IssueType) else str(issue_type)


def build_default_catalog() -> RecommendationCatalog:
    entries = {
        # =========================================================================
        # Title
        # =========================================================================
        IssueType.MISSING_TITLE.value: Recommendation(
            title="Add a Unique Title Tag",
            description="Every page needs a unique, descriptive title tag that accurately represents the page content.",
            effort_level=EffortLevel.EASY,
            impact_level=ImpactLevel.HIGH,
            fix_guide="""1. Add a <title> tag inside the <head> section of your HTML
2. Make it 50-60 characters long
3. Include your primary keyword near the beginning
4. Make it unique and descriptive

```html
<title>SEO Audit Tool - Free Website Analysis | YourBrand</title>
```""",
            external_resources=(
                "https://moz.com/learn/seo/title-tag",
                "https://developers.google.com/search/docs/appearance/title-link",
            ),
        ),

        IssueType.SHORT_TITLE.value: Recommendation(
            title="Lengthen Your Title Tag",
            description="Title tags should be 50-60 characters to maximize visibility in search results.",
            effort_level=EffortLevel.EASY,
            impact_level=ImpactLevel.MEDIUM,
            fix_guide="""1. Expand your title to 50-60 characters
2. Add more descriptive keywords
3. Include your brand name if space allows
4. Ensure it accurately describes the page content""",
            external_resources=("https://moz.com/learn/seo/title-tag",),
        ),

        IssueType.LONG_TITLE.value: Recommendation(
            title="Shorten Your Title Tag",
            description="Title tags longer than 60 characters may be truncated in search results.",
            effort_level=EffortLevel.EASY,
            impact_level=ImpactLevel.MEDIUM,
            fix_guide="""1. Reduce title to 50-60 characters
2. Remove unnecessary words
3. Keep the most important keywords at the beginning
4. Ensure clarity and relevance""",
            external_resources=("https://moz.com/learn/seo/title-tag",),
        ),

        # =========================================================================
        # Meta description
        # =========================================================================
        IssueType.MISSING_META_DESCRIPTION.value: Recommendation(
            title="Add Meta Description",
            description="Meta descriptions help search engines and users understand your page content.",
            effort_level=EffortLevel.EASY,
            impact_level=ImpactLevel.HIGH,
            fix_guide="""1. Add a <meta name="description"> tag in the <head> section
2. Make it 150-160 characters long
3. Include your target keywords naturally
4. Write compelling copy that encourages clicks

```html
<meta name="description" content="Free SEO audit tool that analyzes your website for technical issues, performance problems, and ranking opportunities. Get actionable insights in minutes.">
```""",
            external_resources=(
                "https://moz.com/learn/seo/meta-description",
                "https://developers.google.com/search/docs/appearance/snippet",
            ),
        ),

        IssueType.SHORT_META_DESCRIPTION.value: Recommendation(
            title="Lengthen Meta Description",
            description="Meta descriptions should be 150-160 characters for optimal display.",
            effort_level=EffortLevel.EASY,
            impact_level=ImpactLevel.LOW,
            fix_guide="""1. Expand to 150-160 characters
2. Add more compelling details about the page
3. Include a call-to-action
4. Incorporate relevant keywords naturally""",
            external_resources=("https://moz.com/learn/seo/meta-description",),
        ),

        # =========================================================================
        # Headings
        # =========================================================================
        IssueType.MISSING_H1.value: Recommendation(
            title="Add H1 Heading Tag",
            description="Every page should have exactly one H1 tag that describes the main topic.",
            effort_level=EffortLevel.EASY,
            impact_level=ImpactLevel.HIGH,
            fix_guide="""1. Add an <h1> tag to your page
2. Make it descriptive and relevant to page content
3. Include your primary keyword
4. Keep it concise (20-70 characters)

```html
<h1>Complete SEO Audit Tool for Websites</h1>
```""",
            external_resources=("https://moz.com/learn/seo/on-page-factors",),
        ),

        IssueType.MULTIPLE_H1.value: Recommendation(
            title="Use Only One H1 Tag",
            description="Best practice is to have only one H1 tag per page for clear content hierarchy.",
            effort_level=EffortLevel.EASY,
            impact_level=ImpactLevel.MEDIUM,
            fix_guide="""1. Identify the main topic of your page
2. Keep only one H1 that describes this topic
3. Convert other H1 tags to H2, H3, etc.
4. Ensure proper heading hierarchy (H1 → H2 → H3)""",
            external_resources=("https://developer.mozilla.org/en-US/docs/Web/HTML/Element/Heading_Elements",),
        ),

        # =========================================================================
        # Content
        # =========================================================================
        IssueType.IMAGES_MISSING_ALT.value: Recommendation(
            title="Add Alt Text to Images",
            description="Alt text improves accessibility and helps search engines understand image content.",
            effort_level=EffortLevel.EASY,
            impact_level=ImpactLevel.MEDIUM,
            fix_guide="""1. Add descriptive alt attributes to all <img> tags
2. Describe what the image shows
3. Include relevant keywords naturally
4. Keep it concise but descriptive

```html
<img src="dashboard.png" alt="SEO audit dashboard showing health score and issues">
```""",
            external_resources=(
                "https://moz.com/learn/seo/alt-text",
                "https://www.w3.org/WAI/tutorials/images/",
            ),
        ),

        IssueType.LOW_WORD_COUNT.value: Recommendation(
            title="Increase Content Length",
            description="Pages with more comprehensive content tend to rank better in search results.",
            effort_level=EffortLevel.MEDIUM,
            impact_level=ImpactLevel.MEDIUM,
            fix_guide="""1. Expand content to at least 300 words
2. Add more detailed information about the topic
3. Include relevant keywords naturally
4. Ensure content provides value to users
5. Consider adding sections like FAQs, examples, or use cases""",
            external_resources=("https://moz.com/learn/seo/on-page-factors",),
        ),

        IssueType.MISSING_SCHEMA.value: Recommendation(
            title="Add Schema Markup",
            description="Structured data helps search engines understand your content and can enable rich results.",
            effort_level=EffortLevel.HARD,
            impact_level=ImpactLevel.MEDIUM,
            fix_guide="""1. Identify appropriate schema type (Article, Product, Organization, etc.)
2. Use Google's Structured Data Markup Helper
3. Add JSON-LD script to your <head> section
4. Test with Google's Rich Results Test

```html
<script type="application/ld+json">
{
  "@context": "https://schema.org",
  "@type": "SoftwareApplication",
  "name": "SEO Audit Tool",
  "applicationCategory": "BusinessApplication",
  "offers": {
    "@type": "Offer",
    "price": "0"
  }
}
</script>
```""",
            external_resources=(
                "https://schema.org/",
                "https://developers.google.com/search/docs/appearance/structured-data/intro-structured-data",
            ),
        ),

        # =========================================================================
        # Mobile & performance
        # =========================================================================
        IssueType.NOT_MOBILE_FRIENDLY.value: Recommendation(
            title="Make Site Mobile Friendly",
            description="Mobile-friendliness is crucial as most searches now happen on mobile devices.",
            effort_level=EffortLevel.HARD,
            impact_level=ImpactLevel.HIGH,
            fix_guide="""1. Add viewport meta tag
2. Use responsive CSS (media queries)
3. Ensure text is readable without zooming
4. Make buttons and links easy to tap
5. Avoid horizontal scrolling
6. Test on multiple devices

```html
<meta name="viewport" content="width=device-width, initial-scale=1">
```""",
            external_resources=(
                "https://developers.google.com/search/mobile-sites/mobile-seo",
                "https://web.dev/responsive-web-design-basics/",
            ),
        ),

        IssueType.SLOW_LOAD_TIME.value: Recommendation(
            title="Improve Page Load Speed",
            description="Faster pages provide better user experience and tend to rank higher.",
            effort_level=EffortLevel.HARD,
            impact_level=ImpactLevel.HIGH,
            fix_guide="""1. Optimize and compress images
2. Minify CSS, JavaScript, and HTML
3. Enable browser caching
4. Use a Content Delivery Network (CDN)
5. Reduce server response time
6. Defer JavaScript loading
7. Remove render-blocking resources

Test with:
- Google PageSpeed Insights
- GTmetrix
- WebPageTest""",
            external_resources=(
                "https://web.dev/fast/",
                "https://developers.google.com/speed/pagespeed/insights/",
            ),
        ),
    }
    return RecommendationCatalog(entries)


@lru_cache
def get_recommendation_catalog() -> RecommendationCatalog:
    """Process-wide catalog, built on first use."""
    return build_default_catalog()
