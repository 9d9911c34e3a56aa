"""SEO rubric: category weights, thresholds and recommendation messages."""

# =============================================================================
# Category weights (evaluation order = recommendation order)
# =============================================================================

WEIGHTS = {
    "title": 20,
    "description": 15,
    "headings": 15,
    "images": 10,
    "links": 10,
    "open_graph": 10,
    "technical": 15,
    "performance": 15,
}

# Partial credit
TITLE_OUT_OF_RANGE_POINTS = 10
DESCRIPTION_OUT_OF_RANGE_POINTS = 8
MULTIPLE_H1_POINTS = 5
IMAGES_MOSTLY_ALT_POINTS = 7
IMAGES_POOR_ALT_POINTS = 3
PERFORMANCE_GOOD_POINTS = 10
PERFORMANCE_POOR_POINTS = 5

# Technical flags and their individual weights (sum = WEIGHTS["technical"])
TECHNICAL_WEIGHTS = {
    "viewport": 5,
    "charset": 5,
    "robots_txt": 3,
    "sitemap": 2,
}

OPEN_GRAPH_TAG_COUNT = 4

# =============================================================================
# Thresholds (inclusive)
# =============================================================================

TITLE_LENGTH = (30, 60)
DESCRIPTION_LENGTH = (120, 160)
IMAGES_MOSTLY_ALT_PERCENT = 80
PERFORMANCE_EXCELLENT = 90
PERFORMANCE_GOOD = 70

MAX_SCORE = 100
MAX_RECOMMENDATIONS = 8

# =============================================================================
# Messages
# =============================================================================

TITLE_MISSING = "Missing title tag. Add a descriptive title."
TITLE_TOO_SHORT = "Title is too short. Aim for 30-60 characters."
TITLE_TOO_LONG = "Title is too long. Keep it under 60 characters."

DESCRIPTION_MISSING = "Missing meta description. Add a compelling description."
DESCRIPTION_TOO_SHORT = "Meta description is too short. Aim for 120-160 characters."
DESCRIPTION_TOO_LONG = "Meta description is too long. Keep it under 160 characters."

H1_MISSING = "Missing H1 tag. Add exactly one H1 per page."
H1_MULTIPLE = "Multiple H1 tags found. Use only one H1 per page."

IMAGES_SOME_MISSING_ALT = "Some images missing alt text. Add descriptive alt attributes."
IMAGES_MANY_MISSING_ALT = "Many images missing alt text. This affects accessibility and SEO."

LINKS_NONE = "No links found. Add internal and external links to improve navigation and SEO."

OPEN_GRAPH_INCOMPLETE = (
    "Incomplete OpenGraph tags. Add og:title, og:description, og:image, and og:url."
)

TECHNICAL_MISSING = {
    "viewport": "Missing viewport meta tag for mobile responsiveness.",
    "charset": "Missing charset declaration.",
    "robots_txt": "Missing robots.txt file.",
    "sitemap": "Missing XML sitemap.",
}

PERFORMANCE_ROOM_TO_IMPROVE = "Good performance, but there's room for improvement."
PERFORMANCE_POOR = "Poor performance scores. Optimize images and reduce load times."

ALL_GOOD = "Excellent! Your website follows SEO best practices."
