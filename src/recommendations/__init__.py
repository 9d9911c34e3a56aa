"""SiteLens recommendations package."""

from recommendations.ai import GeminiRecommender, parse_recommendations
from recommendations.engine import ScoringEngine

__all__ = [
    "GeminiRecommender",
    "parse_recommendations",
    "ScoringEngine",
]
