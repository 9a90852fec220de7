"""AI Module - recommendation API client."""
from core.ai.recommendation_client import (
    RecommendationClient,
    RECOMMENDATIONS_UNAVAILABLE,
    extract_error_message,
)

__all__ = ['RecommendationClient', 'RECOMMENDATIONS_UNAVAILABLE', 'extract_error_message']
