"""
AI-assisted product data entry.
"""

from .analyzer import (
    AIAnalyzer,
    AnalysisError,
    OpenAIVisionAnalyzer,
    ProductAnalysis,
    extract_json_object,
    normalize_image_urls,
)

__all__ = [
    'AIAnalyzer',
    'AnalysisError',
    'OpenAIVisionAnalyzer',
    'ProductAnalysis',
    'extract_json_object',
    'normalize_image_urls',
]
