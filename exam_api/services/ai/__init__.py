"""Generative AI client and content flows."""
from exam_api.services.ai.gemini_client import GeminiClient

__all__ = ["GeminiClient"]
