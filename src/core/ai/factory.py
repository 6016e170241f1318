"""
src/core/ai/factory.py
======================
Factory for AI providers.
"""

from __future__ import annotations

import logging
from typing import Any

from core.config import settings
from core.ai.base import BaseAIProvider
from core.ai.gemini import GeminiProvider
from core.ai.openai import OpenAIProvider

logger = logging.getLogger(__name__)

class AIFactory:
    """
    Static factory to create the correct AI provider.
    """

    @staticmethod
    def create(model_name: str | None = None, api_key: str | None = None, **kwargs: Any) -> BaseAIProvider | None:
        """
        Create a provider based on model name.

        Returns None when no API key is available for that provider:
        callers treat it as "synthesis unavailable", not as an error.
        """
        model_name = model_name or settings.llm_model
        kwargs.setdefault("temperature", settings.llm_temperature)
        kwargs.setdefault("timeout", settings.llm_timeout_seconds)

        # Determine provider by model prefix
        m = model_name.lower()
        if "gemini" in m:
            provider_cls: type[BaseAIProvider] = GeminiProvider
            key = api_key or settings.gemini_api_key
        else:
            provider_cls = OpenAIProvider
            key = api_key or settings.openai_api_key

        if not key:
            logger.warning("No API key configured for %s, AI synthesis disabled.", model_name)
            return None

        return provider_cls(api_key=key, model_name=model_name, settings=kwargs)
