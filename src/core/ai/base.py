"""
src/core/ai/base.py
===================
Abstract base class for all AI providers.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any

class BaseAIProvider(ABC):
    """
    Standard interface for generating content via LLMs.

    Implementations raise ``SynthesisUnavailable`` when the provider
    call fails; they never return error text in place of a response.
    """

    def __init__(self, api_key: str, model_name: str, settings: dict[str, Any] | None = None) -> None:
        self.api_key = api_key
        self.model_name = model_name
        self.settings = settings or {}

    @property
    def temperature(self) -> float:
        return float(self.settings.get("temperature", 0.2))

    @abstractmethod
    async def generate_text(
        self,
        prompt: str,
        system_prompt: str | None = None,
        json_output: bool = False,
    ) -> str:
        """
        Generate a text response given a prompt and optional system prompt.
        With ``json_output`` the provider is asked for a single JSON object.
        """
        ...
