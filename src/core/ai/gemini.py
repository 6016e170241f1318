"""
src/core/ai/gemini.py
=====================
Google Gemini implementation.
"""

from __future__ import annotations
from typing import Any

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from core.ai.base import BaseAIProvider
from core.errors import SynthesisUnavailable

class GeminiProvider(BaseAIProvider):
    """
    Provider for Google Gemini models.
    """

    def __init__(self, api_key: str, model_name: str = "gemini-1.5-flash", settings: dict[str, Any] | None = None) -> None:
        super().__init__(api_key, model_name, settings)
        genai.configure(api_key=self.api_key)

    async def generate_text(
        self,
        prompt: str,
        system_prompt: str | None = None,
        json_output: bool = False,
    ) -> str:
        generation_config: dict[str, Any] = {"temperature": self.temperature}
        if json_output:
            generation_config["response_mime_type"] = "application/json"

        model = genai.GenerativeModel(
            model_name=self.model_name,
            system_instruction=system_prompt,
            generation_config=generation_config,
        )
        try:
            response = await model.generate_content_async(prompt)
            return response.text
        except (google_exceptions.GoogleAPIError, ValueError) as exc:
            # ValueError: response blocked / no candidate text
            raise SynthesisUnavailable(f"Gemini call failed: {exc}") from exc
