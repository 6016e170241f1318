"""
src/core/ai/openai.py
=====================
OpenAI implementation.
"""

from __future__ import annotations
from typing import Any

from openai import AsyncOpenAI, OpenAIError

from core.ai.base import BaseAIProvider
from core.errors import SynthesisUnavailable

class OpenAIProvider(BaseAIProvider):
    """
    Provider for OpenAI (GPT-4.1, etc.) models.
    """

    def __init__(self, api_key: str, model_name: str = "gpt-4.1-mini", settings: dict[str, Any] | None = None) -> None:
        super().__init__(api_key, model_name, settings)
        self.client = AsyncOpenAI(
            api_key=self.api_key,
            timeout=self.settings.get("timeout", 30.0),
            max_retries=0,
        )

    async def generate_text(
        self,
        prompt: str,
        system_prompt: str | None = None,
        json_output: bool = False,
    ) -> str:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        kwargs: dict[str, Any] = {}
        if json_output:
            # Forces the model to answer with one valid JSON object
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await self.client.chat.completions.create(
                model=self.model_name,
                messages=messages,
                temperature=self.temperature,
                **kwargs,
            )
        except OpenAIError as exc:
            raise SynthesisUnavailable(f"OpenAI call failed: {exc}") from exc

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""
