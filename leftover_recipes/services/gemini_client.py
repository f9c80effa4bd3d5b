"""Gemini text generation client.

Thin async wrapper around the synchronous `google-genai` client. It returns the raw
`GenerateContentResponse`; reading text out of it (including the candidates
fallback) is the request handler's job.
"""

import asyncio
from typing import Any, Optional

from google import genai
from google.genai import types

from leftover_recipes.utils.logger import logger


class GeminiRecipeClient:
    """Call a Gemini model with a single prompt.

    No retries are performed: a failed call surfaces immediately to the caller.
    """

    def __init__(self, api_key: str, model: str = "gemini-2.5-flash", timeout_seconds: float = 30.0) -> None:
        """Initialize GeminiRecipeClient with configuration.

        Args:
            api_key: Gemini API key.
            model: Model id passed to generate_content.
            timeout_seconds: Upper bound for one call, in seconds.

        Raises:
            ValueError: If api_key is None or empty string.
        """
        if not api_key:
            raise ValueError("GEMINI_API_KEY is required")

        self.api_key = api_key
        self.model = model
        self.timeout_seconds = timeout_seconds
        self._client: Optional[genai.Client] = None

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    @staticmethod
    def build_config(
        temperature: float,
        max_output_tokens: int,
        response_schema: Optional[dict[str, Any]] = None,
    ) -> types.GenerateContentConfig:
        """Build the generation config; a schema also switches the reply to JSON mode."""
        if response_schema is None:
            return types.GenerateContentConfig(
                temperature=temperature,
                max_output_tokens=max_output_tokens,
            )
        return types.GenerateContentConfig(
            temperature=temperature,
            max_output_tokens=max_output_tokens,
            response_mime_type="application/json",
            response_schema=response_schema,
        )

    async def generate(
        self,
        prompt: str,
        temperature: float,
        max_output_tokens: int,
        response_schema: Optional[dict[str, Any]] = None,
    ) -> types.GenerateContentResponse:
        """Send the prompt and return the raw response.

        Args:
            prompt: Instruction text.
            temperature: Sampling temperature.
            max_output_tokens: Output token cap.
            response_schema: Optional structured-output schema.

        Returns:
            GenerateContentResponse with `text` and `candidates`.

        Raises:
            TimeoutError: If the call takes longer than timeout_seconds.
            Exception: Any error raised by the SDK (auth, quota, network).
        """
        config = self.build_config(temperature, max_output_tokens, response_schema)
        logger.debug(
            f"Calling {self.model} (temperature={temperature}, max_output_tokens={max_output_tokens}, "
            f"schema={'yes' if response_schema else 'no'})"
        )

        # Sync SDK call in a worker thread so the event loop stays free
        return await asyncio.wait_for(
            asyncio.to_thread(
                self.client.models.generate_content,
                model=self.model,
                contents=prompt,
                config=config,
            ),
            timeout=self.timeout_seconds,
        )
