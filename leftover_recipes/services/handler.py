"""Request orchestration for recipe generation.

Pipeline per request:
1. Rate limit check           -> TooManyRequests
2. Input validation           -> InvalidInput (before the model is ever called)
3. Credential check           -> ConfigurationError
4. Prompt build + model call  -> UpstreamEmpty when no usable text comes back
5. Response extraction        -> NoJsonFound / InvalidJsonStructure / JsonParseError / EmptyRecipeList
6. Response assembly

Any other exception is wrapped as UnexpectedError. Nothing is retried.
"""

import json
import uuid
from typing import Any, Optional, Protocol

from pydantic import ValidationError

from leftover_recipes.models.errors import ErrorKind, RecipeServiceError
from leftover_recipes.models.models import RecipeRequest, RecipeResponse
from leftover_recipes.prompts.prompts import build_prompt, build_response_schema
from leftover_recipes.services.extractor import extract_recipes
from leftover_recipes.services.gemini_client import GeminiRecipeClient
from leftover_recipes.services.rate_limiter import RateLimiter
from leftover_recipes.utils.config import Config
from leftover_recipes.utils.logger import logger


class ModelClient(Protocol):
    """Text generation collaborator (GeminiRecipeClient or a test double)."""

    async def generate(
        self,
        prompt: str,
        temperature: float,
        max_output_tokens: int,
        response_schema: Optional[dict[str, Any]] = None,
    ) -> Any: ...


def extract_response_text(response: Any) -> Optional[str]:
    """Read usable text from a model response.

    Checks the primary `text` field first, then joins the text parts of the first
    candidate. Whitespace-only text counts as empty.

    Returns:
        The text, or None if the response carries nothing usable.
    """
    if response is None:
        return None

    text = getattr(response, "text", None)
    if isinstance(text, str) and text.strip():
        return text

    candidates = getattr(response, "candidates", None) or []
    if candidates:
        content = getattr(candidates[0], "content", None)
        parts = getattr(content, "parts", None) or []
        joined = "".join(part.text for part in parts if isinstance(getattr(part, "text", None), str))
        if joined.strip():
            logger.info("Using fallback text from candidates")
            return joined

    return None


def parse_recipe_request(payload: Any) -> RecipeRequest:
    """Decode and validate a request body.

    Args:
        payload: Raw JSON body (bytes/str) or an already-decoded object.

    Raises:
        RecipeServiceError: InvalidInput for undecodable JSON, a non-object body,
            or a missing/empty ingredient list.
    """
    if isinstance(payload, (bytes, bytearray, str)):
        try:
            payload = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise RecipeServiceError(ErrorKind.INVALID_INPUT, "Request body is not valid JSON", details=str(e)) from e

    if not isinstance(payload, dict):
        raise RecipeServiceError(
            ErrorKind.INVALID_INPUT,
            "Request body must be a JSON object",
            details=f"expected object, got {type(payload).__name__}",
        )

    try:
        return RecipeRequest.model_validate(payload)
    except ValidationError as e:
        raise RecipeServiceError(
            ErrorKind.INVALID_INPUT,
            f"Invalid request: {e.error_count()} validation error(s)",
            details=str(e),
        ) from e


class RecipeRequestHandler:
    """Turn a request body into a RecipeResponse or a RecipeServiceError.

    The handler is stateless apart from its RateLimiter, which is shared by every
    request served by this instance.
    """

    def __init__(
        self,
        config: Config,
        rate_limiter: Optional[RateLimiter] = None,
        model_client: Optional[ModelClient] = None,
    ) -> None:
        """Initialize the handler.

        Args:
            config: Application configuration.
            rate_limiter: Admission control; built from RATE_LIMIT_* settings if omitted.
            model_client: Text generation client; a GeminiRecipeClient is created lazily
                (after the credential check) if omitted.
        """
        self.config = config
        self.rate_limiter = rate_limiter if rate_limiter is not None else RateLimiter(
            max_requests=config.RATE_LIMIT_MAX_REQUESTS,
            window_seconds=config.RATE_LIMIT_WINDOW_SECONDS,
        )
        self._model_client = model_client

    @property
    def model_client(self) -> ModelClient:
        if self._model_client is None:
            self._model_client = GeminiRecipeClient(
                api_key=self.config.GEMINI_API_KEY,
                model=self.config.GEMINI_MODEL,
                timeout_seconds=self.config.MODEL_TIMEOUT_SECONDS,
            )
        return self._model_client

    async def handle(self, payload: Any) -> RecipeResponse:
        """Run the full pipeline for one request.

        Args:
            payload: Request body as bytes/str JSON or a decoded dict.

        Returns:
            RecipeResponse with at least one recipe.

        Raises:
            RecipeServiceError: For every failure, including unexpected exceptions
                (wrapped as UnexpectedError).
        """
        log_extra = {"request_id": uuid.uuid4().hex[:8]}
        try:
            return await self._generate(payload, log_extra)
        except RecipeServiceError as e:
            logger.warning(f"Request failed with {e.kind.value}: {e}", extra={**log_extra, "error_kind": e.kind.value})
            raise
        except Exception as e:
            logger.error(f"Unexpected error: {e!r}", exc_info=True, extra=log_extra)
            raise RecipeServiceError(
                ErrorKind.UNEXPECTED_ERROR,
                f"Unexpected error: {e!r}",
                details=str(e) or type(e).__name__,
            ) from e

    async def _generate(self, payload: Any, log_extra: dict[str, str]) -> RecipeResponse:
        if not self.rate_limiter.admit():
            raise RecipeServiceError(ErrorKind.TOO_MANY_REQUESTS, "Rate limit exceeded")

        request = parse_recipe_request(payload)
        preferences = request.preferences

        if not self.config.GEMINI_API_KEY:
            logger.error("GEMINI_API_KEY is not set", extra=log_extra)
            raise RecipeServiceError(ErrorKind.CONFIGURATION_ERROR, "GEMINI_API_KEY is not set")

        use_schema = self.config.USE_RESPONSE_SCHEMA
        prompt = build_prompt(
            request.ingredients,
            preferences.resolved_difficulty,
            preferences.resolved_time,
            json_only=not use_schema,
        )
        logger.info(
            f"Generating recipes for {len(request.ingredients)} ingredient(s) "
            f"(difficulty={preferences.resolved_difficulty}, time={preferences.resolved_time}min)",
            extra=log_extra,
        )

        response = await self.model_client.generate(
            prompt,
            temperature=self.config.TEMPERATURE,
            max_output_tokens=self.config.MAX_OUTPUT_TOKENS,
            response_schema=build_response_schema() if use_schema else None,
        )

        text = extract_response_text(response)
        if text is None:
            raise RecipeServiceError(ErrorKind.UPSTREAM_EMPTY, "Empty response from model")

        result = extract_recipes(text)
        if not result.ok:
            raise RecipeServiceError.from_extraction_error(result.error)

        logger.info(f"✓ Returning {len(result.value.recipes)} recipe(s)", extra=log_extra)
        return result.value
