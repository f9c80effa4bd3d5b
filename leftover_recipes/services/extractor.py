"""Extraction of a recipe list from free-form model output.

Generative models do not reliably emit bare JSON: replies arrive wrapped in code
fences or prose, truncated at the token limit, or with escaping artifacts. The
extractor runs an ordered pipeline of stages, each returning a `StageResult`, and
stops at the first failure:

1. unwrap_code_fence   - strip a leading ```/```json fence and a trailing fence
2. locate_json_object  - first "{" plus a string/escape-aware balanced scan,
                         falling back to the last out-of-string "}"
3. parse_json_object   - json.loads, then one retry after unescaping \\n and \\"
4. validate_recipes    - non-empty "recipes" array of valid Recipe objects
5. assemble_response   - wrap with a fresh generatedAt timestamp

Failures are values (`ExtractionError`), never exceptions; the request handler
turns them into HTTP errors.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from pydantic import ValidationError

from leftover_recipes.models.errors import ErrorKind, ExtractionError
from leftover_recipes.models.models import EXPECTED_RECIPE_COUNT, Recipe, RecipeResponse
from leftover_recipes.utils.logger import logger

T = TypeVar("T")
U = TypeVar("U")

_LEADING_FENCE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\s*```$")

PREVIEW_CHARS = 500
TAIL_PREVIEW_CHARS = 200


@dataclass(frozen=True)
class StageResult(Generic[T]):
    """Outcome of one pipeline stage: a value or an extraction error."""

    value: Optional[T] = None
    error: Optional[ExtractionError] = None

    @classmethod
    def success(cls, value: T) -> "StageResult[T]":
        return cls(value=value)

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        message: str,
        debug: Optional[dict[str, Any]] = None,
    ) -> "StageResult[T]":
        return cls(error=ExtractionError(kind=kind, message=message, debug=debug))

    @property
    def ok(self) -> bool:
        return self.error is None

    def then(self, stage: Callable[[T], "StageResult[U]"]) -> "StageResult[U]":
        """Run the next stage on this value; a failure short-circuits unchanged."""
        if self.error is not None:
            return StageResult(error=self.error)
        return stage(self.value)


ExtractionResult = StageResult[RecipeResponse]


def unwrap_code_fence(text: str) -> str:
    """Trim the reply and remove a surrounding Markdown code fence, if any."""
    unwrapped = text.strip()
    if unwrapped.startswith("```"):
        unwrapped = _LEADING_FENCE.sub("", unwrapped)
        unwrapped = _TRAILING_FENCE.sub("", unwrapped)
    return unwrapped.strip()


def scan_balanced_end(text: str, start: int) -> Optional[int]:
    """Find the index of the "}" closing the object that opens at `start`.

    Braces only count outside string literals. A backslash escapes the following
    character, so an escaped quote never toggles the in-string state.

    Returns:
        Index of the closing brace, or None if the depth never returns to zero.
    """
    depth = 0
    in_string = False
    escape_next = False

    for index in range(start, len(text)):
        char = text[index]
        if escape_next:
            escape_next = False
            continue
        if char == "\\":
            escape_next = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index

    return None


def find_fallback_end(text: str, start: int) -> Optional[int]:
    """Find the last unescaped "}" outside any string literal after `start`.

    Used when the balanced scan never closes (typically a reply truncated at the
    token limit). String state is tracked from `start` forward so a brace inside an
    unterminated trailing string is never chosen.
    """
    in_string = False
    escape_next = False
    last_brace: Optional[int] = None

    for index in range(start, len(text)):
        char = text[index]
        if escape_next:
            escape_next = False
            continue
        if char == "\\":
            escape_next = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if not in_string and char == "}":
            last_brace = index

    if last_brace is not None and last_brace > start:
        return last_brace
    return None


def locate_json_object(text: str) -> StageResult[str]:
    """Cut the JSON object out of the surrounding text."""
    start = text.find("{")
    if start == -1:
        return StageResult.failure(ErrorKind.NO_JSON_FOUND, "No JSON object found in response")

    end = scan_balanced_end(text, start)
    if end is None:
        logger.warning("Unbalanced JSON object in response, falling back to last closing brace")
        end = find_fallback_end(text, start)
        if end is None:
            return StageResult.failure(
                ErrorKind.INVALID_JSON_STRUCTURE,
                "No closing brace found after JSON object start",
            )

    return StageResult.success(text[start:end + 1])


def _unescape_literals(json_text: str) -> str:
    """Undo double escaping of newlines and quotes."""
    return json_text.replace("\\n", "\n").replace('\\"', '"')


def parse_json_object(json_text: str, raw_text: str = "") -> StageResult[Any]:
    """Parse the bounded text, retrying once after unescaping.

    Args:
        json_text: Candidate JSON object text.
        raw_text: Full model reply, used only for diagnostics.
    """
    logger.debug(f"Parsing extracted JSON ({len(json_text)} chars)")
    try:
        return StageResult.success(json.loads(json_text))
    except json.JSONDecodeError as first_error:
        logger.warning(f"JSON parse failed ({first_error}), retrying after unescaping")

    try:
        parsed = json.loads(_unescape_literals(json_text))
        logger.info("JSON parsed after unescaping")
        return StageResult.success(parsed)
    except json.JSONDecodeError as second_error:
        logger.error(f"JSON parse failed after unescaping: {second_error}")
        return StageResult.failure(
            ErrorKind.JSON_PARSE_ERROR,
            f"Could not parse JSON: {second_error}",
            debug={
                "originalTextLength": len(raw_text),
                "extractedJsonLength": len(json_text),
                "extractedJsonPreview": json_text[:PREVIEW_CHARS],
                "extractedJsonEnd": json_text[-TAIL_PREVIEW_CHARS:],
            },
        )


def validate_recipes(parsed: Any) -> StageResult[list[Recipe]]:
    """Check for a non-empty "recipes" array and validate each entry.

    Entries that fail Recipe validation are dropped with a warning. Fewer than the
    expected number of recipes is a quality warning, not an error.
    """
    recipes_data = parsed.get("recipes") if isinstance(parsed, dict) else None
    if not isinstance(recipes_data, list) or not recipes_data:
        return StageResult.failure(ErrorKind.EMPTY_RECIPE_LIST, "Missing or empty 'recipes' array")

    recipes: list[Recipe] = []
    for index, item in enumerate(recipes_data, start=1):
        try:
            recipes.append(Recipe.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Dropping recipe #{index}: {e.error_count()} validation error(s)")

    if not recipes:
        return StageResult.failure(ErrorKind.EMPTY_RECIPE_LIST, "No valid recipes in 'recipes' array")

    if len(recipes) < EXPECTED_RECIPE_COUNT:
        logger.warning(f"Model returned {len(recipes)} recipe(s), expected {EXPECTED_RECIPE_COUNT}")

    return StageResult.success(recipes)


def assemble_response(recipes: list[Recipe]) -> StageResult[RecipeResponse]:
    return StageResult.success(RecipeResponse(recipes=recipes))


def extract_recipes(raw_text: str) -> ExtractionResult:
    """Turn a raw model reply into a RecipeResponse or an ExtractionError.

    Args:
        raw_text: Text returned by the model.

    Returns:
        ExtractionResult: `.value` holds the RecipeResponse on success,
        `.error` the first failing stage's ExtractionError otherwise.
    """
    logger.debug(f"Model response length: {len(raw_text)}")
    logger.debug(f"Model response preview: {raw_text[:PREVIEW_CHARS]}")

    result = (
        StageResult.success(unwrap_code_fence(raw_text))
        .then(locate_json_object)
        .then(lambda json_text: parse_json_object(json_text, raw_text))
        .then(validate_recipes)
        .then(assemble_response)
    )

    if result.ok:
        logger.info(f"✓ Extracted {len(result.value.recipes)} recipe(s)")
    else:
        logger.warning(f"Extraction failed ({result.error.kind.value}): {result.error.message}")
    return result
