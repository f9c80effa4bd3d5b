"""Error taxonomy for recipe generation.

Every failure a request can end in is one of the `ErrorKind` values. Each kind maps
to a fixed HTTP status and a user-facing (Japanese) message; diagnostics travel
alongside but are only rendered outside production.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from leftover_recipes.models.models import ErrorResponse


class ErrorKind(str, Enum):
    """Terminal failure kinds. None of them is retried."""

    TOO_MANY_REQUESTS = "TooManyRequests"
    INVALID_INPUT = "InvalidInput"
    CONFIGURATION_ERROR = "ConfigurationError"
    UPSTREAM_EMPTY = "UpstreamEmpty"
    NO_JSON_FOUND = "NoJsonFound"
    INVALID_JSON_STRUCTURE = "InvalidJsonStructure"
    JSON_PARSE_ERROR = "JsonParseError"
    EMPTY_RECIPE_LIST = "EmptyRecipeList"
    UNEXPECTED_ERROR = "UnexpectedError"


_GENERATION_FAILED = "レシピの生成に失敗しました。"

# kind -> (HTTP status, user-facing message)
ERROR_RESPONSES: dict[ErrorKind, tuple[int, str]] = {
    ErrorKind.TOO_MANY_REQUESTS: (429, "リクエストが多すぎます。1分後に再試行してください"),
    ErrorKind.INVALID_INPUT: (400, "食材を入力してください"),
    ErrorKind.CONFIGURATION_ERROR: (500, "サーバーエラーが発生しました。しばらくしてから再試行してください"),
    ErrorKind.UPSTREAM_EMPTY: (500, _GENERATION_FAILED + "APIからの応答が空です"),
    ErrorKind.NO_JSON_FOUND: (500, _GENERATION_FAILED + "JSON形式が見つかりません"),
    ErrorKind.INVALID_JSON_STRUCTURE: (500, _GENERATION_FAILED + "JSON構造が不正です"),
    ErrorKind.JSON_PARSE_ERROR: (500, _GENERATION_FAILED + "もう一度お試しください"),
    ErrorKind.EMPTY_RECIPE_LIST: (500, _GENERATION_FAILED + "レシピデータが不正です"),
    ErrorKind.UNEXPECTED_ERROR: (500, "予期しないエラーが発生しました"),
}


@dataclass(frozen=True)
class ExtractionError:
    """Failure value produced by the response extractor.

    Attributes:
        kind: One of the extraction kinds (NoJsonFound, InvalidJsonStructure,
            JsonParseError, EmptyRecipeList).
        message: Internal description for logs.
        debug: Optional diagnostics (lengths, previews) for non-production responses.
    """

    kind: ErrorKind
    message: str
    debug: Optional[dict[str, Any]] = None


class RecipeServiceError(Exception):
    """Raised by the request handler for any terminal failure.

    Args:
        kind: Failure kind, decides status code and user message.
        message: Internal description for logs (defaults to the kind name).
        debug: Structured diagnostics, rendered as `debug` outside production.
        details: Free-text diagnostics (exception message), rendered as `details` outside production.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: Optional[str] = None,
        debug: Optional[dict[str, Any]] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message or kind.value)
        self.kind = kind
        self.debug = debug
        self.details = details

    @classmethod
    def from_extraction_error(cls, error: ExtractionError) -> "RecipeServiceError":
        return cls(error.kind, error.message, debug=error.debug)

    @property
    def status_code(self) -> int:
        return ERROR_RESPONSES[self.kind][0]

    @property
    def user_message(self) -> str:
        return ERROR_RESPONSES[self.kind][1]

    def to_response(self, include_diagnostics: bool = False) -> ErrorResponse:
        """Build the external error body.

        Args:
            include_diagnostics: Attach `debug`/`details` (non-production only).
        """
        if not include_diagnostics:
            return ErrorResponse(error=self.user_message)
        return ErrorResponse(error=self.user_message, debug=self.debug, details=self.details)
