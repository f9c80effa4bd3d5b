"""Data models and schemas for the leftover recipe service.

Defines Pydantic models for request/response validation and domain objects.
Attributes are snake_case in Python and camelCase on the wire (aliases), so
`model_dump(by_alias=True)` produces the JSON the web client expects.
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from leftover_recipes.utils.logger import logger


class DifficultyValue(str, Enum):
    """Difficulty codes accepted in request preferences."""

    VERY_EASY = "very_easy"
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


Difficulty = Literal["すごくかんたん", "かんたん", "ふつう", "むずかしい"]

# Request code -> display label shown to users and written into recipes
DIFFICULTY_LABELS: dict[str, str] = {
    DifficultyValue.VERY_EASY.value: "すごくかんたん",
    DifficultyValue.EASY.value: "かんたん",
    DifficultyValue.MEDIUM.value: "ふつう",
    DifficultyValue.HARD.value: "むずかしい",
}
DEFAULT_DIFFICULTY_LABEL = DIFFICULTY_LABELS[DifficultyValue.EASY.value]

DEFAULT_DIFFICULTY = DifficultyValue.EASY.value
DEFAULT_TIME_MINUTES = 15
EXPECTED_RECIPE_COUNT = 3
MAX_ADDITIONAL_INGREDIENTS = 3
MAX_STEPS = 5

_MINUTES_PATTERN = re.compile(r"\d+(?:\.\d+)?")


def utc_timestamp() -> str:
    """Current UTC time as ISO8601 with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Preferences(BaseModel):
    """Optional cooking preferences sent with a request.

    Preferences never fail a request: unknown difficulty codes are kept as-is (the
    prompt builder maps them to the default label), and a difficulty or time value
    of the wrong type, or a time budget that is not a positive whole number of
    minutes, is treated as absent so the default applies.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    difficulty: Annotated[
        Optional[str],
        Field(None, description="Difficulty code: very_easy, easy, medium or hard"),
    ]
    time: Annotated[
        Optional[int],
        Field(None, description="Upper bound for cooking time in minutes"),
    ]

    @field_validator("difficulty", mode="before")
    @classmethod
    def drop_non_string_difficulty(cls, difficulty: object) -> Optional[str]:
        if difficulty is None or isinstance(difficulty, str):
            return difficulty
        logger.debug(f"Ignoring non-string difficulty {difficulty!r}")
        return None

    @field_validator("time", mode="before")
    @classmethod
    def coerce_time(cls, time: object) -> Optional[int]:
        """Keep positive whole minutes ("20" and 20.0 included); anything else is unset."""
        minutes: Optional[int] = None
        if isinstance(time, bool):
            minutes = None
        elif isinstance(time, int):
            minutes = time
        elif isinstance(time, float) and time.is_integer():
            minutes = int(time)
        elif isinstance(time, str) and time.strip().isdigit():
            minutes = int(time.strip())

        if minutes is None or minutes <= 0:
            if time is not None:
                logger.debug(f"Ignoring time budget {time!r}, using default")
            return None
        return minutes

    @property
    def resolved_difficulty(self) -> str:
        return self.difficulty or DEFAULT_DIFFICULTY

    @property
    def resolved_time(self) -> int:
        return self.time or DEFAULT_TIME_MINUTES


class RecipeRequest(BaseModel):
    """Request schema for POST /generate-recipe.

    Ingredients are whitespace-stripped and blank entries are dropped; at least
    one ingredient must remain.
    """

    ingredients: Annotated[
        List[str],
        Field(description="Leftover ingredients to cook with (at least one)"),
    ]
    preferences: Annotated[
        Preferences,
        Field(default_factory=Preferences, description="Optional difficulty and time budget"),
    ]

    @field_validator("ingredients", mode="before")
    @classmethod
    def normalize_ingredients(cls, ingredients: object) -> List[str]:
        """Strip entries and drop blanks and non-string values."""
        if not isinstance(ingredients, list):
            raise ValueError("ingredients must be a list of strings")

        cleaned = [item.strip() for item in ingredients if isinstance(item, str) and item.strip()]
        if not cleaned:
            raise ValueError("At least one ingredient is required")
        return cleaned

    @field_validator("preferences", mode="before")
    @classmethod
    def default_preferences(cls, preferences: object) -> object:
        """Anything other than an object (null included) means no preferences."""
        if isinstance(preferences, (dict, Preferences)):
            return preferences
        if preferences is not None:
            logger.debug(f"Ignoring non-object preferences {preferences!r}")
        return {}


class Recipe(BaseModel):
    """Domain model for a generated recipe.

    `id` and `saved_at` are only set once a recipe is shown or saved as a favorite.
    Lists longer than the prompt allows are truncated rather than rejected.
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: Annotated[Optional[str], Field(None, description="Client-assigned identifier")]
    title: Annotated[str, Field(min_length=1, description="Recipe name")]
    description: Annotated[str, Field("", description="One-line description (30 chars by convention)")]
    difficulty: Annotated[Difficulty, Field(DEFAULT_DIFFICULTY_LABEL, description="Display difficulty label")]
    cooking_time: Annotated[Union[int, float], Field(gt=0, description="Cooking time in minutes")]
    additional_ingredients: Annotated[
        List[str],
        Field(default_factory=list, description=f"Extra ingredients to buy (max {MAX_ADDITIONAL_INGREDIENTS})"),
    ]
    steps: Annotated[List[str], Field(min_length=1, description=f"Cooking steps (max {MAX_STEPS})")]
    tips: Annotated[str, Field("", description="Advice for a better result")]
    saved_at: Annotated[Optional[str], Field(None, description="ISO8601 time the recipe was saved")]

    @field_validator("difficulty", mode="before")
    @classmethod
    def normalize_difficulty(cls, difficulty: object) -> str:
        """Map request codes to labels; anything unrecognised falls back to the default label."""
        if difficulty in DIFFICULTY_LABELS.values():
            return difficulty
        if isinstance(difficulty, str) and difficulty.strip() in DIFFICULTY_LABELS:
            return DIFFICULTY_LABELS[difficulty.strip()]
        logger.debug(f"Unknown recipe difficulty {difficulty!r}, using {DEFAULT_DIFFICULTY_LABEL}")
        return DEFAULT_DIFFICULTY_LABEL

    @field_validator("cooking_time", mode="before")
    @classmethod
    def parse_cooking_time_text(cls, cooking_time: object) -> object:
        """Read the minutes out of text such as "15分" or "約20 min"."""
        if not isinstance(cooking_time, str):
            return cooking_time
        match = _MINUTES_PATTERN.search(cooking_time)
        if match is None:
            return cooking_time
        minutes = float(match.group())
        return int(minutes) if minutes.is_integer() else minutes

    @field_validator("additional_ingredients", mode="after")
    @classmethod
    def cap_additional_ingredients(cls, items: List[str]) -> List[str]:
        if len(items) > MAX_ADDITIONAL_INGREDIENTS:
            logger.warning(
                f"Recipe lists {len(items)} additional ingredients, keeping first {MAX_ADDITIONAL_INGREDIENTS}"
            )
            return items[:MAX_ADDITIONAL_INGREDIENTS]
        return items

    @field_validator("steps", mode="after")
    @classmethod
    def cap_steps(cls, steps: List[str]) -> List[str]:
        if len(steps) > MAX_STEPS:
            logger.warning(f"Recipe has {len(steps)} steps, keeping first {MAX_STEPS}")
            return steps[:MAX_STEPS]
        return steps

    def to_wire(self) -> dict:
        """Serialize with camelCase keys, omitting unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class RecipeResponse(BaseModel):
    """Response envelope for a successful generation."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    recipes: Annotated[List[Recipe], Field(min_length=1, description="Generated recipes (3 expected)")]
    generated_at: Annotated[str, Field(default_factory=utc_timestamp, description="ISO8601 generation time")]

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ErrorResponse(BaseModel):
    """Error body returned for every failed request.

    `debug` and `details` are diagnostics and are only populated outside production.
    """

    error: str
    debug: Optional[dict] = None
    details: Optional[str] = None

    def to_wire(self) -> dict:
        return self.model_dump(exclude_none=True)
