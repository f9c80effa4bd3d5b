"""Favorite recipes and client-side identifiers.

Recipes come back from generation without ids. Clients assign display ids when
showing results and an id plus `savedAt` timestamp when a recipe is saved as a
favorite. Favorites are kept as a JSON array under a single key of a string
key-value store (a plain dict by default, the browser's local storage in the web
client). Storage errors are logged and never raised.
"""

import json
import time
from collections.abc import MutableMapping
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from leftover_recipes.models.models import Recipe, utc_timestamp
from leftover_recipes.utils.logger import logger
from leftover_recipes.utils.safe_execute import safe_execute_sync

STORAGE_KEY = "favoriteRecipes"


def _now_ms() -> int:
    return int(time.time() * 1000)


def assign_recipe_ids(recipes: Iterable[Recipe], now_ms: Optional[int] = None) -> list[Recipe]:
    """Give every recipe without an id the id `recipe-{ms}-{index}`.

    Args:
        recipes: Recipes as returned by generation.
        now_ms: Millisecond timestamp to use (defaults to the current time).

    Returns:
        New Recipe objects; existing ids are kept.
    """
    stamp = now_ms if now_ms is not None else _now_ms()
    return [
        recipe if recipe.id else recipe.model_copy(update={"id": f"recipe-{stamp}-{index}"})
        for index, recipe in enumerate(recipes)
    ]


class FavoritesStore:
    """Favorites persisted as JSON in a string key-value store.

    Stored entries are only validated when read back. An entry that is not a valid
    recipe is skipped by `load` but kept in storage, so saving or removing another
    favorite never erases it.
    """

    def __init__(self, storage: Optional[MutableMapping[str, str]] = None, key: str = STORAGE_KEY) -> None:
        self.storage = storage if storage is not None else {}
        self.key = key

    def _read_entries(self) -> list[Any]:
        stored = self.storage.get(self.key)
        if not stored:
            return []
        entries = json.loads(stored)
        if not isinstance(entries, list):
            raise ValueError(f"expected a JSON array, got {type(entries).__name__}")
        return entries

    def _write(self, entries: list[Any]) -> None:
        self.storage[self.key] = json.dumps(entries, ensure_ascii=False)

    def load(self) -> list[Recipe]:
        """Return the saved recipes that validate, or an empty list if the store is unreadable."""

        def _load() -> list[Recipe]:
            recipes = []
            for index, entry in enumerate(self._read_entries(), start=1):
                try:
                    recipes.append(Recipe.model_validate(entry))
                except ValidationError as e:
                    logger.warning(f"Skipping favorite #{index}: {e.error_count()} validation error(s)")
            return recipes

        return safe_execute_sync(_load, "Failed to get favorite recipes", default_return=[])

    def save(self, recipe: Recipe) -> Optional[Recipe]:
        """Append a copy of the recipe with an id and a `savedAt` timestamp.

        An unreadable store is replaced by a list holding just this recipe.

        Returns:
            The stored recipe, or None if writing failed.
        """
        saved = recipe.model_copy(
            update={
                "id": recipe.id or f"recipe-{_now_ms()}",
                "saved_at": utc_timestamp(),
            }
        )

        def _save() -> Recipe:
            entries = safe_execute_sync(self._read_entries, "Failed to get favorite recipes", default_return=[])
            self._write(entries + [saved.to_wire()])
            logger.debug(f"Saved favorite recipe {saved.id}")
            return saved

        return safe_execute_sync(_save, "Failed to save favorite recipe")

    def remove(self, recipe_id: str) -> None:
        """Drop every saved entry with the given id; an unreadable store is left as is."""

        def _remove() -> None:
            entries = self._read_entries()
            self._write([entry for entry in entries if not (isinstance(entry, dict) and entry.get("id") == recipe_id)])

        safe_execute_sync(_remove, "Failed to remove favorite recipe")
