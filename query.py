#!/usr/bin/env python3
"""Ad hoc query runner for the Leftover Recipe Service.

Generate recipes directly without starting the API server.

Usage:
    python query.py "残りカレー, ご飯, チーズ"
    python query.py --difficulty very_easy --time 10 "卵, ねぎ"
    python query.py --debug "残りカレー, ご飯"  # Show full JSON response

Features:
- Runs the same request handler as POST /generate-recipe
- Ingredients as a single comma-separated argument (or several arguments)
- Rich rendering of each recipe
- Debug mode to display the full JSON response
"""

import asyncio
import sys

from rich.console import Console
from rich.panel import Panel

from leftover_recipes.models.errors import RecipeServiceError
from leftover_recipes.models.models import Recipe, RecipeResponse
from leftover_recipes.services.favorites import assign_recipe_ids
from leftover_recipes.services.handler import RecipeRequestHandler
from leftover_recipes.utils.config import config
from leftover_recipes.utils.logger import logger

console = Console()

USAGE = 'Usage: python query.py [--debug] [--difficulty CODE] [--time MINUTES] "<ingredient, ingredient, ...>"'


def parse_ingredients(args: list[str]) -> list[str]:
    """Split comma-separated arguments into ingredient names (Japanese commas included)."""
    ingredients = []
    for arg in args:
        for item in arg.replace("、", ",").split(","):
            if item.strip():
                ingredients.append(item.strip())
    return ingredients


def render_recipe(recipe: Recipe, index: int) -> Panel:
    """Format one recipe as a rich panel."""
    lines = []
    if recipe.description:
        lines.append(f"[italic]{recipe.description}[/italic]")
    lines.append(f"難易度: {recipe.difficulty} | 調理時間: {recipe.cooking_time:g}分")
    if recipe.additional_ingredients:
        lines.append(f"追加食材: {', '.join(recipe.additional_ingredients)}")
    lines.append("")
    lines.extend(f"{step_number}. {step}" for step_number, step in enumerate(recipe.steps, start=1))
    if recipe.tips:
        lines.append("")
        lines.append(f"[green]コツ:[/green] {recipe.tips}")
    return Panel("\n".join(lines), title=f"[bold]{index}. {recipe.title}[/bold]")


def run_query(ingredients: list[str], difficulty: str = None, time_minutes: int = None, debug: bool = False) -> None:
    """Generate recipes for the given ingredients and print them.

    Args:
        ingredients: Ingredient names.
        difficulty: Optional difficulty code (very_easy, easy, medium, hard).
        time_minutes: Optional cooking time budget.
        debug: If True, display the full JSON response.
    """
    payload = {"ingredients": ingredients, "preferences": {}}
    if difficulty:
        payload["preferences"]["difficulty"] = difficulty
    if time_minutes:
        payload["preferences"]["time"] = time_minutes

    handler = RecipeRequestHandler(config)
    try:
        logger.info(f"Requesting recipes for: {', '.join(ingredients)}")
        response: RecipeResponse = asyncio.run(handler.handle(payload))
    except RecipeServiceError as e:
        console.print(f"[red]✗ {e.user_message}[/red]")
        if debug:
            console.print_json(data=e.to_response(include_diagnostics=True).to_wire())
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("\nQuery interrupted by user.")
        sys.exit(0)

    recipes = assign_recipe_ids(response.recipes)
    console.print()

    if debug:
        console.print("[bold cyan]Debug Mode: Full Response[/bold cyan]")
        console.print_json(data=response.to_wire())
        console.print()

    for index, recipe in enumerate(recipes, start=1):
        console.print(render_recipe(recipe, index))
    console.print(f"[dim]generatedAt: {response.generated_at}[/dim]")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(USAGE)
        print("")
        print("Examples:")
        print('  python query.py "残りカレー, ご飯, チーズ"')
        print('  python query.py --difficulty hard --time 30 "鶏肉, じゃがいも"')
        print('  python query.py --debug "残りカレー, ご飯"')
        sys.exit(1)

    debug_mode = False
    difficulty_code = None
    time_budget = None
    argv_start = 1

    while argv_start < len(sys.argv) and sys.argv[argv_start].startswith("--"):
        flag = sys.argv[argv_start]
        if flag == "--debug":
            debug_mode = True
            argv_start += 1
        elif flag in ("--difficulty", "--time"):
            argv_start += 1
            if argv_start >= len(sys.argv):
                print(f"Error: {flag} flag requires a value")
                sys.exit(1)
            value = sys.argv[argv_start]
            if flag == "--difficulty":
                difficulty_code = value
            elif not value.isdigit():
                print(f"Error: --time must be a whole number of minutes, got: {value}")
                sys.exit(1)
            else:
                time_budget = int(value)
            argv_start += 1
        else:
            print(f"Unknown flag: {flag}")
            sys.exit(1)

    ingredient_list = parse_ingredients(sys.argv[argv_start:])
    if not ingredient_list:
        print("Error: No ingredients provided")
        print(USAGE)
        sys.exit(1)

    run_query(ingredient_list, difficulty=difficulty_code, time_minutes=time_budget, debug=debug_mode)
