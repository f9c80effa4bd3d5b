"""Prompt and response-schema factories for recipe generation.

The prompt is written in Japanese and is fully deterministic for a given input:
same ingredients, difficulty and time budget always render the same text.
When the model is also given a structured-output schema (Gemini `response_schema`),
the trailing "JSON only" instruction is omitted since the API enforces it.
"""

from typing import Any, Sequence

from leftover_recipes.models.models import (
    DEFAULT_DIFFICULTY_LABEL,
    DIFFICULTY_LABELS,
    EXPECTED_RECIPE_COUNT,
    MAX_ADDITIONAL_INGREDIENTS,
    MAX_STEPS,
)


def difficulty_label(difficulty: str) -> str:
    """Map a difficulty code to its display label.

    Unknown or empty codes map to the "easy" label; this never raises.
    """
    return DIFFICULTY_LABELS.get(difficulty, DEFAULT_DIFFICULTY_LABEL)


def _get_output_format_section() -> str:
    """JSON example the model should imitate."""
    return """# 出力形式（JSON）
以下のJSON形式で回答してください:
{
  "recipes": [
    {
      "title": "レシピ名",
      "description": "一言説明（30文字以内）",
      "difficulty": "かんたん",
      "cookingTime": 15,
      "additionalIngredients": ["追加食材1", "追加食材2"],
      "steps": ["手順1", "手順2", "手順3"],
      "tips": "美味しく作るコツ"
    }
  ]
}"""


def _get_constraints_section(json_only: bool) -> str:
    constraints = [
        f"- レシピは必ず{EXPECTED_RECIPE_COUNT}つ提案すること",
        f"- 追加食材は最大{MAX_ADDITIONAL_INGREDIENTS}つまで",
        f"- 手順は{MAX_STEPS}ステップ以内",
        "- 実現可能性を重視",
    ]
    if json_only:
        constraints.append("- 必ずJSONのみを返してください。他のテキストは含めないでください。")
    return "# 制約\n" + "\n".join(constraints)


def build_prompt(
    ingredients: Sequence[str],
    difficulty: str,
    time_minutes: int,
    json_only: bool = True,
) -> str:
    """Render the instruction sent to the model.

    Args:
        ingredients: Validated, non-empty ingredient names (joined with ", ").
        difficulty: Difficulty code (very_easy, easy, medium, hard); unknown codes use "easy".
        time_minutes: Cooking time budget in minutes.
        json_only: Append the "return JSON only, no prose" constraint. Set to False
            when a response schema is sent alongside the prompt.

    Returns:
        str: Complete prompt text.
    """
    ingredients_text = ", ".join(ingredients)
    difficulty_text = difficulty_label(difficulty)

    return f"""あなたはプロの料理研究家です。
以下の残り物・食材から、創造的で実用的なアレンジレシピを{EXPECTED_RECIPE_COUNT}つ提案してください。

# 入力食材
{ingredients_text}

# 条件
- 難易度: {difficulty_text}
- 調理時間: {time_minutes}分以内
- 家庭にある調味料は自由に使用可能

{_get_output_format_section()}

{_get_constraints_section(json_only)}"""


def build_response_schema() -> dict[str, Any]:
    """Structured-output schema describing the exact response object.

    Returned in the dict form accepted by `google.genai.types.Schema`
    (upper-case type names, snake_case keywords).
    """
    string = {"type": "STRING"}
    return {
        "type": "OBJECT",
        "properties": {
            "recipes": {
                "type": "ARRAY",
                "min_items": EXPECTED_RECIPE_COUNT,
                "max_items": EXPECTED_RECIPE_COUNT,
                "items": {
                    "type": "OBJECT",
                    "properties": {
                        "title": string,
                        "description": string,
                        "difficulty": {"type": "STRING", "enum": list(DIFFICULTY_LABELS.values())},
                        "cookingTime": {"type": "INTEGER"},
                        "additionalIngredients": {
                            "type": "ARRAY",
                            "items": string,
                            "max_items": MAX_ADDITIONAL_INGREDIENTS,
                        },
                        "steps": {"type": "ARRAY", "items": string, "max_items": MAX_STEPS},
                        "tips": string,
                    },
                    "required": [
                        "title",
                        "description",
                        "difficulty",
                        "cookingTime",
                        "additionalIngredients",
                        "steps",
                        "tips",
                    ],
                    "property_ordering": [
                        "title",
                        "description",
                        "difficulty",
                        "cookingTime",
                        "additionalIngredients",
                        "steps",
                        "tips",
                    ],
                },
            }
        },
        "required": ["recipes"],
    }
