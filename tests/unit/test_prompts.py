"""Unit tests for prompt and response-schema construction."""

import pytest
from google.genai import types

from leftover_recipes.prompts.prompts import build_prompt, build_response_schema, difficulty_label

JSON_ONLY_INSTRUCTION = "必ずJSONのみを返してください"


class TestDifficultyLabel:
    """Test difficulty code to label mapping."""

    @pytest.mark.parametrize(
        "code,label",
        [
            ("very_easy", "すごくかんたん"),
            ("easy", "かんたん"),
            ("medium", "ふつう"),
            ("hard", "むずかしい"),
        ],
    )
    def test_known_codes(self, code, label):
        assert difficulty_label(code) == label

    @pytest.mark.parametrize("code", ["", "extreme", "EASY"])
    def test_unknown_codes_map_to_easy(self, code):
        """Test that unrecognised codes never raise."""
        assert difficulty_label(code) == "かんたん"


class TestBuildPrompt:
    """Test the rendered prompt text."""

    def test_prompt_contains_inputs(self):
        """Test that ingredients, difficulty label and time appear in the prompt."""
        prompt = build_prompt(["残りカレー", "ご飯", "チーズ"], "easy", 15)

        assert "残りカレー, ご飯, チーズ" in prompt
        assert "- 難易度: かんたん" in prompt
        assert "- 調理時間: 15分以内" in prompt

    def test_prompt_uses_mapped_label(self):
        """Test that a difficulty code is rendered as its label, not the code."""
        prompt = build_prompt(["卵"], "hard", 40)

        assert "- 難易度: むずかしい" in prompt
        assert "hard" not in prompt
        assert "40分以内" in prompt

    def test_unknown_difficulty_renders_default_label(self):
        assert "- 難易度: かんたん" in build_prompt(["卵"], "unknown", 15)

    def test_prompt_describes_output_format_and_limits(self):
        """Test the JSON example and the constraints section."""
        prompt = build_prompt(["卵"], "easy", 15)

        assert '"recipes"' in prompt
        assert '"cookingTime"' in prompt
        assert '"additionalIngredients"' in prompt
        assert "レシピは必ず3つ提案すること" in prompt
        assert "追加食材は最大3つまで" in prompt
        assert "手順は5ステップ以内" in prompt

    def test_json_only_instruction_included_by_default(self):
        assert build_prompt(["卵"], "easy", 15).rstrip().endswith(
            "必ずJSONのみを返してください。他のテキストは含めないでください。"
        )

    def test_json_only_instruction_omitted_with_schema(self):
        """Test that the instruction is dropped when a response schema enforces JSON."""
        assert JSON_ONLY_INSTRUCTION not in build_prompt(["卵"], "easy", 15, json_only=False)

    def test_prompt_is_deterministic(self):
        """Test that identical inputs render identical prompts."""
        first = build_prompt(["鶏肉", "じゃがいも"], "medium", 30)
        second = build_prompt(["鶏肉", "じゃがいも"], "medium", 30)

        assert first == second


class TestBuildResponseSchema:
    """Test the structured-output schema."""

    def test_schema_shape(self):
        """Test that the schema asks for exactly three fully-populated recipes."""
        schema = build_response_schema()

        assert schema["type"] == "OBJECT"
        assert schema["required"] == ["recipes"]

        recipes = schema["properties"]["recipes"]
        assert recipes["type"] == "ARRAY"
        assert recipes["min_items"] == recipes["max_items"] == 3

        item = recipes["items"]
        assert set(item["required"]) == set(item["properties"])
        assert item["properties"]["difficulty"]["enum"] == ["すごくかんたん", "かんたん", "ふつう", "むずかしい"]
        assert item["properties"]["steps"]["max_items"] == 5
        assert item["properties"]["additionalIngredients"]["max_items"] == 3

    def test_schema_is_accepted_by_sdk(self):
        """Test that the dict validates as a google-genai Schema."""
        schema = types.Schema.model_validate(build_response_schema())

        assert schema.type == types.Type.OBJECT
        recipes = schema.properties["recipes"]
        assert recipes.type == types.Type.ARRAY
        assert recipes.items.properties["cookingTime"].type == types.Type.INTEGER
        assert recipes.items.property_ordering[0] == "title"

    def test_schema_is_a_fresh_copy(self):
        """Test that callers cannot mutate a shared schema."""
        schema = build_response_schema()
        schema["required"].append("extra")

        assert build_response_schema()["required"] == ["recipes"]
