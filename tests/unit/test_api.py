"""Unit tests for the HTTP API.

Tests verify:
- POST /generate-recipe success body (camelCase, generatedAt)
- Status code and Japanese message for each failure kind
- Diagnostics only outside production
- GET /health
"""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from leftover_recipes.api.app import create_app
from leftover_recipes.services.handler import RecipeRequestHandler
from leftover_recipes.services.rate_limiter import RateLimiter
from leftover_recipes.utils.config import Config

SAMPLE_REPLY = """```json
{
  "recipes": [
    {"title": "カレードリア", "description": "残りカレーで簡単ドリア", "difficulty": "かんたん",
     "cookingTime": 15, "additionalIngredients": ["牛乳"], "steps": ["ご飯を盛る", "カレーとチーズをのせる", "焼く"],
     "tips": "焦げ目がつくまで焼く"},
    {"title": "カレーチーズ焼きおにぎり", "description": "香ばしい焼きおにぎり", "difficulty": "かんたん",
     "cookingTime": 10, "additionalIngredients": [], "steps": ["おにぎりを作る", "カレーを塗る", "焼く"],
     "tips": "弱火でじっくり"},
    {"title": "カレーグラタン", "description": "とろとろグラタン", "difficulty": "ふつう",
     "cookingTime": 15, "additionalIngredients": ["牛乳", "バター"], "steps": ["ソースを作る", "焼く"],
     "tips": "チーズはたっぷり"}
  ]
}
```"""


def make_client(monkeypatch, app_env="development", api_key="test-key", reply=SAMPLE_REPLY, limiter=None):
    monkeypatch.setenv("APP_ENV", app_env)
    monkeypatch.setenv("GEMINI_API_KEY", api_key)
    model_client = AsyncMock()
    model_client.generate.return_value = SimpleNamespace(text=reply, candidates=None)
    handler = RecipeRequestHandler(Config(), rate_limiter=limiter, model_client=model_client)
    return TestClient(create_app(handler)), model_client


class TestGenerateRecipe:
    """Tests for POST /generate-recipe."""

    def test_success(self, monkeypatch):
        """Test the end-to-end flow from request body to recipes."""
        client, model_client = make_client(monkeypatch)

        response = client.post(
            "/generate-recipe",
            json={"ingredients": ["残りカレー", "ご飯", "チーズ"], "preferences": {"difficulty": "easy", "time": 15}},
        )

        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"recipes", "generatedAt"}
        assert [recipe["title"] for recipe in body["recipes"]] == [
            "カレードリア",
            "カレーチーズ焼きおにぎり",
            "カレーグラタン",
        ]
        assert body["recipes"][0]["cookingTime"] == 15
        assert body["recipes"][2]["additionalIngredients"] == ["牛乳", "バター"]
        assert "id" not in body["recipes"][0]

        prompt = model_client.generate.await_args.args[0]
        assert "残りカレー, ご飯, チーズ" in prompt
        assert "かんたん" in prompt

    @pytest.mark.parametrize(
        "body",
        [
            {"ingredients": []},
            {"ingredients": ["", " "]},
            {"preferences": {"difficulty": "easy"}},
        ],
    )
    def test_invalid_input(self, monkeypatch, body):
        client, model_client = make_client(monkeypatch)

        response = client.post("/generate-recipe", json=body)

        assert response.status_code == 400
        assert response.json()["error"] == "食材を入力してください"
        model_client.generate.assert_not_awaited()

    @pytest.mark.parametrize("preferences", [{"difficulty": 3}, {"time": 12.5}, {"time": "abc"}, "fast"])
    def test_malformed_preferences_still_generate(self, monkeypatch, preferences):
        client, model_client = make_client(monkeypatch)

        response = client.post("/generate-recipe", json={"ingredients": ["卵"], "preferences": preferences})

        assert response.status_code == 200
        assert "- 調理時間: 15分以内" in model_client.generate.await_args.args[0]

    def test_malformed_json_body(self, monkeypatch):
        client, _ = make_client(monkeypatch)

        response = client.post(
            "/generate-recipe", content=b"{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "食材を入力してください"

    def test_rate_limited(self, monkeypatch):
        client, _ = make_client(monkeypatch, limiter=RateLimiter(max_requests=2))

        statuses = [client.post("/generate-recipe", json={"ingredients": ["卵"]}).status_code for _ in range(3)]

        assert statuses == [200, 200, 429]

    def test_rate_limit_message(self, monkeypatch):
        client, _ = make_client(monkeypatch, limiter=RateLimiter(max_requests=1))
        client.post("/generate-recipe", json={"ingredients": ["卵"]})

        response = client.post("/generate-recipe", json={"ingredients": ["卵"]})

        assert response.json() == {"error": "リクエストが多すぎます。1分後に再試行してください"}

    def test_missing_api_key(self, monkeypatch):
        client, _ = make_client(monkeypatch, api_key="")

        response = client.post("/generate-recipe", json={"ingredients": ["卵"]})

        assert response.status_code == 500
        assert "サーバーエラー" in response.json()["error"]

    def test_no_json_in_reply(self, monkeypatch):
        client, _ = make_client(monkeypatch, reply="ごめんなさい、作れません。")

        response = client.post("/generate-recipe", json={"ingredients": ["卵"]})

        assert response.status_code == 500
        assert response.json()["error"].startswith("レシピの生成に失敗しました")

    def test_unexpected_error(self, monkeypatch):
        client, model_client = make_client(monkeypatch)
        model_client.generate.side_effect = RuntimeError("connection reset")

        response = client.post("/generate-recipe", json={"ingredients": ["卵"]})

        assert response.status_code == 500
        assert response.json() == {"error": "予期しないエラーが発生しました", "details": "connection reset"}


class TestDiagnostics:
    """Tests for environment-dependent error bodies."""

    TRUNCATED_REPLY = '{"recipes": [{"title": "a"}, {"title": "b'

    def test_debug_attached_outside_production(self, monkeypatch):
        client, _ = make_client(monkeypatch, app_env="development", reply=self.TRUNCATED_REPLY)

        body = client.post("/generate-recipe", json={"ingredients": ["卵"]}).json()

        assert body["error"] == "レシピの生成に失敗しました。もう一度お試しください"
        assert body["debug"]["originalTextLength"] == len(self.TRUNCATED_REPLY)
        assert set(body["debug"]) == {
            "originalTextLength",
            "extractedJsonLength",
            "extractedJsonPreview",
            "extractedJsonEnd",
        }

    def test_diagnostics_hidden_in_production(self, monkeypatch):
        client, model_client = make_client(monkeypatch, app_env="production", reply=self.TRUNCATED_REPLY)

        body = client.post("/generate-recipe", json={"ingredients": ["卵"]}).json()
        assert body == {"error": "レシピの生成に失敗しました。もう一度お試しください"}

        model_client.generate.side_effect = RuntimeError("secret detail")
        body = client.post("/generate-recipe", json={"ingredients": ["卵"]}).json()
        assert body == {"error": "予期しないエラーが発生しました"}

    def test_response_is_utf8_json(self, monkeypatch):
        """Test that Japanese text survives the round trip through the HTTP layer."""
        client, _ = make_client(monkeypatch)

        response = client.post("/generate-recipe", json={"ingredients": ["卵"]})

        assert response.headers["content-type"].startswith("application/json")
        assert json.loads(response.content.decode("utf-8"))["recipes"][0]["title"] == "カレードリア"


class TestHealth:
    """Tests for GET /health."""

    def test_health(self, monkeypatch):
        client, model_client = make_client(monkeypatch)

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
        model_client.generate.assert_not_awaited()

    def test_health_not_rate_limited(self, monkeypatch):
        client, _ = make_client(monkeypatch, limiter=RateLimiter(max_requests=1))

        assert [client.get("/health").status_code for _ in range(3)] == [200, 200, 200]
