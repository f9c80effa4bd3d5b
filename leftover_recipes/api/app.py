"""HTTP API for the leftover recipe service.

Endpoints:
- POST /generate-recipe: ingredients (+ optional preferences) -> 3 recipe suggestions
- GET  /health: liveness probe

Every failure is a RecipeServiceError, rendered by one exception handler as
`{"error": ...}` with the status fixed by its kind. Diagnostics (`debug`,
`details`) are only attached outside production.
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from leftover_recipes.models.errors import RecipeServiceError
from leftover_recipes.services.handler import RecipeRequestHandler
from leftover_recipes.utils.config import config
from leftover_recipes.utils.logger import logger


def create_app(handler: Optional[RecipeRequestHandler] = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        handler: Request handler to serve with; one is built from the module-level
            config if omitted. Its RateLimiter is shared by all requests to this app.

    Returns:
        Configured FastAPI instance.
    """
    if handler is None:
        handler = RecipeRequestHandler(config)

    app = FastAPI(
        title="Leftover Recipe Service",
        version="1.0.0",
        description="Recipe suggestions for leftover ingredients, generated with Gemini.",
    )
    app.state.handler = handler

    @app.exception_handler(RecipeServiceError)
    async def recipe_service_error_handler(request: Request, exc: RecipeServiceError) -> JSONResponse:
        body = exc.to_response(include_diagnostics=not handler.config.is_production)
        return JSONResponse(status_code=exc.status_code, content=body.to_wire())

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.post("/generate-recipe")
    async def generate_recipe(request: Request) -> JSONResponse:
        # Raw body: validation errors must map to the service's own 400 shape
        body = await request.body()
        response = await handler.handle(body)
        return JSONResponse(content=response.to_wire())

    logger.info(f"API configured (environment={handler.config.APP_ENV})")
    return app


app = create_app()
