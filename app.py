"""Leftover Recipe Service entry point.

Serves the REST API:
- POST /generate-recipe
- GET  /health
- OpenAPI docs at /docs

Run with: python app.py
"""

import uvicorn

from leftover_recipes.api.app import app
from leftover_recipes.utils.config import config
from leftover_recipes.utils.logger import logger


if __name__ == "__main__":
    logger.info(f"Starting Leftover Recipe Service on port {config.PORT}")
    logger.info(f"Model: {config.GEMINI_MODEL} | environment: {config.APP_ENV}")
    if not config.GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY is not set: generation requests will fail with a configuration error")
    logger.info(f"API docs available at: http://localhost:{config.PORT}/docs")
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
