# quiz_gateway/main.py

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quiz_gateway import config
from quiz_gateway.api.quiz_routes import router as quiz_router
from quiz_gateway.errors import QuizGatewayError
from quiz_gateway.llm_client import GeminiClient
from quiz_gateway.quiz_service import QuizService

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)


async def gateway_error_handler(request: Request, exc: QuizGatewayError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s: %s", request.method, request.url.path, exc.error, exc.message)
    else:
        logger.warning("%s %s rejected: %s: %s", request.method, request.url.path, exc.error, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.error, "message": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": "Invalid request", "message": details})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Server error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error", "message": str(exc)})


def create_app(service: Optional[QuizService] = None) -> FastAPI:
    """Build the app. Without a service, one backed by a GeminiClient from the environment is created."""
    owned_client: Optional[GeminiClient] = None
    if service is None:
        owned_client = GeminiClient()
        service = QuizService(owned_client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Frontend URL: %s", config.FRONTEND_URL)
        logger.info(
            "Gemini API: %s (%s)",
            "Configured" if config.GEMINI_API_KEY else "NOT CONFIGURED",
            config.api_key_fingerprint(config.GEMINI_API_KEY),
        )
        yield
        if owned_client is not None:
            await owned_client.aclose()
        logger.info("Shutting down...")

    app = FastAPI(title="AI Quiz Gateway", lifespan=lifespan)
    app.state.quiz_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(QuizGatewayError, gateway_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(quiz_router)
    return app


app = create_app()

if __name__ == "__main__":
    logger.info("AI Quiz Server running on http://localhost:%d", config.PORT)
    uvicorn.run("quiz_gateway.main:app", host="0.0.0.0", port=config.PORT)
