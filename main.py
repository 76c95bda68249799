import logging
import os
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from storybook.services.Create_Order.create_order import CreateOrder
from storybook.services.Create_Order.create_order_route import router as create_order_router
from storybook.services.Generate_Book.generate_book import GenerateBook
from storybook.services.Generate_Book.generate_book_route import router as generate_book_router
from storybook.services.Generate_Images.generate_images import GenerateImages
from storybook.services.Generate_Story.generate_story import GenerateStory
from storybook.utils.mem_storage import MemStorage
from storybook.utils.settings import Settings

logger = logging.getLogger(__name__)


def describe_validation_error(exc: RequestValidationError) -> str:
    """Summarise the first violation as '<field>: <message>'"""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[MemStorage] = None,
    story_generator: Optional[GenerateStory] = None,
    image_generator: Optional[GenerateImages] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()

    app = FastAPI(
        title="Storybook API",
        description="Personalised children's storybooks: story generation, illustrations and checkout",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.storage = storage or MemStorage()
    app.state.generate_book = GenerateBook(
        storage=app.state.storage,
        story_generator=story_generator or GenerateStory.from_settings(settings),
        image_generator=image_generator or GenerateImages.from_settings(settings),
    )
    app.state.create_order = CreateOrder(storage=app.state.storage)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        if request.url.path.startswith("/api"):
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.0f}ms)")
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": describe_validation_error(exc)})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    app.include_router(generate_book_router, prefix="/api")
    app.include_router(create_order_router, prefix="/api")

    os.makedirs(settings.images_dir, exist_ok=True)
    app.mount(settings.images_url_prefix, StaticFiles(directory=settings.images_dir), name="images")

    @app.get("/")
    async def root():
        """Root endpoint with API information"""
        return {
            "message": "Welcome to the Storybook API",
            "version": "1.0.0",
            "docs": "/docs",
            "services": {
                "generate_book": "/api/books/generate",
                "orders": "/api/orders"
            }
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "message": "API is running"}

    @app.on_event("startup")
    async def startup_event():
        """Startup event to check configuration"""
        if not settings.openai_api_key:
            logger.warning("OPENAI_API_KEY not set; story generation will fail")
        if settings.image_provider == "seedream" and not settings.ark_api_key:
            logger.warning("ARK_API_KEY not set; illustrations will use stock images")
        if settings.image_provider == "gemini" and not settings.gemini_api_key:
            logger.warning("GEMINI_API_KEY not set; illustrations will use stock images")
        logger.info(f"Storybook API ready (story mode: {settings.story_mode}, images: {settings.image_provider})")

    return app


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_app() -> FastAPI:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    return create_app(settings)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:build_app", factory=True, host="0.0.0.0", port=int(os.getenv("PORT", 8000)), reload=True)
