from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from dotenv import load_dotenv
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from contextlib import asynccontextmanager
import logging
import traceback

import uvicorn

from app.config import get_settings
from app.rate_limit import limiter
from app.scrape import router as scrape_router
from core.ai_extractor import ExtractionClient
from crawler.browser_crawler import BrowserSession
from crawler.plugins import get_profile_registry
from pipeline.orchestrator import CrawlPipeline

load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the browser page and extraction client for the process lifetime."""
    profile = get_profile_registry().get_profile(settings.site)
    logger.info(f"[scraper] site profile: {profile.name}")

    surface = await BrowserSession.launch(
        browser_name=settings.browser,
        headless=settings.headless,
        user_agent=settings.user_agent,
        navigation_timeout_ms=settings.navigation_timeout_ms,
    )
    client = ExtractionClient(
        api_key=settings.extraction_api_key,
        base_url=settings.extraction_base_url,
        model=settings.extraction_model,
        timeout=settings.extraction_timeout_seconds,
    )
    app.state.pipeline = CrawlPipeline(
        surface,
        client,
        profile,
        items_per_batch=settings.items_per_batch,
        max_batch_chars=settings.max_batch_chars,
        extraction_timeout=settings.extraction_timeout_seconds,
    )

    try:
        yield
    finally:
        logger.info("[scraper] Preparing to shutdown...")
        app.state.pipeline = None
        await client.aclose()
        await surface.close()
        logger.info("[scraper] Shutdown successfully.")


app = FastAPI(title="ListHarvest API", version="0.1.0", lifespan=lifespan)

# Add rate limiter state
app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(f"[rate_limit] {get_remote_address(request)} over quota ({exc.detail})")
    return JSONResponse(
        status_code=429,
        content={"success": False, "message": "Too many requests, please try again later."},
        headers={"Retry-After": str(exc.limit.limit.get_expiry())},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return JSONResponse(status_code=404, content={"message": "Not Found."})
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


# Error masking middleware
@app.middleware("http")
async def error_masking_middleware(request: Request, call_next):
    """Serialize unhandled errors as 500s; include the traceback in dev."""
    try:
        return await call_next(request)
    except Exception as e:
        logger.error(f"Unhandled error on {request.url.path}: {e}")
        content = {
            "status": "error",
            "error": f"{type(e).__name__}: {e}",
        }
        if settings.is_dev:
            content["traceback"] = traceback.format_exc()
        return JSONResponse(status_code=500, content=content)


app.include_router(scrape_router)


@app.get("/health")
async def health():
    return {"success": True}


if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port)
