import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from api import router
from services.dexscreener import dexscreener_client
from services.universe.manager import universe_manager
from services.universe.scheduler import universe_scheduler
from utils.logger import setup_logging, get_logger

# Setup logging
setup_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)
logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info(
        "Starting live universe service",
        chain_id=settings.DEX_CHAIN_ID,
        target_universe=settings.DEX_TARGET_UNIVERSE,
    )

    # A failed warm-up leaves the snapshot warming_up; the scheduled cycles
    # keep retrying on their own cadence.
    try:
        await universe_manager.initialize()
    except Exception as e:
        logger.error(
            "Initial universe build failed",
            error=str(e),
            traceback=traceback.format_exc(),
        )

    await universe_scheduler.start()

    try:
        yield
    finally:
        logger.info("Shutting down live universe service...")
        await universe_scheduler.stop()
        await dexscreener_client.close()
        logger.info("Shutdown complete")


app = FastAPI(
    title="MemePulse Live Universe",
    description="Ranked universe of live DEX Screener tokens for one chain",
    version="1.0.0",
    lifespan=lifespan,
)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        traceback=traceback.format_exc(),
    )
    return JSONResponse(
        status_code=500, content={"detail": "Internal server error", "error": str(exc)}
    )


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# API routes
app.include_router(router, prefix="/api")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=settings.PORT,
        # Single worker: the universe lives in process memory.
        timeout_keep_alive=30,
    )
