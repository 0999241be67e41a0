"""
FastAPI Main Application

Backend service for importing social media videos into the
animation reference library.
"""

import os
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

# Load environment variables (.env.local first, then .env)
load_dotenv('.env.local')
load_dotenv()

# Setup logging with rotation
logs_dir = Path(__file__).parent.parent / 'logs'
logs_dir.mkdir(parents=True, exist_ok=True)
log_file = logs_dir / 'backend.log'

file_handler = RotatingFileHandler(
    log_file,
    maxBytes=10_000_000,  # 10MB per file
    backupCount=5,
    encoding='utf-8'
)
console_handler = logging.StreamHandler()

log_format = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
file_handler.setFormatter(log_format)
console_handler.setFormatter(log_format)

log_level = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    handlers=[file_handler, console_handler]
)

logger = logging.getLogger(__name__)
logger.info(f"Logging to file: {log_file}")

from core.config import Config
from app.routes import admin, importer, media


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for startup and shutdown"""
    logger.info("🚀 Starting Social Video Importer Backend")
    logger.info(f"   Environment: {os.getenv('ENVIRONMENT', 'development')}")

    env_status = Config.validate_environment()
    if env_status['missing']:
        logger.error(f"❌ Missing required environment variables: {', '.join(env_status['missing'])}")
    else:
        logger.info("✅ All required environment variables present")

    if Config.is_ytdlp_available():
        logger.info("✅ yt-dlp available")
    else:
        logger.warning("⚠️ yt-dlp not found on PATH or as a Python module. Imports will only work for direct video URLs.")

    temp_dir = Config.get_temp_dir()
    if os.path.isdir(temp_dir):
        logger.info(f"✅ Temp directory exists: {temp_dir}")
    else:
        logger.warning(f"⚠️ Temp directory not found: {temp_dir}")

    yield

    logger.info("👋 Shutting down Social Video Importer Backend")


app = FastAPI(
    title="Social Video Importer API",
    description="Backend service for importing social media videos into the library",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(importer.router, prefix="/api", tags=["import"])
app.include_router(media.router, prefix="/api", tags=["media"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "Social Video Importer API",
        "version": "1.0.0",
        "status": "online"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    env_status = Config.validate_environment()

    return {
        "status": "healthy",
        "ytdlp": Config.is_ytdlp_available(),
        "supabase_configured": env_status['all_required_present'],
        "cookies_configured": Config.get_ytdlp_cookies_file() is not None,
        "environment": os.getenv('ENVIRONMENT', 'development')
    }


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "message": str(exc),
            "path": str(request.url)
        }
    )


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
