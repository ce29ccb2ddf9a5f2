"""
StudyBuddy Backend - FastAPI Application

Main entry point: the Claude proxy (`/api/claude`, `/api/health`) and the
tutoring session API (`/sessions`).
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import get_settings, validate_required_settings
from shared.api import claude_proxy
from tutor.api import sessions

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("main")

# Validate configuration on startup
validate_required_settings()

# Initialize FastAPI app
app = FastAPI(
    title="StudyBuddy AI Backend",
    description="Document-grounded tutoring sessions backed by Claude",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(claude_proxy.router)
app.include_router(sessions.router)


@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting StudyBuddy backend on port {settings.api_port}")
    if settings.has_usable_api_key:
        logger.info("API Key configured: Yes")
    else:
        logger.warning("API Key configured: No - running in mock mode")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True
    )
