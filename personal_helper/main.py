"""
FastAPI entry point for the Personal Helper API.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from personal_helper.config import settings
from personal_helper.api import pr_analyzer, qa_agent, ticket_creator

# Configure logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


async def _reap_chat_sessions(interval_seconds: int) -> None:
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            ticket_creator.chat_store.reap_expired()
        except Exception as e:
            logger.error("Chat session cleanup failed: %s", e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: run the chat session reaper. Shutdown: cancel it."""
    reaper = asyncio.create_task(_reap_chat_sessions(settings.chat_reaper_interval_seconds))
    logger.info("Personal Helper API started on port %s", settings.port)
    yield
    reaper.cancel()
    try:
        await reaper
    except asyncio.CancelledError:
        pass


app = FastAPI(
    title=settings.api_title,
    description="PR analysis, automated QA testing and Jira ticket drafting",
    version=settings.api_version,
    lifespan=lifespan,
)

# Base allowed origins for local development
ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]

for origin in settings.extra_cors_origins:
    if origin not in ALLOWED_ORIGINS:
        ALLOWED_ORIGINS.append(origin)

# Add CORS middleware - must be added before exception handlers
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _cors_headers(request: Request) -> dict:
    origin = request.headers.get("Origin", "")
    allowed_origin = origin if origin in ALLOWED_ORIGINS else ALLOWED_ORIGINS[0]
    return {
        "Access-Control-Allow-Origin": allowed_origin,
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Methods": "*",
        "Access-Control-Allow-Headers": "*",
    }


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Render HTTP errors as {"error": ...}; dict details are passed through."""
    content = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=_cors_headers(request))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are client errors."""
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message}, headers=_cors_headers(request))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler to ensure CORS headers are included in error responses.
    """
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(status_code=500, content={"error": str(exc)}, headers=_cors_headers(request))


# Include routers
app.include_router(pr_analyzer.router, prefix="/api", tags=["PR Analyzer"])
app.include_router(qa_agent.router, prefix="/api", tags=["QA Agent"])
app.include_router(ticket_creator.router, prefix="/api", tags=["Ticket Creator"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "Personal Helper API"}


@app.get("/api/health")
async def health():
    """Health check with per-tool configuration status."""
    return {
        "status": "ok",
        "message": "Personal Helper API is running",
        "services": {
            "prAnalyzer": bool(settings.anthropic_api_key and settings.github_token),
            "qaAgent": bool(settings.anthropic_api_key and settings.jira_host),
            "ticketCreator": bool(settings.openai_api_key and settings.jira_host),
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.port)
