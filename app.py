"""
FastAPI backend for Tenderly.

MODULAR STRUCTURE:
==================
1. core/config.py          - Settings loaded from the environment
2. core/security.py        - Password hashing and session tokens
3. core/dependencies.py    - Shared FastAPI dependencies (get_db, require_user, collaborators)
4. core/llm_client.py      - OpenAI / Anthropic chat client with retries
5. services/eligibility    - Heuristic tender eligibility scoring
6. services/ai             - Prompt building, validation and fallbacks for AI features
7. services/attestation    - Algorand attestation of submitted proposals
8. services/translation.py - English <-> Bahasa Malaysia translation
9. api/routes/*            - HTTP routes, one module per area

Third-party clients are built once at startup and kept on ``app.state``.
"""

import logging
from datetime import datetime

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from core.config import get_settings

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Quiet down chatty client libraries
for noisy_logger in ("httpx", "httpcore", "urllib3", "redis"):
    logging.getLogger(noisy_logger).setLevel(logging.WARNING)

from database import create_tables
from core.llm_client import LLMClient
from core.redis_client import is_redis_available
from services.ai import AIAssistant
from services.attestation import AttestationClient
from services.translation import Translator

# Initialize FastAPI app
app = FastAPI(title="Tenderly", description="Tender discovery, AI proposal drafting and on-chain submission receipts")


@app.on_event("startup")
async def startup_event():
    """Create tables and build the third-party clients shared by all requests."""
    try:
        logger.info("Application startup: Ensuring database tables exist...")
        create_tables()
        logger.info("✓ Database tables verified/created successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database tables on startup: {e}")

    llm = LLMClient.from_settings(settings)
    app.state.ai_assistant = AIAssistant(llm)
    if llm.is_configured:
        logger.info(f"✓ LLM providers: {', '.join(llm.provider_names)}")
    else:
        logger.warning("⚠ No LLM API key configured, AI features will return template content")

    app.state.attestation_client = AttestationClient.from_settings(settings)

    app.state.translator = Translator.from_settings(settings)
    if not app.state.translator.is_available:
        logger.warning("⚠ Translation API key not configured, /api/translate will answer 503")


# Import and mount API routers
from api.routes import auth as auth_router
from api.routes import tenders as tenders_router
from api.routes import company as company_router
from api.routes import proposals as proposals_router
from api.routes import submission as submission_router
from api.routes import ai_assistant as ai_assistant_router
from api.routes import attestations as attestations_router
from api.routes import translate as translate_router

app.include_router(auth_router.router)
app.include_router(tenders_router.router)
app.include_router(company_router.router)
app.include_router(proposals_router.router)
app.include_router(submission_router.router)
app.include_router(ai_assistant_router.router)
app.include_router(attestations_router.router)
app.include_router(translate_router.router)


# =============================================================================
# CUSTOM ERROR HANDLERS
# =============================================================================

@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Return the ``{"detail": ...}`` envelope for every HTTP error."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/api/health")
async def health_check(request: Request):
    """Liveness plus availability of each optional collaborator."""
    state = request.app.state
    return {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "services": {
            "redis": is_redis_available(),
            "llm": state.ai_assistant.is_configured,
            "attestation": state.attestation_client.is_available,
            "translation": state.translator.is_available,
        },
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app:app", host="0.0.0.0", port=5001, reload=True)
