"""
FastAPI Application for the GenUI Server.

Exposes the two GenUI operations:
- POST /startSession binds a new session to a widget catalog
- POST /generateUi streams surface mutations for a conversation (Server-Sent Events)
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from fastapi import Body, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse

from config import settings
from azure_client import client_manager
from core import (
    AgentsStreamingModel,
    GenerateUiRequest,
    GenerationOrchestrator,
    GenerationStream,
    GenUiError,
    SessionLifecycle,
    SessionStore,
    StartSessionRequest,
)
from core.models import parse_request
from persistence import create_session_store

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Reduce SDK logging verbosity
logging.getLogger("azure.cosmos").setLevel(logging.WARNING)
logging.getLogger("azure.core").setLevel(logging.WARNING)
logging.getLogger("azure.identity").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("openai.agents").setLevel(logging.WARNING)

# Global instances
session_store: Optional[SessionStore] = None
lifecycle: Optional[SessionLifecycle] = None
orchestrator: Optional[GenerationOrchestrator] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - handles startup and shutdown."""
    global session_store, lifecycle, orchestrator

    logger.info("Starting GenUI Server...")

    session_store = create_session_store(settings)
    lifecycle = SessionLifecycle(session_store)

    model = AgentsStreamingModel(
        client_manager,
        deployment=settings.azure_openai_deployment,
        max_turns=settings.genui_max_turns,
        tracing_disabled=settings.agents_tracing_disabled,
    )
    orchestrator = GenerationOrchestrator(session_store, model)
    logger.info(f"GenUI server ready (session store: {settings.session_store_backend})")

    yield

    # Cleanup
    logger.info("Shutting down...")
    await client_manager.close()
    if session_store:
        await session_store.close()


# Create FastAPI app
app = FastAPI(
    title="GenUI Server",
    description="Session-scoped generative UI: streams catalog-constrained surface updates from Azure OpenAI",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc"
)

# CORS middleware for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_body(exc: GenUiError) -> Dict[str, Any]:
    return {"error": {"status": exc.status_code, "message": exc.message}}


def _sse_frame(payload: Dict[str, Any]) -> str:
    return f"data: {json.dumps(payload)}\n\n"


@app.exception_handler(GenUiError)
async def genui_error_handler(request: Request, exc: GenUiError):
    """Map typed GenUI errors to their HTTP status."""
    logger.warning(f"{request.url.path} rejected: {type(exc).__name__}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc))


async def stream_generation(stream: GenerationStream) -> AsyncIterator[str]:
    """
    Render a generation as Server-Sent Events.

    One ``message`` frame per event, then a terminal ``result`` frame. A
    failure after the stream opened becomes a terminal ``error`` frame.
    Client disconnects close this generator, which cancels the model run.
    """
    async with stream:
        try:
            async for event in stream:
                yield _sse_frame({"message": event.model_dump(mode="json")})
            result = await stream.result()
            yield _sse_frame({"result": result.to_wire()})
        except GenUiError as exc:
            yield _sse_frame(_error_body(exc))
        except Exception as exc:
            logger.error(f"Error during UI generation stream: {exc}", exc_info=True)
            yield _sse_frame({"error": {"status": 500, "message": str(exc)}})


@app.post("/startSession")
async def start_session(payload: Any = Body(...)):
    """
    Start a session bound to a widget catalog.
    Returns the new session id.
    """
    request = parse_request(StartSessionRequest, payload)
    session_id = await lifecycle.start_session(request)
    return {"sessionId": session_id}


@app.post("/generateUi")
async def generate_ui(payload: Any = Body(...)):
    """
    Generate UI for a conversation.
    Streams tool requests and trailing text as Server-Sent Events.
    """
    request = parse_request(GenerateUiRequest, payload)
    # Resolves the session before the response opens, so unknown sessions get a 404
    stream = await orchestrator.generate_ui(request)

    return StreamingResponse(
        stream_generation(stream),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no"
        }
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": "0.1.0",
        "session_store": settings.session_store_backend,
        "azure_openai_configured": bool(settings.azure_openai_endpoint),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=False,
        log_level=settings.log_level.lower()
    )
