"""
Handoff Receiver Application

FastAPI application exposing the receiver side of the session handoff.

Endpoints:
- POST /api/issuer-integration/receive-token: issuer backend pushes a token
- POST /api/issuer-integration/establish-session: receiver client trades
  a reference_id for a local session
- GET /api/issuer-integration/session/{reference_id}: inspect a session
- GET /health: store counters

Configuration is read from environment variables (see session_handoff.config);
a .env file in the working directory is loaded first.

Run with:
    uvicorn session_handoff.transport.app:app
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from session_handoff.config import HandoffSettings, settings_from_env
from session_handoff.exchange import (
    EstablishOutcome,
    HttpIssuerValidator,
    IssuerValidator,
    SessionExchangeCoordinator,
)
from session_handoff.storage import StorageBundle, create_memory_storage
from session_handoff.transport.schemas import EstablishSessionRequest, ReceiveTokenRequest
from session_handoff.utils.time import utc_now

logger = logging.getLogger(__name__)

INTERNAL_ERROR_CODE = "internal_error"

# HTTP status per establish-session outcome
OUTCOME_STATUS: dict[EstablishOutcome, int] = {
    EstablishOutcome.SUCCESS: 200,
    EstablishOutcome.INVALID_REQUEST: 400,
    EstablishOutcome.NO_PENDING_TOKEN: 404,
    EstablishOutcome.TOKEN_REPLAY: 409,
    EstablishOutcome.TOKEN_EXPIRED: 401,
    EstablishOutcome.VALIDATOR_UNREACHABLE: 500,
    EstablishOutcome.VALIDATION_REJECTED: 401,
}


def _failure(status_code: int, message: str, error: str, retriable: bool = False) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "message": message,
            "error": error,
            "retriable": retriable,
        },
    )


router = APIRouter(prefix="/api/issuer-integration", tags=["handoff"])


@router.post("/receive-token")
async def receive_token(body: ReceiveTokenRequest, request: Request):
    """
    Accept a one-time token pushed by the issuer backend.

    The token stays claimable for the configured TTL counted from now.
    """
    try:
        logger.info(f"Received token from issuer for reference_id '{body.reference_id}'")

        if not body.token or not body.reference_id:
            logger.warning("Rejected token push: token or referenceId missing")
            return _failure(
                400, "Token and referenceId are required.", EstablishOutcome.INVALID_REQUEST.value
            )

        if body.user_id:
            logger.debug(f"Issuer hinted user '{body.user_id}' for reference_id '{body.reference_id}'")

        state = request.app.state
        record = await state.storage.tokens.put(
            body.reference_id, body.token, state.settings.token_ttl
        )

        logger.info(
            f"Stored token for reference_id '{record.reference_id}' "
            f"(expires: {record.expiry.isoformat()})"
        )
        return {"success": True, "message": "Token received and stored."}

    except Exception:
        logger.exception(
            f"Unexpected error while storing token for reference_id '{body.reference_id}'"
        )
        return _failure(
            500, "An internal error occurred while processing the token.", INTERNAL_ERROR_CODE
        )


@router.post("/establish-session")
async def establish_session(body: EstablishSessionRequest, request: Request):
    """
    Exchange the pending token for a reference_id into a local session.
    """
    logger.info(f"Client requested session establishment for reference_id '{body.reference_id}'")

    coordinator: SessionExchangeCoordinator = request.app.state.coordinator
    try:
        result = await coordinator.establish_session(body.reference_id)
    except Exception:
        logger.exception(
            f"Unexpected error while establishing session for reference_id '{body.reference_id}'"
        )
        return _failure(
            500, "An internal error occurred while establishing the session.", INTERNAL_ERROR_CODE
        )

    if result.is_success:
        return {"success": True, "message": result.message, "userId": result.user_id}

    return _failure(
        OUTCOME_STATUS[result.outcome],
        result.message,
        result.outcome.value,
        retriable=result.outcome.is_retriable,
    )


@router.get("/session/{reference_id}")
async def get_session(reference_id: str, request: Request):
    """Return the local session for a reference_id, expired or not."""
    session = await request.app.state.storage.sessions.get(reference_id)
    if session is None:
        return _failure(404, "No session exists for this reference id.", "no_session")

    return {
        "referenceId": session.reference_id,
        "userId": session.user_id,
        "sessionExpiry": session.session_expiry.isoformat(),
        "active": not session.is_expired(utc_now()),
    }


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Malformed request to {request.url.path}: {exc.errors()}")
    return _failure(400, "Malformed request body.", EstablishOutcome.INVALID_REQUEST.value)


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.url.path}", exc_info=exc)
    return _failure(500, "An internal error occurred.", INTERNAL_ERROR_CODE)


def create_app(
    settings: HandoffSettings | None = None,
    validator: IssuerValidator | None = None,
    storage: StorageBundle | None = None,
) -> FastAPI:
    """
    Build the receiver application.

    Stores and the validator are created once in the lifespan and kept on
    ``app.state``; pass them in to share or replace them (tests do).

    Args:
        settings: Receiver settings (defaults to the environment)
        validator: Issuer validator (defaults to HTTP against settings)
        storage: Storage bundle (defaults to fresh in-memory stores)
    """
    settings = settings or settings_from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting handoff receiver...")

        bundle = storage or await create_memory_storage()
        issuer = validator or HttpIssuerValidator(
            settings.validate_url,
            timeout_seconds=settings.validator_timeout_seconds,
        )

        app.state.settings = settings
        app.state.storage = bundle
        app.state.validator = issuer
        app.state.coordinator = SessionExchangeCoordinator(
            token_store=bundle.tokens,
            session_store=bundle.sessions,
            validator=issuer,
            session_ttl=settings.session_ttl,
        )

        logger.info(f"Handoff receiver started (issuer: {settings.validate_url})")

        yield

        logger.info("Shutting down handoff receiver...")
        await issuer.aclose()
        await bundle.close()
        logger.info("Handoff receiver stopped")

    app = FastAPI(
        title="Session Handoff Receiver",
        description="Receiver side of a cross-origin one-time-token session handoff",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        bundle: StorageBundle = request.app.state.storage
        return {
            "status": "healthy",
            "tokens": bundle.tokens.token_count,
            "pending_tokens": bundle.tokens.pending_count,
            "sessions": bundle.sessions.session_count,
            "active_sessions": bundle.sessions.active_count,
        }

    return app


load_dotenv()

_settings = settings_from_env()

logging.basicConfig(
    level=_settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

app = create_app(_settings)
