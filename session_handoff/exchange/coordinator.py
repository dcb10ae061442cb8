"""
Session Exchange Coordinator

Drives the receiver side of the handoff:

1. Claim the pending token for a reference_id (atomic, single use)
2. Ask the issuer to validate it
3. Materialize a local session bound to the identity the issuer asserted

The token is claimed before the issuer is called. A concurrent second
attempt for the same reference_id therefore fails fast with a replay
instead of racing the network call, and a token is never validated twice.
The price is that a failed validation call leaves the token burned; the
client has to restart the handoff at the issuer.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

from session_handoff.exchange.validator import IssuerValidator, ValidationStatus
from session_handoff.storage.ports import (
    ClaimOutcome,
    SessionRecord,
    SessionStore,
    TokenStore,
)

logger = logging.getLogger(__name__)

UNKNOWN_USER_ID = "Unknown"
DEFAULT_SESSION_TTL = timedelta(minutes=20)


class EstablishOutcome(str, Enum):
    """Outcome of an establish-session attempt."""
    SUCCESS = "success"
    INVALID_REQUEST = "invalid_request"
    NO_PENDING_TOKEN = "no_pending_token"
    TOKEN_REPLAY = "token_replay"
    TOKEN_EXPIRED = "token_expired"
    VALIDATOR_UNREACHABLE = "validator_unreachable"
    VALIDATION_REJECTED = "validation_rejected"

    @property
    def is_retriable(self) -> bool:
        """Whether restarting the handoff at the issuer may succeed later."""
        return self == EstablishOutcome.VALIDATOR_UNREACHABLE


# Claim outcomes that stop the exchange before the issuer is called
_CLAIM_FAILURES: dict[ClaimOutcome, tuple[EstablishOutcome, str]] = {
    ClaimOutcome.NOT_FOUND: (
        EstablishOutcome.NO_PENDING_TOKEN,
        "No valid authentication token found for this session. "
        "Please restart the handoff from the issuing application.",
    ),
    ClaimOutcome.ALREADY_USED: (
        EstablishOutcome.TOKEN_REPLAY,
        "Authentication token has already been used for this session.",
    ),
    ClaimOutcome.EXPIRED: (
        EstablishOutcome.TOKEN_EXPIRED,
        "Authentication token has expired. "
        "Please restart the handoff from the issuing application.",
    ),
}


@dataclass
class EstablishResult:
    """
    Result of EstablishSession.

    ``user_id`` and ``session`` are only set on success.
    """
    outcome: EstablishOutcome
    message: str
    user_id: str | None = None
    session: SessionRecord | None = None

    @property
    def is_success(self) -> bool:
        return self.outcome == EstablishOutcome.SUCCESS


class SessionExchangeCoordinator:
    """
    Converts a pending one-time token into a local session.

    Invocations for different reference_ids run fully in parallel. For the
    same reference_id only the atomic claim is serialized; everything after
    it runs for the single caller that won the claim.
    """

    def __init__(
        self,
        token_store: TokenStore,
        session_store: SessionStore,
        validator: IssuerValidator,
        session_ttl: timedelta = DEFAULT_SESSION_TTL,
    ):
        """
        Initialize the coordinator.

        Args:
            token_store: Where the issuer's tokens are waiting
            session_store: Where established sessions are written
            validator: Client for the issuer's validation endpoint
            session_ttl: Lifetime of established sessions
        """
        self._tokens = token_store
        self._sessions = session_store
        self._validator = validator
        self._session_ttl = session_ttl

    async def establish_session(self, reference_id: str) -> EstablishResult:
        """
        Run the full exchange for a reference_id.

        Args:
            reference_id: Correlation key sent by the receiver's client

        Returns:
            EstablishResult describing success or the failure category
        """
        if not reference_id:
            return EstablishResult(
                EstablishOutcome.INVALID_REQUEST, "ReferenceId is required."
            )

        record, claim = await self._tokens.try_claim(reference_id)

        if claim != ClaimOutcome.CLAIMED:
            outcome, message = _CLAIM_FAILURES[claim]
            logger.warning(
                f"Establish session refused for reference_id '{reference_id}': {claim.value}"
            )
            return EstablishResult(outcome, message)

        # The token is consumed from here on, whatever happens next
        assert record is not None
        result = await self._validator.validate(record.token, reference_id)

        if result.status == ValidationStatus.UNREACHABLE:
            logger.error(
                f"Issuer unreachable while validating reference_id '{reference_id}': "
                f"{result.message}"
            )
            return EstablishResult(
                EstablishOutcome.VALIDATOR_UNREACHABLE,
                f"Could not reach the issuer to validate the token: {result.message}",
            )

        if result.status == ValidationStatus.REJECTED:
            logger.warning(
                f"Issuer rejected token for reference_id '{reference_id}': {result.message}"
            )
            return EstablishResult(
                EstablishOutcome.VALIDATION_REJECTED,
                f"Issuer validation failed: {result.message}",
            )

        user_id = result.user_id if result.user_id is not None else UNKNOWN_USER_ID
        session = await self._sessions.put(reference_id, user_id, self._session_ttl)

        logger.info(
            f"Session established for reference_id '{reference_id}' "
            f"(user: {user_id}, expires: {session.session_expiry.isoformat()})"
        )

        return EstablishResult(
            EstablishOutcome.SUCCESS,
            "Session established.",
            user_id=user_id,
            session=session,
        )
