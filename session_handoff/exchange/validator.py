"""
Issuer Validator

Outbound half of the handoff: asks the issuer backend whether a claimed
token is genuine and which user it belongs to.

Three results are possible and are kept apart on purpose:
- ACCEPTED: the issuer vouched for the token
- REJECTED: the issuer answered and refused it
- UNREACHABLE: no usable answer (network error, timeout, bad status, bad body)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_MESSAGE = "Unknown validation error from issuer."


class ValidationStatus(str, Enum):
    """Outcome of a validation call."""
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    UNREACHABLE = "unreachable"


@dataclass
class ValidationResult:
    """
    Result of asking the issuer to validate a token.
    """
    status: ValidationStatus
    user_id: str | None = None
    message: str | None = None

    @property
    def is_accepted(self) -> bool:
        return self.status == ValidationStatus.ACCEPTED

    @classmethod
    def accepted(cls, user_id: str | None = None) -> "ValidationResult":
        return cls(ValidationStatus.ACCEPTED, user_id=user_id)

    @classmethod
    def rejected(cls, message: str = DEFAULT_REJECTION_MESSAGE) -> "ValidationResult":
        return cls(ValidationStatus.REJECTED, message=message)

    @classmethod
    def unreachable(cls, message: str) -> "ValidationResult":
        return cls(ValidationStatus.UNREACHABLE, message=message)


class IssuerValidator(ABC):
    """
    Port for the issuer's validation endpoint.

    Implementations report transport problems as UNREACHABLE results
    instead of raising.
    """

    @abstractmethod
    async def validate(self, token: str, reference_id: str) -> ValidationResult:
        """
        Validate a claimed token with the issuer.

        Args:
            token: The opaque token value
            reference_id: Correlation key the token was delivered for

        Returns:
            ValidationResult with an explicit status
        """
        ...

    async def aclose(self) -> None:
        """Release any held resources."""
        pass


def parse_validation_response(body: Any) -> ValidationResult:
    """
    Interpret the issuer's JSON body.

    Only a literal ``true`` success flag counts as acceptance, and
    ``userId`` / ``message`` are only taken when they are strings.
    """
    if not isinstance(body, dict):
        return ValidationResult.unreachable("Issuer returned a malformed response")

    if body.get("success") is True:
        user_id = body.get("userId")
        return ValidationResult.accepted(user_id if isinstance(user_id, str) else None)

    message = body.get("message")
    return ValidationResult.rejected(
        message if isinstance(message, str) else DEFAULT_REJECTION_MESSAGE
    )


class HttpIssuerValidator(IssuerValidator):
    """
    Validates tokens by POSTing to the issuer over HTTP.

    The request body is ``{"token": ..., "referenceId": ...}``. Every call
    is bounded by ``timeout_seconds``; a timeout is reported the same way
    as any other transport failure.
    """

    def __init__(
        self,
        validate_url: str,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the validator.

        Args:
            validate_url: Full URL of the issuer validation endpoint
            timeout_seconds: Timeout applied to each call
            client: Optional shared client (caller keeps ownership)
        """
        self._validate_url = validate_url
        self._timeout = httpx.Timeout(timeout_seconds)
        self._client = client or httpx.AsyncClient(timeout=self._timeout)
        self._owns_client = client is None

    @property
    def validate_url(self) -> str:
        return self._validate_url

    async def validate(self, token: str, reference_id: str) -> ValidationResult:
        logger.info(
            f"Calling issuer for token validation at {self._validate_url} "
            f"(reference_id: {reference_id})"
        )

        try:
            response = await self._client.post(
                self._validate_url,
                json={"token": token, "referenceId": reference_id},
                timeout=self._timeout,
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.error(f"Issuer validation timed out for reference_id '{reference_id}': {e}")
            return ValidationResult.unreachable("Timed out waiting for issuer")
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Issuer validation returned HTTP {e.response.status_code} "
                f"for reference_id '{reference_id}'"
            )
            return ValidationResult.unreachable(
                f"Issuer responded with HTTP {e.response.status_code}"
            )
        except httpx.HTTPError as e:
            logger.error(f"Network error during issuer validation for reference_id '{reference_id}': {e}")
            return ValidationResult.unreachable(f"Network error communicating with issuer: {e}")

        try:
            body = response.json()
        except ValueError:
            logger.error(f"Issuer returned a non-JSON body for reference_id '{reference_id}'")
            return ValidationResult.unreachable("Issuer returned a malformed response")

        return parse_validation_response(body)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
