"""
Receiver Configuration

Environment-based settings for the handoff receiver.

Environment variables (a .env file in the working directory is honoured):
    HANDOFF_ISSUER_ORIGIN: Base URL of the issuer backend
    HANDOFF_VALIDATE_PATH: Path of the issuer's token validation endpoint
    HANDOFF_VALIDATOR_TIMEOUT: Timeout in seconds for the validation call
    HANDOFF_TOKEN_TTL: Token lifetime in seconds, counted from receipt
    HANDOFF_SESSION_TTL: Local session lifetime in seconds
    HANDOFF_LOG_LEVEL: Logging level name
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta


@dataclass
class HandoffSettings:
    """
    Configuration for the receiver.

    Attributes:
        issuer_origin: Base URL of the issuer backend
        validate_path: Issuer path that validates a token
        validator_timeout_seconds: Upper bound for the outbound call
        token_ttl_seconds: How long a received token stays claimable
        session_ttl_seconds: How long an established session lasts
        log_level: Root logging level
    """
    issuer_origin: str = "http://localhost:7001"
    validate_path: str = "/api/receiver/validate-token"
    validator_timeout_seconds: float = 10.0
    token_ttl_seconds: int = 300  # 5 minutes
    session_ttl_seconds: int = 1200  # 20 minutes
    log_level: str = "INFO"

    @property
    def validate_url(self) -> str:
        return f"{self.issuer_origin.rstrip('/')}/{self.validate_path.lstrip('/')}"

    @property
    def token_ttl(self) -> timedelta:
        return timedelta(seconds=self.token_ttl_seconds)

    @property
    def session_ttl(self) -> timedelta:
        return timedelta(seconds=self.session_ttl_seconds)


def settings_from_env() -> HandoffSettings:
    """
    Create HandoffSettings from environment variables.

    Raises:
        ValueError: If a numeric variable cannot be parsed
    """
    defaults = HandoffSettings()
    return HandoffSettings(
        issuer_origin=os.getenv("HANDOFF_ISSUER_ORIGIN", defaults.issuer_origin),
        validate_path=os.getenv("HANDOFF_VALIDATE_PATH", defaults.validate_path),
        validator_timeout_seconds=float(
            os.getenv("HANDOFF_VALIDATOR_TIMEOUT", str(defaults.validator_timeout_seconds))
        ),
        token_ttl_seconds=int(os.getenv("HANDOFF_TOKEN_TTL", str(defaults.token_ttl_seconds))),
        session_ttl_seconds=int(
            os.getenv("HANDOFF_SESSION_TTL", str(defaults.session_ttl_seconds))
        ),
        log_level=os.getenv("HANDOFF_LOG_LEVEL", defaults.log_level).upper(),
    )
