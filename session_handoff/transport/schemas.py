"""
Request Models

Wire shapes of the two inbound operations. Field names follow the JSON the
issuer and the receiver's client send (camelCase); snake_case is accepted
too. ``ott`` is accepted as an alias of ``token``.
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ReceiveTokenRequest(BaseModel):
    """
    Token push from the issuer backend.

    Emptiness is checked by the handler so that a missing field yields the
    same client error as an empty one.
    """
    model_config = ConfigDict(extra="ignore")

    token: str = Field(
        default="",
        validation_alias=AliasChoices("token", "ott"),
        description="Opaque one-time token"
    )
    reference_id: str = Field(
        default="",
        validation_alias=AliasChoices("referenceId", "reference_id"),
        description="Correlation key for the handoff"
    )
    user_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("userId", "user_id"),
        description="Optional identity hint, informational only"
    )


class EstablishSessionRequest(BaseModel):
    """Session request from the receiver's own client."""
    model_config = ConfigDict(extra="ignore")

    reference_id: str = Field(
        default="",
        validation_alias=AliasChoices("referenceId", "reference_id"),
        description="Correlation key for the handoff"
    )
