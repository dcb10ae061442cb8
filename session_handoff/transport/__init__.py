# HTTP Transport
# FastAPI endpoints for the issuer push and the client's session request

from session_handoff.transport.schemas import ReceiveTokenRequest, EstablishSessionRequest

__all__ = ["ReceiveTokenRequest", "EstablishSessionRequest"]
