#!/usr/bin/env python3
"""
Session Handoff Demo

Walks through the receiver side of the handoff against an in-process
fake issuer.

Usage:
    python scripts/demo_handoff.py

This script:
1. Creates in-memory token and session stores
2. Pushes tokens the way the issuer backend would
3. Establishes sessions (success, replay, expiry, rejection)
4. Prints each outcome
"""

import asyncio
import json
import logging
from datetime import timedelta

import httpx

from session_handoff import (
    HttpIssuerValidator,
    SessionExchangeCoordinator,
    create_memory_storage,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

ISSUER_URL = "http://issuer.local/api/receiver/validate-token"

# Tokens the fake issuer minted, with the user each belongs to
MINTED = {"tok-abc": "u42", "tok-def": "u7"}


def fake_issuer(request: httpx.Request) -> httpx.Response:
    """Validate tokens against the MINTED table."""
    body = json.loads(request.content)
    user_id = MINTED.get(body.get("token"))
    if user_id is None:
        return httpx.Response(200, json={"success": False, "message": "Unknown token"})
    return httpx.Response(200, json={"success": True, "userId": user_id})


async def main() -> None:
    storage = await create_memory_storage()
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake_issuer))
    validator = HttpIssuerValidator(ISSUER_URL, timeout_seconds=2, client=client)

    coordinator = SessionExchangeCoordinator(
        token_store=storage.tokens,
        session_store=storage.sessions,
        validator=validator,
        session_ttl=timedelta(minutes=20),
    )

    five_minutes = timedelta(minutes=5)
    await storage.tokens.put("ref-1", "tok-abc", five_minutes)
    await storage.tokens.put("ref-2", "tok-def", timedelta(seconds=-1))
    await storage.tokens.put("ref-3", "tok-forged", five_minutes)

    scenarios = [
        ("first exchange", "ref-1"),
        ("replayed exchange", "ref-1"),
        ("expired token", "ref-2"),
        ("forged token", "ref-3"),
        ("never pushed", "ref-4"),
    ]

    for label, reference_id in scenarios:
        result = await coordinator.establish_session(reference_id)
        print(f"{label:<20} {reference_id:<6} -> {result.outcome.value:<22} {result.message}")

    session = await storage.sessions.get("ref-1")
    if session:
        print(f"\nSession for ref-1: user={session.user_id} expires={session.session_expiry.isoformat()}")

    await client.aclose()


if __name__ == "__main__":
    asyncio.run(main())
