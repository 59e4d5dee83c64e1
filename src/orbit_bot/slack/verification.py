"""Slack request signature verification as FastAPI dependencies."""

import json
from urllib.parse import parse_qs

from fastapi import HTTPException, Request
from slack_sdk.signature import SignatureVerifier

from orbit_bot.config import get_settings


async def _verified_body(request: Request) -> str:
    """Return the raw body after checking the Slack signature.

    Reads the raw body FIRST (before any parsing) so verification uses the
    exact bytes Slack signed. Raises HTTPException(403) if invalid.
    """
    settings = get_settings()
    body = (await request.body()).decode("utf-8")

    timestamp = request.headers.get("X-Slack-Request-Timestamp", "")
    signature = request.headers.get("X-Slack-Signature", "")

    verifier = SignatureVerifier(signing_secret=settings.slack_signing_secret)

    if not verifier.is_valid(body=body, timestamp=timestamp, signature=signature):
        raise HTTPException(status_code=403, detail="Invalid Slack signature")

    return body


async def verify_slack_request(request: Request) -> dict:
    """Verify an Events API request and return its parsed JSON payload."""
    body = await _verified_body(request)
    return json.loads(body)


async def verify_slack_interaction(request: Request) -> dict:
    """Verify an interactivity request and return the decoded ``payload`` field."""
    body = await _verified_body(request)
    form = parse_qs(body)
    raw = form.get("payload", ["{}"])[0]
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        raise HTTPException(status_code=400, detail="Invalid interaction payload")
