"""
WhatsApp Webhook Security

- Meta HMAC signature check on deliveries (only when an app secret is set)
- Subscription challenge on webhook setup
"""

import hashlib
import hmac
from typing import Optional

from fastapi import HTTPException, Request, status


def compute_signature(app_secret: str, body: bytes) -> str:
    """Return the X-Hub-Signature-256 value Meta would send for body."""
    return "sha256=" + hmac.new(
        key=app_secret.encode("utf-8"),
        msg=body,
        digestmod=hashlib.sha256,
    ).hexdigest()


def verify_signature(request: Request, body: bytes, app_secret: Optional[str]) -> None:
    """
    Verify Meta HMAC-SHA256 signature on a webhook delivery.

    Skipped entirely when no app secret is configured.

    Raises:
        HTTPException(401): Missing signature
        HTTPException(403): Invalid signature
    """

    if not app_secret:
        return

    signature = request.headers.get("X-Hub-Signature-256")
    if not signature:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Hub-Signature-256 header"
        )

    # Constant-time compare
    if not hmac.compare_digest(signature, compute_signature(app_secret, body)):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid signature"
        )


def verify_webhook_challenge(
    hub_mode: Optional[str],
    hub_challenge: Optional[str],
    hub_verify_token: Optional[str],
    expected_token: str,
) -> Optional[str]:
    """
    Check a subscription challenge from WhatsApp.

    WhatsApp calls GET /webhook with hub.mode=subscribe, hub.challenge and
    hub.verify_token. The challenge is echoed back only when the mode is
    "subscribe" and the token matches. An unset expected token matches nothing.

    Returns:
        The challenge to echo back, or None when verification fails
    """

    if expected_token and hub_mode == "subscribe" and hub_verify_token == expected_token:
        return hub_challenge or ""
    return None
