from __future__ import annotations

import hashlib
import hmac
import logging

SIGNATURE_HEADER = "X-Hub-Signature-256"


class WebhookVerifier:
    """Meta webhook handshake and payload signature checks."""

    def __init__(self, verify_token: str, app_secret: str | None, env: str) -> None:
        self._verify_token = verify_token
        self._app_secret = app_secret
        self._lenient = env.lower() in {"dev", "local"}
        self._logger = logging.getLogger(__name__)

    def challenge_for(self, mode: str | None, token: str | None, challenge: str | None) -> str | None:
        """The challenge to echo back, or None when the handshake must be refused."""
        if mode != "subscribe" or not self._verify_token:
            return None
        if not token or not hmac.compare_digest(token, self._verify_token):
            return None
        return challenge or ""

    def is_signed(self, body: bytes, signature_header: str | None) -> bool:
        if not signature_header:
            if self._lenient:
                self._logger.warning("Missing signature header; accepting in dev mode")
                return True
            return False

        if not self._app_secret:
            self._logger.error("Missing app secret for signature verification")
            return False

        algo, sep, signature = signature_header.partition("=")
        if not sep or algo.lower() != "sha256":
            return False

        expected = hmac.new(self._app_secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
        return hmac.compare_digest(expected, signature)
