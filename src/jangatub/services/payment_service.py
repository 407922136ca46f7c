"""Wave Checkout client.

Flow: create a checkout session, send the user to ``wave_launch_url``,
then Wave calls the webhook with the outcome.
"""
import hashlib
import hmac
import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel, ConfigDict

from src.jangatub.core.config import settings
from src.jangatub.core.errors import ServiceUnavailableError, UpstreamServiceError

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"
PAYMENT_SUCCEEDED = "succeeded"


class WaveCheckoutSession(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    wave_launch_url: Optional[str] = None
    checkout_status: Optional[str] = None
    payment_status: Optional[str] = None
    client_reference: Optional[str] = None
    amount: Optional[str] = None
    currency: Optional[str] = None


class WaveWebhookEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    type: str
    data: dict[str, Any] = {}

    @property
    def session(self) -> WaveCheckoutSession:
        return WaveCheckoutSession(**self.data)


def sign_payload(payload: bytes, secret: str) -> str:
    """Hex HMAC-SHA256 of the raw request body, as sent in ``Wave-Signature``."""
    return hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()


def verify_signature(payload: bytes, signature: Optional[str], secret: Optional[str]) -> bool:
    """Check a webhook signature. Without a configured secret every payload is accepted."""
    if not secret:
        logger.warning("WAVE_WEBHOOK_SECRET not configured, skipping signature verification")
        return True
    if not signature:
        return False
    return hmac.compare_digest(signature.strip(), sign_payload(payload, secret))


class WaveClient:
    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.api_key = api_key if api_key is not None else settings.WAVE_API_KEY
        self.base_url = (base_url or settings.WAVE_API_URL).rstrip("/")
        self.timeout = timeout or settings.PAYMENT_TIMEOUT_SECONDS

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            raise ServiceUnavailableError("Wave payments are not configured")
        return {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}

    async def create_checkout_session(self, *, amount: int, client_reference: str) -> WaveCheckoutSession:
        """Open a checkout session for ``amount`` XOF."""
        payload = {
            "amount": str(amount),
            "currency": "XOF",
            "client_reference": client_reference,
            "error_url": f"{settings.PUBLIC_BASE_URL}/pricing?error=payment_failed",
            "success_url": f"{settings.PUBLIC_BASE_URL}/pricing/success?session_id={{checkout_session_id}}",
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(f"{self.base_url}/checkout/sessions", json=payload, headers=self._headers())
                response.raise_for_status()
                return WaveCheckoutSession(**response.json())
        except httpx.HTTPStatusError as e:
            logger.error(f"Wave checkout failed: {e.response.status_code} {e.response.text}")
            raise UpstreamServiceError("Payment could not be created. Please try again.")
        except httpx.HTTPError as e:
            logger.error(f"Wave checkout request error: {e}")
            raise UpstreamServiceError("Payment could not be created. Please try again.")

    async def get_checkout_session(self, session_id: str) -> WaveCheckoutSession:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(f"{self.base_url}/checkout/sessions/{session_id}", headers=self._headers())
            response.raise_for_status()
            return WaveCheckoutSession(**response.json())


def get_wave_client() -> WaveClient:
    return WaveClient()
