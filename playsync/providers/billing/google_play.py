"""Google Play Developer API client for one-time product purchase verification."""

import asyncio
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from playsync.config import Settings
from playsync.schemas.wallet import PurchaseVerification

logger = logging.getLogger(__name__)

ANDROID_PUBLISHER_SCOPE = "https://www.googleapis.com/auth/androidpublisher"

# purchases.products: purchaseState 0 = purchased, 1 = canceled, 2 = pending
PURCHASE_STATE_PURCHASED = 0


class PurchaseVerificationUnavailable(Exception):
    """The gateway could not be reached or gave no verdict about the token."""


class GooglePlayPurchaseVerifier:
    BASE_URL = "https://androidpublisher.googleapis.com/androidpublisher/v3"

    def __init__(
        self,
        settings: Settings,
        credentials: Any = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.service_account_file = settings.GOOGLE_PLAY_SERVICE_ACCOUNT_FILE
        self.timeout = settings.GOOGLE_PLAY_TIMEOUT_SECONDS
        self._credentials = credentials
        self._transport = transport
        self._lock = asyncio.Lock()

    def _load_credentials(self):
        from google.oauth2 import service_account

        if not self.service_account_file:
            raise PurchaseVerificationUnavailable(
                "Google Play service account is not configured"
            )
        return service_account.Credentials.from_service_account_file(
            self.service_account_file, scopes=[ANDROID_PUBLISHER_SCOPE]
        )

    def _refresh_credentials(self) -> str:
        from google.auth.transport.requests import Request as GoogleAuthRequest

        if self._credentials is None:
            self._credentials = self._load_credentials()
        if not self._credentials.valid:
            self._credentials.refresh(GoogleAuthRequest())
        return self._credentials.token

    async def _access_token(self) -> str:
        async with self._lock:
            try:
                # google-auth refresh is blocking
                token = await asyncio.to_thread(self._refresh_credentials)
            except PurchaseVerificationUnavailable:
                raise
            except Exception as e:
                logger.error(f"Google Play credential refresh failed: {str(e)}")
                raise PurchaseVerificationUnavailable("Credential refresh failed") from e
        if not token:
            raise PurchaseVerificationUnavailable("Empty Google access token")
        return token

    def _product_url(self, package_name: str, product_id: str, token: str) -> str:
        return (
            f"{self.BASE_URL}/applications/{quote(package_name, safe='')}"
            f"/purchases/products/{quote(product_id, safe='')}"
            f"/tokens/{quote(token, safe='')}"
        )

    async def verify(
        self, package_name: str, product_id: str, purchase_token: str
    ) -> PurchaseVerification:
        """Ask Google Play whether the purchase token is a completed purchase.

        Returns a verdict for 2xx and 4xx responses. Raises
        PurchaseVerificationUnavailable for 5xx, timeouts and transport errors.
        """
        if not package_name:
            raise PurchaseVerificationUnavailable("Package name is not configured")

        access_token = await self._access_token()
        url = self._product_url(package_name, product_id, purchase_token)

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.get(
                    url,
                    headers={
                        "Authorization": f"Bearer {access_token}",
                        "Accept": "application/json",
                    },
                )
        except httpx.TimeoutException as e:
            logger.error(f"Google Play verification timeout for product {product_id}")
            raise PurchaseVerificationUnavailable("Verification timeout") from e
        except httpx.HTTPError as e:
            logger.error(f"Google Play verification request failed: {str(e)}")
            raise PurchaseVerificationUnavailable("Verification request failed") from e

        if response.status_code >= 500:
            logger.error(
                f"Google Play verification upstream error: {response.status_code}"
            )
            raise PurchaseVerificationUnavailable(
                f"Verification upstream error {response.status_code}"
            )

        body = _json_body(response)
        if response.status_code != 200:
            logger.warning(
                f"Google Play rejected purchase token for {product_id}: {response.status_code}"
            )
            return PurchaseVerification(
                verified=False,
                raw={"http_status": response.status_code, "error": body},
            )

        verified = body.get("purchaseState") == PURCHASE_STATE_PURCHASED
        logger.info(
            f"Google Play verification for {product_id}: verified={verified} "
            f"purchaseState={body.get('purchaseState')}"
        )
        return PurchaseVerification(verified=verified, raw=body)


def _json_body(response: httpx.Response) -> Dict[str, Any]:
    try:
        parsed = response.json()
    except ValueError:
        return {"text": response.text[:1000]}
    return parsed if isinstance(parsed, dict) else {"value": parsed}
