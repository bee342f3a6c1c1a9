import logging
from typing import Any, Dict, Optional

import httpx

from playsync.config import Settings
from playsync.core.exceptions import OAuthError
from playsync.schemas.oauth import OAuthTokenResponse, OAuthUserInfo

logger = logging.getLogger(__name__)


class GoogleOAuthProvider:
    """Google 인가 코드 교환 / 계정 조회 - 플레이어 식별자는 Google 계정 id"""

    TOKEN_URL = "https://oauth2.googleapis.com/token"
    USER_INFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"

    def __init__(
        self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.client_id = settings.GOOGLE_CLIENT_ID
        self.client_secret = settings.GOOGLE_CLIENT_SECRET
        self._transport = transport

    async def _request(self, method: str, url: str, failure: str, **kwargs) -> Dict[str, Any]:
        """Google 호출 - 200 이 아니거나 통신 오류면 OAuthError"""
        try:
            async with httpx.AsyncClient(timeout=30.0, transport=self._transport) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"Google OAuth timeout: {url}")
            raise OAuthError("OAuth provider timeout") from e
        except httpx.HTTPError as e:
            logger.error(f"Google OAuth request failed: {str(e)}")
            raise OAuthError("OAuth provider error") from e

        if response.status_code != 200:
            logger.error(f"{failure}: {response.status_code}")
            raise OAuthError(failure)
        try:
            return response.json()
        except ValueError as e:
            raise OAuthError("Invalid response from OAuth provider") from e

    async def get_access_token(self, code: str, redirect_uri: str) -> OAuthTokenResponse:
        """Exchange authorization code for access token"""
        data = await self._request(
            "POST",
            self.TOKEN_URL,
            "Failed to exchange authorization code",
            data={
                "code": code,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": redirect_uri,
                "grant_type": "authorization_code",
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        if not data.get("access_token"):
            raise OAuthError("Invalid token response from provider")
        return OAuthTokenResponse(**data, raw=data)

    async def get_user_info(self, access_token: str) -> OAuthUserInfo:
        user_data = await self._request(
            "GET",
            self.USER_INFO_URL,
            "Failed to fetch user information",
            headers={"Authorization": f"Bearer {access_token}"},
        )
        # Google 계정 id 가 없으면 플레이어를 식별할 수 없음
        if not user_data.get("id"):
            raise OAuthError("Account id not provided by OAuth provider")

        return OAuthUserInfo(
            id=str(user_data["id"]),
            email=user_data.get("email"),
            name=user_data.get("name") or user_data.get("given_name"),
            picture=user_data.get("picture"),
            verified_email=user_data.get("verified_email"),
        )
