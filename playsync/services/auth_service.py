import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from playsync.config import Settings
from playsync.core.exceptions import OAuthError, StoreError
from playsync.core.security import create_access_token
from playsync.database.session import transaction
from playsync.providers.oauth.google import GoogleOAuthProvider
from playsync.repositories.player_repository import PlayerRepository
from playsync.repositories.profile_repository import ProfileRepository
from playsync.schemas.auth import LoginResponse

logger = logging.getLogger(__name__)


class AuthService:
    """Google 로그인 -> 플레이어 식별 -> 액세스 토큰 발급"""

    def __init__(self, db: Session, settings: Settings, google_oauth: GoogleOAuthProvider):
        self.db = db
        self.settings = settings
        self.google_oauth = google_oauth
        self.player_repo = PlayerRepository(db)
        self.profile_repo = ProfileRepository(db)

    async def login_with_google(self, code: str, redirect_uri: str) -> LoginResponse:
        """OAuth 인가 코드 교환 및 플레이어 인증/생성"""
        # 1. 액세스 토큰 교환 / 사용자 정보 조회
        token_response = await self.google_oauth.get_access_token(code, redirect_uri)
        user_info = await self.google_oauth.get_user_info(token_response.access_token)

        if not user_info.id:
            raise OAuthError("Required user information not provided")

        # 2. 플레이어 조회/생성 + 프로필 보장 (하나의 트랜잭션)
        try:
            with transaction(self.db):
                player, is_new_player = self.player_repo.get_or_create_by_google_sub(
                    google_sub=user_info.id,
                    email=user_info.email,
                    display_name=user_info.name,
                )
                self.profile_repo.ensure(player.id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to sign in Google account: {str(e)}")
            raise StoreError() from e

        if is_new_player:
            logger.info(f"New player {player.id} registered via Google")

        # 3. JWT 발급
        access_token = create_access_token(player.id)
        return LoginResponse(
            player_id=player.id,
            token=access_token,
            is_new_player=is_new_player,
        )
