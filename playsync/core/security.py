from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from playsync.config import settings
from playsync.core.exceptions import AuthenticationError


class TokenPayload(BaseModel):
    sub: str
    player_id: int


def create_access_token(player_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """플레이어 ID 를 담은 액세스 토큰 발급"""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {"sub": str(player_id), "player_id": player_id, "exp": expire}
    return jwt.encode(
        to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM
    )


def decode_access_token(token: str) -> int:
    """JWT 토큰을 검증하고 player_id 를 반환합니다."""
    try:
        payload = jwt.decode(
            token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]
        )
        token_data = TokenPayload.model_validate(payload)
    except (JWTError, ValidationError):
        raise AuthenticationError("Invalid token")
    if token_data.player_id <= 0:
        raise AuthenticationError("Invalid token payload")
    return token_data.player_id
