from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from playsync.core.exceptions import AuthenticationError
from playsync.core.security import decode_access_token

# JWT Bearer 토큰 스킴
security = HTTPBearer(auto_error=False)


def get_current_player_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> int:
    """필수 플레이어 인증 - 검증된 player_id 반환"""
    if not credentials or not credentials.credentials:
        raise AuthenticationError("No token")
    return decode_access_token(credentials.credentials)
