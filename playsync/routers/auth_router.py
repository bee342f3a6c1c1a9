from fastapi import APIRouter, Depends

from playsync.deps import get_auth_service
from playsync.schemas.auth import GoogleLoginRequest, LoginResponse
from playsync.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/google", response_model=LoginResponse)
async def login_with_google(
    request: GoogleLoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """
    Google 로그인 - 인가 코드를 교환하고 플레이어 토큰을 발급

    최초 로그인 시 플레이어와 빈 프로필이 생성됩니다.
    """
    return await auth_service.login_with_google(request.code, request.redirect_uri)
