"""
게임 상태 동기화 API 라우터

- GET /sync/snapshot: 저장된 게임 상태 조회 (최초 호출 시 빈 문서 생성)
- POST /sync/merge: 클라이언트 게임 상태를 저장된 상태에 병합
"""

from fastapi import APIRouter, Depends

from playsync.core.auth_middleware import get_current_player_id
from playsync.deps import get_profile_service
from playsync.schemas.profile import MergeRequest, ProfileSnapshot
from playsync.services.profile_service import ProfileService

router = APIRouter(prefix="/sync", tags=["sync"])


@router.get("/snapshot", response_model=ProfileSnapshot)
def get_snapshot(
    player_id: int = Depends(get_current_player_id),
    profile_service: ProfileService = Depends(get_profile_service),
) -> ProfileSnapshot:
    return profile_service.get_snapshot(player_id)


@router.post("/merge", response_model=ProfileSnapshot)
def merge_snapshot(
    request: MergeRequest,
    player_id: int = Depends(get_current_player_id),
    profile_service: ProfileService = Depends(get_profile_service),
) -> ProfileSnapshot:
    """
    클라이언트 문서 병합

    Request Body:
        data: 게임 상태 문서 (부분 문서 허용). null / 빈 문자열 값은 무시되며
              coins 는 서버만 변경할 수 있으므로 무시됩니다.

    HTTP Status:
        200: 병합된 (또는 변경 없는) 스냅샷
        401: 인증 실패
        422: data 가 JSON 객체가 아님
    """
    return profile_service.merge_snapshot(player_id, request.data)
