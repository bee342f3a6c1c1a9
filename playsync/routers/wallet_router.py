"""
코인 지갑 API 라우터

- GET /wallet/balance: 코인 잔액
- POST /wallet/topup: 인앱 결제 토큰으로 충전 (토큰당 1회)
- POST /wallet/spend: 코인 사용
- GET /wallet/ledger: 코인 변동 내역
"""

from fastapi import APIRouter, Depends, Query

from playsync.core.auth_middleware import get_current_player_id
from playsync.deps import get_wallet_service
from playsync.schemas.wallet import (
    CoinLedgerResponse,
    SpendRequest,
    SpendResponse,
    TopUpRequest,
    TopUpResponse,
    WalletBalanceResponse,
)
from playsync.services.wallet_service import WalletService

router = APIRouter(prefix="/wallet", tags=["wallet"])


@router.get("/balance", response_model=WalletBalanceResponse)
def get_balance(
    player_id: int = Depends(get_current_player_id),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> WalletBalanceResponse:
    return wallet_service.get_balance(player_id)


@router.post("/topup", response_model=TopUpResponse)
async def top_up(
    request: TopUpRequest,
    player_id: int = Depends(get_current_player_id),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> TopUpResponse:
    """
    인앱 결제 충전

    HTTP Status:
        200: 충전 완료
        402: 결제 검증 실패 (VERIFY_001)
        409: 이미 처리된 결제 토큰 (CONFLICT_001) - 재시도는 안전한 no-op
        422: 알 수 없는 상품
        503: 검증 서버 일시 장애 (VERIFY_002) - 재시도 가능
    """
    return await wallet_service.credit_from_purchase(
        player_id, request.product_id, request.purchase_token
    )


@router.post("/spend", response_model=SpendResponse)
def spend(
    request: SpendRequest,
    player_id: int = Depends(get_current_player_id),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> SpendResponse:
    """
    코인 사용

    HTTP Status:
        200: 사용 완료
        400: 잔액 부족 (BALANCE_001, details.current 에 현재 잔액)
        422: amount 가 양의 정수가 아님
    """
    return wallet_service.debit(player_id, request.amount, request.reason)


@router.get("/ledger", response_model=CoinLedgerResponse)
def get_ledger(
    limit: int = Query(50, ge=1, le=100, description="페이지 크기"),
    offset: int = Query(0, ge=0, description="오프셋"),
    player_id: int = Depends(get_current_player_id),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> CoinLedgerResponse:
    return wallet_service.get_ledger(player_id, limit=limit, offset=offset)
