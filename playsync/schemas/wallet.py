from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WalletBalanceResponse(BaseModel):
    """코인 잔액 응답"""

    coins: int = Field(..., ge=0, description="현재 코인 잔액")


class TopUpRequest(BaseModel):
    """인앱 결제 충전 요청"""

    product_id: str = Field(..., min_length=1, max_length=100, description="상품 ID")
    purchase_token: str = Field(..., min_length=1, description="마켓 결제 토큰")


class TopUpResponse(BaseModel):
    product_id: str
    credited: int = Field(..., description="지급된 코인 수")
    coins: int = Field(..., description="충전 후 잔액")


class SpendRequest(BaseModel):
    """코인 사용 요청"""

    amount: int = Field(..., strict=True, gt=0, description="사용할 코인 수 (양의 정수)")
    reason: str = Field("", max_length=1000, description="사용 사유")


class SpendResponse(BaseModel):
    spent: int
    coins: int = Field(..., description="사용 후 잔액")


class CoinLedgerEntry(BaseModel):
    """코인 원장 항목"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    delta: int
    reason: str
    ref: Optional[str] = None
    created_at: Optional[datetime] = None


class CoinLedgerResponse(BaseModel):
    entries: List[CoinLedgerEntry]
    total_count: int
    has_next: bool


class PurchaseVerification(BaseModel):
    """검증 게이트웨이 결과 - raw 는 판정과 무관하게 감사용으로 저장"""

    verified: bool
    raw: dict = Field(default_factory=dict)


class PurchaseTokenRecord(BaseModel):
    """결제 토큰 처리 기록"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    token: str
    player_id: int
    product_id: str
    amount: int
    state: str
    raw_verification_response: Optional[dict] = None
    created_at: Optional[datetime] = None
