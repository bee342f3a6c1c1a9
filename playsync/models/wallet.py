"""
코인 지갑 데이터 모델

- PurchaseToken: 인앱 결제 토큰 처리 기록. token 유니크 제약이 중복 지급을 막는 최종 방어선입니다.
- CoinLedger: 코인 변동 감사 로그 (append-only, best-effort)
"""

from enum import Enum

from sqlalchemy import BigInteger, Column, Index, Integer, String, Text
from sqlalchemy.schema import UniqueConstraint

from playsync.models.base import BaseModel, JsonDocumentType


class PurchaseTokenState(str, Enum):
    REJECTED = "rejected"
    CREDITED = "credited"


class PurchaseToken(BaseModel):
    """
    결제 토큰 처리 기록 - 검증 시도 1회당 1행, 생성 후 수정하지 않음

    INSERT 가 "이 결제는 처리되었다" 의 선형화 지점입니다.
    검증에 실패한 토큰도 rejected 로 기록하여 같은 토큰의 재사용을 막습니다.
    """

    __tablename__ = "purchase_tokens"
    __table_args__ = (
        UniqueConstraint("token", name="uq_purchase_tokens_token"),
        Index("idx_purchase_tokens_player", "player_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    # 마켓에서 발급한 결제 토큰 (전역 유니크)
    token = Column(Text, nullable=False)

    player_id = Column(BigInteger, nullable=False)
    product_id = Column(String(100), nullable=False)

    # 상품 가격표 기준 지급 코인 수
    amount = Column(Integer, nullable=False)

    # rejected | credited
    state = Column(String(20), nullable=False)

    # 검증 게이트웨이 원본 응답 (감사/부정 결제 분석용)
    raw_verification_response = Column(JsonDocumentType, nullable=True)


class CoinLedger(BaseModel):
    """코인 변동 내역 - 실패해도 본 거래를 롤백하지 않는 감사 로그"""

    __tablename__ = "coin_ledger"
    __table_args__ = (Index("idx_coin_ledger_player", "player_id"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    player_id = Column(BigInteger, nullable=False)

    # 코인 변동량 - 양수면 충전, 음수면 사용
    delta = Column(Integer, nullable=False)

    # 변동 사유 (길이 제한 후 저장)
    reason = Column(Text, nullable=False)

    # 참조 값 - 충전의 경우 결제 토큰
    ref = Column(Text, nullable=True)
