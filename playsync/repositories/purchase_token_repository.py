"""
결제 토큰 리포지토리

token 컬럼의 유니크 제약이 중복 지급을 막는 유일한 정합성 보장 수단입니다.
exists() 는 게이트웨이 호출 전 빠른 중복 거절용일 뿐이며, 최종 판단은 record() 의 INSERT 입니다.
"""

from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from playsync.models.wallet import PurchaseToken as PurchaseTokenModel
from playsync.models.wallet import PurchaseTokenState
from playsync.repositories.base import BaseRepository
from playsync.schemas.wallet import PurchaseTokenRecord


class PurchaseTokenRepository(BaseRepository[PurchaseTokenModel, PurchaseTokenRecord]):
    def __init__(self, db: Session):
        super().__init__(PurchaseTokenModel, PurchaseTokenRecord, db)

    def token_exists(self, token: str) -> bool:
        return self.exists({"token": token})

    def record(
        self,
        token: str,
        player_id: int,
        product_id: str,
        amount: int,
        state: PurchaseTokenState,
        raw_verification_response: Optional[Dict[str, Any]] = None,
    ) -> PurchaseTokenRecord:
        """토큰 처리 기록 INSERT

        Raises:
            IntegrityError: 같은 토큰이 이미 기록된 경우 (flush 시점)
        """
        instance = self.model_class(
            token=token,
            player_id=player_id,
            product_id=product_id,
            amount=amount,
            state=state.value,
            raw_verification_response=raw_verification_response or {},
        )
        self.db.add(instance)
        self.db.flush()
        return self._to_schema(instance)
