from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from playsync.models.wallet import CoinLedger as CoinLedgerModel
from playsync.repositories.base import BaseRepository
from playsync.schemas.wallet import CoinLedgerEntry, CoinLedgerResponse


class CoinLedgerRepository(BaseRepository[CoinLedgerModel, CoinLedgerEntry]):
    """코인 원장 리포지토리 - append-only 감사 로그"""

    def __init__(self, db: Session):
        super().__init__(CoinLedgerModel, CoinLedgerEntry, db)

    def append(
        self, player_id: int, delta: int, reason: str, ref: Optional[str] = None
    ) -> CoinLedgerEntry:
        instance = self.model_class(
            player_id=player_id, delta=delta, reason=reason, ref=ref
        )
        self.db.add(instance)
        self.db.flush()
        self.db.refresh(instance)
        return self._to_schema(instance)

    def get_player_ledger(
        self, player_id: int, limit: int = 50, offset: int = 0
    ) -> CoinLedgerResponse:
        """플레이어 코인 원장 조회 (최신순, 페이징)"""
        query = self.db.query(self.model_class).filter(
            self.model_class.player_id == player_id
        )
        total_count = query.count()

        model_instances = (
            query.order_by(desc(self.model_class.id)).limit(limit).offset(offset).all()
        )
        entries: List[CoinLedgerEntry] = [
            self._to_schema(instance) for instance in model_instances
        ]

        return CoinLedgerResponse(
            entries=entries,
            total_count=total_count,
            has_next=offset + limit < total_count,
        )
