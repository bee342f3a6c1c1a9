from datetime import datetime, timezone
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from playsync.models.player import Player as PlayerModel
from playsync.repositories.base import BaseRepository
from playsync.schemas.player import Player as PlayerSchema


class PlayerRepository(BaseRepository[PlayerModel, PlayerSchema]):
    """플레이어 리포지토리 - Google 계정 기준"""

    def __init__(self, db: Session):
        super().__init__(PlayerModel, PlayerSchema, db)

    def get_or_create_by_google_sub(
        self,
        google_sub: str,
        email: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> Tuple[PlayerSchema, bool]:
        """Google 계정으로 플레이어 조회, 없으면 생성

        Returns:
            (플레이어, 신규 생성 여부)
        """
        now = datetime.now(timezone.utc)
        email = self._fit_column("email", email)
        display_name = self._fit_column("display_name", display_name)
        created = self._insert_if_absent(
            {
                "google_sub": google_sub,
                "email": email,
                "display_name": display_name,
                "created_at": now,
                "updated_at": now,
            },
            conflict_columns=["google_sub"],
        )

        player = (
            self.db.query(self.model_class)
            .filter(self.model_class.google_sub == google_sub)
            .one()
        )
        player.last_login_at = now
        if email and player.email != email:
            player.email = email
        if display_name and player.display_name != display_name:
            player.display_name = display_name
        self.db.flush()
        return PlayerSchema.model_validate(player), created

    def _fit_column(self, column_name: str, value: Optional[str]) -> Optional[str]:
        """Google 프로필 값을 컬럼 길이에 맞게 자름 (PostgreSQL 은 초과 시 DataError)"""
        if value is None:
            return None
        max_length = getattr(self.model_class.__table__.c[column_name].type, "length", None)
        return value[:max_length] if max_length else value
