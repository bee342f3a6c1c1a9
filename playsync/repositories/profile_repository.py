"""
프로필 리포지토리 - 플레이어당 JSON 문서 1개를 저장하는 좁은 영속성 인터페이스

비즈니스 로직(병합, 잔액 규칙)은 서비스에 있고, 여기서는 저장/조회/잠금만 담당합니다.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from playsync.models.profile import Profile as ProfileModel
from playsync.repositories.base import BaseRepository
from playsync.schemas.profile import ProfileSnapshot


class ProfileRepository(BaseRepository[ProfileModel, ProfileSnapshot]):
    def __init__(self, db: Session):
        super().__init__(ProfileModel, ProfileSnapshot, db)

    def ensure(self, player_id: int) -> bool:
        """프로필 행이 없으면 data={} 로 생성 (멱등)

        INSERT-IF-ABSENT 후 호출 측에서 무조건 다시 읽습니다. 다른 요청이 같은 순간에
        INSERT 했더라도 둘 다 같은 행으로 수렴합니다.
        """
        now = datetime.now(timezone.utc)
        return self._insert_if_absent(
            {"player_id": player_id, "data": {}, "created_at": now, "updated_at": now},
            conflict_columns=["player_id"],
        )

    def get(self, player_id: int) -> Optional[ProfileSnapshot]:
        return self.get_by_field("player_id", player_id)

    def get_document(self, player_id: int) -> Optional[Dict[str, Any]]:
        """잠금 없이 문서만 조회 (읽기 전용 경로)"""
        row = (
            self.db.query(self.model_class.data)
            .filter(self.model_class.player_id == player_id)
            .first()
        )
        return dict(row.data or {}) if row else None

    def lock(self, player_id: int) -> ProfileModel:
        """프로필 행을 SELECT ... FOR UPDATE 로 잠그고 반환

        행이 없으면 먼저 만듭니다. 잠금은 호출 측 트랜잭션이 끝날 때 해제됩니다.
        """
        self.ensure(player_id)
        profile = (
            self.db.query(self.model_class)
            .filter(self.model_class.player_id == player_id)
            .populate_existing()
            .with_for_update()
            .one()
        )
        return profile

    def replace(self, profile: ProfileModel, data: Dict[str, Any]) -> ProfileSnapshot:
        """문서 전체를 교체하고 updated_at 갱신"""
        profile.data = data
        profile.updated_at = datetime.now(timezone.utc)
        self.db.add(profile)
        self.db.flush()
        return ProfileSnapshot.model_validate(profile)
