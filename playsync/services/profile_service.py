from collections.abc import Mapping
from typing import Any
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from playsync.config import Settings
from playsync.core.document_merge import COINS_KEY, deep_merge, prepare_client_document
from playsync.core.exceptions import StoreError, ValidationError
from playsync.database.session import transaction
from playsync.repositories.profile_repository import ProfileRepository
from playsync.schemas.profile import ProfileSnapshot

logger = logging.getLogger(__name__)


class ProfileService:
    """프로필 스냅샷 조회 / 병합 비즈니스 로직"""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.profile_repo = ProfileRepository(db)

    def ensure_profile(self, player_id: int) -> None:
        """프로필 행 보장 (없으면 빈 문서로 생성)"""
        try:
            with transaction(self.db):
                created = self.profile_repo.ensure(player_id)
            if created:
                logger.info(f"Created empty profile for player {player_id}")
        except SQLAlchemyError as e:
            logger.error(f"Failed to ensure profile for player {player_id}: {str(e)}")
            raise StoreError() from e

    def get_snapshot(self, player_id: int) -> ProfileSnapshot:
        """현재 스냅샷 조회 - 신규 플레이어는 빈 문서로 생성 후 반환

        Args:
            player_id: 플레이어 ID

        Returns:
            ProfileSnapshot: {data, updated_at}
        """
        self.ensure_profile(player_id)
        try:
            # ensure 와 다른 요청의 INSERT 가 경합해도 같은 행을 읽게 됨
            snapshot = self.profile_repo.get(player_id)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to read snapshot for player {player_id}: {str(e)}")
            raise StoreError() from e

        if snapshot is None:
            logger.error(f"Profile row missing right after ensure for player {player_id}")
            raise StoreError()
        return snapshot

    def merge_snapshot(self, player_id: int, client_document: Any) -> ProfileSnapshot:
        """클라이언트 문서를 저장된 문서에 병합

        - null / 빈 문자열 / 빈 하위 문서는 무시 (기존 값 유지)
        - 서버 권한 키(coins 등)는 무시
        - 남는 내용이 없으면 저장하지 않고 현재 스냅샷 반환
        - 병합은 잔액 차감과 같은 행 잠금 아래에서 수행되므로 동시 충전/사용의 잔액을 덮어쓰지 않음

        Raises:
            ValidationError: client_document 가 JSON 객체가 아닌 경우
            StoreError: 저장소 오류
        """
        if not isinstance(client_document, Mapping):
            raise ValidationError(
                "Request body must contain a JSON object in 'data'",
                details={"field": "data"},
            )

        incoming = prepare_client_document(
            client_document, self.settings.AUTHORITATIVE_KEYS
        )
        if not incoming:
            logger.info(f"Empty merge for player {player_id}; returning current snapshot")
            return self.get_snapshot(player_id)

        try:
            with transaction(self.db):
                profile = self.profile_repo.lock(player_id)
                stored = dict(profile.data or {})
                merged = deep_merge(stored, incoming)
                # 잔액은 지갑 서비스만 변경 - 잠근 시점의 값을 그대로 유지
                if COINS_KEY in stored:
                    merged[COINS_KEY] = stored[COINS_KEY]
                else:
                    merged.pop(COINS_KEY, None)
                snapshot = self.profile_repo.replace(profile, merged)
        except SQLAlchemyError as e:
            logger.error(f"Failed to merge snapshot for player {player_id}: {str(e)}")
            raise StoreError() from e

        logger.info(f"Merged {len(incoming)} top-level keys for player {player_id}")
        return snapshot
