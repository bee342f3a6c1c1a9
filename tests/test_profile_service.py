import pytest
from unittest.mock import patch
from sqlalchemy.exc import OperationalError

from playsync.core.exceptions import StoreError, ValidationError
from playsync.models.profile import Profile
from playsync.services.profile_service import ProfileService


@pytest.fixture
def profile_service(db, settings):
    return ProfileService(db, settings)


@pytest.fixture
def seeded_profile(profile_service):
    """저장된 문서가 있는 플레이어"""
    player_id = 7
    profile_service.merge_snapshot(
        player_id,
        {
            "level": 3,
            "nickname": "mango",
            "settings": {"sound": True, "lang": "ko"},
            "inventory": {"potions": {"red": 2}},
        },
    )
    return player_id


def _set_coins(db, player_id: int, coins: int) -> None:
    profile = db.get(Profile, player_id)
    profile.data = {**(profile.data or {}), "coins": coins}
    db.commit()


class TestGetSnapshot:
    """스냅샷 조회 테스트"""

    def test_new_player_gets_empty_document(self, profile_service, db):
        """최초 조회 시 빈 문서 생성"""
        # Act
        snapshot = profile_service.get_snapshot(101)

        # Assert
        assert snapshot.data == {}
        assert snapshot.updated_at is not None
        assert db.get(Profile, 101) is not None

    def test_repeated_reads_return_same_document(self, profile_service, seeded_profile):
        first = profile_service.get_snapshot(seeded_profile)
        second = profile_service.get_snapshot(seeded_profile)

        assert first.data == second.data
        assert first.updated_at == second.updated_at

    def test_store_failure_maps_to_store_error(self, profile_service):
        """저장소 오류 -> StoreError"""
        with patch.object(
            profile_service.profile_repo,
            "ensure",
            side_effect=OperationalError("INSERT", {}, Exception("db down")),
        ):
            with pytest.raises(StoreError) as exc_info:
                profile_service.get_snapshot(5)

        assert exc_info.value.error_code == "STORE_001"


class TestMergeSnapshot:
    """병합 테스트"""

    def test_nested_merge_keeps_unmentioned_keys(self, profile_service, seeded_profile):
        # Act
        snapshot = profile_service.merge_snapshot(
            seeded_profile, {"settings": {"lang": "en"}, "inventory": {"potions": {"blue": 1}}}
        )

        # Assert
        assert snapshot.data == {
            "level": 3,
            "nickname": "mango",
            "settings": {"sound": True, "lang": "en"},
            "inventory": {"potions": {"red": 2, "blue": 1}},
        }

    def test_merge_is_persisted(self, profile_service, seeded_profile):
        profile_service.merge_snapshot(seeded_profile, {"level": 4})

        assert profile_service.get_snapshot(seeded_profile).data["level"] == 4

    def test_null_and_blank_values_do_not_overwrite(self, profile_service, seeded_profile):
        """null / 빈 문자열은 기존 값을 지우지 않음"""
        snapshot = profile_service.merge_snapshot(
            seeded_profile, {"nickname": "", "level": None, "settings": {"sound": None}}
        )

        assert snapshot.data["nickname"] == "mango"
        assert snapshot.data["level"] == 3
        assert snapshot.data["settings"]["sound"] is True

    def test_empty_merge_does_not_write(self, profile_service, seeded_profile):
        """의미 있는 내용이 없으면 updated_at 도 바뀌지 않음"""
        # Arrange
        before = profile_service.get_snapshot(seeded_profile)

        # Act
        with patch.object(profile_service.profile_repo, "replace") as mock_replace:
            after = profile_service.merge_snapshot(seeded_profile, {"nickname": None})

        # Assert
        mock_replace.assert_not_called()
        assert after.data == before.data
        assert after.updated_at == before.updated_at

    def test_empty_merge_for_new_player_creates_profile(self, profile_service):
        snapshot = profile_service.merge_snapshot(55, {})

        assert snapshot.data == {}

    def test_client_coins_are_ignored(self, profile_service, seeded_profile, db):
        """coins 는 서버 권한 키 - 클라이언트 값 무시"""
        # Arrange
        _set_coins(db, seeded_profile, 40)

        # Act
        snapshot = profile_service.merge_snapshot(
            seeded_profile, {"coins": 999999, "level": 5}
        )

        # Assert
        assert snapshot.data["coins"] == 40
        assert snapshot.data["level"] == 5

    def test_coins_only_payload_is_a_no_op(self, profile_service, seeded_profile, db):
        _set_coins(db, seeded_profile, 40)

        with patch.object(profile_service.profile_repo, "replace") as mock_replace:
            snapshot = profile_service.merge_snapshot(seeded_profile, {"coins": 1})

        mock_replace.assert_not_called()
        assert snapshot.data["coins"] == 40

    @pytest.mark.parametrize("payload", [None, [1, 2], "text", 3])
    def test_non_object_payload_rejected(self, profile_service, payload):
        with pytest.raises(ValidationError) as exc_info:
            profile_service.merge_snapshot(1, payload)

        assert exc_info.value.status_code == 422

    def test_store_failure_rolls_back(self, profile_service, seeded_profile):
        """잠금 후 저장 실패 시 기존 문서 유지"""
        with patch.object(
            profile_service.profile_repo,
            "replace",
            side_effect=OperationalError("UPDATE", {}, Exception("disk full")),
        ):
            with pytest.raises(StoreError):
                profile_service.merge_snapshot(seeded_profile, {"level": 99})

        assert profile_service.get_snapshot(seeded_profile).data["level"] == 3
