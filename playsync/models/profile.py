"""
플레이어 프로필 데이터 모델

플레이어마다 정확히 한 행이 존재하며, 게임 상태 전체를 하나의 JSON 문서(data)로 저장합니다.
코인 잔액은 별도 테이블이 아니라 data["coins"] 에 들어있는 서버 권한 필드입니다.
"""

from sqlalchemy import BigInteger, Column

from playsync.models.base import BaseModel, JsonDocumentType


class Profile(BaseModel):
    __tablename__ = "profiles"

    # 플레이어 ID - 기본 키 (플레이어당 프로필 1개)
    player_id = Column(BigInteger, primary_key=True, autoincrement=False)

    # 게임 상태 문서 - 클라이언트가 병합(merge)으로 갱신, coins 는 지갑 서비스만 갱신
    data = Column(JsonDocumentType, nullable=False, default=dict)
