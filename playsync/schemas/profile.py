from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, JsonValue


class ProfileSnapshot(BaseModel):
    """프로필 스냅샷 응답"""

    model_config = ConfigDict(from_attributes=True)

    data: Dict[str, JsonValue] = Field(default_factory=dict, description="게임 상태 문서")
    updated_at: datetime = Field(..., description="마지막 저장 시각")


class MergeRequest(BaseModel):
    """프로필 병합 요청 - data 형식 검증은 서비스에서 수행"""

    data: Any = Field(None, description="클라이언트 게임 상태 문서 (부분 문서 허용)")
