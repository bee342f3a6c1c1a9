from abc import ABC
from typing import Any, Dict, Generic, Iterable, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

T = TypeVar("T")
SchemaType = TypeVar("SchemaType", bound=BaseModel)


class BaseRepository(Generic[T, SchemaType], ABC):
    """모든 리포지토리의 베이스 클래스 - Pydantic 응답 보장

    리포지토리는 flush 까지만 수행합니다. commit / rollback 은 서비스가
    트랜잭션 단위로 결정합니다.
    """

    def __init__(
        self, model_class: Type[T], schema_class: Type[SchemaType], db: Session
    ):
        self.model_class = model_class
        self.schema_class = schema_class
        self.db = db

    def _to_schema(self, model_instance: Any) -> Optional[SchemaType]:
        """SQLAlchemy 모델을 Pydantic 스키마로 변환"""
        if model_instance is None:
            return None
        return self.schema_class.model_validate(model_instance)

    def _dialect_name(self) -> str:
        return self.db.get_bind().dialect.name

    def _insert_if_absent(
        self, values: Dict[str, Any], conflict_columns: Iterable[str]
    ) -> bool:
        """INSERT ... ON CONFLICT DO NOTHING

        동시 요청이 같은 키로 먼저 INSERT 해도 에러 없이 넘어갑니다.
        실제로 행을 만들었으면 True.
        """
        dialect = self._dialect_name()
        if dialect == "postgresql":
            stmt = postgresql.insert(self.model_class).values(**values)
        elif dialect == "sqlite":
            stmt = sqlite.insert(self.model_class).values(**values)
        else:
            raise NotImplementedError(f"insert-if-absent not supported on {dialect}")

        stmt = stmt.on_conflict_do_nothing(index_elements=list(conflict_columns))
        result = self.db.execute(stmt)
        return bool(result.rowcount)

    def get_by_field(self, field_name: str, value: Any) -> Optional[SchemaType]:
        """특정 필드로 조회 - Pydantic 스키마 반환"""
        model_instance = (
            self.db.query(self.model_class)
            .filter(getattr(self.model_class, field_name) == value)
            .first()
        )
        return self._to_schema(model_instance)

    def exists(self, filters: Dict[str, Any]) -> bool:
        """레코드 존재 여부 확인"""
        query = self.db.query(self.model_class)

        for key, value in filters.items():
            if hasattr(self.model_class, key):
                query = query.filter(getattr(self.model_class, key) == value)

        return query.first() is not None
