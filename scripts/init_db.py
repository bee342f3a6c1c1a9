import logging

from playsync.config import settings
from playsync.database.connection import engine
from playsync.logging_config import setup_logging
from playsync.models.base import Base
from playsync.models import player, profile, wallet  # noqa: F401  (테이블 등록)

logger = logging.getLogger("playsync.init_db")


def init_db():
    """데이터베이스 초기화 - 없는 테이블만 생성"""
    try:
        Base.metadata.create_all(bind=engine)
        logger.info(
            f"Database initialized successfully: {sorted(Base.metadata.tables)}"
        )
    except Exception as e:
        logger.error(f"Database initialization failed: {str(e)}")
        raise


if __name__ == "__main__":
    setup_logging(settings.LOG_LEVEL)
    init_db()
