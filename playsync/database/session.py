from contextlib import contextmanager

from sqlalchemy.orm import Session

from playsync.database.connection import SessionLocal


def get_db():
    db = SessionLocal()
    try:
        yield db
    except Exception:
        if db.in_transaction():
            db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def transaction(db: Session):
    """요청 세션 안의 단일 트랜잭션 - 성공 시 commit, 예외 시 전체 rollback"""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
