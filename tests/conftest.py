import os

# playsync 모듈 import 전에 테스트용 설정 적용
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("GOOGLE_PLAY_PACKAGE_NAME", "com.example.game")

from typing import List, Optional, Tuple

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from playsync.config import get_settings
from playsync.core.security import create_access_token
from playsync.database.connection import build_engine
from playsync.database.session import get_db
from playsync.models.base import Base
from playsync.models import player, profile, wallet  # noqa: F401
from playsync.schemas.wallet import PurchaseVerification


class FakeVerifier:
    """Google Play 검증 게이트웨이 대역"""

    def __init__(
        self,
        verified: bool = True,
        raw: Optional[dict] = None,
        error: Optional[Exception] = None,
    ):
        self.verified = verified
        self.raw = raw
        self.error = error
        self.calls: List[Tuple[str, str, str]] = []

    async def verify(
        self, package_name: str, product_id: str, purchase_token: str
    ) -> PurchaseVerification:
        self.calls.append((package_name, product_id, purchase_token))
        if self.error is not None:
            raise self.error
        raw = self.raw
        if raw is None:
            raw = {"purchaseState": 0 if self.verified else 1, "orderId": "GPA.1234"}
        return PurchaseVerification(verified=self.verified, raw=raw)


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(
        autocommit=False, autoflush=False, bind=engine, expire_on_commit=False
    )


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_verifier():
    return FakeVerifier


@pytest.fixture
def fake_verifier():
    return FakeVerifier()


@pytest.fixture
def client(session_factory, fake_verifier):
    """테스트 클라이언트 - SQLite 세션과 가짜 검증 게이트웨이 주입"""
    from playsync.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    container = app.container  # type: ignore[attr-defined]
    app.dependency_overrides[get_db] = override_get_db
    container.gateways.purchase_verifier.override(providers.Object(fake_verifier))
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        container.gateways.purchase_verifier.reset_override()
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """player_id -> Authorization 헤더"""

    def _headers(player_id: int) -> dict:
        return {"Authorization": f"Bearer {create_access_token(player_id)}"}

    return _headers
