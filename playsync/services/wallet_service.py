"""
코인 지갑 서비스 - 서버 권한 코인 잔액의 충전 / 사용

정합성 규칙:
1. 충전은 결제 토큰당 정확히 한 번 (purchase_tokens.token 유니크 제약이 최종 보장)
2. 잔액은 어떤 커밋 상태에서도 음수가 되지 않음 (프로필 행 잠금 아래에서 읽기-판단-쓰기)
3. 토큰 기록과 잔액 변경은 하나의 트랜잭션 - 둘 중 하나만 반영되는 일은 없음
4. 원장(coin_ledger) 기록 실패는 본 거래를 되돌리지 않음
"""

from typing import Optional
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from playsync.config import Settings
from playsync.core.document_merge import read_coins, with_coins
from playsync.core.exceptions import (
    ConflictError,
    InsufficientBalanceError,
    StoreError,
    UpstreamVerificationError,
    ValidationError,
)
from playsync.core.products import PriceTable
from playsync.database.session import transaction
from playsync.models.wallet import PurchaseTokenState
from playsync.providers.billing.google_play import (
    GooglePlayPurchaseVerifier,
    PurchaseVerificationUnavailable,
)
from playsync.repositories.coin_ledger_repository import CoinLedgerRepository
from playsync.repositories.profile_repository import ProfileRepository
from playsync.repositories.purchase_token_repository import PurchaseTokenRepository
from playsync.schemas.wallet import (
    CoinLedgerResponse,
    SpendResponse,
    TopUpResponse,
    WalletBalanceResponse,
)

logger = logging.getLogger(__name__)


class WalletService:
    """코인 잔액 조회 / 충전 / 사용 비즈니스 로직"""

    def __init__(
        self,
        db: Session,
        settings: Settings,
        verifier: GooglePlayPurchaseVerifier,
    ):
        self.db = db
        self.settings = settings
        self.verifier = verifier
        self.price_table = PriceTable(settings.COIN_PRODUCTS)
        self.profile_repo = ProfileRepository(db)
        self.token_repo = PurchaseTokenRepository(db)
        self.ledger_repo = CoinLedgerRepository(db)

    def get_balance(self, player_id: int) -> WalletBalanceResponse:
        """현재 코인 잔액 조회 (프로필이 없으면 0)"""
        try:
            document = self.profile_repo.get_document(player_id)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to get balance for player {player_id}: {str(e)}")
            raise StoreError() from e

        return WalletBalanceResponse(coins=read_coins(document or {}))

    async def credit_from_purchase(
        self, player_id: int, product_id: str, purchase_token: str
    ) -> TopUpResponse:
        """인앱 결제 토큰으로 코인 충전 (토큰당 최대 1회)

        Args:
            player_id: 플레이어 ID
            product_id: 상품 ID (가격표로 코인 수 결정)
            purchase_token: 마켓 결제 토큰

        Returns:
            TopUpResponse: 지급 코인 수와 충전 후 잔액

        Raises:
            ValidationError: 알 수 없는 상품 / 빈 토큰
            ConflictError: 이미 처리된 토큰
            UpstreamVerificationError: 검증 실패 또는 검증 불가
            StoreError: 저장소 오류
        """
        amount = self.price_table.resolve_coin_amount(product_id)
        token = (purchase_token or "").strip()
        if not token:
            raise ValidationError("purchase_token is required")

        # 빠른 중복 거절 - 게이트웨이 호출 전. 실제 보장은 INSERT 의 유니크 제약
        try:
            already_processed = self.token_repo.token_exists(token)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to check purchase token: {str(e)}")
            raise StoreError() from e
        if already_processed:
            logger.info(f"Duplicate purchase token rejected for player {player_id}")
            raise ConflictError("Purchase token already processed")

        try:
            verification = await self.verifier.verify(
                self.settings.GOOGLE_PLAY_PACKAGE_NAME, product_id, token
            )
        except PurchaseVerificationUnavailable as e:
            logger.error(
                f"Purchase verification unavailable for player {player_id}, product {product_id}: {str(e)}"
            )
            raise UpstreamVerificationError(
                "Purchase verification temporarily unavailable", retryable=True
            ) from e

        if not verification.verified:
            self._record_rejected(player_id, product_id, token, amount, verification.raw)
            raise UpstreamVerificationError(
                "Purchase could not be verified", details={"product_id": product_id}
            )

        try:
            with transaction(self.db):
                # flush 시점에 같은 토큰이 있으면 IntegrityError
                self.token_repo.record(
                    token=token,
                    player_id=player_id,
                    product_id=product_id,
                    amount=amount,
                    state=PurchaseTokenState.CREDITED,
                    raw_verification_response=verification.raw,
                )
                profile = self.profile_repo.lock(player_id)
                new_balance = read_coins(profile.data or {}) + amount
                self.profile_repo.replace(profile, with_coins(profile.data or {}, new_balance))
        except IntegrityError as e:
            logger.info(
                f"Purchase token credited concurrently by another request (player {player_id}): {str(e.orig)}"
            )
            raise ConflictError("Purchase token already processed") from e
        except SQLAlchemyError as e:
            logger.error(f"Failed to credit purchase for player {player_id}: {str(e)}")
            raise StoreError() from e

        logger.info(
            f"Credited {amount} coins to player {player_id} for {product_id} (balance: {new_balance})"
        )
        self._append_ledger(player_id, amount, f"purchase:{product_id}", ref=token)
        return TopUpResponse(product_id=product_id, credited=amount, coins=new_balance)

    def debit(self, player_id: int, amount: int, reason: str = "") -> SpendResponse:
        """코인 사용 - 잔액이 부족하면 아무것도 쓰지 않음

        프로필 행을 잠근 상태에서 잔액을 읽고 판단하고 씁니다. 같은 플레이어의
        동시 사용 요청은 이 잠금으로 직렬화됩니다.

        Raises:
            ValidationError: amount 가 양의 정수가 아님
            InsufficientBalanceError: 잔액 부족 (현재 잔액 포함)
            StoreError: 저장소 오류
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise ValidationError(
                "amount must be a positive integer", details={"amount": amount}
            )

        try:
            with transaction(self.db):
                profile = self.profile_repo.lock(player_id)
                current = read_coins(profile.data or {})
                if current < amount:
                    raise InsufficientBalanceError(current=current, requested=amount)
                new_balance = current - amount
                self.profile_repo.replace(profile, with_coins(profile.data or {}, new_balance))
        except InsufficientBalanceError:
            logger.info(f"Insufficient balance for player {player_id}: requested {amount}")
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to debit coins for player {player_id}: {str(e)}")
            raise StoreError() from e

        logger.info(f"Debited {amount} coins from player {player_id} (balance: {new_balance})")
        self._append_ledger(player_id, -amount, reason or "spend")
        return SpendResponse(spent=amount, coins=new_balance)

    def get_ledger(
        self, player_id: int, limit: int = 50, offset: int = 0
    ) -> CoinLedgerResponse:
        """코인 원장 조회 (최신순)"""
        limit = min(max(limit, 1), 100)
        offset = max(offset, 0)
        try:
            ledger = self.ledger_repo.get_player_ledger(player_id, limit=limit, offset=offset)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to get ledger for player {player_id}: {str(e)}")
            raise StoreError() from e
        return ledger

    def _record_rejected(
        self, player_id: int, product_id: str, token: str, amount: int, raw: dict
    ) -> None:
        """검증 실패 토큰 기록 - 같은 토큰의 재사용을 막기 위해 유니크 슬롯을 점유"""
        try:
            with transaction(self.db):
                self.token_repo.record(
                    token=token,
                    player_id=player_id,
                    product_id=product_id,
                    amount=amount,
                    state=PurchaseTokenState.REJECTED,
                    raw_verification_response=raw,
                )
        except IntegrityError as e:
            raise ConflictError("Purchase token already processed") from e
        except SQLAlchemyError as e:
            logger.error(f"Failed to record rejected purchase token: {str(e)}")
            raise StoreError() from e

        logger.warning(
            f"Rejected purchase token recorded for player {player_id}, product {product_id}"
        )

    def _append_ledger(
        self, player_id: int, delta: int, reason: str, ref: Optional[str] = None
    ) -> None:
        """원장 기록 (best-effort) - 실패해도 이미 커밋된 잔액 변경은 유지"""
        reason = reason[: self.settings.LEDGER_REASON_MAX_LENGTH]
        try:
            with transaction(self.db):
                self.ledger_repo.append(player_id, delta, reason, ref=ref)
        except SQLAlchemyError as e:
            logger.warning(
                f"Failed to append coin ledger entry for player {player_id} (delta {delta}): {str(e)}"
            )
