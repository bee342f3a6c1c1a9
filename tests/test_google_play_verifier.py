import asyncio

import httpx
import pytest

from playsync.providers.billing.google_play import (
    GooglePlayPurchaseVerifier,
    PurchaseVerificationUnavailable,
)

PACKAGE = "com.example.game"


class StaticCredentials:
    """이미 유효한 서비스 계정 자격 증명 대역"""

    valid = True
    token = "service-token"

    def refresh(self, request):
        raise AssertionError("refresh should not be called")


def _verifier(settings, handler) -> GooglePlayPurchaseVerifier:
    return GooglePlayPurchaseVerifier(
        settings,
        credentials=StaticCredentials(),
        transport=httpx.MockTransport(handler),
    )


def _verify(verifier, product_id="coins_150", token="tok-1"):
    return asyncio.run(verifier.verify(PACKAGE, product_id, token))


class TestGooglePlayPurchaseVerifier:
    def test_purchased_state_is_verified(self, settings):
        # Arrange
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(
                200, json={"purchaseState": 0, "orderId": "GPA.1", "consumptionState": 0}
            )

        # Act
        result = _verify(_verifier(settings, handler))

        # Assert
        assert result.verified is True
        assert result.raw["orderId"] == "GPA.1"
        assert seen["auth"] == "Bearer service-token"
        assert seen["url"].endswith(
            f"/applications/{PACKAGE}/purchases/products/coins_150/tokens/tok-1"
        )

    @pytest.mark.parametrize("state", [1, 2])
    def test_cancelled_or_pending_is_not_verified(self, settings, state):
        def handler(request):
            return httpx.Response(200, json={"purchaseState": state})

        result = _verify(_verifier(settings, handler))

        assert result.verified is False
        assert result.raw == {"purchaseState": state}

    def test_client_error_is_a_rejection(self, settings):
        """4xx 는 판정(거절)으로 취급"""

        def handler(request):
            return httpx.Response(400, json={"error": {"message": "Invalid Value"}})

        result = _verify(_verifier(settings, handler))

        assert result.verified is False
        assert result.raw["http_status"] == 400
        assert result.raw["error"] == {"error": {"message": "Invalid Value"}}

    def test_server_error_is_unavailable(self, settings):
        """5xx 는 판정 없음 -> 재시도 가능"""

        def handler(request):
            return httpx.Response(503, text="backend error")

        with pytest.raises(PurchaseVerificationUnavailable):
            _verify(_verifier(settings, handler))

    def test_timeout_is_unavailable(self, settings):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(PurchaseVerificationUnavailable):
            _verify(_verifier(settings, handler))

    def test_connection_error_is_unavailable(self, settings):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(PurchaseVerificationUnavailable):
            _verify(_verifier(settings, handler))

    def test_token_is_url_quoted(self, settings):
        seen = {}

        def handler(request):
            seen["path"] = request.url.raw_path.decode()
            return httpx.Response(200, json={"purchaseState": 0})

        _verify(_verifier(settings, handler), token="a/b c")

        assert seen["path"].endswith("/tokens/a%2Fb%20c")

    def test_missing_package_name_is_unavailable(self, settings):
        verifier = _verifier(settings, lambda request: httpx.Response(200, json={}))

        with pytest.raises(PurchaseVerificationUnavailable):
            asyncio.run(verifier.verify("", "coins_150", "tok-1"))

    def test_missing_service_account_is_unavailable(self, settings):
        verifier = GooglePlayPurchaseVerifier(
            settings.model_copy(update={"GOOGLE_PLAY_SERVICE_ACCOUNT_FILE": None}),
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})),
        )

        with pytest.raises(PurchaseVerificationUnavailable):
            _verify(verifier)
