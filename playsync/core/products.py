"""
인앱 상품 가격표

상품 ID -> 지급 코인 수 의 정적 매핑입니다. 실제 값은 설정(COIN_PRODUCTS)에서 읽습니다.
"""

from typing import Mapping

from playsync.core.exceptions import ValidationError


class PriceTable:
    def __init__(self, products: Mapping[str, int]):
        invalid = {
            product_id: amount
            for product_id, amount in products.items()
            if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0
        }
        if invalid:
            raise ValueError(f"coin amounts must be positive integers: {invalid}")
        self._products = dict(products)

    def resolve_coin_amount(self, product_id: str) -> int:
        amount = self._products.get(product_id)
        if amount is None:
            raise ValidationError(
                f"Unknown product: {product_id}", details={"product_id": product_id}
            )
        return amount
