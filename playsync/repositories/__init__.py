# Repository layer - Data access with Pydantic responses

from .base import BaseRepository
from .player_repository import PlayerRepository
from .profile_repository import ProfileRepository
from .purchase_token_repository import PurchaseTokenRepository
from .coin_ledger_repository import CoinLedgerRepository

__all__ = [
    "BaseRepository",
    "PlayerRepository",
    "ProfileRepository",
    "PurchaseTokenRepository",
    "CoinLedgerRepository",
]
