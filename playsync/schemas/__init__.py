from .auth import GoogleLoginRequest, LoginResponse
from .profile import MergeRequest, ProfileSnapshot
from .wallet import (
    CoinLedgerResponse,
    SpendRequest,
    TopUpRequest,
    WalletBalanceResponse,
)
