from typing import Callable

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from sqlalchemy.orm import Session

from playsync.containers import Container
from playsync.database.session import get_db
from playsync.services.auth_service import AuthService
from playsync.services.profile_service import ProfileService
from playsync.services.wallet_service import WalletService


@inject
def get_profile_service(
    db: Session = Depends(get_db),
    factory: Callable[..., ProfileService] = Depends(
        Provide[Container.services.profile_service.provider]
    ),
) -> ProfileService:
    return factory(db=db)


@inject
def get_wallet_service(
    db: Session = Depends(get_db),
    factory: Callable[..., WalletService] = Depends(
        Provide[Container.services.wallet_service.provider]
    ),
) -> WalletService:
    return factory(db=db)


@inject
def get_auth_service(
    db: Session = Depends(get_db),
    factory: Callable[..., AuthService] = Depends(
        Provide[Container.services.auth_service.provider]
    ),
) -> AuthService:
    return factory(db=db)
