from dependency_injector import containers, providers

from playsync.config import get_settings
from playsync.providers.billing.google_play import GooglePlayPurchaseVerifier
from playsync.providers.oauth.google import GoogleOAuthProvider
from playsync.services.auth_service import AuthService
from playsync.services.profile_service import ProfileService
from playsync.services.wallet_service import WalletService


class ConfigModule(containers.DeclarativeContainer):
    """Application configuration."""

    config = providers.Singleton(get_settings)


class GatewayModule(containers.DeclarativeContainer):
    """External collaborators (identity provider, purchase verification)."""

    config = providers.DependenciesContainer()

    google_oauth = providers.Singleton(GoogleOAuthProvider, settings=config.config)
    purchase_verifier = providers.Singleton(
        GooglePlayPurchaseVerifier, settings=config.config
    )


class ServiceModule(containers.DeclarativeContainer):
    """Service layer dependencies. The request-scoped db session is passed at call time."""

    config = providers.DependenciesContainer()
    gateways = providers.DependenciesContainer()

    profile_service = providers.Factory(ProfileService, settings=config.config)
    wallet_service = providers.Factory(
        WalletService, settings=config.config, verifier=gateways.purchase_verifier
    )
    auth_service = providers.Factory(
        AuthService, settings=config.config, google_oauth=gateways.google_oauth
    )


class Container(containers.DeclarativeContainer):
    """Application container."""

    wiring_config = containers.WiringConfiguration(
        modules=["playsync.deps"],
    )

    config = providers.Container(ConfigModule)
    gateways = providers.Container(GatewayModule, config=config)
    services = providers.Container(
        ServiceModule, config=config, gateways=gateways
    )
