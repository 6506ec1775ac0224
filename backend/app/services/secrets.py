"""Cofre de secrets e resolução das credenciais do Xray."""
import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

from app.config import Settings, settings
from app.models.test_plan import XrayCredentials
from app.services.errors import MissingCredentialsError

logger = logging.getLogger(__name__)

XRAY_CLIENT_ID_SECRET = "XRAY_CLIENT_ID"
XRAY_CLIENT_SECRET_SECRET = "XRAY_CLIENT_SECRET"


@dataclass(frozen=True)
class Secret:
    name: str
    value: str = field(repr=False)


class SecretStore(Protocol):
    """Busca de secret por nome; None quando não existe."""

    def get_secret(self, name: str) -> Optional[Secret]:
        ...


class SettingsSecretStore:
    """Secrets lidos das Settings (variáveis de ambiente / .env)."""

    def __init__(self, app_settings: Optional[Settings] = None) -> None:
        self.settings = app_settings or settings

    def get_secret(self, name: str) -> Optional[Secret]:
        value = getattr(self.settings, name, None)
        if not isinstance(value, str) or not value.strip():
            return None
        return Secret(name=name, value=value.strip())


def resolve_xray_credentials(store: SecretStore) -> XrayCredentials:
    """
    Lê XRAY_CLIENT_ID e XRAY_CLIENT_SECRET do cofre.
    Lança MissingCredentialsError se qualquer um faltar (nenhuma tentativa com credencial parcial).
    """
    client_id = store.get_secret(XRAY_CLIENT_ID_SECRET)
    client_secret = store.get_secret(XRAY_CLIENT_SECRET_SECRET)
    missing = [
        name
        for name, secret in ((XRAY_CLIENT_ID_SECRET, client_id), (XRAY_CLIENT_SECRET_SECRET, client_secret))
        if secret is None or not secret.value
    ]
    if missing:
        raise MissingCredentialsError(f"{', '.join(missing)} não configurado")
    return XrayCredentials(client_id=client_id.value, client_secret=client_secret.value)
