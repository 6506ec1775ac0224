"""Serviço de autenticação no Xray Cloud (client ID/secret → token)."""
import json
import logging
from typing import Optional

import requests

from app.config import settings
from app.models.test_plan import XrayCredentials
from app.services.errors import XrayAuthenticationError

logger = logging.getLogger(__name__)


class XrayAuthService:
    """Troca a API key do Xray por um bearer token. Sem cache: um token por execução."""

    def __init__(
        self,
        credentials: XrayCredentials,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.credentials = credentials
        self.base_url = (base_url or settings.XRAY_BASE_URL).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS

    def authenticate(self) -> str:
        """Obtém um token novo. O corpo da resposta é o próprio token."""
        r = self.session.post(
            f"{self.base_url}/authenticate",
            json={
                "client_id": self.credentials.client_id,
                "client_secret": self.credentials.client_secret,
            },
            headers={"Content-Type": "application/json"},
            timeout=self.timeout,
        )
        if not r.ok:
            raise XrayAuthenticationError(f"Falha na autenticação no Xray. Status: {r.status_code}")
        token = _parse_token(r.text)
        if not token:
            raise XrayAuthenticationError("Xray não retornou token")
        return token


def _parse_token(body: str) -> str:
    """O Xray devolve o token como string JSON ("..."); aceita também texto puro."""
    text = (body or "").strip()
    if text.startswith('"') and text.endswith('"'):
        try:
            decoded = json.loads(text)
        except ValueError:
            return text.strip('"')
        if isinstance(decoded, str):
            return decoded
    return text
