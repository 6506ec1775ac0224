"""Cliente Xray Cloud API v2: adiciona testes a um Test Plan."""
import logging
from collections.abc import Iterable
from typing import Optional
from urllib.parse import quote

import requests

from app.config import settings
from app.models.test_plan import XrayCredentials
from app.services.errors import XrayWriteError
from app.services.xray_auth import XrayAuthService

logger = logging.getLogger(__name__)


class XrayClient:
    """Gerencia a escrita de testes em Test Plans via Xray Cloud."""

    def __init__(
        self,
        credentials: Optional[XrayCredentials] = None,
        base_url: Optional[str] = None,
        auth_service: Optional[XrayAuthService] = None,
        timeout: Optional[float] = None,
    ) -> None:
        if auth_service is None and credentials is None:
            raise ValueError("Credenciais do Xray não informadas")
        self.base_url = (base_url or settings.XRAY_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self.session = requests.Session()
        self.auth_service = auth_service or XrayAuthService(
            credentials, base_url=self.base_url, session=self.session, timeout=self.timeout
        )

    def add_tests_to_test_plan(self, test_plan_key: str, test_keys: Iterable[str]) -> dict:
        """
        Autentica e envia {"add": [...]} para o Test Plan.
        Lança XrayWriteError se o Xray responder com status de erro.
        """
        token = self.auth_service.authenticate()
        logger.info("Token do Xray recebido")
        keys = sorted(set(test_keys))
        url = f"{self.base_url}/testplan/{quote(test_plan_key, safe='')}/tests"
        r = self.session.post(
            url,
            json={"add": keys},
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            },
            timeout=self.timeout,
        )
        if not r.ok:
            raise XrayWriteError(test_plan_key, r.status_code, (r.text or "")[:500])
        try:
            return r.json()
        except ValueError:
            return {}

    def close(self) -> None:
        self.session.close()
