"""Cliente Jira Cloud REST API v3: leitura de issue e busca JQL."""
import base64
import logging
from urllib.parse import quote

import requests
from pydantic import ValidationError
from requests.adapters import HTTPAdapter

from app.config import settings
from app.models.jira_models import JiraIssue, SearchResponse
from app.services.errors import JiraAuthenticationError

logger = logging.getLogger(__name__)


class JiraClient:
    """Cliente para Jira: ler um work item por key e executar buscas JQL."""

    def __init__(
        self,
        base_url: str | None = None,
        email: str | None = None,
        api_token: str | None = None,
        *,
        timeout: float | None = None,
        max_results: int | None = None,
        fetch_all_pages: bool | None = None,
    ) -> None:
        self.base_url = (base_url or settings.JIRA_BASE_URL or "").rstrip("/")
        self.email = (email or settings.JIRA_EMAIL or "").strip()
        self.api_token = (api_token or settings.JIRA_API_TOKEN or "").strip()
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self.max_results = max_results or settings.JIRA_SEARCH_MAX_RESULTS
        self.fetch_all_pages = settings.JIRA_SEARCH_ALL_PAGES if fetch_all_pages is None else fetch_all_pages
        if not self.base_url:
            raise ValueError("JIRA_BASE_URL não está configurado")
        if not self.email or not self.api_token:
            raise ValueError("JIRA_EMAIL/JIRA_API_TOKEN não estão configurados")
        self.session = requests.Session()
        # Sem retry: cada chamada é feita uma única vez
        adapter = HTTPAdapter(pool_connections=10, pool_maxsize=20, max_retries=0)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)
        self.session.headers.update({
            "Authorization": f"Basic {self._encode_credentials()}",
            "Accept": "application/json",
        })

    def _encode_credentials(self) -> str:
        return base64.b64encode(f"{self.email}:{self.api_token}".encode("utf-8")).decode("utf-8")

    def _make_request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}/rest/api/3/{endpoint}"
        r = self.session.request(method=method, url=url, timeout=self.timeout, **kwargs)
        if r.status_code in (401, 403):
            raise JiraAuthenticationError("Erro de autenticação. Verifique JIRA_EMAIL/JIRA_API_TOKEN.")
        if "text/html" in (r.headers.get("Content-Type") or "") and r.status_code != 200:
            raise ValueError(f"Resposta inesperada (HTML). Status: {r.status_code}")
        r.raise_for_status()
        return r

    def get_issue(self, key: str, fields: list[str] | None = None) -> JiraIssue | None:
        """
        Obtém um work item por key. Retorna None se a issue não existir (404).
        fields: projeção de campos (None = todos os campos).
        """
        params = {"fields": ",".join(fields)} if fields else {}
        try:
            r = self._make_request("GET", f"issue/{quote(key, safe='')}", params=params)
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                return None
            raise
        return JiraIssue.model_validate(r.json())

    def search_issues(self, jql: str, fields: list[str] | None = None) -> list[JiraIssue]:
        """
        Executa uma busca JQL e retorna as issues com os campos solicitados.
        Por padrão lê apenas a primeira página (max_results itens); com fetch_all_pages=True
        segue startAt até o total informado pelo Jira.
        """
        field_list = ",".join(fields) if fields else "key"
        issues: list[JiraIssue] = []
        start_at = 0
        total = 0
        while True:
            params = {
                "jql": jql,
                "fields": field_list,
                "startAt": start_at,
                "maxResults": self.max_results,
            }
            r = self._make_request("GET", "search", params=params)
            try:
                page = SearchResponse.model_validate(r.json())
            except (ValidationError, ValueError) as e:
                raise ValueError(f"Resposta inválida da busca JQL: {e}") from e
            issues.extend(page.issues)
            total = page.total
            if not self.fetch_all_pages or not page.issues:
                break
            start_at = page.start_at + len(page.issues)
            if start_at >= page.total:
                break
        if total > len(issues):
            logger.warning("Busca JQL retornou %s de %s resultados; os demais foram ignorados: %s", len(issues), total, jql)
        return issues

    def close(self) -> None:
        self.session.close()
