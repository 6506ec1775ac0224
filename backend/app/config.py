"""Configurações do sistema usando Pydantic Settings."""
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_BACKEND_DIR = Path(__file__).resolve().parent.parent
_ENV_FILE = _BACKEND_DIR / ".env"


def _parse_pipeline_bool(v: object) -> bool:
    """Quando a variável não está definida na pipeline, o runner envia o literal '$(NOME)'."""
    if v is None:
        return False
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        s = v.strip().lower()
        if not s or s.startswith("$("):
            return False
        return s in ("1", "true", "yes")
    return False


class Settings(BaseSettings):
    """Configurações da aplicação com validação automática."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Jira Cloud
    JIRA_BASE_URL: str = Field(
        default="",
        description="URL do Jira Cloud (ex: https://empresa.atlassian.net)",
    )
    JIRA_EMAIL: str = Field(
        default="",
        description="E-mail da conta usada na API do Jira",
    )
    JIRA_API_TOKEN: str = Field(
        default="",
        description="API token do Jira (obrigatório via env var)",
    )
    JIRA_SEARCH_MAX_RESULTS: int = Field(
        default=100,
        description="Tamanho da página nas buscas JQL",
    )
    JIRA_SEARCH_ALL_PAGES: bool = Field(
        default=False,
        description="Se True, segue todas as páginas da busca. Default False = apenas a primeira página.",
    )

    @field_validator("JIRA_SEARCH_ALL_PAGES", mode="before")
    @classmethod
    def parse_jira_search_all_pages(cls, v: object) -> bool:
        return _parse_pipeline_bool(v)

    @field_validator("JIRA_BASE_URL", mode="before")
    @classmethod
    def parse_jira_base_url(cls, v: object) -> str:
        """Remove barra final e trata placeholder não definido da pipeline."""
        if not isinstance(v, str):
            return ""
        if v.startswith("$(") and v.endswith(")"):
            return ""
        return v.strip().rstrip("/")

    # Xray Cloud
    XRAY_BASE_URL: str = Field(
        default="https://xray.cloud.getxray.app/api/v2",
        description="URL base da API v2 do Xray Cloud",
    )
    XRAY_CLIENT_ID: str = Field(
        default="",
        description="Client ID da API key do Xray",
    )
    XRAY_CLIENT_SECRET: str = Field(
        default="",
        description="Client Secret da API key do Xray",
    )

    # Webhook (Jira Automation → FastAPI)
    WEBHOOK_SECRET: str = Field(
        default="",
        description="Secret para validar requisições do webhook (header X-Webhook-Secret)",
    )

    # HTTP
    HTTP_TIMEOUT_SECONDS: float = Field(
        default=30,
        description="Timeout (segundos) de cada chamada HTTP ao Jira e ao Xray",
    )

    # Logging
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # Se True, o script em lote retorna exit 1 quando algum Test Plan termina em erro.
    PIPELINE_FAIL_ON_ERROR: bool = Field(
        default=False,
        description="Se True, a execução em lote falha quando algum Test Plan retorna erro. Default False = passo sempre verde.",
    )

    @field_validator("PIPELINE_FAIL_ON_ERROR", mode="before")
    @classmethod
    def parse_pipeline_fail_on_error(cls, v: object) -> bool:
        return _parse_pipeline_bool(v)

    def validate_jira(self) -> None:
        """Valida que URL e credenciais do Jira foram fornecidas. Chame antes de usar."""
        if not self.JIRA_BASE_URL:
            raise ValueError("JIRA_BASE_URL deve ser configurado via variável de ambiente")
        if not self.JIRA_EMAIL.strip() or not self.JIRA_API_TOKEN.strip():
            raise ValueError("JIRA_EMAIL e JIRA_API_TOKEN devem ser configurados via variável de ambiente")


settings = Settings()
