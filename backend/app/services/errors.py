"""Exceções dos serviços Jira/Xray."""


class JiraAuthenticationError(ValueError):
    """Jira recusou as credenciais (401/403)."""


class MissingCredentialsError(ValueError):
    """Credencial do Xray ausente no cofre de secrets."""


class XrayAuthenticationError(ValueError):
    """Falha ao trocar client ID/secret por token no Xray."""


class XrayWriteError(RuntimeError):
    """Xray respondeu com erro ao adicionar testes ao Test Plan."""

    def __init__(self, test_plan_key: str, status_code: int, detail: str = "") -> None:
        self.test_plan_key = test_plan_key
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Xray retornou {status_code} ao adicionar testes em {test_plan_key}: {detail}".rstrip(": "))
