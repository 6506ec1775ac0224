"""Utilitários para montar as consultas JQL do fluxo de Test Plan."""
from collections.abc import Iterable

# Label que marca testes automatizados da release
AUTOMATED_LABEL = "Automated"


def quote_jql_value(value: str) -> str:
    """
    Envolve o valor em aspas duplas para uso em JQL.

    Escapa apenas barra invertida e aspas; o conteúdo não é normalizado
    (fixVersion " R1" continua " R1").
    """
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def stories_by_fix_version_jql(fix_version: str) -> str:
    """Stories da mesma fixVersion do Test Plan."""
    return f"issuetype = Story AND fixVersion = {quote_jql_value(fix_version)}"


def automated_tests_jql(fix_version: str) -> str:
    """Tests da fixVersion marcados com a label Automated."""
    return (
        f"issuetype = Test AND fixVersion = {quote_jql_value(fix_version)} "
        f"AND labels = {quote_jql_value(AUTOMATED_LABEL)}"
    )


def label_match_tests_jql(labels: Iterable[str]) -> str:
    """
    Tests com qualquer uma das labels (OR). Labels ordenadas para a consulta ser determinística.

    Raises:
        ValueError: se nenhuma label for informada.
    """
    unique = sorted(set(labels))
    if not unique:
        raise ValueError("Ao menos uma label é necessária")
    clauses = " OR ".join(f"labels = {quote_jql_value(label)}" for label in unique)
    return f"issuetype = Test AND ({clauses})"
