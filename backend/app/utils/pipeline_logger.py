"""
Log estruturado da execução em lote de Test Plans.
Registra por Test Plan: key, FixVersion, quantidade de testes, status e mensagem.
Saída: HTML em backend/logs/testplans_YYYYMMDD_HHMMSS.html (um arquivo por execução).
"""
import html
import logging
from datetime import datetime
from pathlib import Path

from app.config import settings
from app.models.test_plan import SyncResult

_BACKEND_DIR = Path(__file__).resolve().parent.parent.parent
LOGS_DIR = _BACKEND_DIR / "logs"
LOG_PREFIX = "testplans"

logger = logging.getLogger(__name__)

# Arquivo HTML da execução atual (preenchido por start_html_log, fechado por end_html_log)
_html_log_path: Path | None = None


def _html_log_file_path() -> Path:
    """Arquivo de log HTML desta execução."""
    LOGS_DIR.mkdir(parents=True, exist_ok=True)
    return LOGS_DIR / f"{LOG_PREFIX}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.html"


def issue_url(issue_key: str) -> str:
    """URL da issue no Jira (vazio se JIRA_BASE_URL não estiver configurado)."""
    if not settings.JIRA_BASE_URL:
        return ""
    return f"{settings.JIRA_BASE_URL}/browse/{issue_key}"


def _html_header(title: str) -> str:
    return f"""<!DOCTYPE html>
<html lang="pt-BR">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{html.escape(title)}</title>
  <style>
    body {{ font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; margin: 24px; background: #f5f5f5; }}
    h1 {{ color: #0052cc; margin-bottom: 8px; }}
    .meta {{ color: #666; margin-bottom: 20px; font-size: 14px; }}
    table {{ border-collapse: collapse; width: 100%; max-width: 1200px; background: #fff; box-shadow: 0 2px 8px rgba(0,0,0,.08); }}
    th {{ background: #0052cc; color: #fff; text-align: left; padding: 12px 14px; font-size: 13px; }}
    td {{ padding: 12px 14px; border-bottom: 1px solid #eee; font-size: 13px; vertical-align: top; }}
    tr.erro {{ background: #fdecea; }}
    a {{ color: #0052cc; text-decoration: none; }}
    .testes {{ max-width: 320px; word-break: break-word; }}
    .erro-cell {{ color: #a4262c; font-weight: 500; }}
  </style>
</head>
<body>
  <h1>{html.escape(title)}</h1>
  <p class="meta">Execução: {html.escape(datetime.now().strftime("%d/%m/%Y %H:%M:%S"))}</p>
  <table>
    <thead>
      <tr>
        <th>Test Plan</th>
        <th>FixVersion</th>
        <th>Qtd. testes</th>
        <th>Testes</th>
        <th>Status</th>
      </tr>
    </thead>
    <tbody>
"""


def start_html_log() -> Path | None:
    """
    Inicia o log HTML desta execução (cria arquivo com cabeçalho e tabela).
    Retorna o path do arquivo ou None em caso de erro.
    """
    global _html_log_path
    try:
        path = _html_log_file_path()
        with open(path, "w", encoding="utf-8") as f:
            f.write(_html_header("Log da Pipeline – Test Plans Xray"))
        _html_log_path = path
        logger.info("Log HTML iniciado: %s", path.name)
        return path
    except OSError as e:
        logger.warning("Não foi possível criar log HTML: %s", e)
        return None


def end_html_log() -> None:
    """Fecha o log HTML (escreve rodapé). Deve ser chamado ao final da execução."""
    global _html_log_path
    if not _html_log_path:
        return
    try:
        with open(_html_log_path, "a", encoding="utf-8") as f:
            f.write("    </tbody>\n  </table>\n</body>\n</html>\n")
        logger.info("Log HTML fechado: %s", _html_log_path.name)
    except OSError as e:
        logger.warning("Não foi possível fechar log HTML: %s", e)
    _html_log_path = None


def log_test_plan_result(result: SyncResult) -> None:
    """
    Escreve um bloco de log para um Test Plan processado.
    Saída: console (logger) e, se start_html_log foi chamado, uma linha no log HTML.
    """
    tests_str = ", ".join(sorted(result.test_keys)) if result.test_keys else "Nenhum"
    fix_version = result.fix_version or "N/A"

    logger.info(
        "Test Plan %s | FixVersion: %s | Testes: %s | Status: %s | %s",
        result.test_plan_key, fix_version, len(result.test_keys), result.status.value, result.message,
    )
    if not result.ok:
        logger.error("Test Plan %s erro: %s", result.test_plan_key, result.message)

    if _html_log_path:
        try:
            row_class = "erro" if not result.ok else ""
            status = (
                f'<span class="erro-cell">{html.escape(result.message)}</span>'
                if not result.ok
                else html.escape(result.message)
            )
            url = issue_url(result.test_plan_key)
            key = html.escape(result.test_plan_key)
            link = f'<a href="{html.escape(url)}" target="_blank" rel="noopener">{key}</a>' if url else key
            with open(_html_log_path, "a", encoding="utf-8") as f:
                f.write(
                    f'    <tr class="{row_class}">\n'
                    f'      <td>{link}</td>\n'
                    f'      <td>{html.escape(fix_version)}</td>\n'
                    f'      <td>{len(result.test_keys)}</td>\n'
                    f'      <td class="testes">{html.escape(tests_str)}</td>\n'
                    f'      <td>{status}</td>\n'
                    f'    </tr>\n'
                )
        except OSError as e:
            logger.warning("Não foi possível escrever linha no log HTML: %s", e)
