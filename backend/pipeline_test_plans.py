"""
Script em lote: para cada Test Plan informado, agrega os testes relacionados
(links das Stories, label Automated, labels das Stories) e os adiciona no Xray.

Uso: python pipeline_test_plans.py TP-1 [TP-2 ...]
Sem argumentos, lê as keys de TEST_PLAN_KEYS (separadas por vírgula ou ponto e vírgula).
Log em HTML: backend/logs/testplans_YYYYMMDD_HHMMSS.html (publicado como artefato).
"""
import logging
import os
import sys
from pathlib import Path

# Garante que o backend/app está no path quando rodado como script
_backend = Path(__file__).resolve().parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

from app.config import settings
from app.models.test_plan import SyncStatus
from app.services.test_plan_service import TestPlanSyncService
from app.utils.pipeline_logger import end_html_log, log_test_plan_result, start_html_log

logging.basicConfig(
    level=getattr(logging, (settings.LOG_LEVEL or "INFO").upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def parse_test_plan_keys(argv: list[str]) -> list[str]:
    """Keys da linha de comando ou de TEST_PLAN_KEYS, sem duplicatas e na ordem informada."""
    raw = argv or [os.environ.get("TEST_PLAN_KEYS", "")]
    keys: list[str] = []
    for chunk in raw:
        for key in chunk.replace(";", ",").split(","):
            key = key.strip()
            if key and key not in keys:
                keys.append(key)
    return keys


def main(argv: list[str] | None = None) -> int:
    keys = parse_test_plan_keys(sys.argv[1:] if argv is None else argv)
    if not keys:
        logger.error("Nenhum Test Plan informado (argumentos ou TEST_PLAN_KEYS)")
        return 2
    settings.validate_jira()
    start_html_log()
    svc = TestPlanSyncService()
    try:
        counts = {s: 0 for s in SyncStatus}
        for key in keys:
            result = svc.sync(key)
            counts[result.status] += 1
            log_test_plan_result(result)
        failed = sum(n for s, n in counts.items() if s.is_failure)
        logger.info(
            "Execução concluída: %s Test Plan(s), %s com testes adicionados, %s com erro",
            len(keys), counts[SyncStatus.SUCCESS], failed,
        )
        # Com PIPELINE_FAIL_ON_ERROR=False (default), o passo não falha; o relatório HTML tem o detalhe.
        return 0 if (failed == 0 or not settings.PIPELINE_FAIL_ON_ERROR) else 1
    finally:
        svc.close()
        end_html_log()


if __name__ == "__main__":
    sys.exit(main())
