"""FastAPI app: webhook Jira (Test Plan), health e sync manual por Test Plan."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Header, HTTPException, status
from fastapi.responses import JSONResponse

from app.config import settings
from app.models.test_plan import SyncResult
from app.services.test_plan_service import TestPlanSyncService

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield


app = FastAPI(title="XrayTestPlanSync", description="Webhook e sync de testes em Test Plans do Xray", lifespan=lifespan)


def _get_test_plan_key_from_payload(body: dict) -> str | None:
    """Extrai issue.key do payload do webhook/Automation do Jira."""
    issue = body.get("issue") or {}
    key = issue.get("key") if isinstance(issue, dict) else None
    if not isinstance(key, str) or not key.strip():
        return None
    return key.strip()


def _sync_test_plan(test_plan_key: str) -> SyncResult:
    """Um serviço (e um cliente Jira) por execução."""
    settings.validate_jira()
    svc = TestPlanSyncService()
    try:
        return svc.sync(test_plan_key)
    finally:
        svc.close()


@app.post("/webhook/jira")
def webhook_jira(
    body: dict,
    x_webhook_secret: str | None = Header(None, alias="X-Webhook-Secret"),
):
    """
    Recebe POST do Jira (webhook ou Automation rule) com issue.key do Test Plan.
    Valida secret e executa o fluxo (fixVersion, testes relacionados, envio ao Xray).
    """
    if settings.WEBHOOK_SECRET and (not x_webhook_secret or x_webhook_secret != settings.WEBHOOK_SECRET):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Webhook secret inválido")
    test_plan_key = _get_test_plan_key_from_payload(body)
    if test_plan_key is None:
        return JSONResponse(content={"ok": True, "message": "Ignored (no issue key)"}, status_code=200)
    try:
        result = _sync_test_plan(test_plan_key)
    except ValueError as e:
        logger.error("Configuração inválida: %s", e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return JSONResponse(content={"ok": result.ok, "result": result.message}, status_code=200)


@app.get("/health")
async def health():
    """Health check para monitoramento e deploy."""
    return {"status": "ok"}


@app.post("/sync/testplan/{test_plan_key}")
def sync_test_plan(test_plan_key: str):
    """Disparo manual: processa um Test Plan por key."""
    try:
        result = _sync_test_plan(test_plan_key)
    except ValueError as e:
        logger.error("Configuração inválida: %s", e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return {
        "ok": result.ok,
        "status": result.status.value,
        "result": result.message,
        "test_keys": sorted(result.test_keys),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
