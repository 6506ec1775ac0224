"""Orquestração: por Test Plan, agregar testes relacionados e registrá-los no Xray."""
import logging
from collections.abc import Callable, Iterable

import requests

from app.models.jira_models import TEST_ISSUE_TYPE, JiraIssue
from app.models.test_plan import SyncResult, SyncStatus, XrayCredentials
from app.services.errors import MissingCredentialsError, XrayWriteError
from app.services.jira_client import JiraClient
from app.services.secrets import SecretStore, SettingsSecretStore, resolve_xray_credentials
from app.services.xray_client import XrayClient
from app.utils.jql_utils import automated_tests_jql, stories_by_fix_version_jql, label_match_tests_jql

logger = logging.getLogger(__name__)

STORY_FIELDS = ["issuelinks", "labels"]
TEST_FIELDS = ["key"]

MSG_NO_FIX_VERSION = "No FixVersion found"
MSG_NO_TESTS = "No tests found to add"
MSG_MISSING_CREDENTIALS = "Missing Xray credentials"
MSG_ERROR = "Error occurred during TestPlan automation"


def extract_linked_test_keys(issue: JiraIssue) -> set[str]:
    """Keys das issues do tipo Test ligadas à issue (outward ou inward). Links sem tipo/key são ignorados."""
    keys: set[str] = set()
    for link in issue.fields.issuelinks:
        linked = link.linked_issue
        if linked is None or not linked.key:
            continue
        if linked.issue_type_name == TEST_ISSUE_TYPE:
            keys.add(linked.key)
    return keys


def collect_labels(issue: JiraIssue) -> set[str]:
    """Labels não vazias da issue."""
    return {label for label in issue.fields.labels if label}


class TestPlanSyncService:
    """Agrega os testes de um Test Plan (links, label Automated, labels das Stories) e envia ao Xray."""

    # Evita que o pytest trate a classe como suíte de testes
    __test__ = False

    def __init__(
        self,
        jira_client: JiraClient | None = None,
        secret_store: SecretStore | None = None,
        xray_client_factory: Callable[[XrayCredentials], XrayClient] | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self.jira = jira_client or JiraClient()
        self.secret_store = secret_store or SettingsSecretStore()
        self.xray_client_factory = xray_client_factory or (lambda credentials: XrayClient(credentials))
        self.log = log or logger

    def derive_fix_version(self, test_plan_key: str) -> str | None:
        """Primeira fixVersion do Test Plan. Falha na leitura conta como ausência."""
        try:
            test_plan = self.jira.get_issue(test_plan_key, fields=["fixVersions"])
        except (requests.RequestException, ValueError) as e:
            self.log.warning("Não foi possível ler o Test Plan %s: %s", test_plan_key, e)
            return None
        if test_plan is None:
            self.log.warning("Test Plan %s não encontrado", test_plan_key)
            return None
        return test_plan.fix_version

    def collect_from_stories(self, fix_version: str) -> tuple[set[str], set[str]]:
        """Busca Stories da fixVersion; retorna (testes ligados, labels das Stories)."""
        stories = self.jira.search_issues(stories_by_fix_version_jql(fix_version), fields=STORY_FIELDS)
        self.log.info("Stories encontradas: %s", len(stories))
        test_keys: set[str] = set()
        story_labels: set[str] = set()
        for story in stories:
            test_keys |= extract_linked_test_keys(story)
            story_labels |= collect_labels(story)
        self.log.info("Testes ligados: %s", len(test_keys))
        self.log.info("Labels das Stories: %s", ", ".join(sorted(story_labels)) or "Nenhuma")
        return test_keys, story_labels

    def collect_automated_tests(self, fix_version: str) -> set[str]:
        """Tests da fixVersion com label Automated."""
        tests = self.jira.search_issues(automated_tests_jql(fix_version), fields=TEST_FIELDS)
        self.log.info("Testes automatizados encontrados: %s", len(tests))
        return {test.key for test in tests}

    def collect_tests_by_labels(self, labels: Iterable[str]) -> set[str]:
        """Tests com alguma das labels herdadas das Stories. Sem labels, nenhuma busca é feita."""
        labels = set(labels)
        if not labels:
            self.log.info("Nenhuma label de Story; busca por label omitida")
            return set()
        tests = self.jira.search_issues(label_match_tests_jql(labels), fields=TEST_FIELDS)
        self.log.info("Testes por label encontrados: %s", len(tests))
        return {test.key for test in tests}

    def aggregate_test_keys(self, fix_version: str) -> set[str]:
        """União (sem duplicatas) dos testes das três fontes."""
        test_keys, story_labels = self.collect_from_stories(fix_version)
        test_keys |= self.collect_automated_tests(fix_version)
        test_keys |= self.collect_tests_by_labels(story_labels)
        return test_keys

    def process_test_plan(self, test_plan_key: str) -> SyncResult:
        """
        Executa o fluxo completo para um Test Plan:
        - fixVersion do Test Plan (sem fixVersion: encerra);
        - testes ligados às Stories, testes Automated e testes por label das Stories;
        - sem testes: encerra sem autenticar no Xray;
        - credenciais do Xray, autenticação e envio dos testes.
        Erros de transporte/parse propagam; use sync() para tratá-los.
        """
        self.log.info("Iniciando automação do Test Plan %s", test_plan_key)
        fix_version = self.derive_fix_version(test_plan_key)
        if not fix_version:
            self.log.info("Test Plan %s sem FixVersion", test_plan_key)
            return SyncResult(SyncStatus.NO_FIX_VERSION, MSG_NO_FIX_VERSION, test_plan_key)
        self.log.info("FixVersion: %s", fix_version)

        test_keys = self.aggregate_test_keys(fix_version)
        if not test_keys:
            self.log.info("Nenhum teste atende aos critérios para %s", test_plan_key)
            return SyncResult(SyncStatus.NO_TESTS, MSG_NO_TESTS, test_plan_key, fix_version)

        try:
            credentials = resolve_xray_credentials(self.secret_store)
        except MissingCredentialsError as e:
            self.log.error("Credenciais do Xray ausentes: %s", e)
            return SyncResult(SyncStatus.MISSING_CREDENTIALS, MSG_MISSING_CREDENTIALS, test_plan_key, fix_version, frozenset(test_keys))

        xray = self.xray_client_factory(credentials)
        try:
            xray.add_tests_to_test_plan(test_plan_key, test_keys)
        except XrayWriteError as e:
            self.log.error("Xray recusou os testes do Test Plan %s: %s", test_plan_key, e)
            return SyncResult(
                SyncStatus.WRITE_FAILED,
                f"Failed to add tests to {test_plan_key}",
                test_plan_key,
                fix_version,
                frozenset(test_keys),
            )
        finally:
            xray.close()

        message = f"Added {len(test_keys)} tests to {test_plan_key}"
        self.log.info(message)
        return SyncResult(SyncStatus.SUCCESS, message, test_plan_key, fix_version, frozenset(test_keys))

    def sync(self, test_plan_key: str) -> SyncResult:
        """process_test_plan com tratamento único de erros: qualquer falha vira status ERROR."""
        try:
            return self.process_test_plan(test_plan_key)
        except Exception:
            self.log.exception("Erro durante a automação do Test Plan %s", test_plan_key)
            return SyncResult(SyncStatus.ERROR, MSG_ERROR, test_plan_key)

    def run(self, test_plan_key: str) -> str:
        """Mensagem de status da execução para o Test Plan."""
        return self.sync(test_plan_key).message

    def close(self) -> None:
        self.jira.close()
