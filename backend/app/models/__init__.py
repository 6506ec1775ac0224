"""Modelos de domínio e DTOs."""
from app.models.jira_models import (
    TEST_ISSUE_TYPE,
    IssueLink,
    JiraIssue,
    JiraIssueFields,
    LinkedIssue,
    SearchResponse,
)
from app.models.test_plan import SyncResult, SyncStatus, XrayCredentials

__all__ = [
    "TEST_ISSUE_TYPE",
    "IssueLink",
    "JiraIssue",
    "JiraIssueFields",
    "LinkedIssue",
    "SearchResponse",
    "SyncResult",
    "SyncStatus",
    "XrayCredentials",
]
