"""Modelos para integração Jira (issue, links, resposta da busca JQL)."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Tipo de issue do Xray que representa um caso de teste
TEST_ISSUE_TYPE = "Test"


class _JiraModel(BaseModel):
    """Base dos modelos Jira: ignora campos que não usamos."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class IssueType(_JiraModel):
    name: Optional[str] = None


class FixVersion(_JiraModel):
    name: Optional[str] = None


class LinkedIssueFields(_JiraModel):
    issuetype: Optional[IssueType] = None


class LinkedIssue(_JiraModel):
    """Ponta de um link: o Jira expõe apenas a outra issue (key + tipo)."""

    key: Optional[str] = None
    fields: Optional[LinkedIssueFields] = None

    @property
    def issue_type_name(self) -> Optional[str]:
        if self.fields is None or self.fields.issuetype is None:
            return None
        return self.fields.issuetype.name


class IssueLink(_JiraModel):
    """Entrada de fields.issuelinks; apenas um dos lados vem preenchido."""

    outward_issue: Optional[LinkedIssue] = Field(default=None, alias="outwardIssue")
    inward_issue: Optional[LinkedIssue] = Field(default=None, alias="inwardIssue")

    @property
    def linked_issue(self) -> Optional[LinkedIssue]:
        """Issue do outro lado do link (outward tem preferência)."""
        return self.outward_issue or self.inward_issue


class JiraIssueFields(_JiraModel):
    issuetype: Optional[IssueType] = None
    fix_versions: list[FixVersion] = Field(default_factory=list, alias="fixVersions")
    issuelinks: list[IssueLink] = Field(default_factory=list)
    labels: list[str] = Field(default_factory=list)

    @field_validator("fix_versions", "issuelinks", "labels", mode="before")
    @classmethod
    def none_as_empty(cls, v: object) -> object:
        """O Jira pode devolver null nesses campos."""
        return [] if v is None else v


class JiraIssue(_JiraModel):
    """Work item do Jira com os campos solicitados na projeção."""

    key: str
    fields: JiraIssueFields = Field(default_factory=JiraIssueFields)

    @property
    def fix_version(self) -> Optional[str]:
        """Primeira fixVersion da issue (None se não houver)."""
        for version in self.fields.fix_versions:
            return version.name or None
        return None


class SearchResponse(_JiraModel):
    """Resposta de GET /rest/api/3/search."""

    issues: list[JiraIssue] = Field(default_factory=list)
    start_at: int = Field(default=0, alias="startAt")
    max_results: int = Field(default=0, alias="maxResults")
    total: int = 0
