"""Issue Handlers — issue tracking commands and reads.

Invariants:
    - resolved_at is stamped on entering RESOLVED or CLOSED, cleared on REOPENED
    - Resolve records the resolution text; closed issues must be reopened first
"""

import logging

from pmflow.core import cache_keys as keys
from pmflow.core.domain_types import IssueStatus
from pmflow.core.requests import (
    ChangeIssueStatusCommand, CreateIssueCommand, DeleteIssueCommand,
    GetIssueByIdQuery, GetIssuesByProjectQuery, ResolveIssueCommand,
    UpdateIssueCommand,
)
from pmflow.core.result import Result, Success, conflict, not_found
from pmflow.core.state_transitions import check_issue_resolve, issue_is_resolved
from pmflow.models.issue import Issue
from pmflow.models.project import Project
from pmflow.schemas.project_items import IssueDto
from pmflow.services.handler_support import (
    ScopedHandlers, enum_value, new_id, utcnow,
)

logger = logging.getLogger(__name__)


class IssueHandlers(ScopedHandlers):
    async def create_issue(self, request: CreateIssueCommand) -> Result:
        if await self.repo(Project).get_by_id(request.project_id) is None:
            return not_found("Project", request.project_id)
        issue = Issue(
            id=new_id(),
            project_id=request.project_id,
            reported_by_id=request.reported_by_id,
            assigned_to_id=request.assigned_to_id,
            title=request.title.strip(),
            description=request.description,
            severity=enum_value(request.severity),
            status=IssueStatus.OPEN.value,
            created_at=utcnow(),
        )
        await self.repo(Issue).add(issue)
        await self.uow.save_changes()
        return Success(IssueDto.model_validate(issue))

    async def update_issue(self, request: UpdateIssueCommand) -> Result:
        issues = self.repo(Issue)
        issue = await issues.get_by_id(request.id)
        if issue is None:
            return not_found("Issue", request.id)
        issue.title = request.title.strip()
        issue.description = request.description
        issue.severity = enum_value(request.severity)
        issue.assigned_to_id = request.assigned_to_id
        return await self._save(issue)

    async def resolve_issue(self, request: ResolveIssueCommand) -> Result:
        issue = await self.repo(Issue).get_by_id(request.id)
        if issue is None:
            return not_found("Issue", request.id)
        error = check_issue_resolve(IssueStatus(issue.status))
        if error:
            return conflict(error)
        issue.resolution = request.resolution.strip()
        self._apply_status(issue, IssueStatus.RESOLVED)
        logger.info(f"Issue resolved: {issue.id}")
        return await self._save(issue)

    async def change_issue_status(self, request: ChangeIssueStatusCommand) -> Result:
        issue = await self.repo(Issue).get_by_id(request.id)
        if issue is None:
            return not_found("Issue", request.id)
        self._apply_status(issue, IssueStatus(enum_value(request.status)))
        return await self._save(issue)

    async def delete_issue(self, request: DeleteIssueCommand) -> Result:
        issues = self.repo(Issue)
        issue = await issues.get_by_id(request.id)
        if issue is None:
            return not_found("Issue", request.id)
        await issues.remove(issue)
        await self.uow.save_changes()
        self.touched(keys.related(keys.ISSUE_PREFIX, "project", issue.project_id))
        return Success(True)

    def _apply_status(self, issue: Issue, status: IssueStatus) -> None:
        if status.value == issue.status:
            return
        issue.status = status.value
        if issue_is_resolved(status):
            issue.resolved_at = utcnow()
        elif status == IssueStatus.REOPENED:
            issue.resolved_at = None

    async def _save(self, issue: Issue) -> Result:
        issue.updated_at = utcnow()
        await self.repo(Issue).update(issue)
        await self.uow.save_changes()
        self.touched(keys.related(keys.ISSUE_PREFIX, "project", issue.project_id))
        return Success(IssueDto.model_validate(issue))

    async def get_issue_by_id(self, request: GetIssueByIdQuery) -> Result:
        return await self.read_entity(
            keys.entity(keys.ISSUE_PREFIX, request.id),
            IssueDto, Issue, request.id, "Issue",
        )

    async def get_issues_by_project(self, request: GetIssuesByProjectQuery) -> Result:
        return await self.read_list(
            keys.related(keys.ISSUE_PREFIX, "project", request.project_id),
            IssueDto, Issue, project_id=request.project_id,
        )
