"""Request Registrations — every request type the dispatcher accepts, in one place.

Invariants:
    - Each request type appears exactly once (duplicates raise at startup)
    - Every Command carries its invalidation map; Queries never do
    - The returned registry is frozen

Design Decisions:
    - Explicit table over auto-discovery: adding an operation means editing this
      file (ADR: every mapping visible in one place)
    - Handler factories are lambdas over the scope: one handler object per request
"""

from pmflow.core import invalidation as inv
from pmflow.core import request_rules as rules
from pmflow.core import requests as rq
from pmflow.services.handle_documents import DocumentHandlers
from pmflow.services.handle_issues import IssueHandlers
from pmflow.services.handle_organizations import OrganizationHandlers, UserHandlers
from pmflow.services.handle_projects import ProjectHandlers
from pmflow.services.handle_resource_allocations import ResourceAllocationHandlers
from pmflow.services.handle_risks import RiskHandlers
from pmflow.services.handle_sprints import SprintHandlers
from pmflow.services.handle_tasks import TaskHandlers
from pmflow.services.handle_time_entries import TimeEntryHandlers
from pmflow.services.request_registry import RequestRegistry


def build_registry() -> RequestRegistry:
    r = RequestRegistry()

    # Organizations
    r.command(
        rq.CreateOrganizationCommand,
        lambda s: OrganizationHandlers(s).create_organization,
        rules=rules.CREATE_ORGANIZATION_RULES,
        invalidation=inv.invalidate_create_organization,
    )
    r.command(
        rq.UpdateOrganizationCommand,
        lambda s: OrganizationHandlers(s).update_organization,
        rules=rules.UPDATE_ORGANIZATION_RULES,
        invalidation=inv.invalidate_update_organization,
    )
    r.command(
        rq.DeleteOrganizationCommand,
        lambda s: OrganizationHandlers(s).delete_organization,
        invalidation=inv.invalidate_update_organization,
    )
    r.query(
        rq.GetOrganizationByIdQuery,
        lambda s: OrganizationHandlers(s).get_organization_by_id,
    )
    r.query(
        rq.ListOrganizationsQuery,
        lambda s: OrganizationHandlers(s).list_organizations,
    )

    # Users
    r.command(
        rq.CreateUserCommand,
        lambda s: UserHandlers(s).create_user,
        rules=rules.CREATE_USER_RULES,
        invalidation=inv.invalidate_create_user,
    )
    r.command(
        rq.UpdateUserCommand,
        lambda s: UserHandlers(s).update_user,
        rules=rules.UPDATE_USER_RULES,
        invalidation=inv.invalidate_update_user,
    )
    r.command(
        rq.DeleteUserCommand,
        lambda s: UserHandlers(s).delete_user,
        invalidation=inv.invalidate_update_user,
    )
    r.query(rq.GetUserByIdQuery, lambda s: UserHandlers(s).get_user_by_id)
    r.query(
        rq.GetUserByEmailQuery,
        lambda s: UserHandlers(s).get_user_by_email,
        rules=rules.GET_USER_BY_EMAIL_RULES,
    )
    r.query(rq.ListUsersQuery, lambda s: UserHandlers(s).list_users)

    # Projects
    r.command(
        rq.CreateProjectCommand,
        lambda s: ProjectHandlers(s).create_project,
        rules=rules.CREATE_PROJECT_RULES,
        invalidation=inv.invalidate_create_project,
    )
    r.command(
        rq.UpdateProjectCommand,
        lambda s: ProjectHandlers(s).update_project,
        rules=rules.UPDATE_PROJECT_RULES,
        invalidation=inv.invalidate_update_project,
    )
    r.command(
        rq.ChangeProjectStatusCommand,
        lambda s: ProjectHandlers(s).change_project_status,
        rules=rules.CHANGE_PROJECT_STATUS_RULES,
        invalidation=inv.invalidate_update_project,
    )
    r.command(
        rq.DeleteProjectCommand,
        lambda s: ProjectHandlers(s).delete_project,
        invalidation=inv.invalidate_update_project,
    )
    r.query(rq.GetProjectByIdQuery, lambda s: ProjectHandlers(s).get_project_by_id)
    r.query(rq.GetProjectByCodeQuery, lambda s: ProjectHandlers(s).get_project_by_code)
    r.query(rq.ListProjectsQuery, lambda s: ProjectHandlers(s).list_projects)

    # Sprints
    r.command(
        rq.CreateSprintCommand,
        lambda s: SprintHandlers(s).create_sprint,
        rules=rules.CREATE_SPRINT_RULES,
        invalidation=inv.invalidate_create_sprint,
    )
    r.command(
        rq.UpdateSprintCommand,
        lambda s: SprintHandlers(s).update_sprint,
        rules=rules.UPDATE_SPRINT_RULES,
        invalidation=inv.invalidate_update_sprint,
    )
    r.command(
        rq.StartSprintCommand,
        lambda s: SprintHandlers(s).start_sprint,
        invalidation=inv.invalidate_update_sprint,
    )
    r.command(
        rq.CompleteSprintCommand,
        lambda s: SprintHandlers(s).complete_sprint,
        invalidation=inv.invalidate_update_sprint,
    )
    r.command(
        rq.DeleteSprintCommand,
        lambda s: SprintHandlers(s).delete_sprint,
        invalidation=inv.invalidate_update_sprint,
    )
    r.query(rq.GetSprintByIdQuery, lambda s: SprintHandlers(s).get_sprint_by_id)
    r.query(
        rq.GetSprintsByProjectQuery,
        lambda s: SprintHandlers(s).get_sprints_by_project,
    )

    # Tasks
    r.command(
        rq.CreateTaskCommand,
        lambda s: TaskHandlers(s).create_task,
        rules=rules.CREATE_TASK_RULES,
        invalidation=inv.invalidate_create_task,
    )
    r.command(
        rq.UpdateTaskCommand,
        lambda s: TaskHandlers(s).update_task,
        rules=rules.UPDATE_TASK_RULES,
        invalidation=inv.invalidate_update_task,
    )
    r.command(
        rq.DeleteTaskCommand,
        lambda s: TaskHandlers(s).delete_task,
        invalidation=inv.invalidate_update_task,
    )
    r.query(rq.GetTaskByIdQuery, lambda s: TaskHandlers(s).get_task_by_id)
    r.query(rq.GetTasksByProjectQuery, lambda s: TaskHandlers(s).get_tasks_by_project)

    # Time entries
    r.command(
        rq.CreateTimeEntryCommand,
        lambda s: TimeEntryHandlers(s).create_time_entry,
        rules=rules.CREATE_TIME_ENTRY_RULES,
        invalidation=inv.invalidate_create_time_entry,
    )
    r.command(
        rq.UpdateTimeEntryCommand,
        lambda s: TimeEntryHandlers(s).update_time_entry,
        rules=rules.UPDATE_TIME_ENTRY_RULES,
        invalidation=inv.invalidate_update_time_entry,
    )
    r.command(
        rq.DeleteTimeEntryCommand,
        lambda s: TimeEntryHandlers(s).delete_time_entry,
        invalidation=inv.invalidate_update_time_entry,
    )
    r.query(
        rq.GetTimeEntryByIdQuery,
        lambda s: TimeEntryHandlers(s).get_time_entry_by_id,
    )
    r.query(
        rq.GetTimeEntriesByTaskQuery,
        lambda s: TimeEntryHandlers(s).get_time_entries_by_task,
    )
    r.query(
        rq.GetTimeEntriesByUserQuery,
        lambda s: TimeEntryHandlers(s).get_time_entries_by_user,
    )

    # Risks
    r.command(
        rq.CreateRiskCommand,
        lambda s: RiskHandlers(s).create_risk,
        rules=rules.CREATE_RISK_RULES,
        invalidation=inv.invalidate_create_risk,
    )
    r.command(
        rq.UpdateRiskCommand,
        lambda s: RiskHandlers(s).update_risk,
        rules=rules.UPDATE_RISK_RULES,
        invalidation=inv.invalidate_update_risk,
    )
    r.command(
        rq.DeleteRiskCommand,
        lambda s: RiskHandlers(s).delete_risk,
        invalidation=inv.invalidate_update_risk,
    )
    r.query(rq.GetRiskByIdQuery, lambda s: RiskHandlers(s).get_risk_by_id)
    r.query(rq.GetRisksByProjectQuery, lambda s: RiskHandlers(s).get_risks_by_project)

    # Issues
    r.command(
        rq.CreateIssueCommand,
        lambda s: IssueHandlers(s).create_issue,
        rules=rules.CREATE_ISSUE_RULES,
        invalidation=inv.invalidate_create_issue,
    )
    r.command(
        rq.UpdateIssueCommand,
        lambda s: IssueHandlers(s).update_issue,
        rules=rules.UPDATE_ISSUE_RULES,
        invalidation=inv.invalidate_update_issue,
    )
    r.command(
        rq.ResolveIssueCommand,
        lambda s: IssueHandlers(s).resolve_issue,
        rules=rules.RESOLVE_ISSUE_RULES,
        invalidation=inv.invalidate_update_issue,
    )
    r.command(
        rq.ChangeIssueStatusCommand,
        lambda s: IssueHandlers(s).change_issue_status,
        rules=rules.CHANGE_ISSUE_STATUS_RULES,
        invalidation=inv.invalidate_update_issue,
    )
    r.command(
        rq.DeleteIssueCommand,
        lambda s: IssueHandlers(s).delete_issue,
        invalidation=inv.invalidate_update_issue,
    )
    r.query(rq.GetIssueByIdQuery, lambda s: IssueHandlers(s).get_issue_by_id)
    r.query(rq.GetIssuesByProjectQuery, lambda s: IssueHandlers(s).get_issues_by_project)

    # Documents
    r.command(
        rq.CreateDocumentCommand,
        lambda s: DocumentHandlers(s).create_document,
        rules=rules.CREATE_DOCUMENT_RULES,
        invalidation=inv.invalidate_create_document,
    )
    r.command(
        rq.UpdateDocumentCommand,
        lambda s: DocumentHandlers(s).update_document,
        rules=rules.UPDATE_DOCUMENT_RULES,
        invalidation=inv.invalidate_update_document,
    )
    r.command(
        rq.DeleteDocumentCommand,
        lambda s: DocumentHandlers(s).delete_document,
        invalidation=inv.invalidate_update_document,
    )
    r.query(rq.GetDocumentByIdQuery, lambda s: DocumentHandlers(s).get_document_by_id)
    r.query(
        rq.GetDocumentsByProjectQuery,
        lambda s: DocumentHandlers(s).get_documents_by_project,
    )

    # Resource allocations
    r.command(
        rq.CreateResourceAllocationCommand,
        lambda s: ResourceAllocationHandlers(s).create_resource_allocation,
        rules=rules.CREATE_RESOURCE_ALLOCATION_RULES,
        invalidation=inv.invalidate_create_resource_allocation,
    )
    r.command(
        rq.UpdateResourceAllocationCommand,
        lambda s: ResourceAllocationHandlers(s).update_resource_allocation,
        rules=rules.UPDATE_RESOURCE_ALLOCATION_RULES,
        invalidation=inv.invalidate_update_resource_allocation,
    )
    r.command(
        rq.DeleteResourceAllocationCommand,
        lambda s: ResourceAllocationHandlers(s).delete_resource_allocation,
        invalidation=inv.invalidate_update_resource_allocation,
    )
    r.query(
        rq.GetResourceAllocationByIdQuery,
        lambda s: ResourceAllocationHandlers(s).get_resource_allocation_by_id,
    )
    r.query(
        rq.GetResourceAllocationsByProjectQuery,
        lambda s: ResourceAllocationHandlers(s).get_resource_allocations_by_project,
    )

    return r.freeze()
