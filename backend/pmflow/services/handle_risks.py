"""Risk Handlers — risk register commands and reads."""

import logging

from pmflow.core import cache_keys as keys
from pmflow.core.domain_types import RiskStatus
from pmflow.core.requests import (
    CreateRiskCommand, DeleteRiskCommand, GetRiskByIdQuery,
    GetRisksByProjectQuery, UpdateRiskCommand,
)
from pmflow.core.result import Result, Success, not_found
from pmflow.core.state_transitions import risk_is_resolved
from pmflow.models.project import Project
from pmflow.models.risk import Risk
from pmflow.schemas.project_items import RiskDto
from pmflow.services.handler_support import (
    ScopedHandlers, enum_value, new_id, utcnow,
)

logger = logging.getLogger(__name__)


class RiskHandlers(ScopedHandlers):
    async def create_risk(self, request: CreateRiskCommand) -> Result:
        if await self.repo(Project).get_by_id(request.project_id) is None:
            return not_found("Project", request.project_id)
        risk = Risk(
            id=new_id(),
            project_id=request.project_id,
            owner_id=request.owner_id,
            title=request.title.strip(),
            description=request.description,
            level=enum_value(request.level),
            status=RiskStatus.IDENTIFIED.value,
            probability=request.probability,
            impact=request.impact,
            mitigation_strategy=request.mitigation_strategy,
            created_at=utcnow(),
        )
        await self.repo(Risk).add(risk)
        await self.uow.save_changes()
        return Success(RiskDto.model_validate(risk))

    async def update_risk(self, request: UpdateRiskCommand) -> Result:
        risks = self.repo(Risk)
        risk = await risks.get_by_id(request.id)
        if risk is None:
            return not_found("Risk", request.id)
        status = RiskStatus(enum_value(request.status))
        if risk_is_resolved(status) and risk.status != status.value:
            risk.resolved_at = utcnow()
        elif not risk_is_resolved(status):
            risk.resolved_at = None
        risk.status = status.value
        risk.title = request.title.strip()
        risk.description = request.description
        risk.level = enum_value(request.level)
        risk.probability = request.probability
        risk.impact = request.impact
        risk.owner_id = request.owner_id
        risk.mitigation_strategy = request.mitigation_strategy
        risk.updated_at = utcnow()
        await risks.update(risk)
        await self.uow.save_changes()
        self.touched(keys.related(keys.RISK_PREFIX, "project", risk.project_id))
        return Success(RiskDto.model_validate(risk))

    async def delete_risk(self, request: DeleteRiskCommand) -> Result:
        risks = self.repo(Risk)
        risk = await risks.get_by_id(request.id)
        if risk is None:
            return not_found("Risk", request.id)
        await risks.remove(risk)
        await self.uow.save_changes()
        self.touched(keys.related(keys.RISK_PREFIX, "project", risk.project_id))
        return Success(True)

    async def get_risk_by_id(self, request: GetRiskByIdQuery) -> Result:
        return await self.read_entity(
            keys.entity(keys.RISK_PREFIX, request.id),
            RiskDto, Risk, request.id, "Risk",
        )

    async def get_risks_by_project(self, request: GetRisksByProjectQuery) -> Result:
        return await self.read_list(
            keys.related(keys.RISK_PREFIX, "project", request.project_id),
            RiskDto, Risk, project_id=request.project_id,
        )
