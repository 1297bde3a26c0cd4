"""Validation Stage — runs the registered rule set before anything touches state.

Invariants:
    - Every violated rule is reported in one Failure(kind=VALIDATION)
    - On violation the inner stages and the handler never run
    - Never reads or writes the store or the cache
"""

import logging

from pmflow.core.result import Result, validation_failure
from pmflow.core.validation import validate
from pmflow.services.pipeline_executor import Next
from pmflow.services.request_scope import RequestScope

logger = logging.getLogger(__name__)


class ValidationStage:
    async def __call__(self, scope: RequestScope, call_next: Next) -> Result:
        rules = scope.registration.rules
        if rules:
            errors = validate(scope.request, rules)
            if errors:
                logger.info(
                    f"{scope.request_type} rejected: {len(errors)} rule(s) violated",
                    extra=scope.log_extra(outcome="invalid"),
                )
                return validation_failure(errors)
        return await call_next()
