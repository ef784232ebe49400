"""Create / Update Check Rule components."""

from __future__ import annotations

import logging
import uuid

from superplane_integrations.core.context import ExecutionContext, SetupContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.core.execution import DEFAULT_OUTPUT_CHANNEL
from superplane_integrations.core.plugin import Component, decode_configuration
from superplane_integrations.integrations.base import IntegrationError
from superplane_integrations.integrations.dash0.common import new_client
from superplane_integrations.integrations.dash0.specification import (
    UpsertCheckRuleConfig,
    build_check_rule_specification,
    require_non_empty,
)

logger = logging.getLogger(__name__)

CREATED_PAYLOAD_TYPE = "dash0.check.rule.created"
UPDATED_PAYLOAD_TYPE = "dash0.check.rule.updated"


def generate_check_rule_id() -> str:
    return f"superplane-check-rule-{str(uuid.uuid4())[:8]}"


class _UpsertCheckRule(Component):
    """PUTs a check rule, given in Dash0 or Prometheus rule-file shape."""

    action = ""
    payload_type = ""
    origin_required = False

    def _origin_or_id(self, config: UpsertCheckRuleConfig, scope: str) -> str:
        if self.origin_required:
            return require_non_empty(config.origin_or_id, "originOrId", scope)

        origin_or_id = config.origin_or_id.strip()
        if not origin_or_id:
            origin_or_id = generate_check_rule_id()
            logger.info(f"[dash0] Generated check rule id {origin_or_id}")
        return origin_or_id

    async def setup(self, ctx: SetupContext) -> None:
        scope = f"{self.name} setup"
        config = decode_configuration(UpsertCheckRuleConfig, ctx.configuration)
        if self.origin_required:
            require_non_empty(config.origin_or_id, "originOrId", scope)
        build_check_rule_specification(config, scope)

    async def execute(self, ctx: ExecutionContext) -> None:
        scope = f"{self.name} execute"
        config = decode_configuration(UpsertCheckRuleConfig, ctx.configuration)
        origin_or_id = self._origin_or_id(config, scope)
        specification = build_check_rule_specification(config, scope)

        try:
            client = new_client(ctx.integration, ctx.transport)
        except ComponentError as e:
            raise ComponentError(f"{scope}: create client: {e}") from e

        async with client:
            try:
                response = await client.upsert_check_rule(origin_or_id, specification)
            except IntegrationError as e:
                raise ComponentError(
                    f'{scope}: {self.action} check rule "{origin_or_id}": {e}'
                ) from e

        ctx.execution_state.emit(
            DEFAULT_OUTPUT_CHANNEL.name,
            self.payload_type,
            [{"originOrId": origin_or_id, "response": response}],
        )


class CreateCheckRule(_UpsertCheckRule):
    action = "create"
    payload_type = CREATED_PAYLOAD_TYPE

    @property
    def name(self) -> str:
        return "dash0.createCheckRule"

    @property
    def label(self) -> str:
        return "Create Check Rule"

    @property
    def description(self) -> str:
        return "Create a check rule in Dash0 alerting"


class UpdateCheckRule(_UpsertCheckRule):
    action = "update"
    payload_type = UPDATED_PAYLOAD_TYPE
    origin_required = True

    @property
    def name(self) -> str:
        return "dash0.updateCheckRule"

    @property
    def label(self) -> str:
        return "Update Check Rule"

    @property
    def description(self) -> str:
        return "Update an existing check rule in Dash0 alerting"
