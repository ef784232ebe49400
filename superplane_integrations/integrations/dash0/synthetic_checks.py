"""Create / Update Synthetic Check components."""

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
    UpsertSyntheticCheckConfig,
    build_synthetic_check_specification,
    require_non_empty,
)

logger = logging.getLogger(__name__)

CREATED_PAYLOAD_TYPE = "dash0.synthetic.check.created"
UPDATED_PAYLOAD_TYPE = "dash0.synthetic.check.updated"


def generate_synthetic_check_id() -> str:
    return f"superplane-synthetic-{str(uuid.uuid4())[:8]}"


class _UpsertSyntheticCheck(Component):
    """
    PUTs a synthetic check definition to Dash0.

    Create generates an origin/id when none is configured; update
    requires one.
    """

    action = ""
    payload_type = ""
    origin_required = False

    def _origin_or_id(self, config: UpsertSyntheticCheckConfig, scope: str) -> str:
        if self.origin_required:
            return require_non_empty(config.origin_or_id, "originOrId", scope)

        origin_or_id = config.origin_or_id.strip()
        if not origin_or_id:
            origin_or_id = generate_synthetic_check_id()
            logger.info(f"[dash0] Generated synthetic check id {origin_or_id}")
        return origin_or_id

    async def setup(self, ctx: SetupContext) -> None:
        scope = f"{self.name} setup"
        config = decode_configuration(UpsertSyntheticCheckConfig, ctx.configuration)
        if self.origin_required:
            require_non_empty(config.origin_or_id, "originOrId", scope)
        build_synthetic_check_specification(config, scope)

    async def execute(self, ctx: ExecutionContext) -> None:
        scope = f"{self.name} execute"
        config = decode_configuration(UpsertSyntheticCheckConfig, ctx.configuration)
        if self.origin_required:
            require_non_empty(config.origin_or_id, "originOrId", scope)
        specification = build_synthetic_check_specification(config, scope)
        origin_or_id = self._origin_or_id(config, scope)

        try:
            client = new_client(ctx.integration, ctx.transport)
        except ComponentError as e:
            raise ComponentError(f"{scope}: create client: {e}") from e

        async with client:
            try:
                response = await client.upsert_synthetic_check(origin_or_id, specification)
            except IntegrationError as e:
                raise ComponentError(
                    f'{scope}: {self.action} synthetic check "{origin_or_id}": {e}'
                ) from e

        ctx.execution_state.emit(
            DEFAULT_OUTPUT_CHANNEL.name,
            self.payload_type,
            [{"originOrId": origin_or_id, "response": response}],
        )


class CreateSyntheticCheck(_UpsertSyntheticCheck):
    action = "create"
    payload_type = CREATED_PAYLOAD_TYPE

    @property
    def name(self) -> str:
        return "dash0.createSyntheticCheck"

    @property
    def label(self) -> str:
        return "Create Synthetic Check"

    @property
    def description(self) -> str:
        return "Create a synthetic check in Dash0 configuration API"


class UpdateSyntheticCheck(_UpsertSyntheticCheck):
    action = "update"
    payload_type = UPDATED_PAYLOAD_TYPE
    origin_required = True

    @property
    def name(self) -> str:
        return "dash0.updateSyntheticCheck"

    @property
    def label(self) -> str:
        return "Update Synthetic Check"

    @property
    def description(self) -> str:
        return "Update a synthetic check in Dash0 configuration API"
