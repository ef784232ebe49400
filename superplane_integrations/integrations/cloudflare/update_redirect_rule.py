"""Update Redirect Rule component."""

from __future__ import annotations

import logging
import re

from superplane_integrations.core.context import ExecutionContext, SetupContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.core.execution import DEFAULT_OUTPUT_CHANNEL
from superplane_integrations.core.plugin import Component, ComponentConfig, decode_configuration
from superplane_integrations.integrations.base import IntegrationError
from superplane_integrations.integrations.cloudflare.common import new_client, resolve_zone_id
from superplane_integrations.integrations.cloudflare.schemas import (
    REDIRECT_PHASE,
    REDIRECT_STATUS_CODES,
    RedirectActionParameters,
    RedirectFromValue,
    RedirectRuleUpdate,
    RedirectTargetURL,
)
from superplane_integrations.utils import embed_json

logger = logging.getLogger(__name__)

PAYLOAD_TYPE = "cloudflare.redirectRule"
MATCH_WILDCARD = "wildcard"
MATCH_EXPRESSION = "expression"

_PLACEHOLDER = re.compile(r"\$\{(\d+)\}")


class UpdateRedirectRuleConfig(ComponentConfig):
    zone: str = ""
    rule_id: str = ""
    description: str = ""
    match_type: str = ""
    source_url_pattern: str = ""
    expression: str = ""
    target_url: str = ""
    status_code: str | int = "301"
    preserve_query_string: bool = False
    enabled: bool = True


def build_match(config: UpdateRedirectRuleConfig) -> tuple[str, RedirectTargetURL]:
    """
    Build the rule expression and redirect target.

    Wildcard targets that reference captured segments (${1}, ${2}, ...)
    become a wildcard_replace() expression instead of a static URL.
    """
    if config.match_type != MATCH_WILDCARD:
        return config.expression, RedirectTargetURL(value=config.target_url)

    expression = f'(http.request.full_uri wildcard r"{config.source_url_pattern}")'
    if _PLACEHOLDER.search(config.target_url):
        target = RedirectTargetURL(
            expression=(
                f'wildcard_replace(http.request.full_uri, r"{config.source_url_pattern}", '
                f'r"{config.target_url}")'
            )
        )
    else:
        target = RedirectTargetURL(value=config.target_url)
    return expression, target


def parse_status_code(value: str | int) -> int:
    try:
        status_code = int(str(value).strip())
    except ValueError as e:
        raise ComponentError(f"invalid status code: {value!r}") from e
    if status_code not in REDIRECT_STATUS_CODES:
        raise ComponentError(
            f"status code must be one of {', '.join(str(c) for c in REDIRECT_STATUS_CODES)}"
        )
    return status_code


class UpdateRedirectRule(Component):
    """Updates a single rule in the zone's dynamic redirect ruleset."""

    @property
    def name(self) -> str:
        return "cloudflare.updateRedirectRule"

    @property
    def label(self) -> str:
        return "Update Redirect Rule"

    @property
    def description(self) -> str:
        return "Update a Cloudflare redirect rule"

    async def setup(self, ctx: SetupContext) -> None:
        config = decode_configuration(UpdateRedirectRuleConfig, ctx.configuration)

        if not config.zone:
            raise ComponentError("zone is required")
        if not config.rule_id:
            raise ComponentError("ruleId is required")

        if config.match_type == MATCH_WILDCARD:
            if not config.source_url_pattern:
                raise ComponentError("sourceUrlPattern is required for wildcard match type")
        elif config.match_type == MATCH_EXPRESSION:
            if not config.expression:
                raise ComponentError("expression is required for expression match type")
        elif not config.match_type:
            raise ComponentError("matchType is required")
        else:
            raise ComponentError(f"invalid matchType: {config.match_type}")

        if not config.target_url:
            raise ComponentError("targetUrl is required")

        parse_status_code(config.status_code)

    async def execute(self, ctx: ExecutionContext) -> None:
        config = decode_configuration(UpdateRedirectRuleConfig, ctx.configuration)
        client = new_client(ctx.integration, ctx.transport)
        zone_id = resolve_zone_id(config.zone, ctx.integration)

        async with client:
            try:
                ruleset = await client.get_ruleset_for_phase(zone_id, REDIRECT_PHASE)
            except IntegrationError as e:
                raise ComponentError(f"error getting ruleset: {e}") from e

            status_code = parse_status_code(config.status_code)
            expression, target = build_match(config)
            request = RedirectRuleUpdate(
                expression=expression,
                description=config.description or None,
                enabled=config.enabled,
                action_parameters=RedirectActionParameters(
                    from_value=RedirectFromValue(
                        status_code=status_code,
                        target_url=target,
                        preserve_query_string=config.preserve_query_string,
                    )
                ),
            )

            try:
                rule = await client.update_redirect_rule(
                    zone_id, ruleset.id, config.rule_id, request
                )
            except IntegrationError as e:
                raise ComponentError(f"failed to update redirect rule: {e}") from e

        ctx.execution_state.emit(
            DEFAULT_OUTPUT_CHANNEL.name,
            PAYLOAD_TYPE,
            [
                {
                    "rule": embed_json(rule),
                    "zoneId": zone_id,
                    "ruleId": config.rule_id,
                    "enabled": config.enabled,
                }
            ],
        )
