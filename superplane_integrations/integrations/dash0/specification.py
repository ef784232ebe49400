"""
Parsing and validation of Dash0 check rule and synthetic check definitions.

Users either paste a JSON definition into the node's "spec" field or fill
in individual form fields. Both paths end in a dict ready to PUT to the
configuration API. Every error message is prefixed with a scope such as
"dash0.createCheckRule setup" so the node editor shows where it failed.

Check rules are accepted in two shapes:
- the Dash0 shape: {"name", "expression", "for", "interval", ...}
- a Prometheus rule file: {"groups": [{"rules": [{"alert", "expr", ...}]}]}
  holding exactly one alerting rule, converted to the Dash0 shape
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import Field

from superplane_integrations.core.errors import ComponentError
from superplane_integrations.core.plugin import ComponentConfig

SYNTHETIC_CHECK_KIND = "Dash0SyntheticCheck"
BODY_METHODS = ("post", "put", "patch")


class KeyValue(ComponentConfig):
    key: str = ""
    value: str = ""


class UpsertSyntheticCheckConfig(ComponentConfig):
    origin_or_id: str = ""
    spec: Any = ""
    name: str = ""
    enabled: bool = True
    plugin_kind: str = "http"
    method: str = "get"
    url: str = ""
    headers: list[KeyValue] | None = None
    request_body: str = ""


class UpsertCheckRuleConfig(ComponentConfig):
    origin_or_id: str = ""
    spec: Any = ""
    name: str = ""
    expression: str = ""
    for_: str = Field(default="", alias="for")
    interval: str = ""
    keep_firing_for: str = ""
    labels: list[KeyValue] | None = None
    annotations: list[KeyValue] | None = None


# =============================================================================
# Generic helpers
# =============================================================================


def require_non_empty(value: str, field_name: str, scope: str) -> str:
    trimmed = (value or "").strip()
    if not trimmed:
        raise ComponentError(f"{scope}: {field_name} is required")
    return trimmed


def _spec_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _optional_string(values: dict[str, Any], key: str) -> str:
    value = values.get(key)
    if not isinstance(value, str):
        return ""
    return value.strip()


def _first_string(values: dict[str, Any], *keys: str) -> str:
    for key in keys:
        value = _optional_string(values, key)
        if value:
            return value
    return ""


def _as_object(value: Any, field_path: str, scope: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ComponentError(f"{scope}: {field_path} must be a JSON object")
    return value


def _string_map(
    values: dict[str, Any],
    key: str,
    field_name: str,
    scope: str,
) -> dict[str, str]:
    raw = values.get(key)
    if raw is None:
        return {}

    field_path = f"{field_name}.{key}"
    if not isinstance(raw, dict):
        raise ComponentError(f"{scope}: {field_path} must be a JSON object of string values")

    for map_key, map_value in raw.items():
        if not isinstance(map_value, str):
            raise ComponentError(f"{scope}: {field_path}.{map_key} must be a string")
    return dict(raw)


def _key_values(items: list[KeyValue] | None) -> dict[str, str]:
    return {item.key.strip(): item.value for item in items or [] if item.key.strip()}


def parse_specification(specification: str, field_name: str, scope: str) -> dict[str, Any]:
    """
    Parse a JSON object, or a single-item array holding one object.

    Raises:
        ComponentError: If the text is blank, not JSON, empty, or an array
            with more than one entry
    """
    trimmed = specification.strip()
    if not trimmed:
        raise ComponentError(f"{scope}: {field_name} is required")

    try:
        payload = json.loads(trimmed)
    except json.JSONDecodeError as e:
        raise ComponentError(f"{scope}: parse {field_name} as JSON object: {e}") from e

    if payload is None or isinstance(payload, dict):
        if not payload:
            raise ComponentError(f"{scope}: {field_name} cannot be an empty JSON object")
        return payload

    if isinstance(payload, list) and all(isinstance(item, dict) for item in payload):
        if not payload:
            raise ComponentError(f"{scope}: {field_name} cannot be an empty JSON array")
        if len(payload) > 1:
            raise ComponentError(
                f"{scope}: {field_name} must be a JSON object or a single-item JSON array"
            )
        if not payload[0]:
            raise ComponentError(f"{scope}: {field_name} cannot contain an empty JSON object")
        return payload[0]

    raise ComponentError(
        f"{scope}: parse {field_name} as JSON object: "
        f"unexpected {type(payload).__name__} value"
    )


# =============================================================================
# Check rules
# =============================================================================


def validate_check_rule_specification(
    specification: dict[str, Any],
    field_name: str,
    scope: str,
) -> dict[str, Any]:
    """Require name and expression and fold Prometheus key spellings into Dash0 ones."""
    name = _first_string(specification, "name", "alert")
    if not name:
        raise ComponentError(f"{scope}: {field_name}.name is required")
    specification["name"] = name
    specification.pop("alert", None)

    expression = _first_string(specification, "expression", "expr")
    if not expression:
        raise ComponentError(f"{scope}: {field_name}.expression is required")
    specification["expression"] = expression
    specification.pop("expr", None)

    keep_firing_for = _first_string(specification, "keepFiringFor", "keep_firing_for")
    if keep_firing_for:
        specification["keepFiringFor"] = keep_firing_for
    specification.pop("keep_firing_for", None)

    for key in ("interval", "for"):
        value = _optional_string(specification, key)
        if value:
            specification[key] = value

    for key in ("annotations", "labels"):
        values = _string_map(specification, key, field_name, scope)
        if values:
            specification[key] = values

    return specification


def convert_prometheus_groups(groups: Any, field_name: str, scope: str) -> dict[str, Any]:
    """Turn a Prometheus rule file with one alerting rule into a Dash0 check rule."""
    if not isinstance(groups, list):
        raise ComponentError(f"{scope}: {field_name}.groups must be a JSON array")
    if not groups:
        raise ComponentError(f"{scope}: {field_name}.groups cannot be empty")

    alert_rules: list[tuple[dict[str, Any], str]] = []
    for group_index, group_value in enumerate(groups):
        group_path = f"{field_name}.groups[{group_index}]"
        group = _as_object(group_value, group_path, scope)
        if "rules" not in group:
            continue

        rules = group["rules"]
        if not isinstance(rules, list):
            raise ComponentError(f"{scope}: {group_path}.rules must be a JSON array")

        for rule_index, rule_value in enumerate(rules):
            rule = _as_object(rule_value, f"{group_path}.rules[{rule_index}]", scope)
            # Recording rules produce series, not alerts.
            if _optional_string(rule, "record"):
                continue
            if not _first_string(rule, "expression", "expr"):
                continue
            alert_rules.append((rule, _optional_string(group, "interval")))

    if not alert_rules:
        raise ComponentError(f"{scope}: {field_name} must contain one alert rule with expr/expression")
    if len(alert_rules) > 1:
        raise ComponentError(
            f"{scope}: {field_name} must contain exactly one alert rule; found {len(alert_rules)}"
        )

    rule, group_interval = alert_rules[0]
    check_rule: dict[str, Any] = {}

    name = _first_string(rule, "name", "alert")
    if name:
        check_rule["name"] = name
    check_rule["expression"] = _first_string(rule, "expression", "expr")

    interval = _optional_string(rule, "interval") or group_interval
    if interval:
        check_rule["interval"] = interval
    if _optional_string(rule, "for"):
        check_rule["for"] = _optional_string(rule, "for")

    keep_firing_for = _first_string(rule, "keepFiringFor", "keep_firing_for")
    if keep_firing_for:
        check_rule["keepFiringFor"] = keep_firing_for

    for key in ("annotations", "labels"):
        values = _string_map(rule, key, field_name, scope)
        if values:
            check_rule[key] = values

    return validate_check_rule_specification(check_rule, field_name, scope)


def normalize_check_rule_specification(
    specification: dict[str, Any],
    field_name: str,
    scope: str,
) -> dict[str, Any]:
    inner = specification.get("spec")
    if isinstance(inner, dict) and "groups" in inner:
        specification = inner

    if "groups" in specification:
        return convert_prometheus_groups(specification["groups"], field_name, scope)
    return validate_check_rule_specification(specification, field_name, scope)


def parse_check_rule_specification(
    specification: str,
    field_name: str,
    scope: str,
) -> dict[str, Any]:
    parsed = parse_specification(specification, field_name, scope)
    return normalize_check_rule_specification(parsed, field_name, scope)


def build_check_rule_specification(config: UpsertCheckRuleConfig, scope: str) -> dict[str, Any]:
    """Build the check rule body from the pasted spec, or else from form fields."""
    spec_text = _spec_text(config.spec)
    if spec_text.strip():
        return parse_check_rule_specification(spec_text, "spec", scope)

    specification: dict[str, Any] = {
        "name": require_non_empty(config.name, "name", scope),
        "expression": require_non_empty(config.expression, "expression", scope),
    }
    for key, value in (
        ("for", config.for_),
        ("interval", config.interval),
        ("keepFiringFor", config.keep_firing_for),
    ):
        if value.strip():
            specification[key] = value.strip()

    labels = _key_values(config.labels)
    if labels:
        specification["labels"] = labels
    annotations = _key_values(config.annotations)
    if annotations:
        specification["annotations"] = annotations

    return validate_check_rule_specification(specification, "spec", scope)


# =============================================================================
# Synthetic checks
# =============================================================================


def validate_synthetic_check_specification(
    specification: dict[str, Any],
    field_name: str,
    scope: str,
) -> dict[str, Any]:
    """
    Check the kind and plugin kind of a synthetic check definition.

    The kind is normalized to "Dash0SyntheticCheck" and the plugin kind
    lowercased in place.
    """
    expected = f'(expected "{SYNTHETIC_CHECK_KIND}")'
    if "kind" not in specification:
        raise ComponentError(f"{scope}: {field_name}.kind is required {expected}")
    kind = specification["kind"]
    if not isinstance(kind, str):
        raise ComponentError(f"{scope}: {field_name}.kind must be a string")
    if not kind.strip():
        raise ComponentError(f"{scope}: {field_name}.kind is required {expected}")
    if kind.strip().lower() != SYNTHETIC_CHECK_KIND.lower():
        raise ComponentError(f'{scope}: {field_name}.kind must be "{SYNTHETIC_CHECK_KIND}"')
    specification["kind"] = SYNTHETIC_CHECK_KIND

    if "spec" not in specification:
        raise ComponentError(f"{scope}: {field_name} must include object field spec")
    inner = specification["spec"]
    if not isinstance(inner, dict):
        raise ComponentError(f"{scope}: {field_name}.spec must be a JSON object")

    if "plugin" not in inner:
        raise ComponentError(f"{scope}: {field_name}.spec.plugin is required")
    plugin = inner["plugin"]
    if not isinstance(plugin, dict):
        raise ComponentError(f"{scope}: {field_name}.spec.plugin must be a JSON object")

    if "kind" not in plugin:
        raise ComponentError(
            f'{scope}: {field_name}.spec.plugin.kind is required (for example: "http")'
        )
    plugin_kind = plugin["kind"]
    if not isinstance(plugin_kind, str):
        raise ComponentError(f"{scope}: {field_name}.spec.plugin.kind must be a string")
    if not plugin_kind.strip():
        raise ComponentError(
            f'{scope}: {field_name}.spec.plugin.kind is required (for example: "http")'
        )
    plugin["kind"] = plugin_kind.strip().lower()

    return specification


def build_synthetic_check_specification(
    config: UpsertSyntheticCheckConfig,
    scope: str,
) -> dict[str, Any]:
    """Build the synthetic check body from the pasted spec, or else from form fields."""
    spec_text = _spec_text(config.spec)
    if spec_text.strip():
        parsed = parse_specification(spec_text, "spec", scope)
        return validate_synthetic_check_specification(parsed, "spec", scope)

    name = require_non_empty(config.name, "name", scope)
    url = require_non_empty(config.url, "url", scope)
    method = (config.method.strip() or "get").lower()

    request: dict[str, Any] = {"method": method, "url": url}
    headers = _key_values(config.headers)
    if headers:
        request["headers"] = [{"name": key, "value": value} for key, value in headers.items()]
    if method in BODY_METHODS and config.request_body.strip():
        request["body"] = config.request_body

    specification = {
        "kind": SYNTHETIC_CHECK_KIND,
        "metadata": {"name": name},
        "spec": {
            "enabled": config.enabled,
            "plugin": {
                "kind": config.plugin_kind.strip() or "http",
                "spec": {"request": request},
            },
        },
    }
    return validate_synthetic_check_specification(specification, "spec", scope)
