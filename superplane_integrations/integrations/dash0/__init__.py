"""
Dash0 Integration.

Components:
- QueryPrometheus (payload "dash0.prometheus.response")
- SendLogEvent (payload "dash0.log.event.sent")
- CreateSyntheticCheck / UpdateSyntheticCheck
- CreateCheckRule / UpdateCheckRule

Triggers:
- OnAlertEvent (payload "dash0.alert.event")

API Reference:
    https://api-docs.dash0.com/
"""

from superplane_integrations.integrations.dash0.check_rules import CreateCheckRule, UpdateCheckRule
from superplane_integrations.integrations.dash0.client import (
    Dash0Client,
    Dash0Config,
    Dash0RequestError,
)
from superplane_integrations.integrations.dash0.integration import Dash0Integration
from superplane_integrations.integrations.dash0.on_alert_event import OnAlertEvent
from superplane_integrations.integrations.dash0.query_prometheus import QueryPrometheus
from superplane_integrations.integrations.dash0.send_log_event import SendLogEvent
from superplane_integrations.integrations.dash0.synthetic_checks import (
    CreateSyntheticCheck,
    UpdateSyntheticCheck,
)

__all__ = [
    "CreateCheckRule",
    "CreateSyntheticCheck",
    "Dash0Client",
    "Dash0Config",
    "Dash0Integration",
    "Dash0RequestError",
    "OnAlertEvent",
    "QueryPrometheus",
    "SendLogEvent",
    "UpdateCheckRule",
    "UpdateSyntheticCheck",
]
