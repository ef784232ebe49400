"""
New Relic Integration.

Components:
- RunNRQLQuery (payload "newrelic.nrqlQuery")
- ReportMetric (payload "newrelic.metric")

API Reference:
    https://docs.newrelic.com/docs/apis/nerdgraph/
"""

from superplane_integrations.integrations.newrelic.client import NewRelicClient, NewRelicConfig
from superplane_integrations.integrations.newrelic.integration import NewRelicIntegration
from superplane_integrations.integrations.newrelic.report_metric import ReportMetric
from superplane_integrations.integrations.newrelic.run_nrql_query import RunNRQLQuery

__all__ = [
    "NewRelicClient",
    "NewRelicConfig",
    "NewRelicIntegration",
    "ReportMetric",
    "RunNRQLQuery",
]
