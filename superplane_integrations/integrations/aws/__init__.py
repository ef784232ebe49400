"""
AWS Integration.

Components sign requests with the session credentials the host stores on
the integration (accessKeyId, secretAccessKey, sessionToken).

Usage:
    from superplane_integrations.integrations.aws import AWSIntegration

    integration = AWSIntegration()
    run_task = next(c for c in integration.components() if c.name == "aws.ecs.runTask")
    await run_task.execute(ctx)
"""

from superplane_integrations.integrations.aws.credentials import (
    AWSCredentials,
    credentials_from_integration,
)
from superplane_integrations.integrations.aws.integration import AWSIntegration

__all__ = [
    "AWSCredentials",
    "AWSIntegration",
    "credentials_from_integration",
]
