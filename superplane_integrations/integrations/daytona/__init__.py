"""
Daytona Integration.

Components:
- CreateSandbox (payload "daytona.sandbox")
- ExecuteCommand (payload "daytona.command.result")
- ExecuteCode (payload "daytona.code.result")
- DeleteSandbox (payload "daytona.sandbox.deleted")

API Reference:
    https://www.daytona.io/docs/tools/api/
"""

from superplane_integrations.integrations.daytona.client import (
    DaytonaClient,
    DaytonaConfig,
    build_code_command,
)
from superplane_integrations.integrations.daytona.create_sandbox import CreateSandbox
from superplane_integrations.integrations.daytona.delete_sandbox import DeleteSandbox
from superplane_integrations.integrations.daytona.execute_code import ExecuteCode
from superplane_integrations.integrations.daytona.execute_command import ExecuteCommand
from superplane_integrations.integrations.daytona.integration import DaytonaIntegration

__all__ = [
    "CreateSandbox",
    "DaytonaClient",
    "DaytonaConfig",
    "DaytonaIntegration",
    "DeleteSandbox",
    "ExecuteCode",
    "ExecuteCommand",
    "build_code_command",
]
