"""
SMTP Integration.

Components:
- SendEmail (payload "smtp.email")
"""

from superplane_integrations.integrations.smtp.client import (
    Email,
    SendResult,
    SMTPClient,
    SMTPConfig,
    SMTPError,
)
from superplane_integrations.integrations.smtp.integration import SMTPIntegration
from superplane_integrations.integrations.smtp.send_email import SendEmail

__all__ = [
    "Email",
    "SMTPClient",
    "SMTPConfig",
    "SMTPError",
    "SMTPIntegration",
    "SendEmail",
    "SendResult",
]
