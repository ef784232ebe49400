"""AWS session credentials stored on the integration by the host."""

from __future__ import annotations

from dataclasses import dataclass

from botocore.credentials import Credentials

from superplane_integrations.core.context import IntegrationContext
from superplane_integrations.core.errors import ComponentError

ACCESS_KEY_ID_SECRET = "accessKeyId"
SECRET_ACCESS_KEY_SECRET = "secretAccessKey"
SESSION_TOKEN_SECRET = "sessionToken"


@dataclass(frozen=True, slots=True)
class AWSCredentials:
    """Temporary session credentials (access key, secret key, session token)."""

    access_key_id: str
    secret_access_key: str
    session_token: str

    def to_botocore(self) -> Credentials:
        return Credentials(self.access_key_id, self.secret_access_key, self.session_token)

    def __repr__(self) -> str:
        return f"AWSCredentials(access_key_id={self.access_key_id[:4]}***)"


def credentials_from_integration(integration: IntegrationContext) -> AWSCredentials:
    """
    Read session credentials from integration secrets.

    Raises:
        ComponentError: If any of the three secrets is empty
    """
    access_key_id = integration.get_secret(ACCESS_KEY_ID_SECRET).strip()
    secret_access_key = integration.get_secret(SECRET_ACCESS_KEY_SECRET).strip()
    session_token = integration.get_secret(SESSION_TOKEN_SECRET).strip()

    if not access_key_id or not secret_access_key or not session_token:
        raise ComponentError("AWS session credentials are missing")

    return AWSCredentials(access_key_id, secret_access_key, session_token)
