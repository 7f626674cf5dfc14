"""Cloud credential and connectivity checks."""

from __future__ import annotations

import logging
import os
from typing import Optional

from keystoneauth1 import exceptions as ks_exceptions
from openstack import exceptions as os_exceptions

from src.cloud.client import create_connection

logger = logging.getLogger(__name__)

CLOUD_ENV_VAR = "OS_CLOUD"


class CredentialValidationError(Exception):
    """Raised when the selected cloud cannot be authenticated against.

    Attributes:
        remediation: Suggested fix shown to the operator
    """

    def __init__(self, message: str, remediation: Optional[str] = None) -> None:
        super().__init__(message)
        self.remediation = remediation


def resolve_cloud_name(cloud: Optional[str] = None) -> Optional[str]:
    return cloud or os.environ.get(CLOUD_ENV_VAR) or None


def validate_credentials(cloud: Optional[str] = None) -> dict:
    """Check that a cloud profile is selected and that it authenticates.

    Args:
        cloud: Cloud profile name; falls back to $OS_CLOUD

    Returns:
        Dict with ``cloud`` and ``project_id``

    Raises:
        CredentialValidationError: If no profile is selected, the profile
            cannot be loaded, or a token cannot be issued
    """
    cloud_name = resolve_cloud_name(cloud)
    if not cloud_name:
        raise CredentialValidationError(
            f"{CLOUD_ENV_VAR} environment variable is not set.",
            remediation=f"Please run: export {CLOUD_ENV_VAR}=<cloud> (or pass --cloud)",
        )

    try:
        connection = create_connection(cloud_name)
    except (os_exceptions.SDKException, ks_exceptions.ClientException) as e:
        raise CredentialValidationError(
            f"Could not load cloud '{cloud_name}': {e}",
            remediation="Make sure the cloud exists in ~/.config/openstack/clouds.yaml or ./clouds.yaml",
        )

    try:
        connection.authorize()
    except (os_exceptions.SDKException, ks_exceptions.ClientException) as e:
        logger.debug(f"Token request for cloud {cloud_name} failed: {e}")
        raise CredentialValidationError(
            "Cannot connect to OpenStack.",
            remediation=f"Please check your credentials and {CLOUD_ENV_VAR} setting (currently '{cloud_name}').",
        )

    return {
        "cloud": cloud_name,
        "project_id": connection.current_project_id,
    }
