"""OpenStack connection factory."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

import openstack
from openstack.connection import Connection

logger = logging.getLogger(__name__)

APP_NAME = "ocp-reclaim"


@lru_cache(maxsize=None)
def create_connection(cloud: Optional[str] = None) -> Connection:
    """Create (or reuse) an SDK connection for a clouds.yaml profile.

    Args:
        cloud: Cloud profile name from clouds.yaml; when None the SDK falls
            back to OS_CLOUD and the other OS_* environment variables

    Returns:
        openstack.connection.Connection

    Raises:
        openstack.exceptions.ConfigException: If the profile cannot be loaded
    """
    logger.debug(f"Creating OpenStack connection for cloud {cloud or '(environment)'}")
    return openstack.connect(cloud=cloud, app_name=APP_NAME)
