"""OpenStack control-plane access.

Classes:
    CloudResourceClient: List/show/delete operations per resource kind
    CloudOperationError: Raised when a list or show call fails
    CredentialValidationError: Raised when the cloud profile cannot be used
"""

from __future__ import annotations

__all__ = [
    "CloudResourceClient",
    "CloudOperationError",
    "CredentialValidationError",
]
