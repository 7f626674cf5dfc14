"""Cluster signature model.

A signature is the five character suffix of the OpenShift installer's
infrastructure id (``openshift-cluster-<signature>``). Every resource the
installer creates for a cluster is named or described after it.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

SIGNATURE_PATTERN = re.compile(r"^[a-z0-9]{5}$")
CLUSTER_NAME_PREFIX = "openshift-cluster"
DEFAULT_INSTALL_DIR = "openshift-install"
METADATA_FILENAME = "metadata.json"


class InvalidSignatureError(ValueError):
    """Raised when a signature does not match the expected format."""


class SignatureNotFoundError(Exception):
    """Raised when no signature can be derived from installer metadata."""


@dataclass(frozen=True)
class Signature:
    """Validated cluster signature.

    Attributes:
        value: Five lowercase alphanumeric characters (e.g. "ff9fw")
    """

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not SIGNATURE_PATTERN.fullmatch(self.value):
            raise InvalidSignatureError(
                f"Invalid signature format: {self.value!r}. "
                "Expected: 5 lowercase alphanumeric characters (e.g., ff9fw)"
            )

    def __str__(self) -> str:
        return self.value

    @property
    def cluster_name(self) -> str:
        """Infrastructure id of the cluster, e.g. ``openshift-cluster-ff9fw``."""
        return f"{CLUSTER_NAME_PREFIX}-{self.value}"

    @property
    def name_prefix(self) -> str:
        """Prefix shared by the names of all cluster member resources."""
        return f"{self.cluster_name}-"

    @classmethod
    def is_valid(cls, value: str) -> bool:
        return bool(SIGNATURE_PATTERN.fullmatch(value or ""))

    @classmethod
    def from_infra_id(cls, infra_id: str) -> Signature:
        """Build a signature from an installer infrastructure id.

        The signature is the part after the final hyphen.

        Args:
            infra_id: Infrastructure id such as ``openshift-cluster-ff9fw``

        Returns:
            Signature for the cluster

        Raises:
            InvalidSignatureError: If the suffix is not a valid signature
        """
        return cls(infra_id.rsplit("-", 1)[-1])

    @classmethod
    def from_metadata(cls, metadata_path: Union[str, Path]) -> Signature:
        """Read the installer metadata record and derive the signature.

        Args:
            metadata_path: Path to the installer's metadata.json

        Returns:
            Signature taken from the ``infraID`` field

        Raises:
            SignatureNotFoundError: If the file is missing, unreadable, has no
                infraID, or the infraID suffix is not a valid signature
        """
        path = Path(metadata_path)
        if not path.is_file():
            raise SignatureNotFoundError(f"Metadata file not found: {path}")

        try:
            with open(path, "r") as f:
                metadata = json.load(f)
        except (OSError, ValueError) as e:
            raise SignatureNotFoundError(f"Could not read metadata file {path}: {e}")

        infra_id = metadata.get("infraID") if isinstance(metadata, dict) else None
        if not infra_id or not isinstance(infra_id, str):
            raise SignatureNotFoundError(f"No infraID found in {path}")

        try:
            signature = cls.from_infra_id(infra_id)
        except InvalidSignatureError:
            raise SignatureNotFoundError(f"infraID '{infra_id}' in {path} does not end with a valid signature")

        logger.debug(f"Derived signature {signature} from infraID {infra_id}")
        return signature


def default_metadata_path(install_dir: Optional[str] = None) -> Path:
    return Path(install_dir or DEFAULT_INSTALL_DIR) / METADATA_FILENAME


def resolve_signature(explicit: Optional[str], metadata_path: Union[str, Path, None] = None) -> Signature:
    """Resolve the signature to reclaim.

    An explicitly supplied signature always wins and is validated as-is; the
    metadata record is only consulted when none was given.

    Args:
        explicit: Signature supplied by the user (optional)
        metadata_path: Installer metadata.json location (default:
            openshift-install/metadata.json)

    Returns:
        Validated Signature

    Raises:
        InvalidSignatureError: If the explicit signature is malformed
        SignatureNotFoundError: If no signature was given and none can be
            derived from metadata
    """
    if explicit is not None:
        return Signature(explicit)

    return Signature.from_metadata(metadata_path or default_metadata_path())
