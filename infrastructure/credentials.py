"""Per-domain service account credentials."""

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping

from google.oauth2 import service_account

from monitoring.exceptions import ConfigurationError, DomainUnknownError


logger = logging.getLogger(__name__)

# Impersonation subject used for every domain until each descriptor carries its own
PLACEHOLDER_SUBJECT = "REPLACEME"


class CredentialRegistry:
    """Read-only mapping from domain name to service account credentials.

    Built once at startup; lookups may run concurrently from any request.
    """

    def __init__(self, credentials: Mapping[str, Any]):
        self._credentials = MappingProxyType(dict(credentials))

    @classmethod
    def from_file(cls, path: str, subject: str = PLACEHOLDER_SUBJECT) -> 'CredentialRegistry':
        """Load the registry from a JSON credentials file."""
        credentials_file = Path(path)
        if not credentials_file.exists():
            raise ConfigurationError(f"Credentials file not found: {path}", {'path': path})

        try:
            with open(credentials_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"Unable to parse credentials file: {e}", {'path': path}, cause=e
            )

        registry = cls.from_dict(data, subject)
        logger.info(f"Loaded credentials for {len(registry)} domain(s) from {path}")
        return registry

    @classmethod
    def from_dict(cls, data: Any, subject: str = PLACEHOLDER_SUBJECT) -> 'CredentialRegistry':
        """Build credentials for every domain entry of a decoded credentials file.

        Each entry is a service account key file plus a ``scopes`` list.
        """
        if not isinstance(data, dict):
            raise ConfigurationError("Credentials file must map domain names to service account keys")

        credentials = {}
        for domain, descriptor in data.items():
            credentials[domain] = _load_service_account(domain, descriptor, subject)
        return cls(credentials)

    def lookup(self, domain: str):
        """Return the credentials for domain or raise DomainUnknownError."""
        try:
            return self._credentials[domain]
        except KeyError:
            raise DomainUnknownError(domain) from None

    @property
    def domains(self):
        return sorted(self._credentials)

    def __len__(self) -> int:
        return len(self._credentials)


def _load_service_account(domain: str, descriptor: Any, subject: str):
    if not isinstance(descriptor, dict):
        raise ConfigurationError(
            f"Credentials for domain {domain} must be an object", {'domain': domain}
        )

    info: Dict[str, Any] = dict(descriptor)
    scopes = info.pop('scopes', None) or []
    if not isinstance(scopes, list):
        raise ConfigurationError(
            f"Scopes for domain {domain} must be a list", {'domain': domain}
        )

    try:
        return service_account.Credentials.from_service_account_info(
            info, scopes=scopes, subject=subject
        )
    except (ValueError, KeyError, TypeError) as e:
        raise ConfigurationError(
            f"Invalid service account for domain {domain}: {e}",
            {'domain': domain},
            cause=e
        )
