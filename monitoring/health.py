"""Health monitoring for the Google Calendar gateway."""

import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from dataclasses import dataclass

from .exceptions import error_handler


@dataclass
class HealthStatus:
    """Health status information."""

    healthy: bool
    timestamp: datetime
    services: Dict[str, bool]
    last_error: Dict[str, Any] = None
    error_count: int = 0


class HealthChecker:
    """Health monitoring for the application.

    The gateway keeps no calendar data of its own, so health only reflects
    whether credentials were loaded and what errors have been seen since.
    """

    def __init__(self, credential_registry):
        self.credential_registry = credential_registry
        self.logger = logging.getLogger(__name__)

    def check_health(self) -> HealthStatus:
        """Perform health check."""
        timestamp = datetime.now(timezone.utc)
        services = {
            'credential_registry': len(self.credential_registry) > 0
        }

        error_stats = error_handler.get_error_stats()
        last_error = None
        if error_stats['last_errors']:
            # Get most recent error
            latest_key = max(error_stats['last_errors'].keys(),
                           key=lambda k: error_stats['last_errors'][k]['timestamp'])
            last_error = error_stats['last_errors'][latest_key]

        return HealthStatus(
            healthy=all(services.values()),
            timestamp=timestamp,
            services=services,
            last_error=last_error,
            error_count=error_stats['total_errors']
        )

    def get_health_summary(self) -> Dict[str, Any]:
        """Get health summary for API responses."""
        health_status = self.check_health()
        if not health_status.healthy:
            self.logger.warning(f"Unhealthy services: {health_status.services}")

        return {
            'healthy': health_status.healthy,
            'timestamp': health_status.timestamp.isoformat(),
            'services': health_status.services,
            'domains': len(self.credential_registry),
            'last_error': _public_error(health_status.last_error),
            'error_count': health_status.error_count
        }


def _public_error(error: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Strip tracebacks and remote response bodies from an error summary."""
    if error is None:
        return None
    public = {key: value for key, value in error.items() if key != 'traceback'}
    public['details'] = {
        key: value for key, value in error.get('details', {}).items() if key != 'response'
    }
    return public
