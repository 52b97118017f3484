"""Configuration management for the Google Calendar gateway."""

import os
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any
from urllib.parse import urlparse

from application import DEFAULT_TIMEZONE
from infrastructure import PLACEHOLDER_SUBJECT, DEFAULT_BASE_URL


@dataclass
class CalendarConfig:
    """Remote calendar and credential configuration."""
    credentials_path: str
    subject: str = PLACEHOLDER_SUBJECT
    calendar_id: str = "primary"
    timezone: str = DEFAULT_TIMEZONE
    base_url: str = DEFAULT_BASE_URL
    timeout: Optional[float] = 30

    def __post_init__(self):
        """Validate configuration."""
        if not self.credentials_path:
            raise ValueError("Calendar credentials_path is required")

        if not self.timezone:
            raise ValueError("Calendar timezone must not be empty")

        # Normalize URL
        self.base_url = self.base_url.rstrip('/')

        parsed = urlparse(self.base_url)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError(f"Invalid base_url format: {self.base_url}")


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = "0.0.0.0"
    port: int = 5555
    debug: bool = False

    def __post_init__(self):
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid server port: {self.port}")


@dataclass
class DocsConfig:
    """API documentation configuration."""
    swagger_location: str = "/swagger.json"


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_bytes: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


def _parse_timeout(value) -> Optional[float]:
    if value in (None, '', 0, '0'):
        return None
    return float(value)


@dataclass
class Config:
    """Main application configuration."""
    calendar: CalendarConfig
    server: ServerConfig = field(default_factory=ServerConfig)
    docs: DocsConfig = field(default_factory=DocsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> 'Config':
        """Create configuration from environment variables."""
        calendar_config = CalendarConfig(
            credentials_path=os.getenv('CREDENTIALS', ''),
            subject=os.getenv('CREDENTIALS_SUBJECT', PLACEHOLDER_SUBJECT),
            calendar_id=os.getenv('CALENDAR_ID', 'primary'),
            timezone=os.getenv('CALENDAR_TIMEZONE', DEFAULT_TIMEZONE),
            base_url=os.getenv('CALENDAR_BASE_URL', DEFAULT_BASE_URL),
            timeout=_parse_timeout(os.getenv('CALENDAR_TIMEOUT', '30'))
        )

        server_config = ServerConfig(
            host=os.getenv('SERVER_HOST', '0.0.0.0'),
            port=int(os.getenv('SERVER_PORT', '5555')),
            debug=os.getenv('SERVER_DEBUG', '').lower() in ('true', '1', 'yes')
        )

        docs_config = DocsConfig(
            swagger_location=os.getenv('SWAGGER_LOCATION') or DocsConfig.swagger_location
        )

        logging_config = LoggingConfig(
            level=os.getenv('LOG_LEVEL', 'INFO').upper(),
            format=os.getenv('LOG_FORMAT', LoggingConfig.format),
            file_path=os.getenv('LOG_FILE'),
            max_bytes=int(os.getenv('LOG_MAX_BYTES', str(LoggingConfig.max_bytes))),
            backup_count=int(os.getenv('LOG_BACKUP_COUNT', str(LoggingConfig.backup_count)))
        )

        return cls(
            calendar=calendar_config,
            server=server_config,
            docs=docs_config,
            logging=logging_config
        )

    @classmethod
    def from_file(cls, config_path: str) -> 'Config':
        """Create configuration from JSON file."""
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)

            calendar_data = data.get('calendar', {})
            calendar_config = CalendarConfig(
                credentials_path=calendar_data.get('credentials_path', ''),
                subject=calendar_data.get('subject', PLACEHOLDER_SUBJECT),
                calendar_id=calendar_data.get('calendar_id', 'primary'),
                timezone=calendar_data.get('timezone', DEFAULT_TIMEZONE),
                base_url=calendar_data.get('base_url', DEFAULT_BASE_URL),
                timeout=_parse_timeout(calendar_data.get('timeout', 30))
            )

            server_data = data.get('server', {})
            server_config = ServerConfig(
                host=server_data.get('host', '0.0.0.0'),
                port=server_data.get('port', 5555),
                debug=server_data.get('debug', False)
            )

            docs_data = data.get('docs', {})
            docs_config = DocsConfig(
                swagger_location=docs_data.get('swagger_location', DocsConfig.swagger_location)
            )

            logging_data = data.get('logging', {})
            logging_config = LoggingConfig(
                level=logging_data.get('level', 'INFO').upper(),
                format=logging_data.get('format', LoggingConfig.format),
                file_path=logging_data.get('file_path'),
                max_bytes=logging_data.get('max_bytes', LoggingConfig.max_bytes),
                backup_count=logging_data.get('backup_count', LoggingConfig.backup_count)
            )

            return cls(
                calendar=calendar_config,
                server=server_config,
                docs=docs_config,
                logging=logging_config
            )

        except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"Invalid configuration file format: {e}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            'calendar': {
                'credentials_path': self.calendar.credentials_path,
                'subject': self.calendar.subject,
                'calendar_id': self.calendar.calendar_id,
                'timezone': self.calendar.timezone,
                'base_url': self.calendar.base_url,
                'timeout': self.calendar.timeout
            },
            'server': {
                'host': self.server.host,
                'port': self.server.port,
                'debug': self.server.debug
            },
            'docs': {
                'swagger_location': self.docs.swagger_location
            },
            'logging': {
                'level': self.logging.level,
                'format': self.logging.format,
                'file_path': self.logging.file_path,
                'max_bytes': self.logging.max_bytes,
                'backup_count': self.logging.backup_count
            }
        }

    def setup_logging(self) -> None:
        """Configure logging based on configuration."""
        log_level = getattr(logging, self.logging.level, logging.INFO)

        formatter = logging.Formatter(self.logging.format)

        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)

        # Clear existing handlers
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        if self.logging.file_path:
            from logging.handlers import RotatingFileHandler
            file_handler = RotatingFileHandler(
                self.logging.file_path,
                maxBytes=self.logging.max_bytes,
                backupCount=self.logging.backup_count,
                encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)


def load_config() -> Config:
    """Load configuration from file or environment variables."""
    config_files = [
        'config.json',
        'config/config.json',
        '/etc/google-calendar-gateway/config.json'
    ]

    for config_file in config_files:
        if os.path.exists(config_file):
            try:
                return Config.from_file(config_file)
            except Exception as e:
                logging.warning(f"Failed to load config from {config_file}: {e}")

    # Fall back to environment variables
    return Config.from_env()
