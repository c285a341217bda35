from dataclasses import dataclass
from typing import Dict, Any, Optional
import json
import os
import logging
from pathlib import Path

from services.castr_client import DEFAULT_API_URL
from utils.validators import Validators

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class CastrSettings:
    """Validated settings for one Castr account"""
    access_token: str = ''
    secret_key: str = ''
    api_url: str = DEFAULT_API_URL
    poll_interval: int = 10
    request_timeout: float = 30
    log_level: str = 'INFO'
    log_channel_id: Optional[int] = None
    discord_token: Optional[str] = None

class ConfigManager:
    """Manages application configuration"""

    ENV_OVERRIDES = {
        'access_token': 'CASTR_ACCESS_TOKEN',
        'secret_key': 'CASTR_SECRET_KEY',
        'api_url': 'CASTR_API_URL',
        'poll_interval': 'CASTR_POLL_INTERVAL',
        'request_timeout': 'CASTR_REQUEST_TIMEOUT',
        'log_level': 'CASTR_LOG_LEVEL',
        'log_channel_id': 'CASTR_LOG_CHANNEL_ID',
        'discord_token': 'DISCORD_TOKEN'
    }

    def __init__(self, config_path: str = "config.json", environ: Optional[Dict[str, str]] = None):
        self.config_path = Path(config_path)
        self.environ = os.environ if environ is None else environ
        self._config: Dict[str, Any] = {}
        self._load_config()

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value, environment first"""
        env_key = self.ENV_OVERRIDES.get(key)
        if env_key and self.environ.get(env_key) not in (None, ''):
            return self.environ[env_key]
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value"""
        self._config[key] = value
        self._save_config()

    def update(self, values: Dict[str, Any]) -> None:
        """Update multiple configuration values"""
        self._config.update(values)
        self._save_config()

    def get_settings(self) -> CastrSettings:
        """Build validated settings, raises ValueError on invalid values"""
        defaults = self._get_default_config()

        ok, api_url, error = Validators.validate_api_url(self.get('api_url'), DEFAULT_API_URL)
        if not ok:
            raise ValueError(error)

        ok, poll_interval, error = Validators.validate_poll_interval(
            self.get('poll_interval', defaults['poll_interval']))
        if not ok:
            raise ValueError(error)

        ok, request_timeout, error = Validators.validate_timeout(
            self.get('request_timeout', defaults['request_timeout']))
        if not ok:
            raise ValueError(error)

        ok, log_channel_id, error = Validators.validate_channel_id(self.get('log_channel_id'))
        if not ok:
            raise ValueError(error)

        log_level = str(self.get('log_level', defaults['log_level'])).upper()
        if log_level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ValueError(f"Invalid log level: {log_level}")

        return CastrSettings(
            access_token=str(self.get('access_token') or ''),
            secret_key=str(self.get('secret_key') or ''),
            api_url=api_url,
            poll_interval=poll_interval,
            request_timeout=request_timeout,
            log_level=log_level,
            log_channel_id=log_channel_id,
            discord_token=self.get('discord_token') or None
        )

    def _load_config(self) -> None:
        """Load configuration from file"""
        try:
            if self.config_path.exists():
                with open(self.config_path, 'r') as f:
                    self._config = json.load(f)
            else:
                self._config = self._get_default_config()
                self._save_config()
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading config: {e}")
            self._config = self._get_default_config()

    def _save_config(self) -> None:
        """Save configuration to file"""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self._config, f, indent=4)
        except OSError as e:
            logger.error(f"Error saving config: {e}")

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration"""
        return {
            'access_token': '',
            'secret_key': '',
            'api_url': DEFAULT_API_URL,
            'poll_interval': 10,
            'request_timeout': 30,
            'log_level': 'INFO',
            'log_channel_id': None
        }
