from typing import Any, Optional, Tuple
from urllib.parse import urlparse

class Validators:
    """Validation utilities for the bot configuration"""

    MIN_POLL_INTERVAL = 0
    MAX_POLL_INTERVAL = 3600

    @staticmethod
    def validate_poll_interval(value: Any) -> Tuple[bool, Optional[int], Optional[str]]:
        """
        Validate the polling interval in seconds
        Returns: (is_valid, interval, error_message)
        """
        if isinstance(value, bool):
            return False, None, "Poll interval must be a number of seconds"
        try:
            interval = int(str(value).strip())
        except (TypeError, ValueError):
            return False, None, "Poll interval must be a number of seconds"

        if not Validators.MIN_POLL_INTERVAL <= interval <= Validators.MAX_POLL_INTERVAL:
            return False, None, (
                f"Poll interval must be between {Validators.MIN_POLL_INTERVAL} "
                f"and {Validators.MAX_POLL_INTERVAL} seconds"
            )
        return True, interval, None

    @staticmethod
    def validate_api_url(url: Optional[str], default: str) -> Tuple[bool, Optional[str], Optional[str]]:
        """
        Validate the base API URL, blank means default
        Returns: (is_valid, normalized_url, error_message)
        """
        url = (url or '').strip()
        if not url:
            return True, default, None

        parsed = urlparse(url)
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            return False, None, f"Invalid API URL: {url}"

        if not url.endswith('/'):
            url += '/'
        return True, url, None

    @staticmethod
    def validate_timeout(value: Any) -> Tuple[bool, Optional[float], Optional[str]]:
        try:
            timeout = float(value)
        except (TypeError, ValueError):
            return False, None, "Request timeout must be a number of seconds"
        if timeout <= 0:
            return False, None, "Request timeout must be positive"
        return True, timeout, None

    @staticmethod
    def validate_channel_id(value: Any) -> Tuple[bool, Optional[int], Optional[str]]:
        if value in (None, ''):
            return True, None, None
        try:
            return True, int(value), None
        except (TypeError, ValueError):
            return False, None, f"Invalid channel id: {value}"
