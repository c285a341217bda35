import logging
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)

class ConnectionStatus(Enum):
    UNKNOWN = "Unknown"
    OK = "Ok"
    AUTHENTICATION_FAILURE = "Authentication failure"
    UNKNOWN_ERROR = "Unknown error"

StatusListener = Callable[[ConnectionStatus, Optional[str]], None]

class ConnectionStatusTracker:
    """Keeps the current connection status and notifies only on change"""

    def __init__(self, listener: Optional[StatusListener] = None):
        self.listener = listener
        self.status: Optional[ConnectionStatus] = None
        self.message: Optional[str] = None

    def update(self, status: ConnectionStatus, message: Optional[str] = None) -> bool:
        """Record a new status, returns True if the listener was notified"""
        if status == self.status:
            return False

        logger.info(f"Connection status: {status.value}" + (f" ({message})" if message else ""))
        self.status = status
        self.message = message
        if self.listener:
            self.listener(status, message)
        return True

    def reset(self, message: Optional[str] = None) -> None:
        """Force the status back to UNKNOWN, e.g. on reconfiguration"""
        self.status = None
        self.update(ConnectionStatus.UNKNOWN, message)
