import asyncio
import logging
import re
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence

from interfaces.surface_interface import IControlSurface
from services.connection_status import ConnectionStatus

logger = logging.getLogger(__name__)

VARIABLE_PATTERN = re.compile(r'\$\((\w+):([\w-]+)\)')
DEFAULT_NAMESPACE = 'castr'

FeedbackListener = Callable[[Sequence[str]], Awaitable[None]]

class BotControlSurface(IControlSurface):
    """State published to the Discord side: variables, choices and status"""

    def __init__(self, namespace: str = DEFAULT_NAMESPACE):
        self.namespace = namespace
        self.variable_definitions: Sequence[Any] = ()
        self.variable_values: Mapping[str, Any] = {}
        self.actions: Mapping[str, Any] = {}
        self.feedbacks: Mapping[str, Any] = {}
        self.status: ConnectionStatus = ConnectionStatus.UNKNOWN
        self.status_message: Optional[str] = None
        self.feedback_listeners: List[FeedbackListener] = []
        self._pending: List[asyncio.Task] = []

    def set_variable_definitions(self, definitions: Sequence[Any]) -> None:
        self.variable_definitions = definitions

    def set_variable_values(self, values: Mapping[str, Any]) -> None:
        self.variable_values = values

    def set_action_definitions(self, actions: Mapping[str, Any]) -> None:
        self.actions = actions

    def set_feedback_definitions(self, feedbacks: Mapping[str, Any]) -> None:
        self.feedbacks = feedbacks

    def update_status(self, status: ConnectionStatus, message: Optional[str] = None) -> None:
        self.status = status
        self.status_message = message

    def add_feedback_listener(self, listener: FeedbackListener) -> None:
        self.feedback_listeners.append(listener)

    def check_feedbacks(self, *feedback_ids: str) -> None:
        """Notify listeners (e.g. the status panel) without blocking the poll"""
        if not self.feedback_listeners:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("check_feedbacks() called outside of an event loop, skipping")
            return

        self._pending = [task for task in self._pending if not task.done()]
        for listener in self.feedback_listeners:
            self._pending.append(loop.create_task(self._notify(listener, feedback_ids)))

    async def _notify(self, listener: FeedbackListener, feedback_ids: Sequence[str]) -> None:
        try:
            await listener(feedback_ids)
        except Exception as e:
            logger.error(f"Feedback listener failed: {e}", exc_info=True)

    def choices(self, kind: str, key: str, option: str) -> Sequence[Any]:
        """Choices of one option, e.g. choices('action', 'enableStream', 'stream')"""
        source = self.actions if kind == 'action' else self.feedbacks
        return source.get(key, {}).get(option, ())

    async def expand(self, text: str) -> str:
        """Replace $(castr:variable) placeholders with current values"""
        if not text:
            return text

        def _replace(match: re.Match) -> str:
            namespace, variable_id = match.group(1), match.group(2)
            if namespace != self.namespace or variable_id not in self.variable_values:
                return match.group(0)
            value = self.variable_values[variable_id]
            if isinstance(value, bool):
                return 'true' if value else 'false'
            return str(value)

        return VARIABLE_PATTERN.sub(_replace, text)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "status_message": self.status_message,
            "variables": dict(self.variable_values),
            "actions": list(self.actions),
            "feedbacks": list(self.feedbacks)
        }
