from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional, Sequence

class IControlSurface(ABC):
    """Interface for the host that displays variables, actions and feedbacks"""

    @abstractmethod
    def set_variable_definitions(self, definitions: Sequence[Any]) -> None:
        """Replace the list of exposed variables"""
        pass

    @abstractmethod
    def set_variable_values(self, values: Mapping[str, Any]) -> None:
        """Replace the current variable values"""
        pass

    @abstractmethod
    def set_action_definitions(self, actions: Mapping[str, Any]) -> None:
        """Replace the selectable choices of every action"""
        pass

    @abstractmethod
    def set_feedback_definitions(self, feedbacks: Mapping[str, Any]) -> None:
        """Replace the selectable choices of every feedback"""
        pass

    @abstractmethod
    def check_feedbacks(self, *feedback_ids: str) -> None:
        """Ask the host to re-evaluate the given feedbacks"""
        pass

    @abstractmethod
    def update_status(self, status: Any, message: Optional[str] = None) -> None:
        """Show the connection status"""
        pass

    @abstractmethod
    async def expand(self, text: str) -> str:
        """Expand variable placeholders in user supplied text"""
        pass

    def snapshot(self) -> Dict[str, Any]:
        """Return what is currently published, mainly for diagnostics"""
        return {}
