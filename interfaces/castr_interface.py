from abc import ABC, abstractmethod
from typing import Dict, Any, Optional

class ICastrClient(ABC):
    """Interface for the Castr REST API"""

    @abstractmethod
    async def call(self, method: str, endpoint: str,
                   path_suffix: Optional[str] = None,
                   body: Optional[Dict[str, Any]] = None) -> Any:
        """Perform an authenticated call and return the decoded JSON"""
        pass

    @abstractmethod
    async def list_streams(self) -> Dict[str, Any]:
        """Fetch the live stream collection"""
        pass

    @abstractmethod
    async def set_stream_enabled(self, stream_id: str, enabled: bool) -> Any:
        """Enable or disable a live stream"""
        pass

    @abstractmethod
    async def set_platform_enabled(self, stream_id: str, platform_id: str, enabled: bool) -> Any:
        """Enable or disable one destination platform of a live stream"""
        pass
