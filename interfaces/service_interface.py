from abc import ABC, abstractmethod
from typing import Any, Dict, List, Union

class ISyncService(ABC):
    """Interface for the stream synchronization service used by the bot"""

    @abstractmethod
    async def poll(self) -> bool:
        """Poll the remote account once"""
        pass

    @abstractmethod
    async def enable_stream(self, stream: str, on_off: Union[Any, str]) -> bool:
        """Enable, disable or toggle a stream"""
        pass

    @abstractmethod
    async def enable_platform(self, platform: str, on_off: Union[Any, str]) -> List[bool]:
        """Enable, disable or toggle one or more platforms of a stream"""
        pass

    @abstractmethod
    async def stream_enabled(self, stream: str) -> bool:
        """Check if a stream is enabled"""
        pass

    @abstractmethod
    async def platforms_enabled(self, platform: str) -> bool:
        """Check if all referenced platforms are enabled"""
        pass

    @abstractmethod
    def get_status(self) -> Dict[str, Any]:
        """Get service status"""
        pass
