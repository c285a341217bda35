import asyncio
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from interfaces.castr_interface import ICastrClient
from interfaces.service_interface import ISyncService
from interfaces.surface_interface import IControlSurface
from services.castr_client import CastrClient, CastrError
from services.command_service import CommandService
from services.config_manager import CastrSettings
from services.connection_status import ConnectionStatus, ConnectionStatusTracker
from services.poller import Sleeper, StreamPoller
from services.reference_resolver import Expander, ReferenceResolver, ResolvedTarget
from services.stream_directory import DirectorySnapshot, StreamDirectory
from services.view_publisher import DerivedViewPublisher, OnOffToggle

logger = logging.getLogger(__name__)

ClientFactory = Callable[[CastrSettings, ConnectionStatusTracker], ICastrClient]

def default_client_factory(settings: CastrSettings, tracker: ConnectionStatusTracker) -> ICastrClient:
    return CastrClient(
        settings.access_token,
        settings.secret_key,
        api_url=settings.api_url,
        status_tracker=tracker,
        timeout=settings.request_timeout
    )

class CastrSyncService(ISyncService):
    """Keeps one Castr account in sync with the control surface"""

    def __init__(self, settings: CastrSettings, surface: IControlSurface,
                 client_factory: ClientFactory = default_client_factory,
                 sleep: Sleeper = asyncio.sleep):
        self.settings = settings
        self.surface = surface
        self.client_factory = client_factory
        self.status_tracker = ConnectionStatusTracker(surface.update_status)
        self.client = client_factory(settings, self.status_tracker)
        self.directory = StreamDirectory()
        self.resolver = ReferenceResolver(self.directory)
        self.publisher = DerivedViewPublisher(surface)
        self.poller = StreamPoller(self._poll_streams, settings.poll_interval, sleep=sleep)
        self.commands = CommandService(self.directory, self.resolver, self.client,
                                       request_refresh=self.request_refresh)
        self._closed = False

    async def start(self) -> None:
        """Initial poll, then start the polling cadence"""
        self._closed = False
        self.status_tracker.update(ConnectionStatus.UNKNOWN, "Initializing")
        await self.poller.start()
        await self.poll()

    async def stop(self) -> None:
        """Cancel polling and forget all remote state"""
        self._closed = True
        await self.poller.stop()
        self.directory.clear()
        logger.info("Castr sync service stopped")

    async def configure(self, settings: CastrSettings) -> None:
        """Apply new settings: new client, new interval, immediate re-poll"""
        self.settings = settings
        self.client = self.client_factory(settings, self.status_tracker)
        self.commands.client = self.client
        self.status_tracker.reset("Reconfigured")
        await self.poller.reconfigure(settings.poll_interval)
        logger.debug("Config updated")
        await self.poll()

    async def poll(self) -> bool:
        """Poll the remote account now and publish what changed"""
        return await self.poller.poll()

    def request_refresh(self) -> None:
        """Schedule a poll without waiting for it"""
        self.poller.request_refresh()

    async def _poll_streams(self) -> bool:
        try:
            response = await self.client.list_streams()
        except CastrError as e:
            logger.error(f"failed to read stream list: {e}")
            return False

        if self._closed:
            logger.debug("Discarding poll response received after shutdown")
            return False

        docs = response.get('docs') if isinstance(response, Mapping) else None
        if not isinstance(docs, list):
            logger.error(f"failed to read stream list: unexpected response {type(response).__name__}")
            self.status_tracker.update(ConnectionStatus.UNKNOWN_ERROR, "Unexpected response")
            return False

        snapshot = self.directory.rebuild(docs)
        self.publisher.publish(snapshot)
        self.status_tracker.update(ConnectionStatus.OK)
        return True

    def current_snapshot(self) -> DirectorySnapshot:
        return self.directory.snapshot

    async def resolve(self, options: Mapping[str, Any], expand: Optional[Expander] = None) -> ResolvedTarget:
        return await self.resolver.resolve(options, expand or self.surface.expand)

    async def resolve_stream(self, token: str, expand: Optional[Expander] = None) -> ResolvedTarget:
        return await self.resolver.resolve_stream(token, expand or self.surface.expand)

    async def resolve_platform(self, token: str, expand: Optional[Expander] = None) -> ResolvedTarget:
        return await self.resolver.resolve_platform(token, expand or self.surface.expand)

    async def enable_stream(self, stream: str, on_off: Union[OnOffToggle, str]) -> bool:
        return await self.commands.enable_stream(stream, on_off, self.surface.expand)

    async def enable_platform(self, platform: str, on_off: Union[OnOffToggle, str]) -> List[bool]:
        return await self.commands.enable_platform(platform, on_off, self.surface.expand)

    async def stream_enabled(self, stream: str) -> bool:
        return await self.commands.stream_enabled(stream, self.surface.expand)

    async def platforms_enabled(self, platform: str) -> bool:
        return await self.commands.platforms_enabled(platform, self.surface.expand)

    def get_status(self) -> Dict[str, Any]:
        snapshot = self.directory.snapshot
        return {
            "connection": self.status_tracker.status.value if self.status_tracker.status else None,
            "connection_message": self.status_tracker.message,
            "streams": len(snapshot),
            "platforms": len(snapshot.platform_index),
            "poller": self.poller.get_status()
        }
