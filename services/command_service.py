import asyncio
import logging
from typing import Callable, List, Optional, Union

from interfaces.castr_interface import ICastrClient
from services.castr_client import CastrError
from services.reference_resolver import (
    Expander, ReferenceResolver, ResolvedPlatform, identity_expand
)
from services.stream_directory import StreamDirectory
from services.view_publisher import OnOffToggle

logger = logging.getLogger(__name__)

def parse_on_off(value: Union[OnOffToggle, str]) -> OnOffToggle:
    """Accept an OnOffToggle, its value ("enable") or its name ("ON")"""
    if isinstance(value, OnOffToggle):
        return value
    text = str(value).strip()
    for item in OnOffToggle:
        if text.lower() == item.value or text.upper() == item.name:
            return item
    raise ValueError(f"Invalid on/off/toggle value: {value!r}")

def target_state(on_off: OnOffToggle, current: bool) -> bool:
    if on_off == OnOffToggle.ON:
        return True
    if on_off == OnOffToggle.OFF:
        return False
    return not current

class CommandService:
    """Mutating commands and boolean feedbacks on top of the stream directory"""

    def __init__(self, directory: StreamDirectory, resolver: ReferenceResolver,
                 client: ICastrClient, request_refresh: Optional[Callable[[], None]] = None):
        self.directory = directory
        self.resolver = resolver
        self.client = client
        self.request_refresh = request_refresh or (lambda: None)

    async def enable_stream(self, stream: str, on_off: Union[OnOffToggle, str],
                            expand: Expander = identity_expand) -> bool:
        """Enable, disable or toggle a stream, returns True if the PATCH succeeded"""
        on_off = parse_on_off(on_off)
        target = await self.resolver.resolve_stream(stream, expand)
        stream_id = target.stream_id
        if not stream_id:
            logger.error(f"enable_stream(): '{stream}' expands to an empty stream id, nothing changed")
            return False

        if on_off == OnOffToggle.TOGGLE:
            record = self.directory.get(stream_id)
            if record is None:
                logger.error(f"enable_stream(): Stream '{stream_id}' not found, cannot toggle")
                return False
            enabled = not record.enabled
        else:
            enabled = target_state(on_off, False)

        try:
            response = await self.client.set_stream_enabled(stream_id, enabled)
        except CastrError as e:
            logger.error(f"failed to enable stream '{stream_id}': {e}")
            return False

        logger.debug(f"live_streams PATCH response: {response}")
        logger.info(f"Stream '{stream_id}' {'enabled' if enabled else 'disabled'}")
        self.request_refresh()
        return True

    async def enable_platform(self, platform: str, on_off: Union[OnOffToggle, str],
                              expand: Expander = identity_expand) -> List[bool]:
        """Enable, disable or toggle every platform matched by a reference.

        Each platform gets its own PATCH; a failing one does not stop the
        others. Returns one success flag per resolved platform.
        """
        on_off = parse_on_off(on_off)
        target = await self.resolver.resolve_platform(platform, expand)
        if not target.resolved:
            logger.error(f"enable_platform(): cannot resolve '{platform}', nothing changed")
            return []

        if not target.platforms:
            logger.warning(f"enable_platform(): '{platform}' matches no platform")
            return []

        return list(await asyncio.gather(*(
            self._patch_platform(target.stream_id, resolved, on_off)
            for resolved in target.platforms
        )))

    async def _patch_platform(self, stream_id: str, platform: ResolvedPlatform,
                              on_off: OnOffToggle) -> bool:
        enabled = target_state(on_off, platform.enabled)
        try:
            response = await self.client.set_platform_enabled(stream_id, platform.id, enabled)
        except CastrError as e:
            logger.error(f"failed to enable platform '{platform.id}' of stream '{stream_id}': {e}")
            return False

        logger.debug(f"platforms PATCH response: {response}")
        self.request_refresh()
        return True

    async def stream_enabled(self, stream: str, expand: Expander = identity_expand) -> bool:
        """Feedback: is the referenced stream enabled"""
        if len(self.directory) == 0:
            return False
        target = await self.resolver.resolve_stream(stream, expand)
        if not target.resolved:
            return False
        record = self.directory.get(target.stream_id)
        return bool(record and record.enabled)

    async def platforms_enabled(self, platform: str, expand: Expander = identity_expand) -> bool:
        """Feedback: are all referenced platforms enabled"""
        if not self.directory.snapshot.platform_index:
            return False
        target = await self.resolver.resolve_platform(platform, expand)
        if not target.resolved or not target.platforms:
            return False
        return all(resolved.enabled for resolved in target.platforms)
