"""Resolution of user supplied stream / platform references.

A reference is what a user types (or picks) to address something on the
Castr account:

* a stream: either its id or its name, e.g. ``64f0c...`` or ``Main Stage``;
* a platform: ``"{stream name} :: {platform name}"``, where the platform part
  may be ``*ALL*`` to address every platform of that stream.

Both forms go through template expansion first, so ``$(castr:...)``
placeholders can be used anywhere.
"""
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional, Tuple

from services.stream_directory import ALL_PLATFORMS, PLATFORM_SEPARATOR, StreamDirectory

logger = logging.getLogger(__name__)

Expander = Callable[[str], Awaitable[str]]

async def identity_expand(text: str) -> str:
    return text

@dataclass(frozen=True)
class ResolvedPlatform:
    id: str
    enabled: bool

@dataclass(frozen=True)
class ResolvedTarget:
    stream_id: Optional[str] = None
    platforms: Tuple[ResolvedPlatform, ...] = ()
    resolved: bool = True

def split_platform_reference(reference: str) -> Tuple[str, Optional[str]]:
    """Split "{stream} :: {platform}" in two; the platform part is None if absent"""
    parts = reference.split(PLATFORM_SEPARATOR)
    stream_part = parts[0]
    platform_part = parts[1] if len(parts) > 1 else None
    return stream_part, platform_part

class ReferenceResolver:
    """Translates reference tokens into concrete stream and platform ids"""

    def __init__(self, directory: StreamDirectory):
        self.directory = directory

    async def resolve_stream(self, token: str, expand: Expander = identity_expand) -> ResolvedTarget:
        """Resolve a stream id or name; unknown values are passed through as-is"""
        value = await expand(token)
        snapshot = self.directory.snapshot

        if value in snapshot.by_id:
            return ResolvedTarget(stream_id=value)

        stream = snapshot.by_name.get(value)
        if stream is not None:
            return ResolvedTarget(stream_id=stream.id)

        logger.warning(f"Stream name '{value}' not found, passing as-is")
        return ResolvedTarget(stream_id=value, resolved=False)

    async def resolve_platform(self, token: str, expand: Expander = identity_expand) -> ResolvedTarget:
        """Resolve "{stream name} :: {platform name|*ALL*}" into the matching platforms"""
        value = await expand(token)
        stream_name, platform_name = split_platform_reference(value)

        stream = self.directory.snapshot.by_name.get(stream_name)
        if stream is None:
            logger.error(f"Platform reference '{value}': stream '{stream_name}' not found")
            return ResolvedTarget(resolved=False)

        platforms = tuple(
            ResolvedPlatform(id=platform.id, enabled=platform.enabled)
            for platform in stream.platforms
            if platform_name == ALL_PLATFORMS or platform.name == platform_name
        )
        return ResolvedTarget(stream_id=stream.id, platforms=platforms)

    async def resolve(self, options: Mapping[str, Any], expand: Expander = identity_expand) -> ResolvedTarget:
        """Resolve the "stream" and/or "platform" option of a command.

        When both are given the platform reference decides the stream id,
        and the result is resolved only if both parts were.
        """
        target = ResolvedTarget(resolved=True)

        if options.get('stream') is not None:
            target = await self.resolve_stream(options['stream'], expand)

        if options.get('platform') is not None:
            platform_target = await self.resolve_platform(options['platform'], expand)
            stream_id = platform_target.stream_id if platform_target.resolved else target.stream_id
            target = ResolvedTarget(
                stream_id=stream_id,
                platforms=platform_target.platforms,
                resolved=target.resolved and platform_target.resolved
            )

        logger.debug(f"resolve({dict(options)}) -> {target}")
        return target
