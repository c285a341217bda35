from discord import Embed, Color
from datetime import datetime
from typing import Any, Mapping, Optional

from services.connection_status import ConnectionStatus
from services.stream_directory import DirectorySnapshot, StreamRecord

ENABLED_COLOR = Color.from_rgb(0, 204, 0)
DISABLED_COLOR = Color.from_rgb(204, 0, 0)

MAX_FIELDS = 25
MAX_FIELD_VALUE = 1024

class StatusEmbed:
    @staticmethod
    def create(snapshot: DirectorySnapshot, status: ConnectionStatus,
               status_message: Optional[str] = None, permission_info: Optional[str] = None) -> Embed:
        all_enabled = bool(snapshot.streams) and all(s.enabled for s in snapshot.streams)
        embed = Embed(
            title="Castr Streams",
            color=ENABLED_COLOR if all_enabled else DISABLED_COLOR,
            timestamp=datetime.now()
        )

        connection = status.value + (f" ({status_message})" if status_message else "")
        if snapshot.streams:
            embed.description = f"Connection: {connection}"
        else:
            embed.description = f"Connection: {connection}\nNo live streams found on this account."

        for stream in snapshot.streams[:MAX_FIELDS - 1]:
            StatusEmbed._add_stream_field(embed, stream)

        if permission_info:
            embed.add_field(name="Bot Permissions", value=permission_info, inline=False)

        return embed

    @staticmethod
    def _add_stream_field(embed: Embed, stream: StreamRecord):
        status_emoji = "🟢" if stream.enabled else "🔴"
        live_status = "🎥 Live" if stream.broadcasting_status == 'online' else "⭕ Offline"

        lines = [
            f"Enabled: {status_emoji}",
            f"Broadcast: {live_status}",
            f"ID: `{stream.id}`"
        ]
        for platform in stream.platforms:
            emoji = "🟢" if platform.enabled else "🔴"
            lines.append(f"{emoji} {platform.name} ({platform.broadcasting_status or 'undefined'})")

        value = "\n".join(lines)
        if len(value) > MAX_FIELD_VALUE:
            value = value[:MAX_FIELD_VALUE - 3] + "..."

        embed.add_field(name=stream.name, value=value, inline=False)

class VariablesEmbed:
    @staticmethod
    def create(values: Mapping[str, Any], prefix: str = '', namespace: str = 'castr') -> Embed:
        embed = Embed(title="Castr Variables", color=Color.blue(), timestamp=datetime.now())

        lines = []
        for variable_id in sorted(values):
            if prefix and not variable_id.startswith(prefix):
                continue
            value = values[variable_id]
            if isinstance(value, bool):
                value = 'true' if value else 'false'
            lines.append(f"`$({namespace}:{variable_id})` = {value}")

        if not lines:
            embed.description = "No variables match." if prefix else "No variables published yet."
            return embed

        description = "\n".join(lines)
        if len(description) > 4000:
            description = description[:3997] + "..."
        embed.description = description
        return embed
