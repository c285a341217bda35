import discord
from discord import app_commands
from discord.ext import commands
from typing import List, Literal, Optional, Sequence

from services.error_handler import ErrorHandler
from services.logging_service import LoggingService
from services.view_publisher import ACTION_ENABLE_PLATFORM, ACTION_ENABLE_STREAM
from ui.components import StreamControlView
from ui.embeds import StatusEmbed, VariablesEmbed
from utils.permissions import PermissionChecker
from .base_commands import BaseCommands

OnOffLiteral = Literal['enable', 'disable', 'toggle']

MAX_AUTOCOMPLETE = 25
MAX_PANELS = 5

class CastrCommands(BaseCommands):
    def __init__(self, bot, error_handler: ErrorHandler, logging_service: LoggingService):
        super().__init__(error_handler)
        self.bot = bot
        self.sync_service = bot.sync_service
        self.surface = bot.control_surface
        self.logging_service = logging_service
        self.panels: List[discord.Message] = []
        self.surface.add_feedback_listener(self.refresh_panels)

    # -- autocomplete ---------------------------------------------------

    def _autocomplete(self, action: str, option: str, current: str) -> List[app_commands.Choice[str]]:
        current = (current or '').lower()
        choices = []
        for choice in self.surface.choices('action', action, option):
            if current in choice.label.lower():
                choices.append(app_commands.Choice(name=choice.label[:100], value=choice.value[:100]))
            if len(choices) >= MAX_AUTOCOMPLETE:
                break
        return choices

    async def stream_autocomplete(self, interaction: discord.Interaction, current: str):
        return self._autocomplete(ACTION_ENABLE_STREAM, 'stream', current)

    async def platform_autocomplete(self, interaction: discord.Interaction, current: str):
        return self._autocomplete(ACTION_ENABLE_PLATFORM, 'platform', current)

    # -- enable stream --------------------------------------------------

    @app_commands.command(name="enable-stream", description="Enable, disable or toggle a Castr stream")
    @app_commands.describe(
        stream="Stream name or id, $(castr:variable) placeholders are expanded",
        onoff="enable, disable or toggle"
    )
    @app_commands.autocomplete(stream=stream_autocomplete)
    async def enable_stream_slash(self, interaction: discord.Interaction, stream: str, onoff: OnOffLiteral):
        await self.handle_command(interaction, self._enable_stream_logic, stream, onoff)

    @commands.command(name='enablestream')
    async def enable_stream(self, ctx, onoff: str, *, stream: str):
        await self.handle_command(ctx, self._enable_stream_logic, stream, onoff)

    async def _enable_stream_logic(self, ctx, stream: str, onoff: str):
        """Enable stream logic"""
        if not self.can_control(ctx):
            await self.send_response(ctx, "❌ You don't have permission to change streams.")
            return

        await self.defer(ctx)
        ok = await self.sync_service.enable_stream(stream, onoff)
        response = "✅ Stream updated" if ok else "❌ Failed to update stream"
        await self.send_response(ctx, f"{response}: `{stream}` ({onoff})")

    # -- enable platform ------------------------------------------------

    @app_commands.command(name="enable-platform", description="Enable, disable or toggle stream platforms")
    @app_commands.describe(
        platform="\"stream :: platform\" or \"stream :: *ALL*\", placeholders are expanded",
        onoff="enable, disable or toggle"
    )
    @app_commands.autocomplete(platform=platform_autocomplete)
    async def enable_platform_slash(self, interaction: discord.Interaction, platform: str, onoff: OnOffLiteral):
        await self.handle_command(interaction, self._enable_platform_logic, platform, onoff)

    @commands.command(name='enableplatform')
    async def enable_platform(self, ctx, onoff: str, *, platform: str):
        await self.handle_command(ctx, self._enable_platform_logic, platform, onoff)

    async def _enable_platform_logic(self, ctx, platform: str, onoff: str):
        """Enable platform logic"""
        if not self.can_control(ctx):
            await self.send_response(ctx, "❌ You don't have permission to change platforms.")
            return

        await self.defer(ctx)
        results = await self.sync_service.enable_platform(platform, onoff)
        if not results:
            await self.send_response(ctx, f"❌ No platform matches `{platform}`")
            return

        succeeded = sum(1 for ok in results if ok)
        emoji = "✅" if succeeded == len(results) else "⚠️"
        await self.send_response(ctx, f"{emoji} Updated {succeeded}/{len(results)} platform(s) for `{platform}` ({onoff})")

    # -- feedbacks ------------------------------------------------------

    @app_commands.command(name="stream-enabled", description="Check if a Castr stream is enabled")
    @app_commands.autocomplete(stream=stream_autocomplete)
    async def stream_enabled_slash(self, interaction: discord.Interaction, stream: str):
        await self.handle_command(interaction, self._stream_enabled_logic, stream)

    async def _stream_enabled_logic(self, ctx, stream: str):
        enabled = await self.sync_service.stream_enabled(stream)
        await self.send_response(ctx, f"{'🟢' if enabled else '🔴'} `{stream}`")

    @app_commands.command(name="platforms-enabled", description="Check if stream platforms are enabled")
    @app_commands.autocomplete(platform=platform_autocomplete)
    async def platforms_enabled_slash(self, interaction: discord.Interaction, platform: str):
        await self.handle_command(interaction, self._platforms_enabled_logic, platform)

    async def _platforms_enabled_logic(self, ctx, platform: str):
        enabled = await self.sync_service.platforms_enabled(platform)
        await self.send_response(ctx, f"{'🟢' if enabled else '🔴'} `{platform}`")

    # -- status panel and variables -------------------------------------

    @app_commands.command(name="castr-status", description="Show Castr streams with toggle buttons")
    async def status_slash(self, interaction: discord.Interaction):
        await self.handle_command(interaction, self._status_logic)

    @commands.command(name='castrstatus')
    async def status(self, ctx):
        await self.handle_command(ctx, self._status_logic)

    async def _status_logic(self, ctx):
        """Status command logic"""
        permission_info = None
        guild = ctx.guild
        if guild and guild.me and ctx.channel:
            _, permission_info = PermissionChecker.check_permissions(guild.me, ctx.channel)

        snapshot = self.sync_service.current_snapshot()
        embed = StatusEmbed.create(snapshot, self.surface.status, self.surface.status_message, permission_info)
        view = StreamControlView(snapshot, self.bot)
        message = await self.send_response(ctx, embed=embed, view=view)
        if isinstance(message, discord.Message):
            view.message = message
            self.panels = (self.panels + [message])[-MAX_PANELS:]

    async def refresh_panels(self, feedback_ids: Sequence[str]) -> None:
        """Redraw every open status panel after the feedbacks changed"""
        if not self.panels:
            return

        snapshot = self.sync_service.current_snapshot()
        embed = StatusEmbed.create(snapshot, self.surface.status, self.surface.status_message)
        alive = []
        for message in self.panels:
            try:
                view = StreamControlView(snapshot, self.bot)
                view.message = message
                await message.edit(embed=embed, view=view)
                alive.append(message)
            except discord.NotFound:
                pass
            except discord.HTTPException as e:
                await self.logging_service.log_error(e, "Error refreshing status panel")
        self.panels = alive

    @app_commands.command(name="castr-variables", description="List Castr variables")
    @app_commands.describe(prefix="Only show variables starting with this prefix")
    async def variables_slash(self, interaction: discord.Interaction, prefix: Optional[str] = None):
        await self.handle_command(interaction, self._variables_logic, prefix)

    async def _variables_logic(self, ctx, prefix: Optional[str] = None):
        embed = VariablesEmbed.create(self.surface.variable_values, prefix or '', self.surface.namespace)
        await self.send_response(ctx, embed=embed)

    @app_commands.command(name="castr-reload", description="Reload the Castr configuration")
    async def reload_slash(self, interaction: discord.Interaction):
        await self.handle_command(interaction, self._reload_logic)

    async def _reload_logic(self, ctx):
        if not self.can_control(ctx):
            await self.send_response(ctx, "❌ You don't have permission to reload the configuration.")
            return

        await self.defer(ctx)
        ok = await self.bot.reload_configuration()
        await self.send_response(ctx, "✅ Configuration reloaded" if ok else "❌ Invalid configuration, nothing changed")

    @app_commands.command(name="castr-refresh", description="Poll the Castr API now")
    async def refresh_slash(self, interaction: discord.Interaction):
        await self.handle_command(interaction, self._refresh_logic)

    async def _refresh_logic(self, ctx):
        await self.defer(ctx)
        ok = await self.sync_service.poll()
        streams = len(self.sync_service.current_snapshot())
        response = f"✅ Refreshed, {streams} stream(s)" if ok else "❌ Refresh failed, keeping last known state"
        await self.send_response(ctx, response)
