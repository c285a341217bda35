from discord.ext import commands
from discord import Interaction
from typing import Any, Callable
from services.error_handler import ErrorHandler
from utils.permissions import PermissionChecker

class BaseCommands(commands.Cog):
    """Base class for commands with common functionality"""

    def __init__(self, error_handler: ErrorHandler):
        self.error_handler = error_handler

    async def handle_command(self, ctx: Any, command_logic: Callable, *args, **kwargs):
        """Generic command handler with error handling"""
        try:
            await command_logic(ctx, *args, **kwargs)
        except Exception as e:
            await self.error_handler.handle_command_error(ctx, e)

    def is_interaction(self, ctx: Any) -> bool:
        """Check if context is a Discord Interaction"""
        return isinstance(ctx, Interaction)

    def get_user(self, ctx: Any):
        return ctx.user if self.is_interaction(ctx) else ctx.author

    def can_control(self, ctx: Any) -> bool:
        return PermissionChecker.can_control(self.get_user(ctx))

    async def defer(self, ctx: Any):
        """Acknowledge slow interactions before talking to the API"""
        if self.is_interaction(ctx) and not ctx.response.is_done():
            await ctx.response.defer(ephemeral=True)

    async def send_response(self, ctx: Any, content: str = None, embed: Any = None, view: Any = None):
        """Send response handling both regular commands and interactions"""
        kwargs = {'content': content, 'embed': embed}
        if view is not None:
            kwargs['view'] = view

        if self.is_interaction(ctx):
            if not ctx.response.is_done():
                await ctx.response.send_message(ephemeral=True, **kwargs)
                return await ctx.original_response()
            return await ctx.followup.send(ephemeral=True, wait=True, **kwargs)
        return await ctx.send(**kwargs)
