import discord
from discord.ext import commands
from discord import app_commands
import logging
from typing import Union
from services.castr_client import CastrAPIError, CastrAuthError, CastrError, CastrTransportError
from services.logging_service import LoggingService

class ErrorHandler:
    """Handles command errors and logs them"""

    def __init__(self, logging_service: LoggingService):
        self.logging_service = logging_service
        self.logger = logging.getLogger(__name__)

    async def handle_command_error(self,
                                   ctx: Union[commands.Context, discord.Interaction],
                                   error: Exception) -> None:
        """Handle command errors and send appropriate responses"""
        try:
            await self.logging_service.log_error(error, "Command error")

            error_message = self.get_error_message(error)

            if isinstance(ctx, discord.Interaction):
                if ctx.response.is_done():
                    await ctx.followup.send(error_message, ephemeral=True)
                else:
                    await ctx.response.send_message(error_message, ephemeral=True)
            else:
                await ctx.send(error_message)

        except discord.DiscordException as e:
            self.logger.error(f"Error in error handler: {e}")

    def get_error_message(self, error: Exception) -> str:
        """Get user-friendly error message"""
        if isinstance(error, (commands.MissingPermissions, app_commands.MissingPermissions)):
            return "❌ You don't have permission to use this command."

        elif isinstance(error, (commands.NoPrivateMessage, app_commands.NoPrivateMessage)):
            return "❌ This command can only be used in servers."

        elif isinstance(error, (commands.CommandOnCooldown, app_commands.CommandOnCooldown)):
            return f"❌ Please wait {error.retry_after:.1f}s before using this command again."

        elif isinstance(error, CastrAuthError):
            return "❌ Castr rejected the API credentials. Check the access token and secret key."

        elif isinstance(error, CastrAPIError):
            return f"❌ Castr API error: {error.status} {error.reason}"

        elif isinstance(error, CastrTransportError):
            return f"❌ Could not reach the Castr API: {str(error)}"

        elif isinstance(error, CastrError):
            return f"❌ {str(error)}"

        elif isinstance(error, (ValueError, TypeError)):
            return f"❌ Invalid input: {str(error)}"

        elif isinstance(error, app_commands.TransformerError):
            return f"❌ Invalid input format: {str(error)}"

        else:
            self.logger.error(f"Unexpected error: {type(error).__name__}: {str(error)}")
            return "❌ An unexpected error occurred. Please try again later."
