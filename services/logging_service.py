import logging
import traceback
import discord
from typing import Optional, Union
from datetime import datetime

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

logger = logging.getLogger(__name__)

class LoggingService:
    """Service for handling logging and mirroring messages to a Discord channel"""

    LEVEL_COLORS = {
        'DEBUG': discord.Color.light_grey(),
        'INFO': discord.Color.blue(),
        'WARNING': discord.Color.yellow(),
        'ERROR': discord.Color.red(),
        'CRITICAL': discord.Color.dark_red()
    }

    def __init__(self, log_level: str = 'INFO', log_channel_id: Optional[int] = None):
        """Initialize logging service"""
        self.bot = None
        self.log_channel_id = log_channel_id

        level = getattr(logging, log_level.upper(), logging.INFO)
        logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
        # basicConfig is a no-op once handlers exist
        logging.getLogger().setLevel(level)
        self.logger = logger

    def set_bot(self, bot: discord.Client) -> None:
        """Set bot instance for Discord channel logging"""
        self.bot = bot

    def _get_level_color(self, level: str) -> discord.Color:
        """Get color for log level"""
        return self.LEVEL_COLORS.get(level, discord.Color.default())

    async def log_debug(self, message: str) -> None:
        """Log debug message (console only)"""
        self.logger.debug(message)

    async def log_info(self, message: str) -> None:
        """Log info message"""
        self.logger.info(message)
        await self._log_to_discord("INFO", message)

    async def log_warning(self, message: str) -> None:
        """Log warning message"""
        self.logger.warning(message)
        await self._log_to_discord("WARNING", message)

    async def log_error(self, error: Union[Exception, str], context: str = "") -> None:
        """Log error message with optional context"""
        error_message = f"{context}: {str(error)}" if context else str(error)
        self.logger.error(error_message)
        await self._log_to_discord("ERROR", error_message, error if isinstance(error, Exception) else None)

    async def _log_to_discord(self, level: str, message: str, error: Optional[Exception] = None) -> None:
        """Log message to Discord channel if configured"""
        if not self.bot or not self.log_channel_id:
            return

        try:
            channel = self.bot.get_channel(self.log_channel_id)
            if not channel:
                return

            embed = discord.Embed(
                title=f"Castr Log - {level}",
                description=message[:4000],
                color=self._get_level_color(level),
                timestamp=datetime.now()
            )
            if error is not None and error.__traceback__ is not None:
                tb = ''.join(traceback.format_exception(type(error), error, error.__traceback__))
                if len(tb) > 1000:
                    tb = tb[:997] + "..."
                embed.add_field(name="Traceback", value=f"```python\n{tb}```", inline=False)

            await channel.send(embed=embed)
        except discord.DiscordException as e:
            self.logger.error(f"Failed to log to Discord: {e}")
