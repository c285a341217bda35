import asyncio
import logging
import discord
from discord.ext import commands

from cogs.castr_commands import CastrCommands
from services.config_manager import CastrSettings, ConfigManager
from services.control_surface import BotControlSurface
from services.error_handler import ErrorHandler
from services.logging_service import LOG_DATE_FORMAT, LOG_FORMAT, LoggingService
from services.sync_service import CastrSyncService

logging.basicConfig(
    level=logging.INFO,
    format=LOG_FORMAT,
    datefmt=LOG_DATE_FORMAT,
    handlers=[
        logging.StreamHandler(),
        logging.FileHandler('bot.log')
    ]
)

logger = logging.getLogger(__name__)

class CastrControlBot(commands.Bot):
    def __init__(self, config_manager: ConfigManager, settings: CastrSettings):
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(command_prefix='!', intents=intents)
        self._announced = False
        self.config_manager = config_manager
        self.settings = settings

        logger.info("Initializing services...")
        self.logging_service = LoggingService(settings.log_level, settings.log_channel_id)
        self.logging_service.set_bot(self)
        self.error_handler = ErrorHandler(self.logging_service)
        self.control_surface = BotControlSurface()
        self.sync_service = CastrSyncService(settings, self.control_surface)
        logger.info("Services initialized successfully")

    async def setup_hook(self):
        """Setup bot hooks and initialize services"""
        logger.info("Setting up commands...")
        await self.add_cog(CastrCommands(self, self.error_handler, self.logging_service))

        logger.info("Syncing command tree...")
        await self.tree.sync()

        logger.info("Starting Castr sync service...")
        await self.sync_service.start()
        logger.info("Bot setup completed successfully")

    async def on_ready(self):
        """Called when the bot is ready"""
        if self._announced:
            return
        self._announced = True

        logger.info(f'Logged in as {self.user.name} (ID: {self.user.id})')
        logger.info(f'Connected to {len(self.guilds)} guilds')
        await self.logging_service.log_info(
            f"Castr control ready: {len(self.sync_service.current_snapshot())} stream(s), "
            f"poll interval {self.settings.poll_interval or 'disabled'}"
        )

    async def reload_configuration(self):
        """Re-read config.json / environment and apply it to the sync service"""
        try:
            settings = self.config_manager.get_settings()
        except ValueError as e:
            await self.logging_service.log_error(e, "Invalid configuration, keeping current settings")
            return False

        self.settings = settings
        self.logging_service.log_channel_id = settings.log_channel_id
        await self.sync_service.configure(settings)
        await self.logging_service.log_info("Configuration reloaded")
        return True

    async def close(self):
        """Cleanup before shutdown"""
        try:
            logger.info("Stopping Castr sync service...")
            await self.sync_service.stop()
            logger.info("Cleanup completed")
        finally:
            await super().close()

async def run_bot_async(config_path: str = "config.json"):
    """Run the bot asynchronously"""
    config_manager = ConfigManager(config_path)
    try:
        settings = config_manager.get_settings()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return

    if not settings.discord_token:
        logger.error("DISCORD_TOKEN not found in environment variables or config")
        return
    if not settings.access_token or not settings.secret_key:
        logger.warning("Castr access token or secret key missing, API calls will fail")

    bot = CastrControlBot(config_manager, settings)
    try:
        async with bot:
            logger.info("Starting bot client...")
            await bot.start(settings.discord_token)
    finally:
        logger.info("Bot shutdown complete")

def run_bot():
    """Run the bot"""
    try:
        asyncio.run(run_bot_async())
    except KeyboardInterrupt:
        logger.info("Bot shutdown requested by user")

if __name__ == "__main__":
    run_bot()
