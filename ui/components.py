import discord
from discord import ui
from typing import Optional

from services.castr_client import CastrError
from services.stream_directory import DirectorySnapshot, StreamRecord
from services.view_publisher import OnOffToggle
from utils.permissions import PermissionChecker

MAX_BUTTONS = 25

class StreamToggleButton(ui.Button):
    def __init__(self, stream: StreamRecord, bot: discord.Client):
        self.stream_id = stream.id
        self.stream_name = stream.name
        self.bot = bot
        super().__init__(
            style=discord.ButtonStyle.success if stream.enabled else discord.ButtonStyle.danger,
            label=f"{'Disable' if stream.enabled else 'Enable'}: {stream.name}"[:80]
        )

    async def callback(self, interaction: discord.Interaction):
        """Handle button click"""
        if not PermissionChecker.can_control(interaction.user):
            await interaction.response.send_message(
                "You don't have permission to change streams.",
                ephemeral=True
            )
            return

        await interaction.response.defer(ephemeral=True)
        try:
            ok = await self.bot.sync_service.enable_stream(self.stream_id, OnOffToggle.TOGGLE)
        except CastrError as e:
            await self.bot.logging_service.log_error(e, f"Error toggling stream {self.stream_name}")
            ok = False

        message = (f"Toggled stream `{self.stream_name}`." if ok
                   else f"Failed to toggle stream `{self.stream_name}`.")
        await interaction.followup.send(message, ephemeral=True)

class StreamControlView(ui.View):
    def __init__(self, snapshot: DirectorySnapshot, bot: discord.Client, timeout: Optional[float] = 900.0):
        super().__init__(timeout=timeout)
        self.bot = bot
        self.message: Optional[discord.Message] = None

        for stream in snapshot.streams[:MAX_BUTTONS]:
            self.add_item(StreamToggleButton(stream, bot))

    async def on_timeout(self) -> None:
        """Disable buttons once the view expires"""
        for item in self.children:
            item.disabled = True

        if self.message is None:
            return
        try:
            await self.message.edit(view=self)
        except discord.NotFound:
            pass
        except discord.HTTPException as e:
            await self.bot.logging_service.log_error(e, "Error in view timeout")
