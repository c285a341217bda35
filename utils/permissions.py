from discord import Member, TextChannel
from typing import List, Tuple

class PermissionChecker:
    # what the bot needs to post and later redraw a status panel
    PANEL_PERMISSIONS = {
        'view_channel': 'View Channel',
        'send_messages': 'Send Messages',
        'embed_links': 'Embed Links',
        'read_message_history': 'Read Message History'
    }

    @staticmethod
    def can_control(member: Member) -> bool:
        """Only members able to manage the server may change stream state"""
        permissions = getattr(member, 'guild_permissions', None)
        return bool(permissions and (permissions.manage_guild or permissions.administrator))

    @staticmethod
    def missing_panel_permissions(member: Member, channel: TextChannel) -> List[str]:
        channel_permissions = channel.permissions_for(member)
        return [
            description
            for perm, description in PermissionChecker.PANEL_PERMISSIONS.items()
            if not getattr(channel_permissions, perm, False)
        ]

    @staticmethod
    def check_permissions(member: Member, channel: TextChannel) -> Tuple[bool, str]:
        """Returns (all granted, one "name: ✅/❌" line per panel permission)"""
        missing = PermissionChecker.missing_panel_permissions(member, channel)
        lines = [
            f"{description}: {'❌' if description in missing else '✅'}"
            for description in PermissionChecker.PANEL_PERMISSIONS.values()
        ]
        return not missing, "\n".join(lines)
