"""
Bouncer - Panel Views
=====================

The bouncer panel: one button per configured role plus "Enter Code",
which opens the access code modal.

DESIGN:
    Buttons are DynamicItems keyed by custom_id, so panels posted before
    a restart keep working once setup_bouncer_views() has registered
    them. A role button whose id was removed from the config answers
    with an error instead of failing silently.
"""

from typing import TYPE_CHECKING, Sequence, Tuple

import discord

from bouncer.core.config import EmbedColors, RoleButtonSpec
from bouncer.core.constants import CODE_MAX_LENGTH
from bouncer.core.logger import logger
from bouncer.services.gate.roles import GRANT_FAILED_MESSAGE, grant_roles
from bouncer.services.gate.service import CONTACT_ADMIN_MESSAGE, TRY_LATER_MESSAGE
from bouncer.utils.interaction import safe_respond

if TYPE_CHECKING:
    from bouncer.bot import BouncerBot


PANEL_IMAGE_URL = "https://media0.giphy.com/media/m9XcY7KSHk6yRRA78C/giphy.gif"
PANEL_FOOTER = "Press for role or Enter secret code"

BUTTON_STYLES = {
    "primary": discord.ButtonStyle.primary,
    "secondary": discord.ButtonStyle.secondary,
    "success": discord.ButtonStyle.success,
    "danger": discord.ButtonStyle.danger,
}


# =============================================================================
# Code Entry Modal
# =============================================================================

class CodeEntryModal(discord.ui.Modal, title="Enter Access Code"):
    """Single short text input handed to the AccessGate."""

    def __init__(self) -> None:
        super().__init__(custom_id="bouncer:code_entry")

        self.code = discord.ui.TextInput(
            label="Enter your access code",
            style=discord.TextStyle.short,
            placeholder="Enter code here...",
            required=True,
            max_length=CODE_MAX_LENGTH,
        )
        self.add_item(self.code)

    async def on_submit(self, interaction: discord.Interaction) -> None:
        gate = getattr(interaction.client, "access_gate", None)
        if gate is None:
            logger.error("Code Entry Without Gate", [
                ("User", f"{interaction.user} ({interaction.user.id})"),
            ])
            await safe_respond(interaction, CONTACT_ADMIN_MESSAGE, ephemeral=True)
            return

        await gate.submit(interaction, self.code.value)

    async def on_error(self, interaction: discord.Interaction, error: Exception) -> None:
        logger.error("Code Entry Modal Error", [
            ("User", f"{interaction.user} ({interaction.user.id})"),
            ("Error Type", type(error).__name__),
            ("Error", str(error)[:100]),
        ])
        await safe_respond(interaction, TRY_LATER_MESSAGE, ephemeral=True)


# =============================================================================
# Dynamic Items (Persistent Buttons)
# =============================================================================

class RoleButton(discord.ui.DynamicItem[discord.ui.Button], template=r"bouncer:role:(?P<button_id>[\w-]+)"):
    """Grants the roles configured for `button_id`."""

    def __init__(self, button_id: str, label: str = "Role", style: str = "primary") -> None:
        super().__init__(
            discord.ui.Button(
                label=label,
                style=BUTTON_STYLES.get(style, discord.ButtonStyle.primary),
                custom_id=f"bouncer:role:{button_id}",
            )
        )
        self.button_id = button_id

    @classmethod
    def from_spec(cls, spec: RoleButtonSpec) -> "RoleButton":
        return cls(spec.id, label=spec.label, style=spec.style)

    @classmethod
    async def from_custom_id(
        cls,
        interaction: discord.Interaction,
        item: discord.ui.Button,
        match,
    ) -> "RoleButton":
        return cls(match.group("button_id"), label=item.label or "Role")

    async def callback(self, interaction: discord.Interaction) -> None:
        config = getattr(interaction.client, "config", None)
        spec = config.permissions.role_button(self.button_id) if config else None
        member = interaction.user

        if spec is None or not isinstance(member, discord.Member):
            logger.warning("Role Button Not Configured", [
                ("User", f"{member} ({member.id})"),
                ("Button", self.button_id),
            ])
            await safe_respond(interaction, GRANT_FAILED_MESSAGE, ephemeral=True)
            return

        result = await grant_roles(member, spec.roles, config.gate.unverified_role)

        logger.tree("Role Button Pressed", [
            ("User", f"{member} ({member.id})"),
            ("Button", spec.id),
            ("Success", "✅" if result.success else "❌"),
        ], emoji="🎭")

        await safe_respond(interaction, result.message, ephemeral=True)


class EnterCodeButton(discord.ui.DynamicItem[discord.ui.Button], template=r"bouncer:enter_code"):
    """Opens the access code modal."""

    def __init__(self) -> None:
        super().__init__(
            discord.ui.Button(
                label="Enter Code",
                style=discord.ButtonStyle.danger,
                custom_id="bouncer:enter_code",
            )
        )

    @classmethod
    async def from_custom_id(
        cls,
        interaction: discord.Interaction,
        item: discord.ui.Button,
        match,
    ) -> "EnterCodeButton":
        return cls()

    async def callback(self, interaction: discord.Interaction) -> None:
        try:
            await interaction.response.send_modal(CodeEntryModal())
        except discord.HTTPException as e:
            logger.error("Failed To Show Code Modal", [
                ("User", f"{interaction.user} ({interaction.user.id})"),
                ("Error", str(e)[:100]),
            ])
            await safe_respond(interaction, GRANT_FAILED_MESSAGE, ephemeral=True)


# =============================================================================
# Panel
# =============================================================================

class BouncerView(discord.ui.View):
    """Persistent panel view: role buttons then Enter Code."""

    def __init__(self, role_buttons: Sequence[RoleButtonSpec]) -> None:
        super().__init__(timeout=None)

        for spec in role_buttons:
            self.add_item(RoleButton.from_spec(spec))
        self.add_item(EnterCodeButton())


def build_bouncer_message(role_buttons: Sequence[RoleButtonSpec]) -> Tuple[discord.Embed, BouncerView]:
    """Embed and view posted by the buildbouncer command."""
    embed = discord.Embed(color=EmbedColors.BOUNCER)
    embed.set_image(url=PANEL_IMAGE_URL)
    embed.set_footer(text=PANEL_FOOTER)
    return embed, BouncerView(role_buttons)


def setup_bouncer_views(bot: "BouncerBot") -> None:
    """Register the panel's dynamic items so old panels keep working."""
    bot.add_dynamic_items(RoleButton, EnterCodeButton)


__all__ = [
    "BouncerView",
    "CodeEntryModal",
    "EnterCodeButton",
    "RoleButton",
    "build_bouncer_message",
    "setup_bouncer_views",
]
