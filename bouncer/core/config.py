"""
Bouncer - Configuration Module
==============================

Centralized configuration management with environment and permissions
file validation.

DESIGN:
    Two sources feed one Config object: environment variables (token,
    prefix, developer, webhook) and a permissions JSON file (admin role,
    log channel, access codes, role buttons, per-command rules). Both are
    loaded once at startup and validated fail-fast.

    Key patterns:
    - Singleton pattern via get_config() ensures one Config instance
    - Validation happens once at load time, not on every access
    - Unknown commands fall back to a default rule instead of failing
"""

import os
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from bouncer.core.constants import (
    DEFAULT_COOLDOWN_SECONDS,
    DEFAULT_COOLDOWN_USAGES,
    DEFAULT_PREFIX,
    DEFAULT_UNVERIFIED_ROLE,
    MAX_ATTEMPTS,
    MAX_ATTEMPTS_LIMIT,
)


DEFAULT_PERMISSIONS_FILE = "config/permissions.json"
BUTTON_STYLES = ("primary", "secondary", "success", "danger")


# =============================================================================
# Configuration Dataclasses
# =============================================================================

@dataclass(frozen=True)
class CooldownRule:
    """Sliding-window limit: at most `usages` calls per `duration` seconds."""

    duration: float = DEFAULT_COOLDOWN_SECONDS
    usages: int = DEFAULT_COOLDOWN_USAGES


@dataclass(frozen=True)
class CommandRule:
    """Who may run a command and how often."""

    name: str
    description: str = "No description available"
    roles: Tuple[str, ...] = ()
    public: bool = False
    cooldown: CooldownRule = field(default_factory=CooldownRule)


@dataclass(frozen=True)
class RoleButtonSpec:
    """One self-serve role button on the bouncer panel."""

    id: str
    label: str
    roles: Tuple[str, ...]
    style: str = "primary"


@dataclass(frozen=True)
class GateConfig:
    """
    Settings consumed by the code-entry gate.

    Attributes:
        admin_role: Role name mentioned in lockout alerts.
        log_channel_id: Channel holding tracking records and audit embeds.
        codes: Exact code string -> role names to grant.
        unverified_role: Role removed once access is granted.
        max_attempts: Failed codes allowed before lockout.
    """

    admin_role: str
    log_channel_id: int
    codes: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    unverified_role: str = DEFAULT_UNVERIFIED_ROLE
    max_attempts: int = MAX_ATTEMPTS

    def roles_for(self, code: str) -> Optional[Tuple[str, ...]]:
        """Return the roles for an exact code match, or None."""
        return self.codes.get(code)


@dataclass(frozen=True)
class PermissionsConfig:
    """Parsed contents of the permissions file."""

    gate: GateConfig
    permission_roles: Tuple[str, ...] = ()
    role_buttons: Tuple[RoleButtonSpec, ...] = ()
    commands: Dict[str, CommandRule] = field(default_factory=dict)

    def command_rule(self, name: str) -> CommandRule:
        """Return the rule for a command, or the default rule if unlisted."""
        return self.commands.get(name) or CommandRule(name=name)

    def role_button(self, button_id: str) -> Optional[RoleButtonSpec]:
        for spec in self.role_buttons:
            if spec.id == button_id:
                return spec
        return None


@dataclass
class Config:
    """
    Bot configuration loaded from the environment and permissions file.

    Attributes:
        discord_token: Discord bot authentication token.
        permissions: Parsed permissions file.
        command_prefix: Prefix for text commands.
        developer_id: User who always passes permission checks.
        error_webhook_url: Webhook receiving error trees from the logger.
        permissions_file: Where the permissions were loaded from.
    """

    discord_token: str
    permissions: PermissionsConfig
    command_prefix: str = DEFAULT_PREFIX
    developer_id: Optional[int] = None
    error_webhook_url: Optional[str] = None
    permissions_file: str = DEFAULT_PERMISSIONS_FILE

    @property
    def gate(self) -> GateConfig:
        return self.permissions.gate


# =============================================================================
# Embed Colors
# =============================================================================

class EmbedColors:
    """Standardized color palette for Discord embeds."""

    GREEN = 0x00FF00
    RED = 0xFF0000
    ORANGE = 0xFFA500
    BOUNCER = 0xFF4444
    BLURPLE = 0x5865F2
    GOLD = 0xE6B84A

    # Semantic aliases
    TRACKING_ACTIVE = ORANGE    # 🔒 Attempts in progress
    TRACKING_RESOLVED = GREEN   # ✅ Session concluded
    ALERT = RED                 # 🚨 Lockout alerts
    SUCCESS = GREEN
    INFO = BLURPLE
    WARNING = GOLD


# =============================================================================
# Validation
# =============================================================================

class ConfigValidationError(Exception):
    """Raised when required configuration is missing or invalid."""

    pass


def _parse_int_optional(value: Optional[str]) -> Optional[int]:
    """
    Parse optional string to integer, returning None on failure.

    Args:
        value: String value from environment variable, may be None.

    Returns:
        Parsed integer or None if parsing fails.
    """
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _validate_url(value: Optional[str], name: str) -> Optional[str]:
    """
    Validate URL format for webhooks.

    Returns:
        URL if valid, None if invalid or empty.
    """
    if not value:
        return None
    if not value.startswith(("https://", "http://")):
        from bouncer.core.logger import logger
        logger.warning(f"Config {name} invalid URL format, ignoring")
        return None
    return value


def _parse_id(value: Any, name: str) -> int:
    """Parse a Discord snowflake given as int or numeric string."""
    if value is None or value == "":
        raise ConfigValidationError(f"Missing required: {name}")
    if isinstance(value, bool):
        raise ConfigValidationError(f"Invalid id for {name}: {value}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigValidationError(f"Invalid id for {name}: {value}")


def _parse_names(value: Any, name: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigValidationError(f"{name} must be a list of role names")
    return tuple(value)


def _parse_codes(raw: Any) -> Dict[str, Tuple[str, ...]]:
    if raw is None:
        return {}
    if not isinstance(raw, list):
        raise ConfigValidationError("adminConfig.codes must be a list")

    codes: Dict[str, Tuple[str, ...]] = {}
    for i, entry in enumerate(raw):
        if not isinstance(entry, dict) or not isinstance(entry.get("code"), str) or not entry["code"]:
            raise ConfigValidationError(f"adminConfig.codes[{i}] needs a non-empty 'code'")
        code = entry["code"]
        if code in codes:
            raise ConfigValidationError(f"Duplicate access code at adminConfig.codes[{i}]")
        codes[code] = _parse_names(entry.get("roles"), f"adminConfig.codes[{i}].roles")
    return codes


def _parse_role_buttons(raw: Any) -> Tuple[RoleButtonSpec, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ConfigValidationError("adminConfig.roleButtons must be a list")

    buttons: List[RoleButtonSpec] = []
    seen = set()
    for i, entry in enumerate(raw):
        if not isinstance(entry, dict) or not entry.get("id") or not entry.get("label"):
            raise ConfigValidationError(f"adminConfig.roleButtons[{i}] needs 'id' and 'label'")
        button_id = str(entry["id"])
        if button_id in seen:
            raise ConfigValidationError(f"Duplicate role button id: {button_id}")
        seen.add(button_id)

        style = str(entry.get("style", "primary")).lower()
        if style not in BUTTON_STYLES:
            raise ConfigValidationError(
                f"adminConfig.roleButtons[{i}].style must be one of {', '.join(BUTTON_STYLES)}"
            )
        buttons.append(RoleButtonSpec(
            id=button_id,
            label=str(entry["label"]),
            roles=_parse_names(entry.get("roles"), f"adminConfig.roleButtons[{i}].roles"),
            style=style,
        ))
    return tuple(buttons)


def _parse_commands(raw: Any) -> Dict[str, CommandRule]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigValidationError("commands must be an object keyed by command name")

    rules: Dict[str, CommandRule] = {}
    for name, entry in raw.items():
        if not isinstance(entry, dict):
            raise ConfigValidationError(f"commands.{name} must be an object")

        cooldown_raw = entry.get("cooldown") or {}
        try:
            cooldown = CooldownRule(
                duration=float(cooldown_raw.get("duration", DEFAULT_COOLDOWN_SECONDS)),
                usages=int(cooldown_raw.get("usages", DEFAULT_COOLDOWN_USAGES)),
            )
        except (TypeError, ValueError, AttributeError):
            raise ConfigValidationError(f"commands.{name}.cooldown is invalid")
        if cooldown.duration < 0 or cooldown.usages < 1:
            raise ConfigValidationError(f"commands.{name}.cooldown is out of range")

        rules[name] = CommandRule(
            name=name,
            description=str(entry.get("description", "No description available")),
            roles=_parse_names(entry.get("roles"), f"commands.{name}.roles"),
            public=bool(entry.get("public", False)),
            cooldown=cooldown,
        )
    return rules


def parse_permissions(data: Dict[str, Any]) -> PermissionsConfig:
    """
    Build a PermissionsConfig from the decoded permissions file.

    Raises:
        ConfigValidationError: If a required key is missing or malformed.
    """
    if not isinstance(data, dict):
        raise ConfigValidationError("Permissions file must contain a JSON object")

    admin = data.get("adminConfig")
    if not isinstance(admin, dict):
        raise ConfigValidationError("Missing required: adminConfig")

    admin_role = admin.get("adminRole")
    if not isinstance(admin_role, str) or not admin_role:
        raise ConfigValidationError("Missing required: adminConfig.adminRole")

    max_attempts = admin.get("maxAttempts", MAX_ATTEMPTS)
    if isinstance(max_attempts, bool) or not isinstance(max_attempts, int) or not 1 <= max_attempts <= MAX_ATTEMPTS_LIMIT:
        raise ConfigValidationError(
            f"adminConfig.maxAttempts must be an integer from 1 to {MAX_ATTEMPTS_LIMIT}: {max_attempts}"
        )

    gate = GateConfig(
        admin_role=admin_role,
        log_channel_id=_parse_id(admin.get("logChannel"), "adminConfig.logChannel"),
        codes=_parse_codes(admin.get("codes")),
        unverified_role=str(admin.get("unverifiedRole") or DEFAULT_UNVERIFIED_ROLE),
        max_attempts=max_attempts,
    )

    return PermissionsConfig(
        gate=gate,
        permission_roles=_parse_names(admin.get("rolesTotal"), "adminConfig.rolesTotal"),
        role_buttons=_parse_role_buttons(admin.get("roleButtons")),
        commands=_parse_commands(data.get("commands")),
    )


def load_permissions(path: Path) -> PermissionsConfig:
    """Read and parse the permissions JSON file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigValidationError(f"Permissions file not found: {path}")
    except json.JSONDecodeError as e:
        raise ConfigValidationError(f"Permissions file is not valid JSON: {e}")
    return parse_permissions(data)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config() -> Config:
    """
    Load and validate configuration from the environment and permissions file.

    Returns:
        Validated Config object with all settings.

    Raises:
        ConfigValidationError: If required configuration is missing or invalid.
    """
    discord_token = os.getenv("DISCORD_TOKEN")
    if not discord_token:
        raise ConfigValidationError("Missing required: DISCORD_TOKEN")

    permissions_file = os.getenv("PERMISSIONS_FILE") or DEFAULT_PERMISSIONS_FILE

    return Config(
        discord_token=discord_token,
        permissions=load_permissions(Path(permissions_file)),
        command_prefix=os.getenv("COMMAND_PREFIX") or DEFAULT_PREFIX,
        developer_id=_parse_int_optional(os.getenv("DEVELOPER_ID")),
        error_webhook_url=_validate_url(os.getenv("ERROR_WEBHOOK_URL"), "ERROR_WEBHOOK_URL"),
        permissions_file=permissions_file,
    )


# =============================================================================
# Global Config Instance
# =============================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance, loading if needed.

    Raises:
        ConfigValidationError: On first call if config is invalid.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def validate_and_log_config() -> Config:
    """Load the config (raising on invalid input) and log a summary."""
    from bouncer.core.logger import logger

    config = get_config()
    if config.error_webhook_url:
        logger.set_webhook(config.error_webhook_url)
    else:
        logger.info("Optional config not set: ERROR_WEBHOOK_URL")

    if not config.gate.codes:
        logger.warning("No access codes configured, every code entry will fail")

    logger.tree("Configuration Validated", [
        ("Permissions File", config.permissions_file),
        ("Prefix", config.command_prefix),
        ("Admin Role", config.gate.admin_role),
        ("Log Channel", str(config.gate.log_channel_id)),
        ("Access Codes", str(len(config.gate.codes))),
        ("Role Buttons", str(len(config.permissions.role_buttons))),
        ("Max Attempts", str(config.gate.max_attempts)),
    ], emoji="⚙️")
    return config


__all__ = [
    "Config",
    "CommandRule",
    "CooldownRule",
    "ConfigValidationError",
    "EmbedColors",
    "GateConfig",
    "PermissionsConfig",
    "RoleButtonSpec",
    "get_config",
    "load_config",
    "load_permissions",
    "parse_permissions",
    "validate_and_log_config",
]
