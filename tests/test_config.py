"""
Tests for bouncer/core/config.py

Covers the permissions file schema, defaults and fail-fast validation,
plus environment loading.
"""

import json

import pytest

from bouncer.core import config as config_module
from bouncer.core.config import (
    ConfigValidationError,
    load_config,
    load_permissions,
    parse_permissions,
)


# =============================================================================
# Permissions File
# =============================================================================

class TestParsePermissions:
    """Tests for parse_permissions()."""

    def test_valid_file(self, permissions_data):
        permissions = parse_permissions(permissions_data)

        assert permissions.gate.admin_role == "Admin"
        assert permissions.gate.log_channel_id == 444555666
        assert permissions.gate.max_attempts == 5
        assert permissions.gate.roles_for("backstage") == ("Member", "Crew")
        assert permissions.permission_roles == ("Admin", "Moderator", "Helper")
        assert permissions.role_button("visitor").roles == ("Visitor",)

    def test_code_lookup_is_exact(self, permissions):
        assert permissions.gate.roles_for("Open-Sesame") is None
        assert permissions.gate.roles_for("open-sesame ") is None

    def test_defaults(self):
        permissions = parse_permissions({"adminConfig": {"adminRole": "Admin", "logChannel": 1}})

        assert permissions.gate.unverified_role == "RANDO"
        assert permissions.gate.max_attempts == 5
        assert permissions.gate.codes == {}
        assert permissions.role_buttons == ()

    def test_unlisted_command_gets_default_rule(self, permissions):
        rule = permissions.command_rule("purge")

        assert rule.description == "No description available"
        assert rule.public is False
        assert rule.roles == ()
        assert rule.cooldown.duration == 3
        assert rule.cooldown.usages == 1

    def test_command_rule(self, permissions):
        rule = permissions.command_rule("kick")

        assert rule.roles == ("Moderator",)
        assert rule.cooldown.duration == 10

    def test_role_button_style_default(self, permissions):
        assert permissions.role_button("visitor").style == "primary"
        assert permissions.role_button("missing") is None

    @pytest.mark.parametrize("admin_config", [
        {"logChannel": 1},
        {"adminRole": "", "logChannel": 1},
        {"adminRole": "Admin"},
        {"adminRole": "Admin", "logChannel": "not-a-number"},
        {"adminRole": "Admin", "logChannel": 1, "maxAttempts": 0},
        {"adminRole": "Admin", "logChannel": 1, "maxAttempts": 9},
        {"adminRole": "Admin", "logChannel": 1, "maxAttempts": "5"},
        {"adminRole": "Admin", "logChannel": 1, "maxAttempts": True},
        {"adminRole": "Admin", "logChannel": 1, "codes": {"a": ["b"]}},
        {"adminRole": "Admin", "logChannel": 1, "codes": [{"code": "", "roles": []}]},
        {"adminRole": "Admin", "logChannel": 1, "codes": [{"code": "a", "roles": "Member"}]},
        {"adminRole": "Admin", "logChannel": 1, "roleButtons": [{"id": "x"}]},
        {"adminRole": "Admin", "logChannel": 1, "roleButtons": [{"id": "x", "label": "X", "roles": [], "style": "blue"}]},
    ])
    def test_invalid_admin_config(self, admin_config):
        with pytest.raises(ConfigValidationError):
            parse_permissions({"adminConfig": admin_config})

    def test_missing_admin_config(self):
        with pytest.raises(ConfigValidationError):
            parse_permissions({"commands": {}})

    def test_duplicate_codes_rejected(self):
        data = {"adminConfig": {
            "adminRole": "Admin",
            "logChannel": 1,
            "codes": [{"code": "a", "roles": ["X"]}, {"code": "a", "roles": ["Y"]}],
        }}
        with pytest.raises(ConfigValidationError):
            parse_permissions(data)

    def test_duplicate_button_ids_rejected(self):
        data = {"adminConfig": {
            "adminRole": "Admin",
            "logChannel": 1,
            "roleButtons": [
                {"id": "a", "label": "A", "roles": ["X"]},
                {"id": "a", "label": "B", "roles": ["Y"]},
            ],
        }}
        with pytest.raises(ConfigValidationError):
            parse_permissions(data)

    def test_invalid_cooldown_rejected(self, permissions_data):
        permissions_data["commands"]["ping"]["cooldown"] = {"duration": -1, "usages": 1}
        with pytest.raises(ConfigValidationError):
            parse_permissions(permissions_data)


class TestLoadPermissions:
    def test_reads_file(self, tmp_path, permissions_data):
        path = tmp_path / "permissions.json"
        path.write_text(json.dumps(permissions_data), encoding="utf-8")

        assert load_permissions(path).gate.admin_role == "Admin"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigValidationError):
            load_permissions(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "permissions.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigValidationError):
            load_permissions(path)


# =============================================================================
# Environment
# =============================================================================

class TestLoadConfig:
    """Tests for load_config()."""

    @pytest.fixture
    def permissions_file(self, tmp_path, permissions_data, monkeypatch):
        path = tmp_path / "permissions.json"
        path.write_text(json.dumps(permissions_data), encoding="utf-8")
        monkeypatch.setenv("PERMISSIONS_FILE", str(path))
        for name in ("COMMAND_PREFIX", "DEVELOPER_ID", "ERROR_WEBHOOK_URL"):
            monkeypatch.delenv(name, raising=False)
        return path

    def test_requires_token(self, permissions_file, monkeypatch):
        monkeypatch.delenv("DISCORD_TOKEN", raising=False)
        with pytest.raises(ConfigValidationError):
            load_config()

    def test_defaults(self, permissions_file, monkeypatch):
        monkeypatch.setenv("DISCORD_TOKEN", "token")

        config = load_config()

        assert config.command_prefix == "//"
        assert config.developer_id is None
        assert config.error_webhook_url is None
        assert config.gate.admin_role == "Admin"

    def test_optional_values(self, permissions_file, monkeypatch):
        monkeypatch.setenv("DISCORD_TOKEN", "token")
        monkeypatch.setenv("COMMAND_PREFIX", "!")
        monkeypatch.setenv("DEVELOPER_ID", "1234")
        monkeypatch.setenv("ERROR_WEBHOOK_URL", "https://example.com/hook")

        config = load_config()

        assert config.command_prefix == "!"
        assert config.developer_id == 1234
        assert config.error_webhook_url == "https://example.com/hook"

    def test_invalid_webhook_ignored(self, permissions_file, monkeypatch):
        monkeypatch.setenv("DISCORD_TOKEN", "token")
        monkeypatch.setenv("ERROR_WEBHOOK_URL", "ftp://example.com")

        assert load_config().error_webhook_url is None

    def test_get_config_is_cached(self, permissions_file, monkeypatch):
        monkeypatch.setenv("DISCORD_TOKEN", "token")
        monkeypatch.setattr(config_module, "_config", None)

        assert config_module.get_config() is config_module.get_config()
