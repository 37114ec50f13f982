"""Tests for issue_insights.services.auth_manager."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

from issue_insights.services.auth_manager import KEYRING_SERVICE, AuthManager
from issue_insights.services.config_manager import ConfigManager


def _make_config(tmp_path: Path) -> ConfigManager:
    """Isolated ConfigManager backed by *tmp_path*."""
    mgr = ConfigManager(config_dir=tmp_path)
    mgr.reset()
    return mgr


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------


class TestProperties:
    """Property helpers should reflect config state."""

    def test_auth_method_empty(self, tmp_path: Path) -> None:
        auth = AuthManager(_make_config(tmp_path))
        assert auth.auth_method == ""

    def test_cloud_id(self, tmp_path: Path) -> None:
        cfg = _make_config(tmp_path)
        cfg.set("cloud_id", "abc123")
        assert AuthManager(cfg).cloud_id == "abc123"

    def test_site_details_from_config(self, tmp_path: Path) -> None:
        cfg = _make_config(tmp_path)
        cfg.update({
            "auth_method": "api_token",
            "jira_url": "https://x.atlassian.net",
            "jira_email": "a@b.com",
            "site_name": "x",
        })
        auth = AuthManager(cfg)
        assert (auth.auth_method, auth.jira_url, auth.jira_email, auth.site_name) == (
            "api_token", "https://x.atlassian.net", "a@b.com", "x",
        )


# ---------------------------------------------------------------------------
# API-token auth
# ---------------------------------------------------------------------------


class TestApiTokenAuth:
    """API-token login stores token in keyring and config."""

    @patch("issue_insights.services.auth_manager.keyring")
    def test_login_api_token_stores_credentials(
        self, mock_keyring: MagicMock, tmp_path: Path,
    ) -> None:
        cfg = _make_config(tmp_path)
        auth = AuthManager(cfg)
        auth.login_api_token("https://company.atlassian.net/", "a@b.com", "tok123")

        mock_keyring.set_password.assert_called_once_with(
            KEYRING_SERVICE, "api_token", "tok123",
        )
        assert cfg.get("auth_method") == "api_token"
        assert cfg.get("jira_url") == "https://company.atlassian.net"
        assert cfg.get("jira_email") == "a@b.com"
        assert cfg.get("site_name") == "company"

    @patch("issue_insights.services.auth_manager.keyring")
    def test_get_api_token_delegates_to_keyring(
        self, mock_keyring: MagicMock, tmp_path: Path,
    ) -> None:
        mock_keyring.get_password.return_value = "secret-tok"
        auth = AuthManager(_make_config(tmp_path))
        assert auth.get_api_token() == "secret-tok"
        mock_keyring.get_password.assert_called_with(KEYRING_SERVICE, "api_token")


# ---------------------------------------------------------------------------
# Logout
# ---------------------------------------------------------------------------


class TestLogout:
    """Logout should clear the keyring entry and config."""

    @patch("issue_insights.services.auth_manager.keyring")
    def test_logout_clears_state(
        self, mock_keyring: MagicMock, tmp_path: Path,
    ) -> None:
        cfg = _make_config(tmp_path)
        cfg.update({"auth_method": "api_token", "cloud_id": "cid", "site_name": "x"})
        auth = AuthManager(cfg)

        auth.logout()

        assert cfg.get("auth_method") == ""
        assert cfg.get("cloud_id") == ""
        assert cfg.get("site_name") == ""
        mock_keyring.delete_password.assert_called_once_with(KEYRING_SERVICE, "api_token")


class TestSetCloudId:
    def test_persists_to_config(self, tmp_path: Path) -> None:
        cfg = _make_config(tmp_path)
        AuthManager(cfg).set_cloud_id("my-cloud")
        assert cfg.get("cloud_id") == "my-cloud"
