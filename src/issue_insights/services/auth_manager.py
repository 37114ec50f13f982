"""Jira API-token credential storage backed by the OS keyring."""

from __future__ import annotations

import logging

import keyring
import keyring.errors

from issue_insights.services.config_manager import ConfigManager

logger = logging.getLogger(__name__)

KEYRING_SERVICE = "issue-insights"
_TOKEN_KEY = "api_token"


class AuthManager:
    """Keep Jira e-mail + API-token credentials.

    The token is stored/retrieved via the OS keyring.  The ``ConfigManager``
    holds the non-secret parts (site URL, e-mail, cloud_id, site name).
    """

    def __init__(self, config: ConfigManager) -> None:
        self._config = config

    # -- public helpers -------------------------------------------------------

    @property
    def auth_method(self) -> str:
        """Return the active auth method: ``"api_token"`` or ``""``."""
        return str(self._config.get("auth_method", ""))

    @property
    def jira_url(self) -> str:
        return str(self._config.get("jira_url", ""))

    @property
    def jira_email(self) -> str:
        return str(self._config.get("jira_email", ""))

    @property
    def cloud_id(self) -> str:
        """Return the stored Jira Cloud ID (only set for scoped tokens)."""
        return str(self._config.get("cloud_id", ""))

    @property
    def site_name(self) -> str:
        return str(self._config.get("site_name", ""))

    def set_cloud_id(self, cloud_id: str) -> None:
        """Persist a cloud_id discovered during connection."""
        self._config.set("cloud_id", cloud_id)

    # -- login / logout -------------------------------------------------------

    def login_api_token(self, url: str, email: str, token: str) -> None:
        """Store API-token credentials and persist config."""
        keyring.set_password(KEYRING_SERVICE, _TOKEN_KEY, token)

        # Derive a friendly site name from the URL
        site_name = url.rstrip("/").removeprefix("https://").removeprefix("http://")
        site_name = site_name.removesuffix(".atlassian.net")

        self._config.update({
            "auth_method": "api_token",
            "jira_url": url.rstrip("/"),
            "jira_email": email,
            "site_name": site_name,
            "cloud_id": "",
        })
        logger.info("API-token credentials stored (site=%s)", site_name)

    def get_api_token(self) -> str | None:
        """Retrieve the API token from the OS keyring."""
        try:
            return keyring.get_password(KEYRING_SERVICE, _TOKEN_KEY)
        except keyring.errors.KeyringError as exc:
            logger.warning("Keyring unavailable: %s", exc)
            return None

    def logout(self) -> None:
        """Clear the stored token and site information."""
        logger.info("Logging out, clearing token and site data")
        try:
            keyring.delete_password(KEYRING_SERVICE, _TOKEN_KEY)
        except keyring.errors.PasswordDeleteError:
            logger.debug("No stored API token to delete")
        self._config.update({
            "auth_method": "",
            "jira_url": "",
            "jira_email": "",
            "cloud_id": "",
            "site_name": "",
        })
