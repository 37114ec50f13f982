"""Jira Cloud API client using the ``jira`` library."""

from __future__ import annotations

import logging
import time
from typing import Any

import requests as _requests
from jira import JIRA, JIRAError

from issue_insights.core.data_models import IssueFetchResult, Project, StatusSummary
from issue_insights.core.normalizer import normalize_issue
from issue_insights.services.auth_manager import AuthManager

logger = logging.getLogger(__name__)

_PAGE_SIZE = 100
_MAX_RETRIES = 4
_BACKOFF_BASE = 1.0  # seconds
_ISSUE_FIELDS = "summary,status,issuetype,assignee,priority,created,updated"

# statusCategory names used in JQL, keyed by StatusSummary attribute
_CATEGORY_JQL = {
    "open": '"To Do"',
    "in_progress": '"In Progress"',
    "done": '"Done"',
}


class JiraClient:
    """High-level wrapper around the ``jira`` library for project issue data."""

    def __init__(self, auth: AuthManager) -> None:
        self._auth = auth
        self._jira: JIRA | None = None

    # -- connection -----------------------------------------------------------

    def connect_basic(self, url: str, email: str, token: str) -> bool:
        """Connect to Jira using an API token.

        Tries basic auth against the instance URL first (classic unscoped
        tokens).  If that returns 401, resolves the site's ``cloudId`` and
        retries against ``https://api.atlassian.com/ex/jira/{cloudId}``
        which is required for scoped API keys.

        A lightweight ``myself()`` call validates each attempt.
        Returns True on success.
        """
        logger.debug("Connecting to Jira at %s (basic auth)", url)
        try:
            jira = JIRA(server=url, basic_auth=(email, token))
            jira.myself()
            self._jira = jira
            logger.info("Connected to Jira via basic auth (%s)", url)
            return True
        except JIRAError as exc:
            if exc.status_code == 401:
                logger.debug("Basic auth returned 401, trying scoped token via cloud API")
            else:
                logger.error("Failed to connect to Jira: %s", exc)
                self._jira = None
                return False
        except Exception as exc:
            logger.error("Failed to connect to Jira: %s", exc)
            self._jira = None
            return False

        cloud_id = self._auth.cloud_id or self._resolve_cloud_id(url)
        if not cloud_id:
            logger.error("Could not resolve cloudId for %s", url)
            self._jira = None
            return False

        cloud_url = f"https://api.atlassian.com/ex/jira/{cloud_id}"
        logger.debug("Retrying with cloud API URL %s", cloud_url)
        try:
            jira = JIRA(server=cloud_url, basic_auth=(email, token))
            jira.myself()
            self._jira = jira
            if not self._auth.cloud_id:
                self._auth.set_cloud_id(cloud_id)
            logger.info("Connected to Jira via scoped API key (cloud_id=%s)", cloud_id)
            return True
        except Exception as exc:
            logger.error("Failed to connect to Jira (scoped token): %s", exc)
            self._jira = None
            return False

    @staticmethod
    def _resolve_cloud_id(instance_url: str) -> str | None:
        """Fetch the cloudId from the instance's ``_edge/tenant_info`` endpoint."""
        tenant_url = f"{instance_url.rstrip('/')}/_edge/tenant_info"
        logger.debug("Resolving cloudId from %s", tenant_url)
        try:
            resp = _requests.get(tenant_url, timeout=10)
            resp.raise_for_status()
            cloud_id = resp.json().get("cloudId", "")
            if cloud_id:
                logger.info("Resolved cloudId=%s from %s", cloud_id, instance_url)
            return cloud_id or None
        except (_requests.RequestException, ValueError) as exc:
            logger.warning("Failed to resolve cloudId from %s: %s", tenant_url, exc)
            return None

    def connect_from_config(self) -> bool:
        """Connect with the credentials held by the :class:`AuthManager`."""
        if self._auth.auth_method != "api_token":
            logger.debug("No auth_method configured, skipping connect")
            return False
        api_token = self._auth.get_api_token()
        if not api_token:
            logger.warning("Cannot connect: no API token in keyring")
            return False
        return self.connect_basic(self._auth.jira_url, self._auth.jira_email, api_token)

    @property
    def connected(self) -> bool:
        """Return True when the Jira session is active."""
        return self._jira is not None

    # -- user info ------------------------------------------------------------

    def get_myself(self) -> dict[str, str] | None:
        """Fetch the authenticated user's display name and e-mail."""
        if not self._jira:
            return None
        try:
            me = self._jira.myself()
            name = me.get("displayName", "")
            logger.info("Authenticated as %s", name)
            return {
                "displayName": name,
                "emailAddress": me.get("emailAddress", ""),
            }
        except (JIRAError, _requests.RequestException) as exc:
            logger.error("myself() failed: %s", exc)
            return None

    # -- projects -------------------------------------------------------------

    def fetch_projects(self, with_summary: bool = False) -> list[Project]:
        """Return every project visible to the user.

        With *with_summary*, each project also gets its status-category
        counts (three extra JQL counts per project).
        """
        if not self._jira:
            return []
        logger.debug("Fetching projects")
        try:
            raw_projects = self._jira.projects()
        except (JIRAError, _requests.RequestException) as exc:
            logger.error("Failed to fetch projects: %s", exc)
            return []

        projects = [
            Project(
                id=str(getattr(p, "id", "")),
                key=p.key,
                name=getattr(p, "name", p.key),
                project_type=getattr(p, "projectTypeKey", "") or "",
            )
            for p in raw_projects
        ]
        if with_summary:
            for p in projects:
                p.summary = self.fetch_project_summary(p.key)
        logger.info("Fetched %d projects", len(projects))
        return projects

    def fetch_project(self, project_key: str) -> Project | None:
        """Return details for a single project, or ``None`` when unavailable."""
        if not self._jira:
            return None
        logger.debug("Fetching project %s", project_key)
        try:
            proj = self._jira.project(project_key)
        except (JIRAError, _requests.RequestException) as exc:
            logger.warning("Could not fetch project %s: %s", project_key, exc)
            return None
        lead = getattr(proj, "lead", None)
        return Project(
            id=str(getattr(proj, "id", "")),
            key=proj.key,
            name=getattr(proj, "name", proj.key),
            project_type=getattr(proj, "projectTypeKey", "") or "",
            description=getattr(proj, "description", "") or "",
            lead=getattr(lead, "displayName", None) if lead else None,
        )

    def count_issues(self, jql: str) -> int:
        """Return the number of issues matching *jql* without fetching them."""
        result = self._search_with_retry(jql, max_results=1, fields="key", json_result=True)
        return int(result.get("total", 0)) if isinstance(result, dict) else 0

    def fetch_project_summary(self, project_key: str) -> StatusSummary:
        """Count a project's issues per status category.

        Categories that fail to load count as zero.
        """
        summary = StatusSummary()
        if not self._jira:
            return summary
        for attr, category in _CATEGORY_JQL.items():
            jql = f'project = "{project_key}" AND statusCategory = {category}'
            try:
                setattr(summary, attr, self.count_issues(jql))
            except (JIRAError, _requests.RequestException) as exc:
                logger.error(
                    "Failed to count %s issues for %s: %s", attr, project_key, exc,
                )
        summary.total = summary.open + summary.in_progress + summary.done
        return summary

    # -- issues ---------------------------------------------------------------

    def fetch_issues(self, project_key: str, max_issues: int = 200) -> IssueFetchResult:
        """Fetch up to *max_issues* of a project's issues, newest update first.

        Never raises: failures come back as an empty result with ``errors``.
        """
        result = IssueFetchResult(project_key=project_key)
        if not self._jira:
            result.errors.append("Not connected to Jira")
            return result

        jql = f'project = "{project_key}" ORDER BY updated DESC'
        logger.info("Fetching issues for %s (max %d)", project_key, max_issues)
        start = 0
        try:
            while start < max_issues:
                page = min(_PAGE_SIZE, max_issues - start)
                raws = self._search_with_retry(
                    jql, start_at=start, max_results=page, fields=_ISSUE_FIELDS,
                )
                if not raws:
                    break
                result.issues.extend(normalize_issue(r.raw) for r in raws)
                if len(raws) < page:
                    break
                start += page
        except JIRAError as exc:
            msg = f"Failed to fetch issues for {project_key}: {exc.text or exc}"
            logger.error(msg)
            result.issues = []
            result.errors.append(msg)
        except _requests.RequestException as exc:
            msg = f"Network error fetching issues for {project_key}: {exc}"
            logger.error(msg)
            result.issues = []
            result.errors.append(msg)

        logger.info("Fetched %d issues for %s", len(result.issues), project_key)
        return result

    # -- internals ------------------------------------------------------------

    def _search_with_retry(
        self,
        jql: str,
        *,
        start_at: int = 0,
        max_results: int = _PAGE_SIZE,
        fields: str | None = None,
        json_result: bool = False,
    ) -> Any:
        """Execute a JQL search with exponential backoff on 429."""
        assert self._jira is not None, "call connect_basic() first"
        for attempt in range(_MAX_RETRIES):
            try:
                return self._jira.search_issues(
                    jql, startAt=start_at, maxResults=max_results,
                    fields=fields, json_result=json_result,
                )
            except JIRAError as exc:
                if exc.status_code == 429 and attempt < _MAX_RETRIES - 1:
                    delay = _BACKOFF_BASE * (2**attempt)
                    logger.warning("Rate limited, retrying in %.1fs", delay)
                    time.sleep(delay)
                    continue
                raise

        return []  # unreachable, but satisfies type checker
