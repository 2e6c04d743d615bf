"""GitHub source for commit revisions and diffs."""

import logging
from typing import Optional

import httpx

from article_monitor.core import SourceClient, SourceIdentity, SourceUnreachable

logger = logging.getLogger(__name__)


class GitHubSource(SourceClient):
    """Read head revisions, recent commits and compare diffs from GitHub."""

    def __init__(
        self,
        token: Optional[str] = None,
        api_base: str = "https://api.github.com",
        timeout: float = 30.0,
    ) -> None:
        self.token = token
        self.api_base = api_base
        self.timeout = timeout

    async def get_head_revision(self, source: SourceIdentity) -> str:
        """Return the SHA at the tip of the source branch."""
        path = f"/repos/{source.owner}/{source.name}/commits/{source.branch}"
        data = await self._get_json(path)
        sha = data.get("sha") if isinstance(data, dict) else None
        if not sha:
            raise SourceUnreachable(f"GitHub returned no SHA for {source}@{source.branch}")
        return sha

    async def list_recent_revisions(self, source: SourceIdentity, count: int) -> list[str]:
        """Return up to ``count`` commit SHAs on the branch, newest first."""
        path = f"/repos/{source.owner}/{source.name}/commits"
        data = await self._get_json(path, params={"sha": source.branch, "per_page": count})
        if not isinstance(data, list):
            raise SourceUnreachable(f"Unexpected commit list payload for {source}")
        return [commit["sha"] for commit in data[:count] if commit.get("sha")]

    async def get_diff(self, source: SourceIdentity, base: str, head: str) -> str:
        """Return the unified diff for ``base...head``."""
        path = f"/repos/{source.owner}/{source.name}/compare/{base}...{head}"
        logger.info("Fetching diff %s...%s for %s", base[:7], head[:7], source)
        response = await self._get(path, accept="application/vnd.github.diff")
        return response.text

    async def _get_json(self, path: str, params: Optional[dict] = None) -> object:
        response = await self._get(path, params=params)
        try:
            return response.json()
        except ValueError as e:
            raise SourceUnreachable(f"GitHub returned invalid JSON for {path}: {e}") from e

    async def _get(
        self,
        path: str,
        params: Optional[dict] = None,
        accept: str = "application/vnd.github+json",
    ) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    f"{self.api_base}{path}",
                    headers=self._get_headers(accept),
                    params=params,
                )
                response.raise_for_status()
                return response
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 403:
                logger.warning("GitHub rate limit or authentication required for %s", path)
            raise SourceUnreachable(f"GitHub API error {status} for {path}") from e
        except httpx.HTTPError as e:
            raise SourceUnreachable(f"GitHub API call failed for {path}: {e}") from e

    def _get_headers(self, accept: str) -> dict[str, str]:
        """Get headers for GitHub API requests."""
        headers = {
            "Accept": accept,
            "X-GitHub-Api-Version": "2022-11-28",
        }

        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        return headers
