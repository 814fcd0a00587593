"""Repository data source -- async wrapper around GitHub's REST API."""

from __future__ import annotations

import asyncio
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from .errors import MalformedUrl, NetworkError, NotFound, RateLimited
from .models import Entry, RepoInfo, RepoStructure

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
USER_AGENT = "repoviz"
DEFAULT_REF = "HEAD"


@runtime_checkable
class RepoDataSource(Protocol):
    """Interface the view-state engine fetches repositories through.

    Implementations:
      - GitHubClient (REST API over urllib)
      - in-memory fakes in the test-suite
    """

    async def fetch_repo_structure(self, owner: str, name: str) -> RepoStructure:
        """Recursively list the default-branch tree of ``owner/name``."""
        ...

    async def fetch_repo_info(self, owner: str, name: str) -> RepoInfo:
        """Return repository metadata for ``owner/name``."""
        ...


def parse_repo_url(url: str) -> tuple[str, str]:
    """Extract ``(owner, repo)`` from ``https://<host>/<owner>/<repo>[/...]``.

    Owner and repo are the 4th and 5th ``/``-delimited segments. A trailing
    ``.git`` on the repo is dropped.
    """
    text = (url or "").strip()
    segments = text.split("/")
    if len(segments) < 5 or segments[0].lower() not in ("http:", "https:") or segments[1]:
        raise MalformedUrl(f"Cannot extract owner/repo from {url!r}")
    if not segments[2]:
        raise MalformedUrl(f"Missing host in {url!r}")

    owner = segments[3]
    repo = segments[4].split("?", 1)[0].split("#", 1)[0]
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    if not owner or not repo:
        raise MalformedUrl(f"Cannot extract owner/repo from {url!r}")
    return owner, repo


@dataclass
class GitHubClient:
    """Minimal GitHub REST client using stdlib only.

    When *branch* is unset the tree is listed at ``HEAD``, which the API
    resolves to the repository's default branch in the same request.
    """

    token: str | None = None
    base_url: str = GITHUB_API_URL
    branch: str | None = None
    timeout: float = 30.0

    # ------------------------------------------------------------------
    # Header helpers
    # ------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": USER_AGENT,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _url(self, *parts: str, query: dict[str, str] | None = None) -> str:
        path = "/".join(urllib.parse.quote(p, safe="/") for p in parts)
        url = f"{self.base_url.rstrip('/')}/{path}"
        if query:
            url = f"{url}?{urllib.parse.urlencode(query)}"
        return url

    # ------------------------------------------------------------------
    # Blocking calls (run via asyncio.to_thread)
    # ------------------------------------------------------------------

    def _get_json_sync(self, url: str) -> Any:
        req = urllib.request.Request(url, headers=self._headers(), method="GET")
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as exc:
            error_body = exc.read().decode("utf-8", errors="replace")
            raise _map_http_error(exc, error_body, url) from exc
        except (urllib.error.URLError, TimeoutError, OSError) as exc:
            raise NetworkError(f"GET {url} failed: {exc}") from exc

        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise NetworkError(f"GET {url} returned an unreadable body: {exc}") from exc

    def _get_object_sync(self, url: str) -> dict[str, Any]:
        payload = self._get_json_sync(url)
        if not isinstance(payload, dict):
            raise NetworkError(
                f"GET {url} returned {type(payload).__name__}, expected a JSON object"
            )
        return payload

    def _repo_info_sync(self, owner: str, name: str) -> RepoInfo:
        payload = self._get_object_sync(self._url("repos", owner, name))
        return RepoInfo.from_api(payload)

    def _repo_structure_sync(self, owner: str, name: str) -> RepoStructure:
        ref = self.branch or DEFAULT_REF
        payload = self._get_object_sync(
            self._url("repos", owner, name, "git", "trees", ref, query={"recursive": "1"})
        )
        items = payload.get("tree") or []
        if not isinstance(items, list):
            raise NetworkError(f"Tree listing for {owner}/{name} is not a list")
        truncated = bool(payload.get("truncated"))
        if truncated:
            logger.warning(
                "Tree listing for %s/%s was truncated by the API; showing %d entries.",
                owner, name, len(items),
            )
        return RepoStructure(
            entries=[Entry.from_api(item) for item in items],
            sha=payload.get("sha"),
            truncated=truncated,
        )

    # ------------------------------------------------------------------
    # Public async API
    # ------------------------------------------------------------------

    async def fetch_repo_structure(self, owner: str, name: str) -> RepoStructure:
        """List every entry of the repository tree in one recursive call."""
        return await asyncio.to_thread(self._repo_structure_sync, owner, name)

    async def fetch_repo_info(self, owner: str, name: str) -> RepoInfo:
        """Fetch repository metadata (stars, forks, description...)."""
        return await asyncio.to_thread(self._repo_info_sync, owner, name)


def _map_http_error(exc: urllib.error.HTTPError, error_body: str, url: str) -> Exception:
    status = exc.code
    headers = exc.headers or {}
    detail = f"GET {url} failed ({status}): {error_body[:300]}"

    if status in (404, 409):
        return NotFound(detail, status=status)
    remaining = headers.get("X-RateLimit-Remaining")
    if status == 429 or (status == 403 and (remaining == "0" or "rate limit" in error_body.lower())):
        reset = headers.get("X-RateLimit-Reset")
        return RateLimited(
            detail,
            status=status,
            reset_at=int(reset) if reset and reset.isdigit() else None,
        )
    return NetworkError(detail, status=status)
