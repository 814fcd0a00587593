"""Configuration loading: ``repoviz.toml``, ``.env`` and environment overrides."""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, ValidationError

from .github import GITHUB_API_URL
from .render import Theme

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "repoviz.toml"

# Environment variable -> config field.
ENV_OVERRIDES: dict[str, str] = {
    "GITHUB_TOKEN": "github_token",
    "REPOVIZ_API_URL": "api_url",
    "REPOVIZ_BRANCH": "branch",
}


class RepoVizConfig(BaseModel):
    """User configuration stored in ``repoviz.toml``.

    Precedence: CLI flag > environment > repoviz.toml > default.
    """

    api_url: str = GITHUB_API_URL
    """Base URL of the GitHub REST API."""

    github_token: str | None = None
    """Personal access token; raises the anonymous rate limit."""

    branch: str | None = None
    """Branch to list. Unset means the repository's default branch."""

    timeout: float = 30.0
    """Socket timeout for API requests, in seconds."""

    host: str = "127.0.0.1"
    port: int = 8000

    theme: Theme = Theme.dark
    """Initial theme, ``dark`` or ``light``."""

    show_labels: bool = True
    tree_visible: bool = False


def _find_upwards(start_dir: Path, filename: str) -> Path | None:
    search = start_dir.resolve()
    for d in [search, *search.parents]:
        candidate = d / filename
        if candidate.is_file():
            return candidate
    return None


def read_dotenv(path: Path) -> dict[str, str]:
    """Parse ``KEY=VALUE`` lines of a .env file.

    Blank lines and ``#`` comments are skipped, an ``export`` prefix is
    allowed and one layer of matching quotes is removed from the value.
    Only keys listed in ``ENV_OVERRIDES`` are returned.
    """
    values: dict[str, str] = {}
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        logger.warning("Could not read %s: %s", path, exc)
        return values

    for raw in text.splitlines():
        line = raw.strip()
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or key.startswith("#") or key not in ENV_OVERRIDES:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        values[key] = value
    return values


def find_config_file(start_dir: Path) -> Path | None:
    """Return the nearest ``repoviz.toml`` at or above *start_dir*."""
    return _find_upwards(start_dir, CONFIG_FILENAME)


def load_config(path: Path | None = None, *, start_dir: Path | None = None) -> RepoVizConfig:
    """Build the effective configuration.

    *path* points at an explicit toml file; otherwise the nearest
    ``repoviz.toml`` above *start_dir* (default: cwd) is used if present.
    Precedence, lowest first: toml, nearest ``.env``, process environment.
    Raises ``ValueError`` for an unreadable or invalid file.
    """
    start = start_dir or Path.cwd()

    data: dict = {}
    config_path = path or find_config_file(start)
    if config_path is not None:
        try:
            with open(config_path, "rb") as fh:
                data = tomllib.load(fh)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise ValueError(f"Cannot read {config_path}: {exc}") from exc
        # Allow either a flat file or a [repoviz] table.
        data = dict(data.get("repoviz", data))

    env: dict[str, str] = {}
    dotenv_path = _find_upwards(start, ".env")
    if dotenv_path is not None:
        env.update(read_dotenv(dotenv_path))
    env.update({k: os.environ[k] for k in ENV_OVERRIDES if k in os.environ})

    for env_key, field_name in ENV_OVERRIDES.items():
        value = env.get(env_key, "").strip()
        if value:
            data[field_name] = value

    try:
        return RepoVizConfig.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc
