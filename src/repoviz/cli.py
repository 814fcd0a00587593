"""CLI entry point for repoviz -- GitHub repository structure visualizer."""

from __future__ import annotations

import asyncio
import json
import logging
from collections import Counter
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from .config import RepoVizConfig, load_config
from .errors import RepoVizError
from .models import TreeNode
from .render import Theme

app = typer.Typer(
    name="repoviz",
    help="Visualize a GitHub repository's file tree as a force-directed graph.",
    add_completion=False,
)

console = Console()


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Configure logging for every command."""
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _config(config_path: Path | None) -> RepoVizConfig:
    try:
        return load_config(config_path)
    except ValueError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1)


def _load(url: str, config: RepoVizConfig, search: str | None = None):
    """Run one visualize action and return the engine, or exit on failure."""
    from .web.server import build_engine

    engine = build_engine(config)
    with console.status(f"Fetching {url}..."):
        ok = asyncio.run(engine.visualize(url))
    if not ok:
        console.print(f"[red]Error:[/red] {engine.error}")
        raise typer.Exit(code=1)
    if search:
        engine.set_search_term(search)
    return engine


def _rich_tree(node: TreeNode, label: str) -> Tree:
    """Mirror a TreeNode hierarchy into a rich Tree."""
    root = Tree(label)
    stack: list[tuple[TreeNode, Tree]] = [(node, root)]
    while stack:
        current, branch = stack.pop()
        for child in current.children:
            icon = "📁" if child.children else "📄"
            sub = branch.add(f"{icon} {child.name}")
            stack.append((child, sub))
    return root


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to listen on."),
    no_browser: bool = typer.Option(False, "--no-browser", help="Don't open a browser."),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to repoviz.toml."),
) -> None:
    """Start the web visualizer."""
    from .web.server import start_server

    cfg = _config(config_path)
    effective_host = host or cfg.host
    effective_port = port if port is not None else cfg.port

    url = f"http://{effective_host}:{effective_port}"
    console.print(f"[bold cyan]Serving[/bold cyan] {url}")
    if not cfg.github_token:
        console.print(
            "[yellow]GITHUB_TOKEN not set. Anonymous requests are heavily rate limited.[/yellow]"
        )

    if not no_browser:
        import threading
        import webbrowser
        threading.Timer(1.0, webbrowser.open, args=(url,)).start()

    start_server(cfg, host=effective_host, port=effective_port)


@app.command()
def graph(
    url: str = typer.Argument(..., help="Repository URL, e.g. https://github.com/owner/repo."),
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Only keep nodes whose name matches."),
    as_json: bool = typer.Option(False, "--json", help="Print the {nodes, links} payload."),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to repoviz.toml."),
) -> None:
    """Fetch a repository and summarise its graph."""
    engine = _load(url, _config(config_path), search)
    view = engine.filtered_view()

    if as_json:
        typer.echo(json.dumps(view.to_payload(), indent=2))
        return

    table = Table(title=f"{url}")
    table.add_column("group")
    table.add_column("nodes", justify="right")
    for group, count in sorted(Counter(n.group for n in view.nodes).items()):
        table.add_row(group, str(count))
    console.print(table)
    console.print(
        f"[bold]{len(view.nodes)}[/bold] nodes, [bold]{len(view.edges)}[/bold] edges"
        + (f" (filtered by {search!r})" if search else "")
    )


@app.command()
def tree(
    url: str = typer.Argument(..., help="Repository URL."),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to repoviz.toml."),
) -> None:
    """Print the repository structure as a tree."""
    engine = _load(url, _config(config_path))
    info = engine.repo_info
    label = f"[bold]{info.owner}/{info.name}[/bold]" if info else url
    console.print(_rich_tree(engine.tree, label))


@app.command()
def info(
    url: str = typer.Argument(..., help="Repository URL."),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to repoviz.toml."),
) -> None:
    """Show repository metadata."""
    from .github import GitHubClient, parse_repo_url

    cfg = _config(config_path)
    try:
        owner, name = parse_repo_url(url)
        client = GitHubClient(
            token=cfg.github_token, base_url=cfg.api_url, branch=cfg.branch, timeout=cfg.timeout,
        )
        repo = asyncio.run(client.fetch_repo_info(owner, name))
    except RepoVizError as exc:
        logging.getLogger(__name__).debug("info failed: %s", exc)
        console.print(f"[red]Error:[/red] {exc.user_message}")
        raise typer.Exit(code=1)

    console.print(f"[bold]{repo.name}[/bold]")
    console.print(f"  Owner: {repo.owner}")
    console.print(f"  Stars: {repo.stargazers_count}")
    console.print(f"  Forks: {repo.forks_count}")
    console.print(f"  Description: {repo.description or 'No description'}")
    if repo.default_branch:
        console.print(f"  Default branch: {repo.default_branch}")


@app.command()
def config(
    key: Optional[str] = typer.Argument(None, help="Config key to read."),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to repoviz.toml."),
) -> None:
    """View the effective configuration."""
    cfg = _config(config_path)

    if key is None:
        console.print("[bold]repoviz config:[/bold]")
        for field_name in RepoVizConfig.model_fields:
            console.print(f"  {field_name} = {_display(field_name, getattr(cfg, field_name))}")
        return

    if key not in RepoVizConfig.model_fields:
        console.print(
            f"[red]Error:[/red] Unknown config key [bold]{key}[/bold].\n"
            f"  Valid keys: {', '.join(RepoVizConfig.model_fields)}"
        )
        raise typer.Exit(code=1)

    console.print(f"{key} = {_display(key, getattr(cfg, key))}")


def _display(key: str, value: object) -> str:
    if key == "github_token" and value:
        return "'***'"
    if isinstance(value, Theme):
        return repr(value.value)
    return repr(value)


if __name__ == "__main__":
    app()
