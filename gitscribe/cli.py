"""CLI entry point for gitscribe."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from gitscribe import __version__
from gitscribe.config import load_settings
from gitscribe.errors import GitScribeError
from gitscribe.git import GitRepository
from gitscribe.utils.logging import log_error, setup_logging

app = typer.Typer(
    name="gitscribe",
    help="Inspect a git repository through gitscribe's parsed views",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]gitscribe[/bold] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    repo: Path = typer.Option(
        Path("."),
        "--repo",
        "-C",
        help="Path inside the repository to inspect",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log every git command that is run",
    ),
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """gitscribe - typed views over git output."""
    setup_logging(verbose=verbose)
    if config:
        try:
            load_settings(config_path=config, force_reload=True)
        except GitScribeError as e:
            _fail(e)
    ctx.obj = {"repo": repo}


def _open_repository(ctx: typer.Context) -> GitRepository:
    path = ctx.obj["repo"]
    repo = GitRepository.find(path)
    if repo is None:
        console.print(f"[red]Not a git repository: {path}[/red]")
        raise typer.Exit(1)
    return repo


def _fail(error: GitScribeError) -> None:
    log_error(error)
    console.print(f"[red]Error: {error.message}[/red]")
    raise typer.Exit(1)


@app.command()
def branches(
    ctx: typer.Context,
    remote: bool = typer.Option(False, "--remote", "-r", help="Only remote-tracking branches"),
) -> None:
    """List branches."""
    try:
        listing = _open_repository(ctx).branches()
    except GitScribeError as e:
        _fail(e)

    table = Table(title="Branches")
    table.add_column("", width=1)
    table.add_column("Name", style="green")
    table.add_column("Ref", style="dim")
    table.add_column("Remote", justify="center")

    for branch in (listing.remote if remote else listing):
        table.add_row(
            "*" if branch.current else "",
            branch.name,
            branch.full,
            "✓" if branch.remote else "",
        )

    console.print(table)


@app.command()
def worktrees(ctx: typer.Context) -> None:
    """List worktrees."""
    try:
        listing = _open_repository(ctx).worktrees()
    except GitScribeError as e:
        _fail(e)

    table = Table(title="Worktrees")
    table.add_column("Directory", style="cyan")
    table.add_column("HEAD", style="yellow", no_wrap=True)
    table.add_column("Branch", style="green")

    for worktree in listing:
        info = worktree.info
        table.add_row(
            info.dir,
            info.head[:12] if info.head else "-",
            info.branch or ("(bare)" if info.bare else "(detached)"),
        )

    console.print(table)


@app.command()
def tags(ctx: typer.Context) -> None:
    """List tags."""
    try:
        tag_list = _open_repository(ctx).tags()
    except GitScribeError as e:
        _fail(e)

    if not tag_list:
        console.print("[dim]No tags found.[/dim]")
        return

    table = Table(title="Tags")
    table.add_column("Name", style="green")
    table.add_column("Type")
    table.add_column("Target", style="yellow", no_wrap=True)
    table.add_column("Tagger")

    for tag in tag_list:
        table.add_row(
            tag.name,
            "annotated" if tag.annotated else "lightweight",
            (tag.target_sha or tag.sha)[:12],
            str(tag.tagger) if tag.tagger else "-",
        )

    console.print(table)


@app.command()
def diffstat(
    ctx: typer.Context,
    from_ref: str = typer.Argument("HEAD", help="Starting revision"),
    to_ref: Optional[str] = typer.Argument(None, help="Ending revision (default: working tree)"),
    path: Optional[str] = typer.Option(None, "--path", "-p", help="Limit to this path"),
) -> None:
    """Show insertions and deletions per file."""
    try:
        stats = _open_repository(ctx).diff_stats(from_ref, to_ref, path)
        files = stats.files
        total = stats.total
    except GitScribeError as e:
        _fail(e)

    table = Table(title=f"Diff {from_ref}{'..' + to_ref if to_ref else ''}")
    table.add_column("File", style="cyan")
    table.add_column("+", style="green", justify="right")
    table.add_column("-", style="red", justify="right")

    for file_path, stat in files.items():
        name = f"{stat.src_path} => {file_path}" if stat.renamed else file_path
        if stat.binary:
            table.add_row(name, "bin", "bin")
        else:
            table.add_row(name, str(stat.insertions), str(stat.deletions))

    console.print(table)
    console.print(
        f"{total.files} file(s) changed, "
        f"{total.insertions} insertion(s), {total.deletions} deletion(s)"
    )


@app.command()
def log(
    ctx: typer.Context,
    count: Optional[int] = typer.Option(None, "--count", "-n", help="Number of commits"),
    revision: Optional[str] = typer.Argument(None, help="Revision to start from"),
) -> None:
    """Print recent commit shas, newest first."""
    try:
        history = _open_repository(ctx).log(count, revision)
    except GitScribeError as e:
        _fail(e)

    for sha in history:
        console.print(sha)


@app.command()
def stashes(ctx: typer.Context) -> None:
    """List stash entries."""
    try:
        entries = _open_repository(ctx).stashes()
    except GitScribeError as e:
        _fail(e)

    if not len(entries):
        console.print("[dim]No stashes.[/dim]")
        return

    for stash in entries:
        console.print(f"[cyan]{stash.name}[/cyan] {stash.message}")


@app.command()
def remote(
    ctx: typer.Context,
    name: str = typer.Argument("origin", help="Remote name"),
) -> None:
    """Show a remote's url and fetch refspec."""
    try:
        info = _open_repository(ctx).remote(name)
    except GitScribeError as e:
        _fail(e)

    if info.url is None:
        console.print(f"[yellow]No remote named '{name}'[/yellow]")
        raise typer.Exit(1)

    console.print(f"[bold]{info.name}[/bold]")
    console.print(f"  url:   {info.url}")
    for refspec in info.fetch_refspecs:
        console.print(f"  fetch: {refspec}")


if __name__ == "__main__":
    app()
