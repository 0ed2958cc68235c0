"""Command line interface for arborflow."""

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich import print
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from arborflow.config import (
    BRANCH_DEVELOP,
    BRANCH_PRODUCTION,
    PREFIX_FEATURE,
    PREFIX_HOTFIX,
    PREFIX_RELEASE,
    PREFIX_VERSIONTAG,
    get_config,
)
from arborflow.errors import BranchNotFoundError, FlowError
from arborflow.flow import BranchKind, FinishOptions, StartOptions, finish_support_branch, start_support_branch
from arborflow.git import GitRepo
from arborflow.log import setup_logging

app = typer.Typer(help="Git flow branching tool")
console = Console()

PathOption = Annotated[Path, typer.Option(help="Path to git repository")]


def get_repo(path: Path) -> GitRepo:
    """Get git repository instance."""
    try:
        return GitRepo(path)
    except FlowError as err:
        print(f"[red]Error:[/red] {err}")
        raise typer.Exit(code=1) from err


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Start and finish feature, release and hotfix branches."""
    setup_logging("DEBUG" if verbose else None)


def _kind_app(kind: BranchKind) -> typer.Typer:
    """Build the start/finish commands for one kind of support branch."""
    kind_app = typer.Typer(help=f"Start and finish {kind.value} branches")

    @kind_app.command()
    def start(
        name: Annotated[str, typer.Argument(help=f"Name of the {kind.value}, without prefix")],
        path: PathOption = Path("."),
        base: Annotated[Optional[str], typer.Option("--base", "-b", help="Commit to start from")] = None,
    ) -> None:
        """Create the branch and check it out."""
        repo = get_repo(path)
        try:
            branch = start_support_branch(repo, kind, name, StartOptions(base_commit_sha=base))
        except FlowError as err:
            print(f"[red]Error:[/red] {err}")
            raise typer.Exit(code=1) from err

        console.print(
            Panel(
                f"Switched to new branch [cyan]{branch.name}[/cyan] at [yellow]{branch.commit.hexsha[:7]}[/yellow]",
                style="green",
                padding=(0, 2),
                expand=False,
            )
        )

    @kind_app.command()
    def finish(
        name: Annotated[str, typer.Argument(help=f"Name of the {kind.value}, without prefix")],
        path: PathOption = Path("."),
        keep: bool = typer.Option(False, "--keep", "-k", help="Keep the branch after finishing"),
        rebase: bool = typer.Option(False, "--rebase", "-r", help="Rebase instead of merging"),
        message: Annotated[Optional[str], typer.Option("--message", "-m", help="Tag message (release/hotfix)")] = None,
    ) -> None:
        """Merge (or rebase) the branch back and delete it."""
        repo = get_repo(path)
        options = FinishOptions(keep_branch=keep, is_rebase=rebase, tag_message=message)
        try:
            result = finish_support_branch(repo, kind, name, options)
        except FlowError as err:
            print(f"[red]Error:[/red] {err}")
            raise typer.Exit(code=1) from err

        current = repo.get_current_branch_name()
        if result is None:
            summary = f"Nothing to merge, now on [cyan]{current}[/cyan]"
        else:
            summary = (
                f"Finished {kind.value} [blue]{name}[/blue], "
                f"[cyan]{current}[/cyan] is at [yellow]{result.hexsha[:7]}[/yellow]"
            )
        console.print(Panel(summary, style="green", padding=(0, 2), expand=False))

    return kind_app


for _kind in BranchKind:
    app.add_typer(_kind_app(_kind), name=_kind.value)


@app.command()
def status(path: PathOption = Path(".")) -> None:
    """Show the configured branches and prefixes."""
    repo = get_repo(path)
    config = get_config(repo)
    current = repo.get_current_branch_name()

    table = Table(
        title="Git Flow",
        show_header=True,
        header_style="bold",
        title_style="bold blue",
        show_edge=True,
    )
    table.add_column("Setting", style="magenta", no_wrap=True)
    table.add_column("Value", style="cyan", no_wrap=True)
    table.add_column("Tip", style="yellow", no_wrap=True)

    for key in (BRANCH_PRODUCTION, BRANCH_DEVELOP):
        branch_name = config[key]
        try:
            tip = repo.lookup_branch(branch_name).commit.hexsha[:7]
        except BranchNotFoundError:
            tip = "[red]missing[/red]"
        display_name = branch_name
        if branch_name == current:
            display_name = f"{branch_name} [turquoise2](current)[/turquoise2]"
        table.add_row(key, display_name, tip)

    for key in (PREFIX_FEATURE, PREFIX_RELEASE, PREFIX_HOTFIX, PREFIX_VERSIONTAG):
        table.add_row(key, config[key], "")

    console.print(table)
    if repo.has_uncommitted_changes():
        console.print("[yellow]Working tree has uncommitted changes[/yellow]")


if __name__ == "__main__":
    app()
