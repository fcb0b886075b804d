"""CLI for shouldcov - all commands in one module.

Provides commands: check, frameworks.

shouldcov/src/shouldcov/cli.py
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from shouldcov.frameworks import SupportedFramework, get_strategy_for_framework
from shouldcov.reporting import DEFAULT_FORMAT, FORMAT_CHOICES

console = Console()
logger = logging.getLogger(__name__)


@dataclass
class ShouldcovContext:
    """Shared context for CLI commands."""

    project_root: Path | None = None
    verbose: bool = False


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """shouldcov: check that every @should tag has a backing test method."""
    current = Path.cwd()
    project_root = None
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists() or (parent / ".git").exists():
            project_root = parent
            break

    ctx.obj = ShouldcovContext(project_root=project_root, verbose=verbose)

    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


@cli.command("check")
@click.argument("targets", nargs=-1, type=click.Path(exists=True, path_type=Path))
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(FORMAT_CHOICES),
    default=DEFAULT_FORMAT,
    help="Output format",
)
@click.option(
    "--framework",
    type=click.Choice([framework.value for framework in SupportedFramework], case_sensitive=False),
    help="Test framework naming convention (overrides [tool.shouldcov] test_framework)",
)
@click.option("--fix", is_flag=True, help="Create the missing test methods")
@click.option("--dry-run", is_flag=True, help="With --fix, print the changes instead of writing them")
@click.pass_context
def check(
    ctx: click.Context,
    targets: tuple[Path, ...],
    output_format: str,
    framework: str | None,
    fix: bool,
    dry_run: bool,
) -> None:
    """Run the should-coverage check."""
    if dry_run and not fix:
        raise click.UsageError("--dry-run only makes sense together with --fix")

    shouldcov_ctx: ShouldcovContext = ctx.obj
    project_root = shouldcov_ctx.project_root

    if not project_root:
        console.print("[red]No project root found[/red]")
        ctx.exit(1)

    from shouldcov.config import Config, load_config
    from shouldcov.runner import ValidationRunner

    config = load_config(project_root)
    if config.project_root is None:
        config = Config(project_root, {})

    runner = ValidationRunner(config, project_root, framework=framework)
    error = runner.configuration_error()
    if error is not None:
        console.print(f"[yellow]Nothing to check: {escape(str(error))}[/yellow]")
        console.print(
            "[dim]Set test_framework in \\[tool.shouldcov] or pass --framework.[/dim]",
        )
        ctx.exit(0)

    findings = runner.run_validation(list(targets) or None)

    if fix:
        if dry_run:
            diffs = runner.preview_fixes()
            for diff in diffs.values():
                click.echo(diff, nl=False)
            if not diffs:
                console.print("[yellow]No fixable issues found[/yellow]")
            ctx.exit(0)

        results = runner.apply_fixes()
        applied = [result for result in results if result.applied]
        for result in results:
            if not result.applied:
                console.print(f"[red]✗[/red] {result.file_path}: {escape(str(result.error))}")
        if applied:
            touched = {result.file_path for result in applied}
            console.print(
                f"[green]Created {len(applied)} test method(s) in {len(touched)} file(s)[/green]"
            )
        else:
            console.print("[yellow]No fixable issues found[/yellow]")
        ctx.exit(0)

    click.echo(runner.format_output(output_format))

    if output_format in ("natural", "human") and findings:
        console.print(f"\nChecked {runner.files_checked} file(s), {len(findings)} finding(s)")

    ctx.exit(runner.get_exit_code())


@cli.command("frameworks")
def frameworks() -> None:
    """List supported test frameworks and their naming conventions."""
    table = Table(
        title="Supported test frameworks",
        caption="Example: def bar() tagged @should return true, in class Foo",
    )
    table.add_column("Framework")
    table.add_column("Test class")
    table.add_column("Example test method")

    for framework in SupportedFramework:
        strategy = get_strategy_for_framework(framework.value)
        table.add_row(
            framework.value,
            strategy.class_name_template.format(name="Foo"),
            strategy.method_test_name("bar", "return true"),
        )
    console.print(table)


def main() -> None:
    """Entry point for shouldcov CLI."""
    try:
        cli(obj=ShouldcovContext(), prog_name="shouldcov")
    except SystemExit as e:
        sys.exit(e.code)
    except Exception as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        logger.error("CLI error", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
