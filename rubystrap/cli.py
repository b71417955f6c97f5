#!/usr/bin/env python3
"""
rubystrap CLI - Command-line interface
Click-based installer for rbenv, ruby-build and Ruby
"""

import functools
import sys
import click
from pathlib import Path
from typing import Optional
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from rubystrap import __version__
from rubystrap.config import ConfigManager, RubystrapConfig
from rubystrap.core.commands import CommandRunner
from rubystrap.core.logging import setup_logging
from rubystrap.dependencies.catalog import build_catalog, catalog_by_provides
from rubystrap.dependencies.dependency import CheckResult, Dependency
from rubystrap.installer.orchestrator import (
    EXIT_FAILURE,
    EXIT_INTERRUPTED,
    EXIT_SUCCESS,
    DependencyReport,
    InstructionKind,
    Orchestrator,
    Reporter,
    RunResult,
    Verdict,
)
from rubystrap.installer.rbenv import RbenvSteps
from rubystrap.installer.steps import Step
from rubystrap.platform.detector import EnvironmentFacts, detect_environment
from rubystrap.setup_path import shell_setup_hints

console = Console()


def print_banner(title: str):
    console.print(Panel.fit(f"[bold]{escape(title)}[/bold]", border_style="yellow"))


def line():
    console.print("-" * 44)


def handle_interrupt(func):
    """Exit with EXIT_INTERRUPTED on Ctrl-C instead of click's generic abort"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (KeyboardInterrupt, click.Abort):
            console.print("\n[yellow]Aborted.[/yellow]")
            sys.exit(EXIT_INTERRUPTED)
    return wrapper


def wait(config: RubystrapConfig):
    """Block until Enter is pressed (interactive mode only)"""
    if not config.interactive:
        return
    try:
        console.input()
    except EOFError:
        # No terminal attached; behave as if Enter was pressed
        pass


class ConsoleReporter(Reporter):
    """Print one line per dependency check and per installation step"""

    def dependency_checked(self, dep: Dependency, result: CheckResult) -> None:
        name = escape(dep.name)
        if result.is_found:
            if result.location:
                console.print(f" * {name}... [green]found at {escape(result.location)}[/green]")
            else:
                console.print(f" * {name}... [green]found[/green]")
        else:
            console.print(f" * {name}... [red]not found[/red]")

    def step_finished(self, step: Step) -> None:
        outcome = step.outcome
        name = escape(step.name)
        if outcome is None:
            return
        if not outcome.succeeded:
            console.print(f" * {name}... [red]failed[/red]")
            console.print(f"*** {escape(outcome.message or 'Cannot install ' + step.name)}")
        elif outcome.already_satisfied:
            where = f" at {escape(outcome.location)}" if outcome.location else ""
            console.print(f" * {name}... [green]found{where}[/green]")
        elif outcome.degraded:
            console.print(f" * {name}... [yellow]partially installed[/yellow]")
        else:
            console.print(f" * {name}... [green]installed[/green]")


def _load_config(config_path: Optional[str]) -> RubystrapConfig:
    return ConfigManager.load_config(Path(config_path) if config_path else None)


def _runner(config: RubystrapConfig) -> CommandRunner:
    return CommandRunner(
        retries=config.command_retries,
        echo=lambda cmd: console.print(f"[dim]{escape(cmd)}[/dim]"),
    )


def _rbenv_steps(config: RubystrapConfig) -> RbenvSteps:
    return RbenvSteps(
        rbenv_root=config.rbenv_root,
        ruby_version=config.resolve_ruby_version(),
        runner=_runner(config),
        gems=config.gems,
        rbenv_repository=config.rbenv_repository,
        ruby_build_repository=config.ruby_build_repository,
        announce=lambda message: console.print(f"\n[bold]{escape(message)}[/bold]"),
    )


def print_instructions(report: DependencyReport):
    """Installation instructions for every missing dependency"""
    print_banner("Installation instructions for required software")
    console.print()
    for name, instruction in report.instructions():
        console.print(f" * To install [yellow]{escape(name)}[/yellow]:")
        text = escape(instruction.text)
        if instruction.kind == InstructionKind.COMMAND:
            console.print(f"   Please run [bold]{text}[/bold] as root.")
        elif instruction.kind == InstructionKind.INSTRUCTIONS:
            console.print(f"   {text}")
        elif instruction.kind == InstructionKind.WEBSITE:
            console.print(f"   Please download it from [bold]{text}[/bold]")
        else:
            console.print(f"   {text}")
        if instruction.comments:
            console.print(f"   ({escape(instruction.comments)})")
        console.print()


def check_dependencies(orchestrator: Orchestrator, config: RubystrapConfig) -> DependencyReport:
    print_banner("Checking for required software...")
    console.print()
    report = orchestrator.check_dependencies()

    if not report.passed:
        console.print()
        console.print("[red]Some required software is not installed.[/red]")
        console.print("But don't worry, this installer will tell you how to install them.\n")
        if config.interactive:
            console.print("[bold]Press Enter to continue, or Ctrl-C to abort.[/bold]")
            wait(config)
        line()
        print_instructions(report)
    return report


def print_gem_failures(result: RunResult, config: RubystrapConfig):
    line()
    print_banner("Warning: some libraries could not be installed")
    console.print("The following gems could not be installed, probably because of an Internet")
    console.print("connection error:")
    console.print()
    for gem_name in result.failed_packages:
        console.print(f" [bold]* {escape(gem_name)}[/bold]")
    console.print()
    console.print("To install the aforementioned gems, please use the following commands:")
    for command in result.sequence.retry_commands:
        console.print(f"  [yellow]* {escape(command)}[/yellow]")
    console.print()
    if config.interactive:
        console.print("[bold]Press ENTER to show the next screen.[/bold]")
        wait(config)


def show_welcome_screen(steps: RbenvSteps, config: RubystrapConfig):
    print_banner("Welcome to the rbenv ruby installer")
    console.print(f"This installer will help you install Ruby {escape(steps.ruby_version)} with rbenv & ruby-build.")
    console.print()
    console.print("You can expect this from the installation process:")
    console.print()
    console.print(f"  [bold]1.[/bold] rbenv will be installed in {steps.rbenv_root}.")
    console.print(f"  [bold]2.[/bold] ruby-build will be installed in {steps.plugins_dir}.")
    console.print(f"  [bold]3.[/bold] ruby-{escape(steps.ruby_version)} will be compiled in {steps.version_dir}.")
    console.print(f"  [bold]4.[/bold] {escape(', '.join(config.gems) or 'No gems')} will be installed.")
    console.print()
    if config.interactive:
        console.print("[bold]Press Enter to continue, or Ctrl-C to abort.[/bold]")
        wait(config)


def show_finalization_screen(steps: RbenvSteps):
    console.print()
    print_banner("Ruby & rbenv are successfully installed!")
    console.print("If you ever want to uninstall Ruby & rbenv, simply remove this directory:")
    console.print()
    console.print(f"  [bold]{steps.rbenv_root}[/bold]")

    hints = shell_setup_hints(steps.rbenv_root)
    if hints:
        console.print()
        console.print("Run the following commands to add rbenv to your PATH and enable its shims:")
        for hint in hints:
            console.print(f"  {escape(hint)}")
    console.print()
    console.print("Enjoy Ruby & rbenv!")


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version and exit')
@click.option('--log-level', type=click.Choice(['error', 'warning', 'info', 'debug']), default=None,
              help='Logging verbosity (default: from config, else warning)')
@click.pass_context
def main(ctx, version, log_level):
    """
    rubystrap - rbenv & Ruby installer

    Checks that the software needed to build Ruby is present, then installs
    rbenv, ruby-build, Ruby and a few gems into your home directory.

    Examples:
        rubystrap check          # Only check for required software
        rubystrap install        # Check, then install everything
        rubystrap info           # Show detected platform facts
    """
    if version:
        click.echo(f"rubystrap v{__version__}")
        ctx.exit(0)

    ctx.ensure_object(dict)
    ctx.obj['log_level'] = log_level

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


def _setup(ctx, config_path: Optional[str]) -> RubystrapConfig:
    config = _load_config(config_path)
    setup_logging((ctx.obj or {}).get('log_level') or config.log_level)
    return config


@main.command()
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False), default=None,
              help='Path to .rubystrap.yml (default: search from current dir)')
@click.option('--only', 'only', multiple=True,
              help='Check only the dependency providing this capability (e.g. cc, make, zlib.h)')
@click.pass_context
@handle_interrupt
def check(ctx, config_path, only):
    """
    Check for the software needed to build Ruby.

    Exits 0 when everything is present, 1 otherwise.
    """
    config = _setup(ctx, config_path)
    config.interactive = False
    facts = detect_environment()
    catalog = build_catalog(facts)

    if only:
        by_provides = catalog_by_provides(catalog)
        unknown = [name for name in only if name not in by_provides]
        if unknown:
            raise click.BadParameter(
                f"unknown capability: {', '.join(unknown)} (choose from {', '.join(by_provides)})",
                param_hint='--only')
        catalog = [by_provides[name] for name in only]

    orchestrator = Orchestrator(catalog, [], reporter=ConsoleReporter())
    report = check_dependencies(orchestrator, config)
    sys.exit(EXIT_SUCCESS if report.passed else EXIT_FAILURE)


@main.command()
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False), default=None,
              help='Path to .rubystrap.yml (default: search from current dir)')
@click.option('--yes', '-y', is_flag=True, help='Do not wait for Enter between screens')
@click.option('--ruby-version', default=None, help='Ruby version to install (overrides config and VERSION file)')
@click.pass_context
@handle_interrupt
def install(ctx, config_path, yes, ruby_version):
    """
    Install rbenv, ruby-build, Ruby and gems.

    Nothing is installed unless all required software is present. Every
    step is skipped when its target already exists, so re-running is safe.
    """
    config = _setup(ctx, config_path)
    if yes:
        config.interactive = False
    if ruby_version:
        config.ruby_version = ruby_version

    facts = detect_environment()
    steps = _rbenv_steps(config)
    orchestrator = Orchestrator(build_catalog(facts), steps.steps(), reporter=ConsoleReporter())

    show_welcome_screen(steps, config)
    report = check_dependencies(orchestrator, config)
    if not report.passed:
        sys.exit(EXIT_FAILURE)

    console.print()
    print_banner("Installing rbenv, ruby-build and Ruby...")
    result = orchestrator.run(report)

    if result.verdict == Verdict.STEP_FAILED:
        failed = result.sequence.failed_step
        console.print(f"\n[red]Installation stopped: step '{escape(failed.name)}' failed.[/red]")
        console.print("Fix the problem above and run the installer again; finished steps will be skipped.")
    elif result.verdict == Verdict.DEGRADED:
        print_gem_failures(result, config)

    if result.exit_code == EXIT_SUCCESS:
        show_finalization_screen(steps)
    sys.exit(result.exit_code)


@main.command()
@click.pass_context
@handle_interrupt
def info(ctx):
    """
    Show detected platform facts.

    Compilers, library extensions and Linux distribution as the installer sees them.
    """
    setup_logging((ctx.obj or {}).get('log_level') or 'warning')
    facts: EnvironmentFacts = detect_environment()

    console.print("\n[bold cyan]Platform Information:[/bold cyan]")
    for key, value in facts.to_dict().items():
        label = key.replace('_', ' ').capitalize()
        shown = escape(str(value)) if value not in (None, '') else "[dim]-[/dim]"
        console.print(f"  {label}: {shown}")
    console.print(f"\n[bold cyan]rubystrap Version:[/bold cyan] v{__version__}")


@main.command()
@click.option('--force', is_flag=True, help='Overwrite existing configuration')
@handle_interrupt
def init(force):
    """
    Write a default .rubystrap.yml in the current directory.
    """
    config_path = Path.cwd() / ConfigManager.DEFAULT_CONFIG_NAME
    if config_path.exists() and not force:
        console.print(f"[yellow]{config_path} already exists (use --force to overwrite)[/yellow]")
        sys.exit(EXIT_FAILURE)

    config_path = ConfigManager.create_default_config(Path.cwd())
    console.print(f"[green]✓[/green] Created {config_path}")


if __name__ == '__main__':
    main()
