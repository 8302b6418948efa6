"""
IONOS Cloud Watchdog - CLI Interface

Runs health checks on IONOS Cloud infrastructure and Kubernetes clusters
and exits with 0 (OK), 1 (WARNING) or 2 (CRITICAL).
"""

import logging
import sys
import time
from datetime import datetime
from typing import Optional

import click
from rich.console import Console
from rich.prompt import Prompt

from . import __version__
from .config import WatchdogConfig, resolve_config, save_config
from .exceptions import ConfigurationError
from .models import Status
from .report import render_json, render_text, run_checks

PROG_NAME = "ionos-cloud-watchdog"
COMPLETE_VAR = "_IONOS_CLOUD_WATCHDOG_COMPLETE"

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

STATUS_STYLES = {
    Status.OK: "bold green",
    Status.WARNING: "bold yellow",
    Status.CRITICAL: "bold red",
}

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    """Log to stderr so text and JSON output stay clean."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def print_report(report, output: str, verbose: bool) -> None:
    if output == "json":
        click.echo(render_json(report))
        return

    body, _, status_line = render_text(report, verbose=verbose).rpartition("\n")
    console.print(body, markup=False, highlight=False, soft_wrap=True)
    console.print(
        status_line,
        style=STATUS_STYLES[report.status],
        markup=False,
        highlight=False,
        soft_wrap=True,
    )


def run_check_once(
    kubeconfig: str,
    namespace: str,
    output: str,
    verbose: bool,
) -> int:
    """
    Run one cycle and print it.

    Returns:
        Exit code: the report status, or 1 if configuration could not be resolved
    """
    try:
        cfg = resolve_config(kubeconfig=kubeconfig or None)
        report = run_checks(cfg, namespace=namespace)
    except ConfigurationError as e:
        err_console.print(f"Error: {e}", markup=False, highlight=False, soft_wrap=True)
        return 1

    print_report(report, output, verbose)
    return report.status.exit_code


def run_watch_mode(
    interval: int,
    kubeconfig: str,
    namespace: str,
    output: str,
    verbose: bool,
) -> None:
    """Repeat the check every interval seconds until interrupted."""
    first = True
    logger.debug(f"Watch mode: checking every {interval}s")

    try:
        while True:
            if output == "text":
                if first:
                    console.print("Starting watch mode...\n")
                else:
                    console.clear()
                    console.print(f"Last check: {datetime.now():%Y-%m-%d %H:%M:%S}\n")

            run_check_once(kubeconfig, namespace, output, verbose)
            first = False
            time.sleep(interval)
    except KeyboardInterrupt:
        console.print("\n[dim]Watch mode stopped.[/dim]")


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name=PROG_NAME)
@click.option("--kubeconfig", default="", help="Path to kubeconfig file")
@click.option("--namespace", "-n", default="", help="Kubernetes namespace to check (default: all)")
@click.option(
    "--output", "-o",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option(
    "--watch", "-w",
    type=click.IntRange(min=0),
    default=0,
    help="Watch mode: refresh interval in seconds (0 = disabled)",
)
@click.option("--debug", is_flag=True, help="Enable debug logging on stderr")
@click.pass_context
def cli(
    ctx: click.Context,
    kubeconfig: str,
    namespace: str,
    output: str,
    verbose: bool,
    watch: int,
    debug: bool,
):
    """Diagnostic health checks for IONOS Cloud and Kubernetes.

    \b
    Exit codes:
      0 - OK
      1 - WARNING (1-3 issues)
      2 - CRITICAL (more than 3 issues)

    \b
    Configuration:
      Config file: ~/.ionos-cloud-watchdog/config.yaml
      Priority: config file < environment variables < command-line flags

    \b
    Environment variables:
      IONOS_TOKEN      IONOS Cloud API token
      IONOS_USERNAME   IONOS Cloud username (alternative to token)
      IONOS_PASSWORD   IONOS Cloud password (alternative to token)
      IONOS_API_URL    Alternative API host
    """
    setup_logging(debug)

    if ctx.invoked_subcommand is not None:
        return

    if watch > 0:
        run_watch_mode(watch, kubeconfig, namespace, output, verbose)
        return

    ctx.exit(run_check_once(kubeconfig, namespace, output, verbose))


@cli.group(name="config")
def config_group():
    """Manage configuration."""
    pass


def _prompt_for_config(cfg: WatchdogConfig) -> None:
    cfg.ionos.token = Prompt.ask(
        "IONOS Cloud API Token (leave empty to use username/password)",
        default="",
        show_default=False,
        password=True,
    ).strip()

    if not cfg.ionos.token:
        cfg.ionos.username = Prompt.ask("IONOS Cloud Username", default="").strip()
        cfg.ionos.password = Prompt.ask(
            "IONOS Cloud Password", default="", show_default=False, password=True
        ).strip()

    cfg.kubeconfig = Prompt.ask(
        "Kubeconfig path (leave empty for default ~/.kube/config)",
        default="",
        show_default=False,
    ).strip()


@config_group.command(name="init")
@click.option("--token", default="", help="IONOS Cloud API token")
@click.option("--username", default="", help="IONOS Cloud username (alternative to token)")
@click.option("--password", default="", help="IONOS Cloud password (alternative to token)")
@click.option("--kubeconfig", default="", help="Path to kubeconfig file")
def config_init(token: str, username: str, password: str, kubeconfig: str):
    """Initialize the configuration file.

    \b
    Examples:
      # Interactive mode
      ionos-cloud-watchdog config init

    \b
      # Using flags
      ionos-cloud-watchdog config init --token "your-token" --kubeconfig ~/.kube/config
      ionos-cloud-watchdog config init --username user --password pass
    """
    console.print("Initializing config file...")

    cfg = WatchdogConfig()

    if token or username:
        cfg.ionos.token = token
        cfg.ionos.username = username
        cfg.ionos.password = password
        cfg.kubeconfig = kubeconfig
    else:
        _prompt_for_config(cfg)

    try:
        path = save_config(cfg)
    except ConfigurationError as e:
        err_console.print(f"Error saving config: {e}", markup=False, highlight=False, soft_wrap=True)
        raise SystemExit(1)

    console.print(f"\nConfiguration saved to: {path}", markup=False, highlight=False, soft_wrap=True)
    console.print(f"You can now run {PROG_NAME} without setting environment variables.")


@cli.command()
@click.argument("shell", type=click.Choice(["bash", "zsh", "fish"]))
def completion(shell: str):
    """Print the shell completion script for SHELL."""
    from click.shell_completion import get_completion_class

    comp_cls = get_completion_class(shell)
    click.echo(comp_cls(cli, {}, PROG_NAME, COMPLETE_VAR).source())


def main(argv: Optional[list] = None):
    """Entry point."""
    cli(args=argv, prog_name=PROG_NAME)


if __name__ == "__main__":
    main()
