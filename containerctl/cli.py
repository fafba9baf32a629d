"""
containerctl - Docker container lifecycle CLI

Usage:
  containerctl config
  containerctl host
  containerctl pull <image> [--tag TAG]
  containerctl create <image> [--tag TAG] [-e NAME=VALUE ...]
  containerctl start <container_id>
  containerctl stop <container_id>
  containerctl rm <container_id>
  containerctl inspect <container_id> [--json]
  containerctl logs <container_id>

Environment:
  DOCKER_API_VERSION     - Docker Engine API version (required)
  DOCKER_URI             - Docker Engine endpoint, e.g. tcp://localhost:2376 (required)
  DOCKER_SERVER_ADDRESS  - Registry server address for pulls (required, may be empty)
  DOCKER_CERT_PATH       - Directory with ca.pem, cert.pem, key.pem (required, may be empty)

Values are read from the environment or a .env file in the working directory.
"""

import argparse
import json
import sys
from typing import List, Optional

from docker.errors import DockerException
from dotenv import load_dotenv
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .config import PROPERTY_ENV_VARS, Settings
from .models.container import ContainerInspection, EnvironmentVariable
from .models.errors import ContainerControlError, MissingConfigurationError
from .services.container import ConnectionConfiguration, ContainerLifecycleManager
from .services.container.manager import parse_host
from .utils.config_validator import ConfigValidator, get_configuration_summary
from .utils.logging import setup_logging

console = Console()

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CONFIG = 2


# ============================================================================
# Helpers
# ============================================================================

def parse_env_pair(value: str) -> EnvironmentVariable:
    """Parse a NAME=VALUE argument. The value may itself contain '='."""
    name, sep, env_value = value.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got '{value}'")
    return EnvironmentVariable(name, env_value)


def format_state(inspection: ContainerInspection) -> Text:
    """Format container status with color coding."""
    status = inspection.state.status
    if inspection.state.running:
        return Text(status, style="green")
    elif status in ("created", "paused", "restarting"):
        return Text(status, style="yellow")
    else:
        return Text(status, style="red")


def build_inspection_panel(inspection: ContainerInspection) -> Panel:
    """Build container inspection panel."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Id", inspection.id)
    table.add_row("Name", inspection.name or "-")
    table.add_row("Image", inspection.image or "-")
    table.add_row("Created", inspection.created or "-")
    table.add_row("Status", format_state(inspection))
    if inspection.state.exit_code is not None and not inspection.state.running:
        table.add_row("Exit Code", str(inspection.state.exit_code))

    for port in inspection.ports:
        target = f"{port.host_ip or '0.0.0.0'}:{port.host_port}" if port.host_port else "not published"
        table.add_row("Port", f"{port.container_port} -> {target}")

    return Panel(table, title="[bold]Container[/bold]", border_style="blue")


def build_config_table(summary: dict, validator: ConfigValidator) -> Table:
    """Build configuration summary table."""
    table = Table(title="Docker Engine Configuration", box=box.ROUNDED)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    for key, value in summary.items():
        if value is None:
            table.add_row(key, Text("not set", style="red"))
        else:
            table.add_row(key, str(value))

    for warning in validator.warnings:
        table.add_row("warning", Text(warning, style="yellow"))
    for error in validator.errors:
        table.add_row("error", Text(error, style="red"))

    return table


def open_manager(settings: Settings) -> ContainerLifecycleManager:
    """Validate configuration and connect to the engine."""
    return ContainerLifecycleManager.from_settings(settings)


# ============================================================================
# Commands
# ============================================================================

def cmd_config(args, settings: Settings) -> int:
    """Show the engine connection configuration."""
    properties = settings.get_docker_properties()
    validator = ConfigValidator(properties)
    valid = validator.validate_all()
    console.print(build_config_table(get_configuration_summary(properties), validator))
    return EXIT_OK if valid else EXIT_CONFIG


def cmd_host(args, settings: Settings) -> int:
    """Print the engine host without contacting the engine."""
    configuration = ConnectionConfiguration.from_properties(settings.get_docker_properties())
    host = parse_host(configuration.endpoint_uri)
    console.print(host if host is not None else "[dim]no host (local socket)[/dim]")
    return EXIT_OK


def cmd_pull(args, settings: Settings) -> int:
    """Pull an image."""
    with open_manager(settings) as manager:
        manager.pull_image(args.image, args.tag)
    console.print(f"[green]Pulled[/green] {args.image}:{args.tag}")
    return EXIT_OK


def cmd_create(args, settings: Settings) -> int:
    """Pull an image and create a container from it."""
    with open_manager(settings) as manager:
        container_id = manager.create_container(args.image, args.tag, args.env)
    console.print(container_id)
    return EXIT_OK


def cmd_start(args, settings: Settings) -> int:
    with open_manager(settings) as manager:
        manager.start_container(args.container_id)
    console.print(f"[green]Started[/green] {args.container_id}")
    return EXIT_OK


def cmd_stop(args, settings: Settings) -> int:
    with open_manager(settings) as manager:
        manager.stop_container(args.container_id)
    console.print(f"[yellow]Stopped[/yellow] {args.container_id}")
    return EXIT_OK


def cmd_rm(args, settings: Settings) -> int:
    with open_manager(settings) as manager:
        manager.delete_container(args.container_id)
    console.print(f"[red]Removed[/red] {args.container_id}")
    return EXIT_OK


def cmd_inspect(args, settings: Settings) -> int:
    """Show a container's status."""
    with open_manager(settings) as manager:
        inspection = manager.inspect_container(args.container_id)

    if args.json:
        console.print_json(json.dumps(inspection.attrs, default=str))
    else:
        console.print(build_inspection_panel(inspection))
    return EXIT_OK


def cmd_logs(args, settings: Settings) -> int:
    """Follow a container's output until the engine closes it or Ctrl+C."""
    with open_manager(settings) as manager:
        with manager.log_container(args.container_id) as stream:
            for line in stream:
                console.print(line, markup=False, highlight=False)
    return EXIT_OK


# ============================================================================
# Entry point
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="containerctl",
        description="Docker container lifecycle CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s config
  %(prog)s create mysql --tag 5.7 -e MYSQL_ROOT_PASSWORD=secret
  %(prog)s start 3f2c9a1b7d4e
  %(prog)s logs 3f2c9a1b7d4e
  %(prog)s stop 3f2c9a1b7d4e
  %(prog)s rm 3f2c9a1b7d4e
"""
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("config", help="Show engine connection configuration")
    subparsers.add_parser("host", help="Print the engine host from the endpoint URI")

    pull_parser = subparsers.add_parser("pull", help="Pull an image")
    pull_parser.add_argument("image", help="Image repository, e.g. mysql")
    pull_parser.add_argument("--tag", default="latest", help="Image tag (default: latest)")

    create_parser = subparsers.add_parser("create", help="Pull an image and create a container")
    create_parser.add_argument("image", help="Image repository, e.g. mysql")
    create_parser.add_argument("--tag", default="latest", help="Image tag (default: latest)")
    create_parser.add_argument(
        "-e", "--env",
        action="append",
        type=parse_env_pair,
        default=[],
        metavar="NAME=VALUE",
        help="Environment variable for the container (repeatable, order is kept)",
    )

    for name, help_text in (
        ("start", "Start a container"),
        ("stop", "Stop a container"),
        ("rm", "Remove a container"),
        ("logs", "Follow a container's stdout and stderr"),
    ):
        command_parser = subparsers.add_parser(name, help=help_text)
        command_parser.add_argument("container_id", help="Container id")

    inspect_parser = subparsers.add_parser("inspect", help="Show a container's status")
    inspect_parser.add_argument("container_id", help="Container id")
    inspect_parser.add_argument("--json", action="store_true", help="Print the raw engine payload")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    load_dotenv()
    settings = Settings()
    setup_logging(settings)

    handlers = {
        "config": cmd_config,
        "host": cmd_host,
        "pull": cmd_pull,
        "create": cmd_create,
        "start": cmd_start,
        "stop": cmd_stop,
        "rm": cmd_rm,
        "inspect": cmd_inspect,
        "logs": cmd_logs,
    }

    try:
        return handlers[args.command](args, settings)
    except MissingConfigurationError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        console.print("")
        console.print("Set the missing values in your .env file or export them:")
        for key in e.missing_keys:
            console.print(f"  export {PROPERTY_ENV_VARS[key]}=...")
        return EXIT_CONFIG
    except (ContainerControlError, DockerException) as e:
        console.print(f"[red]Error:[/red] {e}")
        return EXIT_ERROR
    except KeyboardInterrupt:
        console.print("\nCancelled.")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
