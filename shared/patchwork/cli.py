"""
Command-line interface.

Usage:
    patchwork apply --branch fix-lint --message "Fix lint" \\
        --repo acme/api --repo acme/web --command "sed -i 's/foo/bar/' setup.cfg"
    patchwork apply --branch fix-lint --message "Fix lint" --repos-file repos.yaml --script ./fix.sh
    patchwork config validate        # Validate tokens and run settings
    patchwork config show            # Show configuration (secrets masked)
    patchwork config health          # Check tokens against GitHub and CircleCI

Exit codes:
    0  every repository's build succeeded
    1  configuration error or aborted run
    2  the run completed but some repository did not succeed
"""

import argparse
import json
import sys

from patchwork_config import ConfigStatus, PatchworkSettings
from patchwork_logging import configure_root_logging, get_logger

from .errors import RunAborted
from .models import ApplyOptions, Repository
from .orchestrator import Patchwork
from .repos import load_repos_file
from .transform import command_patch, script_patch


logger = get_logger("patchwork.cli")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INCOMPLETE = 2

LOGGER_NAMES = (
    "patchwork",
    "patchwork.preparer",
    "patchwork.monitor",
    "patchwork.exec",
    "patchwork.github",
    "patchwork.circleci",
    "patchwork.workspace",
    "patchwork.transform",
)


def _print_validation_result(name: str, result, *, verbose: bool = False) -> None:
    icon = "[OK]" if result.status is ConfigStatus.VALID else "[FAIL]"
    print(f"{icon} {name}: {result.status.value}")

    for error in result.errors:
        print(f"      ERROR: {error}")

    if verbose:
        for warning in result.warnings:
            print(f"      WARNING: {warning}")


def _load_settings() -> PatchworkSettings | None:
    try:
        return PatchworkSettings.from_env()
    except ValueError as e:
        logger.error("Could not load configuration", error=str(e))
        return None


def cmd_validate(args: argparse.Namespace) -> int:
    settings = _load_settings()
    if settings is None:
        return EXIT_ERROR

    aggregate = settings.validate_all()
    for name, result in aggregate.results.items():
        _print_validation_result(name, result, verbose=args.show_warnings)

    if aggregate.all_valid:
        print("\nAll configurations valid.")
        return EXIT_OK
    print("\nSome configurations have errors.")
    return EXIT_ERROR


def cmd_show(args: argparse.Namespace) -> int:
    settings = _load_settings()
    if settings is None:
        return EXIT_ERROR
    print(json.dumps(settings.to_dict(), indent=2))
    return EXIT_OK


def cmd_health(args: argparse.Namespace) -> int:
    settings = _load_settings()
    if settings is None:
        return EXIT_ERROR

    aggregate = settings.health_check_all(timeout=args.timeout)
    print(f"Overall: {aggregate.status}")
    for name, result in aggregate.services.items():
        icon = "[OK]" if result.healthy else "[FAIL]"
        latency = f" ({result.latency_ms:.0f}ms)" if result.latency_ms else ""
        print(f"  {icon} {name}: {result.message}{latency}")

    if args.json:
        print(json.dumps(aggregate.to_dict(), indent=2))

    return EXIT_OK if aggregate.status == "healthy" else EXIT_ERROR


def _collect_repos(args: argparse.Namespace) -> list[Repository]:
    repos = [Repository.parse(value) for value in args.repo or []]
    if args.repos_file:
        repos.extend(load_repos_file(args.repos_file))
    return repos


def cmd_apply(args: argparse.Namespace) -> int:
    settings = _load_settings()
    if settings is None:
        return EXIT_ERROR

    run = settings.run
    if args.poll_interval is not None:
        run.poll_interval = args.poll_interval
    if args.max_wait is not None:
        run.max_wait = args.max_wait
    if args.max_monitors is not None:
        run.max_monitors = args.max_monitors
    if args.continue_on_error:
        run.fail_fast = False
    if run.log_file:
        for name in LOGGER_NAMES:
            get_logger(name).add_file_handler(run.log_file)

    validation = settings.validate_all()
    if not validation.all_valid:
        for name, result in validation.results.items():
            if not result.is_valid:
                _print_validation_result(name, result)
        return EXIT_ERROR

    try:
        repos = _collect_repos(args)
    except (ValueError, OSError) as e:
        logger.error("Could not read repositories", error=str(e))
        return EXIT_ERROR
    if not repos:
        logger.error("No repositories given; use --repo or --repos-file")
        return EXIT_ERROR

    if args.command:
        patch = command_patch(args.command, shell=True, timeout=args.patch_timeout)
    else:
        patch = script_patch(args.script, timeout=args.patch_timeout)

    options = ApplyOptions(
        message=args.message,
        branch=args.branch,
        repos=repos,
        fail_fast=run.fail_fast,
        poll_interval=run.poll_interval,
        max_wait=run.max_wait,
        max_monitors=run.max_monitors,
    )

    try:
        report = Patchwork.from_settings(settings).apply(options, patch)
    except RunAborted as e:
        logger.error("Aborting", error=str(e.cause))
        if args.json:
            print(json.dumps(e.report.to_dict(), indent=2))
        return EXIT_ERROR

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    return EXIT_OK if report.all_succeeded else EXIT_INCOMPLETE


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="patchwork",
        description="Apply a patch across repositories and report their CI results.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command_name", help="Available commands")

    apply_parser = subparsers.add_parser("apply", help="Patch, push and monitor repositories")
    apply_parser.add_argument("--branch", "-b", required=True, help="Branch to create on every repository")
    apply_parser.add_argument("--message", "-m", required=True, help="Commit message")
    apply_parser.add_argument("--repo", "-r", action="append", metavar="OWNER/REPO", help="Repository (repeatable)")
    apply_parser.add_argument("--repos-file", "-f", help="YAML or text file listing repositories")
    transform = apply_parser.add_mutually_exclusive_group(required=True)
    transform.add_argument("--command", "-c", help="Shell command run inside each workspace")
    transform.add_argument("--script", "-s", help="Executable run inside each workspace")
    apply_parser.add_argument("--patch-timeout", type=float, help="Seconds before the transformation is killed")
    apply_parser.add_argument("--poll-interval", type=float, help="Seconds between CI polls (default 120)")
    apply_parser.add_argument("--max-wait", type=float, help="Seconds to wait for each build before timing out")
    apply_parser.add_argument("--max-monitors", type=int, help="Maximum concurrent build monitors")
    apply_parser.add_argument(
        "--continue-on-error",
        action="store_true",
        help="Record infrastructure errors per repository instead of aborting the run",
    )
    apply_parser.add_argument("--json", "-j", action="store_true", help="Print the final report as JSON")

    config_parser = subparsers.add_parser("config", help="Inspect configuration")
    config_sub = config_parser.add_subparsers(dest="config_command", required=True)

    validate_parser = config_sub.add_parser("validate", help="Validate configuration")
    validate_parser.add_argument("--warnings", "-w", dest="show_warnings", action="store_true", help="Show warnings")
    config_sub.add_parser("show", help="Show configuration (secrets masked)")
    health_parser = config_sub.add_parser("health", help="Check tokens against remote services")
    health_parser.add_argument("--timeout", "-t", type=float, default=5.0, help="Timeout per check in seconds")
    health_parser.add_argument("--json", "-j", action="store_true", help="Output full JSON result")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the patchwork command.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_root_logging()
    if args.verbose:
        for name in LOGGER_NAMES:
            get_logger(name, level="DEBUG")

    if args.command_name == "apply":
        return cmd_apply(args)
    if args.command_name == "config":
        handlers = {"validate": cmd_validate, "show": cmd_show, "health": cmd_health}
        return handlers[args.config_command](args)

    parser.print_help()
    return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
