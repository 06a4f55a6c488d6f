"""
Deploy Checker CLI

Command-line interface for checking a deployment against its declared state.

Exit codes:
    0  no violations (or the --expect distribution matched)
    1  violations found, expectation failed, or ownership mismatch
    2  configuration or RPC error
"""

import argparse
import asyncio
import sys
from typing import List, Optional, Sequence, Tuple

from . import __version__
from .app import MultiDomainApp
from .checker import run_checks
from .errors import CheckerError, ConfigurationError, DomainCheckError, OwnershipMismatchError
from .ledger import ViolationLedger
from .logging_config import setup_logging
from .main import CheckerConfig, load_yaml
from .output import BaseFormatter, ConsoleFormatter, JsonFormatter, OutputLevel
from .verification.upgrade import UpgradeChecker
from .violations import ViolationType

EXIT_OK = 0
EXIT_VIOLATIONS = 1
EXIT_ERROR = 2


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog="deploy-checker",
        description="Deploy Checker - detect drift between declared and on-chain deployment state",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    check_parser = subparsers.add_parser("check", help="Check a deployment")
    check_parser.add_argument(
        "--config",
        "-c",
        required=True,
        help="Deployment file (YAML with `domains:` and `checker:` sections)",
    )
    check_parser.add_argument(
        "--ownership",
        action="store_true",
        default=None,
        help="Also check ownership of governed contracts",
    )
    check_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON",
    )
    check_parser.add_argument(
        "--expect",
        action="append",
        dest="expectations",
        metavar="KIND=COUNT",
        help="Expected violation count per kind; unlisted kinds must be absent",
    )

    subparsers.add_parser("kinds", help="List violation kinds")

    # Global options
    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Increase verbosity",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet mode",
    )
    parser.add_argument(
        "--log-file",
        help="Log to file",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )

    return parser.parse_args(argv)


def parse_expectations(values: Sequence[str]) -> Tuple[List[ViolationType], List[int]]:
    """Turn ["UpgradeBeacon=2", ...] into parallel kind and count lists"""
    kinds: List[ViolationType] = []
    counts: List[int] = []
    for value in values:
        kind_name, sep, count = value.partition("=")
        if not sep:
            raise ConfigurationError(f"Expectation must look like KIND=COUNT: {value!r}")
        try:
            kinds.append(ViolationType(kind_name.strip()))
        except ValueError:
            valid = ", ".join(k.value for k in ViolationType)
            raise ConfigurationError(f"Unknown violation kind {kind_name!r} (valid: {valid})")
        try:
            counts.append(int(count))
        except ValueError:
            raise ConfigurationError(f"Expected count is not an integer: {value!r}")
    return kinds, counts


def _exit_code_for(ledger: ViolationLedger, args: argparse.Namespace, formatter: BaseFormatter) -> int:
    if args.expectations:
        kinds, counts = parse_expectations(args.expectations)
        result = ledger.check_distribution(kinds, counts)
        if not result.passed:
            formatter.error(result.reason)
            return EXIT_VIOLATIONS
        return EXIT_OK
    return EXIT_VIOLATIONS if len(ledger) else EXIT_OK


async def run_check(args: argparse.Namespace, formatter: BaseFormatter) -> int:
    """Load the deployment, run the checker and report"""
    try:
        data = load_yaml(args.config)
        config = CheckerConfig.from_dict(data.get("checker") or {})
        app = MultiDomainApp.from_dict(data.get("domains") or {}, timeout_ms=config.rpc_timeout_ms)
        if args.expectations:
            parse_expectations(args.expectations)
    except (OSError, CheckerError) as e:
        formatter.error(str(e))
        return EXIT_ERROR

    if not app.domains:
        formatter.error(f"No domains declared in {args.config}")
        return EXIT_ERROR

    ownership = config.check_ownership if args.ownership is None else args.ownership
    checker = UpgradeChecker(app, config)

    try:
        await run_checks(checker, ownership=ownership)
    except DomainCheckError as e:
        formatter.report(checker.violations)
        formatter.error(str(e))
        if all(isinstance(exc, OwnershipMismatchError) for exc in e.failures.values()):
            return EXIT_VIOLATIONS
        return EXIT_ERROR

    formatter.report(checker.violations)
    return _exit_code_for(checker.ledger, args, formatter)


def show_kinds() -> int:
    """List violation kinds"""
    for kind in ViolationType:
        print(kind.value)
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point"""
    args = parse_args(argv)

    log_level = "DEBUG" if args.verbose >= 2 else ("INFO" if args.verbose >= 1 else "WARNING")
    if args.quiet:
        log_level = "ERROR"

    setup_logging(
        level=log_level,
        log_file=args.log_file,
        use_colors=not args.no_color,
    )

    output_level = OutputLevel.DEBUG if args.verbose >= 2 else (
        OutputLevel.VERBOSE if args.verbose >= 1 else (
            OutputLevel.QUIET if args.quiet else OutputLevel.NORMAL
        )
    )

    if args.command == "check":
        if args.json:
            formatter = JsonFormatter(level=output_level)
        else:
            formatter = ConsoleFormatter(level=output_level, use_colors=not args.no_color)
        return asyncio.run(run_check(args, formatter))
    elif args.command == "kinds":
        return show_kinds()
    else:
        print("Use --help for usage information")
        return EXIT_VIOLATIONS


if __name__ == "__main__":
    sys.exit(main())
