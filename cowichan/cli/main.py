# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for cowichan.

Every operation is a subcommand of ``cowichan``. The global options
(--config, --log-level, --dry-run, --seed, --workers) are inherited by
every subcommand through argparse's parent parser mechanism.

Usage:
    cowichan run --config configs/mandel_invperc.yaml
    cowichan bench --config configs/randmat_thresh.yaml --executions 10
    cowichan export --workers 4 --output-dir /tmp/frames
    cowichan info
"""

import argparse
import sys

from cowichan.cli.commands import handle_bench, handle_export, handle_info, handle_run
from cowichan.cli.exit_codes import USER_ERROR


def _build_global_parser() -> argparse.ArgumentParser:
    """Parent parser (add_help=False) holding the options every subcommand shares."""
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file. Defaults apply when omitted.",
    )
    parent.add_argument(
        "--log-level",
        type=str,
        default=None,
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity (takes precedence over config).",
    )
    parent.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        dest="dry_run",
        help="Load and validate everything, but do not run the chain.",
    )
    parent.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Override chain.randmat.seed (and global.seed).",
    )
    parent.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Override chain.workers (threads for banded kernels).",
    )
    return parent


def _register_subcommands(
    subparsers: argparse._SubParsersAction,  # type: ignore[type-arg]
    parent: argparse.ArgumentParser,
) -> None:
    commands = [
        ("run", "Run the kernel chain once.", handle_run),
        ("bench", "Time repeated chain runs and write a report.", handle_bench),
        ("export", "Write the chain's matrices as PGM/PBM images.", handle_export),
        ("info", "Display environment and effective config.", handle_info),
    ]

    for name, help_text, handler in commands:
        parser = subparsers.add_parser(name, parents=[parent], help=help_text)
        parser.set_defaults(func=handler, executions=None, output_dir=None)

    bench_parser = subparsers.choices["bench"]
    bench_parser.add_argument(
        "--executions",
        type=int,
        default=None,
        help="Number of timed runs (overrides bench.executions).",
    )
    for name in ("bench", "export"):
        subparsers.choices[name].add_argument(
            "--output-dir",
            type=str,
            default=None,
            dest="output_dir",
            help="Directory for the written files (overrides bench.output_directory).",
        )


def main() -> None:
    """
    Main CLI entrypoint, the target of the ``cowichan`` console script.

    If no subcommand is given, print help and exit with USER_ERROR.
    """
    parent = _build_global_parser()

    root_parser = argparse.ArgumentParser(
        prog="cowichan",
        description="cowichan: chained numerical kernel benchmark.",
        parents=[parent],
    )
    subparsers = root_parser.add_subparsers(dest="command")
    _register_subcommands(subparsers, parent)

    args = root_parser.parse_args()

    if not hasattr(args, "func") or args.func is None:
        root_parser.print_help()
        sys.exit(USER_ERROR)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
