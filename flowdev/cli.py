"""Command line entry point for generating Cadence template files."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, Optional, Sequence

from flowdev.generator import (
    DEFAULT_CONFIG_PATH,
    ContractTemplate,
    FlowConfig,
    Generator,
    GeneratorError,
    ScriptTemplate,
    TemplateItem,
    TestTemplate,
    TransactionTemplate,
    strip_cdc_extension,
)

_TEST_SUFFIX = "_test"


def _contract_item(args: argparse.Namespace) -> TemplateItem:
    return ContractTemplate(
        strip_cdc_extension(args.name), skip_tests=args.skip_tests, save_state=True
    )


def _transaction_item(args: argparse.Namespace) -> TemplateItem:
    return TransactionTemplate(strip_cdc_extension(args.name))


def _script_item(args: argparse.Namespace) -> TemplateItem:
    return ScriptTemplate(strip_cdc_extension(args.name))


def _test_item(args: argparse.Namespace) -> TemplateItem:
    name = strip_cdc_extension(args.name).removesuffix(_TEST_SUFFIX)
    return TestTemplate(name)


_COMMANDS: tuple[tuple[str, str, str, Callable[[argparse.Namespace], TemplateItem]], ...] = (
    (
        "contract",
        "Generate Cadence smart contract template",
        "flow generate contract HelloWorld",
        _contract_item,
    ),
    (
        "transaction",
        "Generate a Cadence transaction template",
        "flow generate transaction SomeTransaction",
        _transaction_item,
    ),
    (
        "script",
        "Generate a Cadence script template",
        "flow generate script SomeScript",
        _script_item,
    ),
    (
        "test",
        "Generate a Cadence test template",
        "flow generate test SomeTest",
        _test_item,
    ),
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="flow")
    commands = parser.add_subparsers(dest="command", metavar="<command>")
    commands.required = True

    generate = commands.add_parser(
        "generate",
        aliases=["g"],
        help="Generate template files for common Cadence code",
    )
    kinds = generate.add_subparsers(dest="kind", metavar="<kind>")
    kinds.required = True

    for kind, summary, example, build in _COMMANDS:
        sub = kinds.add_parser(
            kind,
            help=summary,
            description=summary,
            epilog=f"Example: {example}",
        )
        sub.add_argument("name", help=f"name of the {kind}")
        sub.add_argument(
            "--dir", dest="directory", default="", help="Directory to generate files in"
        )
        sub.add_argument(
            "--skip-tests",
            action="store_true",
            help="Skip generating test files",
        )
        sub.set_defaults(build=build)
    return parser


def _make_logger() -> logging.Logger:
    logger = logging.Logger("flowdev.cli", logging.INFO)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line; return the process exit status."""
    args = _build_parser().parse_args(argv)
    try:
        config = FlowConfig.load(DEFAULT_CONFIG_PATH)
        generator = Generator(
            args.directory, config, _make_logger(), disable_logs=False, save_state=True
        )
        generator.create(args.build(args))
    except GeneratorError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())