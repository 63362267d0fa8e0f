"""Command-line interface for Opal."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from .catalog import Descriptor, iter_package_modules, load_module, scan_module, scan_type
from .config import LOG_LEVELS, OpalSettings, configure_logging
from .errors import InvalidArgumentError, OpalError
from .reports import CatalogReporter


class CLIApplication:
    """Top-level command router."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()
        self.parser = argparse.ArgumentParser(
            prog="opal",
            description="Discover methods marked with @callable_method.",
        )
        subparsers = self.parser.add_subparsers(dest="command", required=True)
        scan = subparsers.add_parser(
            "scan",
            help="Print the callable catalog of modules or classes.",
        )
        scan.add_argument(
            "targets",
            nargs="+",
            help="Module name, path to a .py file, or module:Class.",
        )
        scan.add_argument(
            "--recursive",
            action="store_true",
            default=None,
            help="Also scan submodules of package targets (OPAL_RECURSIVE).",
        )
        scan.add_argument(
            "--json",
            dest="output",
            action="store_const",
            const="json",
            help="Print the catalog as JSON instead of a table (OPAL_OUTPUT).",
        )
        scan.add_argument(
            "--log-level",
            dest="log_level",
            type=str.upper,
            choices=LOG_LEVELS,
            help="Logging level for the opal logger (OPAL_LOG_LEVEL).",
        )

    def run(self, argv: Sequence[str] | None = None) -> int:
        load_dotenv(Path.cwd() / ".env")
        args = self.parser.parse_args(argv)
        try:
            settings = OpalSettings()
        except ValidationError as exc:
            problems = "; ".join(f"OPAL_{str(err['loc'][0]).upper()}: {err['msg']}" for err in exc.errors())
            self.console.print(f"[red]error:[/red] invalid settings: {escape(problems)}", highlight=False)
            return 1
        return ScanCommand(self.console, args, settings).run()


class ScanCommand:
    """Driver for `opal scan`."""

    def __init__(self, console: Console, args: argparse.Namespace, settings: OpalSettings | None = None) -> None:
        settings = settings or OpalSettings()
        self.console = console
        self.targets: list[str] = list(args.targets)
        self.recursive = settings.recursive if args.recursive is None else args.recursive
        self.output = args.output or settings.output
        self.log_level = args.log_level or settings.log_level
        self.reporter = CatalogReporter(console)

    def run(self) -> int:
        configure_logging(self.log_level)
        try:
            descriptors = self.collect()
        except (OpalError, ImportError) as exc:
            self.console.print(f"[red]error:[/red] {escape(str(exc))}", highlight=False)
            return 1

        if self.output == "json":
            self.reporter.render_json(descriptors)
        else:
            self.reporter.render(descriptors)
        return 0

    def collect(self) -> list[Descriptor]:
        descriptors: list[Descriptor] = []
        for target in self.targets:
            descriptors.extend(self._scan_target(target))
        return descriptors

    def _scan_target(self, target: str) -> list[Descriptor]:
        module_part, sep, class_name = target.rpartition(":")
        if sep and class_name.isidentifier():
            module = load_module(module_part)
            cls = getattr(module, class_name, None)
            if cls is None:
                msg = f"{module.__name__} has no attribute {class_name}"
                raise InvalidArgumentError(msg)
            return scan_type(cls)

        module = load_module(target)
        if not self.recursive:
            return scan_module(module)

        descriptors: list[Descriptor] = []
        for submodule in iter_package_modules(module):
            descriptors.extend(scan_module(submodule))
        return descriptors


def main(argv: Sequence[str] | None = None) -> int:
    return CLIApplication().run(argv)


if __name__ == "__main__":
    raise SystemExit(main())
