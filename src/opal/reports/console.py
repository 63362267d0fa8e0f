"""Console rendering of a callable catalog using Rich."""

from __future__ import annotations

import json
import sys
from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from opal.catalog.descriptor import Descriptor, format_type


class CatalogReporter:
    """Prints discovered methods as a table or as JSON."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(file=sys.__stdout__)

    def _format_parameters(self, descriptor: Descriptor) -> str:
        return ", ".join(f"{format_type(p.parameter_type)} {p.name}" for p in descriptor.parameters)

    def _read_only_cell(self, descriptor: Descriptor) -> str:
        return "[green]yes[/green]" if descriptor.read_only else "[yellow]no[/yellow]"

    def render(self, descriptors: Sequence[Descriptor]) -> None:
        self.console.print(f"Found {len(descriptors)} callable methods")
        if not descriptors:
            return

        table = Table(show_header=True, header_style="bold")
        table.add_column("Type")
        table.add_column("Method", style="cyan")
        table.add_column("Parameters")
        table.add_column("Returns")
        table.add_column("Read-only", justify="center")
        table.add_column("Description")

        for descriptor in descriptors:
            table.add_row(
                escape(descriptor.declaring_type_name),
                escape(descriptor.method_name),
                escape(self._format_parameters(descriptor)),
                escape(format_type(descriptor.return_type)),
                self._read_only_cell(descriptor),
                escape(descriptor.description),
            )
        self.console.print(table)

    def render_json(self, descriptors: Sequence[Descriptor]) -> None:
        payload = [descriptor.model_dump(mode="json") for descriptor in descriptors]
        self.console.print_json(json.dumps(payload))
