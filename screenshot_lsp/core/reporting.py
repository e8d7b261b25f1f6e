"""Terminal and JSON rendering of findings."""

import json
from typing import Any, Dict, List, Mapping, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .findings import Finding, FindingCollection, FindingSeverity

SEVERITY_STYLES = {
    FindingSeverity.ERROR: "bold red",
    FindingSeverity.WARNING: "yellow",
    FindingSeverity.INFO: "cyan",
}


class Reporter:
    """Renders per-file findings as rich tables or a JSON document."""

    def __init__(self, console: Optional[Console] = None, max_message_length: int = 100):
        self.console = console or Console()
        self.max_message_length = max_message_length

    def render_text(self, results: Mapping[str, List[Finding]]) -> None:
        """Print one table per file that has findings, then a summary panel."""
        total = FindingCollection()
        for path, findings in results.items():
            collection = FindingCollection(list(findings))
            collection.sort("position")
            total.extend(collection.findings)
            if not collection:
                continue

            table = Table(title=path, show_header=True, header_style="bold magenta")
            table.add_column("Severity", justify="center")
            table.add_column("Position", justify="right", style="green", no_wrap=True)
            table.add_column("Code", style="cyan", no_wrap=True)
            table.add_column("Message", style="white")

            for finding in collection:
                style = SEVERITY_STYLES.get(finding.severity, "white")
                start = finding.range.start
                message = finding.message.replace("\n\n", " ")
                if len(message) > self.max_message_length:
                    message = message[: self.max_message_length] + "..."
                table.add_row(
                    f"[{style}]{finding.severity.name.lower()}[/{style}]",
                    f"{start.line + 1}:{start.character + 1}",
                    finding.code,
                    message,
                )
            self.console.print(table)

        if not total:
            self.console.print("[green]No issues found![/green]")
            return

        self.console.print()
        self.console.print(Panel(
            self.summary_line(total),
            title="Summary",
            border_style="blue",
        ))

    @staticmethod
    def summary_line(findings: FindingCollection) -> str:
        counts = findings.count_by_severity()
        parts = [
            f"[bold]{counts[severity]}[/bold] {severity.name.lower()}"
            for severity in FindingSeverity
        ]
        return f"Total: [bold]{len(findings)}[/bold] findings ({', '.join(parts)})"

    @staticmethod
    def to_json(results: Mapping[str, List[Finding]]) -> str:
        """Serialize findings grouped by file."""
        files: Dict[str, Any] = {}
        total = 0
        for path, findings in results.items():
            collection = FindingCollection(list(findings))
            collection.sort("position")
            files[path] = collection.to_dict_list()
            total += len(collection)
        return json.dumps({"total_findings": total, "files": files}, indent=2)

    def render_json(self, results: Mapping[str, List[Finding]]) -> None:
        self.console.print_json(self.to_json(results))
