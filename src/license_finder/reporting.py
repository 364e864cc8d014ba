"""
Console output for dependency lists.

Provides color-coded approval summaries using the Rich library.
"""

from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .dependency_list import DependencyList


class ApprovalReporter:
    """Formats and displays dependency approval state."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def print_report(self, dependency_list: DependencyList) -> None:
        """
        Print the full summary followed by outstanding action items.

        Args:
            dependency_list: The reconciled list to display
        """
        self.console.print()
        self.print_summary(dependency_list)
        self.print_action_items(dependency_list)

    def print_summary(self, dependency_list: DependencyList) -> None:
        """Print every dependency with its approval status."""
        table = Table(title="📦 Dependencies", box=box.ROUNDED, title_style="bold cyan")
        table.add_column("Name", style="bold")
        table.add_column("Version")
        table.add_column("License")
        table.add_column("Status", justify="center")

        for dependency in dependency_list:
            status = (
                "[green]approved[/green]"
                if dependency.approved
                else "[bold yellow]pending[/bold yellow]"
            )
            table.add_row(
                escape(dependency.name),
                escape(dependency.version or ""),
                escape(dependency.license or "unknown"),
                status,
            )

        self.console.print(table)
        self.console.print()

    def print_action_items(self, dependency_list: DependencyList) -> None:
        """Print unapproved dependencies, or a success panel when there are none."""
        action_items = dependency_list.action_items()

        if action_items:
            self.console.print(
                Panel(
                    Text(action_items),
                    title="[bold yellow]⚠️  Dependencies awaiting approval[/bold yellow]",
                    border_style="yellow",
                )
            )
        else:
            self.console.print(
                Panel(
                    "✅ All dependencies are approved.",
                    title="[bold green]✅ License Status[/bold green]",
                    border_style="green",
                )
            )

        pending = len(dependency_list.unapproved())
        self.console.print(
            f"\n[dim]{len(dependency_list)} dependencies, {pending} unapproved[/dim]"
        )
