"""CLI UI utilities for gridsift."""

from rich import box
from rich.console import Console
from rich.table import Table

console = Console()


def print_section(title, level="sub", verbose=True):
    """Print formatted Rich section headers only if verbose=True."""
    if not verbose:
        return

    if level == "main":
        console.rule(f"[bold white]{title}[/bold white]", style="bright_green")
        console.print()
    elif level == "sub":
        console.rule(f"[bold cyan]{title}[/bold cyan]", style="dim cyan")


def make_table(*headers):
    """Minimal-box table with bold headers that fold long cells."""
    table = Table(show_header=True, header_style="bold white", box=box.MINIMAL)
    for header in headers:
        table.add_column(header, overflow="fold")
    return table


def print_preview(df, rows=2):
    """Show the first rows of a raw DataFrame."""
    console.rule("[bold]Data Preview[/bold]", style="white")
    table = make_table(*[str(col) for col in df.columns])
    for row in df.head(rows).itertuples(index=False, name=None):
        table.add_row(*[str(v)[:80] for v in row])
    console.print(table)
    console.print(f"[dim]Rows:[/dim] {df.shape[0]:,}   [dim]Columns:[/dim] {df.shape[1]}\n")
