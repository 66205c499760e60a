"""
rich_ui.py: Rich rendering of the run header and the final summaries.
"""

from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..core.aggregator import RunState
from ..core.extractor import ExtractionReport


def print_run_header(console: Console, images_dir: Path, total: int, model: str,
                     prompt: str, concurrency: int) -> None:
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column(style="bold cyan")
    table.add_column()
    table.add_row("Images dir", str(images_dir))
    table.add_row("Images found", str(total))
    table.add_row("Model", model)
    table.add_row("Prompt", f'"{prompt}"')
    table.add_row("Concurrency", str(concurrency))
    console.print(Panel(table, title="Batch image processing", border_style="blue"))


def print_summary(console: Console, state: RunState, output_file: Optional[Path] = None) -> None:
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column(style="bold")
    table.add_column(justify="right")
    table.add_row("Total images", str(state.total_count))
    table.add_row("[green]Successful[/green]", str(len(state.results)))
    table.add_row("[red]Failed[/red]", str(len(state.errors)))
    if state.results:
        table.add_row("Total tokens used", f"{state.total_tokens:,}")
    if output_file is not None:
        table.add_row("Results saved to", str(output_file))
    console.print(Panel(table, title="Processing summary", border_style="green"))


def print_extraction_summary(console: Console, report: ExtractionReport) -> None:
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column(style="bold")
    table.add_column(justify="right")
    table.add_row("Result files processed", str(report.total_files))
    table.add_row("Total images found", str(report.total_images))
    table.add_row("[green]Successful descriptions[/green]", str(report.successful_descriptions))
    table.add_row("[red]Failed images[/red]", str(report.failed_images))
    if report.output_file is not None:
        table.add_row("Simple list", str(report.output_file))
        table.add_row("With metadata", str(report.detailed_output_file))
    console.print(Panel(table, title="Extraction summary", border_style="green"))
