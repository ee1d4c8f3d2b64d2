from rich.console import Console
from rich.style import Style
from rich.table import Table
from rich.text import Text
from typing import Optional, List, Tuple

from rpal.palette import Palette


def swatch_text(palette: Palette, width: int = 8, show_hex: bool = True) -> Text:
    """A single line of coloured blocks, optionally with the hex code inside each."""
    line = Text()
    for hex_code, (r, g, b) in zip(palette.hex, palette.to_tuples()):
        # Dark text on light swatches, light on dark
        luma = 0.299 * r + 0.587 * g + 0.114 * b
        fg = "#000000" if luma > 140 else "#FFFFFF"
        label = hex_code if show_hex else ""
        line.append(label.center(width), style=Style(color=fg, bgcolor=hex_code))
    return line


def print_palette(palette: Palette, console: Optional[Console] = None, title: Optional[str] = None, width: int = 9):
    console = console or Console()
    if title:
        console.print(Text(title, style="bold"))
    console.print(swatch_text(palette, width=width))


def print_exploration(explored: List[Tuple[float, Palette]], console: Optional[Console] = None, title: Optional[str] = None):
    console = console or Console()
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("lightness", justify="right")
    table.add_column("palette")
    for level, palette in explored:
        table.add_row(f"{level:.2f}", swatch_text(palette, width=9))
    console.print(table)
