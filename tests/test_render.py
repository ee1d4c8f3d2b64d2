# tests/test_render.py
from rich.console import Console
from rpal import render
from rpal.palette import Palette


def recording_console():
    return Console(record=True, width=120, force_terminal=True, color_system="truecolor")


def test_print_palette_shows_hex_codes():
    console = recording_console()
    palette = Palette([(1.0, 0.0, 0.0), (0.1, 0.1, 0.1)])

    render.print_palette(palette, console=console, title="Test")
    text = console.export_text()

    assert "Test" in text
    assert "#FF0000" in text
    assert "#1A1A1A" in text


def test_swatch_text_uses_palette_as_background():
    text = render.swatch_text(Palette([(0.0, 0.0, 1.0)]), width=9)
    assert text.plain.strip() == "#0000FF"
    assert text.spans[0].style.bgcolor.triplet.hex.upper() == "#0000FF"


def test_print_exploration_table():
    console = recording_console()
    explored = [(0.1, Palette([(0.2, 0.0, 0.0)])), (0.9, Palette([(1.0, 0.8, 0.8)]))]

    render.print_exploration(explored, console=console)
    text = console.export_text()

    assert "0.10" in text and "0.90" in text
    assert "#330000" in text
