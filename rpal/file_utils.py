from pathlib import Path
from PIL import Image, PngImagePlugin
from typing import Optional, Dict
import svgwrite
from svgwrite.base import BaseElement
import xml.etree.ElementTree as ET
from xml.etree.ElementTree import Element, SubElement
import re

from rpal.palette import Palette

METADATA_PREFIX = "rijkspalette:"
RIJKSPALETTE_NS_URI = "https://github.com/rijkspalette/ns#"
SOFTWARE_NAME = "rijkspalette"


class Verbatim(BaseElement):
    """Inserts a prebuilt XML block (e.g. a namespaced <metadata>) into an svgwrite drawing."""
    elementname = 'metadata'

    def __init__(self, xml_string="", **kwargs_for_base_element):
        super(Verbatim, self).__init__(**kwargs_for_base_element)
        self.xml_string = xml_string

    def get_xml(self):
        # Drawing.tostring() appends whatever Element this returns
        return ET.fromstring(self.xml_string)


def _clean_key(key: str) -> str:
    key_clean = re.sub(r'\s+', '_', key)
    key_clean = re.sub(r'[^a-zA-Z0-9_.-]', '', key_clean)
    if not re.match(r'^[a-zA-Z_]', key_clean): # Must start with letter or underscore
        key_clean = "meta_" + key_clean
    # PNG tEXt keywords are limited to 79 bytes, leave room for the prefix
    return key_clean[:64]


def palette_metadata(palette: Palette, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    metadata = {
        "Colors": ",".join(palette.hex),
        "ColorCount": str(len(palette)),
    }
    if extra:
        metadata.update({k: str(v) for k, v in extra.items()})
    return metadata


def save_palette_png(
    image_to_save: Image.Image,
    output_path: Path,
    command_line_invocation: Optional[str] = None,
    additional_metadata: Optional[Dict[str, str]] = None
):
    """
    Saves a swatch image as PNG, embedding rijkspalette:* tEXt metadata.
    """
    if not isinstance(output_path, Path):
        output_path = Path(output_path)

    output_path.parent.mkdir(parents=True, exist_ok=True)

    png_info = PngImagePlugin.PngInfo()
    png_info.add_text("Software", SOFTWARE_NAME)

    if command_line_invocation:
        png_info.add_text(f"{METADATA_PREFIX}command_line", command_line_invocation)

    if additional_metadata:
        for key, value in additional_metadata.items():
            png_info.add_text(f"{METADATA_PREFIX}{_clean_key(key)}", str(value))

    image_to_save.save(output_path, "PNG", pnginfo=png_info)


def save_palette_svg(
    output_path: Path,
    palette: Palette,
    swatch_size: int = 40,
    padding: int = 10,
    show_hex: bool = True,
    font_size: int = 12,
    command_line_invocation: Optional[str] = None,
    additional_metadata: Optional[Dict[str, str]] = None
):
    """
    Writes the palette as an SVG strip of swatches with a <metadata> block.
    """
    if not isinstance(output_path, Path):
        output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    num_colors = len(palette)
    width = (swatch_size * num_colors) + (padding * (num_colors + 1))
    height = swatch_size + (2 * padding) + ((font_size + padding) if show_hex else 0)

    ET.register_namespace('rijkspalette', RIJKSPALETTE_NS_URI)
    dwg = svgwrite.Drawing(filename=str(output_path), size=(f"{width}px", f"{height}px"), profile='full')

    # --- Metadata block ---
    metadata_root = Element('metadata')
    metadata_root.set('id', 'rijkspaletteMetadata')
    custom = SubElement(metadata_root, f'{{{RIJKSPALETTE_NS_URI}}}palette')
    software_el = SubElement(custom, f'{{{RIJKSPALETTE_NS_URI}}}Software')
    software_el.text = SOFTWARE_NAME

    if command_line_invocation:
        cli_el = SubElement(custom, f'{{{RIJKSPALETTE_NS_URI}}}CommandLineInvocation')
        cli_el.text = command_line_invocation

    for key, value in palette_metadata(palette, additional_metadata).items():
        item_el = SubElement(custom, f'{{{RIJKSPALETTE_NS_URI}}}{_clean_key(key)}')
        item_el.text = str(value)

    dwg.add(Verbatim(
        xml_string=ET.tostring(metadata_root, encoding='unicode', method='xml'),
        profile=dwg.profile,
        debug=dwg.debug
    ))

    # --- Swatches ---
    swatch_group = dwg.g(id="swatches", style="stroke:#000000; stroke-width:1px;")
    label_group = dwg.g(id="labels", style="fill:#000000; text-anchor:middle; font-family:sans-serif;")
    for idx, hex_code in enumerate(palette.hex):
        x = padding + idx * (swatch_size + padding)
        swatch_group.add(dwg.rect(insert=(x, padding), size=(swatch_size, swatch_size), fill=hex_code))
        if show_hex:
            label_group.add(dwg.text(
                hex_code,
                insert=(x + swatch_size / 2.0, padding + swatch_size + padding + font_size / 2.0),
                font_size=f"{font_size}px"
            ))
    dwg.add(swatch_group)
    if show_hex:
        dwg.add(label_group)

    dwg.save(pretty=True)
