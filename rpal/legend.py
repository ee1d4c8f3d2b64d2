from PIL import Image, ImageDraw, ImageFont
import os

from rpal.colorspace import hex_to_rgb, to_rgb255
from rpal.palette import Palette


def create_legend_image(palette, font_path=None, font_size=14, swatch_size=40, padding=10, show_hex=True):
    """
    Creates a palette swatch PIL Image object.

    Args:
        palette (Palette | list | np.ndarray): Palette object, hex strings, or RGB 0-255 triples.
        font_path (str, optional): Path to a TTF font file.
        font_size (int): Font size for the hex codes under each swatch.
        swatch_size (int): Width/height of each color swatch.
        padding (int): Space around elements and between swatches.
        show_hex (bool): Print the hex code under each swatch.

    Returns:
        PIL.Image.Image: The generated swatch image, or None if the palette is empty.
    """
    if isinstance(palette, Palette):
        colors = palette.to_tuples()
    else:
        colors = []
        for color in palette:
            if isinstance(color, str): # "#RRGGBB"
                color = to_rgb255(hex_to_rgb(color))
            colors.append(tuple(int(c) for c in (color.tolist() if hasattr(color, 'tolist') else color)))

    num_colors = len(colors)
    if num_colors == 0:
        return None

    text_band = (font_size + padding) if show_hex else 0
    width = (swatch_size * num_colors) + (padding * (num_colors + 1))
    height = swatch_size + (2 * padding) + text_band

    image = Image.new("RGB", (width, height), color=(255, 255, 255))
    draw = ImageDraw.Draw(image)

    loaded_font = None
    try:
        if font_path and os.path.isfile(font_path):
            loaded_font = ImageFont.truetype(font_path, font_size)
    except IOError:
        pass # Falls through to default

    if not loaded_font:
        try:
            loaded_font = ImageFont.load_default(size=font_size)
        except TypeError: # Older Pillow versions don't take a size
            loaded_font = ImageFont.load_default()

    for idx, fill_color in enumerate(colors):
        x_start_swatch = padding + idx * (swatch_size + padding)
        y_start_swatch = padding

        draw.rectangle(
            [x_start_swatch, y_start_swatch, x_start_swatch + swatch_size, y_start_swatch + swatch_size],
            fill=fill_color,
            outline=(0, 0, 0)
        )

        if not show_hex:
            continue

        text_content = "#{:02X}{:02X}{:02X}".format(*fill_color)
        bbox = draw.textbbox((0, 0), text_content, font=loaded_font)
        text_w = bbox[2] - bbox[0]

        # Centred under the swatch
        text_x_position = x_start_swatch + (swatch_size - text_w) / 2.0 - bbox[0]
        text_y_position = y_start_swatch + swatch_size + padding / 2.0 - bbox[1]
        draw.text((text_x_position, text_y_position), text_content, fill=(0, 0, 0), font=loaded_font)

    return image
