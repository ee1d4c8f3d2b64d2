# tests/test_artwork.py
import numpy as np
import pytest
from PIL import Image, ImageDraw
from rpal import artwork, extract
from rpal.palette import Palette


def create_dummy_image():
    img = Image.new("RGB", (256, 256), color=(150, 120, 200))
    draw = ImageDraw.Draw(img)
    draw.rectangle([(50, 50), (150, 150)], fill=(200, 50, 50))
    draw.ellipse([(100, 100), (200, 200)], fill=(50, 200, 50))
    return img


def test_palette_value_type():
    palette = Palette([[1.0, 0.0, 0.0], [0.0, 0.0, 1.0]])

    assert len(palette) == 2
    assert palette.hex == ["#FF0000", "#0000FF"]
    assert list(palette) == ["#FF0000", "#0000FF"]
    assert palette[1] == "#0000FF"
    assert palette.to_tuples() == [(255, 0, 0), (0, 0, 255)]
    assert palette == Palette(np.array([[1.0, 0.0, 0.0], [0.0, 0.0, 1.0]]))
    assert "FF0000" in repr(palette)

    with pytest.raises(ValueError):
        palette.colors[0, 0] = 0.5


def test_art_palette_tune_matches_extractor():
    art = artwork.ArtPalette(create_dummy_image(), title="dummy")

    assert art.labmat.shape == (961, 3)
    tuned = art.tune(lightness=0.5, k=3)
    assert tuned == extract.labmat_to_palette(art.labmat, k=3, lightness=0.5)
    assert len(art.palette) == extract.DEFAULT_K


def test_art_palette_finds_dummy_colors():
    art = artwork.ArtPalette(create_dummy_image())
    palette = art.tune(lightness=0.5, k=3)

    expected_colors = [(150, 120, 200), (200, 50, 50), (50, 200, 50)]
    for expected_color in expected_colors:
        assert any(
            np.linalg.norm(np.array(expected_color) - np.array(color)) < 30
            for color in palette.to_tuples()
        ), f"Expected color {expected_color} not close to any palette color."


def test_explore_returns_one_palette_per_level():
    art = artwork.ArtPalette(create_dummy_image())
    explored = art.explore(k=3)

    assert [level for level, _ in explored] == list(artwork.EXPLORE_LEVELS)
    assert all(len(palette) == 3 for _, palette in explored)

    custom = art.explore(k=2, levels=[0.0, 1.0])
    assert len(custom) == 2


def test_art_palette_from_file(tmp_path):
    path = tmp_path / "painting.png"
    create_dummy_image().save(path)

    art = artwork.art_palette(image_path=path)
    assert art is not None
    assert art.title == "painting"


def test_art_palette_unavailable_returns_none(tmp_path):
    assert artwork.art_palette(image_path=tmp_path / "missing.png") is None


def test_resolve_image_requires_exactly_one_source(tmp_path):
    with pytest.raises(ValueError):
        artwork.resolve_image()
    with pytest.raises(ValueError):
        artwork.resolve_image(query="Vermeer", image_path=tmp_path / "x.png")
