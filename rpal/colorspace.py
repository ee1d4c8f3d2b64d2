from PIL import Image
import numpy as np
from skimage.color import rgb2lab, lab2rgb, rgb2hsv
from typing import Sequence, Union, List


def to_rgb_array(image: Union[Image.Image, np.ndarray]) -> np.ndarray:
    """
    Normalise an image to an (H, W, 3) float64 RGB array with values in [0, 1].

    Accepts PIL images of any mode, uint8 arrays (0-255) and float arrays
    (already 0-1). Greyscale is broadcast to three channels and an alpha
    channel is dropped.
    """
    if isinstance(image, Image.Image):
        image = np.asarray(image.convert("RGB"))

    arr = np.asarray(image)
    if arr.dtype == np.uint8:
        arr = arr.astype(np.float64) / 255.0
    else:
        arr = arr.astype(np.float64)

    if arr.ndim == 2:
        arr = np.stack([arr, arr, arr], axis=-1)
    elif arr.ndim == 3 and arr.shape[2] == 4:
        arr = arr[:, :, :3]

    if arr.ndim != 3 or arr.shape[2] != 3:
        raise ValueError(f"Expected an RGB image of shape (H, W, 3), got {arr.shape}")
    return arr


def rgb_to_lab(rgb: np.ndarray) -> np.ndarray:
    # D65 white point, sRGB companding handled by skimage
    return rgb2lab(rgb)


def lab_to_rgb(lab: np.ndarray) -> np.ndarray:
    """
    Convert Lab coordinates back to RGB, clipping out-of-gamut channels to [0, 1].

    Works on any array whose last axis holds (L, a, b), including an (N, 3)
    list of colours.
    """
    lab = np.asarray(lab, dtype=np.float64)
    if lab.ndim == 2:
        # skimage wants an image-like array
        return np.clip(lab2rgb(lab[np.newaxis, :, :])[0], 0.0, 1.0)
    return np.clip(lab2rgb(lab), 0.0, 1.0)


def rgb_to_hsv(rgb: np.ndarray) -> np.ndarray:
    """HSV for an (N, 3) list of RGB colours. Hue is in [0, 1)."""
    rgb = np.asarray(rgb, dtype=np.float64)
    if rgb.ndim == 2:
        return rgb2hsv(rgb[np.newaxis, :, :])[0]
    return rgb2hsv(rgb)


def to_rgb255(rgb: np.ndarray) -> np.ndarray:
    # Same rounding as the hex encoding: floor(255 * x + 0.5)
    rgb = np.clip(np.asarray(rgb, dtype=np.float64), 0.0, 1.0)
    return np.floor(rgb * 255.0 + 0.5).astype(np.uint8)


def rgb_to_hex(rgb: Sequence[float]) -> str:
    r, g, b = (int(c) for c in to_rgb255(np.asarray(rgb)))
    return f"#{r:02X}{g:02X}{b:02X}"


def hex_to_rgb(hex_str: str) -> np.ndarray:
    value = hex_str.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Invalid hex colour: '{hex_str}'")
    return np.array([int(value[i:i + 2], 16) for i in (0, 2, 4)], dtype=np.float64) / 255.0


def palette_to_hex(colors: np.ndarray) -> List[str]:
    return [rgb_to_hex(c) for c in colors]
