from PIL import Image
import numpy as np
from scipy.ndimage import gaussian_filter
from skimage.transform import resize
from typing import Optional, Union, List

from rpal.colorspace import to_rgb_array, rgb_to_lab
from rpal.extract import InvalidParameterError

RESIZE_DIM = 512   # images are squashed to RESIZE_DIM x RESIZE_DIM before gridding
BLOCK_SIZE = 17    # block edge in pixels; 512 / 17 -> 31 blocks per axis
BLUR_SIGMA = 5.0   # per-block gaussian blur


def block_count(size: int = RESIZE_DIM, block_size: int = BLOCK_SIZE) -> int:
    """Number of labmat rows produced for a given resize dimension and block size."""
    per_axis = -(-size // block_size)  # ceil
    return per_axis * per_axis


def _split_axis(length: int, block_size: int) -> List[slice]:
    # Consecutive blocks of block_size pixels, the last one takes the remainder
    return [slice(start, min(start + block_size, length)) for start in range(0, length, block_size)]


def img_to_labmat(
    image: Union[Image.Image, np.ndarray],
    size: Optional[int] = None,
    block_size: Optional[int] = None,
    blur_sigma: Optional[float] = None,
) -> np.ndarray:
    """
    Reduce an image to a small matrix of Lab coordinates (a "labmat").

    The image is resized to a fixed square, converted to Lab, split into a grid
    of blocks, each block is blurred on its own and then averaged into a single
    Lab colour.

    Args:
        image: PIL image or (H, W, 3) RGB array (uint8 or float in [0, 1]).
        size (int, optional): Square resize dimension. Default: 512.
        block_size (int, optional): Block edge in pixels. Default: 17.
        blur_sigma (float, optional): Gaussian sigma applied per block. Default: 5.

    Returns:
        np.ndarray: (N, 3) array of (L, a, b) rows, N = block_count(size, block_size).
            Rows are ordered column-chunk first, then row-chunk within it.

    Raises:
        InvalidParameterError: If the settings are out of range or the image is empty.
    """
    actual_size = size if size is not None else RESIZE_DIM
    actual_block_size = block_size if block_size is not None else BLOCK_SIZE
    actual_sigma = blur_sigma if blur_sigma is not None else BLUR_SIGMA

    if actual_size < 1:
        raise InvalidParameterError(f"Resize dimension must be positive, got {actual_size}")
    if actual_block_size < 1:
        raise InvalidParameterError(f"Block size must be positive, got {actual_block_size}")
    if actual_sigma < 0:
        raise InvalidParameterError(f"Blur sigma must not be negative, got {actual_sigma}")

    rgb = to_rgb_array(image)
    if rgb.shape[0] == 0 or rgb.shape[1] == 0:
        raise InvalidParameterError("Cannot reduce an empty image")

    # Nearest neighbour, no pre-smoothing; the per-block blur does the smoothing
    rgb_resized = resize(
        rgb, (actual_size, actual_size, 3), order=0,
        anti_aliasing=False, preserve_range=True, mode="edge",
    )
    lab = rgb_to_lab(rgb_resized)

    xs = _split_axis(actual_size, actual_block_size)
    ys = _split_axis(actual_size, actual_block_size)

    rows = []
    for x_slice in xs:
        for y_slice in ys:
            block = lab[y_slice, x_slice, :]
            if actual_sigma > 0:
                # Blur within the block only, never across channels
                block = gaussian_filter(block, sigma=(actual_sigma, actual_sigma, 0), mode="nearest")
            rows.append(block.reshape(-1, 3).mean(axis=0))

    return np.vstack(rows)
