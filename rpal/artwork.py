import numpy as np
from PIL import Image
from pathlib import Path
from typing import Optional, Union, List, Tuple, Sequence

from rpal.reduce import img_to_labmat
from rpal.extract import labmat_to_palette, DEFAULT_K, DEFAULT_LIGHTNESS, KMEANS_SEED
from rpal.palette import Palette
from rpal.source import ImageAvailable, ImageResult, load_image, rijks_query

EXPLORE_LEVELS = tuple(round(0.1 * i, 1) for i in range(1, 10))


class ArtPalette:
    """
    An artwork reduced once to its labmat, ready to be turned into palettes.

    `tune` and `explore` re-run only the clustering step, so trying other
    colour counts or lightness levels does not touch the image again.
    """

    def __init__(
        self,
        image: Union[Image.Image, np.ndarray],
        title: Optional[str] = None,
        size: Optional[int] = None,
        block_size: Optional[int] = None,
        blur_sigma: Optional[float] = None,
    ):
        self.image = image
        self.title = title
        self.labmat = img_to_labmat(image, size=size, block_size=block_size, blur_sigma=blur_sigma)

    def tune(self, lightness: float = DEFAULT_LIGHTNESS, k: int = DEFAULT_K, seed: int = KMEANS_SEED) -> Palette:
        return labmat_to_palette(self.labmat, k=k, lightness=lightness, seed=seed)

    @property
    def palette(self) -> Palette:
        return self.tune()

    def explore(
        self,
        k: int = DEFAULT_K,
        levels: Optional[Sequence[float]] = None,
        seed: int = KMEANS_SEED,
    ) -> List[Tuple[float, Palette]]:
        """Palettes for a range of lightness levels, darkest first."""
        levels = EXPLORE_LEVELS if levels is None else levels
        return [(level, self.tune(lightness=level, k=k, seed=seed)) for level in levels]

    def __repr__(self) -> str:
        return f"ArtPalette(title={self.title!r}, rows={self.labmat.shape[0]})"


def resolve_image(query: Optional[str] = None, image_path: Optional[Union[str, Path]] = None) -> ImageResult:
    if (query is None) == (image_path is None):
        raise ValueError("Provide exactly one of query or image_path")
    if image_path is not None:
        return load_image(image_path)
    return rijks_query(query)


def art_palette(
    query: Optional[str] = None,
    image_path: Optional[Union[str, Path]] = None,
    **reduce_kwargs,
) -> Optional[ArtPalette]:
    """
    Build an ArtPalette from a Rijksmuseum query or a local file.

    Returns None when no image could be obtained; the reason has already
    been reported by the image source.
    """
    result = resolve_image(query=query, image_path=image_path)
    if not isinstance(result, ImageAvailable):
        return None
    return ArtPalette(result.image, title=result.title, **reduce_kwargs)
