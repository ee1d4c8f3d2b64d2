"""
Image acquisition for palettes.

Every entry point returns an ImageResult: either ImageAvailable carrying a
normalised RGB array, or ImageUnavailable with a human-readable reason.
Network and decoding failures never escape as exceptions.
"""
import os
import re
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

import numpy as np
import requests
import typer
from PIL import Image, UnidentifiedImageError

from rpal.colorspace import to_rgb_array

RIJKS_COLLECTION_URL = "https://www.rijksmuseum.nl/api/nl/collection"
RIJKS_DEFAULT_API_KEY = "1nPNPlLc"
RIJKS_IMAGE_SIZE = "s512"  # ask the image server for a 512px rendition
DEFAULT_TIMEOUT = 10


@dataclass(frozen=True)
class ImageAvailable:
    image: np.ndarray
    title: Optional[str] = None
    url: Optional[str] = None


@dataclass(frozen=True)
class ImageUnavailable:
    reason: str


ImageResult = Union[ImageAvailable, ImageUnavailable]


def _report(reason: str) -> ImageUnavailable:
    typer.secho(reason, fg=typer.colors.YELLOW, err=True)
    return ImageUnavailable(reason)


def decode_image(data: bytes) -> np.ndarray:
    with Image.open(BytesIO(data)) as img:
        return to_rgb_array(img)


def load_image(path: Union[str, Path]) -> ImageResult:
    """Load a local image file."""
    path = Path(path)
    try:
        with Image.open(path) as img:
            rgb = to_rgb_array(img)
    except FileNotFoundError:
        return _report(f"Image file not found: {path}")
    except (UnidentifiedImageError, OSError) as e:
        return _report(f"Could not read image {path}: {e}")

    if rgb.size == 0:
        return _report(f"Image {path} is empty")
    return ImageAvailable(image=rgb, title=path.stem, url=None)


def rijks_api_key() -> str:
    return os.environ.get("RIJKS_API_KEY", RIJKS_DEFAULT_API_KEY)


def sized_image_url(url: str, size: str = RIJKS_IMAGE_SIZE) -> str:
    # The collection API hands out full-size "=s0" links
    return re.sub(r"=s0$", f"={size}", url)


def rijks_query(
    query: str,
    api_key: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> ImageResult:
    """
    Find a painting in the Rijksmuseum collection and download its image.

    Args:
        query (str): Free-text search, e.g. "Vermeer".
        api_key (str, optional): Collection API key. Default: $RIJKS_API_KEY or the public key.
        timeout (float): Per-request timeout in seconds.
        session (requests.Session, optional): Session to issue requests with.

    Returns:
        ImageResult: the first matching painting that has an image, or the reason there is none.
    """
    http = session if session is not None else requests
    params = {
        "q": query,
        "type": "schilderij",
        "key": api_key if api_key else rijks_api_key(),
        "format": "json",
    }

    try:
        response = http.get(RIJKS_COLLECTION_URL, params=params, timeout=timeout)
        response.raise_for_status()
        result = response.json()
    except (requests.RequestException, ValueError):
        return _report("Rijksmuseum unavailable")

    art_objects = result.get("artObjects") if isinstance(result, dict) else None
    if not art_objects:
        return _report("Query returned no results")

    with_image = [obj for obj in art_objects if obj.get("hasImage") and (obj.get("webImage") or {}).get("url")]
    if not with_image:
        return _report("Query returned no results")

    art_object = with_image[0]
    image_url = sized_image_url(art_object["webImage"]["url"])

    try:
        image_response = http.get(image_url, timeout=timeout)
        image_response.raise_for_status()
        rgb = decode_image(image_response.content)
    except (requests.RequestException, UnidentifiedImageError, OSError):
        return _report("Image unavailable")

    return ImageAvailable(image=rgb, title=art_object.get("longTitle") or art_object.get("title"), url=image_url)
