import math
import numbers
import warnings
import numpy as np
from sklearn.cluster import KMeans
from sklearn.exceptions import ConvergenceWarning
from typing import Optional, Tuple

from rpal.colorspace import lab_to_rgb, rgb_to_hsv, to_rgb255
from rpal.palette import Palette

KMEANS_SEED = 142857
DEFAULT_K = 5
DEFAULT_LIGHTNESS = 0.6


class InvalidParameterError(ValueError):
    """Raised for palette or reducer settings that cannot produce a palette."""


def validate_parameters(labmat: np.ndarray, k, lightness) -> None:
    """
    Reject inputs that would make clustering undefined.

    Raises:
        InvalidParameterError: If labmat is not an (N, 3) array, k is not a
            positive integer no larger than N, lightness is outside [0, 1],
            or any labmat row holds NaN or infinite values.
    """
    if not isinstance(labmat, np.ndarray) or labmat.ndim != 2 or labmat.shape[1] != 3:
        shape = getattr(labmat, "shape", None)
        raise InvalidParameterError(f"labmat must be an (N, 3) array, got shape {shape}")
    if isinstance(k, bool) or not isinstance(k, numbers.Integral):
        raise InvalidParameterError(f"k must be an integer, got {k!r}")
    if k < 1:
        raise InvalidParameterError(f"k must be at least 1, got {k}")
    if k > labmat.shape[0]:
        raise InvalidParameterError(
            f"k ({k}) cannot exceed the number of labmat rows ({labmat.shape[0]})"
        )
    if isinstance(lightness, bool) or not isinstance(lightness, numbers.Real):
        raise InvalidParameterError(f"lightness must be a number, got {lightness!r}")
    if math.isnan(lightness) or not (0.0 <= lightness <= 1.0):
        raise InvalidParameterError(f"lightness must be within [0, 1], got {lightness}")
    bad_rows = int(np.count_nonzero(~np.isfinite(labmat).all(axis=1)))
    if bad_rows:
        raise InvalidParameterError(
            f"labmat contains {bad_rows} row(s) with NaN or infinite values; cannot cluster"
        )


def cluster_labmat(labmat: np.ndarray, k: int, seed: int = KMEANS_SEED) -> Tuple[np.ndarray, np.ndarray]:
    """
    K-means on the a*b* columns only; lightness plays no part in the distance.

    Returns:
        Tuple[np.ndarray, np.ndarray]: labels (N,) in 0..k-1 and centres (k, 2).
    """
    chroma = labmat[:, 1:]
    with warnings.catch_warnings():
        # Solid or near-solid images yield fewer distinct points than k
        warnings.simplefilter("ignore", ConvergenceWarning)
        kmeans = KMeans(n_clusters=k, random_state=seed, n_init='auto')
        labels = kmeans.fit_predict(chroma)
    return labels, kmeans.cluster_centers_


def selection_rank(cluster_size: int, lightness: float) -> int:
    """1-based rank ceil(n * lightness), clamped to [1, n]."""
    rank = int(math.ceil(cluster_size * lightness))
    return max(1, min(rank, cluster_size))


def select_representatives(
    labmat: np.ndarray,
    labels: np.ndarray,
    k: int,
    lightness: float,
    centers: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Pick one Lab colour per cluster at the requested lightness rank.

    Members of each cluster are sorted by L ascending (ties keep labmat order).
    A cluster left empty by k-means borrows the labmat row nearest its centre.

    Returns:
        np.ndarray: (k, 3) Lab representatives, in cluster-label order.
    """
    reps = np.empty((k, 3), dtype=np.float64)
    for cluster_id in range(k):
        members = labmat[labels == cluster_id]
        if members.shape[0] == 0:
            if centers is None:
                raise InvalidParameterError(f"Cluster {cluster_id} is empty and no centres were given")
            dists = np.linalg.norm(labmat[:, 1:] - centers[cluster_id], axis=1)
            members = labmat[[int(np.argmin(dists))]]

        by_lightness = np.argsort(members[:, 0], kind="stable")
        rank = selection_rank(members.shape[0], lightness)
        reps[cluster_id] = members[by_lightness[rank - 1]]
    return reps


def order_by_hue(rgb: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Sort RGB colours by HSV hue ascending, stable on ties.

    Hue is taken from the 8-bit colour that will actually be displayed, so
    rounding noise around pure primaries cannot wrap a red to ~360 degrees.

    Returns:
        Tuple[np.ndarray, np.ndarray]: the sorted colours and the permutation used.
    """
    displayed = to_rgb255(rgb).astype(np.float64) / 255.0
    hues = rgb_to_hsv(displayed)[:, 0]
    order = np.argsort(hues, kind="stable")
    return rgb[order], order


def labmat_to_palette(
    labmat: np.ndarray,
    k: int = DEFAULT_K,
    lightness: float = DEFAULT_LIGHTNESS,
    seed: int = KMEANS_SEED,
) -> Palette:
    """
    Turn a labmat into a hue-ordered palette of exactly k colours.

    Args:
        labmat (np.ndarray): (N, 3) Lab rows, e.g. from img_to_labmat.
        k (int): Number of colours. 1 <= k <= N.
        lightness (float): 0 picks the darkest member of each cluster, 1 the lightest.
        seed (int): Random state for k-means initialisation.

    Returns:
        Palette: k colours ordered by hue.

    Raises:
        InvalidParameterError: On invalid k, lightness or labmat, before any clustering.
    """
    validate_parameters(labmat, k, lightness)

    labels, centers = cluster_labmat(labmat, k, seed=seed)
    lab_reps = select_representatives(labmat, labels, k, lightness, centers=centers)

    rgb_reps = lab_to_rgb(lab_reps)
    ordered, _ = order_by_hue(rgb_reps)
    return Palette(ordered)
