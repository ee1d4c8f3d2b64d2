import numpy as np
from typing import Iterator, List, Tuple

from rpal.colorspace import palette_to_hex, to_rgb255


class Palette:
    """
    An ordered, immutable set of display colours.

    Colours are stored as an (k, 3) float RGB array in [0, 1]; `hex` and
    `rgb255` give the encodings a renderer needs.
    """

    def __init__(self, colors):
        arr = np.array(colors, dtype=np.float64).reshape(-1, 3)
        arr.setflags(write=False)
        self._colors = arr

    @property
    def colors(self) -> np.ndarray:
        return self._colors

    @property
    def hex(self) -> List[str]:
        return palette_to_hex(self._colors)

    @property
    def rgb255(self) -> np.ndarray:
        return to_rgb255(self._colors)

    def to_tuples(self) -> List[Tuple[int, int, int]]:
        return [tuple(int(c) for c in row) for row in self.rgb255]

    def __len__(self) -> int:
        return self._colors.shape[0]

    def __iter__(self) -> Iterator[str]:
        return iter(self.hex)

    def __getitem__(self, idx) -> str:
        return self.hex[idx]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Palette):
            return NotImplemented
        return np.array_equal(self._colors, other._colors)

    def __hash__(self):
        return hash(tuple(self.hex))

    def __repr__(self) -> str:
        return f"Palette({self.hex})"
