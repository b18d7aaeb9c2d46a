from typing import List

import numpy as np


class RaggedData:
    """
    Flattened storage for a list of variable-length integer sequences.

    ``data`` holds every sequence back to back and ``offsets[i]:offsets[i + 1]``
    delimits sequence ``i``.  Compiled kernels receive the two arrays directly,
    which avoids passing Python lists of arrays into numba.
    """

    def __init__(self, data: np.ndarray, offsets: np.ndarray):
        self.data = data
        self.offsets = offsets

    @property
    def lengths(self) -> np.ndarray:
        return np.diff(self.offsets)


def ragged_from_list(data_list: List[np.ndarray], dtype=np.int64) -> RaggedData:
    """Pack a list of one-dimensional arrays into a RaggedData."""
    n = len(data_list)
    offsets = np.zeros(n + 1, dtype=np.int64)
    if n:
        offsets[1:] = np.cumsum([len(arr) for arr in data_list])
    data = np.empty(offsets[-1], dtype=dtype)
    for i in range(n):
        data[offsets[i] : offsets[i + 1]] = data_list[i]
    return RaggedData(data, offsets)
