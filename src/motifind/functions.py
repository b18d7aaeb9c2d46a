import numpy as np
from numba import njit

from motifind.errors import DomainError


@njit(cache=True)
def refresh_cell(pfm, ppm, pwm, background, n_sequences, delta, symbol, position):
    """Recompute the probability and weight of one (symbol, position) cell from its count."""
    prob = pfm[symbol, position] / n_sequences
    ppm[symbol, position] = prob
    bg = background[symbol]
    weighted = prob / bg if bg > 0.0 else 0.0
    if weighted < delta:
        weighted = delta
    pwm[symbol, position] = np.log2(weighted)


@njit(cache=True)
def fill_profile(data, offsets, starts, length, pfm, ppm, pwm, background, delta):
    """Rebuild all three profile matrices from the alignment starts."""
    n_seq = offsets.size - 1
    for a in range(pfm.shape[0]):
        for pos in range(length):
            pfm[a, pos] = 0

    for i in range(n_seq):
        base = offsets[i] + starts[i]
        for pos in range(length):
            pfm[data[base + pos], pos] += 1

    for a in range(pfm.shape[0]):
        for pos in range(length):
            refresh_cell(pfm, ppm, pwm, background, n_seq, delta, a, pos)


@njit(cache=True)
def shift_window(data, offsets, index, old_start, new_start, length, pfm, ppm, pwm, background, delta):
    """Move one sequence's window, touching only the cells whose counts change."""
    n_seq = offsets.size - 1
    base = offsets[index]
    for pos in range(length):
        old_symbol = data[base + old_start + pos]
        pfm[old_symbol, pos] -= 1
        refresh_cell(pfm, ppm, pwm, background, n_seq, delta, old_symbol, pos)

        new_symbol = data[base + new_start + pos]
        pfm[new_symbol, pos] += 1
        refresh_cell(pfm, ppm, pwm, background, n_seq, delta, new_symbol, pos)


def empirical_background(data: np.ndarray, size: int) -> np.ndarray:
    """Frequency of each symbol index over every position in ``data``."""
    counts = np.bincount(data, minlength=size).astype(np.float64)
    total = counts.sum()
    if total == 0:
        return counts
    return counts / total


def find_max_index(values) -> int:
    """Index of the first maximum of ``values``."""
    values = np.asarray(values)
    if values.size == 0:
        raise DomainError("Empty array error")
    return int(np.argmax(values))


def find_min_index(values) -> int:
    """Index of the first minimum of ``values``."""
    values = np.asarray(values)
    if values.size == 0:
        raise DomainError("Empty array error")
    return int(np.argmin(values))


def shift_scores(scores: np.ndarray) -> np.ndarray:
    """Add the absolute value of the minimum score to every score."""
    scores = np.asarray(scores, dtype=np.float64)
    minimum = scores[find_min_index(scores)]
    return scores + abs(minimum)


def roulette_select(weights: np.ndarray, rng: np.random.Generator) -> int:
    """
    Weighted choice of an index with a single uniform draw.

    Walks the weights subtracting each one from ``u * sum(weights)`` until the
    remainder falls below the current weight.  Returns 0 when nothing is
    selected, which also covers an all-zero weight vector.
    """
    weights = np.asarray(weights, dtype=np.float64)
    if weights.size == 0:
        raise DomainError("Empty array error")
    threshold = rng.random() * float(weights.sum())
    for i in range(weights.size):
        if threshold < weights[i]:
            return i
        threshold -= weights[i]
    return 0


def format_params(params: dict) -> str:
    """Format parameters as a deterministic string key."""
    keys = sorted(params.keys())
    return "_".join(f"{k}-{params[k]}" for k in keys)
