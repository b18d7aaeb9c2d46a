"""
alphabet
========

Finite symbol sets with a background probability distribution.  Symbols are
strings and may span more than one character; each is mapped to an integer
index in ``[0, size)`` following the order in which it was declared.
Sampling, enumeration and consensus tie-breaking walk the symbols in sorted
order instead.
"""

from __future__ import annotations

import itertools
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from motifind.errors import ConfigurationError, DomainError

PROBABILITY_TOLERANCE = 1e-6


def uniform_distribution(size: int) -> np.ndarray:
    """Return a uniform probability vector of the given size."""
    if size < 1:
        raise ConfigurationError("Cannot build a distribution over an empty alphabet")
    return np.full(size, 1.0 / size, dtype=np.float64)


class Alphabet:
    """
    Immutable symbol set with a bidirectional symbol/index mapping.

    Parameters
    ----------
    symbols : iterable of str
        Symbols in index order.  Must be non-empty, unique and non-blank.
    probabilities : sequence of float, optional
        Background probability of each symbol, aligned with ``symbols``.
        Defaults to a uniform distribution.

    Raises
    ------
    ConfigurationError
        If the alphabet is empty, holds duplicate or empty symbols, or the
        probability vector is misaligned, negative or does not sum to one.
    """

    __slots__ = ("_symbols", "_index", "_probabilities", "_sorted")

    def __init__(self, symbols: Iterable[str], probabilities: Optional[Sequence[float]] = None):
        symbols = tuple(symbols)
        if len(symbols) == 0:
            raise ConfigurationError("Cannot have an empty Alphabet")
        if any(not isinstance(sym, str) or sym == "" for sym in symbols):
            raise ConfigurationError(f"Alphabet symbols must be non-empty strings, got {symbols!r}")
        if len(set(symbols)) != len(symbols):
            raise ConfigurationError(f"Alphabet symbols must be unique, got {symbols!r}")

        if probabilities is None:
            probs = uniform_distribution(len(symbols))
        else:
            probs = np.asarray(probabilities, dtype=np.float64)
            if probs.ndim != 1 or probs.size != len(symbols):
                raise ConfigurationError(
                    f"Probability vector of length {probs.size} does not match {len(symbols)} symbols"
                )
            if np.any(probs < 0):
                raise ConfigurationError(f"Probabilities must be non-negative, got {probs.tolist()}")
            total = float(probs.sum())
            if abs(total - 1.0) > PROBABILITY_TOLERANCE:
                raise ConfigurationError(f"Probabilities must sum to 1, got {total:.8f}")

        probs = probs.copy()
        probs.flags.writeable = False

        self._symbols: Tuple[str, ...] = symbols
        self._index: Dict[str, int] = {sym: i for i, sym in enumerate(symbols)}
        self._probabilities = probs
        self._sorted: Tuple[str, ...] = tuple(sorted(symbols))

    @classmethod
    def from_string(
        cls, text: str, delimiter: str = "", probabilities: Optional[Sequence[float]] = None
    ) -> "Alphabet":
        """Build an alphabet from a delimited string; an empty delimiter splits per character."""
        symbols = list(text) if delimiter == "" else text.split(delimiter)
        return cls(symbols, probabilities)

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    def index(self, symbol: str) -> int:
        """Return the integer index of ``symbol``."""
        try:
            return self._index[symbol]
        except KeyError:
            raise DomainError(f"Symbol {symbol!r} is not in the alphabet {self._symbols}") from None

    def symbol(self, index: int) -> str:
        """Return the symbol mapped to ``index``."""
        if not 0 <= index < len(self._symbols):
            raise DomainError(f"Index {index} out of range for alphabet of size {len(self._symbols)}")
        return self._symbols[index]

    def probability(self, symbol: str) -> float:
        """Return the background probability of ``symbol``."""
        return float(self._probabilities[self.index(symbol)])

    @property
    def size(self) -> int:
        return len(self._symbols)

    @property
    def symbols(self) -> Tuple[str, ...]:
        """Symbols in sorted iteration order."""
        return self._sorted

    @property
    def ordered_symbols(self) -> Tuple[str, ...]:
        """Symbols in index order."""
        return self._symbols

    @property
    def sorted_indices(self) -> np.ndarray:
        """Indices of the symbols, listed in sorted symbol order."""
        return np.array([self._index[sym] for sym in self._sorted], dtype=np.int64)

    @property
    def probabilities(self) -> np.ndarray:
        """Background probabilities in index order (read-only)."""
        return self._probabilities

    @property
    def distribution(self) -> Dict[str, float]:
        return {sym: float(self._probabilities[i]) for i, sym in enumerate(self._symbols)}

    # ------------------------------------------------------------------
    # Sampling and enumeration
    # ------------------------------------------------------------------

    def random_symbol(self, rng: np.random.Generator) -> str:
        """
        Draw one symbol from the background distribution.

        Inverse-CDF sampling over the sorted symbols: the first symbol whose
        cumulative probability exceeds a uniform draw wins.  The last symbol is
        returned when rounding keeps the cumulative sum below the draw.
        """
        draw = rng.random()
        cumulative = 0.0
        for sym in self._sorted:
            cumulative += self._probabilities[self._index[sym]]
            if draw < cumulative:
                return sym
        return self._sorted[-1]

    def random_index(self, rng: np.random.Generator) -> int:
        return self._index[self.random_symbol(rng)]

    def all_sequences_of_length(self, length: int) -> List[str]:
        """
        Enumerate every string of ``length`` symbols over this alphabet.

        The result holds ``size ** length`` entries in lexicographic order of
        the sorted symbols, so ``length`` has to stay small.
        """
        return ["".join(word) for word in self.all_words_of_length(length)]

    def all_words_of_length(self, length: int) -> List[Tuple[str, ...]]:
        """Every word of ``length`` symbols as a tuple of symbols, in the same order."""
        if length < 0:
            raise ConfigurationError(f"Word length must be non-negative, got {length}")
        return list(itertools.product(self._sorted, repeat=length))

    # ------------------------------------------------------------------
    # Dunder helpers
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._symbols)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._index

    def __iter__(self):
        return iter(self._sorted)

    def __eq__(self, other: object) -> bool:
        if other is self:
            return True
        if not isinstance(other, Alphabet):
            return NotImplemented
        return set(self._symbols) == set(other._symbols)

    def __hash__(self) -> int:
        return hash(frozenset(self._symbols))

    def __repr__(self) -> str:
        return f"Alphabet({list(self._symbols)!r}, probabilities={self._probabilities.tolist()!r})"


DNA = Alphabet("ACGT")
