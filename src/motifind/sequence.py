"""
sequence
========

Integer-encoded sequences over an :class:`~motifind.alphabet.Alphabet`.

A :class:`Sequence` compares and hashes by identity: two sequences with the
same content remain distinct entries of a profile.
"""

from __future__ import annotations

from typing import Iterable, Tuple, Union

import numpy as np

from motifind.alphabet import Alphabet
from motifind.errors import ConfigurationError, DomainError


class Sequence:
    """
    Ordered list of alphabet indices.

    Parameters
    ----------
    alphabet : Alphabet
        Alphabet every stored index belongs to.
    text : str
        Delimited symbol string.  An empty delimiter reads one character per
        symbol.
    delimiter : str
        Separator between symbols, also used by ``str()``.
    """

    def __init__(self, alphabet: Alphabet, text: str = "", delimiter: str = ""):
        self.alphabet = alphabet
        self.delimiter = delimiter
        if text:
            symbols = list(text) if delimiter == "" else text.split(delimiter)
            self._data = np.array([alphabet.index(sym) for sym in symbols], dtype=np.int64)
        else:
            self._data = np.empty(0, dtype=np.int64)

    @classmethod
    def from_indices(cls, alphabet: Alphabet, indices: Iterable[int], delimiter: str = "") -> "Sequence":
        """Build a sequence directly from alphabet indices."""
        data = np.asarray(list(indices) if not isinstance(indices, np.ndarray) else indices, dtype=np.int64)
        if data.ndim != 1:
            raise DomainError("Sequence indices must form a one-dimensional array")
        if data.size and (data.min() < 0 or data.max() >= alphabet.size):
            raise DomainError(f"Sequence indices must lie in [0, {alphabet.size})")
        seq = cls(alphabet, "", delimiter)
        seq._data = data.copy()
        return seq

    @classmethod
    def random(cls, alphabet: Alphabet, length: int, rng: np.random.Generator) -> "Sequence":
        """Draw a sequence of ``length`` symbols from the alphabet's distribution."""
        if length < 0:
            raise ConfigurationError(f"Sequence length must be non-negative, got {length}")
        return cls.from_indices(alphabet, [alphabet.random_index(rng) for _ in range(length)])

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    @property
    def indices(self) -> np.ndarray:
        """Read-only view of the encoded symbols."""
        view = self._data.view()
        view.flags.writeable = False
        return view

    def index_at(self, position: int) -> int:
        self._check_position(position)
        return int(self._data[position])

    def symbol_at(self, position: int) -> str:
        self._check_position(position)
        return self.alphabet.symbol(int(self._data[position]))

    def symbols(self) -> list:
        return [self.alphabet.symbol(int(i)) for i in self._data]

    def _check_position(self, position: int) -> None:
        if not 0 <= position < self._data.size:
            raise DomainError(f"Position {position} out of range for sequence of length {self._data.size}")

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def append(self, symbol: str) -> None:
        self._data = np.append(self._data, self.alphabet.index(symbol))

    def mutate(self, probability: float, rng: np.random.Generator) -> None:
        """
        Substitute each position independently with the given probability.

        The replacement is drawn from the alphabet's background distribution
        and may equal the original symbol.
        """
        for i in range(self._data.size):
            if rng.random() < probability:
                self._data[i] = self.alphabet.random_index(rng)

    def insert_motif(self, motif: "Sequence", rng: np.random.Generator) -> int:
        """Splice ``motif`` in at a random index in ``[0, len]`` and return that index."""
        if self.alphabet != motif.alphabet:
            raise ConfigurationError("Alphabet of inserted motif must be the same as the Sequence")
        inserted = motif._data
        if motif.alphabet.ordered_symbols != self.alphabet.ordered_symbols:
            remap = np.array([self.alphabet.index(sym) for sym in motif.alphabet.ordered_symbols], dtype=np.int64)
            inserted = remap[inserted]
        insertion_index = int(rng.integers(0, self._data.size + 1))
        self._data = np.concatenate((self._data[:insertion_index], inserted, self._data[insertion_index:]))
        return insertion_index

    # ------------------------------------------------------------------
    # Slicing
    # ------------------------------------------------------------------

    def subsequence(self, start: int, end: int) -> "Sequence":
        """Return the half-open slice ``[start, end)`` as a new sequence."""
        if not 0 <= start <= end <= self._data.size:
            raise DomainError(f"Invalid subsequence [{start}, {end}) of a sequence of length {self._data.size}")
        return Sequence.from_indices(self.alphabet, self._data[start:end], self.delimiter)

    def projection(self, start: int, template: Iterable[int]) -> str:
        """
        Concatenate the symbols found at ``start + p`` for each template offset.

        Offsets are visited in ascending order whatever order ``template``
        lists them in.
        """
        return "".join(self.projection_symbols(start, template))

    def projection_symbols(self, start: int, template: Iterable[int]) -> Tuple[str, ...]:
        """Symbols of :meth:`projection` as a tuple, unambiguous for multi-character symbols."""
        parts = []
        for offset in sorted(template):
            position = start + offset
            if not 0 <= position < self._data.size:
                raise DomainError(
                    f"Projection offset {offset} from start {start} leaves a sequence of length {self._data.size}"
                )
            parts.append(self.alphabet.symbol(int(self._data[position])))
        return tuple(parts)

    def copy(self) -> "Sequence":
        return Sequence.from_indices(self.alphabet, self._data, self.delimiter)

    def __len__(self) -> int:
        return int(self._data.size)

    def __str__(self) -> str:
        return self.delimiter.join(self.symbols())

    def __repr__(self) -> str:
        text = str(self)
        if len(text) > 40:
            text = text[:37] + "..."
        return f"Sequence({text!r}, length={len(self)})"


SequenceRef = Union[int, Sequence]
