"""
profile
=======

Position frequency, probability and weight matrices of a set of aligned
sequences.

A :class:`Profile` owns an alignment vector holding, for every sequence of its
list, the start of the current motif window.  The three matrices have shape
``(alphabet size, motif length)`` and are kept consistent with that vector:

* PFM - integer count of each symbol per motif column,
* PPM - ``PFM / N`` for ``N`` sequences,
* PWM - ``log2(max(PPM / background, DELTA))`` with ``DELTA = 1 / (10 N)``.

The background model is the empirical symbol frequency over every position of
every sequence and is fixed when the profile is built.  Sequences are encoded
into a :class:`~motifind.ragged.RaggedData` at construction, so they must not
be edited while a profile over them is alive.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, List, Literal, Optional, Sequence as SequenceType, Tuple

import numpy as np
import pandas as pd

from motifind.alphabet import Alphabet
from motifind.errors import ConfigurationError, DomainError
from motifind.functions import empirical_background, fill_profile, shift_window
from motifind.ragged import RaggedData, ragged_from_list
from motifind.sequence import Sequence, SequenceRef

if TYPE_CHECKING:
    from motifind.scoring import ScoringStrategy

MatrixKind = Literal["pfm", "ppm", "pwm"]

logger = logging.getLogger(__name__)


def _read_only(array: np.ndarray) -> np.ndarray:
    view = array.view()
    view.flags.writeable = False
    return view


class Profile:
    """
    Mutable statistical summary of a motif alignment.

    Parameters
    ----------
    alphabet : Alphabet
        Alphabet shared by every sequence.
    sequences : list of Sequence
        Sequences to align.  The list order defines the alignment vector.
    length : int
        Motif length ``L``.
    alignments : sequence of int, optional
        Initial start of each sequence's window; all zero when omitted.

    Raises
    ------
    ConfigurationError
        On an empty sequence list, a non-positive length, a sequence shorter
        than the motif or a sequence over another alphabet.
    DomainError
        If ``alignments`` has the wrong length or holds an illegal start.
    """

    def __init__(
        self,
        alphabet: Alphabet,
        sequences: List[Sequence],
        length: int,
        alignments: Optional[SequenceType[int]] = None,
    ):
        if length < 1:
            raise ConfigurationError(f"Motif length must be positive, got {length}")
        if not sequences:
            raise ConfigurationError("A profile needs at least one sequence")
        for seq in sequences:
            if alphabet != seq.alphabet:
                raise ConfigurationError("Profiler requires sequences with the same alphabet")
            if len(seq) < length:
                raise ConfigurationError(f"Sequence of length {len(seq)} is shorter than the motif length {length}")

        self.alphabet = alphabet
        self.sequences = list(sequences)
        self.length = int(length)
        self.delta = 1.0 / (10 * len(self.sequences))

        # Sequences may carry an equal alphabet with a different index order.
        encoded = [self.encode(seq) for seq in self.sequences]
        self._ragged: RaggedData = ragged_from_list(encoded, dtype=np.int64)
        self._max_starts = self._ragged.lengths - self.length

        self._background = empirical_background(self._ragged.data, alphabet.size)

        shape = (alphabet.size, self.length)
        self._pfm = np.zeros(shape, dtype=np.int64)
        self._ppm = np.zeros(shape, dtype=np.float64)
        self._pwm = np.zeros(shape, dtype=np.float64)
        self._consensus: Optional[np.ndarray] = None

        if alignments is None:
            self._starts = np.zeros(len(self.sequences), dtype=np.int64)
        else:
            self._starts = self._validate_starts(alignments)

        self.update()

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    def encode(self, seq: Sequence) -> np.ndarray:
        if seq.alphabet is self.alphabet or seq.alphabet.ordered_symbols == self.alphabet.ordered_symbols:
            return np.asarray(seq.indices, dtype=np.int64)
        remap = np.array([self.alphabet.index(sym) for sym in seq.alphabet.ordered_symbols], dtype=np.int64)
        return remap[seq.indices]

    def _validate_starts(self, alignments: SequenceType[int]) -> np.ndarray:
        starts = np.asarray(list(alignments), dtype=np.int64)
        if starts.shape != (len(self.sequences),):
            raise DomainError(f"Expected {len(self.sequences)} alignment starts, got {starts.size}")
        bad = np.flatnonzero((starts < 0) | (starts > self._max_starts))
        if bad.size:
            i = int(bad[0])
            raise DomainError(
                f"Alignment start {int(starts[i])} of sequence {i} out of bounds [0, {int(self._max_starts[i])}]"
            )
        return starts

    def _resolve(self, seq: SequenceRef) -> int:
        """Map a list index or a Sequence object (by identity) to its list index."""
        if isinstance(seq, Sequence):
            for i, candidate in enumerate(self.sequences):
                if candidate is seq:
                    return i
            raise DomainError("Sequence not in the profile")
        index = int(seq)
        if not 0 <= index < len(self.sequences):
            raise DomainError(f"Sequence index {index} not in the profile of {len(self.sequences)} sequences")
        return index

    # ------------------------------------------------------------------
    # Matrix maintenance
    # ------------------------------------------------------------------

    def update(self) -> None:
        """Recompute the three matrices from scratch for the current alignment."""
        fill_profile(
            self._ragged.data,
            self._ragged.offsets,
            self._starts,
            self.length,
            self._pfm,
            self._ppm,
            self._pwm,
            self._background,
            self.delta,
        )
        self._consensus = None

    def update_alignment_start(self, seq: SequenceRef, new_start: int) -> None:
        """
        Move the window of one sequence and update the matrices incrementally.

        Only the cells touched by the old and the new window are recomputed;
        the outcome is identical to calling :meth:`update`.

        Parameters
        ----------
        seq : int or Sequence
            Index in the profile's list, or the Sequence object itself.
        new_start : int
            New window start in ``[0, len(seq) - L]``.
        """
        index = self._resolve(seq)
        new_start = int(new_start)
        if not 0 <= new_start <= self._max_starts[index]:
            raise DomainError(
                f"New start position {new_start} out of bounds [0, {int(self._max_starts[index])}]"
            )
        old_start = int(self._starts[index])
        self._starts[index] = new_start
        shift_window(
            self._ragged.data,
            self._ragged.offsets,
            index,
            old_start,
            new_start,
            self.length,
            self._pfm,
            self._ppm,
            self._pwm,
            self._background,
            self.delta,
        )
        self._consensus = None

    def set_alignment_starts(self, starts: SequenceType[int]) -> None:
        """Replace the whole alignment vector and rebuild the matrices."""
        self._starts = self._validate_starts(starts)
        self.update()

    def generate_random_alignment(self, rng: np.random.Generator) -> None:
        """Give every sequence a uniformly random legal start."""
        for i in range(len(self.sequences)):
            self.update_alignment_start(i, int(rng.integers(0, self._max_starts[i] + 1)))
        logger.debug(f"Random alignment: {self.alignments_to_string()}")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def consensus_indices(self) -> np.ndarray:
        """Most probable symbol index per column; ties go to the first symbol in sorted order."""
        if self._consensus is None:
            order = self.alphabet.sorted_indices
            best = np.argmax(self._ppm[order, :], axis=0)
            self._consensus = order[best]
            self._consensus.flags.writeable = False
        return self._consensus

    def consensus(self) -> Sequence:
        return Sequence.from_indices(self.alphabet, self.consensus_indices())

    def score_all_lmers(self, seq: Sequence, scorer: "ScoringStrategy") -> np.ndarray:
        """
        Score every l-mer of ``seq`` against the current matrices.

        ``seq`` need not belong to the profile; leave-one-out searches pass the
        excluded sequence here.

        Returns
        -------
        np.ndarray
            ``len(seq) - L + 1`` scores, indexed by start position.
        """
        if seq.alphabet != self.alphabet:
            raise DomainError("Cannot score a sequence over a different alphabet")
        if len(seq) < self.length:
            raise DomainError(f"Sequence of length {len(seq)} is shorter than the motif length {self.length}")
        data = self.encode(seq)
        n_lmers = data.size - self.length + 1
        scores = np.empty(n_lmers, dtype=np.float64)
        for start in range(n_lmers):
            scores[start] = scorer.score_lmer(self, data[start : start + self.length])
        return scores

    def leave_one_out(self, seq: SequenceRef) -> "Profile":
        """Profile of every other sequence, keeping their current starts."""
        index = self._resolve(seq)
        if len(self.sequences) < 2:
            raise ConfigurationError("Cannot leave out the only sequence of a profile")
        others = [s for i, s in enumerate(self.sequences) if i != index]
        starts = np.delete(self._starts, index)
        return Profile(self.alphabet, others, self.length, starts)

    def copy(self) -> "Profile":
        return Profile(self.alphabet, self.sequences, self.length, self._starts)

    def frequency(self, symbol: str, position: int) -> int:
        return int(self._pfm[self.alphabet.index(symbol), self._column(position)])

    def probability(self, symbol: str, position: int) -> float:
        return float(self._ppm[self.alphabet.index(symbol), self._column(position)])

    def weight(self, symbol: str, position: int) -> float:
        return float(self._pwm[self.alphabet.index(symbol), self._column(position)])

    def _column(self, position: int) -> int:
        if not 0 <= position < self.length:
            raise DomainError(f"Motif position {position} out of range [0, {self.length})")
        return position

    def alignment_start(self, seq: SequenceRef) -> int:
        return int(self._starts[self._resolve(seq)])

    @property
    def alignment_starts(self) -> Tuple[int, ...]:
        return tuple(int(s) for s in self._starts)

    @property
    def pfm(self) -> np.ndarray:
        return _read_only(self._pfm)

    @property
    def ppm(self) -> np.ndarray:
        return _read_only(self._ppm)

    @property
    def pwm(self) -> np.ndarray:
        return _read_only(self._pwm)

    @property
    def background(self) -> np.ndarray:
        return _read_only(self._background)

    @property
    def background_model(self) -> Dict[str, float]:
        return {sym: float(self._background[i]) for i, sym in enumerate(self.alphabet.ordered_symbols)}

    @property
    def sequence_count(self) -> int:
        return len(self.sequences)

    @property
    def height(self) -> int:
        return self.alphabet.size

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def to_frame(self, kind: MatrixKind = "ppm") -> pd.DataFrame:
        """Return one matrix as a DataFrame with symbols as rows and positions as columns."""
        matrix = self._matrix(kind)
        return pd.DataFrame(
            matrix.copy(), index=pd.Index(self.alphabet.ordered_symbols, name="symbol"), columns=range(self.length)
        )

    def format_matrix(self, kind: MatrixKind = "ppm") -> str:
        matrix = self._matrix(kind)
        lines = []
        for a, sym in enumerate(self.alphabet.ordered_symbols):
            if kind == "pfm":
                cells = " ".join(f"{int(v)}" for v in matrix[a])
            else:
                cells = " ".join(f"{v:.4f}" for v in matrix[a])
            lines.append(f"{sym} | {cells}")
        return "\n".join(lines)

    def alignments_to_string(self) -> str:
        return "[" + ", ".join(str(int(s)) for s in self._starts) + "]"

    def _matrix(self, kind: MatrixKind) -> np.ndarray:
        if kind == "pfm":
            return self._pfm
        if kind == "ppm":
            return self._ppm
        if kind == "pwm":
            return self._pwm
        raise ConfigurationError(f"Unknown matrix kind: {kind!r}. Use 'pfm', 'ppm' or 'pwm'.")

    def __str__(self) -> str:
        return self.format_matrix("ppm")

    def __repr__(self) -> str:
        return f"Profile(sequences={len(self.sequences)}, length={self.length}, starts={self.alignments_to_string()})"
