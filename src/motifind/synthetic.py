"""Synthetic problems with a planted motif, for demos and ground-truth tests."""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from motifind.alphabet import Alphabet
from motifind.errors import ConfigurationError
from motifind.sequence import Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyntheticProblem:
    """Sequences with one (possibly mutated) copy of ``motif`` planted at ``starts``."""

    alphabet: Alphabet
    sequences: Tuple[Sequence, ...]
    motif: Sequence
    starts: Tuple[int, ...]

    @property
    def motif_length(self) -> int:
        return len(self.motif)


def generate_sequences(alphabet: Alphabet, num_sequences: int, seq_length: int, rng: np.random.Generator) -> List[Sequence]:
    """Draw ``num_sequences`` background sequences of ``seq_length`` symbols."""
    if num_sequences <= 0:
        raise ConfigurationError(f"num_sequences must be positive, got {num_sequences}")
    if seq_length < 0:
        raise ConfigurationError(f"seq_length must be non-negative, got {seq_length}")
    return [Sequence.random(alphabet, seq_length, rng) for _ in range(num_sequences)]


def plant_motif(
    sequences: List[Sequence], motif: Sequence, mutation_probability: float, rng: np.random.Generator
) -> List[int]:
    """
    Insert a mutated copy of ``motif`` into every sequence, in place.

    Parameters
    ----------
    sequences : list of Sequence
        Sequences to grow by ``len(motif)`` symbols each.
    motif : Sequence
        Motif to plant.  Each copy is mutated independently.
    mutation_probability : float
        Per-position substitution probability in ``[0, 1]``.
    rng : np.random.Generator
        Source of randomness.

    Returns
    -------
    list of int
        Insertion index of the copy in each sequence.
    """
    if not 0.0 <= mutation_probability <= 1.0:
        raise ConfigurationError(f"mutation_probability must lie in [0, 1], got {mutation_probability}")
    starts = []
    for seq in sequences:
        copy = motif.copy()
        copy.mutate(mutation_probability, rng)
        starts.append(seq.insert_motif(copy, rng))
    return starts


def make_problem(
    alphabet: Alphabet,
    num_sequences: int,
    seq_length: int,
    motif_length: int,
    mutation_probability: float = 0.0,
    motif: Optional[Sequence] = None,
    seed: Optional[int] = None,
) -> SyntheticProblem:
    """
    Build a planted-motif problem.

    Each sequence holds ``seq_length`` background symbols plus one copy of the
    motif, so its final length is ``seq_length + motif_length``.  A random
    motif is drawn when none is given.
    """
    rng = np.random.default_rng(seed)
    if motif is None:
        if motif_length < 1:
            raise ConfigurationError(f"motif_length must be positive, got {motif_length}")
        motif = Sequence.random(alphabet, motif_length, rng)
    elif len(motif) != motif_length:
        raise ConfigurationError(f"Motif of length {len(motif)} does not match motif_length {motif_length}")

    sequences = generate_sequences(alphabet, num_sequences, seq_length, rng)
    starts = plant_motif(sequences, motif, mutation_probability, rng)
    logger.info(f"Planted motif {motif} into {num_sequences} sequences at {starts}")
    return SyntheticProblem(alphabet=alphabet, sequences=tuple(sequences), motif=motif, starts=tuple(starts))
