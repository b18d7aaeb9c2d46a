"""
motifind
==================

This package provides de novo discovery of a short conserved motif shared by
a collection of sequences over a finite alphabet, when the location of the
motif in each sequence is unknown.  The search works on an alignment vector
(one window start per sequence) and maximizes a pluggable score of the
profile built from the aligned windows.

The top level modules expose the following key components:

``alphabet`` and ``sequence``
    Symbol sets with a background distribution and integer-encoded
    sequences supporting mutation, motif insertion and projection.

``profile``
    Position frequency, probability and weight matrices kept consistent
    with the alignment vector through compiled incremental updates.

``scoring``
    Frequency, expectation, expected information and relative information
    fitness functions, each declaring the score forms it supports.

``finders``
    Randomized greedy, Gibbs sampling and random projection searches plus a
    multi-trial driver that can run trials in parallel.

``synthetic`` and ``io``
    Planted-motif problem generation, problem files and FASTA input.

``api`` and ``cli``
    A configuration object with a single-call entry point, and a command
    line printing JSON results.
"""

from motifind.alphabet import DNA, Alphabet
from motifind.api import FinderConfig, create_finder_config, find_motif, find_motif_in_file
from motifind.errors import ConfigurationError, DomainError, MotifError
from motifind.finders import (
    Finder,
    FinderResult,
    GibbsSamplingFinder,
    RandomizedGreedyFinder,
    RandomProjectionFinder,
    create_finder,
)
from motifind.profile import Profile
from motifind.scoring import (
    ExpectationScore,
    ExpectedInformationScore,
    FrequencyScore,
    RelativeInformationScore,
    ScoringStrategy,
    create_scorer,
)
from motifind.sequence import Sequence

__all__ = [
    "DNA",
    "Alphabet",
    "Sequence",
    "Profile",
    "ScoringStrategy",
    "FrequencyScore",
    "ExpectationScore",
    "ExpectedInformationScore",
    "RelativeInformationScore",
    "create_scorer",
    "Finder",
    "FinderResult",
    "RandomizedGreedyFinder",
    "GibbsSamplingFinder",
    "RandomProjectionFinder",
    "create_finder",
    "FinderConfig",
    "create_finder_config",
    "find_motif",
    "find_motif_in_file",
    "MotifError",
    "ConfigurationError",
    "DomainError",
]
