"""
Pytest configuration and common fixtures for motifind tests.
"""
import sys
import tempfile
from pathlib import Path

import pytest

from motifind.alphabet import Alphabet
from motifind.sequence import Sequence

# Force testing the installed package, not the local source
project_root = str(Path(__file__).parent.parent.absolute())
if project_root in sys.path:
    sys.path.remove(project_root)

SCORE_SEQUENCES = [
    "CAGGACACTTTCTAAACTGCCTAACTAAGATGCGTGCCCTTCGATTTTCAGGCTGTT",
    "GGAGGATACTATCAGTATTATACACCAGCGCTTCTTTCGGATTTTTAGAGCCCTGTG",
    "TAAGTAGCGTGGTCAACAACGTTGGCTAACAGGAAGGGCCAAAATTATTAGTGGAAG",
    "GAGAAACGGACATGGTGTACATTGGTCGGCTGTGGAATTGTATGCTCAGGTCTGGCT",
    "GTGAAATTCAACTCAGGTATGATTGACGTCCGGCCTGTGGCGGAGCGGCTCAGGGCA",
]

PLANTED_SEQUENCES = [
    "TATCGGAGTGGCCTGCTCACTTTTTGCCGACAGCAAAAGTATCGTTCTCATTACTGGGCCTATATACCACTTCACTACGAGAATTCGCAGTGAAGCCGGGTACACCA",
    "TAGACCTTGCTCACTGACATCGCGGGACCATTGCTCAGAGACTGAATTCGAGGAGTCGTCATTGAGGTGAAACCGTTGTTACAGAGTGTAAGTATGTCCGAAAACAG",
    "AAATACCGAAGACTACAACAATCGAGAAGGGCTAGAATTCGCGCGTTATTCAACGTCCTCGGGTAACGAAGTGAGCCCTCCGCCATGTCGACCTGAGCTTAGGCCGC",
    "ACTTATCTATTGTGAAGTAGGGACCAAACTCAACATGACCAGTGCGCCCTCTCCACCGGATGAGGAAGGGGCTATCCGAATTAGCAAGAATTCGATATACAAGTATG",
    "GAATTCGATCCTTTTTGTGAGTAATCCGATTGTTCCTCCCTCTGCGCAATTTAGGTACTCTCACAGAGTTCGTTTGGCTTATTATAGGTTTGCGTCGAAGATCATTT",
]

PLANTED_MOTIF = "GAATTCG"
PLANTED_STARTS = (80, 43, 34, 87, 0)


class FixedDraw:
    """Stand-in generator whose ``random()`` always returns the same value."""

    def __init__(self, value: float):
        self.value = value

    def random(self):
        return self.value


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def dna():
    """Uniform DNA alphabet."""
    return Alphabet("ACGT")


@pytest.fixture
def score_sequences(dna):
    """Five 57 bp sequences; with L = 6 and all starts at zero the consensus is GAGGAA."""
    return [Sequence(dna, text) for text in SCORE_SEQUENCES]


@pytest.fixture
def planted_sequences(dna):
    """Five 107 bp sequences holding one exact copy of GAATTCG each."""
    return [Sequence(dna, text) for text in PLANTED_SEQUENCES]


@pytest.fixture
def problem_file(temp_dir):
    """Problem file holding the planted data set."""
    path = temp_dir / "problem.txt"
    lines = ["ACGT", "0.25 0.25 0.25 0.25", str(len(PLANTED_MOTIF))] + PLANTED_SEQUENCES
    path.write_text("\n".join(lines) + "\n")
    return path
