from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Tuple, Union

from motifind.alphabet import Alphabet
from motifind.errors import ConfigurationError, DomainError
from motifind.sequence import Sequence

logger = logging.getLogger(__name__)

PathRef = Union[str, Path]


@dataclass(frozen=True)
class MotifProblem:
    """Contents of a problem file."""

    alphabet: Alphabet
    motif_length: int
    sequences: Tuple[Sequence, ...]


def _symbol_delimiter(alphabet_line: str) -> str:
    """Whitespace separated alphabets hold multi-character symbols, otherwise one character per symbol."""
    return " " if len(alphabet_line.split()) > 1 else ""


def read_problem(path: PathRef) -> MotifProblem:
    """
    Read a problem file.

    The layout is one alphabet line (single characters such as ``ACGT``, or
    whitespace separated symbols), one line of background probabilities, one
    line with the motif length and one sequence per remaining non-blank line.

    Raises
    ------
    ConfigurationError
        If the file is missing a header line or a line cannot be parsed.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Problem file not found: {path}")

    with open(path, "r") as handle:
        lines = [line.strip() for line in handle]

    header = lines[:3]
    if len(header) < 3 or not all(header):
        raise ConfigurationError(f"{path}: expected alphabet, probability and motif length lines")
    alphabet_line, probability_line, length_line = header

    delimiter = _symbol_delimiter(alphabet_line)
    symbols = alphabet_line.split() if delimiter else list(alphabet_line)
    try:
        probabilities = [float(p) for p in probability_line.split()]
    except ValueError as e:
        raise ConfigurationError(f"{path}: cannot parse probabilities: {e}") from e
    alphabet = Alphabet(symbols, probabilities)

    try:
        motif_length = int(length_line)
    except ValueError as e:
        raise ConfigurationError(f"{path}: cannot parse motif length {length_line!r}") from e

    sequences = []
    for line_number, line in enumerate(lines[3:], start=4):
        if not line:
            continue
        try:
            sequences.append(Sequence(alphabet, line, delimiter))
        except DomainError as e:
            raise ConfigurationError(f"{path}:{line_number}: {e}") from e

    logger.debug(f"Read {len(sequences)} sequences from {path}")
    return MotifProblem(alphabet=alphabet, motif_length=motif_length, sequences=tuple(sequences))


def write_problem(path: PathRef, alphabet: Alphabet, motif_length: int, sequences: Iterable[Sequence]) -> None:
    """Write a problem file readable by :func:`read_problem`."""
    multi_char = any(len(sym) > 1 for sym in alphabet.ordered_symbols)
    separator = " " if multi_char else ""

    with open(path, "w") as out:
        out.write(separator.join(alphabet.ordered_symbols) + "\n")
        out.write(" ".join(repr(float(p)) for p in alphabet.probabilities) + "\n")
        out.write(f"{motif_length}\n")
        for seq in sequences:
            out.write(separator.join(seq.symbols()) + "\n")


def read_fasta(path: PathRef, alphabet: Alphabet) -> List[Tuple[str, Sequence]]:
    """
    Read a FASTA file of single-character symbols.

    Returns
    -------
    list of (str, Sequence)
        Record name (header without ``>``) and its sequence.  Lowercase
        symbols are upper-cased when only the upper-case form is known.
    """
    records: List[Tuple[str, Sequence]] = []
    name = None
    chunks: List[str] = []

    def flush():
        text = "".join(c if c in alphabet else c.upper() for c in "".join(chunks))
        try:
            records.append((name, Sequence(alphabet, text)))
        except DomainError as e:
            raise ConfigurationError(f"{path}: record {name!r}: {e}") from e

    with open(path, "r") as handle:
        for line in handle:
            line = line.strip()
            if not line:
                continue
            if line.startswith(">"):
                if name is not None:
                    flush()
                name = line[1:].strip()
                chunks = []
            else:
                if name is None:
                    raise ConfigurationError(f"{path}: sequence data before the first FASTA header")
                chunks.append(line)

    if name is not None:
        flush()
    return records


def write_fasta(sequences: Iterable[Sequence], path: PathRef) -> None:
    """Write sequences to a FASTA file named by their position."""
    with open(path, "w") as out:
        for idx, seq in enumerate(sequences):
            out.write(f">{idx}\n")
            out.write(f"{seq}\n")
