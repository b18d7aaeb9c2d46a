"""
Tests for the library surface: motifind/api.py and motifind/io.py.
"""

import pytest
from conftest import PLANTED_MOTIF, PLANTED_SEQUENCES, PLANTED_STARTS

from motifind.alphabet import Alphabet
from motifind.api import FinderConfig, create_finder_config, find_motif, find_motif_in_file
from motifind.errors import ConfigurationError
from motifind.io import read_fasta, read_problem, write_fasta, write_problem
from motifind.sequence import Sequence


def test_create_finder_config_defaults():
    """Test default config values"""
    config = create_finder_config()
    assert isinstance(config, FinderConfig)
    assert config.algorithm == "gibbs"
    assert config.scoring == "relative-information"
    assert config.trials == 1
    assert config.params == {"optimization_threshold": 1e-7}


def test_create_finder_config_aliases_and_params():
    """Test algorithm aliases and keyword parameters"""
    config = create_finder_config("Random-Projection", projection_size=4, num_iterations=50)
    assert config.algorithm == "projection"
    assert config.params == {"projection_size": 4, "bin_threshold": 3, "num_iterations": 50}


def test_create_finder_config_validation():
    """Test invalid configs fail early"""
    with pytest.raises(ConfigurationError):
        create_finder_config("annealing")
    with pytest.raises(ConfigurationError):
        create_finder_config("gibbs", scoring="entropy")
    with pytest.raises(ConfigurationError):
        create_finder_config("gibbs", trials=0)
    with pytest.raises(ConfigurationError):
        create_finder_config("gibbs", params={"optimization_threshold": 1e-3}, optimization_threshold=1e-3)


def test_config_is_frozen():
    """Test configs are immutable"""
    config = create_finder_config()
    with pytest.raises(AttributeError):
        config.trials = 5


def test_find_motif_projection(dna, planted_sequences):
    """Test the single-call API"""
    result = find_motif(
        planted_sequences,
        7,
        dna,
        algorithm="projection",
        seed=12,
        trials=3,
        projection_size=4,
        bin_threshold=3,
        num_iterations=100,
    )
    assert str(result.motif) == PLANTED_MOTIF
    assert result.alignment_starts == PLANTED_STARTS
    assert len(result.trials) == 3


def test_find_motif_rejects_config_and_kwargs(dna, planted_sequences):
    """Test config and kwargs are mutually exclusive"""
    with pytest.raises(ConfigurationError):
        find_motif(planted_sequences, 7, dna, config=create_finder_config(), trials=2)


def test_find_motif_single_trial_lmer_scorer(dna, planted_sequences):
    """Test a single projection trial with an l-mer only scorer"""
    result = find_motif(
        planted_sequences, 7, dna, algorithm="projection", scoring="expectation", seed=3, num_iterations=10,
        projection_size=4,
    )
    assert result.score is None
    assert result.trials is None


def test_read_problem(problem_file):
    """Test problem file parsing"""
    problem = read_problem(problem_file)
    assert problem.alphabet == Alphabet("ACGT")
    assert problem.motif_length == 7
    assert [str(s) for s in problem.sequences] == PLANTED_SEQUENCES


def test_find_motif_in_file(problem_file):
    """Test running a search straight from a problem file"""
    result = find_motif_in_file(
        problem_file, algorithm="projection", seed=12, projection_size=4, bin_threshold=3, num_iterations=100
    )
    assert str(result.motif) == PLANTED_MOTIF


def test_problem_roundtrip_multi_character(temp_dir):
    """Test writing and reading a problem over multi-character symbols"""
    alph = Alphabet(["Ala", "Gly", "Ser"], [0.5, 0.25, 0.25])
    seqs = [Sequence(alph, "Ala Gly Ser Ser", " "), Sequence(alph, "Gly Gly Ala", " ")]
    path = temp_dir / "amino.txt"
    write_problem(path, alph, 2, seqs)

    problem = read_problem(path)
    assert problem.alphabet.ordered_symbols == ("Ala", "Gly", "Ser")
    assert problem.alphabet.probability("Ala") == pytest.approx(0.5)
    assert [s.symbols() for s in problem.sequences] == [s.symbols() for s in seqs]


@pytest.mark.parametrize(
    "content",
    [
        "ACGT\n0.25 0.25 0.25 0.25\n",
        "ACGT\n0.25 0.25 x 0.25\n3\nACGT\n",
        "ACGT\n0.25 0.25 0.25 0.25\nseven\nACGT\n",
        "ACGT\n0.5 0.5 0.5 0.5\n3\nACGT\n",
        "ACGT\n0.25 0.25 0.25 0.25\n3\nACGTN\n",
    ],
)
def test_read_problem_malformed(temp_dir, content):
    """Test malformed problem files raise ConfigurationError"""
    path = temp_dir / "bad.txt"
    path.write_text(content)
    with pytest.raises(ConfigurationError):
        read_problem(path)


def test_read_problem_missing_file(temp_dir):
    """Test a missing problem file"""
    with pytest.raises(ConfigurationError):
        read_problem(temp_dir / "missing.txt")


def test_fasta_roundtrip(temp_dir, dna):
    """Test FASTA reading with multi-line records and lowercase symbols"""
    path = temp_dir / "seqs.fa"
    path.write_text(">first record\nACGT\nacgt\n\n>second\nGGGA\n")
    records = read_fasta(path, dna)
    assert [name for name, _ in records] == ["first record", "second"]
    assert str(records[0][1]) == "ACGTACGT"

    out = temp_dir / "out.fa"
    write_fasta([seq for _, seq in records], out)
    assert out.read_text() == ">0\nACGTACGT\n>1\nGGGA\n"


def test_fasta_unknown_symbol(temp_dir, dna):
    """Test FASTA records with unknown symbols"""
    path = temp_dir / "bad.fa"
    path.write_text(">x\nACGN\n")
    with pytest.raises(ConfigurationError):
        read_fasta(path, dna)
