"""
Tests for the search algorithms in motifind/finders.py and the planted-motif
helpers in motifind/synthetic.py.
"""

import numpy as np
import pandas as pd
import pytest
from conftest import PLANTED_MOTIF, PLANTED_STARTS

from motifind.alphabet import Alphabet
from motifind.errors import ConfigurationError
from motifind.finders import (
    FinderResult,
    GibbsSamplingFinder,
    RandomizedGreedyFinder,
    RandomProjectionFinder,
    create_finder,
)
from motifind.finders import registry as finder_registry
from motifind.profile import Profile
from motifind.scoring import ExpectationScore, FrequencyScore, RelativeInformationScore
from motifind.sequence import Sequence
from motifind.synthetic import generate_sequences, make_problem, plant_motif


def test_finder_registry():
    """Test finders are registered by name"""
    assert finder_registry.available() == ["gibbs", "greedy", "projection"]
    assert finder_registry.get("gibbs") is GibbsSamplingFinder
    with pytest.raises(ConfigurationError):
        finder_registry.get("annealing")


def test_planted_alignment_consensus(dna, planted_sequences):
    """Test the planted alignment reproduces the motif"""
    profile = Profile(dna, planted_sequences, 7, PLANTED_STARTS)
    assert str(profile.consensus()) == PLANTED_MOTIF
    joined = "".join(str(s) for s in planted_sequences)
    background = {sym: joined.count(sym) / len(joined) for sym in "ACGT"}
    expected = sum(np.log2(1.0 / background[sym]) for sym in PLANTED_MOTIF)
    assert RelativeInformationScore().score_profile(profile) == pytest.approx(expected)
    np.testing.assert_array_equal(profile.pfm.max(axis=0), np.full(7, 5))


def test_greedy_score_history_non_decreasing(dna, planted_sequences):
    """Test the greedy search never accepts a lower score"""
    for update_each_step in (True, False):
        finder = RandomizedGreedyFinder(
            dna, planted_sequences, 7, update_each_step, rng=np.random.default_rng(4)
        )
        result = finder.find_motifs()
        history = finder.score_history
        assert len(history) >= 1
        assert all(b >= a for a, b in zip(history, history[1:]))
        assert result.score == pytest.approx(history[-1])
        assert result.iterations <= finder.max_iterations
        assert len(result.motif) == 7


def test_greedy_iteration_cap(dna, planted_sequences):
    """Test a zero iteration cap leaves the random alignment in place"""
    finder = RandomizedGreedyFinder(dna, planted_sequences, 7, max_iterations=0, rng=np.random.default_rng(1))
    result = finder.find_motifs()
    assert result.iterations == 0
    assert finder.score_history == [result.score]


def test_greedy_finds_planted_motif():
    """Test the greedy search recovers an exactly planted motif"""
    problem = make_problem(Alphabet("ACGT"), num_sequences=6, seq_length=20, motif_length=8, seed=21)
    finder = RandomizedGreedyFinder(
        problem.alphabet, list(problem.sequences), 8, True, rng=np.random.default_rng(5)
    )
    result = finder.run_multiple(200)
    assert str(result.motif) == str(problem.motif)
    assert result.alignment_starts == problem.starts


def test_greedy_requires_both_score_forms(dna, planted_sequences):
    """Test greedy search refuses scorers lacking a profile form"""
    with pytest.raises(ConfigurationError):
        RandomizedGreedyFinder(dna, planted_sequences, 7, scorer=ExpectationScore())


def test_gibbs_run_multiple_installs_best(dna, planted_sequences):
    """Test the best Gibbs trial becomes the current profile"""
    finder = GibbsSamplingFinder(dna, planted_sequences, 7, 1e-3, rng=np.random.default_rng(2010))
    result = finder.run_multiple(10)
    assert result.score == pytest.approx(result.trials["score"].max())
    assert finder.current_profile.alignment_starts == result.alignment_starts
    rebuilt = Profile(dna, planted_sequences, 7, result.alignment_starts)
    assert RelativeInformationScore().score_profile(rebuilt) == pytest.approx(result.score)
    assert str(rebuilt.consensus()) == str(result.motif)


def test_gibbs_accepted_scores_increase(dna, planted_sequences):
    """Test every accepted Gibbs move raises the score by more than the threshold"""
    finder = GibbsSamplingFinder(dna, planted_sequences, 7, 1e-3, rng=np.random.default_rng(8))
    result = finder.find_motifs()
    history = finder.score_history
    assert all(b - a > 1e-3 for a, b in zip(history, history[1:]))
    assert result.score == pytest.approx(history[-1])


def test_gibbs_configuration_errors(dna, planted_sequences):
    """Test Gibbs preconditions"""
    with pytest.raises(ConfigurationError):
        GibbsSamplingFinder(dna, planted_sequences[:1], 7, 1e-7)
    with pytest.raises(ConfigurationError):
        GibbsSamplingFinder(dna, planted_sequences, 7, -1.0)
    with pytest.raises(ConfigurationError):
        GibbsSamplingFinder(dna, planted_sequences, 7, 1e-7, scorer=ExpectationScore())


def test_gibbs_sweep_cap(dna, planted_sequences):
    """Test the sweep cap stops the sampler"""
    finder = GibbsSamplingFinder(dna, planted_sequences, 7, 0.0, max_sweeps=1, rng=np.random.default_rng(3))
    result = finder.find_motifs()
    assert result.iterations >= 1
    assert len(result.alignment_starts) == 5


def test_projection_finds_planted_motif(dna, planted_sequences):
    """Test random projection recovers GAATTCG"""
    finder = RandomProjectionFinder(dna, planted_sequences, 7, 4, 3, 100, rng=np.random.default_rng(12))
    result = finder.find_motifs()
    assert str(result.motif) == PLANTED_MOTIF
    assert result.alignment_starts == PLANTED_STARTS
    assert result.score == pytest.approx(
        RelativeInformationScore().score_profile(Profile(dna, planted_sequences, 7, PLANTED_STARTS))
    )


def test_projection_without_profile_form(dna, planted_sequences):
    """Test projection reports no score for l-mer only scorers"""
    finder = RandomProjectionFinder(
        dna, planted_sequences, 7, 4, 3, 20, scorer=ExpectationScore(), rng=np.random.default_rng(0)
    )
    result = finder.find_motifs()
    assert result.score is None
    assert result.to_dict()["score"] is None
    with pytest.raises(ConfigurationError):
        finder.run_multiple(2)


@pytest.mark.parametrize("projection_size", [0, 7, 9])
def test_projection_size_bounds(dna, planted_sequences, projection_size):
    """Test projection size must lie in [1, L)"""
    with pytest.raises(ConfigurationError):
        RandomProjectionFinder(dna, planted_sequences, 7, projection_size, 3, 10)


def test_projection_template(dna, planted_sequences):
    """Test templates hold distinct sorted offsets inside the motif"""
    finder = RandomProjectionFinder(dna, planted_sequences, 7, 4, 3, 10)
    template = finder.random_template(np.random.default_rng(6))
    assert len(template) == 4
    assert template == sorted(set(template))
    assert all(0 <= t < 7 for t in template)


def test_projection_bins_keep_multi_character_symbols_apart():
    """Test projections that join to the same string land in separate bins"""
    alph = Alphabet(["A", "AA"])
    sequences = [Sequence(alph, "A AA A", " "), Sequence(alph, "AA A AA", " ")]
    finder = RandomProjectionFinder(alph, sequences, 3, 2, 0, 1, rng=np.random.default_rng(0))
    projections, bins = finder.tally_bins([0, 1])
    assert projections == [[("A", "AA")], [("AA", "A")]]
    assert len(bins) == 4
    assert bins[("A", "AA")] == 1
    assert bins[("AA", "A")] == 1
    assert bins[("A", "A")] == bins[("AA", "AA")] == 0


def test_run_multiple_table_and_best(dna, planted_sequences):
    """Test run_multiple keeps the first best trial and records all trials"""
    finder = RandomizedGreedyFinder(dna, planted_sequences, 7, rng=np.random.default_rng(17))
    result = finder.run_multiple(6)

    assert isinstance(result, FinderResult)
    assert isinstance(result.trials, pd.DataFrame)
    assert list(result.trials.columns) == ["trial", "score", "motif", "alignment_starts"]
    assert len(result.trials) == 6
    best = int(result.trials["score"].to_numpy().argmax())
    assert result.score == pytest.approx(result.trials["score"].max())
    assert str(result.motif) == result.trials["motif"][best]
    assert finder.current_profile.alignment_starts == result.alignment_starts


def test_run_multiple_reproducible_across_jobs(dna, planted_sequences):
    """Test serial and parallel trials give identical results for the same seed"""
    serial = RandomProjectionFinder(dna, planted_sequences, 7, 3, 8, 15, rng=np.random.default_rng(99))
    parallel = RandomProjectionFinder(dna, planted_sequences, 7, 3, 8, 15, rng=np.random.default_rng(99))

    a = serial.run_multiple(4, n_jobs=1)
    b = parallel.run_multiple(4, n_jobs=2)

    assert a.trials["score"].tolist() == b.trials["score"].tolist()
    assert a.alignment_starts == b.alignment_starts


def test_run_multiple_requires_trials(dna, planted_sequences):
    """Test at least one trial is required"""
    finder = RandomizedGreedyFinder(dna, planted_sequences, 7)
    with pytest.raises(ConfigurationError):
        finder.run_multiple(0)


def test_result_to_dict(dna, planted_sequences):
    """Test the JSON summary of a result"""
    finder = create_finder(
        "projection",
        dna,
        planted_sequences,
        7,
        scorer=FrequencyScore(),
        rng=np.random.default_rng(12),
        projection_size=4,
        bin_threshold=3,
        num_iterations=50,
    )
    summary = finder.run_multiple(2).to_dict()
    assert summary["algorithm"] == "projection"
    assert summary["motif"] == PLANTED_MOTIF
    assert summary["score"] == 35
    assert summary["alignment_starts"] == list(PLANTED_STARTS)
    assert "projection_size-4" in summary["params"]
    assert len(summary["trials"]) == 2


def test_create_finder_rejects_unknown_parameters(dna, planted_sequences):
    """Test unknown keyword parameters surface as configuration errors"""
    with pytest.raises(ConfigurationError):
        create_finder("greedy", dna, planted_sequences, 7, temperature=2.0)


def test_generate_and_plant(dna):
    """Test synthetic sequence generation and motif planting"""
    rng = np.random.default_rng(1)
    sequences = generate_sequences(dna, 4, 20, rng)
    motif = Sequence(dna, "ACGTACGT")
    starts = plant_motif(sequences, motif, 0.0, rng)
    for seq, start in zip(sequences, starts):
        assert len(seq) == 28
        assert str(seq)[start : start + 8] == "ACGTACGT"
    with pytest.raises(ConfigurationError):
        plant_motif(sequences, motif, 1.5, rng)


def test_make_problem_reproducible(dna):
    """Test seeded problems are reproducible"""
    a = make_problem(dna, 3, 15, 5, mutation_probability=0.2, seed=4)
    b = make_problem(dna, 3, 15, 5, mutation_probability=0.2, seed=4)
    assert [str(s) for s in a.sequences] == [str(s) for s in b.sequences]
    assert a.starts == b.starts
    assert a.motif_length == 5
