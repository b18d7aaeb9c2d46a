"""
finders
=======

Search strategies over alignment vectors.

Every finder owns one :class:`~motifind.profile.Profile` that it mutates while
searching for the alignment maximizing a :class:`~motifind.scoring.ScoringStrategy`.
Three strategies are provided:

``greedy``
    :class:`RandomizedGreedyFinder`, a hill climb from a random alignment that
    moves every window to its best scoring l-mer until the score stalls.
``gibbs``
    :class:`GibbsSamplingFinder`, leave-one-out sampling of new starts with
    acceptance of improving moves only.
``projection``
    :class:`RandomProjectionFinder`, voting on l-mers whose random k-column
    projections fall into crowded hash bins.

All randomness comes from an injected :class:`numpy.random.Generator`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional, Tuple

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from motifind.alphabet import Alphabet
from motifind.errors import ConfigurationError
from motifind.functions import find_max_index, format_params, roulette_select, shift_scores
from motifind.profile import Profile
from motifind.scoring import RelativeInformationScore, ScoringStrategy
from motifind.sequence import Sequence

DEFAULT_MAX_ITERATIONS = 50000
PROGRESS_INTERVAL = 100


@dataclass(frozen=True)
class FinderResult:
    """
    Outcome of one search or of the best of several trials.

    Attributes
    ----------
    algorithm : str
        Registry key of the finder that produced the result.
    motif : Sequence
        Consensus of the final profile.
    score : float or None
        Profile score, ``None`` when the scorer has no profile form.
    profile : Profile
        Snapshot of the final profile, independent of later searches.
    alignment_starts : tuple of int
        Window start of each sequence.
    iterations : int
        Iterations performed by the search.
    parameters : dict
        Finder parameters used for the run.
    trials : pd.DataFrame or None
        Per-trial summary, only set by :meth:`Finder.run_multiple`.
    """

    algorithm: str
    motif: Sequence
    score: Optional[float]
    profile: Profile = field(repr=False, compare=False)
    alignment_starts: Tuple[int, ...]
    iterations: int
    parameters: Dict[str, Any] = field(default_factory=dict, hash=False, compare=False)
    trials: Optional[pd.DataFrame] = field(default=None, repr=False, hash=False, compare=False)

    def to_dict(self) -> dict:
        """JSON-serializable summary."""
        result = {
            "algorithm": self.algorithm,
            "motif": str(self.motif),
            "score": self.score,
            "alignment_starts": list(self.alignment_starts),
            "iterations": self.iterations,
            "params": format_params(self.parameters),
        }
        if self.trials is not None:
            result["trials"] = self.trials.to_dict(orient="records")
        return result


class FinderRegistry:
    """Registry for finder classes using decorator pattern."""

    def __init__(self):
        self._finders: Dict[str, type] = {}

    def register(self, key: str):
        """Decorator to register a finder class under ``key``."""

        def decorator(finder_cls):
            finder_cls.name = key
            self._finders[key] = finder_cls
            logging.getLogger(__name__).debug(f"Registered finder: {key} -> {finder_cls.__name__}")
            return finder_cls

        return decorator

    def get(self, key: str) -> type:
        """Get finder class by key."""
        if key not in self._finders:
            available = list(self._finders.keys())
            raise ConfigurationError(f"Finder '{key}' not found. Available: {available}")
        return self._finders[key]

    def available(self) -> list:
        return sorted(self._finders)


registry = FinderRegistry()


class Finder(ABC):
    """
    Abstract base class for motif finders.

    Parameters
    ----------
    alphabet : Alphabet
        Alphabet of the sequences.
    sequences : list of Sequence
        Sequences expected to share one motif occurrence each.
    motif_length : int
        Length ``L`` of the motif.
    scorer : ScoringStrategy, optional
        Fitness function; :class:`RelativeInformationScore` by default.
    rng : np.random.Generator, optional
        Source of randomness; a fresh unseeded generator by default.

    Raises
    ------
    ConfigurationError
        If the scorer lacks a score form the finder relies on, or the
        profile cannot be built from the inputs.
    """

    name: ClassVar[str] = ""
    title: ClassVar[str] = "Finder"
    required_capabilities: ClassVar[FrozenSet[str]] = frozenset({"profile", "lmer"})

    def __init__(
        self,
        alphabet: Alphabet,
        sequences: List[Sequence],
        motif_length: int,
        scorer: Optional[ScoringStrategy] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        scorer = scorer if scorer is not None else RelativeInformationScore()
        missing = sorted(self.required_capabilities - scorer.capabilities)
        if missing:
            raise ConfigurationError(
                f"{type(self).__name__} needs a scorer supporting {missing}; {type(scorer).__name__} does not"
            )

        self.alphabet = alphabet
        self.sequences = list(sequences)
        self.motif_length = motif_length
        self.scorer = scorer
        self.rng = rng if rng is not None else np.random.default_rng()
        self.profile = Profile(alphabet, self.sequences, motif_length)
        self.score_history: List[float] = []
        self.logger = logging.getLogger(__name__)

    @property
    def current_profile(self) -> Profile:
        return self.profile

    def parameters(self) -> Dict[str, Any]:
        """Algorithm parameters, used for reporting."""
        return {"motif_length": self.motif_length, "scorer": self.scorer.name}

    @abstractmethod
    def _search(self, rng: np.random.Generator) -> int:
        """Move ``self.profile`` towards a high scoring alignment; return the iteration count."""
        raise NotImplementedError

    def find_motifs(self, rng: Optional[np.random.Generator] = None) -> FinderResult:
        """
        Run one search from a fresh random start.

        Parameters
        ----------
        rng : np.random.Generator, optional
            Generator for this run; the finder's own generator when omitted.

        Returns
        -------
        FinderResult
            Consensus motif, score and a snapshot of the final profile.
        """
        rng = self.rng if rng is None else rng
        self.logger.info(f"*** Running {self.title} ***")
        self.score_history = []
        iterations = self._search(rng)

        score = self._profile_score()
        motif = self.profile.consensus()
        score_text = "n/a" if score is None else f"{score:.5f}"
        self.logger.info(f"*** Result : Final Score {score_text} - Predicted Motif : {motif} ***")

        return FinderResult(
            algorithm=self.name,
            motif=motif,
            score=score,
            profile=self.profile.copy(),
            alignment_starts=self.profile.alignment_starts,
            iterations=iterations,
            parameters=self.parameters(),
        )

    def _run_trial(self, seed: int) -> FinderResult:
        """Worker for one independent trial."""
        return self.find_motifs(np.random.default_rng(seed))

    def run_multiple(self, trials: int, n_jobs: int = 1) -> FinderResult:
        """
        Run independent trials and keep the best scoring one.

        One seed per trial is drawn from the finder's generator, so the outcome
        does not depend on ``n_jobs``.  The best result's profile becomes the
        finder's current profile.

        Parameters
        ----------
        trials : int
            Number of trials, at least one.
        n_jobs : int
            Parallel workers; 1 runs in process, -1 uses all cores.

        Returns
        -------
        FinderResult
            The first of the highest scoring results, with ``trials`` set to a
            per-trial DataFrame.
        """
        if trials < 1:
            raise ConfigurationError(f"trials must be at least 1, got {trials}")
        if not self.scorer.supports("profile"):
            raise ConfigurationError(f"{type(self.scorer).__name__} cannot rank trials without a profile score")

        self.logger.info("+++ Starting Multiple Trials +++")
        seeds = self.rng.integers(0, 2**31, size=trials)

        if n_jobs == 1:
            results = [self._run_trial(int(seeds[i])) for i in range(trials)]
        else:
            results = Parallel(n_jobs=n_jobs, backend="loky")(
                delayed(self._run_trial)(int(seeds[i])) for i in range(trials)
            )

        rows = []
        for i, result in enumerate(results):
            self.logger.info(f"Trial : {i} - Score : {result.score:.5f} - Motif : {result.motif}")
            rows.append(
                {
                    "trial": i,
                    "score": result.score,
                    "motif": str(result.motif),
                    "alignment_starts": list(result.alignment_starts),
                }
            )
        table = pd.DataFrame(rows, columns=["trial", "score", "motif", "alignment_starts"])

        best_index = find_max_index(table["score"].to_numpy())
        best = results[best_index]
        self.profile = best.profile.copy()
        self.logger.info(
            f"+++ Multiple Trials finished - Max Score : {best.score:.5f} - Best Motif : {best.motif} +++"
        )

        return FinderResult(
            algorithm=best.algorithm,
            motif=best.motif,
            score=best.score,
            profile=best.profile,
            alignment_starts=best.alignment_starts,
            iterations=best.iterations,
            parameters=best.parameters,
            trials=table,
        )

    def _profile_score(self) -> Optional[float]:
        if not self.scorer.supports("profile"):
            return None
        return self.scorer.score_profile(self.profile)

    def _log_iteration(self, iteration: int, score: float, level: int = logging.INFO) -> None:
        self.logger.log(
            level,
            f"Iteration : {iteration} - Score : {score:.5f} - Alignments : {self.profile.alignments_to_string()}",
        )


@registry.register("greedy")
class RandomizedGreedyFinder(Finder):
    """
    Randomized greedy hill climb.

    Starting from a random alignment, every sequence's window moves to its
    highest scoring l-mer against the current profile (lowest start on ties).
    Moves are applied one by one when ``update_each_step`` is set, otherwise
    all at once at the end of the pass.  Passes repeat while the profile score
    strictly improves, up to ``max_iterations``.  A pass that lowers the score
    is rolled back, so ``score_history`` never decreases.
    """

    title = "Randomized Greedy Finder"

    def __init__(
        self,
        alphabet: Alphabet,
        sequences: List[Sequence],
        motif_length: int,
        update_each_step: bool = True,
        scorer: Optional[ScoringStrategy] = None,
        rng: Optional[np.random.Generator] = None,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ):
        super().__init__(alphabet, sequences, motif_length, scorer, rng)
        if max_iterations < 0:
            raise ConfigurationError(f"max_iterations must be non-negative, got {max_iterations}")
        self.update_each_step = bool(update_each_step)
        self.max_iterations = int(max_iterations)

    def parameters(self) -> Dict[str, Any]:
        params = super().parameters()
        params.update({"update_each_step": self.update_each_step, "max_iterations": self.max_iterations})
        return params

    def _search(self, rng: np.random.Generator) -> int:
        profile = self.profile
        profile.generate_random_alignment(rng)

        best_score = -np.inf
        current_score = self.scorer.score_profile(profile)
        self.score_history.append(current_score)
        iterations = 0

        while current_score > best_score and iterations < self.max_iterations:
            self._log_iteration(iterations, current_score, logging.DEBUG)
            best_score = current_score
            previous = profile.alignment_starts
            staged = list(previous)

            for i, seq in enumerate(self.sequences):
                best_start = find_max_index(profile.score_all_lmers(seq, self.scorer))
                if self.update_each_step:
                    profile.update_alignment_start(i, best_start)
                else:
                    staged[i] = best_start

            if not self.update_each_step:
                for i, start in enumerate(staged):
                    profile.update_alignment_start(i, start)

            current_score = self.scorer.score_profile(profile)
            iterations += 1

            if current_score < best_score:
                profile.set_alignment_starts(previous)
                current_score = best_score
            else:
                self.score_history.append(current_score)

        return iterations


@registry.register("gibbs")
class GibbsSamplingFinder(Finder):
    """
    Gibbs sampling over alignment starts.

    Each sweep starts with every sequence marked unoptimized.  A sequence is
    drawn uniformly from that set, its l-mers are scored against the profile of
    the other sequences, the scores are shifted by the absolute value of their
    minimum and a new start is drawn with roulette-wheel selection.  The move
    is kept when it raises the full profile score by more than
    ``optimization_threshold``, which restarts the sweep; otherwise it is
    undone and the sequence leaves the set.  The search ends after a sweep
    without accepted moves.
    """

    title = "Gibbs Sampling Finder"

    def __init__(
        self,
        alphabet: Alphabet,
        sequences: List[Sequence],
        motif_length: int,
        optimization_threshold: float = 1e-7,
        scorer: Optional[ScoringStrategy] = None,
        rng: Optional[np.random.Generator] = None,
        max_sweeps: Optional[int] = None,
    ):
        if len(sequences) < 2:
            raise ConfigurationError("Gibbs sampling needs at least two sequences")
        if optimization_threshold < 0:
            raise ConfigurationError(f"optimization_threshold must be non-negative, got {optimization_threshold}")
        if max_sweeps is not None and max_sweeps < 1:
            raise ConfigurationError(f"max_sweeps must be at least 1, got {max_sweeps}")
        super().__init__(alphabet, sequences, motif_length, scorer, rng)
        self.optimization_threshold = float(optimization_threshold)
        self.max_sweeps = max_sweeps

    def parameters(self) -> Dict[str, Any]:
        params = super().parameters()
        params.update({"optimization_threshold": self.optimization_threshold, "max_sweeps": self.max_sweeps})
        return params

    def _sample_start(self, index: int, rng: np.random.Generator) -> int:
        culled = self.profile.leave_one_out(index)
        scores = culled.score_all_lmers(self.sequences[index], self.scorer)
        return roulette_select(shift_scores(scores), rng)

    def _search(self, rng: np.random.Generator) -> int:
        profile = self.profile
        profile.generate_random_alignment(rng)

        current_score = self.scorer.score_profile(profile)
        self.score_history.append(current_score)
        iterations = 0
        sweeps = 0
        score_changed = True

        while score_changed:
            if self.max_sweeps is not None and sweeps >= self.max_sweeps:
                self.logger.warning(f"Stopping after {sweeps} sweeps without convergence")
                break
            score_changed = False
            unoptimized = list(range(len(self.sequences)))

            while unoptimized:
                if iterations % PROGRESS_INTERVAL == 0:
                    self._log_iteration(iterations, current_score)
                iterations += 1

                selection = int(rng.integers(0, len(unoptimized)))
                index = unoptimized[selection]
                new_start = self._sample_start(index, rng)

                old_score = self.scorer.score_profile(profile)
                old_start = profile.alignment_start(index)
                profile.update_alignment_start(index, new_start)
                new_score = self.scorer.score_profile(profile)

                if new_score - old_score > self.optimization_threshold:
                    score_changed = True
                    current_score = new_score
                    self.score_history.append(new_score)
                    break

                profile.update_alignment_start(index, old_start)
                unoptimized.pop(selection)

            sweeps += 1

        return iterations


@registry.register("projection")
class RandomProjectionFinder(Finder):
    """
    Random projection voting.

    Each iteration picks ``projection_size`` distinct motif columns, hashes
    every l-mer of every sequence by the symbols in those columns and tallies
    the bins.  Every l-mer landing in a bin holding more than ``bin_threshold``
    entries gets one vote.  Each sequence finally aligns at its most voted
    start (lowest start on ties).  The bin table covers every word of
    ``projection_size`` symbols, so the projection must stay short.
    """

    title = "Random Projection Finder"
    required_capabilities = frozenset()

    def __init__(
        self,
        alphabet: Alphabet,
        sequences: List[Sequence],
        motif_length: int,
        projection_size: int,
        bin_threshold: int,
        num_iterations: int,
        scorer: Optional[ScoringStrategy] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        if not 1 <= projection_size < motif_length:
            raise ConfigurationError(
                f"projection_size must lie in [1, {motif_length}), got {projection_size}"
            )
        if bin_threshold < 0:
            raise ConfigurationError(f"bin_threshold must be non-negative, got {bin_threshold}")
        if num_iterations < 1:
            raise ConfigurationError(f"num_iterations must be at least 1, got {num_iterations}")
        super().__init__(alphabet, sequences, motif_length, scorer, rng)
        self.projection_size = int(projection_size)
        self.bin_threshold = int(bin_threshold)
        self.num_iterations = int(num_iterations)

    def parameters(self) -> Dict[str, Any]:
        params = super().parameters()
        params.update(
            {
                "projection_size": self.projection_size,
                "bin_threshold": self.bin_threshold,
                "num_iterations": self.num_iterations,
            }
        )
        return params

    def random_template(self, rng: np.random.Generator) -> List[int]:
        """Draw ``projection_size`` distinct columns of the motif, sorted."""
        columns = rng.choice(self.motif_length, size=self.projection_size, replace=False)
        return sorted(int(c) for c in columns)

    def tally_bins(self, template: List[int]) -> Tuple[List[List[Tuple[str, ...]]], Dict[Tuple[str, ...], int]]:
        """
        Hash every l-mer by the symbols in the template columns.

        Returns the bin key of each (sequence, start) and the bin counts.  Keys
        are symbol tuples, so multi-character symbols never merge bins.
        """
        bins = dict.fromkeys(self.alphabet.all_words_of_length(self.projection_size), 0)
        projections = [
            [seq.projection_symbols(start, template) for start in range(len(seq) - self.motif_length + 1)]
            for seq in self.sequences
        ]
        for seq_projections in projections:
            for key in seq_projections:
                bins[key] += 1
        return projections, bins

    def _search(self, rng: np.random.Generator) -> int:
        votes = [np.zeros(len(seq) - self.motif_length + 1, dtype=np.int64) for seq in self.sequences]

        for iteration in range(self.num_iterations):
            template = self.random_template(rng)
            projections, bins = self.tally_bins(template)

            for seq_votes, seq_projections in zip(votes, projections):
                for start, key in enumerate(seq_projections):
                    if bins[key] > self.bin_threshold:
                        seq_votes[start] += 1

            self.logger.debug(f"Iteration : {iteration} - Template : {template}")

        for i, seq_votes in enumerate(votes):
            self.profile.update_alignment_start(i, find_max_index(seq_votes))

        return self.num_iterations


def create_finder(
    name: str,
    alphabet: Alphabet,
    sequences: List[Sequence],
    motif_length: int,
    scorer: Optional[ScoringStrategy] = None,
    rng: Optional[np.random.Generator] = None,
    **params,
) -> Finder:
    """Instantiate a registered finder by name with algorithm-specific keyword parameters."""
    finder_cls = registry.get(name)
    try:
        return finder_cls(alphabet, sequences, motif_length, scorer=scorer, rng=rng, **params)
    except TypeError as e:
        raise ConfigurationError(f"Invalid parameters for finder '{name}': {e}") from e
