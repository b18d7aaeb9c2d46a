"""High-level public API for motif discovery."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np

from motifind.alphabet import Alphabet
from motifind.errors import ConfigurationError
from motifind.finders import Finder, FinderResult, create_finder
from motifind.finders import registry as finder_registry
from motifind.io import read_problem
from motifind.scoring import create_scorer
from motifind.sequence import Sequence

_ALGORITHM_ALIASES = {
    "greedy": "greedy",
    "randomized-greedy": "greedy",
    "gibbs": "gibbs",
    "gibbs-sampling": "gibbs",
    "projection": "projection",
    "random-projection": "projection",
}

_DEFAULT_PARAMS = {
    "greedy": {"update_each_step": True},
    "gibbs": {"optimization_threshold": 1e-7},
    "projection": {"projection_size": 3, "bin_threshold": 3, "num_iterations": 100},
}


@dataclass(frozen=True)
class FinderConfig:
    """Unified configuration object for library usage."""

    algorithm: str = "gibbs"
    scoring: str = "relative-information"
    pseudo_zero: Optional[float] = None
    trials: int = 1
    seed: Optional[int] = None
    n_jobs: int = 1
    params: Dict[str, Any] = field(default_factory=dict)


def create_finder_config(
    algorithm: str = "gibbs",
    scoring: str = "relative-information",
    pseudo_zero: Optional[float] = None,
    trials: int = 1,
    seed: Optional[int] = None,
    n_jobs: int = 1,
    params: Optional[Dict[str, Any]] = None,
    **algorithm_kwargs,
) -> FinderConfig:
    """
    Build a validated finder config.

    Algorithm parameters may be passed either as ``params`` or as keyword
    arguments, not both.  Missing parameters take the algorithm defaults.
    """
    if params is not None and algorithm_kwargs:
        raise ConfigurationError("Use either 'params' or algorithm kwargs, not both.")

    algorithm = _normalize_algorithm(algorithm)
    if trials < 1:
        raise ConfigurationError(f"trials must be at least 1, got {trials}")
    if n_jobs == 0:
        raise ConfigurationError("n_jobs must not be 0")
    if pseudo_zero is not None and pseudo_zero < 0:
        raise ConfigurationError(f"pseudo_zero must be non-negative, got {pseudo_zero}")
    # Resolve the scorer name early so typos fail at configuration time.
    create_scorer(scoring, pseudo_zero)

    resolved_params = dict(_DEFAULT_PARAMS[algorithm])
    resolved_params.update(params or algorithm_kwargs)

    return FinderConfig(
        algorithm=algorithm,
        scoring=scoring,
        pseudo_zero=pseudo_zero,
        trials=trials,
        seed=seed,
        n_jobs=n_jobs,
        params=resolved_params,
    )


def _normalize_algorithm(algorithm: str) -> str:
    key = algorithm.strip().lower()
    if key not in _ALGORITHM_ALIASES:
        raise ConfigurationError(
            f"Unsupported algorithm: {algorithm}. Available: {finder_registry.available()}"
        )
    return _ALGORITHM_ALIASES[key]


def build_finder(
    sequences: List[Sequence], motif_length: int, alphabet: Alphabet, config: FinderConfig
) -> Finder:
    """Instantiate the scorer and finder described by ``config``."""
    scorer = create_scorer(config.scoring, config.pseudo_zero)
    rng = np.random.default_rng(config.seed)
    return create_finder(
        config.algorithm, alphabet, list(sequences), motif_length, scorer=scorer, rng=rng, **config.params
    )


def run_finder(
    sequences: List[Sequence], motif_length: int, alphabet: Alphabet, config: FinderConfig
) -> FinderResult:
    """Execute a search using the unified config."""
    finder = build_finder(sequences, motif_length, alphabet, config)
    if config.trials == 1 and not finder.scorer.supports("profile"):
        return finder.find_motifs()
    return finder.run_multiple(config.trials, n_jobs=config.n_jobs)


def find_motif(
    sequences: List[Sequence],
    motif_length: int,
    alphabet: Alphabet,
    config: Optional[FinderConfig] = None,
    **kwargs,
) -> FinderResult:
    """
    Single-call entry point for motif discovery.

    Parameters
    ----------
    sequences : list of Sequence
        Sequences expected to share the motif.
    motif_length : int
        Length of the motif.
    alphabet : Alphabet
        Alphabet of the sequences.
    config : FinderConfig, optional
        Complete configuration.  When omitted, ``kwargs`` are forwarded to
        :func:`create_finder_config`.

    Returns
    -------
    FinderResult
        Best result over the configured number of trials.
    """
    if config is not None and kwargs:
        raise ConfigurationError("Use either 'config' or config kwargs, not both.")
    config = config or create_finder_config(**kwargs)
    return run_finder(sequences, motif_length, alphabet, config)


def find_motif_in_file(path: Union[str, Path], config: Optional[FinderConfig] = None, **kwargs) -> FinderResult:
    """Run :func:`find_motif` on the contents of a problem file."""
    problem = read_problem(path)
    return find_motif(list(problem.sequences), problem.motif_length, problem.alphabet, config, **kwargs)
