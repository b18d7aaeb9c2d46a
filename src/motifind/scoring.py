"""
scoring
=======

Fitness functions over a :class:`~motifind.profile.Profile`.

Every strategy is stateless apart from a pseudo-zero floor and declares which
of the two score forms it implements:

``"profile"``
    score of the whole profile for the current alignment,
``"lmer"``
    score of one candidate l-mer against the profile.

Search algorithms query :meth:`ScoringStrategy.supports` instead of relying on
a silent default.  All strategies are maximized, whatever their sign.
Strategies are looked up by name through :data:`registry`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, ClassVar, Dict, FrozenSet, Literal, Optional, Union

import numpy as np

from motifind.errors import ConfigurationError
from motifind.sequence import Sequence

if TYPE_CHECKING:
    from motifind.profile import Profile

ScoreForm = Literal["profile", "lmer"]
LmerRef = Union[Sequence, np.ndarray]

DEFAULT_PSEUDO_ZERO = 1e-5


class ScoringRegistry:
    """Registry for scoring strategies using decorator pattern."""

    def __init__(self):
        self._strategies: Dict[str, type] = {}

    def register(self, key: str):
        """Decorator to register a scoring strategy class under ``key``."""

        def decorator(strategy_cls):
            strategy_cls.name = key
            self._strategies[key] = strategy_cls
            logging.getLogger(__name__).debug(f"Registered scoring strategy: {key} -> {strategy_cls.__name__}")
            return strategy_cls

        return decorator

    def get(self, key: str) -> type:
        """Get strategy class by key."""
        if key not in self._strategies:
            available = list(self._strategies.keys())
            raise ConfigurationError(f"Scoring strategy '{key}' not found. Available: {available}")
        return self._strategies[key]

    def available(self) -> list:
        return sorted(self._strategies)


registry = ScoringRegistry()


class ScoringStrategy:
    """
    Base class of all scoring strategies.

    Subclasses list their supported forms in ``capabilities`` and implement
    the matching ``_score_profile`` / ``_score_lmer`` hooks.

    Parameters
    ----------
    pseudo_zero : float, optional
        Floor substituted for probabilities below it.  Defaults to the class
        value ``default_pseudo_zero``.
    """

    name: ClassVar[str] = ""
    capabilities: ClassVar[FrozenSet[str]] = frozenset()
    default_pseudo_zero: ClassVar[float] = DEFAULT_PSEUDO_ZERO
    requires_positive_floor: ClassVar[bool] = True

    def __init__(self, pseudo_zero: Optional[float] = None):
        value = self.default_pseudo_zero if pseudo_zero is None else float(pseudo_zero)
        if value < 0 or (self.requires_positive_floor and value == 0):
            bound = "positive" if self.requires_positive_floor else "non-negative"
            raise ConfigurationError(f"pseudo_zero must be {bound} for {type(self).__name__}, got {value}")
        self.pseudo_zero = value

    def supports(self, form: ScoreForm) -> bool:
        return form in self.capabilities

    def score_profile(self, profile: "Profile") -> float:
        """Score of the whole profile."""
        if not self.supports("profile"):
            raise ConfigurationError(f"{type(self).__name__} cannot score a whole profile")
        return float(self._score_profile(profile))

    def score_lmer(self, profile: "Profile", lmer: LmerRef) -> float:
        """Score of one l-mer, given as a Sequence or as an array of alphabet indices."""
        if not self.supports("lmer"):
            raise ConfigurationError(f"{type(self).__name__} cannot score an l-mer")
        indices = self._lmer_indices(profile, lmer)
        return float(self._score_lmer(profile, indices, np.arange(profile.length)))

    @staticmethod
    def _lmer_indices(profile: "Profile", lmer: LmerRef) -> np.ndarray:
        if isinstance(lmer, Sequence):
            if lmer.alphabet != profile.alphabet:
                raise ConfigurationError("l-mer alphabet differs from the profile alphabet")
            indices = profile.encode(lmer)
        else:
            indices = np.asarray(lmer, dtype=np.int64)
        if indices.shape != (profile.length,):
            raise ConfigurationError(f"l-mer of length {indices.size} does not match motif length {profile.length}")
        return indices

    def _score_profile(self, profile: "Profile") -> float:
        raise NotImplementedError

    def _score_lmer(self, profile: "Profile", indices: np.ndarray, columns: np.ndarray) -> float:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(pseudo_zero={self.pseudo_zero!r})"


@registry.register("frequency")
class FrequencyScore(ScoringStrategy):
    """
    Agreement with the consensus.

    The profile form sums, per column, the count of the consensus symbol.  The
    l-mer form counts the positions equal to the consensus; it ignores the
    background and discriminates poorly for short motifs.
    """

    capabilities = frozenset({"profile", "lmer"})
    default_pseudo_zero = 0.0
    requires_positive_floor = False

    def _score_profile(self, profile):
        consensus = profile.consensus_indices()
        return profile.pfm[consensus, np.arange(profile.length)].sum()

    def _score_lmer(self, profile, indices, columns):
        return np.count_nonzero(indices == profile.consensus_indices())


@registry.register("expectation")
class ExpectationScore(ScoringStrategy):
    """Sum of ``log2(p)`` of the l-mer's symbols; always <= 0.  No profile form."""

    capabilities = frozenset({"lmer"})

    def _score_lmer(self, profile, indices, columns):
        probs = np.maximum(profile.ppm[indices, columns], self.pseudo_zero)
        return np.log2(probs).sum()


@registry.register("expected-information")
class ExpectedInformationScore(ScoringStrategy):
    """Shannon term ``sum(p * log2(p))`` with ``p`` floored at the pseudo-zero; always <= 0."""

    capabilities = frozenset({"profile", "lmer"})

    def _score_profile(self, profile):
        probs = np.maximum(profile.ppm, self.pseudo_zero)
        return (probs * np.log2(probs)).sum()

    def _score_lmer(self, profile, indices, columns):
        probs = np.maximum(profile.ppm[indices, columns], self.pseudo_zero)
        return (probs * np.log2(probs)).sum()


@registry.register("relative-information")
class RelativeInformationScore(ScoringStrategy):
    """
    Kullback-Leibler divergence of the profile from the background.

    The profile form ``sum(PPM * PWM)`` over every cell is never negative.  The
    l-mer form only sums the cells the l-mer visits and can be negative.
    """

    capabilities = frozenset({"profile", "lmer"})

    def _score_profile(self, profile):
        return (profile.ppm * profile.pwm).sum()

    def _score_lmer(self, profile, indices, columns):
        return (profile.ppm[indices, columns] * profile.pwm[indices, columns]).sum()


def create_scorer(name: str, pseudo_zero: Optional[float] = None) -> ScoringStrategy:
    """Instantiate a registered scoring strategy by name."""
    return registry.get(name)(pseudo_zero)
