"""Exception types raised by motifind.

All failures are precondition violations: they are deterministic and are
never retried.  Both concrete types also derive from :class:`ValueError`.
"""


class MotifError(Exception):
    """Base class for every error raised by the package."""


class ConfigurationError(MotifError, ValueError):
    """Invalid set-up: empty alphabet, bad probability vector, mismatched alphabets, bad parameters."""


class DomainError(MotifError, ValueError):
    """Invalid request against valid objects: out-of-range offsets, unknown sequences or symbols."""
