"""Operator exceptions.

The core only raises these; the CLI decides how they are shown.
"""


class OperatorError(Exception):
    """Base error for the environment operator."""


class ConfigurationError(OperatorError):
    """The desired environment is missing or unusable."""


class ObservedStateLoadError(OperatorError):
    """The cluster state could not be loaded."""


class InvalidColorError(OperatorError, ValueError):
    """A blue/green colour name is not recognised."""


class SnapshotError(OperatorError):
    """An environment snapshot file could not be read."""
