# semspace/exceptions.py


class SemanticSpaceError(Exception):
    """Base class for every error raised by the pipeline."""


class ConfigurationError(SemanticSpaceError, ValueError):
    """Invalid or contradictory parameters. Raised before the affected stage runs."""


class DocumentReadError(SemanticSpaceError, IOError):
    """A document could not be read. Nothing from that document reaches the global state."""


class InvariantViolation(SemanticSpaceError, RuntimeError):
    """Components were wired together incorrectly."""


class SVDError(SemanticSpaceError, ArithmeticError):
    """The factorization returned unusable factors."""
