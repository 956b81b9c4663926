"""Exceptions raised while building, validating and persisting LDPC ensembles."""


class EnsembleError(Exception):
    """Base class for all ensemble errors."""


class InvalidDegreeError(EnsembleError, ValueError):
    """A degree is non-positive, non-integral or duplicated."""


class MismatchedLengthsError(EnsembleError, ValueError):
    """Parallel degree and mass arrays differ in length."""


class InconsistentProbabilityMassError(EnsembleError, ValueError):
    """Probability masses are negative, non-finite or do not sum to one."""


class InconsistentGraphError(EnsembleError, ValueError):
    """Row and column weights of a parity-check matrix disagree."""


class FileFormatError(EnsembleError, ValueError):
    """Malformed ensemble file content."""


class UninitializedEnsembleError(EnsembleError, RuntimeError):
    """A derived query was made before both degree distributions were set."""
