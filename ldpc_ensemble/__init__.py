"""Degree distribution ensembles of LDPC codes."""

from ldpc_ensemble.degree_distribution import (
    DEFAULT_PMASS_TOLERANCE,
    DegreeDistribution,
    DistributionConfig,
    ValidationResult,
    validate_distribution,
)
from ldpc_ensemble.empirical import get_empirical_ensemble
from ldpc_ensemble.ensemble import Ensemble
from ldpc_ensemble.errors import (
    EnsembleError,
    FileFormatError,
    InconsistentGraphError,
    InconsistentProbabilityMassError,
    InvalidDegreeError,
    MismatchedLengthsError,
    UninitializedEnsembleError,
)
from ldpc_ensemble.file_codec import export_deg, read_ensemble, write_ensemble
from ldpc_ensemble.parity import DenseParityCheck, ParityCheckMatrix

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_PMASS_TOLERANCE",
    "DegreeDistribution",
    "DenseParityCheck",
    "DistributionConfig",
    "Ensemble",
    "EnsembleError",
    "FileFormatError",
    "InconsistentGraphError",
    "InconsistentProbabilityMassError",
    "InvalidDegreeError",
    "MismatchedLengthsError",
    "ParityCheckMatrix",
    "UninitializedEnsembleError",
    "ValidationResult",
    "export_deg",
    "get_empirical_ensemble",
    "read_ensemble",
    "validate_distribution",
    "write_ensemble",
]
