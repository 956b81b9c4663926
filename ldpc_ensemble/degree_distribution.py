"""Sparse degree distributions of LDPC Tanner graphs.

A degree distribution maps each active node degree to its probability mass.
Only degrees with nonzero mass are stored, sorted in increasing order, and the
masses always sum to one. The dense form is a vector whose index ``i`` holds
the mass of degree ``i + 1``.

Edge perspective: mass of degree ``i`` is the fraction of edges attached to
nodes of degree ``i``. Node perspective: fraction of nodes of degree ``i``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from ldpc_ensemble.errors import (
    EnsembleError,
    InconsistentProbabilityMassError,
    InvalidDegreeError,
    MismatchedLengthsError,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from numpy.typing import ArrayLike, NDArray

DEFAULT_PMASS_TOLERANCE = 1e-3
_MAX_RESIDUAL_STEPS = 4


@dataclass(frozen=True)
class DistributionConfig:
    """Validation settings for degree distributions.

    ``pmass_tolerance`` is the accepted deviation of the total mass from one.
    Inputs inside the tolerance are accepted and normalized to sum to one.
    """

    pmass_tolerance: float = DEFAULT_PMASS_TOLERANCE

    def __post_init__(self) -> None:
        """Reject negative or non-finite tolerances."""
        if not np.isfinite(self.pmass_tolerance) or self.pmass_tolerance < 0:
            msg = f"pmass_tolerance must be a non-negative finite number, got {self.pmass_tolerance}"
            raise ValueError(msg)


@dataclass
class ValidationResult:
    """Outcome of validating a candidate degree distribution."""

    success: bool = True
    reason: str = ""
    error: type[EnsembleError] | None = None

    def raise_on_failure(self) -> None:
        """Raise the recorded error if validation failed."""
        if not self.success:
            error = self.error or EnsembleError
            raise error(self.reason)


def _failure(error: type[EnsembleError], reason: str) -> ValidationResult:
    return ValidationResult(success=False, reason=reason, error=error)


def _normalize(masses: NDArray[np.float64]) -> NDArray[np.float64]:
    """Scale masses so that ``np.sum`` of the result is exactly 1.0.

    Masses already summing to 1.0 are returned unchanged. Otherwise the
    rounding residual left by the division is moved onto the largest mass.
    """
    total = np.sum(masses)
    if total == 1.0:
        return masses.copy()
    mass = masses / total
    largest = int(np.argmax(mass))
    for _ in range(_MAX_RESIDUAL_STEPS):
        residual = 1.0 - np.sum(mass)
        if residual == 0.0:
            break
        mass[largest] += residual
    return mass


def _is_real_dtype(arr: np.ndarray) -> bool:
    return np.issubdtype(arr.dtype, np.integer) or np.issubdtype(arr.dtype, np.floating)


def validate_distribution(
    degrees: ArrayLike,
    masses: ArrayLike,
    config: DistributionConfig | None = None,
) -> ValidationResult:
    """Check parallel degree/mass arrays without raising.

    Checks run in order: lengths, degree values, duplicate degrees, mass
    values, total mass. The first failing check determines the result.
    """
    if config is None:
        config = DistributionConfig()
    deg = np.asarray(degrees)
    mass = np.asarray(masses)

    if deg.ndim != 1 or mass.ndim != 1:
        return _failure(MismatchedLengthsError, "Degrees and masses must be one-dimensional")
    if len(deg) != len(mass):
        return _failure(
            MismatchedLengthsError,
            f"Got {len(deg)} degrees but {len(mass)} masses",
        )

    if len(deg) and not _is_real_dtype(deg):
        return _failure(InvalidDegreeError, f"Degrees must be integers, got dtype {deg.dtype}")
    deg_float = deg.astype(np.float64)
    if not np.all(np.isfinite(deg_float)) or np.any(deg_float != np.round(deg_float)):
        return _failure(InvalidDegreeError, f"Degrees must be integers, got {deg.tolist()}")
    if np.any(deg_float < 1):
        return _failure(InvalidDegreeError, f"Degrees must be >= 1, got {deg.tolist()}")
    unique, counts = np.unique(deg_float, return_counts=True)
    if np.any(counts > 1):
        duplicates = unique[counts > 1].astype(np.int64).tolist()
        return _failure(InvalidDegreeError, f"Duplicate degrees {duplicates}")

    if len(mass) and not _is_real_dtype(mass):
        return _failure(
            InconsistentProbabilityMassError,
            f"Masses must be real numbers, got dtype {mass.dtype}",
        )
    mass_float = mass.astype(np.float64)
    if not np.all(np.isfinite(mass_float)) or np.any(mass_float < 0):
        return _failure(
            InconsistentProbabilityMassError,
            f"Masses must be finite and non-negative, got {mass_float.tolist()}",
        )
    total = float(np.sum(mass_float))
    if total <= 0 or abs(total - 1.0) > config.pmass_tolerance:
        return _failure(
            InconsistentProbabilityMassError,
            f"Probability mass {total:.6g} deviates from 1 by more than {config.pmass_tolerance:g}",
        )
    return ValidationResult()


class DegreeDistribution:
    """Validated sparse degree distribution.

    Built from parallel ``degrees``/``masses`` sequences in any order. Zero
    masses are dropped, the rest are sorted by degree and normalized to sum to
    exactly one. Instances are immutable.
    """

    __slots__ = ("_degrees", "_masses")

    def __init__(
        self,
        degrees: ArrayLike,
        masses: ArrayLike,
        config: DistributionConfig | None = None,
    ) -> None:
        """Validate and store a sparse distribution."""
        validate_distribution(degrees, masses, config).raise_on_failure()
        deg = np.asarray(degrees).astype(np.int64)
        mass = np.asarray(masses).astype(np.float64)
        self._set(deg, mass)

    def _set(self, degrees: NDArray[np.int64], masses: NDArray[np.float64]) -> None:
        keep = masses > 0
        order = np.argsort(degrees[keep], kind="stable")
        deg = degrees[keep][order]
        mass = _normalize(masses[keep][order])
        deg.flags.writeable = False
        mass.flags.writeable = False
        self._degrees = deg
        self._masses = mass

    @classmethod
    def _from_trusted(cls, degrees: NDArray[np.int64], masses: NDArray[np.float64]) -> DegreeDistribution:
        """Build from arrays that are already valid up to rounding."""
        dist = cls.__new__(cls)
        dist._set(np.asarray(degrees, dtype=np.int64), np.asarray(masses, dtype=np.float64))
        return dist

    @classmethod
    def from_sparse(
        cls,
        degrees: ArrayLike,
        masses: ArrayLike,
        config: DistributionConfig | None = None,
    ) -> DegreeDistribution:
        """Build from parallel degree and mass sequences."""
        return cls(degrees, masses, config)

    @classmethod
    def from_dense(cls, dense: ArrayLike, config: DistributionConfig | None = None) -> DegreeDistribution:
        """Build from a dense vector where index ``i`` is the mass of degree ``i + 1``."""
        vec = np.asarray(dense)
        if vec.ndim != 1:
            msg = f"Dense degree distribution must be one-dimensional, got shape {vec.shape}"
            raise MismatchedLengthsError(msg)
        return cls(np.arange(1, len(vec) + 1), vec, config)

    @property
    def degrees(self) -> NDArray[np.int64]:
        """Active degrees in increasing order (read-only)."""
        return self._degrees

    @property
    def masses(self) -> NDArray[np.float64]:
        """Masses matching ``degrees`` (read-only)."""
        return self._masses

    @property
    def num_active(self) -> int:
        """Number of degrees with nonzero mass."""
        return len(self._degrees)

    @property
    def max_degree(self) -> int:
        return int(self._degrees[-1])

    def to_dense(self, max_degree: int | None = None) -> NDArray[np.float64]:
        """Expand to a dense vector of length ``max_degree``, zero-filled elsewhere."""
        length = self.max_degree if max_degree is None else int(max_degree)
        if length < self.max_degree:
            msg = f"max_degree {length} is smaller than the largest active degree {self.max_degree}"
            raise InvalidDegreeError(msg)
        dense = np.zeros(length, dtype=np.float64)
        dense[self._degrees - 1] = self._masses
        return dense

    def mass_of_degree(self, degree: int) -> float:
        """Mass of ``degree``, zero if it is not active."""
        idx = np.searchsorted(self._degrees, degree)
        if idx < len(self._degrees) and self._degrees[idx] == degree:
            return float(self._masses[idx])
        return 0.0

    def integral(self) -> float:
        """Return ``sum_i mass_i / i``, the integral of the distribution polynomial over [0, 1]."""
        return float(np.sum(self._masses / self._degrees))

    def average_node_degree(self) -> float:
        """Average node degree of an edge-perspective distribution."""
        return 1.0 / self.integral()

    def edge_to_node(self) -> DegreeDistribution:
        """Convert edge perspective to node perspective.

        A node of degree ``i`` carries ``i`` edges, so each edge mass is
        weighted by ``1 / i`` before renormalizing.
        """
        weights = self._masses / self._degrees
        return self._from_trusted(self._degrees, weights)

    def node_to_edge(self) -> DegreeDistribution:
        """Convert node perspective to edge perspective (inverse of ``edge_to_node``)."""
        weights = self._masses * self._degrees
        return self._from_trusted(self._degrees, weights)

    def isclose(self, other: DegreeDistribution, atol: float = 1e-12) -> bool:
        """Same active degrees and masses equal within ``atol``."""
        return np.array_equal(self._degrees, other.degrees) and bool(
            np.allclose(self._masses, other.masses, rtol=0.0, atol=atol),
        )

    def __iter__(self) -> Iterator[tuple[int, float]]:
        return zip(self._degrees.tolist(), self._masses.tolist(), strict=True)

    def __len__(self) -> int:
        return self.num_active

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DegreeDistribution):
            return NotImplemented
        return np.array_equal(self._degrees, other.degrees) and np.array_equal(self._masses, other.masses)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"DegreeDistribution(degrees={self._degrees.tolist()}, masses={self._masses.tolist()})"
