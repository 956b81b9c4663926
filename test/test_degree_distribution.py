"""Tests for sparse degree distributions and their validation."""

import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from ldpc_ensemble.degree_distribution import (
    DegreeDistribution,
    DistributionConfig,
    validate_distribution,
)
from ldpc_ensemble.errors import (
    EnsembleError,
    InconsistentProbabilityMassError,
    InvalidDegreeError,
    MismatchedLengthsError,
)

PMASS_TOLERANCE = 1e-3
ATOL = 1e-12
MAX_DENSE_LENGTH = 20
MAX_HYPOTHESIS_EXAMPLES = 50


@pytest.fixture
def config() -> DistributionConfig:
    """Validation config with the default tolerance."""
    return DistributionConfig(pmass_tolerance=PMASS_TOLERANCE)


@pytest.fixture
def irregular() -> DegreeDistribution:
    """Irregular distribution with degrees 2, 3 and 8."""
    return DegreeDistribution([2, 3, 8], [0.25, 0.25, 0.5])


dense_vectors = st.lists(
    st.floats(min_value=0.0, max_value=1.0, allow_nan=False, allow_infinity=False),
    min_size=1,
    max_size=MAX_DENSE_LENGTH,
).filter(lambda xs: sum(xs) > PMASS_TOLERANCE)


class TestSparseConstruction:
    """Tests for building distributions from degree/mass pairs."""

    def test_degree_zero_rejected(self, config: DistributionConfig) -> None:
        """A degree of 0 is not a valid node degree."""
        with pytest.raises(InvalidDegreeError):
            DegreeDistribution([0, 3], [0.5, 0.5], config)

    def test_negative_degree_rejected(self, config: DistributionConfig) -> None:
        """Negative degrees are rejected."""
        with pytest.raises(InvalidDegreeError):
            DegreeDistribution([-2, 3], [0.5, 0.5], config)

    def test_non_integral_degree_rejected(self, config: DistributionConfig) -> None:
        """Degrees must be whole numbers."""
        with pytest.raises(InvalidDegreeError):
            DegreeDistribution([2.5, 3], [0.5, 0.5], config)

    def test_integral_float_degree_accepted(self, config: DistributionConfig) -> None:
        """Integral floats such as 3.0 are valid degrees."""
        dist = DegreeDistribution([3.0, 6.0], [0.5, 0.5], config)
        np.testing.assert_array_equal(dist.degrees, [3, 6])
        assert dist.degrees.dtype == np.int64

    def test_duplicate_degree_rejected(self, config: DistributionConfig) -> None:
        """A degree listed twice has an ambiguous mass."""
        with pytest.raises(InvalidDegreeError, match="Duplicate"):
            DegreeDistribution([3, 3], [0.5, 0.5], config)

    def test_mismatched_lengths_rejected(self, config: DistributionConfig) -> None:
        """Three degrees and four masses cannot be paired."""
        with pytest.raises(MismatchedLengthsError):
            DegreeDistribution([2, 3, 4], [0.25, 0.25, 0.25, 0.25], config)

    def test_mass_above_tolerance_rejected(self, config: DistributionConfig) -> None:
        """Masses summing to 1.2 are outside a 1e-3 tolerance."""
        with pytest.raises(InconsistentProbabilityMassError):
            DegreeDistribution([2, 3], [0.6, 0.6], config)

    def test_mass_within_tolerance_normalized(self, config: DistributionConfig) -> None:
        """Masses summing to 1.0005 are accepted and normalized to one."""
        dist = DegreeDistribution([2, 3], [0.5, 0.5005], config)
        assert float(np.sum(dist.masses)) == 1.0
        assert dist.masses[0] == pytest.approx(0.5 / 1.0005, abs=ATOL)

    def test_negative_mass_rejected(self, config: DistributionConfig) -> None:
        """Negative masses are not probabilities even if the total is one."""
        with pytest.raises(InconsistentProbabilityMassError):
            DegreeDistribution([2, 3, 4], [0.6, -0.1, 0.5], config)

    def test_nan_mass_rejected(self, config: DistributionConfig) -> None:
        """NaN masses are rejected."""
        with pytest.raises(InconsistentProbabilityMassError):
            DegreeDistribution([2, 3], [np.nan, 1.0], config)

    def test_empty_rejected(self, config: DistributionConfig) -> None:
        """An empty distribution has no mass."""
        with pytest.raises(InconsistentProbabilityMassError):
            DegreeDistribution([], [], config)

    def test_unsorted_input_sorted(self) -> None:
        """Degrees may arrive in any order and are stored increasing."""
        dist = DegreeDistribution([8, 2, 3], [0.5, 0.25, 0.25])
        np.testing.assert_array_equal(dist.degrees, [2, 3, 8])
        np.testing.assert_allclose(dist.masses, [0.25, 0.25, 0.5])

    def test_zero_mass_dropped(self) -> None:
        """Zero-mass degrees are never stored."""
        dist = DegreeDistribution([2, 3, 4], [0.5, 0.0, 0.5])
        np.testing.assert_array_equal(dist.degrees, [2, 4])
        assert dist.num_active == 2

    def test_tight_tolerance(self) -> None:
        """A zero tolerance still accepts masses that sum to exactly one."""
        strict = DistributionConfig(pmass_tolerance=0.0)
        DegreeDistribution([2, 3], [0.25, 0.75], strict)
        with pytest.raises(InconsistentProbabilityMassError):
            DegreeDistribution([2, 3], [0.25, 0.7505], strict)

    def test_errors_are_value_errors(self) -> None:
        """Validation errors can be caught as ValueError."""
        with pytest.raises(ValueError, match="Duplicate"):
            DegreeDistribution([3, 3], [0.5, 0.5])

    def test_from_sparse_alias(self, irregular: DegreeDistribution) -> None:
        """from_sparse builds the same distribution as the constructor."""
        assert DegreeDistribution.from_sparse([2, 3, 8], [0.25, 0.25, 0.5]) == irregular


class TestValidationResult:
    """Tests for the non-raising validation routine."""

    def test_success(self) -> None:
        """Valid input yields a successful result."""
        result = validate_distribution([3], [1.0])
        assert result.success
        assert result.error is None
        result.raise_on_failure()

    def test_failure_carries_error_kind(self) -> None:
        """Failures record the error kind and a reason instead of raising."""
        result = validate_distribution([1, 2, 3], [0.5, 0.5])
        assert not result.success
        assert result.error is MismatchedLengthsError
        assert "3 degrees" in result.reason
        with pytest.raises(MismatchedLengthsError):
            result.raise_on_failure()

    def test_degree_checked_before_mass(self) -> None:
        """Degree problems are reported ahead of mass problems."""
        result = validate_distribution([0, 2], [0.9, 0.9])
        assert result.error is InvalidDegreeError

    def test_custom_tolerance(self) -> None:
        """A looser tolerance accepts a larger deviation."""
        loose = DistributionConfig(pmass_tolerance=0.25)
        assert validate_distribution([2, 3], [0.6, 0.6], loose).success

    def test_invalid_tolerance(self) -> None:
        """Negative tolerances are rejected at config creation."""
        with pytest.raises(ValueError, match="pmass_tolerance"):
            DistributionConfig(pmass_tolerance=-1.0)


class TestDenseForm:
    """Tests for dense/sparse conversion."""

    def test_from_dense(self) -> None:
        """Index i of the dense vector is degree i + 1."""
        dist = DegreeDistribution.from_dense([0.0, 0.3, 0.7])
        np.testing.assert_array_equal(dist.degrees, [2, 3])
        np.testing.assert_allclose(dist.masses, [0.3, 0.7])

    def test_from_dense_rejects_bad_mass(self) -> None:
        """Dense vectors follow the same mass rule as sparse input."""
        with pytest.raises(InconsistentProbabilityMassError):
            DegreeDistribution.from_dense([0.0, 0.5, 0.3])

    def test_from_dense_rejects_matrix(self) -> None:
        """Dense input must be a vector."""
        with pytest.raises(MismatchedLengthsError):
            DegreeDistribution.from_dense([[0.5, 0.5]])

    def test_to_dense_default_length(self, irregular: DegreeDistribution) -> None:
        """Default dense length is the largest active degree."""
        dense = irregular.to_dense()
        np.testing.assert_equal(len(dense), 8)
        np.testing.assert_allclose(dense, [0, 0.25, 0.25, 0, 0, 0, 0, 0.5])

    def test_to_dense_padded(self, irregular: DegreeDistribution) -> None:
        """A longer dense vector is zero-filled."""
        dense = irregular.to_dense(12)
        np.testing.assert_equal(len(dense), 12)
        np.testing.assert_array_equal(dense[8:], 0.0)

    def test_to_dense_too_short(self, irregular: DegreeDistribution) -> None:
        """Truncating active degrees is an error, not silent loss of mass."""
        with pytest.raises(InvalidDegreeError):
            irregular.to_dense(5)

    @given(values=dense_vectors)
    @settings(max_examples=MAX_HYPOTHESIS_EXAMPLES)
    def test_dense_roundtrip(self, values: list[float]) -> None:
        """Dense -> sparse -> dense reproduces any normalized vector."""
        vec = np.array(values) / np.sum(values)
        dist = DegreeDistribution.from_dense(vec)
        np.testing.assert_allclose(dist.to_dense(len(vec)), vec, rtol=0, atol=ATOL)

    @given(values=dense_vectors)
    @settings(max_examples=MAX_HYPOTHESIS_EXAMPLES)
    def test_normalization_idempotent(self, values: list[float]) -> None:
        """Re-normalizing an accepted distribution changes nothing."""
        vec = np.array(values) / np.sum(values)
        once = DegreeDistribution.from_dense(vec)
        twice = DegreeDistribution(once.degrees, once.masses)
        assert float(np.sum(once.masses)) == 1.0
        assert twice == once

    def test_thirds_sum_exactly_to_one(self) -> None:
        """Masses that do not divide evenly still sum to exactly one and are stable."""
        once = DegreeDistribution.from_dense([1 / 3, 1 / 3, 1 / 3 + 1e-4])
        assert float(np.sum(once.masses)) == 1.0
        assert DegreeDistribution(once.degrees, once.masses) == once
        np.testing.assert_allclose(once.masses, [1 / 3, 1 / 3, 1 / 3], atol=1e-4)


class TestQueries:
    """Tests for accessors and perspective transforms."""

    def test_mass_of_degree(self, irregular: DegreeDistribution) -> None:
        """Active degrees return their mass, others return zero."""
        assert irregular.mass_of_degree(8) == pytest.approx(0.5)
        assert irregular.mass_of_degree(4) == 0.0
        assert irregular.mass_of_degree(100) == 0.0
        assert irregular.mass_of_degree(0) == 0.0

    def test_accessors(self, irregular: DegreeDistribution) -> None:
        """Active count, max degree and iteration agree with the arrays."""
        assert irregular.num_active == 3
        assert len(irregular) == 3
        assert irregular.max_degree == 8
        assert list(irregular) == [(2, 0.25), (3, 0.25), (8, 0.5)]

    def test_arrays_read_only(self, irregular: DegreeDistribution) -> None:
        """Stored arrays cannot be mutated in place."""
        with pytest.raises(ValueError, match="read-only"):
            irregular.masses[0] = 1.0

    def test_edge_to_node(self) -> None:
        """Edge mass is weighted by 1/degree before renormalizing."""
        lam = DegreeDistribution([2, 4], [0.5, 0.5])
        node = lam.edge_to_node()
        np.testing.assert_array_equal(node.degrees, [2, 4])
        np.testing.assert_allclose(node.masses, [2 / 3, 1 / 3])

    def test_node_to_edge_inverts(self, irregular: DegreeDistribution) -> None:
        """node_to_edge undoes edge_to_node."""
        assert irregular.edge_to_node().node_to_edge().isclose(irregular)

    def test_regular_perspectives_agree(self) -> None:
        """For a single degree both perspectives are identical."""
        lam = DegreeDistribution([3], [1.0])
        assert lam.edge_to_node() == lam

    def test_integral(self, irregular: DegreeDistribution) -> None:
        """Integral is sum of mass / degree."""
        expected = 0.25 / 2 + 0.25 / 3 + 0.5 / 8
        assert irregular.integral() == pytest.approx(expected)
        assert irregular.average_node_degree() == pytest.approx(1 / expected)

    def test_equality(self, irregular: DegreeDistribution) -> None:
        """Distributions compare by value."""
        assert irregular == DegreeDistribution([8, 3, 2], [0.5, 0.25, 0.25])
        assert irregular != DegreeDistribution([3], [1.0])
        assert irregular != "not a distribution"

    def test_repr(self) -> None:
        """Repr lists degrees and masses."""
        assert repr(DegreeDistribution([3], [1.0])) == "DegreeDistribution(degrees=[3], masses=[1.0])"

    def test_base_error(self) -> None:
        """All validation errors share a common base."""
        with pytest.raises(EnsembleError):
            DegreeDistribution([1], [0.5])
