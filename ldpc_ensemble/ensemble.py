"""LDPC ensembles: a variable-node and a check-node degree distribution."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ldpc_ensemble.degree_distribution import DegreeDistribution, DistributionConfig
from ldpc_ensemble.errors import UninitializedEnsembleError

if TYPE_CHECKING:
    from os import PathLike

    import numpy as np
    from numpy.typing import ArrayLike, NDArray


class Ensemble:
    """Pair of edge-perspective degree distributions describing an LDPC code family.

    ``lam`` is the variable-node distribution and ``rho`` the check-node
    distribution. An ensemble is complete once both sides have been set.
    Every setter validates its input before touching any state, so a failed
    update leaves the ensemble exactly as it was.
    """

    def __init__(self, config: DistributionConfig | None = None) -> None:
        """Create an empty, incomplete ensemble."""
        self.config = config or DistributionConfig()
        self._lam: DegreeDistribution | None = None
        self._rho: DegreeDistribution | None = None

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_dense(
        cls,
        lam: ArrayLike,
        rho: ArrayLike,
        config: DistributionConfig | None = None,
    ) -> Ensemble:
        """Build from dense vectors (index 0 = degree 1)."""
        ens = cls(config)
        ens.set_dense(lam, rho)
        return ens

    @classmethod
    def from_sparse(
        cls,
        dl: ArrayLike,
        lam: ArrayLike,
        dr: ArrayLike,
        rho: ArrayLike,
        config: DistributionConfig | None = None,
    ) -> Ensemble:
        """Build from sparse degree/mass arrays for both sides."""
        ens = cls(config)
        ens.set_sparse(dl, lam, dr, rho)
        return ens

    @classmethod
    def from_distributions(
        cls,
        lam: DegreeDistribution,
        rho: DegreeDistribution,
        config: DistributionConfig | None = None,
    ) -> Ensemble:
        """Wrap two already validated distributions."""
        ens = cls(config)
        ens._lam, ens._rho = lam, rho
        return ens

    @classmethod
    def from_file(cls, path: str | PathLike[str], config: DistributionConfig | None = None) -> Ensemble:
        """Read an ensemble from an ``.ens`` file."""
        from ldpc_ensemble.file_codec import read_ensemble

        return read_ensemble(path, config)

    def set_dense(self, lam: ArrayLike, rho: ArrayLike) -> None:
        """Replace both sides from dense vectors."""
        new_lam = DegreeDistribution.from_dense(lam, self.config)
        new_rho = DegreeDistribution.from_dense(rho, self.config)
        self._lam, self._rho = new_lam, new_rho

    def set_sparse(self, dl: ArrayLike, lam: ArrayLike, dr: ArrayLike, rho: ArrayLike) -> None:
        """Replace both sides from sparse degree/mass arrays."""
        new_lam = DegreeDistribution(dl, lam, self.config)
        new_rho = DegreeDistribution(dr, rho, self.config)
        self._lam, self._rho = new_lam, new_rho

    def set_var_degree_dist(self, lam: ArrayLike) -> None:
        """Replace the variable-node distribution from a dense vector."""
        self._lam = DegreeDistribution.from_dense(lam, self.config)

    def set_chk_degree_dist(self, rho: ArrayLike) -> None:
        """Replace the check-node distribution from a dense vector."""
        self._rho = DegreeDistribution.from_dense(rho, self.config)

    def set_var_sparse(self, degrees: ArrayLike, masses: ArrayLike) -> None:
        """Replace the variable-node distribution from sparse arrays."""
        self._lam = DegreeDistribution(degrees, masses, self.config)

    def set_chk_sparse(self, degrees: ArrayLike, masses: ArrayLike) -> None:
        """Replace the check-node distribution from sparse arrays."""
        self._rho = DegreeDistribution(degrees, masses, self.config)

    def read(self, path: str | PathLike[str]) -> None:
        """Replace both sides with the contents of an ``.ens`` file."""
        other = Ensemble.from_file(path, self.config)
        self._lam, self._rho = other.lam, other.rho

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def is_complete(self) -> bool:
        """True once both distributions have been set."""
        return self._lam is not None and self._rho is not None

    @property
    def lam(self) -> DegreeDistribution:
        """Variable-node distribution (edge perspective)."""
        if self._lam is None:
            msg = "Variable node degree distribution has not been set"
            raise UninitializedEnsembleError(msg)
        return self._lam

    @property
    def rho(self) -> DegreeDistribution:
        """Check-node distribution (edge perspective)."""
        if self._rho is None:
            msg = "Check node degree distribution has not been set"
            raise UninitializedEnsembleError(msg)
        return self._rho

    def _require_complete(self, operation: str) -> None:
        if not self.is_complete:
            missing = [name for name, dist in (("lam", self._lam), ("rho", self._rho)) if dist is None]
            msg = f"Cannot {operation}: ensemble is missing {', '.join(missing)}"
            raise UninitializedEnsembleError(msg)

    def rate(self) -> float:
        """Design rate ``R = 1 - (sum_i rho_i / i) / (sum_j lam_j / j)``."""
        self._require_complete("compute rate")
        return 1.0 - self.rho.integral() / self.lam.integral()

    def active_var_degrees(self) -> int:
        """Number of variable-node degrees with nonzero mass (0 if unset)."""
        return 0 if self._lam is None else self._lam.num_active

    def active_chk_degrees(self) -> int:
        """Number of check-node degrees with nonzero mass (0 if unset)."""
        return 0 if self._rho is None else self._rho.num_active

    def var_degree_dist(self, max_degree: int | None = None) -> NDArray[np.float64]:
        """Dense variable-node distribution, index 0 = degree 1."""
        return self.lam.to_dense(max_degree)

    def chk_degree_dist(self, max_degree: int | None = None) -> NDArray[np.float64]:
        """Dense check-node distribution, index 0 = degree 1."""
        return self.rho.to_dense(max_degree)

    def var_node_dist(self) -> DegreeDistribution:
        """Variable-node distribution from the node perspective."""
        return self.lam.edge_to_node()

    def chk_node_dist(self) -> DegreeDistribution:
        """Check-node distribution from the node perspective."""
        return self.rho.edge_to_node()

    def lam_of_degree(self, degree: int) -> float:
        return self.lam.mass_of_degree(degree)

    def rho_of_degree(self, degree: int) -> float:
        return self.rho.mass_of_degree(degree)

    def describe(self) -> str:
        """Human-readable summary of the ensemble."""
        if not self.is_complete:
            missing = " and ".join(name for name, dist in (("lam", self._lam), ("rho", self._rho)) if dist is None)
            return f"LDPC ensemble (incomplete, {missing} not set)"
        rows = [
            ("rate:", f"{self.rate():.6f}"),
            ("active variable degrees:", self.active_var_degrees()),
            ("active check degrees:", self.active_chk_degrees()),
            ("variable degrees:", self.lam.degrees.tolist()),
            ("lam:", [round(m, 6) for m in self.lam.masses.tolist()]),
            ("check degrees:", self.rho.degrees.tolist()),
            ("rho:", [round(m, 6) for m in self.rho.masses.tolist()]),
        ]
        return "\n".join(["LDPC ensemble", *(f"  {label:<25}{value}" for label, value in rows)])

    def __str__(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        return f"Ensemble(lam={self._lam!r}, rho={self._rho!r})"

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def write(self, path: str | PathLike[str]) -> None:
        """Write the ensemble to an ``.ens`` file."""
        from ldpc_ensemble.file_codec import write_ensemble

        write_ensemble(self, path)

    def export_deg(self, path: str | PathLike[str], block_length: int) -> None:
        """Export node degree counts for a code of ``block_length`` variable nodes."""
        from ldpc_ensemble.file_codec import export_deg

        export_deg(self, path, block_length)
