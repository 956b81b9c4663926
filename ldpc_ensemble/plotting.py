"""Plotting utilities for degree distributions."""

from __future__ import annotations

from typing import TYPE_CHECKING

import matplotlib.pyplot as plt

if TYPE_CHECKING:
    from matplotlib.axes import Axes
    from matplotlib.figure import Figure

    from ldpc_ensemble.ensemble import Ensemble


def plot_degree_distributions(
    ensemble: Ensemble,
    title: str | None = None,
    *,
    node_perspective: bool = False,
) -> tuple[Figure, tuple[Axes, Axes]]:
    """Bar plot of the variable and check node degree distributions."""
    if node_perspective:
        var_dist, chk_dist = ensemble.var_node_dist(), ensemble.chk_node_dist()
        var_label, chk_label = "Lambda (node)", "P (node)"
    else:
        var_dist, chk_dist = ensemble.lam, ensemble.rho
        var_label, chk_label = "lambda (edge)", "rho (edge)"

    fig, (ax_var, ax_chk) = plt.subplots(1, 2, figsize=(10, 4), sharey=True)

    ax_var.bar(var_dist.degrees, var_dist.masses, color="tab:blue", label=var_label)
    ax_chk.bar(chk_dist.degrees, chk_dist.masses, color="tab:orange", label=chk_label)

    ax_var.set_title("Variable nodes")
    ax_chk.set_title("Check nodes")
    for ax, dist in ((ax_var, var_dist), (ax_chk, chk_dist)):
        ax.set_xlabel("Degree")
        ax.set_xticks(dist.degrees)
        ax.legend()
        ax.grid(visible=True, alpha=0.3)
    ax_var.set_ylabel("Probability mass")

    fig.suptitle(title or f"Degree distributions (R = {ensemble.rate():.3f})")

    plt.tight_layout()
    return fig, (ax_var, ax_chk)
