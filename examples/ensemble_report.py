#!/usr/bin/env python3
"""Extract, persist and plot the ensemble of a regular LDPC code.

Builds a random (3, 6)-regular Gallager parity-check matrix, derives its
degree distributions, writes them to an .ens file, exports a .deg degree
sequence for graph construction and plots both sides.

Usage:
    uv run python examples/ensemble_report.py
"""

import logging
from pathlib import Path

import matplotlib.pyplot as plt

from ldpc_ensemble.empirical import get_empirical_ensemble
from ldpc_ensemble.ensemble import Ensemble
from ldpc_ensemble.parity import DenseParityCheck
from ldpc_ensemble.plotting import plot_degree_distributions

logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s - %(levelname)s - %(message)s",
)

CODE_LENGTH = 1200
OUTPUT_DIR = Path("output")


def main() -> None:
    """Run the extraction and write the outputs to ``output/``."""
    logger = logging.getLogger(__name__)
    OUTPUT_DIR.mkdir(exist_ok=True)

    h = DenseParityCheck.regular(CODE_LENGTH, 3, 6, seed=0)
    empirical = get_empirical_ensemble(h)
    logger.info("Empirical ensemble of a %d x %d matrix:\n%s", *h.shape, empirical.describe())

    irregular = Ensemble.from_sparse([2, 3, 8], [0.3, 0.4, 0.3], [7, 8], [0.5, 0.5])
    irregular.write(OUTPUT_DIR / "irregular.ens")
    irregular.export_deg(OUTPUT_DIR / "irregular.deg", block_length=CODE_LENGTH)
    reloaded = Ensemble.from_file(OUTPUT_DIR / "irregular.ens")
    logger.info("Reloaded ensemble:\n%s", reloaded.describe())

    plot_degree_distributions(reloaded, node_perspective=True)
    plt.show()


if __name__ == "__main__":
    main()
