"""Text formats for LDPC ensembles.

``.ens`` files persist both edge-perspective distributions in sparse form::

    # comment
    rho <count>
    <degree> <mass>
    ...
    lam <count>
    <degree> <mass>
    ...

Sections may appear in either order, each exactly once. Masses are written
with the shortest repr that round-trips, so a written file reads back to the
same masses up to floating-point rounding.

``.deg`` files are a one-way export of node degree counts for graph
construction tools::

    # block_length <n> rate <R>
    variable <num_degrees> <num_nodes>
    <degrees...>
    <counts...>
    check <num_degrees> <num_nodes>
    <degrees...>
    <counts...>
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np

from ldpc_ensemble.degree_distribution import DegreeDistribution, DistributionConfig
from ldpc_ensemble.ensemble import Ensemble
from ldpc_ensemble.errors import FileFormatError, UninitializedEnsembleError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from numpy.typing import NDArray

logger = logging.getLogger(__name__)

ENS_SECTIONS = ("rho", "lam")
_SECTION_TOKENS = 2
_ENTRY_TOKENS = 2


def _atomic_write_text(path: Path, text: str) -> None:
    """Write ``text`` to a temporary file next to ``path``, then rename it into place."""
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        tmp_path.replace(path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def _format_section(name: str, dist: DegreeDistribution) -> list[str]:
    return [f"{name} {dist.num_active}", *(f"{degree} {mass!r}" for degree, mass in dist)]


def format_ensemble(ensemble: Ensemble) -> str:
    """Render an ensemble in ``.ens`` format."""
    if not ensemble.is_complete:
        msg = "Cannot serialize an incomplete ensemble"
        raise UninitializedEnsembleError(msg)
    lines = [
        "# LDPC ensemble, edge perspective degree distributions",
        *_format_section("rho", ensemble.rho),
        *_format_section("lam", ensemble.lam),
    ]
    return "\n".join(lines) + "\n"


def write_ensemble(ensemble: Ensemble, path: str | os.PathLike[str]) -> None:
    """Write ``ensemble`` to ``path`` in ``.ens`` format."""
    path = Path(path)
    _atomic_write_text(path, format_ensemble(ensemble))
    logger.debug("Wrote ensemble with rate %.6f to %s", ensemble.rate(), path)


def _content_lines(text: str) -> Iterator[tuple[int, list[str]]]:
    for lineno, line in enumerate(text.splitlines(), start=1):
        stripped = line.split("#", 1)[0].strip()
        if stripped:
            yield lineno, stripped.split()


def _parse_int(token: str, what: str, lineno: int, source: str) -> int:
    try:
        return int(token)
    except ValueError:
        msg = f"{source}:{lineno}: {what} must be an integer, got {token!r}"
        raise FileFormatError(msg) from None


def _parse_float(token: str, what: str, lineno: int, source: str) -> float:
    try:
        return float(token)
    except ValueError:
        msg = f"{source}:{lineno}: {what} must be a number, got {token!r}"
        raise FileFormatError(msg) from None


def parse_ensemble(
    text: str,
    config: DistributionConfig | None = None,
    source: str = "<string>",
) -> Ensemble:
    """Parse ``.ens`` content into an ensemble."""
    sections: dict[str, tuple[list[int], list[float]]] = {}
    lines = _content_lines(text)
    for lineno, tokens in lines:
        if len(tokens) != _SECTION_TOKENS or tokens[0] not in ENS_SECTIONS:
            msg = f"{source}:{lineno}: expected '<rho|lam> <count>', got {' '.join(tokens)!r}"
            raise FileFormatError(msg)
        name = tokens[0]
        if name in sections:
            msg = f"{source}:{lineno}: duplicate section {name!r}"
            raise FileFormatError(msg)
        count = _parse_int(tokens[1], "entry count", lineno, source)
        if count < 1:
            msg = f"{source}:{lineno}: section {name!r} must have at least one entry, got {count}"
            raise FileFormatError(msg)

        degrees: list[int] = []
        masses: list[float] = []
        for _ in range(count):
            entry = next(lines, None)
            if entry is None:
                msg = f"{source}: section {name!r} truncated, expected {count} entries, got {len(degrees)}"
                raise FileFormatError(msg)
            entry_lineno, entry_tokens = entry
            if len(entry_tokens) != _ENTRY_TOKENS:
                msg = f"{source}:{entry_lineno}: expected '<degree> <mass>', got {' '.join(entry_tokens)!r}"
                raise FileFormatError(msg)
            degrees.append(_parse_int(entry_tokens[0], "degree", entry_lineno, source))
            masses.append(_parse_float(entry_tokens[1], "mass", entry_lineno, source))
        sections[name] = (degrees, masses)

    missing = [name for name in ENS_SECTIONS if name not in sections]
    if missing:
        msg = f"{source}: missing section(s) {', '.join(missing)}"
        raise FileFormatError(msg)

    dl, lam = sections["lam"]
    dr, rho = sections["rho"]
    return Ensemble.from_sparse(dl, lam, dr, rho, config)


def read_ensemble(path: str | os.PathLike[str], config: DistributionConfig | None = None) -> Ensemble:
    """Read an ensemble from an ``.ens`` file."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as err:
        msg = f"{path}: not valid UTF-8 text ({err.reason} at byte {err.start})"
        raise FileFormatError(msg) from err
    ensemble = parse_ensemble(text, config, source=str(path))
    logger.debug(
        "Read ensemble from %s: %d variable degrees, %d check degrees",
        path,
        ensemble.active_var_degrees(),
        ensemble.active_chk_degrees(),
    )
    return ensemble


def apportion(fractions: NDArray[np.float64], total: int) -> NDArray[np.int64]:
    """Split ``total`` into integer counts proportional to ``fractions``.

    Largest-remainder method: floor every share, then hand the leftover units
    to the largest fractional parts. Counts always sum to ``total``.
    """
    shares = np.asarray(fractions, dtype=np.float64) * total
    counts = np.floor(shares).astype(np.int64)
    leftover = total - int(np.sum(counts))
    if leftover > 0:
        order = np.argsort(-(shares - counts), kind="stable")
        counts[order[:leftover]] += 1
    return counts


def _node_counts(name: str, dist: DegreeDistribution, num_nodes: int) -> NDArray[np.int64]:
    counts = apportion(dist.edge_to_node().masses, num_nodes)
    zero = dist.degrees[counts == 0]
    if len(zero):
        logger.warning(
            "%s degrees %s get no nodes with %d %s nodes",
            name.capitalize(),
            zero.tolist(),
            num_nodes,
            name,
        )
    return counts


def format_deg(ensemble: Ensemble, block_length: int) -> str:
    """Render node degree counts in ``.deg`` format."""
    if isinstance(block_length, bool) or not isinstance(block_length, (int, np.integer)) or block_length < 1:
        msg = f"block_length must be a positive integer, got {block_length!r}"
        raise ValueError(msg)
    rate = ensemble.rate()
    num_var = int(block_length)
    num_chk = round(num_var * (1.0 - rate))

    lines = [f"# block_length {num_var} rate {rate!r}"]
    for name, dist, num_nodes in (("variable", ensemble.lam, num_var), ("check", ensemble.rho, num_chk)):
        counts = _node_counts(name, dist, num_nodes)
        lines.append(f"{name} {dist.num_active} {num_nodes}")
        lines.append(" ".join(str(d) for d in dist.degrees.tolist()))
        lines.append(" ".join(str(c) for c in counts.tolist()))
    return "\n".join(lines) + "\n"


def export_deg(ensemble: Ensemble, path: str | os.PathLike[str], block_length: int) -> None:
    """Write node degree counts for ``block_length`` variable nodes to ``path``."""
    path = Path(path)
    _atomic_write_text(path, format_deg(ensemble, block_length))
    logger.debug("Exported degree sequence for block length %d to %s", block_length, path)
