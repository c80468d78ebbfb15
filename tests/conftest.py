"""Shared fixtures for pystructalign tests."""

from collections.abc import Callable, Sequence
from pathlib import Path

import numpy as np
import pytest
from numpy.typing import NDArray


def make_helix(n_points: int, radius: float = 2.3, rise: float = 1.5, turn_deg: float = 100.0) -> NDArray[np.floating]:
    """Ideal CA-like helix: no three consecutive points are collinear."""
    angles = np.deg2rad(turn_deg) * np.arange(n_points)
    return np.column_stack((radius * np.cos(angles), radius * np.sin(angles), rise * np.arange(n_points)))


def _pdb_line(serial: int, name: str, res_name: str, chain: str, res_seq: int, xyz: Sequence[float], element: str,
              record: str = "ATOM", altloc: str = " ") -> str:
    atom_field = f" {name:<3s}" if len(name) < 4 else name
    x, y, z = xyz
    return (
        f"{record:<6s}{serial:5d} {atom_field}{altloc}{res_name:>3s} {chain}{res_seq:4d}    "
        f"{x:8.3f}{y:8.3f}{z:8.3f}{1.0:6.2f}{0.0:6.2f}          {element:>2s}"
    )


@pytest.fixture
def helix() -> Callable[..., NDArray[np.floating]]:
    return make_helix


@pytest.fixture
def helix10() -> NDArray[np.floating]:
    return make_helix(10)


@pytest.fixture
def write_protein_pdb(tmp_path: Path) -> Callable[..., Path]:
    """Write a protein PDB with N, CA and C atoms per residue; CA placed at the given coordinates."""

    def _write(name: str, ca_coords: NDArray[np.floating]) -> Path:
        lines = []
        serial = 1
        for i, ca in enumerate(np.asarray(ca_coords, dtype=float), start=1):
            for atom_name, offset, element in (("N", (-0.5, 0.8, 0.3), "N"), ("CA", (0.0, 0.0, 0.0), "C"),
                                               ("C", (0.6, -0.7, 0.4), "C")):
                lines.append(_pdb_line(serial, atom_name, "ALA", "A", i, ca + np.array(offset), element))
                serial += 1
        lines.append("END")
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n")
        return path

    return _write


@pytest.fixture
def write_rna_pdb(tmp_path: Path) -> Callable[..., Path]:
    """Write an RNA PDB with P, O5' and C4' atoms per nucleotide; P placed at the given coordinates."""

    def _write(name: str, p_coords: NDArray[np.floating]) -> Path:
        lines = []
        serial = 1
        for i, p in enumerate(np.asarray(p_coords, dtype=float), start=1):
            for atom_name, offset, element in (("P", (0.0, 0.0, 0.0), "P"), ("O5'", (1.2, 0.9, 0.0), "O"),
                                               ("C4'", (2.1, 1.5, 0.8), "C")):
                lines.append(_pdb_line(serial, atom_name, "G", "A", i, p + np.array(offset), element))
                serial += 1
        lines.append("END")
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n")
        return path

    return _write


@pytest.fixture
def pdb_line() -> Callable[..., str]:
    return _pdb_line
