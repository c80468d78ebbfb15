"""Biopython backend for reading, selecting, moving and writing structures."""

from __future__ import annotations

from pathlib import Path
from typing import cast

try:
    from Bio.PDB.Atom import Atom
    from Bio.PDB.mmcifio import MMCIFIO
    from Bio.PDB.MMCIFParser import MMCIFParser
    from Bio.PDB.PDBIO import PDBIO
    from Bio.PDB.PDBParser import PDBParser
    from Bio.PDB.Structure import Structure

except ImportError as e:
    raise ImportError("Biopython is required. Install with: pip install biopython") from e

import numpy as np

from .io import CIF_SUFFIXES, is_readable
from .molecule import Molecule
from .rigid import RigidTransform
from .selection import AtomSelector, is_rna_backbone


def load_structure(path: str | Path) -> Structure:
    """Load a structure from PDB or mmCIF file.

    Args:
        path: Path to structure file (.cif/.mmcif parsed as mmCIF, anything else as PDB)

    Returns:
        Loaded Biopython Structure object

    Raises:
        FileNotFoundError: If file does not exist or cannot be opened
        ValueError: If structure has no models
    """
    file_path = Path(path)
    if not is_readable(file_path):
        raise FileNotFoundError(f"Structure file not found: {path}")

    parser: PDBParser | MMCIFParser
    if file_path.suffix.lower() in CIF_SUFFIXES:
        parser = MMCIFParser(QUIET=True)  # type: ignore[no-untyped-call]
    else:
        parser = PDBParser(QUIET=True)  # type: ignore[no-untyped-call]

    structure = parser.get_structure(file_path.stem, str(file_path))  # type: ignore[no-untyped-call]

    if len(structure) == 0:
        raise ValueError(f"Structure has no models: {path}")

    return cast(Structure, structure)


def write_structure(structure: Structure, path: str | Path) -> None:
    """Write structure as mmCIF for .cif/.mmcif suffixes, PDB otherwise."""
    file_path = Path(path)

    io: PDBIO | MMCIFIO
    if file_path.suffix.lower() in CIF_SUFFIXES:
        io = MMCIFIO()  # type: ignore[no-untyped-call]
    else:
        io = PDBIO()  # type: ignore[no-untyped-call]

    io.set_structure(structure)  # type: ignore[no-untyped-call]
    io.save(str(file_path))


def is_rna(structure: Structure) -> bool:
    """Decide molecule type from the first atom of the first model.

    Raises:
        ValueError: If the structure has no atoms
    """
    for atom in structure[0].get_atoms():
        return is_rna_backbone(atom.get_name())
    raise ValueError("Structure has no atoms")


def extract_backbone(structure: Structure, selector: AtomSelector) -> Molecule:
    """Extract selected backbone atoms of the first model as a Molecule.

    Hetero residues and waters are skipped. Disordered atoms contribute the
    conformer Biopython selects by default (highest occupancy).
    """
    positions = []
    labels = []
    for chain in structure[0]:
        for residue in chain:
            hetero_flag, seq_num, _ = residue.get_id()
            if hetero_flag.strip():
                continue
            for atom in residue:
                if selector(atom.get_name()):
                    positions.append(np.asarray(atom.get_coord(), dtype=np.float64))
                    labels.append(f"{chain.id}:{seq_num}:{atom.get_name()}")

    return Molecule.from_positions(positions, labels)


def apply_transformation(structure: Structure, transform: RigidTransform) -> None:
    """Move every atom (all alternate conformers included) in place.

    Args:
        structure: Input Biopython Structure (modified in-place)
        transform: Rigid transformation to apply
    """
    for atom in structure.get_atoms():  # type: ignore[no-untyped-call]
        conformers = atom.disordered_get_list() if atom.is_disordered() else [atom]
        for conformer in conformers:
            conformer = cast(Atom, conformer)
            new_pos = transform.apply(conformer.get_coord())
            conformer.set_coord(new_pos.astype(np.float32))
