"""Backbone atom selection operations."""

from __future__ import annotations

from collections.abc import Callable, Iterator

import gemmi

from .molecule import Molecule

CA_ATOM = "CA"
PHOSPHATE_ATOM = "P"

# Sugar-phosphate backbone atom names, including legacy PDB v2 spellings
RNA_BACKBONE_ATOMS = frozenset(
    {
        "P", "OP1", "OP2", "OP3", "O1P", "O2P", "O3P",
        "O5'", "C5'", "C4'", "C3'", "O3'",
        "O5*", "C5*", "C4*", "C3*", "O3*",
    }
)

AtomSelector = Callable[[str], bool]


def is_rna_backbone(atom_name: str) -> bool:
    """Check whether an atom name belongs to the nucleic acid backbone."""
    return atom_name.strip() in RNA_BACKBONE_ATOMS


def ca_selector(atom_name: str) -> bool:
    """Select protein alpha carbons."""
    return atom_name.strip() == CA_ATOM


def phosphate_selector(atom_name: str) -> bool:
    """Select nucleic acid phosphorus atoms."""
    return atom_name.strip() == PHOSPHATE_ATOM


def _iter_atoms(structure: gemmi.Structure) -> Iterator[tuple[gemmi.Chain, gemmi.Residue, gemmi.Atom]]:
    for chain in structure[0]:
        for residue in chain:
            for atom in residue:
                yield chain, residue, atom


def first_atom(structure: gemmi.Structure) -> gemmi.Atom:
    """Return first atom of first model.

    Raises:
        ValueError: If the structure has no atoms
    """
    if len(structure) == 0:
        raise ValueError("Structure has no models")
    for _, _, atom in _iter_atoms(structure):
        return atom
    raise ValueError("Structure has no atoms")


def is_rna(structure: gemmi.Structure) -> bool:
    """Decide molecule type from the first atom: RNA if it is a backbone atom."""
    return is_rna_backbone(first_atom(structure).name)


def backbone_selector(rna: bool) -> AtomSelector:
    """Return phosphate selector for RNA, CA selector for proteins."""
    return phosphate_selector if rna else ca_selector


def extract_backbone(structure: gemmi.Structure, selector: AtomSelector) -> Molecule:
    """Extract selected backbone atoms of the first model as a Molecule.

    Only standard ATOM records are considered (a HETATM calcium is also named
    CA). Only the first conformer is kept, both for alternate atom locations
    and for point mutations, which gemmi stores as consecutive residues
    sharing one sequence number.

    Args:
        structure: Input gemmi Structure
        selector: Predicate on the atom name

    Returns:
        Molecule with one position per selected atom, in file order
    """
    positions = []
    labels = []
    seen: set[tuple[str, int, str, str]] = set()
    for chain, residue, atom in _iter_atoms(structure):
        if residue.het_flag == "H" or not selector(atom.name):
            continue
        key = (chain.name, residue.seqid.num, residue.seqid.icode, atom.name)
        if key in seen:
            continue
        seen.add(key)
        positions.append([atom.pos.x, atom.pos.y, atom.pos.z])
        labels.append(f"{chain.name}:{residue.seqid.num}:{atom.name}")

    return Molecule.from_positions(positions, labels)
