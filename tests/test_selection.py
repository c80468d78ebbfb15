"""Tests for backbone atom selection."""

from collections.abc import Callable
from pathlib import Path

import gemmi
import numpy as np
import pytest

from pystructalign.io import load_structure
from pystructalign.selection import (
    backbone_selector,
    ca_selector,
    extract_backbone,
    first_atom,
    is_rna,
    is_rna_backbone,
    phosphate_selector,
)

COORDS = np.array([[0.0, 0.0, 0.0], [3.8, 0.0, 0.0], [5.0, 3.6, 0.0]])


class TestSelectors:
    """Tests for atom name predicates."""

    def test_ca_selector(self) -> None:
        """Test only CA is selected for proteins."""
        assert ca_selector("CA")
        assert ca_selector(" CA ")
        assert not ca_selector("C")
        assert not ca_selector("CB")

    def test_phosphate_selector(self) -> None:
        """Test only P is selected for nucleic acids."""
        assert phosphate_selector("P")
        assert not phosphate_selector("OP1")
        assert not phosphate_selector("PA")

    @pytest.mark.parametrize("name", ["P", "OP1", "O1P", "O5'", "C4'", "O3*"])
    def test_rna_backbone_names(self, name: str) -> None:
        """Test sugar-phosphate atom names are recognised."""
        assert is_rna_backbone(name)

    @pytest.mark.parametrize("name", ["N", "CA", "C", "O", "N1"])
    def test_non_backbone_names(self, name: str) -> None:
        """Test protein and base atoms are not RNA backbone."""
        assert not is_rna_backbone(name)

    def test_backbone_selector(self) -> None:
        """Test selector choice by molecule type."""
        assert backbone_selector(True) is phosphate_selector
        assert backbone_selector(False) is ca_selector


class TestIsRna:
    """Tests for is_rna and first_atom."""

    def test_protein(self, write_protein_pdb: Callable[..., Path]) -> None:
        """Test a protein starting with N is not RNA."""
        structure = load_structure(write_protein_pdb("prot.pdb", COORDS))
        assert first_atom(structure).name == "N"
        assert not is_rna(structure)

    def test_rna(self, write_rna_pdb: Callable[..., Path]) -> None:
        """Test an RNA starting with P is RNA."""
        structure = load_structure(write_rna_pdb("rna.pdb", COORDS))
        assert first_atom(structure).name == "P"
        assert is_rna(structure)

    def test_rna_without_leading_phosphate(self, tmp_path: Path, pdb_line: Callable[..., str]) -> None:
        """Test RNA whose first nucleotide starts at O5' is still RNA."""
        path = tmp_path / "rna5.pdb"
        path.write_text(
            "\n".join(
                [
                    pdb_line(1, "O5'", "G", "A", 1, (0.0, 0.0, 0.0), "O"),
                    pdb_line(2, "C5'", "G", "A", 1, (1.4, 0.0, 0.0), "C"),
                    pdb_line(3, "P", "C", "A", 2, (6.0, 0.0, 0.0), "P"),
                    "END",
                ]
            )
            + "\n"
        )
        assert is_rna(load_structure(path))

    def test_no_models(self) -> None:
        """Test error for a structure without models."""
        with pytest.raises(ValueError, match="no models"):
            first_atom(gemmi.Structure())


class TestExtractBackbone:
    """Tests for extract_backbone function."""

    def test_protein_ca(self, write_protein_pdb: Callable[..., Path]) -> None:
        """Test one CA per residue in file order."""
        structure = load_structure(write_protein_pdb("prot.pdb", COORDS))
        molecule = extract_backbone(structure, ca_selector)

        assert len(molecule) == 3
        np.testing.assert_allclose(molecule.coords, COORDS)
        assert molecule.labels == ["A:1:CA", "A:2:CA", "A:3:CA"]

    def test_rna_phosphates(self, write_rna_pdb: Callable[..., Path]) -> None:
        """Test one P per nucleotide."""
        structure = load_structure(write_rna_pdb("rna.pdb", COORDS))
        molecule = extract_backbone(structure, phosphate_selector)

        np.testing.assert_allclose(molecule.coords, COORDS)
        assert molecule.labels[0] == "A:1:P"

    def test_hetatm_calcium_skipped(self, tmp_path: Path, pdb_line: Callable[..., str]) -> None:
        """Test a HETATM calcium named CA is not taken for an alpha carbon."""
        path = tmp_path / "ca_ion.pdb"
        path.write_text(
            "\n".join(
                [
                    pdb_line(1, "N", "ALA", "A", 1, (-0.5, 0.8, 0.3), "N"),
                    pdb_line(2, "CA", "ALA", "A", 1, (0.0, 0.0, 0.0), "C"),
                    pdb_line(3, "CA", "CA", "A", 101, (9.0, 9.0, 9.0), "CA", record="HETATM"),
                    "END",
                ]
            )
            + "\n"
        )

        molecule = extract_backbone(load_structure(path), ca_selector)

        assert len(molecule) == 1
        np.testing.assert_allclose(molecule.coords[0], [0.0, 0.0, 0.0])

    def test_alternate_conformers_keep_first(self, tmp_path: Path, pdb_line: Callable[..., str]) -> None:
        """Test only the first listed conformer of an atom is used."""
        path = tmp_path / "altloc.pdb"
        path.write_text(
            "\n".join(
                [
                    pdb_line(1, "CA", "SER", "A", 1, (1.0, 0.0, 0.0), "C", altloc="A"),
                    pdb_line(2, "CA", "SER", "A", 1, (1.5, 0.5, 0.0), "C", altloc="B"),
                    pdb_line(3, "CA", "GLY", "A", 2, (4.8, 0.0, 0.0), "C"),
                    "END",
                ]
            )
            + "\n"
        )

        molecule = extract_backbone(load_structure(path), ca_selector)

        np.testing.assert_allclose(molecule.coords, [[1.0, 0.0, 0.0], [4.8, 0.0, 0.0]])

    def test_point_mutation_keeps_first(self, tmp_path: Path, pdb_line: Callable[..., str]) -> None:
        """Test a residue modelled as two amino acids contributes one CA."""
        path = tmp_path / "mutation.pdb"
        path.write_text(
            "\n".join(
                [
                    pdb_line(1, "CA", "SER", "A", 1, (1.0, 0.0, 0.0), "C", altloc="A"),
                    pdb_line(2, "CA", "ALA", "A", 1, (1.5, 0.5, 0.0), "C", altloc="B"),
                    pdb_line(3, "CA", "GLY", "A", 2, (4.8, 0.0, 0.0), "C"),
                    "END",
                ]
            )
            + "\n"
        )

        molecule = extract_backbone(load_structure(path), ca_selector)

        np.testing.assert_allclose(molecule.coords, [[1.0, 0.0, 0.0], [4.8, 0.0, 0.0]])
        assert molecule.labels == ["A:1:CA", "A:2:CA"]

    def test_same_number_in_other_chain_kept(self, tmp_path: Path, pdb_line: Callable[..., str]) -> None:
        """Test residues sharing a number in different chains are all kept."""
        path = tmp_path / "two_chains.pdb"
        path.write_text(
            "\n".join(
                [
                    pdb_line(1, "CA", "ALA", "A", 1, (0.0, 0.0, 0.0), "C"),
                    "TER",
                    pdb_line(2, "CA", "ALA", "B", 1, (9.0, 0.0, 0.0), "C"),
                    "END",
                ]
            )
            + "\n"
        )

        molecule = extract_backbone(load_structure(path), ca_selector)

        assert molecule.labels == ["A:1:CA", "B:1:CA"]

    def test_only_first_model(self, tmp_path: Path, pdb_line: Callable[..., str]) -> None:
        """Test atoms of later models are ignored."""
        path = tmp_path / "nmr.pdb"
        path.write_text(
            "\n".join(
                [
                    "MODEL        1",
                    pdb_line(1, "CA", "ALA", "A", 1, (0.0, 0.0, 0.0), "C"),
                    "ENDMDL",
                    "MODEL        2",
                    pdb_line(1, "CA", "ALA", "A", 1, (7.0, 0.0, 0.0), "C"),
                    "ENDMDL",
                    "END",
                ]
            )
            + "\n"
        )

        molecule = extract_backbone(load_structure(path), ca_selector)

        np.testing.assert_allclose(molecule.coords, [[0.0, 0.0, 0.0]])

    def test_no_selected_atoms(self, write_rna_pdb: Callable[..., Path]) -> None:
        """Test selecting CA from RNA gives an empty molecule."""
        molecule = extract_backbone(load_structure(write_rna_pdb("rna.pdb", COORDS)), ca_selector)
        assert len(molecule) == 0
        assert molecule.coords.shape == (0, 3)
