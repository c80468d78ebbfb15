"""Structure file I/O operations (gemmi backend)."""

from __future__ import annotations

from pathlib import Path

import gemmi

CIF_SUFFIXES = (".cif", ".mmcif")


def is_readable(path: str | Path) -> bool:
    """Check that path is an existing file that can be opened for reading."""
    try:
        with Path(path).open("rb"):
            return True
    except OSError:
        return False


def load_structure(path: str | Path) -> gemmi.Structure:
    """Load a structure from PDB or mmCIF file.

    Args:
        path: Path to structure file (format detected by gemmi)

    Returns:
        Loaded gemmi Structure object

    Raises:
        FileNotFoundError: If file does not exist or cannot be opened
        ValueError: If structure has no models
    """
    file_path = Path(path)
    if not is_readable(file_path):
        raise FileNotFoundError(f"Structure file not found: {path}")

    structure = gemmi.read_structure(str(file_path))

    if len(structure) == 0:
        raise ValueError(f"Structure has no models: {path}")

    return structure


def write_structure(structure: gemmi.Structure, path: str | Path) -> None:
    """Write structure as mmCIF for .cif/.mmcif suffixes, PDB otherwise.

    Args:
        structure: gemmi Structure to write
        path: Output file path
    """
    file_path = Path(path)

    if file_path.suffix.lower() in CIF_SUFFIXES:
        structure.setup_entities()
        structure.make_mmcif_document().write_file(str(file_path))
    else:
        structure.write_pdb(str(file_path))
