"""Apply rigid transformations to gemmi structures."""

import gemmi
import numpy as np

from .rigid import RigidTransform


def apply_transformation(structure: gemmi.Structure, transform: RigidTransform) -> None:
    """Move every atom of every model in place: new_pos = R @ old_pos + t.

    Args:
        structure: Input gemmi Structure (modified in-place)
        transform: Rigid transformation to apply
    """
    for model in structure:
        for chain in model:
            for residue in chain:
                if len(residue) == 0:
                    continue
                coords = np.array([[atom.pos.x, atom.pos.y, atom.pos.z] for atom in residue])
                moved = transform.apply(coords)
                for atom, new_pos in zip(residue, moved, strict=True):
                    atom.pos = gemmi.Position(float(new_pos[0]), float(new_pos[1]), float(new_pos[2]))
