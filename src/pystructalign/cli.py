"""Command-line interface for pystructalign."""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from collections.abc import Callable
from types import ModuleType
from typing import Any, NamedTuple

from . import __version__
from . import io as gemmi_io
from . import selection, transform
from .alignment import align_molecules
from .io import is_readable
from .selection import backbone_selector

logger = logging.getLogger(__name__)


class _Backend(NamedTuple):
    load_structure: Callable[..., Any]
    is_rna: Callable[..., Any]
    extract_backbone: Callable[..., Any]
    apply_transformation: Callable[..., Any]
    write_structure: Callable[..., Any]


def _get_backend(name: str) -> _Backend:
    if name == "biopython":
        bio: ModuleType = importlib.import_module(".bio_utils", __package__)
        return _Backend(
            bio.load_structure, bio.is_rna, bio.extract_backbone, bio.apply_transformation, bio.write_structure
        )
    return _Backend(
        gemmi_io.load_structure,
        selection.is_rna,
        selection.extract_backbone,
        transform.apply_transformation,
        gemmi_io.write_structure,
    )


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(message)s", stream=sys.stdout)


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid float value: {value!r}") from e
    if not number > 0:
        raise argparse.ArgumentTypeError(f"epsilon must be positive, got {value}")
    return number


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from e
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="structalign",
        description="Sequence-independent superposition of protein or RNA structures",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "epsilon",
        type=_positive_float,
        help="Largest distance (Å) between two atoms counted as a matched pair",
    )
    parser.add_argument(
        "target",
        help="Target structure file (PDB or mmCIF), kept fixed",
    )
    parser.add_argument(
        "model",
        help="Model structure file (PDB or mmCIF), moved onto the target",
    )
    parser.add_argument(
        "-o",
        "--output",
        default="transformed.pdb",
        help="Output file for the transformed full-atom model (default: transformed.pdb)",
    )
    parser.add_argument(
        "--workers",
        type=_positive_int,
        default=1,
        help="Number of processes for the pose search (default: 1)",
    )
    parser.add_argument(
        "--backend",
        choices=("gemmi", "biopython"),
        default="gemmi",
        help="Structure I/O library (default: gemmi)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose output (backbone sizes, centroids, winning triangles)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the structalign CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    logger.info("Epsilon: %g", args.epsilon)

    for path in (args.target, args.model):
        if not is_readable(path):
            logger.info("File %s does not exist.", path)
            return 0

    try:
        backend = _get_backend(args.backend)
        target_st = backend.load_structure(args.target)
        model_st = backend.load_structure(args.model)

        # Molecule type is decided by the model's first atom
        rna = backend.is_rna(model_st)
        selector = backbone_selector(rna)
        target = backend.extract_backbone(target_st, selector)
        model = backend.extract_backbone(model_st, selector)
        logger.debug(
            "Backbone (%s): target %d atoms, model %d atoms",
            "phosphate" if rna else "CA",
            len(target),
            len(model),
        )

        result = align_molecules(target, model, args.epsilon, workers=args.workers)

        backend.apply_transformation(model_st, result.transform)
        backend.write_structure(model_st, args.output)
        logger.debug("Transformed model written to: %s", args.output)

    except Exception as e:
        logger.error("Error: %s", e)
        return 1

    logger.info("Max Alignment Size: %d", result.size)
    logger.info("Best RMSD: %g", result.rmsd)
    logger.info("Rigid Trans: %s", result.transform)
    return 0


if __name__ == "__main__":
    sys.exit(main())
