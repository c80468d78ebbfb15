"""Triangle-based structural superposition of proteins and RNA."""

import importlib.metadata

try:
    __version__ = importlib.metadata.version("pystructalign")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.0.0"
