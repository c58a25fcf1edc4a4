"""genmon — a self-evolving swarm of token-launching agents."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("genmon")
except PackageNotFoundError:
    __version__ = "0.1.0"  # fallback for development
