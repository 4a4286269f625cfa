"""
Orpheus backend
Turns research papers into narrated podcast episodes with cover art
"""

__version__ = "0.1.0"

from .config import settings

__all__ = ["settings", "__version__"]
