"""Public API for XML thinning.

Progressive disclosure:
- Level 1: thin(), thin_string(), thin_file(), thin_events()
- Level 2: XMLThinner with configuration, reuse and corpus merging
"""

from .result import ThinResult
from .thinner import XMLThinner, thin, thin_events, thin_file, thin_string

__all__ = [
    "ThinResult",
    "XMLThinner",
    "thin",
    "thin_events",
    "thin_file",
    "thin_string",
]
