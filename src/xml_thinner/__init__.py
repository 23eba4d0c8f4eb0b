"""XML Thinner.

Infers the structural shape of XML documents by merging, at every level, all
sibling elements that share a tag name into one node. The resulting "thinned"
tree is the maximal structure consistent with every occurrence in the input.

Progressive API Disclosure:
- Level 1: Simple functions - thin(), thin_string(), thin_file(), thin_events()
- Level 2: Configured thinner - XMLThinner class, including corpus merging
- Level 3: Incremental building - ThinningTreeBuilder with begin()/feed()/close()
"""

__version__ = "0.1.0"
__author__ = "XML Thinner Team"

from .api import ThinResult, XMLThinner, thin, thin_events, thin_file, thin_string
from .events import EndEvent, StartEvent, TextEvent, XMLEventSource
from .shared.config import ThinningConfig
from .tree import ThinningError, ThinningTreeBuilder, ThinNode, ThinTree

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple thinning functions
    "thin",
    "thin_string",
    "thin_file",
    "thin_events",

    # Level 2: Configured thinner
    "XMLThinner",

    # Level 3: Incremental building and events
    "ThinningTreeBuilder",
    "XMLEventSource",
    "StartEvent",
    "TextEvent",
    "EndEvent",

    # Result objects and data structures
    "ThinResult",
    "ThinTree",
    "ThinNode",
    "ThinningError",

    # Configuration
    "ThinningConfig",
]
