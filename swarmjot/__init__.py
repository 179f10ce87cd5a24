"""swarmjot: article publishing and retrieval on a content-addressed storage network.

v0.2.0:
  - Capacity resolution over postage batches (placeholder only outside production)
  - Resource / collection / website builders over the Bee HTTP API
  - Multi-gateway reads with ordered fallback and an in-memory cache
  - Self-describing article pages with an embedded, schema-versioned envelope
  - Deterministic article layout (h1 / h2 / highlight / regular)
  - Drafts and asset records in a local key/value store
  - In-process node emulator for offline runs and tests
"""

__version__ = "0.2.0"
__description__ = "Article publishing and retrieval on Swarm-style storage networks"

from swarmjot.bridge.bee import BeeApiError
from swarmjot.core.article_codec import ContentMalformedError
from swarmjot.core.builders import UploadFailedError
from swarmjot.core.engine import ContentEngine
from swarmjot.core.fetcher import ContentUnavailableError
from swarmjot.core.postage import NoUsableCapacityError
from swarmjot.core.production_guard import ProductionConfigError
from swarmjot.core.reference import InvalidReferenceError

__all__ = [
    "ContentEngine",
    "BeeApiError",
    "ContentMalformedError",
    "ContentUnavailableError",
    "InvalidReferenceError",
    "NoUsableCapacityError",
    "ProductionConfigError",
    "UploadFailedError",
    "__version__",
]
