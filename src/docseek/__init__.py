"""docseek - local hybrid (semantic + keyword) retrieval over text files.

Indexing splits files into overlapping line windows, embeds each window and
stores it under the id assigned by the vector index. Querying compiles a
natural-language query into a keyword/regex plan, recalls the nearest
chunks and narrows them with the plan.
"""

from docseek.config import Settings, load_settings
from docseek.models import Chunk, ChunkWithText, Hit, Plan
from docseek.pipeline import Engine, IndexStats, QueryResult

__version__ = "0.1.0"

__all__ = [
    "Chunk",
    "ChunkWithText",
    "Engine",
    "Hit",
    "IndexStats",
    "Plan",
    "QueryResult",
    "Settings",
    "load_settings",
]
