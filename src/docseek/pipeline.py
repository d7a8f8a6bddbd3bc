"""Indexing and query workflows.

`Engine` wires the chunker, embedder, vector index, metadata store,
planner and filter together. It is the only place that assigns chunk ids:
`append_chunk` adds the vector, then stores the chunk under the id the
index returned.
"""

from __future__ import annotations

import logging
from bisect import bisect_right
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from docseek.chunkers import LineWindowChunker, line_offsets
from docseek.config import Settings
from docseek.errors import (
    ConfigurationError,
    DimensionMismatch,
    EmbeddingError,
    NotFound,
    PlanError,
)
from docseek.filtering import CandidateFilter, truncate_bytes
from docseek.indexes import open_index
from docseek.ingesters import get_ingester
from docseek.models import Chunk, Hit, Plan
from docseek.planning import QueryPlanner
from docseek.protocols import EmbeddingProvider, TextGenerator, VectorIndex
from docseek.storage import MetadataStore

logger = logging.getLogger(__name__)

PROBE_TEXT = "docseek embedding probe"
PENDING_FILE_KEY = "pending_file"
METADATA_KEYS = ("embedding_model", "dimension", "chunk_size", "chunk_overlap", "created_at")


@dataclass
class IndexStats:
    """Statistics tracked during an indexing run."""

    files_discovered: int = 0
    files_indexed: int = 0
    files_skipped: int = 0
    chunks_indexed: int = 0
    chunks_skipped: int = 0
    first_id: Optional[int] = None
    skipped: list[str] = field(default_factory=list)
    start_time: datetime | None = None
    end_time: datetime | None = None

    @property
    def elapsed(self) -> str:
        if not self.start_time:
            return "00:00"
        end = self.end_time or datetime.now()
        delta = end - self.start_time
        minutes, seconds = divmod(int(delta.total_seconds()), 60)
        return f"{minutes:02d}:{seconds:02d}"

    def skip(self, reason: str) -> None:
        self.skipped.append(reason)
        logger.warning(f"Skipped {reason}")


@dataclass
class QueryResult:
    plan: Plan
    hits: list[Hit]
    candidates: int = 0
    evaluated: int = 0


@dataclass
class ConsistencyReport:
    """Comparison of the vector index and the metadata store."""

    index_size: int
    store_count: int
    max_id: Optional[int]
    orphaned_rows: int

    @property
    def missing_rows(self) -> int:
        """Vectors without a metadata row."""
        return max(0, self.index_size - (self.store_count - self.orphaned_rows))

    @property
    def consistent(self) -> bool:
        return self.orphaned_rows == 0 and self.missing_rows == 0


def read_context(
    file: str | Path,
    byte_start: int,
    byte_end: int,
    extra_lines: int = 5,
    max_bytes: int = 1200,
) -> str:
    """Read a byte range widened by `extra_lines` whole lines on each side.

    Raises:
        OSError: If the file cannot be read
    """
    data = Path(file).read_bytes()
    offsets = line_offsets(data)
    n_lines = len(offsets) - 1
    if n_lines == 0:
        return ""
    byte_start = min(byte_start, len(data))
    byte_end = min(max(byte_end, byte_start), len(data))

    first = min(bisect_right(offsets, byte_start) - 1, n_lines - 1)
    last = min(bisect_right(offsets, max(byte_end - 1, byte_start)) - 1, n_lines - 1)
    start = offsets[max(0, first - extra_lines)]
    end = offsets[min(n_lines, last + 1 + extra_lines)]
    return truncate_bytes(data[start:end].decode("utf-8", errors="replace"), max_bytes)


def consistency_report(store: MetadataStore, index_size: int) -> ConsistencyReport:
    """Compare an index size with the ids present in the store."""
    return ConsistencyReport(
        index_size=index_size,
        store_count=store.count(),
        max_id=store.max_id(),
        orphaned_rows=store.count(min_id=index_size),
    )


def inspect_index(settings: Settings) -> tuple[dict[str, str], list[str], ConsistencyReport]:
    """Read index metadata, indexed files and consistency without loading a model.

    The index is opened with the dimension recorded by the last indexing
    run; an index that was never written counts as empty.
    """
    with MetadataStore(settings.sqlite_path) as store:
        metadata = {}
        for key in METADATA_KEYS:
            value = store.get_metadata(key)
            if value:
                metadata[key] = value

        index_size = 0
        if "dimension" in metadata:
            index = open_index(
                settings.index_backend,
                settings.index_path,
                int(metadata["dimension"]),
                **settings.index_params(),
            )
            index_size = index.size()
        return metadata, store.files(), consistency_report(store, index_size)


class Engine:
    """Hybrid retrieval over one index/store pair.

    Single writer: do not run `index` concurrently with anything else on
    the same files. Concurrent `query` calls are fine once indexing is done.
    """

    def __init__(
        self,
        settings: Settings,
        embedder: EmbeddingProvider,
        generator: TextGenerator | None = None,
        store: MetadataStore | None = None,
        index: VectorIndex | None = None,
    ):
        self.settings = settings
        self.embedder = embedder
        self.planner = QueryPlanner(generator) if generator is not None else None
        self._store = store
        self._index = index

    @classmethod
    def from_settings(cls, settings: Settings, with_planner: bool = True) -> "Engine":
        """Build an engine with the default model-backed collaborators."""
        from docseek.embedders import SentenceTransformerEmbedder

        generator = None
        if with_planner:
            from docseek.generators import GeneratorConfig, TransformersGenerator

            generator = TransformersGenerator(
                GeneratorConfig(
                    model=settings.instruct_model,
                    max_new_tokens=settings.max_new_tokens,
                )
            )
        return cls(settings, SentenceTransformerEmbedder(settings.embed_model), generator)

    @property
    def store(self) -> MetadataStore:
        if self._store is None:
            self._store = MetadataStore(self.settings.sqlite_path)
        return self._store

    @property
    def vector_index(self) -> VectorIndex:
        if self._index is None:
            self._index = open_index(
                self.settings.index_backend,
                self.settings.index_path,
                self.check_dimension(),
                **self.settings.index_params(),
            )
        return self._index

    def close(self) -> None:
        if self._store is not None:
            self._store.close()
            self._store = None

    def __enter__(self) -> "Engine":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def check_dimension(self) -> int:
        """Return the embedding dimension after checking it against stored state.

        Raises:
            DimensionMismatch: If the embedder disagrees with the index or
                with the dimension recorded by a previous run
        """
        dim = self.embedder.dimension
        stored = self.store.get_metadata("dimension")
        if stored is not None and int(stored) != dim:
            raise DimensionMismatch(int(stored), dim, where="embedding model")
        if self._index is not None and self._index.dim != dim:
            raise DimensionMismatch(self._index.dim, dim, where="embedding model")
        return dim

    def _record_metadata(self, chunker: LineWindowChunker) -> None:
        store = self.store
        store.set_metadata("embedding_model", self.embedder.model_name)
        store.set_metadata("dimension", str(self.embedder.dimension))
        store.set_metadata("chunk_size", str(chunker.window_size))
        store.set_metadata("chunk_overlap", str(chunker.overlap))
        if store.get_metadata("created_at") is None:
            store.set_metadata("created_at", datetime.now().isoformat())

    def _preflight(self) -> None:
        """Fail before any write if the embedding service is unusable."""
        vector = self.embedder.embed_one(PROBE_TEXT)
        if len(vector) != self.vector_index.dim:
            raise DimensionMismatch(self.vector_index.dim, len(vector), where="embedding model")

    def _recover(self, index_size: int) -> None:
        """Drop the traces of an indexing run that stopped part way.

        Rows at or past `index_size` have no saved vector, and the rows of
        the file that was being indexed cover only part of it. Both are
        deleted so that the affected files are indexed again.
        """
        orphaned = self.store.delete_from(index_size)
        if orphaned:
            logger.warning(f"Dropped {orphaned} chunk row(s) without a saved vector (id >= {index_size})")
        pending = self.store.get_metadata(PENDING_FILE_KEY)
        if pending is not None:
            removed = self.store.delete_file(pending)
            if removed:
                logger.warning(f"Re-indexing {pending}: previous run stopped inside it ({removed} row(s) dropped)")
            self.store.delete_metadata(PENDING_FILE_KEY)

    def reset(self) -> None:
        """Delete every chunk row and vector. Required before re-indexing from scratch."""
        logger.info("Resetting index and metadata store")
        self.store.clear()
        if self._index is not None:
            self._index.reset()
            return
        path = Path(self.settings.index_path)
        if path.exists():
            path.unlink()

    def append_chunk(self, vector: Sequence[float], chunk: Chunk) -> Chunk:
        """Add a vector and store its chunk under the id the index assigned."""
        chunk_id = self.vector_index.add(vector)
        stored = chunk.with_id(chunk_id)
        self.store.upsert(stored)
        return stored

    def index(
        self,
        root: str | Path,
        chunk_size: int | None = None,
        chunk_overlap: int | None = None,
        reset: bool = False,
    ) -> IndexStats:
        """Chunk, embed and index every text file under `root`.

        `root` may be a folder or a single file. Files that already have
        chunks in the store are skipped; pass `reset=True` to rebuild. Rows
        left behind by a run that stopped part way are dropped first, and
        the index is saved even when the run fails.

        Raises:
            ConfigurationError: Bad chunk settings, unusable source or a
                dimension mismatch
            EmbeddingError: If the embedding service fails on the probe or
                on the very first chunk
            OSError: If a single named file cannot be read
        """
        chunker = LineWindowChunker(
            chunk_size if chunk_size is not None else self.settings.chunk_size,
            chunk_overlap if chunk_overlap is not None else self.settings.chunk_overlap,
        )
        source = Path(root)
        ingester = get_ingester(source)
        if ingester is None:
            raise ConfigurationError(f"Cannot process: {root} (expected a folder or file)")

        if reset:
            self.reset()
        self.check_dimension()
        self._preflight()
        self._record_metadata(chunker)

        index = self.vector_index
        self._recover(index.size())
        save_every = self.settings.save_every
        stats = IndexStats(start_time=datetime.now())
        logger.info(f"Indexing {source} (starting at id {index.size()})")

        try:
            for doc in ingester.ingest(source):
                stats.files_discovered += 1
                if self.store.has_file(doc.path):
                    stats.files_skipped += 1
                    stats.skip(f"{doc.path}: already indexed")
                    continue

                try:
                    pieces = chunker.chunk_file(doc.path)
                except OSError as e:
                    if ingester.source_type == "file":
                        raise
                    stats.files_skipped += 1
                    stats.skip(f"{doc.path}: {e}")
                    continue

                self.store.set_metadata(PENDING_FILE_KEY, doc.path)
                for piece in pieces:
                    try:
                        vector = self.embedder.embed_one(piece.text)
                    except EmbeddingError as e:
                        if stats.chunks_indexed == 0 and stats.chunks_skipped == 0:
                            raise
                        stats.chunks_skipped += 1
                        stats.skip(f"{doc.path}:{piece.chunk.ls}-{piece.chunk.le}: {e}")
                        continue

                    stored = self.append_chunk(vector, piece.chunk)
                    if stats.first_id is None:
                        stats.first_id = stored.id
                    stats.chunks_indexed += 1
                    if stats.chunks_indexed % save_every == 0:
                        index.save()
                        logger.info(f"Indexed up to id {stored.id}")
                self.store.delete_metadata(PENDING_FILE_KEY)

                stats.files_indexed += 1
                logger.info(f"  {doc.path} ({len(pieces)} chunks)")
        finally:
            index.save()

        stats.end_time = datetime.now()
        logger.info(
            f"Indexed {stats.chunks_indexed} chunks from {stats.files_indexed} files "
            f"in {stats.elapsed} ({len(stats.skipped)} skipped)"
        )
        return stats

    def plan(self, text: str) -> Plan:
        if self.planner is None:
            return Plan.empty()
        return self.planner.compile(text)

    def expand(self, hit: Hit) -> Hit:
        """Replace a hit's snippet with its surrounding context, when readable."""
        try:
            chunk = self.store.get(hit.id)
            context = read_context(
                chunk.file,
                chunk.byte_start,
                chunk.byte_end,
                extra_lines=self.settings.context_lines,
                max_bytes=self.settings.context_max_bytes,
            )
        except (NotFound, OSError) as e:
            logger.debug(f"Keeping short snippet for {hit.id}: {e}")
            return hit
        return Hit(id=hit.id, file=hit.file, ls=hit.ls, le=hit.le, snippet=context)

    def query(
        self,
        text: str,
        k: int | None = None,
        max_hits: int | None = None,
        expand_context: bool = True,
    ) -> QueryResult:
        """Plan, recall and filter.

        Returns:
            The plan used and the accepted hits, nearest first
        """
        k = k if k is not None else self.settings.k
        max_hits = max_hits if max_hits is not None else self.settings.max_hits

        plan = self.plan(text)
        try:
            candidate_filter = CandidateFilter(plan)
        except PlanError as e:
            logger.warning(f"Dropping regex constraint from plan: {e}")
            plan = Plan(filters=plan.filters, time_from=plan.time_from, time_to=plan.time_to)
            candidate_filter = CandidateFilter(plan)
        vector = self.embedder.embed_one(text)
        candidates = self.vector_index.search(vector, k)

        hits = candidate_filter.apply(candidates, self.store, max_hits)
        if expand_context and self.settings.context_lines > 0:
            hits = [self.expand(hit) for hit in hits]

        logger.debug(
            f"Query {text!r}: {len(candidates)} candidates, "
            f"{candidate_filter.evaluated} evaluated, {len(hits)} hits"
        )
        return QueryResult(
            plan=plan,
            hits=hits,
            candidates=len(candidates),
            evaluated=candidate_filter.evaluated,
        )

    def check_consistency(self) -> ConsistencyReport:
        """Compare index size with the ids present in the store."""
        return consistency_report(self.store, self.vector_index.size())
