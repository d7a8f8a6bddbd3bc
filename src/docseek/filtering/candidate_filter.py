"""Keyword and regex narrowing of semantic candidates."""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional, Protocol

from docseek.errors import NotFound, PlanError
from docseek.models import Chunk, Hit, Plan

logger = logging.getLogger(__name__)

MAX_READ_BYTES = 2000
SNIPPET_BYTES = 300


class ChunkLookup(Protocol):
    def get(self, chunk_id: int) -> Chunk: ...


def read_chunk_text(chunk: Chunk, max_bytes: int = MAX_READ_BYTES) -> str:
    """Re-read a chunk's byte range from disk, bounded to `max_bytes`.

    Raises:
        OSError: If the file cannot be read
    """
    length = min(max(0, chunk.byte_end - chunk.byte_start), max_bytes)
    with open(chunk.file, "rb") as f:
        f.seek(chunk.byte_start)
        data = f.read(length)
    return data.decode("utf-8", errors="replace")


def truncate_bytes(text: str, max_bytes: int) -> str:
    """Cut text to at most `max_bytes` UTF-8 bytes without splitting a character."""
    encoded = text.encode("utf-8")
    if len(encoded) <= max_bytes:
        return text
    return encoded[:max_bytes].decode("utf-8", errors="ignore")


class CandidateFilter:
    """Applies a plan to candidate ids in nearest-first order.

    - Keyword filters: every term must occur, case-insensitively, in
      `file + " " + text`
    - Regex filters: at least one pattern must match somewhere in the text
    - Candidates are never reordered; evaluation stops at `max_hits`
    """

    def __init__(
        self,
        plan: Plan,
        max_read_bytes: int = MAX_READ_BYTES,
        snippet_bytes: int = SNIPPET_BYTES,
    ):
        self.plan = plan
        self.max_read_bytes = max_read_bytes
        self.snippet_bytes = snippet_bytes
        self.terms = [f.lower() for f in plan.filters if f]
        self.patterns = self._compile(plan.regex)
        self.evaluated = 0

    @staticmethod
    def _compile(patterns: Iterable[str]) -> list[re.Pattern]:
        compiled = []
        for pattern in patterns:
            try:
                compiled.append(re.compile(pattern))
            except re.error as e:
                raise PlanError(f"invalid regex in plan {pattern!r}: {e}") from e
        return compiled

    def accepts(self, file: str, text: str) -> bool:
        """Check one chunk's path and text against the plan."""
        if self.terms:
            haystack = f"{file} {text}".lower()
            if not all(term in haystack for term in self.terms):
                return False
        if self.patterns:
            if not any(p.search(text) for p in self.patterns):
                return False
        return True

    def _load(self, chunk_id: int, store: ChunkLookup) -> Optional[tuple[Chunk, str]]:
        try:
            chunk = store.get(chunk_id)
        except NotFound:
            logger.debug(f"Skipping candidate {chunk_id}: no metadata")
            return None
        try:
            text = read_chunk_text(chunk, self.max_read_bytes)
        except OSError as e:
            logger.warning(f"Skipping candidate {chunk_id}: cannot read {chunk.file}: {e}")
            return None
        return chunk, text

    def apply(self, candidate_ids: Iterable[int], store: ChunkLookup, max_hits: int) -> list[Hit]:
        """Filter candidates into at most `max_hits` hits, preserving order."""
        hits: list[Hit] = []
        self.evaluated = 0
        if max_hits <= 0:
            return hits

        for chunk_id in candidate_ids:
            self.evaluated += 1
            loaded = self._load(chunk_id, store)
            if loaded is None:
                continue
            chunk, text = loaded
            if not self.accepts(chunk.file, text):
                logger.debug(f"Candidate {chunk_id} rejected by plan")
                continue

            hits.append(
                Hit(
                    id=chunk.id,
                    file=chunk.file,
                    ls=chunk.ls,
                    le=chunk.le,
                    snippet=truncate_bytes(text, self.snippet_bytes),
                )
            )
            if len(hits) >= max_hits:
                break
        return hits


def apply_filters(
    candidate_ids: Iterable[int],
    plan: Plan,
    store: ChunkLookup,
    max_hits: int,
) -> list[Hit]:
    """Functional wrapper around `CandidateFilter`."""
    return CandidateFilter(plan).apply(candidate_ids, store, max_hits)
