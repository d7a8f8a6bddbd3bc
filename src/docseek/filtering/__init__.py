"""Plan-driven filtering of semantic candidates."""

from docseek.filtering.candidate_filter import (
    CandidateFilter,
    apply_filters,
    read_chunk_text,
    truncate_bytes,
)

__all__ = ["CandidateFilter", "apply_filters", "read_chunk_text", "truncate_bytes"]
