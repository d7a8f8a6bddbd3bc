"""Compile natural-language queries into filter plans."""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError

from docseek.models import Plan
from docseek.protocols import TextGenerator

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTIONS = (
    "Convert the user's natural-language search into a conservative JSON plan.\n"
    "Return ONLY a single JSON object with keys:\n"
    '{"filters": ["..."], "regex": ["..."], "time_from": "", "time_to": ""}\n'
    "- Keep regex short and safe. No catastrophic patterns.\n"
    '- Use filters as plain keywords that must appear in matching text or file paths.\n'
    "- If no times are specified, leave time fields empty strings.\n"
)


def build_prompt(query: str) -> str:
    """Build the single instruction-plus-query prompt sent to the generator."""
    return f"{SYSTEM_INSTRUCTIONS}\nUser:\n{query}\nJSON:"


class JsonObjectScanner:
    """Find the first balanced top-level `{...}` in incrementally fed text.

    Only braces are counted; quoting is not interpreted.
    """

    def __init__(self) -> None:
        self._buffer: list[str] = []
        self._depth = 0
        self._started = False
        self.result: Optional[str] = None

    def feed(self, piece: str) -> Optional[str]:
        """Consume more text; return the object once it is complete."""
        if self.result is not None:
            return self.result
        for ch in piece:
            if not self._started:
                if ch != "{":
                    continue
                self._started = True
            self._buffer.append(ch)
            if ch == "{":
                self._depth += 1
            elif ch == "}":
                self._depth -= 1
                if self._depth == 0:
                    self.result = "".join(self._buffer)
                    return self.result
        return None


def extract_first_json_object(text: str) -> Optional[str]:
    """Return the first balanced `{...}` in `text`, or None."""
    return JsonObjectScanner().feed(text)


class PlanSchema(BaseModel):
    """Wire shape of a plan as produced by the generator."""

    model_config = ConfigDict(extra="ignore")

    filters: list[StrictStr] = Field(default_factory=list)
    regex: list[StrictStr] = Field(default_factory=list)
    time_from: Optional[StrictStr] = None
    time_to: Optional[StrictStr] = None

    def to_plan(self) -> Plan:
        return Plan(
            filters=list(self.filters),
            regex=list(self.regex),
            time_from=self.time_from or None,
            time_to=self.time_to or None,
        )


def parse_plan(raw: Optional[str]) -> Plan:
    """Parse a captured JSON object into a plan.

    Anything that is not a valid plan object yields an empty plan.
    """
    if not raw or not raw.strip():
        return Plan.empty()
    try:
        return PlanSchema.model_validate_json(raw).to_plan()
    except ValidationError as e:
        logger.warning(f"Planner output rejected, using empty plan: {e.error_count()} error(s)")
        logger.debug(f"Rejected planner output: {raw!r}")
        return Plan.empty()


class QueryPlanner:
    """Turns a query into a `Plan` using a text generator.

    Planning never fails: generator errors, output without a JSON object,
    malformed JSON and wrong field types all produce `Plan.empty()`, so the
    query falls back to pure semantic recall.
    """

    def __init__(self, generator: TextGenerator, max_output_chars: int = 4096):
        self.generator = generator
        self.max_output_chars = max_output_chars

    def capture(self, query: str) -> Optional[str]:
        """Run the generator until the first complete JSON object appears."""
        scanner = JsonObjectScanner()
        seen = 0
        stream = self.generator.generate(build_prompt(query))
        try:
            for piece in stream:
                if scanner.feed(piece) is not None:
                    break
                seen += len(piece)
                if seen >= self.max_output_chars:
                    logger.debug("Planner output budget exhausted")
                    break
        finally:
            close = getattr(stream, "close", None)
            if close is not None:
                close()
        return scanner.result

    def compile(self, query: str) -> Plan:
        """Compile a natural-language query into a plan."""
        try:
            raw = self.capture(query)
        except Exception as e:
            logger.warning(f"Planner generation failed, using empty plan: {e}")
            return Plan.empty()

        if raw is None:
            logger.info("Planner produced no JSON object, using empty plan")
            return Plan.empty()

        plan = parse_plan(raw)
        logger.debug(f"Compiled plan: {plan}")
        return plan
