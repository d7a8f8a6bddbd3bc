"""Natural-language query planning."""

from docseek.planning.planner import (
    JsonObjectScanner,
    PlanSchema,
    QueryPlanner,
    build_prompt,
    extract_first_json_object,
    parse_plan,
)

__all__ = [
    "JsonObjectScanner",
    "PlanSchema",
    "QueryPlanner",
    "build_prompt",
    "extract_first_json_object",
    "parse_plan",
]
