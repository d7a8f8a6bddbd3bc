from __future__ import annotations

import unittest

from docseek.errors import GenerationError
from docseek.models import Plan
from docseek.planning import (
    JsonObjectScanner,
    QueryPlanner,
    build_prompt,
    extract_first_json_object,
    parse_plan,
)

from helpers import ScriptedGenerator


class JsonObjectScannerTests(unittest.TestCase):
    def test_object_split_across_pieces(self) -> None:
        scanner = JsonObjectScanner()
        self.assertIsNone(scanner.feed('Sure: {"a":'))
        self.assertIsNone(scanner.feed(' {"b": 1}'))
        self.assertEqual(scanner.feed("} and more {"), '{"a": {"b": 1}}')
        self.assertEqual(scanner.result, '{"a": {"b": 1}}')

    def test_first_object_wins(self) -> None:
        self.assertEqual(extract_first_json_object('x {"a":1} {"b":2}'), '{"a":1}')

    def test_no_object(self) -> None:
        self.assertIsNone(extract_first_json_object("nothing to see } here"))
        self.assertIsNone(extract_first_json_object('{"unterminated": ['))


class ParsePlanTests(unittest.TestCase):
    def test_valid_plan(self) -> None:
        plan = parse_plan(
            '{"filters": ["error"], "regex": ["time(out)?"], "time_from": "", "time_to": "2024-01-01"}'
        )
        self.assertEqual(plan.filters, ["error"])
        self.assertEqual(plan.regex, ["time(out)?"])
        self.assertIsNone(plan.time_from)
        self.assertEqual(plan.time_to, "2024-01-01")

    def test_missing_and_unknown_keys(self) -> None:
        plan = parse_plan('{"filters": ["a"], "confidence": 0.9}')
        self.assertEqual(plan, Plan(filters=["a"]))

    def test_invalid_input_gives_empty_plan(self) -> None:
        for raw in (
            None,
            "",
            "{not json}",
            '{"filters": [}',
            '{"filters": "error"}',
            '{"filters": [1, 2]}',
            '{"regex": [null]}',
            '{"time_from": 2024}',
            "[1, 2]",
        ):
            with self.subTest(raw=raw):
                self.assertTrue(parse_plan(raw).is_empty)


class QueryPlannerTests(unittest.TestCase):
    def test_compiles_plan_from_chatty_output(self) -> None:
        gen = ScriptedGenerator('Here you go:\n{"filters": ["error"], "regex": []}\nThanks!')
        plan = QueryPlanner(gen).compile("show me errors")
        self.assertEqual(plan, Plan(filters=["error"]))

    def test_prompt_carries_instructions_and_query(self) -> None:
        gen = ScriptedGenerator("{}")
        QueryPlanner(gen).compile("find timeouts")
        self.assertEqual(gen.prompts, [build_prompt("find timeouts")])
        self.assertIn('"filters"', gen.prompts[0])
        self.assertTrue(gen.prompts[0].endswith("\nUser:\nfind timeouts\nJSON:"))

    def test_stops_generating_after_first_object(self) -> None:
        obj = '{"filters": ["a"]}'
        gen = ScriptedGenerator(obj + " " + "x" * 300, piece_size=3)
        plan = QueryPlanner(gen).compile("q")
        self.assertEqual(plan.filters, ["a"])
        self.assertEqual(gen.pieces_yielded, (len(obj) + 2) // 3)

    def test_output_budget_bounds_generation(self) -> None:
        gen = ScriptedGenerator("x" * 100, piece_size=3)
        plan = QueryPlanner(gen, max_output_chars=10).compile("q")
        self.assertTrue(plan.is_empty)
        self.assertEqual(gen.pieces_yielded, 4)

    def test_fallbacks_give_empty_plan(self) -> None:
        cases = {
            "no object": ScriptedGenerator("I cannot help with that."),
            "unbalanced": ScriptedGenerator('{"filters": ["a"'),
            "malformed": ScriptedGenerator("{filters: [a]}"),
            "wrong types": ScriptedGenerator('{"filters": "a", "regex": 3}'),
            "generator error": ScriptedGenerator("", error=GenerationError("model crashed")),
        }
        for name, gen in cases.items():
            with self.subTest(case=name):
                self.assertEqual(QueryPlanner(gen).compile("q"), Plan.empty())


if __name__ == "__main__":
    unittest.main()
