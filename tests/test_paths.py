"""Path addressing and in-subtree value resolution tests."""

from __future__ import annotations

import unittest

from fake_json_tree import build_tree, first_of_type, value_of

from bellows.errors import ArrayBoundaryCrossed, KeyNotFound, MalformedNode, NotAnObject
from bellows.paths import ARRAY, JsonPath, key_text, path_from_pair, path_to_node, resolve_value
from bellows.syntax import node_text

DOC = '{"a":{"b":1,"c":[1,2,3]}}'
NESTED = '{"data":[{"meta":{"flags":{"priority":2}}}]}'


class JsonPathTests(unittest.TestCase):
    def test_canonical_strings_round_trip(self) -> None:
        for text in ("", ".a", ".a.b", ".data.[].meta.flags.priority", ".[].[]"):
            with self.subTest(text=text):
                self.assertEqual(str(JsonPath.parse(text)), text)

    def test_parse_of_serialized_path_is_identity(self) -> None:
        path = JsonPath(("items", ARRAY, "tags", ARRAY))
        self.assertEqual(JsonPath.parse(str(path)), path)
        self.assertIs(JsonPath.parse(".items.[]").segments[1], ARRAY)

    def test_parse_rejects_missing_leading_dot(self) -> None:
        with self.assertRaises(ValueError):
            JsonPath.parse("a.b")

    def test_prefix_must_be_strictly_shorter(self) -> None:
        a = JsonPath.parse(".a")
        ab = JsonPath.parse(".a.b")
        self.assertTrue(a.is_prefix_of(ab))
        self.assertFalse(ab.is_prefix_of(ab))
        self.assertFalse(ab.is_prefix_of(a))
        self.assertFalse(JsonPath.parse(".x").is_prefix_of(ab))
        self.assertTrue(JsonPath().is_prefix_of(a))

    def test_relative_to_and_crosses_array(self) -> None:
        pin = JsonPath.parse(".a.c.[].x")
        self.assertEqual(pin.relative_to(JsonPath.parse(".a")), ("c", ARRAY, "x"))
        self.assertTrue(pin.crosses_array)
        self.assertFalse(JsonPath.parse(".a.b").crosses_array)
        with self.assertRaises(ValueError):
            pin.relative_to(JsonPath.parse(".b"))


class PathToNodeTests(unittest.TestCase):
    def test_root_object_has_empty_path(self) -> None:
        root = build_tree(DOC)
        self.assertEqual(path_to_node(root.named_children[0], DOC.encode()), JsonPath())

    def test_object_value_of_pair_is_addressed_by_its_key(self) -> None:
        root = build_tree(DOC)
        self.assertEqual(str(path_to_node(value_of(root, DOC, "a"), DOC.encode())), ".a")

    def test_array_value_of_pair_does_not_add_array_marker(self) -> None:
        root = build_tree(DOC)
        self.assertEqual(str(path_to_node(value_of(root, DOC, "c"), DOC.encode())), ".a.c")

    def test_array_element_gets_array_marker(self) -> None:
        root = build_tree(DOC)
        number = value_of(root, DOC, "c").named_children[1]
        self.assertEqual(str(path_to_node(number, DOC.encode())), ".a.c.[]")

    def test_path_from_pair_marks_array_crossings(self) -> None:
        root = build_tree(NESTED)
        priority = first_of_type(root, "pair", 3)
        self.assertEqual(str(path_from_pair(priority, NESTED.encode())), ".data.[].meta.flags.priority")

    def test_nested_arrays_stack_markers(self) -> None:
        source = '{"grid":[[{"v":1}]]}'
        root = build_tree(source)
        pair = first_of_type(root, "pair", 1)
        self.assertEqual(str(path_from_pair(pair, source.encode())), ".grid.[].[].v")

    def test_missing_key_on_ancestor_pair_is_malformed(self) -> None:
        root = build_tree(DOC)
        array = value_of(root, DOC, "c")
        first_of_type(root, "pair", 0).drop_field("key")
        with self.assertRaises(MalformedNode):
            path_to_node(array, DOC.encode())

    def test_key_text_strips_quotes(self) -> None:
        root = build_tree(DOC)
        key = first_of_type(root, "pair", 0).child_by_field_name("key")
        self.assertEqual(key_text(key, DOC.encode()), "a")


class ResolveValueTests(unittest.TestCase):
    def setUp(self) -> None:
        self.root = build_tree(DOC)
        self.source = DOC.encode()
        self.region = value_of(self.root, DOC, "a")

    def test_resolves_direct_key(self) -> None:
        value = resolve_value(self.region, ("b",), self.source)
        self.assertEqual(node_text(self.source, value), "1")

    def test_resolves_nested_keys(self) -> None:
        root = build_tree(NESTED)
        meta = value_of(root, NESTED, "meta")
        value = resolve_value(meta, ("flags", "priority"), NESTED.encode())
        self.assertEqual(value.type, "number")

    def test_zero_segments_returns_node_itself(self) -> None:
        self.assertIs(resolve_value(self.region, (), self.source), self.region)

    def test_unknown_key(self) -> None:
        with self.assertRaises(KeyNotFound):
            resolve_value(self.region, ("zzz",), self.source)

    def test_descending_into_scalar(self) -> None:
        with self.assertRaises(NotAnObject):
            resolve_value(self.region, ("b", "deeper"), self.source)

    def test_never_descends_through_arrays(self) -> None:
        with self.assertRaises(ArrayBoundaryCrossed):
            resolve_value(self.region, ("c", ARRAY, "x"), self.source)

    def test_zero_width_value_is_malformed(self) -> None:
        value = value_of(self.root, DOC, "b")
        value.end_byte = value.start_byte
        with self.assertRaises(MalformedNode):
            resolve_value(self.region, ("b",), self.source)

    def test_pair_without_value_is_malformed(self) -> None:
        first_of_type(self.root, "pair", 1).drop_field("value")
        with self.assertRaises(MalformedNode):
            resolve_value(self.region, ("b",), self.source)


if __name__ == "__main__":
    unittest.main()
