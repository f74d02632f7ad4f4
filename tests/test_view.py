from __future__ import annotations

import unittest

from fake_json_tree import fake_loader
from pygments.token import Token

from bellows.engine import Bellows, Document
from bellows.syntax import JsonSyntaxProvider
from bellows.values import TAG_COUNT, TAG_PROPERTY
from bellows.view import format_chunks, render_lines, token_type_for

MULTI = (
    "{\n"
    '  "service": {\n'
    '    "name": "api-gateway",\n'
    '    "meta": {\n'
    '      "flags": {\n'
    '        "priority": 2\n'
    "      }\n"
    "    },\n"
    '    "ports": [80, 443, 8080]\n'
    "  },\n"
    '  "items": [\n'
    '    {"id": 1, "tags": ["a"]},\n'
    '    {"id": 2, "tags": []}\n'
    "  ]\n"
    "}\n"
)


class RenderLinesTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = Bellows(provider=JsonSyntaxProvider(loader=fake_loader))
        self.doc = Document(doc_id="view", text=MULTI)

    def test_open_document_gets_annotations(self) -> None:
        self.engine.pin_path(self.doc, ".service.name")
        lines = render_lines(self.engine, self.doc, color=False)
        self.assertEqual(len(lines), 15)
        self.assertEqual(lines[2], '    "name": "api-gateway", pinned')
        self.assertEqual(lines[8], '    "ports": [80, 443, 8080] [3]')
        self.assertEqual(lines[14], "}")

    def test_closed_fold_is_replaced_by_summary(self) -> None:
        self.engine.pin_path(self.doc, ".service.name")
        self.engine.fold_closest(self.doc, 1)
        lines = render_lines(self.engine, self.doc, color=False)
        self.assertEqual(
            lines,
            [
                "{",
                '  "service": { name: "api-gateway", .. } lines: 9',
                '  "items": [',
                '    {"id": 1, "tags": ["a"]},',
                '    {"id": 2, "tags": []}',
                "  ]",
                "}",
            ],
        )

    def test_nested_closed_folds_show_only_outermost(self) -> None:
        self.engine.fold_all(self.doc)
        self.assertEqual(render_lines(self.engine, self.doc, color=False), ["{ .. } lines: 15"])

    def test_fold_without_opener_falls_back_to_line_text(self) -> None:
        self.doc.folds.close(5, 6)
        lines = render_lines(self.engine, self.doc, color=False)
        self.assertEqual(lines[5], '        "priority": 2 ..')
        self.assertEqual(lines[6], "    },")

    def test_color_output_uses_escape_sequences(self) -> None:
        lines = render_lines(self.engine, self.doc, color=True)
        self.assertIn("\x1b[", lines[1])
        self.assertIn("service", lines[1])


class FormatChunksTests(unittest.TestCase):
    def test_plain_join_without_color(self) -> None:
        chunks = [('"a": ', None), ("{", None), (" [3]", TAG_COUNT)]
        self.assertEqual(format_chunks(chunks, color=False), '"a": { [3]')

    def test_unknown_style_falls_back(self) -> None:
        text = format_chunks([("x: ", TAG_PROPERTY)], color=True, style="no-such-style")
        self.assertIn("x: ", text)

    def test_token_type_for(self) -> None:
        self.assertIs(token_type_for("Token.Name.Tag"), Token.Name.Tag)
        self.assertIs(token_type_for("Token"), Token)


if __name__ == "__main__":
    unittest.main()
