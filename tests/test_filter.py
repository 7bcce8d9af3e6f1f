from __future__ import annotations

import io
import json
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from pandoc_svg.attributes import to_html5_keyvals
from pandoc_svg.cli import run_filter
from pandoc_svg.config import FilterConfig
from pandoc_svg.context import PipelineContext
from pandoc_svg.errors import PipelineError
from pandoc_svg.filter import caption_to_html, filter_element, is_svg, load_svg
from pandoc_svg.pandoc_ast import FigureElement, ImageElement, decode
from pandoc_svg.svgdom import local_name, parse_svg

FIXTURE = TESTS_DIR / "fixtures" / "inkscape-math.svg"


def offline_context() -> PipelineContext:
    config = FilterConfig(svgo_command="", pandoc_command="")
    return PipelineContext.create(config, stream=io.StringIO())


def image_content(
    identifier: str = "",
    classes=("class1", "class2"),
    keyvals=(),
    fname: str = str(FIXTURE),
    fig: bool = False,
) -> list:
    return [
        [identifier, list(classes), [list(kv) for kv in keyvals]],
        [{"t": "Str", "c": "Caption"}],
        [fname, "fig:" if fig else ""],
    ]


def figure_content(**kwargs) -> list:
    return [{"t": "Image", "c": image_content(fig=True, **kwargs)}]


def raw_root(result: dict):
    return parse_svg(result["c"][1]).getroot()


class AstTests(unittest.TestCase):
    def test_identifies_figure(self) -> None:
        self.assertIsInstance(decode("Para", figure_content()), FigureElement)

    def test_image_is_not_a_figure(self) -> None:
        self.assertIsInstance(decode("Image", image_content()), ImageElement)
        self.assertIsNone(decode("Para", [{"t": "Image", "c": image_content()}]))
        self.assertIsNone(decode("Para", figure_content() + [{"t": "Space"}]))
        self.assertIsNone(decode("Str", "Caption"))

    def test_is_svg(self) -> None:
        self.assertTrue(is_svg("./path/to/image.svg"))
        self.assertTrue(is_svg("IMAGE.SVG"))
        self.assertFalse(is_svg("./path/to/image.jpg"))
        self.assertFalse(is_svg("image.svg.png"))

    def test_to_html5_keyvals(self) -> None:
        self.assertEqual(to_html5_keyvals([("key", "val")]), [("data-key", "val")])
        self.assertEqual(to_html5_keyvals([("style", "val")]), [("style", "val")])
        self.assertEqual(to_html5_keyvals([("aria-label", "x")]), [("aria-label", "x")])


class LoadSvgTests(unittest.TestCase):
    def test_loads_existing_svg(self) -> None:
        root = load_svg(str(FIXTURE)).getroot()
        self.assertEqual(local_name(root.tag), "svg")

    def test_missing_svg(self) -> None:
        with self.assertRaises(PipelineError) as caught:
            load_svg("./non-existant.svg")
        self.assertEqual(caught.exception.code, "E_MISSING_FILE")
        self.assertEqual(str(caught.exception), "File ./non-existant.svg could not be found!")

    def test_malformed_svg(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "broken.svg"
            path.write_text("<svg><g></svg>", encoding="utf-8")
            with self.assertRaises(PipelineError) as caught:
                load_svg(str(path))
        self.assertEqual(caught.exception.code, "E_PARSE_SVG")


class FilterElementTests(unittest.TestCase):
    def setUp(self) -> None:
        self.context = offline_context()
        self._tmpdir = tempfile.TemporaryDirectory()
        self.tmpdir = Path(self._tmpdir.name)

    def tearDown(self) -> None:
        self._tmpdir.cleanup()

    def write_svg(self, content: str) -> str:
        path = self.tmpdir / "image.svg"
        path.write_text(content, encoding="utf-8")
        return str(path)

    def run_filter(self, key: str = "Image", value=None, fmt: str = "html"):
        if value is None:
            value = image_content()
        return filter_element(key, value, fmt, self.context)

    def warnings(self) -> str:
        return self.context.diagnostics.stream.getvalue()

    def test_unsupported_output_format(self) -> None:
        self.assertIsNone(self.run_filter(fmt="docx"))
        self.assertIsNone(self.run_filter(fmt="docx"))
        self.assertEqual(self.warnings().count("Format 'docx' is not supported"), 1)

    def test_other_elements_are_kept(self) -> None:
        self.assertIsNone(self.run_filter(key="Str", value="Caption"))

    def test_non_svg_image_is_kept(self) -> None:
        self.assertIsNone(self.run_filter(value=image_content(fname="not-an-svg.png")))

    def test_ignored_image(self) -> None:
        result = self.run_filter(value=image_content(classes=["ignore"]))
        self.assertEqual(result, {"t": "Image", "c": image_content(classes=[])})

    def test_ignored_figure(self) -> None:
        result = self.run_filter(key="Para", value=figure_content(classes=["ignore"]))
        self.assertEqual(result, {"t": "Para", "c": figure_content(classes=[])})
        self.assertIsNone(filter_element("Image", result["c"][0]["c"], "html", self.context))

    def test_missing_svg_is_reported_once(self) -> None:
        value = image_content(fname="non-existant.svg")
        self.assertIsNone(self.run_filter(value=value))
        self.assertIsNone(self.run_filter(value=image_content(fname="non-existant.svg")))
        self.assertEqual(self.warnings().count("File non-existant.svg could not be found!"), 1)

    def test_returns_raw_inline_with_svg(self) -> None:
        result = self.run_filter()
        self.assertEqual(result["t"], "RawInline")
        self.assertEqual(result["c"][0], "html")
        root = raw_root(result)
        self.assertEqual(local_name(root.tag), "svg")
        self.assertEqual(root.get("class"), "class1 class2")
        self.assertEqual((root.get("width"), root.get("height")), ("9.45em", "4.725em"))
        self.assertNotIn("<text", result["c"][1])

    def test_applies_width(self) -> None:
        result = self.run_filter(value=image_content(keyvals=[("width", "50%")]))
        root = raw_root(result)
        self.assertEqual((root.get("width"), root.get("height")), ("50%", "25%"))

    def test_applies_scale_factor(self) -> None:
        fname = self.write_svg('<svg width="2em" height="1em"></svg>')
        result = self.run_filter(
            value=image_content(fname=fname, keyvals=[("scale-factor", "2"), ("key", "val")])
        )
        root = raw_root(result)
        self.assertEqual((root.get("width"), root.get("height")), ("4em", "2em"))
        self.assertEqual(root.get("data-key"), "val")
        self.assertIsNone(root.get("scale-factor"))

    def test_invalid_scale_factor_is_ignored(self) -> None:
        fname = self.write_svg('<svg width="2em" height="1em"></svg>')
        result = self.run_filter(value=image_content(fname=fname, keyvals=[("scale-factor", "big")]))
        self.assertEqual(raw_root(result).get("width"), "2em")
        self.assertIn("Invalid scale-factor 'big'", self.warnings())

    def test_non_finite_scale_factor_is_ignored(self) -> None:
        for raw in ("nan", "inf", "-inf", "1e400"):
            with self.subTest(raw=raw):
                fname = self.write_svg('<svg width="10mm" height="5mm"></svg>')
                result = self.run_filter(value=image_content(fname=fname, keyvals=[("scale-factor", raw)]))
                self.assertEqual(raw_root(result).get("width"), "2.3625em")
                self.assertIn(f"Invalid scale-factor '{raw}'", self.warnings())

    def test_keep_size_excludes_svg_from_resizing(self) -> None:
        svg = '<svg xmlns="http://www.w3.org/2000/svg" width="42mm" height="42mm" />'
        fname = self.write_svg(svg)
        result = self.run_filter(value=image_content(fname=fname, classes=["keep-size"]))
        self.assertEqual(result["c"][1], svg)

    def test_applies_id_to_svg(self) -> None:
        fname = self.write_svg('<svg width="42mm" height="42mm"></svg>')
        result = self.run_filter(value=image_content(fname=fname, identifier="id", classes=[]))
        root = raw_root(result)
        self.assertEqual(root.get("id"), "id")
        self.assertIsNone(root.get("class"))

    def test_returns_figure(self) -> None:
        fname = self.write_svg('<svg width="42mm" height="42mm"></svg>')
        result = self.run_filter(
            key="Para",
            value=figure_content(fname=fname, identifier="fig1", keyvals=[("key", "val")]),
        )
        self.assertEqual(result["t"], "RawBlock")
        self.assertEqual(
            result["c"][1],
            '<figure id="fig1" class="class1 class2" data-key="val">\n'
            '  <svg width="9.9225em" height="9.9225em" />\n'
            '  <figcaption aria-hidden="true">Caption</figcaption>\n'
            "</figure>",
        )

    def test_failed_figure_is_not_retried_as_image(self) -> None:
        value = figure_content(fname="non-existant.svg")
        self.assertIsNone(self.run_filter(key="Para", value=value))
        self.assertIsNone(filter_element("Image", value[0]["c"], "html", self.context))
        self.assertEqual(self.warnings().count("could not be found"), 1)


class CaptionTests(unittest.TestCase):
    def test_caption_without_pandoc_is_plain_text(self) -> None:
        caption = [{"t": "Str", "c": "A"}, {"t": "Space"}, {"t": "Str", "c": "<b>"}]
        self.assertEqual(caption_to_html(caption, offline_context()), "A &lt;b&gt;")

    def test_caption_with_pandoc(self) -> None:
        context = offline_context()
        context.pandoc_api_version = [1, 22]
        context.pandoc = mock.Mock()
        context.pandoc.available.return_value = True
        context.pandoc.run.return_value = "<p><em>Caption</em></p>\n"
        caption = [{"t": "Emph", "c": [{"t": "Str", "c": "Caption"}]}]

        self.assertEqual(caption_to_html(caption, context), "<em>Caption</em>")

        args, doc_text = context.pandoc.run.call_args[0]
        self.assertEqual(args, ["--from=json", "--to=html", "--mathjax"])
        doc = json.loads(doc_text)
        self.assertEqual(doc["pandoc-api-version"], [1, 22])
        self.assertEqual(doc["blocks"], [{"t": "Para", "c": caption}])

    def test_empty_caption(self) -> None:
        self.assertEqual(caption_to_html([], offline_context()), "")


class WalkTests(unittest.TestCase):
    def test_walks_document(self) -> None:
        doc = {
            "pandoc-api-version": [1, 23, 1],
            "meta": {},
            "blocks": [
                {"t": "Para", "c": figure_content(classes=["ignore"])},
                {
                    "t": "Para",
                    "c": [
                        {"t": "Str", "c": "Inline:"},
                        {"t": "Space"},
                        {"t": "Image", "c": image_content()},
                    ],
                },
            ],
        }
        context = offline_context()
        result = run_filter(doc, "html", context)

        self.assertEqual(context.pandoc_api_version, [1, 23, 1])
        self.assertEqual(result["blocks"][0], {"t": "Para", "c": figure_content(classes=[])})
        inline = result["blocks"][1]["c"]
        self.assertEqual(inline[:2], [{"t": "Str", "c": "Inline:"}, {"t": "Space"}])
        self.assertEqual(inline[2]["t"], "RawInline")


if __name__ == "__main__":
    unittest.main()
