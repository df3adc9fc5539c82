from __future__ import annotations

import unittest
from io import BytesIO
from unittest.mock import MagicMock, patch

from pypdf import PdfReader, PdfWriter
from pypdf.generic import RectangleObject

from core.config.config_service import ConfigService
from signing.exceptions.errors import LoadError, SerializationError
from signing.logic.document_assembler import DocumentAssembler
from signing.logic.page_renderer import PageRenderer
from signing.logic.signing_service import SigningService
from signing.models.field import Field
from signing.models.field_enums import FieldType
from signing.models.render_models import RenderRequest
from signing.tests.helpers import A4, field, letter, make_image, make_pdf


def _operators(page) -> list[bytes]:
    return [op for _operands, op in page.get_contents().operations]


class TestDocumentAssembler(unittest.TestCase):
    def setUp(self) -> None:
        self.assembler = DocumentAssembler()
        self.source = make_pdf((letter, letter))

    def test_fields_land_on_their_pages_only(self) -> None:
        fields = [
            field(1, FieldType.TEXT, page=1, x=10, y=10, width=30, height=5, text="Jane Doe"),
            field(2, FieldType.CHECKBOX, page=2, x=40, y=45, width=3, height=3, checked=True),
        ]
        result = self.assembler.assemble(self.source, fields)

        self.assertEqual(result.page_count, 2)
        self.assertEqual(result.report.drawn, [1, 2])
        reader = PdfReader(BytesIO(result.pdf_bytes))
        self.assertEqual(len(reader.pages), 2)
        self.assertIn("Jane Doe", reader.pages[0].extract_text())
        self.assertIn("Page 1", reader.pages[0].extract_text())
        self.assertNotIn("Jane Doe", reader.pages[1].extract_text())

        self.assertEqual(_operators(reader.pages[1]).count(b"l"), 2)
        self.assertIn(b"re", _operators(reader.pages[1]))
        self.assertNotIn(b"l", _operators(reader.pages[0]))

    def test_field_on_missing_page_is_skipped(self) -> None:
        fields = [
            field(1, FieldType.TEXT, page=1, text="kept"),
            field(2, FieldType.TEXT, page=5, text="lost"),
        ]
        result = self.assembler.assemble(self.source, fields)

        self.assertEqual(result.report.drawn, [1])
        self.assertEqual(result.report.skipped[0].field_id, 2)
        self.assertEqual(result.report.skipped[0].reason, "page_out_of_range")
        text = "".join(p.extract_text() for p in PdfReader(BytesIO(result.pdf_bytes)).pages)
        self.assertNotIn("lost", text)

    def test_untouched_page_is_carried_over(self) -> None:
        result = self.assembler.assemble(self.source, [field(1, FieldType.TEXT, page=1, text="x")])
        src = PdfReader(BytesIO(self.source))
        out = PdfReader(BytesIO(result.pdf_bytes))
        self.assertEqual(
            out.pages[1].get_contents().get_data(), src.pages[1].get_contents().get_data()
        )

    def test_unsigned_signature_leaves_document_unchanged(self) -> None:
        result = self.assembler.assemble(self.source, [field(1, FieldType.SIGNATURE)])
        self.assertEqual(result.report.drawn, [])
        src = PdfReader(BytesIO(self.source))
        out = PdfReader(BytesIO(result.pdf_bytes))
        for a, b in zip(src.pages, out.pages):
            self.assertEqual(a.get_contents().get_data(), b.get_contents().get_data())

    def test_same_input_renders_same_pages(self) -> None:
        fields = [
            field(1, FieldType.SIGNATURE, page=2, image=make_image(200, 80)),
            field(2, FieldType.DATE, page=1, date="2026-10-18"),
            field(3, FieldType.RADIO, page=1, checked=True),
        ]
        first_bytes = self.assembler.assemble(self.source, fields).pdf_bytes
        second_bytes = self.assembler.assemble(self.source, fields).pdf_bytes
        self.assertEqual(first_bytes, second_bytes)

        first = PdfReader(BytesIO(first_bytes))
        second = PdfReader(BytesIO(second_bytes))
        for a, b in zip(first.pages, second.pages):
            self.assertEqual(a.get_contents().get_data(), b.get_contents().get_data())

    def test_render_uses_each_page_size(self) -> None:
        source = make_pdf((letter, A4))
        request = RenderRequest(
            source=source,
            fields=[field(1, FieldType.TEXT, page=2, text="on A4")],
        )
        result = self.assembler.render(request)
        reader = PdfReader(BytesIO(result.pdf_bytes))
        self.assertAlmostEqual(float(reader.pages[1].mediabox.width), A4[0], places=2)
        self.assertIn("on A4", reader.pages[1].extract_text())

    def test_inspect_returns_page_sizes(self) -> None:
        geometries = self.assembler.inspect(make_pdf((letter, A4)))
        self.assertEqual(len(geometries), 2)
        self.assertAlmostEqual(geometries[0].width, 612.0)
        self.assertAlmostEqual(geometries[0].height, 792.0)
        self.assertAlmostEqual(geometries[1].height, A4[1], places=2)

    def test_unreadable_image_data_does_not_abort_render(self) -> None:
        fields = [
            Field.from_dict({"id": 1, "type": "image", "page": 1, "x": 10, "y": 40,
                             "width": 20, "height": 10, "imageData": "image/png;base64,AAAA"}),
            field(2, FieldType.TEXT, page=1, text="Jane Doe"),
        ]
        result = self.assembler.assemble(self.source, fields)

        self.assertEqual(result.report.drawn, [2])
        self.assertEqual(result.report.skipped[0].reason, "UnsupportedImageFormat")
        self.assertIn("Jane Doe", PdfReader(BytesIO(result.pdf_bytes)).pages[0].extract_text())

    def test_shifted_media_box_moves_overlay_onto_page(self) -> None:
        writer = PdfWriter(clone_from=PdfReader(BytesIO(make_pdf((letter,)))))
        writer.pages[0].mediabox = RectangleObject([100, 50, 712, 842])
        buf = BytesIO()
        writer.write(buf)
        source = buf.getvalue()

        geometry = self.assembler.inspect(source)[0]
        self.assertEqual((geometry.left, geometry.bottom), (100.0, 50.0))
        self.assertAlmostEqual(geometry.width, 612.0)

        result = self.assembler.assemble(source, [field(1, FieldType.CHECKBOX, checked=True)])
        page = PdfReader(BytesIO(result.pdf_bytes)).pages[0]
        translations = [
            [float(v) for v in operands]
            for operands, op in page.get_contents().operations if op == b"cm"
        ]
        self.assertIn([1.0, 0.0, 0.0, 1.0, 100.0, 50.0], translations)


class _FailingRenderer(PageRenderer):
    def make_overlay(self, page, fields):
        raise RuntimeError("canvas exploded")


class TestSerializationError(unittest.TestCase):
    def test_overlay_failure(self) -> None:
        assembler = DocumentAssembler(_FailingRenderer())
        with self.assertRaises(SerializationError):
            assembler.assemble(make_pdf(), [field(1, FieldType.TEXT, text="x")])

    def test_write_failure(self) -> None:
        assembler = DocumentAssembler()
        with patch.object(PdfWriter, "write", side_effect=OSError("disk full")):
            with self.assertRaises(SerializationError) as ctx:
                assembler.assemble(make_pdf(), [field(1, FieldType.TEXT, text="x")])
        self.assertIsInstance(ctx.exception.__cause__, OSError)

    def test_service_stores_nothing_on_serialization_error(self) -> None:
        store = MagicMock()
        service = SigningService(
            config=ConfigService(environ={"SIE_AUDIT__ENABLED": "false"}, use_user_config=False),
            assembler=DocumentAssembler(_FailingRenderer()),
            output_store=store,
        )
        request = RenderRequest(source=make_pdf(), fields=[field(1, FieldType.TEXT, text="x")])
        with self.assertRaises(SerializationError):
            service.sign(request)
        store.save.assert_not_called()


class TestLoad(unittest.TestCase):
    def test_empty_source(self) -> None:
        with self.assertRaises(LoadError):
            DocumentAssembler.load(b"")

    def test_garbage_source(self) -> None:
        with self.assertRaises(LoadError):
            DocumentAssembler().assemble(b"this is not a pdf document at all", [])

    def test_password_protected_source(self) -> None:
        writer = PdfWriter(clone_from=PdfReader(BytesIO(make_pdf((letter,)))))
        writer.encrypt(user_password="secret", algorithm="RC4-128")
        buf = BytesIO()
        writer.write(buf)
        with self.assertRaises(LoadError):
            DocumentAssembler.load(buf.getvalue())


if __name__ == "__main__":
    unittest.main()
