from __future__ import annotations

import unittest
from io import BytesIO

from PIL import Image, ImageChops

from signing.exceptions.errors import LoadError, PageOutOfRange
from signing.logic.preview_renderer import PreviewRenderer
from signing.models.field_enums import FieldType
from signing.models.image_payload import ImagePayload
from signing.tests.helpers import field, letter, make_pdf

WHITE = (255, 255, 255)


def _blank(width: int = 800, height: int = 600) -> Image.Image:
    return Image.new("RGB", (width, height), WHITE)


def _red_png(width: int, height: int) -> ImagePayload:
    buf = BytesIO()
    Image.new("RGBA", (width, height), (255, 0, 0, 255)).save(buf, format="PNG")
    return ImagePayload("image/png", buf.getvalue())


class TestRasterize(unittest.TestCase):
    def test_page_scaled_to_requested_width(self) -> None:
        img, geometry = PreviewRenderer.rasterize_page(make_pdf((letter, letter)), 2, 306)
        self.assertEqual(img.width, 306)
        self.assertAlmostEqual(img.height, 396, delta=1)
        self.assertAlmostEqual(geometry.width, 612.0)
        self.assertAlmostEqual(geometry.height, 792.0)

    def test_missing_page(self) -> None:
        with self.assertRaises(PageOutOfRange):
            PreviewRenderer.rasterize_page(make_pdf((letter,)), 3, 200)

    def test_not_a_pdf(self) -> None:
        with self.assertRaises(LoadError):
            PreviewRenderer.rasterize_page(b"not a pdf", 1, 200)

    def test_render_only_draws_fields_of_that_page(self) -> None:
        source = make_pdf((letter, letter))
        fields = [field(1, FieldType.SIGNATURE, page=2, x=50, y=50, width=20, height=10)]
        renderer = PreviewRenderer()
        page1 = renderer.render(source, fields, 1, width_px=400)
        page2 = renderer.render(source, fields, 2, width_px=400)
        center = (int(400 * 0.6), int(page2.height * 0.55))
        self.assertEqual(page1.getpixel(center)[:3], WHITE)
        self.assertNotEqual(page2.getpixel(center)[:3], WHITE)


class TestDrawFields(unittest.TestCase):
    def setUp(self) -> None:
        self.renderer = PreviewRenderer()

    def test_input_image_is_not_modified(self) -> None:
        base = _blank()
        self.renderer.draw_fields(base, [field(1, FieldType.CHECKBOX, checked=True)])
        self.assertIsNone(ImageChops.difference(base, _blank()).getbbox())

    def test_checked_checkbox(self) -> None:
        out = self.renderer.draw_fields(_blank(), [
            field(1, FieldType.CHECKBOX, x=50, y=50, width=10, height=10, checked=True)
        ])
        # box (400, 300) 80 x 60; left border and lower checkmark corner
        self.assertEqual(out.getpixel((400, 330))[:3], (0, 0, 0))
        self.assertEqual(out.getpixel((436, 348))[:3], (0, 0, 0))
        self.assertEqual(out.getpixel((410, 310))[:3], WHITE)

    def test_checked_radio_dot(self) -> None:
        out = self.renderer.draw_fields(_blank(), [
            field(1, FieldType.RADIO, x=50, y=50, width=10, height=10, checked=True)
        ])
        self.assertEqual(out.getpixel((440, 330))[:3], (0, 0, 0))
        # rectangular outline like the checkbox
        self.assertEqual(out.getpixel((400, 300))[:3], (0, 0, 0))

    def test_unsigned_signature_placeholder(self) -> None:
        out = self.renderer.draw_fields(_blank(), [field(1, FieldType.SIGNATURE)])
        self.assertNotEqual(out.getpixel((160, 90))[:3], WHITE)

    def test_image_is_fitted_into_box(self) -> None:
        # box 160 x 60 px, square image -> 60 x 60 centred
        out = self.renderer.draw_fields(_blank(), [
            field(1, FieldType.IMAGE, x=0, y=0, width=20, height=10, image=_red_png(30, 30))
        ])
        self.assertEqual(out.getpixel((80, 30))[:3], (255, 0, 0))
        self.assertEqual(out.getpixel((10, 30))[:3], WHITE)

    def test_text_is_clipped_to_field_width(self) -> None:
        out = self.renderer.draw_fields(_blank(), [
            field(1, FieldType.TEXT, x=10, y=10, width=5, height=5, text="W" * 60)
        ], points_to_pixels=1.0)
        inside = out.convert("RGB").crop((80, 60, 121, 90))
        outside = out.convert("RGB").crop((121, 0, 800, 600))
        self.assertIsNotNone(ImageChops.difference(inside, Image.new("RGB", inside.size, WHITE)).getbbox())
        self.assertIsNone(ImageChops.difference(outside, Image.new("RGB", outside.size, WHITE)).getbbox())

    def test_broken_image_does_not_stop_preview(self) -> None:
        out = self.renderer.draw_fields(_blank(), [
            field(1, FieldType.IMAGE, image=ImagePayload("image/png", b"broken")),
            field(2, FieldType.CHECKBOX, x=50, y=50, width=10, height=10),
        ])
        self.assertEqual(out.getpixel((400, 330))[:3], (0, 0, 0))


if __name__ == "__main__":
    unittest.main()
