import io

import pytest
from PIL import Image
from reportlab.pdfgen import canvas

from formlayer.profile import DocumentProfile

PAGE_SIZE = (612, 792)


def make_form_pdf():
    """Two pages of AcroForm fields, laid out the way the tests expect."""
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=PAGE_SIZE)
    form = c.acroForm
    form.textfield(name="CharacterName", x=50, y=700, width=200, height=20)
    form.textfield(name="Features", x=50, y=400, width=300, height=100)
    form.checkbox(name="Inspiration", x=300, y=700, size=15)
    c.showPage()
    form = c.acroForm
    form.textfield(name="Notes", x=50, y=500, width=300, height=120)
    form.textfield(name="Portrait", x=400, y=600, width=100, height=120)
    c.showPage()
    c.save()
    return buffer.getvalue()


def make_plain_pdf(pages=1):
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=PAGE_SIZE)
    for i in range(pages):
        c.drawString(72, 720, f"page {i + 1}")
        c.showPage()
    c.save()
    return buffer.getvalue()


def make_png(size=(30, 40), color=(200, 30, 30)):
    out = io.BytesIO()
    Image.new("RGB", size, color).save(out, format="PNG")
    return out.getvalue()


class FakeRasterizer:
    """Stands in for poppler: a blank page image per call, with an optional hook."""

    def __init__(self, hook=None):
        self.calls = []
        self.hook = hook

    def render_page(self, data, page_number):
        self.calls.append(page_number)
        if self.hook is not None:
            self.hook(page_number)
        return Image.new("RGB", (PAGE_SIZE[0] // 2, PAGE_SIZE[1] // 2), "white")


@pytest.fixture
def form_pdf():
    return make_form_pdf()


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def profile():
    return DocumentProfile(
        name="test",
        image_fields=frozenset({"Portrait"}),
        display_names={"CharacterName": "Character Name", "Inspiration": "Inspiration ☐"},
        style_defaults={"CharacterName": {"bold": True}},
        sample_values={"CharacterName": "Alice", "Inspiration": True},
    )


@pytest.fixture
def rasterizer():
    return FakeRasterizer()
