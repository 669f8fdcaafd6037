import csv
import json

import pytest
from pypdf import PdfReader

from formlayer.scripts import export_csv, extract_fields, fill_fields, preview_overlay
from formlayer.scripts.fill_fields import parse_image_args
from formlayer.session import FormSession

from tests.conftest import FakeRasterizer


@pytest.fixture
def pdf_path(tmp_path, form_pdf):
    path = tmp_path / "form.pdf"
    path.write_bytes(form_pdf)
    return path


def run(monkeypatch, module, *args):
    monkeypatch.setattr("sys.argv", [module.__name__, *map(str, args)])
    module.main()


def test_usage_exits_with_error(monkeypatch, capsys):
    with pytest.raises(SystemExit) as exc:
        run(monkeypatch, extract_fields, "only-one-arg")
    assert exc.value.code == 1
    assert "Usage:" in capsys.readouterr().out


def test_extract_fields(monkeypatch, tmp_path, pdf_path, capsys):
    out = tmp_path / "fields.json"
    run(monkeypatch, extract_fields, pdf_path, out)
    fields = json.loads(out.read_text(encoding="utf-8"))
    assert fields[0]["field_id"] == "CharacterName"
    assert {f["page"] for f in fields} == {1, 2}
    assert "Wrote 5 fields" in capsys.readouterr().out


def test_extract_fields_reports_unreadable_pdf(monkeypatch, tmp_path, capsys):
    bad = tmp_path / "bad.pdf"
    bad.write_bytes(b"nope")
    with pytest.raises(SystemExit):
        run(monkeypatch, extract_fields, bad, tmp_path / "out.json")
    assert capsys.readouterr().out.startswith("ERROR:")


def test_export_csv(monkeypatch, tmp_path, pdf_path):
    out = tmp_path / "fields.csv"
    run(monkeypatch, export_csv, pdf_path, out)
    with open(out, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["Field ID", "Type", "Description"]
    assert len(rows) == 6


def test_fill(monkeypatch, tmp_path, pdf_path, capsys):
    values = tmp_path / "values.json"
    values.write_text(json.dumps({"CharacterName": "Alice", "Inspiration": True, "Ghost": "x"}), encoding="utf-8")
    out = tmp_path / "out.pdf"
    run(monkeypatch, fill_fields, pdf_path, values, out)
    reader = PdfReader(out)
    assert "Alice" in reader.pages[0].extract_text()
    printed = capsys.readouterr().out
    assert "'Ghost' is not a field" in printed
    assert "Drew 2 fields" in printed


def test_fill_rejects_image_for_unknown_field(monkeypatch, tmp_path, pdf_path, png_bytes, capsys):
    values = tmp_path / "values.json"
    values.write_text("{}", encoding="utf-8")
    image = tmp_path / "face.png"
    image.write_bytes(png_bytes)
    with pytest.raises(SystemExit):
        run(monkeypatch, fill_fields, pdf_path, values, tmp_path / "out.pdf", f"Nobody={image}")
    assert "'Nobody' is not a valid field ID" in capsys.readouterr().out


def test_parse_image_args():
    assert parse_image_args(["A=a.png", "B=dir/b.jpg"]) == {"A": "a.png", "B": "dir/b.jpg"}
    assert parse_image_args(["A"]) is None
    assert parse_image_args(["=a.png"]) is None


def test_preview(monkeypatch, tmp_path, pdf_path):
    monkeypatch.setattr(
        FormSession,
        "from_settings",
        classmethod(lambda cls, settings, rasterizer=None: cls(rasterizer=FakeRasterizer())),
    )
    values = tmp_path / "values.json"
    values.write_text('{"CharacterName": "Alice"}', encoding="utf-8")
    out = tmp_path / "page1.png"
    run(monkeypatch, preview_overlay, 1, pdf_path, values, out)
    assert out.read_bytes().startswith(b"\x89PNG")


def test_preview_rejects_bad_page(monkeypatch, tmp_path, pdf_path, capsys):
    with pytest.raises(SystemExit):
        run(monkeypatch, preview_overlay, "first", pdf_path, tmp_path / "v.json", tmp_path / "o.png")
    assert "ERROR:" in capsys.readouterr().out


def test_fill_rejects_image_for_text_field(monkeypatch, tmp_path, pdf_path, png_bytes, capsys):
    values = tmp_path / "values.json"
    values.write_text("{}", encoding="utf-8")
    image = tmp_path / "face.png"
    image.write_bytes(png_bytes)
    out = tmp_path / "out.pdf"
    with pytest.raises(SystemExit):
        run(monkeypatch, fill_fields, pdf_path, values, out, f"CharacterName={image}")
    assert "'CharacterName' is not an image field" in capsys.readouterr().out
    assert not out.exists()
