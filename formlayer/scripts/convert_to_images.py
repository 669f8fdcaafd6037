"""Convert each page of a PDF to a PNG image."""

import os
import sys

from formlayer.errors import FormLayerError
from formlayer.fields import open_document, page_geometries
from formlayer.raster import Pdf2ImageRasterizer, rasterize_pages
from formlayer.scripts import read_bytes, script_settings


def main():
    if len(sys.argv) != 3:
        print("Usage: formlayer-convert-to-images <input.pdf> <output_directory>")
        sys.exit(1)

    pdf_path = sys.argv[1]
    output_dir = sys.argv[2]

    settings = script_settings()
    try:
        data = read_bytes(pdf_path)
        pages = page_geometries(open_document(data))
    except (FormLayerError, OSError) as exc:
        print(f"ERROR: {exc}")
        sys.exit(1)

    os.makedirs(output_dir, exist_ok=True)
    rasters = rasterize_pages(
        data,
        pages,
        Pdf2ImageRasterizer(settings.render_scale),
        progress=lambda p: print(f"Rendering page {p.page}/{p.total} ({p.percent}%)"),
    )

    for i, raster in enumerate(rasters):
        out_path = os.path.join(output_dir, f"page_{i + 1}.png")
        raster.image.save(out_path)
        print(f"Saved page {i + 1} as {out_path} (size: {raster.image.size})")

    print(f"Converted {len(rasters)} pages to PNG images")


if __name__ == "__main__":
    main()
