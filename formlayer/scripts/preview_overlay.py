"""Render the editing overlay for one page onto its raster, as a PNG."""

import sys

from formlayer.errors import FormLayerError
from formlayer.overlay import compose_preview
from formlayer.scripts import read_bytes, script_settings
from formlayer.session import FormSession


def main():
    if len(sys.argv) != 5:
        print("Usage: formlayer-preview <page_number> <input.pdf> <values.json> <output.png>")
        sys.exit(1)

    try:
        page_number = int(sys.argv[1])
    except ValueError:
        print(f"ERROR: page number must be an integer, got {sys.argv[1]!r}")
        sys.exit(1)
    input_pdf, values_path, output_png = sys.argv[2], sys.argv[3], sys.argv[4]

    settings = script_settings()
    session = FormSession.from_settings(settings)
    try:
        session.rebuild_registry(read_bytes(input_pdf))
        if page_number < 1 or page_number > session.registry.page_count:
            print(f"ERROR: page {page_number} out of range (document has {session.registry.page_count})")
            sys.exit(1)
        with open(values_path, encoding="utf-8") as f:
            session.replace_record(f.read())
        session.cache_pages()
        session.scale = settings.render_scale
        pages = session.render_overlay()
    except (FormLayerError, OSError) as exc:
        print(f"ERROR: {exc}")
        sys.exit(1)

    image = compose_preview(pages[page_number - 1])
    image.save(output_png)
    print(f"Saved preview of page {page_number} to {output_png} (size: {image.size})")


if __name__ == "__main__":
    main()
