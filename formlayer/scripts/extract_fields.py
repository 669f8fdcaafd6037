"""Extract form field layout from a PDF to JSON."""

import json
import sys

from formlayer.errors import FormLayerError
from formlayer.fields import build_registry, open_document
from formlayer.profile import load_profile
from formlayer.scripts import read_bytes, script_settings


def main():
    if len(sys.argv) != 3:
        print("Usage: formlayer-extract-fields <input.pdf> <output.json>")
        sys.exit(1)

    settings = script_settings()
    try:
        reader = open_document(read_bytes(sys.argv[1]))
        registry = build_registry(reader, load_profile(settings.profile_path))
    except (FormLayerError, OSError) as exc:
        print(f"ERROR: {exc}")
        sys.exit(1)

    info = registry.to_records()
    with open(sys.argv[2], "w", encoding="utf-8") as f:
        json.dump(info, f, indent=2, ensure_ascii=False)
    print(f"Wrote {len(info)} fields to {sys.argv[2]}")


if __name__ == "__main__":
    main()
