"""Write the field list of a PDF as CSV."""

import sys

from formlayer.errors import FormLayerError
from formlayer.fields import build_registry, open_document
from formlayer.profile import load_profile
from formlayer.scripts import read_bytes, script_settings


def main():
    if len(sys.argv) != 3:
        print("Usage: formlayer-export-csv <input.pdf> <output.csv>")
        sys.exit(1)

    settings = script_settings()
    try:
        registry = build_registry(open_document(read_bytes(sys.argv[1])), load_profile(settings.profile_path))
    except (FormLayerError, OSError) as exc:
        print(f"ERROR: {exc}")
        sys.exit(1)

    with open(sys.argv[2], "w", encoding="utf-8", newline="") as f:
        f.write(registry.to_csv())
    print(f"Wrote {len(registry)} fields to {sys.argv[2]}")


if __name__ == "__main__":
    main()
