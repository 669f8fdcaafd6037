"""Burn a value record (and optional images) into a flattened copy of a PDF form."""

import sys

from formlayer.errors import FormLayerError
from formlayer.fields import FieldKind, build_registry, open_document
from formlayer.generate import generate_document
from formlayer.images import ImageStore
from formlayer.profile import load_profile
from formlayer.records import parse_record
from formlayer.scripts import read_bytes, script_settings


def parse_image_args(args):
    """``field=path`` pairs to a dict; returns None on a malformed argument."""
    result = {}
    for arg in args:
        name, sep, path = arg.partition("=")
        if not sep or not name or not path:
            return None
        result[name] = path
    return result


def main():
    if len(sys.argv) < 4:
        print("Usage: formlayer-fill <input.pdf> <values.json> <output.pdf> [field=image ...]")
        sys.exit(1)

    input_pdf, values_path, output_pdf = sys.argv[1], sys.argv[2], sys.argv[3]
    image_args = parse_image_args(sys.argv[4:])
    if image_args is None:
        print("ERROR: image arguments must look like field=path/to/image")
        sys.exit(1)

    settings = script_settings()
    try:
        data = read_bytes(input_pdf)
        registry = build_registry(open_document(data), load_profile(settings.profile_path))
        with open(values_path, encoding="utf-8") as f:
            record = parse_record(f.read())

        images = ImageStore()
        for name, path in image_args.items():
            if name not in registry:
                print(f"ERROR: '{name}' is not a valid field ID")
                sys.exit(1)
            if registry[name].kind is not FieldKind.IMAGE:
                print(f"ERROR: '{name}' is not an image field")
                sys.exit(1)
            images.attach(name, read_bytes(path))

        report = generate_document(data, registry, record, images)
    except (FormLayerError, OSError) as exc:
        print(f"ERROR: {exc}")
        sys.exit(1)

    unknown = [name for name in record.values if name not in registry]
    for name in unknown:
        print(f"Warning: '{name}' is not a field of {input_pdf}, ignored")
    for name, reason in report.failed.items():
        print(f"ERROR: could not draw '{name}': {reason}")

    with open(output_pdf, "wb") as f:
        f.write(report.data)
    print(f"Drew {len(report.drawn)} fields and saved to {output_pdf}")
    if report.failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
