import json

import pytest

from formlayer.errors import ValueRecordParseError
from formlayer.records import (
    ValueRecord,
    add_blank,
    apply_checkbox,
    apply_text_edit,
    dump_record,
    is_checked,
    parse_record,
    record_from_values,
    text_value,
)


def test_parse_splits_styles_from_values():
    record = parse_record('{"Name": "Alice", "Flag": true, "_styles": {"Name": {"bold": true}}}')
    assert record.values == {"Name": "Alice", "Flag": True}
    assert record.styles == {"Name": {"bold": True}}


@pytest.mark.parametrize("text", ["{", "[1, 2]", '"text"', '{"A": {"nested": 1}}', '{"A": [1]}', '{"_styles": []}'])
def test_parse_rejects_malformed_records(text):
    with pytest.raises(ValueRecordParseError):
        parse_record(text)


def test_dump_keeps_key_order_and_puts_styles_last():
    record = ValueRecord(values={"B": "2", "A": "1"}, styles={"A": {"align": "right"}})
    text = dump_record(record)
    assert list(json.loads(text)) == ["B", "A", "_styles"]
    assert "\n    " in text


def test_dump_omits_empty_styles_and_keeps_unicode():
    text = record_from_values({"Name": "Zoë"})
    assert "_styles" not in text
    assert "Zoë" in text


def test_text_value():
    assert text_value("Alice") == "Alice"
    assert text_value(12) == "12"
    assert text_value(None) is None
    assert text_value(True) is None
    assert text_value("false") is None


def test_is_checked():
    assert is_checked(True)
    assert is_checked("true")
    assert not is_checked(False)
    assert not is_checked("yes")
    assert not is_checked(None)


def test_text_edit_keeps_raw_value():
    values = {}
    assert apply_text_edit(values, "Notes", " two\nlines ") is True
    assert values["Notes"] == " two\nlines "


def test_text_edit_of_whitespace_deletes_the_key():
    values = {"Notes": "old"}
    assert apply_text_edit(values, "Notes", " \n ") is False
    assert "Notes" not in values


def test_checkbox_stores_true_or_removes():
    values = {}
    apply_checkbox(values, "Flag", True)
    assert values == {"Flag": True}
    apply_checkbox(values, "Flag", False)
    assert values == {}


def test_add_blank_does_not_overwrite():
    values = {"Name": "Alice"}
    assert add_blank(values, "Name") is False
    assert add_blank(values, "Class") is True
    assert values == {"Name": "Alice", "Class": ""}


def test_export_then_import_is_identical():
    record = ValueRecord(
        values={"Name": "Zoë", "Notes": "a\nb", "Flag": True, "Level": 3},
        styles={"Name": {"fontSize": 12.0, "bold": True}},
    )
    assert parse_record(dump_record(record)) == record
