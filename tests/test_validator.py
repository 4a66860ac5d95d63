import io

import pytest

from cifreader.grammar import build_cif_grammar, default_grammar
from cifreader.validator import (
    SyntaxValidator,
    ValidationStatus,
    display_byte,
    iter_bytes,
    validate,
)


def test_empty_input_is_incomplete_in_initial_state():
    outcome = validate(b"")
    assert outcome.status is ValidationStatus.INCOMPLETE
    assert outcome.state == 1
    assert outcome.bytes_read == 0


def test_command_without_end_is_incomplete():
    outcome = validate(b"B 4 2 1 1 ;")
    assert outcome.incomplete
    assert outcome.state == 1


@pytest.mark.parametrize(
    "data, final_state",
    [
        (b"B 4 2 1 1 ;\nE\n", 92),
        (b"B 4 2 1 1 ;E", 91),
        (b"E", 91),
        (b"\x01E", 91),  # control bytes are blanks between commands
    ],
)
def test_file_with_end_is_accepted(data, final_state):
    outcome = validate(data)
    assert outcome.accepted
    assert outcome.state == final_state
    assert outcome.byte is None


def test_full_file_is_accepted():
    data = (
        b"(Inverter cell);\n"
        b"DS 1 1 1;\n"
        b"9 inverter;\n"
        b"L NM;\n"
        b"B 40 20 0 0;\n"
        b"P 0 0 10 0 10 10 0 10;\n"
        b"W 4 0 0 0 -20 15 -20;\n"
        b"R 6 5 5;\n"
        b"DF;\n"
        b"C 1 T 100 -50 M X R 0 1;\n"
        b"DD 1;\n"
        b"E\n"
    )
    assert validate(data).accepted


@pytest.mark.parametrize(
    "data, state, byte, offset",
    [
        (b"P 12-", 4, ord("-"), 4),
        (b"P 1;", 4, ord(";"), 3),
        (b"P -A", 3, ord("A"), 3),
        (b";", 1, ord(";"), 0),
        (b"E;", 91, ord(";"), 1),
    ],
)
def test_invalid_byte_reports_last_valid_state(data, state, byte, offset):
    outcome = validate(data)
    assert outcome.status is ValidationStatus.INVALID
    assert outcome.state == state
    assert outcome.byte == byte
    assert outcome.offset == offset
    assert outcome.bytes_read == offset + 1


def test_validation_halts_at_first_invalid_byte():
    consumed = []

    def source():
        for byte in b"P 1-XYZ;E":
            consumed.append(byte)
            yield byte

    outcome = validate(source())
    assert outcome.invalid
    assert bytes(consumed) == b"P 1-"


def test_binary_stream_source():
    stream = io.BytesIO(b"L CMF;\nE\n")
    assert validate(stream).accepted


def test_iter_bytes_reads_streams_in_chunks():
    stream = io.BytesIO(b"abcdef")
    assert list(iter_bytes(stream, chunk_size=4)) == list(b"abcdef")


def test_text_sources_are_rejected():
    with pytest.raises(TypeError):
        validate("E")
    with pytest.raises(TypeError):
        validate(io.StringIO("E"))


def test_describe_invalid_outcome_shows_state_and_byte():
    lines = validate(b"P 12;").describe()
    assert "State: 4" in lines
    assert "Input char: ; (ASCII=59)" in lines


def test_describe_incomplete_outcome_mentions_end():
    lines = validate(b"L CMF;").describe()
    assert "missing End" in lines[0]
    assert "state 1" in lines[0]


def test_display_byte_escapes_unprintable_bytes():
    assert display_byte(ord("A")) == "A"
    assert display_byte(0x01) == "\\x01"
    assert display_byte(0xFF) == "\\xff"


def test_validators_share_one_grammar():
    first = SyntaxValidator()
    second = SyntaxValidator()
    assert first.grammar is second.grammar is default_grammar()
    assert first.validate(b"E").accepted
    assert second.validate(b"P").incomplete


def test_custom_grammar_is_used():
    validator = SyntaxValidator(build_cif_grammar())
    assert validator.validate(b"DF;E").accepted
