import logging

import pytest

from cifreader.cif_file import CIFFile, LoadStatus
from cifreader.errors import ConfigurationError
from cifreader.grammar import CIF_TRANSITIONS, build_cif_grammar
from cifreader.model import BoxCommand, CommandType, EndCommand, LayerCommand, Point, Size
from cifreader.validator import ValidationStatus

GOOD_FILE = b"L NM;\nB 4 2 1 1;\nE\n"


def test_load_valid_file(write_cif):
    cif_file = CIFFile(write_cif(GOOD_FILE))
    status = cif_file.load()
    assert status is LoadStatus.OK
    assert cif_file.messages == []
    assert cif_file.outcome.status is ValidationStatus.ACCEPTED
    assert cif_file.commands == [
        LayerCommand(name="NM"),
        BoxCommand(size=Size(4, 2), position=Point(1, 1)),
        EndCommand(),
    ]


def test_missing_file_cannot_be_opened(tmp_path):
    cif_file = CIFFile(tmp_path / "missing.cif")
    assert cif_file.load() is LoadStatus.CANT_OPEN_INPUT_FILE
    assert cif_file.outcome is None
    assert any("Can't open input file" in m for m in cif_file.messages)


def test_invalid_file_reports_state_and_byte(write_cif, caplog):
    cif_file = CIFFile(write_cif(b"P 1;\nE\n"))
    with caplog.at_level(logging.ERROR, logger="cifreader.cif_file"):
        status = cif_file.load()
    assert status is LoadStatus.INCORRECT_INPUT_FILE
    assert "State: 4" in cif_file.messages
    assert "Input char: ; (ASCII=59)" in cif_file.messages
    assert cif_file.commands == []
    assert "State: 4" in caplog.text


def test_incomplete_file_mentions_missing_end(write_cif):
    cif_file = CIFFile(write_cif(b"B 4 2 1 1 ;\n"))
    assert cif_file.load() is LoadStatus.INCOMPLETE_INPUT_FILE
    assert cif_file.outcome.state == 1
    assert "missing End" in cif_file.messages[0]


def test_max_input_bytes_is_enforced(write_cif):
    path = write_cif(GOOD_FILE)
    assert CIFFile(path, max_input_bytes=len(GOOD_FILE)).load() is LoadStatus.OK

    cif_file = CIFFile(path, max_input_bytes=5)
    assert cif_file.load() is LoadStatus.CANT_OPEN_INPUT_FILE
    assert "exceeds max_input_bytes=5" in cif_file.messages[0]


def test_validate_only_leaves_commands_empty(write_cif):
    cif_file = CIFFile(write_cif(GOOD_FILE))
    assert cif_file.load(validate_only=True) is LoadStatus.OK
    assert cif_file.commands == []
    assert cif_file.outcome.accepted


def test_reload_clears_previous_messages(write_cif):
    path = write_cif(b"P 1;E")
    cif_file = CIFFile(path)
    cif_file.load()
    assert cif_file.messages
    path.write_bytes(GOOD_FILE)
    assert cif_file.load() is LoadStatus.OK
    assert cif_file.messages == []


def _grammar_with_extra(*extra):
    return build_cif_grammar(transitions=CIF_TRANSITIONS + tuple(extra))


def test_unsupported_command_after_validation(write_cif):
    # Route 'Q' through the user-extension state so the syntax check lets it pass.
    grammar = _grammar_with_extra((1, "Q", 88))
    path = write_cif(b"L NM; Q 1; E")

    cif_file = CIFFile(path, grammar=grammar)
    assert cif_file.load() is LoadStatus.UNSUPPORTED_COMMAND
    assert cif_file.commands == [LayerCommand(name="NM")]
    assert "Unsupported command" in cif_file.messages[0]

    skipping = CIFFile(path, grammar=grammar, on_error="skip")
    assert skipping.load() is LoadStatus.OK
    assert [c.type for c in skipping.commands] == [CommandType.LAYER, CommandType.END]
    assert len(skipping.messages) == 1


def test_malformed_command_after_validation(write_cif):
    grammar = _grammar_with_extra((1, "B", 88))
    cif_file = CIFFile(write_cif(b"B wide;E"), grammar=grammar)
    assert cif_file.load() is LoadStatus.MALFORMED_COMMAND
    assert "size.width" in cif_file.messages[0]


@pytest.mark.parametrize("kwargs", [{"on_error": "ignore"}, {"max_input_bytes": -1}])
def test_invalid_options_are_configuration_errors(tmp_path, kwargs):
    with pytest.raises(ConfigurationError):
        CIFFile(tmp_path / "x.cif", **kwargs)
