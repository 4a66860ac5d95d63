import argparse
from pathlib import Path

import pytest

from cifreader.config import build_arg_parser, load_config_and_args


def make_args(**overrides) -> argparse.Namespace:
    defaults = dict(
        path=Path("input.cif"),
        config=None,
        on_error=None,
        encoding=None,
        max_input_bytes=None,
        print_commands=None,
        validate_only=False,
        log_level=None,
    )
    defaults.update(overrides)
    return argparse.Namespace(**defaults)


def test_load_config_defaults_without_file(tmp_path, monkeypatch):
    # Ensure we don't accidentally pick up a real cifreader.toml.
    monkeypatch.chdir(tmp_path)
    rc = load_config_and_args(make_args())

    assert rc.path == Path("input.cif")
    assert rc.on_error == "abort"
    assert rc.encoding == "latin-1"
    assert rc.max_input_bytes is None
    assert rc.print_commands is False
    assert rc.validate_only is False
    assert rc.log_level == "INFO"


def test_load_config_uses_default_config_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    Path("cifreader.toml").write_text(
        """
[reader]
on_error = "skip"
encoding = "utf-8"
max_input_bytes = 4096

[output]
print_commands = true

[logging]
level = "DEBUG"
"""
    )
    rc = load_config_and_args(make_args())

    assert rc.on_error == "skip"
    assert rc.encoding == "utf-8"
    assert rc.max_input_bytes == 4096
    assert rc.print_commands is True
    assert rc.log_level == "DEBUG"


def test_cli_values_override_config_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    cfg = tmp_path / "custom.toml"
    cfg.write_text('[reader]\non_error = "skip"\nmax_input_bytes = 10\n[output]\nprint_commands = true\n')

    rc = load_config_and_args(
        make_args(config=cfg, on_error="abort", max_input_bytes=20, print_commands=False)
    )

    assert rc.on_error == "abort"
    assert rc.max_input_bytes == 20
    assert rc.print_commands is False


def test_missing_explicit_config_exits(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit, match="Config file not found"):
        load_config_and_args(make_args(config=tmp_path / "nope.toml"))


def test_unparseable_config_exits(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    Path("cifreader.toml").write_text("[reader\n")
    with pytest.raises(SystemExit, match="Failed to load config file"):
        load_config_and_args(make_args())


@pytest.mark.parametrize(
    "toml_text, message",
    [
        ('[reader]\non_error = "ignore"\n', "Invalid on_error"),
        ('[reader]\nencoding = "no-such-codec"\n', "Unknown encoding"),
        ("[reader]\nmax_input_bytes = -1\n", "max_input_bytes"),
        ('[reader]\nmax_input_bytes = "big"\n', "max_input_bytes"),
    ],
)
def test_invalid_config_values_exit(tmp_path, monkeypatch, toml_text, message):
    monkeypatch.chdir(tmp_path)
    Path("cifreader.toml").write_text(toml_text)
    with pytest.raises(SystemExit, match=message):
        load_config_and_args(make_args())


def test_arg_parser_defaults_leave_overrides_unset():
    args = build_arg_parser().parse_args(["chip.cif"])
    assert args.path == Path("chip.cif")
    assert args.on_error is None
    assert args.print_commands is None
    assert args.validate_only is False


def test_arg_parser_rejects_unknown_policy():
    with pytest.raises(SystemExit):
        build_arg_parser().parse_args(["chip.cif", "--on-error", "ignore"])
