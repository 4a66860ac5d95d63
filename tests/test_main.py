import logging

import pytest

from cifreader.cli import main


@pytest.fixture(autouse=True)
def _isolated(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    yield
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)


def test_main_loads_valid_file(write_cif, capsys):
    path = write_cif(b"L NM;\nB 4 2 1 1;\nE\n")
    main([str(path)])

    captured = capsys.readouterr()
    assert captured.out == ""


def test_main_prints_canonical_commands(write_cif, capsys):
    path = write_cif(b"(cell);L NM;B4 2 1 1;C 1 MX;E")
    main([str(path), "--print"])

    out = capsys.readouterr().out
    assert out.splitlines() == [
        "(cell) ;",
        "L NM ;",
        "B 4 2 1 1 1 0 ;",
        "C 1 M X ;",
        "E",
    ]


def test_main_exits_nonzero_on_invalid_file(write_cif, capsys):
    path = write_cif(b"P 1;\nE\n")
    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])
    assert excinfo.value.code == 1

    err = capsys.readouterr().err
    assert "Error detected when validating contents of input file." in err
    assert "State: 4" in err


def test_main_exits_nonzero_on_missing_file(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path / "missing.cif")])
    assert excinfo.value.code == 1
    assert "Can't open input file" in capsys.readouterr().err


def test_main_validate_only_prints_nothing(write_cif, capsys):
    path = write_cif(b"L NM;E")
    main([str(path), "--validate-only", "--print"])
    assert capsys.readouterr().out == ""


def test_main_reads_options_from_config_file(write_cif, tmp_path, capsys):
    (tmp_path / "cifreader.toml").write_text("[output]\nprint_commands = true\n")
    path = write_cif(b"DS 2;DF;E")
    main([str(path)])
    assert capsys.readouterr().out.splitlines() == ["D S 2 ;", "D F ;", "E"]
