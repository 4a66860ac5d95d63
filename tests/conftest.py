from pathlib import Path
import sys

import pytest

# Make the src/ layout importable when running pytest without installing.
SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture
def write_cif(tmp_path):
    """Write bytes to a .cif file under tmp_path and return its path."""

    def _write(contents: bytes, name: str = "input.cif") -> Path:
        path = tmp_path / name
        path.write_bytes(contents)
        return path

    return _write
