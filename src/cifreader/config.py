# config.py
from __future__ import annotations

import argparse
import codecs
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # type: ignore

from .codec import ON_ERROR_CHOICES

log = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "cifreader.toml"


@dataclass
class RunConfig:
    path: Path
    on_error: str
    encoding: str
    max_input_bytes: Optional[int]
    print_commands: bool
    validate_only: bool
    log_level: str


def build_arg_parser() -> argparse.ArgumentParser:
    """
    Build the CLI argument parser.

    Returns:
        Configured argparse.ArgumentParser instance.
    """
    p = argparse.ArgumentParser(
        description="Validate a CIF (Caltech Intermediate Form) file and read its commands",
    )
    p.add_argument("path", type=Path, help="CIF file to load")
    p.add_argument(
        "--config",
        type=Path,
        help=f"TOML config file (defaults to {DEFAULT_CONFIG_NAME} if present)",
    )
    p.add_argument(
        "--on-error",
        choices=list(ON_ERROR_CHOICES),
        help="Stop at the first bad command (abort) or report it and continue (skip)",
    )
    p.add_argument("--encoding", help="Text encoding used to read commands (default latin-1)")
    p.add_argument(
        "--max-input-bytes", type=int, help="Refuse files larger than this many bytes"
    )
    p.add_argument(
        "--print",
        dest="print_commands",
        action="store_true",
        default=None,
        help="Print every command in canonical form",
    )
    p.add_argument(
        "--validate-only",
        action="store_true",
        help="Only run the syntax check; do not read commands",
    )
    p.add_argument("--log-level", help="Logging level (default INFO)")
    return p


def _load_toml(path: Path) -> dict:
    """
    Load a TOML config file.

    Raises:
        FileNotFoundError: If the file is missing.
        tomllib.TOMLDecodeError: On parse errors.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open("rb") as f:
        return tomllib.load(f)


def _dict_get_nested(data: dict, key: str, default=None):
    """Fetch a dotted-path value from a nested dict, or default when absent."""
    parts = key.split(".")
    current_level = data
    for part in parts[:-1]:
        current_level = current_level.get(part, {})
    return current_level.get(parts[-1], default)


def load_config_and_args(args: argparse.Namespace) -> RunConfig:
    """
    Merge CLI args with TOML config into a RunConfig.

    Args:
        args: Parsed argparse namespace.

    Returns:
        RunConfig with CLI values taking precedence over the config file.

    Raises:
        SystemExit: On a missing explicit config file or invalid values.
    """
    cfg_data: dict = {}
    cfg_path: Path | None = args.config
    used_default = False

    if cfg_path is None:
        default_path = Path(DEFAULT_CONFIG_NAME)
        if default_path.exists():
            cfg_path = default_path
            used_default = True

    if cfg_path is not None:
        try:
            cfg_data = _load_toml(cfg_path)
        except FileNotFoundError:
            if not used_default:
                raise SystemExit(f"Config file not found: {cfg_path}")
        except Exception as e:  # TOML parse errors, permission issues, etc.
            raise SystemExit(f"Failed to load config file {cfg_path}: {e}") from e

    on_error = _dict_get_nested(cfg_data, "reader.on_error", "abort")
    encoding = _dict_get_nested(cfg_data, "reader.encoding", "latin-1")
    max_input_bytes = _dict_get_nested(cfg_data, "reader.max_input_bytes", None)
    print_commands = bool(_dict_get_nested(cfg_data, "output.print_commands", False))
    log_level = _dict_get_nested(cfg_data, "logging.level", "INFO")

    # CLI overrides
    if args.on_error is not None:
        on_error = args.on_error
    if args.encoding is not None:
        encoding = args.encoding
    if args.max_input_bytes is not None:
        max_input_bytes = args.max_input_bytes
    if args.print_commands is not None:
        print_commands = bool(args.print_commands)
    if args.log_level is not None:
        log_level = args.log_level

    if on_error not in ON_ERROR_CHOICES:
        raise SystemExit(
            f"Invalid on_error '{on_error}'; expected one of {sorted(ON_ERROR_CHOICES)}"
        )
    try:
        codecs.lookup(encoding)
    except LookupError:
        raise SystemExit(f"Unknown encoding '{encoding}'")
    if max_input_bytes is not None and (
        isinstance(max_input_bytes, bool)
        or not isinstance(max_input_bytes, int)
        or max_input_bytes < 0
    ):
        raise SystemExit("max_input_bytes must be a non-negative integer")

    run_config = RunConfig(
        path=args.path,
        on_error=on_error,
        encoding=encoding,
        max_input_bytes=max_input_bytes,
        print_commands=print_commands,
        validate_only=bool(getattr(args, "validate_only", False)),
        log_level=str(log_level),
    )
    log.debug("RunConfig: %s", asdict(run_config))
    return run_config
