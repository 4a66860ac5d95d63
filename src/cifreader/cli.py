# cli entrypoint
from __future__ import annotations

import logging
import sys
from typing import List, Optional

from .cif_file import CIFFile, LoadStatus
from .codec import write_commands
from .config import build_arg_parser, load_config_and_args
from .logging_utils import setup_logging

log = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point: load one CIF file and report the result."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    run_config = load_config_and_args(args)
    setup_logging(run_config.log_level)

    cif_file = CIFFile(
        run_config.path,
        on_error=run_config.on_error,
        encoding=run_config.encoding,
        max_input_bytes=run_config.max_input_bytes,
    )
    status = cif_file.load(validate_only=run_config.validate_only)

    for message in cif_file.messages:
        print(message, file=sys.stderr)

    if run_config.print_commands:
        write_commands(cif_file.commands, sys.stdout)

    if status is not LoadStatus.OK:
        raise SystemExit(1)

    log.info(
        "%s: %s (%d commands)",
        run_config.path,
        "syntax OK" if run_config.validate_only else "loaded",
        len(cif_file.commands),
    )


if __name__ == "__main__":
    main()
