# PYTHON_ARGCOMPLETE_OK
import sys
from typing import List, Optional

import argcomplete

from certvault import version
from certvault.commands.parsers import ENTRY_PARSER
from certvault.lib import logger
from certvault.lib.errors import CertvaultError, handle_error


def main(argv: Optional[List[str]] = None) -> None:
    if argv is None:
        argv = sys.argv[1:]

    debug = "-debug" in argv or "--debug" in argv
    if debug:
        argv = [arg for arg in argv if arg not in ["-debug", "--debug"]]

    logger.init(verbose=debug)

    print(version.BANNER, file=sys.stderr)

    for arg in argv:
        if arg.lower() in ["--version", "-v", "-version"]:
            return

    parser = ENTRY_PARSER.build_parser()

    argcomplete.autocomplete(parser, always_complete_options=False)

    if len(argv) == 0:
        parser.print_help()
        sys.exit(1)

    options = parser.parse_args(argv)

    try:
        ENTRY_PARSER.entry(options)
    except CertvaultError as e:
        logger.logging.error(f"Got {e.describe()}")
        handle_error()
        sys.exit(1)
    except Exception as e:
        logger.logging.error(f"Got error: {e}")
        handle_error()
        sys.exit(1)


if __name__ == "__main__":
    main()
