# =============================================================================
# htmlterm Entry Point for `python -m htmlterm`
# =============================================================================
# Equivalent to running the 'htmlterm' command after installation.
# =============================================================================

import sys

from htmlterm.cli import main

if __name__ == "__main__":
    sys.exit(main())
