"""Package entry point for ``python -m media_assistant``.

Delegates to the CLI's main(); see media_assistant.cli for commands.
"""

import sys

if __name__ == "__main__":
    from media_assistant.cli import main
    sys.exit(main())
