"""Allow ``python -m torrconf``."""

from __future__ import annotations

from torrconf.cli.main import main

if __name__ == "__main__":
    main()
