"""Allow running rssdd with ``python -m rssdd``."""

from __future__ import annotations

from rssdd.cli.main import main

if __name__ == "__main__":
    main()
