#!/usr/bin/env python3
"""Allow ``python -m maketorrent``."""

from __future__ import annotations

from maketorrent.cli.main import main

if __name__ == "__main__":
    main()
