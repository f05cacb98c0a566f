#!/usr/bin/env python3
"""StretchTimer — entry point.

Run with:
    python main.py
    python -m stretchtimer
"""

from stretchtimer.__main__ import main


if __name__ == "__main__":
    main()
