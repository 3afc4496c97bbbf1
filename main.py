#!/usr/bin/env python3
"""BoostTimer — entry point.

Run with:
    python main.py
    python -m boosttimer
"""

from boosttimer.__main__ import main


if __name__ == "__main__":
    main()
