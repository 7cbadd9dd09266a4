#!/usr/bin/env python3
"""FocusMove — entry point.

Run with:
    python main.py
    python -m focusmove
"""

from focusmove.__main__ import main


if __name__ == "__main__":
    main()
