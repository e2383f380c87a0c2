"""
EventDesk launcher script (PyInstaller entry / `python eventdesk.py`).

All logic lives in the desk_core package; see desk_core/__init__.py.
"""

import sys

from desk_core.runner import cli


if __name__ == "__main__":
    sys.exit(cli())
