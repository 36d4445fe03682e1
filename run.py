"""
Development runner for the ENDEcode GUI.
Runs the application from a source checkout without installation.
"""

import os
import sys

sys.path.insert(0, os.path.abspath("src"))

from gui.main import main

if __name__ == "__main__":
    raise SystemExit(main())
