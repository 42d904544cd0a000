"""
Entry point for running Image Edit Studio as a module.

Usage:
    python -m image_edit_studio
"""

import sys

from image_edit_studio.main import main

if __name__ == "__main__":
    sys.exit(main())
