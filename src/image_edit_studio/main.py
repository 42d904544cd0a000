"""
Image Edit Studio - Main Entry Point

This module provides the main entry point for the application.
"""

import argparse
import logging
import os
import sys


def configure_logging(verbose: bool = False) -> None:
    """Set up root logging; IMAGE_EDIT_STUDIO_LOG_LEVEL overrides the default."""
    level_name = os.environ.get("IMAGE_EDIT_STUDIO_LOG_LEVEL", "DEBUG" if verbose else "INFO")
    logging.basicConfig(
        level=getattr(logging, level_name.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for Image Edit Studio.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    # Ensure we're running Python 3.11+
    if sys.version_info < (3, 11):
        print("Error: Image Edit Studio requires Python 3.11 or later")
        return 1

    parser = argparse.ArgumentParser(prog="image-edit-studio")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    # Import Qt here to avoid import overhead if just checking version
    from PySide6.QtWidgets import QApplication

    from image_edit_studio import __version__
    from image_edit_studio.providers import get_registry
    from image_edit_studio.ui.main_window import MainWindow

    registry = get_registry()
    registry.load_config()

    # Create application instance
    app = QApplication(sys.argv[:1])
    app.setApplicationName("Image Edit Studio")
    app.setApplicationVersion(__version__)
    app.setOrganizationName("Image Edit Studio")

    # Create and show main window
    window = MainWindow(registry)
    window.show()

    # Run event loop
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
