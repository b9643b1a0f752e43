"""ImageBinds - Main entry point.

Bind clipboard images to letter keys:
- Left Ctrl + Shift + J, then a letter: save the clipboard image to that letter
- Left Ctrl + J, then a bound letter: put that letter's image back on the clipboard
"""

import argparse
import signal
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from .utils.logger import setup_logger
from .utils.constants import APP_NAME, APP_VERSION
from .core.context import AppContext
from .core.hotkey_engine import HotkeyEngine
from .data.config_manager import ConfigManager
from .data.persistence import BindingPersistence
from .input.hotkey_manager import HotkeyManager
from .output.clipboard import ClipboardBridge


class ImageBindsApp:
    """Main application class.

    Wires the key listener, clipboard and binding store together and
    runs the key event loop.
    """

    def __init__(self, debug: bool = False, config_file: Optional[Path] = None):
        """Initialize the application.

        Args:
            debug: Enable debug mode with verbose logging
            config_file: Alternate config file
        """
        setup_logger(debug=debug)
        logger.info(f"Starting {APP_NAME} v{APP_VERSION}")

        self.config = ConfigManager(config_file)

        # Config can only raise verbosity, never lower what --debug asked for
        if not debug and self.config.get("logging.debug", False):
            setup_logger(debug=True)

        self._init_components()

        self._is_running = False

        logger.info("Application initialized")

    def _init_components(self):
        """Initialize all application components."""
        self.persistence = BindingPersistence(
            Path(self.config.get("storage.data_file", "data.bin"))
        )
        self.context = AppContext.load(self.persistence)

        self.clipboard = ClipboardBridge()
        self.hotkey_manager = HotkeyManager()

        self.engine = HotkeyEngine(
            key_source=self.hotkey_manager,
            context=self.context,
            clipboard=self.clipboard,
        )
        self.engine.register()

    def run(self):
        """Start listening and block until stopped."""
        if self._is_running:
            return

        self.hotkey_manager.start()
        self._is_running = True
        logger.info(
            f"Application started with {len(self.context.store)} binds. "
            "Ctrl+Shift+J then a letter to save, Ctrl+J then a letter to restore."
        )

        def signal_handler(sig, frame):
            self.stop()

        signal.signal(signal.SIGINT, signal_handler)

        try:
            self.hotkey_manager.run_event_loop()
        except KeyboardInterrupt:
            pass
        finally:
            self.stop()

    def stop(self):
        """Stop the application."""
        if not self._is_running:
            return

        logger.info("Stopping application...")

        self.hotkey_manager.stop()
        self.context.shutdown()

        self._is_running = False
        logger.info("Application stopped")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description=f"{APP_NAME} - clipboard images on letter keys")
    parser.add_argument("--debug", action="store_true", help="Enable debug mode")
    parser.add_argument("--config", type=Path, default=None, help="Path to config file")

    args = parser.parse_args()

    try:
        app = ImageBindsApp(debug=args.debug, config_file=args.config)
    except RuntimeError as e:
        logger.error(f"Cannot start: {e}")
        sys.exit(1)

    app.run()


if __name__ == "__main__":
    main()
