"""Global logging and error handling utilities"""
import sys
import logging
import traceback
from PyQt5.QtWidgets import QMessageBox

# Detect debug mode - True if running from source, False if packaged
DEBUG_MODE = not getattr(sys, 'frozen', False)

logger = logging.getLogger(__name__)

_main_window = None

def set_main_window(window):
    """Set the main window reference for showing popups"""
    global _main_window
    _main_window = window

def loggerRaise(e: Exception, user_message: str = None, title: str = "Error"):
    """Handle exceptions with optional popup in release mode
    
    Args:
        e: The exception to handle
        user_message: User-friendly message to show in popup (optional)
        title: Title for the popup dialog
    
    In DEBUG_MODE:
        - Just raises the exception (shows full traceback)
    
    In RELEASE_MODE:
        - Logs the full traceback
        - Shows popup with user message or exception string
        - Then raises the exception
    """
    if DEBUG_MODE:
        raise e

    logger.error("Unhandled error:\n%s", traceback.format_exc())
    _show_popup(title, user_message if user_message else str(e))
    raise e

def report_failure(e: Exception, user_message: str = None, title: str = "Error"):
    """Show a recoverable failure (camera/file/template) without raising
    
    Args:
        e: The failure to report
        user_message: User-friendly message (defaults to str(e))
        title: Title for the popup dialog
    """
    logger.warning("%s: %s", title, e)
    _show_popup(title, user_message if user_message else str(e))

def _show_popup(title, message):
    if _main_window:
        QMessageBox.critical(_main_window, title, message)
    else:
        logger.error("ERROR POPUP (no window): %s - %s", title, message)
