"""
Utilities for the ncartifact CLI application.

This module provides utility functions for display and logging.
"""

import logging
import os
from datetime import datetime

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, TextColumn, BarColumn, TimeRemainingColumn
from rich.text import Text

from ncartifact.core import constants

# Create a shared console instance for consistent output
console = Console()


name = "Nextcloud artifact uploader"
version = "Version 1.0.0"

def info(text: Text) -> None:
    """
    Display an information message in a styled panel.

    Args:
        text (Text): The text to display
    """
    panel = Panel(text, title=name, title_align="left", subtitle=f"{version}", subtitle_align="left")
    console.print(panel)
    return None

def error(message: str) -> None:
    """Display an error message in a styled panel."""
    info(Text(f"Error: {message}", style="bold red"))

def create_upload_progress() -> Progress:
    """
    Create and return a Progress object with two progress bars.

    One for overall progress and one for the current file.

    Returns:
        Progress: The configured Progress object
    """
    return Progress(
        TextColumn("{task.description}", justify="right"),
        BarColumn(bar_width=40),
        "[progress.percentage]{task.percentage:>3.0f}%",
        "•",
        TimeRemainingColumn(),
        "•",
        TextColumn("{task.fields[size]}", justify="right"),
        refresh_per_second=10,
        expand=True,
        transient=True,  # Use transient to update in place
        console=console  # Use the shared console instance
    )

def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    Configure and return a logger for the application.

    Log files are written to the folder named by NCARTIFACT_LOG_DIR ('log' by default).

    Args:
        verbose (bool, optional): If True, display debug messages in the console. Defaults to False.

    Returns:
        logging.Logger: The configured logger
    """
    log_folder = os.environ.get(constants.ENV_LOG_DIR, constants.DEFAULT_LOG_DIR)
    os.makedirs(log_folder, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_filename = os.path.join(log_folder, f"log_{timestamp}.log")

    # Remove all handlers for root logger
    logger = logging.getLogger()
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(logging.DEBUG)

    # File handler (DEBUG level) with UTF-8 encoding
    fh = logging.FileHandler(log_filename, encoding='utf-8')
    fh.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    fh.setFormatter(file_formatter)
    logger.addHandler(fh)

    # Rich console handler (INFO or DEBUG level based on verbose)
    rich_handler = RichHandler(
        console=console,
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=False,
        level=logging.DEBUG if verbose else logging.INFO
    )
    logger.addHandler(rich_handler)

    # urllib3 logs every connection at DEBUG level
    logging.getLogger("urllib3").setLevel(logging.INFO)

    return logger
