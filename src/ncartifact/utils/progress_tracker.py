"""
Progress tracking module for the ncartifact application.

This module provides a class for tracking the progress of an upload
with dual progress bars (overall and current file).
"""

from threading import Lock
from typing import List

import humanize
from rich.live import Live

from ncartifact.utils.utils import console, create_upload_progress


class ProgressTracker:
    """
    Track the progress of an upload with two progress bars.

    - An overall progress bar showing the bytes sent across all files
    - A per-file progress bar showing the file being sent

    Updates are thread-safe, so the tracker can be shared by parallel uploads.
    """

    def __init__(self, sizes: List[int], label: str = "Uploading"):
        """
        Initialize the progress tracker.

        Args:
            sizes: Size in bytes of every file to upload
            label: Verb displayed in front of the current file
        """
        self.label = label
        self.progress = create_upload_progress()
        self.total_files = len(sizes)
        self.total_size = sum(sizes)
        self.total_size_human = humanize.naturalsize(self.total_size, binary=True)

        self.uploaded_size = 0
        self.files_completed_count = 0
        self.lock = Lock()

        self.overall_task = None
        self.file_task = None
        self.live = None

    def __enter__(self) -> 'ProgressTracker':
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()

    def start(self) -> None:
        """Add the progress bars and start displaying them."""
        self.overall_task = self.progress.add_task(
            self._overall_description(),
            total=max(self.total_size, 1),
            size=f"0 B/{self.total_size_human}"
        )
        self.file_task = self.progress.add_task(
            f"[bold yellow]{self.label}",
            total=1,
            size="0 B",
            visible=False  # Hide until the first file starts
        )
        self.live = Live(self.progress, console=console, refresh_per_second=4, transient=True)
        self.live.start()

    def stop(self) -> None:
        """Stop displaying the progress bars."""
        if self.live:
            self.live.stop()
            self.live = None

    def start_file(self, display_path: str, file_size: int) -> None:
        """
        Show the file being uploaded.

        Args:
            display_path: The path to display in the progress bar
            file_size: The size of the file in bytes
        """
        with self.lock:
            self.progress.update(
                self.file_task,
                completed=0,
                total=max(file_size, 1),
                description=f"[bold yellow]{self.label}: {display_path}",
                size=humanize.naturalsize(file_size, binary=True),
                visible=True
            )

    def advance(self, bytes_transferred: int) -> None:
        """
        Record bytes sent for the current file.

        Args:
            bytes_transferred: Number of bytes in this chunk
        """
        with self.lock:
            self.uploaded_size += bytes_transferred
            self.progress.advance(self.file_task, bytes_transferred)
            self.progress.update(
                self.overall_task,
                completed=self.uploaded_size,
                size=f"{humanize.naturalsize(self.uploaded_size, binary=True)}/{self.total_size_human}"
            )

    def complete_file(self, display_path: str, file_size: int, success: bool = True,
                      counted: bool = False) -> None:
        """
        Mark a file as completed.

        Args:
            display_path: The path to display in the progress bar
            file_size: The size of the file in bytes
            success: Whether the file was uploaded successfully
            counted: Whether the bytes were already reported through advance
        """
        with self.lock:
            self.files_completed_count += 1
            if success:
                if not counted:
                    self.uploaded_size += file_size
                self.progress.update(
                    self.file_task,
                    completed=max(file_size, 1),
                    description=f"[bold green]Uploaded: {display_path}"
                )
            else:
                self.progress.update(
                    self.file_task,
                    completed=0,
                    description=f"[bold red]Error: {display_path}",
                    size="Error"
                )
            self.progress.update(
                self.overall_task,
                completed=self.uploaded_size,
                description=self._overall_description(),
                size=f"{humanize.naturalsize(self.uploaded_size, binary=True)}/{self.total_size_human}"
            )

    def _overall_description(self) -> str:
        return f"[bold blue]Overall Progress ({self.files_completed_count}/{self.total_files} files)"
