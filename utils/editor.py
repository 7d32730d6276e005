"""
Card authoring through an external text editor.

The buffer is a temporary markdown file with a front matter header:

    ---
    title: Binary search
    deck: Algorithms
    ---

    free text body...

The editor is re-opened until both title and deck are filled in. A
non-zero exit status from the editor, or declining to edit again after an
invalid buffer, cancels authoring. The temporary file is always removed.
"""

import logging
import os
import subprocess
import tempfile
from typing import Callable

from rich.prompt import Confirm

from config import editor_command
from utils.errors import EditorLaunchError
from utils.utils import parse_card_text


def ask_edit_again() -> bool:
    return Confirm.ask("Title and deck are required. Edit again?", default=True)


class CardEditor:
    def __init__(
        self,
        command: str | None = None,
        confirm_retry: Callable[[], bool] = ask_edit_again,
    ):
        self.command = editor_command(command)
        self.confirm_retry = confirm_retry

    def run(self, path: str) -> int:
        """Run the editor on `path` in the foreground and return its exit status."""
        args = self.command + [path]
        logging.debug(f"Launching editor: {args}")
        try:
            return subprocess.run(args).returncode
        except OSError as e:
            raise EditorLaunchError(f"Failed to launch editor {self.command[0]!r}: {e}") from e

    def author(self, text: str) -> dict[str, str] | None:
        """
        Let the user edit `text` until it has a title and a deck.

        returns: {'title': str, 'deck': str, 'body': str}, or None if cancelled
        """
        fd, path = tempfile.mkstemp(prefix='revise_card_', suffix='.md')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(text)

            while True:
                status = self.run(path)
                if status != 0:
                    logging.info(f"Editor exited with status {status}, authoring cancelled")
                    return None

                with open(path, encoding='utf-8') as f:
                    parsed = parse_card_text(f.read())
                if parsed:
                    return parsed

                logging.info("Card buffer is missing title or deck")
                if not self.confirm_retry():
                    return None
        finally:
            os.unlink(path)
