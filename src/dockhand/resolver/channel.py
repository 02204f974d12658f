"""Interactive channel detection.

The workflows are often run as ``curl ... | bash``-style pipelines where
stdin is not the operator's terminal. Prompts must then go through the
controlling terminal instead, so the channel is looked up in order:
stdin (if it is a TTY), ``/dev/tty``, ``/dev/console``.
"""

import logging
import sys
from typing import Callable, Optional, Sequence, TextIO


logger = logging.getLogger(__name__)

TERMINAL_DEVICES = ("/dev/tty", "/dev/console")


class InteractiveChannel:
    """Line-oriented input/output path to a human operator."""

    def __init__(self, reader: TextIO, writer: TextIO, name: str, owned: bool = False):
        self.reader = reader
        self.writer = writer
        self.name = name
        self._owned = owned

    def write(self, text: str) -> None:
        self.writer.write(text)
        self.writer.flush()

    def read_line(self) -> Optional[str]:
        """Read one line; None at end of input."""
        line = self.reader.readline()
        if line == "":
            return None
        return line

    def close(self) -> None:
        if self._owned:
            self.reader.close()
            if self.writer is not self.reader:
                self.writer.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


def open_interactive_channel(
    stdin: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
    devices: Sequence[str] = TERMINAL_DEVICES,
    opener: Callable[..., TextIO] = open,
) -> Optional[InteractiveChannel]:
    """Return the first usable interactive channel, or None."""
    stdin = sys.stdin if stdin is None else stdin
    stderr = sys.stderr if stderr is None else stderr

    try:
        if stdin is not None and stdin.isatty():
            return InteractiveChannel(stdin, stderr, name="stdin")
    except ValueError:
        # closed stream
        pass

    # ttys are not seekable: separate read and write handles, never "r+"
    for device in devices:
        try:
            reader = opener(device, "r")
        except OSError as e:
            logger.debug(f"Cannot open {device}: {e}")
            continue
        try:
            writer = opener(device, "w")
        except OSError as e:
            reader.close()
            logger.debug(f"Cannot write to {device}: {e}")
            continue
        logger.debug(f"Using {device} for prompts")
        return InteractiveChannel(reader, writer, name=device, owned=True)

    return None
