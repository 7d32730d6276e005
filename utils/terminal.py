"""
Terminal input and drawing for the interactive session.

Input is read in cbreak mode and multiplexed with two fixed-rate timers
(tick and render) into one ordered batch of events per poll. Signal keys
are turned off so Ctrl-C arrives as a key. Drawing goes through a rich Live
display on the alternate screen. `suspended()` hands the terminal back,
e.g. while an external editor runs.
"""

import codecs
import logging
import os
import selectors
import sys
import termios
import time
import tty
from collections import deque
from contextlib import contextmanager
from typing import NamedTuple

from rich.console import Console, RenderableType
from rich.live import Live

from utils.keys import split_keys

KEY = 'key'
TICK = 'tick'
RENDER = 'render'


class Event(NamedTuple):
    kind: str
    key: str | None = None


class Terminal:
    def __init__(
        self,
        tick_rate: float,
        frame_rate: float,
        console: Console | None = None,
        fd: int | None = None,
    ):
        self.console = console or Console()
        self.fd = sys.stdin.fileno() if fd is None else fd
        self.tick_interval = 1.0 / tick_rate
        self.frame_interval = 1.0 / frame_rate
        self.live: Live | None = None
        self._saved_attrs = None
        self._selector = selectors.DefaultSelector()
        self._decoder = codecs.getincrementaldecoder('utf-8')(errors='replace')
        # Start of an escape sequence whose remaining bytes are still unread.
        self._carry = ''
        self._queue: deque[Event] = deque()
        self._next_tick = 0.0
        self._next_render = 0.0

    def enter(self) -> None:
        self._saved_attrs = termios.tcgetattr(self.fd)
        tty.setcbreak(self.fd)
        attrs = termios.tcgetattr(self.fd)
        attrs[tty.LFLAG] &= ~termios.ISIG
        termios.tcsetattr(self.fd, termios.TCSAFLUSH, attrs)

        self._selector.register(self.fd, selectors.EVENT_READ)
        self.live = Live(console=self.console, screen=True, auto_refresh=False)
        self.live.start()
        self._next_render = 0.0

    def exit(self) -> None:
        if self._saved_attrs is None:
            return
        if self.live is not None:
            self.live.stop()
            self.live = None
        self._selector.unregister(self.fd)
        termios.tcsetattr(self.fd, termios.TCSADRAIN, self._saved_attrs)
        self._saved_attrs = None

    @contextmanager
    def suspended(self):
        logging.debug("Suspending terminal")
        self.exit()
        try:
            yield
        finally:
            # Keys typed for the editor must not leak into the session.
            self._queue.clear()
            self._carry = ''
            self.enter()
            logging.debug("Terminal resumed")

    def draw(self, renderable: RenderableType) -> None:
        self.live.update(renderable, refresh=True)

    def next_events(self) -> list[Event]:
        """Block until the next key or timer deadline and return every pending event."""
        now = time.monotonic()
        timeout = max(0.0, min(self._next_tick, self._next_render) - now)

        if self._selector.select(timeout):
            data = self._decoder.decode(os.read(self.fd, 1024))
            keys, self._carry = split_keys(self._carry + data)
            for key in keys:
                self._queue.append(Event(KEY, key))

        now = time.monotonic()
        if now >= self._next_tick:
            self._queue.append(Event(TICK))
            self._next_tick = now + self.tick_interval
        if now >= self._next_render:
            self._queue.append(Event(RENDER))
            self._next_render = now + self.frame_interval

        events = list(self._queue)
        self._queue.clear()
        return events
