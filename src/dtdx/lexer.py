"""Generic state-machine lexing engine.

A scanner is a set of state functions. Each one reads the source through
the cursor primitives, emits zero or more tokens, and returns the next
state, or None to stop::

    def number_state(lx):
        lx.accept_run("0123456789")
        lx.emit(NUMBER)
        return None

    lx = Lexer("123", number_state, None).start()
    tok = lx.next_token()

The state graph runs on its own producer thread. Tokens reach the consumer
through a bounded queue, so the producer is never more than ``buffer_size``
tokens ahead of whoever calls next_token().
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable, Iterator
from types import TracebackType
from typing import Generic, Optional, TypeVar

from dtdx.cursor import Cursor
from dtdx.tokens import ERROR, Span, Token, TokenNames

logger = logging.getLogger(__name__)

S = TypeVar("S")

StateFn = Callable[["Lexer[S]"], Optional["StateFn[S]"]]

# End-of-stream marker placed on the queue by the producer.
_CLOSED = object()


class _Cancelled(Exception):
    """Unwinds the producer after the consumer called cancel()."""


class Lexer(Cursor, Generic[S]):
    """Run a state graph over *source*, streaming tokens to one consumer.

    *state* is the scanner's own per-session data (for DTDX, the indent
    stack); the engine never looks inside it.
    """

    def __init__(
        self,
        source: str,
        start_state: StateFn[S] | None,
        state: S,
        *,
        names: TokenNames | None = None,
        buffer_size: int = 2,
        source_file: str | None = None,
    ) -> None:
        if buffer_size < 1:
            raise ValueError(f"buffer_size must be at least 1, got {buffer_size}")
        super().__init__(source)
        self.state = state
        self.names = names
        self.source_file = source_file
        self._start_state = start_state
        self._tokens: queue.Queue[object] = queue.Queue(maxsize=buffer_size)
        self._cancelled = threading.Event()
        self._thread: threading.Thread | None = None
        self._failure: BaseException | None = None
        self._done = False

    # ------------------------------------------------------------------
    # Consumer API
    # ------------------------------------------------------------------

    def start(self) -> Lexer[S]:
        """Begin running the state graph on a producer thread."""
        if self._thread is not None:
            raise RuntimeError("lexer already started")
        self._thread = threading.Thread(
            target=self._run,
            name=f"dtdx-lexer-{self._label()}",
            daemon=True,
        )
        self._thread.start()
        return self

    def next_token(self) -> Token | None:
        """Block until the next token is available; None once the stream is closed."""
        if self._thread is None:
            raise RuntimeError("lexer not started")
        if self._done:
            return None
        item = self._tokens.get()
        if item is _CLOSED:
            self._done = True
            if self._failure is not None:
                failure, self._failure = self._failure, None
                raise failure
            return None
        assert isinstance(item, Token)
        return item

    def cancel(self) -> None:
        """Stop the producer and close the stream from the consumer side."""
        if self._done:
            return
        self._done = True
        self._cancelled.set()
        # Free queue slots so a producer blocked in put() wakes up and
        # sees the cancellation on its next emission.
        while True:
            try:
                self._tokens.get_nowait()
            except queue.Empty:
                break
        logger.debug("lexer %s cancelled by consumer", self._label())

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the producer thread; return True if it has finished."""
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def __iter__(self) -> Iterator[Token]:
        while (tok := self.next_token()) is not None:
            yield tok

    def __enter__(self) -> Lexer[S]:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.cancel()

    # ------------------------------------------------------------------
    # Scanner API
    # ------------------------------------------------------------------

    def emit(self, tt: int) -> None:
        """Deliver the pending text as a token of type *tt*."""
        tok = Token(tt, self.current(), self._span())
        self.ignore()
        self._put(tok)

    def errorf(self, fmt: str, *args: object) -> StateFn[S] | None:
        """Deliver a terminal ERROR token and return the stop state (None).

        State functions end with ``return lx.errorf(...)``.
        """
        message = fmt % args if args else fmt
        self._put(Token(ERROR, message, self._span()))
        return None

    # ------------------------------------------------------------------
    # Producer internals
    # ------------------------------------------------------------------

    def _span(self) -> Span:
        return Span(self.position_at(self.token_start), self.position_at(self.position))

    def _put(self, item: object) -> None:
        if self._cancelled.is_set():
            raise _Cancelled
        self._tokens.put(item)

    def _run(self) -> None:
        logger.debug("lexer %s started", self._label())
        state = self._start_state
        try:
            while state is not None:
                state = state(self)
        except _Cancelled:
            logger.debug("lexer %s stopped after cancellation", self._label())
            return
        except Exception as exc:
            logger.debug("lexer %s state function failed: %r", self._label(), exc)
            self._failure = exc
        else:
            logger.debug("lexer %s reached a terminal state", self._label())
        try:
            self._put(_CLOSED)
        except _Cancelled:
            pass

    def _label(self) -> str:
        return self.source_file or f"<{id(self):#x}>"
