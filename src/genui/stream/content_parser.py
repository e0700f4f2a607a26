"""
Streaming Content Parser: splits a growing LLM text buffer into content blocks.

States:
    PROSE        plain text, accumulating into the current TextBlock
    IN_FENCE     inside a ```json or ```jsx fence, waiting for its closing line
    PROSE_FENCE  inside any other fenced code block; its text stays prose

The parser only acts on information that can no longer change: a fence
opener is recognised once its whole info line (up to the newline) is in the
buffer, and a fence closes once its whole closing line is. A ```json or
```jsx fence may also carry content on its opener line and close with a
marker at the end of a content line. Feeding the same text in any chunking
therefore produces identical blocks.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from genui.common.exceptions import InvalidInputError, JsonFenceError, JsxSyntaxError, StreamStateError
from genui.config.settings import GenUIRuntimeSettings, get_genui_runtime_settings
from genui.jsx.parser import parse_jsx
from genui.stream.content_blocks import (
    A2UIBlock,
    ContentBlock,
    ErrorBlock,
    JsxBlock,
    ProvisionalBlock,
    TextBlock,
)
from genui.stream.json_repair import loads_tolerant

logger = logging.getLogger(__name__)

FENCE_CHAR = "`"
MIN_FENCE_LENGTH = 3
A2UI_ENVELOPE_KEY = "surfaceUpdate"
_INFO_WORD = re.compile(r"[A-Za-z0-9_+.#-]*")


class ParserMode(Enum):
    PROSE = "prose"
    IN_FENCE = "in_fence"
    PROSE_FENCE = "prose_fence"


@dataclass(frozen=True)
class ParserState:
    mode: ParserMode
    fence_kind: Optional[str]
    cursor: int
    buffer_length: int
    finished: bool
    cancelled: bool


@dataclass(frozen=True)
class _OpenFence:
    kind: str
    language: str
    start: int
    content_start: int
    marker_length: int


class StreamingContentParser:
    """
    Incremental transducer from streamed text to ContentBlocks.

    One instance belongs to one in-flight message. Call `feed` with each new
    chunk (or `sync` with the whole text so far), then `finish` at the end of
    the stream or `cancel` when the stream is abandoned.
    """

    def __init__(self, settings: Optional[GenUIRuntimeSettings] = None):
        self.settings = settings or get_genui_runtime_settings()
        self._json_languages = frozenset(self.settings.json_fence_languages)
        self._jsx_languages = frozenset(self.settings.jsx_fence_languages)

        self._buffer = ""
        self._blocks: List[ContentBlock] = []
        self._mode = ParserMode.PROSE
        self._fence: Optional[_OpenFence] = None
        self._prose_fence_length = 0
        self._text_start = 0
        self._scan = 0
        self._hold: Optional[int] = None
        self._finished = False
        self._cancelled = False

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------

    @property
    def blocks(self) -> Tuple[ContentBlock, ...]:
        return tuple(self._blocks)

    @property
    def buffer(self) -> str:
        return self._buffer

    @property
    def state(self) -> ParserState:
        return ParserState(
            mode=self._mode,
            fence_kind=self._fence.kind if self._fence else None,
            cursor=self._scan,
            buffer_length=len(self._buffer),
            finished=self._finished,
            cancelled=self._cancelled,
        )

    @property
    def is_finished(self) -> bool:
        return self._finished

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    @property
    def provisional(self) -> Optional[ProvisionalBlock]:
        """The in-progress region, for a "still generating" view. None once done."""
        if self._finished or self._cancelled or not self.settings.expose_provisional:
            return None
        if self._mode is ParserMode.IN_FENCE and self._fence is not None:
            partial = self._buffer[self._fence.content_start:]
            return ProvisionalBlock(fence_kind=self._fence.kind, partial=partial, start=self._fence.start)
        end = self._hold if self._hold is not None else len(self._buffer)
        partial = self._buffer[self._text_start:end]
        if not partial.strip():
            return None
        return ProvisionalBlock(fence_kind="text", partial=partial, start=self._text_start)

    def feed(self, chunk: str) -> List[ContentBlock]:
        """
        Append a chunk and return the blocks it finalized.

        Raises:
            InvalidInputError: chunk is not a str.
            StreamStateError: the parser has already finished.
        """
        if not isinstance(chunk, str):
            raise InvalidInputError("StreamingContentParser.feed expects a str chunk", expected=str, actual=chunk)
        if self._cancelled:
            logger.debug("Ignoring chunk fed to a cancelled parser")
            return []
        if self._finished:
            raise StreamStateError("Cannot feed a finished parser")
        if not chunk:
            return []
        self._buffer += chunk
        return self._advance(eof=False)

    def sync(self, full_text: str) -> List[ContentBlock]:
        """Accept the whole text received so far; only the unseen suffix is parsed."""
        if not isinstance(full_text, str):
            raise InvalidInputError("StreamingContentParser.sync expects a str", expected=str, actual=full_text)
        if not full_text.startswith(self._buffer):
            raise StreamStateError(
                "Snapshot does not extend the text already parsed",
                context={"parsed_length": len(self._buffer), "snapshot_length": len(full_text)},
            )
        return self.feed(full_text[len(self._buffer):])

    def finish(self) -> List[ContentBlock]:
        """End of stream: flush trailing prose and close any open fence at EOF."""
        if self._cancelled or self._finished:
            return []
        emitted = self._advance(eof=True)
        tail: List[ContentBlock] = []
        if self._mode is ParserMode.IN_FENCE and self._fence is not None:
            logger.debug(f"Closing unterminated {self._fence.kind} fence at end of stream")
            tail.append(self._close_fence(self._buffer[self._fence.content_start:], len(self._buffer)))
        else:
            text_block = self._flush_prose(len(self._buffer))
            if text_block is not None:
                tail.append(text_block)
        self._blocks.extend(tail)
        emitted.extend(tail)
        self._mode = ParserMode.PROSE
        self._fence = None
        self._hold = None
        self._finished = True
        return emitted

    def cancel(self) -> None:
        """Stop parsing. Finalized blocks stay; the open region is dropped."""
        if self._finished:
            return
        if self._fence is not None:
            logger.debug(f"Parser cancelled inside an open {self._fence.kind} fence; dropping partial content")
        self._cancelled = True
        self._fence = None
        self._hold = None

    # ------------------------------------------------------------------
    # state machine
    # ------------------------------------------------------------------

    def _advance(self, eof: bool) -> List[ContentBlock]:
        emitted: List[ContentBlock] = []
        while True:
            if self._mode is ParserMode.PROSE:
                progressed = self._scan_prose(eof, emitted)
            else:
                progressed = self._scan_fence(eof, emitted)
            if not progressed:
                break
        self._blocks.extend(emitted)
        return emitted

    def _scan_prose(self, eof: bool, emitted: List[ContentBlock]) -> bool:
        buf = self._buffer
        self._hold = None
        pos = buf.find(FENCE_CHAR * MIN_FENCE_LENGTH, self._scan)
        if pos < 0:
            self._scan = max(self._scan, len(buf) - (MIN_FENCE_LENGTH - 1))
            return False

        run_end = pos
        while run_end < len(buf) and buf[run_end] == FENCE_CHAR:
            run_end += 1
        line_end = buf.find("\n", run_end)
        if line_end < 0:
            if not eof:
                self._scan = pos
                self._hold = pos
                return False
            line_end = len(buf)

        if pos > 0 and buf[pos - 1] == "\\":
            self._scan = run_end
            return True

        word_start = run_end
        while word_start < line_end and buf[word_start] in " \t":
            word_start += 1
        word = _INFO_WORD.match(buf, word_start, line_end).group(0)
        language = word.lower()
        rest = buf[word_start + len(word):line_end]
        line_start = buf.rfind("\n", 0, pos) + 1
        at_line_start = not buf[line_start:pos].strip()
        content_start = min(line_end + 1, len(buf))

        kind = None
        if language in self._json_languages:
            kind = "json"
        elif language in self._jsx_languages:
            kind = "jsx"
        if kind is not None and rest.strip():
            if word_start == run_end:
                # Content starts on the opener line: ```json {...}
                content_start = line_end - len(rest.lstrip())
            else:
                kind = None

        if kind is not None:
            text_block = self._flush_prose(pos)
            if text_block is not None:
                emitted.append(text_block)
            self._fence = _OpenFence(
                kind=kind,
                language=language,
                start=pos,
                content_start=content_start,
                marker_length=run_end - pos,
            )
            self._mode = ParserMode.IN_FENCE
            self._scan = content_start
            logger.debug(f"Opened {kind} fence at offset {pos}")
            return True

        if at_line_start:
            self._mode = ParserMode.PROSE_FENCE
            self._prose_fence_length = run_end - pos
            self._scan = content_start
            return True

        # Inline run of backticks inside a prose line.
        self._scan = run_end
        return True

    def _scan_fence(self, eof: bool, emitted: List[ContentBlock]) -> bool:
        buf = self._buffer
        marker_length = self._fence.marker_length if self._fence else self._prose_fence_length
        line_start = self._scan
        while line_start < len(buf):
            newline = buf.find("\n", line_start)
            if newline < 0 and not eof:
                break
            line_end = newline if newline >= 0 else len(buf)
            consumed_end = line_end + 1 if newline >= 0 else len(buf)

            in_fence = self._mode is ParserMode.IN_FENCE and self._fence is not None
            content_end = self._closing_offset(buf[line_start:line_end], marker_length, trailing=in_fence)
            if content_end is not None:
                if in_fence:
                    content = buf[self._fence.content_start:line_start + content_end]
                    emitted.append(self._close_fence(content, consumed_end))
                    self._text_start = consumed_end
                self._mode = ParserMode.PROSE
                self._scan = consumed_end
                return True
            line_start = consumed_end

        self._scan = line_start
        return False

    @staticmethod
    def _closing_offset(line: str, marker_length: int, trailing: bool) -> Optional[int]:
        """
        Where the fence content ends within `line`, or None if the line does not close it.

        A closing marker normally stands on its own line. With `trailing`, a
        marker at the end of a content line also closes the fence.
        """
        body = line.rstrip()
        run = len(body) - len(body.rstrip(FENCE_CHAR))
        if run < max(marker_length, MIN_FENCE_LENGTH):
            return None
        before = body[:-run].rstrip()
        if before and not trailing:
            return None
        return len(before)

    # ------------------------------------------------------------------
    # block construction
    # ------------------------------------------------------------------

    def _flush_prose(self, end: int) -> Optional[TextBlock]:
        start = self._text_start
        self._text_start = end
        text = self._buffer[start:end]
        if not text.strip():
            return None
        return TextBlock(text=text, span=(start, end))

    def _close_fence(self, content: str, end: int) -> ContentBlock:
        fence = self._fence
        assert fence is not None
        self._fence = None
        if content.endswith("\n"):
            content = content[:-1]
        if content.endswith("\r"):
            content = content[:-1]
        span = (fence.start, end)

        if fence.kind == "json":
            value, reason = loads_tolerant(content, tolerant=self.settings.tolerant_json)
            if reason is not None:
                logger.debug(f"JSON fence at offset {fence.start} failed to parse: {reason}")
                return ErrorBlock(error_kind=JsonFenceError.kind, raw=content, reason=reason, span=span)
            if isinstance(value, dict) and A2UI_ENVELOPE_KEY in value:
                return A2UIBlock(message=value, raw=content, span=span)
            return TextBlock(text=self._buffer[fence.start:end].rstrip("\r\n"), span=span)

        try:
            tree = parse_jsx(content, max_depth=self.settings.max_jsx_depth)
        except JsxSyntaxError as exc:
            logger.debug(f"JSX fence at offset {fence.start} failed to parse: {exc}")
            return ErrorBlock(error_kind=JsxSyntaxError.kind, raw=content, reason=str(exc), span=span)
        return JsxBlock(source=content, tree=tree, language=fence.language, span=span)


def parse_content(text: str, settings: Optional[GenUIRuntimeSettings] = None) -> List[ContentBlock]:
    """Parse a complete text in one shot."""
    parser = StreamingContentParser(settings=settings)
    parser.feed(text)
    parser.finish()
    return list(parser.blocks)
