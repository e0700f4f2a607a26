"""
Async plumbing between a token/text stream and the content parser.

Any async iterable of str chunks is a valid source. `TextStreamSource` is the
interface an LLM client adapter implements; `IterableTextStream` wraps plain
iterables for tests and replays.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, AsyncGenerator, AsyncIterable, AsyncIterator, Awaitable, Callable, Iterable, Optional, Tuple, Union

from genui.stream.content_blocks import ContentBlock, ProvisionalBlock
from genui.stream.content_parser import StreamingContentParser

logger = logging.getLogger(__name__)

BlockCallback = Callable[[ContentBlock], Union[None, Awaitable[None]]]
ProvisionalCallback = Callable[[Optional[ProvisionalBlock]], Union[None, Awaitable[None]]]


class TextStreamSource(ABC):
    """Abstract source of text chunks, delivered in order."""

    @abstractmethod
    def __aiter__(self) -> AsyncIterator[str]:
        ...


class IterableTextStream(TextStreamSource):
    """Adapt a sync or async iterable of chunks, optionally pausing between them."""

    def __init__(self, chunks: Union[Iterable[str], AsyncIterable[str]], delay: float = 0.0):
        self._chunks = chunks
        self._delay = delay

    def __aiter__(self) -> AsyncIterator[str]:
        return self._iterate()

    async def _iterate(self) -> AsyncGenerator[str, None]:
        if hasattr(self._chunks, "__aiter__"):
            async for chunk in self._chunks:  # type: ignore[union-attr]
                yield chunk
                await asyncio.sleep(self._delay)
            return
        for chunk in self._chunks:  # type: ignore[union-attr]
            yield chunk
            await asyncio.sleep(self._delay)


@dataclass
class StreamOutcome:
    blocks: Tuple[ContentBlock, ...] = ()
    completed: bool = False
    chunk_count: int = 0
    char_count: int = 0
    errors: list = field(default_factory=list)


async def _call(callback: Optional[Callable[..., Any]], *args: Any) -> None:
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


async def consume_stream(
    source: AsyncIterable[str],
    parser: Optional[StreamingContentParser] = None,
    on_block: Optional[BlockCallback] = None,
    on_provisional: Optional[ProvisionalCallback] = None,
) -> StreamOutcome:
    """
    Drive a parser from a stream until it ends.

    Finalized blocks are reported through `on_block` as soon as they close.
    If the surrounding task is cancelled the parser is cancelled too, keeping
    what was already finalized, and CancelledError propagates.
    """
    parser = parser or StreamingContentParser()
    outcome = StreamOutcome()
    try:
        async for chunk in source:
            outcome.chunk_count += 1
            outcome.char_count += len(chunk)
            for block in parser.feed(chunk):
                await _call(on_block, block)
            await _call(on_provisional, parser.provisional)
    except asyncio.CancelledError:
        parser.cancel()
        logger.debug(f"Stream cancelled after {outcome.chunk_count} chunks; {len(parser.blocks)} blocks kept")
        raise
    except Exception:
        parser.cancel()
        raise

    for block in parser.finish():
        await _call(on_block, block)
    await _call(on_provisional, None)
    outcome.blocks = parser.blocks
    outcome.completed = True
    outcome.errors = [block for block in parser.blocks if block.kind == "error"]
    return outcome


async def iter_content_blocks(
    source: AsyncIterable[str],
    parser: Optional[StreamingContentParser] = None,
) -> AsyncGenerator[ContentBlock, None]:
    """Lazily yield blocks as they close. Closing the generator early cancels the parser."""
    parser = parser or StreamingContentParser()
    try:
        async for chunk in source:
            for block in parser.feed(chunk):
                yield block
        for block in parser.finish():
            yield block
    finally:
        if not parser.is_finished:
            parser.cancel()
