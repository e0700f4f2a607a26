"""
Tests for the async stream helpers.

Tests cover:
- consume_stream with sync and async callbacks
- iter_content_blocks laziness
- Cancellation keeps finalized blocks and propagates
- Source errors cancel the parser
"""

import asyncio
import json

import pytest

from genui.config.settings import GenUIRuntimeSettings
from genui.stream.content_parser import StreamingContentParser, parse_content
from genui.stream.stream_source import IterableTextStream, consume_stream, iter_content_blocks


# ============================================================
# Test Data
# ============================================================

FENCE = "`" * 3

MESSAGE = {"surfaceUpdate": {"components": [{"id": "m1", "component": {"Markdown": {"data": {"content": "x"}}}}]}}

TEXT = f"Intro\n{FENCE}json\n{json.dumps(MESSAGE)}\n{FENCE}\nOutro"


def chunked(text, size=5):
    return [text[i:i + size] for i in range(0, len(text), size)]


# ============================================================
# Fixtures
# ============================================================

@pytest.fixture
def parser():
    return StreamingContentParser(settings=GenUIRuntimeSettings())


@pytest.fixture
def async_chunks():
    """Factory for an async generator over chunks."""
    def _make(chunks, fail_after=None):
        async def _gen():
            for index, chunk in enumerate(chunks):
                if fail_after is not None and index == fail_after:
                    raise ConnectionError("stream dropped")
                yield chunk
                await asyncio.sleep(0)
        return _gen()
    return _make


# ============================================================
# consume_stream Tests
# ============================================================

class TestConsumeStream:
    """Driving a parser from an async source."""

    @pytest.mark.asyncio
    async def test_blocks_match_one_shot(self, parser):
        seen = []
        outcome = await consume_stream(IterableTextStream(chunked(TEXT)), parser, on_block=seen.append)
        assert outcome.completed
        assert list(outcome.blocks) == parse_content(TEXT)
        assert seen == list(outcome.blocks)
        assert outcome.chunk_count == len(chunked(TEXT))
        assert outcome.char_count == len(TEXT)
        assert outcome.errors == []

    @pytest.mark.asyncio
    async def test_async_source_and_async_callbacks(self, parser, async_chunks):
        seen = []
        provisional = []

        async def on_block(block):
            seen.append(block.kind)

        async def on_provisional(block):
            provisional.append(block)

        await consume_stream(
            IterableTextStream(async_chunks(chunked(TEXT))),
            parser,
            on_block=on_block,
            on_provisional=on_provisional,
        )
        assert seen == ["text", "a2ui", "text"]
        assert provisional[-1] is None
        assert any(item is not None and item.fence_kind == "json" for item in provisional)

    @pytest.mark.asyncio
    async def test_error_blocks_reported(self, parser):
        outcome = await consume_stream(IterableTextStream([f"{FENCE}json\n{{oops\n{FENCE}\n"]), parser)
        assert [block.error_kind for block in outcome.errors] == ["json-parse"]

    @pytest.mark.asyncio
    async def test_source_error_cancels_parser(self, parser, async_chunks):
        with pytest.raises(ConnectionError):
            await consume_stream(IterableTextStream(async_chunks(chunked(TEXT), fail_after=6)), parser)
        assert parser.is_cancelled
        assert [block.kind for block in parser.blocks] == ["text"]

    @pytest.mark.asyncio
    async def test_cancellation_keeps_finalized_blocks(self, parser):
        first_block = asyncio.Event()

        async def on_block(block):
            first_block.set()

        chunks = chunked(TEXT) + ["never"] * 100
        task = asyncio.create_task(
            consume_stream(IterableTextStream(chunks, delay=0.01), parser, on_block=on_block)
        )
        await first_block.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert parser.is_cancelled
        assert parser.blocks
        assert parser.blocks[0].kind == "text"
        assert parser.finish() == []


# ============================================================
# iter_content_blocks Tests
# ============================================================

class TestIterContentBlocks:
    """The lazy generator form."""

    @pytest.mark.asyncio
    async def test_yields_all_blocks(self):
        blocks = [block async for block in iter_content_blocks(IterableTextStream(chunked(TEXT, 3)))]
        assert blocks == parse_content(TEXT)

    @pytest.mark.asyncio
    async def test_closing_early_cancels_parser(self, parser):
        generator = iter_content_blocks(IterableTextStream(chunked(TEXT, 3)), parser)
        first = await generator.__anext__()
        assert first.kind == "text"
        await generator.aclose()
        assert parser.is_cancelled
        assert not parser.is_finished
