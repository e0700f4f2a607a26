"""Incremental parsing of streamed LLM output into content blocks."""

from .content_blocks import A2UIBlock, ContentBlock, ErrorBlock, JsxBlock, ProvisionalBlock, TextBlock
from .content_parser import ParserMode, ParserState, StreamingContentParser, parse_content
from .json_repair import loads_tolerant, repair_json
from .stream_source import IterableTextStream, StreamOutcome, TextStreamSource, consume_stream, iter_content_blocks

__all__ = [
    "A2UIBlock",
    "ContentBlock",
    "ErrorBlock",
    "IterableTextStream",
    "JsxBlock",
    "ParserMode",
    "ParserState",
    "ProvisionalBlock",
    "StreamOutcome",
    "StreamingContentParser",
    "TextBlock",
    "TextStreamSource",
    "consume_stream",
    "iter_content_blocks",
    "loads_tolerant",
    "parse_content",
    "repair_json",
]
