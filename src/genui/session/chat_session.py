"""
Chat session: the message history plus the A2UI surface built up by the
assistant's replies.

A session owns at most one parser per in-flight assistant message. Every A2UI
block that parser finalizes is validated and folded into the surface exactly
once. Validation failures never touch the surface; their feedback text is
kept so the next model turn can correct itself.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, AsyncIterable, Dict, List, Literal, Mapping, Optional, Tuple
from uuid import uuid4

from pydantic import BaseModel, Field

from genui.a2ui.component_catalog import ComponentCatalog, get_component_catalog
from genui.a2ui.message_validator import build_validation_feedback, validate_message
from genui.a2ui.surface_state import SurfaceState, apply_message, empty_surface
from genui.common.exceptions import StreamStateError
from genui.config.settings import GenUIRuntimeSettings, get_genui_runtime_settings
from genui.render.hybrid_renderer import HybridRenderer
from genui.render.nodes import FragmentNode
from genui.stream.content_blocks import A2UIBlock, ContentBlock
from genui.stream.content_parser import StreamingContentParser
from genui.stream.stream_source import consume_stream

logger = logging.getLogger(__name__)

MessageRole = Literal["user", "assistant", "system"]


def new_message_id() -> str:
    return f"msg_{uuid4().hex[:12]}"


def new_session_id() -> str:
    return f"ses_{uuid4().hex[:12]}"


class ChatMessage(BaseModel):
    id: str = Field(default_factory=new_message_id, min_length=1, max_length=128)
    role: MessageRole
    content: str = ""
    created_at: float = Field(default_factory=lambda: time.time())


@dataclass(frozen=True)
class SessionSnapshot:
    """Everything needed to restore a conversation: history and surface."""

    messages: Tuple[ChatMessage, ...] = ()
    surface_state: SurfaceState = field(default_factory=empty_surface)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "messages": [message.model_dump(mode="json") for message in self.messages],
            "surface_state": self.surface_state.to_dict(),
        }

    @classmethod
    def from_dict(cls, raw: Optional[Mapping[str, Any]]) -> "SessionSnapshot":
        raw = raw or {}
        messages = tuple(ChatMessage.model_validate(item) for item in raw.get("messages") or [])
        return cls(messages=messages, surface_state=SurfaceState.from_dict(raw.get("surface_state")))


class ChatSession:
    """
    One conversation with a persistent A2UI surface.

    Args:
        session_id: Stable id; generated when omitted.
        catalog: Component catalog for validation and rendering.
        settings: Runtime settings handed to parsers and the renderer.
    """

    def __init__(
        self,
        session_id: Optional[str] = None,
        catalog: Optional[ComponentCatalog] = None,
        settings: Optional[GenUIRuntimeSettings] = None,
    ):
        self.session_id = session_id or new_session_id()
        self.catalog = catalog if catalog is not None else get_component_catalog()
        self.settings = settings or get_genui_runtime_settings()
        self.messages: List[ChatMessage] = []
        self.surface: SurfaceState = empty_surface()
        self.pending_feedback: List[str] = []
        self._active: Dict[int, Tuple[str, StreamingContentParser]] = {}

    # ------------------------------------------------------------------
    # messages
    # ------------------------------------------------------------------

    def add_user_message(self, text: str) -> ChatMessage:
        message = ChatMessage(role="user", content=text)
        self.messages.append(message)
        return message

    def begin_assistant_message(self, message_id: Optional[str] = None) -> StreamingContentParser:
        """Start an assistant reply; feed its chunks through `feed` or `absorb_block`."""
        parser = StreamingContentParser(settings=self.settings)
        self._active[id(parser)] = (message_id or new_message_id(), parser)
        return parser

    def feed(self, parser: StreamingContentParser, chunk: str) -> List[ContentBlock]:
        self._require_active(parser)
        blocks = parser.feed(chunk)
        for block in blocks:
            self.absorb_block(block)
        return blocks

    def absorb_block(self, block: ContentBlock) -> SurfaceState:
        """Fold one finalized block into the surface. Non-A2UI blocks are ignored."""
        if not isinstance(block, A2UIBlock):
            return self.surface
        result = validate_message(block.message, self.catalog)
        self.surface = apply_message(self.surface, result)
        feedback = build_validation_feedback(result)
        if feedback:
            self.pending_feedback.append(feedback)
        return self.surface

    def complete_assistant_message(self, parser: StreamingContentParser) -> ChatMessage:
        """Finish the parser, absorb its tail blocks and record the reply."""
        message_id, _ = self._require_active(parser)
        for block in parser.finish():
            self.absorb_block(block)
        return self._record_reply(message_id, parser, parser.buffer)

    def cancel_assistant_message(self, parser: StreamingContentParser) -> ChatMessage:
        """
        Abandon a reply mid-stream.

        Already finalized blocks (and their surface updates) stay; the reply
        text is cut at the end of the last finalized block.
        """
        message_id, _ = self._require_active(parser)
        parser.cancel()
        blocks = parser.blocks
        content = parser.buffer[: blocks[-1].span[1]] if blocks else ""
        return self._record_reply(message_id, parser, content)

    async def stream_assistant_message(self, source: AsyncIterable[str]) -> ChatMessage:
        """Consume an async chunk source as one assistant reply."""
        parser = self.begin_assistant_message()
        try:
            await consume_stream(source, parser, on_block=self.absorb_block)
        except BaseException:
            self.cancel_assistant_message(parser)
            raise
        message_id, _ = self._require_active(parser)
        return self._record_reply(message_id, parser, parser.buffer)

    def take_feedback(self) -> str:
        """Pop accumulated validation feedback for the next model turn."""
        feedback = "\n\n".join(self.pending_feedback)
        self.pending_feedback = []
        return feedback

    # ------------------------------------------------------------------
    # surface
    # ------------------------------------------------------------------

    def reset_surface(self) -> None:
        self.surface = empty_surface()

    def render(self, renderer: Optional[HybridRenderer] = None) -> FragmentNode:
        renderer = renderer or HybridRenderer(catalog=self.catalog, settings=self.settings)
        return renderer.render_surface(self.surface)

    # ------------------------------------------------------------------
    # persistence
    # ------------------------------------------------------------------

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(messages=tuple(self.messages), surface_state=self.surface)

    def restore(self, snapshot: SessionSnapshot) -> None:
        """Replace history and surface. In-flight replies are cancelled first."""
        for _, parser in list(self._active.values()):
            parser.cancel()
        self._active.clear()
        self.messages = list(snapshot.messages)
        self.surface = snapshot.surface_state
        self.pending_feedback = []

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _require_active(self, parser: StreamingContentParser) -> Tuple[str, StreamingContentParser]:
        active = self._active.get(id(parser))
        if active is None or active[1] is not parser:
            raise StreamStateError("Parser is not an in-flight reply of this session")
        return active

    def _record_reply(self, message_id: str, parser: StreamingContentParser, content: str) -> ChatMessage:
        self._active.pop(id(parser), None)
        message = ChatMessage(id=message_id, role="assistant", content=content)
        self.messages.append(message)
        logger.debug(f"Session {self.session_id}: recorded reply {message_id} ({len(parser.blocks)} blocks)")
        return message
