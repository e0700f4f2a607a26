"""
genui: the A2UI message protocol and a hybrid streaming renderer for LLM output.

Streamed text is split into prose, JSX and A2UI blocks by
`StreamingContentParser`; `HybridRenderer` turns blocks into node trees, with
per-block error boundaries; A2UI messages are validated against the component
catalog and folded into a persistent surface.
"""

from genui.a2ui import (
    ComponentCatalog,
    SurfaceState,
    apply_message,
    build_validation_feedback,
    empty_surface,
    get_catalog_prompt,
    get_component_catalog,
    validate_message,
)
from genui.common.exceptions import GenUIError
from genui.config.settings import GenUIRuntimeSettings, configure_genui_runtime, load_genui_config
from genui.render.hybrid_renderer import HybridRenderer, render_blocks
from genui.session.chat_session import ChatSession, SessionSnapshot
from genui.storage.store_factory import create_generation_store
from genui.stream import StreamingContentParser, consume_stream, parse_content

__version__ = "0.1.0"

__all__ = [
    "ChatSession",
    "ComponentCatalog",
    "GenUIError",
    "GenUIRuntimeSettings",
    "HybridRenderer",
    "SessionSnapshot",
    "StreamingContentParser",
    "SurfaceState",
    "apply_message",
    "build_validation_feedback",
    "configure_genui_runtime",
    "consume_stream",
    "create_generation_store",
    "empty_surface",
    "get_catalog_prompt",
    "get_component_catalog",
    "load_genui_config",
    "parse_content",
    "render_blocks",
    "validate_message",
]
