"""
Hybrid renderer: content blocks -> rendered nodes.

Each block is rendered inside its own boundary. A failing block becomes a
RenderErrorNode in its slot and the blocks around it render normally.
Unknown component types and failed validation have their own fallback nodes.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set

from genui.a2ui.component_catalog import CatalogEntry, ComponentCatalog, get_component_catalog
from genui.a2ui.message_validator import validate_message
from genui.a2ui.protocol import ComponentEntry, InvalidEntry
from genui.a2ui.surface_state import SurfaceEntry, SurfaceState, apply_message, empty_surface
from genui.common.exceptions import JsxSyntaxError, RenderError
from genui.config.settings import GenUIRuntimeSettings, get_genui_runtime_settings
from genui.jsx.evaluator import ComponentBinding, evaluate_jsx
from genui.jsx.parser import parse_jsx
from genui.render.nodes import (
    FragmentNode,
    MarkdownNode,
    ParseErrorNode,
    ProvisionalNode,
    RenderedNode,
    RenderErrorNode,
    UnknownTypeNode,
    ValidationErrorNode,
)
from genui.stream.content_blocks import A2UIBlock, ContentBlock, ErrorBlock, JsxBlock, ProvisionalBlock, TextBlock
from genui.stream.content_parser import parse_content

logger = logging.getLogger(__name__)


class HybridRenderer:
    """
    Render text, JSX and A2UI blocks.

    Args:
        catalog: Component catalog. Defaults to the process catalog.
        bindings: Extra JSX component bindings, name -> callable(props, children).
        settings: Runtime settings. Defaults to the configured ones.
    """

    def __init__(
        self,
        catalog: Optional[ComponentCatalog] = None,
        bindings: Optional[Mapping[str, ComponentBinding]] = None,
        settings: Optional[GenUIRuntimeSettings] = None,
    ):
        self.catalog = catalog if catalog is not None else get_component_catalog()
        self.bindings: Dict[str, ComponentBinding] = dict(bindings or {})
        self.settings = settings or get_genui_runtime_settings()

    # ------------------------------------------------------------------
    # blocks
    # ------------------------------------------------------------------

    def render(
        self,
        blocks: Sequence[ContentBlock],
        bindings: Optional[Mapping[str, ComponentBinding]] = None,
        provisional: Optional[ProvisionalBlock] = None,
    ) -> List[RenderedNode]:
        nodes = [self.render_block(block, index, bindings) for index, block in enumerate(blocks)]
        if provisional is not None and self.settings.expose_provisional:
            nodes.append(ProvisionalNode(fence_kind=provisional.fence_kind, partial=provisional.partial))
        return nodes

    def render_text(self, text: str, bindings: Optional[Mapping[str, ComponentBinding]] = None) -> List[RenderedNode]:
        return self.render(parse_content(text, settings=self.settings), bindings)

    def render_block(
        self,
        block: ContentBlock,
        index: int = 0,
        bindings: Optional[Mapping[str, ComponentBinding]] = None,
    ) -> RenderedNode:
        block_kind = getattr(block, "kind", type(block).__name__)
        try:
            return self._dispatch(block, bindings)
        except Exception as exc:
            logger.exception(f"Block {index} ({block_kind}) failed to render")
            return RenderErrorNode(reason=str(exc), block_index=index, block_kind=block_kind)

    def _dispatch(self, block: ContentBlock, bindings: Optional[Mapping[str, ComponentBinding]]) -> RenderedNode:
        if isinstance(block, TextBlock):
            return MarkdownNode(text=block.text)
        if isinstance(block, ErrorBlock):
            return ParseErrorNode(error_kind=block.error_kind, reason=block.reason, raw=block.raw)
        if isinstance(block, JsxBlock):
            return self.render_jsx(block, bindings)
        if isinstance(block, A2UIBlock):
            return self.render_message(block.message)
        raise RenderError(f"Unsupported content block {type(block).__name__}")

    # ------------------------------------------------------------------
    # JSX
    # ------------------------------------------------------------------

    def jsx_bindings(self, bindings: Optional[Mapping[str, ComponentBinding]] = None) -> Dict[str, ComponentBinding]:
        merged: Dict[str, ComponentBinding] = {
            entry.type_name: self._catalog_jsx_binding(entry) for entry in self.catalog.entries()
        }
        merged.update(self.bindings)
        merged.update(bindings or {})
        return merged

    def _catalog_jsx_binding(self, entry: CatalogEntry) -> ComponentBinding:
        def _bind(props: Dict[str, Any], children: tuple) -> RenderedNode:
            component_id = str(props.get("id") or f"jsx-{entry.type_name.lower()}")
            if "data" in props:
                data = props["data"]
            else:
                data = {key: value for key, value in props.items() if key not in ("id", "key", "options")}
            clean_data, clean_options, errors = entry.validate(data, props.get("options"))
            if errors:
                return ValidationErrorNode(
                    type_name=entry.type_name,
                    component_id=component_id,
                    errors=tuple(errors),
                    raw=self._raw(props),
                )
            return entry.renderer()(component_id, clean_data or {}, clean_options or {}, tuple(children))

        return _bind

    def render_jsx(self, block: JsxBlock, bindings: Optional[Mapping[str, ComponentBinding]] = None) -> RenderedNode:
        tree = block.tree
        if tree is None:
            try:
                tree = parse_jsx(block.source, max_depth=self.settings.max_jsx_depth)
            except JsxSyntaxError as exc:
                return ParseErrorNode(error_kind="jsx-parse", reason=str(exc), raw=block.source)
        return evaluate_jsx(tree, self.jsx_bindings(bindings))

    # ------------------------------------------------------------------
    # A2UI
    # ------------------------------------------------------------------

    def render_message(self, message: Any) -> RenderedNode:
        """Render one A2UI message in its own message order, duplicates collapsed."""
        result = validate_message(message, self.catalog)
        if result.is_root_failure:
            return self._validation_node(result.invalid[0])

        local = apply_message(empty_surface(), result)
        slots: List[Any] = []
        seen: Set[str] = set()
        for item in result.in_message_order():
            if isinstance(item, ComponentEntry):
                if item.id in seen:
                    continue
                seen.add(item.id)
                slots.append(local.components[item.id])
            elif isinstance(item, InvalidEntry):
                slots.append(item)
        return FragmentNode(children=self._render_slots(slots, local))

    def render_surface(self, state: SurfaceState) -> FragmentNode:
        """Render a persistent surface, top-level components in insertion order."""
        return FragmentNode(children=self._render_slots(state.ordered(), state))

    def _render_slots(self, slots: Sequence[Any], state: SurfaceState) -> tuple:
        # Components referenced as a child render inside their parent. Any left
        # unreached (a reference cycle) render at their own position.
        referenced = self._referenced_ids(state)
        visited: Set[str] = set()
        rendered: Dict[int, RenderedNode] = {}
        for position, slot in enumerate(slots):
            if isinstance(slot, InvalidEntry):
                rendered[position] = self._validation_node(slot)
            elif slot.id not in referenced:
                rendered[position] = self._render_entry(slot, state, (), visited)
        for position, slot in enumerate(slots):
            if isinstance(slot, SurfaceEntry) and slot.id in referenced and slot.id not in visited:
                rendered[position] = self._render_entry(slot, state, (), visited)
        return tuple(rendered[position] for position in sorted(rendered))

    def _referenced_ids(self, state: SurfaceState) -> Set[str]:
        # Only components that will actually render their children can claim them.
        referenced: Set[str] = set()
        for entry in state.components.values():
            if not (entry.known and self.catalog.has(entry.type_name)):
                continue
            referenced.update(child for child in entry.children if child != entry.id and child in state.components)
        return referenced

    def _render_entry(
        self,
        entry: SurfaceEntry,
        state: SurfaceState,
        path: tuple,
        visited: Set[str],
    ) -> RenderedNode:
        if entry.id in path:
            return RenderErrorNode(
                reason=f"Cyclic child reference to '{entry.id}'",
                component_id=entry.id,
                type_name=entry.type_name,
            )
        visited.add(entry.id)
        catalog_entry = self.catalog.get(entry.type_name) if entry.known else None
        if catalog_entry is None:
            return UnknownTypeNode(
                type_name=entry.type_name,
                component_id=entry.id,
                raw=self._raw({"data": entry.data, "options": entry.options}),
            )

        child_path = path + (entry.id,)
        children = tuple(
            self._render_entry(state.components[child_id], state, child_path, visited)
            for child_id in entry.children
            if child_id in state.components
        )
        try:
            return catalog_entry.renderer()(entry.id, entry.data, entry.options, children)
        except Exception as exc:
            logger.exception(f"Component '{entry.id}' ({entry.type_name}) failed to render")
            return RenderErrorNode(reason=str(exc), component_id=entry.id, type_name=entry.type_name)

    def _validation_node(self, item: InvalidEntry) -> ValidationErrorNode:
        return ValidationErrorNode(
            type_name=item.type_name,
            component_id=item.component_id,
            errors=item.errors,
            raw=self._raw(item.entry),
        )

    def _raw(self, value: Any) -> Any:
        return value if self.settings.fallback_show_raw_payload else None


def render_blocks(
    blocks: Sequence[ContentBlock],
    bindings: Optional[Mapping[str, ComponentBinding]] = None,
    catalog: Optional[ComponentCatalog] = None,
) -> List[RenderedNode]:
    return HybridRenderer(catalog=catalog).render(blocks, bindings)
