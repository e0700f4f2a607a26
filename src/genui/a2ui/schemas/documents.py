from __future__ import annotations

from typing import Any, Literal, Optional, Union

from pydantic import Field

from .base import DataSchema, Dimension, Integer, Number, OptionsSchema

CodeLanguage = Literal[
    "javascript", "typescript", "python", "java", "csharp", "cpp", "c", "go", "rust",
    "php", "ruby", "html", "css", "scss", "json", "xml", "yaml", "markdown", "sql",
    "bash", "shell", "plaintext",
]
CodeEditorTheme = Literal[
    "light", "dark", "github-light", "github-dark", "vscode-light", "vscode-dark",
    "sublime", "material", "dracula", "nord",
]
MarkdownMode = Literal["edit", "preview", "live"]


class MarkdownData(DataSchema):
    content: str
    title: Optional[str] = None


class MarkdownOptions(OptionsSchema):
    height: Optional[Dimension] = None
    width: Optional[Dimension] = None
    mode: Optional[MarkdownMode] = None
    preview: Optional[MarkdownMode] = None
    hide_toolbar: Optional[bool] = Field(default=None, alias="hideToolbar")
    enable_scroll: Optional[bool] = Field(default=None, alias="enableScroll")
    highlight_enable: Optional[bool] = Field(default=None, alias="highlightEnable")


class CodeEditorData(DataSchema):
    code: str
    language: Optional[CodeLanguage] = None
    filename: Optional[str] = None
    read_only: Optional[bool] = Field(default=None, alias="readOnly")


class CodeEditorOptions(OptionsSchema):
    height: Optional[Dimension] = None
    width: Optional[Dimension] = None
    theme: Optional[CodeEditorTheme] = None
    line_numbers: Optional[bool] = Field(default=None, alias="lineNumbers")
    line_wrapping: Optional[bool] = Field(default=None, alias="lineWrapping")
    tab_size: Optional[Number] = Field(default=None, alias="tabSize")
    editable: Optional[bool] = None
    placeholder: Optional[str] = None


class SVGPreviewData(DataSchema):
    svg: str = Field(min_length=1)
    title: Optional[str] = None
    filename: Optional[str] = None


class SVGPreviewOptions(OptionsSchema):
    width: Optional[Dimension] = None
    height: Optional[Dimension] = None
    show_source: Optional[bool] = Field(default=None, alias="showSource")
    isolate: Optional[bool] = None


class JSONViewerData(DataSchema):
    # Any JSON value, including null.
    value: Any = Field(...)
    root_name: Optional[str] = Field(default=None, alias="rootName")
    collapsed: Optional[Union[bool, Integer]] = None


class JSONViewerOptions(OptionsSchema):
    height: Optional[Dimension] = None
    width: Optional[Dimension] = None
    theme: Optional[Literal["light", "dark", "github", "vscode"]] = None
    display_data_types: Optional[bool] = Field(default=None, alias="displayDataTypes")
    display_object_size: Optional[bool] = Field(default=None, alias="displayObjectSize")
    enable_clipboard: Optional[bool] = Field(default=None, alias="enableClipboard")


MARKDOWN_EXAMPLE = {"content": "# Notes\n\n- first point\n- second point", "title": "Notes"}
CODE_EDITOR_EXAMPLE = {"code": "print('hello')", "language": "python", "filename": "hello.py"}
SVG_PREVIEW_EXAMPLE = {
    "svg": '<svg xmlns="http://www.w3.org/2000/svg" width="40" height="40"><circle cx="20" cy="20" r="18"/></svg>',
    "title": "Circle",
}
JSON_VIEWER_EXAMPLE = {"value": {"name": "genui", "tags": ["a2ui", "streaming"]}, "rootName": "package"}
