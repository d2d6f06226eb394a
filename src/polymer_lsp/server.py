"""Language Server Protocol adapter over ``LocalEditorService``."""

from __future__ import annotations

import logging

from lsprotocol.types import (
    CompletionItem,
    CompletionItemKind,
    CompletionList,
    CompletionOptions,
    CompletionParams,
    DidChangeTextDocumentParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    InitializeParams,
    InsertTextFormat,
    Location,
    MarkupContent,
    MarkupKind,
    Position,
    Range,
    ReferenceParams,
    TextDocumentSyncKind,
    TextEdit,
)
from pygls.server import LanguageServer
from pygls.uris import from_fs_path, to_fs_path
from pygls.workspace import PositionCodec

from . import models
from .__version import __version__
from .config import EditorServiceConfig
from .loader import FSUrlLoader
from .service import LocalEditorService

logger = logging.getLogger(__name__)


class PolymerLanguageServer(LanguageServer):
    """Language Server for Polymer elements."""

    def __init__(self, config: EditorServiceConfig, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.config = config
        self.workspace_root: str | None = None
        self._default_position_codec = PositionCodec()
        self.service = LocalEditorService(loader=FSUrlLoader(config.root_dir))

    def set_workspace_root(self, root: str) -> None:
        """Resolve imports against ``root`` from now on."""
        self.workspace_root = root
        self.service = LocalEditorService(loader=FSUrlLoader(root))

    def uri_to_url(self, uri: str) -> str:
        return to_fs_path(uri) or uri

    def url_to_uri(self, url: str) -> str:
        return from_fs_path(url) or url

    @property
    def position_codec(self) -> PositionCodec:
        """Codec for the position encoding agreed with the client, UTF-16 before initialization."""
        try:
            return self.workspace.position_codec
        except RuntimeError:
            return self._default_position_codec

    async def sync_document(self, uri: str) -> None:
        """Send the current workspace text of ``uri`` to the editor service."""
        document = self.workspace.get_text_document(uri)
        await self.service.file_changed(self.uri_to_url(uri), document.source)

    async def completions(self, uri: str, position: Position) -> list[CompletionItem]:
        url = self.uri_to_url(uri)
        text = await self.service.get_document_text(url)
        if text is None:
            return []
        lines = text.split("\n")
        codec = self.position_codec
        # Columns are code points past this point
        position = codec.position_from_client_units(
            lines, Position(line=position.line, character=position.character)
        )
        result = await self.service.get_typeahead_completions_at_position(
            url, models.Position(line=position.line, column=position.character)
        )
        if result is None:
            return []
        if isinstance(result, models.ElementCompletion):
            edit_range = codec.range_to_client_units(lines, _tag_replace_range(text, position))
            return _element_items(result, edit_range)
        if isinstance(result, models.AttributesCompletion):
            return [_attribute_item(attribute) for attribute in result.attributes]
        if isinstance(result, models.AttributeValuesCompletion):
            return [
                _capability_item(value, CompletionItemKind.Value, insert_text=value.autocompletion)
                for value in result.attributes
            ]
        return [_capability_item(prop, CompletionItemKind.Property) for prop in result.properties]

    async def references(self, uri: str, position: Position) -> list[Location] | None:
        url = self.uri_to_url(uri)
        text = await self.service.get_document_text(url)
        if text is None:
            return None
        position = self.position_codec.position_from_client_units(
            text.split("\n"), Position(line=position.line, character=position.character)
        )
        ranges = await self.service.get_references_for_feature_at_position(
            url, models.Position(line=position.line, column=position.character)
        )
        if ranges is None:
            return None
        locations = []
        for source_range in ranges:
            range_text = await self.service.get_document_text(source_range.url) or ""
            locations.append(
                Location(
                    uri=self.url_to_uri(source_range.url),
                    range=self.position_codec.range_to_client_units(
                        range_text.split("\n"),
                        Range(
                            start=Position(source_range.start.line, source_range.start.column),
                            end=Position(source_range.end.line, source_range.end.column),
                        ),
                    ),
                )
            )
        return locations


def _tag_replace_range(text: str, position: Position) -> Range:
    """Range of the ``<partial`` typed before the cursor, or an empty range at the cursor."""
    lines = text.split("\n")
    line = lines[position.line] if position.line < len(lines) else ""
    before = line[: position.character]
    bracket = before.rfind("<")
    if bracket != -1 and all(c.isalnum() or c in "-_.:" for c in before[bracket + 1 :]):
        start = Position(position.line, bracket)
    else:
        start = position
    return Range(start=start, end=position)


def _element_items(result: models.ElementCompletion, edit_range: Range) -> list[CompletionItem]:
    return [
        CompletionItem(
            label=element.tagname,
            kind=CompletionItemKind.Class,
            documentation=MarkupContent(kind=MarkupKind.Markdown, value=element.description),
            insert_text_format=InsertTextFormat.Snippet,
            text_edit=TextEdit(range=edit_range, new_text=element.expand_to_snippet),
            sort_text=element.tagname,
        )
        for element in result.elements
    ]


def _attribute_item(attribute: models.AttributeDescriptor) -> CompletionItem:
    kind = CompletionItemKind.Event if attribute.name.startswith("on-") else CompletionItemKind.Field
    return _capability_item(attribute, kind)


def _capability_item(
    descriptor: models.CapabilityDescriptor,
    kind: CompletionItemKind,
    insert_text: str | None = None,
) -> CompletionItem:
    detail = descriptor.type or ""
    if descriptor.inherited_from:
        detail = f"{detail} (from {descriptor.inherited_from})".strip()
    return CompletionItem(
        label=descriptor.name,
        kind=kind,
        detail=detail or None,
        documentation=MarkupContent(kind=MarkupKind.Markdown, value=descriptor.description)
        if descriptor.description
        else None,
        insert_text=insert_text,
        sort_text=descriptor.sort_key,
    )


def create_server(config: EditorServiceConfig | None = None) -> PolymerLanguageServer:
    """Build a language server with all features registered."""
    config = config if config is not None else EditorServiceConfig.from_environment()
    config.apply()
    server = PolymerLanguageServer(
        config,
        "polymer-lsp",
        __version__,
        text_document_sync_kind=TextDocumentSyncKind.Incremental,
    )

    @server.feature("initialize")
    def initialize(params: InitializeParams) -> None:
        """Capture the workspace root that imports are resolved against."""
        root = None
        if params.workspace_folders:
            root = server.uri_to_url(params.workspace_folders[0].uri)
        elif params.root_uri:
            root = server.uri_to_url(params.root_uri)
        elif params.root_path:
            root = params.root_path
        if root:
            server.set_workspace_root(root)
        logger.info(f"Workspace root: {server.workspace_root or config.root_dir}")

    @server.feature("textDocument/didOpen")
    async def did_open(params: DidOpenTextDocumentParams) -> None:
        uri = params.text_document.uri
        await server.service.file_changed(server.uri_to_url(uri), params.text_document.text)
        logger.info(f"Opened document: {uri}")

    @server.feature("textDocument/didChange")
    async def did_change(params: DidChangeTextDocumentParams) -> None:
        await server.sync_document(params.text_document.uri)

    @server.feature("textDocument/didClose")
    def did_close(params: DidCloseTextDocumentParams) -> None:
        logger.debug(f"Closed document: {params.text_document.uri}")

    @server.feature(
        "textDocument/completion",
        CompletionOptions(trigger_characters=list(config.trigger_characters)),
    )
    async def completion(params: CompletionParams) -> CompletionList:
        items = await server.completions(params.text_document.uri, params.position)
        return CompletionList(is_incomplete=False, items=items)

    @server.feature("textDocument/references")
    async def references(params: ReferenceParams) -> list[Location] | None:
        return await server.references(params.text_document.uri, params.position)

    return server
