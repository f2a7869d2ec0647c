"""Host-facing facade over the index and the per-document analyses.

An editor integration (or the CLI) owns one ``AzslWorkspace``. It holds the
settings, the ``SymbolIndex`` and the open documents, and forwards document
events and point queries to the analysis modules. Nothing here raises except
``load_settings`` failing with ``ConfigError``.
"""

from __future__ import annotations
from pathlib import Path
from typing import Iterable

from azslsense.analysis.index import SymbolIndex
from azslsense.analysis.quickfix import provide_code_actions
from azslsense.analysis.resolver import (
    provide_completions, provide_document_links, provide_hover, resolve_definition,
)
from azslsense.analysis.symbols import IndexStats
from azslsense.analysis.validator import validate_document
from azslsense.builtins.docs import builtin_name_from_uri, render_builtin_document
from azslsense.config import AzslSettings
from azslsense.document import (
    AZSL_LANGUAGE_ID, CodeAction, CompletionItem, Diagnostic, DocumentLink,
    Hover, Location, Position, TextDocument,
)
from azslsense.logging import get_logger

log = get_logger(__name__)


class AzslWorkspace:
    """One corpus index plus the documents currently open on top of it."""

    def __init__(self, settings: AzslSettings | None = None):
        self.settings = settings if settings is not None else AzslSettings()
        self.index = SymbolIndex()
        self.documents: dict[str, TextDocument] = {}

    @property
    def root_path(self) -> Path | None:
        return self.settings.root_path

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def startup(self) -> IndexStats:
        log.info("workspace_startup", root=str(self.root_path) if self.root_path else None)
        return self.reindex()

    def reindex(self, root: str | Path | None = None) -> IndexStats:
        """Rebuild the index from ``root`` (or the configured root)."""
        target = Path(root) if root is not None else self.root_path
        log.info("reindex_started", root=str(target) if target else None)
        self.index.rebuild(target, max_files=self.settings.max_files,
                           extensions=self.settings.extensions)
        for document in self.documents.values():
            self.index_document(document)
        stats = self.index.stats()
        log.info("reindex_finished", **vars(stats))
        return stats

    def apply_settings(self, settings: AzslSettings) -> bool:
        """Swap settings; reindex only when the corpus root changed."""
        previous = self.root_path
        self.settings = settings
        if settings.root_path == previous:
            return False
        log.info("settings_changed_reindex", old=str(previous), new=str(settings.root_path))
        self.reindex()
        return True

    def stats(self) -> IndexStats:
        return self.index.stats()

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def index_document(self, document: TextDocument) -> None:
        if document.is_azsl:
            self.index.ingest_document(document.text, document.uri)

    def open_document(self, uri: str, text: str, language_id: str = AZSL_LANGUAGE_ID,
                      version: int = 0) -> TextDocument:
        document = TextDocument(uri, text, language_id, version)
        self.documents[uri] = document
        self.index_document(document)
        return document

    def change_document(self, uri: str, text: str, version: int | None = None) -> TextDocument:
        document = self.documents.get(uri)
        if document is None:
            return self.open_document(uri, text, version=version or 0)
        document.update(text, version)
        self.index_document(document)
        return document

    def close_document(self, uri: str) -> None:
        if self.documents.pop(uri, None) is not None:
            self.index.forget_document(uri)

    def open_documents(self) -> Iterable[TextDocument]:
        return self.documents.values()

    def _document(self, document: TextDocument | str) -> TextDocument | None:
        if isinstance(document, TextDocument):
            return document
        return self.documents.get(document)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def validate(self, document: TextDocument | str) -> list[Diagnostic]:
        doc = self._document(document)
        return validate_document(self.index, doc) if doc is not None else []

    def provide_hover(self, document: TextDocument | str, position: Position) -> Hover | None:
        doc = self._document(document)
        return provide_hover(self.index, doc, position) if doc is not None else None

    def provide_definition(self, document: TextDocument | str,
                           position: Position) -> Location | None:
        doc = self._document(document)
        return resolve_definition(self.index, doc, position) if doc is not None else None

    def provide_completions(self, document: TextDocument | str,
                            position: Position) -> list[CompletionItem]:
        doc = self._document(document)
        return provide_completions(self.index, doc, position) if doc is not None else []

    def provide_document_links(self, document: TextDocument | str) -> list[DocumentLink]:
        doc = self._document(document)
        return provide_document_links(self.index, doc) if doc is not None else []

    def provide_code_actions(self, document: TextDocument | str,
                             diagnostics: Iterable[Diagnostic] | None = None) -> list[CodeAction]:
        doc = self._document(document)
        if doc is None:
            return []
        if diagnostics is None:
            diagnostics = self.validate(doc)
        return provide_code_actions(doc, diagnostics, self.index)

    def resolve_include(self, include_path: str) -> str | None:
        return self.index.resolve_include(include_path)

    def render_builtin_document(self, uri_or_name: str) -> str:
        """Text of the built-in documentation page for a name or its virtual URI."""
        name = builtin_name_from_uri(uri_or_name) or uri_or_name
        return render_builtin_document(name)
