"""ConsoleSession: state and operations behind the file admin console.

The session mirrors the files of the selected vector store. The mirror is
only changed after the vector store service confirms a write, and is
cleared whenever a different vector store is selected.

A module-level singleton is initialised in ``app/main.py``.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from app.vector_stores.errors import AttributeConstraintError, RemoteFailure
from app.vector_stores.schemas import FileRecord
from app.vector_stores.service import VectorStoreService

from . import csv_io
from .columns import MIN_COLUMN_WIDTH, ColumnLayout
from .errors import ConsoleStateError, CsvImportError
from .schemas import ImportSummary, TableRow

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_session: Optional["ConsoleSession"] = None


def get_console_session() -> Optional["ConsoleSession"]:
    """Return the global ConsoleSession, or None if not yet initialised."""
    return _session


def set_console_session(session: Optional["ConsoleSession"]) -> None:
    """Set (or replace) the global ConsoleSession instance."""
    global _session
    _session = session


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def find_file_for_import(files: List[FileRecord], file_name: str) -> Optional[FileRecord]:
    """Return the first file whose name matches ``file_name``.

    A file matches on its ``filename`` or ``name``, either exactly or with
    ``.pdf`` appended to ``file_name``.
    """
    with_pdf = file_name + ".pdf"
    for record in files:
        if (
            record.filename == file_name
            or record.name == file_name
            or record.filename == with_pdf
            or record.name == with_pdf
        ):
            return record
    return None


def _format_size(size: Optional[int]) -> str:
    return f"{size / 1024:.2f} KB" if size else "N/A"


def _format_created(created_at: Optional[int]) -> str:
    if not created_at:
        return "N/A"
    return datetime.fromtimestamp(created_at, tz=timezone.utc).date().isoformat()


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

class ConsoleSession:
    """Console state for one operator.

    Args:
        service: Vector store pass-through service.
        column_widths: Initial table column widths.
        min_column_width: Lower bound for resized columns.
    """

    def __init__(
        self,
        service: VectorStoreService,
        column_widths: Optional[Dict[str, int]] = None,
        min_column_width: int = MIN_COLUMN_WIDTH,
    ) -> None:
        self._service = service
        self.vector_store_id: Optional[str] = None
        self.files: List[FileRecord] = []
        self.columns = ColumnLayout(column_widths, min_width=min_column_width)
        self.import_summary: Optional[ImportSummary] = None

    # -----------------------------------------------------------------------
    # Vector store selection
    # -----------------------------------------------------------------------

    async def select_vector_store(self, vector_store_id: Optional[str]) -> List[FileRecord]:
        """Switch to another vector store and load its files.

        Selecting ``None`` leaves the console with an empty file list.
        """
        self.vector_store_id = vector_store_id or None
        self.files = []
        self.import_summary = None
        logger.info("[console] Selected vector store %s", self.vector_store_id)
        if self.vector_store_id is None:
            return []
        return await self.refresh()

    async def refresh(self) -> List[FileRecord]:
        """Reload the file mirror from the vector store service.

        Raises:
            ConsoleStateError: If no vector store is selected.
            RemoteFailure: If listing fails; the previous mirror is kept.
        """
        vector_store_id = self._require_vector_store()
        self.files = await self._service.list_files(vector_store_id)
        return self.files

    # -----------------------------------------------------------------------
    # Per-file actions
    # -----------------------------------------------------------------------

    def get_file(self, file_id: str) -> FileRecord:
        for record in self.files:
            if record.id == file_id:
                return record
        raise KeyError(file_id)

    def attributes_text(self, file_id: str) -> str:
        """Pretty-printed attributes to prefill the edit dialog."""
        return json.dumps(self.get_file(file_id).attributes, indent=2, ensure_ascii=False)

    async def edit_attributes(self, file_id: str, raw_json: str) -> FileRecord:
        """Save attributes typed into the edit dialog.

        Raises:
            KeyError: If the file is not in the mirror.
            AttributeConstraintError: If the text is not a JSON object or
                breaks the attribute limits.
            RemoteFailure: If the service rejects the update.
        """
        record = self.get_file(file_id)
        try:
            attributes = json.loads(raw_json)
        except ValueError as exc:
            raise AttributeConstraintError(f"Invalid JSON: {exc}") from exc
        if not isinstance(attributes, dict):
            raise AttributeConstraintError("Attributes must be a JSON object")

        await self._service.update_attributes(file_id, attributes, record.vector_store_id)
        updated = record.model_copy(update={"attributes": attributes})
        self.files = [updated if f.id == file_id else f for f in self.files]
        return updated

    async def delete_file(self, file_id: str) -> None:
        """Delete a file and drop it from the mirror.

        Raises:
            KeyError: If the file is not in the mirror.
            RemoteFailure: If the service rejects the delete.
        """
        record = self.get_file(file_id)
        await self._service.delete_file(file_id, record.vector_store_id)
        self.files = [f for f in self.files if f.id != file_id]

    # -----------------------------------------------------------------------
    # Table view
    # -----------------------------------------------------------------------

    def table_rows(self) -> List[TableRow]:
        return [
            TableRow(
                id=record.id,
                file_name=record.display_name,
                file_id=record.id,
                size=_format_size(record.bytes),
                created=_format_created(record.created_at),
                purpose=record.purpose or "N/A",
                vector_store_id=record.vector_store_id,
                attributes=json.dumps(record.attributes, indent=2, ensure_ascii=False),
            )
            for record in self.files
        ]

    # -----------------------------------------------------------------------
    # CSV export / import
    # -----------------------------------------------------------------------

    def export_csv(self) -> str:
        self._require_files()
        return csv_io.export_files_csv(self.files)

    async def import_csv(self, text: str) -> ImportSummary:
        """Apply a CSV attribute sheet to the loaded files.

        The whole sheet is parsed and validated first; any error aborts the
        import before a single update is sent. Rows are then matched by
        file name and updated one at a time, in sheet order. Unmatched rows
        and rejected updates are tallied without stopping the rest.

        Rows are matched against the files loaded when the import starts and
        written to that vector store, even if another one is selected while
        updates are in flight. In that case the new selection keeps its own
        file list and no summary.

        Raises:
            ConsoleStateError: If no vector store is selected or no files
                are loaded.
            CsvImportError: If parsing or validation fails. The abort is
                also kept as the session's import summary.
        """
        self._require_files()
        try:
            rows = csv_io.parse_import_csv(text)
        except CsvImportError as exc:
            logger.warning("[console] Import aborted (%s): %s", exc.kind, exc.message)
            self.import_summary = ImportSummary.aborted(exc.kind, exc.message)
            raise

        vector_store_id = self.vector_store_id
        files = list(self.files)

        summary = ImportSummary()
        for row in rows:
            record = find_file_for_import(files, row.file_name)
            if record is None:
                summary.record_not_found(row.file_name)
                continue
            try:
                await self._service.update_attributes(record.id, row.attributes, vector_store_id)
            except (RemoteFailure, AttributeConstraintError) as exc:
                summary.record_failure(row.file_name, str(exc))
            else:
                summary.record_success(row.file_name)

        logger.info(
            "[console] Import into %s finished: %d updated, %d not found, %d failed",
            vector_store_id,
            summary.succeeded.count,
            summary.not_found.count,
            summary.failed.count,
        )

        if self.vector_store_id != vector_store_id:
            logger.info(
                "[console] Selection changed to %s during import; leaving it untouched",
                self.vector_store_id,
            )
            return summary

        try:
            await self.refresh()
        except RemoteFailure as exc:
            logger.warning("[console] Could not refresh files after import: %s", exc)

        self.import_summary = summary
        return summary

    def dismiss_import_summary(self) -> None:
        self.import_summary = None

    # -----------------------------------------------------------------------
    # Internal
    # -----------------------------------------------------------------------

    def _require_vector_store(self) -> str:
        if not self.vector_store_id:
            raise ConsoleStateError("No vector store selected")
        return self.vector_store_id

    def _require_files(self) -> None:
        self._require_vector_store()
        if not self.files:
            raise ConsoleStateError("No files loaded for the selected vector store")
