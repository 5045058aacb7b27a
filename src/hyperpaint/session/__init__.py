"""Session documents: export and import of the whole studio state."""

from hyperpaint.session.io import (
    ImportReport,
    SessionImportError,
    export_session,
    export_session_json,
    import_session,
)
from hyperpaint.session.schema import SCHEMA_ID, SessionDocument

__all__ = [
    "SCHEMA_ID",
    "ImportReport",
    "SessionDocument",
    "SessionImportError",
    "export_session",
    "export_session_json",
    "import_session",
]
