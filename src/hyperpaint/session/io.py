"""Session export and import.

Export produces a ``4d-session/v1`` document. Import is lenient: anything
that is not a JSON object is rejected with SessionImportError, but inside a
valid document malformed parameters and records are skipped and the import
still completes.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from hyperpaint import __version__
from hyperpaint.projection.params import is_numeric
from hyperpaint.session.schema import (
    SCHEMA_ID,
    CameraRecord,
    NodeRecord,
    SessionDocument,
    StrokeRecord,
)

if TYPE_CHECKING:
    from hyperpaint.engine.studio import HyperspaceStudio

logger = logging.getLogger(__name__)


class SessionImportError(Exception):
    """Raised when a session document cannot be parsed at all."""

    pass


@dataclass
class ImportReport:
    """Summary of what an import restored and what it skipped."""

    nodes_imported: int = 0
    strokes_imported: int = 0
    skipped_nodes: int = 0
    skipped_strokes: int = 0
    ignored_params: list[str] = field(default_factory=list)


def export_session(studio: HyperspaceStudio) -> dict[str, Any]:
    """Build the session document for the studio's current state."""
    store = studio.store
    document = SessionDocument.model_validate(
        {
            "schema": SCHEMA_ID,
            "app": "hyperpaint",
            "version": __version__,
            "timestamp": datetime.now(UTC).isoformat(),
            "projection": {
                "mode": store.projection_mode.value,
                "w_slice": store.w_slice,
                "params": studio.params.values(),
            },
            "camera": studio.camera.model_dump(),
            "data": store.serialize(),
        }
    )
    logger.info(
        "Exported session: nodes=%d, strokes=%d",
        len(store.nodes),
        len(store.strokes),
    )
    return document.model_dump(by_alias=True, mode="json")


def export_session_json(studio: HyperspaceStudio, indent: int | None = 2) -> str:
    """Export the session as JSON text."""
    return json.dumps(export_session(studio), indent=indent)


def _parse_document(document: str | bytes | Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(document, str | bytes | bytearray):
        try:
            payload = json.loads(document)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SessionImportError(f"Session is not valid JSON: {e}") from e
    else:
        payload = document
    if not isinstance(payload, Mapping):
        raise SessionImportError(
            f"Session must be a JSON object, got {type(payload).__name__}"
        )
    return payload


def _section(payload: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = payload.get(key)
    return value if isinstance(value, Mapping) else {}


def _records(section: Mapping[str, Any], key: str) -> list[Any]:
    value = section.get(key)
    return value if isinstance(value, list) else []


def import_session(
    studio: HyperspaceStudio, document: str | bytes | Mapping[str, Any]
) -> ImportReport:
    """Replace the studio's content with a session document.

    Resets the store, restores mode, slice and (clamped) parameters, re-adds
    every node and stroke through the store so ids and defaults are assigned
    consistently, then requests a full projection pass.

    Args:
        studio: Studio to import into.
        document: JSON text or an already-parsed mapping.

    Returns:
        ImportReport describing what was restored.

    Raises:
        SessionImportError: If the document is not a JSON object.
    """
    payload = _parse_document(document)
    report = ImportReport()

    if payload.get("schema") not in (None, SCHEMA_ID):
        logger.warning("Importing session with unexpected schema %r", payload.get("schema"))

    studio.clear()
    store = studio.store

    projection = _section(payload, "projection")
    store.projection_mode = projection.get("mode") or "slice"
    w_slice = projection.get("w_slice")
    store.w_slice = w_slice if is_numeric(w_slice) else 0.0

    params = projection.get("params")
    if isinstance(params, Mapping):
        report.ignored_params = studio.params.apply(params, clamp=True)

    camera = payload.get("camera")
    if camera is not None:
        try:
            studio.camera = CameraRecord.model_validate(camera)
        except ValidationError:
            logger.warning("Ignoring malformed camera block")

    data = _section(payload, "data")

    for raw in _records(data, "nodes"):
        try:
            record = NodeRecord.model_validate(raw)
        except ValidationError as e:
            report.skipped_nodes += 1
            logger.warning("Skipping malformed node: %s", e.errors()[0]["msg"])
            continue
        store.add_node(
            record.position_4d.to_point(),
            record.category,
            record.properties,
            recompute=False,
        )
        report.nodes_imported += 1

    for raw in _records(data, "strokes"):
        try:
            stroke_record = StrokeRecord.model_validate(raw)
        except ValidationError as e:
            report.skipped_strokes += 1
            logger.warning("Skipping malformed stroke: %s", e.errors()[0]["msg"])
            continue
        stroke = store.create_stroke(stroke_record.stroke_type, stroke_record.category)
        stroke.properties.update(stroke_record.properties)
        for point in stroke_record.points:
            stroke.add_point(point.position_4d.to_point(), point.properties)
        store.add_stroke(stroke)
        report.strokes_imported += 1

    store.recompute_stats()
    studio.scheduler.request_pass()

    logger.info(
        "Imported session: nodes=%d, strokes=%d, skipped=%d",
        report.nodes_imported,
        report.strokes_imported,
        report.skipped_nodes + report.skipped_strokes,
    )
    return report
