"""Tests for export_analytics: CSV/JSON rendering and filename tokens."""

import csv
import io
import json
from datetime import datetime, timezone

from kitmap.core.domain_types import ExportFormat
from kitmap.core.export_serializer import (
    CSV_COLUMNS,
    export_analytics,
    export_filename,
    filename_token,
    format_instant,
)

NOW = datetime(2026, 10, 18, 10, 44, 12, 345000, tzinfo=timezone.utc)


def _learner(user_id, name, score, submitted_at=None, status="submitted"):
    return {
        "userId": user_id,
        "userName": name,
        "learnerMapId": f"lm-{user_id}",
        "status": status,
        "score": score,
        "attempt": 1,
        "submittedAt": submitted_at,
        "correct": 1,
        "missing": 1,
        "excessive": 0,
        "totalGoalEdges": 2,
    }


def _payload(learners):
    return {
        "assignment": {"id": "as-1", "title": "Photosynthesis, part 1"},
        "goalMap": {"id": "gm-1", "title": "Goal", "nodes": [], "edges": [], "direction": "bi"},
        "learners": learners,
        "summary": {"totalLearners": len(learners), "submittedCount": len(learners)},
    }


def _csv_rows(data):
    return list(csv.reader(io.StringIO(data)))


def test_empty_csv_export_is_header_only():
    result = export_analytics(_payload([]), ExportFormat.CSV, now=NOW)
    rows = _csv_rows(result.data)
    assert rows == [list(CSV_COLUMNS)]
    assert len(CSV_COLUMNS) == 12
    assert result.content_type == "text/csv"


def test_csv_rows_follow_column_order():
    payload = _payload([_learner("u1", "Ana", 0.5, "2026-10-01T08:30:00Z")])
    rows = _csv_rows(export_analytics(payload, ExportFormat.CSV, now=NOW).data)
    assert rows[1] == [
        "u1", "Ana", "lm-u1", "submitted", "1", "0.5", "1", "1", "0", "2",
        "2026-10-01T08:30:00.000Z", "Photosynthesis, part 1",
    ]


def test_csv_null_score_and_missing_submitted_at():
    payload = _payload([_learner("u1", "Ana", None, None, status="draft")])
    row = _csv_rows(export_analytics(payload, ExportFormat.CSV, now=NOW).data)[1]
    assert row[5] == "0"
    assert row[10] == ""


def test_csv_quotes_values_with_separators():
    payload = _payload([_learner("u1", 'Ana "Bea", C', 1.0)])
    result = export_analytics(payload, ExportFormat.CSV, now=NOW)
    assert '"Ana ""Bea"", C"' in result.data
    assert _csv_rows(result.data)[1][1] == 'Ana "Bea", C'


def test_json_export_round_trip_keeps_payload():
    payload = _payload([_learner("u1", "Ana", 0.5), _learner("u2", "Bea", None)])
    result = export_analytics(payload, ExportFormat.JSON, now=NOW)
    parsed = json.loads(result.data)
    assert len(parsed["learners"]) == 2
    assert parsed["assignment"]["id"] == "as-1"
    assert parsed["summary"]["totalLearners"] == 2
    assert parsed["exportedAt"] == "2026-10-18T10:44:12.345Z"
    assert result.content_type == "application/json"


def test_filename_token_strips_colons_and_dots():
    assert filename_token(NOW) == "2026-10-18T1044"
    assert ":" not in filename_token(NOW)
    assert "." not in filename_token(NOW)


def test_export_filenames():
    assert export_filename(ExportFormat.CSV, NOW) == "KB-Analytics-2026-10-18T1044.csv"
    result = export_analytics(_payload([]), ExportFormat.JSON, now=NOW, prefix="Class-7")
    assert result.filename == "Class-7-2026-10-18T1044.json"


def test_format_instant_accepts_epoch_millis_and_naive_datetimes():
    assert format_instant(0) == "1970-01-01T00:00:00.000Z"
    assert format_instant(datetime(2026, 1, 2, 3, 4, 5)) == "2026-01-02T03:04:05.000Z"
    assert format_instant(None) == ""
