"""Export Serializer: render an assignment analytics payload as CSV or JSON.

Invariants:
    - Input is the camelCase analytics payload {assignment, goalMap, learners, summary}
    - CSV always starts with the 12 fixed columns, even with zero learners
    - CSV: null score -> "0"; submittedAt -> ISO-8601 UTC instant or ""
    - JSON: {assignment, goalMap, learners, summary, exportedAt}; exportedAt is the export time
    - Filename: "<prefix>-<token>.<ext>", token = ISO instant without ':' and '.', first 15 chars

Design Decisions:
    - pandas DataFrame.to_csv handles CSV quoting; every cell is pre-rendered to str
      so pandas never infers dtypes or NaN
    - now is injectable so filenames and exportedAt are reproducible in tests
"""

import json
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import pandas as pd

from kitmap.core.domain_types import ExportFormat

DEFAULT_FILENAME_PREFIX = "KB-Analytics"

CSV_COLUMNS: tuple[str, ...] = (
    "UserID",
    "UserName",
    "LearnerMapID",
    "Status",
    "Attempt",
    "Score",
    "Correct",
    "Missing",
    "Excessive",
    "TotalGoalEdges",
    "SubmittedAt",
    "AssignmentTitle",
)

_TOKEN_STRIP = re.compile(r"[:.]")
_TOKEN_LENGTH = 15


@dataclass(frozen=True)
class ExportResult:
    filename: str
    data: str
    content_type: str


def _to_utc(value: Any) -> datetime | None:
    """Accept datetime, ISO string or epoch milliseconds."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)):
        dt = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    else:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_instant(value: Any) -> str:
    """ISO-8601 UTC instant with milliseconds and 'Z', or "" when absent."""
    dt = _to_utc(value)
    if dt is None:
        return ""
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def filename_token(now: datetime) -> str:
    """'2026-10-18T10:44:12.345Z' -> '2026-10-18T1044'."""
    return _TOKEN_STRIP.sub("", format_instant(now))[:_TOKEN_LENGTH]


def export_filename(
    fmt: ExportFormat, now: datetime, prefix: str = DEFAULT_FILENAME_PREFIX,
) -> str:
    return f"{prefix}-{filename_token(now)}.{fmt.value}"


def _number_cell(value: Any, default: str = "0") -> str:
    if value is None:
        return default
    if isinstance(value, float):
        return format(value, "g")
    return str(value)


def _learner_cells(learner: dict, assignment_title: str) -> list[str]:
    return [
        str(learner.get("userId", "")),
        str(learner.get("userName", "")),
        str(learner.get("learnerMapId", "")),
        str(learner.get("status", "")),
        _number_cell(learner.get("attempt")),
        _number_cell(learner.get("score")),
        _number_cell(learner.get("correct")),
        _number_cell(learner.get("missing")),
        _number_cell(learner.get("excessive")),
        _number_cell(learner.get("totalGoalEdges")),
        format_instant(learner.get("submittedAt")),
        assignment_title,
    ]


def render_csv(payload: dict) -> str:
    title = str((payload.get("assignment") or {}).get("title", ""))
    rows = [_learner_cells(l, title) for l in payload.get("learners") or []]
    frame = pd.DataFrame(rows, columns=list(CSV_COLUMNS), dtype=str)
    return frame.to_csv(index=False, lineterminator="\n")


def render_json(payload: dict, now: datetime) -> str:
    document = {
        "assignment": payload.get("assignment"),
        "goalMap": payload.get("goalMap"),
        "learners": payload.get("learners") or [],
        "summary": payload.get("summary"),
        "exportedAt": format_instant(now),
    }
    return json.dumps(document, indent=2, ensure_ascii=False)


def export_analytics(
    payload: dict,
    fmt: ExportFormat,
    now: datetime | None = None,
    prefix: str = DEFAULT_FILENAME_PREFIX,
) -> ExportResult:
    """Serialize an analytics payload; now defaults to the current UTC time."""
    now = now or datetime.now(timezone.utc)
    if fmt is ExportFormat.CSV:
        data = render_csv(payload)
    else:
        data = render_json(payload, now)
    return ExportResult(
        filename=export_filename(fmt, now, prefix),
        data=data,
        content_type=fmt.content_type,
    )
