"""Export encoders.

Each encoder turns an :class:`ExportPayload` into the text of one file format
and registers itself under its format name with :func:`register_encoder`.
Adding a format means adding a decorated function here.
"""

import csv
import io
import json
from collections.abc import Callable
from datetime import UTC, datetime
from html import escape as html_escape
from typing import NamedTuple
from xml.sax.saxutils import escape as _sax_escape

from pydantic import BaseModel, Field

from job_tracker.exceptions import UnsupportedFormatError
from job_tracker.schema import ExportFilter, JobApplication, Task
from job_tracker.utils.dates import format_date


class ExportPayload(BaseModel):
    jobs: list[JobApplication]
    tasks_by_job: dict[str, list[Task]] = Field(default_factory=dict)
    filters: ExportFilter = Field(default_factory=ExportFilter)
    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    title: str = "Job Applications Export"

    def tasks_for(self, job: JobApplication) -> list[Task]:
        if not self.filters.include_tasks:
            return []
        return self.tasks_by_job.get(job.id, [])


class Encoder(NamedTuple):
    render: Callable[[ExportPayload], str]
    mime_type: str


ENCODERS: dict[str, Encoder] = {}


def register_encoder(format: str, mime_type: str) -> Callable[[Callable[[ExportPayload], str]], Callable[[ExportPayload], str]]:
    def decorator(render: Callable[[ExportPayload], str]) -> Callable[[ExportPayload], str]:
        ENCODERS[format] = Encoder(render=render, mime_type=mime_type)
        return render
    return decorator


def encoder_for(format: str) -> Encoder:
    """Raises UnsupportedFormatError for an unregistered format."""
    try:
        return ENCODERS[format]
    except KeyError:
        raise UnsupportedFormatError(format) from None


def _task_status(task: Task) -> str:
    return "Completed" if task.completed else "Pending"


# ── JSON ─────────────────────────────────────────────────────────────────────

@register_encoder("json", "application/json")
def render_json(payload: ExportPayload) -> str:
    job_exclude = None if payload.filters.include_notes else {"notes"}
    data: dict = {"jobs": [job.model_dump(mode="json", exclude=job_exclude) for job in payload.jobs]}
    if payload.filters.include_tasks:
        # keyed in job order so the output is stable
        data["tasks"] = {
            job.id: [task.model_dump(mode="json", exclude={"job_info"}) for task in tasks]
            for job in payload.jobs
            if (tasks := payload.tasks_by_job.get(job.id))
        }
    return json.dumps(data, indent=2, ensure_ascii=False)


# ── CSV ──────────────────────────────────────────────────────────────────────

CSV_HEADER = ["ID", "Company", "Role", "Location", "Status", "Date Applied", "URL"]


@register_encoder("csv", "text/csv")
def render_csv(payload: ExportPayload) -> str:
    """Bare header, then one fully quoted row per job. No trailing newline.

    Tasks have no place in a flat file and are skipped.
    """
    include_notes = payload.filters.include_notes
    buffer = io.StringIO()
    buffer.write(",".join(CSV_HEADER + ["Notes"] if include_notes else CSV_HEADER) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for job in payload.jobs:
        row = [
            job.id,
            job.company,
            job.role,
            job.location,
            job.status,
            format_date(job.date_applied),
            job.link or "",
        ]
        if include_notes:
            row.append(job.notes or "")
        writer.writerow(row)
    return buffer.getvalue().removesuffix("\n")


# ── XML ──────────────────────────────────────────────────────────────────────

def xml_escape(value: object) -> str:
    return _sax_escape(str(value), {'"': "&quot;", "'": "&apos;"})


def _xml_element(indent: int, tag: str, value: object) -> str:
    return f"{'  ' * indent}<{tag}>{xml_escape(value)}</{tag}>"


@register_encoder("xml", "application/xml")
def render_xml(payload: ExportPayload) -> str:
    include_notes = payload.filters.include_notes
    lines = ['<?xml version="1.0" encoding="UTF-8" ?>', "<JobApplications>"]
    for job in payload.jobs:
        lines.append("  <Job>")
        lines.append(_xml_element(2, "ID", job.id))
        lines.append(_xml_element(2, "Company", job.company))
        lines.append(_xml_element(2, "Role", job.role))
        lines.append(_xml_element(2, "Location", job.location))
        lines.append(_xml_element(2, "Status", job.status))
        lines.append(_xml_element(2, "DateApplied", format_date(job.date_applied)))
        if job.link:
            lines.append(_xml_element(2, "URL", job.link))
        if include_notes and job.notes:
            lines.append(_xml_element(2, "Notes", job.notes))

        tasks = payload.tasks_for(job)
        if tasks:
            lines.append("    <Tasks>")
            for task in tasks:
                lines.append("      <Task>")
                lines.append(_xml_element(4, "ID", task.id))
                lines.append(_xml_element(4, "Title", task.title))
                lines.append(_xml_element(4, "Description", task.description or ""))
                lines.append(_xml_element(4, "DueDate", format_date(task.due_date)))
                lines.append(_xml_element(4, "Status", _task_status(task)))
                lines.append(_xml_element(4, "Priority", task.priority))
                lines.append("      </Task>")
            lines.append("    </Tasks>")
        lines.append("  </Job>")
    lines.append("</JobApplications>")
    return "\n".join(lines)


# ── PDF (HTML rendition) ─────────────────────────────────────────────────────

_PDF_STYLE = """
    body { font-family: Arial, sans-serif; margin: 20px; }
    h1 { color: #333; }
    table { border-collapse: collapse; width: 100%; margin-top: 20px; }
    th, td { border: 1px solid #ddd; padding: 8px; text-align: left; }
    th { background-color: #f2f2f2; }
    .task-table { margin-left: 20px; margin-top: 10px; margin-bottom: 20px; }
    .job-notes { white-space: pre-wrap; margin-top: 10px; }
"""

_JOB_COLUMNS = ("Company", "Role", "Location", "Status", "Date Applied", "URL")
_TASK_COLUMNS = ("Title", "Description", "Due Date", "Status", "Priority")


def _cells(tag: str, values: tuple | list, indent: str) -> str:
    return "\n".join(f"{indent}<{tag}>{html_escape(str(v))}</{tag}>" for v in values)


@register_encoder("pdf", "application/pdf")
def render_pdf(payload: ExportPayload) -> str:
    """Self-contained HTML document meant to be converted to PDF downstream."""
    include_notes = payload.filters.include_notes
    colspan = len(_JOB_COLUMNS)
    rows = []
    for job in payload.jobs:
        values = (
            job.company,
            job.role,
            job.location,
            job.status,
            format_date(job.date_applied),
            job.link or "",
        )
        rows.append(f"    <tr>\n{_cells('td', values, '      ')}\n    </tr>")

        if include_notes and job.notes:
            notes = html_escape(job.notes).replace("\n", "<br>")
            rows.append(
                f'    <tr>\n      <td colspan="{colspan}">\n'
                f'        <div class="job-notes"><strong>Notes:</strong><br>{notes}</div>\n'
                "      </td>\n    </tr>"
            )

        tasks = payload.tasks_for(job)
        if tasks:
            task_rows = "\n".join(
                "          <tr>\n"
                + _cells(
                    "td",
                    (
                        task.title,
                        task.description or "",
                        format_date(task.due_date),
                        _task_status(task),
                        task.priority,
                    ),
                    "            ",
                )
                + "\n          </tr>"
                for task in tasks
            )
            rows.append(
                f'    <tr>\n      <td colspan="{colspan}">\n'
                "        <strong>Tasks:</strong>\n"
                '        <table class="task-table">\n'
                f"          <tr>\n{_cells('th', _TASK_COLUMNS, '            ')}\n          </tr>\n"
                f"{task_rows}\n"
                "        </table>\n"
                "      </td>\n    </tr>"
            )

    title = html_escape(payload.title)
    generated = payload.generated_at.strftime("%Y-%m-%d %H:%M %Z").strip()
    body = "\n".join(rows)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{title}</title>
  <style>{_PDF_STYLE}  </style>
</head>
<body>
  <h1>{title}</h1>
  <p>Generated on: {generated}</p>
  <table>
    <tr>
{_cells('th', _JOB_COLUMNS, '      ')}
    </tr>
{body}
  </table>
</body>
</html>
"""
