"""Guest list renderers.

Each renderer takes the assembled GuestListData and returns either a
downloadable GuestListExport or plain rows for a JSON response.
"""

import csv
import io
import re

from openpyxl import Workbook

from events.domain.errors import ValidationError
from events.domain.read_models import GuestListData, GuestListExport

GUEST_LIST_HEADERS = ["Guest Name", "Phone", "DJ Name", "DJ Instagram", "Time Slot"]
DJ_SUMMARY_HEADERS = ["DJ Name", "DJ Instagram", "Time Slot", "Guest Count"]
EVENT_SUMMARY_HEADERS = [
    "Event Name",
    "Date",
    "Venue",
    "Total Guests",
    "Total DJs",
    "Submitted DJs",
]

XLSX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def export_filename(event_name: str, extension: str) -> str:
    return f"{re.sub(r'[^a-zA-Z0-9]', '_', event_name)}_guest_list.{extension}"


def guest_rows(data: GuestListData) -> list[list[str]]:
    """Header row followed by one row per guest."""
    rows = [list(GUEST_LIST_HEADERS)]
    for row in data.rows:
        rows.append([row.name, row.phone, row.dj_name, row.dj_instagram, row.timeslot])
    return rows


def sheet_title(data: GuestListData) -> str:
    return f"{data.event.name} - Guest List"


def _export(data: GuestListData, content, extension: str, mime_type: str) -> GuestListExport:
    return GuestListExport(
        filename=export_filename(data.event.name, extension),
        content=content,
        total_guests=data.total_guests,
        total_djs=data.total_djs,
        submitted_djs=data.submitted_djs,
        mime_type=mime_type,
    )


def render_csv(data: GuestListData) -> GuestListExport:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerows(guest_rows(data))
    return _export(data, buffer.getvalue(), "csv", "text/csv")


def render_xlsx(data: GuestListData) -> GuestListExport:
    """Workbook with Guest List, DJ Summary and Event Summary sheets."""
    workbook = Workbook()
    guests = workbook.active
    guests.title = "Guest List"
    for row in guest_rows(data):
        guests.append(row)

    summary = workbook.create_sheet("DJ Summary")
    summary.append(DJ_SUMMARY_HEADERS)
    for dj in data.djs:
        summary.append([dj.dj_name, dj.dj_instagram, dj.timeslot, len(dj.guests)])

    event = workbook.create_sheet("Event Summary")
    event.append(EVENT_SUMMARY_HEADERS)
    event.append(
        [
            data.event.name,
            data.event.date.isoformat(),
            data.event.venue.name,
            data.total_guests,
            data.total_djs,
            data.submitted_djs,
        ]
    )

    buffer = io.BytesIO()
    workbook.save(buffer)
    return _export(data, buffer.getvalue(), "xlsx", XLSX_MIME_TYPE)


FILE_RENDERERS = {
    "csv": render_csv,
    "xlsx": render_xlsx,
}


def renderer_for(fmt: str):
    """Return the renderer for a file format.

    Raises:
        ValidationError: If ``fmt`` is not a file format.
    """
    renderer = FILE_RENDERERS.get(fmt)
    if renderer is None:
        raise ValidationError(
            f"Unknown export format {fmt!r}; expected one of {', '.join(FILE_RENDERERS)}",
            field="format",
        )
    return renderer
