"""
Convert fetched activity logs into a timesheet workbook.
"""

import random
import logging
from io import BytesIO
from typing import Iterable, Optional

from openpyxl import Workbook

from .exceptions import ProjectNotFoundError
from .grouper import group_by_month
from .models import ActivityRecord, ExportParams
from .sheet_renderer import RenderedSheet, SheetRenderer, SheetStyle

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def build_sheet(activities: Iterable[ActivityRecord], params: ExportParams,
                style: Optional[SheetStyle] = None, rng: Optional[random.Random] = None) -> RenderedSheet:
    """
    Group the activities of one project and lay them out as timesheet rows.

    Args:
        activities: Fetched activity records, in fetch order
        params: Export parameters
        style: Sheet style (defaults to the styled, upper-case variant)
        rng: Random source for duration randomization (optional)

    Returns:
        RenderedSheet for the selected project

    Raises:
        InvalidDurationRangeError: if the randomization range is inverted
        MalformedDateError: if a matching activity has a bad date
        ProjectNotFoundError: if no activity belongs to the project
    """
    params.validate()

    grouped = group_by_month(activities, params.project_filter)
    if not grouped:
        logging.warning(f"No activities matched project '{params.project_filter}'")
        raise ProjectNotFoundError(params.project_filter)

    logging.info(f"Grouped activities for '{params.project_filter}' into {len(grouped)} month(s)")
    return SheetRenderer(style).render(grouped, params, rng)


def convert_to_excel(activities: Iterable[ActivityRecord], params: ExportParams,
                     style: Optional[SheetStyle] = None, rng: Optional[random.Random] = None) -> Workbook:
    """Build the timesheet workbook for one project. Raises like build_sheet."""
    sheet = build_sheet(activities, params, style, rng)
    return SheetRenderer(style).to_workbook(sheet)


def workbook_to_bytes(workbook: Workbook) -> bytes:
    """Serialize a workbook to xlsx bytes."""
    excel_buffer = BytesIO()
    workbook.save(excel_buffer)
    excel_buffer.seek(0)
    return excel_buffer.getvalue()
