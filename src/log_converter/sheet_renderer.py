"""
Timesheet layout and Excel rendering.
Lays month groups out as rows and writes them to an openpyxl worksheet.
"""

import random
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, List, Mapping, Optional, Sequence, Tuple

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from .duration import DurationResolver
from .models import ActivityRecord, ExportParams

SHEET_NAME = "Sheet1"
HEADERS = ("Tanggal", "Durasi (Jam)", "Kegiatan")
DATE_COLUMN, DURATION_COLUMN, DETAIL_COLUMN = 1, 2, 3
DEFAULT_FONT_COLUMNS = 26
DEFAULT_FONT_ROWS = 1000

INDONESIAN_MONTHS = (
    "Januari",
    "Februari",
    "Maret",
    "April",
    "Mei",
    "Juni",
    "Juli",
    "Agustus",
    "September",
    "Oktober",
    "November",
    "Desember",
)

MONTH_CASES = ("upper", "title")


def month_label(month: int, month_case: str = "upper") -> str:
    """
    Return the Indonesian name of a month.

    Args:
        month: Month number, 1 to 12
        month_case: 'upper' for JANUARI, 'title' for Januari

    Returns:
        Localized month name
    """
    if not 1 <= month <= 12:
        raise ValueError(f"month out of range: {month}")
    if month_case not in MONTH_CASES:
        raise ValueError(f"unsupported month case: {month_case}")
    name = INDONESIAN_MONTHS[month - 1]
    return name.upper() if month_case == "upper" else name


class RowKind(Enum):
    """Kinds of rows that make up a rendered timesheet"""

    BLANK = "blank"
    MONTH_LABEL = "month_label"
    HEADER = "header"
    DATA = "data"


@dataclass(frozen=True)
class SheetRow:
    kind: RowKind
    cells: Tuple[Any, ...] = ()


@dataclass
class RenderedSheet:
    """Timesheet rows in output order. Row numbers are 1-based positions."""

    rows: List[SheetRow] = field(default_factory=list)

    def append(self, kind: RowKind, *cells: Any) -> None:
        self.rows.append(SheetRow(kind, tuple(cells)))

    def numbered(self) -> Iterator[Tuple[int, SheetRow]]:
        return enumerate(self.rows, 1)

    def data_rows(self) -> List[SheetRow]:
        return [row for row in self.rows if row.kind is RowKind.DATA]

    def __iter__(self) -> Iterator[SheetRow]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)


@dataclass
class SheetStyle:
    """Presentation options for the rendered worksheet."""
    styled: bool = True
    month_case: str = "upper"
    font_name: str = "Times New Roman"
    font_size: int = 12
    column_width: float = 15

    def __post_init__(self):
        if self.month_case not in MONTH_CASES:
            raise ValueError(f"unsupported month case: {self.month_case}")


class SheetRenderer:
    """Render month-grouped activities into a single timesheet worksheet."""

    def __init__(self, style: Optional[SheetStyle] = None):
        self.style = style or SheetStyle()

    def render(self, grouped: Mapping[str, Sequence[ActivityRecord]], params: ExportParams,
               rng: Optional[random.Random] = None) -> RenderedSheet:
        """
        Lay out grouped activities as timesheet rows.

        Each month gets a label row, a header row and one row per activity.
        Months are separated by a single blank row.

        Args:
            grouped: Mapping of YYYY-MM keys to activity records
            params: Export parameters (randomization settings)
            rng: Random source for duration randomization (optional)

        Returns:
            RenderedSheet with rows in output order

        Raises:
            InvalidDurationRangeError: before any row is produced
        """
        resolver = DurationResolver(params, rng)
        sheet = RenderedSheet()

        for key in sorted(grouped):
            if sheet.rows:
                sheet.append(RowKind.BLANK)

            sheet.append(RowKind.MONTH_LABEL, month_label(int(key[5:7]), self.style.month_case))
            sheet.append(RowKind.HEADER, *HEADERS)

            for record in grouped[key]:
                sheet.append(
                    RowKind.DATA,
                    record.date_string,
                    resolver.resolve(record.duration),
                    record.activity_detail,
                )

        logging.debug(f"Rendered {len(sheet)} rows for {len(grouped)} month(s)")
        return sheet

    def write_worksheet(self, sheet: RenderedSheet, worksheet: Worksheet) -> None:
        """
        Write rendered rows into a worksheet, applying styling when enabled.

        Args:
            sheet: Rendered timesheet rows
            worksheet: Target openpyxl worksheet
        """
        for row_number, row in sheet.numbered():
            for column, value in enumerate(row.cells, 1):
                worksheet.cell(row=row_number, column=column, value=value)

        if self.style.styled:
            self._apply_styles(sheet, worksheet)

    def to_workbook(self, sheet: RenderedSheet) -> Workbook:
        """Create a single-sheet workbook holding the rendered timesheet."""
        wb = Workbook()
        ws = wb.active
        ws.title = SHEET_NAME
        self.write_worksheet(sheet, ws)
        return wb

    def _apply_styles(self, sheet: RenderedSheet, worksheet: Worksheet) -> None:
        default_font = Font(name=self.style.font_name, size=self.style.font_size)
        bold_font = Font(name=self.style.font_name, size=self.style.font_size, bold=True)
        thin_side = Side(style="thin", color="000000")
        header_border = Border(left=thin_side, right=thin_side, top=thin_side, bottom=thin_side)
        center_align = Alignment(horizontal="center", vertical="center")

        # default font over A1:Z1000, stretched when the timesheet is longer
        for cells in worksheet.iter_rows(min_row=1, max_row=max(DEFAULT_FONT_ROWS, len(sheet)),
                                         min_col=1, max_col=DEFAULT_FONT_COLUMNS):
            for cell in cells:
                cell.font = default_font

        for row_number, row in sheet.numbered():
            if row.kind is RowKind.MONTH_LABEL:
                worksheet.cell(row=row_number, column=DATE_COLUMN).font = bold_font

            elif row.kind is RowKind.HEADER:
                for column in range(1, len(HEADERS) + 1):
                    cell = worksheet.cell(row=row_number, column=column)
                    cell.font = bold_font
                    cell.border = header_border
                    cell.alignment = center_align

            elif row.kind is RowKind.DATA:
                worksheet.cell(row=row_number, column=DURATION_COLUMN).alignment = center_align

        for column in range(1, len(HEADERS) + 1):
            worksheet.column_dimensions[get_column_letter(column)].width = self.style.column_width
