"""Excel (XLSX) exporter built on openpyxl."""

from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from ..ics.models import CalendarEvent
from .base import TABULAR_HEADERS, BaseExporter

# Auto-fit width bounds, in characters
MAX_COLUMN_WIDTH = 60
COLUMN_PADDING = 2


class ExcelExporter(BaseExporter):
    """Write events to a single worksheet with the tabular column layout.

    Start and end time columns carry full date-times so the sheet sorts and
    filters without the date columns.
    """

    file_extension = ".xlsx"
    format_name = "Excel"

    def build_workbook(self, events: list[CalendarEvent]) -> Workbook:
        excel_settings = self.settings.excel

        workbook = Workbook()
        worksheet = workbook.active
        worksheet.title = excel_settings.worksheet_name

        worksheet.append(list(TABULAR_HEADERS))
        if excel_settings.apply_formatting:
            for cell in worksheet[1]:
                cell.font = Font(bold=True)

        for event in events:
            worksheet.append(self.tabular_row(event, time_format=self.settings.datetime_format))

        if excel_settings.freeze_header_row:
            worksheet.freeze_panes = "A2"

        if excel_settings.auto_fit_columns:
            self._auto_fit_columns(worksheet)

        return workbook

    @staticmethod
    def _auto_fit_columns(worksheet: Worksheet) -> None:
        for index, column in enumerate(worksheet.iter_cols(values_only=True), start=1):
            longest = max((len(str(value)) for value in column if value is not None), default=0)
            worksheet.column_dimensions[get_column_letter(index)].width = min(
                longest + COLUMN_PADDING, MAX_COLUMN_WIDTH
            )

    def _write(self, events: list[CalendarEvent], path: Path) -> None:
        workbook = self.build_workbook(events)
        try:
            workbook.save(path)
        finally:
            workbook.close()
