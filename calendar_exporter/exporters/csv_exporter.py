"""CSV exporter."""

import csv
from pathlib import Path

from ..ics.models import CalendarEvent
from .base import TABULAR_HEADERS, BaseExporter


class CsvExporter(BaseExporter):
    """Write events as one CSV row each, in a calendar-import friendly layout.

    Fields containing the delimiter, the quote character or a line break are
    quoted, with embedded quotes doubled.
    """

    file_extension = ".csv"
    format_name = "CSV"

    def _write(self, events: list[CalendarEvent], path: Path) -> None:
        csv_settings = self.settings.csv

        with path.open("w", encoding="utf-8", newline="") as f:
            writer = csv.writer(
                f,
                delimiter=csv_settings.delimiter,
                quotechar=csv_settings.quote_character,
                quoting=csv.QUOTE_MINIMAL,
                lineterminator="\n",
            )
            if csv_settings.include_headers:
                writer.writerow(TABULAR_HEADERS)
            for event in events:
                writer.writerow(self.tabular_row(event))
