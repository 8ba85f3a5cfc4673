import logging
from io import BytesIO
from typing import Any, Dict, Iterable, List, Mapping

import pandas as pd

from amc_receipts.exporters.csv_exporter import CSV_FIELDS, CSV_HEADER
from amc_receipts.services.aggregation import by_commodity, by_committee, summarize
from amc_receipts.utils.helpers.number_utils import to_number

logger = logging.getLogger(__name__)

NUMERIC_FIELDS = {"quantity", "value", "fees_paid"}


class ExcelExporter:
    """Export visible receipts to an .xlsx workbook (Receipts + Summary sheets)."""

    RECEIPTS_SHEET = "Receipts"
    SUMMARY_SHEET = "Summary"

    def export_to_bytes(self, receipts: Iterable[Mapping[str, Any]]) -> bytes:
        """Build the workbook in memory and return its bytes."""
        rows = list(receipts)
        buffer = BytesIO()

        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            receipts_df = pd.DataFrame(self._prepare_rows(rows), columns=CSV_HEADER)
            receipts_df.to_excel(writer, sheet_name=self.RECEIPTS_SHEET, index=False)

            summary_df = pd.DataFrame(self._prepare_summary(rows), columns=["Metric", "Key", "Count", "Value"])
            summary_df.to_excel(writer, sheet_name=self.SUMMARY_SHEET, index=False)

        logger.info("Excel export built: %d receipts", len(rows))
        return buffer.getvalue()

    def _prepare_rows(self, receipts: List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        prepared = []
        for receipt in receipts:
            row = {}
            for header, field in zip(CSV_HEADER, CSV_FIELDS):
                value = receipt.get(field)
                if field in NUMERIC_FIELDS:
                    row[header] = to_number(value)
                else:
                    row[header] = "" if value is None else str(value)
            prepared.append(row)
        return prepared

    def _prepare_summary(self, receipts: List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        totals = summarize(receipts)
        summary = [
            {"Metric": "Total", "Key": "All receipts", "Count": totals.count, "Value": totals.total_value},
            {"Metric": "Fees", "Key": "All receipts", "Count": totals.count, "Value": totals.total_fees},
        ]
        for group in by_committee(receipts):
            summary.append({"Metric": "Committee", "Key": group.key, "Count": group.count, "Value": group.total_value})
        for group in by_commodity(receipts):
            summary.append({"Metric": "Commodity", "Key": group.key, "Count": group.count, "Value": group.total_value})
        return summary
