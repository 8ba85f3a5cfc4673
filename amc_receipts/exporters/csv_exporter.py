"""CSV export of visible receipts.

Fields are joined with a literal comma and are not quoted or escaped. A value
containing a comma shifts the following columns; the export is meant for
spreadsheet import of plain receipt data.
"""

from typing import Any, Iterable, List, Mapping

CSV_HEADER = [
    "Date",
    "Committee",
    "Trader",
    "Payee",
    "Book Number",
    "Receipt Number",
    "Commodity",
    "Quantity",
    "Value",
    "Fees Paid",
    "Status",
]

# Row keys in header order.
CSV_FIELDS = [
    "date",
    "committee_name",
    "trader_name",
    "payee_name",
    "book_number",
    "receipt_number",
    "commodity",
    "quantity",
    "value",
    "fees_paid",
    "status",
]


def _cell(value: Any) -> str:
    if value is None:
        return ""
    return str(value).replace("\r\n", " ").replace("\r", " ").replace("\n", " ")


def receipt_to_csv_row(receipt: Mapping[str, Any]) -> str:
    return ",".join(_cell(receipt.get(field)) for field in CSV_FIELDS)


def export_receipts_csv(receipts: Iterable[Mapping[str, Any]]) -> str:
    """Header line plus one line per receipt, joined with newlines."""
    lines: List[str] = [",".join(CSV_HEADER)]
    lines.extend(receipt_to_csv_row(receipt) for receipt in receipts)
    return "\n".join(lines)
