"""
Ledger export.

Writes the transaction list as Excel (.xlsx) or CSV (.csv), with the
same filters as the transaction list endpoint.
"""
import csv
import io
from datetime import date, datetime
from typing import Any

from django.http import HttpResponse
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from finance.money import from_cents


class ExportFormat:
    EXCEL = 'xlsx'
    CSV = 'csv'

    CHOICES = [EXCEL, CSV]
    CONTENT_TYPES = {
        EXCEL: 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        CSV: 'text/csv',
    }


TRANSACTION_EXPORT_COLUMNS = [
    {'key': 'date', 'header': 'Date', 'width': 12},
    {'key': 'kind', 'header': 'Type', 'width': 10},
    {'key': 'method', 'header': 'Méthode', 'width': 10},
    {'key': 'account', 'header': 'Compte', 'width': 18},
    {'key': 'category', 'header': 'Catégorie', 'width': 26},
    {'key': 'description', 'header': 'Description', 'width': 40},
    {'key': 'chef', 'header': 'Chef', 'width': 26},
    {'key': 'amount', 'header': 'Montant', 'width': 12, 'numeric': True},
]


def format_value(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def prepare_transaction_export_data(transactions) -> list[dict]:
    """Flatten transactions (with account/category/chef loaded) into export rows."""
    return [
        {
            'date': tx.date,
            'kind': tx.kind,
            'method': tx.method,
            'account': tx.account.name,
            'category': tx.category.name,
            'description': tx.description,
            'chef': tx.chef.email if tx.chef_id else '',
            'amount': from_cents(tx.amount_cents),
        }
        for tx in transactions
    ]


def export_to_excel(data: list[dict], columns: list[dict], sheet_name: str = 'Transactions') -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name

    header_font = Font(bold=True, color='FFFFFF')
    header_fill = PatternFill(start_color='2E7D32', end_color='2E7D32', fill_type='solid')

    for col_idx, col in enumerate(columns, 1):
        cell = ws.cell(row=1, column=col_idx, value=col['header'])
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal='center')
        ws.column_dimensions[get_column_letter(col_idx)].width = col.get('width', 15)

    for row_idx, row_data in enumerate(data, 2):
        for col_idx, col in enumerate(columns, 1):
            value = row_data.get(col['key'], '')
            # Amounts stay numeric so spreadsheets can sum them
            if col.get('numeric'):
                cell = ws.cell(row=row_idx, column=col_idx, value=float(value))
                cell.number_format = '#,##0.00'
                cell.alignment = Alignment(horizontal='right')
            else:
                ws.cell(row=row_idx, column=col_idx, value=format_value(value))

    ws.freeze_panes = 'A2'

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()


def export_to_csv(data: list[dict], columns: list[dict], delimiter: str = ',') -> str:
    output = io.StringIO()
    writer = csv.writer(output, delimiter=delimiter, quoting=csv.QUOTE_MINIMAL)

    writer.writerow([col['header'] for col in columns])
    for row_data in data:
        writer.writerow([format_value(row_data.get(col['key'], '')) for col in columns])

    return output.getvalue()


def create_export_response(data: list[dict], columns: list[dict], format: str, filename: str) -> HttpResponse:
    """
    Build the file download response.

    Raises:
        ValueError: unknown format
    """
    if format not in ExportFormat.CHOICES:
        raise ValueError(f"Invalid format: {format}. Must be one of {ExportFormat.CHOICES}")

    content_type = ExportFormat.CONTENT_TYPES[format]

    if format == ExportFormat.EXCEL:
        response = HttpResponse(export_to_excel(data, columns), content_type=content_type)
    else:
        # BOM so Excel detects UTF-8
        response = HttpResponse(export_to_csv(data, columns), content_type=content_type, charset='utf-8-sig')

    response['Content-Disposition'] = f'attachment; filename="{filename}.{format}"'
    return response
