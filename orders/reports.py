"""Excel daybook of orders placed in a date range."""
from decimal import Decimal

import openpyxl
from django.db.models import Count, Sum
from django.http import HttpResponse
from django.utils import timezone
from openpyxl.styles import Font, Alignment, PatternFill

from .models import Order

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

HEADERS = [
    'Order Number', 'Date', 'Table', 'Type', 'Status', 'Payment Status',
    'Payment Method', 'Waiter', 'Items', 'Subtotal', 'Tax', 'Discount', 'Total',
]


def build_daybook(orders, start_date, end_date, restaurant_name='Restaurant'):
    """Return a workbook with one row per order plus status and payment totals."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Daybook"

    header_font = Font(bold=True, size=12, color="FFFFFF")
    header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
    title_font = Font(bold=True, size=16)

    ws['A1'] = f"{restaurant_name} - Daybook"
    ws['A1'].font = title_font
    ws['A2'] = f"Period: {start_date.strftime('%Y-%m-%d')} to {end_date.strftime('%Y-%m-%d')}"
    ws.merge_cells('A1:M1')
    ws.merge_cells('A2:M2')

    for col, header in enumerate(HEADERS, 1):
        cell = ws.cell(row=4, column=col, value=header)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal='center')

    row = 5
    totals = {'subtotal': Decimal('0.00'), 'tax': Decimal('0.00'), 'discount': Decimal('0.00'), 'total': Decimal('0.00')}
    for order in orders:
        ws.cell(row=row, column=1, value=order.order_number)
        ws.cell(row=row, column=2, value=timezone.localtime(order.created_at).strftime('%Y-%m-%d %H:%M'))
        ws.cell(row=row, column=3, value=order.table.number)
        ws.cell(row=row, column=4, value=order.get_order_type_display())
        ws.cell(row=row, column=5, value=order.get_status_display())
        ws.cell(row=row, column=6, value=order.get_payment_status_display())
        ws.cell(row=row, column=7, value=order.get_payment_method_display() if order.payment_method else '')
        ws.cell(row=row, column=8, value=order.waiter.get_full_name() if order.waiter else '')
        ws.cell(row=row, column=9, value=sum(item.quantity for item in order.items.all()))
        for offset, field in enumerate(('subtotal', 'tax', 'discount', 'total')):
            value = getattr(order, field)
            ws.cell(row=row, column=10 + offset, value=float(value))
            if order.status != Order.CANCELLED:
                totals[field] += value
        row += 1

    # Totals exclude cancelled orders
    row += 1
    bold = Font(bold=True)
    ws.cell(row=row, column=1, value="TOTALS:").font = bold
    for offset, field in enumerate(('subtotal', 'tax', 'discount', 'total')):
        ws.cell(row=row, column=10 + offset, value=float(totals[field])).font = bold

    summary = wb.create_sheet("Summary")
    summary['A1'] = "Status"
    summary['B1'] = "Orders"
    summary['C1'] = "Total"
    for cell in (summary['A1'], summary['B1'], summary['C1']):
        cell.font = bold
    breakdown = orders.order_by().values('status').annotate(count=Count('id'), amount=Sum('total'))
    for index, entry in enumerate(breakdown, 2):
        summary.cell(row=index, column=1, value=entry['status'])
        summary.cell(row=index, column=2, value=entry['count'])
        summary.cell(row=index, column=3, value=float(entry['amount'] or 0))

    for column in ws.columns:
        column_letter = column[0].column_letter
        max_length = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
        ws.column_dimensions[column_letter].width = min(max_length + 2, 30)

    return wb


def daybook_response(orders, start_date, end_date, restaurant_name='Restaurant'):
    wb = build_daybook(orders, start_date, end_date, restaurant_name)
    response = HttpResponse(content_type=XLSX_CONTENT_TYPE)
    response['Content-Disposition'] = (
        f'attachment; filename="daybook_{start_date:%Y%m%d}_{end_date:%Y%m%d}.xlsx"'
    )
    wb.save(response)
    return response
