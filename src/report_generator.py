"""Report generation for Bilty Desk"""
import pandas as pd
from datetime import datetime
from typing import List
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from .booking_storage import StoredBooking
from .calculator import FreightCalculator, parse_decimal_or_zero
from .models import CalculationResult
from config import COMPANY_NAME, EXCEL_STYLES

AMOUNT_COLUMNS = ['Party Rate', 'Truck Rate', 'Party Freight', 'Truck Freight',
                  'Difference', 'Commission', 'Party Pending', 'Truck Pending']


def _display_date(value: str) -> str:
    try:
        return datetime.strptime(value, '%Y-%m-%d').strftime('%d/%m/%Y')
    except (TypeError, ValueError):
        return value or ''


class BookingReport:
    """
    Builds the bookings export (Excel or CSV) with a totals row.
    """

    def __init__(self, bookings: List[StoredBooking]):
        self.bookings = bookings
        self.calculator = FreightCalculator()
        self.results: List[CalculationResult] = [self.calculator.calculate(b.inputs()) for b in bookings]

    def to_dataframe(self) -> pd.DataFrame:
        """
        Convert bookings to a DataFrame, amounts rounded to 2 decimals.
        """
        data = []
        for b, r in zip(self.bookings, self.results):
            weight = parse_decimal_or_zero(b.weight)
            data.append({
                'Booking ID': b.id,
                'Date': _display_date(b.date),
                'Party': b.party_name,
                'Truck No': b.truck_no,
                'From': b.from_location,
                'To': b.to_location,
                'Commodity': b.commodity,
                'Weight': f"{weight:g} {b.weight_type}",
                'Party Rate': round(parse_decimal_or_zero(b.rate), 2),
                'Truck Rate': round(r.truck_freight / weight, 2) if weight else 0.0,
                'Party Freight': round(r.party_freight, 2),
                'Truck Freight': round(r.truck_freight, 2),
                'Difference': round(r.difference_amount, 2),
                'Commission': round(r.commission_amount, 2),
                'Party Pending': round(r.party_pending, 2),
                'Truck Pending': round(r.truck_pending, 2),
                'Status': b.status
            })

        columns = ['Booking ID', 'Date', 'Party', 'Truck No', 'From', 'To', 'Commodity', 'Weight'] \
            + AMOUNT_COLUMNS + ['Status']
        return pd.DataFrame(data, columns=columns)

    def get_totals(self) -> dict:
        """Totals shown under the bookings table."""
        summary = self.calculator.calculate_summary(self.results)
        return {
            'booking_count': summary['booking_count'],
            'party_freight': summary['total_party_freight'],
            'truck_freight': summary['total_truck_freight'],
            'difference': summary['total_difference'],
            'commission': summary['total_commission'],
            'party_pending': summary['total_party_pending'],
            'truck_pending': summary['total_truck_pending']
        }

    def get_totals_row(self) -> dict:
        totals = self.get_totals()
        row = {column: '' for column in self.to_dataframe().columns}
        row.update({
            'Booking ID': f"{totals['booking_count']} Bookings",
            'Party Freight': round(totals['party_freight'], 2),
            'Truck Freight': round(totals['truck_freight'], 2),
            'Difference': round(totals['difference'], 2),
            'Commission': round(totals['commission'], 2),
            'Party Pending': round(totals['party_pending'], 2),
            'Truck Pending': round(totals['truck_pending'], 2)
        })
        return row

    def export_csv(self, filepath: str) -> None:
        Path(filepath).parent.mkdir(parents=True, exist_ok=True)
        self.to_dataframe().to_csv(filepath, index=False, encoding='utf-8')

    def export_excel(self, filepath: str) -> None:
        """
        Export report to Excel file.

        Args:
            filepath: Path to save the Excel file
        """
        wb = Workbook()
        ws = wb.active
        ws.title = "Bookings"

        # Styles
        header_fill = PatternFill(start_color=EXCEL_STYLES['header_bg_color'],
                                  end_color=EXCEL_STYLES['header_bg_color'],
                                  fill_type='solid')
        summary_fill = PatternFill(start_color=EXCEL_STYLES['summary_bg_color'],
                                   end_color=EXCEL_STYLES['summary_bg_color'],
                                   fill_type='solid')
        header_font = Font(name=EXCEL_STYLES['font_name'],
                           size=EXCEL_STYLES['font_size'],
                           bold=True)
        border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

        # Title section
        ws['A1'] = COMPANY_NAME
        ws['A1'].font = Font(name=EXCEL_STYLES['font_name'], size=14, bold=True)
        ws['A2'] = f"Bookings Report - generated {datetime.now().strftime('%d/%m/%Y %H:%M')}"

        df = self.to_dataframe()
        columns = list(df.columns)
        start_row = 4

        # Headers
        for col_idx, col_name in enumerate(columns, 1):
            cell = ws.cell(row=start_row, column=col_idx, value=col_name)
            cell.fill = header_fill
            cell.font = header_font
            cell.border = border
            cell.alignment = Alignment(horizontal='center')

        # Data rows
        for offset, record in enumerate(df.to_dict('records'), 1):
            for col_idx, col_name in enumerate(columns, 1):
                value = record[col_name]
                cell = ws.cell(row=start_row + offset, column=col_idx, value=value)
                cell.border = border
                if col_name in AMOUNT_COLUMNS:
                    cell.alignment = Alignment(horizontal='right')
                    cell.number_format = EXCEL_STYLES['number_format']

        # Totals row
        totals_row = start_row + len(df) + 1
        totals = self.get_totals_row()
        for col_idx, col_name in enumerate(columns, 1):
            cell = ws.cell(row=totals_row, column=col_idx, value=totals[col_name])
            cell.fill = summary_fill
            cell.font = Font(bold=True)
            cell.border = border
            if col_name in AMOUNT_COLUMNS and totals[col_name] != '':
                cell.alignment = Alignment(horizontal='right')
                cell.number_format = EXCEL_STYLES['number_format']

        # Adjust column widths
        for idx, col_name in enumerate(columns, 1):
            ws.column_dimensions[get_column_letter(idx)].width = 14 if col_name in AMOUNT_COLUMNS else 18

        # Save
        Path(filepath).parent.mkdir(parents=True, exist_ok=True)
        wb.save(filepath)
