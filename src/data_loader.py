"""Data loading utilities for Bilty Desk"""
import pandas as pd
from datetime import datetime
from typing import Any, List, Optional

from .booking_storage import StoredBooking
from .calculator import FreightCalculator
from config import COMMISSION_TYPES

# Normalized column header -> StoredBooking field
COLUMN_ALIASES = {
    'booking id': 'id',
    'id': 'id',
    'date': 'date',
    'party': 'party_name',
    'party name': 'party_name',
    'party phone': 'party_phone',
    'truck no': 'truck_no',
    'truck': 'truck_no',
    'driver': 'driver_name',
    'driver phone': 'driver_phone',
    'from': 'from_location',
    'to': 'to_location',
    'commodity': 'commodity',
    'status': 'status',
    'rate': 'rate',
    'party rate': 'rate',
    'weight': 'weight',
    'truck rate': 'truck_rate',
    'truck weight': 'truck_weight',
    'commission type': 'commission_type',
    'commission %': 'commission_percentage',
    'commission percentage': 'commission_percentage',
    'commission': 'commission_amount',
    'commission amount': 'commission_amount',
    'truck commission': 'truck_commission_amount',
    'difference': 'difference_amount',
    'advance from party': 'initial_payment_from_party',
    'advance to truck': 'initial_payment_to_truck',
}

TEXT_FIELDS = ['id', 'party_name', 'party_phone', 'truck_no', 'driver_name', 'driver_phone',
               'from_location', 'to_location', 'commodity', 'status']

DATE_FORMATS = ['%Y-%m-%d', '%d/%m/%Y', '%d-%m-%Y', '%Y%m%d']

# Commission type as typed in a sheet (key or label, any case) -> key
COMMISSION_TYPE_ALIASES = {
    **{key: key for key in COMMISSION_TYPES},
    **{label.lower(): key for key, label in COMMISSION_TYPES.items()},
}


def _cell(value: Any) -> Any:
    """Blank spreadsheet cells come through as NaN; treat them as absent."""
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None
    if pd.isna(value):
        return None
    if isinstance(value, datetime):
        return value
    if hasattr(value, 'item'):  # numpy scalar
        return value.item()
    return value


def _parse_date(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, datetime):
        return value.date().isoformat()
    text = str(value).strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue
    return text


def _commission_type(value: Any, row_number: int) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip().lower()
    if text in COMMISSION_TYPE_ALIASES:
        return COMMISSION_TYPE_ALIASES[text]
    print(f"⚠️ Row {row_number}: unknown commission type {value!r}, treating as not set")
    return None


class DataLoader:
    """
    Load bookings from spreadsheet exports.
    """

    @staticmethod
    def from_dataframe(df: pd.DataFrame) -> List[StoredBooking]:
        """
        Convert a DataFrame of bookings to StoredBooking objects.

        Column headers are matched case- and space-insensitively against
        COLUMN_ALIASES; unknown columns are ignored. Commission types may be
        given as a key or its label; anything else is warned about and left
        unset. Amounts are computed for every row.
        """
        df = df.copy()
        df.columns = df.columns.astype(str).str.strip().str.lower().str.replace(r'\s+', ' ', regex=True)
        calculator = FreightCalculator()

        bookings = []
        # Sheet row numbers: header is row 1
        for row_number, (_, row) in enumerate(df.iterrows(), start=2):
            data = {}
            for column, value in row.items():
                name = COLUMN_ALIASES.get(column)
                if name is None:
                    continue
                value = _cell(value)
                if name == 'date':
                    value = _parse_date(value)
                elif name in TEXT_FIELDS:
                    value = '' if value is None else str(value)
                elif name == 'commission_type':
                    value = _commission_type(value, row_number)
                data[name] = value

            if data.get('status') == '':
                data.pop('status')
            booking = StoredBooking.from_dict(data)
            booking.recalculate(calculator)
            bookings.append(booking)

        return bookings

    @staticmethod
    def load_from_excel(filepath: str, sheet_name: Optional[str] = None) -> List[StoredBooking]:
        """
        Load bookings from an Excel file.

        Expected columns (any order, extra columns ignored):
        - Date, Party, Truck No, From, To, Commodity (optional)
        - Rate, Weight, Truck Rate, Truck Weight
        - Commission Type, Commission %, Commission, Truck Commission (optional)
        - Difference, Advance From Party, Advance To Truck (optional)
        """
        df = pd.read_excel(filepath, sheet_name=sheet_name or 0)
        return DataLoader.from_dataframe(df)

    @staticmethod
    def load_from_csv(filepath: str) -> List[StoredBooking]:
        """Load bookings from a CSV file with the same columns as Excel."""
        df = pd.read_csv(filepath)
        return DataLoader.from_dataframe(df)
