"""Booking storage - REST backend with a local JSON fallback"""
import json
import os
import uuid
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional, Dict, Any
from dataclasses import dataclass, field, asdict, fields

from .models import BookingInputs, CalculationResult, INPUT_KEYS, to_camel, to_snake
from .calculator import FreightCalculator
from config import API_URL, DATA_DIR

# Descriptive fields copied from the backend's nested objects
PARTY_KEYS = ['party_name', 'party_phone']
TRUCK_KEYS = ['truck_no', 'driver_name', 'driver_phone']

# Backend nulls replaced on import
RECORD_DEFAULTS = {
    'party_name': '', 'party_phone': '', 'truck_no': '', 'driver_name': '', 'driver_phone': '',
    'from_location': '', 'to_location': '', 'commodity': '',
    'booking_type': 'normal', 'weight_type': 'kg', 'status': 'pending', 'created_at': ''
}


@dataclass
class StoredBooking:
    """A booking record with its calculation inputs and derived amounts"""
    id: str
    date: str  # ISO format YYYY-MM-DD
    party_name: str = ""
    party_phone: str = ""
    truck_no: str = ""
    driver_name: str = ""
    driver_phone: str = ""
    from_location: str = ""
    to_location: str = ""
    commodity: str = ""
    booking_type: str = "normal"
    weight_type: str = "kg"
    status: str = "pending"
    created_at: str = ""  # ISO format datetime
    # Calculation inputs, kept as entered (None = not supplied)
    rate: Optional[float] = None
    weight: Optional[float] = None
    truck_rate: Optional[float] = None
    truck_weight: Optional[float] = None
    commission_type: Optional[str] = None
    commission_amount: Optional[float] = None
    commission_percentage: Optional[float] = None
    truck_commission_amount: Optional[float] = None
    difference_amount: Optional[float] = None
    initial_payment_from_party: Optional[float] = None
    initial_payment_to_truck: Optional[float] = None
    # Derived amounts (CalculationResult fields)
    amounts: Dict[str, float] = field(default_factory=dict)

    def inputs(self) -> BookingInputs:
        return BookingInputs.from_dict({name: getattr(self, name) for name in INPUT_KEYS.values()})

    def result(self) -> CalculationResult:
        return CalculationResult(**self.amounts) if self.amounts else CalculationResult()

    def recalculate(self, calculator: FreightCalculator) -> CalculationResult:
        result = calculator.calculate(self.inputs())
        self.amounts = asdict(result)
        return result

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_payload(self) -> Dict[str, Any]:
        """camelCase payload for the backend, derived amounts included."""
        payload = {to_camel(k): v for k, v in self.to_dict().items() if k not in ('amounts', 'created_at')}
        payload.update(self.result().to_payload())
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StoredBooking':
        known = {f.name for f in fields(cls)}
        data = {k: v for k, v in data.items() if k in known}
        data.setdefault('id', '')
        data.setdefault('date', '')
        data.setdefault('amounts', {})
        return cls(**data)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'StoredBooking':
        """Build from a backend booking record (camelCase, nested party/truck)."""
        data = {}
        for key, value in record.items():
            if not isinstance(value, (dict, list)):
                data[to_snake(key)] = value
        for group, keys in (('party', PARTY_KEYS), ('truck', TRUCK_KEYS)):
            nested = record.get(group) or {}
            for key in keys:
                if nested.get(to_camel(key)) is not None:
                    data[key] = nested[to_camel(key)]

        data['id'] = str(record.get('id', '') or '')
        data['date'] = str(data.get('date') or '').split('T')[0]
        for key, default in RECORD_DEFAULTS.items():
            if data.get(key) is None:
                data[key] = default

        amounts = {name: record[to_camel(name)] for name in CalculationResult.__dataclass_fields__
                   if record.get(to_camel(name)) is not None}
        booking = cls.from_dict(data)
        booking.amounts = {name: float(value) for name, value in amounts.items()}
        return booking


def _use_backend() -> bool:
    """Determine if we should use the REST backend or local storage"""
    if os.environ.get('USE_LOCAL_STORAGE', '').lower() == 'true':
        return False
    return bool(API_URL)


class BookingStorage:
    """Manages bookings

    Uses the REST backend when it is configured (or a client is passed in),
    falls back to a local JSON file for development.
    """

    def __init__(self, data_dir: str = DATA_DIR, client=None):
        self.data_dir = Path(data_dir)
        self.bookings_file = self.data_dir / "bookings.json"
        self.calculator = FreightCalculator()

        self._client = client
        self._use_backend = client is not None or _use_backend()

        if self._use_backend and self._client is None:
            try:
                from .booking_client import BookingClient
                self._client = BookingClient()
                print(f"✅ Using backend storage at {self._client.base_url}")
            except Exception as e:
                print(f"⚠️ Failed to set up backend client: {e}")
                print("📁 Falling back to local storage")
                self._use_backend = False

        if not self._use_backend:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            if not self.bookings_file.exists():
                self._save_bookings_local([])

    @property
    def uses_backend(self) -> bool:
        return self._use_backend

    # ============ BOOKINGS ============

    def get_all_bookings(self) -> List[StoredBooking]:
        """Get all stored bookings"""
        if self._use_backend:
            try:
                records = self._client.get_all_bookings()
                return [StoredBooking.from_record(r) for r in records if r.get('id')]
            except Exception as e:
                print(f"Error getting bookings from backend: {e}")
                return []
        else:
            return self._get_all_bookings_local()

    def _get_all_bookings_local(self) -> List[StoredBooking]:
        """Get all bookings from local file"""
        try:
            with open(self.bookings_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
                return [StoredBooking.from_dict(b) for b in data]
        except (json.JSONDecodeError, FileNotFoundError):
            return []

    def get_booking_by_id(self, booking_id: str) -> Optional[StoredBooking]:
        """Get a specific booking by ID"""
        for booking in self.get_all_bookings():
            if booking.id == booking_id:
                return booking
        return None

    def get_bookings_by_status(self, status: str) -> List[StoredBooking]:
        return [b for b in self.get_all_bookings() if b.status == status]

    def get_bookings_by_date_range(self, start_date: date, end_date: date) -> List[StoredBooking]:
        """Get bookings within a date range (inclusive)"""
        start_str = start_date.isoformat()
        end_str = end_date.isoformat()
        return [b for b in self.get_all_bookings() if start_str <= b.date <= end_str]

    def search_bookings(self, text: str) -> List[StoredBooking]:
        """Case-insensitive match on party, truck number, route and commodity"""
        needle = text.lower().strip()
        if not needle:
            return self.get_all_bookings()
        results = []
        for b in self.get_all_bookings():
            haystack = ' '.join([b.party_name, b.truck_no, b.from_location, b.to_location, b.commodity])
            if needle in haystack.lower():
                results.append(b)
        return results

    def _prepare(self, booking: StoredBooking) -> StoredBooking:
        if not booking.id:
            booking.id = str(uuid.uuid4())
        if not booking.created_at:
            booking.created_at = datetime.now().isoformat()
        booking.recalculate(self.calculator)
        return booking

    def add_booking(self, booking: StoredBooking) -> StoredBooking:
        """Add a new booking; amounts are recomputed from its inputs"""
        if self._use_backend:
            booking.recalculate(self.calculator)
            try:
                record = self._client.create_booking(booking.to_payload())
            except Exception as e:
                print(f"Error adding booking to backend: {e}")
                raise
            if isinstance(record, dict) and record.get('id'):
                booking.id = str(record['id'])
            return booking

        self._prepare(booking)
        bookings = self._get_all_bookings_local()
        bookings.append(booking)
        self._save_bookings_local(bookings)
        return booking

    def add_bookings(self, new_bookings: List[StoredBooking]) -> List[StoredBooking]:
        """Add multiple bookings at once"""
        if self._use_backend:
            return [self.add_booking(b) for b in new_bookings]

        for booking in new_bookings:
            self._prepare(booking)
        bookings = self._get_all_bookings_local()
        bookings.extend(new_bookings)
        self._save_bookings_local(bookings)
        return new_bookings

    def update_booking(self, booking_id: str, updates: Dict[str, Any]) -> Optional[StoredBooking]:
        """Update a booking by ID; amounts are recomputed"""
        if self._use_backend:
            current = self.get_booking_by_id(booking_id)
            if current is None:
                return None
            booking = StoredBooking.from_dict({**current.to_dict(), **updates})
            booking.recalculate(self.calculator)
            try:
                self._client.update_booking(booking_id, booking.to_payload())
                return booking
            except Exception as e:
                print(f"Error updating booking in backend: {e}")
                return None

        bookings = self._get_all_bookings_local()
        for i, booking in enumerate(bookings):
            if booking.id == booking_id:
                updated = StoredBooking.from_dict({**booking.to_dict(), **updates})
                updated.recalculate(self.calculator)
                bookings[i] = updated
                self._save_bookings_local(bookings)
                return updated
        return None

    def set_status(self, booking_id: str, status: str) -> Optional[StoredBooking]:
        return self.update_booking(booking_id, {'status': status})

    def delete_booking(self, booking_id: str) -> bool:
        """Delete a booking by ID"""
        if self._use_backend:
            try:
                return self._client.delete_booking(booking_id)
            except Exception as e:
                print(f"Error deleting booking from backend: {e}")
                return False

        bookings = self._get_all_bookings_local()
        remaining = [b for b in bookings if b.id != booking_id]
        if len(remaining) < len(bookings):
            self._save_bookings_local(remaining)
            return True
        return False

    def _save_bookings_local(self, bookings: List[StoredBooking]):
        """Save bookings to local file"""
        with open(self.bookings_file, 'w', encoding='utf-8') as f:
            json.dump([b.to_dict() for b in bookings], f, indent=2, ensure_ascii=False)

    # ============ STATISTICS ============

    def get_party_stats(self, party_name: str) -> Dict[str, Any]:
        """Get booking totals for a party (case-insensitive name match)"""
        name = party_name.lower().strip()
        bookings = [b for b in self.get_all_bookings() if b.party_name.lower().strip() == name]
        results = [b.result() for b in bookings]

        return {
            'total_bookings': len(bookings),
            'total_party_freight': sum(r.party_freight for r in results),
            'total_pending': sum(r.party_pending for r in results),
            'open_bookings': len([r for r in results if r.party_pending > 0])
        }
