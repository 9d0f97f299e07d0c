"""REST client for the bookings backend"""
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import requests

from config import API_TIMEOUT, API_URL, SLIP_TYPES

DateLike = Union[date, datetime, str, None]


def _format_date(value: DateLike) -> Optional[str]:
    if not value:
        return None
    if isinstance(value, (date, datetime)):
        return value.strftime('%Y-%m-%d')
    return str(value)


def build_filters(search: Optional[str] = None,
                  status: Optional[str] = None,
                  from_date: DateLike = None,
                  to_date: DateLike = None) -> Dict[str, str]:
    """
    Query filters for the booking list.

    Empty filters are left out; dates are sent as YYYY-MM-DD.
    """
    filters = {}
    if search and search.strip():
        filters['search'] = search.strip()
    if status:
        filters['status'] = status
    start = _format_date(from_date)
    if start:
        filters['fromDate'] = start
    end = _format_date(to_date)
    if end:
        filters['toDate'] = end
    return filters


class BookingClient:
    """Talks to the bookings REST API. Errors surface as requests exceptions."""

    def __init__(self, base_url: str = None, token: Optional[str] = None,
                 timeout: float = None, session: Optional[requests.Session] = None):
        self.base_url = (base_url or API_URL).rstrip('/')
        if not self.base_url:
            raise ValueError("Backend URL not configured. Set BILTY_API_URL or pass base_url.")
        self.timeout = timeout if timeout is not None else API_TIMEOUT
        self.session = session or requests.Session()
        if token:
            self.session.headers['Authorization'] = f"Bearer {token}"

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        response = self.session.request(method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs)
        response.raise_for_status()
        return response

    # ============ BOOKINGS ============

    def get_bookings(self, page: int = 1, limit: int = 10,
                     filters: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """Fetch one page of bookings; returns the backend's JSON body."""
        params = {'page': page, 'limit': limit}
        params.update(filters or {})
        return self._request('GET', '/booking/pagination', params=params).json()

    def get_all_bookings(self, page_size: int = 100,
                         filters: Optional[Dict[str, str]] = None) -> List[Dict[str, Any]]:
        """Walk every page and collect the booking records."""
        bookings = []
        page = 1
        while True:
            body = self.get_bookings(page=page, limit=page_size, filters=filters)
            records = body.get('data') or []
            bookings.extend(records)
            total = body.get('total') or (body.get('pagination') or {}).get('total') or 0
            if not records or len(bookings) >= total:
                return bookings
            page += 1

    def get_booking(self, booking_id: str) -> Dict[str, Any]:
        return self._request('GET', f'/booking/{booking_id}').json()

    def create_booking(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request('POST', '/bookings', json=payload).json()

    def update_booking(self, booking_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request('PUT', f'/booking/{booking_id}', json=payload).json()

    def delete_booking(self, booking_id: str) -> bool:
        self._request('DELETE', f'/booking/{booking_id}')
        return True

    # ============ SLIPS ============

    def download_slip(self, slip_type: str, booking_id: str, dest_dir: str = ".") -> Path:
        """
        Save a printable slip rendered by the backend.

        Args:
            slip_type: 'booking', 'bilty' or 'difference'
            booking_id: Booking ID
            dest_dir: Directory to write <type>-slip-<id>.pdf into

        Returns:
            Path of the saved PDF
        """
        if slip_type not in SLIP_TYPES:
            raise ValueError(f"Unknown slip type: {slip_type!r}")

        response = self._request('GET', f'/pdf/{slip_type}-slip/{booking_id}')
        path = Path(dest_dir) / f"{slip_type}-slip-{booking_id}.pdf"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(response.content)
        return path
