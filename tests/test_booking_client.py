"""Tests for the bookings REST client"""
import sys
from datetime import date
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.booking_client import BookingClient, build_filters


def make_client(response_json=None, content=b"", status_error=None):
    session = MagicMock()
    session.headers = {}
    response = MagicMock()
    response.json.return_value = response_json
    response.content = content
    if status_error:
        response.raise_for_status.side_effect = status_error
    session.request.return_value = response
    client = BookingClient(base_url="https://api.example.test/api/", token="tok", timeout=5, session=session)
    return client, session


class TestBuildFilters:
    def test_empty_filters_are_dropped(self):
        assert build_filters(search="  ", status=None) == {}

    def test_all_filters(self):
        filters = build_filters(search=" patel ", status="pending",
                                from_date=date(2026, 1, 1), to_date="2026-01-31")

        assert filters == {"search": "patel", "status": "pending",
                           "fromDate": "2026-01-01", "toDate": "2026-01-31"}


class TestBookingClient:
    def test_requires_base_url(self, monkeypatch):
        monkeypatch.setattr("src.booking_client.API_URL", "")
        with pytest.raises(ValueError):
            BookingClient()

    def test_bearer_token_and_base_url(self):
        client, session = make_client({"data": []})

        client.get_bookings(page=2, limit=20, filters={"status": "pending"})

        assert session.headers["Authorization"] == "Bearer tok"
        session.request.assert_called_once_with(
            "GET", "https://api.example.test/api/booking/pagination",
            timeout=5, params={"page": 2, "limit": 20, "status": "pending"})

    def test_get_all_bookings_walks_pages(self):
        client, session = make_client()
        first, second = MagicMock(), MagicMock()
        first.json.return_value = {"data": [{"id": 1}, {"id": 2}], "total": 3}
        second.json.return_value = {"data": [{"id": 3}], "total": 3}
        session.request.side_effect = [first, second]

        bookings = client.get_all_bookings(page_size=2)

        assert [b["id"] for b in bookings] == [1, 2, 3]
        assert session.request.call_count == 2

    def test_get_all_bookings_reads_nested_total(self):
        client, session = make_client()
        first, second = MagicMock(), MagicMock()
        first.json.return_value = {"data": [{"id": 1}, {"id": 2}], "pagination": {"total": 3}}
        second.json.return_value = {"data": [{"id": 3}], "pagination": {"total": 3}}
        session.request.side_effect = [first, second]

        bookings = client.get_all_bookings(page_size=2)

        assert [b["id"] for b in bookings] == [1, 2, 3]

    def test_get_all_bookings_without_pagination_block(self):
        client, session = make_client({"data": [{"id": 1}], "pagination": None})

        bookings = client.get_all_bookings(page_size=2)

        assert bookings == [{"id": 1}]
        assert session.request.call_count == 1

    def test_create_update_delete(self):
        client, session = make_client({"id": 7})

        assert client.create_booking({"rate": 1}) == {"id": 7}
        session.request.assert_called_with("POST", "https://api.example.test/api/bookings",
                                           timeout=5, json={"rate": 1})

        client.update_booking("7", {"rate": 2})
        session.request.assert_called_with("PUT", "https://api.example.test/api/booking/7",
                                           timeout=5, json={"rate": 2})

        assert client.delete_booking("7") is True

    def test_http_errors_propagate(self):
        client, _ = make_client(status_error=requests.HTTPError("404"))
        with pytest.raises(requests.HTTPError):
            client.get_booking("missing")

    def test_download_slip(self, tmp_path):
        client, session = make_client(content=b"%PDF-1.4")

        path = client.download_slip("bilty", "12", dest_dir=str(tmp_path))

        assert path == tmp_path / "bilty-slip-12.pdf"
        assert path.read_bytes() == b"%PDF-1.4"
        assert session.request.call_args[0][1].endswith("/pdf/bilty-slip/12")

    def test_unknown_slip_type(self, tmp_path):
        client, session = make_client()
        with pytest.raises(ValueError):
            client.download_slip("invoice", "12", dest_dir=str(tmp_path))
        session.request.assert_not_called()
