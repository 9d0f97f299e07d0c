"""Storage tests for the local JSON backend and the REST backend wiring."""
import os
import sys
from datetime import date
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Force local backend for tests
os.environ["USE_LOCAL_STORAGE"] = "true"

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.booking_storage import BookingStorage, StoredBooking
from src.calculator import FreightCalculator


def make_booking(**overrides) -> StoredBooking:
    data = dict(
        id="",
        date="2026-01-10",
        party_name="Patel Agro",
        truck_no="GJ03AB1234",
        from_location="Rajkot",
        to_location="Surat",
        commodity="Cotton",
        rate=500,
        weight=10,
        truck_rate=400,
        truck_weight=10,
        commission_type="party",
        commission_percentage=5,
        initial_payment_from_party=1000,
        initial_payment_to_truck=500,
    )
    data.update(overrides)
    return StoredBooking(**data)


class TestStoredBooking:
    def test_from_dict_fills_defaults_and_ignores_unknown(self):
        booking = StoredBooking.from_dict({"id": "1", "date": "2026-01-05", "legacy_field": "x"})

        assert booking.status == "pending"
        assert booking.rate is None
        assert booking.amounts == {}
        assert booking.result().party_freight == 0

    def test_from_record_flattens_nested_objects(self):
        record = {
            "id": 42,
            "date": "2026-01-05T00:00:00.000Z",
            "status": None,
            "rate": "500",
            "weight": "10",
            "partyFreight": "5000.00",
            "partyPending": 4750,
            "party": {"partyName": "Patel Agro", "partyPhone": "98"},
            "truck": {"truckNo": "GJ03AB1234", "driverName": None},
            "commissions": [{"amount": 250}],
        }

        booking = StoredBooking.from_record(record)

        assert booking.id == "42"
        assert booking.date == "2026-01-05"
        assert booking.status == "pending"
        assert booking.party_name == "Patel Agro"
        assert booking.truck_no == "GJ03AB1234"
        assert booking.driver_name == ""
        assert booking.amounts == {"party_freight": 5000.0, "party_pending": 4750.0}

    def test_to_payload_includes_derived_amounts(self):
        booking = make_booking()
        booking.recalculate(FreightCalculator())

        payload = booking.to_payload()

        assert payload["partyName"] == "Patel Agro"
        assert payload["truckRate"] == 400
        assert payload["partyPending"] == 4750
        assert "amounts" not in payload


class TestBookingStorageLocalFlow:
    def test_add_computes_amounts_and_persists(self, tmp_path):
        storage = BookingStorage(data_dir=str(tmp_path))
        assert storage.uses_backend is False

        saved = storage.add_booking(make_booking())

        assert saved.id
        assert saved.created_at
        assert saved.amounts["party_pending"] == 4750
        assert saved.amounts["truck_pending"] == 3500

        reloaded = BookingStorage(data_dir=str(tmp_path)).get_booking_by_id(saved.id)
        assert reloaded == saved

    def test_update_recomputes(self, tmp_path):
        storage = BookingStorage(data_dir=str(tmp_path))
        saved = storage.add_booking(make_booking())

        updated = storage.update_booking(saved.id, {"initial_payment_from_party": 5750})

        assert updated.result().party_pending == 0
        assert storage.get_booking_by_id(saved.id).amounts["party_pending"] == 0
        assert storage.update_booking("missing", {"status": "completed"}) is None

    def test_queries(self, tmp_path):
        storage = BookingStorage(data_dir=str(tmp_path))
        storage.add_bookings([
            make_booking(),
            make_booking(date="2026-02-01", party_name="Shah Textiles", truck_no="MH12XY9999",
                         to_location="Pune", commodity="Yarn"),
        ])
        first = storage.search_bookings("rajkot")[0]
        storage.set_status(first.id, "delivered")

        assert len(storage.get_all_bookings()) == 2
        assert len(storage.search_bookings("PUNE")) == 1
        assert len(storage.search_bookings("")) == 2
        assert [b.id for b in storage.get_bookings_by_status("delivered")] == [first.id]
        assert len(storage.get_bookings_by_status("pending")) == 1
        assert len(storage.get_bookings_by_date_range(date(2026, 1, 1), date(2026, 1, 31))) == 1

        stats = storage.get_party_stats("  patel agro ")
        assert stats["total_bookings"] == 1
        assert stats["total_party_freight"] == 5000
        assert stats["total_pending"] == 4750
        assert stats["open_bookings"] == 1

    def test_delete(self, tmp_path):
        storage = BookingStorage(data_dir=str(tmp_path))
        saved = storage.add_booking(make_booking())

        assert storage.delete_booking(saved.id) is True
        assert storage.delete_booking(saved.id) is False
        assert storage.get_all_bookings() == []


class TestBookingStorageBackend:
    def test_add_sends_payload_and_takes_backend_id(self, tmp_path):
        client = MagicMock()
        client.create_booking.return_value = {"id": 99}
        storage = BookingStorage(data_dir=str(tmp_path), client=client)

        saved = storage.add_booking(make_booking())

        payload = client.create_booking.call_args[0][0]
        assert payload["partyFreight"] == 5000
        assert payload["commissionAmount"] == 250
        assert saved.id == "99"
        assert not (tmp_path / "bookings.json").exists()

    def test_read_failure_returns_empty(self, tmp_path):
        client = MagicMock()
        client.get_all_bookings.side_effect = RuntimeError("backend down")
        storage = BookingStorage(data_dir=str(tmp_path), client=client)

        assert storage.get_all_bookings() == []

    def test_add_failure_is_raised(self, tmp_path):
        client = MagicMock()
        client.create_booking.side_effect = RuntimeError("backend down")
        storage = BookingStorage(data_dir=str(tmp_path), client=client)

        with pytest.raises(RuntimeError, match="backend down"):
            storage.add_booking(make_booking())
