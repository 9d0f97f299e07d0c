"""Tests for the bookings export and amount formatting"""
import sys
from pathlib import Path

import pandas as pd
import pytest
from openpyxl import load_workbook

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.booking_storage import StoredBooking
from src.formatting import format_amount, format_currency
from src.report_generator import BookingReport


def sample_bookings():
    return [
        StoredBooking(id="b1", date="2026-01-05", party_name="Patel Agro", truck_no="GJ03AB1234",
                      from_location="Rajkot", to_location="Surat", commodity="Cotton",
                      rate=500, weight=10, truck_rate=400, truck_weight=10,
                      commission_type="party", commission_percentage=5,
                      initial_payment_from_party=1000, initial_payment_to_truck=500),
        StoredBooking(id="b2", date="2026-01-06", party_name="Shah Textiles",
                      rate="200", weight="5", truck_rate="150", truck_weight="5",
                      commission_type="truck", truck_commission_amount="25", status="delivered"),
    ]


class TestFormatting:
    def test_format_amount(self):
        assert format_amount(1234567.5) == "1,234,567.50"
        assert format_amount(0.004) == "0.00"
        assert format_amount(-0.001) == "0.00"
        assert format_amount(float("nan")) == "0.00"
        assert format_amount(None) == "0.00"

    def test_format_currency(self):
        assert format_currency(250) == "₹250.00"
        assert format_currency(-1500.5) == "-₹1,500.50"


class TestBookingReport:
    def setup_method(self):
        self.report = BookingReport(sample_bookings())

    def test_dataframe(self):
        df = self.report.to_dataframe()

        assert list(df["Booking ID"]) == ["b1", "b2"]
        first = df.iloc[0]
        assert first["Date"] == "05/01/2026"
        assert first["Weight"] == "10 kg"
        assert first["Truck Rate"] == 400
        assert first["Party Freight"] == 5000
        assert first["Commission"] == 250
        assert first["Party Pending"] == 4750
        assert df.iloc[1]["Truck Pending"] == 750 - 25
        assert df.iloc[1]["Status"] == "delivered"

    def test_totals(self):
        totals = self.report.get_totals()

        assert totals["booking_count"] == 2
        assert totals["party_freight"] == 6000
        assert totals["truck_freight"] == 4750
        assert totals["difference"] == 1250
        assert totals["commission"] == pytest.approx(275)

    def test_export_excel(self, tmp_path):
        path = tmp_path / "out" / "bookings.xlsx"

        self.report.export_excel(str(path))

        ws = load_workbook(path).active
        assert ws.title == "Bookings"
        assert ws.cell(row=4, column=1).value == "Booking ID"
        assert ws.cell(row=5, column=1).value == "b1"
        assert ws.cell(row=7, column=1).value == "2 Bookings"

    def test_export_csv(self, tmp_path):
        path = tmp_path / "bookings.csv"

        self.report.export_csv(str(path))

        df = pd.read_csv(path)
        assert len(df) == 2
        assert df["Difference"].tolist() == [1000.0, 250.0]

    def test_empty_report(self, tmp_path):
        report = BookingReport([])

        assert report.to_dataframe().empty
        assert report.get_totals()["booking_count"] == 0
        report.export_excel(str(tmp_path / "empty.xlsx"))
