"""Booking form state: raw field values plus live calculations"""
from datetime import date
from typing import Any, Dict, Optional

from .models import BookingInputs, CalculationResult, INPUT_KEYS, ReviewSummary, to_camel, to_snake
from .calculator import FreightCalculator, is_supplied, parse_decimal_or_zero
from config import NO_COMMISSION_TYPES

# Fields that trigger a recalculation when changed
CALCULATION_FIELDS = list(INPUT_KEYS.values())

FREIGHT_FIELDS = ['rate', 'weight', 'truck_rate', 'truck_weight']

# Sent to the backend as numbers (blank -> 0)
NUMERIC_FIELDS = [
    'rate', 'weight', 'truck_rate', 'truck_weight',
    'commission_percentage', 'commission_amount', 'truck_commission_amount',
    'difference_amount', 'initial_payment_to_truck', 'initial_payment_from_party'
]

# Sent to the backend as null when blank
NULLABLE_FIELDS = [
    'commission_given_date', 'commission_payment_mode', 'commission_payment_type',
    'commission_bank_account_no', 'commission_utr_no',
    'difference_given_date', 'difference_payment_mode', 'difference_payment_type',
    'difference_bank_account_no', 'difference_utr_no'
]

PARTY_FIELDS = ['party_name', 'party_phone', 'party_address']
TRUCK_FIELDS = [
    'truck_no', 'tyre_count', 'driver_name', 'driver_phone',
    'transporter_name', 'transporter_phone'
]


def empty_form_fields(today: Optional[date] = None) -> Dict[str, Any]:
    """Field values for a freshly opened booking form."""
    today = today or date.today()
    fields = {
        'date': today.isoformat(),
        'booking_type': 'normal',
        'company_id': '',
        'commodity': '',
        'weight_type': 'kg',
        'from_location': '',
        'to_location': '',
        'truck_weight_type': 'kg',
        'commission_remark': '',
        'diff_remark': '',
    }
    for name in PARTY_FIELDS + TRUCK_FIELDS + NULLABLE_FIELDS:
        fields[name] = ''
    for name in CALCULATION_FIELDS:
        fields[name] = ''
    return fields


def _is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ''


def _fixed(amount: float) -> str:
    return f"{amount:.2f}"


class BookingForm:
    """
    State container for the booking form.

    Holds the raw (string) field values exactly as entered and the latest
    CalculationResult. Every change to a calculation field recomputes the
    result and auto-fills the commission and difference fields.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None, today: Optional[date] = None):
        self.calculator = FreightCalculator()
        self._today = today
        self.fields = empty_form_fields(today)
        if initial:
            self.fields.update(initial)
        self.calculations = self.calculator.calculate(self.inputs())

    def inputs(self) -> BookingInputs:
        return BookingInputs.from_dict({name: self.fields.get(name) for name in CALCULATION_FIELDS})

    def review(self) -> ReviewSummary:
        return self.calculator.review_summary(self.inputs(), self.calculations)

    # ============ AUTO-FILL ============

    def _party_freight(self) -> float:
        return parse_decimal_or_zero(self.fields['rate']) * parse_decimal_or_zero(self.fields['weight'])

    def _can_apply_percentage(self) -> bool:
        return all(is_supplied(self.fields[name]) for name in ('commission_percentage', 'rate', 'weight'))

    def _percentage_commission(self) -> str:
        percentage = parse_decimal_or_zero(self.fields['commission_percentage'])
        return _fixed(percentage / 100 * self._party_freight())

    def _raw_difference(self) -> str:
        truck_freight = (parse_decimal_or_zero(self.fields['truck_rate'])
                         * parse_decimal_or_zero(self.fields['truck_weight']))
        return _fixed(self._party_freight() - truck_freight)

    def _fill_commission_for_type(self, commission_type: str) -> None:
        truck_commission = self.fields['truck_commission_amount']
        if commission_type == 'truck' and is_supplied(truck_commission):
            self.fields['commission_amount'] = _fixed(parse_decimal_or_zero(truck_commission))
        elif commission_type == 'party' and self._can_apply_percentage():
            self.fields['commission_amount'] = self._percentage_commission()

    # ============ ACTIONS ============

    def change(self, name: str, value: Any) -> CalculationResult:
        """
        Apply a single field edit.

        Args:
            name: Form field name (snake_case)
            value: New raw value

        Returns:
            The current CalculationResult
        """
        self.fields[name] = value
        if name not in CALCULATION_FIELDS:
            return self.calculations

        commission_type = self.fields['commission_type'] or ''

        if name == 'commission_type':
            if commission_type in NO_COMMISSION_TYPES:
                self.fields['commission_amount'] = ''
            else:
                self._fill_commission_for_type(commission_type)

        if name == 'truck_commission_amount' and commission_type == 'truck':
            self.fields['commission_amount'] = _fixed(parse_decimal_or_zero(value)) if is_supplied(value) else ''

        # percentage commission follows the party freight
        if (name == 'commission_percentage' or name in FREIGHT_FIELDS) and commission_type == 'party':
            if self._can_apply_percentage():
                self.fields['commission_amount'] = self._percentage_commission()

        if (_is_blank(self.fields['difference_amount']) and name != 'difference_amount') or name in FREIGHT_FIELDS:
            self.fields['difference_amount'] = self._raw_difference()

        self.calculations = self.calculator.calculate(self.inputs())
        return self.calculations

    def recalculate(self) -> CalculationResult:
        """The "Recalculate all amounts" action."""
        self._fill_commission_for_type(self.fields['commission_type'] or '')

        difference = self.fields['difference_amount']
        if _is_blank(difference) or difference == '0.00':
            self.fields['difference_amount'] = self._raw_difference()

        self.calculations = self.calculator.calculate(self.inputs())
        return self.calculations

    def load_record(self, record: Dict[str, Any]) -> CalculationResult:
        """
        Seed the form from a booking fetched from the backend (edit flow).

        Top-level camelCase keys map onto form fields; the nested 'party' and
        'truck' objects fill the party/truck details. When the record carries
        no truck rate it is derived from truckFreight / weight, and a missing
        commission amount is taken from the sum of the 'commissions' entries.
        """
        fields = empty_form_fields(self._today)
        for key, value in record.items():
            name = to_snake(key)
            if name in fields and not isinstance(value, (dict, list)):
                fields[name] = '' if value is None else value

        for group, names in (('party', PARTY_FIELDS), ('truck', TRUCK_FIELDS)):
            nested = record.get(group) or {}
            for name in names:
                value = nested.get(to_camel(name))
                if value is not None:
                    fields[name] = value

        if isinstance(fields['date'], str) and 'T' in fields['date']:
            fields['date'] = fields['date'].split('T')[0]

        if not is_supplied(fields['truck_rate']):
            weight = parse_decimal_or_zero(record.get('weight'))
            truck_freight = parse_decimal_or_zero(record.get('truckFreight'))
            if weight and truck_freight:
                fields['truck_rate'] = _fixed(truck_freight / weight)
                if not is_supplied(fields['truck_weight']):
                    fields['truck_weight'] = record.get('weight')

        commissions = record.get('commissions') or []
        if commissions and not is_supplied(fields['commission_amount']):
            total = sum(parse_decimal_or_zero(c.get('amount', c.get('commissionAmount'))) for c in commissions)
            fields['commission_amount'] = _fixed(total)
        if commissions and _is_blank(fields['commission_type']):
            fields['commission_type'] = commissions[0].get('commissionType') or ''

        self.fields = fields
        self.calculations = self.calculator.calculate(self.inputs())
        return self.calculations

    def build_payload(self) -> Dict[str, Any]:
        """Payload for the backend create/update endpoints."""
        payload = {}
        for name, value in self.fields.items():
            if name in NUMERIC_FIELDS:
                value = parse_decimal_or_zero(value)
            elif name in NULLABLE_FIELDS:
                value = None if _is_blank(value) else value
            payload[to_camel(name)] = value

        payload['commissionType'] = self.fields['commission_type'] or None
        payload.update(self.calculations.to_payload())
        return payload

    def reset(self) -> None:
        self.fields = empty_form_fields(self._today)
        self.calculations = self.calculator.calculate(self.inputs())
