"""Freight, commission and balance calculation for Bilty Desk"""
import math
from typing import Any, Callable, List, Optional, Tuple

from .models import BookingInputs, CalculationResult, ReviewSummary
from config import COMMISSION_TYPES, NO_COMMISSION_TYPES


def _to_number(value: Any) -> Optional[float]:
    """Parse a raw form value into a finite float, or None if it isn't one."""
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            number = float(value)
        else:
            text = str(value).strip()
            if not text:
                return None
            number = float(text)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def parse_decimal_or_zero(value: Any) -> float:
    """
    Coerce a raw form value to a number.

    Empty strings, None, non-numeric text, booleans, NaN and infinities all
    become 0.0. Negative values pass through unchanged.
    """
    number = _to_number(value)
    return 0.0 if number is None else number


def is_supplied(value: Any) -> bool:
    """True when the value holds a usable number (blank or junk text doesn't count)."""
    return _to_number(value) is not None


def _finite(amount: float) -> float:
    """Overflowed arithmetic (inf, nan) collapses to 0.0."""
    return amount if math.isfinite(amount) else 0.0


def _freight(rate: Any, weight: Any) -> float:
    return _finite(parse_decimal_or_zero(rate) * parse_decimal_or_zero(weight))


# ============ COMMISSION RULES ============
# Each rule returns an amount when it applies, None to fall through.

def _truck_override(inputs: BookingInputs, party_freight: float) -> Optional[float]:
    if inputs.is_truck_commission and is_supplied(inputs.truck_commission_amount):
        return parse_decimal_or_zero(inputs.truck_commission_amount)
    return None


def _percentage_of_party_freight(inputs: BookingInputs, party_freight: float) -> Optional[float]:
    if is_supplied(inputs.commission_percentage) and not is_supplied(inputs.commission_amount):
        return parse_decimal_or_zero(inputs.commission_percentage) / 100 * party_freight
    return None


def _explicit_amount(inputs: BookingInputs, party_freight: float) -> Optional[float]:
    return parse_decimal_or_zero(inputs.commission_amount)


CommissionRule = Tuple[str, Callable[[BookingInputs, float], Optional[float]]]

# Evaluated top to bottom, first match wins
COMMISSION_RULES: List[CommissionRule] = [
    ('truck-override', _truck_override),
    ('percentage', _percentage_of_party_freight),
    ('explicit', _explicit_amount),
]


def resolve_commission(inputs: BookingInputs, party_freight: float) -> Tuple[float, str]:
    """
    Work out the commission amount for a booking.

    Returns:
        (amount, name of the rule that produced it). The rule is 'cleared'
        when the commission type is unset or 'free'.
    """
    if (inputs.commission_type or '') in NO_COMMISSION_TYPES:
        return 0.0, 'cleared'

    for name, rule in COMMISSION_RULES:
        amount = rule(inputs, party_freight)
        if amount is not None:
            return _finite(amount), name
    return 0.0, 'explicit'


def payment_status(amount: float) -> str:
    """Status badge for a pending amount."""
    if amount == 0:
        return 'Paid'
    if amount > 0:
        return 'Pending'
    return 'N/A'


class FreightCalculator:
    """
    Derives freight, commission, net and pending amounts for a booking.

    Business Logic:
    ===============

    Party freight = rate * weight (what the consignor is billed)
    Truck freight = truck rate * truck weight (what the truck is owed)

    The commission is attributed to one side by the commission type:
    - 'truck': deducted from what the truck receives
    - 'party' / 'bank': deducted from the party's net amount
    - 'free' or not selected: no commission

    Difference = party freight - truck freight, unless overridden.
    Pending = net amount - advance already paid/received.

    The calculator is pure: same inputs, same result, nothing stored.
    """

    def calculate(self, inputs: BookingInputs) -> CalculationResult:
        """
        Calculate all derived amounts for one booking.

        Args:
            inputs: The booking's calculation inputs

        Returns:
            CalculationResult with full-precision amounts
        """
        party_freight = _freight(inputs.rate, inputs.weight)
        truck_freight = _freight(inputs.truck_rate, inputs.truck_weight)
        raw_difference = _finite(party_freight - truck_freight)

        commission_amount, _ = resolve_commission(inputs, party_freight)

        if is_supplied(inputs.difference_amount):
            difference_amount = parse_decimal_or_zero(inputs.difference_amount)
        else:
            difference_amount = raw_difference

        party_net_amount = party_freight + difference_amount
        truck_net_amount = truck_freight
        if inputs.is_truck_commission:
            truck_net_amount -= commission_amount
        else:
            party_net_amount -= commission_amount
        party_net_amount = _finite(party_net_amount)
        truck_net_amount = _finite(truck_net_amount)

        return CalculationResult(
            party_freight=party_freight,
            truck_freight=truck_freight,
            raw_difference=raw_difference,
            commission_amount=commission_amount,
            difference_amount=difference_amount,
            party_net_amount=party_net_amount,
            truck_net_amount=truck_net_amount,
            party_pending=_finite(party_net_amount - parse_decimal_or_zero(inputs.initial_payment_from_party)),
            truck_pending=_finite(truck_net_amount - parse_decimal_or_zero(inputs.initial_payment_to_truck))
        )

    def calculate_batch(self, bookings: List[BookingInputs]) -> List[CalculationResult]:
        """Calculate results for multiple bookings."""
        return [self.calculate(inputs) for inputs in bookings]

    def calculate_summary(self, results: List[CalculationResult]) -> dict:
        """
        Calculate summary totals for a list of results.

        Args:
            results: List of CalculationResult objects

        Returns:
            Dictionary with summary totals
        """
        return {
            'booking_count': len(results),
            'total_party_freight': sum(r.party_freight for r in results),
            'total_truck_freight': sum(r.truck_freight for r in results),
            'total_difference': sum(r.difference_amount for r in results),
            'total_commission': sum(r.commission_amount for r in results),
            'total_party_net': sum(r.party_net_amount for r in results),
            'total_truck_net': sum(r.truck_net_amount for r in results),
            'total_party_pending': sum(r.party_pending for r in results),
            'total_truck_pending': sum(r.truck_pending for r in results)
        }

    def review_summary(self, inputs: BookingInputs, result: CalculationResult) -> ReviewSummary:
        """
        Figures for the review step.

        Receivable from the party is its freight less the advance; payable to
        the truck is its freight less a truck-side commission and the advance.
        """
        party_receivable = _finite(result.party_freight - parse_decimal_or_zero(inputs.initial_payment_from_party))
        truck_commission = result.commission_amount if inputs.is_truck_commission else 0.0
        truck_payable = _finite(result.truck_freight - truck_commission
                                - parse_decimal_or_zero(inputs.initial_payment_to_truck))
        return ReviewSummary(
            party_receivable=party_receivable,
            truck_payable=truck_payable,
            net_balance=_finite(party_receivable - truck_payable),
            commission_label=COMMISSION_TYPES.get(inputs.commission_type or '', 'Not Specified')
        )


_default_calculator = FreightCalculator()


def calculate(inputs: BookingInputs) -> CalculationResult:
    """Module-level shortcut for FreightCalculator().calculate."""
    return _default_calculator.calculate(inputs)
