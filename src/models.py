"""Data models for Bilty Desk"""
import re
from dataclasses import dataclass, fields
from typing import Any, Dict, Literal, Optional, Union

from config import COMMISSION_TYPES

CommissionType = Literal['truck', 'party', 'bank', 'free']

# Raw form value: whatever the user typed or the backend sent
RawAmount = Optional[Union[str, int, float]]

# Backend (camelCase) key -> BookingInputs field
INPUT_KEYS = {
    'rate': 'rate',
    'weight': 'weight',
    'truckRate': 'truck_rate',
    'truckWeight': 'truck_weight',
    'commissionType': 'commission_type',
    'commissionAmount': 'commission_amount',
    'commissionPercentage': 'commission_percentage',
    'truckCommissionAmount': 'truck_commission_amount',
    'differenceAmount': 'difference_amount',
    'initialPaymentFromParty': 'initial_payment_from_party',
    'initialPaymentToTruck': 'initial_payment_to_truck',
}


def to_camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.capitalize() for part in rest)


def to_snake(name: str) -> str:
    return re.sub(r'(?<!^)(?=[A-Z])', '_', name).lower()


@dataclass(frozen=True)
class BookingInputs:
    """Snapshot of the fields the freight calculation depends on"""
    rate: RawAmount = None
    weight: RawAmount = None
    truck_rate: RawAmount = None
    truck_weight: RawAmount = None
    commission_type: Optional[CommissionType] = None
    commission_amount: RawAmount = None
    commission_percentage: RawAmount = None
    truck_commission_amount: RawAmount = None
    difference_amount: RawAmount = None
    initial_payment_from_party: RawAmount = None
    initial_payment_to_truck: RawAmount = None

    def __post_init__(self):
        if self.commission_type and self.commission_type not in COMMISSION_TYPES:
            raise ValueError(f"Unknown commission type: {self.commission_type!r}")

    @property
    def is_truck_commission(self) -> bool:
        return self.commission_type == 'truck'

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BookingInputs':
        """Build from a form/payload dict; accepts snake_case or camelCase keys."""
        names = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            name = INPUT_KEYS.get(key, key)
            if name in names:
                values[name] = value
        if values.get('commission_type') == '':
            values['commission_type'] = None
        return cls(**values)


@dataclass(frozen=True)
class CalculationResult:
    """Amounts derived from a BookingInputs snapshot"""
    party_freight: float = 0.0
    truck_freight: float = 0.0
    raw_difference: float = 0.0
    commission_amount: float = 0.0
    difference_amount: float = 0.0
    party_net_amount: float = 0.0
    truck_net_amount: float = 0.0
    party_pending: float = 0.0
    truck_pending: float = 0.0

    def to_payload(self) -> Dict[str, float]:
        return {
            'partyFreight': self.party_freight,
            'truckFreight': self.truck_freight,
            'rawDifference': self.raw_difference,
            'commissionAmount': self.commission_amount,
            'differenceAmount': self.difference_amount,
            'partyNetAmount': self.party_net_amount,
            'truckNetAmount': self.truck_net_amount,
            'partyPending': self.party_pending,
            'truckPending': self.truck_pending,
        }


@dataclass(frozen=True)
class ReviewSummary:
    """Figures shown on the review step before a booking is submitted"""
    party_receivable: float
    truck_payable: float
    net_balance: float
    commission_label: str

    @property
    def broker_gains(self) -> bool:
        return self.net_balance > 0
