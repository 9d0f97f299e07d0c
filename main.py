"""Main entry point for Bilty Desk"""
import argparse
from pathlib import Path
from datetime import datetime

from src.models import BookingInputs
from src.calculator import FreightCalculator, payment_status, resolve_commission
from src.data_loader import DataLoader
from src.formatting import format_currency
from src.report_generator import BookingReport
from config import COMMISSION_TYPES

INPUT_OPTIONS = [
    ('--rate', 'rate', 'Party rate per weight unit'),
    ('--weight', 'weight', 'Weight billed to the party'),
    ('--truck-rate', 'truck_rate', 'Truck rate per weight unit'),
    ('--truck-weight', 'truck_weight', 'Weight billed by the truck'),
    ('--commission', 'commission_amount', 'Explicit commission amount'),
    ('--commission-percentage', 'commission_percentage', 'Commission as %% of party freight'),
    ('--truck-commission', 'truck_commission_amount', 'Commission charged to the truck'),
    ('--difference', 'difference_amount', 'Override the freight difference'),
    ('--advance-from-party', 'initial_payment_from_party', 'Advance received from the party'),
    ('--advance-to-truck', 'initial_payment_to_truck', 'Advance paid to the truck'),
]


def cmd_calculate(args) -> None:
    values = {dest: getattr(args, dest) for _, dest, _ in INPUT_OPTIONS}
    inputs = BookingInputs(commission_type=args.commission_type, **values)

    calculator = FreightCalculator()
    result = calculator.calculate(inputs)
    review = calculator.review_summary(inputs, result)
    _, rule = resolve_commission(inputs, result.party_freight)

    print("=== Freight ===")
    print(f"Party Freight:   {format_currency(result.party_freight)}")
    print(f"Truck Freight:   {format_currency(result.truck_freight)}")
    print(f"Difference:      {format_currency(result.difference_amount)}"
          f" (raw {format_currency(result.raw_difference)})")
    print(f"Commission:      {format_currency(result.commission_amount)} [{review.commission_label}, {rule}]")
    print("\n=== Settlement ===")
    print(f"Party Net:       {format_currency(result.party_net_amount)}")
    print(f"Truck Net:       {format_currency(result.truck_net_amount)}")
    print(f"Party Pending:   {format_currency(result.party_pending)} ({payment_status(result.party_pending)})")
    print(f"Truck Pending:   {format_currency(result.truck_pending)} ({payment_status(result.truck_pending)})")
    print("\n=== Review ===")
    print(f"Receivable from party: {format_currency(review.party_receivable)}")
    print(f"Payable to truck:      {format_currency(review.truck_payable)}")
    print(f"Net balance:           {format_currency(review.net_balance)}")


def cmd_report(args) -> None:
    input_path = Path(args.input_file)
    if input_path.suffix.lower() == '.csv':
        bookings = DataLoader.load_from_csv(str(input_path))
    else:
        bookings = DataLoader.load_from_excel(str(input_path))

    print(f"Loaded {len(bookings)} bookings")

    report = BookingReport(bookings)

    if args.output:
        output_path = args.output
    else:
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        output_path = f"output/reports/bookings_export_{timestamp}.xlsx"

    if output_path.lower().endswith('.csv'):
        report.export_csv(output_path)
    else:
        report.export_excel(output_path)
    print(f"Report saved to: {output_path}")

    totals = report.get_totals()
    print(f"\n=== Summary ===")
    print(f"Bookings: {totals['booking_count']}")
    print(f"Party Freight: {format_currency(totals['party_freight'])}")
    print(f"Truck Freight: {format_currency(totals['truck_freight'])}")
    print(f"Difference: {format_currency(totals['difference'])}")
    print(f"Commission: {format_currency(totals['commission'])}")
    print(f"Pending from parties: {format_currency(totals['party_pending'])}")
    print(f"Pending to trucks: {format_currency(totals['truck_pending'])}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Freight booking calculations and reports')
    subparsers = parser.add_subparsers(dest='command', required=True)

    calc = subparsers.add_parser('calculate', help='Calculate amounts for one booking')
    for flag, dest, help_text in INPUT_OPTIONS:
        calc.add_argument(flag, dest=dest, default=None, help=help_text)
    calc.add_argument('--commission-type', choices=sorted(COMMISSION_TYPES), default=None,
                      help='Who the commission is charged to')
    calc.set_defaults(func=cmd_calculate)

    report = subparsers.add_parser('report', help='Export a bookings sheet with computed amounts')
    report.add_argument('input_file', help='Path to input Excel/CSV file with booking data')
    report.add_argument('--output', '-o', default=None, help='Output file path (.xlsx or .csv)')
    report.set_defaults(func=cmd_report)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    args.func(args)


if __name__ == '__main__':
    main()
