"""Configuration settings for Bilty Desk"""
import os

# Company Information
COMPANY_NAME = "Bilty Desk Transport Brokers"
COMPANY_PHONE = ""
COMPANY_EMAIL = ""

# Presentation
CURRENCY_SYMBOL = "₹"

# Commission attribution modes
COMMISSION_TYPES = {
    'party': 'From Party (Deducted)',
    'truck': 'From Truck Owner/Driver',
    'bank': 'Bank / Other',
    'free': 'Free / No Commission'
}

# Commission types that force the commission to zero ('' = not selected)
NO_COMMISSION_TYPES = ['', 'free']

BOOKING_TYPES = ['normal', 'direct']
BOOKING_STATUSES = ['pending', 'in_transit', 'delivered', 'completed', 'cancelled']
WEIGHT_TYPES = ['kg', 'quintal', 'ton']

# Printable slips served by the backend
SLIP_TYPES = ['booking', 'bilty', 'difference']

# Backend REST API
API_URL = os.environ.get('BILTY_API_URL', '').rstrip('/')
API_TIMEOUT = float(os.environ.get('BILTY_API_TIMEOUT', '30'))

# Local storage fallback
DATA_DIR = os.environ.get('BILTY_DATA_DIR', 'data')

# Excel styling
EXCEL_STYLES = {
    'header_bg_color': 'D3D3D3',  # Light gray
    'summary_bg_color': 'FFF2CC',  # Light yellow
    'font_name': 'Arial',
    'font_size': 10,
    'number_format': '"₹"#,##0.00'
}
