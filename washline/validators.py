"""
Validation utilities
"""
import re
from datetime import datetime

EMAIL_PATTERN = re.compile(r'^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$')
PHONE_PATTERN = re.compile(r'^(\+880|880|0)?1[3456789]\d{8}$')
POSTAL_CODE_PATTERN = re.compile(r'^\d{4}$')

MIN_PASSWORD_LENGTH = 6
ADDRESS_FIELDS = ('street', 'city', 'postal_code')


def validate_email(email):
    """
    Validate email format

    Args:
        email (str): Email address to validate

    Returns:
        bool: True if valid, False otherwise
    """
    if not email or not isinstance(email, str):
        return False
    return bool(EMAIL_PATTERN.match(email.strip()))


def validate_phone(phone):
    """
    Validate phone number format (Bangladesh mobile)

    Accepts 01XXXXXXXXX with an optional +880 / 880 prefix in place of the 0.
    """
    if not phone or not isinstance(phone, str):
        return False
    cleaned = re.sub(r'[\s\-]', '', phone)
    return bool(PHONE_PATTERN.match(cleaned))


def validate_postal_code(postal_code):
    """Bangladeshi postal codes are four digits"""
    if not postal_code:
        return False
    return bool(POSTAL_CODE_PATTERN.match(str(postal_code).strip()))


def validate_address(address):
    """
    Validate a structured address

    Returns:
        str or None: Error message, or None when valid
    """
    if not isinstance(address, dict):
        return 'Address must include street, city and postal_code'
    missing = [f for f in ADDRESS_FIELDS if not str(address.get(f) or '').strip()]
    if missing:
        return 'Address is missing: {}'.format(', '.join(missing))
    if not validate_postal_code(address['postal_code']):
        return 'Please enter a valid postal code'
    return None


def parse_pickup(pickup_date, pickup_time):
    """
    Parse pickup date (YYYY-MM-DD) and time (HH:MM) strings

    Returns:
        datetime or None if either part is malformed
    """
    if not isinstance(pickup_date, str) or not isinstance(pickup_time, str):
        return None
    try:
        return datetime.strptime('{} {}'.format(pickup_date.strip(), pickup_time.strip()), '%Y-%m-%d %H:%M')
    except ValueError:
        return None
