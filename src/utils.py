"""Shared utilities used across the ride booking bot."""

import re


def whatsapp_number(phone: str, country_code: str) -> str:
    """Build the digits-only WhatsApp id for a local phone number.

    Examples:
        >>> whatsapp_number("(82) 99651-8468", "55")
        '5582996518468'
        >>> whatsapp_number("+55 82 99651-8468", "55")
        '5582996518468'
    """
    digits = re.sub(r"[^\d]", "", phone)
    if phone.strip().startswith("+"):
        return digits
    return f"{country_code}{digits}"


def format_brl(amount: float) -> str:
    """Format an amount for display with two decimals.

    Rounding happens here only; callers keep full precision.

    Examples:
        >>> format_brl(80)
        'R$ 80.00'
        >>> format_brl(17.999999)
        'R$ 18.00'
    """
    return f"R$ {amount:.2f}"
