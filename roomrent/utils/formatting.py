from decimal import Decimal
from typing import Optional


# === Helper Functions ===

def to_decimal(value) -> Decimal:
    """Coerce user/sensor numbers to Decimal without float drift"""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def optional_decimal(value) -> Optional[Decimal]:
    if value is None:
        return None
    return to_decimal(value)


def format_amount(amount) -> str:
    """Format amount with currency suffix (dot as thousands separator)"""
    if amount is None:
        return "-"
    return f"{to_decimal(amount):,.0f} VND".replace(",", ".")


def format_date(date_obj) -> str:
    """Format date as DD/MM/YYYY"""
    if not date_obj:
        return "-"
    return f"{date_obj.day:02d}/{date_obj.month:02d}/{date_obj.year}"


def format_period(month: int, year: int) -> str:
    return f"{month}/{year}"


def format_reading(value) -> str:
    return f"{to_decimal(value):.2f}"


def get_status_badge(status: str) -> str:
    """Short label for invoice status in printed documents"""
    badges = {
        "PENDING": "Unpaid",
        "PAID": "Paid",
        "OVERDUE": "Overdue",
    }
    return badges.get(status, status)
