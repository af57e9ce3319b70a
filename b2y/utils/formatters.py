"""Brazilian number parsing and display formatting."""

from typing import Any


def parse_br_number(value: Any) -> float:
    """
    Parse a pt-BR formatted number.

    "1.500.000,50" -> 1500000.5. Dots are thousands separators and the
    comma is the decimal mark. Empty or missing values parse as 0.
    Raises ValueError for anything else that is not a number.
    """
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)

    text = str(value).strip()
    if not text:
        return 0.0
    text = text.replace("R$", "").replace(" ", "")
    return float(text.replace(".", "").replace(",", "."))


def parse_percentage(value: Any) -> float:
    """Parse a percent string ("25" or "12,5") into a fraction."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) / 100

    text = str(value).strip().replace("%", "")
    if not text:
        return 0.0
    return float(text.replace(",", ".")) / 100


def _group_thousands(integer_part: str) -> str:
    groups = []
    while len(integer_part) > 3:
        groups.insert(0, integer_part[-3:])
        integer_part = integer_part[:-3]
    groups.insert(0, integer_part)
    return ".".join(groups)


def format_currency(value: float, decimals: int = 2) -> str:
    """Format as BRL, e.g. 180000 -> "R$ 180.000,00"."""
    sign = "-" if value < 0 else ""
    formatted = f"{abs(value):.{decimals}f}"
    if decimals:
        integer_part, fraction = formatted.split(".")
        return f"{sign}R$ {_group_thousands(integer_part)},{fraction}"
    return f"{sign}R$ {_group_thousands(formatted)}"


def format_percentage(value: float, max_decimals: int = 2) -> str:
    """Format a fraction as a percentage, e.g. 0.25 -> "25%"."""
    formatted = f"{value * 100:.{max_decimals}f}".rstrip("0").rstrip(".")
    return f"{formatted.replace('.', ',')}%"
