from netspeed import glyphs
from netspeed.data.network_speed import SpeedParts

SPEED_UNITS: list[str] = [
    "B/s",
    "KB/s",
    "MB/s",
    "GB/s",
    "TB/s",
    "PB/s",
    "EB/s",
    "ZB/s",
    "YB/s",
]

# Column widths keep the arrow and the unit in place as the amount changes.
# AMOUNT_WIDTH has to hold values like "999.99".
UNIT_WIDTH = max(len(unit) for unit in SPEED_UNITS)
AMOUNT_WIDTH = 6


def speed_digits(amount: float) -> int:
    """
    Return the number of decimal places to show for a scaled amount.
    """
    if amount >= 100 or amount < 0.01:
        return 0
    elif amount >= 10:
        return 1
    return 2


def format_speed_with_unit(amount: float) -> SpeedParts:
    """
    Scale bytes per second into the largest unit that keeps it under 1000.
    """
    unit_index = 0
    while amount >= 1000 and unit_index < len(SPEED_UNITS) - 1:
        amount /= 1000
        unit_index += 1

    digits = speed_digits(amount)
    return SpeedParts(amount=f"{amount:.{digits}f}", unit=SPEED_UNITS[unit_index])


def pad_right(text: str, width: int, fill: str = glyphs.nbsp) -> str:
    """
    Pad text on the right with non-breaking spaces so the host does not trim it.
    """
    return text + fill * max(0, width - len(text))
