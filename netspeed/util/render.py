import re
from xml.sax.saxutils import escape

from netspeed import glyphs
from netspeed.config import Settings
from netspeed.data.network_speed import NetworkSpeed, RateSample, SpeedDisplay
from netspeed.util.conversion import (
    AMOUNT_WIDTH,
    UNIT_WIDTH,
    format_speed_with_unit,
    pad_right,
)

_font_size = re.compile(r"^([0-9]+)(px|em|pt|%)$")


def speed_text(amount: float, arrow: str) -> str:
    parts = format_speed_with_unit(amount)
    return f"{arrow}{pad_right(parts.amount, AMOUNT_WIDTH)}{pad_right(parts.unit, UNIT_WIDTH)}"


def compose_display(rate: RateSample, down_arrow: str, up_arrow: str) -> SpeedDisplay:
    """
    Build the fixed-width download and upload labels for a rate.
    """
    return SpeedDisplay(
        download_text=speed_text(rate.down, down_arrow or glyphs.default_down_arrow),
        upload_text=speed_text(rate.up, up_arrow or glyphs.default_up_arrow),
    )


def pango_font_size(font_size: str) -> str | None:
    """
    Translate a CSS-style size into something Pango's font_size attribute accepts.
    """
    match = _font_size.match(font_size)
    if not match:
        return None

    number, unit = int(match.group(1)), match.group(2)
    if unit == "px":
        return f"{number * 0.75:g}pt"
    elif unit == "em":
        return f"{number * 100}%"
    return f"{number}{unit}"


def label_markup(text: str, color: str, font_size: str) -> str:
    attributes = [f'foreground="{color}"']
    size = pango_font_size(font_size)
    if size:
        attributes.append(f'font_size="{size}"')

    return f"<span {' '.join(attributes)}>{escape(text)}</span>"


def generate_tooltip(network_speed: NetworkSpeed) -> str:
    tooltip: list[str] = []
    down = format_speed_with_unit(network_speed.rate.down)
    up = format_speed_with_unit(network_speed.rate.up)

    tooltip.append(f"Download : {down.amount} {down.unit}")
    tooltip.append(f"Upload   : {up.amount} {up.unit}")

    if network_speed.updated:
        tooltip.append("")
        tooltip.append(f"Last updated {network_speed.updated}")

    return "\n".join(tooltip)


def render_output(
    network_speed: NetworkSpeed, settings: Settings
) -> tuple[str, str, str]:
    if network_speed.success:
        download = label_markup(
            network_speed.display.download_text,
            color=settings.download_color,
            font_size=settings.font_size,
        )
        upload = label_markup(
            network_speed.display.upload_text,
            color=settings.upload_color,
            font_size=settings.font_size,
        )
        text = f"{download} {upload}"
        output_class = "success"
        tooltip = generate_tooltip(network_speed=network_speed)
    else:
        error = network_speed.error or "Unknown error"
        text = f"{glyphs.md_network_off}{glyphs.icon_spacer}{escape(error)}"
        output_class = "error"
        tooltip = error

    return text, output_class, tooltip
