from netspeed import glyphs
from netspeed.config import Settings
from netspeed.data.network_speed import NetworkSpeed, RateSample, SpeedDisplay
from netspeed.util import render

NBSP = glyphs.nbsp


def test_compose_display():
    display = render.compose_display(RateSample(down=1500, up=300), "⇣", "⇡")
    assert display == SpeedDisplay(
        download_text="⇣1.50" + NBSP * 2 + "KB/s",
        upload_text="⇡300" + NBSP * 3 + "B/s" + NBSP,
    )


def test_compose_display_keeps_width_stable():
    widths = {
        len(render.compose_display(RateSample(amount, amount), "↓", "↑").download_text)
        for amount in (0, 5, 55.5, 999, 1000, 12_345, 999_999, 3_000_000_000)
    }
    assert widths == {1 + 6 + 4}


def test_compose_display_default_arrows():
    display = render.compose_display(RateSample(), "", "")
    assert display.download_text.startswith(glyphs.default_down_arrow)
    assert display.upload_text.startswith(glyphs.default_up_arrow)


def test_compose_display_is_pure():
    rate = RateSample(down=123456, up=789)
    assert render.compose_display(rate, "⬇", "⬆") == render.compose_display(
        rate, "⬇", "⬆"
    )


def test_pango_font_size():
    assert render.pango_font_size("inherit") is None
    assert render.pango_font_size("16px") == "12pt"
    assert render.pango_font_size("15px") == "11.25pt"
    assert render.pango_font_size("2em") == "200%"
    assert render.pango_font_size("11pt") == "11pt"
    assert render.pango_font_size("120%") == "120%"


def test_label_markup():
    assert (
        render.label_markup("a<b", color="#112233", font_size="inherit")
        == '<span foreground="#112233">a&lt;b</span>'
    )
    assert (
        render.label_markup("x", color="#112233", font_size="12pt")
        == '<span foreground="#112233" font_size="12pt">x</span>'
    )


def test_render_output_success():
    settings = Settings(download_color="#000001", upload_color="#000002")
    network_speed = NetworkSpeed(
        success=True,
        rate=RateSample(down=1500, up=300),
        display=render.compose_display(RateSample(down=1500, up=300), "⇣", "⇡"),
        updated="2026-01-01 00:00:00",
    )
    text, output_class, tooltip = render.render_output(network_speed, settings)

    assert output_class == "success"
    assert text.startswith('<span foreground="#000001">⇣1.50')
    assert '<span foreground="#000002">⇡300' in text
    assert "Download : 1.50 KB/s" in tooltip
    assert "Upload   : 300 B/s" in tooltip
    assert tooltip.endswith("Last updated 2026-01-01 00:00:00")


def test_render_output_error():
    network_speed = NetworkSpeed(success=False, error="failed to read /nope")
    text, output_class, tooltip = render.render_output(network_speed, Settings())

    assert output_class == "error"
    assert text == f"{glyphs.md_network_off}{glyphs.icon_spacer}failed to read /nope"
    assert tooltip == "failed to read /nope"
