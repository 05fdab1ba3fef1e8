import json
import logging
import signal
import sys
import threading
import time
from collections.abc import Callable
from dataclasses import asdict, replace
from pathlib import Path

import click

from netspeed import config, glyphs
from netspeed.config import Settings
from netspeed.data.network_speed import NetworkSpeed
from netspeed.monitor import NetSpeedMonitor
from netspeed.scheduler import TimerScheduler
from netspeed.util import log, network, render, wtime

context_settings = dict(help_option_names=["-h", "--help"])
logger = logging.getLogger(__name__)


def write_output(network_speed: NetworkSpeed, settings: Settings):
    text, output_class, tooltip = render.render_output(
        network_speed=network_speed, settings=settings
    )
    print(json.dumps({"text": text, "class": output_class, "tooltip": tooltip}))


def apply_overrides(
    settings: Settings,
    interval: float | None = None,
    arrows: int | None = None,
    download_color: str | None = None,
    upload_color: str | None = None,
    font_size: str | None = None,
    counters_file: str | None = None,
) -> Settings:
    """
    Layer the command line options on top of the configuration file.
    """
    if interval is not None:
        settings.refresh_interval = config.validate_refresh_interval(interval)
    if arrows is not None:
        settings.arrow_index = config.validate_arrow_index(
            arrows - 1, settings.arrow_index
        )
    if download_color is not None:
        settings.download_color = config.validate_color(
            download_color, settings.download_color
        )
    if upload_color is not None:
        settings.upload_color = config.validate_color(
            upload_color, settings.upload_color
        )
    if font_size is not None:
        settings.font_size = config.validate_font_size(font_size, settings.font_size)
    if counters_file is not None:
        settings.counters_file = counters_file

    return settings


def sample_once(settings: Settings) -> NetworkSpeed:
    """
    Take two samples one refresh interval apart and return the resulting speed.
    """
    prefixes = network.VIRTUAL_INTERFACE_PREFIXES + tuple(
        settings.extra_virtual_prefixes
    )
    try:
        first = network.parse_counters(
            network.read_counters(settings.counters_file), prefixes=prefixes
        )
        started = time.monotonic()
        time.sleep(settings.refresh_interval)
        second = network.parse_counters(
            network.read_counters(settings.counters_file), prefixes=prefixes
        )
        elapsed = time.monotonic() - started
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f'failed to read "{settings.counters_file}": {e}')
        return NetworkSpeed(
            success=False, error=f"failed to read {settings.counters_file}"
        )

    rate, _ = network.compute_rate(
        previous=first,
        current=second,
        elapsed_seconds=elapsed,
        fallback_interval_seconds=settings.refresh_interval,
    )
    down_arrow, up_arrow = settings.arrows
    return NetworkSpeed(
        success=True,
        rate=rate,
        display=render.compose_display(rate, down_arrow=down_arrow, up_arrow=up_arrow),
        updated=wtime.get_human_timestamp(),
    )


class SettingsFile:
    """
    The configuration file with the command line overrides layered on top.

    Only values changed while running are written back, so the overrides of
    one invocation never end up in the file.
    """

    def __init__(self, path: Path, **overrides):
        self.path = path
        self.overrides = overrides
        self._applied = Settings()

    def load(self, previous: Settings | None = None) -> Settings:
        settings = apply_overrides(
            config.load_settings(self.path, previous=previous), **self.overrides
        )
        self._applied = replace(settings)
        return settings

    def save(self, settings: Settings) -> bool:
        stored = config.load_settings(self.path)
        for name, value in asdict(settings).items():
            if value != getattr(self._applied, name):
                setattr(stored, name, value)
        self._applied = replace(settings)
        return config.save_settings(stored, self.path)


def signal_handlers(
    monitor: NetSpeedMonitor, settings_file: SettingsFile, stop: threading.Event
) -> dict[signal.Signals, Callable[[int, object | None], None]]:
    def toggle_arrows(_signum: int, _frame: object | None):
        logger.info("received SIGUSR1 - switching arrows")
        monitor.cycle_arrows()

    def reload_config(_signum: int, _frame: object | None):
        logger.info("received SIGHUP - reloading configuration")
        monitor.apply_settings(settings_file.load(previous=monitor.settings))

    def shutdown(signum: int, _frame: object | None):
        logger.info(f"received {signal.Signals(signum).name} - shutting down")
        stop.set()

    return {
        signal.SIGUSR1: toggle_arrows,
        signal.SIGHUP: reload_config,
        signal.SIGINT: shutdown,
        signal.SIGTERM: shutdown,
    }


@click.command(
    name="run",
    help="Show network throughput from /proc/net/dev",
    context_settings=context_settings,
)
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="The YAML configuration file (default: $XDG_CONFIG_HOME/netspeed/config.yaml)",
)
@click.option(
    "-i", "--interval", type=float, default=None, help="The update interval (in seconds)"
)
@click.option(
    "-a",
    "--arrows",
    type=click.IntRange(1, len(glyphs.ARROW_PAIRS)),
    default=None,
    help="The arrow pair to use",
)
@click.option("--download-color", default=None, help="Download color (hex)")
@click.option("--upload-color", default=None, help="Upload color (hex)")
@click.option("--font-size", default=None, help="Font size (inherit, px, em, pt or %)")
@click.option(
    "-f", "--counters-file", default=None, help="Read counters from this file"
)
@click.option(
    "-t", "--test", default=False, is_flag=True, help="Print the output and exit"
)
@click.option("-d", "--debug", default=False, is_flag=True, help="Enable debug logging")
def main(
    config_file: Path | None,
    interval: float | None,
    arrows: int | None,
    download_color: str | None,
    upload_color: str | None,
    font_size: str | None,
    counters_file: str | None,
    test: bool,
    debug: bool,
):
    _ = log.configure(debug=debug)
    settings_file = SettingsFile(
        config_file or config.default_config_file(),
        interval=interval,
        arrows=arrows,
        download_color=download_color,
        upload_color=upload_color,
        font_size=font_size,
        counters_file=counters_file,
    )
    settings = settings_file.load()

    if test:
        network_speed = sample_once(settings)
        text, output_class, tooltip = render.render_output(
            network_speed=network_speed, settings=settings
        )
        print(text)
        print(output_class)
        print(tooltip)
        return

    sys.stdout.reconfigure(line_buffering=True)  # type: ignore
    logger.info("entering")

    stop = threading.Event()
    monitor = NetSpeedMonitor(
        settings=settings,
        scheduler=TimerScheduler(),
        writer=write_output,
        on_settings_changed=settings_file.save,
    )
    for signum, handler in signal_handlers(monitor, settings_file, stop).items():
        _ = signal.signal(signum, handler)

    monitor.enable()
    while not stop.is_set():
        _ = stop.wait(timeout=1)
    monitor.disable()


if __name__ == "__main__":
    main()
