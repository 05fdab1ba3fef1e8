import logging
import math
import re
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import cast

import yaml as y
from dacite import Config, DaciteError, from_dict

from netspeed import glyphs
from netspeed.util import system
from netspeed.util.network import DEFAULT_REFRESH_INTERVAL, PROC_NET_DEV

logger = logging.getLogger(__name__)

DEFAULT_DOWNLOAD_COLOR = "#3fd7e5"
DEFAULT_UPLOAD_COLOR = "#ffb84d"
DEFAULT_FONT_SIZE = "inherit"

_color = re.compile(r"^#?([0-9a-fA-F]{6})$")
_font_size_number = re.compile(r"^[0-9]+$")
_font_size_unit = re.compile(r"^[0-9]+(px|em|pt|%)$")


@dataclass
class Settings:
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL
    download_color: str = DEFAULT_DOWNLOAD_COLOR
    upload_color: str = DEFAULT_UPLOAD_COLOR
    font_size: str = DEFAULT_FONT_SIZE
    arrow_index: int = 0
    counters_file: str = PROC_NET_DEV
    extra_virtual_prefixes: list[str] = field(default_factory=list)

    @property
    def arrows(self) -> tuple[str, str]:
        return glyphs.ARROW_PAIRS[self.arrow_index]


def default_config_file() -> Path:
    return system.get_config_directory() / "config.yaml"


def validate_refresh_interval(value: object) -> float:
    """
    Return the interval in seconds, or the default when it is not a positive number.
    """
    try:
        interval = float(cast(str, value))
    except (TypeError, ValueError):
        interval = math.nan

    if not math.isfinite(interval) or interval <= 0:
        logger.warning(
            f'invalid refresh interval "{value}", using {DEFAULT_REFRESH_INTERVAL}'
        )
        return DEFAULT_REFRESH_INTERVAL
    return interval


def validate_color(value: object, previous: str) -> str:
    match = _color.match(str(value).strip()) if value is not None else None
    if not match:
        logger.warning(f'invalid color "{value}", keeping {previous}')
        return previous
    return f"#{match.group(1)}"


def validate_font_size(value: object, previous: str) -> str:
    """
    Accept "inherit", a bare number (pixels) or a number with a px|em|pt|% suffix.
    """
    font_size = str(value).strip().lower() if value is not None else ""
    if font_size in ("", "inherit"):
        return "inherit"
    elif _font_size_number.match(font_size):
        return f"{font_size}px"
    elif _font_size_unit.match(font_size):
        return font_size

    logger.warning(f'invalid font size "{value}", keeping {previous}')
    return previous


def validate_arrow_index(value: object, previous: int) -> int:
    if isinstance(value, bool):
        index = -1
    else:
        try:
            index = int(cast(str, value))
        except (TypeError, ValueError):
            index = -1

    if 0 <= index < len(glyphs.ARROW_PAIRS):
        return index

    logger.warning(f'invalid arrow index "{value}", keeping {previous}')
    return previous


def sanitize(settings: Settings, previous: Settings | None = None) -> Settings:
    """
    Validate every field, falling back to the previous (or default) settings.
    """
    previous = previous or Settings()
    return Settings(
        refresh_interval=validate_refresh_interval(settings.refresh_interval),
        download_color=validate_color(
            settings.download_color, previous.download_color
        ),
        upload_color=validate_color(settings.upload_color, previous.upload_color),
        font_size=validate_font_size(settings.font_size, previous.font_size),
        arrow_index=validate_arrow_index(settings.arrow_index, previous.arrow_index),
        counters_file=settings.counters_file or previous.counters_file,
        extra_virtual_prefixes=[
            prefix for prefix in settings.extra_virtual_prefixes if prefix
        ],
    )


_dacite_config = Config(cast=[float, int, str], strict=False)


def _mappable_fields(raw: dict[str, object], previous: Settings) -> dict[str, object]:
    """
    Check each key on its own so one wrongly typed value cannot reset the rest
    of the file. A value that does not map onto Settings keeps the previous one.
    """
    data: dict[str, object] = {}
    for settings_field in fields(Settings):
        name = settings_field.name
        if name not in raw:
            continue
        try:
            _ = from_dict(
                data_class=Settings, data={name: raw[name]}, config=_dacite_config
            )
        except (DaciteError, ValueError, TypeError) as e:
            kept = getattr(previous, name)
            logger.warning(f'invalid value for "{name}", keeping {kept}: {e}')
            data[name] = kept
            continue
        data[name] = raw[name]

    return data


def load_settings(
    path: Path | None = None, previous: Settings | None = None
) -> Settings:
    """
    Read the YAML configuration, returning defaults for anything unusable.

    When reloading, pass the settings in use as `previous`: an invalid value in
    the file then keeps the one currently applied instead of the default.
    """
    path = path or default_config_file()
    previous = previous or Settings()
    if not path.exists():
        logger.debug(f'"{path}" does not exist, using defaults')
        return Settings()

    try:
        with open(path, "r", encoding="utf-8") as fh:
            raw = y.safe_load(fh) or {}
        if not isinstance(raw, dict):
            raise ValueError("top level is not a mapping")

        settings = from_dict(
            data_class=Settings,
            data=_mappable_fields(cast(dict[str, object], raw), previous),
            config=_dacite_config,
        )
    except (OSError, y.YAMLError, DaciteError, ValueError, TypeError) as e:
        logger.warning(f'failed to load "{path}", keeping current settings: {e}')
        return replace(previous)

    logger.info(f'loaded settings from "{path}"')
    return sanitize(settings, previous=previous)


def save_settings(settings: Settings, path: Path | None = None) -> bool:
    path = path or default_config_file()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as fh:
            y.safe_dump(asdict(settings), fh, allow_unicode=True, sort_keys=True)
    except OSError as e:
        logger.warning(f'failed to save settings to "{path}": {e}')
        return False

    logger.debug(f'saved settings to "{path}"')
    return True
