import logging
import math
import re
from collections.abc import Sequence

from netspeed.data.network_speed import CounterSnapshot, InterfaceSample, RateSample

logger = logging.getLogger(__name__)

PROC_NET_DEV = "/proc/net/dev"
DEFAULT_REFRESH_INTERVAL = 1.0

# `ifb`: created by the bandwidth manager "traffictoll".
# `lxdbr`: created by the lxd container manager.
VIRTUAL_INTERFACE_PREFIXES: tuple[str, ...] = (
    "lo",
    "ifb",
    "lxdbr",
    "virbr",
    "br",
    "vnet",
    "tun",
    "tap",
    "docker",
    "utun",
    "wg",
    "veth",
)

# name, 8 receive counters, 8 transmit counters
MIN_FIELDS = 17
RX_BYTES_FIELD = 1
TX_BYTES_FIELD = 9

_field_separator = re.compile(r"[:\s]+")
_counter = re.compile(r"[0-9]+")


def is_virtual_interface(
    name: str, prefixes: Sequence[str] = VIRTUAL_INTERFACE_PREFIXES
) -> bool:
    """
    Return True if the interface name starts with a known virtual prefix.
    """
    return any(name.startswith(prefix) for prefix in prefixes)


def parse_interface_line(line: str) -> InterfaceSample | None:
    """
    Parse one /proc/net/dev record, returning None for anything that is not one.
    """
    fields = _field_separator.split(line.strip())
    if len(fields) < MIN_FIELDS:
        return None

    rx_raw = fields[RX_BYTES_FIELD]
    tx_raw = fields[TX_BYTES_FIELD]
    if not _counter.fullmatch(rx_raw) or not _counter.fullmatch(tx_raw):
        return None

    return InterfaceSample(name=fields[0], rx_bytes=int(rx_raw), tx_bytes=int(tx_raw))


def parse_counters(
    text: str, prefixes: Sequence[str] = VIRTUAL_INTERFACE_PREFIXES
) -> CounterSnapshot:
    """
    Sum the received and transmitted bytes of every physical interface.

    Header lines and malformed records are skipped, so an empty or fully
    filtered input simply yields a zero snapshot.
    """
    snapshot = CounterSnapshot()
    for line in text.splitlines():
        sample = parse_interface_line(line)
        if sample is None:
            continue
        if is_virtual_interface(sample.name, prefixes=prefixes):
            logger.debug(f"skipping virtual interface {sample.name}")
            continue
        snapshot.down += sample.rx_bytes
        snapshot.up += sample.tx_bytes

    return snapshot


def read_counters(path: str = PROC_NET_DEV) -> str:
    with open(path, "r", encoding="utf-8") as fh:
        return fh.read()


def _is_positive(number: float) -> bool:
    return math.isfinite(number) and number > 0


def _delta(previous: int, current: int) -> int:
    # A zero baseline is the first observation, a smaller total is a counter
    # reset. Both restart the baseline instead of reporting a rate.
    if previous == 0 or current < previous:
        return 0
    return current - previous


def compute_rate(
    previous: CounterSnapshot,
    current: CounterSnapshot,
    elapsed_seconds: float,
    fallback_interval_seconds: float,
) -> tuple[RateSample, CounterSnapshot]:
    """
    Convert two cumulative snapshots into bytes per second.

    The measured elapsed time is used whenever it is a positive number; the
    nominal refresh interval only stands in for clock anomalies. The second
    element of the result is the baseline for the next cycle.
    """
    if _is_positive(elapsed_seconds):
        interval = elapsed_seconds
    elif _is_positive(fallback_interval_seconds):
        interval = fallback_interval_seconds
    else:
        interval = DEFAULT_REFRESH_INTERVAL

    if current.down < previous.down or current.up < previous.up:
        logger.info(
            f"counters went backwards ({previous.down}/{previous.up} -> {current.down}/{current.up}), resetting baseline"
        )

    rate = RateSample(
        down=_delta(previous.down, current.down) / interval,
        up=_delta(previous.up, current.up) / interval,
    )
    return rate, CounterSnapshot(down=current.down, up=current.up)
