import logging
import threading
import time
from collections.abc import Callable

from netspeed import glyphs
from netspeed.config import (
    Settings,
    sanitize,
    validate_color,
    validate_font_size,
    validate_refresh_interval,
)
from netspeed.data.network_speed import (
    CounterSnapshot,
    NetworkSpeed,
    RateSample,
    SamplerState,
)
from netspeed.scheduler import CancelToken, Scheduler
from netspeed.util import network, wtime
from netspeed.util.render import compose_display

logger = logging.getLogger(__name__)

Writer = Callable[[NetworkSpeed, Settings], None]


class NetSpeedMonitor:
    """
    Timer-driven sample cycle: read counters, compute the rate, hand it to a writer.

    Lifecycle:
        1. enable() writes a zero reading and schedules the first tick
        2. each tick reads, computes and writes, then schedules the next one
        3. disable() cancels the pending tick and drops the carried state

    The carried SamplerState is only touched while holding the lock, and a
    new tick is only scheduled once the previous one has finished.
    """

    def __init__(
        self,
        settings: Settings,
        scheduler: Scheduler,
        writer: Writer,
        reader: Callable[[str], str] = network.read_counters,
        clock: Callable[[], float] = time.monotonic,
        on_settings_changed: Callable[[Settings], None] | None = None,
    ):
        self.settings = settings
        self._scheduler = scheduler
        self._writer = writer
        self._reader = reader
        self._clock = clock
        self._on_settings_changed = on_settings_changed

        self._lock = threading.RLock()
        self._session: CancelToken | None = None
        self._pending: CancelToken | None = None
        self._state: SamplerState | None = None
        self._generation = 0
        self._last_rate = RateSample()

    @property
    def enabled(self) -> bool:
        return self._session is not None

    @property
    def state(self) -> SamplerState | None:
        return self._state

    @property
    def prefixes(self) -> tuple[str, ...]:
        return network.VIRTUAL_INTERFACE_PREFIXES + tuple(
            self.settings.extra_virtual_prefixes
        )

    # ---- lifecycle ----

    def enable(self) -> None:
        with self._lock:
            if self._session is not None:
                return
            logger.info(
                f"enabling, refresh interval {self.settings.refresh_interval}s, reading {self.settings.counters_file}"
            )
            self._session = CancelToken()
            self._state = SamplerState(
                previous=CounterSnapshot(), sampled_at=self._clock()
            )
            self._last_rate = RateSample()
            self._emit(self._result(self._last_rate))
            self._schedule_next(self._session)

    def disable(self) -> None:
        with self._lock:
            if self._session is None:
                return
            logger.info("disabling")
            self._session.cancel()
            if self._pending is not None:
                self._pending.cancel()
            self._session = None
            self._pending = None
            self._state = None
            self._last_rate = RateSample()

    # ---- sample cycle ----

    def _schedule_next(self, session: CancelToken) -> None:
        self._generation += 1
        generation = self._generation
        after_ms = round(self.settings.refresh_interval * 1000)
        logger.debug(f"next tick in {after_ms}ms")
        self._pending = self._scheduler.schedule(
            after_ms, lambda: self._tick(session, generation)
        )

    def _tick(self, session: CancelToken, generation: int) -> None:
        with self._lock:
            # A timer that fired while being rescheduled is stale
            if session.cancelled or generation != self._generation:
                return
            self._pending = None

        try:
            self._sample(session)
        finally:
            with self._lock:
                if not session.cancelled and self._pending is None:
                    self._schedule_next(session)

    def _sample(self, session: CancelToken) -> NetworkSpeed | None:
        path = self.settings.counters_file
        try:
            text = self._reader(path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f'failed to read "{path}", retrying next tick: {e}')
            with self._lock:
                if session.cancelled:
                    return None
                result = NetworkSpeed(success=False, error=f"failed to read {path}")
                self._emit(result)
            return result

        with self._lock:
            if session.cancelled or self._state is None:
                logger.debug("monitor was disabled during the read, discarding it")
                return None

            now = self._clock()
            current = network.parse_counters(text, prefixes=self.prefixes)
            rate, previous = network.compute_rate(
                previous=self._state.previous,
                current=current,
                elapsed_seconds=now - self._state.sampled_at,
                fallback_interval_seconds=self.settings.refresh_interval,
            )
            self._state = SamplerState(previous=previous, sampled_at=now)
            self._last_rate = rate

            result = self._result(rate)
            self._emit(result)
        return result

    def _result(self, rate: RateSample) -> NetworkSpeed:
        down_arrow, up_arrow = self.settings.arrows
        return NetworkSpeed(
            success=True,
            rate=rate,
            display=compose_display(rate, down_arrow=down_arrow, up_arrow=up_arrow),
            updated=wtime.get_human_timestamp(),
        )

    def _emit(self, result: NetworkSpeed) -> None:
        try:
            self._writer(result, self.settings)
        except Exception:
            logger.exception("writer failed, continuing with the next tick")

    def _redraw(self) -> None:
        if self.enabled:
            self._emit(self._result(self._last_rate))

    # ---- settings ----

    def _notify(self) -> None:
        if self._on_settings_changed:
            self._on_settings_changed(self.settings)

    def _reschedule(self) -> None:
        # An in-flight tick picks up the new interval when it reschedules itself
        if self._session is not None and self._pending is not None:
            self._pending.cancel()
            self._schedule_next(self._session)

    def set_refresh_interval(self, value: object) -> None:
        with self._lock:
            interval = validate_refresh_interval(value)
            if interval == self.settings.refresh_interval:
                return
            logger.info(f"refresh interval changed to {interval}s")
            self.settings.refresh_interval = interval
            self._reschedule()
        self._notify()

    def cycle_arrows(self) -> None:
        with self._lock:
            self.settings.arrow_index = (self.settings.arrow_index + 1) % len(
                glyphs.ARROW_PAIRS
            )
            down_arrow, up_arrow = self.settings.arrows
            logger.info(
                f"switched to arrow pair {self.settings.arrow_index + 1} ({down_arrow} {up_arrow})"
            )
            self._redraw()
        self._notify()

    def update_appearance(
        self,
        download_color: str | None = None,
        upload_color: str | None = None,
        font_size: str | None = None,
    ) -> None:
        with self._lock:
            if download_color is not None:
                self.settings.download_color = validate_color(
                    download_color, self.settings.download_color
                )
            if upload_color is not None:
                self.settings.upload_color = validate_color(
                    upload_color, self.settings.upload_color
                )
            if font_size is not None:
                self.settings.font_size = validate_font_size(
                    font_size, self.settings.font_size
                )
            self._redraw()
        self._notify()

    def apply_settings(self, settings: Settings) -> None:
        """
        Replace every setting at once, e.g. after the configuration file was reloaded.
        """
        with self._lock:
            new_settings = sanitize(settings, previous=self.settings)
            interval_changed = (
                new_settings.refresh_interval != self.settings.refresh_interval
            )
            self.settings = new_settings
            if interval_changed:
                self._reschedule()
            self._redraw()
