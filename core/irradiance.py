# core/irradiance.py
"""
Zip code -> peak sun hours.

The data source is a placeholder heuristic over zip prefixes; the async
surface is what a real irradiance service would plug into.
"""
from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
from typing import Callable, Optional, Set, Tuple

from core.models import IrradianceEstimate
from core.settings import IrradianceSettings, Region, load_settings

logger = logging.getLogger(__name__)

PROMPT_MESSAGE = "Enter a zip code for a location-specific solar recommendation."
INVALID_ZIP_MESSAGE = "Enter a valid 5-digit zip code for a location-specific solar recommendation."


def _located_message(location: str, psh: float) -> str:
    return f"Using solar irradiance data for {location}. Est. Peak Sun Hours: {psh:g}."


def default_estimate(settings: IrradianceSettings, message: Optional[str] = None) -> IrradianceEstimate:
    psh = float(settings.default_peak_sun_hours)
    loc = settings.default_location
    return IrradianceEstimate(
        peak_sun_hours=psh,
        description=loc,
        message=message or _located_message(loc, psh),
        located=False,
    )


def _match_region(zip_code: str, regions: Tuple[Region, ...]) -> Optional[Region]:
    # longest prefix wins, so "98" beats "9"
    best: Optional[Region] = None
    best_len = 0
    for region in regions:
        for prefix in region.prefixes:
            if zip_code.startswith(prefix) and len(prefix) > best_len:
                best, best_len = region, len(prefix)
    return best


def is_valid_zip(zip_code: Optional[str], settings: IrradianceSettings) -> bool:
    return len(str(zip_code or "").strip()) >= int(settings.min_zip_length)


def estimate_for_zip(zip_code: Optional[str], settings: IrradianceSettings) -> IrradianceEstimate:
    z = str(zip_code or "").strip()
    if not is_valid_zip(z, settings):
        return default_estimate(settings, INVALID_ZIP_MESSAGE)

    region = _match_region(z, settings.regions)
    if region is None:
        return default_estimate(settings)

    return IrradianceEstimate(
        peak_sun_hours=region.peak_sun_hours,
        description=region.location,
        message=_located_message(region.location, region.peak_sun_hours),
        located=True,
    )


# ==========================================================
# Async lookup
# ==========================================================
class IrradianceLookup:
    """`lookup()` always resolves; failures fall back to the default estimate."""

    def __init__(
        self,
        settings: Optional[IrradianceSettings] = None,
        *,
        latency_s: Optional[float] = None,
        timeout_s: Optional[float] = None,
    ) -> None:
        self.settings = settings or load_settings().irradiance
        self.latency_s = self.settings.simulated_latency_s if latency_s is None else float(latency_s)
        self.timeout_s = self.settings.timeout_s if timeout_s is None else float(timeout_s)

    async def _fetch(self, zip_code: str) -> IrradianceEstimate:
        if self.latency_s > 0:
            await asyncio.sleep(self.latency_s)
        return estimate_for_zip(zip_code, self.settings)

    async def lookup(self, zip_code: Optional[str]) -> IrradianceEstimate:
        z = str(zip_code or "").strip()
        if not is_valid_zip(z, self.settings):
            return default_estimate(self.settings, INVALID_ZIP_MESSAGE)

        try:
            return await asyncio.wait_for(self._fetch(z), timeout=self.timeout_s)
        except asyncio.TimeoutError:
            logger.warning("Irradiance lookup for %s timed out after %.1fs", z, self.timeout_s)
            d = default_estimate(self.settings)
            return default_estimate(
                self.settings,
                f"Solar irradiance lookup timed out. {d.message}",
            )
        except Exception:
            logger.exception("Irradiance lookup for %s failed", z)
            return default_estimate(self.settings)


# ==========================================================
# Debounce + stale-response guard
# ==========================================================
class DebouncedIrradianceLookup:
    """
    Coalesces rapid zip edits. Every `request()` takes a new sequence number
    and restarts the quiescence timer; a lookup only starts once the timer
    fires. A finished lookup is applied only if no newer request has been
    issued since, so a slow stale response can never overwrite a fresh one.

    Must be used from inside a running event loop.
    """

    def __init__(
        self,
        lookup: IrradianceLookup,
        on_result: Optional[Callable[[IrradianceEstimate], None]] = None,
        *,
        delay_s: Optional[float] = None,
    ) -> None:
        self.lookup = lookup
        self.on_result = on_result
        self.delay_s = lookup.settings.debounce_s if delay_s is None else float(delay_s)

        self.latest: Optional[IrradianceEstimate] = None
        self.applied_seq = 0

        self._seq = 0
        self._timer: Optional[asyncio.TimerHandle] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def seq(self) -> int:
        return self._seq

    @property
    def pending(self) -> bool:
        return self._timer is not None or bool(self._tasks)

    def request(self, zip_code: Optional[str]) -> int:
        loop = asyncio.get_running_loop()
        self._seq += 1
        seq = self._seq

        if self._timer is not None:
            self._timer.cancel()
        self._timer = loop.call_later(self.delay_s, self._start, seq, zip_code)
        return seq

    def _start(self, seq: int, zip_code: Optional[str]) -> None:
        self._timer = None
        task = asyncio.get_running_loop().create_task(self._run(seq, zip_code))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, seq: int, zip_code: Optional[str]) -> None:
        estimate = await self.lookup.lookup(zip_code)
        self._resolve(seq, estimate)

    def _resolve(self, seq: int, estimate: IrradianceEstimate) -> bool:
        if seq != self._seq:
            logger.debug("Discarding stale irradiance result #%d (latest #%d)", seq, self._seq)
            return False
        self.latest = estimate
        self.applied_seq = seq
        if self.on_result is not None:
            self.on_result(estimate)
        return True

    async def wait_idle(self) -> None:
        while self.pending:
            if self._tasks:
                await asyncio.gather(*list(self._tasks))
            else:
                await asyncio.sleep(max(self.delay_s / 4.0, 0.001))


# ==========================================================
# Blocking front end for synchronous callers (Streamlit reruns)
# ==========================================================
class BackgroundIrradianceLookup:
    """
    Owns an event loop on a daemon thread and drives a
    DebouncedIrradianceLookup on it. `submit()` and `wait()` may be called
    from any thread; the debouncer state is only touched on the loop thread.
    """

    def __init__(self, lookup: IrradianceLookup, *, delay_s: Optional[float] = None) -> None:
        self.debouncer = DebouncedIrradianceLookup(lookup, delay_s=delay_s)
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._start_lock = threading.Lock()

    def _ensure_loop(self) -> asyncio.AbstractEventLoop:
        with self._start_lock:
            if self._loop is None or self._loop.is_closed():
                loop = asyncio.new_event_loop()
                thread = threading.Thread(target=loop.run_forever, name="irradiance-lookup", daemon=True)
                thread.start()
                self._loop, self._thread = loop, thread
            return self._loop

    def _call(self, coro, timeout: Optional[float] = None):
        return asyncio.run_coroutine_threadsafe(coro, self._ensure_loop()).result(timeout)

    async def _request(self, zip_code: Optional[str]) -> int:
        return self.debouncer.request(zip_code)

    def submit(self, zip_code: Optional[str]) -> int:
        """Schedule a debounced lookup; returns its sequence number."""
        return self._call(self._request(zip_code))

    def wait(self, seq: int, timeout: Optional[float] = None) -> Optional[IrradianceEstimate]:
        """
        Block until the debouncer is idle. Returns the applied estimate if
        request `seq` (or a newer one) was applied, else None.
        """
        if timeout is None:
            s = self.debouncer.lookup
            timeout = self.debouncer.delay_s + s.latency_s + s.timeout_s + 1.0
        try:
            self._call(self.debouncer.wait_idle(), timeout)
        except concurrent.futures.TimeoutError:
            logger.warning("Irradiance request #%d still pending after %.1fs", seq, timeout)
            return None
        if self.debouncer.applied_seq >= seq:
            return self.debouncer.latest
        return None

    @property
    def latest(self) -> Optional[IrradianceEstimate]:
        return self.debouncer.latest

    @property
    def applied_seq(self) -> int:
        return self.debouncer.applied_seq

    def close(self) -> None:
        with self._start_lock:
            loop, thread = self._loop, self._thread
            self._loop = self._thread = None
        if loop is None:
            return
        loop.call_soon_threadsafe(loop.stop)
        if thread is not None:
            thread.join(timeout=1.0)
        if not loop.is_running():
            loop.close()
