import asyncio
import time
import unittest

from core.irradiance import (
    INVALID_ZIP_MESSAGE,
    BackgroundIrradianceLookup,
    DebouncedIrradianceLookup,
    IrradianceLookup,
    default_estimate,
    estimate_for_zip,
)
from core.models import IrradianceEstimate
from core.settings import IrradianceSettings, Region

REGIONS = (
    Region(prefixes=("85", "86"), peak_sun_hours=6.5, location="Arizona"),
    Region(prefixes=("9",), peak_sun_hours=5.5, location="the West Coast"),
    Region(prefixes=("98", "99"), peak_sun_hours=3.8, location="the Pacific Northwest"),
    Region(prefixes=("3",), peak_sun_hours=5.0, location="the Southeast"),
)
SETTINGS = IrradianceSettings(regions=REGIONS, simulated_latency_s=0.0, debounce_s=0.02, timeout_s=1.0)


class TestZipHeuristic(unittest.TestCase):
    def test_regions(self):
        self.assertEqual(6.5, estimate_for_zip("85001", SETTINGS).peak_sun_hours)
        self.assertEqual(6.5, estimate_for_zip("86001", SETTINGS).peak_sun_hours)
        self.assertEqual(5.5, estimate_for_zip("90210", SETTINGS).peak_sun_hours)
        self.assertEqual(5.0, estimate_for_zip("33101", SETTINGS).peak_sun_hours)

    def test_longest_prefix_wins(self):
        est = estimate_for_zip("98101", SETTINGS)
        self.assertEqual(3.8, est.peak_sun_hours)
        self.assertEqual("the Pacific Northwest", est.description)
        self.assertTrue(est.located)

    def test_unmatched_uses_default(self):
        est = estimate_for_zip("10001", SETTINGS)
        self.assertEqual(4.5, est.peak_sun_hours)
        self.assertFalse(est.located)
        self.assertEqual(
            "Using solar irradiance data for an average US location. Est. Peak Sun Hours: 4.5.",
            est.message,
        )

    def test_short_zip(self):
        est = estimate_for_zip(" 850 ", SETTINGS)
        self.assertEqual(4.5, est.peak_sun_hours)
        self.assertEqual(INVALID_ZIP_MESSAGE, est.message)

    def test_located_message(self):
        self.assertEqual(
            "Using solar irradiance data for Arizona. Est. Peak Sun Hours: 6.5.",
            estimate_for_zip("85001", SETTINGS).message,
        )


class _SlowLookup(IrradianceLookup):
    """Per-zip latency so that responses can arrive out of order."""

    def __init__(self, delays):
        super().__init__(SETTINGS)
        self.delays = delays
        self.calls = []

    async def _fetch(self, zip_code):
        self.calls.append(zip_code)
        await asyncio.sleep(self.delays.get(zip_code, 0.0))
        return estimate_for_zip(zip_code, self.settings)


class _BrokenLookup(IrradianceLookup):
    async def _fetch(self, zip_code):
        raise RuntimeError("boom")


class TestIrradianceLookup(unittest.IsolatedAsyncioTestCase):
    async def test_lookup(self):
        est = await IrradianceLookup(SETTINGS).lookup("85001")
        self.assertEqual(6.5, est.peak_sun_hours)

    async def test_short_zip_skips_fetch(self):
        lookup = _SlowLookup({})
        est = await lookup.lookup("123")
        self.assertEqual(INVALID_ZIP_MESSAGE, est.message)
        self.assertEqual([], lookup.calls)

    async def test_timeout_falls_back(self):
        lookup = IrradianceLookup(SETTINGS, latency_s=0.5, timeout_s=0.01)
        with self.assertLogs("core.irradiance", level="WARNING"):
            est = await lookup.lookup("85001")
        self.assertEqual(4.5, est.peak_sun_hours)
        self.assertFalse(est.located)
        self.assertTrue(est.message.startswith("Solar irradiance lookup timed out."))

    async def test_failure_falls_back(self):
        with self.assertLogs("core.irradiance", level="ERROR"):
            est = await _BrokenLookup(SETTINGS).lookup("85001")
        self.assertEqual(default_estimate(SETTINGS), est)


class TestDebouncedLookup(unittest.IsolatedAsyncioTestCase):
    async def test_rapid_requests_coalesce(self):
        lookup = _SlowLookup({})
        seen = []
        deb = DebouncedIrradianceLookup(lookup, seen.append)

        for z in ("8", "85", "850", "8500", "85001"):
            deb.request(z)
        await deb.wait_idle()

        self.assertEqual(["85001"], lookup.calls)
        self.assertEqual(1, len(seen))
        self.assertEqual(6.5, deb.latest.peak_sun_hours)
        self.assertEqual(5, deb.applied_seq)
        self.assertFalse(deb.pending)

    async def test_stale_response_is_discarded(self):
        # the first lookup is slow and finishes after the second one
        lookup = _SlowLookup({"85001": 0.2, "98101": 0.0})
        seen = []
        deb = DebouncedIrradianceLookup(lookup, seen.append, delay_s=0.0)

        deb.request("85001")
        await asyncio.sleep(0.05)
        deb.request("98101")
        await deb.wait_idle()

        self.assertEqual(["85001", "98101"], lookup.calls)
        self.assertEqual([3.8], [e.peak_sun_hours for e in seen])
        self.assertEqual("the Pacific Northwest", deb.latest.description)
        self.assertEqual(2, deb.applied_seq)

    async def test_resolve_only_applies_latest(self):
        deb = DebouncedIrradianceLookup(IrradianceLookup(SETTINGS))
        deb.request("85001")
        deb.request("98101")
        est = IrradianceEstimate(peak_sun_hours=1.0, description="x", message="x")

        self.assertFalse(deb._resolve(1, est))
        self.assertIsNone(deb.latest)
        self.assertTrue(deb._resolve(2, est))
        self.assertIs(est, deb.latest)
        await deb.wait_idle()

    async def test_sequence_numbers_increase(self):
        deb = DebouncedIrradianceLookup(IrradianceLookup(SETTINGS))
        self.assertEqual(1, deb.request("1"))
        self.assertEqual(2, deb.request("2"))
        self.assertEqual(2, deb.seq)
        await deb.wait_idle()

class TestBackgroundLookup(unittest.TestCase):
    def _background(self, lookup, **kw):
        bg = BackgroundIrradianceLookup(lookup, **kw)
        self.addCleanup(bg.close)
        return bg

    def test_submit_then_wait(self):
        bg = self._background(IrradianceLookup(SETTINGS))
        seq = bg.submit("85001")
        est = bg.wait(seq)
        self.assertEqual(6.5, est.peak_sun_hours)
        self.assertEqual(seq, bg.applied_seq)
        self.assertIs(est, bg.latest)

    def test_rapid_submits_coalesce(self):
        lookup = _SlowLookup({})
        bg = self._background(lookup)
        seqs = [bg.submit(z) for z in ("8", "85", "850", "8500", "98101")]
        est = bg.wait(seqs[-1])

        self.assertEqual(["98101"], lookup.calls)
        self.assertEqual(3.8, est.peak_sun_hours)
        self.assertEqual(5, bg.applied_seq)

    def test_stale_response_is_discarded(self):
        lookup = _SlowLookup({"85001": 0.2, "98101": 0.0})
        bg = self._background(lookup, delay_s=0.0)

        first = bg.submit("85001")
        time.sleep(0.05)
        second = bg.submit("98101")
        est = bg.wait(first)

        self.assertEqual(["85001", "98101"], lookup.calls)
        self.assertEqual("the Pacific Northwest", est.description)
        self.assertEqual(second, bg.applied_seq)

    def test_wait_timeout_returns_none(self):
        lookup = _SlowLookup({"85001": 0.3})
        bg = self._background(lookup, delay_s=0.0)
        seq = bg.submit("85001")

        with self.assertLogs("core.irradiance", level="WARNING"):
            self.assertIsNone(bg.wait(seq, timeout=0.01))
        self.assertEqual(6.5, bg.wait(seq).peak_sun_hours)

    def test_close_then_reuse(self):
        bg = self._background(IrradianceLookup(SETTINGS))
        bg.close()
        bg.close()
        self.assertEqual(5.0, bg.wait(bg.submit("33101")).peak_sun_hours)



if __name__ == "__main__":
    unittest.main()
