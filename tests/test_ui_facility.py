import unittest
from unittest import mock

from core.irradiance import BackgroundIrradianceLookup, IrradianceLookup, PROMPT_MESSAGE
from core.models import FacilityInfo
from core.settings import load_settings
from ui import facility
from ui.state import new_ctx


class TestFacilityEstimate(unittest.TestCase):
    def setUp(self):
        self.ctx = new_ctx(load_settings())
        self.ctx.irradiance = BackgroundIrradianceLookup(
            IrradianceLookup(self.ctx.settings.irradiance, latency_s=0.0), delay_s=0.0
        )
        self.addCleanup(self.ctx.irradiance.close)

    def test_zip_change_applies_estimate(self):
        self.ctx.facility = FacilityInfo(zip_code=" 85001 ")
        with mock.patch.object(facility, "st"):
            facility._refresh_estimate(self.ctx)
        self.assertEqual(6.5, self.ctx.estimate.peak_sun_hours)
        self.assertEqual("85001", self.ctx.estimate_zip)
        self.assertEqual(1, self.ctx.irradiance.applied_seq)

    def test_same_zip_is_not_looked_up_again(self):
        self.ctx.facility = FacilityInfo(zip_code="85001")
        with mock.patch.object(facility, "st"):
            facility._refresh_estimate(self.ctx)
            facility._refresh_estimate(self.ctx)
        self.assertEqual(1, self.ctx.irradiance.debouncer.seq)

    def test_blank_zip_keeps_prompt(self):
        with mock.patch.object(facility, "st"):
            facility._refresh_estimate(self.ctx)
        self.assertEqual(PROMPT_MESSAGE, self.ctx.estimate.message)
        self.assertEqual(0, self.ctx.irradiance.debouncer.seq)

    def test_unapplied_result_leaves_estimate(self):
        before = self.ctx.estimate
        self.ctx.facility = FacilityInfo(zip_code="85001")
        self.ctx.irradiance.wait = mock.Mock(return_value=None)
        with mock.patch.object(facility, "st"):
            facility._refresh_estimate(self.ctx)
        self.assertIs(before, self.ctx.estimate)
        self.assertEqual("", self.ctx.estimate_zip)


if __name__ == "__main__":
    unittest.main()
