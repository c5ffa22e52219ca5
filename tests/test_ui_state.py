import unittest
from types import SimpleNamespace

from core.irradiance import PROMPT_MESSAGE, BackgroundIrradianceLookup
from core.models import DirectKwhMode, EquipmentItem
from core.settings import load_settings
from ui.state import ctx_get, inputs_fingerprint, invalidate_pdf, new_ctx


class TestUIState(unittest.TestCase):
    def test_new_ctx_defaults(self):
        ctx = new_ctx(load_settings())
        self.assertEqual(10, ctx.facility.op_hours_day)
        self.assertEqual(5, ctx.facility.op_days_week)
        self.assertEqual([], ctx.equipment)
        self.assertEqual(PROMPT_MESSAGE, ctx.estimate.message)
        self.assertEqual(4.5, ctx.estimate.peak_sun_hours)
        self.assertFalse(ctx.exporter.loading)
        self.assertIsInstance(ctx.irradiance, BackgroundIrradianceLookup)
        self.assertEqual(0, ctx.irradiance.applied_seq)

    def test_ctx_get_creates_once(self):
        st = SimpleNamespace(session_state={})
        a = ctx_get(st)
        b = ctx_get(st)
        self.assertIs(a, b)

    def test_fingerprint_tracks_inputs(self):
        ctx = new_ctx(load_settings())
        before = inputs_fingerprint(ctx)
        ctx.equipment = [EquipmentItem(id="1", name="Oven", qty=1, mode=DirectKwhMode(per_unit_kwh=4))]
        self.assertNotEqual(before, inputs_fingerprint(ctx))

    def test_invalidate_pdf(self):
        ctx = new_ctx(load_settings())
        ctx.pdf, ctx.pdf_fingerprint = b"%PDF", "x"
        invalidate_pdf(ctx)
        self.assertIsNone(ctx.pdf)
        self.assertIsNone(ctx.pdf_fingerprint)


if __name__ == "__main__":
    unittest.main()
