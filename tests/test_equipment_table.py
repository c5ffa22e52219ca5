import math
import unittest

from core.models import DirectKwhMode, EquipmentItem, PowerHoursMode
from ui.equipment_table import REMOVE_COLUMN, TOTAL_COLUMN, apply_table_edits, equipment_frame

ITEMS = [
    EquipmentItem(id="fan", name="Exhaust Fan", qty=2, mode=PowerHoursMode(power=750, hours=10)),
    EquipmentItem(id="frz", name="Freezer", qty=2, mode=DirectKwhMode(per_unit_kwh=5)),
]


class TestEquipmentTable(unittest.TestCase):
    def test_frame(self):
        df = equipment_frame(ITEMS)
        self.assertEqual(["fan", "frz"], list(df.index))
        self.assertAlmostEqual(15.0, df.loc["fan", TOTAL_COLUMN])
        self.assertAlmostEqual(10.0, df.loc["frz", TOTAL_COLUMN])
        self.assertTrue(math.isnan(df.loc["frz", "Power (W)"]))
        self.assertFalse(df[REMOVE_COLUMN].any())

    def test_empty_frame(self):
        df = equipment_frame([])
        self.assertEqual(0, len(df))
        self.assertEqual([], apply_table_edits([], df))

    def test_unchanged_frame_is_noop(self):
        self.assertEqual(ITEMS, apply_table_edits(ITEMS, equipment_frame(ITEMS)))

    def test_qty_edit(self):
        df = equipment_frame(ITEMS)
        df.loc["frz", "Qty"] = 4
        out = apply_table_edits(ITEMS, df)
        self.assertAlmostEqual(20.0, out[1].total_daily_kwh)
        self.assertIs(ITEMS[0], out[0])

    def test_hours_edit_clamps(self):
        df = equipment_frame(ITEMS)
        df.loc["fan", "Hours/Day"] = 30
        out = apply_table_edits(ITEMS, df)
        self.assertEqual(24.0, out[0].hours)
        self.assertAlmostEqual(36.0, out[0].total_daily_kwh)

    def test_per_unit_edit_switches_mode(self):
        df = equipment_frame(ITEMS)
        df.loc["fan", "kWh/Unit/Day"] = 1.0
        out = apply_table_edits(ITEMS, df)
        self.assertIsInstance(out[0].mode, DirectKwhMode)
        self.assertAlmostEqual(2.0, out[0].total_daily_kwh)

    def test_remove(self):
        df = equipment_frame(ITEMS)
        df.loc["fan", REMOVE_COLUMN] = True
        out = apply_table_edits(ITEMS, df)
        self.assertEqual(["frz"], [it.id for it in out])

    def test_unknown_rows_ignored(self):
        df = equipment_frame(ITEMS)
        self.assertEqual(ITEMS[:1], apply_table_edits(ITEMS[:1], df))


if __name__ == "__main__":
    unittest.main()
