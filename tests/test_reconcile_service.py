import math
import unittest

from resizer.models.settings_model import (
    FormatEdit,
    HeightEdit,
    LockToggle,
    PercentageEdit,
    QualityEdit,
    ResizeSettings,
    TargetSizeEdit,
    WidthEdit,
)
from resizer.services.reconcile_service import (
    SettingsReconciler,
    edit_from_changes,
    reconcile,
    round_half_up,
)

ORIGINAL = (1000, 500)
ORIGINAL_BYTES = 500 * 1024


def initial(width=1000, height=500, **kwargs):
    return ResizeSettings.initial(width, height, **kwargs)


class TestScenarios(unittest.TestCase):

    def setUp(self):
        self.reconciler = SettingsReconciler()

    def test_percentage_edit_scales_both_sides(self):
        result = self.reconciler.reconcile(initial(), ORIGINAL, ORIGINAL_BYTES, PercentageEdit(50))
        self.assertEqual((result.width, result.height, result.percentage), (500, 250, 50))

    def test_locked_width_edit_derives_height(self):
        result = self.reconciler.reconcile(initial(), ORIGINAL, ORIGINAL_BYTES, WidthEdit(400))
        self.assertEqual((result.width, result.height), (400, 200))
        self.assertEqual(result.percentage, 40)

    def test_locked_height_edit_derives_width(self):
        result = self.reconciler.reconcile(initial(), ORIGINAL, ORIGINAL_BYTES, HeightEdit(100))
        self.assertEqual((result.width, result.height), (200, 100))
        self.assertEqual(result.percentage, 20)

    def test_unlocked_width_edit_keeps_height(self):
        current = initial(is_locked=False)
        result = self.reconciler.reconcile(current, ORIGINAL, ORIGINAL_BYTES, WidthEdit(750))
        self.assertEqual((result.width, result.height), (750, 500))
        self.assertEqual(result.percentage, 75)

    def test_unlocked_height_edit_keeps_percentage(self):
        current = initial(is_locked=False)
        result = self.reconciler.reconcile(current, ORIGINAL, ORIGINAL_BYTES, HeightEdit(123))
        self.assertEqual((result.width, result.height), (1000, 123))
        self.assertEqual(result.percentage, 100)

    def test_target_size_scales_by_square_root(self):
        result = self.reconciler.reconcile(initial(), ORIGINAL, ORIGINAL_BYTES, TargetSizeEdit(100))
        ratio = math.sqrt(100 / 500)
        self.assertAlmostEqual(ratio, 0.447, places=3)
        self.assertEqual(result.width, round_half_up(1000 * ratio))
        self.assertEqual(result.height, round_half_up(500 * ratio))
        self.assertEqual(result.percentage, 45)
        self.assertEqual(result.target_size, 100)

    def test_lock_toggle_snaps_height_back_into_ratio(self):
        current = initial(is_locked=False).with_changes(width=400, height=300, percentage=40)
        result = self.reconciler.reconcile(current, ORIGINAL, ORIGINAL_BYTES, LockToggle(True))
        self.assertTrue(result.is_locked)
        self.assertEqual((result.width, result.height, result.percentage), (400, 200, 40))

    def test_unlock_leaves_dimensions(self):
        result = self.reconciler.reconcile(initial(), ORIGINAL, ORIGINAL_BYTES, LockToggle(False))
        self.assertFalse(result.is_locked)
        self.assertEqual(result.dimensions, (1000, 500))

    def test_percentage_rounds_half_up(self):
        result = self.reconciler.reconcile(initial(1001, 501), (1001, 501), ORIGINAL_BYTES, PercentageEdit(50))
        self.assertEqual((result.width, result.height), (501, 251))

    def test_format_and_quality_do_not_touch_dimensions(self):
        current = initial()
        result = self.reconciler.reconcile(current, ORIGINAL, ORIGINAL_BYTES, FormatEdit("webp"))
        self.assertEqual(result.format, "WebP")
        result = self.reconciler.reconcile(result, ORIGINAL, ORIGINAL_BYTES, QualityEdit(0.55))
        self.assertEqual(result.quality, 0.55)
        self.assertEqual(result.dimensions, current.dimensions)
        self.assertEqual(result.percentage, current.percentage)

    def test_input_settings_are_not_reused_when_changed(self):
        current = initial()
        result = self.reconciler.reconcile(current, ORIGINAL, ORIGINAL_BYTES, WidthEdit(300))
        self.assertIsNot(result, current)
        self.assertEqual(current.width, 1000)

    def test_module_level_reconcile(self):
        result = reconcile(initial(), ORIGINAL, ORIGINAL_BYTES, PercentageEdit(25))
        self.assertEqual(result.dimensions, (250, 125))


class TestProperties(unittest.TestCase):

    def setUp(self):
        self.reconciler = SettingsReconciler()

    def test_locked_width_edit_preserves_ratio_within_rounding(self):
        for original in ((1000, 500), (640, 480), (1920, 1080), (333, 777)):
            ow, oh = original
            current = initial(ow, oh)
            for width in range(2, 2400, 37):
                if width * oh / ow < 0.5:
                    continue
                result = self.reconciler.reconcile(current, original, ORIGINAL_BYTES, WidthEdit(width))
                with self.subTest(original=original, width=width):
                    self.assertEqual(result.width, width)
                    self.assertLessEqual(abs(result.height / result.width - oh / ow), 0.5 / result.width + 1e-12)

    def test_percentage_edit_matches_formula(self):
        for original in ((1000, 500), (1920, 1080), (641, 479)):
            ow, oh = original
            current = initial(ow, oh)
            for percentage in range(1, 201):
                result = self.reconciler.reconcile(current, original, ORIGINAL_BYTES, PercentageEdit(percentage))
                with self.subTest(original=original, percentage=percentage):
                    self.assertEqual(result.width, max(1, round_half_up(ow * percentage / 100)))
                    self.assertEqual(result.height, max(1, round_half_up(oh * percentage / 100)))

    def test_edits_equal_to_current_value_are_noops(self):
        current = initial().with_changes(target_size=80.0, format="PNG", quality=0.5)
        edits = (
            WidthEdit(current.width),
            HeightEdit(current.height),
            PercentageEdit(current.percentage),
            LockToggle(current.is_locked),
            TargetSizeEdit(current.target_size),
            FormatEdit(current.format),
            QualityEdit(current.quality),
        )
        for edit in edits:
            with self.subTest(edit=edit):
                self.assertIs(self.reconciler.reconcile(current, ORIGINAL, ORIGINAL_BYTES, edit), current)


class TestClampPolicy(unittest.TestCase):

    def setUp(self):
        self.reconciler = SettingsReconciler(max_percentage=200, max_dimension=5000)
        self.current = initial()

    def apply(self, edit, original=ORIGINAL, byte_size=ORIGINAL_BYTES):
        return self.reconciler.reconcile(self.current, original, byte_size, edit)

    def test_invalid_dimension_edits_are_rejected(self):
        for bad in (0, -10, float("nan"), float("inf"), "abc", None, True):
            for edit_type in (WidthEdit, HeightEdit, PercentageEdit):
                with self.subTest(edit=edit_type.__name__, value=bad):
                    self.assertIs(self.apply(edit_type(bad)), self.current)

    def test_dimensions_are_clamped_to_maximum(self):
        result = self.apply(WidthEdit(100000))
        self.assertEqual(result.width, 5000)
        self.assertEqual(result.height, 2500)

    def test_derived_dimension_never_drops_below_one(self):
        result = self.apply(WidthEdit(1))
        self.assertEqual((result.width, result.height), (1, 1))

    def test_fractional_width_is_rounded(self):
        self.assertEqual(self.apply(WidthEdit(399.6)).width, 400)

    def test_percentage_edit_is_clamped(self):
        result = self.apply(PercentageEdit(500))
        self.assertEqual((result.width, result.height, result.percentage), (2000, 1000, 200))

    def test_quality_is_clamped_and_nan_rejected(self):
        self.assertEqual(self.apply(QualityEdit(1.7)).quality, 1.0)
        self.assertEqual(self.apply(QualityEdit(-3)).quality, 0.0)
        self.assertIs(self.apply(QualityEdit(float("nan"))), self.current)

    def test_unknown_format_is_rejected(self):
        self.assertIs(self.apply(FormatEdit("GIF")), self.current)
        self.assertIs(self.apply(FormatEdit(42)), self.current)

    def test_target_size_clearing(self):
        with_target = self.reconciler.reconcile(self.current, ORIGINAL, ORIGINAL_BYTES, TargetSizeEdit(100))
        for value in (None, 0, -5):
            with self.subTest(value=value):
                cleared = self.reconciler.reconcile(with_target, ORIGINAL, ORIGINAL_BYTES, TargetSizeEdit(value))
                self.assertIsNone(cleared.target_size)
                self.assertEqual(cleared.dimensions, with_target.dimensions)

    def test_non_finite_target_is_rejected(self):
        self.assertIs(self.apply(TargetSizeEdit(float("inf"))), self.current)
        self.assertIs(self.apply(TargetSizeEdit("big")), self.current)

    def test_target_with_unknown_source_size_keeps_dimensions(self):
        result = self.apply(TargetSizeEdit(100), byte_size=0)
        self.assertEqual(result.target_size, 100)
        self.assertEqual(result.dimensions, self.current.dimensions)

    def test_target_scale_is_capped_by_max_percentage(self):
        result = self.apply(TargetSizeEdit(50000))
        self.assertEqual(result.target_size, 50000)
        self.assertEqual((result.width, result.height, result.percentage), (2000, 1000, 200))

    def test_target_percentage_follows_clamped_width(self):
        result = self.apply(TargetSizeEdit(1000), original=(4000, 2000))
        self.assertEqual((result.width, result.height), (5000, 2828))
        self.assertEqual(result.percentage, round_half_up(5000 / 4000 * 100))

    def test_target_on_large_original_with_default_bounds(self):
        reconciler = SettingsReconciler()
        current = initial(15000, 7500)
        result = reconciler.reconcile(current, (15000, 7500), ORIGINAL_BYTES, TargetSizeEdit(5000))
        self.assertEqual(result.width, 20000)
        self.assertEqual(result.percentage, 133)

    def test_zero_original_width_falls_back_to_full_percentage(self):
        current = initial(10, 10, is_locked=False)
        result = self.reconciler.reconcile(current, (0, 0), ORIGINAL_BYTES, WidthEdit(20))
        self.assertEqual(result.width, 20)
        self.assertEqual(result.percentage, 100)


class TestEditFromChanges(unittest.TestCase):

    def test_width_wins_over_height(self):
        edit = edit_from_changes(initial(), {"height": 300, "width": 200})
        self.assertEqual(edit, WidthEdit(200))

    def test_unchanged_fields_are_skipped(self):
        edit = edit_from_changes(initial(), {"width": 1000, "height": 300})
        self.assertEqual(edit, HeightEdit(300))

    def test_nothing_changed(self):
        self.assertIsNone(edit_from_changes(initial(), {"width": 1000, "is_locked": True}))
        self.assertIsNone(edit_from_changes(initial(), {}))

    def test_target_size_after_lock(self):
        edit = edit_from_changes(initial(), {"quality": 0.3, "target_size": 50})
        self.assertEqual(edit, TargetSizeEdit(50))

    def test_reconcile_changes(self):
        reconciler = SettingsReconciler()
        result = reconciler.reconcile_changes(initial(), ORIGINAL, ORIGINAL_BYTES, {"percentage": 10})
        self.assertEqual(result.dimensions, (100, 50))


if __name__ == "__main__":
    unittest.main()
