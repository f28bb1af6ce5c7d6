import dataclasses
import unittest

from resizer.exceptions import InvalidSettings, TargetUnreachable
from resizer.models.image_model import ImageDescriptor
from resizer.models.result_model import EncodeResult
from resizer.models.settings_model import ResizeSettings


class TestResizeSettings(unittest.TestCase):

    def test_initial(self):
        settings = ResizeSettings.initial(640, 480)
        self.assertEqual(settings.dimensions, (640, 480))
        self.assertEqual(settings.percentage, 100)
        self.assertTrue(settings.is_locked)
        self.assertIsNone(settings.target_size)

    def test_is_immutable(self):
        settings = ResizeSettings.initial(640, 480)
        with self.assertRaises(dataclasses.FrozenInstanceError):
            settings.width = 10  # type: ignore[misc]

    def test_target_bytes(self):
        settings = ResizeSettings.initial(10, 10)
        self.assertIsNone(settings.target_bytes)
        self.assertEqual(settings.with_changes(target_size=50).target_bytes, 51200)
        self.assertIsNone(settings.with_changes(target_size=0).target_bytes)
        self.assertIsNone(settings.with_changes(target_size=float("nan")).target_bytes)

    def test_validate(self):
        ResizeSettings.initial(1, 1).validate()
        for bad in ({"width": 0}, {"height": -4}, {"format": "GIF"}):
            with self.subTest(bad=bad):
                with self.assertRaises(InvalidSettings):
                    ResizeSettings.initial(10, 10).with_changes(**bad).validate()


class TestImageDescriptor(unittest.TestCase):

    def test_aspect_ratio(self):
        self.assertEqual(ImageDescriptor(1000, 500, 1).aspect_ratio, 2.0)
        self.assertIsNone(ImageDescriptor(0, 500, 1).aspect_ratio)


class TestEncodeResult(unittest.TestCase):

    def make(self, size, target=None):
        return EncodeResult(
            data=b"x" * size, size=size, quality=0.5, format="JPEG", dimensions=(1, 1), target_bytes=target
        )

    def test_target_met(self):
        self.assertIsNone(self.make(10).target_met)
        self.assertTrue(self.make(10, target=10).target_met)
        self.assertFalse(self.make(11, target=10).target_met)

    def test_raise_for_target(self):
        ok = self.make(5, target=10)
        self.assertIs(ok.raise_for_target(), ok)
        with self.assertRaises(TargetUnreachable) as ctx:
            self.make(11, target=10).raise_for_target()
        self.assertEqual((ctx.exception.target_bytes, ctx.exception.actual_bytes), (10, 11))


if __name__ == "__main__":
    unittest.main()
