import unittest
from decimal import Decimal

from backoffice.errors import InvalidDiscountOrTaxRateError
from backoffice.repository import SETTINGS, InMemoryRepository
from backoffice.services.pos_service import PosService
from backoffice.services.settings_service import StoreSettings


class StoreSettingsTests(unittest.TestCase):
    def setUp(self):
        self.settings = StoreSettings()

    def test_defaults(self):
        self.assertEqual(self.settings.tax_rate, Decimal("10"))
        self.assertEqual(self.settings.universal_discount, Decimal("0"))

    def test_update_rates(self):
        self.assertEqual(self.settings.update_tax_rate("8.25"), Decimal("8.25"))
        self.assertEqual(self.settings.update_universal_discount(100), Decimal("100"))
        self.assertEqual(self.settings.update_tax_rate(0), Decimal("0"))

    def test_out_of_range_leaves_value(self):
        for bad in (-1, "100.01", "ten", None, True, float("nan")):
            with self.assertRaises(InvalidDiscountOrTaxRateError):
                self.settings.update_tax_rate(bad)
        self.assertEqual(self.settings.tax_rate, Decimal("10"))

    def test_patch_is_all_or_nothing(self):
        with self.assertRaises(InvalidDiscountOrTaxRateError):
            self.settings.update({"tax_rate": "5", "universal_discount": "150"})
        self.assertEqual(self.settings.tax_rate, Decimal("10"))

        self.settings.update({"tax_rate": "5", "universal_discount": "15"})
        self.assertEqual(self.settings.dump(), {"tax_rate": "5", "universal_discount": "15"})

    def test_load(self):
        loaded = StoreSettings.load({"tax_rate": "7.5", "universal_discount": "2"})
        self.assertEqual(loaded.tax_rate, Decimal("7.5"))
        self.assertEqual(loaded.universal_discount, Decimal("2"))

        first_start = StoreSettings.load(None, tax_rate="12", universal_discount="3")
        self.assertEqual(first_start.tax_rate, Decimal("12"))
        self.assertEqual(first_start.universal_discount, Decimal("3"))


class SettingsPersistenceTests(unittest.TestCase):
    def test_configured_defaults_only_apply_on_first_start(self):
        repo = InMemoryRepository()
        service = PosService(repo, tz_name="UTC", default_tax_rate="12")
        self.assertEqual(service.settings.tax_rate, Decimal("12"))

        service.update_tax_rate("6")
        self.assertEqual(repo.load(SETTINGS)["tax_rate"], "6")

        restarted = PosService(repo, tz_name="UTC", default_tax_rate="12")
        self.assertEqual(restarted.settings.tax_rate, Decimal("6"))

    def test_rejected_update_is_not_written(self):
        repo = InMemoryRepository()
        service = PosService(repo, tz_name="UTC")
        with self.assertRaises(InvalidDiscountOrTaxRateError):
            service.update_universal_discount("-5")
        self.assertIsNone(repo.load(SETTINGS))
        self.assertEqual(repo.save_count, 0)


if __name__ == "__main__":
    unittest.main()
