import itertools
import unittest
from decimal import Decimal

from rental_pricing.services.pricing import (
    PricingError,
    RentalPeriod,
    find_best_price_combo,
    price_from_periods,
    uniform_prorated_total,
)


WEEK_AND_DAY = [
    RentalPeriod(days=7, price=Decimal("500")),
    RentalPeriod(days=1, price=Decimal("100")),
]


class PriceFromPeriodsTest(unittest.TestCase):
    def test_week_plus_days_beats_daily(self):
        result = price_from_periods(WEEK_AND_DAY, 10)
        self.assertEqual(result.total_price, Decimal("800"))
        self.assertEqual(result.period_label, "1x 7 dia(s) + 3x 1 dia(s)")
        self.assertEqual(result.applied_period.days, 7)
        self.assertEqual(result.price_per_day, Decimal("80"))
        self.assertEqual(result.unit_price, result.price_per_day)

    def test_days_shorter_than_every_period_are_prorated(self):
        result = price_from_periods([RentalPeriod(days=30, price=Decimal("1200"))], 10)
        self.assertEqual(result.total_price, Decimal("400"))
        self.assertEqual(result.applied_period.days, 30)
        self.assertEqual(result.period_label, "30 dia(s)")

    def test_no_periods_uses_flat_daily_rate(self):
        result = price_from_periods([], 5, quantity=2, fallback_price_per_day=Decimal("50"))
        self.assertEqual(result.total_price, Decimal("500"))
        self.assertEqual(result.unit_price, Decimal("50"))
        self.assertEqual(result.price_per_day, Decimal("50"))
        self.assertIsNone(result.applied_period)
        self.assertEqual(result.period_label, "Diária")

    def test_no_periods_without_fallback_is_rejected(self):
        with self.assertRaises(PricingError):
            price_from_periods([], 5)

    def test_exact_multiple_of_period(self):
        result = price_from_periods(WEEK_AND_DAY, 14)
        self.assertEqual(result.total_price, Decimal("1000"))
        self.assertEqual(result.period_label, "2x 7 dia(s)")

    def test_single_period_used_once_keeps_its_label(self):
        periods = [RentalPeriod(days=7, price=Decimal("500"), label="Semanal"), RentalPeriod(days=1, price=Decimal("100"))]
        result = price_from_periods(periods, 7)
        self.assertEqual(result.total_price, Decimal("500"))
        self.assertEqual(result.period_label, "Semanal")

    def test_single_daily_period(self):
        result = price_from_periods([RentalPeriod(days=1, price=Decimal("90"))], 4)
        self.assertEqual(result.total_price, Decimal("360"))
        self.assertEqual(result.period_label, "4x 1 dia(s)")
        self.assertEqual(result.applied_period.days, 1)

    def test_uniform_wins_when_long_period_is_expensive(self):
        periods = [RentalPeriod(days=7, price=Decimal("800")), RentalPeriod(days=1, price=Decimal("100"))]
        result = price_from_periods(periods, 8)
        # greedy: 800 + 100 = 900, uniform: 8 x 100 = 800
        self.assertEqual(result.total_price, Decimal("800"))
        self.assertEqual(result.applied_period.days, 1)
        self.assertEqual(result.period_label, "1 dia(s)")

    def test_leftover_without_daily_period_is_prorated_and_labelled(self):
        periods = [RentalPeriod(days=7, price=Decimal("350")), RentalPeriod(days=3, price=Decimal("300"))]
        result = price_from_periods(periods, 9)
        # greedy: 350 + 2 x 100 = 550, uniform: 9 x 100 = 900
        self.assertEqual(result.total_price, Decimal("550"))
        self.assertEqual(result.period_label, "1x 7 dia(s) + 2 dia(s) proporcional(is)")

    def test_quantity_scales_total_only(self):
        single = price_from_periods(WEEK_AND_DAY, 10)
        triple = price_from_periods(WEEK_AND_DAY, 10, quantity=3)
        self.assertEqual(triple.total_price, single.total_price * 3)
        self.assertEqual(triple.price_per_day, single.price_per_day)

    def test_accepts_mappings_and_plain_numbers(self):
        result = price_from_periods([{"days": 7, "price": 500}, {"days": 1, "price": 100.5}], 8)
        self.assertEqual(result.total_price, Decimal("600.5"))

    def test_invalid_requests(self):
        with self.assertRaises(PricingError):
            price_from_periods(WEEK_AND_DAY, 0)
        with self.assertRaises(PricingError):
            price_from_periods(WEEK_AND_DAY, -3)
        with self.assertRaises(PricingError):
            price_from_periods(WEEK_AND_DAY, 3, quantity=0)
        with self.assertRaises(PricingError):
            price_from_periods([RentalPeriod(days=0, price=Decimal("10"))], 3)
        with self.assertRaises(PricingError):
            price_from_periods([RentalPeriod(days=2, price=Decimal("-1"))], 3)

    def test_pricing_error_is_a_value_error(self):
        self.assertTrue(issubclass(PricingError, ValueError))


class PriceComboPropertiesTest(unittest.TestCase):
    PERIOD_SETS = [
        [RentalPeriod(days=7, price=Decimal("500")), RentalPeriod(days=1, price=Decimal("100"))],
        [RentalPeriod(days=30, price=Decimal("1200"))],
        [RentalPeriod(days=15, price=Decimal("650")), RentalPeriod(days=7, price=Decimal("350"))],
        [
            RentalPeriod(days=30, price=Decimal("2000")),
            RentalPeriod(days=7, price=Decimal("420")),
            RentalPeriod(days=3, price=Decimal("200")),
        ],
        [RentalPeriod(days=2, price=Decimal("0")), RentalPeriod(days=5, price=Decimal("40"))],
    ]

    def test_never_above_uniform_baseline_and_per_day_consistent(self):
        for periods, days in itertools.product(self.PERIOD_SETS, range(1, 46)):
            with self.subTest(periods=periods, days=days):
                result = find_best_price_combo(periods, days)
                self.assertLessEqual(result.total_price, uniform_prorated_total(periods, days))
                self.assertEqual(result.price_per_day, result.total_price / days)

    def test_equal_daily_rates_are_deterministic(self):
        periods = [RentalPeriod(days=2, price=Decimal("200")), RentalPeriod(days=1, price=Decimal("100"))]
        first = find_best_price_combo(periods, 5)
        second = find_best_price_combo(list(reversed(periods)), 5)
        self.assertEqual(first, second)
        self.assertEqual(first.total_price, Decimal("500"))
        self.assertEqual(first.period_label, "2x 2 dia(s) + 1x 1 dia(s)")

    def test_exact_tie_with_repeating_daily_rate_keeps_greedy(self):
        periods = [RentalPeriod(days=3, price=Decimal("100"))]
        result = find_best_price_combo(periods, 5)
        self.assertEqual(result.period_label, "1x 3 dia(s) + 2 dia(s) proporcional(is)")
        self.assertEqual(result.main_period, periods[0])
        self.assertEqual(result.total_price, Decimal(500) / 3)
        self.assertEqual(result.total_price, uniform_prorated_total(periods, 5))

    def test_exact_tie_with_two_periods_keeps_greedy(self):
        periods = [RentalPeriod(days=6, price=Decimal("200")), RentalPeriod(days=3, price=Decimal("100"))]
        # greedy: 200 + 2 x 100/3 = 800/3, uniform: 8 x 100/3 = 800/3
        result = find_best_price_combo(periods, 8)
        self.assertEqual(result.main_period.days, 6)
        self.assertEqual(result.period_label, "1x 6 dia(s) + 2 dia(s) proporcional(is)")
        self.assertEqual(result.total_price, Decimal(800) / 3)

    def test_empty_period_list_is_rejected(self):
        with self.assertRaises(PricingError):
            find_best_price_combo([], 3)


if __name__ == "__main__":
    unittest.main()
