"""
Subsidy calculator: central/state subsidy, cost, savings and EMI.
Run: python -m pytest tests/test_subsidy_calculator.py -v
"""
import unittest

from services.subsidy_calculator import calculate_subsidy, monthly_emi


class TestSubsidyCalculator(unittest.TestCase):
    def test_three_kw_dcr_hybrid_outside_state_scheme(self):
        """3 kW DCR hybrid in Delhi -> full central subsidy, no state subsidy."""
        result = calculate_subsidy(3, "Delhi", "dcr_hybrid")
        self.assertEqual(result.central_subsidy, 78_000)
        self.assertEqual(result.state_subsidy, 0)
        self.assertEqual(result.total_subsidy, 78_000)
        self.assertEqual(result.system_cost, 225_000)
        self.assertEqual(result.net_cost, 147_000)
        self.assertTrue(result.subsidy_eligible)

    def test_non_dcr_gets_nothing_even_in_odisha(self):
        result = calculate_subsidy(2, "Odisha", "non_dcr")
        self.assertEqual(result.total_subsidy, 0)
        self.assertEqual(result.system_cost, 110_000)
        self.assertEqual(result.net_cost, 110_000)
        self.assertFalse(result.subsidy_eligible)

    def test_central_subsidy_up_to_three_kw(self):
        for panel in ("dcr_hybrid", "dcr_ongrid"):
            for kw in (0.5, 1, 1.5, 2):
                with self.subTest(panel=panel, kw=kw):
                    self.assertEqual(calculate_subsidy(kw, "Delhi", panel).central_subsidy, kw * 30_000)
            with self.subTest(panel=panel, kw=3):
                self.assertEqual(calculate_subsidy(3, "Delhi", panel).central_subsidy, 2 * 30_000 + 18_000)

    def test_central_subsidy_capped_above_three_kw(self):
        self.assertEqual(calculate_subsidy(10, "Delhi", "dcr").central_subsidy, 78_000)

    def test_state_subsidy(self):
        for kw in (1, 2, 3):
            with self.subTest(kw=kw):
                self.assertEqual(calculate_subsidy(kw, "Odisha", "dcr").state_subsidy, kw * 20_000)
                self.assertEqual(calculate_subsidy(kw, "Uttar Pradesh", "dcr").state_subsidy, kw * 10_000)
                self.assertEqual(calculate_subsidy(kw, "Bihar", "dcr").state_subsidy, 0)

    def test_state_name_is_case_insensitive(self):
        self.assertEqual(calculate_subsidy(2, "  odisha ", "dcr").state_subsidy, 40_000)

    def test_state_subsidy_capped(self):
        self.assertEqual(calculate_subsidy(5, "Odisha", "dcr").state_subsidy, 60_000)
        self.assertEqual(calculate_subsidy(5, "Uttar Pradesh", "dcr").state_subsidy, 30_000)

    def test_net_cost_never_negative(self):
        for panel in ("dcr", "dcr_hybrid", "dcr_ongrid", "non_dcr"):
            for kw in (0.1, 0.5, 1, 2, 3, 4, 7.5, 100):
                for state in ("Odisha", "Uttar Pradesh", "Delhi", ""):
                    r = calculate_subsidy(kw, state, panel)
                    with self.subTest(panel=panel, kw=kw, state=state):
                        self.assertGreaterEqual(r.net_cost, 0)
                        self.assertEqual(r.net_cost, max(0, r.system_cost - r.total_subsidy))

    def test_savings_and_payback(self):
        r = calculate_subsidy(3, "Delhi", "dcr")
        self.assertEqual(r.daily_generation, 12)
        self.assertEqual(r.monthly_generation, 360)
        self.assertEqual(r.monthly_savings, 2_520)
        self.assertEqual(r.annual_savings, 30_240)
        self.assertEqual(r.payback_years, round(87_000 / 30_240, 1))

    def test_unknown_panel_type_priced_as_dcr(self):
        r = calculate_subsidy(1, "Delhi", "mystery")
        self.assertEqual(r.panel_type, "dcr")
        self.assertEqual(r.cost_per_kw, 55_000)

    def test_capacity_out_of_range(self):
        for kw in (0, -1, 100.5):
            with self.subTest(kw=kw):
                with self.assertRaises(ValueError):
                    calculate_subsidy(kw, "Odisha", "dcr")

    def test_monthly_emi(self):
        self.assertEqual(monthly_emi(0), 0)
        # 1 lakh over 60 months at 10% p.a.
        self.assertEqual(monthly_emi(100_000), 2_125)

    def test_camel_case_dump(self):
        dumped = calculate_subsidy(2, "Odisha", "dcr").model_dump(by_alias=True)
        self.assertIn("centralSubsidy", dumped)
        self.assertIn("netCost", dumped)
        self.assertIn("subsidyEligible", dumped)


if __name__ == "__main__":
    unittest.main()
