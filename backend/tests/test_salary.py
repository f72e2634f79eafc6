"""
Tests for app/services/employees/salary.py - Net salary derivation.
"""
import pytest

from app.services.employees.salary import (
    DEFAULT_BONUS_RATE,
    TAX_RATE,
    bonus_rate,
    calculate_net_salary,
)


class TestBonusRate:
    """Test department bonus tiers."""

    @pytest.mark.parametrize("department,expected", [
        ("engineering", 0.15),
        ("hr", 0.10),
        ("sales", 0.20),
        ("marketing", DEFAULT_BONUS_RATE),
        ("", DEFAULT_BONUS_RATE),
    ])
    def test_tiers(self, department, expected):
        assert bonus_rate(department) == expected

    @pytest.mark.parametrize("department", ["ENGINEERING", "Engineering", "eNgInEeRiNg"])
    def test_case_insensitive(self, department):
        assert bonus_rate(department) == bonus_rate("engineering")


class TestCalculateNetSalary:
    """Test net = base + bonus - tax."""

    @pytest.mark.parametrize("department,expected", [
        ("Engineering", 1050.0),
        ("hr", 1000.0),
        ("sales", 1100.0),
        ("unknown", 950.0),
    ])
    def test_examples_for_base_1000(self, department, expected):
        assert calculate_net_salary(1000, department) == pytest.approx(expected)

    def test_same_result_regardless_of_case(self):
        assert calculate_net_salary(4321.5, "ENGINEERING") == calculate_net_salary(4321.5, "engineering")

    def test_tax_is_flat_ten_percent(self):
        assert TAX_RATE == 0.10
        # hr bonus equals the tax, so net equals base
        assert calculate_net_salary(2500, "HR") == pytest.approx(2500)

    @pytest.mark.parametrize("base", [0.01, 1, 999.99, 1_000_000])
    def test_positive_base_never_goes_negative(self, base):
        for department in ("engineering", "hr", "sales", "other"):
            assert calculate_net_salary(base, department) > 0
