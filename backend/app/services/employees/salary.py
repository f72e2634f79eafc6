"""
Net salary derivation.

Net salary = base + base * bonus_rate(department) - base * TAX_RATE, where the
bonus tier is picked from the department name case-insensitively.
"""

# Bonus tier per department (lowercase); anything else gets DEFAULT_BONUS_RATE
BONUS_RATES = {
    "engineering": 0.15,
    "hr": 0.10,
    "sales": 0.20,
}
DEFAULT_BONUS_RATE = 0.05
TAX_RATE = 0.10


def bonus_rate(department: str) -> float:
    return BONUS_RATES.get(department.lower(), DEFAULT_BONUS_RATE)


def calculate_net_salary(base_salary: float, department: str) -> float:
    """
    Apply the department bonus and the flat tax to a base salary.

    The result is not range-checked here; callers reject non-positive values.
    """
    bonus = base_salary * bonus_rate(department)
    tax = base_salary * TAX_RATE
    return base_salary + bonus - tax
