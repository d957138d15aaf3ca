"""Commission rule tests.

Every (role, category, is_assistant) combination against the rate table:
- STYLIST: 10% on HAIR, nothing elsewhere
- ASSISTANT: 5% when assisting, 10% solo, any category
- TECHNICIAN / MANAGER / ADMIN / unknown / None: nothing
"""
import pytest

from business.commission import (
    ASSISTANT_HELPING_RATE, ASSISTANT_SOLO_RATE, STYLIST_HAIR_RATE,
    calculate_commission, commission_rate,
)
from business.constants import Role, ServiceCategory


EXPECTED_RATES = {
    # (role, category, is_assistant): rate
    **{(Role.STYLIST, ServiceCategory.HAIR, a): 0.10 for a in (False, True)},
    **{(Role.STYLIST, c, a): 0.0
       for c in (ServiceCategory.NAIL, ServiceCategory.LASH, ServiceCategory.PRODUCT)
       for a in (False, True)},
    **{(Role.ASSISTANT, c, True): 0.05 for c in ServiceCategory},
    **{(Role.ASSISTANT, c, False): 0.10 for c in ServiceCategory},
    **{(r, c, a): 0.0
       for r in (Role.TECHNICIAN, Role.MANAGER, Role.ADMIN)
       for c in ServiceCategory
       for a in (False, True)},
}


class TestCommissionRate:

    @pytest.mark.parametrize("role,category,is_assistant", list(EXPECTED_RATES))
    def test_rate_table(self, role, category, is_assistant):
        expected = EXPECTED_RATES[(role, category, is_assistant)]
        assert commission_rate(category, role, is_assistant) == pytest.approx(expected)

    def test_every_combination_covered(self):
        assert len(EXPECTED_RATES) == len(Role) * len(ServiceCategory) * 2

    def test_accepts_string_values(self):
        assert commission_rate("HAIR", "STYLIST") == STYLIST_HAIR_RATE
        assert commission_rate("NAIL", "ASSISTANT", True) == ASSISTANT_HELPING_RATE
        assert commission_rate("NAIL", "ASSISTANT") == ASSISTANT_SOLO_RATE

    def test_unknown_or_missing_role_earns_nothing(self):
        assert commission_rate("HAIR", None) == 0.0
        assert commission_rate("HAIR", "RECEPTIONIST") == 0.0

    def test_missing_category(self):
        assert commission_rate(None, Role.STYLIST) == 0.0
        # Assistants earn regardless of category
        assert commission_rate(None, Role.ASSISTANT) == ASSISTANT_SOLO_RATE


class TestCalculateCommission:

    def test_stylist_hair(self):
        assert calculate_commission(50, ServiceCategory.HAIR, Role.STYLIST) == pytest.approx(5.0)

    def test_stylist_non_hair(self):
        assert calculate_commission(40, ServiceCategory.NAIL, Role.STYLIST) == 0

    def test_assistant_helping(self):
        assert calculate_commission(
            120, ServiceCategory.HAIR, Role.ASSISTANT, is_assistant=True
        ) == pytest.approx(6.0)

    def test_assistant_solo(self):
        assert calculate_commission(80, ServiceCategory.LASH, Role.ASSISTANT) == pytest.approx(8.0)

    def test_admin_earns_nothing(self):
        assert calculate_commission(500, ServiceCategory.HAIR, Role.ADMIN) == 0

    def test_decimal_string_price(self):
        assert calculate_commission("45.50", "HAIR", "STYLIST") == pytest.approx(4.55)

    def test_zero_price(self):
        assert calculate_commission(0, "HAIR", "STYLIST") == 0
