"""Form validation tests for staff, services and customers."""
import pytest

from business.constants import Role
from business.errors import ValidationError
from business.validators import (
    validate_customer_form, validate_service_form, validate_staff_form,
)


class TestStaffForm:

    def test_valid(self):
        validate_staff_form({"name": "Alice", "role": "STYLIST", "pin": "1234"})

    def test_enum_role(self):
        validate_staff_form({"name": "Alice", "role": Role.MANAGER, "pin": "0000"})

    @pytest.mark.parametrize("name", [None, "", "A", "  B  "])
    def test_short_name(self, name):
        with pytest.raises(ValidationError, match="at least 2 characters"):
            validate_staff_form({"name": name, "role": "STYLIST", "pin": "1234"})

    def test_missing_role(self):
        with pytest.raises(ValidationError, match="Role is required"):
            validate_staff_form({"name": "Alice", "pin": "1234"})

    def test_unknown_role(self):
        with pytest.raises(ValidationError, match="Unknown role"):
            validate_staff_form({"name": "Alice", "role": "CEO", "pin": "1234"})

    @pytest.mark.parametrize("pin", [None, "", "123", "12345", "12a4", " 1234"])
    def test_bad_pin(self, pin):
        with pytest.raises(ValidationError, match="PIN must be exactly 4 digits"):
            validate_staff_form({"name": "Alice", "role": "STYLIST", "pin": pin})

    def test_partial_only_checks_given_fields(self):
        validate_staff_form({"avatar": "preset-3"}, partial=True)
        with pytest.raises(ValidationError):
            validate_staff_form({"pin": "99"}, partial=True)


class TestServiceForm:

    def test_valid(self):
        validate_service_form(
            {"name": "Pedicure", "category": "NAIL", "price": 45, "cogs": 5, "duration_min": 60}
        )

    def test_zero_price_is_allowed(self):
        validate_service_form({"name": "Consultation", "category": "HAIR", "price": 0})

    def test_short_name(self):
        with pytest.raises(ValidationError, match="Service name"):
            validate_service_form({"name": "X", "category": "HAIR", "price": 10})

    def test_unknown_category(self):
        with pytest.raises(ValidationError, match="Unknown category"):
            validate_service_form({"name": "Massage", "category": "SPA", "price": 10})

    def test_missing_price(self):
        with pytest.raises(ValidationError, match="Price must be a positive number"):
            validate_service_form({"name": "Massage", "category": "HAIR"})

    def test_negative_price(self):
        with pytest.raises(ValidationError, match="Price must be a positive number"):
            validate_service_form({"name": "Massage", "category": "HAIR", "price": -1})

    def test_non_numeric_price(self):
        with pytest.raises(ValidationError, match="Price must be a number"):
            validate_service_form({"name": "Massage", "category": "HAIR", "price": "abc"})

    def test_negative_cogs(self):
        with pytest.raises(ValidationError, match="COGS"):
            validate_service_form(
                {"name": "Massage", "category": "HAIR", "price": 10, "cogs": -2}
            )

    def test_negative_duration(self):
        with pytest.raises(ValidationError, match="Duration"):
            validate_service_form(
                {"name": "Massage", "category": "HAIR", "price": 10, "duration_min": -5}
            )

    def test_partial(self):
        validate_service_form({"price": 99}, partial=True)
        with pytest.raises(ValidationError):
            validate_service_form({"category": "FOOD"}, partial=True)


class TestCustomerForm:

    def test_valid(self):
        validate_customer_form({"full_name": "Jane Doe"})

    @pytest.mark.parametrize("full_name", [None, "", "J", " J "])
    def test_short_name(self, full_name):
        with pytest.raises(ValidationError, match="at least 2 characters"):
            validate_customer_form({"full_name": full_name})

    def test_partial_without_name(self):
        validate_customer_form({"phone": "0800000000"}, partial=True)
