"""Staff commission rule.

Commission is a percentage of the line item price that depends on the
staff member's role, the service category and whether they assisted
someone else:

- Stylists earn 10% on HAIR services only.
- Assistants earn 5% when assisting and 10% when working solo, on any
  category.
- Every other role earns nothing.
"""
from typing import Optional, Union

from business.constants import Role, ServiceCategory

STYLIST_HAIR_RATE = 0.10
ASSISTANT_HELPING_RATE = 0.05
ASSISTANT_SOLO_RATE = 0.10


def _value(member) -> Optional[str]:
    if member is None:
        return None
    return member.value if isinstance(member, (Role, ServiceCategory)) else str(member)


def commission_rate(category: Union[ServiceCategory, str, None],
                    role: Union[Role, str, None],
                    is_assistant: bool = False) -> float:
    """Return the commission rate for a role/category combination.

    Args:
        category: Service category (enum member or its string value).
        role: Staff role (enum member or its string value); None earns 0.
        is_assistant: True when the staff member helped a main performer.

    Returns:
        The rate as a fraction of the price.
    """
    role_value = _value(role)
    category_value = _value(category)

    if role_value == Role.STYLIST.value:
        if category_value == ServiceCategory.HAIR.value:
            return STYLIST_HAIR_RATE
        return 0.0

    if role_value == Role.ASSISTANT.value:
        return ASSISTANT_HELPING_RATE if is_assistant else ASSISTANT_SOLO_RATE

    return 0.0


def calculate_commission(price: float,
                         category: Union[ServiceCategory, str, None],
                         role: Union[Role, str, None],
                         is_assistant: bool = False) -> float:
    """Compute the commission earned on one line item.

    Args:
        price: Line item price.
        category: Service category.
        role: Role of the staff member being credited.
        is_assistant: True when they assisted instead of performing.

    Returns:
        ``price * rate``; 0 for roles without commission.
    """
    return float(price) * commission_rate(category, role, is_assistant)
