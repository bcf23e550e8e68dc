"""
Quantity limits and XAF price formatting shared by the catalogue and the cart.
"""

# Upper bound for a single cart line regardless of stock
MAX_QUANTITY_PER_COMPONENT = 50


def format_price(amount: int) -> str:
    """1500 -> '1,500 XAF'"""
    return f"{int(amount):,} XAF"


def max_selectable_quantity(component) -> int:
    """
    Largest quantity a client may hold for a component.

    The smallest of the cook-defined max, the remaining stock and
    MAX_QUANTITY_PER_COMPONENT, never below 1. NULL limits are unlimited.
    """
    limits = [MAX_QUANTITY_PER_COMPONENT]
    if component.max_quantity is not None:
        limits.append(component.max_quantity)
    if component.available_quantity is not None:
        limits.append(component.available_quantity)
    return max(1, min(limits))
