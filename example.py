#!/usr/bin/env python3
"""
Example script demonstrating a two-page termforms form.

Run it in a terminal; set TF_ACCESSIBLE=1 for the line-based prompts.
"""

from dataclasses import dataclass, field

from rich.console import Console

from tf_common import FormAbortedError, configure_logging
from tf_ui.api import (
    AttributeAccessor,
    Deferred,
    Form,
    FormConfig,
    Group,
    MultiSelect,
    Option,
    Ref,
    Select,
    Text,
)

TOPPINGS = {
    "pizza": ["Mozzarella", "Basil", "Mushrooms", "Olives", "Anchovies", "Chili"],
    "burger": ["Cheddar", "Pickles", "Onion", "Bacon", "Jalapeños"],
    "salad": ["Feta", "Croutons", "Walnuts", "Avocado"],
}


@dataclass
class Order:
    dish: str = "pizza"
    toppings: list[str] = field(default_factory=list)
    notes: str = ""


def toppings_for(dish: Ref[str]) -> list[Option[str]]:
    """Options for the second page, recomputed whenever ``dish`` changes."""
    return Option.of(*TOPPINGS.get(dish.value or "", []))


def build_form(order: Order) -> Form:
    dish = Ref(order.dish)
    menu = Group(
        Select(
            Option.of(*TOPPINGS),
            key="dish",
            title="What would you like?",
            value=dish,
        ),
        title="Menu",
    )
    extras = Group(
        MultiSelect(
            Deferred(lambda: toppings_for(dish), dish),
            key="toppings",
            title=Deferred(lambda: f"Toppings for your {dish.value}", dish),
            value=AttributeAccessor(order, "toppings"),
            limit=3,
        ),
        Text(
            key="notes",
            title="Anything else?",
            placeholder="Allergies, delivery notes...",
            value=AttributeAccessor(order, "notes"),
            char_limit=200,
            lines=3,
        ),
        title="Extras",
    )
    return Form(menu, extras, config=FormConfig.from_env())


def main():
    """Main function."""
    configure_logging()
    console = Console()
    order = Order()
    form = build_form(order)

    try:
        form.run(console=console)
    except FormAbortedError:
        console.print("[yellow]Order cancelled.[/yellow]")
        return

    order.dish = form.get_string("dish")
    console.print(f"\n[bold]{order.dish.title()}[/bold]")
    console.print(f"  Toppings: {', '.join(order.toppings) or 'none'}")
    if order.notes:
        console.print(f"  Notes: {order.notes}")


if __name__ == "__main__":
    main()
