"""Plot growth rules that are independent from HTTP and DB.

A plot stores an item and the instant at which that item matures. Nothing runs
in the background: the effective item is worked out whenever a plot is read,
from the stored record and the instant supplied by the caller.

Rule of thumb:
- OK: rule lookups, validation, pure transformations of Plot values.
- Not OK: touching DB sessions, FastAPI, time.time(), etc.
"""

from dataclasses import dataclass, replace
from enum import IntEnum

from farmplot.errors import InvalidItem

PLOTS_PER_PLAYER = 6

# transition_at value meaning "nothing is growing"
NO_TRANSITION = 0


class Item(IntEnum):
    NONE = 0
    CARROT_SEED = 1
    CARROT = 2
    POTATO_SEED = 3
    POTATO_SPROUT = 4
    POTATO = 5

    @classmethod
    def parse(cls, value) -> "Item":
        """Convert a raw value into an Item

        Args:
            value: Item or integer item code

        Raises:
            InvalidItem: value is not a member of the enumeration

        Returns:
            Item: The matching item
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidItem(value)
        try:
            return cls(value)
        except ValueError:
            raise InvalidItem(value) from None


@dataclass(frozen=True)
class ItemTransition:
    successor: Item
    delay: int  # seconds


@dataclass(frozen=True)
class Plot:
    id: int
    item: Item = Item.NONE
    transition_at: int = NO_TRANSITION


# ==============================================================================
# ==== Transition rule table ===================================================
# ==============================================================================
# Items missing from this table are terminal: they never change on their own.

TRANSITIONS = {
    Item.CARROT_SEED: ItemTransition(Item.CARROT, 10),
    Item.POTATO_SEED: ItemTransition(Item.POTATO_SPROUT, 20),
    Item.POTATO_SPROUT: ItemTransition(Item.POTATO, 30),
}


def next_state(item) -> ItemTransition | None:
    """Look up what an item grows into.

    Returns None for terminal items (including an empty plot).
    Raises InvalidItem for values outside the Item enumeration.
    """
    return TRANSITIONS.get(Item.parse(item))


def is_growing(item) -> bool:
    return next_state(item) is not None


def transition_instant(item, now: int) -> int:
    """Instant at which an item placed at `now` matures, or NO_TRANSITION."""
    transition = next_state(item)
    if transition is None:
        return NO_TRANSITION
    return now + transition.delay


def is_consistent(plot: Plot) -> bool:
    """transition_at is set exactly when the item is still growing."""
    return (plot.transition_at != NO_TRANSITION) == is_growing(plot.item)


# ==============================================================================
# ==== Resolution and planting =================================================
# ==============================================================================


def effective(plot: Plot, now: int) -> Plot:
    """Return the plot as observed at `now`.

    The stored transition fires only once `now` is strictly past
    `transition_at`. At most one step is applied per call. A successor that is
    itself growing is scheduled from `now`, so applying this again at the same
    instant returns the same plot.

    Args:
        plot (Plot): Stored plot record
        now (int): Observation instant in epoch seconds

    Raises:
        InvalidItem: The stored item is not a known item

    Returns:
        Plot: The effective plot, which may be the input unchanged
    """
    item = Item.parse(plot.item)
    if plot.transition_at == NO_TRANSITION:
        return plot
    if now <= plot.transition_at:
        return plot

    transition = next_state(item)
    if transition is None:
        # A terminal item with a stale instant; clear it.
        return replace(plot, item=item, transition_at=NO_TRANSITION)

    successor = transition.successor
    return replace(
        plot,
        item=successor,
        transition_at=transition_instant(successor, now),
    )


def plant(plot: Plot, requested_item, now: int) -> Plot:
    """Place an item in a plot, replacing whatever was there.

    Args:
        plot (Plot): Current plot record
        requested_item: Item (or integer code) to place
        now (int): Planting instant in epoch seconds

    Raises:
        InvalidItem: requested_item is not a known item

    Returns:
        Plot: New plot state ready to be stored
    """
    item = Item.parse(requested_item)
    return replace(plot, item=item, transition_at=transition_instant(item, now))
