"""Human readable views of a dispatcher registry."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from .events import EventDispatcher, _describe


def render_registry(dispatcher: EventDispatcher, console: Console | None = None) -> Table:
    """Build a table of every registration in firing order.

    Handy for spotting listeners that were never unsubscribed.
    """

    table = Table(title="Event listeners")
    table.add_column("Event", style="cyan")
    table.add_column("#", justify="right")
    table.add_column("Subscription", justify="right")
    table.add_column("Listener", style="green")

    position = 0
    previous = None
    for subscription in dispatcher.subscriptions():
        position = position + 1 if subscription.event_name == previous else 1
        previous = subscription.event_name
        table.add_row(
            subscription.event_name,
            str(position),
            str(subscription.id),
            _describe(subscription.callback),
        )

    if console is not None:
        console.print(table)
    return table
