from typing import Optional

from textual.message import Message


class QuitRequestedMessage(Message):
    """
    posted to the app once the quit dialog is confirmed
    """

    bubble = True


class UserLogoutMessage(Message):
    """
    Asks the app to drop the session. Posted after the user confirmed.
    """

    bubble = True


class UserLoginMessage(Message):
    """
    Fired when a sign-in succeeded, so sidebars and the menu can refresh
    """

    bubble = True


class CartChangedMessage(Message):
    """
    Fired whenever a line is added, edited or removed, or the cart is emptied.
    `count` is the number of units now in the cart, for the sidebar badge.

    Post it from the widget that changed the cart: it bubbles through the
    cart screen (which redraws) up to the app (which updates the badge).
    """

    bubble = True

    def __init__(self, count: int) -> None:
        super().__init__()
        self.count = count


class OrderPlacedMessage(Message):
    """
    Fired by the checkout dialog once the backend recorded the order
    """

    bubble = True

    def __init__(self, order_id: Optional[int]) -> None:
        super().__init__()
        self.order_id = order_id
