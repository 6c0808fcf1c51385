from textual.message import Message


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True


class UserLogoutMessage(Message):
    """
    broadcasted when the user confirms logging out
    """

    bubble = True


class CartChangedMessage(Message):
    """
    Fired by the catalog or a cart line whenever a quantity changes.
    Refreshes the cart list, the total and the sidebar badge of the screen it is posted in.
    """

    bubble = True

