class StorefrontError(Exception):
    """
    Base class for failures that are shown to the user as a notification.
    The operation that raised it leaves the state unchanged.
    """


class ValidationError(StorefrontError):
    pass


class UnknownUserError(ValidationError):
    def __init__(self, username: str) -> None:
        super().__init__("Account not found. Please sign up.")
        self.username = username


class DuplicateUsernameError(ValidationError):
    def __init__(self, username: str) -> None:
        super().__init__("Username already exists!")
        self.username = username


class RoleMismatchError(ValidationError):
    def __init__(self, username: str, actual_role: str) -> None:
        super().__init__(f"Role mismatch! This account is a {actual_role}")
        self.username = username
        self.actual_role = actual_role


class ImportFormatError(StorefrontError):
    def __init__(self, reason: str = "") -> None:
        super().__init__("Invalid JSON file!")
        self.reason = reason
