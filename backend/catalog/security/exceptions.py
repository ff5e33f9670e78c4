from __future__ import annotations


class UnsupportedUserError(TypeError):
    """Raised when a principal of an unexpected type reaches user storage."""

    def __init__(self, user: object) -> None:
        super().__init__(f'Instances of "{type(user).__name__}" are not supported.')
        self.user = user


class LogoutNotInterceptedError(RuntimeError):
    """The logout route ran, so ``LogoutMiddleware`` is not installed."""
