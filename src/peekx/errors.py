"""Exceptions raised by peekx."""


class PeekxError(Exception):
    """Base class for peekx errors."""


class StoreFactoryError(PeekxError, TypeError):
    """A store factory returned something that cannot be observed."""


class ObserverError(PeekxError):
    """An observer raised while being notified. The original is ``__cause__``."""

    def __init__(self, observer) -> None:
        super().__init__(f"observer {observer!r} raised during notification")
        self.observer = observer
