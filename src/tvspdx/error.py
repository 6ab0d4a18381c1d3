from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import List, Optional


class TagValueError(Exception):
    """Exception raised by functions defined in tvspdx."""

    def __init__(self, message: str | List[str], origin: Optional[str] = None):
        """Initialize a TagValueError.

        TagValueError can store several messages and thus be used to
        propagate them.

        :param message: the exception message
        :param origin: the name of the function, class, or module having raised
            the exception
        """
        super().__init__(message, origin)
        self.origin = origin
        self.messages = []
        if message is not None:
            if isinstance(message, str):
                self.messages.append(message)
            else:
                self.messages.extend(message)

    def __iadd__(self, other: str | List[str] | TagValueError) -> TagValueError:
        """Add messages to the current instance.

        :param other: a message or a TagValueError instance
        """
        if isinstance(other, TagValueError):
            self.messages.extend(other.messages)
        elif isinstance(other, str):
            self.messages.append(other)
        else:
            self.messages.extend(other)
        return self

    @property
    def reason(self) -> str:
        """Return the last message, or the class name if there is none."""
        if self.messages:
            return self.messages[-1]
        return self.__class__.__name__

    def __str__(self) -> str:
        if self.origin:
            return f"{self.origin}: {self.reason}"
        else:
            return self.reason
