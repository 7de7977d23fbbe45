from __future__ import annotations


class RepairError(Exception):
    """
    Raised when the input has a malformation the repairing parser has no
    rule for. Carries the message and the input offset of detection.
    """

    def __init__(self, message: str, position: int):
        self.message = message
        self.position = position
        super().__init__(f'{message} at position {position}')

    def __reduce__(self):
        return self.__class__, (self.message, self.position)
