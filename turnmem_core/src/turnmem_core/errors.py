"""Errors surfaced to the caller of a turn batch."""


class OperationError(Exception):
    """A required upstream resource is missing; the item cannot run."""


class MissingModelError(OperationError):
    def __init__(self) -> None:
        super().__init__("No language model connected")


class MissingInputError(OperationError):
    def __init__(self) -> None:
        super().__init__("No input text provided")
