"""Operation result — HTTP-shaped outcome of a user operation."""

from dataclasses import dataclass


@dataclass(frozen=True)
class OperationResult:
    """Status code and plain-text body produced by a service operation.

    Services return these instead of raising so that any transport can
    write them out without knowing the domain error taxonomy.
    """
    status: int
    body: str
