from dataclasses import dataclass


@dataclass(frozen=True)
class DeleteManyResult:
    """ Acknowledgment of a bulk delete. """
    acknowledged: bool
    deleted_count: int
