from enum import StrEnum, auto


class UpdateMethod(StrEnum):
    """ Describes the method in which a document is written. """
    INSERT = auto()
    """ A new document. """
    REPLACE = auto()
    """ The whole document is re-submitted, i.e. load, mutate, save. """
