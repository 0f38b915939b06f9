from dataclasses import dataclass
from typing import Any, Callable

from ...utilities.undefined import Undefined, UNDEFINED


@dataclass
class _SchemaConfig:
    """ Built by SchemaConfig(). Kept on FieldSchema.schema_config. """
    default_value: Any | Undefined
    default_factory: Callable[[], Any] | None
    kw_only: bool
    validation_func: Callable[[Any], None] | None
    """ Runs after the type check. Should raise a ValidationError for invalid values. """

    def has_default(self) -> bool:
        return self.default_value is not UNDEFINED or self.default_factory is not None

    def get_default(self) -> Any:
        """ A fresh value from default_factory each call, or the plain default. """
        if self.default_factory is not None:
            return self.default_factory()
        if self.default_value is UNDEFINED:
            raise ValueError("Field has no default.")
        return self.default_value

def SchemaConfig(
        # default, default_factory and kw_only keep the names dataclass_transform gives special meaning to
        *,
        default: Any | Undefined = UNDEFINED,
        default_factory: Callable[[], Any] | None = None,
        kw_only: bool = False,
        validation_func: Callable[[Any], None] | None = None
    ) -> Any:
    """ Configure a field in a class body, i.e. `age: int = SchemaConfig(default=0, validation_func=check_age)`.

    Typed as returning Any so type checkers accept it as the field's value. """
    if default is not UNDEFINED and default_factory is not None:
        raise ValueError("SchemaConfig takes either default or default_factory, not both.")

    return _SchemaConfig(
        default_value=default,
        default_factory=default_factory,
        kw_only=kw_only,
        validation_func=validation_func
    )
