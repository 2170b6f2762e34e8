"""JSON wire format for mediator messages.

Decoding turns a request body into an instance of the declared message
type; encoding turns whatever the mediator returned back into JSON.
Messages are plain dataclasses (or anything pydantic can validate)::

    @dataclass
    class CreateOrder:
        customer: str = ""
        quantity: Int32 = 0
        express: bool = False

Decoding is strict: a string is not an int, ``1.5`` is not an int, a
value outside the bounds of ``Int8`` ... ``UInt64`` is rejected, and
non-finite floats are refused. Fields without a default must be present.
Unknown keys are ignored.

Encoding uses the value's *runtime* type, so a subclass returned where
the handler declared its base class keeps its extra fields.
"""

import dataclasses
import enum
import types
from typing import Annotated, Any, Literal, Union, get_args, get_origin, get_type_hints

from pydantic import (
    ConfigDict,
    Field,
    PydanticSchemaGenerationError,
    RootModel,
    TypeAdapter,
    ValidationError,
)

from courier.errors import MalformedRequestError, TypeCoercionError

Int8 = Annotated[int, Field(ge=-(2**7), le=2**7 - 1)]
Int16 = Annotated[int, Field(ge=-(2**15), le=2**15 - 1)]
Int32 = Annotated[int, Field(ge=-(2**31), le=2**31 - 1)]
Int64 = Annotated[int, Field(ge=-(2**63), le=2**63 - 1)]
UInt8 = Annotated[int, Field(ge=0, le=2**8 - 1)]
UInt16 = Annotated[int, Field(ge=0, le=2**16 - 1)]
UInt32 = Annotated[int, Field(ge=0, le=2**32 - 1)]
UInt64 = Annotated[int, Field(ge=0, le=2**64 - 1)]

_ADAPTERS: dict[Any, TypeAdapter[Any]] = {}
_READERS: dict[Any, type[RootModel[Any]]] = {}


def type_adapter(tp: Any) -> TypeAdapter[Any]:
    """Return the cached ``TypeAdapter`` used to encode values of *tp*.

    Types pydantic cannot build a schema for (plain classes) fall back to
    an ``Any`` adapter, which serializes by inspecting the value.
    """
    adapter = _ADAPTERS.get(tp)
    if adapter is None:
        try:
            adapter = TypeAdapter(tp)
        except PydanticSchemaGenerationError:
            adapter = TypeAdapter(Any)
        _ADAPTERS[tp] = adapter
    return adapter


def _reader(tp: Any) -> type[RootModel[Any]]:
    # A plain dataclass validates under its enclosing model's config, so the
    # root model is where wire-wide settings live.
    reader = _READERS.get(tp)
    if reader is None:

        class Reader(RootModel[tp]):
            model_config = ConfigDict(allow_inf_nan=False)

        reader = _READERS[tp] = Reader
    return reader


# -- Decoding --


def decode[T](body: bytes | str, cls: type[T]) -> T:
    """Parse *body* as JSON and validate it into an instance of *cls*.

    Raises ``MalformedRequestError`` when the body is not JSON and
    ``TypeCoercionError`` when it does not fit *cls*.
    """
    reader = _reader(cls)
    try:
        return reader.model_validate_json(body, strict=True).root
    except ValidationError as exc:
        raise _body_error(exc) from exc
    except (ArithmeticError, TypeError, ValueError) as exc:
        # Raised by the message's own constructor
        raise TypeCoercionError(str(exc)) from exc


def _body_error(exc: ValidationError) -> MalformedRequestError | TypeCoercionError:
    errors = exc.errors(include_url=False)
    for error in errors:
        if error["type"] == "json_invalid":
            return MalformedRequestError(error["msg"])
    first = errors[0]
    return TypeCoercionError(first["msg"], tuple(first["loc"]))


# -- Default instances --


def default_instance[T](cls: type[T]) -> T:
    """Build an instance of *cls* with every field at its default or zero value.

    Used when a request arrives without a body.
    """
    return zero_value(cls)


def zero_value(tp: Any) -> Any:
    """Return the zero value of declared type *tp*.

    ``0``, ``""``, ``False``, empty containers, ``None`` for optionals, the
    first member of an enum, and a recursively defaulted dataclass.
    """
    origin = get_origin(tp)
    if origin is Annotated:
        return zero_value(get_args(tp)[0])
    if origin is Union or origin is types.UnionType:
        args = get_args(tp)
        return None if type(None) in args else zero_value(args[0])
    if origin is Literal:
        return get_args(tp)[0]
    if origin in (list, set, frozenset, tuple, dict):
        return origin()
    if not isinstance(tp, type):
        return None
    if dataclasses.is_dataclass(tp):
        hints = _field_hints(tp)
        return tp(
            **{
                f.name: zero_value(hints.get(f.name, Any))
                for f in dataclasses.fields(tp)
                if f.init
                and f.default is dataclasses.MISSING
                and f.default_factory is dataclasses.MISSING
            }
        )
    if issubclass(tp, enum.Enum):
        return next(iter(tp))
    try:
        return tp()
    except TypeError:
        return None


def _field_hints(cls: type) -> dict[str, Any]:
    return get_type_hints(cls, include_extras=True)


# -- Encoding --


def encode(value: Any) -> bytes:
    """Serialize *value* to compact UTF-8 JSON using its runtime type."""
    return type_adapter(type(value)).dump_json(value)
