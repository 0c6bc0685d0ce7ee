'''Serialization of seatlib records to and from JSON-ready dictionaries.

Every record class in :mod:`seatlib.model`, the evaluators and the
modified divisor are decorated with :func:`simple_serialization`, which
gives them a ``to_dict()`` method. The module-level :func:`to_dict` and
:func:`from_dict` functions convert whole result trees, so that
a presentation layer can cache or compare runs without knowing the record
classes.

Values that JSON cannot hold are written as typed dictionaries:

-   records as ``{'class': 'module.Name', <constructor arguments>}``,
-   enum members, fractions, decimals and tuples as
    ``{'type': 'Name', 'value': ...}``,
-   divisor and quota functions as ``{'callable': 'module.name'}``.

Plain dictionaries must have string keys.
'''

import sys
import enum
import inspect
import builtins
import importlib
from fractions import Fraction
from decimal import Decimal
from typing import Any, List, Dict, Callable


def simple_serialization(class_: type) -> type:
    '''A decorator to provide a simple to_dict() serialization method.

    The resulting method will serialize all object attributes corresponding
    to the class's constructor parameter names. Therefore, this decorator
    is only useful when the class stores all its original parameters
    unchanged (or in any other form acceptable to its constructor).

    :param class_: The class to add the method to.
    '''
    param_names = [
        name for name in inspect.signature(class_.__init__).parameters
        if name != 'self'
    ]

    def to_dict(self) -> Dict[str, Any]:
        out_dict = {'class': scoped_class_name(self)}
        for attr in param_names:
            out_dict[attr] = serialize_value(getattr(self, attr))
        return out_dict

    class_.to_dict = to_dict
    return class_


def serialize_value(value: Any) -> Any:
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    elif isinstance(value, enum.Enum):
        return {'type': scoped_class_name(value), 'value': value.value}
    elif isinstance(value, tuple(ATOMIC_TYPES)):
        return value
    elif type(value) in CONVERTIBLE_TYPES:
        return {
            'type': type(value).__name__,
            'value': CONVERTIBLE_TYPES[type(value)](value),
        }
    elif isinstance(value, dict):
        if not all(isinstance(key, str) for key in value):
            raise ValueError(f'cannot serialize non-string keys of {value!r}')
        return {key: serialize_value(val) for key, val in value.items()}
    elif isinstance(value, list):
        return [serialize_value(val) for val in value]
    elif callable(value):
        return {'callable': '.'.join((value.__module__, value.__name__))}
    else:
        raise ValueError(f'cannot serialize {value!r} to dict format')


def deserialize_value(value: Any) -> Any:
    if isinstance(value, dict):
        if 'type' in value and is_scoped_identifier(value['type']):
            typeobj = get_object(value['type'])
            return typeobj(deserialize_value(value['value']))
        elif 'class' in value and is_scoped_identifier(value['class']):
            return deserialize_class(value)
        elif 'callable' in value and is_scoped_identifier(value['callable']):
            return get_object(value['callable'])
        else:
            return {key: deserialize_value(val) for key, val in value.items()}
    elif isinstance(value, tuple(ATOMIC_TYPES)):
        return value
    elif isinstance(value, list):
        return [deserialize_value(val) for val in value]
    else:
        raise ValueError(f'cannot deserialize {value!r}, type unknown')


def deserialize_class(clsdef: Dict[str, Any]) -> Any:
    cls = get_object(clsdef['class'])
    params = {
        key: deserialize_value(inner_val)
        for key, inner_val in clsdef.items()
        if key != 'class'
    }
    return cls(**params)


def get_object(identifier: str) -> Any:
    if '.' not in identifier:
        global_vars = globals()
        if identifier in global_vars:
            return global_vars[identifier]
        else:
            return getattr(builtins, identifier)
    else:
        module, name = identifier.rsplit('.', 1)
        if module not in sys.modules:
            importlib.import_module(module)
        return getattr(sys.modules[module], name)


def from_dict(value: Dict[str, Any]) -> Any:
    """Reconstruct a seatlib record from a JSON-like dictionary.

    :param value: A dictionary created by :func:`to_dict`.
    """
    if not isinstance(value, dict):
        raise ValueError('invalid seatlib object def: dict expected, '
                         f'got {value!r}')
    elif 'class' not in value:
        raise ValueError('invalid seatlib object def: must have a class key')
    elif not is_scoped_identifier(value['class']):
        inval_cls = value['class']
        raise ValueError(f"invalid seatlib class def: {inval_cls}")
    else:
        return deserialize_value(value)


def to_dict(obj: Any) -> Dict[str, Any]:
    """Serialize a seatlib record to a JSON-ready dictionary.

    :param obj: A record object; it should provide a `to_dict()` method,
        courtesy of the simple_serialization decorator.
    """
    return serialize_value(obj)


def is_scoped_identifier(value: Any) -> bool:
    return (
        isinstance(value, str)
        and not value.startswith('.')
        and all(chunk.isidentifier() for chunk in value.split('.'))
    )


def scoped_class_name(value: Any) -> str:
    cls = value.__class__
    return '.'.join((cls.__module__, cls.__name__))


ATOMIC_TYPES: List[type] = [
    str, int, float, bool, type(None),
]

# fraction and decimal values become strings their constructors accept
CONVERTIBLE_TYPES: Dict[type, Callable[[Any], Any]] = {
    Fraction: str,
    Decimal: str,
    tuple: lambda seq: [serialize_value(val) for val in seq],
}
