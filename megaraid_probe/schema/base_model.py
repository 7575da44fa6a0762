from dataclasses import dataclass, field, fields, MISSING
from typing import Dict, Any, TypeVar, Type

from ..errors import DecodeError

T = TypeVar('T')

# Field types that are checked while decoding. Anything else is taken as-is.
_PRIMITIVE_TYPES = (str, int, bool, float)


def json_field(json_key: str, default: Any = MISSING, default_factory: Any = MISSING):
    """Declare a dataclass field that is read from a storcli JSON key.

    storcli keys contain spaces and mixed case ("SCSI NAA Id"), so they cannot
    be derived from the attribute name.
    """
    kwargs: Dict[str, Any] = {'metadata': {'json_key': json_key}}
    if default is not MISSING:
        kwargs['default'] = default
    if default_factory is not MISSING:
        kwargs['default_factory'] = default_factory
    return field(**kwargs)


@dataclass
class BaseModel:
    """
    Base model class for records decoded from storcli JSON output.

    Fields are matched against the raw mapping by their declared json_key,
    then by the attribute name itself, then by its camelCase form, and
    finally by any of those ignoring case. Keys the model does not declare
    are ignored but stay reachable through get_raw().
    """
    _raw_data: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def snake_to_camel(cls, snake_case: str) -> str:
        """Convert snake_case string to camelCase"""
        if not snake_case:
            return snake_case

        components = snake_case.split('_')
        camel_case = components[0]
        for component in components[1:]:
            if component:
                camel_case += component[0].upper() + component[1:]

        return camel_case

    @classmethod
    def _lookup_key(cls, field_info, data: Dict[str, Any]):
        json_key = field_info.metadata.get('json_key')
        candidates = [c for c in (json_key, field_info.name, cls.snake_to_camel(field_info.name)) if c]
        for candidate in candidates:
            if candidate in data:
                return candidate
        # Exact matches win, then a case-insensitive match
        folded = {c.casefold() for c in candidates}
        for key in data:
            if isinstance(key, str) and key.casefold() in folded:
                return key
        return None

    @classmethod
    def from_api_response(cls: Type[T], data: Dict[str, Any]) -> T:
        """Create an instance from a decoded JSON mapping.

        Raises:
            DecodeError: if data is not a mapping or a primitive field holds a
                value of the wrong JSON type.
        """
        if data is None:
            # JSON null decodes to the zero value of every field
            data = {}
        if not isinstance(data, dict):
            raise DecodeError(
                f"cannot decode {cls.__name__} from {type(data).__name__}, expected an object")

        instance_args = {}
        for field_info in fields(cls):
            if field_info.name == '_raw_data':
                continue

            key = cls._lookup_key(field_info, data)
            if key is None:
                continue

            value = data[key]
            expected = field_info.type
            if value is not None and expected in _PRIMITIVE_TYPES:
                # bool is an int subclass, JSON true must not pass as a number
                if not isinstance(value, expected) or (expected is not bool and isinstance(value, bool)):
                    raise DecodeError(
                        f"{cls.__name__}: field '{key}' expected {expected.__name__}, "
                        f"got {type(value).__name__}")
            if value is None:
                # JSON null leaves the zero value, as a typed decoder would
                continue
            instance_args[field_info.name] = value

        instance_args['_raw_data'] = data.copy()
        return cls(**instance_args)

    def get_raw(self, key: str, default: Any = None) -> Any:
        """Access any field from the raw data"""
        return self._raw_data.get(key, default)
