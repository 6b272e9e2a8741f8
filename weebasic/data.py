from typing import Union

from .exceptions import VMError, ErrorCode


INT64_MIN = -(1 << 63)
INT64_MODULUS = 1 << 64


def wrap_int64(value: int) -> int:
    """Wrap to signed 64-bit two's complement."""
    return (value - INT64_MIN) % INT64_MODULUS + INT64_MIN


class Data:
    """Tagged runtime value. Subclasses carry the tag, ``value`` the payload."""

    __slots__ = ('_value',)

    def __init__(self, value):
        self._value = value

    @property
    def value(self):
        return self._value

    def __eq__(self, other):
        return type(self) is type(other) and self._value == other._value

    def __hash__(self):
        return hash((type(self).__name__, self._value))

    def __repr__(self):
        return f'{self.__class__.__name__}({self._value!r})'


class IntegerData(Data):
    __slots__ = ()

    def __init__(self, value: int):
        super().__init__(wrap_int64(int(value)))

    def __str__(self):
        return str(self._value)


class StringData(Data):
    __slots__ = ()

    def __init__(self, value: Union[bytes, str]):
        if isinstance(value, str):
            value = value.encode('utf-8')
        super().__init__(bytes(value))

    def __len__(self):
        return len(self._value)

    def __str__(self):
        return self._value.decode('utf-8', errors='replace')


T_Data = Union[IntegerData, StringData]
WEEBASIC_DATA_TYPE = (IntegerData, StringData)

TRUE = IntegerData(1)
FALSE = IntegerData(0)


def type_name(data: T_Data) -> str:
    if isinstance(data, IntegerData):
        return 'int'
    elif isinstance(data, StringData):
        return 'string'
    else:
        raise VMError(ErrorCode.TYPE_ERROR, f'Unknown type {type(data)}')


def to_bool(flag: bool) -> IntegerData:
    return TRUE if flag else FALSE
