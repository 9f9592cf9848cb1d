import typing
from collections import abc
from types import UnionType

Type = typing.Union[
    typing.Any  # anything more elaborate really fails with mypy at the moment.
]


def check_option_type(name: str, value: typing.Any, typeinfo: Type) -> None:
    """
    Check if the provided value is an instance of typeinfo and raises a
    TypeError otherwise. Only the types used by options and the request
    dataclasses are supported.
    """
    e = TypeError(f"Expected {typeinfo} for {name}, but got {type(value)}.")

    origin = typing.get_origin(typeinfo)

    if origin is typing.Union or origin is UnionType:
        for T in typing.get_args(typeinfo):
            try:
                check_option_type(name, value, T)
            except TypeError:
                pass
            else:
                return
        raise e
    elif origin is abc.Sequence:
        T = typing.get_args(typeinfo)[0]
        if not isinstance(value, (tuple, list)):
            raise e
        for v in value:
            check_option_type(name, v, T)
    elif typeinfo is typing.Any:
        return
    elif typeinfo is float:
        # bool is an int subclass, but True is no quality value.
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise e
    elif typeinfo is int and isinstance(value, bool):
        raise e
    elif not isinstance(value, typeinfo):
        raise e


def typespec_to_str(typespec: typing.Any) -> str:
    if typespec in (str, int, float, bool):
        t = typespec.__name__
    elif typespec == typing.Optional[str]:
        t = "optional str"
    elif typespec == typing.Optional[float]:
        t = "optional float"
    elif typespec in (typing.Sequence[str], abc.Sequence[str]):
        t = "sequence of str"
    else:
        raise NotImplementedError
    return t
