from __future__ import annotations

import copy
import pprint
import textwrap
from collections.abc import Sequence
from pathlib import Path
from typing import Any
from typing import Optional

import ruamel.yaml

from paperclip import exceptions
from paperclip.utils import typecheck

"""
    The base implementation for Options.
"""

unset = object()


class _Option:
    __slots__ = ("name", "typespec", "value", "_default", "choices", "help")

    def __init__(
        self,
        name: str,
        typespec: type | object,  # object for Optional[x], which is not a type.
        default: Any,
        help: str,
        choices: Sequence[str] | None,
    ) -> None:
        typecheck.check_option_type(name, default, typespec)
        self.name = name
        self.typespec = typespec
        self._default = default
        self.value = unset
        self.help = textwrap.dedent(help).strip().replace("\n", " ")
        self.choices = choices

    def __repr__(self):
        return f"{self.current()} [{self.typespec}]"

    @property
    def default(self):
        return copy.deepcopy(self._default)

    def current(self) -> Any:
        if self.value is unset:
            v = self.default
        else:
            v = self.value
        return copy.deepcopy(v)

    def set(self, value: Any) -> None:
        typecheck.check_option_type(self.name, value, self.typespec)
        if self.choices is not None and value not in self.choices:
            raise exceptions.OptionsError(
                "Invalid value for {}: {!r}. Valid values are {}.".format(
                    self.name, value, ", ".join(repr(c) for c in self.choices)
                )
            )
        self.value = value

    def reset(self) -> None:
        self.value = unset

    def has_changed(self) -> bool:
        return self.current() != self.default

    def __eq__(self, other) -> bool:
        for i in self.__slots__:
            if getattr(self, i) != getattr(other, i):
                return False
        return True

    def __deepcopy__(self, _):
        o = _Option(self.name, self.typespec, self.default, self.help, self.choices)
        if self.has_changed():
            o.value = self.current()
        return o


class OptManager:
    """
    OptManager is the base class from which Options objects are derived.

    Options are declared with `add_option` and read as attributes. Assigning
    to an attribute, or calling `update`, type-checks the new value. If any
    value of an update is rejected, none of the update is applied.

    Optmanager always returns a deep copy of options to ensure that
    mutation doesn't change the option state inadvertently.
    """

    def __init__(self) -> None:
        # Options must be the last attribute here - after that, we raise an
        # error for attribute assignment to unknown options.
        self._options: dict[str, _Option] = {}

    def add_option(
        self,
        name: str,
        typespec: type | object,
        default: Any,
        help: str,
        choices: Sequence[str] | None = None,
    ) -> None:
        self._options[name] = _Option(name, typespec, default, help, choices)

    def __eq__(self, other):
        if isinstance(other, OptManager):
            return self._options == other._options
        return False

    def __deepcopy__(self, memodict=None):
        o = type(self).__new__(type(self))
        o.__dict__["_options"] = copy.deepcopy(self._options, memodict)
        return o

    __copy__ = __deepcopy__

    def __getattr__(self, attr):
        # __getattr__ is only consulted for attributes that are not found
        # normally, so _options itself must not recurse here.
        if attr == "_options":
            raise AttributeError(attr)
        if attr in self._options:
            return self._options[attr].current()
        else:
            raise AttributeError("No such option: %s" % attr)

    def __setattr__(self, attr, value):
        # We allow attributes to be set on the instance until we have an
        # _options attribute. After that, assignment is sent to the update
        # function, and will raise an error for unknown options.
        opts = self.__dict__.get("_options")
        if not opts:
            super().__setattr__(attr, value)
        else:
            self.update(**{attr: value})

    def keys(self):
        return set(self._options.keys())

    def items(self):
        return self._options.items()

    def __contains__(self, k):
        return k in self._options

    def reset(self):
        """
        Restore defaults for all options.
        """
        for o in self._options.values():
            o.reset()

    def update(self, **kwargs):
        """
        Set options from kwargs. Raises OptionsError for unknown options or
        values of the wrong type, in which case no option is changed.
        """
        unknown = [k for k in kwargs if k not in self._options]
        if unknown:
            raise exceptions.OptionsError("Unknown options: %s" % ", ".join(unknown))
        old = copy.deepcopy(self._options)
        try:
            for k, v in kwargs.items():
                self._options[k].set(v)
            self.validate()
        except exceptions.OptionsError:
            self.__dict__["_options"] = old
            raise
        except TypeError as e:
            self.__dict__["_options"] = old
            raise exceptions.OptionsError(str(e)) from e

    def validate(self) -> None:
        """
        Check constraints between option values. Subclasses raise OptionsError here.
        """

    def default(self, option: str) -> Any:
        return self._options[option].default

    def has_changed(self, option):
        """
        Has the option changed from the default?
        """
        return self._options[option].has_changed()

    def __repr__(self):
        options = pprint.pformat(self._options, indent=4).strip(" {}")
        if "\n" in options:
            options = "\n    " + options + "\n"
        return "{mod}.{cls}({{{options}}})".format(
            mod=type(self).__module__, cls=type(self).__name__, options=options
        )

    def set(self, *specs: str) -> None:
        """
        Takes a list of set specification in standard form (option=value).

        May raise an `OptionsError` if a value is malformed or an option is unknown.
        """
        processed: dict[str, Any] = {}
        for spec in specs:
            name, _, value = spec.partition("=")
            if name not in self._options:
                raise exceptions.OptionsError(f"Unknown option: {name}")
            processed[name] = self._parse_setval(
                self._options[name], value if "=" in spec else None
            )
        self.update(**processed)

    def _parse_setval(self, o: _Option, optstr: str | None) -> Any:
        """
        Convert a string to a value appropriate for the option type.
        """
        if o.typespec in (str, Optional[str]):
            if o.typespec == str and optstr is None:
                raise exceptions.OptionsError(f"Option is required: {o.name}")
            return optstr
        elif o.typespec in (int, float):
            if optstr is None:
                raise exceptions.OptionsError(f"Option is required: {o.name}")
            try:
                return o.typespec(optstr)  # type: ignore
            except ValueError:
                raise exceptions.OptionsError(
                    f"Not a valid {o.typespec.__name__}: {optstr}"  # type: ignore
                )
        elif o.typespec == bool:
            if optstr == "toggle":
                return not o.current()
            if not optstr or optstr == "true":
                return True
            elif optstr == "false":
                return False
            else:
                raise exceptions.OptionsError(
                    'Boolean must be "true", "false", or have the value omitted (a synonym for "true").'
                )
        raise NotImplementedError(f"Unsupported option type: {o.typespec}")


def dump_dicts(opts: OptManager) -> dict:
    """
    Dumps the options into a dict of dicts.

    Return: A dict like: { "http_method": { type: "str", default: "POST", value: "PUT", help: "help text"} }
    """
    options_dict = {}
    for k in sorted(opts.keys()):
        o = opts._options[k]
        options_dict[k] = {
            "type": typecheck.typespec_to_str(o.typespec),
            "default": o.default,
            "value": o.current(),
            "help": o.help,
            "choices": o.choices,
        }
    return options_dict


def parse(text):
    if not text:
        return {}
    try:
        yaml = ruamel.yaml.YAML(typ="safe", pure=True)
        data = yaml.load(text)
    except ruamel.yaml.error.YAMLError as v:
        if hasattr(v, "problem_mark"):
            snip = v.problem_mark.get_snippet()
            raise exceptions.OptionsError(
                "Config error at line %s:\n%s\n%s"
                % (v.problem_mark.line + 1, snip, getattr(v, "problem", ""))
            )
        else:
            raise exceptions.OptionsError("Could not parse options.")
    if data is None:
        return {}
    elif not isinstance(data, dict):
        raise exceptions.OptionsError("Config error - no keys found.")
    return data


def load(opts: OptManager, text: str) -> None:
    """
    Load configuration from text, over-writing options already set in
    this object. May raise OptionsError if the config is invalid.
    """
    opts.update(**parse(text))


def load_paths(opts: OptManager, *paths: Path | str) -> None:
    """
    Load paths in order. Each path takes precedence over the previous
    path. Paths that don't exist are ignored, errors raise an
    OptionsError.
    """
    for p in paths:
        p = Path(p).expanduser()
        if p.exists() and p.is_file():
            with p.open(encoding="utf8") as f:
                try:
                    txt = f.read()
                except UnicodeDecodeError as e:
                    raise exceptions.OptionsError(f"Error reading {p}: {e}")
            try:
                load(opts, txt)
            except exceptions.OptionsError as e:
                raise exceptions.OptionsError(f"Error reading {p}: {e}")
