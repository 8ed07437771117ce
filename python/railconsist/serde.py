"""
Python-side serde helpers shared by the record, definition and consist classes.
"""
from __future__ import annotations
from enum import Enum
from pathlib import Path
import dataclasses
import json
from typing import Any, ClassVar, Dict, List, Union

from typing_extensions import Self
import msgpack  # type: ignore[import-untyped]
import yaml  # type: ignore[import-untyped]

try:
    from yaml import CSafeLoader as SafeLoader, CSafeDumper as SafeDumper
except ImportError:
    from yaml import SafeLoader, SafeDumper


class MalformedDefinition(ValueError):
    """Raised when a serialized record or definition cannot be turned into an object."""


FILE_FORMATS = {
    ".yaml": "yaml",
    ".yml": "yaml",
    ".json": "json",
    ".msgpack": "msg_pack",
}


def to_builtin(obj: Any) -> Any:
    """
    Recursively converts dataclasses, enums and tuples into plain python
    dicts, strings and lists so any of the data formats can represent them.
    """
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: to_builtin(getattr(obj, f.name)) for f in dataclasses.fields(obj)
        }
    if isinstance(obj, Enum):
        return obj.name
    if isinstance(obj, dict):
        return {k: to_builtin(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_builtin(v) for v in obj]
    return obj


def get_flattened(obj: Dict | List, prepend_str: str = "") -> Dict:
    """
    Flattens and returns dictionary, separating keys and indices with a `"."`
    # Arguments
    - `obj`: object to flatten
    - `prepend_str`: prepend this to all keys in the returned `flat` dict
    """
    flat: Dict = {}
    if isinstance(obj, dict):
        for k, v in obj.items():
            new_key = k if (prepend_str == "") else prepend_str + "." + k
            if isinstance(v, (dict, list)):
                flat.update(get_flattened(v, prepend_str=new_key))
            else:
                flat[new_key] = v
    elif isinstance(obj, list):
        for i, v in enumerate(obj):
            new_key = f"[{i}]" if (prepend_str == "") else prepend_str + "." + f"[{i}]"
            if isinstance(v, (dict, list)):
                flat.update(get_flattened(v, prepend_str=new_key))
            else:
                flat[new_key] = v
    else:
        raise TypeError("`obj` should be `dict` or `list`")

    return flat


class SerdeAPI:
    """Mixin for dataclasses that can be written to and read from yaml, json and msg_pack."""

    ACCEPTED_STR_FORMATS: ClassVar[List[str]] = ["yaml", "json"]
    ACCEPTED_BYTE_FORMATS: ClassVar[List[str]] = ["msg_pack"]

    def to_pydict(self, flatten: bool = False) -> Dict:
        """
        Returns self converted to pure python dictionary with no nested objects
        # Arguments
        - `flatten`: if True, returns dict without any hierarchy
        """
        pydict = to_builtin(self)
        if not flatten:
            return pydict
        return get_flattened(pydict)

    @classmethod
    def from_pydict(cls, pydict: Dict) -> Self:
        """Instantiates Self from pure python dictionary"""
        raise NotImplementedError(f"{cls.__name__} cannot be deserialized")

    def to_json(self) -> str:
        return json.dumps(self.to_pydict())

    @classmethod
    def from_json(cls, json_str: str) -> Self:
        try:
            pydict = json.loads(json_str)
        except json.JSONDecodeError as err:
            raise MalformedDefinition(f"invalid json for {cls.__name__}: {err}") from err
        return cls.from_pydict(pydict)

    def to_yaml(self) -> str:
        return yaml.dump(self.to_pydict(), Dumper=SafeDumper, sort_keys=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> Self:
        try:
            pydict = yaml.load(yaml_str, Loader=SafeLoader)
        except yaml.YAMLError as err:
            raise MalformedDefinition(f"invalid yaml for {cls.__name__}: {err}") from err
        return cls.from_pydict(pydict)

    def to_msg_pack(self) -> bytes:
        return msgpack.packb(self.to_pydict())

    @classmethod
    def from_msg_pack(cls, msg_pack: bytes) -> Self:
        try:
            pydict = msgpack.unpackb(msg_pack)
        except (msgpack.exceptions.UnpackException, ValueError) as err:
            raise MalformedDefinition(f"invalid msg_pack for {cls.__name__}: {err}") from err
        return cls.from_pydict(pydict)

    def to_str(self, fmt: str) -> str:
        fmt = fmt.lower()
        assert fmt in self.ACCEPTED_STR_FORMATS, f"`fmt` must be one of {self.ACCEPTED_STR_FORMATS}"
        match fmt:
            case "yaml":
                return self.to_yaml()
            case "json":
                return self.to_json()

    @classmethod
    def from_str(cls, contents: str, fmt: str) -> Self:
        fmt = fmt.lower()
        assert fmt in cls.ACCEPTED_STR_FORMATS, f"`fmt` must be one of {cls.ACCEPTED_STR_FORMATS}"
        match fmt:
            case "yaml":
                return cls.from_yaml(contents)
            case "json":
                return cls.from_json(contents)

    def to_file(self, filepath: Union[str, Path]) -> None:
        path = Path(filepath)
        fmt = _file_format(path)
        if fmt in self.ACCEPTED_BYTE_FORMATS:
            path.write_bytes(self.to_msg_pack())
        else:
            path.write_text(self.to_str(fmt))

    @classmethod
    def from_file(cls, filepath: Union[str, Path]) -> Self:
        """
        Loads Self from a `.yaml`, `.yml`, `.json` or `.msgpack` file.
        """
        path = Path(filepath)
        if not path.is_file():
            raise FileNotFoundError(f"could not locate {cls.__name__} file: {path}")
        fmt = _file_format(path)
        if fmt in cls.ACCEPTED_BYTE_FORMATS:
            return cls.from_msg_pack(path.read_bytes())
        return cls.from_str(path.read_text(), fmt)

    def clone(self) -> Self:
        return self.from_pydict(self.to_pydict())


def _file_format(path: Path) -> str:
    try:
        return FILE_FORMATS[path.suffix.lower()]
    except KeyError:
        raise ValueError(f"unsupported file extension: {path.suffix}") from None
