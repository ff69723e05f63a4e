"""
Borsh coder driven by the Anchor IDL

Builds borsh_construct layouts for the IDL type language: fixed-size
integers, bool, string, bytes, publicKey, vec, option, array and defined
structs/enums. Layouts are compiled once per type and cached.

Struct values are accepted as dicts or objects with snake_case field names
(dataclasses from autocrat_client.types work directly) and decoded into
dicts keyed by snake_case field names. Enum variants without fields decode
to the variant name.
"""

import io
import json
import re
from enum import Enum
from typing import Any, Dict, Mapping, Tuple, Union

import construct
from borsh_construct import (
    CStruct,
    Bool,
    Bytes,
    F32,
    F64,
    I8,
    I16,
    I32,
    I64,
    I128,
    Option,
    String,
    U8,
    U16,
    U32,
    U64,
    U128,
    Vec,
)
from construct import Adapter, ConstructError, Container, ListContainer

from solders.pubkey import Pubkey

from .errors import IdlError
from .types import to_pubkey

IdlType = Union[str, Dict[str, Any]]

_PRIMITIVES = {
    "u8": U8,
    "i8": I8,
    "u16": U16,
    "i16": I16,
    "u32": U32,
    "i32": I32,
    "u64": U64,
    "i64": I64,
    "u128": U128,
    "i128": I128,
    "f32": F32,
    "f64": F64,
    "bool": Bool,
    "string": String,
    "bytes": Bytes,
}

# (bits, signed)
_INT_RANGES = {
    "u8": (8, False),
    "i8": (8, True),
    "u16": (16, False),
    "i16": (16, True),
    "u32": (32, False),
    "i32": (32, True),
    "u64": (64, False),
    "i64": (64, True),
    "u128": (128, False),
    "i128": (128, True),
}

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def snake_case(name: str) -> str:
    """Convert an IDL camelCase name to snake_case"""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


class _PubkeyAdapter(Adapter):
    """32 raw bytes <-> solders Pubkey"""

    def _decode(self, obj, context, path):
        return Pubkey.from_bytes(obj)

    def _encode(self, obj, context, path):
        return bytes(obj)


PUBLIC_KEY = _PubkeyAdapter(construct.Bytes(32))


class _EnumAdapter(Adapter):
    """u8 variant index followed by the variant's fields, if any"""

    def __init__(self, enum_name: str, variant_names, subcon):
        super().__init__(subcon)
        self._enum_name = enum_name
        self._variant_names = list(variant_names)

    def _decode(self, obj, context, path):
        if obj.index >= len(self._variant_names):
            raise IdlError.invalid_value(self._enum_name, f"variant index {obj.index} out of range")
        name = self._variant_names[obj.index]
        if obj.fields is None:
            return name
        return {name: _plain(obj.fields)}

    def _encode(self, obj, context, path):
        return obj


def _plain(value: Any) -> Any:
    """Strip construct containers down to dicts and lists"""
    if isinstance(value, (Container, dict)):
        return {k: _plain(v) for k, v in value.items() if not k.startswith("_")}
    if isinstance(value, (ListContainer, list)):
        return [_plain(item) for item in value]
    return value


def _type_label(idl_type: IdlType) -> str:
    if isinstance(idl_type, str):
        return idl_type
    if "defined" in idl_type:
        return idl_type["defined"]
    return json.dumps(idl_type, sort_keys=True)


_MISSING = object()


def _get_field(value: Any, name: str, default: Any = _MISSING) -> Any:
    key = snake_case(name)
    if isinstance(value, Mapping):
        if key in value:
            return value[key]
        if name in value:
            return value[name]
    elif hasattr(value, key):
        return getattr(value, key)
    if default is not _MISSING:
        return default
    raise IdlError.invalid_value(name, f"missing field '{key}'")


def _is_option(idl_type: IdlType) -> bool:
    return isinstance(idl_type, dict) and "option" in idl_type


class IdlCoder:
    """
    Encoder/decoder for the types declared in one IDL

    Usage:
        coder = IdlCoder(idl)
        data = coder.encode({"defined": "UpdateDaoParams"}, params)
        dao, _ = coder.decode({"defined": "Dao"}, account_data, 8)
    """

    def __init__(self, idl: Mapping[str, Any]):
        self._types: Dict[str, Mapping[str, Any]] = {}
        for type_def in list(idl.get("types", [])) + list(idl.get("accounts", [])):
            self._types[type_def["name"]] = type_def["type"]
        self._layouts: Dict[str, construct.Construct] = {}

    def type_def(self, name: str) -> Mapping[str, Any]:
        try:
            return self._types[name]
        except KeyError:
            raise IdlError.unknown_type(name) from None

    # ========== Layouts ==========

    def layout(self, idl_type: IdlType) -> construct.Construct:
        """borsh_construct layout for an IDL type"""
        key = idl_type if isinstance(idl_type, str) else json.dumps(idl_type, sort_keys=True)
        cached = self._layouts.get(key)
        if cached is None:
            cached = self._layouts[key] = self._build_layout(idl_type)
        return cached

    def _build_layout(self, idl_type: IdlType) -> construct.Construct:
        if isinstance(idl_type, str):
            if idl_type == "publicKey":
                return PUBLIC_KEY
            if idl_type in _PRIMITIVES:
                return _PRIMITIVES[idl_type]
            raise IdlError.unknown_type(idl_type)
        if "vec" in idl_type:
            return Vec(self.layout(idl_type["vec"]))
        if "option" in idl_type:
            return Option(self.layout(idl_type["option"]))
        if "array" in idl_type:
            inner, length = idl_type["array"]
            return construct.Array(length, self.layout(inner))
        if "defined" in idl_type:
            return self._defined_layout(idl_type["defined"])
        raise IdlError.unknown_type(str(idl_type))

    def _struct_layout(self, fields) -> construct.Construct:
        return CStruct(*(snake_case(f["name"]) / self.layout(f["type"]) for f in fields))

    def _defined_layout(self, name: str) -> construct.Construct:
        type_def = self.type_def(name)
        if type_def["kind"] == "struct":
            return self._struct_layout(type_def["fields"])

        variants = type_def["variants"]
        cases = {
            index: self._struct_layout(variant["fields"])
            for index, variant in enumerate(variants)
            if variant.get("fields")
        }
        body = construct.Struct(
            "index" / U8,
            "fields" / construct.Switch(construct.this.index, cases, default=construct.Pass),
        )
        return _EnumAdapter(name, [variant["name"] for variant in variants], body)

    # ========== Value preparation ==========

    def _prepare(self, idl_type: IdlType, value: Any) -> Any:
        """Validate a Python value and shape it for layout.build"""
        if isinstance(idl_type, str):
            if idl_type in _INT_RANGES:
                return _check_int(idl_type, value)
            if idl_type == "publicKey":
                return to_pubkey(value)
            if idl_type == "bytes":
                return bytes(value)
            return value
        if "vec" in idl_type:
            return [self._prepare(idl_type["vec"], item) for item in value]
        if "option" in idl_type:
            return None if value is None else self._prepare(idl_type["option"], value)
        if "array" in idl_type:
            inner, length = idl_type["array"]
            items = list(value)
            if len(items) != length:
                raise IdlError.invalid_value("array", f"expected {length} items, got {len(items)}")
            return [self._prepare(inner, item) for item in items]
        if "defined" in idl_type:
            return self._prepare_defined(idl_type["defined"], value)
        raise IdlError.unknown_type(str(idl_type))

    def _prepare_fields(self, fields, value: Any) -> Dict[str, Any]:
        prepared = {}
        for field_def in fields:
            field_type = field_def["type"]
            # Absent optional fields encode as None
            default = None if _is_option(field_type) else _MISSING
            raw = _get_field(value, field_def["name"], default)
            prepared[snake_case(field_def["name"])] = self._prepare(field_type, raw)
        return prepared

    def _prepare_defined(self, name: str, value: Any) -> Any:
        type_def = self.type_def(name)
        if type_def["kind"] == "struct":
            return self._prepare_fields(type_def["fields"], value)

        variants = type_def["variants"]
        names = [variant["name"] for variant in variants]
        fields_value = None

        if isinstance(value, Enum):
            variant_name = value.value
        elif isinstance(value, str):
            variant_name = value
        elif isinstance(value, Mapping) and len(value) == 1:
            variant_name, fields_value = next(iter(value.items()))
        else:
            raise IdlError.invalid_value(name, f"cannot encode {value!r} as enum")

        if variant_name not in names:
            raise IdlError.invalid_value(name, f"unknown variant '{variant_name}'")

        index = names.index(variant_name)
        variant_fields = variants[index].get("fields")
        fields = self._prepare_fields(variant_fields, fields_value) if variant_fields else None
        return {"index": index, "fields": fields}

    # ========== Encoding / decoding ==========

    def encode(self, idl_type: IdlType, value: Any) -> bytes:
        layout = self.layout(idl_type)
        prepared = self._prepare(idl_type, value)
        try:
            return layout.build(prepared)
        except ConstructError as e:
            raise IdlError.invalid_value(_type_label(idl_type), str(e)) from e

    def decode(self, idl_type: IdlType, data: bytes, offset: int = 0) -> Tuple[Any, int]:
        """
        Decode one value

        Returns:
            (value, offset just past the value)
        """
        layout = self.layout(idl_type)
        stream = io.BytesIO(bytes(data))
        stream.seek(offset)
        try:
            value = layout.parse_stream(stream)
        except ConstructError as e:
            raise IdlError.invalid_value(_type_label(idl_type), str(e)) from e
        return _plain(value), stream.tell()


def _check_int(type_name: str, value: Any) -> int:
    bits, signed = _INT_RANGES[type_name]
    if isinstance(value, bool) or not isinstance(value, int):
        raise IdlError.invalid_value(type_name, f"expected int, got {type(value).__name__}")
    low, high = (-(1 << (bits - 1)), (1 << (bits - 1)) - 1) if signed else (0, (1 << bits) - 1)
    if not low <= value <= high:
        raise IdlError.invalid_value(type_name, f"{value} out of range [{low}, {high}]")
    return value
