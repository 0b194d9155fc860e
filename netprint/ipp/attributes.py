from typing import Any, Dict, Iterable, List, Optional
from datetime import datetime

from .codec import (IPPAttribute, IPPTag, IPPValue, Range, Resolution, TextWithLang, ValueKind)

class Attributes(dict):
    """Attribute name -> ordered list of IPPValue.

    Values under one name are expected to share a kind, but devices are not always
    conformant, so readers filter by kind and silently skip anything else. Absent
    names are a normal condition: every getter returns the caller's default instead
    of raising.
    """

    @classmethod
    def from_ipp(cls, group: Optional[Dict[str, IPPAttribute]]) -> 'Attributes':
        attributes = cls()
        for attribute in (group or {}).values():
            if attribute.values:
                attributes[attribute.name] = list(attribute.values)
        return attributes

    @classmethod
    def from_members(cls, members: Iterable[IPPAttribute]) -> 'Attributes':
        attributes = cls()
        for member in members:
            if member.values:
                attributes.setdefault(member.name, []).extend(member.values)
        return attributes

    def to_ipp(self) -> Dict[str, IPPAttribute]:
        return {name: IPPAttribute(name, list(values)) for name, values in self.items()}

    def copy(self) -> 'Attributes':
        other = type(self)()
        for name, values in self.items():
            other[name] = [IPPValue(v.tag, _copy_payload(v)) for v in values]
        return other

    def for_printer(self) -> 'PrinterAttributes':
        from .printer_attributes import PrinterAttributes
        return PrinterAttributes(self)

    def for_job(self) -> 'JobAttributes':
        from .job_attributes import JobAttributes
        return JobAttributes(self)

    def _first(self, name: str, kind: ValueKind, default: Any) -> Any:
        for item in self.get(name, ()):
            if item.kind is kind:
                return item.value
        return default

    def _all(self, name: str, kind: ValueKind, default: Any) -> Any:
        if name not in self:
            return default
        return [item.value for item in self[name] if item.kind is kind]

    def _set(self, name: str, tag: IPPTag, value: Any, replace: bool):
        if replace or name not in self:
            self[name] = [IPPValue(tag, value)]
        else:
            self[name].append(IPPValue(tag, value))

    # Booleans

    def boolean(self, name: str, default: bool) -> bool:
        return self._first(name, ValueKind.BOOLEAN, default)

    def booleans(self, name: str, default: Optional[List[bool]]) -> Optional[List[bool]]:
        return self._all(name, ValueKind.BOOLEAN, default)

    def set_boolean(self, name: str, value: bool, replace: bool):
        self._set(name, IPPTag.BOOLEAN, bool(value), replace)

    # Integers (integer and enum tags)

    def integer(self, name: str, default: int) -> int:
        return self._first(name, ValueKind.INTEGER, default)

    def integers(self, name: str, default: Optional[List[int]]) -> Optional[List[int]]:
        return self._all(name, ValueKind.INTEGER, default)

    def set_integer(self, name: str, value: int, replace: bool):
        self._set(name, IPPTag.INTEGER, int(value), replace)

    def set_enum(self, name: str, value: int, replace: bool):
        self._set(name, IPPTag.ENUM, int(value), replace)

    # Strings (text, name, keyword, uri, charset, language, mime type, ...)

    def string(self, name: str, default: str) -> str:
        return self._first(name, ValueKind.STRING, default)

    def strings(self, name: str, default: Optional[List[str]]) -> Optional[List[str]]:
        return self._all(name, ValueKind.STRING, default)

    def _set_string(self, name: str, value: str, tag: IPPTag, replace: bool):
        # An empty value removes the attribute when replacing, otherwise it is ignored
        if not value:
            if replace:
                self.pop(name, None)
            return
        self._set(name, tag, value, replace)

    def set_text(self, name: str, value: str, replace: bool):
        self._set_string(name, value, IPPTag.TEXT_WITHOUT_LANGUAGE, replace)

    def set_name(self, name: str, value: str, replace: bool):
        self._set_string(name, value, IPPTag.NAME_WITHOUT_LANGUAGE, replace)

    def set_reserved_string(self, name: str, value: str, replace: bool):
        self._set_string(name, value, IPPTag.RESERVED_STRING, replace)

    def set_keyword(self, name: str, value: str, replace: bool):
        self._set_string(name, value, IPPTag.KEYWORD, replace)

    def set_uri(self, name: str, value: str, replace: bool):
        self._set_string(name, value, IPPTag.URI, replace)

    def set_uri_scheme(self, name: str, value: str, replace: bool):
        self._set_string(name, value, IPPTag.URI_SCHEME, replace)

    def set_charset(self, name: str, value: str, replace: bool):
        self._set_string(name, value, IPPTag.CHARSET, replace)

    def set_language(self, name: str, value: str, replace: bool):
        self._set_string(name, value, IPPTag.NATURAL_LANGUAGE, replace)

    def set_mime_type(self, name: str, value: str, replace: bool):
        self._set_string(name, value, IPPTag.MIME_MEDIA_TYPE, replace)

    def set_member_name(self, name: str, value: str, replace: bool):
        self._set_string(name, value, IPPTag.MEMBER_ATTR_NAME, replace)

    # Timestamps

    def time(self, name: str, default: Optional[datetime]) -> Optional[datetime]:
        return self._first(name, ValueKind.DATETIME, default)

    def times(self, name: str, default: Optional[List[datetime]]) -> Optional[List[datetime]]:
        return self._all(name, ValueKind.DATETIME, default)

    def set_time(self, name: str, value: datetime, replace: bool):
        self._set(name, IPPTag.DATETIME, value, replace)

    # Resolutions

    def resolution(self, name: str, default: Optional[Resolution]) -> Optional[Resolution]:
        return self._first(name, ValueKind.RESOLUTION, default)

    def resolutions(self, name: str, default: Optional[List[Resolution]]) -> Optional[List[Resolution]]:
        return self._all(name, ValueKind.RESOLUTION, default)

    def set_resolution(self, name: str, value: Resolution, replace: bool):
        self._set(name, IPPTag.RESOLUTION, Resolution(*value), replace)

    # Integer ranges

    def range(self, name: str, default: Optional[Range]) -> Optional[Range]:
        return self._first(name, ValueKind.RANGE, default)

    def ranges(self, name: str, default: Optional[List[Range]]) -> Optional[List[Range]]:
        return self._all(name, ValueKind.RANGE, default)

    def set_range(self, name: str, value: Range, replace: bool):
        self._set(name, IPPTag.RANGE_OF_INTEGER, Range(*value), replace)

    # Text with language

    def text_with_lang(self, name: str, default: Optional[TextWithLang]) -> Optional[TextWithLang]:
        return self._first(name, ValueKind.TEXT_WITH_LANG, default)

    def text_with_langs(self, name: str, default: Optional[List[TextWithLang]]) -> Optional[List[TextWithLang]]:
        return self._all(name, ValueKind.TEXT_WITH_LANG, default)

    def set_text_with_lang(self, name: str, value: TextWithLang, replace: bool):
        self._set(name, IPPTag.TEXT_WITH_LANGUAGE, TextWithLang(*value), replace)

    def set_name_with_lang(self, name: str, value: TextWithLang, replace: bool):
        self._set(name, IPPTag.NAME_WITH_LANGUAGE, TextWithLang(*value), replace)

    # Binary blobs

    def binary(self, name: str, default: Optional[bytes] = None) -> Optional[bytes]:
        return self._first(name, ValueKind.BINARY, default)

    def binaries(self, name: str, default: Optional[List[bytes]] = None) -> Optional[List[bytes]]:
        return self._all(name, ValueKind.BINARY, default)

    def set_binary(self, name: str, value: bytes, replace: bool):
        self._set(name, IPPTag.OCTET_STRING, bytes(value), replace)

    # Collections

    def collection(self, name: str) -> 'Attributes':
        members = self._first(name, ValueKind.COLLECTION, None)
        if members is None:
            return Attributes()
        return Attributes.from_members(members)

    def collections(self, name: str) -> List['Attributes']:
        return [Attributes.from_members(members) for members in self._all(name, ValueKind.COLLECTION, [])]

    def set_collection(self, name: str, value: 'Attributes', replace: bool):
        members = [IPPAttribute(key, list(values)) for key, values in value.items()]
        self._set(name, IPPTag.BEGIN_COLLECTION, members, replace)

def _copy_payload(item: IPPValue) -> Any:
    if item.kind is ValueKind.COLLECTION:
        return [IPPAttribute(member.name, [IPPValue(v.tag, _copy_payload(v)) for v in member.values])
                for member in item.value]
    return item.value
