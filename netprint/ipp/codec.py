from typing import Dict, List, Any, Optional, NamedTuple, Tuple
from datetime import datetime, timedelta, timezone
from enum import Enum, IntEnum
import logging
import struct
import io

logger = logging.getLogger(__name__)

class IPPDecodeError(ValueError):
    pass

# Enumeración de etiquetas IPP (delimitadores y tipos de valor)
class IPPTag(IntEnum):
    # Delimitadores de grupos
    OPERATION_ATTRIBUTES_TAG = 0x01
    JOB_ATTRIBUTES_TAG = 0x02
    END_OF_ATTRIBUTES_TAG = 0x03
    PRINTER_ATTRIBUTES_TAG = 0x04
    UNSUPPORTED_ATTRIBUTES_TAG = 0x05
    SUBSCRIPTION_ATTRIBUTES_TAG = 0x06
    EVENT_NOTIFICATION_ATTRIBUTES_TAG = 0x07
    RESOURCE_ATTRIBUTES_TAG = 0x08
    DOCUMENT_ATTRIBUTES_TAG = 0x09
    SYSTEM_ATTRIBUTES_TAG = 0x0a

    # Valores fuera de banda
    UNSUPPORTED = 0x10
    DEFAULT = 0x11
    UNKNOWN = 0x12
    NO_VALUE = 0x13
    NOT_SETTABLE = 0x15
    DELETE_ATTRIBUTE = 0x16
    ADMIN_DEFINE = 0x17

    # Enteros
    INTEGER = 0x21
    BOOLEAN = 0x22
    ENUM = 0x23

    # Cadenas binarias y especiales
    OCTET_STRING = 0x30
    DATETIME = 0x31
    RESOLUTION = 0x32
    RANGE_OF_INTEGER = 0x33
    BEGIN_COLLECTION = 0x34
    TEXT_WITH_LANGUAGE = 0x35
    NAME_WITH_LANGUAGE = 0x36
    END_COLLECTION = 0x37

    # Cadenas de caracteres
    TEXT_WITHOUT_LANGUAGE = 0x41
    NAME_WITHOUT_LANGUAGE = 0x42
    RESERVED_STRING = 0x43
    KEYWORD = 0x44
    URI = 0x45
    URI_SCHEME = 0x46
    CHARSET = 0x47
    NATURAL_LANGUAGE = 0x48
    MIME_MEDIA_TYPE = 0x49
    MEMBER_ATTR_NAME = 0x4a

    EXTENSION = 0x7f

    @classmethod
    def _missing_(cls, value):
        logger.warning(f"Etiqueta IPP desconocida: {value}")
        return cls.UNKNOWN

# Enumeración de operaciones IPP
class IPPOperation(IntEnum):
    PRINT_JOB = 0x0002
    PRINT_URI = 0x0003
    VALIDATE_JOB = 0x0004
    CREATE_JOB = 0x0005
    SEND_DOCUMENT = 0x0006
    SEND_URI = 0x0007
    CANCEL_JOB = 0x0008
    GET_JOB_ATTRIBUTES = 0x0009
    GET_JOBS = 0x000a
    GET_PRINTER_ATTRIBUTES = 0x000b
    HOLD_JOB = 0x000c
    RELEASE_JOB = 0x000d
    RESTART_JOB = 0x000e
    PAUSE_PRINTER = 0x0010
    RESUME_PRINTER = 0x0011
    PURGE_JOBS = 0x0012

# Enumeración de códigos de estado IPP
class IPPStatusCode(IntEnum):
    # Éxito
    SUCCESSFUL_OK = 0x0000
    SUCCESSFUL_OK_IGNORED_OR_SUBSTITUTED_ATTRIBUTES = 0x0001
    SUCCESSFUL_OK_CONFLICTING_ATTRIBUTES = 0x0002

    # Informativo
    INFORMATIONAL_OK = 0x0100

    # Redirección
    REDIRECTION_OTHER_SITE = 0x0200

    # Errores del cliente
    CLIENT_ERROR_BAD_REQUEST = 0x0400
    CLIENT_ERROR_FORBIDDEN = 0x0401
    CLIENT_ERROR_NOT_AUTHENTICATED = 0x0402
    CLIENT_ERROR_NOT_AUTHORIZED = 0x0403
    CLIENT_ERROR_NOT_POSSIBLE = 0x0404
    CLIENT_ERROR_TIMEOUT = 0x0405
    CLIENT_ERROR_NOT_FOUND = 0x0406
    CLIENT_ERROR_GONE = 0x0407
    CLIENT_ERROR_REQUEST_ENTITY_TOO_LARGE = 0x0408
    CLIENT_ERROR_REQUEST_VALUE_TOO_LONG = 0x0409
    CLIENT_ERROR_DOCUMENT_FORMAT_NOT_SUPPORTED = 0x040a
    CLIENT_ERROR_ATTRIBUTES_OR_VALUES_NOT_SUPPORTED = 0x040b
    CLIENT_ERROR_URI_SCHEME_NOT_SUPPORTED = 0x040c
    CLIENT_ERROR_CHARSET_NOT_SUPPORTED = 0x040d
    CLIENT_ERROR_CONFLICTING_ATTRIBUTES = 0x040e
    CLIENT_ERROR_COMPRESSION_NOT_SUPPORTED = 0x040f
    CLIENT_ERROR_COMPRESSION_ERROR = 0x0410
    CLIENT_ERROR_DOCUMENT_FORMAT_ERROR = 0x0411
    CLIENT_ERROR_DOCUMENT_ACCESS_ERROR = 0x0412

    # Errores del servidor
    SERVER_ERROR_INTERNAL_ERROR = 0x0500
    SERVER_ERROR_OPERATION_NOT_SUPPORTED = 0x0501
    SERVER_ERROR_SERVICE_UNAVAILABLE = 0x0502
    SERVER_ERROR_VERSION_NOT_SUPPORTED = 0x0503
    SERVER_ERROR_DEVICE_ERROR = 0x0504
    SERVER_ERROR_TEMPORARY_ERROR = 0x0505
    SERVER_ERROR_NOT_ACCEPTING_JOBS = 0x0506
    SERVER_ERROR_BUSY = 0x0507
    SERVER_ERROR_JOB_CANCELED = 0x0508
    SERVER_ERROR_MULTIPLE_DOCUMENT_JOBS_NOT_SUPPORTED = 0x0509

# Clase de éxito: cualquier código dentro de 0x0000-0x00FF
def is_successful(status_code: int) -> bool:
    return status_code <= 0x00ff

# Tipo de valor lógico, independiente de la etiqueta concreta en el cable
class ValueKind(Enum):
    BOOLEAN = "boolean"
    INTEGER = "integer"
    STRING = "string"
    DATETIME = "datetime"
    RESOLUTION = "resolution"
    RANGE = "range"
    TEXT_WITH_LANG = "text-with-lang"
    BINARY = "binary"
    COLLECTION = "collection"
    VOID = "void"

_TAG_KINDS = {
    IPPTag.INTEGER: ValueKind.INTEGER,
    IPPTag.ENUM: ValueKind.INTEGER,
    IPPTag.BOOLEAN: ValueKind.BOOLEAN,
    IPPTag.OCTET_STRING: ValueKind.BINARY,
    IPPTag.DATETIME: ValueKind.DATETIME,
    IPPTag.RESOLUTION: ValueKind.RESOLUTION,
    IPPTag.RANGE_OF_INTEGER: ValueKind.RANGE,
    IPPTag.BEGIN_COLLECTION: ValueKind.COLLECTION,
    IPPTag.TEXT_WITH_LANGUAGE: ValueKind.TEXT_WITH_LANG,
    IPPTag.NAME_WITH_LANGUAGE: ValueKind.TEXT_WITH_LANG,
    IPPTag.TEXT_WITHOUT_LANGUAGE: ValueKind.STRING,
    IPPTag.NAME_WITHOUT_LANGUAGE: ValueKind.STRING,
    IPPTag.RESERVED_STRING: ValueKind.STRING,
    IPPTag.KEYWORD: ValueKind.STRING,
    IPPTag.URI: ValueKind.STRING,
    IPPTag.URI_SCHEME: ValueKind.STRING,
    IPPTag.CHARSET: ValueKind.STRING,
    IPPTag.NATURAL_LANGUAGE: ValueKind.STRING,
    IPPTag.MIME_MEDIA_TYPE: ValueKind.STRING,
    IPPTag.MEMBER_ATTR_NAME: ValueKind.STRING,
}

def tag_kind(tag: int) -> ValueKind:
    return _TAG_KINDS.get(tag, ValueKind.VOID)

# Resolución (cross-feed, feed, unidades: 3 = dpi, 4 = dpcm)
class Resolution(NamedTuple):
    x: int
    y: int
    units: int = 3

# Rango de enteros (inferior, superior)
class Range(NamedTuple):
    lower: int
    upper: int

class TextWithLang(NamedTuple):
    text: str
    language: str

# Valor IPP: etiqueta del cable + valor Python
class IPPValue(NamedTuple):
    tag: IPPTag
    value: Any

    @property
    def kind(self) -> ValueKind:
        return tag_kind(self.tag)

# Representa un atributo IPP con nombre y sus valores en orden
class IPPAttribute:

    def __init__(self, name: str, values: Optional[List[IPPValue]] = None):
        self.name = name
        self.values: List[IPPValue] = values if values is not None else []

    def __repr__(self):
        return f"IPPAttribute(name='{self.name}', values={self.values})"

    def __eq__(self, other):
        if not isinstance(other, IPPAttribute):
            return NotImplemented
        return self.name == other.name and self.values == other.values

AttributeGroup = Dict[str, IPPAttribute]

# Estructura de mensaje IPP con encabezado, grupos de atributos y datos de documento
# En solicitudes `code` es la operación; en respuestas es el código de estado
class IPPMessage:

    def __init__(self, code: int = 0, request_id: int = 0, version: Tuple[int, int] = (2, 0)):
        self.version_major: int = version[0]
        self.version_minor: int = version[1]
        self.code: int = code
        self.request_id: int = request_id
        self.operation_attributes: AttributeGroup = {}
        self.job_attributes: AttributeGroup = {}
        self.printer_attributes: AttributeGroup = {}
        self.unsupported_attributes: AttributeGroup = {}
        self.other_groups: Dict[int, AttributeGroup] = {}
        self.document_data: Optional[bytes] = None

    @property
    def operation_id(self) -> int:
        return self.code

    @property
    def status_code(self) -> int:
        return self.code

    # Grupo de atributos asociado a un delimitador
    def group(self, tag: int) -> AttributeGroup:
        if tag == IPPTag.OPERATION_ATTRIBUTES_TAG:
            return self.operation_attributes
        if tag == IPPTag.JOB_ATTRIBUTES_TAG:
            return self.job_attributes
        if tag == IPPTag.PRINTER_ATTRIBUTES_TAG:
            return self.printer_attributes
        if tag == IPPTag.UNSUPPORTED_ATTRIBUTES_TAG:
            return self.unsupported_attributes
        return self.other_groups.setdefault(tag, {})

    # Grupos en orden de serialización
    def groups(self) -> List[Tuple[int, AttributeGroup]]:
        ordered = [
            (IPPTag.OPERATION_ATTRIBUTES_TAG, self.operation_attributes),
            (IPPTag.JOB_ATTRIBUTES_TAG, self.job_attributes),
            (IPPTag.PRINTER_ATTRIBUTES_TAG, self.printer_attributes),
            (IPPTag.UNSUPPORTED_ATTRIBUTES_TAG, self.unsupported_attributes),
        ]
        ordered.extend(sorted(self.other_groups.items()))
        return ordered

    # Agrega un valor al grupo indicado (multivalor si el nombre ya existe)
    def add_attribute(self, group_tag: int, name: str, tag: IPPTag, value: Any):
        group = self.group(group_tag)
        attribute = group.get(name)
        if attribute is None:
            attribute = IPPAttribute(name)
            group[name] = attribute
        attribute.values.append(IPPValue(tag, value))

    # Agrega un atributo al grupo de operación
    def add_operation_attribute(self, name: str, tag: IPPTag, value: Any):
        self.add_attribute(IPPTag.OPERATION_ATTRIBUTES_TAG, name, tag, value)

    # Agrega un atributo al grupo de trabajo
    def add_job_attribute(self, name: str, tag: IPPTag, value: Any):
        self.add_attribute(IPPTag.JOB_ATTRIBUTES_TAG, name, tag, value)

    # Agrega un atributo al grupo de impresora
    def add_printer_attribute(self, name: str, tag: IPPTag, value: Any):
        self.add_attribute(IPPTag.PRINTER_ATTRIBUTES_TAG, name, tag, value)

    def __repr__(self):
        return (f"IPPMessage(version={self.version_major}.{self.version_minor}, "
                f"code=0x{self.code:04x}, request_id={self.request_id})")

_OUT_OF_BAND = {
    IPPTag.UNSUPPORTED,
    IPPTag.DEFAULT,
    IPPTag.UNKNOWN,
    IPPTag.NO_VALUE,
    IPPTag.NOT_SETTABLE,
    IPPTag.DELETE_ATTRIBUTE,
    IPPTag.ADMIN_DEFINE,
}

# Codificador/decodificador IPP (RFC 8010): mensajes completos hacia y desde bytes
class IPPParser:

    # Serializa un IPPMessage: encabezado de 8 bytes, grupos no vacíos y fin de atributos
    @staticmethod
    def encode(message: IPPMessage) -> bytes:
        stream = io.BytesIO()
        stream.write(
            struct.pack(
                ">BBHI",
                message.version_major,
                message.version_minor,
                message.code,
                message.request_id,
            )
        )

        for group_tag, group in message.groups():
            # El grupo de operación siempre se escribe
            if not group and group_tag != IPPTag.OPERATION_ATTRIBUTES_TAG:
                continue
            stream.write(bytes([group_tag]))
            for attribute in group.values():
                IPPParser._write_attribute(stream, attribute)

        stream.write(bytes([IPPTag.END_OF_ATTRIBUTES_TAG]))
        return stream.getvalue()

    # Parsea una respuesta (o solicitud) IPP desde bytes y devuelve un IPPMessage
    # Lo que sigue al fin de atributos queda en document_data
    @staticmethod
    def decode(data: bytes) -> IPPMessage:
        # Verificar tamaño mínimo del encabezado (8 bytes)
        if len(data) < 8:
            raise IPPDecodeError("Mensaje IPP demasiado corto")

        stream = io.BytesIO(data)
        major, minor, code, request_id = struct.unpack(">BBHI", stream.read(8))
        message = IPPMessage(code, request_id, (major, minor))

        logger.debug(
            f"Parseando IPP: version={major}.{minor}, code=0x{code:04x}, request_id={request_id}"
        )

        group: Optional[AttributeGroup] = None
        attribute: Optional[IPPAttribute] = None

        while True:
            tag_bytes = stream.read(1)
            if not tag_bytes:
                raise IPPDecodeError("Falta la etiqueta de fin de atributos")
            tag = tag_bytes[0]

            if tag == IPPTag.END_OF_ATTRIBUTES_TAG:
                message.document_data = stream.read()
                break

            # Delimitadores de grupo
            if tag < 0x10:
                group = message.group(tag)
                attribute = None
                continue

            if group is None:
                raise IPPDecodeError(f"Atributo con etiqueta 0x{tag:02x} fuera de un grupo")

            name, value_bytes = IPPParser._read_header(stream)
            if tag == IPPTag.BEGIN_COLLECTION:
                value = IPPValue(IPPTag.BEGIN_COLLECTION, IPPParser._read_collection(stream))
            else:
                value = IPPParser._decode_value(IPPTag(tag), value_bytes)

            if name:
                attribute = group.get(name)
                if attribute is None:
                    attribute = IPPAttribute(name)
                    group[name] = attribute
            elif attribute is None:
                raise IPPDecodeError("Valor adicional sin nombre de atributo previo")
            attribute.values.append(value)

        return message

    # Serializa un atributo: primer valor con nombre y el resto con nombre vacío
    @staticmethod
    def _write_attribute(stream: io.BytesIO, attribute: IPPAttribute):
        for index, item in enumerate(attribute.values):
            IPPParser._write_value(stream, attribute.name if index == 0 else '', item)

    @staticmethod
    def _write_value(stream: io.BytesIO, name: str, item: IPPValue):
        if item.tag == IPPTag.BEGIN_COLLECTION:
            IPPParser._write_header(stream, IPPTag.BEGIN_COLLECTION, name, b'')
            for member in item.value:
                IPPParser._write_header(stream, IPPTag.MEMBER_ATTR_NAME, '', member.name.encode('utf-8'))
                for member_value in member.values:
                    IPPParser._write_value(stream, '', member_value)
            IPPParser._write_header(stream, IPPTag.END_COLLECTION, '', b'')
            return
        IPPParser._write_header(stream, item.tag, name, IPPParser._encode_value(item.tag, item.value))

    @staticmethod
    def _write_header(stream: io.BytesIO, tag: int, name: str, value_bytes: bytes):
        name_bytes = name.encode('utf-8')
        if len(name_bytes) > 0xffff or len(value_bytes) > 0xffff:
            raise ValueError(f"Atributo '{name}' demasiado largo para IPP")

        # Escribir etiqueta
        stream.write(bytes([tag]))

        # Escribir nombre
        stream.write(len(name_bytes).to_bytes(2, 'big'))
        stream.write(name_bytes)

        # Escribir valor
        stream.write(len(value_bytes).to_bytes(2, 'big'))
        stream.write(value_bytes)

    # Codifica valor según etiqueta (enteros, booleanos, textos, binarios, etc.)
    @staticmethod
    def _encode_value(tag: IPPTag, value: Any) -> bytes:
        kind = tag_kind(tag)
        if kind is ValueKind.INTEGER:
            return struct.pack(">i", value)
        if kind is ValueKind.BOOLEAN:
            return bytes([1 if value else 0])
        if kind is ValueKind.STRING:
            return value.encode('utf-8')
        if kind is ValueKind.BINARY:
            return bytes(value)
        if kind is ValueKind.DATETIME:
            return IPPParser._encode_datetime(value)
        if kind is ValueKind.RESOLUTION:
            return struct.pack(">iiB", value.x, value.y, value.units)
        if kind is ValueKind.RANGE:
            return struct.pack(">ii", value.lower, value.upper)
        if kind is ValueKind.TEXT_WITH_LANG:
            language = value.language.encode('utf-8')
            text = value.text.encode('utf-8')
            return (len(language).to_bytes(2, 'big') + language +
                    len(text).to_bytes(2, 'big') + text)
        if tag in _OUT_OF_BAND or value is None:
            return b''
        return bytes(value)

    # Parsea valor según etiqueta; valores mal formados se marcan como desconocidos
    @staticmethod
    def _decode_value(tag: IPPTag, value_bytes: bytes) -> IPPValue:
        kind = tag_kind(tag)
        try:
            if kind is ValueKind.INTEGER:
                return IPPValue(tag, struct.unpack(">i", value_bytes)[0])
            if kind is ValueKind.BOOLEAN:
                return IPPValue(tag, struct.unpack(">B", value_bytes)[0] != 0)
            if kind is ValueKind.STRING:
                return IPPValue(tag, value_bytes.decode('utf-8', errors='replace'))
            if kind is ValueKind.BINARY:
                return IPPValue(tag, bytes(value_bytes))
            if kind is ValueKind.DATETIME:
                return IPPValue(tag, IPPParser._decode_datetime(value_bytes))
            if kind is ValueKind.RESOLUTION:
                return IPPValue(tag, Resolution(*struct.unpack(">iiB", value_bytes)))
            if kind is ValueKind.RANGE:
                return IPPValue(tag, Range(*struct.unpack(">ii", value_bytes)))
            if kind is ValueKind.TEXT_WITH_LANG:
                return IPPValue(tag, IPPParser._decode_text_with_lang(value_bytes))
        except (struct.error, ValueError) as e:
            logger.warning(f"Error al parsear valor para tag {tag.name}: {e}")
            return IPPValue(IPPTag.UNKNOWN, None)

        if tag in _OUT_OF_BAND:
            return IPPValue(tag, None)
        return IPPValue(tag, bytes(value_bytes))

    # Lee miembros de una colección hasta endCollection
    @staticmethod
    def _read_collection(stream: io.BytesIO) -> List[IPPAttribute]:
        members: List[IPPAttribute] = []
        member: Optional[IPPAttribute] = None

        while True:
            tag_bytes = stream.read(1)
            if not tag_bytes:
                raise IPPDecodeError("Colección sin etiqueta de cierre")
            tag = tag_bytes[0]
            if tag < 0x10:
                raise IPPDecodeError(f"Delimitador 0x{tag:02x} dentro de una colección")

            _, value_bytes = IPPParser._read_header(stream)

            if tag == IPPTag.END_COLLECTION:
                return members
            if tag == IPPTag.MEMBER_ATTR_NAME:
                member = IPPAttribute(value_bytes.decode('utf-8', errors='replace'))
                members.append(member)
                continue
            if member is None:
                raise IPPDecodeError("Valor de colección sin nombre de miembro")

            if tag == IPPTag.BEGIN_COLLECTION:
                member.values.append(IPPValue(IPPTag.BEGIN_COLLECTION, IPPParser._read_collection(stream)))
            else:
                member.values.append(IPPParser._decode_value(IPPTag(tag), value_bytes))

    # Lee nombre y valor (longitudes de 2 bytes) de un atributo
    @staticmethod
    def _read_header(stream: io.BytesIO) -> Tuple[str, bytes]:
        name_length = struct.unpack(">H", IPPParser._read_exact(stream, 2))[0]
        name = IPPParser._read_exact(stream, name_length).decode('utf-8', errors='replace')
        value_length = struct.unpack(">H", IPPParser._read_exact(stream, 2))[0]
        return name, IPPParser._read_exact(stream, value_length)

    @staticmethod
    def _read_exact(stream: io.BytesIO, size: int) -> bytes:
        data = stream.read(size)
        if len(data) < size:
            raise IPPDecodeError(f"Datos insuficientes: se esperaban {size} bytes, hay {len(data)}")
        return data

    # RFC 2579 DateAndTime (11 bytes, con desfase UTC)
    @staticmethod
    def _encode_datetime(value: datetime) -> bytes:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        minutes = int(value.utcoffset().total_seconds() // 60)
        direction = b'+' if minutes >= 0 else b'-'
        minutes = abs(minutes)
        return struct.pack(
            ">HBBBBBBcBB",
            value.year,
            value.month,
            value.day,
            value.hour,
            value.minute,
            value.second,
            value.microsecond // 100000,
            direction,
            minutes // 60,
            minutes % 60,
        )

    @staticmethod
    def _decode_datetime(value_bytes: bytes) -> datetime:
        (year, month, day, hour, minute, second, deci,
         direction, offset_hours, offset_minutes) = struct.unpack(">HBBBBBBcBB", value_bytes)
        offset = timedelta(hours=offset_hours, minutes=offset_minutes)
        if direction == b'-':
            offset = -offset
        return datetime(year, month, day, hour, minute, second, deci * 100000, tzinfo=timezone(offset))

    @staticmethod
    def _decode_text_with_lang(value_bytes: bytes) -> TextWithLang:
        language_length = struct.unpack(">H", value_bytes[:2])[0]
        language_end = 2 + language_length
        language = value_bytes[2:language_end].decode('utf-8', errors='replace')
        text_length = struct.unpack(">H", value_bytes[language_end:language_end + 2])[0]
        text_start = language_end + 2
        if text_start + text_length != len(value_bytes):
            raise ValueError("Longitudes de texto con idioma inconsistentes")
        return TextWithLang(value_bytes[text_start:text_start + text_length].decode('utf-8', errors='replace'), language)
