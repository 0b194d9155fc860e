from dataclasses import dataclass
from typing import BinaryIO, Collection, Optional, Tuple, Union
import threading
import logging
import struct
import time
import io

import requests
from requests.auth import HTTPBasicAuth
import urllib3
from PIL import Image

from .config.settings import settings
from .errors import ConfigurationError, NetPrintError, ProtocolError, TransportError, ValidationError
from .ipp.attributes import Attributes
from .ipp.codec import IPPDecodeError, IPPMessage, IPPOperation, IPPParser, IPPStatusCode, IPPTag, is_successful
from .ipp.job_attributes import JobAttributes
from .ipp.printer_attributes import PrinterAttributes

logger = logging.getLogger(__name__)

Document = Union[bytes, bytearray, memoryview, BinaryIO]

_CHUNK_SIZE = 64 * 1024

# Datos de una impresora anunciada en la red; inmutable una vez descubierta
@dataclass(frozen=True)
class PrinterRecord:
    id: str
    name: str
    host: str
    port: int = settings.DEFAULT_IPP_PORT
    remote_path: str = ""
    auth_info_required: str = "none"
    mime_types: Tuple[str, ...] = ()
    color: bool = False
    duplex: bool = False

    def mime_type_supported(self, mime_type: str) -> bool:
        return mime_type in self.mime_types

class Printer:
    """IPP client for one discovered printer.

    A single lock serializes request building, sending and the capability cache,
    so one client never has two requests in flight. Different printers are
    independent. Each operation has an overall deadline of `timeout` seconds
    and an optional `cancel` event, both checked while the body is uploaded and
    while the reply is read.
    """

    def __init__(self, record: PrinterRecord, session: Optional[requests.Session] = None,
                 user: Optional[str] = None, password: Optional[str] = None, use_tls: bool = False):
        self.record = record
        self.session = session if session is not None else requests.Session()
        self.user = user
        self.password = password
        self.use_tls = use_tls
        self._lock = threading.Lock()
        self._request_id = 0
        self._capabilities: Optional[PrinterAttributes] = None

    def __repr__(self):
        return f"Printer(id='{self.id}', name='{self.name}', uri='{self.uri()}')"

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def host(self) -> str:
        return self.record.host

    @property
    def port(self) -> int:
        return self.record.port

    @property
    def remote_path(self) -> str:
        return self.record.remote_path

    @property
    def auth_info_required(self) -> str:
        return self.record.auth_info_required

    @property
    def mime_types(self) -> Tuple[str, ...]:
        return self.record.mime_types

    @property
    def color(self) -> bool:
        return self.record.color

    @property
    def duplex(self) -> bool:
        return self.record.duplex

    def mime_type_supported(self, mime_type: str) -> bool:
        return self.record.mime_type_supported(mime_type)

    # URI enviada en printer-uri
    def printer_uri(self) -> str:
        scheme = "ipps" if self.use_tls else "ipp"
        return f"{scheme}://{self.host}:{self.port}/{self.remote_path.lstrip('/')}"

    # URI HTTP a la que se hace el POST
    def uri(self) -> str:
        scheme = "https" if self.use_tls else "http"
        return f"{scheme}://{self.host}:{self.port}/{self.remote_path.lstrip('/')}"

    def cached_capabilities(self) -> Optional[PrinterAttributes]:
        with self._lock:
            return self._capabilities

    def fetch_capabilities(self, timeout: float, allow_cached: bool = True,
                           cancel: Optional[threading.Event] = None) -> PrinterAttributes:
        with self._lock:
            if allow_cached and self._capabilities is not None:
                return self._capabilities
            deadline = _deadline(timeout, "Get-Printer-Attributes")

            request = self._new_request(IPPOperation.GET_PRINTER_ATTRIBUTES)
            request.add_operation_attribute("requested-attributes", IPPTag.KEYWORD, "all")
            reply = self._send("Get-Printer-Attributes", request, deadline, cancel)

            capabilities = PrinterAttributes.from_ipp(reply.printer_attributes)
            self._capabilities = capabilities

        logger.info(f"Capacidades de {self.name}: {len(capabilities)} atributos")
        self._log_capabilities(capabilities)
        return capabilities

    # Devuelve los atributos que la impresora no soporta (vacío si acepta todo)
    def validate_job(self, job_name: str, mime_type: str, job_attributes: Optional[JobAttributes],
                     timeout: float, cancel: Optional[threading.Event] = None) -> Attributes:
        job_attributes = job_attributes if job_attributes is not None else JobAttributes()
        job_attributes.validate()
        deadline = _deadline(timeout, "Validate-Job")

        with self._lock:
            request = self._job_request(IPPOperation.VALIDATE_JOB, job_name, mime_type, job_attributes)
            reply = self._send(
                "Validate-Job", request, deadline, cancel,
                accepted=(IPPStatusCode.CLIENT_ERROR_ATTRIBUTES_OR_VALUES_NOT_SUPPORTED,),
            )

        unsupported = Attributes.from_ipp(reply.unsupported_attributes)
        if unsupported:
            logger.warning(f"{self.name} no soporta: {', '.join(sorted(unsupported))}")
        return unsupported

    # Envía el documento y devuelve el job-id asignado (0 si no viene)
    def submit_job(self, job_name: str, mime_type: str, document: Document, document_length: int,
                   job_attributes: Optional[JobAttributes], timeout: float,
                   cancel: Optional[threading.Event] = None) -> int:
        job_attributes = job_attributes if job_attributes is not None else JobAttributes()
        job_attributes.validate()
        if isinstance(document, (bytes, bytearray, memoryview)):
            document = bytes(document)
            if len(document) != document_length:
                raise ValidationError(
                    f"Document is {len(document)} bytes but document_length is {document_length}",
                    {"job_name": job_name},
                )
            document = io.BytesIO(document)
        deadline = _deadline(timeout, "Print-Job")

        with self._lock:
            request = self._job_request(IPPOperation.PRINT_JOB, job_name, mime_type, job_attributes)
            reply = self._send("Print-Job", request, deadline, cancel, document, document_length)

        job_id = Attributes.from_ipp(reply.job_attributes).integer("job-id", 0)
        logger.info(f"Trabajo '{job_name}' enviado a {self.name} (job-id {job_id}, {document_length} bytes)")
        return job_id

    # Descarga el último icono anunciado; None si no hay o falla
    def fetch_icon(self, timeout: Optional[float] = None) -> Optional[Image.Image]:
        timeout = timeout if timeout is not None else settings.ICON_TIMEOUT
        try:
            icons = self.fetch_capabilities(timeout).icons()
        except NetPrintError as e:
            logger.warning(f"No se pudo obtener icono de {self.name}: {e}")
            return None
        if not icons:
            logger.debug(f"{self.name} no anuncia iconos")
            return None

        url = icons[-1]
        try:
            response = self.session.get(
                url,
                headers={"Accept-Encoding": "identity"},
                auth=self._auth(),
                timeout=timeout,
            )
            response.raise_for_status()
            image = Image.open(io.BytesIO(response.content))
            image.load()
            return image
        except (requests.RequestException, OSError) as e:
            logger.warning(f"Error descargando icono {url}: {e}")
            return None

    def _auth(self) -> Optional[HTTPBasicAuth]:
        if self.user and self.password:
            return HTTPBasicAuth(self.user, self.password)
        return None

    # Encabezado y atributos de operación comunes; requiere el lock
    def _new_request(self, operation: IPPOperation) -> IPPMessage:
        self._request_id += 1
        request = IPPMessage(operation, self._request_id, settings.get_ipp_version())
        request.add_operation_attribute("attributes-charset", IPPTag.CHARSET, settings.IPP_CHARSET)
        request.add_operation_attribute("attributes-natural-language", IPPTag.NATURAL_LANGUAGE,
                                        settings.IPP_NATURAL_LANGUAGE)
        request.add_operation_attribute("printer-uri", IPPTag.URI, self.printer_uri())
        request.add_operation_attribute("requesting-user-name", IPPTag.NAME_WITHOUT_LANGUAGE,
                                        settings.get_user_name())
        return request

    def _job_request(self, operation: IPPOperation, job_name: str, mime_type: str,
                     job_attributes: Attributes) -> IPPMessage:
        request = self._new_request(operation)
        if job_name:
            request.add_operation_attribute("job-name", IPPTag.NAME_WITHOUT_LANGUAGE, job_name)
        if mime_type:
            request.add_operation_attribute("document-format", IPPTag.MIME_MEDIA_TYPE, mime_type)
        request.job_attributes = job_attributes.to_ipp()
        return request

    def _send(self, operation: str, request: IPPMessage, deadline: float,
              cancel: Optional[threading.Event] = None, document: Optional[BinaryIO] = None,
              document_length: int = 0, accepted: Collection[int] = ()) -> IPPMessage:
        uri = self.uri()
        try:
            encoded = IPPParser.encode(request)
        except (struct.error, ValueError, OverflowError) as e:
            raise ValidationError(f"{operation} request cannot be encoded: {e}", {"operation": operation}) from e

        headers = {
            "Content-Type": settings.IPP_CONTENT_TYPE,
            "Content-Length": str(len(encoded) + document_length),
            "Accept-Encoding": "identity",
        }
        progress = _Progress(deadline, cancel, operation, uri)
        if document is None:
            body = encoded
        else:
            body = _ChainedBody(encoded, document, document_length, progress)

        logger.debug(f"{operation} -> {uri} (request_id={request.request_id}, {headers['Content-Length']} bytes)")

        progress.check()
        try:
            response = self.session.post(uri, data=body, headers=headers, auth=self._auth(),
                                         timeout=progress.remaining(), stream=True)
        except requests.RequestException as e:
            raise TransportError(f"{operation} to {uri} failed: {e}", uri, operation) from e

        try:
            if response.status_code != 200:
                raise TransportError(f"{operation} to {uri} returned HTTP {response.status_code}", uri, operation)
            content = _read_body(response, progress)
        finally:
            response.close()

        try:
            reply = IPPParser.decode(content)
        except IPPDecodeError as e:
            raise TransportError(f"Invalid IPP response from {uri}: {e}", uri, operation) from e

        logger.debug(f"{operation} <- {uri}: status=0x{reply.status_code:04x}")

        if not is_successful(reply.status_code) and reply.status_code not in accepted:
            messages = Attributes.from_ipp(reply.operation_attributes).strings("status-message", [])
            raise ProtocolError(reply.status_code, messages, operation)
        return reply

    # Vuelca cada *-supported junto a su *-default
    def _log_capabilities(self, capabilities: PrinterAttributes):
        if not logger.isEnabledFor(logging.DEBUG):
            return
        for name in sorted(capabilities):
            if not name.endswith("-supported"):
                continue
            default_name = name[:-len("-supported")] + "-default"
            supported = [item.value for item in capabilities[name]]
            default = [item.value for item in capabilities.get(default_name, ())]
            logger.debug(f"  {name}: {supported} (default: {default})")

# Plazo absoluto de la operación; sin plazo válido no hay petición
def _deadline(timeout: float, operation: str) -> float:
    if timeout is None or timeout <= 0:
        raise ConfigurationError(f"{operation} requires a positive timeout", {"timeout": timeout})
    return time.monotonic() + timeout

class _Progress:
    """Deadline and cancellation checks shared by the upload and the reply read."""

    def __init__(self, deadline: float, cancel: Optional[threading.Event], operation: str, uri: str):
        self.deadline = deadline
        self.cancel = cancel
        self.operation = operation
        self.uri = uri

    def remaining(self) -> float:
        return self.deadline - time.monotonic()

    def check(self):
        if self.cancel is not None and self.cancel.is_set():
            raise TransportError(f"{self.operation} to {self.uri} cancelled", self.uri, self.operation)
        if self.remaining() <= 0:
            raise TransportError(f"{self.operation} to {self.uri} timed out", self.uri, self.operation)

# Lee la respuesta por partes (read1 no espera a llenar el bloque) revisando plazo y cancelación
def _read_body(response: requests.Response, progress: _Progress) -> bytes:
    chunks = []
    while True:
        progress.check()
        try:
            chunk = response.raw.read1(_CHUNK_SIZE, decode_content=True)
        except (urllib3.exceptions.HTTPError, OSError) as e:
            raise TransportError(f"{progress.operation} reply from {progress.uri} failed: {e}",
                                 progress.uri, progress.operation) from e
        if not chunk:
            return b"".join(chunks)
        chunks.append(chunk)

# Cuerpo de la petición: mensaje IPP codificado seguido del documento
class _ChainedBody:

    def __init__(self, head: bytes, document: BinaryIO, document_length: int, progress: _Progress):
        self._head = io.BytesIO(head)
        self._document = document
        self._remaining = document_length
        self._length = len(head) + document_length
        self._progress = progress

    def __len__(self):
        return self._length

    def read(self, size: int = -1) -> bytes:
        self._progress.check()
        data = self._head.read(size)
        if size is None or size < 0:
            wanted = self._remaining
        else:
            wanted = min(size - len(data), self._remaining)
        if wanted > 0:
            chunk = self._document.read(wanted)
            self._remaining -= len(chunk)
            data += chunk
        return data

    def __iter__(self):
        while True:
            chunk = self.read(_CHUNK_SIZE)
            if not chunk:
                return
            yield chunk
