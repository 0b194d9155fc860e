from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import threading
import logging
import queue
import time

from zeroconf import ServiceBrowser, ServiceListener, Zeroconf

from ..config.settings import settings

logger = logging.getLogger(__name__)

# Servicio DNS-SD resuelto (SRV + TXT + direcciones)
@dataclass
class ServiceRecord:
    name: str
    hostname: str
    port: int
    txt: Dict[str, str] = field(default_factory=dict)
    addresses: List[str] = field(default_factory=list)

def _normalize_txt(properties: Optional[Dict[Any, Any]]) -> Dict[str, str]:
    txt = {}
    for key, value in (properties or {}).items():
        if isinstance(key, bytes):
            key = key.decode('utf-8', errors='replace')
        if value is None:
            value = ''
        elif isinstance(value, bytes):
            value = value.decode('utf-8', errors='replace')
        txt[str(key)] = str(value)
    return txt

def _instance_name(name: str, full_type: str) -> str:
    suffix = '.' + full_type
    if name.endswith(suffix):
        return name[:-len(suffix)]
    return name

class _RecordListener(ServiceListener):

    def __init__(self, stop: threading.Event, out: "queue.Queue[ServiceRecord]", full_type: str,
                 deadline: Optional[float] = None):
        self.stop = stop
        self.out = out
        self.full_type = full_type
        self.deadline = deadline

    def add_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        self._resolve(zc, type_, name)

    def update_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        self._resolve(zc, type_, name)

    def remove_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        logger.debug(f"Servicio retirado: {name}")

    # Milisegundos para resolver, sin pasar del fin del escaneo
    def _resolve_timeout(self) -> int:
        timeout = settings.RESOLVE_TIMEOUT_MS
        if self.deadline is not None:
            timeout = min(timeout, int((self.deadline - time.monotonic()) * 1000))
        return timeout

    def _resolve(self, zc: Zeroconf, type_: str, name: str):
        if self.stop.is_set():
            return
        timeout = self._resolve_timeout()
        if timeout <= 0:
            logger.debug(f"Sin tiempo para resolver {name}")
            return
        info = zc.get_service_info(type_, name, timeout=timeout)
        if info is None or not info.server:
            logger.debug(f"No se pudo resolver {name}")
            return

        record = ServiceRecord(
            name=_instance_name(name, self.full_type),
            hostname=info.server,
            port=info.port or settings.DEFAULT_IPP_PORT,
            txt=_normalize_txt(info.properties),
            addresses=info.parsed_addresses(),
        )
        logger.debug(f"Servicio resuelto: {record.name} en {record.hostname}:{record.port}")

        # Nunca bloquear indefinidamente: reintentar mientras no se pida detener
        while not self.stop.is_set():
            try:
                self.out.put(record, timeout=0.1)
                return
            except queue.Full:
                continue

class ZeroconfBrowser:
    """DNS-SD browser on top of python-zeroconf.

    `browse` blocks the calling thread until `stop` is set, pushing every resolved
    service into `out`. It is meant to run on a background thread owned by the
    caller. When `deadline` (a `time.monotonic()` value) is given, no service
    resolution waits past it.
    """

    def browse(self, stop: threading.Event, out: "queue.Queue[ServiceRecord]",
               service_type: str = settings.SERVICE_TYPE, domain: str = settings.SERVICE_DOMAIN,
               deadline: Optional[float] = None):
        full_type = f"{service_type}.{domain}"
        if not full_type.endswith('.'):
            full_type += '.'

        zc = Zeroconf()
        browser = None
        try:
            browser = ServiceBrowser(zc, full_type, _RecordListener(stop, out, full_type, deadline))
            logger.info(f"Buscando servicios {full_type}")
            stop.wait()
        finally:
            if browser is not None:
                browser.cancel()
            zc.close()
            logger.debug(f"Búsqueda de {full_type} terminada")
