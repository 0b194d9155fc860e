from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple
import threading
import logging
import queue
import time

import requests

from ..config.settings import settings
from ..printer import Printer, PrinterRecord
from ..utils import ReadWriteLock, natural_sort_key
from .browser import ServiceRecord, ZeroconfBrowser

logger = logging.getLogger(__name__)

FoundCallback = Callable[[Printer], None]

# Intervalo máximo de espera en la cola antes de revisar el plazo
_POLL_INTERVAL = 0.25
_JOIN_TIMEOUT = 5.0

def parse_service_record(record: ServiceRecord, session: Optional[requests.Session] = None,
                         user: Optional[str] = None, password: Optional[str] = None,
                         use_tls: bool = False) -> Printer:
    txt = record.txt
    host = record.hostname.rstrip('.')
    port = record.port or settings.DEFAULT_IPP_PORT
    remote_path = txt.get('rp', '')

    printer_id = txt.get('UUID') or txt.get('DUUID') or f"{host}:{port}/{remote_path}"
    pdl = txt.get('pdl', '')
    mime_types = tuple(part.strip() for part in pdl.split(',') if part.strip())

    printer_record = PrinterRecord(
        id=printer_id,
        name=txt.get('ty') or record.name,
        host=host,
        port=port,
        remote_path=remote_path,
        auth_info_required=txt.get('air') or 'none',
        mime_types=mime_types,
        color=txt.get('Color') == 'T',
        duplex=txt.get('Duplex') == 'T',
    )
    return Printer(printer_record, session=session, user=user, password=password, use_tls=use_tls)

class PrintManager:
    """Discovers IPP printers and keeps the last scan result.

    The snapshot is replaced as a whole at the end of each scan, under the write
    lock, so readers always see a complete list from one round.
    """

    def __init__(self, browser=None, session: Optional[requests.Session] = None,
                 user: Optional[str] = None, password: Optional[str] = None, use_tls: bool = False,
                 service_type: str = settings.SERVICE_TYPE, domain: str = settings.SERVICE_DOMAIN,
                 queue_size: int = settings.DISCOVERY_QUEUE_SIZE):
        self.browser = browser if browser is not None else ZeroconfBrowser()
        self.session = session
        self.user = user
        self.password = password
        self.use_tls = use_tls
        self.service_type = service_type
        self.domain = domain
        self.queue_size = max(1, queue_size)
        self._lock = ReadWriteLock()
        self._printers: List[Printer] = []
        self._updated: Optional[datetime] = None

    # `cancel` permite al llamador cortar el escaneo; un escaneo cancelado no reemplaza el snapshot
    # Ninguna resolución mDNS pasa del plazo; al cancelar antes puede quedar una en curso (RESOLVE_TIMEOUT_MS)
    def scan(self, duration: Optional[float] = None, on_found: Optional[FoundCallback] = None,
             cancel: Optional[threading.Event] = None) -> List[Printer]:
        duration = settings.SCAN_DURATION if duration is None else duration
        if duration <= 0:
            return self.printers()

        previous = {printer.id: printer for printer in self.printers()}
        found: Dict[str, Printer] = {}
        stop = threading.Event()
        records: "queue.Queue[ServiceRecord]" = queue.Queue(maxsize=self.queue_size)
        deadline = time.monotonic() + duration
        worker = threading.Thread(target=self._browse, args=(stop, records, deadline), name="netprint-browse",
                                  daemon=True)

        logger.info(f"Iniciando escaneo de impresoras ({duration}s)")
        worker.start()
        try:
            while not _is_set(cancel):
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                try:
                    record = records.get(timeout=min(remaining, _POLL_INTERVAL))
                except queue.Empty:
                    if not worker.is_alive():
                        break
                    continue
                self._collect(record, found, previous, on_found)
        finally:
            stop.set()
            worker.join(timeout=_JOIN_TIMEOUT)
            if worker.is_alive():
                logger.warning("El hilo de búsqueda no terminó a tiempo")

        # Lo que quedó en la cola después de detener la búsqueda
        while True:
            try:
                record = records.get_nowait()
            except queue.Empty:
                break
            if not _is_set(cancel):
                self._collect(record, found, previous, on_found)

        printers = sorted(found.values(), key=lambda p: (natural_sort_key(p.name), p.id))
        if _is_set(cancel):
            logger.info(f"Escaneo cancelado: {len(printers)} impresoras")
            return printers

        with self._lock.write_locked():
            self._printers = printers
            self._updated = datetime.now()

        logger.info(f"Escaneo terminado: {len(printers)} impresoras")
        return list(printers)

    def snapshot(self) -> Tuple[List[Printer], Optional[datetime]]:
        with self._lock.read_locked():
            return list(self._printers), self._updated

    def printers(self) -> List[Printer]:
        with self._lock.read_locked():
            return list(self._printers)

    def lookup_printer(self, printer_id: str) -> Optional[Printer]:
        with self._lock.read_locked():
            for printer in self._printers:
                if printer.id == printer_id:
                    return printer
        return None

    def _browse(self, stop: threading.Event, out: "queue.Queue[ServiceRecord]", deadline: float):
        try:
            self.browser.browse(stop, out, self.service_type, self.domain, deadline=deadline)
        except Exception as e:
            logger.error(f"Error en búsqueda mDNS: {e}")

    def _collect(self, record: ServiceRecord, found: Dict[str, Printer], previous: Dict[str, Printer],
                 on_found: Optional[FoundCallback]):
        printer = parse_service_record(record, self.session, self.user, self.password, self.use_tls)

        # Mantener el cliente anterior (y su caché) si nada cambió
        old = previous.get(printer.id)
        if old is not None and old.record == printer.record and old.use_tls == self.use_tls:
            printer = old

        is_new = printer.id not in found
        found[printer.id] = printer
        if is_new:
            logger.info(f"Impresora encontrada: {printer.name} ({printer.uri()})")
            if on_found is not None:
                on_found(printer)

def _is_set(event: Optional[threading.Event]) -> bool:
    return event is not None and event.is_set()
