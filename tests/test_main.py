from unittest.mock import Mock, patch
import logging

import pytest

from netprint import main as cli
from netprint.errors import TransportError
from netprint.ipp.attributes import Attributes
from netprint.ipp.codec import Range
from netprint.ipp.printer_attributes import PrinterAttributes
from netprint.printer import Printer, PrinterRecord

def _printer() -> Printer:
    printer = Printer(PrinterRecord(id='abc123', name='LaserOffice', host='laser.local', port=631,
                                    remote_path='ipp/print', mime_types=('application/pdf',)), session=Mock())
    capabilities = PrinterAttributes()
    capabilities.set_range('copies-supported', Range(1, 9), True)
    capabilities.set_keyword('sides-supported', 'two-sided-long-edge', True)
    printer.fetch_capabilities = Mock(return_value=capabilities)
    printer.validate_job = Mock(return_value=Attributes())
    printer.submit_job = Mock(return_value=5)
    return printer

@pytest.fixture
def manager():
    with patch.object(cli, 'PrintManager') as manager_class:
        yield manager_class.return_value
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)

class TestMain:
    # Escaneo sin impresoras
    def test_no_printers(self, manager):
        manager.scan.return_value = []
        assert cli.main(['--duration', '0.1']) == 0
        manager.scan.assert_called_once_with(0.1)
    # Informe de impresoras y capacidades a archivo
    def test_report(self, manager, tmp_path):
        printer = _printer()
        manager.scan.return_value = [printer]
        output = tmp_path / 'printers.txt'
        assert cli.main(['--duration', '1', '--output', str(output)]) == 0
        report = output.read_text()
        assert 'LaserOffice [abc123]' in report
        assert 'Max copies: 9' in report
        assert 'Two-Sided, Long Edge' in report
    # Error de una impresora no detiene el informe
    def test_report_with_unreachable_printer(self, manager, tmp_path):
        printer = _printer()
        printer.fetch_capabilities.side_effect = TransportError('down', printer.uri(), 'Get-Printer-Attributes')
        manager.scan.return_value = [printer]
        output = tmp_path / 'printers.txt'
        assert cli.main(['--output', str(output)]) == 0
        assert 'ipp://laser.local:631/ipp/print' in output.read_text()
    # --print requiere --printer
    def test_print_requires_printer(self, manager, tmp_path):
        assert cli.main(['--print', str(tmp_path / 'doc.pdf')]) == 2
        manager.scan.assert_not_called()
    # Validar y enviar un documento
    def test_print_document(self, manager, tmp_path):
        document = tmp_path / 'doc.pdf'
        document.write_bytes(b'%PDF-1.4 hello')
        printer = _printer()
        manager.scan.return_value = [printer]
        manager.lookup_printer.return_value = printer

        assert cli.main(['--printer', 'abc123', '--print', str(document), '--copies', '2', '--pages', '1-3, 5']) == 0

        job_name, mime_type, job, timeout = printer.validate_job.call_args.args
        assert (job_name, mime_type) == ('doc.pdf', 'application/pdf')
        assert job.copies() == 2
        assert job.page_ranges() == [Range(1, 3), Range(5, 5)]
        submit_args = printer.submit_job.call_args.args
        assert submit_args[3] == len(b'%PDF-1.4 hello')
    # Rangos de páginas mal escritos
    def test_print_invalid_pages(self, manager, tmp_path):
        document = tmp_path / 'doc.pdf'
        document.write_bytes(b'%PDF')
        printer = _printer()
        manager.scan.return_value = [printer]
        manager.lookup_printer.return_value = printer
        assert cli.main(['--printer', 'abc123', '--print', str(document), '--pages', '1-x']) == 1
        printer.submit_job.assert_not_called()
    # Impresora desconocida
    def test_print_unknown_printer(self, manager, tmp_path):
        document = tmp_path / 'doc.pdf'
        document.write_bytes(b'%PDF')
        manager.scan.return_value = []
        manager.lookup_printer.return_value = None
        assert cli.main(['--printer', 'zzz', '--print', str(document)]) == 1
