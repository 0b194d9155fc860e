from unittest.mock import patch
import logging
import threading
import time

from netprint.config.settings import NetPrintSettings, settings
from netprint.utils import ReadWriteLock, natural_sort_key, setup_logging, validate_configuration

class TestSettings:
    # Valores por defecto válidos
    def test_defaults_are_valid(self):
        assert NetPrintSettings.validate_config() == []
        assert validate_configuration() is True
        assert settings.get_ipp_version() == (2, 0)
        assert settings.IPP_CONTENT_TYPE == 'application/ipp'
    # Errores de configuración detectados
    def test_invalid_values(self):
        with patch.object(NetPrintSettings, 'REQUEST_TIMEOUT', 0), \
             patch.object(NetPrintSettings, 'DISCOVERY_QUEUE_SIZE', 0), \
             patch.object(NetPrintSettings, 'SERVICE_TYPE', 'ipp'):
            errors = NetPrintSettings.validate_config()
            assert len(errors) == 3
            assert validate_configuration() is False
    # Usuario configurado o usuario del sistema
    def test_user_name(self):
        with patch.object(NetPrintSettings, 'USER_NAME', 'printing'):
            assert settings.get_user_name() == 'printing'
        with patch.object(NetPrintSettings, 'USER_NAME', None), \
             patch('netprint.config.settings.getpass.getuser', side_effect=KeyError('uid')):
            assert settings.get_user_name() == 'anonymous'

class TestLogging:
    # Consola y archivo rotativo
    def test_setup_logging(self, tmp_path):
        log_file = tmp_path / 'logs' / 'netprint.log'
        root = setup_logging('DEBUG', str(log_file))
        try:
            assert root.level == logging.DEBUG
            assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in root.handlers)
            assert logging.getLogger('zeroconf').level == logging.WARNING
            logging.getLogger('netprint.test').info('hola')
            for handler in root.handlers:
                handler.flush()
            assert 'hola' in log_file.read_text()
        finally:
            for handler in root.handlers[:]:
                root.removeHandler(handler)
                handler.close()

class TestUtils:
    # Números dentro del nombre se comparan como números
    def test_natural_sort_key(self):
        names = ['Printer 10', 'printer 2', 'Printer 1', 'Alpha']
        assert sorted(names, key=natural_sort_key) == ['Alpha', 'Printer 1', 'printer 2', 'Printer 10']
    # Varios lectores a la vez, escritor exclusivo
    def test_read_write_lock(self):
        lock = ReadWriteLock()
        events = []

        with lock.read_locked():
            with lock.read_locked():
                events.append('two readers')

        lock.acquire_read()
        writer_done = threading.Event()

        def writer():
            with lock.write_locked():
                events.append('writer')
            writer_done.set()

        thread = threading.Thread(target=writer)
        thread.start()
        time.sleep(0.05)
        assert not writer_done.is_set()
        events.append('reader released')
        lock.release_read()
        assert writer_done.wait(2)
        thread.join()
        assert events == ['two readers', 'reader released', 'writer']
