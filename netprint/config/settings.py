import getpass
import os

class NetPrintSettings:

    # Configuración de descubrimiento
    SCAN_DURATION = float(os.getenv('NETPRINT_SCAN_DURATION', 5))             # Segundos de escaneo mDNS
    SERVICE_TYPE = os.getenv('NETPRINT_SERVICE_TYPE', '_ipp._tcp')
    SERVICE_DOMAIN = os.getenv('NETPRINT_SERVICE_DOMAIN', 'local.')
    DISCOVERY_QUEUE_SIZE = int(os.getenv('NETPRINT_QUEUE_SIZE', 8))          # Cola acotada browse -> colector
    RESOLVE_TIMEOUT_MS = int(os.getenv('NETPRINT_RESOLVE_TIMEOUT_MS', 3000))  # Resolución de ServiceInfo

    # Configuración de peticiones
    REQUEST_TIMEOUT = float(os.getenv('NETPRINT_REQUEST_TIMEOUT', 30))
    ICON_TIMEOUT = float(os.getenv('NETPRINT_ICON_TIMEOUT', 15))
    USER_NAME = os.getenv('NETPRINT_USER', None)  # None = usuario actual del sistema

    # Configuración IPP
    IPP_VERSION = "2.0"
    IPP_CHARSET = "utf-8"
    IPP_NATURAL_LANGUAGE = "en-US"
    IPP_CONTENT_TYPE = "application/ipp"
    DEFAULT_IPP_PORT = 631

    # Configuración de registro/logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FILE = os.getenv('LOG_FILE', None)  # Ninguno = salida a consola

    # Información de la versión
    VERSION = "1.0.0"

    # Versión IPP como tupla (mayor, menor) para el encabezado
    @classmethod
    def get_ipp_version(cls):
        major, minor = cls.IPP_VERSION.split('.')
        return int(major), int(minor)

    # Nombre enviado en requesting-user-name
    @classmethod
    def get_user_name(cls) -> str:
        if cls.USER_NAME:
            return cls.USER_NAME
        try:
            return getpass.getuser()
        except (KeyError, OSError):
            return 'anonymous'

    @classmethod
    def validate_config(cls):
        errors = []

        if cls.SCAN_DURATION < 0:
            errors.append("SCAN_DURATION cannot be negative")

        if cls.REQUEST_TIMEOUT <= 0:
            errors.append("REQUEST_TIMEOUT must be greater than zero")

        if cls.DISCOVERY_QUEUE_SIZE < 1:
            errors.append("DISCOVERY_QUEUE_SIZE must be at least 1")

        if not cls.SERVICE_TYPE.startswith('_'):
            errors.append("SERVICE_TYPE must look like '_ipp._tcp'")

        if cls.IPP_VERSION not in ["1.1", "2.0", "2.1", "2.2"]:
            errors.append("IPP_VERSION should be 1.1, 2.0, 2.1 or 2.2")

        return errors

# Cargar configuración por defecto
settings = NetPrintSettings()
