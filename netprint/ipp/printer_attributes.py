from typing import List, NamedTuple, Optional

from .attributes import Attributes
from .codec import Range

# Posibles orientaciones
PORTRAIT = "portrait"
LANDSCAPE = "landscape"
REVERSE_LANDSCAPE = "reverse-landscape"
REVERSE_PORTRAIT = "reverse-portrait"

# Posibles lados
ONE_SIDED = "one-sided"
TWO_SIDED_LONG = "two-sided-long-edge"
TWO_SIDED_SHORT = "two-sided-short-edge"

# Valor enum de orientation-requested para "none"
ORIENTATION_NONE = 7

# Tabla bidireccional orientation-requested <-> palabra clave
ORIENTATION_KEYS = {
    3: PORTRAIT,
    4: LANDSCAPE,
    5: REVERSE_LANDSCAPE,
    6: REVERSE_PORTRAIT,
}
ORIENTATION_VALUES = {key: value for value, key in ORIENTATION_KEYS.items()}

_SIDE_NAMES = {
    ONE_SIDED: "One-Sided",
    TWO_SIDED_LONG: "Two-Sided, Long Edge",
    TWO_SIDED_SHORT: "Two-Sided, Short Edge",
}

_ORIENTATION_NAMES = {
    PORTRAIT: "Portrait",
    LANDSCAPE: "Landscape",
    REVERSE_LANDSCAPE: "Reverse Landscape",
    REVERSE_PORTRAIT: "Reverse Portrait",
}

# Cualquier valor fuera de la tabla (incluido 7) es "sin especificar"
def orientation_key_from_int(value: int) -> str:
    return ORIENTATION_KEYS.get(value, "")

def orientation_from_key(key: str) -> int:
    return ORIENTATION_VALUES.get(key, ORIENTATION_NONE)

# Nombre legible para un valor de sides
def side_presentation_name(key: str) -> str:
    return _SIDE_NAMES.get(key, key)

# Nombre legible para una orientación
def orientation_presentation_name(key: str) -> str:
    return _ORIENTATION_NAMES.get(key, key)

# Márgenes en centésimas de milímetro
class Margins(NamedTuple):
    top: int = 0
    left: int = 0
    bottom: int = 0
    right: int = 0

# Vista de capacidades de la impresora (pares *-supported / *-default)
# Un *-supported ausente (None) significa que la opción no es negociable
class PrinterAttributes(Attributes):

    def icons(self) -> Optional[List[str]]:
        return self.strings("printer-icons", None)

    def page_ranges_supported(self) -> bool:
        return self.boolean("page-ranges-supported", False)

    def default_media(self) -> str:
        return self.string("media-default", "")

    def supported_media(self) -> Optional[List[str]]:
        return self.strings("media-supported", None)

    def default_pdf_fit_to_page(self) -> bool:
        return self.boolean("pdf-fit-to-page-default", False)

    def supported_pdf_fit_to_page(self) -> Optional[List[bool]]:
        return self.booleans("pdf-fit-to-page-supported", None)

    def default_print_scaling(self) -> str:
        return self.string("print-scaling-default", "")

    def supported_print_scaling(self) -> Optional[List[str]]:
        return self.strings("print-scaling-supported", None)

    def default_color_mode(self) -> str:
        return self.string("print-color-mode-default", "")

    def supported_color_modes(self) -> Optional[List[str]]:
        return self.strings("print-color-mode-supported", None)

    def max_copies(self) -> int:
        return self.range("copies-supported", Range(1, 1)).upper

    def supported_document_types(self) -> Optional[List[str]]:
        return self.strings("document-format-supported", None)

    def supported_job_creation_attributes(self) -> Optional[List[str]]:
        return self.strings("job-creation-attributes-supported", None)

    def default_media_source(self) -> str:
        return self.string("media-source-default", "")

    def supported_media_sources(self) -> Optional[List[str]]:
        return self.strings("media-source-supported", None)

    def default_content_optimization(self) -> str:
        return self.string("print-content-optimize-default", "")

    def supported_content_optimizations(self) -> Optional[List[str]]:
        return self.strings("print-content-optimize-supported", None)

    def default_sides(self) -> str:
        return self.string("sides-default", "")

    def supported_sides(self) -> Optional[List[str]]:
        return self.strings("sides-supported", None)

    def default_orientation(self) -> str:
        return orientation_key_from_int(self.integer("orientation-requested-default", ORIENTATION_NONE))

    def supported_orientations(self) -> Optional[List[str]]:
        values = self.integers("orientation-requested-supported", None)
        if values is None:
            return None
        return [key for key in (orientation_key_from_int(value) for value in values) if key]

    def minimum_margins(self) -> Margins:
        return Margins(
            top=self.integer("media-top-margin-supported", 0),
            left=self.integer("media-left-margin-supported", 0),
            bottom=self.integer("media-bottom-margin-supported", 0),
            right=self.integer("media-right-margin-supported", 0),
        )
