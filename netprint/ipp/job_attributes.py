from typing import List, Optional, Sequence

from ..errors import ValidationError
from .attributes import Attributes
from .codec import Range
from .page_ranges import format_page_ranges, valid_page_ranges
from .printer_attributes import ORIENTATION_NONE, orientation_from_key, orientation_key_from_int

COPIES_KEY = "copies"
PAGE_RANGES_KEY = "page-ranges"
MEDIA_KEY = "media"
PDF_FIT_TO_PAGE_KEY = "pdf-fit-to-page"
PRINT_SCALING_KEY = "print-scaling"
PRINT_COLOR_MODE_KEY = "print-color-mode"
MEDIA_SOURCE_KEY = "media-source"
CONTENT_OPTIMIZATION_KEY = "print-content-optimize"
SIDES_KEY = "sides"
ORIENTATION_KEY = "orientation-requested"

# Configuración de un trabajo; se envía como grupo de atributos de trabajo
class JobAttributes(Attributes):

    def copies(self) -> int:
        return self.integer(COPIES_KEY, 1)

    def set_copies(self, count: int):
        if count < 1:
            count = 1
        self.set_integer(COPIES_KEY, count, True)

    def page_ranges(self) -> Optional[List[Range]]:
        return self.ranges(PAGE_RANGES_KEY, None)

    # None o lista vacía elimina la restricción de páginas
    def set_page_ranges(self, ranges: Optional[Sequence[Range]]):
        if not ranges:
            self.pop(PAGE_RANGES_KEY, None)
            return
        if not valid_page_ranges(ranges):
            raise ValidationError(f"Invalid page ranges: {format_page_ranges(ranges)}")
        for index, one in enumerate(ranges):
            self.set_range(PAGE_RANGES_KEY, one, index == 0)

    def media(self) -> str:
        return self.string(MEDIA_KEY, "")

    def set_media(self, media: str):
        self.set_keyword(MEDIA_KEY, media, True)

    def pdf_fit_to_page(self) -> bool:
        return self.boolean(PDF_FIT_TO_PAGE_KEY, False)

    def set_pdf_fit_to_page(self, fit: bool):
        self.set_boolean(PDF_FIT_TO_PAGE_KEY, fit, True)

    def print_scaling(self) -> str:
        return self.string(PRINT_SCALING_KEY, "")

    def set_print_scaling(self, scaling: str):
        self.set_keyword(PRINT_SCALING_KEY, scaling, True)

    def color_mode(self) -> str:
        return self.string(PRINT_COLOR_MODE_KEY, "")

    def set_color_mode(self, mode: str):
        self.set_keyword(PRINT_COLOR_MODE_KEY, mode, True)

    def media_source(self) -> str:
        return self.string(MEDIA_SOURCE_KEY, "")

    def set_media_source(self, source: str):
        self.set_keyword(MEDIA_SOURCE_KEY, source, True)

    def content_optimization(self) -> str:
        return self.string(CONTENT_OPTIMIZATION_KEY, "")

    def set_content_optimization(self, optimization: str):
        self.set_keyword(CONTENT_OPTIMIZATION_KEY, optimization, True)

    def sides(self) -> str:
        return self.string(SIDES_KEY, "")

    def set_sides(self, sides: str):
        self.set_keyword(SIDES_KEY, sides, True)

    def orientation(self) -> str:
        return orientation_key_from_int(self.integer(ORIENTATION_KEY, ORIENTATION_NONE))

    def set_orientation(self, orientation: str):
        self.set_enum(ORIENTATION_KEY, orientation_from_key(orientation), True)

    # Valida localmente antes de cualquier envío a la impresora
    def validate(self):
        if not valid_page_ranges(self.page_ranges()):
            raise ValidationError(f"Invalid page ranges: {format_page_ranges(self.page_ranges())}")
