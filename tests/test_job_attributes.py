import pytest

from netprint.errors import ValidationError
from netprint.ipp.codec import IPPTag, IPPValue, Range
from netprint.ipp.attributes import Attributes
from netprint.ipp.job_attributes import JobAttributes
from netprint.ipp.printer_attributes import (Margins, PrinterAttributes, orientation_presentation_name,
                                             side_presentation_name)

class TestPrinterAttributes:
    # Capacidades típicas de una impresora láser
    def test_supported_and_defaults(self):
        printer = PrinterAttributes()
        printer.set_keyword('media-default', 'iso_a4_210x297mm', True)
        printer.set_keyword('media-supported', 'iso_a4_210x297mm', False)
        printer.set_keyword('media-supported', 'na_letter_8.5x11in', False)
        printer.set_keyword('sides-supported', 'one-sided', False)
        printer.set_keyword('sides-supported', 'two-sided-long-edge', False)
        printer.set_keyword('sides-default', 'one-sided', True)
        printer.set_range('copies-supported', Range(1, 99), True)
        printer.set_boolean('page-ranges-supported', True, True)
        printer.set_mime_type('document-format-supported', 'application/pdf', True)
        printer.set_uri('printer-icons', 'http://printer/icon-small.png', False)
        printer.set_uri('printer-icons', 'http://printer/icon-large.png', False)

        assert printer.default_media() == 'iso_a4_210x297mm'
        assert printer.supported_media() == ['iso_a4_210x297mm', 'na_letter_8.5x11in']
        assert printer.supported_sides() == ['one-sided', 'two-sided-long-edge']
        assert printer.default_sides() == 'one-sided'
        assert printer.max_copies() == 99
        assert printer.page_ranges_supported() is True
        assert printer.supported_document_types() == ['application/pdf']
        assert printer.icons()[-1] == 'http://printer/icon-large.png'
    # *-supported ausente significa que no se puede negociar
    def test_absent_supported(self):
        printer = PrinterAttributes()
        assert printer.supported_media() is None
        assert printer.supported_color_modes() is None
        assert printer.supported_print_scaling() is None
        assert printer.supported_pdf_fit_to_page() is None
        assert printer.supported_media_sources() is None
        assert printer.supported_content_optimizations() is None
        assert printer.supported_job_creation_attributes() is None
        assert printer.supported_orientations() is None
        assert printer.icons() is None
        assert printer.max_copies() == 1
        assert printer.page_ranges_supported() is False
        assert printer.default_orientation() == ''
        assert printer.minimum_margins() == Margins(0, 0, 0, 0)
    # Orientaciones fuera de la tabla se descartan
    def test_orientations(self):
        printer = PrinterAttributes()
        for value in (3, 4, 7, 5, 6, 9):
            printer.set_enum('orientation-requested-supported', value, False)
        printer.set_enum('orientation-requested-default', 4, True)
        assert printer.supported_orientations() == ['portrait', 'landscape', 'reverse-landscape', 'reverse-portrait']
        assert printer.default_orientation() == 'landscape'
    # Márgenes mínimos en centésimas de milímetro
    def test_margins(self):
        printer = PrinterAttributes()
        printer.set_integer('media-top-margin-supported', 300, True)
        printer.set_integer('media-left-margin-supported', 420, True)
        printer.set_integer('media-bottom-margin-supported', 500, True)
        assert printer.minimum_margins() == Margins(top=300, left=420, bottom=500, right=0)
    # Nombres legibles; desconocidos se devuelven tal cual
    def test_presentation_names(self):
        assert side_presentation_name('two-sided-short-edge') == 'Two-Sided, Short Edge'
        assert side_presentation_name('weird') == 'weird'
        assert orientation_presentation_name('reverse-portrait') == 'Reverse Portrait'
        assert orientation_presentation_name('') == ''

class TestJobAttributes:
    # Copias por defecto 1 y valores menores se ajustan a 1
    def test_copies(self):
        job = JobAttributes()
        assert job.copies() == 1
        job.set_copies(3)
        assert job.copies() == 3
        job.set_copies(0)
        assert job.copies() == 1
        job.set_copies(-5)
        assert job['copies'] == [IPPValue(IPPTag.INTEGER, 1)]
    # Rangos válidos se guardan como multivalor
    def test_page_ranges(self):
        job = JobAttributes()
        assert job.page_ranges() is None
        job.set_page_ranges([Range(1, 3), Range(5, 5)])
        assert job.page_ranges() == [Range(1, 3), Range(5, 5)]
        job.set_page_ranges([Range(2, 2)])
        assert job.page_ranges() == [Range(2, 2)]
        job.set_page_ranges([])
        assert 'page-ranges' not in job
    # Rangos inválidos se rechazan sin modificar el trabajo
    def test_invalid_page_ranges(self):
        job = JobAttributes()
        job.set_page_ranges([Range(1, 2)])
        with pytest.raises(ValidationError):
            job.set_page_ranges([Range(5, 5), Range(1, 3)])
        assert job.page_ranges() == [Range(1, 2)]
    # validate() detecta rangos inválidos escritos directamente
    def test_validate(self):
        job = JobAttributes()
        job.validate()
        job.set_range('page-ranges', Range(3, 2), True)
        with pytest.raises(ValidationError):
            job.validate()
    # Orientación: tabla explícita, desconocidas se escriben como 7
    def test_orientation(self):
        job = JobAttributes()
        assert job.orientation() == ''
        job.set_orientation('reverse-landscape')
        assert job['orientation-requested'] == [IPPValue(IPPTag.ENUM, 5)]
        assert job.orientation() == 'reverse-landscape'
        job.set_orientation('diagonal')
        assert job.integer('orientation-requested', 0) == 7
        assert job.orientation() == ''
    # Palabras clave del trabajo
    def test_keywords(self):
        job = JobAttributes()
        job.set_media('iso_a4_210x297mm')
        job.set_sides('two-sided-long-edge')
        job.set_color_mode('monochrome')
        job.set_print_scaling('fit')
        job.set_media_source('tray-2')
        job.set_content_optimization('text')
        job.set_pdf_fit_to_page(True)
        assert job.media() == 'iso_a4_210x297mm'
        assert job.sides() == 'two-sided-long-edge'
        assert job.color_mode() == 'monochrome'
        assert job.print_scaling() == 'fit'
        assert job.media_source() == 'tray-2'
        assert job.content_optimization() == 'text'
        assert job.pdf_fit_to_page() is True
        assert job['sides'][0].tag == IPPTag.KEYWORD
        job.set_media('')
        assert job.media() == ''
        assert 'media' not in job
    # Un trabajo se puede construir desde atributos genéricos
    def test_from_attributes(self):
        attributes = Attributes()
        attributes.set_keyword('sides', 'one-sided', True)
        assert attributes.for_job().sides() == 'one-sided'
