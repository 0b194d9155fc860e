from datetime import datetime, timezone

from netprint.ipp.attributes import Attributes
from netprint.ipp.codec import IPPAttribute, IPPTag, IPPValue, Range, Resolution, TextWithLang
from netprint.ipp.job_attributes import JobAttributes
from netprint.ipp.printer_attributes import PrinterAttributes

class TestAttributeGetters:
    # Nombre ausente: cada lector devuelve exactamente el valor por defecto
    def test_absent_returns_default(self):
        attributes = Attributes()
        marker = ['sentinel']
        assert attributes.boolean('missing', True) is True
        assert attributes.integer('missing', 17) == 17
        assert attributes.string('missing', 'x') == 'x'
        assert attributes.time('missing', None) is None
        assert attributes.resolution('missing', Resolution(1, 2)) == Resolution(1, 2)
        assert attributes.range('missing', Range(1, 1)) == Range(1, 1)
        assert attributes.text_with_lang('missing', None) is None
        assert attributes.binary('missing') is None
        assert attributes.strings('missing', marker) is marker
        assert attributes.integers('missing', None) is None
        assert attributes.binaries('missing') is None
        assert attributes.collection('missing') == Attributes()
        assert attributes.collections('missing') == []
    # Valores de otro tipo se ignoran al leer
    def test_mismatched_kinds_are_skipped(self):
        attributes = Attributes()
        attributes['copies-supported'] = [
            IPPValue(IPPTag.KEYWORD, 'lots'),
            IPPValue(IPPTag.INTEGER, 5),
            IPPValue(IPPTag.RANGE_OF_INTEGER, Range(1, 9)),
        ]
        assert attributes.integer('copies-supported', 0) == 5
        assert attributes.range('copies-supported', None) == Range(1, 9)
        assert attributes.string('copies-supported', '') == 'lots'
        assert attributes.boolean('copies-supported', False) is False
        assert attributes.integers('copies-supported', None) == [5]
        assert attributes.booleans('copies-supported', None) == []
    # Todas las etiquetas de texto se leen como cadena
    def test_string_kinds(self):
        attributes = Attributes()
        attributes.set_keyword('values', 'one', False)
        attributes.set_uri('values', 'ipp://host/', False)
        attributes.set_mime_type('values', 'application/pdf', False)
        attributes.set_integer('values', 3, False)
        assert attributes.strings('values', None) == ['one', 'ipp://host/', 'application/pdf']

class TestAttributeSetters:
    # replace=True reemplaza la lista, replace=False agrega
    def test_replace_and_append(self):
        attributes = Attributes()
        attributes.set_integer('number-up', 1, False)
        attributes.set_integer('number-up', 2, False)
        assert attributes.integers('number-up', None) == [1, 2]
        attributes.set_integer('number-up', 4, True)
        assert attributes.integers('number-up', None) == [4]
    # Cadena vacía con reemplazo elimina; sin reemplazo no hace nada
    def test_empty_string(self):
        attributes = Attributes()
        attributes.set_keyword('media', 'iso_a4_210x297mm', True)
        attributes.set_keyword('media', '', False)
        assert attributes.strings('media', None) == ['iso_a4_210x297mm']
        attributes.set_keyword('media', '', True)
        assert 'media' not in attributes
        attributes.set_text('job-name', '', False)
        assert 'job-name' not in attributes
    # Cada setter usa la etiqueta IPP correspondiente
    def test_setter_tags(self):
        attributes = Attributes()
        attributes.set_enum('orientation-requested', 4, True)
        attributes.set_name('job-name', 'report', True)
        attributes.set_charset('attributes-charset', 'utf-8', True)
        attributes.set_language('attributes-natural-language', 'en-US', True)
        attributes.set_name_with_lang('job-originating-user-name', TextWithLang('Ana', 'es'), True)
        attributes.set_binary('blob', b'\x00\x01', True)
        assert attributes['orientation-requested'][0].tag == IPPTag.ENUM
        assert attributes['job-name'][0].tag == IPPTag.NAME_WITHOUT_LANGUAGE
        assert attributes['attributes-charset'][0].tag == IPPTag.CHARSET
        assert attributes['attributes-natural-language'][0].tag == IPPTag.NATURAL_LANGUAGE
        assert attributes.text_with_lang('job-originating-user-name', None) == TextWithLang('Ana', 'es')
        assert attributes.binary('blob') == b'\x00\x01'
    # Fechas, resoluciones y rangos
    def test_structured_values(self):
        now = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        attributes = Attributes()
        attributes.set_time('printer-current-time', now, True)
        attributes.set_resolution('printer-resolution', (300, 300, 3), True)
        attributes.set_range('page-ranges', (1, 4), True)
        assert attributes.time('printer-current-time', None) == now
        assert attributes.times('printer-current-time', None) == [now]
        assert attributes.resolution('printer-resolution', None) == Resolution(300, 300)
        assert attributes.ranges('page-ranges', None) == [Range(1, 4)]

class TestCollections:
    # Colección como sub-Attributes
    def test_collection_round_trip(self):
        size = Attributes()
        size.set_integer('x-dimension', 21000, True)
        size.set_integer('y-dimension', 29700, True)
        media_col = Attributes()
        media_col.set_collection('media-size', size, True)
        media_col.set_keyword('media-source', 'tray-1', True)

        attributes = Attributes()
        attributes.set_collection('media-col', media_col, True)

        read = attributes.collection('media-col')
        assert read.string('media-source', '') == 'tray-1'
        assert read.collection('media-size').integer('y-dimension', 0) == 29700
        assert len(attributes.collections('media-col')) == 1
    # Una copia no comparte listas con el original
    def test_copy_is_deep(self):
        attributes = Attributes()
        attributes.set_keyword('sides', 'one-sided', True)
        other = attributes.copy()
        other.set_keyword('sides', 'two-sided-long-edge', False)
        assert attributes.strings('sides', None) == ['one-sided']
        assert other.strings('sides', None) == ['one-sided', 'two-sided-long-edge']

class TestConversions:
    # Conversión desde y hacia grupos del codec
    def test_from_and_to_ipp(self):
        group = {
            'copies': IPPAttribute('copies', [IPPValue(IPPTag.INTEGER, 2)]),
            'empty': IPPAttribute('empty', []),
        }
        attributes = Attributes.from_ipp(group)
        assert attributes.integer('copies', 1) == 2
        assert 'empty' not in attributes
        assert attributes.to_ipp() == {'copies': IPPAttribute('copies', [IPPValue(IPPTag.INTEGER, 2)])}
        assert Attributes.from_ipp(None) == {}
    # Vistas tipadas sobre los mismos valores
    def test_typed_views(self):
        attributes = Attributes()
        attributes.set_integer('copies', 3, True)
        assert isinstance(attributes.for_printer(), PrinterAttributes)
        job = attributes.for_job()
        assert isinstance(job, JobAttributes)
        assert job.copies() == 3
