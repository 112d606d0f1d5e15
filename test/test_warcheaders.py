r"""
>>> h = WARCHeaders([('warc-type', 'resource'), ('content-length', '5')])
>>> h
WARCHeaders(protocol = 'WARC/1.0', headers = [('WARC-Type', 'resource'), ('Content-Length', '5')])

# replace header, any casing, returns old value
>>> h.replace_header('Content-LENGTH', '10')
'5'

>>> h['warc-record-id'] = '<urn:uuid:1234>'; h
WARCHeaders(protocol = 'WARC/1.0', headers = [('WARC-Type', 'resource'), ('Content-Length', '10'), ('WARC-Record-ID', '<urn:uuid:1234>')])

# remove header
>>> h.remove_header('warc-record-id')
True

# already removed
>>> h.remove_header('WARC-Record-ID')
False

>>> h.to_bytes()
b'WARC/1.0\r\nWARC-Type: resource\r\nContent-Length: 10\r\n\r\n'
"""

from io import BytesIO

import pytest

from warcpipe.exceptions import MalformedFrame, UnexpectedEOF
from warcpipe.warcheaders import WARCHeaders, WARCHeadersParser, canonical_name, make_warc_id


# ============================================================================
class TestWARCHeaders(object):
    def test_canonical_name(self):
        assert canonical_name('warc-block-digest') == 'WARC-Block-Digest'
        assert canonical_name('WARC-TARGET-URI') == 'WARC-Target-URI'
        assert canonical_name('warc-ip-address') == 'WARC-IP-Address'
        assert canonical_name('content-type') == 'Content-Type'
        assert canonical_name('foo') == 'Foo'
        assert canonical_name('key 1') == 'Key 1'

    def test_case_insensitive_lookup(self):
        h = WARCHeaders({'WARC-Date': '2020-01-01T00:00:00Z'})
        assert h.get_header('warc-date') == '2020-01-01T00:00:00Z'
        assert h['WARC-DATE'] == '2020-01-01T00:00:00Z'
        assert 'Warc-Date' in h
        assert 'warc-type' not in h

    def test_missing_returns_none(self):
        h = WARCHeaders()
        assert h.get_header('warc-type') is None
        assert h.get('warc-type', 'default') == 'default'
        assert h['warc-type'] is None

    def test_duplicate_keys_collapse(self):
        h = WARCHeaders([('foo', 'bar'), ('FOO', 'baz')])
        assert len(h) == 1
        assert list(h) == [('Foo', 'baz')]

        h.set('Foo', 'qux')
        h.add_header('fOO', 'last')
        assert h.items() == [('Foo', 'last')]

    def test_iteration_canonical_order(self):
        h = WARCHeaders()
        h['warc-type'] = 'resource'
        h['content-length'] = '0'
        h['warc-record-id'] = '<urn:uuid:1>'
        assert h.keys() == ['WARC-Type', 'Content-Length', 'WARC-Record-ID']

    def test_to_bytes(self):
        h = WARCHeaders([('some-key', 'some value')], protocol='WARC/1.1')
        assert h.to_bytes() == b'WARC/1.1\r\nSome-Key: some value\r\n\r\n'

    @pytest.mark.parametrize('name, value', [
        ('X-Note', 'a\r\nContent-Length: 0\r\n\r\nEVIL'),
        ('X-Note', 'line\n'),
        ('X-Note', 'a\rb'),
        ('X-Note\r\nContent-Length', '0'),
        ('X:Note', 'value'),
    ])
    def test_invalid_chars(self, name, value):
        h = WARCHeaders([('WARC-Type', 'resource')])
        with pytest.raises(ValueError):
            h.replace_header(name, value)

        with pytest.raises(ValueError):
            WARCHeaders({name: value})

        assert h.items() == [('WARC-Type', 'resource')]

    def test_equality(self):
        assert WARCHeaders({'a': 'b'}) == WARCHeaders({'A': 'b'})
        assert WARCHeaders({'a': 'b'}) != WARCHeaders({'a': 'c'})
        assert WARCHeaders({'a': 'b'}) != {'a': 'b'}

    def test_make_warc_id(self):
        assert make_warc_id('abc') == '<urn:uuid:abc>'
        assert make_warc_id().startswith('<urn:uuid:')


# ============================================================================
class TestWARCHeadersParser(object):
    def parse(self, buff):
        return WARCHeadersParser().parse(BytesIO(buff))

    def test_parse(self):
        h = self.parse(b'WARC/1.0\r\nwarc-type: resource\r\nContent-Length:  5\r\n\r\nabcde')
        assert h.protocol == 'WARC/1.0'
        assert h.items() == [('WARC-Type', 'resource'), ('Content-Length', '5')]
        assert h.total_len == len(b'WARC/1.0\r\nwarc-type: resource\r\nContent-Length:  5\r\n\r\n')

    def test_parse_continuation(self):
        h = self.parse(b'WARC/1.0\r\nFoo: bar\r\n  baz\r\n\r\n')
        assert h['foo'] == 'bar baz'

    def test_parse_value_with_colon(self):
        h = self.parse(b'WARC/1.0\r\nWARC-Target-URI: http://example.com:80/\r\n\r\n')
        assert h['warc-target-uri'] == 'http://example.com:80/'

    def test_parse_latin1_fallback(self):
        h = self.parse(b'WARC/1.0\r\nFoo: caf\xe9\r\n\r\n')
        assert h['foo'] == u'caf\xe9'

    def test_parse_utf8(self):
        h = self.parse(u'WARC/1.0\r\nFoo: привет\r\n\r\n'.encode('utf-8'))
        assert h['foo'] == u'привет'

    def test_eof(self):
        with pytest.raises(EOFError):
            self.parse(b'')

    @pytest.mark.parametrize('buff', [
        b'WARC/1\r\n\r\n',
        b'HTTP/1.0 200 OK\r\n\r\n',
        b'WARC/1.0\n\r\n',
        b'WARC/10.0\r\n\r\n',
        b'WARC/1.0\r\nno colon here\r\n\r\n',
        b'WARC/1.0\r\n: no name\r\n\r\n',
        b'WARC/1.0\r\nFoo: bar\n\r\n',
        b'WARC/1.0\r\nFoo: a\rb\r\n\r\n',
        u'WARC/\u0661.\u0660\r\n\r\n'.encode('utf-8'),
    ])
    def test_malformed(self, buff):
        with pytest.raises(MalformedFrame):
            self.parse(buff)

    def test_eof_in_headers(self):
        with pytest.raises(UnexpectedEOF):
            self.parse(b'WARC/1.0\r\nFoo: bar\r\n')

    def test_leading_whitespace_trimmed(self):
        h = self.parse(b'WARC/1.0\r\nFoo: \t  bar \r\n\r\n')
        assert h['foo'] == 'bar '
