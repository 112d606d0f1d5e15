from io import BytesIO

import pytest

from warcpipe.archivedetect import detect_compression, NONE, GZIP, BZIP2
from warcpipe.exceptions import UnreadableStream

from . import make_warc


# ============================================================================
class TrickleStream(object):
    """ returns at most one byte per read
    """
    def __init__(self, buff):
        self.stream = BytesIO(buff)

    def read(self, length=-1):
        return self.stream.read(1)


class FailingStream(object):
    def read(self, length=-1):
        raise OSError('device not ready')


# ============================================================================
class TestDetectCompression(object):
    def test_detect_from_fixtures(self):
        assert detect_compression(BytesIO(make_warc('none')))[0] == NONE
        assert detect_compression(BytesIO(make_warc('gzip')))[0] == GZIP
        assert detect_compression(BytesIO(make_warc('bzip2')))[0] == BZIP2

    def test_peeked_bytes_returned(self):
        stream = BytesIO(b'WARC/1.0\r\n')
        kind, peeked = detect_compression(stream)
        assert kind == NONE
        assert peeked + stream.read() == b'WARC/1.0\r\n'

    def test_magic_only(self):
        assert detect_compression(BytesIO(b'\x1f\x8b')) == (GZIP, b'\x1f\x8b')
        assert detect_compression(BytesIO(b'BZh')) == (BZIP2, b'BZh')

    def test_not_bzip2_magic(self):
        assert detect_compression(BytesIO(b'BZ')) == (NONE, b'BZ')
        assert detect_compression(BytesIO(b'BZx91')) == (NONE, b'BZx')

    def test_empty(self):
        assert detect_compression(BytesIO(b'')) == (NONE, b'')

    def test_single_byte(self):
        with pytest.raises(UnreadableStream):
            detect_compression(BytesIO(b'\x1f'))

    def test_short_reads(self):
        kind, peeked = detect_compression(TrickleStream(b'BZh91AY'))
        assert kind == BZIP2
        assert peeked == b'BZh'

    def test_read_error(self):
        with pytest.raises(UnreadableStream):
            detect_compression(FailingStream())
