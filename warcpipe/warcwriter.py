import bz2
import logging
import zlib

from warcpipe.archivedetect import NONE, GZIP, BZIP2
from warcpipe.recordbuilder import RecordBuilder
from warcpipe.utils import Digester, copy_stream, iter_stream
from warcpipe.warcheaders import WARCHeaders

logger = logging.getLogger(__name__)


# ============================================================================
class BaseWARCWriter(RecordBuilder):
    """
    Serializes records to the WARC wire format:

        WARC/1.0 CRLF
        Header-Key: Header-Value CRLF
        CRLF
        Content
        CRLF
        CRLF

    With compression set to 'gzip' or 'bzip2', each record is written as
    its own compressed member.
    """
    OPEN_SUFFIX = '.open'

    def __init__(self, filename='', compression=None, warc_version=None,
                 block_digest=None):

        super(BaseWARCWriter, self).__init__(warc_version=warc_version)

        if compression == NONE:
            compression = None

        if compression not in (None, GZIP, BZIP2):
            raise ValueError('Unsupported compression: ' + str(compression))

        self.filename = filename or ''
        self.compression = compression
        self.block_digest = block_digest

    def write_record(self, record):  #pragma: no cover
        raise NotImplementedError()

    def write_warcinfo_record(self, info):
        """
        Write a warcinfo record with info as its application/warc-fields content,
        return its WARC-Record-ID
        """
        filename = self.filename
        if filename.endswith(self.OPEN_SUFFIX):
            filename = filename[:-len(self.OPEN_SUFFIX)]

        record = self.create_warcinfo_record(filename, info)
        return self.write_record(record)

    def write_batch(self, batch):
        """
        Write all records of a RecordBatch in order, return their WARC-Record-IDs
        """
        record_ids = []
        for record in batch:
            if batch.capture_time:
                rec_headers = self._ensure_warc_headers(record)
                if not rec_headers.get_header('WARC-Date'):
                    rec_headers.replace_header('WARC-Date', batch.capture_time)

            record_ids.append(self.write_record(record))

        return record_ids

    def _ensure_warc_headers(self, record):
        if not isinstance(record.rec_headers, WARCHeaders):
            record.rec_headers = WARCHeaders(record.rec_headers,
                                             protocol=self.warc_version)

        return record.rec_headers

    def _write_warc_record(self, out, record):
        rec_headers = self._ensure_warc_headers(record)

        digester = None
        if self.block_digest and not rec_headers.get_header('WARC-Block-Digest'):
            digester = Digester(self.block_digest)

        # content is buffered to compute its length (and digest)
        temp_file = self._create_temp_file()
        try:
            length = 0
            if record.raw_stream is not None:
                for buf in iter_stream(record.raw_stream):
                    temp_file.write(buf)
                    length += len(buf)
                    if digester:
                        digester.update(buf)

            temp_file.seek(0)

            record.length = length
            rec_headers.replace_header('Content-Length', str(length))

            self.ensure_headers(rec_headers)

            if digester:
                rec_headers.replace_header('WARC-Block-Digest', str(digester))

            if self.compression == GZIP:
                out = GzippingWrapper(out)
            elif self.compression == BZIP2:
                out = Bzip2ingWrapper(out)

            # WARC headers may be utf-8
            out.write(rec_headers.to_bytes(encoding='utf-8'))

            copy_stream(temp_file, out)

            # add two lines
            out.write(b'\r\n\r\n')

            out.flush()

        finally:
            temp_file.close()

        record_id = rec_headers.get_header('WARC-Record-ID')
        logger.debug('wrote %s record %s, %d bytes', record.rec_type, record_id, length)
        return record_id


# ============================================================================
class GzippingWrapper(object):
    def __init__(self, out):
        self.compressor = zlib.compressobj(9, zlib.DEFLATED, zlib.MAX_WBITS + 16)
        self.out = out

    def write(self, buff):
        buff = self.compressor.compress(buff)
        self.out.write(buff)

    def flush(self):
        buff = self.compressor.flush()
        self.out.write(buff)
        self.out.flush()


# ============================================================================
class Bzip2ingWrapper(object):
    def __init__(self, out):
        self.compressor = bz2.BZ2Compressor(9)
        self.out = out

    def write(self, buff):
        buff = self.compressor.compress(buff)
        self.out.write(buff)

    def flush(self):
        buff = self.compressor.flush()
        self.out.write(buff)
        self.out.flush()


# ============================================================================
class WARCWriter(BaseWARCWriter):
    def __init__(self, filebuf, *args, **kwargs):
        super(WARCWriter, self).__init__(*args, **kwargs)
        self.out = filebuf

    def write_record(self, record):
        """
        Write record, filling in Content-Length and any missing
        WARC-Date, WARC-Type and WARC-Record-ID.
        Returns the WARC-Record-ID of the written record
        """
        return self._write_warc_record(self.out, record)


# ============================================================================
class BufferWARCWriter(WARCWriter):
    def __init__(self, *args, **kwargs):
        out = self._create_temp_file()
        super(BufferWARCWriter, self).__init__(out, *args, **kwargs)

    def get_contents(self):
        pos = self.out.tell()
        self.out.seek(0)
        buff = self.out.read()
        self.out.seek(pos)
        return buff

    def get_stream(self):
        self.out.seek(0)
        return self.out
