import re

from warcpipe.digestverifyingreader import DigestChecker, DigestVerifyingReader
from warcpipe.exceptions import MalformedFrame, MissingContentLength, UnexpectedEOF
from warcpipe.limitreader import ContentReader
from warcpipe.warcheaders import WARCHeadersParser

CONTENT_LENGTH_RX = re.compile(r'^[0-9]+$')


#=================================================================
class WARCRecord(object):
    """
    A WARC record: header block plus a content stream of `length` bytes
    """
    def __init__(self, rec_headers, raw_stream=None, length=None,
                 digest_checker=None):

        self.rec_headers = rec_headers
        self.raw_stream = raw_stream
        self.length = length
        self.digest_checker = digest_checker or DigestChecker()

    @property
    def rec_type(self):
        return self.rec_headers.get_header('WARC-Type')

    @property
    def rec_id(self):
        return self.rec_headers.get_header('WARC-Record-ID')

    @property
    def version(self):
        return self.rec_headers.protocol

    def content_stream(self):
        return self.raw_stream

    def __repr__(self):
        return 'WARCRecord(rec_type = {0!r}, length = {1!r})'.format(self.rec_type,
                                                                    self.length)


#=================================================================
class WARCRecordLoader(object):
    """
    Parses one record at a time from a stream supporting read() and readline():

    version line, header lines, blank line, then `Content-Length` bytes
    of content, exposed lazily as a ContentReader. The record trailer is
    consumed separately by read_trailer(), once the content has been read.

    A clean end of stream before the version line raises EOFError.
    """
    TRAILER = b'\r\n\r\n'

    def __init__(self, check_digests=False):
        self.warc_parser = WARCHeadersParser()
        self.check_digests = check_digests

    def parse_record_stream(self, stream):
        rec_headers = self.warc_parser.parse(stream)

        length = self.parse_content_length(rec_headers)

        digest_checker = DigestChecker()

        if self.check_digests:
            raw_stream = DigestVerifyingReader(stream, length,
                                               rec_headers.get_header('WARC-Block-Digest'),
                                               digest_checker)
        else:
            raw_stream = ContentReader(stream, length)

        return WARCRecord(rec_headers, raw_stream, length, digest_checker)

    @staticmethod
    def parse_content_length(rec_headers):
        length = rec_headers.get_header('Content-Length')
        if length is None:
            raise MissingContentLength('Missing Content-Length header')

        length = length.strip()
        if not CONTENT_LENGTH_RX.match(length):
            raise MissingContentLength('Invalid Content-Length: {0!r}'.format(length))

        return int(length)

    def read_trailer(self, stream):
        """
        Consume the CRLF CRLF which must follow the record content
        """
        trailer = b''
        while len(trailer) < len(self.TRAILER):
            buff = stream.read(len(self.TRAILER) - len(trailer))
            if not buff:
                break

            trailer += buff

        if trailer == self.TRAILER:
            return

        if self.TRAILER.startswith(trailer):
            raise UnexpectedEOF('Stream ended inside record trailer')

        msg = 'Record not followed by CRLF CRLF, perhaps Content-Length is invalid. Found: {0!r}'
        raise MalformedFrame(msg.format(trailer))
