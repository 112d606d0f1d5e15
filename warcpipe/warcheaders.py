"""
Representation and parsing of WARC record headers
"""

import re
import uuid

from warcpipe.exceptions import MalformedFrame, UnexpectedEOF
from warcpipe.utils import to_native_str


# segments kept fully upper-case in canonical header names
UPPER_SEGMENTS = frozenset(['warc', 'id', 'uri', 'ip'])

VERSION_RX = re.compile(r'^WARC/[0-9]\.[0-9]$')

INVALID_CHARS_RX = re.compile(r'[\r\n]')

WARC_VERSION = 'WARC/1.0'


#=================================================================
def canonical_name(name):
    """ Canonical casing of a header name: each hyphen-delimited segment
    is capitalized, known WARC acronyms are upper-cased

    >>> canonical_name('warc-block-digest')
    'WARC-Block-Digest'

    >>> canonical_name('WARC-RECORD-ID')
    'WARC-Record-ID'

    >>> canonical_name('content-length')
    'Content-Length'

    >>> canonical_name('key 1')
    'Key 1'
    """
    segments = []
    for segment in name.strip().split('-'):
        segment = segment.lower()
        if segment in UPPER_SEGMENTS:
            segment = segment.upper()
        else:
            segment = segment[:1].upper() + segment[1:]

        segments.append(segment)

    return '-'.join(segments)


#=================================================================
def make_warc_id(id_=None):
    if not id_:
        id_ = uuid.uuid4()
    return '<urn:uuid:{0}>'.format(id_)


#=================================================================
class WARCHeaders(object):
    """
    Case-insensitive, ordered WARC header block.

    Headers are stored as a list of (name, value) tuples, names in canonical
    form. Setting an existing name, in any casing, replaces its value in place.
    The protocol is the version line, eg. WARC/1.0
    """
    def __init__(self, headers=None, protocol=WARC_VERSION, total_len=0):
        self.protocol = protocol
        self.headers = []
        self.total_len = total_len

        if headers:
            if hasattr(headers, 'items'):
                headers = headers.items()

            for name, value in headers:
                self.replace_header(to_native_str(name), to_native_str(value))

    def _find(self, name):
        name_lower = name.strip().lower()
        for index, (curr_name, _) in enumerate(self.headers):
            if curr_name.lower() == name_lower:
                return index

        return -1

    def get_header(self, name, default_value=None):
        """
        return header value if found, otherwise default_value
        """
        index = self._find(name)
        if index < 0:
            return default_value

        return self.headers[index][1]

    def replace_header(self, name, value):
        """
        replace header with new value or add new header
        return old header value, if any

        Names and values must not contain CR or LF, names must not
        contain a colon, else ValueError is raised
        """
        if INVALID_CHARS_RX.search(name) or ':' in name:
            raise ValueError('Invalid header name: {0!r}'.format(name))

        if INVALID_CHARS_RX.search(value):
            raise ValueError('Invalid value for header {0}: {1!r}'.format(name, value))

        entry = (canonical_name(name), value)
        index = self._find(name)
        if index < 0:
            self.headers.append(entry)
            return None

        old_value = self.headers[index][1]
        self.headers[index] = entry
        return old_value

    add_header = replace_header

    def remove_header(self, name):
        """
        Remove header (case-insensitive)
        return True if header removed, False otherwise
        """
        index = self._find(name)
        if index < 0:
            return False

        del self.headers[index]
        return True

    def items(self):
        return list(self.headers)

    def keys(self):
        return [name for name, _ in self.headers]

    def to_str(self):
        string = ''
        if self.protocol:
            string = self.protocol + '\r\n'

        for h in self.headers:
            string += ': '.join(h) + '\r\n'

        return string

    def to_bytes(self, encoding='utf-8'):
        return self.to_str().encode(encoding) + b'\r\n'

    def __iter__(self):
        return iter(self.headers)

    def __len__(self):
        return len(self.headers)

    def __contains__(self, name):
        return self._find(name) >= 0

    def __repr__(self):
        return "WARCHeaders(protocol = '{0}', headers = {1})".format(self.protocol,
                                                                   self.headers)

    def __eq__(self, other):
        if not isinstance(other, WARCHeaders):
            return False

        return (self.protocol == other.protocol and
                self.headers == other.headers)

    def __ne__(self, other):
        return not (self == other)

    def __str__(self):
        return self.to_str()

    get = get_header
    set = replace_header
    __getitem__ = get_header
    __setitem__ = replace_header
    __delitem__ = remove_header


#=================================================================
class WARCHeadersParser(object):
    """
    Parser which consumes a stream supporting readline() to read
    the version line and header block, and returns a WARCHeaders object.

    Every line must be terminated by CRLF. A clean end of stream before
    the version line raises EOFError.
    """
    def parse(self, stream):
        # version line w newlines intact
        full_statusline = stream.readline()

        total_read = len(full_statusline)

        # at end of stream
        if total_read == 0:
            raise EOFError()

        version = self._strip_crlf(full_statusline, 'version line')

        if not VERSION_RX.match(version):
            msg = 'Expected version line WARC/<major>.<minor> - Found: {0!r}'
            raise MalformedFrame(msg.format(version))

        headers = WARCHeaders(protocol=version)

        line, total_read = self._next_line(stream, total_read)
        while line:
            name, sep, value = line.partition(':')
            if not sep or not name.strip():
                raise MalformedFrame('Invalid header line: {0!r}'.format(line))

            value = value.lstrip(' \t')

            next_line, total_read = self._next_line(stream, total_read)

            # append continuation lines, if any
            while next_line and next_line.startswith((' ', '\t')):
                value += ' ' + next_line.strip()
                next_line, total_read = self._next_line(stream, total_read)

            try:
                headers.replace_header(name, value)
            except ValueError as e:
                raise MalformedFrame(str(e))

            line = next_line

        headers.total_len = total_read
        return headers

    def _next_line(self, stream, total_read):
        line = stream.readline()
        if not line:
            raise UnexpectedEOF('Stream ended before end of WARC headers')

        total_read += len(line)
        return self._strip_crlf(line, 'header line'), total_read

    def _strip_crlf(self, line, desc):
        if not line.endswith(b'\r\n'):
            msg = '{0} not terminated by CRLF: {1!r}'.format(desc, line)
            raise MalformedFrame(msg[0].upper() + msg[1:])

        return self.decode_header(line[:-2])

    @staticmethod
    def decode_header(line):
        try:
            # attempt to decode as utf-8 first
            return to_native_str(line, 'utf-8')
        except UnicodeDecodeError:
            # if fails, default to ISO-8859-1
            return to_native_str(line, 'iso-8859-1')
