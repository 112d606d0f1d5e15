"""Detection of the outer compression container of a WARC stream.

Each record of a compressed WARC is stored as its own gzip or bzip2
member, concatenated back to back, so that any record can be decompressed
without replaying the whole file. The container kind is decided once,
from the magic bytes at the start of the stream.
"""

import logging

from warcpipe.exceptions import UnreadableStream

NONE = 'none'
GZIP = 'gzip'
BZIP2 = 'bzip2'

GZIP_MAGIC = b'\x1f\x8b'
BZIP2_MAGIC = b'BZh'

MAGIC_LEN = max(len(GZIP_MAGIC), len(BZIP2_MAGIC))

logger = logging.getLogger(__name__)


def is_gzip_magic(data):
    return data[:len(GZIP_MAGIC)] == GZIP_MAGIC


def is_bzip2_magic(data):
    return data[:len(BZIP2_MAGIC)] == BZIP2_MAGIC


def read_fully(stream, length):
    """Read up to length bytes, retrying short reads until EOF."""
    data = b''
    while len(data) < length:
        buff = stream.read(length - len(data))
        if not buff:
            break

        data += buff

    return data


def detect_compression(stream):
    """Classify the stream as NONE, GZIP or BZIP2.

    Returns a (kind, peeked) tuple. The peeked bytes have been read from
    the stream and must be handed back to whatever reads it next.

    Raises UnreadableStream if the magic can not be read, or if the stream
    holds a single byte, too short to be classified.
    """
    try:
        peeked = read_fully(stream, MAGIC_LEN)
    except OSError as e:
        raise UnreadableStream('Unable to read container magic: ' + str(e))

    if len(peeked) == 0:
        kind = NONE
    elif len(peeked) < len(GZIP_MAGIC):
        raise UnreadableStream('Stream too short to detect container: {0!r}'.format(peeked))
    elif is_gzip_magic(peeked):
        kind = GZIP
    elif is_bzip2_magic(peeked):
        kind = BZIP2
    else:
        kind = NONE

    logger.debug('detected container: %s', kind)
    return kind, peeked
