from io import BytesIO
import bz2
import logging
import zlib

from warcpipe.archivedetect import GZIP_MAGIC, BZIP2_MAGIC
from warcpipe.exceptions import CorruptContainer, ReaderClosed, UnexpectedEOF
from warcpipe.utils import BUFF_SIZE

logger = logging.getLogger(__name__)


#=================================================================
def gzip_decompressor():
    """
    Decompressor for a single gzip member
    """
    return zlib.decompressobj(16 + zlib.MAX_WBITS)


def bzip2_decompressor():
    """
    Decompressor for a single bzip2 stream. A bzip2 decompressor stops
    at the end of its stream, so a new one is needed for every member
    """
    return bz2.BZ2Decompressor()


#=================================================================
class BufferedReader(object):
    """
    A wrapping line reader which wraps an existing reader.
    Read operations operate on underlying buffer, which is filled to
    block_size (16384 default)

    If a decompression type is specified, raw data is fed through the
    decompressor when read into the buffer. The raw stream is expected to
    be a sequence of independently compressed members, concatenated back
    to back. When a member ends, the next one must start immediately with
    the container magic, and a fresh decompressor is created for it, so
    that all members read as one logical stream.

    Supported decompression: gzip, bzip2
    If unspecified, data is passed through unchanged.

    A decompression failure raises CorruptContainer, a raw stream ending
    inside a member raises UnexpectedEOF. The end of the raw stream at a
    member boundary is a clean end of data.
    """

    DECOMPRESSORS = {'gzip': gzip_decompressor,
                     'bzip2': bzip2_decompressor,
                    }

    MEMBER_MAGIC = {'gzip': GZIP_MAGIC,
                    'bzip2': BZIP2_MAGIC,
                   }

    def __init__(self, stream, block_size=BUFF_SIZE,
                 decomp_type=None,
                 starting_data=None):

        self.stream = stream
        self.block_size = block_size

        self.member_count = 0
        self._init_decomp(decomp_type)

        self.buff = None
        self.starting_data = starting_data
        self.num_read = 0
        self.buff_size = 0

    def _init_decomp(self, decomp_type):
        if decomp_type:
            try:
                self.decomp_type = decomp_type.lower()
                self.decompressor = self.DECOMPRESSORS[self.decomp_type]()
            except KeyError:
                raise ValueError('Decompression type not supported: ' +
                                 decomp_type)

            self.member_count += 1
        else:
            self.decomp_type = None
            self.decompressor = None

    def _read_raw(self, block_size=None):
        if self.stream is None:
            raise ReaderClosed()

        if self.starting_data:
            data = self.starting_data
            self.starting_data = None
            return data

        return self.stream.read(block_size or self.block_size)

    def _fillbuff(self):
        while self.empty():
            if not self.decompressor:
                self._process_read(self._read_raw())
                return

            # current member is done, continue with next one, if any
            if self.decompressor.eof:
                if not self.read_next_member():
                    self._process_read(b'')
                    return

                continue

            data = self._read_raw()
            if not data:
                msg = 'Stream ended inside {0} member #{1}'
                raise UnexpectedEOF(msg.format(self.decomp_type, self.member_count))

            # decompressor may need more data before producing any output
            self._process_read(self._decompress(data))

    def _process_read(self, data):
        if not data:
            self.buff = None
            self.buff_size = 0
            return

        self.buff_size = len(data)
        self.num_read += self.buff_size
        self.buff = BytesIO(data)

    def _decompress(self, data):
        try:
            return self.decompressor.decompress(data)
        except (zlib.error, OSError, EOFError, ValueError) as e:
            msg = 'Invalid {0} member #{1}: {2}'
            raise CorruptContainer(msg.format(self.decomp_type, self.member_count, e))

    def read_next_member(self):
        """
        If the current member is complete, start the next one.
        Return False if the raw stream is exhausted at the member boundary.
        Raise CorruptContainer if the data after the member is not another member.
        """
        if not self.decompressor or not self.decompressor.eof:
            return False

        magic = self.MEMBER_MAGIC[self.decomp_type]
        data = self.decompressor.unused_data

        while len(data) < len(magic):
            buff = self._read_raw(len(magic) - len(data))
            if not buff:
                break

            data += buff

        if not data:
            return False

        if data[:len(magic)] != magic:
            msg = 'Data after {0} member #{1} is not a {0} member: {2!r}'
            raise CorruptContainer(msg.format(self.decomp_type, self.member_count,
                                              data[:16]))

        self.starting_data = data
        self._init_decomp(self.decomp_type)
        logger.debug('starting %s member #%d', self.decomp_type, self.member_count)
        return True

    def read(self, length=None):
        """
        Fill bytes and read some number of bytes
        (up to length if specified)
        <= length bytes may be read if reached the end of input
        if at buffer boundary, will attempt to read again until
        specified length is read
        """
        all_buffs = []
        while length is None or length > 0:
            self._fillbuff()
            if self.empty():
                break

            buff = self.buff.read(length)
            all_buffs.append(buff)
            if length:
                length -= len(buff)

        return b''.join(all_buffs)

    def readline(self, length=None):
        """
        Fill buffer and read a full line from the buffer
        (up to specified length, if provided)
        If no newline found at end, try filling buffer again in case
        at buffer boundary.
        """
        if length == 0:
            return b''

        self._fillbuff()

        if self.empty():
            return b''

        chunk = self.buff.readline(length)
        linebuff = chunk

        # we may be at a boundary
        while not linebuff.endswith(b'\n'):
            if length:
                length -= len(chunk)
                if length <= 0:
                    break

            self._fillbuff()

            if self.empty():
                break

            chunk = self.buff.readline(length)
            linebuff += chunk

        return linebuff

    def tell(self):
        """
        number of (decompressed) bytes consumed so far
        """
        rem = 0
        if self.buff:
            rem = self.buff_size - self.buff.tell()

        return self.num_read - rem

    def empty(self):
        return not self.buff or self.buff.tell() >= self.buff_size

    def close(self):
        """
        Release the wrapped stream. The stream itself is left open,
        it belongs to the caller
        """
        self.stream = None
        self.buff = None
        self.starting_data = None

        self.close_decompressor()

    def close_decompressor(self):
        self.decompressor = None

    @classmethod
    def get_supported_decompressors(cls):
        return cls.DECOMPRESSORS.keys()


#=================================================================
class DecompressingBufferedReader(BufferedReader):
    """
    A BufferedReader which defaults to gzip decompression,
    (unless different type specified)
    """
    def __init__(self, *args, **kwargs):
        if 'decomp_type' not in kwargs:
            kwargs['decomp_type'] = 'gzip'
        super(DecompressingBufferedReader, self).__init__(*args, **kwargs)
