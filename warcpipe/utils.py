import base64
import binascii
import hashlib

BUFF_SIZE = 16384


# #===========================================================================
def to_native_str(value, encoding='utf-8'):
    if isinstance(value, bytes):
        return value.decode(encoding)

    return value


# #===========================================================================
def iter_stream(stream, block_size=BUFF_SIZE):
    while True:
        buf = stream.read(block_size)
        if not buf:
            return

        yield buf


# #===========================================================================
def copy_stream(stream, out, block_size=BUFF_SIZE):
    """ Copy stream into out, return number of bytes copied
    """
    total = 0
    for buf in iter_stream(stream, block_size):
        out.write(buf)
        total += len(buf)

    return total


# ============================================================================
class Digester(object):
    """ hashlib wrapper producing WARC style ``algo:value`` digest strings,
    base32 encoded by default, or base16 (lowercase hex) if requested
    """
    ENCODINGS = ('base32', 'base16')

    def __init__(self, type_='sha1', encoding='base32'):
        if encoding not in self.ENCODINGS:
            raise ValueError('unsupported digest encoding: ' + str(encoding))

        self.type_ = type_
        self.encoding = encoding
        self.digester = hashlib.new(type_)

    def update(self, buff):
        self.digester.update(buff)

    def digest_value(self):
        if self.encoding == 'base16':
            return to_native_str(binascii.hexlify(self.digester.digest()), 'ascii')

        return to_native_str(base64.b32encode(self.digester.digest()), 'ascii')

    def __str__(self):
        return self.type_ + ':' + self.digest_value()
