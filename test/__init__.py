import binascii
import bz2
import gzip
import hashlib


TEST_RECORD_COUNT = 10


# ============================================================================
def pseudo_random_bytes(size, seed=b'warcpipe'):
    """ deterministic, poorly compressible bytes
    """
    chunks = []
    block = seed
    total = 0
    while total < size:
        block = hashlib.sha256(block).digest()
        chunks.append(block)
        total += len(block)

    return b''.join(chunks)[:size]


def sample_contents():
    """ contents of the 10 test records: empty, binary, multi-line,
    framing-like bytes inside content, and a few larger than the read buffer
    """
    return [
        b'software: warcpipe test\r\nformat: WARC File Format 1.0\r\n',
        b'',
        b'Hello, World!',
        b'Multiline\nText\n',
        bytes(range(256)),
        b'\r\n\r\nWARC/1.0\r\nContent-Length: 5\r\n\r\n',
        pseudo_random_bytes(40000),
        b'x' * 70000,
        pseudo_random_bytes(17, seed=b'short'),
        b'last record\r\n',
    ]


def hex_digest(content, algo='sha1'):
    digest = hashlib.new(algo, content).digest()
    return algo + ':' + binascii.hexlify(digest).decode('ascii')


def make_record(index, content, headers=None, version=b'WARC/1.0'):
    """ serialize a single uncompressed record by hand
    """
    if headers is None:
        headers = [('WARC-Type', 'resource'),
                   ('WARC-Record-ID', '<urn:uuid:00000000-0000-4000-8000-%012d>' % index),
                   ('WARC-Date', '2020-01-01T00:00:%02dZ' % index),
                   ('WARC-Block-Digest', hex_digest(content)),
                   ('Content-Length', str(len(content)))]

    buff = version + b'\r\n'
    for name, value in headers:
        buff += (name + ': ' + value + '\r\n').encode('utf-8')

    return buff + b'\r\n' + content + b'\r\n\r\n'


def compress_member(data, compression):
    if compression == 'gzip':
        return gzip.compress(data)
    elif compression == 'bzip2':
        return bz2.compress(data)

    return data


def make_warc(compression='none', contents=None):
    """ 10 record WARC, each record compressed as its own member
    """
    if contents is None:
        contents = sample_contents()

    return b''.join(compress_member(make_record(i, content), compression)
                    for i, content in enumerate(contents))
