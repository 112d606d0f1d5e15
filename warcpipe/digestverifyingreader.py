import base64
import logging

from warcpipe.limitreader import ContentReader
from warcpipe.utils import to_native_str, Digester

logger = logging.getLogger(__name__)


# ============================================================================
class DigestChecker(object):
    """
    Result of a block digest check: passed is None if nothing was
    checked, otherwise True or False
    """
    def __init__(self):
        self._passed = None
        self._problems = []

    @property
    def passed(self):
        return self._passed

    @passed.setter
    def passed(self, value):
        self._passed = value

    @property
    def problems(self):
        return self._problems

    def problem(self, reason):
        self._problems.append(reason)
        self._passed = False
        logger.warning(reason)


# ============================================================================
class DigestVerifyingReader(ContentReader):
    """
    A content reader which computes the digest of the content as it is
    read, and checks it against the WARC-Block-Digest once all of the
    content has been read
    """

    def __init__(self, stream, length, block_digest=None, digest_checker=None):
        super(DigestVerifyingReader, self).__init__(stream, length)

        self.block_digest = block_digest
        self.digest_checker = digest_checker or DigestChecker()
        self.block_digester = None

        if block_digest:
            try:
                algo, _ = parse_digest(block_digest)
                self.block_digester = Digester(algo)
            except ValueError:
                self.digest_checker.problem('unknown hash algorithm name in block digest: ' +
                                            block_digest)

        if self.block_digester and length == 0:
            self._check()

    def _update(self, buff):
        super(DigestVerifyingReader, self)._update(buff)

        if self.block_digester:
            self.block_digester.update(buff)

            if self.limit == 0:
                self._check()

        return buff

    def _check(self):
        if compare_digest(self.block_digester, self.block_digest):
            self.digest_checker.passed = True
        else:
            self.digest_checker.problem('block digest failed: {0}'.format(self.block_digest))

        # prevent double-fire
        self.block_digester = None


# ============================================================================
def check_digest(digest, data):
    """
    Compute the digest of data with the algorithm named by digest,
    return True if it matches digest
    """
    algo, _ = parse_digest(digest)
    digester = Digester(algo)
    digester.update(data)
    return compare_digest(digester, digest)


def compare_digest(digester, digest):
    '''
    The WARC standard does not recommend a digest algorithm and appears to
    allow any encoding from RFC3548. Digests are compared in base32 form,
    converting from base16 or base64 as needed. Returns None if there is
    nothing to compare.
    '''
    if not digester or not digest:
        return None

    our_value = to_native_str(base64.b32encode(digester.digester.digest()), 'ascii')
    warc_algo, warc_value = parse_digest(digest)

    if digester.type_.lower() != warc_algo.lower():
        return False

    try:
        warc_b32 = _to_b32(digester, warc_value)
    except ValueError:
        return False

    return our_value == warc_b32


def _to_b32(digester, value):
    '''
    Convert value to base 32, given that it's supposed to be an
    encoding of the same number of bytes as the digester output
    '''
    size = digester.digester.digest_size
    b32_len = len(base64.b32encode(b'\0' * size))

    if len(value) == b32_len:
        return value.upper()

    if len(value) == size * 2:
        binary = base64.b16decode(value, casefold=True)
    else:
        binary = _b64_wrapper(value)

    return to_native_str(base64.b32encode(binary), 'ascii')


base64_url_filename_safe_alt = b'-_'


def _b64_wrapper(value):
    if '-' in value or '_' in value:
        return base64.b64decode(value, altchars=base64_url_filename_safe_alt)
    else:
        return base64.b64decode(value)


def parse_digest(digest):
    algo, sep, value = digest.partition(':')
    if sep == ':':
        return algo, value
    else:
        raise ValueError('could not parse digest algorithm out of ' + digest)
