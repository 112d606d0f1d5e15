from warcpipe.exceptions import ArchiveLoadFailed, UnexpectedEOF
from warcpipe.utils import BUFF_SIZE


# ============================================================================
class LimitReader(object):
    """
    A reader which will not read more than specified limit
    """

    def __init__(self, stream, limit):
        self.stream = stream
        self.limit = limit

    def _update(self, buff):
        length = len(buff)
        self.limit -= length
        return buff

    def _clamp(self, length):
        if length is not None and length >= 0:
            return min(length, self.limit)

        return self.limit

    def read(self, length=None):
        length = self._clamp(length)
        if length == 0:
            return b''

        buff = self.stream.read(length)
        return self._update(buff)

    def readline(self, length=None):
        length = self._clamp(length)
        if length == 0:
            return b''

        buff = self.stream.readline(length)
        return self._update(buff)


# ============================================================================
class ContentReader(LimitReader):
    """
    Content block of a single record: exactly `length` bytes of the
    shared record stream.

    If the stream ends before `length` bytes are read, UnexpectedEOF is
    raised. Any error raised while reading is remembered and raised again
    by all later reads, and reported through `error` so that the record
    pipeline can stop.

    Closing the reader does not close the shared stream: the unread
    remainder is skipped when the next record is read.
    """

    def __init__(self, stream, length):
        super(ContentReader, self).__init__(stream, length)
        self.length = length
        self.error = None

    def read(self, length=None):
        return self._guarded(super(ContentReader, self).read, length, False)

    def readline(self, length=None):
        return self._guarded(super(ContentReader, self).readline, length, True)

    def _guarded(self, func, length, is_line):
        if self.error:
            raise self.error.with_traceback(None)

        expected = self._clamp(length)
        try:
            buff = func(length)
            if len(buff) < expected and not (is_line and buff.endswith(b'\n')):
                msg = 'Content ended after {0} of {1} bytes'
                raise UnexpectedEOF(msg.format(self.tell(), self.length))

        except ArchiveLoadFailed as e:
            self.error = e
            raise

        return buff

    def skip_remaining(self):
        """
        Read and discard the rest of the content, return number of bytes skipped
        """
        skipped = 0
        while self.limit > 0:
            skipped += len(self.read(BUFF_SIZE))

        return skipped

    def is_consumed(self):
        return self.limit == 0

    def tell(self):
        return self.length - self.limit

    def close(self):
        pass
