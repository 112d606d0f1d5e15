import logging
import queue
import tempfile
import threading

from warcpipe.archivedetect import detect_compression, NONE
from warcpipe.bufferedreaders import BufferedReader
from warcpipe.exceptions import ArchiveLoadFailed, ReaderClosed, UnexpectedEOF
from warcpipe.limitreader import ContentReader
from warcpipe.recordloader import WARCRecord, WARCRecordLoader
from warcpipe.utils import BUFF_SIZE, copy_stream

SEQUENTIAL = 'sequential'
ASYNCHRONOUS = 'asynchronous'

DEFAULT_PREFETCH = 4

SPOOL_SIZE = 512 * 1024

logger = logging.getLogger(__name__)


# ============================================================================
def open_archive(fileobj, mode=SEQUENTIAL, **kwargs):
    """ Return a record reader over fileobj for the given mode,
    SEQUENTIAL or ASYNCHRONOUS
    """
    if mode == SEQUENTIAL:
        return ArchiveIterator(fileobj, **kwargs)
    elif mode == ASYNCHRONOUS:
        return AsyncArchiveIterator(fileobj, **kwargs)

    raise ValueError('Unknown read mode: ' + str(mode))


# ============================================================================
class BaseArchiveReader(object):
    """ Iterator and context manager protocol shared by both read modes.
    Subclasses implement read_record() and close()
    """
    mode = None

    def read_record(self):  #pragma: no cover
        raise NotImplementedError()

    def close(self):  #pragma: no cover
        raise NotImplementedError()

    def __iter__(self):
        return self

    def __next__(self):
        record = self.read_record()
        if record is None:
            raise StopIteration

        return record

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


# ============================================================================
class ArchiveIterator(BaseArchiveReader):
    """ Read records from an uncompressed, gzip or bzip2 WARC, one at a time,
    on the calling thread.

    The container is detected from the first bytes of the stream.
    read_record() returns the next record, or None at the end of the
    stream. The record content is read lazily from the shared stream;
    whatever is left unread is skipped, and the record trailer checked,
    when the next record is requested.

    Any error is fatal: it is raised again by every later read_record().
    """
    mode = SEQUENTIAL

    def __init__(self, fileobj, block_size=BUFF_SIZE, check_digests=False):
        self.fh = fileobj

        self.loader = WARCRecordLoader(check_digests=check_digests)

        self.compression, peeked = detect_compression(fileobj)

        if self.compression == NONE:
            decomp_type = None
        else:
            decomp_type = self.compression

        self.reader = BufferedReader(fileobj,
                                     block_size=block_size,
                                     decomp_type=decomp_type,
                                     starting_data=peeked)

        self.record = None
        self.record_count = 0
        self.err = None
        self.at_end = False
        self.closed = False

    def read_record(self):
        if self.closed:
            raise ReaderClosed()

        if self.err:
            raise self.err.with_traceback(None)

        if self.at_end:
            return None

        try:
            self._finish_record()
            self.record = self.loader.parse_record_stream(self.reader)

        except EOFError:
            self.at_end = True
            logger.debug('end of stream after %d records', self.record_count)
            return None

        except ArchiveLoadFailed as e:
            self.err = e
            self.record = None
            raise

        self.record_count += 1
        return self.record

    def _finish_record(self):
        """ skip unread content of current record, then consume its trailer
        """
        if not self.record:
            return

        raw_stream = self.record.raw_stream
        if raw_stream.error:
            raise raw_stream.error.with_traceback(None)

        raw_stream.skip_remaining()

        self.loader.read_trailer(self.reader)
        self.record = None

    def close(self):
        self.closed = True
        self.record = None
        if self.reader:
            self.reader.close()
            self.reader = None


# ============================================================================
class PrefetchedContentReader(ContentReader):
    """ Record content buffered by the prefetch worker.

    If reading the content failed in the worker, the bytes read up to
    the failure are returned first, and then the original error is raised.
    """
    def __init__(self, buff, length, deferred_error=None):
        super(PrefetchedContentReader, self).__init__(buff, length)
        self.deferred_error = deferred_error

    def _guarded(self, func, length, is_line):
        try:
            return super(PrefetchedContentReader, self)._guarded(func, length, is_line)
        except UnexpectedEOF:
            if not self.deferred_error:
                raise

            self.error = self.deferred_error

        raise self.error.with_traceback(None)

    def close(self):
        self.stream.close()


# ============================================================================
class _EndOfRecords(object):
    """ Terminal queue item: end of stream, or the error which ended it
    """
    def __init__(self, err=None):
        self.err = err

    def result(self):
        if self.err:
            raise self.err.with_traceback(None)

        return None


# ============================================================================
class AsyncArchiveIterator(BaseArchiveReader):
    """ Read records with a background worker thread running ahead of
    the consumer.

    The worker parses records, buffers their content and pushes them into
    a queue holding at most `prefetch` records, blocking while the queue is
    full. The end of the stream, or the first error, is pushed as a single
    terminal item. The records and the terminal condition are the same as
    with ArchiveIterator on the same input.
    """
    mode = ASYNCHRONOUS

    POLL_INTERVAL = 0.1

    def __init__(self, fileobj, block_size=BUFF_SIZE, check_digests=False,
                 prefetch=DEFAULT_PREFETCH):

        if prefetch < 1:
            raise ValueError('prefetch must be at least 1')

        self.inner = ArchiveIterator(fileobj,
                                     block_size=block_size,
                                     check_digests=check_digests)

        self.compression = self.inner.compression

        self.queue = queue.Queue(maxsize=prefetch)
        self.stop_event = threading.Event()

        self.terminal = None
        self.record_count = 0
        self.closed = False

        self.worker = threading.Thread(target=self._run,
                                       name='warcpipe-prefetch',
                                       daemon=True)
        self.worker.start()

    def read_record(self):
        if self.closed:
            raise ReaderClosed()

        if self.terminal:
            return self.terminal.result()

        item = self.queue.get()
        if isinstance(item, _EndOfRecords):
            self.terminal = item
            return item.result()

        self.record_count += 1
        return item

    def close(self):
        if self.closed:
            return

        self.closed = True
        self.stop_event.set()

        # unblock worker if waiting on a full queue
        self._drain()
        self.worker.join()
        self._drain()

    def _drain(self):
        while True:
            try:
                item = self.queue.get_nowait()
            except queue.Empty:
                return

            if not isinstance(item, _EndOfRecords):
                item.raw_stream.close()

    def _run(self):
        logger.debug('prefetch worker started')
        try:
            while not self.stop_event.is_set():
                try:
                    record = self.inner.read_record()
                except ArchiveLoadFailed as e:
                    self._put(_EndOfRecords(e))
                    return

                if record is None:
                    self._put(_EndOfRecords())
                    return

                if not self._put(self._buffer_record(record)):
                    return

        except Exception as e:
            logger.debug('prefetch worker failed: %r', e)
            self._put(_EndOfRecords(e))

        finally:
            self.inner.close()
            logger.debug('prefetch worker stopped after %d records',
                         self.inner.record_count)

    def _buffer_record(self, record):
        buff = tempfile.SpooledTemporaryFile(max_size=SPOOL_SIZE)
        err = None
        try:
            copy_stream(record.raw_stream, buff)
        except ArchiveLoadFailed as e:
            err = e

        buff.seek(0)

        # the inner reader keeps the original record to finish it
        return WARCRecord(record.rec_headers,
                          PrefetchedContentReader(buff, record.length, err),
                          record.length,
                          record.digest_checker)

    def _put(self, item):
        """ put item on queue, waiting while full, unless stopped.
        Return False if stopped
        """
        while not self.stop_event.is_set():
            try:
                self.queue.put(item, timeout=self.POLL_INTERVAL)
                return True
            except queue.Full:
                continue

        if not isinstance(item, _EndOfRecords):
            item.raw_stream.close()

        return False
