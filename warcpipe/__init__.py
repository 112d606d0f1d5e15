from warcpipe.archivedetect import NONE, GZIP, BZIP2, detect_compression
from warcpipe.archiveiterator import (ArchiveIterator, AsyncArchiveIterator,
                                      open_archive, SEQUENTIAL, ASYNCHRONOUS)
from warcpipe.exceptions import (ArchiveLoadFailed, UnreadableStream, CorruptContainer,
                                 MalformedFrame, MissingContentLength, UnexpectedEOF,
                                 ReaderClosed)
from warcpipe.recordbuilder import RecordBatch, RecordBuilder
from warcpipe.recordloader import WARCRecord
from warcpipe.warcheaders import WARCHeaders
from warcpipe.warcwriter import WARCWriter, BufferWARCWriter
