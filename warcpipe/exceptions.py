# ============================================================================
class ArchiveLoadFailed(Exception):
    """ Base class for all errors raised while reading or writing
    WARC records
    """
    def __init__(self, reason, filename=''):
        if filename:
            msg = filename + ': ' + str(reason)
        else:
            msg = str(reason)

        super(ArchiveLoadFailed, self).__init__(msg)
        self.msg = msg


# ============================================================================
class UnreadableStream(ArchiveLoadFailed):
    """ The container magic could not be read from the input stream
    """


# ============================================================================
class CorruptContainer(ArchiveLoadFailed):
    """ Decompression failed within a gzip or bzip2 member
    """


# ============================================================================
class MalformedFrame(ArchiveLoadFailed):
    """ Record framing is invalid: version line, header line or trailer
    """


# ============================================================================
class MissingContentLength(ArchiveLoadFailed):
    """ Content-Length header is absent or not a non-negative integer
    """


# ============================================================================
class UnexpectedEOF(ArchiveLoadFailed):
    """ Stream ended in the middle of a record or compressed member
    """


# ============================================================================
class ReaderClosed(ArchiveLoadFailed):
    def __init__(self, reason='reader is closed', filename=''):
        super(ReaderClosed, self).__init__(reason, filename)
