import tempfile

from io import BytesIO

from warcpipe.recordloader import WARCRecord
from warcpipe.timeutils import datetime_to_iso_date, utcnow
from warcpipe.warcheaders import WARCHeaders, make_warc_id


#=================================================================
class RecordBatch(object):
    """
    Records to be written together, sharing one capture timestamp,
    used as WARC-Date for records which have none
    """
    def __init__(self, records=None, capture_time=None):
        self.records = list(records or [])
        self.capture_time = capture_time

    def add_record(self, record):
        self.records.append(record)

    def __iter__(self):
        return iter(self.records)

    def __len__(self):
        return len(self.records)


#=================================================================
class RecordBuilder(object):
    WARC_1_0 = 'WARC/1.0'
    WARC_1_1 = 'WARC/1.1'

    # default warc version
    WARC_VERSION = WARC_1_0

    DEFAULT_RECORD_TYPE = 'resource'

    WARCINFO_CONTENT_TYPE = 'application/warc-fields'

    def __init__(self, warc_version=None):
        self.warc_version = self._parse_warc_version(warc_version)

    def create_warcinfo_record(self, filename, info):
        warc_headers = WARCHeaders(protocol=self.warc_version)
        warc_headers.add_header('WARC-Type', 'warcinfo')
        if filename:
            warc_headers.add_header('WARC-Filename', filename)
        warc_headers.add_header('WARC-Date', self.curr_warc_date())
        warc_headers.add_header('Content-Type', self.WARCINFO_CONTENT_TYPE)

        warcinfo = BytesIO()
        for name, value in info.items():
            line = name + ': ' + str(value) + '\r\n'
            warcinfo.write(line.encode('utf-8'))

        length = warcinfo.tell()
        warcinfo.seek(0)

        return WARCRecord(warc_headers, warcinfo, length)

    def create_warc_record(self, record_type=None, payload=None,
                           warc_headers_dict=None):
        """
        Create a record from a dict (or list of pairs) of headers and a payload,
        either bytes or a stream. Headers not given are filled in on write
        """
        warc_headers = WARCHeaders(warc_headers_dict, protocol=self.warc_version)

        if record_type:
            warc_headers.replace_header('WARC-Type', record_type)

        length = None
        if payload is None:
            payload = BytesIO()
            length = 0
        elif isinstance(payload, bytes):
            length = len(payload)
            payload = BytesIO(payload)

        return WARCRecord(warc_headers, payload, length)

    def ensure_headers(self, rec_headers):
        """
        Set WARC-Date, WARC-Type and WARC-Record-ID, only where absent
        """
        if not rec_headers.get_header('WARC-Date'):
            rec_headers.replace_header('WARC-Date', self.curr_warc_date())

        if not rec_headers.get_header('WARC-Type'):
            rec_headers.replace_header('WARC-Type', self.DEFAULT_RECORD_TYPE)

        if not rec_headers.get_header('WARC-Record-ID'):
            rec_headers.replace_header('WARC-Record-ID', self._make_warc_id())

    def curr_warc_date(self):
        use_micros = (self.warc_version >= self.WARC_1_1)
        return self._make_warc_date(use_micros=use_micros)

    def _parse_warc_version(self, version):
        if not version:
            return self.WARC_VERSION

        version = str(version)
        if version.startswith('WARC/'):
            return version

        return 'WARC/' + version

    @classmethod
    def _make_warc_id(cls):
        return make_warc_id()

    @classmethod
    def _make_warc_date(cls, use_micros=False):
        return datetime_to_iso_date(utcnow(), use_micros=use_micros)

    @staticmethod
    def _create_temp_file():
        return tempfile.SpooledTemporaryFile(max_size=512*1024)
