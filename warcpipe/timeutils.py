"""
Utility functions for WARC-Date timestamps

>>> datetime_to_iso_date(datetime.datetime(2013, 12, 26, 10, 11, 12))
'2013-12-26T10:11:12Z'

>>> datetime_to_iso_date(datetime.datetime(2013, 12, 26, 10, 11, 12, 456789), use_micros=True)
'2013-12-26T10:11:12.456789Z'

>>> datetime_to_iso_date(datetime.datetime(2013, 12, 26, 10, 11, 12, 456789))
'2013-12-26T10:11:12Z'

>>> iso_date_to_datetime('2013-12-26T10:11:12Z')
datetime.datetime(2013, 12, 26, 10, 11, 12)
"""

import datetime

ISO_DT = '%Y-%m-%dT%H:%M:%SZ'
ISO_DT_MICROS = '%Y-%m-%dT%H:%M:%S.%fZ'


def datetime_to_iso_date(the_datetime, use_micros=False):
    if use_micros:
        return the_datetime.strftime(ISO_DT_MICROS)

    return the_datetime.strftime(ISO_DT)


def iso_date_to_datetime(string):
    if '.' in string:
        return datetime.datetime.strptime(string, ISO_DT_MICROS)

    return datetime.datetime.strptime(string, ISO_DT)


def utcnow():
    """ naive UTC datetime for the current moment
    """
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)
