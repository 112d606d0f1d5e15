import pytest

from warcpipe.archiveiterator import SEQUENTIAL, ASYNCHRONOUS


@pytest.fixture(params=['none', 'gzip', 'bzip2'])
def compression(request):
    return request.param


@pytest.fixture(params=[SEQUENTIAL, ASYNCHRONOUS])
def mode(request):
    return request.param
