import pytest

from tagstatsd import Client, registry


class FakeTransport(object):
    """Records datagrams and holds their callbacks until released."""

    def __init__(self):
        self.sent = []
        self.pending = []
        self.closed = False

    def send(self, data, port, host, callback=None):
        self.sent.append((data, port, host))
        self.pending.append(callback)

    def complete(self, index, error=None, nbytes=None):
        callback = self.pending[index]
        if error is None and nbytes is None:
            nbytes = len(self.sent[index][0])
        callback(error, None if error is not None else nbytes)

    def lines(self):
        return [data.decode("utf-8") for data, _, _ in self.sent]

    def close(self):
        self.closed = True


class FakeResolver(object):

    def __init__(self):
        self.requests = []

    def resolve(self, hostname, callback):
        self.requests.append((hostname, callback))

    def answer(self, error=None, address=None):
        _, callback = self.requests[0]
        callback(error, address)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def client(transport):
    return Client(transport=transport)


@pytest.fixture(autouse=True)
def clean_registry():
    yield
    registry.clear()
