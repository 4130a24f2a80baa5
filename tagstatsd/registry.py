# registry.py

"""
Process-wide slot for a shared Client.

Nothing is published unless asked for: either call publish() with a client
or construct the client with globalize=True.

>>> from tagstatsd import Client, registry
>>> client = registry.publish(Client(mock=True))
>>> registry.get_client().increment('some.int')
"""

_client = None


def publish(client):
    global _client
    _client = client
    return client


def get_client():
    return _client


def clear():
    global _client
    _client = None
