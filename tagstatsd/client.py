# client.py

import logging
import random
from collections import namedtuple

from tagstatsd import registry
from tagstatsd.middleware import RouteTimer
from tagstatsd.transport import ThreadedResolver, UDPTransport


ClientConfig = namedtuple(
    "ClientConfig",
    ["host", "port", "prefix", "suffix", "globalize", "cache_dns", "mock"],
    defaults=["localhost", 8125, "", "", False, False, False],
)


def _negate(value):
    """
    Negates a counter delta. Numeric strings are converted first; anything
    that is not a number falls back to -1.
    """
    if value is None:
        return -1
    if isinstance(value, (int, float)):
        return -value
    for convert in (int, float):
        try:
            return -convert(value)
        except (TypeError, ValueError):
            continue
    return -1


class PendingBatch(object):
    """
    Aggregates the completions of one fan-out send.

    The callback is dropped from the batch the first time it fires, so it
    runs at most once whatever order the completions arrive in.
    """

    def __init__(self, total, callback):
        self.total = total
        self.completed = 0
        self.sent_bytes = 0
        self.errored = False
        self.callback = callback

    def on_send(self, error, nbytes):
        self.completed += 1
        if error is not None:
            self.errored = True
            self._fire(error, None)
            return

        if self.errored:
            return
        self.sent_bytes += nbytes
        if self.completed == self.total:
            self._fire(None, self.sent_bytes)

    def _fire(self, error, nbytes):
        callback, self.callback = self.callback, None
        if callback is not None:
            callback(error, nbytes)


# Sends statistics to the stats daemon over UDP
class Client(object):

    def __init__(self, host='localhost', port=8125, prefix='', suffix='',
                 globalize=False, cache_dns=False, mock=False,
                 transport=None, resolver=None):
        """
        Create a new StatsD client.
        * host: the host where statsd is listening, defaults to localhost
        * port: the port where statsd is listening, defaults to 8125
        * prefix, suffix: prepended/appended to every stat name
        * globalize: publish this client through tagstatsd.registry
        * cache_dns: look the host up once and send to the address afterwards
        * mock: never send anything, report every send as successful

        >>> from tagstatsd import Client
        >>> stats_client = Client('localhost', 8125, prefix='myapp.')
        """
        port = int(port or 8125)
        if not 0 < port <= 65535:
            raise ValueError("port must be between 1 and 65535, got %r" % port)

        self.config = ClientConfig(
            host=host or 'localhost',
            port=port,
            prefix=prefix or '',
            suffix=suffix or '',
            globalize=bool(globalize),
            cache_dns=bool(cache_dns),
            mock=bool(mock),
        )
        self.host = self.config.host
        self.port = self.config.port
        self.prefix = self.config.prefix
        self.suffix = self.config.suffix
        self.mock = self.config.mock
        self.log = logging.getLogger("tagstatsd.client")
        self.transport = transport if transport is not None else UDPTransport()

        if self.config.cache_dns:
            resolver = resolver if resolver is not None else ThreadedResolver()
            resolver.resolve(self.config.host, self._on_resolved)

        if self.config.globalize:
            registry.publish(self)

    @classmethod
    def from_config(cls, config, transport=None, resolver=None):
        """
        Create a client from a ClientConfig or a mapping of its fields.

        >>> stats_client = Client.from_config({'host': 'statsd', 'port': 8125})
        """
        if not isinstance(config, ClientConfig):
            config = ClientConfig(**config)
        return cls(*config, transport=transport, resolver=resolver)

    def _on_resolved(self, error, address):
        if error is not None:
            self.log.debug("unable to resolve %s, keeping it as is: %s",
                           self.config.host, error)
            return
        self.host = address

    def timing(self, stat, time, sample_rate=None, tags=None, callback=None):
        """
        Log timing information, in milliseconds, for one or more stats
        >>> statsd_client.timing('some.time', 500)
        """
        self.send_all(stat, time, 'ms', sample_rate, tags, callback)

    def increment(self, stat, value=1, sample_rate=None, tags=None, callback=None):
        """
        Increments one or more stats counters
        >>> statsd_client.increment('some.int')
        >>> statsd_client.increment(['some.int', 'other.int'], 10, sample_rate=0.5)
        """
        if value is None:
            value = 1
        self.send_all(stat, value, 'c', sample_rate, tags, callback)

    def decrement(self, stat, value=1, sample_rate=None, tags=None, callback=None):
        """
        Decrements one or more stats counters
        >>> statsd_client.decrement('some.int')
        >>> statsd_client.decrement('some.int', '5')
        """
        self.send_all(stat, _negate(value), 'c', sample_rate, tags, callback)

    def histogram(self, stat, value, sample_rate=None, tags=None, callback=None):
        self.send_all(stat, value, 'h', sample_rate, tags, callback)

    def gauge(self, stat, value, sample_rate=None, tags=None, callback=None):
        self.send_all(stat, value, 'g', sample_rate, tags, callback)

    def set(self, stat, value, sample_rate=None, tags=None, callback=None):
        """
        Counts unique occurrences of value
        >>> statsd_client.set('users.seen', 'user-42')
        """
        self.send_all(stat, value, 's', sample_rate, tags, callback)

    unique = set

    def send_all(self, stats, value, metric_type, sample_rate=None, tags=None, callback=None):
        """
        Sends value under every name in stats, calling back once all of them
        have been sent or on the first error.
        """
        if not isinstance(stats, (list, tuple)):
            self.send(stats, value, metric_type, sample_rate, tags, callback)
            return

        if not stats:
            if callback is not None:
                callback(None, 0)
            return

        on_send = None
        if callback is not None:
            on_send = PendingBatch(len(stats), callback).on_send

        for stat in stats:
            self.send(stat, value, metric_type, sample_rate, tags, on_send)

    def encode(self, stat, value, metric_type, sample_rate=None, tags=None):
        """
        Builds the line for one stat, or returns None if it was sampled out
        >>> statsd_client.encode('hits', 1, 'c', tags=['route:/x'])
        'hits:1|c|#route:/x'
        """
        line = "%s%s%s:%s|%s" % (self.prefix, stat, self.suffix, value, metric_type)

        if sample_rate is not None and sample_rate < 1:
            if random.random() >= sample_rate:
                return None
            line += "|@%s" % sample_rate

        if isinstance(tags, str):
            tags = [tags]
        if tags:
            line += "|#%s" % ",".join(str(tag) for tag in tags)

        return line

    def send(self, stat, value, metric_type, sample_rate=None, tags=None, callback=None):
        line = self.encode(stat, value, metric_type, sample_rate, tags)
        if line is None:
            return

        # mock clients report success without touching the network
        if self.mock:
            if callback is not None:
                callback(None, 0)
            return

        # lone surrogates in names or tags become '?'
        self.transport.send(line.encode("utf-8", "replace"), self.port, self.host, callback)

    def measure_route(self, key):
        """
        Returns a decorator wrapping a WSGI application in a RouteTimer
        >>> app = statsd_client.measure_route('http.request')(app)
        """
        def wrap(app):
            return RouteTimer(app, self, key)
        return wrap

    def close(self):
        """
        Close the underlying socket. Nothing can be sent afterwards.
        """
        self.transport.close()
