from tagstatsd.client import Client, ClientConfig, PendingBatch
from tagstatsd.middleware import RouteTimer
from tagstatsd.transport import ThreadedResolver, UDPTransport

StatsD = Client

__all__ = ['Client', 'ClientConfig', 'PendingBatch', 'RouteTimer', 'StatsD',
           'ThreadedResolver', 'UDPTransport']
