# transport.py

import logging
import socket
import threading


class UDPTransport(object):
    """
    Datagram transport used by the Client.

    Every send is a single non-blocking sendto(); the outcome is handed to
    the callback as (error, nbytes). Without a callback, failures are logged.

    A host given by name is looked up by sendto() itself, which blocks for
    the lookup; pass an address, or use cache_dns so that sends after the
    one-time resolution go straight to the address.
    """

    def __init__(self):
        self.log = logging.getLogger("tagstatsd.transport")
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.setblocking(False)

    def send(self, data, port, host, callback=None):
        """
        Squirt one datagram over UDP
        """
        try:
            sent = self.sock.sendto(data, (host, port))
        except (OSError, OverflowError, UnicodeError) as e:
            if callback is None:
                self.log.exception("unable to send %r to %s:%s", data, host, port)
                return
            callback(e, None)
            return

        if callback is not None:
            callback(None, sent)

    def close(self):
        self.sock.close()


class ThreadedResolver(object):
    """
    Resolves a hostname once on a daemon thread and reports
    callback(error, address).
    """

    def __init__(self):
        self.log = logging.getLogger("tagstatsd.transport")

    def resolve(self, hostname, callback):
        thread = threading.Thread(target=self._lookup, args=(hostname, callback),
                                  name="tagstatsd-resolver")
        thread.daemon = True
        thread.start()
        return thread

    def _lookup(self, hostname, callback):
        try:
            address = socket.gethostbyname(hostname)
        except OSError as e:
            callback(e, None)
            return
        self.log.debug("resolved %s to %s", hostname, address)
        callback(None, address)
