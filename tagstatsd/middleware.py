# middleware.py

import logging
import time


ENVIRON_KEY = "tagstatsd.time"


def _millis(start, end):
    return int(round((end - start) * 1000.0))


class RouteTimer(object):
    """
    WSGI middleware reporting request timings as histograms.

    Applications mark the end of each part of the request with
    environ['tagstatsd.time']('db'). When the response headers go out,
    every part is sent as key with tags route:<path>,part:<name> and the
    whole request as key.total with tag route:<path>.
    """

    def __init__(self, app, client, key):
        self.app = app
        self.client = client
        self.key = key
        self.log = logging.getLogger("tagstatsd.middleware")

    def __call__(self, environ, start_response):
        route = environ.get("PATH_INFO", "").replace(":", "*")
        started = time.perf_counter()
        measurements = []
        last = [started]
        reported = [False]

        def mark(part):
            now = time.perf_counter()
            measurements.append((part, _millis(last[0], now)))
            last[0] = now

        def timed_start_response(status, headers, exc_info=None):
            # only the first call, a retry with exc_info is not reported again
            if not reported[0]:
                reported[0] = True
                self._report(route, measurements, _millis(started, time.perf_counter()))
            return start_response(status, headers, exc_info)

        environ[ENVIRON_KEY] = mark
        return self.app(environ, timed_start_response)

    def _report(self, route, measurements, total):
        for part, diff in measurements:
            self.client.histogram(self.key, diff, tags=["route:%s" % route, "part:%s" % part])

        self.log.debug("%s: %d ms <route=%s>", self.key, total, route)
        self.client.histogram(self.key + ".total", total, tags=["route:%s" % route])
