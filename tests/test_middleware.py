import sys
from unittest import mock

from tagstatsd import Client, RouteTimer
from tagstatsd.middleware import ENVIRON_KEY


def make_app(parts):
    def app(environ, start_response):
        for part in parts:
            environ[ENVIRON_KEY](part)
        start_response("200 OK", [("Content-Type", "text/plain")])
        return [b"ok"]
    return app


def test_route_timer_reports_parts_and_total():
    client = mock.Mock()
    start_response = mock.Mock()
    timer = RouteTimer(make_app(["db", "render"]), client, "http.request")

    body = timer({"PATH_INFO": "/users/:id"}, start_response)

    assert body == [b"ok"]
    start_response.assert_called_once_with("200 OK", [("Content-Type", "text/plain")], None)
    assert client.histogram.call_args_list == [
        mock.call("http.request", mock.ANY, tags=["route:/users/*id", "part:db"]),
        mock.call("http.request", mock.ANY, tags=["route:/users/*id", "part:render"]),
        mock.call("http.request.total", mock.ANY, tags=["route:/users/*id"]),
    ]
    for call in client.histogram.call_args_list:
        assert isinstance(call[0][1], int)


def test_route_timer_without_parts_reports_total_only():
    client = mock.Mock()
    timer = RouteTimer(make_app([]), client, "http.request")

    timer({"PATH_INFO": "/"}, mock.Mock())

    client.histogram.assert_called_once_with("http.request.total", mock.ANY, tags=["route:/"])


def test_measure_route_wraps_app(transport):
    client = Client(transport=transport)
    app = client.measure_route("http.request")(make_app(["db"]))

    with mock.patch("tagstatsd.middleware.time.perf_counter", side_effect=[1.0, 1.25, 1.5]):
        app({"PATH_INFO": "/ping"}, mock.Mock())

    assert transport.lines() == [
        "http.request:250|h|#route:/ping,part:db",
        "http.request.total:500|h|#route:/ping",
    ]


def test_route_timer_reports_once_when_start_response_is_repeated():
    client = mock.Mock()
    start_response = mock.Mock()

    def failing_app(environ, start_response):
        start_response("200 OK", [])
        try:
            raise RuntimeError("render failed")
        except RuntimeError:
            start_response("500 Internal Server Error", [], sys.exc_info())
        return [b"error"]

    RouteTimer(failing_app, client, "http.request")({"PATH_INFO": "/x"}, start_response)

    assert start_response.call_count == 2
    client.histogram.assert_called_once_with("http.request.total", mock.ANY, tags=["route:/x"])
