import pytest
import requests
from unittest.mock import MagicMock
from client import WatchlistApiClient
from crawler import CrawlState
from letterboxd import LetterboxdConnectionError, LetterboxdHTTPError


def api_response(status_code=200, payload=None, reason="OK"):
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 400
    resp.reason = reason
    if payload is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = payload
    return resp


def make_client(*responses):
    session = MagicMock()
    session.get.side_effect = list(responses)
    return WatchlistApiClient("http://service/", session=session), session


def test_fetch_page_calls_endpoint():
    client, session = make_client(api_response(payload={"movies": ["Heat"], "hasNextPage": True}))
    page = client.fetch_page("a b", 2)
    assert page.titles == ["Heat"]
    args, kwargs = session.get.call_args
    assert args[0] == "http://service/api/watchlist"
    assert kwargs['params'] == {"username": "a b", "page": "2"}

def test_fetch_page_error_body_message():
    client, _ = make_client(api_response(403, {"error": "Failed to fetch from Letterboxd: Forbidden"}, "FORBIDDEN"))
    with pytest.raises(LetterboxdHTTPError) as info:
        client.fetch_page("alice", 1)
    assert str(info.value) == "Failed to fetch from Letterboxd: Forbidden"
    assert info.value.status_code == 403

def test_fetch_page_error_without_body():
    client, _ = make_client(api_response(502, None, "BAD GATEWAY"))
    with pytest.raises(LetterboxdHTTPError, match=r"Failed to fetch watchlist \(Status: 502\)"):
        client.fetch_page("alice", 1)

def test_fetch_page_error_in_ok_response():
    client, _ = make_client(api_response(200, {"error": "Something odd"}))
    with pytest.raises(LetterboxdHTTPError, match="Something odd"):
        client.fetch_page("alice", 1)

def test_fetch_page_connection_error():
    session = MagicMock()
    session.get.side_effect = requests.exceptions.ConnectionError("refused")
    client = WatchlistApiClient("http://service", session=session)
    with pytest.raises(LetterboxdConnectionError, match="refused"):
        client.fetch_page("alice", 1)

def test_crawl_through_api():
    client, _ = make_client(
        api_response(payload={"movies": ["A", "B"], "hasNextPage": True}),
        api_response(payload={"movies": ["C"], "hasNextPage": True}),
        api_response(payload={"movies": [], "hasNextPage": False}),
    )
    progress = []
    crawl = client.crawl("alice", progress.append)
    assert crawl.titles == ["A", "B", "C"]
    assert crawl.complete is True
    assert [p.total for p in progress] == [2, 3]

def test_crawl_through_api_partial():
    client, _ = make_client(
        api_response(payload={"movies": ["A"], "hasNextPage": True}),
        api_response(500, {"error": "Internal Server Error"}, "INTERNAL SERVER ERROR"),
    )
    crawl = client.crawl("alice")
    assert crawl.titles == ["A"]
    assert crawl.state is CrawlState.PARTIAL

def test_crawl_through_api_fatal():
    client, _ = make_client(api_response(400, {"error": "Username is required"}, "BAD REQUEST"))
    with pytest.raises(LetterboxdHTTPError, match="Username is required"):
        client.crawl("alice")
