import asyncio
import json

import httpx
import pytest

from search_proxy.forwarder import ForwardingError, SearchForwarder, UpstreamResponse

UPSTREAM = "https://search.example.test/ads/getads/"


def test_forward_sends_params_and_relays_response():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ads": [1, 2]})

    forwarder = SearchForwarder(UPSTREAM, transport=httpx.MockTransport(handler))
    result = asyncio.run(forwarder.forward({"keywords": "cachorro", "page": "2"}))

    assert isinstance(result, UpstreamResponse)
    assert result.status_code == 200
    assert json.loads(result.body) == {"ads": [1, 2]}
    assert result.media_type == "application/json"
    assert seen[0].method == "GET"
    assert seen[0].url.host == "search.example.test"
    assert seen[0].url.params["keywords"] == "cachorro"
    assert seen[0].url.params["page"] == "2"


def test_forward_keeps_repeated_params():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={})

    forwarder = SearchForwarder(UPSTREAM, transport=httpx.MockTransport(handler))
    asyncio.run(forwarder.forward({"tag": ["a", "b"]}))

    assert seen[0].url.params.get_list("tag") == ["a", "b"]


@pytest.mark.parametrize("status", [404, 500, 502, 503])
def test_forward_rejects_non_success_status(status):
    def handler(request):
        return httpx.Response(status, json={"trace": "db01.internal password=hunter2"})

    forwarder = SearchForwarder(UPSTREAM, transport=httpx.MockTransport(handler))

    with pytest.raises(ForwardingError) as excinfo:
        asyncio.run(forwarder.forward({"keywords": "cachorro"}))

    assert str(status) in str(excinfo.value)
    assert "hunter2" not in str(excinfo.value)


def test_forward_relays_success_body_and_content_type():
    def handler(request):
        return httpx.Response(200, content=b"plain results", headers={"content-type": "text/plain"})

    forwarder = SearchForwarder(UPSTREAM, transport=httpx.MockTransport(handler))
    result = asyncio.run(forwarder.forward({}))

    assert result.body == b"plain results"
    assert result.media_type == "text/plain"


def test_forward_rejects_redirect_loop():
    def handler(request):
        return httpx.Response(302, headers={"location": UPSTREAM})

    forwarder = SearchForwarder(UPSTREAM, max_redirects=2, transport=httpx.MockTransport(handler))

    with pytest.raises(ForwardingError):
        asyncio.run(forwarder.forward({}))


def test_forward_follows_redirects_server_side():
    def handler(request):
        if request.url.path == "/ads/getads":
            return httpx.Response(301, headers={"location": UPSTREAM})
        return httpx.Response(200, json={"ok": True})

    forwarder = SearchForwarder(
        "https://search.example.test/ads/getads", transport=httpx.MockTransport(handler)
    )
    result = asyncio.run(forwarder.forward({}))

    assert result.status_code == 200


def test_forward_raises_on_unreachable_backend():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    forwarder = SearchForwarder(UPSTREAM, transport=httpx.MockTransport(handler))

    with pytest.raises(ForwardingError):
        asyncio.run(forwarder.forward({"keywords": "gato"}))


def test_forward_raises_on_timeout():
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    forwarder = SearchForwarder(UPSTREAM, transport=httpx.MockTransport(handler))

    with pytest.raises(ForwardingError):
        asyncio.run(forwarder.forward({}))
