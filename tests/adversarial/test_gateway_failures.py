"""Adversarial tests for the read path — dead gateways, garbage pages, odd references.

A routing transport sits in front of the in-process node so individual
gateways can be taken down (503 or connect timeout) per host.
"""

from __future__ import annotations

import httpx
import pytest

from swarmjot.bridge.local_node import LocalBeeNode
from swarmjot.core.article_codec import ENVELOPE_SCRIPT_ID, ContentMalformedError, extract
from swarmjot.core.engine import ContentEngine
from swarmjot.core.fetcher import ContentUnavailableError

LOCAL_HOST = "localhost"
PUBLIC_HOST = "download.gateway.ethswarm.org"


class Router:
    """Forwards to ``node`` unless the request's host has been taken down."""

    def __init__(self, node: LocalBeeNode) -> None:
        self.node = node
        self.down: dict[str, str] = {}
        self.hosts: list[str] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        host = request.url.host
        self.hosts.append(host)
        mode = self.down.get(host)
        if mode == "timeout":
            raise httpx.ConnectTimeout("timed out", request=request)
        if mode == "503":
            return httpx.Response(503, json={"message": "gateway down"})
        return self.node.handle(request)


@pytest.fixture
def router(node) -> Router:
    return Router(node)


@pytest.fixture
def routed_engine(config, store, router) -> ContentEngine:
    client = httpx.AsyncClient(transport=httpx.MockTransport(router.handle))
    return ContentEngine(config, http_client=client, store=store)


# ---------------------------------------------------------------------------
# Test: gateway failover
# ---------------------------------------------------------------------------


class TestFailover:

    async def test_local_down_public_serves(self, routed_engine, router, make_content):
        reference = await routed_engine.publish_article(make_content())
        router.down[LOCAL_HOST] = "503"
        router.hosts.clear()

        article = await routed_engine.read_article(reference)
        assert article.title == "On Silence"
        assert router.hosts == [LOCAL_HOST, PUBLIC_HOST]

    async def test_timeout_treated_like_failure(self, routed_engine, router, make_content):
        reference = await routed_engine.publish_article(make_content())
        router.down[LOCAL_HOST] = "timeout"
        router.down[PUBLIC_HOST] = "timeout"

        article = await routed_engine.read_article(reference)
        assert article.title == "On Silence"
        assert router.hosts[-1] == "api.gateway.ethswarm.org"

    async def test_every_gateway_down(self, routed_engine, router, make_content):
        reference = await routed_engine.publish_article(make_content())
        router.node.healthy = False

        with pytest.raises(ContentUnavailableError) as excinfo:
            await routed_engine.read_article(reference)
        assert excinfo.value.reference == reference
        assert len(excinfo.value.attempted) == 4
        assert all(url.endswith(f"/bzz/{reference}/index.html") for url in excinfo.value.attempted)

    async def test_failures_are_not_cached(self, routed_engine, router, make_content):
        reference = await routed_engine.publish_article(make_content())
        router.node.healthy = False
        with pytest.raises(ContentUnavailableError):
            await routed_engine.read_article(reference)
        assert not routed_engine.fetcher.is_cached(reference, "text/html")

        router.node.healthy = True
        assert (await routed_engine.read_article(reference)).title == "On Silence"

    async def test_cached_content_survives_outage(self, routed_engine, router, make_content):
        reference = await routed_engine.publish_article(make_content())
        await routed_engine.read_article(reference)
        router.node.healthy = False
        router.hosts.clear()

        assert (await routed_engine.read_article(reference)).title == "On Silence"
        assert router.hosts == []

    async def test_prefetch_counts_only_successes(self, routed_engine, make_content):
        reference = await routed_engine.publish_article(make_content())
        cached = await routed_engine.fetcher.prefetch([reference, "d" * 64], "text/html")
        assert cached == 1


# ---------------------------------------------------------------------------
# Test: hostile content
# ---------------------------------------------------------------------------


class TestHostileContent:

    async def test_page_without_article_is_malformed(self, engine):
        reference = await engine.create_resource(
            "index.html", b"<html><body><p>nothing here</p></body></html>", "text/html"
        ).save()
        with pytest.raises(ContentMalformedError):
            await engine.read_article(reference)

    async def test_binary_served_as_page_is_malformed(self, engine):
        reference = await engine.create_resource(
            "index.html", bytes(range(256)), "text/html"
        ).save()
        with pytest.raises(ContentMalformedError):
            await engine.read_article(reference)

    async def test_script_injection_in_body_round_trips(self, engine, make_content):
        body = "</script><script>alert(1)</script>\n</pre><h1>forged</h1>"
        reference = await engine.publish_article(make_content(body=body))
        article = await engine.read_article(reference)
        assert article.body == body
        assert article.title == "On Silence"

    async def test_deeply_nested_envelope_falls_back_to_markup(self, engine):
        nested = "[" * 100_000 + "]" * 100_000
        page = (
            "<html><head><title>T</title>"
            f'<script type="application/ld+json" id="{ENVELOPE_SCRIPT_ID}">{nested}</script>'
            '</head><body><pre class="markdown-source">body</pre></body></html>'
        )
        reference = await engine.create_resource("index.html", page.encode(), "text/html").save()
        article = await engine.read_article(reference)
        assert article.title == "T"
        assert article.body == "body"

    def test_deeply_nested_json_is_malformed(self):
        with pytest.raises(ContentMalformedError):
            extract("[" * 100_000 + "]" * 100_000, "application/json")


# ---------------------------------------------------------------------------
# Test: reference spellings
# ---------------------------------------------------------------------------


class TestReferenceSpellings:

    @pytest.mark.parametrize("spelling", ["bzz://{}", "  {}  ", " bzz://{} ", "{}/"])
    async def test_spellings_resolve_to_the_same_article(self, engine, make_content, spelling):
        reference = await engine.publish_article(make_content())
        article = await engine.read_article(spelling.format(reference))
        assert article.title == "On Silence"

    async def test_unknown_reference(self, engine):
        with pytest.raises(ContentUnavailableError):
            await engine.read_article("d" * 64)
