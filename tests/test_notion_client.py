"""Unit tests for notion_pull.notion_client.NotionDownloader.

The SDK client is replaced by a MagicMock; responses mimic the Notion API's
paginated list shape (``results``/``has_more``/``next_cursor``).
"""

from unittest.mock import MagicMock

import httpx
import pytest
from notion_client import APIResponseError, Client
from notion_client.errors import APIErrorCode

from builders import raw_block, raw_page, text
from notion_pull.exceptions import (
    NoDataSourceError,
    PartialObjectError,
    RemoteFetchError,
    ResourceNotFoundError,
)
from notion_pull.models import ResourceKind
from notion_pull.notion_client import NotionDownloader


def api_error(code):
    """Build an APIResponseError without depending on its constructor signature."""
    error = APIResponseError.__new__(APIResponseError)
    error.code = code
    error.status = 404
    return error


def listing(results, next_cursor=None):
    return {
        "object": "list",
        "results": results,
        "has_more": next_cursor is not None,
        "next_cursor": next_cursor,
    }


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def gateway(client):
    return NotionDownloader("secret", client=client)


class TestResolveKind:
    def test_page(self, gateway, client):
        client.pages.retrieve.return_value = raw_page("p1", "Page")
        assert gateway.resolve_kind("p1") is ResourceKind.PAGE
        client.databases.retrieve.assert_not_called()

    def test_falls_back_to_database(self, gateway, client):
        client.pages.retrieve.side_effect = api_error("validation_error")
        client.databases.retrieve.return_value = {"object": "database", "id": "d1"}
        assert gateway.resolve_kind("d1") is ResourceKind.DATABASE

    def test_neither_found(self, gateway, client):
        client.pages.retrieve.side_effect = api_error("object_not_found")
        client.databases.retrieve.side_effect = api_error("object_not_found")
        with pytest.raises(ResourceNotFoundError) as excinfo:
            gateway.resolve_kind("x1")
        assert excinfo.value.reference == "x1"


class TestDownloadPage:
    def test_full_page(self, gateway, client):
        client.pages.retrieve.return_value = raw_page("p1", "Notes")
        page = gateway.download_page("p1")
        assert page.title == "Notes"
        assert page.created_time == "2024-01-01T00:00:00.000Z"

    def test_partial_page(self, gateway, client):
        client.pages.retrieve.return_value = {"object": "page", "id": "p1"}
        with pytest.raises(PartialObjectError):
            gateway.download_page("p1")

    def test_not_found_is_mapped(self, gateway, client):
        client.pages.retrieve.side_effect = api_error("object_not_found")
        with pytest.raises(ResourceNotFoundError):
            gateway.download_page("p1")

    @pytest.mark.parametrize(
        "code", [APIErrorCode.ObjectNotFound, APIErrorCode.Unauthorized, APIErrorCode.RestrictedResource]
    )
    def test_sdk_error_code_members_are_mapped(self, gateway, client, code):
        client.pages.retrieve.side_effect = api_error(code)
        with pytest.raises(ResourceNotFoundError):
            gateway.download_page("p1")

    def test_not_found_response_from_real_client(self):
        """A 404 body travels through the SDK and comes out as ResourceNotFoundError."""

        def handler(request):
            return httpx.Response(
                404,
                json={"object": "error", "status": 404, "code": "object_not_found", "message": "nope"},
            )

        http_client = httpx.Client(transport=httpx.MockTransport(handler))
        downloader = NotionDownloader("secret", client=Client(auth="secret", client=http_client))

        with pytest.raises(ResourceNotFoundError) as excinfo:
            downloader.download_page("missing")
        assert excinfo.value.reference == "missing"

    def test_rate_limit_is_a_fetch_error(self, gateway, client):
        client.pages.retrieve.side_effect = api_error("rate_limited")
        with pytest.raises(RemoteFetchError) as excinfo:
            gateway.download_page("p1")
        assert excinfo.value.reference == "p1"

    def test_transport_error_is_a_fetch_error(self, gateway, client):
        client.pages.retrieve.side_effect = httpx.ConnectError("boom")
        with pytest.raises(RemoteFetchError):
            gateway.download_page("p1")


class TestDownloadDatabase:
    def configure(self, client, rows_pages):
        client.databases.retrieve.return_value = {
            "object": "database",
            "id": "d1",
            "title": [text("Tasks")],
            "data_sources": [{"id": "ds1", "name": "Tasks"}],
        }
        responses = iter(rows_pages)

        def request(path, method, query=None, body=None, **kwargs):
            if path == "data_sources/ds1":
                return {
                    "object": "data_source",
                    "id": "ds1",
                    "title": [text("Tasks")],
                    "properties": {
                        "Title": {"id": "title", "type": "title", "title": {}},
                        "Blocked by": {
                            "id": "rel",
                            "type": "relation",
                            "relation": {"database_id": "d2", "data_source_id": "ds2"},
                        },
                    },
                }
            if path == "data_sources/ds1/query":
                return next(responses)
            raise AssertionError(path)

        client.request.side_effect = request

    def test_schema_entries_and_pagination(self, gateway, client):
        self.configure(
            client,
            [
                listing([raw_page("e1", "One", title_property="Title")], next_cursor="c1"),
                listing([raw_page("e2", "Two", title_property="Title"), {"object": "data_source", "id": "x"}]),
            ],
        )

        database = gateway.download_database("d1")

        assert database.title == "Tasks"
        assert database.data_source_id == "ds1"
        assert list(database.schema) == ["Title", "Blocked by"]
        assert [entry.id for entry in database.entries] == ["e1", "e2"]
        second_query = client.request.call_args_list[-1]
        assert second_query.kwargs["body"]["start_cursor"] == "c1"
        assert second_query.kwargs["body"]["page_size"] == 100

    def test_relation_edges(self, gateway, client):
        self.configure(client, [listing([])])
        edges = gateway.download_database("d1").relation_edges()
        assert [(edge.property_name, edge.target_database_id) for edge in edges] == [("Blocked by", "d2")]

    def test_no_data_sources(self, gateway, client):
        client.databases.retrieve.return_value = {"object": "database", "id": "d1", "title": [], "data_sources": []}
        with pytest.raises(NoDataSourceError):
            gateway.download_database("d1")

    def test_partial_database(self, gateway, client):
        client.databases.retrieve.return_value = {"object": "database", "id": "d1"}
        with pytest.raises(PartialObjectError):
            gateway.download_database("d1")

    def test_untitled_database(self, gateway, client):
        self.configure(client, [listing([])])
        client.databases.retrieve.return_value["title"] = []
        assert gateway.download_database("d1").title == "Untitled Database"


class TestDownloadBlockTree:
    def test_recurses_into_children_but_not_child_resources(self, gateway, client):
        children = {
            "root": [
                listing(
                    [
                        raw_block("toggle", "t1", has_children=True, rich_text=[text("More")]),
                        raw_block("child_page", "cp1", has_children=True, title="Sub"),
                    ],
                    next_cursor="c1",
                ),
                listing([{"object": "block", "id": "partial"}, raw_block("paragraph", "p2", rich_text=[])]),
            ],
            "t1": [listing([raw_block("paragraph", "p1", rich_text=[text("inside")])])],
        }

        def list_children(block_id, start_cursor=None, page_size=None):
            return children[block_id].pop(0)

        client.blocks.children.list.side_effect = list_children

        blocks = gateway.download_block_tree("root")

        assert [block.id for block in blocks] == ["t1", "cp1", "p2"]
        assert [child.id for child in blocks[0].children] == ["p1"]
        assert blocks[1].children == []
        requested = [call.kwargs["block_id"] for call in client.blocks.children.list.call_args_list]
        assert "cp1" not in requested

    def test_nested_failure_names_the_pulled_resource(self, gateway, client):
        def list_children(block_id, start_cursor=None, page_size=None):
            if block_id == "root":
                return listing([raw_block("toggle", "t1", has_children=True, rich_text=[])])
            raise api_error("internal_server_error")

        client.blocks.children.list.side_effect = list_children

        with pytest.raises(RemoteFetchError) as excinfo:
            gateway.download_block_tree("root")
        assert excinfo.value.reference == "root"
