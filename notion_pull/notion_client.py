"""
Module for downloading content from Notion via API.
"""

import httpx
from notion_client import APIResponseError, Client
from notion_client.errors import HTTPResponseError, RequestTimeoutError
from notion_client.helpers import collect_paginated_api

from .constants import NOT_FOUND_ERROR_CODES, NOTION_API_VERSION, PAGE_SIZE
from .exceptions import (
    NoDataSourceError,
    PartialObjectError,
    RemoteFetchError,
    ResourceNotFoundError,
)
from .models import Block, Database, Page, ResourceKind, build_property_schema


class NotionDownloader:
    """Class for managing downloads of content from Notion."""

    def __init__(self, notion_token, client=None):
        """Initialize the Notion client."""
        self.notion = client or Client(auth=notion_token, notion_version=NOTION_API_VERSION)

    def _call(self, reference, func, *args, **kwargs):
        """Invoke an API function, translating SDK errors into our own."""
        try:
            return func(*args, **kwargs)
        except APIResponseError as e:
            # The SDK hands the code over as an APIErrorCode member
            code = getattr(e, "code", "")
            if getattr(code, "value", code) in NOT_FOUND_ERROR_CODES:
                raise ResourceNotFoundError(reference) from e
            raise RemoteFetchError(reference, e) from e
        except (HTTPResponseError, RequestTimeoutError, httpx.HTTPError) as e:
            raise RemoteFetchError(reference, e) from e

    def resolve_kind(self, reference):
        """Detect whether an ID refers to a page or a database."""
        try:
            self._call(reference, self.notion.pages.retrieve, page_id=reference)
            return ResourceKind.PAGE
        except (ResourceNotFoundError, RemoteFetchError):
            pass

        try:
            self._call(reference, self.notion.databases.retrieve, database_id=reference)
            return ResourceKind.DATABASE
        except (ResourceNotFoundError, RemoteFetchError) as e:
            raise ResourceNotFoundError(reference) from e

    def download_page(self, page_id):
        """Download the metadata (title, timestamps, properties) of a page."""
        page = self._call(page_id, self.notion.pages.retrieve, page_id=page_id)
        if "properties" not in page:
            raise PartialObjectError(page_id, "page")
        return Page.from_api(page)

    def download_database(self, database_id):
        """
        Download a database container, its primary data source and all entries.

        The container only lists its data sources; the property schema lives on
        the first data source, which is also what gets queried for rows.
        """
        database = self._call(
            database_id, self.notion.databases.retrieve, database_id=database_id
        )
        if "data_sources" not in database or "title" not in database:
            raise PartialObjectError(database_id, "database")
        if not database["data_sources"]:
            raise NoDataSourceError(database_id)

        data_source_id = database["data_sources"][0]["id"]
        data_source = self._call(
            database_id,
            self.notion.request,
            path=f"data_sources/{data_source_id}",
            method="GET",
        )
        if "properties" not in data_source or "title" not in data_source:
            raise PartialObjectError(data_source_id, "data source")

        return Database(
            id=database_id,
            title=Database.title_from_api(database),
            data_source_id=data_source_id,
            schema=build_property_schema(data_source["properties"]),
            entries=self.download_database_entries(database_id, data_source_id),
        )

    def download_database_entries(self, database_id, data_source_id):
        """Query every row of a data source, following pagination to the end."""

        def query(start_cursor=None, page_size=PAGE_SIZE):
            body = {"page_size": page_size}
            if start_cursor:
                body["start_cursor"] = start_cursor
            return self.notion.request(
                path=f"data_sources/{data_source_id}/query", method="POST", body=body
            )

        results = self._call(database_id, collect_paginated_api, query, page_size=PAGE_SIZE)
        return [
            Page.from_api(result)
            for result in results
            if result.get("object") == "page" and "properties" in result
        ]

    def download_block_tree(self, block_id, reference=None):
        """
        Download the children of a block or page, recursing into every child
        that has descendants of its own.

        Child pages and child databases are left unexpanded: they are separate
        resources pulled on their own. Fetch errors anywhere in the tree name
        ``reference``, the page or entry being pulled (``block_id`` by default).
        """
        reference = reference or block_id
        results = self._call(
            reference,
            collect_paginated_api,
            self.notion.blocks.children.list,
            block_id=block_id,
            page_size=PAGE_SIZE,
        )

        blocks = []
        for result in results:
            # Partial blocks carry no type
            if "type" not in result:
                continue
            block = Block.from_api(result)
            if block.has_children and not block.is_child_resource:
                block.children = self.download_block_tree(block.id, reference)
            blocks.append(block)
        return blocks
