"""Tests for pagination links and the response envelope."""
import pytest

from odataquery.links import (
    Link,
    LinkNames,
    ResponseBuilder,
    link_to_first_page,
    link_to_last_page,
    link_to_next_page,
    link_to_previous_page,
    pagination_links,
)

URL = "http://host/odata/timesheets?$orderBy=Id&$skip=10&$top=5"
UNPAGED = "http://host/odata/timesheets?$orderBy=Id&$top=5&"


class TestPaginationLinks:
    def test_first(self):
        link = link_to_first_page(URL, 10)
        assert link.relation == LinkNames.FIRST_PAGE == "first"
        assert link.url == "http://host/odata/timesheets?$orderBy=Id&$skip=0&$top=5"
        assert link.type == "GET"

    def test_previous(self):
        assert link_to_previous_page(URL, 10, 5).url.endswith("$skip=5&$top=5")
        assert link_to_previous_page(URL.replace("$skip=10", "$skip=3"), 3, 5).url.endswith("$skip=0&$top=5")
        assert link_to_previous_page(URL, None, 5) is None
        assert link_to_previous_page(URL, 10, None) is None

    def test_next(self):
        assert link_to_next_page(URL, 10, 5).url.endswith("$skip=15&$top=5")
        assert link_to_next_page(UNPAGED, None, 5).url == UNPAGED + "$skip=5"
        assert link_to_next_page(URL, 10, None) is None

    def test_last(self):
        assert link_to_last_page(URL, 10, 5, 23).url.endswith("$skip=4&$top=5")
        assert link_to_last_page(UNPAGED, None, 5, 23).url == UNPAGED + "$skip=4"
        assert link_to_last_page(URL, 10, None, 23) is None
        assert link_to_last_page(URL, 10, 0, 23) is None

    def test_method_is_carried(self):
        assert link_to_next_page(URL, 10, 5, "POST").type == "POST"

    def test_pagination_links_order(self):
        links = pagination_links(URL, 10, 5, 23)
        assert [l.relation for l in links] == ["first", "prev", "next", "last"]

    def test_pagination_links_without_take(self):
        links = pagination_links(URL, None, None, 23)
        assert links[0] is not None
        assert links[1:] == [None, None, None]


class TestLink:
    def test_serializes_by_alias(self):
        link = Link(relation="self", url="http://x", type="GET")
        assert link.model_dump(by_alias=True) == {"rel": "self", "href": "http://x", "type": "GET"}

    def test_accepts_aliases(self):
        assert Link(rel="base", href="http://x").url == "http://x"


class TestResponseBuilder:
    def test_data_and_count(self):
        response = ResponseBuilder().with_data([1, 2]).with_count(2, 9).build()
        assert response == {"data": [1, 2], "count": {"response": 2, "total": 9}}

    def test_links(self):
        response = (
            ResponseBuilder()
            .with_data([])
            .with_link_to_self(URL, "GET")
            .with_links_for_pagination(URL, "GET", 10, 5, 23)
            .build()
        )
        assert [l["rel"] for l in response["links"]] == ["self", "first", "prev", "next", "last"]
        assert response["links"][0]["href"] == URL

    def test_missing_pages_are_dropped(self):
        response = ResponseBuilder().with_links_for_pagination(URL, "GET", None, None, 0).build()
        assert [l["rel"] for l in response["links"]] == ["first"]

    def test_links_only_when_added(self):
        assert "links" not in ResponseBuilder().with_data([]).build()
        assert ResponseBuilder().with_link(None).build() == {"links": []}

    def test_extra_links_and_properties(self):
        response = (
            ResponseBuilder()
            .with_link(Link(rel=LinkNames.BASE, href="http://host/odata"))
            .with_links([Link(rel="related", href="http://host/odata/people")])
            .with_property("entity", "timesheets")
            .build()
        )
        assert response["entity"] == "timesheets"
        assert [l["rel"] for l in response["links"]] == ["base", "related"]

    def test_duplicate_property(self):
        with pytest.raises(KeyError):
            ResponseBuilder().with_data([]).with_data([])
