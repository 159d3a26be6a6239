import json

from searchops.ops.results import BulkInsertResult, BulkItem, SearchResult
from searchops.search.query import RootQuery


def test_search_result_maps_sources_and_accessors() -> None:
    payload = {
        "took": 3,
        "timed_out": False,
        "_shards": {"total": 1, "successful": 1, "skipped": 0, "failed": 0},
        "hits": {
            "total": {"value": 2, "relation": "eq"},
            "hits": [{"_id": "a", "_source": {"n": 1}}, {"_id": "b", "_source": {"n": 2}}],
        },
    }
    res = SearchResult.create(payload, lambda s: s["n"] * 10)

    assert res.total() == 2
    assert res.size() == 2
    assert res.id_list() == ["a", "b"]
    assert res.values() == [10, 20]
    assert res.first() == 10 and res.last() == 20
    assert res.scroll_id() is None
    assert res.shards is not None and res.shards.successful == 1
    assert res.is_complete() and not res.is_empty()


def test_completion_counts_hits_from_earlier_pages() -> None:
    res = SearchResult.create({"hits": {"total": 5, "hits": [{"_id": "x", "_source": {}}]}})
    assert not res.is_complete()
    res.offset = 4
    assert res.is_complete()
    assert res.is_empty_or_complete()


def test_missing_hits_is_empty_not_complete() -> None:
    res = SearchResult.create({"took": 1})
    assert res.is_empty()
    assert not res.is_complete()
    assert res.is_empty_or_complete()
    assert res.first() is None and res.values() == []


def test_bulk_result_coerces_wire_strings_and_drops_items_when_shallow() -> None:
    payload = {"took": "12", "errors": "true", "items": [{"index": {"_id": "1", "status": 201}}]}
    shallow = BulkInsertResult.create(dict(payload), deep=False)
    deep = BulkInsertResult.create(dict(payload), deep=True)

    assert shallow.took == 12 and shallow.has_errors() is True
    assert shallow.items is None
    assert deep.get_items()[0].id() == "1"


def test_merge_sums_time_and_any_error_taints() -> None:
    ok = BulkInsertResult(took=5, errors=False)
    bad = BulkInsertResult(took=7, errors=True)

    assert ok.merge(ok).has_errors() is False
    assert ok.merge(bad).has_errors() is True
    assert bad.merge(ok).has_errors() is True
    assert ok.merge(bad).taken() == 12
    assert ok.merge(None).took == 5


def test_merge_concatenates_items() -> None:
    a = BulkInsertResult.create({"took": 1, "errors": False, "items": [{"index": {"_id": "1", "status": 201}}]}, deep=True)
    b = BulkInsertResult.create({"took": 1, "errors": False, "items": [{"index": {"_id": "2", "status": 201}}]}, deep=True)
    assert [i.id() for i in a.merge(b).get_items()] == ["1", "2"]
    assert a.items is not None and len(a.items) == 1


def test_bulk_item_failure_detection() -> None:
    ok = BulkItem.model_validate({"update": {"_id": "1", "status": 200}})
    bad = BulkItem.model_validate({"index": {"_id": "2", "status": 400, "error": {"type": "mapper_parsing_exception"}}})
    assert not ok.failed() and ok.status() == 200
    assert bad.failed() and bad.id() == "2"


def test_root_query_body_and_ttl() -> None:
    q = RootQuery.match_all().starting_at(20).limit(10).with_scroll_ttl(0)
    assert json.loads(q.json()) == {"from": 20, "size": 10, "query": {"match_all": {}}}
    assert q.scroll_ttl_or_default() == 60
    assert q.with_scroll_ttl(90).scroll_ttl_or_default() == 90
    assert "scroll_ttl" not in q.body()
