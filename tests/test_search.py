"""
Tests for mapstate/search.py: substring suggestions
"""
import pytest

from mapstate.search import SearchIndex

from conftest import make_project


@pytest.fixture()
def firms_pool():
    return [
        make_project("1", title="Project One", firm_name="Sample Firm 1"),
        make_project("2", title="Project Two", firm_name="Sample Firm 2"),
        make_project("3", title="Project Three", firm_name="Other Co"),
    ]


class TestSuggest:
    def test_matches_firm_name_in_pool_order(self, firms_pool):
        result = SearchIndex().suggest("sample", firms_pool)
        assert [p.id for p in result] == ["1", "2"]

    def test_empty_query_suggests_nothing(self, firms_pool):
        assert SearchIndex().suggest("", firms_pool) == []

    def test_matches_title_case_insensitive(self, firms_pool):
        assert [p.id for p in SearchIndex().suggest("THREE", firms_pool)] == ["3"]

    def test_no_match(self, firms_pool):
        assert SearchIndex().suggest("zzz", firms_pool) == []

    def test_limit(self, firms_pool):
        assert len(SearchIndex(limit=1).suggest("project", firms_pool)) == 1


class TestSearchState:
    def test_update_and_clear(self, firms_pool):
        index = SearchIndex()
        assert [p.id for p in index.update("co", firms_pool)] == ["3"]
        assert index.query == "co"
        assert index.clear()
        assert index.query == ""
        assert index.suggestions == []

    def test_clear_when_empty_is_noop(self):
        assert not SearchIndex().clear()

    def test_choose_sets_title_and_hides_list(self, firms_pool):
        index = SearchIndex()
        index.update("sample", firms_pool)
        index.choose(firms_pool[1])
        assert index.query == "Project Two"
        assert index.suggestions == []

    def test_refresh_recomputes_open_list(self, firms_pool):
        index = SearchIndex()
        index.update("sample", firms_pool)
        assert [p.id for p in index.refresh(firms_pool[1:])] == ["2"]

    def test_refresh_after_choose_stays_closed(self, firms_pool):
        index = SearchIndex()
        index.update("sample", firms_pool)
        index.choose(firms_pool[0])
        assert index.refresh(firms_pool) == []
