"""Dispatch helper: picking a handler for the matched route."""

import pytest

from smartpath import as_route_map, call_or_return, pick

ROUTES = as_route_map(
    {
        "home": "",
        "articles": {"path": "articles", "article": {"path": ":articleId", "tab1": "tab1"}},
    }
)


def test_no_match_returns_none():
    assert pick("/nowhere", (ROUTES, "default")) is None


def test_default_constant_is_returned():
    assert pick("/articles", (ROUTES, "default")) == "default"


def test_default_callable_receives_params_and_route():
    seen = []

    def handler(params, route):
        seen.append((params, route))
        return "called"

    assert pick("/articles/7", (ROUTES, handler)) == "called"
    assert seen == [({"articleId": "7"}, ROUTES.articles.article)]


def test_first_matching_override_wins():
    result = pick(
        "/articles/7/tab1",
        (ROUTES, "default"),
        (ROUTES.articles.article, "parent"),
        (ROUTES.articles.article.tab1, lambda params, route: f"tab1 of {params['articleId']}"),
        (ROUTES.articles.article.tab1, "shadowed"),
    )
    assert result == "tab1 of 7"


def test_override_matches_by_identity_not_ancestry():
    result = pick("/articles/7/tab1", (ROUTES, "default"), (ROUTES.articles, "articles"))
    assert result == "default"


def test_route_from_other_map_never_matches():
    other = as_route_map({"articles": "articles"})
    assert pick("/articles", (ROUTES, "default"), (other.articles, "other")) == "default"


def test_route_map_pick_method():
    assert ROUTES.pick("/", "default", (ROUTES.home, "home")) == "home"


def test_bad_table_rejected():
    with pytest.raises(TypeError, match="route_map, default_handler"):
        pick("/", ROUTES)
    with pytest.raises(TypeError, match="as_route_map"):
        pick("/", ({"home": ""}, "default"))


def test_bad_override_rejected():
    with pytest.raises(TypeError, match="pairs"):
        pick("/", (ROUTES, "default"), ROUTES.home)


def test_call_or_return():
    assert call_or_return(3, {}, ROUTES.home) == 3
    assert call_or_return(lambda params, route: route, {}, ROUTES.home) is ROUTES.home
    assert call_or_return(None, {}, ROUTES.home) is None


def test_list_pairs_accepted():
    assert pick("/articles/7", [ROUTES, "default"], [ROUTES.articles.article, "art"]) == "art"
    assert pick("/articles", [ROUTES, "default"], [ROUTES.articles.article, "art"]) == "default"


def test_pairs_must_have_two_items():
    with pytest.raises(TypeError, match="route_map, default_handler"):
        pick("/", [ROUTES])
    with pytest.raises(TypeError, match="pairs"):
        pick("/", [ROUTES, "default"], [ROUTES.home, "home", "extra"])
