"""Matcher: precedence, backtracking, locale gating and the Match helper."""

import pytest

from smartpath import Match, as_route_map, match

ARTICLES = as_route_map(
    {
        "home": "",
        "articles": {
            "path": "articles",
            "article": {"path": ":articleId", "tab1": "tab1"},
        },
    }
)


def test_example_tree_matches():
    found = match("/", ARTICLES)
    assert found.route is ARTICLES.home
    assert found.params == {}

    found = match("/articles/abc", ARTICLES)
    assert found.route is ARTICLES.articles.article
    assert found.params == {"articleId": "abc"}

    found = match("/articles/abc/tab1", ARTICLES)
    assert found.route is ARTICLES.articles.article.tab1
    assert found.params == {"articleId": "abc"}


def test_parent_terminates_when_children_cannot_consume_nothing():
    found = match("/articles", ARTICLES)
    assert found.route is ARTICLES.articles
    assert found.params == {}


def test_unknown_paths_return_none():
    assert match("/nope", ARTICLES) is None
    assert match("/articles/abc/tab2", ARTICLES) is None
    assert match("/articles/abc/tab1/extra", ARTICLES) is None


def test_slashes_are_normalised():
    assert match("articles//abc/", ARTICLES).route is ARTICLES.articles.article
    assert match("", ARTICLES).route is ARTICLES.home


def test_static_beats_wildcard_and_empty():
    routes = as_route_map({"a": "*", "b": "b", "c": ""})
    found = match("/b", routes)
    assert found.route is routes.b
    assert found.params == {}

    found = match("/anything", routes)
    assert found.route is routes.a
    assert found.params == {"*": "anything"}

    assert match("/", routes).route is routes.c


def test_wildcard_captures_nested_rest():
    routes = as_route_map({"files": {"path": "files", "rest": "*"}})
    found = match("/files/a/b/c.txt", routes)
    assert found.route is routes.files.rest
    assert found.params == {"*": "a/b/c.txt"}
    assert match("/files", routes).route is routes.files


def test_static_sibling_beats_param_regardless_of_declaration_order():
    routes = as_route_map({"item": ":id", "new": "new"})
    assert match("/new", routes).route is routes.new
    assert match("/42", routes).params == {"id": "42"}


def test_backtracks_into_next_sibling():
    routes = as_route_map(
        {
            "user": {"path": "users/:id", "edit": "edit"},
            "report": {"path": ":kind/:id/report"},
        }
    )
    assert routes.user.score > routes.report.score
    found = match("/users/7/report", routes)
    assert found.route is routes.report
    assert found.params == {"kind": "users", "id": "7"}

    found = match("/users/7/edit", routes)
    assert found.route is routes.user.edit


def test_readable_precedence():
    routes = as_route_map(
        {
            "docs": {
                "path": "docs",
                "page": ":slug",
                "latest": "latest",
                "catch": "*",
            }
        }
    )
    assert match("/docs/latest", routes).route is routes.docs.latest
    assert match("/docs/intro", routes).params == {"slug": "intro"}
    found = match("/docs/a/b", routes)
    assert found.route is routes.docs.catch
    assert found.params == {"*": "a/b"}


def test_empty_pattern_child_wins_over_parent():
    routes = as_route_map({"section": {"path": "section", "index": "", "detail": ":id"}})
    assert match("/section", routes).route is routes.section.index
    assert match("/section/9", routes).route is routes.section.detail


def test_empty_pattern_child_chain():
    routes = as_route_map({"root": {"path": "", "inner": {"path": "", "leaf": ""}}})
    assert match("/", routes).route is routes.root.inner.leaf


def test_param_affixes_match():
    routes = as_route_map({"page": "pages/:name.html"})
    found = match("/pages/about.html", routes)
    assert found.route is routes.page
    assert found.params == {"name": "about"}
    assert match("/pages/about.txt", routes) is None


LOCALIZED = as_route_map(
    {"x": {"path": ":language", "y": {"path": {"en": "y", "nl": "z"}}}}
)


def test_locale_variant_selected_by_captured_param():
    found = match("/en/y", LOCALIZED)
    assert found.route is LOCALIZED.x.y
    assert found.params == {"language": "en"}
    assert match("/nl/z", LOCALIZED).route is LOCALIZED.x.y


def test_wrong_locale_literal_does_not_match():
    assert match("/nl/y", LOCALIZED) is None
    assert match("/de/y", LOCALIZED) is None


def test_localized_route_without_locale_ancestor_never_matches():
    routes = as_route_map({"y": {"path": {"en": "y", "nl": "z"}}})
    assert match("/y", routes) is None


def test_custom_locale_param():
    routes = as_route_map(
        {"x": {"path": ":lang", "about": {"path": {"en": "about", "it": "chi-siamo"}}}},
        locale_param="lang",
    )
    assert match("/it/chi-siamo", routes).params == {"lang": "it"}


@pytest.mark.parametrize(
    "path",
    ["/", "/articles", "/articles/abc", "/articles/abc/tab1"],
)
def test_round_trip(path):
    found = match(path, ARTICLES)
    built = found.route({**found.params, "unrelated": "ignored"})
    assert match(built, ARTICLES).route is found.route


def test_round_trip_wildcard_and_locale():
    routes = as_route_map({"a": "*", "b": "b"})
    found = match("/x/y/z", routes)
    assert found.route(found.params) == "/x/y/z"
    found = match("/en/y", LOCALIZED)
    assert match(found.route(found.params), LOCALIZED).route is found.route


def test_match_requires_route_map():
    with pytest.raises(TypeError, match="as_route_map"):
        match("/", {"home": ""})
    with pytest.raises(TypeError, match="path must be a string"):
        match(None, ARTICLES)


def test_route_map_match_method():
    assert ARTICLES.match("/articles").route is ARTICLES.articles


def test_match_unpacks_and_compares():
    found = match("/articles/abc", ARTICLES)
    params, route = found
    assert params == {"articleId": "abc"}
    assert route is ARTICLES.articles.article
    assert found == Match({"articleId": "abc"}, ARTICLES.articles.article)


def test_match_select_nearest_ancestor():
    found = match("/articles/abc/tab1", ARTICLES)
    selected = found.select(ARTICLES.home, ARTICLES.articles)
    assert selected.route is ARTICLES.articles
    assert selected.params == {"articleId": "abc"}
    assert found.select(ARTICLES.articles.article.tab1).route is found.route
    assert found.select(ARTICLES.home) is None


def test_match_is_unhashable():
    found = match("/articles/abc", ARTICLES)
    with pytest.raises(TypeError):
        hash(found)
    with pytest.raises(TypeError):
        {found}
