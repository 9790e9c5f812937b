"""Reverse routing: building paths from routes and params."""

import pytest

from smartpath import ReverseRouteError, as_route_map

ROUTES = {
    "home": "",
    "articles": {
        "path": "articles",
        "article": {"path": ":articleId", "tab1": "tab1"},
    },
    "files": "a/:b/c/*",
    "localized": {
        "path": ":language",
        "about": {"path": {"en": "about", "nl": "over-ons"}},
        "page": {"path": {"en": "page/:slug", "nl": "pagina/:slug"}},
    },
}


@pytest.fixture
def routes():
    return as_route_map(ROUTES)


def test_builds_nested_path(routes):
    assert routes.articles() == "/articles"
    assert routes.articles.article({"articleId": "abc"}) == "/articles/abc"
    assert routes.articles.article.tab1(articleId="abc") == "/articles/abc/tab1"


def test_root_is_slash(routes):
    assert routes.home() == "/"
    assert routes.home.to_path({}) == "/"


def test_wildcard_suffix(routes):
    assert routes.files({"b": "X", "*": "tail/more"}) == "/a/X/c/tail/more"


def test_extra_params_are_ignored(routes):
    assert routes.articles.article({"articleId": "1", "other": "x"}) == "/articles/1"


def test_keyword_params_override_mapping(routes):
    assert routes.articles.article({"articleId": "1"}, articleId="2") == "/articles/2"


def test_param_named_params_passed_as_keyword():
    routes = as_route_map({"search": "search/:params", "page": {"path": ":page", "sub": ":params"}})
    assert routes.search(params="x") == "/search/x"
    assert routes.search({"params": "y"}) == "/search/y"
    assert routes.page.sub({"page": "1"}, params="z") == "/1/z"


def test_non_string_values_are_stringified(routes):
    assert routes.articles.article(articleId=42) == "/articles/42"


def test_missing_param_raises(routes):
    with pytest.raises(ReverseRouteError) as excinfo:
        routes.articles.article.tab1()
    assert excinfo.value.param == "articleId"
    assert excinfo.value.route is routes.articles.article.tab1
    assert "articles.article.tab1" in str(excinfo.value)


def test_empty_param_raises(routes):
    with pytest.raises(ReverseRouteError):
        routes.articles.article(articleId="")


def test_missing_wildcard_raises(routes):
    with pytest.raises(ReverseRouteError, match="'\\*'"):
        routes.files(b="X")


def test_reverse_errors_are_value_errors(routes):
    with pytest.raises(ValueError):
        routes.articles.article()


def test_locale_variants(routes):
    assert routes.localized.about(language="en") == "/en/about"
    assert routes.localized.about(language="nl") == "/nl/over-ons"
    assert routes.localized.page(language="nl", slug="x") == "/nl/pagina/x"


def test_unknown_locale_raises(routes):
    with pytest.raises(ReverseRouteError, match="Locale 'de'"):
        routes.localized.about(language="de")


def test_missing_locale_raises(routes):
    with pytest.raises(ReverseRouteError, match="Cannot determine which locale variant"):
        as_route_map({"about": {"path": {"en": "about"}}}).about()


def test_trailing_slash():
    routes = as_route_map(ROUTES, trailing_slash=True)
    assert routes.articles.article(articleId="1") == "/articles/1/"
    assert routes.home() == "/"


def test_custom_locale_param():
    routes = as_route_map(
        {"x": {"path": ":lang", "y": {"path": {"en": "y", "nl": "z"}}}}, locale_param="lang"
    )
    assert routes.x.y(lang="nl") == "/nl/z"
