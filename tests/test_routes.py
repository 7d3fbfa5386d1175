"""Tests for the route table and its Flask rule conversion."""

import pytest

from web.app import create_app
from web.routes import ROUTES, Route, _route, find_route, help_lines, join_path


class TestRouteTable:
    def test_fixed_table(self) -> None:
        table = {route.name: (route.pattern, set(route.methods)) for route in ROUTES}
        assert table == {
            "HELLOWORLD": ("helloworld/{data}", {"GET"}),
            "holamundo": ("holamundo", {"POST"}),
            "interlockstatus": ("interlockstatus", {"GET"}),
            "getslider": ("getslider", {"GET"}),
            "postslider": ("postslider", {"POST"}),
            "log": ("log", {"GET"}),
        }

    def test_names_unique_ignoring_case(self) -> None:
        keys = [route.key for route in ROUTES]
        assert len(keys) == len(set(keys))

    def test_find_route_is_case_insensitive(self) -> None:
        assert find_route("helloworld").name == "HELLOWORLD"
        assert find_route("LOG").name == "log"
        assert find_route("missing") is None
        assert find_route(None) is None


class TestRouteRules:
    def test_path_variable_becomes_werkzeug_placeholder(self) -> None:
        route = find_route("HELLOWORLD")
        assert route.variables == ["data"]
        assert route.rule() == "/helloworld/<data>"
        assert route.rule("/cws/") == "/cws/helloworld/<data>"

    def test_plain_rule(self) -> None:
        assert find_route("log").rule("") == "/log"

    def test_more_than_one_variable_rejected(self) -> None:
        with pytest.raises(ValueError):
            _route("bad", "a/{x}/{y}", "GET")

    def test_join_path(self) -> None:
        assert join_path("", "log") == "/log"
        assert join_path("cws", "/log") == "/cws/log"
        assert join_path("/a/b/", "c") == "/a/b/c"


def test_help_lines_list_every_route() -> None:
    lines = help_lines("cws")
    assert "[GET] /cws/helloworld/{data}" in lines
    assert "[POST] /cws/postslider" in lines
    assert len(lines) == len(ROUTES)


def test_route_is_hashable() -> None:
    route = Route(name="x", pattern="x", methods=frozenset({"GET"}))
    assert route in {route}


class TestCreateApp:
    def test_duplicate_path_rejected(self) -> None:
        routes = ROUTES + (_route("logagain", "log", "GET"),)
        with pytest.raises(ValueError, match="/log"):
            create_app("", lambda ctx: None, routes)

    def test_duplicate_name_rejected_ignoring_case(self) -> None:
        routes = ROUTES + (_route("LOG", "other", "GET"),)
        with pytest.raises(ValueError, match="LOG"):
            create_app("", lambda ctx: None, routes)

    def test_each_route_mounted_once(self) -> None:
        app = create_app("cws", lambda ctx: None)
        rules = [rule.rule for rule in app.url_map.iter_rules()]
        assert sorted(rules) == sorted(route.rule("cws") for route in ROUTES)
