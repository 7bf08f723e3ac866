"""Tests for building the hierarchy view and its diagnostics."""

from __future__ import annotations

from typing import Any

from gateway_hierarchy.core.address import BackendKind, NodeAddress, RouteKind
from gateway_hierarchy.core.hierarchy import BackendNode, ListenerNode, RouteNode, build_hierarchy
from gateway_hierarchy.core.validation import IssueLevel, count_hostnames


def _doc_with_listeners(port: int, *listeners: dict[str, Any], backends: list[Any] | None = None) -> dict[str, Any]:
    return {"binds": [{"port": port, "listeners": list(listeners)}], "backends": backends or []}


class TestBuildHierarchy:
    def test_empty_document(self) -> None:
        for document in (None, {}):
            tree = build_hierarchy(document)
            assert tree.binds == []
            assert tree.stats.total_binds == 0
            assert tree.stats.total_validation_errors == 0

    def test_stats(self, document: dict[str, Any]) -> None:
        stats = build_hierarchy(document).stats
        assert stats.total_binds == 2
        assert stats.total_listeners == 2
        assert stats.total_routes == 3
        assert stats.total_top_level_backends == 1
        assert stats.broken_backend_refs == 0
        assert stats.total_validation_errors == 0

    def test_total_routes_counts_both_kinds(self) -> None:
        document = {
            "binds": [
                {"port": 1, "listeners": [{"routes": [{}, {}]}, {"tcpRoutes": [{}]}]},
                {"port": 2, "listeners": [{"routes": [], "tcpRoutes": [{}, {}, {}]}]},
            ]
        }
        expected = sum(
            len(listener.get("routes") or []) + len(listener.get("tcpRoutes") or [])
            for bind in document["binds"]
            for listener in bind["listeners"]
        )
        assert build_hierarchy(document).stats.total_routes == expected == 6

    def test_top_level_collections(self, document: dict[str, Any]) -> None:
        tree = build_hierarchy(document)
        assert tree.top_level_backends == [{"name": "shared", "host": "10.0.0.2:80"}]
        assert tree.top_level_policies == [{"name": "cors"}]

    def test_http_routes_precede_tcp_routes(self) -> None:
        document = _doc_with_listeners(80, {"routes": [{"name": "h0"}, {"name": "h1"}], "tcpRoutes": [{"name": "t0"}]})
        routes = build_hierarchy(document).binds[0].listeners[0].routes
        assert [r.route["name"] for r in routes] == ["h0", "h1", "t0"]
        assert [(r.kind, r.category_index) for r in routes] == [
            (RouteKind.HTTP, 0),
            (RouteKind.HTTP, 1),
            (RouteKind.TCP, 0),
        ]
        assert routes[2].address == NodeAddress(port=80, listener_index=0, route_kind=RouteKind.TCP, route_index=0)
        assert routes[2].is_tcp

    def test_inherited_context(self, document: dict[str, Any]) -> None:
        route = build_hierarchy(document).binds[0].listeners[1].routes[0]
        assert route.port == 8080
        assert route.listener_name == "db"
        assert route.listener_protocol == "TCP"
        backend = route.backends[0]
        assert backend.port == 8080
        assert backend.listener_name == "db"
        assert backend.route_kind == RouteKind.TCP
        assert backend.kind == BackendKind.HOST
        assert str(backend.address) == "bind/8080/listener/1/tcproute/0/backend/0"

    def test_backend_kinds(self, document: dict[str, Any]) -> None:
        backends = build_hierarchy(document).binds[0].listeners[0].routes[0].backends
        assert [b.kind for b in backends] == [BackendKind.HOST, BackendKind.REFERENCE]

    def test_build_does_not_mutate_document(self, document: dict[str, Any]) -> None:
        snapshot = repr(document)
        build_hierarchy(document)
        assert repr(document) == snapshot


class TestFind:
    def test_find_each_level(self, document: dict[str, Any]) -> None:
        tree = build_hierarchy(document)
        assert tree.find(NodeAddress(port=9090)) is tree.binds[1]
        listener = tree.find(NodeAddress(port=8080, listener_index=1))
        assert isinstance(listener, ListenerNode)
        assert listener.entity["name"] == "db"
        route = tree.find(NodeAddress.parse("bind/8080/listener/1/tcproute/0"))
        assert isinstance(route, RouteNode)
        assert route.entity["name"] == "pg"
        backend = tree.find(NodeAddress.parse("bind/8080/listener/0/route/0/backend/1"))
        assert isinstance(backend, BackendNode)
        assert backend.entity == {"backend": "shared"}

    def test_find_missing(self, document: dict[str, Any]) -> None:
        tree = build_hierarchy(document)
        assert tree.find(NodeAddress(port=1)) is None
        assert tree.find(NodeAddress(port=8080, listener_index=5)) is None
        assert tree.find(NodeAddress.parse("bind/8080/listener/0/tcproute/0")) is None
        assert tree.find(NodeAddress.parse("bind/8080/listener/0/route/0/backend/9")) is None

    def test_first_bind_wins_on_duplicate_port(self) -> None:
        document = {"binds": [{"port": 80, "listeners": [{"name": "a"}]}, {"port": 80, "listeners": []}]}
        node = build_hierarchy(document).find(NodeAddress(port=80, listener_index=0))
        assert node is not None
        assert node.entity == {"name": "a"}

    def test_iter_nodes_order(self, document: dict[str, Any]) -> None:
        paths = [str(n.address) for n in build_hierarchy(document).iter_nodes()]
        assert paths[:4] == [
            "bind/8080",
            "bind/8080/listener/0",
            "bind/8080/listener/0/route/0",
            "bind/8080/listener/0/route/0/backend/0",
        ]
        assert paths[-1] == "bind/9090"


class TestValidation:
    def test_duplicate_hostname_warns_on_each_listener(self) -> None:
        document = _doc_with_listeners(
            9090,
            {"name": "a", "hostname": "api.example.com"},
            {"name": "b", "hostname": "api.example.com"},
        )
        tree = build_hierarchy(document)
        for listener in tree.binds[0].listeners:
            assert [i.level for i in listener.issues] == [IssueLevel.WARNING]
            assert "api.example.com" in listener.issues[0].message
            assert "port 9090" in listener.issues[0].message
        assert tree.stats.total_validation_errors == 2

    def test_same_hostname_on_different_ports_is_fine(self) -> None:
        document = {
            "binds": [
                {"port": 80, "listeners": [{"hostname": "a.example"}]},
                {"port": 443, "listeners": [{"hostname": "a.example"}]},
            ]
        }
        assert build_hierarchy(document).stats.total_validation_errors == 0

    def test_duplicate_hostname_counted_across_binds_with_same_port(self) -> None:
        document = {
            "binds": [
                {"port": 80, "listeners": [{"hostname": "a.example"}]},
                {"port": 80, "listeners": [{"hostname": "a.example"}]},
            ]
        }
        assert count_hostnames(document["binds"])[("a.example", 80)] == 2
        assert build_hierarchy(document).stats.total_validation_errors == 2

    def test_wildcard_hostname_never_warns(self) -> None:
        document = _doc_with_listeners(80, {"hostname": "*"}, {"hostname": "*"})
        assert build_hierarchy(document).stats.total_validation_errors == 0

    def test_tcp_routes_on_http_listener(self) -> None:
        document = _doc_with_listeners(80, {"name": "web", "protocol": "HTTPS", "tcpRoutes": [{"name": "t"}]})
        listener = build_hierarchy(document).binds[0].listeners[0]
        assert len(listener.issues) == 1
        assert listener.issues[0].level == IssueLevel.WARNING
        assert listener.issues[0].message == 'Listener "web" has TCP routes but uses protocol HTTPS.'

    def test_http_matches_on_tcp_listener(self) -> None:
        document = _doc_with_listeners(80, {"protocol": "TCP", "routes": [{"matches": [{"path": {}}]}]})
        route = build_hierarchy(document).binds[0].listeners[0].routes[0]
        assert [i.level for i in route.issues] == [IssueLevel.WARNING]
        assert route.issues[0].message.startswith('Route "unnamed" has HTTP match conditions')

    def test_broken_backend_reference(self) -> None:
        document = _doc_with_listeners(
            80,
            {"routes": [{"name": "r", "backends": [{"backend": "svc-x"}, {"backend": "known"}]}]},
            backends=[{"name": "known"}],
        )
        tree = build_hierarchy(document)
        route = tree.binds[0].listeners[0].routes[0]
        assert len(route.issues) == 1
        assert route.issues[0].level == IssueLevel.ERROR
        assert route.issues[0].message == (
            'Route "r" references backend "svc-x" which is not defined in config.backends.'
        )
        assert tree.stats.broken_backend_refs == 1
        assert tree.stats.total_validation_errors == 1

    def test_tcp_routes_are_not_route_validated(self) -> None:
        document = _doc_with_listeners(80, {"protocol": "TCP", "tcpRoutes": [{"backends": [{"backend": "missing"}]}]})
        tree = build_hierarchy(document)
        assert tree.stats.broken_backend_refs == 0
        assert tree.stats.total_validation_errors == 0

    def test_iter_issues_carries_addresses(self) -> None:
        document = _doc_with_listeners(80, {"routes": [{"backends": [{"backend": "nope"}]}]})
        issues = list(build_hierarchy(document).iter_issues())
        assert [(str(address), issue.level) for address, issue in issues] == [
            ("bind/80/listener/0/route/0", IssueLevel.ERROR)
        ]
