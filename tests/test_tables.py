"""Tests for the macro registry and method dispatch table."""

import pytest

from pagelang import ast
from pagelang.errors import DuplicateMacro, DuplicateMethod, NoDefaultResponse, UnknownMacro
from pagelang.tables import MacroRegistry, MethodTable


class TestMacroRegistry:

    def test_register_and_resolve(self):
        reg = MacroRegistry()
        body = ast.Literal("x")
        reg.register("m", body)
        assert reg.resolve("m").body is body
        assert reg.resolve("m").name == "m"
        assert "m" in reg
        assert len(reg) == 1

    def test_duplicate(self):
        reg = MacroRegistry()
        reg.register("m", ast.Literal("x"))
        with pytest.raises(DuplicateMacro):
            reg.register("m", ast.Literal("y"))

    def test_unknown(self):
        with pytest.raises(UnknownMacro, match="'missing'") as exc:
            MacroRegistry().resolve("missing", ast.Position(4, 2))
        assert exc.value.to_dict() == {
            "kind": "UnknownMacro",
            "message": "Unknown macro 'missing'",
            "line": 4,
            "column": 2,
        }

    def test_names_are_case_sensitive(self):
        reg = MacroRegistry()
        reg.register("Page", ast.Literal("x"))
        reg.register("page", ast.Literal("y"))
        assert reg.names() == ["Page", "page"]


class TestMethodTable:

    @pytest.fixture
    def table(self):
        t = MethodTable()
        for method in ("GET", "POST", "PATCH", "DELETE"):
            t.register(method, ast.Literal(method.lower()))
        return t

    def test_exact_override(self, table):
        for method in ("GET", "POST", "PATCH", "DELETE"):
            assert table.dispatch(method) == ast.Literal(method.lower())

    def test_no_root_no_match(self, table):
        with pytest.raises(NoDefaultResponse, match="PUT"):
            table.dispatch("PUT")
        with pytest.raises(NoDefaultResponse):
            table.dispatch(None)

    def test_matching_is_case_sensitive(self, table):
        table.set_root(ast.Literal("root"))
        assert table.dispatch("get") == ast.Literal("root")
        assert table.dispatch("GET") == ast.Literal("get")

    def test_root_fallback(self, table):
        root = ast.Literal("root")
        table.set_root(root)
        assert table.dispatch("OPTIONS") is root
        assert table.dispatch(None) is root
        assert table.root is root

    def test_duplicates(self, table):
        with pytest.raises(DuplicateMethod):
            table.register("GET", ast.Literal("again"))
        table.set_root(ast.Literal("root"))
        with pytest.raises(DuplicateMethod):
            table.set_root(ast.Literal("root2"))

    def test_overrides_view_is_read_only(self, table):
        with pytest.raises(TypeError):
            table.overrides["PUT"] = ast.Literal("x")
        assert set(table.overrides) == {"GET", "POST", "PATCH", "DELETE"}
