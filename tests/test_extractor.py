"""Tests for structural extraction."""

from tsgraph.extractor import extract
from tsgraph.models import ExportEdge, ValueSummary
from tsgraph.parser import TSX, SyntaxParser


def _model(parser: SyntaxParser, source: str, dialect: str = "typescript"):
    return extract(parser.parse(source, dialect))


def _param_pairs(parameters):
    return [(p.name, str(p.type)) for p in parameters]


class TestFunctions:
    """Tests for top-level function extraction."""

    def test_declared_signature(self, ts_parser: SyntaxParser):
        model = _model(ts_parser, "function add(a: number, b: number): number { return a + b; }\n")

        func = model.find_function("add")
        assert func is not None
        assert _param_pairs(func.parameters) == [("a", "number"), ("b", "number")]
        assert str(func.return_type) == "number"
        assert not func.is_async

    def test_untyped_parameter_is_any(self, ts_parser: SyntaxParser):
        model = _model(ts_parser, "function log(message) {}\n")

        assert _param_pairs(model.functions[0].parameters) == [("message", "any")]
        assert str(model.functions[0].return_type) == "void"

    def test_inferred_return_skips_nested_functions(self, ts_parser: SyntaxParser):
        source = (
            "function make() {\n"
            "  const inner = () => { return 1; };\n"
            "  return \"done\";\n"
            "}\n"
        )
        model = _model(ts_parser, source)

        assert str(model.functions[0].return_type) == "string"

    def test_generic_async_function(self, ts_parser: SyntaxParser):
        model = _model(ts_parser, "async function load<T>(id: string): Promise<T> { return fetch(id); }\n")

        func = model.functions[0]
        assert func.is_async
        assert func.generic_parameters == ["T"]
        assert str(func.return_type) == "Promise<T>"

    def test_union_and_array_types(self, ts_parser: SyntaxParser):
        model = _model(ts_parser, "function pick(ids: (string | number)[], mode: A | B | C): void {}\n")

        assert _param_pairs(model.functions[0].parameters) == [
            ("ids", "(string | number)[]"),
            ("mode", "A | B | C"),
        ]

    def test_array_of_function_types_keeps_parentheses(self, ts_parser: SyntaxParser):
        model = _model(ts_parser, "function f(cbs: (() => void)[], keys: (keyof T)[], ids: string[]): void {}\n")

        assert _param_pairs(model.functions[0].parameters) == [
            ("cbs", "(() => void)[]"),
            ("keys", "(keyof T)[]"),
            ("ids", "string[]"),
        ]

    def test_destructured_parameter_uses_local_shape(self, ts_parser: SyntaxParser):
        source = (
            "interface Options { verbose: boolean; depth: number; }\n"
            "function walk({ verbose, depth }: Options, root: string) {}\n"
        )
        model = _model(ts_parser, source)

        assert _param_pairs(model.find_function("walk").parameters) == [
            ("verbose", "boolean"),
            ("depth", "number"),
            ("root", "string"),
        ]

    def test_nested_functions_not_surfaced(self, ts_parser: SyntaxParser):
        model = _model(ts_parser, "function outer() { function inner() {} }\n")

        assert [f.name for f in model.functions] == ["outer"]


class TestClassesAndInterfaces:
    """Tests for class, interface, alias and enum extraction."""

    def test_class_members(self, ts_parser: SyntaxParser):
        source = (
            "class Service<T> extends Base implements Runner {\n"
            "  private name: string;\n"
            "  count = 0;\n"
            "  run(input: T, retries?: number): Promise<void> {}\n"
            "  stop() {}\n"
            "}\n"
        )
        model = _model(ts_parser, source)

        cls = model.find_class("Service")
        assert cls.generic_parameters == ["T"]
        assert cls.properties == [("name", "string"), ("count", "any")]
        assert [str(m) for m in cls.methods] == [
            "run(input: T, retries: number) Promise<void>",
            "stop() void",
        ]
        assert cls.dependencies == ["Base", "Runner"]

    def test_abstract_class_and_constructor(self, ts_parser: SyntaxParser):
        source = (
            "export abstract class Repo<T> {\n"
            "  constructor(db: Db) {}\n"
            "  abstract find(id: string): T;\n"
            "}\n"
        )
        model = _model(ts_parser, source)

        repo = model.find_class("Repo")
        assert [m.name for m in repo.methods] == ["constructor", "find"]
        assert _param_pairs(repo.methods[0].parameters) == [("db", "Db")]
        assert str(repo.methods[1].return_type) == "T"

    def test_interface_members(self, ts_parser: SyntaxParser):
        source = "interface Dog extends Animal { name: string; bark(loud: boolean): void; }\n"
        model = _model(ts_parser, source)

        iface = model.find_interface("Dog")
        assert iface.properties == [("name", "string")]
        assert [m.name for m in iface.methods] == ["bark"]
        assert iface.dependencies == ["Animal"]

    def test_type_alias_and_enum(self, ts_parser: SyntaxParser):
        source = 'type ID = string | number;\nenum Color { Red, Green = "g", Blue = 3 }\n'
        model = _model(ts_parser, source)

        assert model.type_aliases[0].name == "ID"
        assert model.type_aliases[0].definition == "string | number"
        assert model.enums[0].members == ["Red", "Green", "Blue"]

    def test_later_declaration_wins(self, ts_parser: SyntaxParser):
        model = _model(ts_parser, "class A { x: string; }\nclass A { y: number; }\n")

        assert len(model.classes) == 1
        assert model.classes[0].properties == [("y", "number")]


class TestImportsAndExports:
    """Tests for import and export edges."""

    def test_imports(self, ts_parser: SyntaxParser):
        source = (
            'import React, { useState as useS, useEffect } from "react";\n'
            "import * as path from 'path';\n"
            'import "./side-effect";\n'
        )
        model = _model(ts_parser, source)

        react, path, side = model.imports
        assert react.path == "react"
        assert react.default_binding == "React"
        assert react.imported_names == ["useS", "useEffect"]
        assert path.imported_names == ["path"]
        assert side.path == "./side-effect"
        assert side.imported_names == []

    def test_require_import(self, ts_parser: SyntaxParser):
        model = _model(ts_parser, 'import fs = require("fs");\n')

        assert model.imports[0].path == "fs"
        assert model.imports[0].default_binding == "fs"

    def test_exported_number(self, ts_parser: SyntaxParser):
        model = _model(ts_parser, "export const LIMIT = 42;\n")

        assert model.exports == [ExportEdge.variable("LIMIT", ValueSummary("number", 42))]

    def test_exported_literal_values(self, ts_parser: SyntaxParser):
        source = (
            "export const OFFSET = -1.5;\n"
            'export const config = { name: "x", debug: true, tags: ["a", 1] };\n'
            "export let pending;\n"
        )
        model = _model(ts_parser, source)

        offset, config, pending = model.exports
        assert offset.value == ValueSummary("number", -1.5)
        assert config.value.type == "object"
        assert config.value.value["name"] == ValueSummary("string", "x")
        assert config.value.value["debug"] == ValueSummary("boolean", True)
        assert config.value.value["tags"].value == [
            ValueSummary("string", "a"),
            ValueSummary("number", 1),
        ]
        assert pending.value is None

    def test_exponent_literal_is_integral(self, ts_parser: SyntaxParser):
        model = _model(ts_parser, "export const BIG = 1e3;\nexport const SMALL = 2.5e-1;\n")

        big, small = model.exports
        assert big.value == ValueSummary("number", 1000)
        assert isinstance(big.value.value, int)
        assert small.value == ValueSummary("number", 0.25)

    def test_exported_arrow_function_value(self, ts_parser: SyntaxParser):
        model = _model(ts_parser, 'export const greet = (name: string) => "hi";\n')

        value = model.exports[0].value
        assert value.type == "function"
        assert value.value.name == "greet"
        assert str(value.value.return_type) == "string"

    def test_exported_declarations(self, ts_parser: SyntaxParser):
        source = (
            "export async function load(): Promise<string> { return \"x\"; }\n"
            "export interface Props {}\n"
            "export type Id = string;\n"
            "export enum Mode { On, Off }\n"
            "export class Store {}\n"
        )
        model = _model(ts_parser, source)

        assert [e.label for e in model.exports] == [
            "async function", "interface", "typeAlias", "enum", "class",
        ]
        assert model.find_function("load").is_async
        assert model.find_class("Store") is not None

    def test_default_exports(self, ts_parser: SyntaxParser):
        source = "export default class App {}\n"
        model = _model(ts_parser, source)

        assert model.exports == [ExportEdge.default_export("class")]
        assert model.find_class("App") is not None

        model = _model(ts_parser, "export default { a: 1 };\n")
        assert model.exports[0].default_kind == "object"

    def test_anonymous_default_class_is_skipped(self, ts_parser: SyntaxParser):
        model = _model(ts_parser, "export default class {}\n")

        assert model.classes == []
        assert model.exports == [ExportEdge.default_export("class")]

    def test_star_reexport(self, ts_parser: SyntaxParser):
        model = _model(ts_parser, 'export * from "./models";\n')

        assert model.exports == [ExportEdge.variable("* as ./models")]

    def test_export_clause(self, ts_parser: SyntaxParser):
        model = _model(ts_parser, "const a = 1;\nconst b = 2;\nexport { a, b as c };\n")

        assert [e.name for e in model.exports] == ["a", "c"]
        assert all(e.kind == "variable" for e in model.exports)


class TestComponents:
    """Tests for markup component detection."""

    def test_function_component_props(self, ts_parser: SyntaxParser, sample_tsx_code: str):
        model = _model(ts_parser, sample_tsx_code, TSX)

        names = [c.name for c in model.components]
        assert names == ["Button", "Card"]
        button = model.components[0]
        assert _param_pairs(button.props) == [("label", "string"), ("disabled", "boolean")]

    def test_arrow_component_is_not_a_function(self, ts_parser: SyntaxParser, sample_tsx_code: str):
        model = _model(ts_parser, sample_tsx_code, TSX)

        assert model.find_function("Button") is not None
        assert model.find_function("Card") is None

    def test_non_markup_function_is_not_component(self, ts_parser: SyntaxParser):
        model = _model(ts_parser, "function total() { return 1; }\n", TSX)

        assert model.components == []
