"""Tests for intra-file usage resolution."""

from tsgraph.analysis import analyze_source
from tsgraph.extractor import extract
from tsgraph.parser import SyntaxParser
from tsgraph.usages import resolve_usages


def test_implementing_class_uses_interface(ts_parser: SyntaxParser):
    model, _ = analyze_source("interface I {}\nclass C implements I {}\n", "a.ts", parser=ts_parser)

    assert model.find_interface("I").usages == ["C"]
    assert model.find_class("C").usages == []


def test_usages_from_heritage_and_parameters(ts_parser: SyntaxParser):
    source = (
        "class Base {}\n"
        "class Derived extends Base {}\n"
        "function use(b: Base) {}\n"
        "const fn = (b: Base) => b;\n"
        "function many(items: Base[]) {}\n"
    )
    model, _ = analyze_source(source, "a.ts", parser=ts_parser)

    assert model.find_class("Base").usages == ["Derived", "use", "fn"]


def test_interface_extension_is_a_usage(ts_parser: SyntaxParser):
    model, _ = analyze_source("interface A {}\nexport interface B extends A {}\n", "a.ts", parser=ts_parser)

    assert model.find_interface("A").usages == ["B"]


def test_entity_never_uses_itself(ts_parser: SyntaxParser):
    model, _ = analyze_source("class Node {}\nfunction Node(n: Node) {}\n", "a.ts", parser=ts_parser)

    assert model.find_class("Node").usages == []


def test_resolve_usages_fills_model_in_place(ts_parser: SyntaxParser):
    tree = ts_parser.parse("class A {}\nclass B extends A {}\n")
    model = extract(tree)

    assert model.find_class("A").usages == []
    returned = resolve_usages(model, tree)

    assert returned is model
    assert model.find_class("A").usages == ["B"]
