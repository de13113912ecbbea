from typing import Optional

from xray_react.services.project_context import ProjectContext
from xray_react.services.render_tree import (
    ElementType,
    SourceOrigin,
    TreeNode,
    component_for_node,
    is_markup_element,
    resolve_component_name,
    walk,
)


def Card():
    return None


class Panel:
    pass


def _chain(*nodes: TreeNode) -> TreeNode:
    """Link nodes nearest-first through parent pointers."""
    for child, parent in zip(nodes, nodes[1:]):
        child.parent_node = parent
    return nodes[0]


def _node(name, origin: Optional[str] = None, key: Optional[str] = None) -> TreeNode:
    return TreeNode(
        element_type=name,
        source_origin=SourceOrigin(origin) if origin else None,
        key=key,
    )


def _context(root=None, usage=None, imports=None) -> ProjectContext:
    context = ProjectContext()
    context.replace_project_root(root)
    context.replace_usage_map(usage)
    context.replace_import_map(imports)
    return context


def test_is_markup_element() -> None:
    assert is_markup_element("div")
    assert is_markup_element("SPAN")
    assert not is_markup_element("Card")
    assert not is_markup_element(None)


def test_resolve_component_name_from_functions_and_classes() -> None:
    assert resolve_component_name(Card) == "Card"
    assert resolve_component_name(Panel) == "Panel"
    assert resolve_component_name("div") == "div"


def test_display_name_wins_over_declared_name() -> None:
    def Fancy():
        return None

    Fancy.displayName = "FancyCard"
    assert resolve_component_name(Fancy) == "FancyCard"
    assert resolve_component_name(ElementType(name="Base", display_name="Shown")) == "Shown"


def test_resolve_component_name_unwraps_render_and_inner() -> None:
    assert resolve_component_name(ElementType(render=ElementType(name="Inner"))) == "Inner"
    assert resolve_component_name(ElementType(inner=ElementType(name="Memoized"))) == "Memoized"
    assert (
        resolve_component_name(ElementType(inner=ElementType(inner=ElementType(name="Deep"))))
        == "Deep"
    )


def test_anonymous_types_fall_back_to_source_file() -> None:
    anonymous = ElementType(inner=lambda: None)
    assert resolve_component_name(anonymous) is None

    node = _node(anonymous, origin="/p/src/Widget.jsx")
    assert resolve_component_name(anonymous, node) == "Widget"


def test_walk_never_emits_markup() -> None:
    start = _chain(
        _node("div"),
        _node(Card, origin="/proj/src/Card.tsx"),
        _node("span"),
        _node(ElementType(name="App"), origin="/proj/src/App.tsx"),
    )
    observations = walk(start, _context("/proj"))

    assert [obs.name for obs in observations] == ["Card", "App"]
    assert [obs.depth for obs in observations] == [1, 3]
    assert all(obs.is_internal for obs in observations)


def test_walk_skips_unnamed_nodes_and_keeps_going() -> None:
    start = _chain(_node("Leaf"), _node(None), _node("Root"))
    assert [obs.name for obs in walk(start, _context())] == ["Leaf", "Root"]


def test_walk_terminates_on_cycles() -> None:
    a = _node("Alpha")
    b = _node("Beta")
    a.parent_node = b
    b.parent_node = a
    assert [obs.name for obs in walk(a, _context(), max_depth=1000)] == ["Alpha", "Beta"]

    loop = _node("Self")
    loop.parent_node = loop
    assert len(walk(loop, _context(), max_depth=1000)) == 1


def test_walk_respects_max_depth() -> None:
    start = _chain(*[_node(f"C{i}") for i in range(100)])
    observations = walk(start, _context(), max_depth=50)

    assert len(observations) == 50
    assert observations[-1].name == "C49"


def test_walk_follows_owner_when_parent_missing() -> None:
    child = _node("Child")
    child.owner_node = _node("Owner")
    assert [obs.name for obs in walk(child, _context())] == ["Child", "Owner"]


def _tooltip_chain() -> TreeNode:
    return _chain(
        _node("Tooltip"),
        _node("Modal"),
        _node("Page", origin="/proj/src/Page.tsx"),
    )


def test_external_components_kept_without_usage_data() -> None:
    names = [obs.name for obs in walk(_tooltip_chain(), _context("/proj"))]
    assert names == ["Tooltip", "Modal", "Page"]


def test_external_components_kept_only_when_rendered_by_internal() -> None:
    context = _context("/proj", usage={"/proj/src/Page.tsx": ["Tooltip"]})
    names = [obs.name for obs in walk(_tooltip_chain(), context)]
    assert names == ["Tooltip", "Page"]


def test_import_map_counts_as_usage() -> None:
    context = _context("/proj", imports={"/proj/src/Page.tsx": ["Modal"]})
    names = [obs.name for obs in walk(_tooltip_chain(), context)]
    assert names == ["Modal", "Page"]


def test_component_for_node() -> None:
    start = _chain(
        _node("button"),
        _node(Card, origin="/proj/src/Card.tsx", key="card-1"),
        _node("App", origin="/proj/src/App.tsx"),
    )
    info = component_for_node(start, _context("/proj"))

    assert info.name == "Card"
    assert info.uid == "card-1"
    assert info.hierarchy == ["App", "Card"]


def test_component_for_node_without_components() -> None:
    info = component_for_node(_chain(_node("div"), _node("span")), _context())
    assert info.name is None
    assert info.hierarchy == []
    assert component_for_node(None, _context()).name is None
