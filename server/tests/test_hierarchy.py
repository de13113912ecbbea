from dataclasses import dataclass
from typing import Any, Optional

from xray_react.services.hierarchy import (
    HierarchyPaths,
    build_filtered_structure,
    build_full_structure,
    build_paths,
    dom_ancestor_path,
    hierarchy_for_node,
    remove_consecutive_duplicates,
)
from xray_react.services.project_context import ProjectContext
from xray_react.services.render_tree import ComponentObservation, SourceOrigin, TreeNode


@dataclass(eq=False)
class FakeElement:
    tag_name: str
    node: Any = None
    parent_element: Optional["FakeElement"] = None

    def render_node(self) -> Any:
        return self.node

    def parent(self) -> Optional["FakeElement"]:
        return self.parent_element


def _obs(name: str, internal: bool = True, origin: Optional[str] = None) -> ComponentObservation:
    return ComponentObservation(name=name, node=None, depth=0, is_internal=internal, origin_file=origin)


def _context(root=None, files=None) -> ProjectContext:
    context = ProjectContext()
    context.replace_project_root(root)
    context.replace_project_files(files or [])
    return context


def test_remove_consecutive_duplicates_is_case_insensitive() -> None:
    assert remove_consecutive_duplicates(["A", "A", "B", "a", "b"]) == ["A", "B", "a", "b"]
    assert remove_consecutive_duplicates(["Layout", "layout", "Page"]) == ["Layout", "Page"]
    assert remove_consecutive_duplicates([]) == []


def test_full_structure_lists_everything_root_first() -> None:
    observations = [_obs("App"), _obs("Tooltip", internal=False), _obs("Card")]
    assert build_full_structure(observations, "Button", _context()) == "App -> Tooltip -> Card -> Button"


def test_full_structure_skips_leaf_and_markup() -> None:
    observations = [_obs("App"), _obs("Button"), _obs("div")]
    assert build_full_structure(observations, "Button", _context()) == "App -> Button"


def test_consecutive_duplicates_collapse_in_both_paths() -> None:
    observations = [_obs("Alpha"), _obs("Alpha"), _obs("Beta")]
    paths = build_paths(observations, "Gamma", _context())

    assert paths.full == "Alpha -> Beta -> Gamma"
    assert paths.filtered == "Alpha -> Beta -> Gamma"


def test_filtered_structure_keeps_corroborated_internal_components() -> None:
    context = _context("/proj", ["/proj/src/components/Card.tsx"])
    observations = [
        _obs("App", origin="/proj/src/App.tsx"),
        # Name does not match its file and is not a known project token.
        _obs("Wrapper", origin="/proj/src/hoc.tsx"),
        _obs("Tooltip", internal=False),
    ]
    assert build_filtered_structure(observations, "Card", context) == "App -> Card"


def test_filtered_structure_lists_same_component_once() -> None:
    observations = [
        _obs("Layout", origin="/proj/src/Layout.tsx"),
        _obs("Page", origin="/proj/src/Page.tsx"),
        _obs("Layout", origin="/proj/src/Layout.tsx"),
    ]
    context = _context("/proj")

    assert build_full_structure(observations, "X", context) == "Layout -> Page -> Layout -> X"
    assert build_filtered_structure(observations, "X", context) == "Layout -> Page -> X"


def test_filtered_structure_keeps_same_name_from_different_files() -> None:
    observations = [
        _obs("Item", origin="/proj/src/list/Item.tsx"),
        _obs("Row", origin="/proj/src/Row.tsx"),
        _obs("Item", origin="/proj/src/grid/Item.tsx"),
    ]
    assert build_filtered_structure(observations, "Cell", _context("/proj")) == "Item -> Row -> Item -> Cell"


def test_filtered_structure_does_not_repeat_leaf() -> None:
    observations = [
        _obs("App", origin="/proj/src/App.tsx"),
        _obs("card", origin="/proj/src/card.tsx"),
    ]
    assert build_filtered_structure(observations, "Card", _context("/proj")) == "App -> card"


def test_filtered_structure_falls_back_to_leaf() -> None:
    observations = [_obs("Tooltip", internal=False)]
    assert build_filtered_structure(observations, "Card", _context("/proj")) == "Card"


def test_no_observations_and_no_element_gives_leaf() -> None:
    paths = build_paths([], "Card", _context())
    assert paths == HierarchyPaths(full="Card", filtered="Card")


def test_build_paths_is_idempotent() -> None:
    context = _context("/proj", ["/proj/src/App.tsx"])
    observations = [
        _obs("App", origin="/proj/src/App.tsx"),
        _obs("Portal", internal=False),
        _obs("Menu", origin="/proj/src/Menu.tsx"),
    ]
    assert build_paths(observations, "Item", context) == build_paths(observations, "Item", context)


def test_preferred_path() -> None:
    assert HierarchyPaths(full="A -> B", filtered="B").preferred == "B"
    assert HierarchyPaths(full="A -> B", filtered="").preferred == "A -> B"


def _dom_tree() -> FakeElement:
    """
    body
      span  (render node: Tooltip, external)
        div (render node: Card, internal)
          button  (no render node)
    """
    body = FakeElement("body")
    tooltip_el = FakeElement("span", TreeNode(element_type="Tooltip"), body)
    card_el = FakeElement(
        "div",
        TreeNode(element_type="Card", source_origin=SourceOrigin("/proj/src/Card.tsx")),
        tooltip_el,
    )
    return FakeElement("button", None, card_el)


def test_dom_ancestor_path() -> None:
    context = _context("/proj")
    leaf = _dom_tree()

    assert dom_ancestor_path(leaf, context) == ["Tooltip", "Card"]
    assert dom_ancestor_path(leaf, context, internal_only=True) == ["Card"]
    assert dom_ancestor_path(leaf, context, max_levels=1) == ["Card"]


def test_paths_fall_back_to_dom_ancestors() -> None:
    paths = build_paths([], "Button", _context("/proj"), _dom_tree())

    assert paths.full == "Tooltip -> Card -> Button"
    assert paths.filtered == "Card -> Button"


def test_hierarchy_for_node_uses_nearest_component_as_leaf() -> None:
    page = TreeNode(element_type="Page", source_origin=SourceOrigin("/proj/src/Page.tsx"))
    tooltip = TreeNode(element_type="Tooltip", parent_node=page)
    card = TreeNode(
        element_type="Card",
        source_origin=SourceOrigin("/proj/src/Card.tsx"),
        parent_node=tooltip,
    )
    paths = hierarchy_for_node(TreeNode(element_type="div", parent_node=card), _context("/proj"))

    assert paths.full == "Page -> Tooltip -> Card"
    assert paths.filtered == "Page -> Card"


def test_hierarchy_for_node_without_components() -> None:
    assert hierarchy_for_node(TreeNode(element_type="div"), _context()) == HierarchyPaths("", "")
