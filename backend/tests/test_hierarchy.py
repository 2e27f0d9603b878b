"""
层级结构纯函数测试
"""
from rbac_admin.services.hierarchy import ancestors_of, build_tree, descendants_of, flatten_tree


def _ids(nodes):
    return [node["id"] for node in nodes]


def test_build_tree_nests_children_and_sorts_siblings():
    items = [
        {"id": 1, "parent_id": None, "sort_order": 2},
        {"id": 2, "parent_id": None, "sort_order": 1},
        {"id": 3, "parent_id": 1, "sort_order": 5},
        {"id": 4, "parent_id": 1, "sort_order": 5},
        {"id": 5, "parent_id": 1, "sort_order": 0},
    ]
    tree = build_tree(items)

    assert _ids(tree) == [2, 1]
    # 同 sort_order 时按 id 升序
    assert _ids(tree[1]["children"]) == [5, 3, 4]
    assert tree[0]["children"] == []


def test_build_tree_promotes_dangling_and_self_parented_nodes():
    items = [
        {"id": 1, "parent_id": None, "sort_order": 0},
        {"id": 2, "parent_id": 99, "sort_order": 0},
        {"id": 3, "parent_id": 3, "sort_order": 0},
    ]
    assert _ids(build_tree(items)) == [1, 2, 3]


def test_build_tree_terminates_on_cycles():
    items = [
        {"id": 1, "parent_id": 2, "sort_order": 0},
        {"id": 2, "parent_id": 1, "sort_order": 0},
        {"id": 3, "parent_id": 1, "sort_order": 0},
    ]
    tree = build_tree(items)

    # 环上的节点都成为根，挂在环上的节点仍在其父节点下
    assert _ids(tree) == [1, 2]
    assert _ids(tree[0]["children"]) == [3]


def test_build_tree_keeps_insertion_order_without_sort_key():
    items = [{"id": 3, "parent_id": None}, {"id": 1, "parent_id": None}]
    assert _ids(build_tree(items)) == [3, 1]


def test_build_tree_does_not_mutate_input():
    items = [{"id": 1, "parent_id": None, "sort_order": 0}]
    build_tree(items)
    assert "children" not in items[0]


def test_descendants_of():
    links = {1: None, 2: 1, 3: 2, 4: 1, 5: None}
    assert descendants_of(links, 1) == {2, 3, 4}
    assert descendants_of(links, 3) == set()
    assert descendants_of(links, 5) == set()


def test_descendants_of_with_cycle():
    links = {1: 2, 2: 1, 3: 2}
    assert descendants_of(links, 1) == {2, 3}


def test_ancestors_of():
    links = {1: None, 2: 1, 3: 2, 4: 99}
    assert ancestors_of(links, 3) == [2, 1]
    assert ancestors_of(links, 1) == []
    assert ancestors_of(links, 4) == []


def test_ancestors_of_stops_on_cycle():
    links = {1: 2, 2: 3, 3: 1}
    assert ancestors_of(links, 1) == [2, 3]


def test_flatten_tree_levels():
    tree = build_tree([
        {"id": 1, "parent_id": None, "sort_order": 0},
        {"id": 2, "parent_id": 1, "sort_order": 0},
        {"id": 3, "parent_id": 2, "sort_order": 0},
        {"id": 4, "parent_id": None, "sort_order": 1},
    ])
    rows = flatten_tree(tree)

    assert [(row["id"], row["level"]) for row in rows] == [(1, 0), (2, 1), (3, 2), (4, 0)]
    assert all("children" not in row for row in rows)
