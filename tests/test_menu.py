"""Tri, pagination et calcul du delta de rôles du menu."""
import pytest

from core.classes import menu
from core.classes.models import Class


def make_class(name: str, role: int) -> Class:
    return Class(server_id=1, name=name, short_name=name.lower(), role=role, category=0,
                 text_channels=set(), voice_channels=set())


def test_natural_sort_orders_numbers_by_value():
    classes = [make_class(n, i) for i, n in enumerate(["Class 10", "class 2", "Class 1", "Alpha", "Class 2b"])]
    assert [c.name for c in menu.sort_classes(classes)] == ["Alpha", "Class 1", "class 2", "Class 2b", "Class 10"]


def test_pages_of_25():
    classes = [make_class(f"Class {i}", 100 + i) for i in range(53)]
    pages = menu.build_menu_pages(classes, [])
    assert [len(p) for p in pages] == [25, 25, 3]
    assert pages[0][0].label == "Class 0"
    assert pages[0][1].label == "Class 1"
    assert pages[2][-1].label == "Class 52"


def test_no_classes_no_pages():
    assert menu.build_menu_pages([], [1, 2]) == []


def test_options_checked_for_held_roles():
    classes = [make_class("A", 1), make_class("B", 2)]
    (page,) = menu.build_menu_pages(classes, [2, 99])
    assert page == [
        menu.MenuOption(label="A", value="1", default=False),
        menu.MenuOption(label="B", value="2", default=True),
    ]


def test_delta_keeps_roles_outside_the_select():
    # A, B, C détenus ; le Select montre A et B ; seul B reste coché
    assert menu.compute_member_roles({1, 2, 3}, {1, 2}, {2}) == {2, 3}


def test_delta_with_empty_selection_removes_shown_roles():
    assert menu.compute_member_roles({1, 2, 3, 50}, {1, 2, 3}, set()) == {50}


def test_parse_role_ids():
    assert menu.parse_role_ids(["10", "20"]) == {10, 20}
    with pytest.raises(ValueError):
        menu.parse_role_ids(["10", "not-a-role"])


def test_select_custom_ids():
    assert menu.select_custom_id(2) == "class_menu_select_2"
    assert menu.parse_select_index("class_menu_select_2") == 2
    assert menu.parse_select_index("class_menu_select_") is None
    assert menu.parse_select_index("class_menu_button") is None
    assert menu.parse_select_index("other_select_0") is None
