# tests/engine/test_navigation.py
"""Tests for page navigation."""

from hypothesis import given
from hypothesis import strategies as st

from formflow.core.form import Form
from formflow.engine.navigation import PageNavigator
from tests.helpers.forms import build_form, field, multipage_form, page, show_when
from tests.property.settings import SLOW_SETTINGS


def survey(answer: str, current_page: int) -> Form:
    form = build_form(multipage_form())
    form.set_values({"10": answer})
    form.calculate_element_visibility()
    form.set_current_page_by_id(current_page)
    return form


class TestPageNavigator:
    def test_next_skips_hidden_page(self) -> None:
        assert PageNavigator(survey("no", 1)).next_page_id() == 3

    def test_next_visits_shown_page(self) -> None:
        assert PageNavigator(survey("yes", 1)).next_page_id() == 2

    def test_previous_skips_hidden_page(self) -> None:
        assert PageNavigator(survey("no", 3)).previous_page_id() == 1

    def test_none_at_the_ends(self) -> None:
        assert PageNavigator(survey("yes", 3)).next_page_id() is None
        assert PageNavigator(survey("yes", 1)).previous_page_id() is None

    def test_reverse_flag_matches_previous(self) -> None:
        navigator = PageNavigator(survey("yes", 3))
        assert navigator.get_next_page_id(reverse=True) == navigator.previous_page_id() == 2


@given(hidden=st.lists(st.booleans(), min_size=2, max_size=8), data=st.data())
@SLOW_SETTINGS
def test_navigator_never_returns_hidden_page(hidden: list[bool], data: st.DataObject) -> None:
    """Pages flagged hidden carry show-logic that never passes."""
    pages = [page(1, [field(100, "Driver")])]
    for index, is_hidden in enumerate(hidden, start=2):
        logic = show_when(100, "never-matches") if is_hidden else {}
        pages.append(page(index, [], logic=logic))
    form = build_form({"id": 1, "pages": pages})
    form.set_values({"100": "x"})
    form.calculate_element_visibility()

    current = data.draw(st.sampled_from(form.pages))
    form.set_current_page_by_id(current.id)
    navigator = PageNavigator(form)

    for page_id in (navigator.next_page_id(), navigator.previous_page_id()):
        if page_id is not None:
            assert not form.get_page_by_id(page_id).is_hidden()
