"""Shared fixtures for building directory result pages."""

from __future__ import annotations

from typing import Callable, Optional, Sequence

import pytest

PAGINATION_PREFIX = "show?action=pretraga&type=brzaPretraga&showResultsPage="


def _container(
    name: Optional[str] = "IVAN HORVAT",
    street: Optional[str] = "ULICA GRADA VUKOVARA 12",
    city_line: Optional[str] = "10000 ZAGREB",
    phone: Optional[str] = "091 234 5678",
) -> str:
    address = ""
    if street is not None or city_line is not None:
        lines = "".join(f"<div>{line}</div>" for line in (street, city_line) if line is not None)
        address = f'<ul class="itemContactInfo"><li class="firstColumn">x</li><li class="secondColumn">{lines}</li></ul>'
    phone_html = ""
    if phone is not None:
        phone_html = f'<div class="imenikSearchResultsRight"><div class="imenikTelefon"> {phone} </div></div>'
    name_html = f'<div class="resultsTitle"> {name} </div>' if name is not None else ""
    return (
        '<div class="ImenikContainerInnerDetails searchResultLevel3">'
        f"{name_html}{address}{phone_html}"
        "</div>"
    )


def _page(containers: Sequence[str] = (), pages: Sequence[int] = ()) -> str:
    links = "".join(f'<a href="{PAGINATION_PREFIX}{number}">{number}</a>' for number in pages)
    return f"<html><body><div id='results'>{''.join(containers)}</div><div class='pager'>{links}</div></body></html>"


@pytest.fixture
def result_container() -> Callable[..., str]:
    return _container


@pytest.fixture
def results_page() -> Callable[..., str]:
    return _page


@pytest.fixture
def pagination_prefix() -> str:
    return PAGINATION_PREFIX
