"""Sanity tests ensuring the package modules import correctly."""

from __future__ import annotations

import importlib

import pytest


@pytest.mark.parametrize(
    "module_name",
    [
        "twentyone",
        "twentyone.cards",
        "twentyone.state",
        "twentyone.rules",
        "twentyone.turns",
        "twentyone.engine",
        "twentyone.ai.search",
        "twentyone.cli.main",
    ],
)
def test_modules_import(module_name: str) -> None:
    """Ensure all foundational modules can be imported."""

    assert importlib.import_module(module_name)
