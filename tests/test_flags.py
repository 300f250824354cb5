import logging

import pytest

from pwa_assets.flags import (
    get_default_options,
    normalize_only_flag_pairs,
    normalize_options,
    normalize_output,
)
from pwa_assets.models import Options


def test_only_flag_pair_both_set_clears_both():
    logger = logging.getLogger("test")
    assert normalize_only_flag_pairs(
        "icon_only", "splash_only", {"icon_only": True, "splash_only": True}, logger
    ) == {"icon_only": False, "splash_only": False}
    assert normalize_only_flag_pairs(
        "icon_only", "splash_only", {"icon_only": True, "splash_only": False}, logger
    ) == {}


def test_normalize_output():
    assert normalize_output(None) == "."
    assert normalize_output("") == "."
    assert normalize_output("assets") == "assets"


def test_defaults_match_options():
    defaults = get_default_options()
    assert defaults["scrape"] is True
    assert defaults["type"] == "png"
    assert Options(**defaults) == Options()


def test_normalize_options_ignores_unset_flags():
    options = normalize_options(background=None, favicon=True, unknown="x")
    assert options.background == "white"
    assert options.favicon is True


def test_normalize_options_resolves_conflicts(caplog):
    with caplog.at_level("WARNING", logger="pwa_assets"):
        options = normalize_options(portrait_only=True, landscape_only=True)
    assert not options.portrait_only
    assert not options.landscape_only
    assert "portrait and landscape" in caplog.text


def test_normalize_options_type():
    assert normalize_options(type="jpg").type == "jpeg"
    with pytest.raises(ValueError):
        normalize_options(type="gif")
    with pytest.raises(ValueError):
        normalize_options(quality=101)
