from __future__ import annotations

import pytest

from flipbook.configs import get_config, get_default_config, update_dict
from flipbook.core.decoder import EAGER, LAZY
from flipbook.core.settings import ViewerSettings
from flipbook.gui.cli import build_parser, parse_cli


def test_default_config_values():
    config = get_default_config()
    assert config["layout"]["aspect_ratio"] == 0.77
    assert config["layout"]["margin"] == 40
    assert config["decoder"]["strategy"] == LAZY
    assert config["flip"]["duration_ms"] == 600


def test_yaml_string_is_merged_over_defaults():
    config = get_config("decoder: {strategy: eager, oversample: 3}")
    assert config["decoder"]["strategy"] == EAGER
    assert config["decoder"]["oversample"] == 3
    assert config["decoder"]["prefetch"] == 2


def test_config_file_and_args_are_merged(tmp_path):
    path = tmp_path / "flipbookrc"
    path.write_text("layout:\n  margin: 20\n", encoding="utf-8")
    config = get_config(str(path), {"flip": {"duration_ms": 0}})
    assert config["layout"]["margin"] == 20
    assert config["flip"]["duration_ms"] == 0


def test_missing_config_file_keeps_defaults(tmp_path):
    config = get_config(str(tmp_path / "absent.yaml"))
    assert config == get_default_config()


def test_unknown_keys_are_skipped():
    target = {"a": 1, "nested": {"b": 2}}
    update_dict(target, {"c": 3, "nested": {"b": 4, "d": 5}})
    assert target == {"a": 1, "nested": {"b": 4}}


@pytest.mark.parametrize(
    "override",
    [
        {"decoder": {"strategy": "greedy"}},
        {"layout": {"aspect_ratio": 0}},
        {"decoder": {"decode_timeout_s": -1}},
    ],
)
def test_invalid_values_are_rejected(override):
    with pytest.raises(ValueError):
        get_config(None, override)


def test_viewer_settings_from_config():
    config = get_config("decoder: {strategy: eager, oversample: 1.0}\nlayout: {max_width: 500}")
    settings = ViewerSettings.from_config(config)
    assert settings.decoder.strategy == EAGER
    # Eager decoding never renders below twice the target width.
    assert settings.decoder.oversample == 2.0
    assert settings.decoder.target_width == 500
    assert settings.bounds.max_width == 500
    assert settings.aspect_ratio == 0.77
    assert settings.catalog is None


def test_cli_maps_flat_options_onto_sections(tmp_path):
    config, namespace, version_requested = parse_cli(
        [
            "book.pdf",
            "--config",
            str(tmp_path / "none.yaml"),
            "--strategy",
            "eager",
            "--aspect-ratio",
            "0.7",
            "--catalog",
            "my-books.yaml",
        ]
    )
    assert not version_requested
    assert namespace.document == "book.pdf"
    assert config["decoder"]["strategy"] == EAGER
    assert config["layout"]["aspect_ratio"] == 0.7
    assert config["catalog"] == "my-books.yaml"


def test_cli_defaults_leave_config_untouched(tmp_path):
    config, namespace, version_requested = parse_cli(
        ["--config", str(tmp_path / "none.yaml"), "--version"]
    )
    assert version_requested
    assert namespace.document is None
    assert namespace.book is None
    assert config == get_default_config()


def test_cli_rejects_unknown_strategy():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--strategy", "greedy"])
