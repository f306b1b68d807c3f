import argparse
from typing import Optional, Sequence, Tuple

from flipbook.configs import DEFAULT_USER_CONFIG, get_config

__all__ = ["build_parser", "parse_cli"]


def build_parser() -> argparse.ArgumentParser:
    """Construct the argument parser used by the flipbook entry point."""
    parser = argparse.ArgumentParser(description="Launch the flipbook viewer.")
    parser.add_argument(
        "document",
        nargs="?",
        default=None,
        help="PDF path or URL to open directly instead of the library",
    )
    parser.add_argument(
        "--version",
        "-V",
        action="store_true",
        help="show version and exit",
    )
    parser.add_argument(
        "--config",
        dest="config",
        default=DEFAULT_USER_CONFIG,
        help=f"config file or yaml format string (default {DEFAULT_USER_CONFIG})",
    )
    parser.add_argument(
        "--book",
        default=None,
        help="id of a catalog book to open on start",
    )
    parser.add_argument(
        "--catalog",
        default=argparse.SUPPRESS,
        help="catalog YAML file listing the library",
    )
    parser.add_argument(
        "--strategy",
        choices=("lazy", "eager"),
        default=argparse.SUPPRESS,
        help="render pages on demand (lazy) or all up front (eager)",
    )
    parser.add_argument(
        "--oversample",
        type=float,
        default=argparse.SUPPRESS,
        help="raster resolution relative to the largest page width",
    )
    parser.add_argument(
        "--aspect-ratio",
        dest="aspect_ratio",
        type=float,
        default=argparse.SUPPRESS,
        help="page width/height ratio",
    )
    return parser


def _overrides_from_namespace(namespace: argparse.Namespace) -> dict:
    """Map flat CLI options onto the nested config sections."""
    values = vars(namespace)
    overrides: dict = {}
    decoder = {
        key: values[key] for key in ("strategy", "oversample") if key in values
    }
    if decoder:
        overrides["decoder"] = decoder
    if "aspect_ratio" in values:
        overrides["layout"] = {"aspect_ratio": values["aspect_ratio"]}
    if "catalog" in values:
        overrides["catalog"] = values["catalog"]
    return overrides


def parse_cli(
    argv: Optional[Sequence[str]] = None,
) -> Tuple[dict, argparse.Namespace, bool]:
    """Parse CLI arguments and return `(config, namespace, version_requested)`."""
    parser = build_parser()
    namespace = parser.parse_args(argv)
    config = get_config(namespace.config, _overrides_from_namespace(namespace))
    return config, namespace, bool(namespace.version)
