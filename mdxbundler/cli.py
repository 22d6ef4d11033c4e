"""CLI entrypoints for mdxbundler commands."""

from __future__ import annotations

import argparse
import dataclasses
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Tuple

from .bundler import bundle_mdx_sync
from .bundling.diagnostics import format_messages
from .bundling.loaders import is_valid_loader
from .config import ConfigError, load_config
from .engine.api import BuildOptions
from .errors import BundleError, ConfigurationError
from .frontmatter import FrontMatterError
from .logging import configure_logging
from .markup import MarkupError


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mdxbundler",
        description="Bundle MDX documents and their imports into a single script.",
    )
    _add_verbose_option(parser)
    parser.add_argument("--log-file", type=Path, default=None, help="Also write log records to this file.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Bundle one MDX file.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    build_parser.add_argument("file", help="Path to the .mdx document.")
    build_parser.add_argument(
        "--cwd",
        default=None,
        help="Directory imports are resolved against (defaults to the config or the file's directory).",
    )
    build_parser.add_argument(
        "--config",
        default=None,
        help="Path to .mdxbundler.yml (defaults to the working directory).",
    )
    build_parser.add_argument("--out", default=None, help="Write the bundle here instead of stdout.")
    build_parser.add_argument(
        "--frontmatter",
        action="store_true",
        help="Print the document's front matter as JSON instead of the bundle.",
    )
    build_parser.add_argument(
        "--global",
        dest="globals",
        action="append",
        default=[],
        metavar="SPECIFIER=NAME",
        help="Satisfy SPECIFIER with the global NAME (repeatable).",
    )
    build_parser.add_argument(
        "--loader",
        dest="loaders",
        action="append",
        default=[],
        metavar=".EXT=LOADER",
        help="Load files with extension .EXT using LOADER (repeatable).",
    )
    build_parser.add_argument("--bundle-directory", default=None, help="Directory emitted assets are written to.")
    build_parser.add_argument("--bundle-path", default=None, help="Public URL prefix for emitted assets.")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP bundling service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for mdxbundler commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    if args.command == "build":
        _run_build(parser, args)
    elif args.command == "serve":
        from .service.app import run_service

        run_service(host=args.host, port=args.port)


def _run_build(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    file_path = Path(args.file).expanduser().resolve()
    try:
        globals_override = dict(_parse_pairs(args.globals, "--global"))
        loader_override = dict(_parse_pairs(args.loaders, "--loader"))
    except ValueError as exc:
        parser.exit(2, f"{exc}\n")
    for extension, loader in loader_override.items():
        if not extension.startswith(".") or not is_valid_loader(loader):
            parser.exit(2, f"Invalid --loader value: {extension}={loader}\n")

    config_location = Path(args.config) if args.config else Path(args.cwd or file_path.parent)
    try:
        config = load_config(config_location)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    kwargs: Dict[str, Any] = config.bundle_kwargs()
    if args.cwd:
        kwargs["cwd"] = str(Path(args.cwd).expanduser().resolve())
    elif config.cwd is None:
        kwargs["cwd"] = str(file_path.parent)
    kwargs["globals"].update(globals_override)
    if args.bundle_directory:
        kwargs["bundle_directory"] = args.bundle_directory
    if args.bundle_path:
        kwargs["bundle_path"] = args.bundle_path
    if loader_override:
        configured = kwargs.get("build_options")

        def build_options(options: BuildOptions, frontmatter: Dict[str, Any]) -> BuildOptions:
            if configured is not None:
                options = configured(options, frontmatter)
            loaders = dict(options.loader)
            loaders.update(loader_override)
            return dataclasses.replace(options, loader=loaders)

        kwargs["build_options"] = build_options

    try:
        result = bundle_mdx_sync(file=file_path, **kwargs)
    except FileNotFoundError as exc:
        parser.exit(1, f"{exc}\n")
    except (ConfigurationError, FrontMatterError, MarkupError, BundleError) as exc:
        parser.exit(1, f"{exc}\n")

    if result.errors:
        print(format_messages(result.errors, "warning", kwargs["cwd"]), file=sys.stderr)

    if args.frontmatter:
        print(json.dumps(result.frontmatter, indent=2, default=str))
        return
    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(result.code, encoding="utf-8")
        print(f"Bundle written to {_relativize(out_path)}")
    else:
        sys.stdout.write(result.code + "\n")


def _parse_pairs(values: List[str], flag: str) -> List[Tuple[str, str]]:
    pairs: List[Tuple[str, str]] = []
    for value in values:
        key, separator, item = value.partition("=")
        if not separator or not key or not item:
            raise ValueError(f"{flag} expects KEY=VALUE, got {value!r}")
        pairs.append((key, item))
    return pairs


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
