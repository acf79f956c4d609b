"""CLI entrypoints for spacsp commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Sequence

from . import __version__
from .config import ConfigError
from .injector import InjectionError
from .logging import configure_logging
from .mode import BuildMode
from .models import CSPInjectionResult, InjectionPreview, InjectOptions
from .orchestrator import HTMLNotFoundError, Orchestrator
from .scaffold import (
    CONFIG_TYPES,
    FRAMEWORKS,
    build_default_config,
    build_starter_config,
    write_starter_config,
)

_COMMANDS = ("inject", "init")
_GLOBAL_FLAGS = ("-v", "--verbose", "-q", "--quiet")
_PASSTHROUGH_FLAGS = ("-h", "--help", "--version")

_DEVELOPMENT_LOCATIONS = (
    "src/index.html (Angular, used by ng serve)",
    "projects/*/src/index.html (Angular workspace)",
    "public/index.html (React CRA dev server)",
    "index.html (Vite dev server)",
)
_PRODUCTION_LOCATIONS = (
    "dist/index.html (Vite, Angular)",
    "dist/*/index.html (Angular build)",
    "build/index.html (React CRA build)",
    "www/index.html (Ionic)",
)
_DEVELOPMENT_EXAMPLES = (
    "spacsp --dev --html src/index.html",
    "spacsp --dev --html projects/my-app/src/index.html",
    "spacsp --dev --html public/index.html",
)
_PRODUCTION_EXAMPLES = (
    "spacsp --html dist/my-app/index.html",
    "spacsp --html build/index.html",
    "spacsp --html www/index.html",
)


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Increase log verbosity for troubleshooting.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spacsp",
        description=(
            "Inject a Content-Security-Policy meta tag into a React, VITE or Angular "
            "single-page application, resolving environment variable placeholders."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    _add_verbose_option(parser)
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log warnings and errors.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log records to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    inject_parser = subparsers.add_parser(
        "inject",
        help="Inject the CSP meta tag (default command).",
    )
    _add_verbose_option(inject_parser, suppress_default=True)
    inject_parser.add_argument(
        "--html",
        default=None,
        help="Path to the HTML file (auto-detected when omitted).",
    )
    inject_parser.add_argument(
        "--config",
        default=None,
        help="Path to a CSP config file; its directory becomes the project root.",
    )
    inject_parser.add_argument(
        "--dev",
        action="store_true",
        default=None,
        help="Target development sources instead of production build output.",
    )
    inject_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be injected without modifying any file.",
    )

    init_parser = subparsers.add_parser(
        "init",
        help="Create a starter csp.config.json.",
    )
    _add_verbose_option(init_parser, suppress_default=True)
    init_parser.add_argument(
        "--framework",
        choices=FRAMEWORKS,
        default=None,
        help="Framework the directives are tailored to.",
    )
    init_parser.add_argument(
        "--type",
        dest="config_type",
        choices=CONFIG_TYPES,
        default=None,
        help="Permissive development or strict production directives.",
    )
    init_parser.add_argument(
        "--nonce",
        action="store_true",
        default=None,
        help="Add nonce templates to script-src and style-src (default for production).",
    )
    init_parser.add_argument(
        "--report-only",
        action="store_true",
        help="Deliver the policy as Content-Security-Policy-Report-Only.",
    )
    init_parser.add_argument(
        "--env-templates",
        action="store_true",
        help="Add API_URL/CDN_URL variable templates for the framework prefix.",
    )
    init_parser.add_argument(
        "--output",
        default="csp.config.json",
        help="Where to write the config file.",
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing config file.",
    )
    return parser


def _with_default_command(argv: Sequence[str]) -> List[str]:
    """Insert ``inject`` when no subcommand was named."""
    args = list(argv)
    index = 0
    while index < len(args) and args[index] in _GLOBAL_FLAGS:
        index += 1
    if index < len(args) and (args[index] in _COMMANDS or args[index] in _PASSTHROUGH_FLAGS):
        return args
    if index < len(args) and args[index] == "--log-file":
        return args[: index + 2] + _with_default_command(args[index + 2 :])
    return args[:index] + ["inject"] + args[index:]


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for spacsp commands."""
    parser = _build_parser()
    args = parser.parse_args(_with_default_command(sys.argv[1:] if argv is None else argv))

    configure_logging(
        verbose=bool(args.verbose), quiet=bool(args.quiet), log_file=args.log_file
    )

    if args.command == "init":
        _run_init(parser, args)
    else:
        _run_inject(parser, args)


def _run_inject(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    options = InjectOptions(html_path=args.html, config_path=args.config, dev_mode=args.dev)
    orchestrator = Orchestrator()
    try:
        if args.dry_run:
            _report_preview(orchestrator.preview(options))
        else:
            _report_success(orchestrator.inject(options))
    except HTMLNotFoundError as exc:
        _print_location_suggestions(exc.mode)
        parser.exit(1, f"spacsp: {exc}\n")
    except (InjectionError, OSError) as exc:
        parser.exit(1, f"spacsp inject failed: {exc}\nRun with --verbose for more details.\n")


def _run_init(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    starter = any(
        (args.framework, args.config_type, args.nonce, args.report_only, args.env_templates)
    )
    if starter:
        config_type = args.config_type or "development"
        use_nonce = args.nonce if args.nonce is not None else config_type == "production"
        data = build_starter_config(
            framework=args.framework or "generic",
            config_type=config_type,
            use_nonce=use_nonce,
            report_only=bool(args.report_only),
            include_env_vars=bool(args.env_templates),
        )
    else:
        data = build_default_config()

    output = Path(args.output)
    try:
        written = write_starter_config(output, data, overwrite=bool(args.force))
    except ConfigError as exc:
        parser.exit(1, f"spacsp init failed: {exc}\n")
    if not written:
        print(f"Config file already exists: {_relativize(output)} (use --force to overwrite)")
        return
    print(f"Created config file: {_relativize(output)}")
    print("Next steps:")
    print(f"  1. Edit {output.name} to customize CSP directives")
    print("  2. Reference variables like {{REACT_APP_API_URL}}, {{VITE_API_URL}} or {{NG_API_URL}}")
    print("  3. Run: spacsp --dry-run (to preview changes)")
    print("  4. Run: spacsp (to inject CSP)")


def _report_success(result: CSPInjectionResult) -> None:
    print("CSP injected successfully")
    print(f"  File: {_relativize(result.html_path)}")
    print(f"  Policy length: {len(result.csp_string)} characters")
    if result.nonce:
        print(f"  Nonce: {result.nonce}")
    if result.replaced_tags:
        print(f"  Replaced {result.replaced_tags} existing CSP tag(s)")
    used = len(result.env_vars) if result.env_vars else 0
    print(f"  Environment variables available: {used}")


def _report_preview(preview: InjectionPreview) -> None:
    print("Dry run: no files will be modified")
    print(f"  Mode: {preview.mode.value}")
    print(f"  Target HTML: {_relativize(preview.html.path)}")
    print(f"  Existing CSP: {'yes' if preview.html.has_existing_csp else 'no'}")
    print(f"  Project root: {_relativize(preview.project_root)}")
    source = preview.config.source.value
    if preview.config.path is not None:
        source = f"{source} ({_relativize(preview.config.path)})"
    print(f"  Config: {source}")
    config = preview.config.config
    print(f"  Nonce: {'enabled' if config.use_nonce else 'disabled'}")
    print(f"  Report-only: {'yes' if config.report_only else 'no'}")
    if preview.env_vars:
        print(f"  Environment variables ({len(preview.env_vars)}):")
        for name, value in preview.env_vars.items():
            print(f"    {name}={value}")
    else:
        print("  Environment variables: none")
    print(f"  Policy: {preview.csp_string}")


def _print_location_suggestions(mode: BuildMode) -> None:
    if mode.is_production:
        title = "Production mode (requires a build first):"
        locations, examples = _PRODUCTION_LOCATIONS, _PRODUCTION_EXAMPLES
    else:
        title = "Development mode (--dev):"
        locations, examples = _DEVELOPMENT_LOCATIONS, _DEVELOPMENT_EXAMPLES
    print("Common HTML file locations to check:")
    print(f"  {title}")
    for location in locations:
        print(f"    - {location}")
    print("  Examples:")
    for example in examples:
        print(f"    {example}")


def _relativize(path: Path) -> str:
    try:
        return str(Path(path).resolve().relative_to(Path.cwd().resolve()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
