# src/spiracss/cli.py
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from tqdm import tqdm

from spiracss.config.loader import (
    CONFIG_FILE_NAME,
    ConfigLoadError,
    get_nested_config,
    load_format_options,
    load_generator_options,
    load_lint_options,
    load_spiracss_config,
)
from spiracss.format.placeholders import insert_placeholders_with_info
from spiracss.lint.engine import lint_html_structure
from spiracss.model import GenerationError, HtmlLintIssue
from spiracss.scss.generator import generate_from_html
from spiracss.selector_policy import SelectorPolicyError
from spiracss.utils.configure_logging import configure_logger

logger = logging.getLogger(__name__)

# --- HELP TEXT ---

spiracss_help_text = """
  spiracss lint [--root | --selection] [--json] (--stdin | <file>...)
                      Checks markup against the SpiraCSS Block > Element structure.

  spiracss generate [--root | --selection] [--base-dir <dir>] [--dry-run] [--json]
                    [--ignore-structure-errors] (--stdin | <file>)
                      Generates SCSS scaffolding next to the markup (or in --base-dir).

  spiracss format [--stdin | <file>] [-o <path>]
                      Inserts placeholder classes into static markup.

  Global options: --config <path> (default: ./spiracss.config.json), --log-level <level>
""".strip()


# --- IO HELPERS ---

def _read_html(args: argparse.Namespace) -> Tuple[str, Optional[Path]]:
    if args.stdin:
        return sys.stdin.read(), None
    path = Path(args.file).resolve()
    with open(path, "r", encoding="utf-8") as f:
        return f.read(), path


def _mode_name(is_root_mode: bool) -> str:
    return "root" if is_root_mode else "selection"


def _issue_json(issue: HtmlLintIssue) -> Dict[str, Any]:
    return {"code": issue.code, "message": issue.message, "baseClass": issue.base_class, "path": issue.path}


def _print_issues(issues: List[HtmlLintIssue], level: str = "ERROR", suffix: str = "", write=None) -> None:
    emit = write or (lambda line: print(line, file=sys.stderr))
    for issue in issues:
        emit(f"{level} [{issue.code}] at {issue.location}: {issue.message}{suffix}")


def merge_index(directory: Path, entries: List[str]) -> None:
    """
    Merges `@use` lines into `<directory>/index.scss`, keeping existing ones first.
    Non-`@use` lines of an existing index are dropped.
    """
    index_file = directory / "index.scss"
    current: List[str] = []
    if index_file.exists():
        current = index_file.read_text(encoding="utf-8").split("\n")

    uses: Dict[str, None] = {}
    for line in current:
        if line.startswith("@use"):
            uses.setdefault(line, None)
    for entry in entries:
        uses.setdefault(entry, None)

    index_file.write_text("\n".join(uses) + "\n", encoding="utf-8")
    logger.debug(f"Merged {len(entries)} @use line(s) into {index_file}")


# --- COMMAND HANDLERS ---

def _handle_lint(args: argparse.Namespace, config: Optional[Dict[str, Any]]) -> int:
    options = load_lint_options(config)
    is_root_mode = args.mode == "root"

    if args.stdin:
        sources: List[Optional[str]] = [None]
    elif args.files:
        sources = list(args.files)
    else:
        print("Error: No input specified. Use --help for usage.", file=sys.stderr)
        return 1

    multiple = len(sources) > 1
    reports: List[Dict[str, Any]] = []
    total_issues = 0

    for source in tqdm(sources, desc="Linting", unit="file", disable=not multiple, file=sys.stderr):
        if source is None:
            html, file_path = sys.stdin.read(), None
        else:
            file_path = Path(source).resolve()
            with open(file_path, "r", encoding="utf-8") as f:
                html = f.read()

        issues = lint_html_structure(
            html, is_root_mode, options.naming, options.selector_policy, options.external
        )
        total_issues += len(issues)
        reports.append({
            "file": str(file_path) if file_path else None,
            "mode": _mode_name(is_root_mode),
            "ok": not issues,
            "errors": [_issue_json(issue) for issue in issues],
        })

        if args.json or not issues:
            continue
        if multiple:
            tqdm.write(f"{file_path}:", file=sys.stderr)
            _print_issues(issues, write=lambda line: tqdm.write(f"  {line}", file=sys.stderr))
        else:
            _print_issues(issues)

    if args.json:
        print(json.dumps(reports if multiple else reports[0], indent=2, ensure_ascii=False))
    elif total_issues == 0:
        print("No SpiraCSS HTML structure errors.")

    return 1 if total_issues else 0


def _handle_generate(args: argparse.Namespace, config: Optional[Dict[str, Any]]) -> int:
    options = load_generator_options(config)
    is_root_mode = args.mode == "root"

    if not args.stdin and not args.file:
        print("Error: No input specified. Use --help for usage.", file=sys.stderr)
        return 1

    html, file_path = _read_html(args)
    if args.base_dir:
        doc_dir = Path(args.base_dir).resolve()
    elif file_path is not None:
        doc_dir = file_path.parent
    else:
        doc_dir = Path.cwd()

    issues = lint_html_structure(html, is_root_mode, options.naming, options.selector_policy, options.external)
    if issues:
        if not args.ignore_structure_errors:
            _print_issues(issues)
            return 1
        _print_issues(issues, level="WARN", suffix=" (ignored)")

    generated = generate_from_html(html, str(doc_dir), is_root_mode, options)

    if args.json:
        print(json.dumps({
            "mode": _mode_name(is_root_mode),
            "docDir": str(doc_dir),
            "files": [file.model_dump() for file in generated],
        }, indent=2, ensure_ascii=False))
        return 0

    if args.dry_run:
        for file in generated:
            print(doc_dir / file.path)
        return 0

    child_dir = doc_dir / options.child_scss_dir
    child_dir.mkdir(parents=True, exist_ok=True)
    index_path = f"{options.child_scss_dir}/index.scss"

    index_uses: List[str] = []
    for file in generated:
        if file.path == index_path:
            index_uses.extend(line for line in file.content.split("\n") if line.startswith("@use"))
            continue
        out_path = doc_dir / file.path
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(file.content, encoding="utf-8")
        logger.info(f"Wrote {out_path}")

    if index_uses:
        merge_index(child_dir, index_uses)
    return 0


def _handle_format(args: argparse.Namespace, config: Optional[Dict[str, Any]]) -> int:
    if not args.stdin and not args.file:
        print("Error: No input specified. Use --help for usage.", file=sys.stderr)
        return 1
    if not args.stdin and not Path(args.file).exists():
        print(f"Error: File not found: {args.file}", file=sys.stderr)
        return 1

    options = load_format_options(config)
    html, _ = _read_html(args)
    result = insert_placeholders_with_info(html, options.naming, options.class_attribute)

    if result.has_template_syntax:
        print(
            "Warning: Template syntax (EJS, Nunjucks, JSX, etc.) was detected, so processing was skipped.\n"
            "Use this only with static HTML fragments.",
            file=sys.stderr,
        )
        # Pipelines still get the input back; files are left untouched.
        if not args.output:
            sys.stdout.write(html)
        return 0

    if not args.output:
        sys.stdout.write(result.html)
        return 0

    output_path = Path(args.output)
    if output_path.exists() and output_path.read_text(encoding="utf-8") == result.html:
        print("No changes needed.", file=sys.stderr)
        return 0

    output_path.write_text(result.html, encoding="utf-8")
    print(f"Formatted HTML written to: {output_path}", file=sys.stderr)
    return 0


# --- PARSER ---

def _add_mode_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--root", dest="mode", action="store_const", const="root",
                       help="Treat the input as a single component root (default).")
    group.add_argument("--selection", dest="mode", action="store_const", const="selection",
                       help="Treat every top-level classed element as a root.")
    parser.set_defaults(mode="root")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="spiracss", description="SpiraCSS HTML tools.")
    parser.add_argument("--config", help=f"Path to {CONFIG_FILE_NAME} (default: ./{CONFIG_FILE_NAME}).")
    parser.add_argument("--log-level", help="Log level (DEBUG, INFO, WARNING, ...). Overrides debug.level.")
    subparsers = parser.add_subparsers(dest="command")

    p_lint = subparsers.add_parser("lint", help="Check markup structure.")
    _add_mode_arguments(p_lint)
    p_lint.add_argument("--stdin", action="store_true", help="Read markup from stdin.")
    p_lint.add_argument("--json", action="store_true", help="Print a JSON report.")
    p_lint.add_argument("files", nargs="*", help="Markup files to check.")
    p_lint.set_defaults(func=_handle_lint)

    p_generate = subparsers.add_parser("generate", help="Generate SCSS scaffolding.")
    _add_mode_arguments(p_generate)
    p_generate.add_argument("--stdin", action="store_true", help="Read markup from stdin.")
    p_generate.add_argument("--base-dir", help="Directory to write into (default: the input file's directory).")
    p_generate.add_argument("--dry-run", action="store_true", help="Only print the paths that would be written.")
    p_generate.add_argument("--json", action="store_true", help="Print the generated files as JSON.")
    p_generate.add_argument("--ignore-structure-errors", action="store_true",
                            help="Report structure errors as warnings and generate anyway.")
    p_generate.add_argument("file", nargs="?", help="Markup file.")
    p_generate.set_defaults(func=_handle_generate)

    p_format = subparsers.add_parser("format", help="Insert placeholder classes.")
    p_format.add_argument("--stdin", action="store_true", help="Read markup from stdin.")
    p_format.add_argument("-o", "--output", help="Output file path (stdout if omitted).")
    p_format.add_argument("file", nargs="?", help="Markup file.")
    p_format.set_defaults(func=_handle_format)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point of the `spiracss` console script.

    Returns:
        int: Process exit code (1 on structure errors, config or generation failures).
    """
    args_list = sys.argv[1:] if argv is None else argv
    if not args_list or args_list[0] in ["help", "-h", "--help"]:
        print(spiracss_help_text)
        return 0

    parser = build_parser()
    try:
        args = parser.parse_args(args_list)
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 1

    if not hasattr(args, "func"):
        print(spiracss_help_text)
        return 1

    try:
        config = load_spiracss_config(args.config or Path.cwd() / CONFIG_FILE_NAME)
    except ConfigLoadError as e:
        print(str(e), file=sys.stderr)
        return 1

    configure_logger(args.log_level or get_nested_config(config, "debug.level", "WARNING"))

    try:
        return args.func(args, config)
    except (GenerationError, SelectorPolicyError) as e:
        print(str(e), file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
