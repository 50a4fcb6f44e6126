#!/usr/bin/env python3
"""
app.py — Command-line interface for Gift Builder.

    python app.py validate  project.json
    python app.py export    project.json --media-dir media/ --output-dir out/
    python app.py migrate   project.json -o cleaned.json
    python app.py templates
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from config import get_settings
from engine.errors import ExportValidationError, GiftBuildError
from engine.media_store import BlobStore, ChainedMediaStore, DirectoryMediaStore, InMemoryMediaStore
from engine.pipeline_logger import PipelineLogger, configure_logging
from engine.project_io import dump_project, extract_legacy_media, read_project_file
from engine.template_loader import get_template_loader
from models import Project
from orchestrator import GiftPipeline

_log = PipelineLogger("CLI")


# ── Argument parsing ────────────────────────────────────────


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Render digital gifts to standalone HTML")
    parser.add_argument("--templates-dir", dest="templates_dir", type=Path,
                        default=settings.templates_dir,
                        help="directory holding one folder per template")
    parser.add_argument("--log-level", dest="log_level", default=None,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="stderr verbosity (default from settings)")
    sub = parser.add_subparsers(dest="command", required=True)

    validate = sub.add_parser("validate", help="check a project before export")
    validate.add_argument("project", type=Path, help="project JSON file")

    export = sub.add_parser("export", help="write gift_<YYYYMMDD>.html")
    export.add_argument("project", type=Path, help="project JSON file")
    export.add_argument("--media-dir", dest="media_dir", type=Path, default=settings.media_dir,
                        help="media store root (<media-dir>/<project-id>/<media-id>.*)")
    export.add_argument("-o", "--output-dir", dest="output_dir", type=Path,
                        default=settings.output_dir, help="where the exported file is written")

    migrate = sub.add_parser("migrate", help="rewrite a project with stale references removed")
    migrate.add_argument("project", type=Path, help="project JSON file")
    migrate.add_argument("-o", "--output", dest="output", type=Path,
                         help="write here instead of stdout")

    sub.add_parser("templates", help="list available templates")
    return parser.parse_args(argv)


# ── Helpers ─────────────────────────────────────────────────


def build_store(project: Project, payload: Dict[str, Any], media_dir: Optional[Path]) -> BlobStore:
    """Inline media from older project files first, then the media directory."""
    legacy = InMemoryMediaStore()
    for media_id, blob in extract_legacy_media(payload).items():
        legacy.put(project.id, media_id, blob.data, blob.mime)
    if media_dir is None:
        return legacy
    return ChainedMediaStore(legacy, DirectoryMediaStore(media_dir))


# ── Commands ────────────────────────────────────────────────


def cmd_validate(args: argparse.Namespace) -> int:
    project, _ = read_project_file(args.project)
    template = get_template_loader(args.templates_dir).load_meta(project.template_id)
    result = GiftPipeline(InMemoryMediaStore()).validate(project, template)
    print(json.dumps(result.to_report(), indent=2, ensure_ascii=False))
    return 0 if result.is_valid else 1


def cmd_export(args: argparse.Namespace) -> int:
    project, payload = read_project_file(args.project)
    template, markup = get_template_loader(args.templates_dir).load(project.template_id)
    pipeline = GiftPipeline(build_store(project, payload, args.media_dir))
    try:
        path = asyncio.run(pipeline.export_gift(project, template, markup, args.output_dir))
    except ExportValidationError as exc:
        print(json.dumps(exc.result.to_report(), indent=2, ensure_ascii=False))
        return 1
    print(path)
    return 0


def cmd_migrate(args: argparse.Namespace) -> int:
    project, _ = read_project_file(args.project)
    text = dump_project(project)
    if args.output:
        args.output.write_text(text, encoding="utf-8")
        _log.info(f"Migrated project written to {args.output}")
    else:
        print(text)
    return 0


def cmd_templates(args: argparse.Namespace) -> int:
    loader = get_template_loader(args.templates_dir)
    for template_id in loader.available():
        meta = loader.load_meta(template_id)
        print(f"{template_id}\t{meta.template_name}\t{len(meta.screens)} screens")
    return 0


COMMANDS = {
    "validate": cmd_validate,
    "export": cmd_export,
    "migrate": cmd_migrate,
    "templates": cmd_templates,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    if args.log_level:
        configure_logging(args.log_level)
    try:
        return COMMANDS[args.command](args)
    except GiftBuildError as exc:
        _log.error(str(exc))
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
