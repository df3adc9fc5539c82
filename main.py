"""
Signature Injection Engine – command line entry point.

    python main.py sign    input.pdf fields.json [-o output.pdf] [--store]
                           [--signature sig.png | --signature-strokes strokes.json] [--allow-unsigned]
    python main.py preview input.pdf fields.json --page 1 [--width 800] -o page.png
    python main.py audit   [--limit 20]

fields.json is either a list of fields or {"fields": [...], "viewport": {...}}
in the JSON shape the browser client sends.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from core.config.config_service import config_service
from core.contracts.audit import PersistenceError
from core.logging import setup_logging
from signing.exceptions.errors import LoadError, SerializationError, SigningError
from signing.logic.document_assembler import DocumentAssembler
from signing.logic.naming_strategy import DefaultSuffixStrategy, NamingContext
from signing.logic.page_renderer import PageRenderer
from signing.logic.preview_renderer import PreviewRenderer
from signing.logic.signature_capture import payload_from_strokes, payload_from_upload
from signing.logic.signing_service import SigningService
from signing.logic.signing_session import SigningSession
from signing.models.field import Field
from signing.models.image_payload import ImagePayload
from signing.models.render_style import RenderStyle

logger = logging.getLogger("signature_engine")


def _load_session(pdf_path: Path, fields_path: Path) -> SigningSession:
    raw = json.loads(fields_path.read_text(encoding="utf-8"))
    if isinstance(raw, dict):
        items = raw.get("fields", [])
        vp = raw.get("viewport")
    else:
        items, vp = raw, None
    session = SigningSession(style=RenderStyle.from_config(config_service.rendering))
    session.load_document(pdf_path.read_bytes(), pdf_path.name)
    if vp:
        session.set_viewport(float(vp["width"]), float(vp["height"]))
    for item in items:
        session.place_field(Field.from_dict(item))
    return session


def _signature_payload(args: argparse.Namespace) -> Optional[ImagePayload]:
    if args.signature:
        return payload_from_upload(Path(args.signature).read_bytes())
    if args.signature_strokes:
        strokes = json.loads(Path(args.signature_strokes).read_text(encoding="utf-8"))
        return payload_from_strokes(strokes, trim=True)
    return None


def _cmd_sign(args: argparse.Namespace) -> int:
    session = _load_session(Path(args.input), Path(args.fields))
    payload = _signature_payload(args)
    if payload is not None:
        session.sign_all(payload)
    request = session.build_request(require_signatures=not args.allow_unsigned)
    if args.store:
        service = SigningService()
        result = service.sign(request, source_name=Path(args.input).name)
        print(json.dumps(result.as_response(), indent=2))
    else:
        assembler = DocumentAssembler(PageRenderer(RenderStyle.from_config(config_service.rendering)))
        rendered = assembler.render(request)
        out = Path(args.output or DefaultSuffixStrategy().propose_name(NamingContext.now(args.input)))
        out.write_bytes(rendered.pdf_bytes)
        print(f"{out}  ({rendered.page_count} pages, {len(rendered.report.drawn)} fields drawn)")
        for skipped in rendered.report.skipped:
            print(f"  skipped field {skipped.field_id} on page {skipped.page}: {skipped.reason}")
    return 0


def _cmd_preview(args: argparse.Namespace) -> int:
    session = _load_session(Path(args.input), Path(args.fields))
    renderer = PreviewRenderer(RenderStyle.from_config(config_service.rendering))
    img = renderer.render(session.source, session.fields.snapshot(), args.page, width_px=args.width)
    img.save(args.output)
    print(f"{args.output}  ({img.width}x{img.height}px)")
    return 0


def _cmd_audit(args: argparse.Namespace) -> int:
    from core.audit.logic.audit_repository import SqliteAuditRepository

    repo = SqliteAuditRepository(config_service.audit.database)
    try:
        for rec in repo.fetch_recent(args.limit):
            print(json.dumps(rec.as_dict()))
    finally:
        repo.close()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="signature-engine", description=__doc__.splitlines()[1])
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_sign = sub.add_parser("sign", help="burn fields into a PDF")
    p_sign.add_argument("input")
    p_sign.add_argument("fields")
    p_sign.add_argument("-o", "--output")
    p_sign.add_argument("--store", action="store_true",
                        help="store in the output directory and write the audit trail")
    p_sign.add_argument("--signature", help="PNG/JPEG image for every unsigned signature field")
    p_sign.add_argument("--signature-strokes",
                        help="JSON list of strokes ([[x, y], ...]) drawn on the capture canvas")
    p_sign.add_argument("--allow-unsigned", action="store_true",
                        help="burn even if signature fields have no signature")
    p_sign.set_defaults(func=_cmd_sign)

    p_prev = sub.add_parser("preview", help="render a page with its fields to an image")
    p_prev.add_argument("input")
    p_prev.add_argument("fields")
    p_prev.add_argument("--page", type=int, default=1)
    p_prev.add_argument("--width", type=int, default=int(config_service.service.default_viewport_width))
    p_prev.add_argument("-o", "--output", required=True)
    p_prev.set_defaults(func=_cmd_preview)

    p_audit = sub.add_parser("audit", help="list recent audit records")
    p_audit.add_argument("--limit", type=int, default=20)
    p_audit.set_defaults(func=_cmd_audit)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level="DEBUG" if args.verbose else None)
    try:
        return args.func(args)
    except (LoadError, SerializationError) as ex:
        logger.error(f"{type(ex).__name__}: {ex}")
        return 2
    except (SigningError, PersistenceError, OSError, ValueError) as ex:
        logger.error(str(ex))
        return 1


if __name__ == "__main__":
    sys.exit(main())
