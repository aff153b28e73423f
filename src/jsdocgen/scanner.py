import threading
from pathlib import Path
from typing import List, Optional, Union

from jsdocgen.errors import NotADeclaration, UnbalancedSyntax
from jsdocgen.generator import JsdocGenerator, check_text
from jsdocgen.logger import declaration_logger, logger
from jsdocgen.models import BatchResult, DocEdit, SkippedDeclaration
from jsdocgen.parsers import Dialect, get_node_text
from jsdocgen.settings import RenderConfig

WORKSPACE_UNAVAILABLE = "This function is not available yet."


def generate_for_file(
    text: Optional[str],
    config: Optional[RenderConfig] = None,
    *,
    dialect: Optional[Union[Dialect, str]] = None,
    path: Optional[Union[str, Path]] = None,
    cancel: Optional[threading.Event] = None,
    generator: Optional[JsdocGenerator] = None,
) -> BatchResult:
    """
    Generate edits for every eligible declaration of a document.

    Edits are computed against the original text and returned in document
    order; they never overlap. Declarations that fail to parse are recorded
    in ``skipped``. Setting *cancel* stops the scan before the next
    declaration and returns what was produced so far.
    """
    text = check_text(text)
    gen = generator or JsdocGenerator(config)
    parser = gen.parser_for(text, dialect=dialect, path=path)
    result = BatchResult()

    last_start = -1
    last_end = -1
    for site in parser.iter_declarations():
        if cancel is not None and cancel.is_set():
            logger.info("Batch generation cancelled", edits=len(result.edits))
            result.cancelled = True
            break

        line_start = parser.lines.line_start(parser.lines.line_of(site.start_offset))
        if text[line_start : site.start_offset].strip():
            logger.debug("Declaration does not start its line", line=site.line + 1)
            continue

        try:
            edit = gen.build_edit(parser, site)
        except (NotADeclaration, UnbalancedSyntax) as ex:
            name = get_node_text(site.node.child_by_field_name("name")) or None
            declaration_logger(site.line, name).warning(
                "Skipping declaration", reason=ex.reason, message=ex.message
            )
            result.skipped.append(
                SkippedDeclaration(
                    line=site.line, reason=ex.reason, message=ex.message, name=name
                )
            )
            continue

        start = edit.span.start_offset
        if start < last_end or start == last_start:
            logger.debug("Edit overlaps a previous edit", line=site.line + 1)
            continue
        result.edits.append(edit)
        last_start = start
        last_end = edit.span.end_offset

    logger.info(
        "Batch generation finished",
        edits=len(result.edits),
        skipped=result.skipped_count,
        cancelled=result.cancelled,
    )
    return result


def apply_edits(text: str, edits: List[DocEdit]) -> str:
    """
    Apply non-overlapping edits, all computed against *text*, in one pass.
    Edits are applied from the end of the document so earlier offsets stay
    valid.
    """
    ordered = sorted(edits, key=lambda e: (e.span.start_offset, e.span.end_offset))
    for prev, cur in zip(ordered, ordered[1:]):
        if (
            cur.span.start_offset < prev.span.end_offset
            or cur.span.start_offset == prev.span.start_offset
        ):
            raise ValueError(
                f"Overlapping edits at offsets {prev.span.start_offset} and {cur.span.start_offset}"
            )
    out = text
    for edit in reversed(ordered):
        out = out[: edit.span.start_offset] + edit.text + out[edit.span.end_offset :]
    return out


def generate_for_workspace() -> str:
    """Whole-workspace generation is not implemented; reports so and returns the message."""
    logger.warning(WORKSPACE_UNAVAILABLE)
    return WORKSPACE_UNAVAILABLE
