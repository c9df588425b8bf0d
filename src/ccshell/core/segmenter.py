"""Pipeline segmentation."""

from __future__ import annotations

from ccshell.core.commands import QuoteState, extract_redirections, tokenize
from ccshell.core.types import Pipeline

PIPE = "|"


def split_pipeline(line: str) -> list[str]:
    """Split a raw line on unquoted, unescaped pipes.

    Quotes and backslashes are kept in the segments so the tokenizer can
    resolve them afterwards. Blank segments are dropped.
    """

    segments: list[str] = []
    buffer: list[str] = []
    state = QuoteState()

    for char in line:
        was_escaped = state.escaped
        syntax = state.consume(char)
        if char == PIPE and not syntax and not was_escaped and not state.quoted:
            segments.append("".join(buffer))
            buffer.clear()
            continue
        buffer.append(char)
    segments.append("".join(buffer))

    return [segment.strip() for segment in segments if segment.strip()]


def parse_pipeline(line: str) -> Pipeline:
    """Parse a raw line into its stages, skipping segments with no words."""

    pipeline: Pipeline = []
    for segment in split_pipeline(line):
        tokens = tokenize(segment)
        if tokens:
            pipeline.append(extract_redirections(tokens[0], tokens[1:]))
    return pipeline
