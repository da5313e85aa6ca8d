"""
Text formatting of log events for the event body.

The output template uses the same hole syntax as message templates. Built-in
tokens:

- ``{Timestamp}``: event time (ISO 8601, milliseconds) or ``{Timestamp:%H:%M}``
- ``{Level}``: level display name
- ``{Message}``: the rendered message template
- ``{NewLine}``: ``os.linesep``
- ``{Exception}``: full traceback, or empty when the event has none
- ``{Properties}``: all event properties as compact JSON

Any other hole is looked up in the event properties.
"""

from __future__ import annotations

import os
import traceback
from typing import Protocol, runtime_checkable

from .core.events import LogEvent
from .core.templates import PropertyToken, TextToken, parse_template, render_value

DEFAULT_OUTPUT_TEMPLATE = "{Timestamp} [{Level}] {Message}{NewLine}{Exception}"


@runtime_checkable
class TextFormatter(Protocol):
    def format(self, event: LogEvent) -> str:  # noqa: D401
        """Render ``event`` to display text."""
        ...


def format_exception(exc: BaseException) -> str:
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


class MessageTemplateTextFormatter:
    """Render events through an output template."""

    def __init__(self, output_template: str = DEFAULT_OUTPUT_TEMPLATE) -> None:
        if output_template is None:
            raise ValueError("output_template must not be None")
        self._output_template = output_template
        self._tokens = parse_template(output_template)

    @property
    def output_template(self) -> str:
        return self._output_template

    def format(self, event: LogEvent) -> str:
        out: list[str] = []
        for token in self._tokens:
            if isinstance(token, TextToken):
                out.append(token.text)
            else:
                out.append(self._render_token(token, event))
        return "".join(out)

    def _render_token(self, token: PropertyToken, event: LogEvent) -> str:
        name = token.name
        if name == "Timestamp":
            if token.format:
                return event.timestamp.strftime(token.format)
            return event.timestamp.isoformat(timespec="milliseconds")
        if name == "Level":
            return render_value(str(event.level), token.format)
        if name == "Message":
            return event.render_message()
        if name == "NewLine":
            return os.linesep
        if name == "Exception":
            if event.exception is None:
                return ""
            return format_exception(event.exception)
        if name == "Properties":
            return render_value(dict(event.properties), operator="@")
        if name in event.properties:
            return render_value(event.properties[name], token.format, token.operator)
        return ""
