"""
Output formatting utilities for the Convo Memory CLI.

Provides text (rich) and JSON formatters for context status, prepared
messages and conversation exports.
"""

import json
from typing import Any, Dict, Union

from rich import box
from rich.console import Group, RenderableType
from rich.table import Table
from rich.text import Text

from ..context.compression import PrepareResult
from ..context.message import message_content, message_role
from ..context.status import ContextStatus

Output = Union[str, RenderableType]


class OutputFormatter:
    """Base class for output formatters."""

    def format_status(self, status: ContextStatus, model_id: str) -> Output:
        """Format context status."""
        raise NotImplementedError

    def format_prepare_result(self, result: PrepareResult) -> Output:
        """Format prepared messages."""
        raise NotImplementedError

    def format_export(self, export_data: Dict[str, Any]) -> Output:
        """Format a conversation export."""
        raise NotImplementedError


class TextFormatter(OutputFormatter):
    """Human-readable formatter rendered with rich."""

    def format_status(self, status: ContextStatus, model_id: str) -> Output:
        style = 'red' if status.is_near_limit else 'yellow' if status.needs_summarization else 'green'

        table = Table(box=box.SIMPLE, show_header=False)
        table.add_column('Field', style='bold')
        table.add_column('Value')
        table.add_row('Model', model_id or 'default')
        table.add_row('Tokens', f"~{status.current} / {status.max}")
        table.add_row('Usage', Text(f"{status.percentage}%", style=style))
        if status.label:
            table.add_row('Status', Text(status.label, style=style))
        return table

    def format_prepare_result(self, result: PrepareResult) -> Output:
        if result.summarized:
            header = Text("Earlier conversation has been summarized to fit context window", style='yellow')
        else:
            header = Text(f"{len(result.messages)} messages will be sent", style='green')

        table = Table(box=box.SIMPLE)
        table.add_column('#', justify='right')
        table.add_column('Role', style='bold')
        table.add_column('Content')
        for i, msg in enumerate(result.messages, 1):
            content = message_content(msg)
            if len(content) > 200:
                content = content[:200] + '...'
            table.add_row(str(i), message_role(msg), content)
        return Group(header, table)

    def format_export(self, export_data: Dict[str, Any]) -> Output:
        return json.dumps(export_data, indent=2, default=str)


class JSONFormatter(OutputFormatter):
    """JSON formatter for machine-readable output."""

    def _dump(self, data: Any) -> str:
        return json.dumps(data, indent=2, default=str)

    def format_status(self, status: ContextStatus, model_id: str) -> Output:
        data = status.to_dict()
        data['model'] = model_id
        return self._dump(data)

    def format_prepare_result(self, result: PrepareResult) -> Output:
        return self._dump({
            'summarized': result.summarized,
            'summary': result.summary,
            'messages': [
                {'role': message_role(m), 'content': message_content(m)}
                for m in result.messages
            ],
        })

    def format_export(self, export_data: Dict[str, Any]) -> Output:
        return self._dump(export_data)


def get_formatter(output_format: str = 'text') -> OutputFormatter:
    """
    Get formatter for the specified output format.

    Args:
        output_format: 'text' or 'json'

    Returns:
        OutputFormatter instance
    """
    if output_format == 'json':
        return JSONFormatter()
    return TextFormatter()
