"""CLI command handlers."""

from .evaluate import check_expression, eval_expression

__all__ = ['check_expression', 'eval_expression']
