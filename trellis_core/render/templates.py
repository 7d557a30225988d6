from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

from jinja2 import Environment, Template as JinjaTemplate, TemplateError

from trellis_core.errors import TrellisError


TemplateFunction = Callable[[Mapping[str, Any]], str]


class TemplateRenderError(TrellisError, ValueError):
    """Raised when a template fails to compile or render."""


def default_environment() -> Environment:
    return Environment(autoescape=True, keep_trailing_newline=False)


_ENVIRONMENT = default_environment()


@dataclass(frozen=True)
class CompiledTemplate:
    """Jinja2 template exposed as a plain `context -> markup` function."""

    source: str
    template: JinjaTemplate

    def __call__(self, context: Mapping[str, Any]) -> str:
        try:
            return self.template.render(dict(context))
        except TemplateError as exc:
            raise TemplateRenderError(f"template rendering error: {exc}") from exc


def compile_template(source: str, *, environment: Environment | None = None) -> CompiledTemplate:
    if not isinstance(source, str):
        raise TypeError(f"template source must be a string, got {type(source).__name__}")
    env = environment or _ENVIRONMENT
    try:
        template = env.from_string(source)
    except TemplateError as exc:
        raise TemplateRenderError(f"template compilation error: {exc}") from exc
    return CompiledTemplate(source=source, template=template)


def as_template(value: str | TemplateFunction | None) -> TemplateFunction | None:
    """Normalize a template option: strings compile, callables pass through."""

    if value is None or isinstance(value, CompiledTemplate):
        return value
    if isinstance(value, str):
        return compile_template(value)
    if callable(value):
        return value
    raise TypeError(f"template must be a string or callable, got {type(value).__name__}")
