"""Render constants tables and wrapper declarations to source text.

Templates live under ``templates/<language>/`` and receive the abstract
declarations unchanged; the small amount of target syntax that is awkward in
Jinja (annotations, accessor helper names, literals) is provided as filters.
"""

from __future__ import annotations

import logging

from jinja2 import Environment, PackageLoader, StrictUndefined

from tsgen import __version__
from tsgen.config import ForLanguage, GeneratorConfig
from tsgen.constants import ConstantsTable
from tsgen.emitter import AccessorDecl, RecordDecl, RootDecl, Shape, UnionDecl, WrapperModule

logger = logging.getLogger(__name__)

_SLOT_HELPERS = {
    Shape.SINGLE: "_slot_required",
    Shape.OPTIONAL: "_slot_optional",
    Shape.SEQUENCE: "_slot_sequence",
}
_FIELD_HELPERS = {
    Shape.SINGLE: "_required",
    Shape.OPTIONAL: "_optional",
    Shape.SEQUENCE: "_sequence",
}


def _annotation(accessor: AccessorDecl) -> str:
    result = " | ".join(accessor.result_types) or "_rt.TypedNode"
    if accessor.shape is Shape.SEQUENCE:
        return f"_rt.NodeSequence[{result}]"
    if accessor.shape is Shape.OPTIONAL:
        return f"{result} | None"
    return result


def _helper(accessor: AccessorDecl) -> str:
    helpers = _SLOT_HELPERS if accessor.is_children_slot else _FIELD_HELPERS
    return helpers[accessor.shape]


def _doc_literal(value: str) -> str:
    # repr() escapes backslashes and control characters; double quotes
    # must not terminate the surrounding docstring.
    return repr(value).replace('"', '\\"')


def create_environment(for_language: ForLanguage) -> Environment:
    env = Environment(
        loader=PackageLoader("tsgen.render", f"templates/{for_language.value}"),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        autoescape=False,
    )
    env.filters["annotation"] = _annotation
    env.filters["helper"] = _helper
    env.filters["pyrepr"] = repr
    env.filters["doc"] = _doc_literal
    env.tests["record"] = lambda decl: isinstance(decl, RecordDecl)
    env.tests["union"] = lambda decl: isinstance(decl, UnionDecl)
    env.tests["root"] = lambda decl: isinstance(decl, RootDecl)
    return env


class Renderer:
    """Render generated modules for one configuration."""

    def __init__(self, config: GeneratorConfig):
        self.config = config
        self.env = create_environment(config.for_language)

    def render_constants(self, table: ConstantsTable) -> str:
        template = self.env.get_template("constants.jinja")
        text = template.render(table=table, version=__version__)
        logger.debug("Rendered constants module (%d characters)", len(text))
        return text

    def render_wrapper(self, module: WrapperModule) -> str:
        template = self.env.get_template("wrapper.jinja")
        text = template.render(
            module=module,
            constants_module=self.config.constants_module,
            relative_imports=self.config.relative_imports,
            version=__version__,
        )
        logger.debug("Rendered wrapper module (%d characters)", len(text))
        return text


__all__ = ["Renderer", "create_environment"]
