"""Generate typed Python bindings from tree-sitter description files.

``node-types.json`` is turned into a closed type graph
(:func:`tsgen.graph.build_type_graph`), then into abstract wrapper
declarations (:func:`tsgen.emitter.emit_wrappers`) and constants
(:func:`tsgen.constants.build_constants`), which :class:`tsgen.render.Renderer`
turns into source text.
"""

from __future__ import annotations

__version__ = "0.3.0"

from .errors import (  # noqa: E402
    DuplicateIdentifierError,
    MissingFieldError,
    SchemaError,
    SupertypeCycleError,
    TsgenError,
    UnknownVariantError,
    UnresolvedTypeError,
)

__all__ = [
    "__version__",
    "TsgenError",
    "SchemaError",
    "UnresolvedTypeError",
    "SupertypeCycleError",
    "DuplicateIdentifierError",
    "UnknownVariantError",
    "MissingFieldError",
]
