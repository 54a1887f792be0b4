"""CLI helper functions for pipeline loading and artifact serialization."""

import importlib
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from typestep.contracts import OutputFormat
from typestep.core.morphism import Morphism

if TYPE_CHECKING:
    from typestep.core.config import OutputSettings
    from typestep.core.statemachine import CompiledPipeline


class PipelineReferenceError(ValueError):
    """Raised when a 'module:attribute' reference cannot be resolved to a pipeline."""


def load_pipeline(reference: str, app_dir: Path | None = None) -> Morphism[Any, Any]:
    """Resolve a 'package.module:attribute' reference to a morphism.

    The attribute may be a Morphism or a zero-argument callable returning
    one (a pipeline factory).

    Args:
        reference: Import reference, e.g. 'examples.recommendations.pipeline:pipeline'
        app_dir: Directory prepended to the import path before importing

    Raises:
        PipelineReferenceError: If the reference is malformed, cannot be
            imported, or does not name a morphism
    """
    module_name, sep, attribute = reference.partition(":")
    if not sep or not module_name or not attribute:
        raise PipelineReferenceError(f"Invalid pipeline reference '{reference}': expected 'module:attribute'")

    if app_dir is not None:
        resolved = str(app_dir.resolve())
        if resolved not in sys.path:
            sys.path.insert(0, resolved)

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise PipelineReferenceError(f"Cannot import module '{module_name}': {e}") from e

    target: Any = module
    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError:
            raise PipelineReferenceError(f"Module '{module_name}' has no attribute '{attribute}'") from None

    if callable(target) and not isinstance(target, Morphism):
        target = target()

    if not isinstance(target, Morphism):
        raise PipelineReferenceError(f"'{reference}' is a {type(target).__name__}, not a typestep Morphism")
    return target


def render_compiled(compiled: "CompiledPipeline", output: "OutputSettings") -> str:
    """Serialize a compiled pipeline in the configured format."""
    document = compiled.to_dict()
    if output.format == OutputFormat.YAML:
        rendered: str = yaml.safe_dump(document, sort_keys=False, default_flow_style=False)
        return rendered
    return json.dumps(document, indent=output.indent or None) + "\n"
