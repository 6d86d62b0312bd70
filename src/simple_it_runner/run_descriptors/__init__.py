"""Run descriptor domain exports."""

from .descriptor_discovery import (
    discover_descriptor_files,
    filter_descriptor_files,
    substitute_properties,
)
from .descriptor_models import (
    RUN_DESCRIPTOR_GLOB,
    ExecutionDefinition,
    RunDescriptor,
    default_run_id,
)
from .descriptor_reader import QUALIFIER_SEPARATOR, DescriptorError, read_run_descriptor

__all__ = [
    "ExecutionDefinition",
    "RunDescriptor",
    "RUN_DESCRIPTOR_GLOB",
    "QUALIFIER_SEPARATOR",
    "default_run_id",
    "DescriptorError",
    "read_run_descriptor",
    "discover_descriptor_files",
    "filter_descriptor_files",
    "substitute_properties",
]
