"""Subspace artifacts, their generators and projectors."""

from subspacekit.subspace.contracts import Subspace, SubspaceKind
from subspacekit.subspace.generators import (
    LdaConfig,
    LdaSubspaceGenerator,
    PcaSubspaceGenerator,
    SubspaceGenerator,
)
from subspacekit.subspace.local import (
    LocalDescriptor,
    LocalFeature,
    LocalSubspace,
    LocalSubspaceConfig,
    LocalSubspaceGenerator,
    LocalSubspaceProjector,
)
from subspacekit.subspace.projector import SubspaceProjector

__all__ = [
    "LdaConfig",
    "LdaSubspaceGenerator",
    "LocalDescriptor",
    "LocalFeature",
    "LocalSubspace",
    "LocalSubspaceConfig",
    "LocalSubspaceGenerator",
    "LocalSubspaceProjector",
    "PcaSubspaceGenerator",
    "Subspace",
    "SubspaceGenerator",
    "SubspaceKind",
    "SubspaceProjector",
]
