"""Raw-array sample files: flat buffers of one fixed-width element type."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

import numpy as np
import numpy.typing as npt

from subspacekit.errors import ArtifactFormatError


FloatArray = npt.NDArray[np.float64]


class ElementType(StrEnum):
    """Declared element encoding of a sample file."""

    CHAR = "char"
    UCHAR = "uchar"
    INT = "int"
    UINT = "uint"
    FLOAT = "float"
    DOUBLE = "double"
    IMAGE = "img"


ELEMENT_DTYPES: Mapping[ElementType, np.dtype[np.generic]] = MappingProxyType(
    {
        ElementType.CHAR: np.dtype("i1"),
        ElementType.UCHAR: np.dtype("u1"),
        ElementType.INT: np.dtype("<i4"),
        ElementType.UINT: np.dtype("<u4"),
        ElementType.FLOAT: np.dtype("<f4"),
        ElementType.DOUBLE: np.dtype("<f8"),
    }
)


def load_raw_features(
    path: str | Path,
    element_type: ElementType,
    size: int | None = None,
) -> FloatArray:
    """Read ``size`` elements (all of the file when unset) as float64 features."""
    element_type = ElementType(element_type)
    if element_type == ElementType.IMAGE:
        raise ValueError("image samples must be decoded with load_grayscale_image")
    if size is not None and size < 0:
        raise ValueError("size must be >= 0 when set")

    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"sample file does not exist: {file_path}")

    dtype = ELEMENT_DTYPES[element_type]
    payload = file_path.read_bytes()
    count = len(payload) // dtype.itemsize if not size else size
    needed = count * dtype.itemsize
    if len(payload) < needed:
        raise ArtifactFormatError(
            f"{file_path} holds {len(payload)} bytes, expected at least {needed} "
            f"for {count} {element_type.value} elements"
        )
    return np.frombuffer(payload, dtype=dtype, count=count).astype(np.float64)
