"""Subspace learning (PCA, LDA, patch-local) and nearest-neighbor evaluation."""

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())
