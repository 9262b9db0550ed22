"""
Text embeddings for cyberlink values.

Loads a sentence-transformers model once, then turns text into unit-norm
vectors and compares them by cosine similarity. The default model,
all-MiniLM-L6-v2, produces 384-dimensional embeddings.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional, Sequence

import numpy as np

from .errors import EmbeddingError
from .models import ProgressState

logger = logging.getLogger("cyberlink_mcp.embedding")

DEFAULT_MODEL = "sentence-transformers/all-MiniLM-L6-v2"
EMBEDDING_DIM = 384

ProgressCallback = Callable[[ProgressState], None]


class EmbeddingService:
    """Load-once, compute-many wrapper around a SentenceTransformer.

    Args:
        model_name: Hugging Face model id.
        progress_callback: Receives loading progress, in non-decreasing
            order, ending with ``ready`` or ``error``.
    """

    def __init__(
        self,
        model_name: str = DEFAULT_MODEL,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> None:
        self.model_name = model_name
        self._progress = progress_callback
        self._model: Any = None

    @property
    def ready(self) -> bool:
        return self._model is not None

    def _report(self, status: str, message: str, progress: float, done: bool) -> None:
        if self._progress is not None:
            self._progress(ProgressState(
                status=status, message=message, progress=progress, done=done,
            ))

    def _load(self) -> Any:
        from sentence_transformers import SentenceTransformer

        return SentenceTransformer(self.model_name, device="cpu")

    async def initialize(self) -> None:
        """Download (if needed) and load the model.

        Raises:
            Exception: Whatever the model loader raised, after reporting
                an ``error`` progress state.
        """
        if self._model is not None:
            return
        self._report("loading", f"Loading model {self.model_name}", 0.0, False)
        try:
            model = await asyncio.to_thread(self._load)
            self._report(
                "loading", f"Loading model {self.model_name} into memory", 0.5, False,
            )
        except Exception as exc:
            logger.error("Failed to load %s: %s", self.model_name, exc)
            self._report("error", str(exc) or "Unknown error", 0.0, True)
            raise
        self._model = model
        self._report("ready", f"Model {self.model_name} loaded successfully", 1.0, True)
        logger.info("Embedding model %s ready", self.model_name)

    async def embed(self, text: str) -> list[float]:
        """Embed text as a unit-norm vector.

        Raises:
            EmbeddingError: If ``initialize()`` has not completed.
        """
        if self._model is None:
            raise EmbeddingError("EmbeddingService not initialized")
        vector = await asyncio.to_thread(
            self._model.encode,
            text,
            convert_to_numpy=True,
            normalize_embeddings=True,
        )
        return np.asarray(vector, dtype=np.float64).tolist()

    @staticmethod
    def similarity(a: Sequence[float], b: Sequence[float]) -> float:
        """Cosine similarity in ``[-1, 1]``.

        Raises:
            EmbeddingError: If the vectors differ in length.
        """
        va = np.asarray(a, dtype=np.float64)
        vb = np.asarray(b, dtype=np.float64)
        if va.shape != vb.shape:
            raise EmbeddingError("Embeddings must have the same dimensions")
        denom = float(np.linalg.norm(va) * np.linalg.norm(vb))
        if denom == 0.0:
            return 0.0
        return float(np.clip(np.dot(va, vb) / denom, -1.0, 1.0))
