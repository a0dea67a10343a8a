import logging
import threading
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from enum import Enum
from typing import Optional

from release_scraper.exceptions import OracleUnavailableError
from utilities.settings import get_setting


class OracleState(Enum):
    UNCONFIGURED = 'unconfigured'
    UNINITIALIZED = 'uninitialized'
    READY = 'ready'
    FAILED = 'failed'


class CrossEncoderBackend:
    """Scores title pairs with a sentence-transformers cross-encoder."""

    def __init__(self, model_name: str):
        self.model_name = model_name
        self._model = None

    def load(self):
        try:
            from sentence_transformers import CrossEncoder
        except ImportError as e:
            raise OracleUnavailableError(
                "sentence-transformers is not installed; install the 'semantic' extra"
            ) from e
        logging.info(f"Loading cross-encoder model {self.model_name}")
        self._model = CrossEncoder(self.model_name)

    def score(self, a: str, b: str) -> float:
        if self._model is None:
            raise OracleUnavailableError("Cross-encoder model is not loaded")
        # Single-label cross-encoders already apply a sigmoid in predict()
        score = float(self._model.predict([[a, b]])[0])
        return min(1.0, max(0.0, score))


class SemanticOracle:
    """
    Optional similarity scorer with an explicit lifecycle.

    UNCONFIGURED: no backend, never available.
    UNINITIALIZED: backend configured, loaded on the first availability check.
    READY: calls go to the backend; a failed or timed-out call returns None.
    FAILED: loading failed; stays unavailable for the life of this instance.
    """

    def __init__(self, backend=None, timeout: float = 30):
        self.backend = backend
        self.timeout = timeout
        self.state = OracleState.UNCONFIGURED if backend is None else OracleState.UNINITIALIZED
        self._lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None

    @classmethod
    def from_settings(cls) -> 'SemanticOracle':
        if not get_setting('Semantic Matching', 'enabled'):
            return cls()
        model_name = get_setting('Semantic Matching', 'model_name')
        timeout = float(get_setting('Semantic Matching', 'timeout'))
        return cls(CrossEncoderBackend(model_name), timeout=timeout)

    def initialize(self) -> bool:
        with self._lock:
            if self.state != OracleState.UNINITIALIZED:
                return self.state == OracleState.READY
            try:
                self.backend.load()
            except Exception as e:
                logging.warning(f"Semantic similarity disabled, model failed to load: {str(e)}")
                self.state = OracleState.FAILED
                return False
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='semantic-oracle')
            self.state = OracleState.READY
            logging.info("Semantic similarity model ready")
            return True

    def is_available(self) -> bool:
        if self.state == OracleState.UNINITIALIZED:
            return self.initialize()
        return self.state == OracleState.READY

    def similarity(self, a: str, b: str) -> Optional[float]:
        """Score in [0, 1], or None when no score could be produced for this pair."""
        if not self.is_available():
            return None

        future = self._executor.submit(self.backend.score, a, b)
        try:
            return future.result(timeout=self.timeout)
        except FutureTimeoutError:
            logging.warning(f"Semantic similarity timed out after {self.timeout}s for '{a}' / '{b}'")
            return None
        except Exception as e:
            logging.warning(f"Semantic similarity failed for '{a}' / '{b}': {str(e)}")
            return None

    def shutdown(self):
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None
