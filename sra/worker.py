"""Request/response worker around :mod:`sra.api`.

Requests look like ``{"method": "randomPrime", "params": {...}, "requestID": 7}``
and every response echoes the ``requestID``::

    {"result": "0xc5", "requestID": 7}
    {"error": {"type": "InvalidPrime", "message": "..."}, "requestID": 7}

Searches run on a thread pool so a host's event loop is never blocked, and a
pending or running request can be cancelled by id.
"""
from __future__ import annotations

import json
import logging
import math
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_all
from typing import IO, Any, Callable, Dict, List, Mapping, Optional, Set

from sra import api
from sra.config import EngineConfig
from sra.errors import InvalidParameter, SRAError, UnknownMethod
from sra.randomness import RandomSource

__all__ = ["SRAWorker", "METHODS", "serve_json_lines"]

logger = logging.getLogger(__name__)

METHODS = (
    "randomPrime",
    "checkPrime",
    "randomKeypair",
    "randomQuadResidues",
    "checkResidues",
    "encrypt",
    "decrypt",
)


def _param(params: Mapping[str, Any], name: str) -> Any:
    try:
        return params[name]
    except KeyError as exc:
        raise InvalidParameter(f"Missing parameter: {name}") from exc


def _radix_param(params: Mapping[str, Any]) -> int:
    radix = params.get("radix")
    if isinstance(radix, bool):
        return 16
    if isinstance(radix, str):
        try:
            radix = int(radix)
        except ValueError:
            return 16
    if isinstance(radix, float) and not math.isnan(radix):
        # 10.0 is 10; 10.5 is passed on and rejected as unsupported
        return int(radix) if radix.is_integer() else radix
    if not isinstance(radix, int):
        return 16  # missing or non-numeric defaults to hex
    return radix


def _cancel_key(request_id: Any) -> Optional[str]:
    """Registry key for a cancellable id; ``None`` unless it is a string or number."""

    if isinstance(request_id, (str, int, float)):
        return json.dumps(request_id)
    return None


class SRAWorker:
    """Dispatch named SRA operations, synchronously or on a thread pool."""

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        *,
        source: Optional[RandomSource] = None,
        max_workers: Optional[int] = None,
    ):
        self.config = config or EngineConfig()
        self.source = source or RandomSource(self.config.use_secure_source)
        self.max_workers = max_workers or self.config.max_workers
        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix="sra-worker",
        )
        self._lock = threading.Lock()
        self._cancel_events: Dict[str, List[threading.Event]] = {}
        self._handlers: Dict[str, Callable[[Mapping[str, Any], threading.Event], Any]] = {
            "randomPrime": self._random_prime,
            "checkPrime": self._check_prime,
            "randomKeypair": self._random_keypair,
            "randomQuadResidues": self._random_quad_residues,
            "checkResidues": self._check_residues,
            "encrypt": self._encrypt,
            "decrypt": self._decrypt,
        }
        logger.info("SRA worker ready (%r, %d thread(s))", self.source, self.max_workers)

    def __enter__(self) -> "SRAWorker":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()

    @staticmethod
    def ready_message() -> Dict[str, bool]:
        return {"ready": True}

    def _random_prime(self, params, cancel):
        return api.random_prime(
            _param(params, "bitLength"),
            _radix_param(params),
            source=self.source,
            config=self.config,
            cancel=cancel,
        )

    def _check_prime(self, params, cancel):
        return api.check_prime(_param(params, "prime"))

    def _random_keypair(self, params, cancel):
        return api.random_keypair(
            _param(params, "prime"), source=self.source, config=self.config, cancel=cancel
        )

    def _random_quad_residues(self, params, cancel):
        return api.random_quad_residues(
            _param(params, "prime"),
            _param(params, "numValues"),
            config=self.config,
            cancel=cancel,
        )

    def _check_residues(self, params, cancel):
        return api.check_residues(
            _param(params, "residues"), _param(params, "prime"), config=self.config
        )

    def _encrypt(self, params, cancel):
        return api.encrypt(_param(params, "value"), _param(params, "keypair"))

    def _decrypt(self, params, cancel):
        return api.decrypt(_param(params, "value"), _param(params, "keypair"))

    def _run(self, request: Mapping[str, Any], cancel: threading.Event) -> Dict[str, Any]:
        request_id = request.get("requestID") if isinstance(request, Mapping) else None
        try:
            if not isinstance(request, Mapping):
                raise InvalidParameter("Request must be an object")
            method = request.get("method")
            handler = self._handlers.get(method)
            if handler is None:
                raise UnknownMethod(f"Unknown method: {method!r}")
            params = request.get("params") or {}
            if not isinstance(params, Mapping):
                raise InvalidParameter("params must be an object")
            logger.debug("Request %r: %s", request_id, method)
            result = handler(params, cancel)
        except SRAError as exc:
            logger.info("Request %r failed: %s: %s", request_id, type(exc).__name__, exc)
            return {
                "error": {"type": type(exc).__name__, "message": str(exc)},
                "requestID": request_id,
            }
        except Exception as exc:
            logger.exception("Request %r raised unexpectedly", request_id)
            return {
                "error": {"type": "InternalError", "message": str(exc)},
                "requestID": request_id,
            }
        return {"result": result, "requestID": request_id}

    def handle(self, request: Mapping[str, Any]) -> Dict[str, Any]:
        """Run *request* on the calling thread and return its response."""

        return self._run(request, threading.Event())

    def submit(self, request: Mapping[str, Any]) -> "Future[Dict[str, Any]]":
        """Queue *request* on the pool; the future resolves to its response."""

        cancel = threading.Event()
        request_id = request.get("requestID") if isinstance(request, Mapping) else None
        key = _cancel_key(request_id)
        if key is not None:
            with self._lock:
                self._cancel_events.setdefault(key, []).append(cancel)

        def _task() -> Dict[str, Any]:
            try:
                return self._run(request, cancel)
            finally:
                if key is not None:
                    with self._lock:
                        events = self._cancel_events.get(key, [])
                        if cancel in events:
                            events.remove(cancel)
                        if not events:
                            self._cancel_events.pop(key, None)

        return self._executor.submit(_task)

    def cancel(self, request_id: Any) -> bool:
        """Signal every live request with *request_id* to stop.

        Returns ``False`` when no such request is pending or the id is not a
        string or number.
        """

        key = _cancel_key(request_id)
        if key is None:
            return False
        with self._lock:
            events = list(self._cancel_events.get(key, ()))
        if not events:
            return False
        for event in events:
            event.set()
        logger.info("Cancellation requested for %r (%d request(s))", request_id, len(events))
        return True

    def shutdown(self, wait: bool = True, *, cancel_pending: bool = False) -> None:
        """Stop the pool; with *cancel_pending* outstanding searches are abandoned."""

        if cancel_pending:
            with self._lock:
                for events in self._cancel_events.values():
                    for event in events:
                        event.set()
        self._executor.shutdown(wait=wait)


def _invalid(message: str) -> Dict[str, Any]:
    return {"error": {"type": "InvalidParameter", "message": message}, "requestID": None}


def serve_json_lines(worker: SRAWorker, infile: IO[str], outfile: IO[str]) -> int:
    """Serve newline-delimited JSON requests from *infile* until EOF.

    The ready message is written first.  Responses are written as each request
    finishes, so they may be out of order.  A ``{"cancel": <requestID>}`` line
    cancels a pending request; an id that is not a string or number is
    answered with an ``InvalidParameter`` envelope.  Returns the number of
    requests submitted.
    """

    lock = threading.Lock()
    pending: Set[Future] = set()
    submitted = 0

    def _emit(payload: Mapping[str, Any]) -> None:
        with lock:
            outfile.write(json.dumps(payload) + "\n")
            outfile.flush()

    def _finished(future: "Future[Dict[str, Any]]") -> None:
        _emit(future.result())
        with lock:
            pending.discard(future)

    _emit(worker.ready_message())
    for line in infile:
        text = line.strip()
        if not text:
            continue
        try:
            message = json.loads(text)
        except json.JSONDecodeError as exc:
            _emit(_invalid(f"Invalid JSON: {exc.msg}"))
            continue
        if isinstance(message, dict) and "cancel" in message and "method" not in message:
            if _cancel_key(message["cancel"]) is None:
                _emit(_invalid("cancel id must be a string or number"))
            else:
                worker.cancel(message["cancel"])
            continue
        future = worker.submit(message)
        submitted += 1
        with lock:
            pending.add(future)
        future.add_done_callback(_finished)

    with lock:
        remaining = list(pending)
    wait_all(remaining)
    logger.info("Input closed after %d request(s)", submitted)
    return submitted
