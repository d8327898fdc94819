"""
bptf-prices - Economy API Client
Thin wrapper around the four read-only backpack.tf economy endpoints.

Pipeline (per call):
1. Pull a callable out of the parameter bag, if any (picks delivery mode)
2. Apply endpoint defaults + domain checks (InvalidParameter, synchronous)
3. GET {api_base}/{endpoint}?{fields...}&key={api_key} on a worker thread
4. Unwrap body["response"] and hand it to the callback or resolve the Future

No retries, no caching: one outbound request per call.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Set, Tuple

import requests

from bptf_prices.config import ClientConfig
from bptf_prices.errors import UpstreamError
from bptf_prices import params as P

logger = logging.getLogger(__name__)


def _redact(url: str, api_key: Optional[str]) -> str:
    if api_key:
        return url.replace(api_key, "***")
    return url


class EconomyClient:
    """
    Queries the backpack.tf economy Web API.

    Every operation takes one optional parameter bag (a dict and/or keyword
    arguments). If the bag holds a callable it is called as
    ``callback(error, data)`` from a worker thread and the method returns
    None; otherwise the method returns a ``concurrent.futures.Future``.

    The unwrapped ``response`` object is delivered as-is, except that a
    reply carrying ``"success": 0`` (backpack.tf's in-band error flag) is
    delivered as an UpstreamError with the service's message.

    Each call runs on its own thread unless ``ClientConfig.max_workers``
    or an ``executor`` is given, in which case calls beyond that many
    wait for a free worker.

    Usage:
        client = EconomyClient(api_key="...")
        data = client.get_currencies(raw=2).result()
        client.get_special_items({"appid": 440}, callback=on_items)

    Wrap the Future with ``asyncio.wrap_future`` to await it from a loop.
    """

    def __init__(self, api_key: Optional[str] = None,
                 config: Optional[ClientConfig] = None,
                 session: Optional[requests.Session] = None,
                 executor: Optional[ThreadPoolExecutor] = None):
        if config is None:
            config = ClientConfig(api_key=api_key)
        elif api_key is not None:
            config = ClientConfig(
                api_key=api_key,
                api_base=config.api_base,
                timeout_sec=config.timeout_sec,
                max_workers=config.max_workers,
                user_agent=config.user_agent,
            )
        self._config = config

        self._owns_session = session is None
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": config.user_agent})

        # No executor and no max_workers: one thread per call, so a slow
        # request never holds up the ones queued behind it.
        if executor is None and config.max_workers is not None:
            executor = ThreadPoolExecutor(
                max_workers=config.max_workers, thread_name_prefix="bptf")
            self._owns_executor = True
        else:
            self._owns_executor = False
        self._executor = executor
        self._threads: Set[threading.Thread] = set()
        self._threads_lock = threading.Lock()
        self._closed = False
        self._close_lock = threading.Lock()

    def __repr__(self) -> str:
        return f"EconomyClient(api_base={self._config.api_base!r})"

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        """Wait for in-flight requests, then release the pool and session."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        if self._owns_executor:
            self._executor.shutdown(wait=True)
        with self._threads_lock:
            pending = list(self._threads)
        for t in pending:
            t.join()
        if self._owns_session:
            self._session.close()

    # ─── Public API ───────────────────────────────

    def get_currencies(self, params: Optional[Dict[str, Any]] = None, **kwargs):
        """Currency data for Team Fortress 2.

        Fields: raw (1 or 2, default 1).
        A ``"success": 0`` reply fails with UpstreamError.
        """
        return self._call(P.CURRENCIES, params, kwargs)

    def get_price_history(self, params: Optional[Dict[str, Any]] = None, **kwargs):
        """Price history for one item; the Team Captain when nothing is given.

        Fields: appid (440), item ("Team Captain"), quality ("Unique"),
        tradable ("Tradable"), craftable ("Craftable"), priceindex (0).
        A ``"success": 0`` reply (e.g. unknown item) fails with UpstreamError.
        """
        return self._call(P.PRICE_HISTORY, params, kwargs)

    def get_prices(self, params: Optional[Dict[str, Any]] = None, **kwargs):
        """The TF2 price schema. The service caches this globally for 900s.

        Fields: raw (1 or 2, default 1), since (UNIX time; only prices with
        last_update >= since are returned).
        A ``"success": 0`` reply fails with UpstreamError.
        """
        return self._call(P.PRICES, params, kwargs)

    def get_special_items(self, params: Optional[Dict[str, Any]] = None, **kwargs):
        """backpack.tf's internal item placeholders for an appid (440).

        A ``"success": 0`` reply fails with UpstreamError.
        """
        return self._call(P.SPECIAL_ITEMS, params, kwargs)

    # ─── Request Building ─────────────────────────

    def build_request(self, endpoint: P.Endpoint,
                      params: Optional[Dict[str, Any]] = None
                      ) -> Tuple[str, List[Tuple[str, Any]]]:
        """Return (url, ordered query pairs) for an endpoint + bag.

        Raises InvalidParameter on a bad field. The bag must not contain
        the callback; use params.split_callback first.
        """
        url = f"{self._config.api_base}/{endpoint.path}"
        query = P.build_query(endpoint, params or {}, self._config.api_key)
        return url, query

    # ─── Delivery ─────────────────────────────────

    def _call(self, endpoint: P.Endpoint, params, kwargs):
        merged = dict(params or {})
        merged.update(kwargs)
        bag, callback = P.split_callback(merged)

        # Validation errors surface here, before any thread is involved
        url, query = self.build_request(endpoint, bag)

        if self._closed:
            raise RuntimeError("EconomyClient is closed")

        future = self._submit(endpoint, url, query)
        if callback is None:
            return future

        safe_url = _redact(url, self._config.api_key)
        future.add_done_callback(
            lambda f: self._deliver(endpoint, f, callback, safe_url))
        return None

    def _submit(self, endpoint: P.Endpoint, url: str,
                query: List[Tuple[str, Any]]) -> Future:
        if self._executor is not None:
            return self._executor.submit(self._fetch, endpoint, url, query)

        future: Future = Future()
        future.set_running_or_notify_cancel()

        def run():
            try:
                future.set_result(self._fetch(endpoint, url, query))
            except Exception as e:
                future.set_exception(e)
            finally:
                with self._threads_lock:
                    self._threads.discard(threading.current_thread())

        t = threading.Thread(target=run, daemon=True,
                             name=f"bptf-{endpoint.name}")
        with self._threads_lock:
            self._threads.add(t)
        t.start()
        return future

    def _deliver(self, endpoint: P.Endpoint, future: Future, callback,
                 url: str = ""):
        try:
            if future.cancelled():
                callback(UpstreamError(f"{endpoint.path}: request was cancelled",
                                       url=url), None)
            elif future.exception() is not None:
                callback(future.exception(), None)
            else:
                callback(None, future.result())
        except Exception:
            logger.exception(f"{endpoint.name}: callback raised")

    def _fetch(self, endpoint: P.Endpoint, url: str,
               query: List[Tuple[str, Any]]) -> Any:
        """Blocking GET + unwrap. Runs on a worker thread."""
        key = self._config.api_key
        try:
            resp = self._session.get(url, params=query,
                                     timeout=self._config.timeout_sec)
        except requests.RequestException as e:
            logger.warning(f"{endpoint.name}: request failed: {_redact(str(e), key)}")
            raise UpstreamError(f"Request to {endpoint.path} failed: {_redact(str(e), key)}",
                                url=url) from e

        safe_url = _redact(resp.url or url, key)
        logger.debug(f"{endpoint.name}: GET {safe_url} -> HTTP {resp.status_code}")

        try:
            resp.raise_for_status()
        except requests.HTTPError as e:
            logger.warning(f"{endpoint.name}: HTTP {resp.status_code}")
            raise UpstreamError(f"{endpoint.path} returned HTTP {resp.status_code}",
                                url=safe_url, status_code=resp.status_code) from e

        try:
            body = resp.json()
        except ValueError as e:
            logger.warning(f"{endpoint.name}: response is not JSON")
            raise UpstreamError(f"{endpoint.path} returned a non-JSON body",
                                url=safe_url, status_code=resp.status_code) from e

        data = body.get("response") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise UpstreamError(f"{endpoint.path} body has no 'response' object",
                                url=safe_url, status_code=resp.status_code)

        if data.get("success") == 0:
            message = data.get("message") or "request was not successful"
            logger.warning(f"{endpoint.name}: upstream error: {message}")
            raise UpstreamError(f"{endpoint.path}: {message}",
                                url=safe_url, status_code=resp.status_code)

        return data
