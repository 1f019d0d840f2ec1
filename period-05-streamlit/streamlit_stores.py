"""
streamlit_stores.py — Period 05: Dashboard (Streamlit)
--------------------------------------------------------
Streamlit-backed implementations of the period controller's ports:

  StreamlitQueryParamStore   -> st.query_params (the page URL)
  StreamlitCacheInvalidator  -> clears @st.cache_data loaders by tag

Both accept an injected object so they can be exercised without a
running Streamlit server.
"""

import logging
from typing import Callable, Optional

import streamlit as st

logger = logging.getLogger("periods.streamlit")


class StreamlitQueryParamStore:
    """
    QueryParamStore over a mutable mapping of URL parameters.

    Args:
        params: Mapping to wrap; defaults to st.query_params.
    """

    def __init__(self, params=None) -> None:
        self._params = params if params is not None else st.query_params

    def get(self, name: str) -> Optional[str]:
        value = self._params.get(name)
        return str(value) if value is not None else None

    def set(self, name: str, value: str) -> None:
        # Unchanged values are not rewritten; every write touches the browser URL.
        if self._params.get(name) != value:
            self._params[name] = value

    def delete(self, name: str) -> None:
        if name in self._params:
            del self._params[name]

    def to_dict(self) -> dict[str, str]:
        return {key: str(self._params[key]) for key in self._params}


class StreamlitCacheInvalidator:
    """
    CacheInvalidator that clears every cached loader registered under a tag.

    Loaders are functions decorated with @st.cache_data (anything with a
    .clear() method works).
    """

    def __init__(self) -> None:
        self._registry: dict[str, list[Callable]] = {}

    def register(self, tag: str, loader: Callable) -> Callable:
        loaders = self._registry.setdefault(tag, [])
        if loader not in loaders:
            loaders.append(loader)
        return loader

    def tagged(self, *tags: str) -> Callable[[Callable], Callable]:
        """Decorator form of register(), applied on top of @st.cache_data."""
        def decorator(loader: Callable) -> Callable:
            for tag in tags:
                self.register(tag, loader)
            return loader
        return decorator

    def invalidate(self, tag: str) -> None:
        loaders = self._registry.get(tag, [])
        if not loaders:
            logger.debug(f"No cached loaders registered for tag '{tag}'")
            return
        for loader in loaders:
            loader.clear()
        logger.debug(f"Cleared {len(loaders)} cached loader(s) for tag '{tag}'")
