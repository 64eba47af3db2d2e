# -*- coding: utf-8 -*-
"""Per-screen load policy: remote first, cache on failure, fixed message last."""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from coffee_api import CoffeeApi, CoffeeApiError, ShopDetail, ShopMarker
from coffee_store import CoffeeStore

log = logging.getLogger(__name__)

COMMUNICATION_ERROR = "Unable to load details: There was a communication error"
LIST_COMMUNICATION_ERROR = "Unable to load coffee shops: There was a communication error"


class LoadState(str, Enum):
    LOADING = "loading"
    DISPLAYED = "displayed"
    DISPLAYED_FROM_CACHE = "displayed_from_cache"
    ERROR = "error"


@dataclass
class ShopListResult:
    state: LoadState
    shops: List[ShopMarker] = field(default_factory=list)
    message: Optional[str] = None


@dataclass
class ShopDetailResult:
    state: LoadState
    detail: Optional[ShopDetail] = None
    message: Optional[str] = None


def load_shop_list(api: CoffeeApi, store: CoffeeStore,
                   on_result: Optional[Callable[[ShopListResult], None]] = None) -> ShopListResult:
    """Fetch the shop list.

    On success ``on_result`` sees the fresh list before the cache is rewritten,
    so display never waits on the disk. On any remote failure the cached
    markers are used, and an empty cache yields ``LoadState.ERROR``.
    """
    try:
        shops = api.fetch_shop_list()
    except CoffeeApiError as e:
        log.warning("shop list fetch failed, falling back to cache: %s", e)
        cached = store.get_all_markers()
        if cached:
            result = ShopListResult(LoadState.DISPLAYED_FROM_CACHE, cached)
        else:
            result = ShopListResult(LoadState.ERROR, message=LIST_COMMUNICATION_ERROR)
        if on_result:
            on_result(result)
        return result

    result = ShopListResult(LoadState.DISPLAYED, shops)
    if on_result:
        on_result(result)
    store.replace_all_markers(shops)
    return result


def load_shop_detail(shop_id: str, api: CoffeeApi, store: CoffeeStore,
                     on_result: Optional[Callable[[ShopDetailResult], None]] = None) -> ShopDetailResult:
    """Same policy as :func:`load_shop_list`, for one shop's details (upserted, never replaced)."""
    try:
        detail = api.fetch_shop_detail(shop_id)
    except CoffeeApiError as e:
        log.warning("details fetch for shop %s failed, falling back to cache: %s", shop_id, e)
        cached = store.get_detail(shop_id)
        if cached is not None:
            result = ShopDetailResult(LoadState.DISPLAYED_FROM_CACHE, cached)
        else:
            log.info("no details cached for shop %s", shop_id)
            result = ShopDetailResult(LoadState.ERROR, message=COMMUNICATION_ERROR)
        if on_result:
            on_result(result)
        return result

    result = ShopDetailResult(LoadState.DISPLAYED, detail)
    if on_result:
        on_result(result)
    store.upsert_detail(detail)
    return result
