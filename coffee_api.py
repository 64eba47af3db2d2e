# -*- coding: utf-8 -*-
"""HTTP client for the campus coffee endpoint."""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter

log = logging.getLogger(__name__)

# ---------------- Endpoint / UA ----------------
DEFAULT_BASE_URL = "https://dentistry.liverpool.ac.uk/_ajax"
USER_AGENT = "campus-coffee/1.0 (+https://dentistry.liverpool.ac.uk)"
REQUEST_TIMEOUT_S = 10
WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday")


# ---------------- Errors ----------------
class CoffeeApiError(Exception):
    """Base class for anything that stops a remote call from yielding data."""


class NetworkError(CoffeeApiError):
    """No usable response came back (transport failure or HTTP error status)."""


class DecodeError(CoffeeApiError):
    """A response arrived but it is not the JSON shape we expect."""


# ---------------- Records ----------------
@dataclass
class ShopMarker:
    id: str; name: str; latitude: float; longitude: float


@dataclass
class OpeningHours:
    monday: Optional[str] = None
    tuesday: Optional[str] = None
    wednesday: Optional[str] = None
    thursday: Optional[str] = None
    friday: Optional[str] = None

    def days(self) -> Iterator[Tuple[str, Optional[str]]]:
        for day in WEEKDAYS:
            yield day, getattr(self, day)


@dataclass
class ShopDetail:
    id: str
    url: Optional[str] = None
    photo_url: Optional[str] = None
    phone_number: Optional[str] = None
    hours: OpeningHours = field(default_factory=OpeningHours)


# ---------------- Decoding ----------------
def _unwrap(payload: Any) -> Any:
    if not isinstance(payload, dict) or "data" not in payload or "code" not in payload:
        raise DecodeError("response is not a {data, code} envelope")
    code = payload["code"]
    if not isinstance(code, int) or isinstance(code, bool):
        raise DecodeError(f"envelope code is not an integer: {code!r}")
    if code != 200:
        log.warning("coffee endpoint answered with code %s", code)
    return payload["data"]

def _coord(raw: Dict[str, Any], key: str, limit: float) -> float:
    v = raw.get(key)
    if isinstance(v, bool) or not isinstance(v, (str, int, float)):
        raise DecodeError(f"{key} missing or not a number: {v!r}")
    try:
        f = float(v)
    except ValueError:
        raise DecodeError(f"{key} is not numeric: {v!r}") from None
    if not -limit <= f <= limit:
        raise DecodeError(f"{key} out of range: {v!r}")
    return f

def _opt_str(raw: Dict[str, Any], key: str) -> Optional[str]:
    v = raw.get(key)
    if v is None or isinstance(v, str):
        return v
    raise DecodeError(f"{key} should be a string, got {type(v).__name__}")

def decode_marker(raw: Any) -> ShopMarker:
    if not isinstance(raw, dict):
        raise DecodeError("shop entry is not an object")
    sid, name = raw.get("id"), raw.get("name")
    if isinstance(sid, bool) or not isinstance(sid, (str, int)):
        raise DecodeError(f"shop id missing or invalid: {sid!r}")
    if not isinstance(name, str):
        raise DecodeError(f"shop {sid} has no name")
    return ShopMarker(str(sid), name, _coord(raw, "latitude", 90), _coord(raw, "longitude", 180))

def decode_detail(shop_id: str, raw: Any) -> ShopDetail:
    if not isinstance(raw, dict):
        raise DecodeError("shop detail is not an object")
    hours_raw = raw.get("opening_hours")
    if hours_raw is None:
        hours = OpeningHours()
    elif isinstance(hours_raw, dict):
        hours = OpeningHours(**{d: _opt_str(hours_raw, d) for d in WEEKDAYS})
    else:
        raise DecodeError("opening_hours is not an object")
    return ShopDetail(
        id=shop_id,
        url=_opt_str(raw, "url"),
        photo_url=_opt_str(raw, "photo_url"),
        phone_number=_opt_str(raw, "phone_number"),
        hours=hours,
    )


# ---------------- HTTP session ----------------
def make_session() -> requests.Session:
    s = requests.Session()
    s.headers.update({"User-Agent": USER_AGENT, "Accept": "application/json"})
    adapter = HTTPAdapter(pool_connections=2, pool_maxsize=4, max_retries=0)
    s.mount("https://", adapter); s.mount("http://", adapter)
    return s


class CoffeeApi:
    """Single-shot GET + decode against the coffee endpoint. No retries, no auth."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL,
                 session: Optional[requests.Session] = None,
                 timeout: float = REQUEST_TIMEOUT_S):
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else make_session()
        self.timeout = timeout

    def _get_json(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            r = self.session.get(url, params=params, timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as e:
            raise NetworkError(f"GET {url} failed: {e}") from e
        try:
            return r.json()
        except ValueError as e:
            raise DecodeError(f"GET {url} returned invalid JSON") from e

    def fetch_shop_list(self) -> List[ShopMarker]:
        data = _unwrap(self._get_json("/coffee/"))
        if not isinstance(data, list):
            raise DecodeError("shop list data is not an array")
        shops = [decode_marker(o) for o in data]
        log.info("fetched %d coffee shops", len(shops))
        return shops

    def fetch_shop_detail(self, shop_id: str) -> ShopDetail:
        data = _unwrap(self._get_json("/coffee/info/", params={"id": shop_id}))
        return decode_detail(shop_id, data)
