"""
Image provider catalogue and response normalizers.

Each provider family gets its own normalizer that maps the provider's JSON
onto one common shape, Extraction(image_url, job_id). The ordered candidate
field lists live inside the normalizers because the providers themselves are
inconsistent about where they put the result.

PROVIDERS
=========
- chatgpt-42                 sync     GPT_API_KEY    /texttoimage
- hd-ai-image-gen            sync     RAPID_API_KEY  /image_gen (may return a bare id)
- hd-ai-image-gen-standard   sync     RAPID_API_KEY  /image_gen (may return a bare id)
- midjourney-imaginecraft    probing  RAPID_API_KEY  /imagine, /mj_imagine + job polling
- pollinations, lexica       fallback only (no network)
"""
import ipaddress
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import urlsplit

from configs import GPT_KEY_PREFIX, RAPID_KEY_PREFIX


# ============================================================
# COMMON SHAPES
# ============================================================

@dataclass(frozen=True)
class Extraction:
    """What a normalizer found in a provider response."""
    image_url: Optional[str] = None
    job_id: Optional[str] = None


class ProviderMode(str, Enum):
    SYNC = "sync"
    PROBING = "probing"


URL_FIELDS: Tuple[str, ...] = ("generated_image", "image_url", "url", "image", "imageUrl", "result")
# Midjourney uses "result" for job status, not for the image
MIDJOURNEY_URL_FIELDS: Tuple[str, ...] = ("generated_image", "image_url", "url", "image", "imageUrl")
JOB_ID_FIELDS: Tuple[str, ...] = ("id", "job_id", "task_id", "messageId")
BARE_ID_FIELDS: Tuple[str, ...] = ("id", "content", "filename")

# Host serving files for providers that answer with a bare identifier
BARE_ID_IMAGE_HOST = "http://154.12.252.57:4000/images/"

BASE64_WRAP_THRESHOLD = 1000


def _first_string(data: Dict[str, Any], fields: Tuple[str, ...]) -> Optional[str]:
    for name in fields:
        value = data.get(name)
        if isinstance(value, (str, int)) and not isinstance(value, bool) and str(value).strip():
            return str(value).strip()
    return None


def _first_data_url(data: Dict[str, Any]) -> Optional[str]:
    items = data.get("data")
    if isinstance(items, list) and items and isinstance(items[0], dict):
        url = items[0].get("url")
        if isinstance(url, str) and url.strip():
            return url.strip()
    return None


def find_image_url(data: Any, fields: Tuple[str, ...] = URL_FIELDS) -> Optional[str]:
    """Check the known URL fields in order, then data[0].url."""
    if not isinstance(data, dict):
        return None
    return _first_string(data, fields) or _first_data_url(data)


def bare_id_url(identifier: str) -> str:
    """Template a bare image identifier into the image host path."""
    clean = identifier.strip()
    if "." not in clean:
        clean += ".png"
    return f"{BARE_ID_IMAGE_HOST}{clean}"


# ============================================================
# NORMALIZERS (one per provider family)
# ============================================================

def normalize_chatgpt42(data: Any) -> Extraction:
    return Extraction(image_url=find_image_url(data))


def normalize_hd_image_gen(data: Any) -> Extraction:
    url = find_image_url(data)
    if not url and isinstance(data, dict):
        identifier = _first_string(data, BARE_ID_FIELDS)
        if identifier:
            url = bare_id_url(identifier)
    return Extraction(image_url=url)


def normalize_midjourney(data: Any) -> Extraction:
    """Submit response: named fields only; data[0].url is a poll-time shape."""
    if not isinstance(data, dict):
        return Extraction()
    url = _first_string(data, MIDJOURNEY_URL_FIELDS)
    job_id = None if url else _first_string(data, JOB_ID_FIELDS)
    return Extraction(image_url=url, job_id=job_id)


def normalize_midjourney_poll(data: Any) -> Extraction:
    return Extraction(image_url=find_image_url(data, MIDJOURNEY_URL_FIELDS))


# ============================================================
# URL POST-PROCESSING
# ============================================================

def _is_ip_literal(host: Optional[str]) -> bool:
    if not host:
        return False
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


def normalize_image_url(value: str) -> str:
    """
    Canonicalize an extracted image locator.

    - Long strings (> 1000 chars) that are neither absolute URLs nor data
      URIs are raw base64 and get wrapped as data:image/png;base64,...
    - http:// URLs on a DNS hostname are upgraded to https://; literal IP
      hosts keep http://.

    Idempotent: normalizing the output again returns it unchanged.
    """
    value = value.strip()

    if (
        len(value) > BASE64_WRAP_THRESHOLD
        and not value.startswith("http")
        and not value.startswith("data:")
    ):
        return f"data:image/png;base64,{value}"

    if value.startswith("http://"):
        host = urlsplit(value).hostname
        if host and not _is_ip_literal(host):
            return "https://" + value[len("http://"):]

    return value


# ============================================================
# PROVIDER CATALOGUE
# ============================================================

BodyBuilder = Callable[[str], Dict[str, Any]]
Normalizer = Callable[[Any], Extraction]


@dataclass(frozen=True)
class ImageProviderSpec:
    """Static description of an image provider."""
    id: str
    host: str
    key_prefix: str
    mode: ProviderMode
    paths: Tuple[str, ...]
    build_body: BodyBuilder
    normalize: Normalizer
    poll_templates: Tuple[str, ...] = field(default_factory=tuple)
    poll_normalize: Optional[Normalizer] = None

    @property
    def endpoints(self) -> List[str]:
        return [f"https://{self.host}{path}" for path in self.paths]

    def poll_urls(self, job_id: str) -> List[str]:
        return [f"https://{self.host}{template.format(job_id=job_id)}" for template in self.poll_templates]


IMAGE_PROVIDERS: Dict[str, ImageProviderSpec] = {
    "chatgpt-42": ImageProviderSpec(
        id="chatgpt-42",
        host="chatgpt-42.p.rapidapi.com",
        key_prefix=GPT_KEY_PREFIX,
        mode=ProviderMode.SYNC,
        paths=("/texttoimage",),
        build_body=lambda prompt: {"text": prompt, "width": 1024, "height": 1024},
        normalize=normalize_chatgpt42,
    ),
    "hd-ai-image-gen": ImageProviderSpec(
        id="hd-ai-image-gen",
        host="hd-ai-image-gen-affordable-powerful.p.rapidapi.com",
        key_prefix=RAPID_KEY_PREFIX,
        mode=ProviderMode.SYNC,
        paths=("/image_gen",),
        build_body=lambda prompt: {"text": prompt, "prompt": prompt, "width": 1024, "height": 1024},
        normalize=normalize_hd_image_gen,
    ),
    "hd-ai-image-gen-standard": ImageProviderSpec(
        id="hd-ai-image-gen-standard",
        host="hd-ai-image-gen.p.rapidapi.com",
        key_prefix=RAPID_KEY_PREFIX,
        mode=ProviderMode.SYNC,
        paths=("/image_gen",),
        build_body=lambda prompt: {"prompt": prompt, "width": 1024, "height": 1024},
        normalize=normalize_hd_image_gen,
    ),
    "midjourney-imaginecraft": ImageProviderSpec(
        id="midjourney-imaginecraft",
        host="midjourney-imaginecraft-generative-ai-api.p.rapidapi.com",
        key_prefix=RAPID_KEY_PREFIX,
        mode=ProviderMode.PROBING,
        paths=("/imagine", "/mj_imagine"),
        build_body=lambda prompt: {"prompt": prompt},
        normalize=normalize_midjourney,
        poll_normalize=normalize_midjourney_poll,
        poll_templates=(
            "/fetch_result?id={job_id}",
            "/result?id={job_id}",
            "/get_image?id={job_id}",
        ),
    ),
}

# Deprecated / explicit-fallback ids: answered without any network call
FALLBACK_PROVIDER_IDS = frozenset({"pollinations", "lexica"})

NO_CACHE_HEADERS = {"Cache-Control": "no-cache, no-store", "Pragma": "no-cache"}


def rapidapi_headers(api_key: str, host: str, json_body: bool = True) -> Dict[str, str]:
    """RapidAPI auth headers plus cache bypass."""
    headers = {
        "x-rapidapi-key": api_key,
        "x-rapidapi-host": host,
        **NO_CACHE_HEADERS,
    }
    if json_body:
        headers["Content-Type"] = "application/json"
    return headers
