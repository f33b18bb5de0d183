import io
import os
import socket
import logging
import ipaddress
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple
from urllib.parse import urlparse, unquote, urljoin

import requests
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


class MissingAsset(Exception):
    """An image URL that resolves to no decodable image."""
    def __init__(self, url: str, reason: str = "not decodable"):
        self.url = url
        self.reason = reason
        super().__init__(f"Missing asset '{url}': {reason}")


@dataclass(frozen=True)
class ImageAsset:
    url: str
    width: int = 0
    height: int = 0
    decoded: bool = True

    @property
    def size(self) -> Optional[Tuple[int, int]]:
        if not self.decoded or not self.width or not self.height:
            return None
        return (self.width, self.height)


def probe_image(data: bytes, url: str = "<bytes>") -> Tuple[int, int]:
    """
    Return (width, height) of encoded image bytes.

    Raises:
        MissingAsset: if Pillow cannot identify the data
    """
    if not data:
        raise MissingAsset(url, "empty")
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
        # verify() leaves the image unusable; reopen for the size
        with Image.open(io.BytesIO(data)) as img:
            return img.size
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise MissingAsset(url, str(e))


def decode_image(data: bytes, url: str = "<bytes>") -> Image.Image:
    """Fully decoded RGBA copy for painting."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            return img.convert("RGBA")
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise MissingAsset(url, str(e))


MAX_REDIRECTS = 3
CHUNK_SIZE = 64 * 1024


def _resolve_addresses(host: str):
    """All IP addresses a hostname resolves to."""
    infos = socket.getaddrinfo(host, None, proto=socket.IPPROTO_TCP)
    return [info[4][0] for info in infos]


def is_public_host(host: Optional[str]) -> bool:
    """
    True when every address of `host` is globally routable. Loopback,
    private, link-local (cloud metadata), reserved and multicast ranges are refused.
    """
    if not host:
        return False
    try:
        addresses = _resolve_addresses(host)
    except (socket.gaierror, UnicodeError, OSError):
        return False
    if not addresses:
        return False
    for raw in addresses:
        ip = ipaddress.ip_address(raw.split("%", 1)[0])
        if (ip.is_private or ip.is_loopback or ip.is_link_local or ip.is_reserved
                or ip.is_multicast or ip.is_unspecified):
            return False
    return True


class AssetLoader:
    """
    Fetches image bytes by URL and builds the decoded-asset manifest the
    template registry consumes.

    Image URLs come from request bodies, so:
    - http(s) only reaches public hosts (checked again on every redirect)
      and stops reading past max_bytes;
    - file:// URLs and plain paths are served only from `asset_root`, and
      refused entirely when no root is configured.

    Bytes and image sizes are cached per loader instance; build one
    loader per render.
    """

    def __init__(self, timeout: float = 10.0, max_bytes: int = 16 * 1024 * 1024, session=None,
                 asset_root: Optional[str] = None):
        self.timeout = timeout
        self.max_bytes = max_bytes
        self.session = session or requests.Session()
        self.asset_root = os.path.realpath(asset_root) if asset_root else None
        self._bytes: Dict[str, bytes] = {}
        self._assets: Dict[str, ImageAsset] = {}

    def _local_path(self, url: str, parsed) -> str:
        if self.asset_root is None:
            raise MissingAsset(url, "local files are not served")
        raw = unquote(parsed.path) if parsed.scheme == "file" else url
        path = os.path.realpath(os.path.join(self.asset_root, raw))
        if os.path.commonpath([self.asset_root, path]) != self.asset_root:
            raise MissingAsset(url, "outside the asset root")
        if not os.path.isfile(path):
            raise MissingAsset(url, "file not found")
        return path

    def _read_local(self, url: str, parsed) -> bytes:
        with open(self._local_path(url, parsed), "rb") as f:
            return f.read(self.max_bytes + 1)

    def _download(self, url: str) -> bytes:
        target = url
        for _ in range(MAX_REDIRECTS + 1):
            parsed = urlparse(target)
            if parsed.scheme not in ("http", "https"):
                raise MissingAsset(url, f"unsupported redirect to '{parsed.scheme}'")
            if not is_public_host(parsed.hostname):
                raise MissingAsset(url, f"host '{parsed.hostname}' is not allowed")
            try:
                resp = self.session.get(target, timeout=self.timeout, stream=True, allow_redirects=False)
            except requests.RequestException as e:
                raise MissingAsset(url, f"fetch failed: {e}")
            try:
                if resp.is_redirect:
                    target = urljoin(target, resp.headers.get("location", ""))
                    continue
                resp.raise_for_status()
                data = bytearray()
                for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                    data.extend(chunk)
                    if len(data) > self.max_bytes:
                        break
                return bytes(data)
            except requests.RequestException as e:
                raise MissingAsset(url, f"fetch failed: {e}")
            finally:
                resp.close()
        raise MissingAsset(url, "too many redirects")

    def fetch(self, url: str) -> bytes:
        if url in self._bytes:
            return self._bytes[url]

        parsed = urlparse(url)
        if parsed.scheme in ("http", "https"):
            data = self._download(url)
        elif parsed.scheme in ("", "file"):
            data = self._read_local(url, parsed)
        else:
            raise MissingAsset(url, f"unsupported scheme '{parsed.scheme}'")

        if len(data) > self.max_bytes:
            raise MissingAsset(url, f"larger than {self.max_bytes} bytes")

        self._bytes[url] = data
        return data

    def load(self, url: str) -> ImageAsset:
        """Probe one URL; failures yield an undecoded ImageAsset instead of raising."""
        if url in self._assets:
            return self._assets[url]
        try:
            width, height = probe_image(self.fetch(url), url)
            asset = ImageAsset(url=url, width=width, height=height, decoded=True)
        except MissingAsset as e:
            logger.warning(f"Asset unavailable: {e}")
            asset = ImageAsset(url=url, decoded=False)
        self._assets[url] = asset
        return asset

    def manifest(self, urls: Iterable[Optional[str]]) -> Dict[str, ImageAsset]:
        return {url: self.load(url) for url in urls if url}

    def open(self, url: str) -> Image.Image:
        return decode_image(self.fetch(url), url)
