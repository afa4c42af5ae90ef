"""Source image loading from local files or HTTP(S) URLs."""

from __future__ import annotations

import tempfile
import urllib.error
import urllib.request
from pathlib import Path
from urllib.parse import urlparse

from PIL import Image


def is_url(path: str) -> bool:
    """Check if the input looks like an HTTP(S) URL."""
    try:
        parsed = urlparse(str(path))
        return parsed.scheme in ("http", "https")
    except ValueError:
        return False


def _guess_extension_from_url(url: str) -> str:
    """Extract an image file extension from a URL path."""
    suffix = Path(urlparse(url).path).suffix.lower()
    if suffix in Image.registered_extensions():
        return suffix
    # PIL sniffs the real format from content anyway
    return ".img"


def download_image(url: str, timeout: float = 30.0) -> Path:
    """Download an image from a URL to a temp file.

    Raises:
        ValueError: if the URL is unreachable or the response is empty.
    """
    ext = _guess_extension_from_url(url)
    tmp = tempfile.NamedTemporaryFile(suffix=ext, delete=False)
    tmp_path = Path(tmp.name)

    try:
        req = urllib.request.Request(url, headers={"User-Agent": "dithered-qr/0.1"})
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            while True:
                chunk = resp.read(65536)
                if not chunk:
                    break
                tmp.write(chunk)
        tmp.close()
    except urllib.error.URLError as e:
        tmp.close()
        tmp_path.unlink(missing_ok=True)
        raise ValueError(f"Failed to download {url}: {e}") from e
    except Exception:
        tmp.close()
        tmp_path.unlink(missing_ok=True)
        raise

    if tmp_path.stat().st_size == 0:
        tmp_path.unlink(missing_ok=True)
        raise ValueError(f"Downloaded file is empty: {url}")

    return tmp_path


def _load_local(path: Path) -> Image.Image:
    with Image.open(path) as img:
        img.load()
        return img.convert("RGB")


def load_image(path: str | Path) -> Image.Image:
    """Open a source image and return it as RGB.

    Accepts local file paths or HTTP(S) URLs. URLs are downloaded to a
    temporary file which is removed once decoded.

    Raises:
        FileNotFoundError: local path does not exist.
        PIL.UnidentifiedImageError / OSError: undecodable image.
        ValueError: download failure.
    """
    path_str = str(path)
    if is_url(path_str):
        local_path = download_image(path_str)
        try:
            return _load_local(local_path)
        finally:
            local_path.unlink(missing_ok=True)

    local_path = Path(path_str)
    if not local_path.exists():
        raise FileNotFoundError(f"File not found: {local_path}")
    return _load_local(local_path)
