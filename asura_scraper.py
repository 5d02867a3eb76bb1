#!/usr/bin/env python3
"""
asura_scraper.py - Single-file scraper for Asura-style manga index pages.

What it does:
- Reads the title page once: title, author, artist, posted-on, genres and
  the chapter list.
- For every chapter (oldest first by default) fetches the reader page,
  collects the page images in reading order and downloads them concurrently
  with aiohttp into `<output>/<title>/<chapter>/<index>.<ext>`.
- Builds one PDF per chapter with img2pdf, every image centred and scaled to
  fit the page while keeping its aspect ratio.
- A chapter that fails (bad page, broken image) is reported and skipped; the
  rest of the run carries on.

Usage:
    python asura_scraper.py "https://asuratoon.com/manga/<manga name>/"
    python asura_scraper.py "https://asuratoon.com/manga/<manga name>/" -o ./assets -w 4
    python asura_scraper.py "https://asuratoon.com/manga/<manga name>/" --config scraper.yaml

Dependencies:
    pip install requests beautifulsoup4 aiohttp img2pdf pillow filetype tqdm pyyaml rich
"""

from __future__ import annotations

import argparse
import asyncio
import functools
import io
import logging
import os
import pathlib
import re
import sys
import threading
import time
from dataclasses import dataclass, field, fields
from pathlib import PurePosixPath
from typing import Dict, List, Optional, Sequence, Tuple, Union
from urllib.parse import urljoin, urlparse

import aiohttp
import filetype
import img2pdf
import requests
import yaml
from bs4 import BeautifulSoup, Tag
from PIL import Image
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from tqdm import tqdm

# ---------------------------
# Config / constants
# ---------------------------
DEFAULT_OUTPUT_ROOT = "./assets"
DEFAULT_PAGE_FORMAT = "A4"
DEFAULT_WORKERS = 8
DEFAULT_MAX_RETRIES = 2
DEFAULT_RETRY_DELAY = 0.5
DEFAULT_TIMEOUT = 30.0
USER_AGENT = "asura-scraper/1.0 Requests/aiohttp"
IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "webp")

# Page sizes in millimetres (portrait).
PAGE_FORMATS_MM: Dict[str, Tuple[float, float]] = {
    "A3": (297.0, 420.0),
    "A4": (210.0, 297.0),
    "A5": (148.0, 210.0),
    "LETTER": (215.9, 279.4),
    "LEGAL": (215.9, 355.6),
}

# Source page contract (one site layout only).
TITLE_SELECTOR = ".entry-title"
META_BLOCK_SELECTOR = ".fmed"
GENRE_SELECTOR = "div:has(> b:-soup-contains('Genres')) > span.mgen > a"
CHAPTER_ITEM_SELECTOR = "#chapterlist > ul > li"
CHAPTER_LABEL_SELECTOR = ".chapternum"
# Direct children only: <noscript> fallbacks repeat every lazy-loaded page.
IMAGE_SELECTOR = "#readerarea > p > img, #readerarea > img"
# Lazy-load attribute first; `src` then only holds a placeholder.
IMAGE_SOURCE_ATTRS = ("data-src", "src")

# Formats img2pdf embeds without re-encoding.
EMBEDDABLE_FORMATS = ("JPEG", "PNG")

_ILLEGAL_PATH_RE = re.compile(r'[:<>"/\\|?*\x00-\x1F]')
_MAX_FILENAME_LEN = 255

logger = logging.getLogger("asura_scraper")
logger.setLevel(logging.INFO)
_handler = logging.StreamHandler(sys.stdout)
_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
logger.addHandler(_handler)


# ---------------------------
# Errors
# ---------------------------
class ScraperError(Exception):
    """Base class for every failure the pipeline knows how to report."""


class FetchError(ScraperError):
    def __init__(self, url: str, message: str, status: Optional[int] = None):
        super().__init__(f"{message} ({url})")
        self.url = url
        self.status = status


class TransientFetchError(FetchError):
    """Transport error or 5xx response; worth another attempt."""


class ParseError(ScraperError):
    pass


class ExtractionGap(ScraperError):
    """An expected field or attribute is missing from the page."""


class DownloadFailure(ScraperError):
    def __init__(self, message: str, index: Optional[int] = None, url: Optional[str] = None):
        super().__init__(message)
        self.index = index
        self.url = url


class AssemblyFailure(ScraperError):
    pass


# ---------------------------
# Data classes
# ---------------------------
@dataclass(frozen=True)
class Config:
    output_root: pathlib.Path = pathlib.Path(DEFAULT_OUTPUT_ROOT)
    page_format: str = DEFAULT_PAGE_FORMAT
    workers: int = DEFAULT_WORKERS
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = USER_AGENT
    image_extensions: Tuple[str, ...] = IMAGE_EXTENSIONS
    oldest_first: bool = True
    allow_partial: bool = True
    progress: bool = False

    def __post_init__(self):
        object.__setattr__(self, "output_root", pathlib.Path(self.output_root).expanduser())
        object.__setattr__(
            self,
            "image_extensions",
            tuple(ext.lower().lstrip(".") for ext in self.image_extensions),
        )
        if self.page_format.upper() not in PAGE_FORMATS_MM:
            raise ValueError(
                f"Unknown page format {self.page_format!r} (known: {', '.join(PAGE_FORMATS_MM)})"
            )
        if self.workers < 1:
            raise ValueError("workers must be at least 1")
        if self.max_retries < 0:
            raise ValueError("max_retries cannot be negative")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")

    @property
    def page_size(self) -> Tuple[float, float]:
        """Page width and height in PDF points."""
        width_mm, height_mm = PAGE_FORMATS_MM[self.page_format.upper()]
        return img2pdf.mm_to_pt(width_mm), img2pdf.mm_to_pt(height_mm)


@dataclass(frozen=True)
class Work:
    title: str
    author: str = ""
    artist: str = ""
    posted_on: str = ""
    genres: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Chapter:
    name: str
    url: str


@dataclass
class DownloadOutcome:
    index: int
    url: str
    path: Optional[pathlib.Path] = None
    error: Optional[DownloadFailure] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class DownloadReport:
    outcomes: List[DownloadOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> List[DownloadOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failed(self) -> List[DownloadOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass(frozen=True)
class Placement:
    """Where an image lands on a page, in points from the bottom-left corner."""

    x: float
    y: float
    width: float
    height: float


@dataclass
class AssembledDocument:
    path: pathlib.Path
    pages: List[Placement]
    page_size: Tuple[float, float]


CHAPTER_OK = "ok"
CHAPTER_PARTIAL = "partial"
CHAPTER_FAILED = "failed"


@dataclass
class ChapterResult:
    chapter: Chapter
    status: str
    image_count: int = 0
    download: Optional[DownloadReport] = None
    document: Optional[AssembledDocument] = None
    error: Optional[Exception] = None


@dataclass
class RunSummary:
    work: Work
    work_dir: pathlib.Path
    results: List[ChapterResult] = field(default_factory=list)

    @property
    def completed(self) -> List[ChapterResult]:
        return [r for r in self.results if r.status != CHAPTER_FAILED]

    @property
    def failed(self) -> List[ChapterResult]:
        return [r for r in self.results if r.status == CHAPTER_FAILED]


# ---------------------------
# Utils
# ---------------------------
def sanitize_filename(name: str, max_len: int = _MAX_FILENAME_LEN) -> str:
    name = (name or "").strip()
    name = re.sub(r"\s+", " ", name)
    name = _ILLEGAL_PATH_RE.sub("", name)
    name = name.rstrip(" .")
    if len(name) > max_len:
        name = name[: max_len - 3] + "..."
    return name or "untitled"


def ensure_dir(path: Union[str, pathlib.Path]) -> pathlib.Path:
    p = pathlib.Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p.resolve()


def backoff_delay(base: float, attempt: int) -> float:
    if base <= 0:
        return 0.0
    delay = base * (2 ** (attempt - 1))
    jitter = delay * 0.1 * (0.5 - (time.time() % 1))
    return max(0.0, delay + jitter)


def load_config(path: Optional[Union[str, pathlib.Path]] = None, **overrides) -> Config:
    """
    Build a Config from an optional YAML file plus keyword overrides.
    Keys must be Config field names; overrides win over the file.
    """
    values: Dict[str, object] = {}
    if path:
        with open(path, encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        values.update(data)
    values.update(overrides)

    known = {f.name for f in fields(Config)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
    extensions = values.get("image_extensions")
    if isinstance(extensions, str):
        values["image_extensions"] = (extensions,)
    elif extensions is not None:
        values["image_extensions"] = tuple(extensions)
    return Config(**values)


# ---------------------------
# Retry decorator
# ---------------------------
def retry_backoff(allowed_exceptions=(Exception,)):
    """Retry a method using the owner's cfg.max_retries / cfg.retry_delay."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):
            attempt = 0
            while True:
                try:
                    return func(self, *args, **kwargs)
                except allowed_exceptions as e:
                    attempt += 1
                    if attempt > self.cfg.max_retries:
                        logger.error("Max retries reached for %s(): %s", func.__name__, e)
                        raise
                    wait = backoff_delay(self.cfg.retry_delay, attempt)
                    logger.warning(
                        "Transient error in %s(): %s, retrying in %.1f seconds (attempt %d/%d)",
                        func.__name__,
                        e,
                        wait,
                        attempt,
                        self.cfg.max_retries,
                    )
                    time.sleep(wait)

        return wrapper

    return decorator


# ---------------------------
# HTTP client
# ---------------------------
class HttpClient:
    def __init__(self, cfg: Config):
        self.cfg = cfg
        self.session = requests.Session()
        self.session.headers.update(
            {
                "User-Agent": self.cfg.user_agent,
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            }
        )
        self.timeout = cfg.timeout

    @retry_backoff(allowed_exceptions=(TransientFetchError,))
    def get(self, url: str) -> requests.Response:
        logger.debug("GET %s", url)
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except (requests.ConnectionError, requests.Timeout) as e:
            raise TransientFetchError(url, f"transport error: {e}") from e
        except requests.RequestException as e:
            raise FetchError(url, f"request failed: {e}") from e

        if 200 <= resp.status_code < 300:
            return resp
        resp.close()
        message = f"status code error: {resp.status_code} {resp.reason}"
        if resp.status_code >= 500:
            raise TransientFetchError(url, message, status=resp.status_code)
        raise FetchError(url, message, status=resp.status_code)

    def close(self) -> None:
        self.session.close()


def parse_document(body: Union[bytes, str]) -> BeautifulSoup:
    if not body or not body.strip():
        raise ParseError("empty document body")
    try:
        soup = BeautifulSoup(body, "html.parser")
    except Exception as e:
        raise ParseError(f"cannot parse document: {e}") from e
    if soup.find() is None:
        raise ParseError("document has no elements")
    return soup


def fetch_document(client: HttpClient, url: str) -> BeautifulSoup:
    resp = client.get(url)
    try:
        return parse_document(resp.content)
    finally:
        resp.close()


# ---------------------------
# HTML parsers
# ---------------------------
def _text(node: Optional[Tag]) -> str:
    if node is None:
        return ""
    return node.get_text().strip()


def _attr(node: Optional[Tag], *names: str) -> str:
    """First non-empty attribute among `names`; lazy-load data: placeholders are ignored."""
    if node is not None:
        for name in names:
            value = node.get(name)
            if isinstance(value, str) and value.strip() and not value.startswith("data:"):
                return value.strip()
    raise ExtractionGap(f"missing attribute {' / '.join(names)}")


def _labelled_field(doc: BeautifulSoup, label: str) -> str:
    for block in doc.select(META_BLOCK_SELECTOR):
        name = block.find("b")
        if name is not None and label in name.get_text():
            return _text(block.find("span", recursive=False))
    raise ExtractionGap(f"no '{label}' field on the page")


def extract_work(doc: BeautifulSoup, base_url: str = "") -> Tuple[Work, List[Chapter]]:
    fields_found: Dict[str, str] = {}
    for key, label in (("author", "Author"), ("artist", "Artist"), ("posted_on", "Posted On")):
        try:
            fields_found[key] = _labelled_field(doc, label)
        except ExtractionGap as gap:
            logger.warning("%s", gap)
            fields_found[key] = ""

    title = _text(doc.select_one(TITLE_SELECTOR))
    if not title:
        logger.warning("No title found on the page")

    genres = tuple(g for g in (_text(a) for a in doc.select(GENRE_SELECTOR)) if g)

    chapters: List[Chapter] = []
    for i, item in enumerate(doc.select(CHAPTER_ITEM_SELECTOR)):
        link = item.find("a")
        try:
            href = _attr(link, "href")
        except ExtractionGap as gap:
            logger.warning("Skipping chapter entry #%d: %s", i, gap)
            continue
        url = urljoin(base_url, href) if base_url else href
        name = _text(link.select_one(CHAPTER_LABEL_SELECTOR)) or url.rstrip("/").split("/")[-1]
        chapters.append(Chapter(name=name, url=url))

    work = Work(title=title, genres=genres, **fields_found)
    return work, chapters


def extract_images(doc: BeautifulSoup, base_url: str = "") -> List[str]:
    images: List[str] = []
    for i, img in enumerate(doc.select(IMAGE_SELECTOR)):
        try:
            src = _attr(img, *IMAGE_SOURCE_ATTRS)
        except ExtractionGap as gap:
            logger.warning("Skipping image #%d: %s", i, gap)
            continue
        images.append(urljoin(base_url, src) if base_url else src)
    return images


# ---------------------------
# Image download
# ---------------------------
def infer_image_extension(url: str, content_type: Optional[str], data: bytes) -> str:
    """Guess the file extension from the file signature, the URL, then Content-Type."""
    kind = filetype.guess(data) if data else None
    if kind and kind.mime.startswith("image/"):
        ext = kind.extension.lower()
    else:
        ext = PurePosixPath(urlparse(url).path).suffix.lstrip(".").lower()
        if ext not in IMAGE_EXTENSIONS:
            ext = ""
            parts = (content_type or "").split(";")[0].split("/")
            if len(parts) == 2 and parts[0].strip() == "image":
                ext = parts[1].strip().lower()
    if ext == "jpeg" or not ext:
        return "jpg"
    return ext


def _is_allowed(ext: str, allowed: Sequence[str]) -> bool:
    return ext in allowed or (ext == "jpg" and "jpeg" in allowed)


def normalize_image(
    url: str, content_type: Optional[str], data: bytes, allowed: Sequence[str] = IMAGE_EXTENSIONS
) -> Tuple[str, bytes]:
    """
    Return (extension, bytes) for a downloaded page, re-encoding formats the
    assembler would not pick up (GIF, AVIF, BMP...) as PNG or JPEG.
    Raises ValueError when the bytes are not an image Pillow can read.
    """
    ext = infer_image_extension(url, content_type, data)
    if _is_allowed(ext, allowed):
        return ext, data

    if "png" in allowed:
        target = "png"
    elif "jpg" in allowed or "jpeg" in allowed:
        target = "jpg" if "jpg" in allowed else "jpeg"
    else:
        raise ValueError(f"cannot store .{ext} image: neither png nor jpg is allowed")
    try:
        with Image.open(io.BytesIO(data)) as img:
            if target != "png":
                return target, _flatten_to_jpeg(img)
            out = io.BytesIO()
            img.convert("RGBA" if _has_alpha(img) else "RGB").save(out, format="PNG")
            return target, out.getvalue()
    except OSError as e:
        raise ValueError(f"unsupported image format .{ext}: {e}") from e


def _write_indexed(
    dest_dir: pathlib.Path, index: int, ext: str, data: bytes, allowed: Sequence[str] = IMAGE_EXTENSIONS
) -> pathlib.Path:
    tmp = dest_dir / f".{index}.part"
    target = dest_dir / f"{index}.{ext}"
    try:
        tmp.write_bytes(data)
        # a previous run may have stored this index under another image extension
        for stale in dest_dir.glob(f"{index}.*"):
            if stale != target and stale.suffix.lower().lstrip(".") in allowed:
                stale.unlink()
        os.replace(tmp, target)
    finally:
        if tmp.exists():
            tmp.unlink()
    return target


async def _get_bytes(session: aiohttp.ClientSession, url: str) -> Tuple[bytes, str]:
    async with session.get(url) as resp:
        resp.raise_for_status()
        return await resp.read(), resp.headers.get("Content-Type", "")


def _failed_outcome(index: int, url: str, error: Optional[BaseException]) -> DownloadOutcome:
    reason = (str(error) or type(error).__name__) if error is not None else "unknown error"
    failure = DownloadFailure(f"image {index} failed: {reason}", index=index, url=url)
    logger.warning("Failed to download %s: %s", url, reason)
    return DownloadOutcome(index=index, url=url, error=failure)


async def _fetch_one(
    session: aiohttp.ClientSession,
    sem: asyncio.Semaphore,
    index: int,
    url: str,
    dest_dir: pathlib.Path,
    cfg: Config,
) -> DownloadOutcome:
    last_error: Optional[BaseException] = None
    for attempt in range(1, cfg.max_retries + 2):
        try:
            async with sem:
                data, content_type = await asyncio.wait_for(_get_bytes(session, url), timeout=cfg.timeout)
            break
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError) as e:
            last_error = e
            if attempt <= cfg.max_retries:
                await asyncio.sleep(backoff_delay(cfg.retry_delay, attempt))
    else:
        return _failed_outcome(index, url, last_error)

    try:
        ext, data = normalize_image(url, content_type, data, cfg.image_extensions)
        path = _write_indexed(dest_dir, index, ext, data, cfg.image_extensions)
    except (OSError, ValueError) as e:
        return _failed_outcome(index, url, e)
    logger.debug("Downloaded %s -> %s", url, path)
    return DownloadOutcome(index=index, url=url, path=path)


async def download_all_async(
    urls: Sequence[str], dest_dir: Union[str, pathlib.Path], cfg: Config
) -> DownloadReport:
    dest_dir = ensure_dir(dest_dir)
    if not urls:
        return DownloadReport()

    timeout = aiohttp.ClientTimeout(total=cfg.timeout)
    connector = aiohttp.TCPConnector(limit=cfg.workers)
    headers = {"User-Agent": cfg.user_agent}
    outcomes: List[DownloadOutcome] = []
    async with aiohttp.ClientSession(connector=connector, headers=headers, timeout=timeout) as session:
        sem = asyncio.Semaphore(cfg.workers)
        tasks = [
            asyncio.create_task(_fetch_one(session, sem, i, url, dest_dir, cfg))
            for i, url in enumerate(urls)
        ]
        pending = asyncio.as_completed(tasks)
        if cfg.progress:
            pending = tqdm(pending, total=len(tasks), desc="Downloading images", unit="img")
        for f in pending:
            outcomes.append(await f)

    outcomes.sort(key=lambda o: o.index)
    return DownloadReport(outcomes=outcomes)


def download_all(
    urls: Sequence[str], dest_dir: Union[str, pathlib.Path], cfg: Optional[Config] = None
) -> DownloadReport:
    """
    Download every URL into `dest_dir/<index>.<ext>` and wait for all of them.
    Never raises for a single image; failures are listed on the report.
    """
    return asyncio.run(download_all_async(urls, dest_dir, cfg or Config()))


# ---------------------------
# PDF assembly
# ---------------------------
def _image_index(path: pathlib.Path) -> Optional[int]:
    try:
        return int(path.stem)
    except ValueError:
        return None


def list_chapter_images(
    chapter_dir: pathlib.Path, extensions: Sequence[str] = IMAGE_EXTENSIONS
) -> List[pathlib.Path]:
    allowed = {ext.lower().lstrip(".") for ext in extensions}
    indexed = []
    for path in chapter_dir.iterdir():
        if not path.is_file() or path.suffix.lower().lstrip(".") not in allowed:
            continue
        index = _image_index(path)
        if index is None:
            logger.debug("Ignoring %s: no page index in filename", path.name)
            continue
        indexed.append((index, path))
    indexed.sort(key=lambda item: item[0])
    return [path for _, path in indexed]


def fit_to_page(img_w: float, img_h: float, page_w: float, page_h: float) -> Placement:
    if img_w <= 0 or img_h <= 0:
        raise ValueError(f"invalid image size {img_w}x{img_h}")
    img_ratio = img_w / img_h
    page_ratio = page_w / page_h
    if img_ratio > page_ratio:
        width = page_w
        height = page_w / img_ratio
    else:
        height = page_h
        width = page_h * img_ratio
    return Placement(x=(page_w - width) / 2, y=(page_h - height) / 2, width=width, height=height)


def _has_alpha(img: Image.Image) -> bool:
    return img.mode in ("RGBA", "LA", "PA") or "transparency" in img.info


def _flatten_to_jpeg(img: Image.Image) -> bytes:
    """Pillow re-encode for what img2pdf cannot embed directly (WebP, alpha)."""
    if _has_alpha(img):
        rgba = img.convert("RGBA")
        bg = Image.new("RGB", img.size, (255, 255, 255))
        bg.paste(rgba, mask=rgba.split()[3])
        img = bg
    else:
        img = img.convert("RGB")
    out = io.BytesIO()
    img.save(out, format="JPEG", quality=95)
    return out.getvalue()


def _pdf_source(path: pathlib.Path) -> Tuple[Union[str, bytes], Tuple[int, int]]:
    # Image.open only reads the header; pixels are decoded when flattening
    with Image.open(path) as img:
        size = img.size
        if img.format in EMBEDDABLE_FORMATS and not _has_alpha(img):
            return str(path), size
        return _flatten_to_jpeg(img), size


def assemble(
    chapter_dir: Union[str, pathlib.Path],
    cfg: Optional[Config] = None,
    output_path: Optional[Union[str, pathlib.Path]] = None,
) -> AssembledDocument:
    cfg = cfg or Config()
    chapter_dir = pathlib.Path(chapter_dir)
    try:
        images = list_chapter_images(chapter_dir, cfg.image_extensions)
    except OSError as e:
        raise AssemblyFailure(f"cannot list {chapter_dir}: {e}") from e
    if not images:
        raise AssemblyFailure(f"no images found in {chapter_dir}")

    page_w, page_h = cfg.page_size
    sources: List[Union[str, bytes]] = []
    placements: List[Placement] = []
    for path in images:
        try:
            source, (img_w, img_h) = _pdf_source(path)
            placements.append(fit_to_page(img_w, img_h, page_w, page_h))
        except Exception as e:  # Pillow raises many error types for broken files
            raise AssemblyFailure(f"cannot read image {path}: {e}") from e
        sources.append(source)

    def layout(imgwidthpx, imgheightpx, ndpi):
        # img2pdf centres the image on the page
        placement = fit_to_page(imgwidthpx, imgheightpx, page_w, page_h)
        return page_w, page_h, placement.width, placement.height

    try:
        pdf_bytes = img2pdf.convert(sources, layout_fun=layout)
    except Exception as e:
        raise AssemblyFailure(f"cannot build PDF for {chapter_dir.name}: {e}") from e

    pdf_path = pathlib.Path(output_path) if output_path else chapter_dir / f"{chapter_dir.name}.pdf"
    with pdf_path.open("wb") as fh:
        fh.write(pdf_bytes)
        fh.flush()
        os.fsync(fh.fileno())
    logger.info("Saved PDF: %s (pages=%d)", str(pdf_path), len(placements))
    return AssembledDocument(path=pdf_path, pages=placements, page_size=(page_w, page_h))


# ---------------------------
# Report sink
# ---------------------------
class Reporter:
    """Receives progress events from the scraper. Every hook is a no-op here."""

    def work_discovered(self, work: Work, chapters: List[Chapter]) -> None:
        pass

    def chapter_started(self, chapter: Chapter, image_count: int) -> None:
        pass

    def chapter_completed(self, result: ChapterResult) -> None:
        pass

    def chapter_failed(self, result: ChapterResult) -> None:
        pass

    def run_finished(self, summary: RunSummary) -> None:
        pass


class ConsoleReporter(Reporter):
    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def work_discovered(self, work: Work, chapters: List[Chapter]) -> None:
        table = Table.grid(padding=(0, 1))
        table.add_column(style="bold cyan")
        table.add_column()
        table.add_row("• Artist:", work.artist or "-")
        table.add_row("• Author:", work.author or "-")
        table.add_row("• Chapters:", str(len(chapters)))
        table.add_row("• Posted On:", work.posted_on or "-")
        table.add_row("• Genres:", ", ".join(work.genres) or "-")
        self.console.print(
            Panel(table, title=f"[bold italic]{escape(work.title or 'untitled')}", border_style="blue", expand=False)
        )

    def chapter_started(self, chapter: Chapter, image_count: int) -> None:
        self.console.print(f"[bold blue]getting {escape(chapter.name)} ({image_count} images)")

    def chapter_completed(self, result: ChapterResult) -> None:
        if result.status == CHAPTER_PARTIAL and result.download:
            self.console.print(
                f"[yellow]{escape(result.chapter.name)}: {len(result.download.failed)} of "
                f"{result.image_count} images missing"
            )
        if result.document:
            self.console.print(f"[green]PDF created successfully: {escape(str(result.document.path))}")

    def chapter_failed(self, result: ChapterResult) -> None:
        self.console.print(f"[bold red]{escape(result.chapter.name)} failed: {escape(str(result.error))}")

    def run_finished(self, summary: RunSummary) -> None:
        self.console.print(
            f"[bold]{escape(summary.work.title)}: {len(summary.completed)} chapters done, "
            f"{len(summary.failed)} failed -> {escape(str(summary.work_dir))}"
        )


# ---------------------------
# Main scraper class
# ---------------------------
class MangaScraper:
    def __init__(self, cfg: Optional[Config] = None, reporter: Optional[Reporter] = None):
        self.cfg = cfg or Config()
        self.http = HttpClient(self.cfg)
        self.reporter = reporter or Reporter()
        self._stop = threading.Event()

    def stop(self) -> None:
        """Ask a running scrape() to stop before its next chapter."""
        self._stop.set()

    def fetch_work(self, url: str) -> Tuple[Work, List[Chapter]]:
        logger.info("Fetching title page: %s", url)
        doc = fetch_document(self.http, url)
        work, chapters = extract_work(doc, base_url=url)
        logger.info("Title: %s, chapters found: %d", work.title, len(chapters))
        return work, chapters

    def fetch_chapter_images(self, chapter: Chapter) -> List[str]:
        logger.info("Inspecting chapter for images: %s", chapter.url)
        doc = fetch_document(self.http, chapter.url)
        images = extract_images(doc, base_url=chapter.url)
        logger.info("Found %d images in chapter", len(images))
        return images

    def ordered_chapters(self, chapters: Sequence[Chapter]) -> List[Chapter]:
        # index pages list newest first
        if self.cfg.oldest_first:
            return list(reversed(chapters))
        return list(chapters)

    def process_chapter(self, work_dir: pathlib.Path, chapter: Chapter) -> ChapterResult:
        chapter_dir = work_dir / sanitize_filename(chapter.name)
        result = ChapterResult(chapter=chapter, status=CHAPTER_FAILED)
        try:
            ensure_dir(chapter_dir)
            images = self.fetch_chapter_images(chapter)
            result.image_count = len(images)
            self.reporter.chapter_started(chapter, len(images))

            result.download = download_all(images, chapter_dir, self.cfg)
            missing = len(result.download.failed)
            if missing and not self.cfg.allow_partial:
                raise DownloadFailure(f"{missing} of {len(images)} images failed to download")

            result.document = assemble(chapter_dir, self.cfg)
            result.status = CHAPTER_PARTIAL if missing else CHAPTER_OK
        except (ScraperError, OSError) as e:
            logger.error("Chapter %s failed: %s", chapter.name, e)
            result.status = CHAPTER_FAILED
            result.error = e
            self.reporter.chapter_failed(result)
            return result

        self.reporter.chapter_completed(result)
        return result

    def scrape(self, url: str) -> RunSummary:
        work, chapters = self.fetch_work(url)
        work_dir = ensure_dir(self.cfg.output_root / sanitize_filename(work.title))
        logger.info("Using output folder: %s", work_dir)
        self.reporter.work_discovered(work, chapters)

        summary = RunSummary(work=work, work_dir=work_dir)
        ordered = self.ordered_chapters(chapters)
        for i, chapter in enumerate(ordered, start=1):
            if self._stop.is_set():
                logger.warning("Stop requested, %d chapters left unprocessed", len(ordered) - i + 1)
                break
            logger.info("Downloading Chapter %d/%d: %s", i, len(ordered), chapter.name)
            summary.results.append(self.process_chapter(work_dir, chapter))

        logger.info(
            "Scrape finished for %s (%d ok, %d failed)",
            work.title,
            len(summary.completed),
            len(summary.failed),
        )
        self.reporter.run_finished(summary)
        return summary


# ---------------------------
# CLI
# ---------------------------
def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="asura-scraper", description="Download every chapter of a manga and compile each into a PDF.")
    p.add_argument("url", nargs="?", help="Title page URL, e.g. 'https://asuratoon.com/manga/<manga name>/'.")
    p.add_argument("-o", "--output", default=None, help=f"Output directory (default {DEFAULT_OUTPUT_ROOT}).")
    p.add_argument("-w", "--workers", type=int, default=None, help=f"Concurrent image downloads per chapter (default {DEFAULT_WORKERS}).")
    p.add_argument("-r", "--retries", type=int, default=None, help=f"Extra attempts per request on transient failures (default {DEFAULT_MAX_RETRIES}).")
    p.add_argument("-t", "--timeout", type=float, default=None, help=f"Per-request timeout in seconds (default {DEFAULT_TIMEOUT:g}).")
    p.add_argument("--page-format", default=None, choices=sorted(PAGE_FORMATS_MM), type=str.upper, help=f"PDF page format (default {DEFAULT_PAGE_FORMAT}).")
    p.add_argument("--newest-first", action="store_true", help="Process chapters in index-page order instead of oldest first.")
    p.add_argument("--strict", action="store_true", help="Skip the PDF of a chapter when any of its images failed.")
    p.add_argument("--config", default=None, help="YAML file with default settings.")
    p.add_argument("--no-progress", action="store_true", help="Hide the download progress bar.")
    p.add_argument("--debug", action="store_true", help="Enable debug logging.")
    return p


def _cli_overrides(args: argparse.Namespace) -> Dict[str, object]:
    overrides: Dict[str, object] = {"progress": not args.no_progress}
    for key, value in (
        ("output_root", args.output),
        ("workers", args.workers),
        ("max_retries", args.retries),
        ("timeout", args.timeout),
        ("page_format", args.page_format),
    ):
        if value is not None:
            overrides[key] = value
    if args.newest_first:
        overrides["oldest_first"] = False
    if args.strict:
        overrides["allow_partial"] = False
    return overrides


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if not args.url:
        print("[ERROR] No arguments provided.", file=sys.stderr)
        parser.print_help()
        return 1
    if args.debug:
        logger.setLevel(logging.DEBUG)

    try:
        cfg = load_config(args.config, **_cli_overrides(args))
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    scraper = MangaScraper(cfg, reporter=ConsoleReporter())
    try:
        summary = scraper.scrape(args.url)
    except (ScraperError, OSError) as e:
        logger.error("Fatal error while scraping: %s", e)
        return 2
    finally:
        scraper.http.close()
    return 1 if summary.failed else 0


if __name__ == "__main__":
    sys.exit(main())
