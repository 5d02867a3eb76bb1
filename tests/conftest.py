import io

import pytest
from PIL import Image

INDEX_URL = "https://asura.example.com/manga/solo-leveling/"

INDEX_HTML = """
<html><head><title>Solo Leveling - Asura</title></head><body>
<h1 class="entry-title">  Solo Leveling  </h1>
<div class="infox">
  <div class="fmed"><b>Posted On</b><span> March 4, 2021 </span></div>
  <div class="fmed"><b>Author</b><span>Chugong</span></div>
  <div class="fmed"><b>Artist</b><span> DUBU (REDICE STUDIO) </span></div>
  <div class="wd-full"><b>Genres</b><span class="mgen">
    <a href="/genres/action/">Action</a>
    <a href="/genres/adventure/"> Adventure </a>
    <a href="/genres/fantasy/">Fantasy</a>
  </span></div>
</div>
<div id="chapterlist"><ul>
  <li data-num="2"><div class="eph-num">
    <a href="https://asura.example.com/solo-leveling-chapter-2/">
      <span class="chapternum"> Chapter 2 </span><span class="chapterdate">May 1, 2021</span>
    </a>
  </div></li>
  <li data-num="1"><div class="eph-num">
    <a href="/solo-leveling-chapter-1/">
      <span class="chapternum">Chapter 1</span><span class="chapterdate">April 1, 2021</span>
    </a>
  </div></li>
</ul></div>
</body></html>
"""

CHAPTER_1_URL = "https://asura.example.com/solo-leveling-chapter-1/"
CHAPTER_2_URL = "https://asura.example.com/solo-leveling-chapter-2/"


def chapter_html(*image_urls: str) -> str:
    images = "".join(f'<p><img src="{url}" alt="page"/></p>' for url in image_urls)
    return f'<html><body><div id="readerarea">{images}</div></body></html>'


def make_image(size=(80, 120), fmt="PNG", mode="RGB", color=(200, 30, 30)) -> bytes:
    if mode in ("RGBA", "LA"):
        color = color + (128,) if mode == "RGBA" else (120, 128)
    elif mode == "L":
        color = 120
    img = Image.new(mode, size, color)
    out = io.BytesIO()
    img.save(out, format=fmt)
    return out.getvalue()


@pytest.fixture
def png_bytes():
    return make_image(fmt="PNG")


@pytest.fixture
def jpeg_bytes():
    return make_image(fmt="JPEG")
