import logging

from bs4 import BeautifulSoup

from asura_scraper import Chapter, extract_images, extract_work, sanitize_filename
from conftest import CHAPTER_1_URL, CHAPTER_2_URL, INDEX_HTML, INDEX_URL


def soup(html):
    return BeautifulSoup(html, "html.parser")


def test_extract_work_metadata():
    work, _ = extract_work(soup(INDEX_HTML), base_url=INDEX_URL)
    assert work.title == "Solo Leveling"
    assert work.author == "Chugong"
    assert work.artist == "DUBU (REDICE STUDIO)"
    assert work.posted_on == "March 4, 2021"
    assert work.genres == ("Action", "Adventure", "Fantasy")


def test_extract_work_chapters_in_document_order():
    _, chapters = extract_work(soup(INDEX_HTML), base_url=INDEX_URL)
    assert chapters == [
        Chapter(name="Chapter 2", url=CHAPTER_2_URL),
        Chapter(name="Chapter 1", url=CHAPTER_1_URL),
    ]


def test_extract_work_returns_one_chapter_per_entry():
    items = "".join(
        f'<li><a href="/c-{i}/"><span class="chapternum">Chapter {i}</span></a></li>'
        for i in range(25, 0, -1)
    )
    html = f'<h1 class="entry-title">X</h1><div id="chapterlist"><ul>{items}</ul></div>'
    _, chapters = extract_work(soup(html), base_url="https://site.example/manga/x/")
    assert len(chapters) == 25
    assert chapters[0].name == "Chapter 25"
    assert chapters[-1].url == "https://site.example/c-1/"


def test_missing_metadata_fields_are_empty(caplog):
    html = '<h1 class="entry-title">Lonely</h1><div class="fmed"><b>Author</b><span>Someone</span></div>'
    with caplog.at_level(logging.WARNING, logger="asura_scraper"):
        work, chapters = extract_work(soup(html))
    assert work.author == "Someone"
    assert work.artist == ""
    assert work.posted_on == ""
    assert work.genres == ()
    assert chapters == []
    assert "Artist" in caplog.text


def test_chapter_without_link_is_skipped(caplog):
    html = """
    <div id="chapterlist"><ul>
      <li><a href="/c-3/"><span class="chapternum">Chapter 3</span></a></li>
      <li><a><span class="chapternum">Chapter 2</span></a></li>
      <li><span class="chapternum">Chapter 1.5</span></li>
      <li><a href="/c-1/"><span class="chapternum">Chapter 1</span></a></li>
    </ul></div>
    """
    with caplog.at_level(logging.WARNING, logger="asura_scraper"):
        _, chapters = extract_work(soup(html), base_url="https://site.example/")
    assert [c.name for c in chapters] == ["Chapter 3", "Chapter 1"]
    assert "Skipping chapter entry #1" in caplog.text


def test_chapter_label_falls_back_to_url_slug():
    html = '<div id="chapterlist"><ul><li><a href="https://site.example/x-chapter-7/">new!</a></li></ul></div>'
    _, chapters = extract_work(soup(html))
    assert chapters == [Chapter(name="x-chapter-7", url="https://site.example/x-chapter-7/")]


def test_extract_images_skips_missing_source():
    html = """
    <div id="readerarea">
      <p><img src="https://cdn.example.com/001.jpg"/></p>
      <p><img alt="broken"/></p>
      <p><img src=" https://cdn.example.com/003.jpg "/></p>
    </div>
    """
    assert extract_images(soup(html)) == [
        "https://cdn.example.com/001.jpg",
        "https://cdn.example.com/003.jpg",
    ]


def test_extract_images_lazy_sources_and_relative_urls():
    html = """
    <div class="sidebar"><img src="/logo.png"/></div>
    <div id="readerarea">
      <img src="data:image/gif;base64,R0lGODlh" data-src="/uploads/01.webp"/>
      <p><img data-src="02.webp"/></p>
    </div>
    """
    images = extract_images(soup(html), base_url="https://asura.example.com/ch-1/")
    assert images == [
        "https://asura.example.com/uploads/01.webp",
        "https://asura.example.com/ch-1/02.webp",
    ]


def test_sanitize_filename():
    assert sanitize_filename(' Chapter 1: "Start" ') == "Chapter 1 Start"
    assert sanitize_filename("a/b\\c?*") == "abc"
    assert sanitize_filename("  ...  ") == "untitled"
    assert sanitize_filename("") == "untitled"
    assert len(sanitize_filename("x" * 400)) == 255


def test_extract_images_ignores_noscript_fallbacks():
    html = """
    <div id="readerarea">
      <p><img data-src="https://cdn.example.com/01.jpg"/><noscript><img src="https://cdn.example.com/01.jpg"/></noscript></p>
      <p><img data-src="https://cdn.example.com/02.jpg"/><noscript><img src="https://cdn.example.com/02.jpg"/></noscript></p>
    </div>
    """
    assert extract_images(soup(html)) == [
        "https://cdn.example.com/01.jpg",
        "https://cdn.example.com/02.jpg",
    ]


def test_extract_images_prefers_lazy_source_over_placeholder():
    html = """
    <div id="readerarea">
      <p><img src="/wp-content/lazy_placeholder.gif" data-src="https://cdn.example.com/01.jpg"/></p>
    </div>
    """
    assert extract_images(soup(html), base_url="https://site.example/ch-1/") == [
        "https://cdn.example.com/01.jpg"
    ]
