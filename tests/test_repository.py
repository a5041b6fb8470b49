from datetime import date
from pathlib import Path

import pytest

from folio import ContentRepository, DocumentCache, InvalidArgumentError, NotFoundError, SortDirection
from folio.content import ContentParseError, DuplicateIdentifierError
from folio.repository import sort_by_date
from folio.validation import DocumentValidationError


def _write(path: Path, body: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body, encoding="utf-8")


def _article(
    title: str,
    *,
    category: str = "Engineering",
    published: str = "2024-01-01",
    keywords: str = "[]",
    body: str = "Body text.",
) -> str:
    return (
        "---\n"
        f"title: {title}\n"
        f"description: About {title}\n"
        f"category: {category}\n"
        f"date: {published}\n"
        f"keywords: {keywords}\n"
        "---\n"
        f"{body}\n"
    )


@pytest.fixture()
def content_dir(tmp_path: Path) -> Path:
    root = tmp_path / "content" / "blog"
    _write(root / "go-channels" / "index.mdx", _article("Go Channels", published="2023-11-02"))
    _write(root / "rust-lifetimes" / "index.md", _article("Rust Lifetimes", published="2024-03-10"))
    _write(root / "remote-work" / "index.mdx", _article("Remote Work", category="Culture"))
    _write(root / "2022" / "hello-world" / "index.mdx", _article("Hello", published="2022-05-01"))
    _write(root / "loose-note.md", _article("Loose Note", published="2024-01-01"))
    _write(root / "go-channels" / "diagram.txt", "not content")
    _write(root / "go-channels" / "appendix.md", _article("Appendix"))
    return root


def test_get_all_documents_in_discovery_order(content_dir: Path) -> None:
    repository = ContentRepository.from_directory(content_dir)
    identifiers = [document.identifier for document in repository.get_all_documents()]

    assert identifiers == [
        "2022/hello-world",
        "go-channels",
        "loose-note",
        "remote-work",
        "rust-lifetimes",
    ]


def test_discovery_order_is_stable_across_calls(content_dir: Path) -> None:
    repository = ContentRepository.from_directory(content_dir)
    first = repository.get_all_documents()
    second = repository.get_all_documents()

    assert first == second


def test_get_document_matches_bulk_listing(content_dir: Path) -> None:
    repository = ContentRepository.from_directory(content_dir)

    for document in repository.get_all_documents():
        assert repository.get_document(document.identifier) == document


def test_documents_carry_thumbnails(content_dir: Path) -> None:
    repository = ContentRepository.from_directory(content_dir)
    document = repository.get_document("remote-work")

    assert document.thumbnail_svg.startswith("<svg")
    assert document.thumbnail_svg == repository.get_document("remote-work").thumbnail_svg


@pytest.mark.parametrize(
    "identifier",
    ["does-not-exist", "2022", "go-channels/appendix", "../blog/go-channels", "", "/go-channels"],
)
def test_get_document_raises_not_found(content_dir: Path, identifier: str) -> None:
    repository = ContentRepository.from_directory(content_dir)

    with pytest.raises(NotFoundError):
        repository.get_document(identifier)


def test_missing_content_directory_is_empty(tmp_path: Path) -> None:
    repository = ContentRepository.from_directory(tmp_path / "missing")

    assert repository.get_all_documents() == []
    with pytest.raises(NotFoundError):
        repository.get_document("anything")


def test_bulk_load_fails_on_first_broken_file(content_dir: Path) -> None:
    _write(content_dir / "broken" / "index.mdx", "---\ntitle: Broken\n---\nNo metadata")
    repository = ContentRepository.from_directory(content_dir)

    with pytest.raises(ContentParseError) as excinfo:
        repository.get_all_documents()

    assert "broken" in str(excinfo.value)
    # Healthy documents stay reachable one by one.
    assert repository.get_document("go-channels").meta.title == "Go Channels"


def test_lookup_of_broken_file_raises_parse_error(content_dir: Path) -> None:
    _write(content_dir / "broken" / "index.mdx", "---\ntitle: Broken\n")
    repository = ContentRepository.from_directory(content_dir)

    with pytest.raises(ContentParseError):
        repository.get_document("broken")


def test_identifier_must_be_a_slug(content_dir: Path) -> None:
    _write(content_dir / "Bad Slug" / "index.mdx", _article("Bad"))
    repository = ContentRepository.from_directory(content_dir)

    with pytest.raises(DocumentValidationError) as excinfo:
        repository.get_all_documents()

    assert excinfo.value.path == "identifier"


def test_duplicate_identifiers_are_rejected(content_dir: Path) -> None:
    _write(content_dir / "remote-work.md", _article("Remote Work Again", category="Culture"))
    repository = ContentRepository.from_directory(content_dir)

    with pytest.raises(DuplicateIdentifierError):
        repository.get_all_documents()
    with pytest.raises(DuplicateIdentifierError):
        repository.get_document("remote-work")


def test_two_index_documents_in_one_folder_are_rejected(content_dir: Path) -> None:
    _write(content_dir / "rust-lifetimes" / "index.mdx", _article("Rust Lifetimes"))
    repository = ContentRepository.from_directory(content_dir)

    with pytest.raises(DuplicateIdentifierError):
        repository.get_document("rust-lifetimes")


def test_cache_reuses_parsed_documents(content_dir: Path) -> None:
    cache: DocumentCache[object] = DocumentCache()
    repository = ContentRepository.from_directory(content_dir, cache=cache)
    first = repository.get_document("go-channels")

    _write(content_dir / "go-channels" / "index.mdx", _article("Changed Title"))

    assert repository.get_document("go-channels") is first
    cache.clear()
    assert repository.get_document("go-channels").meta.title == "Changed Title"


def test_cached_compile_follows_document_body(content_dir: Path) -> None:
    repository = ContentRepository.from_directory(content_dir, cache=DocumentCache())
    document = repository.get_document("go-channels")
    edited = document.model_copy(update={"body": "Edited body."})

    original = repository.compile(document)

    assert repository.compile(edited).html == "<p>Edited body.</p>"
    assert repository.compile(document) is original


def test_without_cache_reads_reflect_the_repository(content_dir: Path) -> None:
    repository = ContentRepository.from_directory(content_dir)
    repository.get_document("go-channels")

    _write(content_dir / "go-channels" / "index.mdx", _article("Changed Title"))

    assert repository.get_document("go-channels").meta.title == "Changed Title"


def test_sort_by_date_newest_first_and_stable(content_dir: Path) -> None:
    repository = ContentRepository.from_directory(content_dir)
    documents = repository.get_all_documents()

    ordered = repository.sort_by_date(documents)

    assert [document.identifier for document in ordered] == [
        "rust-lifetimes",
        "loose-note",
        "remote-work",
        "go-channels",
        "2022/hello-world",
    ]
    assert sort_by_date(ordered) == ordered


def test_sort_by_date_keeps_relative_order_of_ties(content_dir: Path) -> None:
    repository = ContentRepository.from_directory(content_dir)
    documents = repository.get_all_documents()
    ties = [doc for doc in documents if doc.meta.published_date == date(2024, 1, 1)]
    reversed_input = list(reversed(documents))

    for direction in (SortDirection.ASCENDING, SortDirection.DESCENDING, "ascending"):
        ordered = sort_by_date(reversed_input, direction)
        tied = [doc for doc in ordered if doc.meta.published_date == date(2024, 1, 1)]
        assert tied == list(reversed(ties))


def test_sort_by_date_ascending(content_dir: Path) -> None:
    repository = ContentRepository.from_directory(content_dir)
    ordered = sort_by_date(repository.get_all_documents(), "ascending")

    assert ordered[0].identifier == "2022/hello-world"
    assert ordered[-1].identifier == "rust-lifetimes"


def test_sort_by_date_rejects_unknown_direction() -> None:
    with pytest.raises(InvalidArgumentError):
        sort_by_date([], "sideways")


def test_get_article_bundles_body_and_recommendations(content_dir: Path) -> None:
    repository = ContentRepository.from_directory(content_dir)
    article = repository.get_article("go-channels", limit=2)

    assert article.identifier == "go-channels"
    assert article.compiled.html == "<p>Body text.</p>"
    assert len(article.recommendations) == 2
    assert "go-channels" not in [summary.identifier for summary in article.recommendations]


def test_list_summaries_newest_first(content_dir: Path) -> None:
    repository = ContentRepository.from_directory(content_dir)
    summaries = repository.list_summaries()

    assert summaries[0].identifier == "rust-lifetimes"
    assert summaries[0].published_label == "March 10, 2024"
