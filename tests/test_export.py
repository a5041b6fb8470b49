import json
from pathlib import Path

from folio import ContentRepository
from folio.config import Config
from folio.export import article_path, export_site


def _write(path: Path, body: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body, encoding="utf-8")


def _article(title: str, category: str, published: str, keywords: str) -> str:
    return (
        f"---\ntitle: {title}\ndescription: About {title}\ncategory: {category}\n"
        f"date: {published}\nkeywords: {keywords}\n---\n## Intro\n\nSome words about {title}.\n"
    )


def _repository(tmp_path: Path) -> ContentRepository:
    root = tmp_path / "content" / "blog"
    _write(root / "go-channels" / "index.mdx", _article("Go Channels", "Engineering", "2023-11-02", "[go]"))
    _write(root / "go-generics" / "index.mdx", _article("Go Generics", "Engineering", "2024-02-01", "[go]"))
    _write(root / "remote-work" / "index.mdx", _article("Remote Work", "Culture", "2024-03-01", "[]"))
    _write(root / "2022" / "hello" / "index.mdx", _article("Hello", "Culture", "2022-01-01", "[]"))
    config = Config(content_dir=root, output_dir=tmp_path / "out")
    return ContentRepository(config)


def test_export_writes_index_newest_first(tmp_path: Path) -> None:
    repository = _repository(tmp_path)

    written = export_site(repository)

    index = json.loads((tmp_path / "out" / "index.json").read_text(encoding="utf-8"))
    assert index["total_items"] == 4
    assert [item["identifier"] for item in index["items"]] == [
        "remote-work",
        "go-generics",
        "go-channels",
        "2022/hello",
    ]
    assert index["items"][0]["published_label"] == "March 1, 2024"
    assert index["items"][0]["thumbnail_svg"].startswith("<svg")
    assert len(written) == 5


def test_export_article_record_includes_body_and_recommendations(tmp_path: Path) -> None:
    repository = _repository(tmp_path)

    export_site(repository)

    record_path = article_path(tmp_path / "out", "go-channels")
    assert record_path == tmp_path / "out" / "articles" / "go-channels.json"
    record = json.loads(record_path.read_text(encoding="utf-8"))
    assert record["document"]["identifier"] == "go-channels"
    assert record["document"]["meta"]["published_date"] == "2023-11-02"
    assert '<h2 id="intro">Intro</h2>' in record["compiled"]["html"]
    assert [entry["identifier"] for entry in record["recommendations"]] == [
        "go-generics",
        "remote-work",
        "2022/hello",
    ]
    nested = article_path(tmp_path / "out", "2022/hello")
    assert nested.is_file()


def test_export_prunes_stale_records(tmp_path: Path) -> None:
    repository = _repository(tmp_path)
    stale = tmp_path / "out" / "articles" / "deleted-post.json"
    _write(stale, "{}")
    unrelated = tmp_path / "out" / "notes.txt"
    _write(unrelated, "keep me")

    export_site(repository)

    assert not stale.exists()
    assert unrelated.exists()


def test_export_keeps_json_files_it_did_not_write(tmp_path: Path) -> None:
    repository = _repository(tmp_path)
    site = tmp_path / "site"
    package_json = site / "package.json"
    settings = site / "config" / "settings.json"
    _write(package_json, "{}")
    _write(settings, "{}")

    export_site(repository, site)

    assert package_json.read_text(encoding="utf-8") == "{}"
    assert settings.read_text(encoding="utf-8") == "{}"
    assert (site / "index.json").is_file()


def test_export_respects_destination_override(tmp_path: Path) -> None:
    repository = _repository(tmp_path)
    destination = tmp_path / "elsewhere"

    export_site(repository, destination)

    assert (destination / "index.json").is_file()
    assert not (tmp_path / "out").exists()
