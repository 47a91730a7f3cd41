"""Unit tests for the locally persisted movie mirror."""

from app.core.services.local_mirror import LocalMirror


def test_replace_all_is_persisted(tmp_path, movie_factory):
    path = tmp_path / "mirror.json"
    mirror = LocalMirror(path)
    mirror.replace_all([movie_factory("Alien", "1"), movie_factory("Heat", "2")])

    reloaded = LocalMirror(path)
    assert [m.name for m in reloaded.list_movies()] == ["Alien", "Heat"]


def test_incremental_changes(tmp_path, movie_factory):
    mirror = LocalMirror(tmp_path / "mirror.json")
    mirror.replace_all([movie_factory("Alien", "1")])

    mirror.append(movie_factory("Heat", "2"))
    assert mirror.replace(movie_factory("Aliens", "1")) is True
    assert mirror.replace(movie_factory("Ghost", "404")) is False
    assert mirror.remove("2") is True
    assert mirror.remove("2") is False

    assert [(m.id, m.name) for m in mirror.list_movies()] == [("1", "Aliens")]
    assert len(LocalMirror(tmp_path / "mirror.json")) == 1


def test_upsert_appends_unknown_records(tmp_path, movie_factory):
    mirror = LocalMirror(tmp_path / "mirror.json")
    mirror.upsert(movie_factory("Alien", "1"))
    mirror.upsert(movie_factory("Alien 2", "1"))
    assert [(m.id, m.name) for m in mirror.list_movies()] == [("1", "Alien 2")]


def test_rekey_moves_record_to_server_id(tmp_path, movie_factory):
    mirror = LocalMirror(tmp_path / "mirror.json")
    mirror.append(movie_factory("Dune", "local-abc"))
    mirror.rekey("local-abc", "srv-1")

    assert mirror.get("local-abc") is None
    assert mirror.get("srv-1").name == "Dune"
    assert LocalMirror(tmp_path / "mirror.json").get("srv-1") is not None


def test_returned_movies_are_copies(tmp_path, movie_factory):
    mirror = LocalMirror(tmp_path / "mirror.json")
    mirror.append(movie_factory("Alien", "1"))

    mirror.list_movies()[0].name = "changed"
    mirror.get("1").name = "changed"

    assert mirror.get("1").name == "Alien"
