"""
Meme Store Tests - JSON Record Persistence

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- tokenstats.adapters.persistence.meme_store (MemeStore)
"""
import json
from datetime import datetime, timedelta, timezone

from tokenstats.adapters.persistence.meme_store import MemeStore
from tokenstats.domain.models import UploadedAsset


def asset(asset_id, minutes=0):
    return UploadedAsset(
        id=asset_id,
        filename=f"{asset_id}.png",
        stored_name=f"{asset_id}.png",
        content_type="image/png",
        size=10,
        url=f"/uploads/{asset_id}.png",
        pathname=f"{asset_id}.png",
        uploaded_at=datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=minutes),
    )


class TestMemeStore:
    def test_empty(self, tmp_path):
        assert MemeStore(tmp_path / "memes.json").list() == []

    def test_add_and_list_newest_first(self, tmp_path):
        store = MemeStore(tmp_path / "memes.json")
        store.add(asset("old", minutes=0))
        store.add(asset("new", minutes=5))

        assert [a.id for a in store.list()] == ["new", "old"]
        # A fresh instance reads the same file
        assert [a.id for a in MemeStore(tmp_path / "memes.json").list()] == ["new", "old"]

    def test_file_format(self, tmp_path):
        path = tmp_path / "memes.json"
        MemeStore(path).add(asset("a"))

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data[0]["originalName"] == "a.png"
        assert data[0]["mimeType"] == "image/png"
        assert data[0]["uploadDate"].startswith("2024-01-01")

    def test_corrupt_file_backed_up(self, tmp_path):
        path = tmp_path / "memes.json"
        path.write_text("{not json", encoding="utf-8")

        store = MemeStore(path)
        assert store.list() == []
        assert (tmp_path / "memes.json.corrupt").exists()

        store.add(asset("a"))
        assert [a.id for a in store.list()] == ["a"]

    def test_malformed_records_skipped(self, tmp_path):
        path = tmp_path / "memes.json"
        path.write_text(json.dumps([{"id": "broken"}, asset("ok").to_json()]), encoding="utf-8")

        assert [a.id for a in MemeStore(path).list()] == ["ok"]
