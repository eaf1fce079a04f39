import asyncio
import json
import os

import pytest

from omanx.core.exceptions import (
    KnowledgeFormatError,
    KnowledgeIOError,
    KnowledgeParseError,
)
from omanx.knowledge.document import SectionsDocument
from omanx.knowledge.store import KnowledgeStore


def _bump_mtime(path, seconds=10):
    stat = os.stat(path)
    os.utime(path, (stat.st_atime, stat.st_mtime + seconds))


def test_store_starts_empty(knowledge_file):
    store = KnowledgeStore(knowledge_file)

    assert store.is_loaded is False
    assert store.get_text() == ""
    assert store.get_document() is None
    assert store.snapshot.version == 0


def test_forced_load_installs_snapshot(knowledge_file):
    store = KnowledgeStore(knowledge_file)

    assert asyncio.run(store.load(force=True)) is True
    assert store.is_loaded
    assert isinstance(store.get_document(), SectionsDocument)
    assert store.get_text().startswith("## opt\n")
    assert "## embassy" in store.get_text()
    assert store.snapshot.mtime == os.stat(knowledge_file).st_mtime
    assert store.last_error is None


def test_unchanged_file_is_not_reloaded(knowledge_file):
    store = KnowledgeStore(knowledge_file)

    async def scenario():
        await store.load(force=True)
        version = store.snapshot.version
        changed = await store.load()
        return version, changed

    version, changed = asyncio.run(scenario())

    assert changed is False
    assert store.snapshot.version == version


def test_newer_mtime_triggers_reload(knowledge_file):
    store = KnowledgeStore(knowledge_file)
    asyncio.run(store.load(force=True))

    knowledge_file.write_text(json.dumps({"housing": "Read the lease twice"}), encoding="utf-8")
    _bump_mtime(knowledge_file)

    assert asyncio.run(store.load()) is True
    assert store.get_text() == "## housing\nRead the lease twice"


def test_force_reloads_even_when_unchanged(knowledge_file):
    store = KnowledgeStore(knowledge_file)
    asyncio.run(store.load(force=True))
    first_version = store.snapshot.version

    assert asyncio.run(store.load(force=True)) is True
    assert store.snapshot.version > first_version


def test_missing_file_raises_io_error(tmp_path):
    store = KnowledgeStore(tmp_path / "absent.json")

    with pytest.raises(KnowledgeIOError):
        asyncio.run(store.load(force=True))

    assert store.is_loaded is False
    assert store.last_error is not None


@pytest.mark.parametrize(
    "content, error_cls",
    [
        (b"{not json", KnowledgeParseError),
        (b"\xff\xfe\x00garbage", KnowledgeParseError),
        (b'"just a string"', KnowledgeFormatError),
        (b'[{"summary": "untitled"}]', KnowledgeFormatError),
    ],
)
def test_failed_reload_keeps_previous_snapshot(knowledge_file, content, error_cls):
    store = KnowledgeStore(knowledge_file)
    asyncio.run(store.load(force=True))
    before = store.snapshot

    knowledge_file.write_bytes(content)
    _bump_mtime(knowledge_file)

    with pytest.raises(error_cls) as excinfo:
        asyncio.run(store.load())

    assert store.snapshot is before
    assert store.last_error == excinfo.value.message
    assert excinfo.value.path == str(knowledge_file)


def test_successful_load_clears_last_error(knowledge_file):
    store = KnowledgeStore(knowledge_file)
    original = knowledge_file.read_text(encoding="utf-8")

    knowledge_file.write_text("{broken", encoding="utf-8")
    with pytest.raises(KnowledgeParseError):
        asyncio.run(store.load(force=True))
    assert store.last_error is not None

    knowledge_file.write_text(original, encoding="utf-8")
    asyncio.run(store.load(force=True))
    assert store.last_error is None


def test_concurrent_loads_install_one_consistent_snapshot(knowledge_file):
    store = KnowledgeStore(knowledge_file)

    async def scenario():
        return await asyncio.gather(*(store.load(force=True) for _ in range(5)))

    results = asyncio.run(scenario())

    assert all(results)
    assert store.snapshot.version == 5
    assert store.snapshot.text == store.get_text()


def test_auto_reload_picks_up_changes(knowledge_file):
    store = KnowledgeStore(knowledge_file)

    async def scenario():
        await store.load(force=True)
        task = store.start_auto_reload(0.01)
        assert store.start_auto_reload(0.01) is task

        knowledge_file.write_text(json.dumps([{"title": "Updated"}]), encoding="utf-8")
        _bump_mtime(knowledge_file)

        for _ in range(200):
            if store.get_text() == "## Updated":
                break
            await asyncio.sleep(0.01)

        await store.stop_auto_reload()
        return task

    task = asyncio.run(scenario())

    assert store.get_text() == "## Updated"
    assert task.done()


def test_auto_reload_survives_bad_file(knowledge_file):
    store = KnowledgeStore(knowledge_file)

    async def scenario():
        await store.load(force=True)
        store.start_auto_reload(0.01)

        knowledge_file.write_text("{broken", encoding="utf-8")
        _bump_mtime(knowledge_file)

        for _ in range(200):
            if store.last_error is not None:
                break
            await asyncio.sleep(0.01)

        await store.stop_auto_reload()

    asyncio.run(scenario())

    assert store.last_error is not None
    assert store.get_text().startswith("## opt")


def test_stop_without_start_is_a_noop(knowledge_file):
    store = KnowledgeStore(knowledge_file)
    asyncio.run(store.stop_auto_reload())


DEEPLY_NESTED = "[" * 200000 + "]" * 200000


def test_too_deeply_nested_json_is_a_parse_error(knowledge_file):
    store = KnowledgeStore(knowledge_file)
    asyncio.run(store.load(force=True))
    before = store.snapshot

    knowledge_file.write_text(DEEPLY_NESTED, encoding="utf-8")

    with pytest.raises(KnowledgeParseError):
        asyncio.run(store.load(force=True))

    assert store.snapshot is before


def test_auto_reload_recovers_after_deeply_nested_file(knowledge_file):
    store = KnowledgeStore(knowledge_file)

    async def wait_for(condition):
        for _ in range(300):
            if condition():
                return
            await asyncio.sleep(0.01)

    async def scenario():
        await store.load(force=True)
        task = store.start_auto_reload(0.01)

        knowledge_file.write_text(DEEPLY_NESTED, encoding="utf-8")
        _bump_mtime(knowledge_file)
        await wait_for(lambda: store.last_error is not None)

        knowledge_file.write_text(json.dumps([{"title": "Fixed"}]), encoding="utf-8")
        _bump_mtime(knowledge_file, seconds=20)
        await wait_for(lambda: store.get_text() == "## Fixed")

        alive = not task.done()
        await store.stop_auto_reload()
        return alive

    assert asyncio.run(scenario()) is True
    assert store.get_text() == "## Fixed"
    assert store.last_error is None
