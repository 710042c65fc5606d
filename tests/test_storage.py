import pytest

from servio.config import Key, Payload, default_config
from servio.storage import (
    StorageError,
    checksum,
    find_latest_page,
    find_next_page,
    find_oldest_page,
    find_unused_page,
    load,
    store,
)


def make_pages(n=2, size=2048):
    return [bytearray(size) for _ in range(n)]


def test_storage_flow():
    pages = make_pages()

    assert find_unused_page(pages) is pages[0]
    assert find_oldest_page(pages) is None
    tmp = find_next_page(pages)
    assert tmp is pages[0]

    pl = Payload()
    cm = default_config()
    used = store(pl, cm, tmp)
    assert len(used) > 0
    assert bytes(tmp[: len(used)]) == used

    assert find_unused_page(pages) is pages[1]
    assert find_oldest_page(pages) is pages[0]
    assert find_next_page(pages) is pages[1]

    success = load(tmp, lambda pll: pl == pll, cm)
    assert success is True
    assert cm == default_config()


def test_checksum_values():
    assert checksum(b"") == 0xAAAAAAAA
    assert checksum(b"\xaa\xaa\xaa\xaa") == 0
    assert checksum(b"\xaa\xaa\xaa\xaa\xaa\xaa\xaa\xaa") == 0xAAAAAAAA


def test_load_restores_modified_values():
    page = bytearray(2048)
    source = default_config()
    source.set(Key.ID, 7)
    source.set(Key.MODEL, "servo")
    source.set(Key.CURRENT_LIM_MAX, 1.5)
    store(Payload(id=3), source, page)

    target = default_config()
    seen = []
    assert load(page, lambda pl: seen.append(pl) or True, target)
    assert target == source
    assert seen == [Payload(id=3)]


def test_payload_callback_can_skip_values():
    page = bytearray(2048)
    source = default_config()
    source.set(Key.GROUP_ID, 9)
    store(Payload(), source, page)

    target = default_config()
    assert load(page, lambda pl: False, target) is True
    assert target.get(Key.GROUP_ID) == 0


def test_clear_stores_no_values():
    page = bytearray(2048)
    store(Payload(id=1), None, page)
    target = default_config()
    target.set(Key.ID, 4)
    assert load(page, lambda pl: True, target) is True
    assert target.get(Key.ID) == 4
    assert find_unused_page([page]) is None


def test_corrupted_page_fails_to_load():
    page = bytearray(2048)
    used = store(Payload(), default_config(), page)
    page[len(used) - 1] ^= 0xFF
    assert load(page, lambda pl: True, default_config()) is False


def test_erased_page_is_unused():
    pages = [bytearray(b"\xff" * 512)]
    assert find_unused_page(pages) is pages[0]
    assert find_latest_page(pages) is None


def test_latest_and_oldest_by_id():
    pages = make_pages(3)
    store(Payload(id=5), default_config(), pages[0])
    store(Payload(id=9), default_config(), pages[1])
    store(Payload(id=2), default_config(), pages[2])
    assert find_latest_page(pages) is pages[1]
    assert find_oldest_page(pages) is pages[2]
    assert find_next_page(pages) is pages[2]


def test_store_too_small_page_raises():
    with pytest.raises(StorageError):
        store(Payload(), default_config(), bytearray(64))