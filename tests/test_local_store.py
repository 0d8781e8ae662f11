from src.core.local_store import LocalStore


def test_file_counter_starts_at_one_and_persists(tmp_path):
    path = tmp_path / "storage.json"
    store = LocalStore(path)
    assert store.next_file_number() == 1
    assert store.next_file_number() == 2

    reopened = LocalStore(path)
    assert reopened.read_file_counter() == 2
    assert reopened.next_file_number() == 3


def test_get_set_remove(tmp_path):
    store = LocalStore(tmp_path / "storage.json")
    assert store.get_item("openai_api_key") is None
    store.set_item("openai_api_key", "sk-test")
    assert store.get_item("openai_api_key") == "sk-test"
    store.remove_item("openai_api_key")
    assert store.get_item("openai_api_key") is None


def test_corrupt_file_reads_as_empty(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("{not json", encoding="utf-8")
    store = LocalStore(path)
    assert store.get_item("anything") is None
    assert store.next_file_number() == 1


def test_non_numeric_counter_resets(tmp_path):
    store = LocalStore(tmp_path / "storage.json")
    store.set_item("mineAI_fileCounter", "abc")
    assert store.next_file_number() == 1
