"""Tests for StoreConfig and RecordsetContext."""

from pathlib import Path

from recordset_vcr.core.context import RecordsetContext, StoreConfig


class TestStoreConfig:
    """Tests for storage paths."""

    def test_defaults(self):
        config = StoreConfig()
        assert config.storage_root == Path("recordsets")
        assert config.manifest_name == "config.json"

    def test_paths(self, tmp_path):
        config = StoreConfig(storage_root=tmp_path)
        assert config.folder_for("s1") == tmp_path / "s1"
        assert config.manifest_for("s1") == tmp_path / "s1" / "config.json"

    def test_root_coerced_to_path(self):
        assert StoreConfig(storage_root="data").storage_root == Path("data")


class TestRecordsetContext:
    """Tests for plugin defaults and the cache."""

    def test_starts_empty(self):
        context = RecordsetContext()
        assert context.defaults == {}
        assert context.cache == {}
        assert context.config.storage_root == Path("recordsets")

    def test_for_folder(self, tmp_path):
        context = RecordsetContext.for_folder(str(tmp_path))
        assert context.config.storage_root == tmp_path

    def test_register_defaults(self):
        context = RecordsetContext()
        context.register_plugin_defaults("speed", {"delay": 0})
        context.register_plugin_defaults("cors", {"enabled": True})

        assert context.defaults == {"speed": {"delay": 0}, "cors": {"enabled": True}}

    def test_later_registration_wins(self):
        context = RecordsetContext()
        context.register_plugin_defaults("speed", {"delay": 0, "jitter": 1})
        context.register_plugin_defaults("speed", {"delay": 5})

        assert context.defaults == {"speed": {"delay": 5, "jitter": 1}}

    def test_defaults_returned_as_copy(self):
        context = RecordsetContext(defaults={"speed": {"delay": 0}})
        context.defaults["speed"]["delay"] = 99

        assert context.defaults == {"speed": {"delay": 0}}

    def test_initial_defaults_copied(self):
        initial = {"speed": {"delay": 0}}
        context = RecordsetContext(defaults=initial)
        context.register_plugin_defaults("speed", {"delay": 1})

        assert initial == {"speed": {"delay": 0}}
