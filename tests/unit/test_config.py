"""Tests for settings loading."""

from vitrine.config.settings import IndexFieldMapping, Settings


class TestSettings:
    """Tests for Settings defaults and environment overrides."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("INDEX_URL", raising=False)

        settings = Settings(_env_file=None)

        assert settings.AUTOCOMPLETE_ROWS == 10
        assert settings.INDEX_QUERY_PARSER == "edismax"
        assert settings.ENSURE_DEFAULT_EXHIBIT is True
        assert settings.DEFAULT_EXHIBIT_SLUG == "default"
        assert settings.index_fields == IndexFieldMapping()

    def test_index_field_mapping_defaults(self):
        fields = IndexFieldMapping()

        assert fields.id_field == "id"
        assert fields.title_field == "full_title_tesim"
        assert fields.description_field == "id"
        assert fields.thumbnail_field == "thumbnail_url_ssm"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("INDEX_URL", "http://solr.internal:8983/solr/core")
        monkeypatch.setenv("INDEX_TIMEOUT_SECONDS", "2.5")
        monkeypatch.setenv("AUTOCOMPLETE_ROWS", "25")

        settings = Settings(_env_file=None)

        assert settings.INDEX_URL == "http://solr.internal:8983/solr/core"
        assert settings.INDEX_TIMEOUT_SECONDS == 2.5
        assert settings.AUTOCOMPLETE_ROWS == 25

    def test_nested_field_mapping_from_environment(self, monkeypatch):
        """Test index field names can be set with the __ delimiter."""
        monkeypatch.setenv("INDEX_FIELDS__TITLE_FIELD", "title_display")
        monkeypatch.setenv("INDEX_FIELDS__DESCRIPTION_FIELD", "author_display")

        settings = Settings(_env_file=None)

        assert settings.index_fields.title_field == "title_display"
        assert settings.index_fields.description_field == "author_display"
        assert settings.index_fields.id_field == "id"
