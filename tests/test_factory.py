"""Tests for settings and pipeline wiring."""

import pytest

from orpheus.config import Settings
from orpheus.errors import ConfigurationError
from orpheus.factory import build_pipeline, create_retry_policy
from orpheus.storage.supabase import SupabaseStorageProvider


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestSettings:
    def test_defaults(self):
        settings = make_settings()

        assert settings.image_model == "dall-e-3"
        assert settings.speech_voice == "echo"
        assert settings.script_max_chars == 8000
        assert settings.upload_max_attempts == 3
        assert settings.upload_retry_base_delay == 1.0

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("ORPHEUS_SCRIPT_MAX_CHARS", "4096")
        monkeypatch.setenv("ORPHEUS_STORAGE_BUCKET", "episodes")

        settings = make_settings()

        assert settings.script_max_chars == 4096
        assert settings.storage_bucket == "episodes"

    def test_proxy_url_defaults_to_edge_function(self):
        settings = make_settings(supabase_url="https://project.supabase.co/")

        assert settings.resolved_proxy_url() == "https://project.supabase.co/functions/v1/fetch-image"

    def test_explicit_proxy_url_wins(self):
        settings = make_settings(
            supabase_url="https://project.supabase.co", image_proxy_url="http://localhost:8000/functions/v1/fetch-image"
        )

        assert settings.resolved_proxy_url() == "http://localhost:8000/functions/v1/fetch-image"


class TestBuildPipeline:
    def test_missing_openai_key(self):
        with pytest.raises(ConfigurationError, match="OPENAI"):
            build_pipeline(make_settings(openai_api_key=None, supabase_url="https://x.supabase.co", supabase_key="k"))

    def test_missing_supabase(self):
        with pytest.raises(ConfigurationError):
            build_pipeline(make_settings(openai_api_key="sk-test", supabase_url=None, supabase_key=None))

    def test_wires_shared_storage_and_retry_policy(self):
        pipeline = build_pipeline(
            make_settings(
                openai_api_key="sk-test",
                supabase_url="https://x.supabase.co",
                supabase_key="service-key",
                storage_bucket="episodes",
                upload_max_attempts=5,
            )
        )

        assert isinstance(pipeline.storage, SupabaseStorageProvider)
        assert pipeline.storage.bucket == "episodes"
        assert pipeline.images.storage is pipeline.storage
        assert pipeline.audio.storage is pipeline.storage
        assert pipeline.images.retry_policy is pipeline.audio.retry_policy
        assert pipeline.images.retry_policy.max_attempts == 5
        assert pipeline.images.proxy.proxy_url == "https://x.supabase.co/functions/v1/fetch-image"
        assert pipeline.scripts.max_chars == 8000

    def test_retry_policy_from_settings(self):
        policy = create_retry_policy(make_settings(upload_max_attempts=4, upload_retry_base_delay=0.5))

        assert policy.max_attempts == 4
        assert policy.backoff(3) == 1.5

    @pytest.mark.asyncio
    async def test_aclose_closes_shared_http_client(self):
        pipeline = build_pipeline(
            make_settings(openai_api_key="sk-test", supabase_url="https://x.supabase.co", supabase_key="k")
        )
        http_client = pipeline.images.proxy._http

        await pipeline.aclose()

        assert http_client.is_closed
        assert pipeline.storage._http is http_client
