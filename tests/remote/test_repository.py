"""Tests for the remote repository facade."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from docsync.core.config import ServiceConfig
from docsync.core.credentials import StaticCredentials
from docsync.core.errors import AuthRequired, ValidationError
from docsync.core.types import Backend
from docsync.remote.base import RemoteListing
from docsync.remote.embedded import EmbeddedBackend
from docsync.remote.http import HTTPBackend
from docsync.remote.repository import RemoteRepository, create_repository


class TestRemoteListing:
    """Tests for listing parsing and merging."""

    def test_from_dict_missing_keys(self) -> None:
        listing = RemoteListing.from_dict({})
        assert listing.files == {}
        assert listing.password_protected_files == {}

    def test_from_dict_bad_timestamps(self) -> None:
        """Unparseable timestamps should become 0."""
        listing = RemoteListing.from_dict({"files": {"a": "soon", "b": "12"}})
        assert listing.files == {"a": 0, "b": 12}

    def test_merged_protected_wins(self) -> None:
        """A name in both listings should be reported as protected."""
        listing = RemoteListing(files={"a": 1, "b": 2}, password_protected_files={"b": 3})
        merged = listing.merged()
        assert merged["a"].password_protected is False
        assert merged["b"].password_protected is True
        assert merged["b"].last_modified == 3

    def test_is_protected(self) -> None:
        listing = RemoteListing(files={"a": 1}, password_protected_files={"b": 2})
        assert listing.names() == {"a", "b"}
        assert listing.is_protected("b")
        assert not listing.is_protected("a")


class TestRemoteRepository:
    """Tests for dispatch, validation and credentials."""

    @pytest.mark.asyncio
    async def test_dispatches_to_adapter(self, repository: RemoteRepository, s3, postgres) -> None:  # type: ignore[no-untyped-def]
        """Each call should reach only the requested backend."""
        s3.add("a", "body")

        listing = await repository.list_all(Backend.S3)

        assert listing.names() == {"a"}
        assert s3.calls == [("listAll", None)]
        assert postgres.calls == []

    @pytest.mark.asyncio
    async def test_threads_token(self, repository: RemoteRepository, s3) -> None:  # type: ignore[no-untyped-def]
        await repository.upload_file(Backend.S3, "a", "body", True)
        assert s3.tokens == ["token123"]
        assert s3.files["a"] == ("body", True)

    @pytest.mark.asyncio
    async def test_auth_required_before_io(self, s3) -> None:  # type: ignore[no-untyped-def]
        """Without a token no adapter call should be made."""
        repository = RemoteRepository({Backend.S3: s3}, StaticCredentials())

        with pytest.raises(AuthRequired):
            await repository.list_all(Backend.S3)

        assert s3.calls == []

    @pytest.mark.asyncio
    async def test_embedded_needs_no_token(self, tmp_path: Path) -> None:
        embedded = EmbeddedBackend(tmp_path / "orbitdb.db")
        repository = RemoteRepository({Backend.ORBITDB: embedded}, StaticCredentials())

        await repository.upload_file(Backend.ORBITDB, "a", "body")

        assert (await repository.get_file(Backend.ORBITDB, "a")).content == "body"
        await repository.aclose()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["", "   ", None])
    async def test_invalid_name(self, repository: RemoteRepository, s3, name) -> None:  # type: ignore[no-untyped-def]
        with pytest.raises(ValidationError, match="Invalid fileName provided"):
            await repository.get_file(Backend.S3, name)
        assert s3.calls == []

    @pytest.mark.asyncio
    async def test_invalid_content(self, repository: RemoteRepository, s3) -> None:  # type: ignore[no-untyped-def]
        with pytest.raises(ValidationError, match="Invalid content provided"):
            await repository.upload_file(Backend.S3, "a", None)  # type: ignore[arg-type]
        assert s3.calls == []

    @pytest.mark.asyncio
    async def test_empty_content(self, repository: RemoteRepository, s3) -> None:  # type: ignore[no-untyped-def]
        """Empty content should be rejected before reaching the backend."""
        with pytest.raises(ValidationError, match="Invalid content provided"):
            await repository.upload_file(Backend.S3, "a", "")
        assert s3.calls == []
        assert "a" not in s3.files

    def test_unconfigured_backend(self, repository: RemoteRepository) -> None:
        with pytest.raises(ValueError):
            repository.adapter(Backend.NEO4J)

    def test_is_signed_in(self, repository: RemoteRepository) -> None:
        assert repository.is_signed_in is True

    @pytest.mark.asyncio
    async def test_aclose_closes_adapters(self, repository: RemoteRepository, s3) -> None:  # type: ignore[no-untyped-def]
        async with repository:
            pass
        assert s3.closed is True


class TestCreateRepository:
    """Tests for the repository factory."""

    @pytest.mark.asyncio
    async def test_wires_every_backend(self, tmp_path: Path) -> None:
        config = ServiceConfig(api_base_url="http://test", data_dir=tmp_path)
        repository = create_repository(config, StaticCredentials("t"))

        assert set(repository.backends) == set(Backend)
        assert isinstance(repository.adapter(Backend.ORBITDB), EmbeddedBackend)
        for backend in Backend:
            if not backend.is_embedded:
                assert isinstance(repository.adapter(backend), HTTPBackend)
        assert config.embedded_db_path.exists()
        await repository.aclose()

    @pytest.mark.asyncio
    async def test_uses_base_url(self, tmp_path: Path, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Calls should go to the configured API base URL."""
        httpx_mock.add_response(
            method="POST",
            url="https://api.example.com/api/v1/listAllS3",
            json={"files": {"a": 1}, "passwordProtectedFiles": {}},
        )
        config = ServiceConfig(api_base_url="https://api.example.com/", data_dir=tmp_path)

        async with create_repository(config, StaticCredentials("t")) as repository:
            listing = await repository.list_all(Backend.S3)

        assert listing.names() == {"a"}

    @pytest.mark.asyncio
    async def test_injected_client(self, tmp_path: Path) -> None:
        client = httpx.AsyncClient(base_url="http://injected")
        config = ServiceConfig(data_dir=tmp_path)
        repository = create_repository(config, StaticCredentials("t"), http_client=client)
        assert "http://injected" in repository.adapter(Backend.S3).location
        await repository.aclose()
        assert client.is_closed
