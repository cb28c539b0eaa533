"""
Test suite for naming and validation rules of tenants, roles, tags,
document paths and attachments.

System role: Verification of small domain rules
"""

import random
import uuid
from datetime import date

import pytest

from astar_backend.core.attachments import build_storage_path, file_extension, validate_upload
from astar_backend.core.exceptions import TenantContextError
from astar_backend.core.roles import copy_name_candidates, validate_color, validate_role_name
from astar_backend.core.slugs import (
    MAX_SLUG_LENGTH,
    build_path,
    checksum,
    parent_path,
    rebase_path,
    slug_candidates,
    slugify,
)
from astar_backend.core.tags import (
    TAG_PALETTE,
    normalize_tag_name,
    random_palette_color,
    validate_tag_color,
    validate_tag_name,
)
from astar_backend.core.tenancy import (
    clear_tenant_context,
    get_tenant_context,
    require_tenant_context,
    set_tenant_context,
    validate_tenant_slug,
)


class TestTenancy:
    @pytest.mark.parametrize("slug", ["Acme", "acme law", "acme_law", ""])
    def test_invalid_slugs(self, slug: str) -> None:
        with pytest.raises(ValueError):
            validate_tenant_slug(slug)

    def test_context_round_trip(self) -> None:
        tenant_id = uuid.uuid4()

        set_tenant_context(tenant_id)
        try:
            assert require_tenant_context() == tenant_id
        finally:
            clear_tenant_context()

        assert get_tenant_context() is None
        with pytest.raises(TenantContextError):
            require_tenant_context()


class TestRoles:
    @pytest.mark.parametrize("name", ["Admin", "team-lead", "123", ""])
    def test_invalid_role_names(self, name: str) -> None:
        with pytest.raises(ValueError):
            validate_role_name(name)

    def test_valid_role_name(self) -> None:
        assert validate_role_name("case_manager_2") == "case_manager_2"

    def test_copy_name_candidates(self) -> None:
        candidates = copy_name_candidates("editor")

        assert next(candidates) == "editor_copy"
        assert next(candidates) == "editor_copy_2"

    def test_copy_names_stay_within_limit(self) -> None:
        candidates = list(copy_name_candidates("r" * 100))

        assert all(len(c) <= 100 for c in candidates)

    def test_color(self) -> None:
        assert validate_color(None) is None
        with pytest.raises(ValueError):
            validate_color("#12345")


class TestTags:
    def test_normalize_collapses_whitespace(self) -> None:
        assert normalize_tag_name("  Urgent   Case ") == "urgent case"

    def test_validate_keeps_case(self) -> None:
        assert validate_tag_name(" Urgent  Case ") == "Urgent Case"
        with pytest.raises(ValueError):
            validate_tag_name("x" * 51)

    def test_palette(self) -> None:
        assert random_palette_color(random.Random(1)) in TAG_PALETTE
        with pytest.raises(ValueError):
            validate_tag_color("blue")


class TestSlugsAndPaths:
    def test_slugify_ascii(self) -> None:
        assert slugify("Hello World!") == "hello-world"
        assert slugify("Café Menu") == "cafe-menu"

    def test_slugify_non_ascii_fallback_is_stable(self) -> None:
        first = slugify("契約書", fallback_prefix="doc")

        assert first.startswith("doc-")
        assert first == slugify("契約書", fallback_prefix="doc")
        assert slugify("契約書", fallback_prefix="folder").startswith("folder-")

    def test_truncated_slug_has_no_trailing_hyphen(self) -> None:
        slug = slugify("a" * (MAX_SLUG_LENGTH - 1) + " tail")

        assert slug == "a" * (MAX_SLUG_LENGTH - 1)
        assert len(slugify("word " * 100)) <= MAX_SLUG_LENGTH
        assert not slugify("word " * 100).endswith("-")

    def test_slug_candidates(self) -> None:
        candidates = list(slug_candidates("memo"))

        assert candidates[:3] == ["memo", "memo-2", "memo-3"]

    def test_paths(self) -> None:
        assert build_path(None, "cases") == "/cases"
        assert build_path("/cases", "2024") == "/cases/2024"
        assert parent_path("/cases/2024") == "/cases"
        assert parent_path("/cases") is None
        assert rebase_path("/cases/2024/memo", "/cases", "/archive") == "/archive/2024/memo"

    def test_checksum(self) -> None:
        assert checksum(None) is None
        assert len(checksum("body")) == 64


class TestAttachmentRules:
    def test_valid_upload_passes(self) -> None:
        validate_upload("receipt.pdf", "application/pdf", 1024)

    @pytest.mark.parametrize(
        ("filename", "content_type", "size", "message"),
        [
            ("", "application/pdf", 10, "File name is required"),
            ("../etc.pdf", "application/pdf", 10, "must not contain"),
            ("a.pdf", "application/pdf", 0, "File is empty"),
            ("a.pdf", "application/pdf", 11 * 1024 * 1024, "exceeds maximum"),
            ("a.exe", "application/x-msdownload", 10, "is not allowed"),
        ],
    )
    def test_invalid_uploads(self, filename, content_type, size, message) -> None:
        with pytest.raises(ValueError, match=message):
            validate_upload(filename, content_type, size)

    def test_storage_path_layout(self) -> None:
        tenant_id = uuid.uuid4()
        file_id = uuid.uuid4()

        path = build_storage_path(tenant_id, "Scan.JPG", date(2024, 3, 1), file_id)

        assert path == f"{tenant_id}/2024-03-01/{file_id}.jpg"
        assert file_extension("noext") == "bin"
