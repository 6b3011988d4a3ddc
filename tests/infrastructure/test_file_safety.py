"""Tests for the chat file-operation path policy."""

import pytest

from verdant.infrastructure import ProjectPathValidator


@pytest.fixture
def validator() -> ProjectPathValidator:
    return ProjectPathValidator()


class TestCheckWrite:
    @pytest.mark.parametrize(
        "path",
        [
            "src/components/toggle/toggle.css",
            "src/components/date-picker/date-picker.spec.json",
            "src/tokens/color.tokens.json",
            "src/data/wiki.json",
            "src/library/terrarium.css",
        ],
    )
    def test_allowlisted_paths(self, validator: ProjectPathValidator, path: str) -> None:
        assert validator.check_write(path).allowed

    @pytest.mark.parametrize(
        "path",
        [
            "src/data/decisions.jsonl",
            "src/data/pipeline-state.json",
            "src/data/spark-queue.jsonl",
            "src/library/shell.css",
            ".env",
        ],
    )
    def test_protected_files(self, validator: ProjectPathValidator, path: str) -> None:
        decision = validator.check_write(path)

        assert not decision.allowed
        assert "protected file" in decision.reason

    def test_protected_prefix(self, validator: ProjectPathValidator) -> None:
        decision = validator.check_write("src/governance/agents.js")

        assert not decision.allowed
        assert "src/governance/" in decision.reason

    def test_component_file_must_match_directory(self, validator: ProjectPathValidator) -> None:
        decision = validator.check_write("src/components/toggle/badge.css")

        assert not decision.allowed
        assert "not in the write allowlist" in decision.reason

    @pytest.mark.parametrize("path", ["../outside.css", "src/components/../../x", "/etc/passwd"])
    def test_traversal(self, validator: ProjectPathValidator, path: str) -> None:
        decision = validator.check_write(path)

        assert not decision.allowed
        assert decision.reason == "Path traversal is not allowed"

    def test_foundation_css_is_patch_only(self, validator: ProjectPathValidator) -> None:
        full = validator.check_write("src/library/foundation.css")

        assert not full.allowed
        assert full.reason == "foundation.css can only be modified via patch_css, not full overwrite"
        assert validator.check_write("src/library/foundation.css", mode="patch").allowed

    def test_backslashes_are_normalized(self, validator: ProjectPathValidator) -> None:
        assert validator.check_write("src\\components\\toggle\\toggle.css").allowed


class TestCheckRead:
    def test_reads_under_src(self, validator: ProjectPathValidator) -> None:
        assert validator.check_read("src/data/decisions.jsonl").allowed

    @pytest.mark.parametrize("path", [".env", "src/config/.env"])
    def test_env_files(self, validator: ProjectPathValidator, path: str) -> None:
        decision = validator.check_read(path)

        assert not decision.allowed
        assert decision.reason == ".env files cannot be read"

    def test_node_modules(self, validator: ProjectPathValidator) -> None:
        assert not validator.check_read("node_modules/react/index.js").allowed

    def test_outside_src(self, validator: ProjectPathValidator) -> None:
        decision = validator.check_read("package.json")

        assert not decision.allowed
        assert "outside the readable area" in decision.reason

    def test_traversal(self, validator: ProjectPathValidator) -> None:
        assert validator.check_read("../x").reason == "Path traversal is not allowed"
