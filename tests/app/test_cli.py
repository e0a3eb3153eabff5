from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from catalogseed.config import SeedFileError, SeedingConfig
from catalogseed.domain.errors import CreationError, SeedCancelledError
from catalogseed.domain.model import CategoryMatchPolicy, Category, ReconciliationResult
from catalogseed.ui import cli

if TYPE_CHECKING:
    from catalogseed.domain.context import ExecutionContext


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in (
        "CATALOGSEED_AREA",
        "CATALOGSEED_TIMEOUT_SECONDS",
        "CATALOGSEED_PARALLEL",
        "CATALOGSEED_CATEGORY_POLICY",
        "CATALOGSEED_SEED_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("CATALOGSEED_DATA_DIR", str(tmp_path))


def _capture_seed(
    monkeypatch: pytest.MonkeyPatch,
    *,
    results: list[ReconciliationResult] | None = None,
    error: Exception | None = None,
) -> dict[str, object]:
    captured: dict[str, object] = {}

    def fake_seed(*, context: ExecutionContext, config: SeedingConfig) -> list[ReconciliationResult]:
        captured["context"] = context
        captured["config"] = config
        if error is not None:
            raise error
        return results or []

    monkeypatch.setattr(cli, "seed_catalog", fake_seed)
    return captured


def test_apply_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _capture_seed(
        monkeypatch,
        results=[ReconciliationResult(key="2002", created=True, entity_id=1)],
    )

    assert cli.main(["apply"]) == cli.EXIT_OK

    config = captured["config"]
    assert isinstance(config, SeedingConfig)
    assert config == SeedingConfig()


def test_apply_with_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _capture_seed(monkeypatch)

    exit_code = cli.main(
        [
            "apply",
            "--file",
            "seeds.toml",
            "--timeout",
            "30",
            "--parallel",
            "--category-policy",
            "skip",
            "--area",
            "crontab",
        ]
    )

    assert exit_code == cli.EXIT_OK
    config = captured["config"]
    assert isinstance(config, SeedingConfig)
    assert config.seed_file == Path("seeds.toml")
    assert config.timeout_seconds == 30
    assert config.parallel is True
    assert config.category_policy is CategoryMatchPolicy.SKIP
    context = captured["context"]
    assert context.area == "crontab"  # type: ignore[attr-defined]
    assert context.deadline is not None  # type: ignore[attr-defined]


def test_apply_warnings_still_exit_zero(monkeypatch: pytest.MonkeyPatch) -> None:
    _capture_seed(
        monkeypatch,
        results=[
            ReconciliationResult(
                key="2002",
                created=True,
                entity_id=1,
                warnings=("category not found: Ghost",),
            )
        ],
    )

    assert cli.main(["apply"]) == cli.EXIT_OK


def test_apply_fatal_error_exits_one(monkeypatch: pytest.MonkeyPatch) -> None:
    _capture_seed(monkeypatch, error=CreationError("rejected"))

    assert cli.main(["apply"]) == cli.EXIT_FAILURE


def test_apply_cancelled_exit_code(monkeypatch: pytest.MonkeyPatch) -> None:
    _capture_seed(monkeypatch, error=SeedCancelledError(entity_id=3))

    assert cli.main(["apply"]) == cli.EXIT_CANCELLED


def test_apply_bad_seed_file_is_usage_error(monkeypatch: pytest.MonkeyPatch) -> None:
    _capture_seed(monkeypatch, error=SeedFileError("broken"))

    assert cli.main(["apply"]) == cli.EXIT_USAGE


def test_apply_rejects_non_positive_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    _capture_seed(monkeypatch)

    assert cli.main(["apply", "--timeout", "0"]) == cli.EXIT_USAGE


def test_invalid_environment_is_usage_error(monkeypatch: pytest.MonkeyPatch) -> None:
    _capture_seed(monkeypatch)
    monkeypatch.setenv("CATALOGSEED_PARALLEL", "sometimes")

    assert cli.main(["apply"]) == cli.EXIT_USAGE


def test_unknown_command_exits_two() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["explode"])

    assert excinfo.value.code == 2


def test_category_create(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_create(name: str, *, parent_id: int | None = None) -> Category:
        captured.update(name=name, parent_id=parent_id)
        return Category(id=1, name=name, parent_id=parent_id)

    monkeypatch.setattr(cli, "create_category", fake_create)

    assert cli.main(["category", "create", "Men", "--parent-id", "2"]) == cli.EXIT_OK
    assert captured == {"name": "Men", "parent_id": 2}


def test_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--version"])

    assert excinfo.value.code == 0
    assert capsys.readouterr().out.startswith("catalogseed ")


def test_verbose_flag_enables_debug(monkeypatch: pytest.MonkeyPatch) -> None:
    _capture_seed(monkeypatch)
    levels: list[int] = []
    monkeypatch.setattr(cli, "configure_logging", lambda *, level: levels.append(level))

    assert cli.main(["-v", "apply"]) == cli.EXIT_OK
    assert levels == [logging.DEBUG]


def test_category_create_blank_name_is_usage_error(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []
    monkeypatch.setattr(cli, "create_category", lambda name, **_: calls.append(name))

    assert cli.main(["category", "create", "  "]) == cli.EXIT_USAGE
    assert calls == []
