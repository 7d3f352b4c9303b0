from pathlib import Path

import pytest

SETTINGS_CSV = (
    "# Environment settings\n"
    "Setting,Default,Dev,Prod\n"
    "server,localhost,,prod01\n"
    "port,80,8080,\n"
    "conn,\"Server=${server},${port}\",,\n"
)


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Temporary working directory so no project config is picked up."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def settings_csv(workspace: Path) -> Path:
    path = workspace / "settings.csv"
    path.write_text(SETTINGS_CSV, encoding="utf-8")
    return path
