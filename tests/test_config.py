import pytest

from compressibility_study.config import SECRET_ENV_VAR, StudyConfig, check_access, load_config


def test_defaults_without_file(monkeypatch):
    monkeypatch.delenv(SECRET_ENV_VAR, raising=False)
    cfg = load_config(None)
    assert cfg == StudyConfig()
    assert cfg.remote_timeout_s == 10.0
    assert cfg.remote_url is None


def test_yaml_values_are_read(tmp_path, monkeypatch):
    monkeypatch.delenv(SECRET_ENV_VAR, raising=False)
    path = tmp_path / "study.yaml"
    path.write_text(
        "remote_url: https://store.test/doc\n"
        "remote_timeout_s: 4\n"
        "remote_headers:\n  Authorization: Bearer abc\n"
        "local_path: data/schedule.json\n"
        "log_dir: null\n"
        "access_secret: s3cret\n",
        encoding="utf-8",
    )
    cfg = load_config(path)
    assert cfg.remote_url == "https://store.test/doc"
    assert cfg.remote_timeout_s == 4.0
    assert cfg.remote_headers == {"Authorization": "Bearer abc"}
    assert cfg.local_path == "data/schedule.json"
    assert cfg.log_dir is None
    assert cfg.access_secret == "s3cret"
    assert cfg.to_dict()["access_secret"] == "***"


def test_secret_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv(SECRET_ENV_VAR, "from-env")
    path = tmp_path / "study.yaml"
    path.write_text("local_path: x.json\n", encoding="utf-8")
    assert load_config(path).access_secret == "from-env"


def test_unknown_keys_rejected(tmp_path):
    path = tmp_path / "study.yaml"
    path.write_text("participants: 12\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_validate_rejects_bad_values():
    with pytest.raises(ValueError):
        StudyConfig(remote_timeout_s=0).validate()
    with pytest.raises(ValueError):
        StudyConfig(local_path="").validate()
    with pytest.raises(ValueError):
        StudyConfig(remote_url="ftp://nope").validate()


def test_check_access():
    assert check_access("open sesame", "open sesame") is True
    assert check_access("open sesame", "open") is False
    assert check_access(None, "") is False
    assert check_access("", "") is False
