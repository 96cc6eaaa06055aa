"""Tests for handle settings, the registry and the JSON response helper."""

import pytest
from flask import Flask
from sqlalchemy import create_engine
from sqlalchemy.exc import NoSuchModuleError

from sqlcon import DbSettings, Registry, get_env_int, get_env_string, load_env, return_json
from sqlcon import pool
from sqlcon.errors import ConfigurationError, HandleNotInitialized


class TestSettings:
    """Tests for DbSettings."""

    def test_defaults(self) -> None:
        """Test an empty source falls back to defaults."""
        s = DbSettings.from_env("db", source={})
        assert (s.host, s.port, s.username, s.database) == ("localhost", 3306, "root", "test")
        assert s.charset == "utf8mb4"
        assert s.prefix == ""

    def test_env_per_handle(self) -> None:
        """Test settings are read under the handle's own upper-cased names."""
        env = {"SHOP_HOST": "db.local", "SHOP_PORT": "3307", "SHOP_PREFIX": "s_", "DB_HOST": "other"}
        s = DbSettings.from_env("shop", source=env)
        assert s.host == "db.local"
        assert s.port == 3307
        assert s.prefix == "s_"
        assert get_env_string("shop", "missing", "x", env) == "x"

    def test_bad_int(self) -> None:
        """Test non-integer numeric settings are rejected."""
        with pytest.raises(ValueError, match="DB_PORT"):
            get_env_int("db", "port", 3306, {"DB_PORT": "abc"})

    def test_url(self) -> None:
        """Test the SQLAlchemy URL carries driver, credentials and charset."""
        url = DbSettings("db", username="app", password="pw", database="shop").url()
        assert url.drivername == "mysql+mysqlconnector"
        assert url.username == "app"
        assert url.database == "shop"
        assert url.query["charset"] == "utf8mb4"
        assert url.query["collation"] == "utf8_general_ci"

    def test_pool_sizing(self) -> None:
        """Test idle connections form the pool and the rest overflow."""
        opts = DbSettings("db", max_open_conns=20, max_idle_conns=10).engine_options()
        assert opts["pool_size"] == 10
        assert opts["max_overflow"] == 10
        opts = DbSettings("db", max_open_conns=4, max_idle_conns=10).engine_options()
        assert (opts["pool_size"], opts["max_overflow"]) == (4, 0)

    def test_unknown_setting(self) -> None:
        """Test misspelled settings are refused."""
        with pytest.raises(ValueError):
            DbSettings("db", hots="x")


class TestRegistry:
    """Tests for Registry."""

    def test_register_resolve_prefix(self) -> None:
        """Test registered handles resolve and carry their prefix."""
        engine = create_engine("sqlite://")
        with Registry() as reg:
            reg.register("db", engine, prefix="t_")
            assert reg.resolve() is engine
            assert reg.resolve("db") is engine
            assert reg.prefix() == "t_"
            assert reg.prefix("other") == ""
            assert "db" in reg
        assert "db" not in reg

    def test_missing_handle(self) -> None:
        """Test resolving an unknown handle raises a configuration error."""
        with pytest.raises(ConfigurationError):
            Registry().resolve("db")
        with pytest.raises(HandleNotInitialized):
            Registry().resolve("reporting")


class TestReturnJson:
    """Tests for return_json."""

    def test_envelope(self) -> None:
        """Test code, msg and data are wrapped with HTTP 200."""
        app = Flask(__name__)
        with app.app_context():
            resp = return_json(0, "ok", {"id": 1})
            assert resp.status_code == 200
            assert resp.get_json() == {"code": 0, "msg": "ok", "data": {"id": 1}}
            assert return_json(404, "not found").get_json() == {"code": 404, "msg": "not found"}


class TestEnvFile:
    """Tests for settings loaded from an env file."""

    def test_env_file_settings(self, tmp_path, monkeypatch) -> None:
        """Test handle settings come from the env file and the process environment wins."""
        env_file = tmp_path / ".env"
        env_file.write_text("SHOP_HOST=file.local\nSHOP_PORT=3308\nSHOP_PREFIX=s_\n")
        monkeypatch.setenv("SHOP_PORT", "3310")
        s = DbSettings.from_env("shop", source=load_env(str(env_file)))
        assert s.host == "file.local"
        assert s.port == 3310
        assert s.prefix == "s_"

    def test_missing_env_file(self, tmp_path, monkeypatch) -> None:
        """Test a missing env file leaves only the process environment."""
        monkeypatch.setenv("SHOP_HOST", "env.local")
        s = DbSettings.from_env("shop", source=load_env(str(tmp_path / "absent.env")))
        assert s.host == "env.local"
        assert s.port == 3306

    def test_init_db_reads_env_file(self, tmp_path, monkeypatch) -> None:
        """Test init_db builds engines from env-file settings and keeps the prefix."""
        env_file = tmp_path / ".env"
        env_file.write_text("SHOP_HOST=file.local\nSHOP_PREFIX=s_\n")
        seen = []

        def fake_connect(self, settings, echo=False):
            seen.append(settings)
            self.register(settings.name, create_engine("sqlite://"), settings.prefix)

        monkeypatch.setattr(Registry, "connect", fake_connect)
        with Registry().init_db("shop", env_file=str(env_file)) as reg:
            assert seen[0].host == "file.local"
            assert reg.prefix("shop") == "s_"


class TestConnect:
    """Tests for Registry.connect failures."""

    def test_missing_driver_is_configuration_error(self, monkeypatch) -> None:
        """Test an unloadable dialect becomes a configuration error."""
        def broken(*args, **kwargs):
            raise NoSuchModuleError("Can't load plugin: sqlalchemy.dialects:mysql.mysqlconnector")

        monkeypatch.setattr(pool, "create_engine", broken)
        with pytest.raises(ConfigurationError, match="cannot create engine for db"):
            Registry().connect(DbSettings("db"))

    def test_other_errors_propagate(self, monkeypatch) -> None:
        """Test unrelated failures are not turned into configuration errors."""
        def broken(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(pool, "create_engine", broken)
        with pytest.raises(RuntimeError, match="boom"):
            Registry().connect(DbSettings("db"))
