"""Tests for env file patching and ${VAR} resolution."""

from pm_mcp.services.env_file import read_env_value, upsert_env_value
from pm_mcp.services.env_resolver import lookup_env_var, resolve_env_vars


class TestUpsertEnvValue:
    """Env file patcher tests."""

    def test_creates_missing_file(self, tmp_path):
        """Test that a missing file is treated as empty."""
        path = tmp_path / ".env.local"
        upsert_env_value(path, "DATABASE_URL", "mysql://root@db/app")
        assert path.read_text() == "DATABASE_URL=mysql://root@db/app\n"

    def test_replaces_existing_line(self, tmp_path):
        """Test that the first matching line is replaced in place."""
        path = tmp_path / ".env.local"
        path.write_text("APP_ENV=dev\nDATABASE_URL=old\nAPP_DEBUG=1\n")
        upsert_env_value(path, "DATABASE_URL", "new")
        assert path.read_text() == "APP_ENV=dev\nDATABASE_URL=new\nAPP_DEBUG=1\n"

    def test_only_first_match_replaced(self, tmp_path):
        """Test that later duplicates are left alone."""
        path = tmp_path / ".env.local"
        path.write_text("DATABASE_URL=a\nDATABASE_URL=b\n")
        upsert_env_value(path, "DATABASE_URL", "c")
        assert path.read_text() == "DATABASE_URL=c\nDATABASE_URL=b\n"

    def test_appends_when_absent(self, tmp_path):
        """Test appending to a file without trailing newline."""
        path = tmp_path / ".env.local"
        path.write_text("APP_ENV=dev")
        upsert_env_value(path, "DATABASE_URL", "x")
        assert path.read_text() == "APP_ENV=dev\nDATABASE_URL=x\n"

    def test_prefix_must_include_equals(self, tmp_path):
        """Test that DATABASE_URL_TEST is not mistaken for DATABASE_URL."""
        path = tmp_path / ".env.local"
        path.write_text("DATABASE_URL_TEST=keep\n")
        upsert_env_value(path, "DATABASE_URL", "x")
        assert path.read_text() == "DATABASE_URL_TEST=keep\nDATABASE_URL=x\n"

    def test_single_trailing_newline(self, tmp_path):
        """Test that extra trailing newlines collapse to one."""
        path = tmp_path / ".env.local"
        path.write_text("DATABASE_URL=old\n\n\n")
        upsert_env_value(path, "DATABASE_URL", "new")
        assert path.read_text() == "DATABASE_URL=new\n"

    def test_idempotent(self, tmp_path):
        """Test that applying the same value twice is byte-identical."""
        path = tmp_path / ".env.local"
        path.write_text("# local overrides\nAPP_ENV=dev\n")
        upsert_env_value(path, "DATABASE_URL", "mysql://root:secret@db:3306/app_x")
        first = path.read_bytes()
        upsert_env_value(path, "DATABASE_URL", "mysql://root:secret@db:3306/app_x")
        assert path.read_bytes() == first


class TestReadEnvValue:
    """Dotenv reader tests."""

    def test_reads_quoted_value(self, tmp_path):
        path = tmp_path / ".env"
        path.write_text('# comment\n\nQUOTED="quoted value"\n')
        assert read_env_value(path, "QUOTED") == "quoted value"

    def test_missing_file(self, tmp_path):
        assert read_env_value(tmp_path / ".env", "X") is None

    def test_whitespace_around_key(self, tmp_path):
        path = tmp_path / ".env"
        path.write_text("  KEY = value \n")
        assert read_env_value(path, "KEY") == "value"


class TestResolveEnvVars:
    """${VAR} resolution priority tests."""

    def _write(self, root, local=None, env=None):
        if local is not None:
            (root / ".env.local").write_text(f"VAR={local}\n")
        if env is not None:
            (root / ".env").write_text(f"VAR={env}\n")

    def test_environment_wins(self, tmp_path):
        """Test that the process environment beats both files."""
        self._write(tmp_path, local="from_local", env="from_env_file")
        assert resolve_env_vars("${VAR}", tmp_path, {"VAR": "from_process"}) == "from_process"

    def test_env_local_over_env(self, tmp_path):
        """Test .env.local beats .env."""
        self._write(tmp_path, local="from_local", env="from_env_file")
        assert resolve_env_vars("${VAR}", tmp_path, {}) == "from_local"

    def test_env_file_last(self, tmp_path):
        """Test falling through to .env."""
        self._write(tmp_path, env="from_env_file")
        assert resolve_env_vars("${VAR}", tmp_path, {}) == "from_env_file"

    def test_unresolved_left_verbatim(self, tmp_path):
        """Test that unknown tokens stay as written."""
        assert resolve_env_vars("${VAR}", tmp_path, {}) == "${VAR}"

    def test_empty_environment_value_falls_through(self, tmp_path):
        """Test that an empty value counts as unset."""
        self._write(tmp_path, local="from_local")
        assert resolve_env_vars("${VAR}", tmp_path, {"VAR": ""}) == "from_local"

    def test_multiple_tokens_in_dsn(self, tmp_path):
        """Test substitution inside a DSN."""
        environ = {"DB_USER": "root", "DB_PASS": "secret"}
        result = resolve_env_vars("mysql://${DB_USER}:${DB_PASS}@db:3306/${DB_NAME}", tmp_path, environ)
        assert result == "mysql://root:secret@db:3306/${DB_NAME}"

    def test_defaults_to_process_environment(self, tmp_path, monkeypatch):
        """Test that os.environ is used when no mapping is passed."""
        monkeypatch.setenv("PM_TEST_VAR", "value")
        assert lookup_env_var("PM_TEST_VAR", tmp_path) == "value"
