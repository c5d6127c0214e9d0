import io

import pytest
from rich.console import Console

from tfviz.config import Config, ConfigError, load_config
from tfviz.diagnostics import Diagnostics
from tfviz.models.diagnostic import Severity


class TestConfig:
    def test_missing_default_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert load_config() == Config()

    def test_default_file_picked_up(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "tfviz.yaml").write_text("ignore-egress: true\nicons_dir: ./icons\nunknown: 1\n")
        config = load_config()
        assert config.ignore_egress is True
        assert config.ignore_ingress is False
        assert config.icons_dir == "./icons"

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_non_bool_toggle(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text("verbose: 1\n")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text("verbose: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_merged_skips_none(self):
        base = Config(ignore_egress=True)
        merged = base.merged(ignore_egress=None, verbose=True)
        assert merged.ignore_egress is True
        assert merged.verbose is True


class TestDiagnostics:
    def setup_method(self):
        self.out = io.StringIO()

    def _diags(self, **kwargs):
        return Diagnostics(console=Console(file=self.out, no_color=True, width=200), **kwargs)

    def test_verbose_hidden_by_default_but_recorded(self):
        diags = self._diags()
        diags.verbose("AddNode: x to G")
        assert self.out.getvalue() == ""
        assert diags.of(Severity.VERBOSE)[0].message == "AddNode: x to G"

    def test_verbose_shown_when_enabled(self):
        diags = self._diags(verbose=True)
        diags.verbose("AddNode: x to G")
        assert "[VERBOSE] AddNode: x to G" in self.out.getvalue()

    def test_warnings_can_be_silenced(self):
        diags = self._diags(ignore_warnings=True)
        diags.warning("careful", subject="aws_subnet.a")
        assert self.out.getvalue() == ""
        assert len(diags.warnings) == 1

    def test_errors_always_shown(self):
        diags = self._diags(ignore_warnings=True)
        diags.error("invalid CIDR address: x", subject="aws_instance_web")
        assert "[ERROR] aws_instance_web: invalid CIDR address: x" in self.out.getvalue()

    def test_warning_list(self):
        diags = self._diags()
        diags.warning_list("Unsupported resources:", [])
        assert diags.records == []
        diags.warning_list("Unsupported resources:", ["aws_s3_bucket.logs"])
        assert diags.warnings[0].message == "Unsupported resources:\n - aws_s3_bucket.logs"
