from __future__ import annotations

from dataclasses import FrozenInstanceError
from pathlib import Path
import tempfile
import textwrap
import unittest

from tfwrap.config_loader import TerraformConfig, load_config
from tfwrap.errors import ConfigurationError


class TerraformConfigTests(unittest.TestCase):
    def test_defaults(self) -> None:
        config = TerraformConfig()
        self.assertEqual(config.work_dir, Path.cwd())
        self.assertFalse(config.silent)
        self.assertFalse(config.no_color)
        self.assertEqual(config.program, "terraform")
        self.assertEqual(config.environment, {})

    def test_work_dir_is_coerced_to_path(self) -> None:
        self.assertEqual(TerraformConfig(work_dir="/srv/infra").work_dir, Path("/srv/infra"))

    def test_is_immutable(self) -> None:
        config = TerraformConfig()
        with self.assertRaises(FrozenInstanceError):
            config.silent = True  # type: ignore[misc]

    def test_with_overrides_ignores_none(self) -> None:
        config = TerraformConfig(work_dir="/srv/infra", no_color=True)
        updated = config.with_overrides(silent=True, no_color=None, program=None)
        self.assertTrue(updated.silent)
        self.assertTrue(updated.no_color)
        self.assertEqual(updated.work_dir, Path("/srv/infra"))
        self.assertFalse(config.silent)


class LoadConfigTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_loads_toml(self) -> None:
        path = self.root / "tfwrap.toml"
        path.write_text(
            textwrap.dedent(
                """
                [terraform]
                work_dir = "infra"
                silent = true
                no_color = true
                program = "tofu"

                [terraform.environment]
                TF_IN_AUTOMATION = "1"
                """
            )
        )
        config = load_config(path)
        self.assertEqual(config.work_dir, self.root.resolve() / "infra")
        self.assertTrue(config.silent)
        self.assertTrue(config.no_color)
        self.assertEqual(config.program, "tofu")
        self.assertEqual(config.environment, {"TF_IN_AUTOMATION": "1"})

    def test_loads_json(self) -> None:
        path = self.root / "tfwrap.json"
        path.write_text('{"terraform": {"work_dir": "/srv/infra", "no_color": true}}')
        config = load_config(path)
        self.assertEqual(config.work_dir, Path("/srv/infra"))
        self.assertTrue(config.no_color)
        self.assertFalse(config.silent)

    def test_loads_yaml(self) -> None:
        path = self.root / "tfwrap.yaml"
        path.write_text(
            textwrap.dedent(
                """
                terraform:
                  silent: true
                  environment:
                    TF_LOG: TRACE
                """
            )
        )
        config = load_config(path)
        self.assertTrue(config.silent)
        self.assertEqual(config.environment, {"TF_LOG": "TRACE"})
        self.assertEqual(config.work_dir, Path.cwd())

    def test_empty_file_uses_defaults(self) -> None:
        path = self.root / "tfwrap.yml"
        path.write_text("")
        self.assertEqual(load_config(path).program, "terraform")

    def test_rejects_wrong_types(self) -> None:
        path = self.root / "tfwrap.toml"
        path.write_text('[terraform]\nsilent = "yes"\n')
        with self.assertRaises(ConfigurationError):
            load_config(path)

    def test_rejects_non_table_section(self) -> None:
        path = self.root / "tfwrap.json"
        path.write_text('{"terraform": ["apply"]}')
        with self.assertRaises(ConfigurationError):
            load_config(path)

    def test_rejects_unsupported_extension(self) -> None:
        path = self.root / "tfwrap.ini"
        path.write_text("[terraform]\n")
        with self.assertRaises(ConfigurationError):
            load_config(path)

    def test_reports_parse_errors(self) -> None:
        path = self.root / "tfwrap.toml"
        path.write_text("[terraform\n")
        with self.assertRaises(ConfigurationError):
            load_config(path)

    def test_missing_file(self) -> None:
        with self.assertRaises(ConfigurationError):
            load_config(self.root / "absent.toml")


if __name__ == "__main__":
    unittest.main()
