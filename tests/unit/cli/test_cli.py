"""Unit tests for the command line interface."""

import asyncio
import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
import yaml

from calendar_exporter import __version__
from calendar_exporter.cli import create_config, main_entry, prompt_for_input
from calendar_exporter.cli.parser import DEFAULT_CONFIG_PATH, create_parser
from calendar_exporter.cli.runner import (
    default_output_path,
    resolve_exporter,
    run_export,
    should_use_async,
)
from calendar_exporter.config.settings import (
    ExporterSettings,
    ExportSettings,
    ProcessingSettings,
    get_settings,
)
from calendar_exporter.exporters import CsvExporter, ExcelExporter, JsonExporter, XmlExporter
from calendar_exporter.utils.exceptions import UnsupportedFormatError
from tests.fixtures.ics_data import ICSTestData, create_zip

pytestmark = pytest.mark.unit


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Empty working directory and home, so no real config file is picked up."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    return tmp_path


@pytest.fixture
def ics_file(workdir: Path) -> Path:
    path = workdir / "work.ics"
    path.write_text(ICSTestData.sample_calendar(), encoding="utf-8")
    return path


class TestCreateParser:
    """Test argument parsing."""

    def test_parse_args_when_input_and_output_then_positionals_set(self) -> None:
        args = create_parser().parse_args(["calendar.ics", "out.xlsx"])

        assert args.input == "calendar.ics"
        assert args.output == "out.xlsx"
        assert args.format is None
        assert args.use_async is False

    def test_parse_args_when_no_arguments_then_all_defaults(self) -> None:
        args = create_parser().parse_args([])

        assert args.input is None
        assert args.output is None
        assert args.config is None
        assert args.create_config is None

    def test_parse_args_when_options_then_parsed(self) -> None:
        args = create_parser().parse_args(
            [
                "cal.zip",
                "-f",
                "json",
                "--async",
                "--config",
                "my.yaml",
                "--log-level",
                "debug",
                "--log-file",
                "run.log",
                "-q",
                "--no-log-colors",
            ]
        )

        assert args.format == "json"
        assert args.use_async is True
        assert args.config == Path("my.yaml")
        assert args.log_level == "DEBUG"
        assert args.log_file == Path("run.log")
        assert args.quiet is True
        assert args.no_log_colors is True

    def test_parse_args_when_create_config_without_path_then_default_path(self) -> None:
        args = create_parser().parse_args(["--create-config"])

        assert args.create_config == DEFAULT_CONFIG_PATH

    def test_parse_args_when_invalid_log_level_then_exits(self) -> None:
        with pytest.raises(SystemExit):
            create_parser().parse_args(["--log-level", "LOUD"])

    def test_parse_args_when_version_then_prints_version(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            create_parser().parse_args(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestRunnerHelpers:
    """Test exporter selection and output naming."""

    def test_resolve_exporter_when_format_given_then_overrides_extension(
        self, test_settings: ExporterSettings
    ) -> None:
        exporter = resolve_exporter("json", "events.csv", test_settings)

        assert isinstance(exporter, JsonExporter)

    def test_resolve_exporter_when_only_output_then_from_extension(
        self, test_settings: ExporterSettings
    ) -> None:
        assert isinstance(resolve_exporter(None, "events.xlsx", test_settings), ExcelExporter)

    def test_resolve_exporter_when_nothing_given_then_default_format(self) -> None:
        settings = ExporterSettings(export=ExportSettings(default_format="xml"))

        assert isinstance(resolve_exporter(None, None, settings), XmlExporter)

    def test_resolve_exporter_when_output_extension_unknown_then_error(
        self, test_settings: ExporterSettings
    ) -> None:
        with pytest.raises(UnsupportedFormatError):
            resolve_exporter(None, "events.pdf", test_settings)

    def test_resolve_exporter_when_called_then_export_settings_shared(
        self, test_settings: ExporterSettings
    ) -> None:
        exporter = resolve_exporter("csv", None, test_settings)

        assert exporter.settings is test_settings.export  # type: ignore[attr-defined]

    @pytest.mark.parametrize(
        ("input_path", "exporter", "expected"),
        [
            ("work.ics", CsvExporter(), "calendar_export_work.csv"),
            ("dir/Team.ical.ics", JsonExporter(), "calendar_export_Team.json"),
            ("takeout.zip", ExcelExporter(), "calendar_export_takeout.xlsx"),
            ("Shared.ICAL.zip", XmlExporter(), "calendar_export_Shared.xml"),
        ],
    )
    def test_default_output_path_when_input_then_prefixed_stem(
        self, input_path: str, exporter: CsvExporter, expected: str
    ) -> None:
        assert default_output_path(input_path, exporter) == Path(expected)

    def test_should_use_async_when_zip_and_enabled_then_true(
        self, test_settings: ExporterSettings
    ) -> None:
        assert should_use_async("cal.zip", False, test_settings)
        assert not should_use_async("cal.ics", False, test_settings)
        assert should_use_async("cal.ics", True, test_settings)

    def test_should_use_async_when_disabled_in_settings_then_only_on_request(self) -> None:
        settings = ExporterSettings(processing=ProcessingSettings(enable_async_processing=False))

        assert not should_use_async("cal.zip", False, settings)
        assert should_use_async("cal.zip", True, settings)


class TestRunExport:
    """Test the export workflow and its exit codes."""

    @pytest.mark.asyncio
    async def test_run_export_when_valid_ics_then_default_output_written(
        self, ics_file: Path, test_settings: ExporterSettings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        exit_code = await run_export(ics_file, settings=test_settings)

        output = capsys.readouterr().out
        assert exit_code == 0
        assert "Found 3 events. Exporting to CSV..." in output
        assert "Export completed! Data saved to calendar_export_work.csv" in output
        assert (ics_file.parent / "calendar_export_work.csv").is_file()

    @pytest.mark.asyncio
    async def test_run_export_when_format_given_then_output_in_that_format(
        self, ics_file: Path, test_settings: ExporterSettings
    ) -> None:
        target = ics_file.parent / "events.txt"

        exit_code = await run_export(ics_file, target, fmt="json", settings=test_settings)

        assert exit_code == 0
        assert len(json.loads(target.read_text(encoding="utf-8"))) == 3

    @pytest.mark.asyncio
    async def test_run_export_when_async_requested_then_same_result(
        self, ics_file: Path, test_settings: ExporterSettings
    ) -> None:
        target = ics_file.parent / "events.xml"

        exit_code = await run_export(ics_file, target, settings=test_settings, use_async=True)

        assert exit_code == 0
        assert target.read_text(encoding="utf-8").count("<Event>") == 3

    @pytest.mark.asyncio
    async def test_run_export_when_zip_then_members_exported(
        self, workdir: Path, test_settings: ExporterSettings
    ) -> None:
        archive = create_zip(
            workdir / "takeout.zip",
            {"a.ics": ICSTestData.sample_calendar(), "b.txt": "ignored"},
        )

        exit_code = await run_export(archive, "out.json", settings=test_settings)

        assert exit_code == 0
        assert len(json.loads((workdir / "out.json").read_text(encoding="utf-8"))) == 3

    @pytest.mark.asyncio
    async def test_run_export_when_input_missing_then_exit_one(
        self, workdir: Path, test_settings: ExporterSettings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        missing = workdir / "missing.ics"

        exit_code = await run_export(missing, settings=test_settings)

        assert exit_code == 1
        assert f"Error: File '{missing}' not found." in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_run_export_when_unsupported_input_then_exit_one(
        self, workdir: Path, test_settings: ExporterSettings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        other = workdir / "calendar.txt"
        other.write_text(ICSTestData.sample_calendar(), encoding="utf-8")

        exit_code = await run_export(other, settings=test_settings)

        assert exit_code == 1
        assert "Unsupported file type '.txt'" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_run_export_when_no_events_then_exit_zero_without_output(
        self, workdir: Path, test_settings: ExporterSettings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        broken = workdir / "broken.ics"
        broken.write_text(ICSTestData.missing_end_vevent(), encoding="utf-8")

        exit_code = await run_export(broken, "out.csv", settings=test_settings)

        assert exit_code == 0
        assert "No calendar events found in the file." in capsys.readouterr().out
        assert not (workdir / "out.csv").exists()

    @pytest.mark.asyncio
    async def test_run_export_when_format_unknown_then_exit_one_with_supported_list(
        self, ics_file: Path, test_settings: ExporterSettings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        exit_code = await run_export(ics_file, fmt="pdf", settings=test_settings)

        output = capsys.readouterr().out
        assert exit_code == 1
        assert "Error: Unsupported export format: pdf" in output
        assert "Supported formats: csv, json, xlsx, xml" in output

    @pytest.mark.asyncio
    async def test_run_export_when_output_directory_missing_then_exit_one(
        self, ics_file: Path, test_settings: ExporterSettings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        exit_code = await run_export(
            ics_file, ics_file.parent / "nope" / "out.csv", settings=test_settings
        )

        assert exit_code == 1
        assert "Error exporting events: Directory does not exist" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_run_export_when_processing_times_out_then_exit_one(
        self, workdir: Path, test_settings: ExporterSettings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        archive = create_zip(workdir / "slow.zip", {"a.ics": ICSTestData.sample_calendar()})

        with patch(
            "calendar_exporter.cli.runner.load_events",
            AsyncMock(side_effect=asyncio.TimeoutError),
        ):
            exit_code = await run_export(archive, settings=test_settings)

        assert exit_code == 1
        assert "timed out after 300 seconds" in capsys.readouterr().out


class TestMainEntry:
    """Test the full command line flow."""

    @pytest.mark.asyncio
    async def test_main_entry_when_input_and_output_then_exported(
        self, ics_file: Path, workdir: Path
    ) -> None:
        exit_code = await main_entry([str(ics_file), "events.xlsx", "--no-log-colors", "-q"])

        assert exit_code == 0
        assert (workdir / "events.xlsx").is_file()
        assert get_settings().logging.console_level == "ERROR"

    @pytest.mark.asyncio
    async def test_main_entry_when_config_given_then_settings_applied(
        self, ics_file: Path, workdir: Path
    ) -> None:
        config_file = workdir / "custom.yaml"
        config_file.write_text(
            yaml.safe_dump({"export": {"default_format": "json"}}), encoding="utf-8"
        )

        exit_code = await main_entry([str(ics_file), "--config", str(config_file), "-q"])

        assert exit_code == 0
        assert (workdir / "calendar_export_work.json").is_file()

    @pytest.mark.asyncio
    async def test_main_entry_when_config_missing_then_exit_one(
        self, ics_file: Path, workdir: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        exit_code = await main_entry([str(ics_file), "--config", str(workdir / "absent.yaml")])

        assert exit_code == 1
        assert "Could not load config file" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_main_entry_when_no_input_then_prompts(
        self, ics_file: Path, workdir: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with patch("builtins.input", return_value=f'"{ics_file}"'):
            exit_code = await main_entry(["-q"])

        assert exit_code == 0
        assert "Calendar File Exporter" in capsys.readouterr().out
        assert (workdir / "calendar_export_work.csv").is_file()

    @pytest.mark.asyncio
    async def test_main_entry_when_prompt_answer_empty_then_exit_zero(
        self, workdir: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with patch("builtins.input", return_value="   "):
            exit_code = await main_entry(["-q"])

        assert exit_code == 0
        assert "No file specified. Exiting." in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_main_entry_when_create_config_then_file_written(self, workdir: Path) -> None:
        exit_code = await main_entry(["--create-config"])

        config_file = workdir / "config" / "config.yaml"
        assert exit_code == 0
        assert yaml.safe_load(config_file.read_text(encoding="utf-8"))["export"]["json"]


class TestPromptAndCreateConfig:
    """Test the small interactive helpers."""

    def test_prompt_for_input_when_stdin_closed_then_none(self) -> None:
        with patch("builtins.input", side_effect=EOFError):
            assert prompt_for_input() is None

    def test_prompt_for_input_when_quoted_path_then_unquoted(self) -> None:
        with patch("builtins.input", return_value='  "C:/My Files/cal.ics"  '):
            assert prompt_for_input() == "C:/My Files/cal.ics"

    def test_create_config_when_file_exists_then_exit_one(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        existing = tmp_path / "config.yaml"
        existing.write_text("logging: {}\n", encoding="utf-8")

        assert create_config(existing) == 1
        assert "already exists" in capsys.readouterr().out
        assert existing.read_text(encoding="utf-8") == "logging: {}\n"
