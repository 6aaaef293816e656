"""
Tests for the command-line entry point.
"""

import pytest
import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path

from unittest.mock import patch

from openpyxl import Workbook

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from main import main
from infrastructure.logger import _registry
from infrastructure.workbook_store import WorkbookAttendanceStore


def write_inputs(tmpdir: Path) -> Path:
    workbook_path = tmpdir / "attendance.xlsx"
    wb = Workbook()
    ws = wb.active
    ws.title = "Companies"
    ws.append(["id", "name"])
    ws.append(["c1", "Acme Ltda"])
    ws = wb.create_sheet("Employees")
    ws.append(["id", "name", "department", "role", "company_id"])
    ws.append(["boss", "Beatriz", "Board", "admin", "c1"])
    ws.append(["e1", "Ana", "Sales", "employee", "c1"])
    ws = wb.create_sheet("Punches")
    ws.append(["employee_id", "company_id", "kind", "timestamp"])
    ws.append(["e1", "c1", "in", datetime(2025, 3, 3, 9, 0)])
    ws.append(["e1", "c1", "out", datetime(2025, 3, 3, 17, 0)])
    wb.save(workbook_path)

    config_path = tmpdir / "config.json"
    config_path.write_text(json.dumps({
        "paths": {"store_workbook": str(workbook_path)},
        "output_settings": {"generate_excel": True}
    }), encoding='utf-8')
    return config_path


class TestMain:
    """Tests for main()."""

    def test_generates_files(self, capsys):
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            config_path = write_inputs(tmp)
            out_dir = tmp / "out"

            code = main([
                "--month", "3", "--year", "2025", "--actor", "boss",
                "--config", str(config_path), "--output-dir", str(out_dir)
            ])

            assert code == 0
            assert (out_dir / "attendance_report_2025_03.pdf").exists()
            assert (out_dir / "attendance_report_2025_03.xlsx").exists()
            assert "2 employee(s)" in capsys.readouterr().out

    def test_invalid_month_exits_nonzero(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            config_path = write_inputs(tmp)

            code = main([
                "--month", "13", "--year", "2025", "--actor", "e1",
                "--config", str(config_path), "--output-dir", str(tmp / "out")
            ])
            assert code == 1
            assert not (tmp / "out").exists()

    @pytest.mark.parametrize("month, year", [("13", "2025"), ("0", "2025"), ("\u00b2", "2025"), ("3", "year")])
    def test_invalid_period_reads_nothing(self, month, year):
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            config_path = write_inputs(tmp)

            with patch.object(WorkbookAttendanceStore, "load") as load:
                code = main([
                    "--month", month, "--year", year, "--actor", "e1",
                    "--config", str(config_path), "--output-dir", str(tmp / "out")
                ])

            assert code == 1
            load.assert_not_called()

    def test_unwritable_output_dir_exits_nonzero(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            config_path = write_inputs(tmp)
            blocker = tmp / "not_a_dir"
            blocker.write_text("occupied", encoding='utf-8')

            code = main([
                "--month", "3", "--year", "2025", "--actor", "boss",
                "--config", str(config_path), "--output-dir", str(blocker / "reports")
            ])
            assert code == 1

    def test_configured_log_file_receives_entries(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            config_path = write_inputs(tmp)
            data = json.loads(config_path.read_text(encoding='utf-8'))
            data["paths"]["log_file"] = str(tmp / "logs" / "attendance.log")
            config_path.write_text(json.dumps(data), encoding='utf-8')

            code = main([
                "--month", "3", "--year", "2025", "--actor", "boss",
                "--config", str(config_path), "--output-dir", str(tmp / "out")
            ])

            assert code == 0
            assert "Report 03/2025 built" in (tmp / "logs" / "attendance.log").read_text(encoding='utf-8')

            log_path = os.path.abspath(tmp / "logs" / "attendance.log")
            for logger in _registry.values():
                for handler in list(logger.handlers):
                    if isinstance(handler, logging.FileHandler) and handler.baseFilename == log_path:
                        logger.removeHandler(handler)
                        handler.close()

    def test_missing_workbook_exits_nonzero(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            code = main([
                "--month", "3", "--year", "2025", "--actor", "e1",
                "--config", str(tmp / "none.json"), "--workbook", str(tmp / "missing.xlsx")
            ])
            assert code == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
