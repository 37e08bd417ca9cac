"""Tests for CLI commands (F4)."""

from pathlib import Path

from typer.testing import CliRunner

from proacademics.cli.commands import app
from proacademics.core.homework_importer import REQUIRED_HEADERS
from proacademics.core.topic_vault_importer import TEMPLATE_CSV
from proacademics.db.database import get_db
from proacademics.db.homework_repository import list_all_homework
from proacademics.db.lessons_repository import list_all_lessons
from proacademics.db.subjects_repository import create_program, create_subject, list_programs
from proacademics.db.topic_vault_repository import list_all_topics

runner = CliRunner()


class TestInitDb:
    def test_creates_database(self, db, tmp_path):
        target = tmp_path / "fresh" / "admin.db"

        result = runner.invoke(app, ["init-db", "--db", str(target)])

        assert result.exit_code == 0
        assert "Database ready" in result.output
        assert target.exists()


class TestSubjectsCommand:
    def test_empty(self, db):
        result = runner.invoke(app, ["subjects"])

        assert result.exit_code == 0
        assert "No subjects yet" in result.output

    def test_tree(self, db):
        subject = create_subject("Mathematics", "blue")
        create_program("GCSE", subject.id, "blue")

        result = runner.invoke(app, ["subjects"])

        assert result.exit_code == 0
        assert "Mathematics" in result.output
        assert "GCSE" in result.output


class TestImportCommands:
    """Tests for import-homework, import-lessons and import-topics."""

    def test_import_homework(self, db, tmp_path):
        csv_file = tmp_path / "homework.csv"
        csv_file.write_text(
            ",".join(REQUIRED_HEADERS)
            + "\nMathematics,GCSE,Quadratics 1,10/01/2025,Mr. Smith,17/01/2025,45,150,Q1,Algebra,Quadratics,easy,Solve,x=2,n\n"
        )

        result = runner.invoke(app, ["import-homework", str(csv_file)])

        assert result.exit_code == 0
        assert "Imported 1 homework" in result.output
        assert [h.homework_name for h in list_all_homework()] == ["Quadratics 1"]

    def test_import_homework_missing_columns(self, db, tmp_path):
        csv_file = tmp_path / "homework.csv"
        csv_file.write_text("Subject,Program\nMaths,GCSE\n")

        result = runner.invoke(app, ["import-homework", str(csv_file)])

        assert result.exit_code == 1
        assert "Missing required columns" in result.output

    def test_file_not_found(self, db, tmp_path):
        result = runner.invoke(app, ["import-homework", str(tmp_path / "nope.csv")])

        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_import_lessons_skips_invalid(self, db, tmp_path):
        csv_file = tmp_path / "schedule.csv"
        csv_file.write_text(
            "Subject,Topic,Instructor\nBiology,Cells,Dr. Green\n,Osmosis,Dr. Green\n"
        )

        result = runner.invoke(app, ["import-lessons", str(csv_file), "--status", "active"])

        assert result.exit_code == 0
        assert "Imported 1 lessons" in result.output
        lessons = list_all_lessons()
        assert [l.title for l in lessons] == ["Cells"]
        assert lessons[0].status == "active"

    def test_import_lessons_bad_status(self, db, tmp_path):
        result = runner.invoke(app, ["import-lessons", str(tmp_path / "x.csv"), "-s", "live"])

        assert result.exit_code == 1
        assert "Invalid status" in result.output

    def test_import_topics(self, db, tmp_path):
        csv_file = tmp_path / "videos.csv"
        csv_file.write_text(TEMPLATE_CSV)

        result = runner.invoke(app, ["import-topics", str(csv_file)])

        assert result.exit_code == 0
        assert "Imported 2 videos" in result.output
        assert len(list_all_topics()) == 2


class TestExportCommand:
    """Tests for export."""

    def test_export_to_stdout(self, db):
        result = runner.invoke(app, ["export", "lessons"])

        assert result.exit_code == 0
        assert result.output.startswith('"Title","Subject","Module"')

    def test_export_to_file(self, db, tmp_path):
        runner.invoke(app, ["import-topics", str(_write(tmp_path / "v.csv", TEMPLATE_CSV))])
        target = tmp_path / "topics.csv"

        result = runner.invoke(app, ["export", "topics", "-o", str(target)])

        assert result.exit_code == 0
        assert "Exported 2 topics" in result.output
        assert len(target.read_text().splitlines()) == 3

    def test_unknown_kind(self, db):
        result = runner.invoke(app, ["export", "students"])

        assert result.exit_code == 1
        assert "Unknown kind" in result.output


class TestDedupePrograms:
    """Tests for dedupe-programs."""

    def _seed_duplicates(self):
        subject = create_subject("Mathematics", "blue")
        create_program("GCSE", subject.id, "blue")
        with get_db() as conn:
            conn.execute(
                "INSERT INTO programs (id, name, subject_id, color, is_active, created_at, updated_at) "
                "VALUES ('prg-dup', 'gcse', ?, 'blue', 1, '2999-01-01', '2999-01-01')",
                (subject.id,),
            )

    def test_nothing_to_do(self, db):
        result = runner.invoke(app, ["dedupe-programs"])

        assert result.exit_code == 0
        assert "No duplicate programs" in result.output

    def test_removes_with_yes(self, db):
        self._seed_duplicates()

        result = runner.invoke(app, ["dedupe-programs", "--yes"])

        assert result.exit_code == 0
        assert "Removed 1 duplicate programs" in result.output
        assert [p.name for p in list_programs()] == ["GCSE"]

    def test_cancelled(self, db):
        self._seed_duplicates()

        result = runner.invoke(app, ["dedupe-programs"], input="n\n")

        assert "Cancelled" in result.output
        assert len(list_programs()) == 2


def _write(path: Path, content: str) -> Path:
    path.write_text(content)
    return path
