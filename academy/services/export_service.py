"""
Export Service

CSV and XLSX formatting of already-aggregated report rows. Output depends
only on the rows passed in.
"""

import csv
import io
from datetime import date
from typing import Iterable, List, Sequence

from openpyxl import Workbook

from academy.schemas.grades import QuizGrade
from academy.schemas.records import CourseCompletionRecord


GRADE_HEADERS = ["Student", "Email", "Course", "Chapter", "Quiz", "Marks", "Percentage", "Status", "Date"]
COMPLETION_HEADERS = ["Student", "Email", "Course", "Date", "Status"]

CSV_MEDIA_TYPE = "text/csv"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def grade_row(grade: QuizGrade) -> List[str]:
    return [
        grade.student_name,
        grade.student_email,
        grade.course_title,
        grade.chapter_title,
        grade.lesson_title,
        f"{grade.score}/{grade.total_points}",
        f"{grade.percentage}%",
        "Passed" if grade.passed else "Failed",
        grade.submitted_at.date().isoformat(),
    ]


def completion_row(completion: CourseCompletionRecord) -> List[str]:
    status = completion.certificate_status.value if completion.certificate_status else "pending"
    return [
        completion.student_name or "",
        completion.student_email or "",
        completion.course_title or "",
        completion.completion_date.date().isoformat() if completion.completion_date else "",
        status.capitalize(),
    ]


def _to_csv(headers: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return buffer.getvalue()


def _to_xlsx(headers: Sequence[str], rows: Iterable[Sequence[str]], title: str) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = title
    sheet.append(list(headers))
    for row in rows:
        sheet.append(list(row))

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def grades_to_csv(grades: Iterable[QuizGrade]) -> str:
    """Render grades as CSV text with a header row."""
    return _to_csv(GRADE_HEADERS, (grade_row(g) for g in grades))


def grades_to_xlsx(grades: Iterable[QuizGrade]) -> bytes:
    """Render grades as a single-sheet XLSX workbook."""
    return _to_xlsx(GRADE_HEADERS, (grade_row(g) for g in grades), "Grades")


def completions_to_xlsx(completions: Iterable[CourseCompletionRecord]) -> bytes:
    """Render the completions table as a single-sheet XLSX workbook."""
    return _to_xlsx(COMPLETION_HEADERS, (completion_row(c) for c in completions), "Data")


def grades_filename(extension: str, today: date | None = None) -> str:
    """Download name such as quiz-grades-2024-05-01.csv."""
    return f"quiz-grades-{(today or date.today()).isoformat()}.{extension}"
