"""Sample roster used to seed development instances."""

from __future__ import annotations

from .types import StudentRecord

SAMPLE_STUDENTS: tuple[StudentRecord, ...] = (
    StudentRecord(1, "John Doe", "john.doe@example.com", "Computer Science", "A", "2023-09-01",
                  "https://mui.com/static/images/avatar/1.jpg"),
    StudentRecord(2, "Jane Smith", "jane.smith@example.com", "Mathematics", "B+", "2023-08-15",
                  "https://mui.com/static/images/avatar/2.jpg"),
    StudentRecord(3, "Robert Johnson", "robert.johnson@example.com", "Physics", "A-", "2023-09-05",
                  "https://mui.com/static/images/avatar/3.jpg"),
    StudentRecord(4, "Emily Davis", "emily.davis@example.com", "Computer Science", "B", "2023-09-10",
                  "https://mui.com/static/images/avatar/4.jpg"),
    StudentRecord(5, "Michael Wilson", "michael.wilson@example.com", "Mathematics", "A+", "2023-08-20",
                  "https://mui.com/static/images/avatar/5.jpg"),
    StudentRecord(6, "Sarah Brown", "sarah.brown@example.com", "Physics", "B-", "2023-09-03",
                  "https://mui.com/static/images/avatar/6.jpg"),
    StudentRecord(7, "David Miller", "david.miller@example.com", "Computer Science", "A", "2023-08-25",
                  "https://mui.com/static/images/avatar/7.jpg"),
    StudentRecord(8, "Jessica Taylor", "jessica.taylor@example.com", "Mathematics", "B+", "2023-09-07",
                  "https://mui.com/static/images/avatar/8.jpg"),
)
